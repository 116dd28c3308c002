"""Change feed interface and the in-process implementation.

A change feed delivers insert/update/delete events for one user's budget
entries. Events are queued per subscription and handed out by poll(), so the
consumer decides when they are applied.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, Dict, List, Optional
from errors import SyncError
from logger import get_logger

logger = get_logger("sync")

INSERT = "insert"
UPDATE = "update"
DELETE = "delete"

EVENT_TYPES = (INSERT, UPDATE, DELETE)


@dataclass(frozen=True)
class ChangeEvent:
    """A single change notification for one user's entries.

    Attributes:
        event_type: 'insert', 'update', or 'delete'.
        user_id: User the changed row belongs to.
        new: Flat record after the change (insert/update).
        old: Record before the change; for deletes only 'id' is guaranteed.
        received_at: When the feed produced the event.
    """

    event_type: str
    user_id: str
    new: Optional[dict] = None
    old: Optional[dict] = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def entry_id(self) -> Optional[str]:
        record = self.new if self.event_type != DELETE else self.old
        return (record or {}).get("id")


class Subscription(ABC):
    """A live subscription to one user's change events."""

    @abstractmethod
    def poll(self) -> List[ChangeEvent]:
        """Return (and dequeue) all events received since the last poll.

        Raises:
            SyncError: If the underlying transport has disconnected.
        """
        pass

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        pass


class ChangeFeed(ABC):
    """Abstract base class for change feed transports."""

    @abstractmethod
    def subscribe(self, user_id: str) -> Subscription:
        """Open a subscription for a user's budget entry changes.

        Raises:
            SyncError: If the transport cannot connect.
        """
        pass


class LocalSubscription(Subscription):
    """Subscription handed out by LocalChangeFeed."""

    def __init__(self, feed: "LocalChangeFeed", user_id: str):
        self.feed = feed
        self.user_id = user_id
        self._queue: Deque[ChangeEvent] = deque()
        self._broken_reason: Optional[str] = None
        self.active = True

    def deliver(self, event: ChangeEvent) -> None:
        self._queue.append(event)

    def break_connection(self, reason: str) -> None:
        self._broken_reason = reason
        self.active = False

    def poll(self) -> List[ChangeEvent]:
        if self._broken_reason is not None:
            raise SyncError(f"Change feed disconnected: {self._broken_reason}")
        events = list(self._queue)
        self._queue.clear()
        return events

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.feed._detach(self)


class LocalChangeFeed(ChangeFeed):
    """In-process change feed fed by the persistence collaborator.

    The entry service publishes an event after every commit; each active
    subscription for that user queues a copy.
    """

    def __init__(self):
        self._subscriptions: Dict[str, List[LocalSubscription]] = {}
        self.online = True

    def subscribe(self, user_id: str) -> LocalSubscription:
        if not self.online:
            raise SyncError("Change feed is unavailable")

        subscription = LocalSubscription(self, user_id)
        self._subscriptions.setdefault(user_id, []).append(subscription)
        logger.debug(f"Subscribed to changes for user {user_id}")
        return subscription

    def publish(self, event: ChangeEvent) -> int:
        """Queue an event on every active subscription for its user.

        Returns:
            Number of subscriptions the event was delivered to.
        """
        if event.event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown change event type: {event.event_type}")

        subscribers = self._subscriptions.get(event.user_id, [])
        for subscription in subscribers:
            subscription.deliver(event)
        return len(subscribers)

    def disconnect_all(self, reason: str = "transport closed") -> None:
        """Break every live subscription, as a dropped connection would."""
        for subscriptions in self._subscriptions.values():
            for subscription in subscriptions:
                subscription.break_connection(reason)
        self._subscriptions.clear()
        logger.warning(f"Change feed dropped all subscriptions: {reason}")

    def subscriber_count(self, user_id: str) -> int:
        return len(self._subscriptions.get(user_id, []))

    def _detach(self, subscription: LocalSubscription) -> None:
        subscriptions = self._subscriptions.get(subscription.user_id, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)
        if not subscriptions:
            self._subscriptions.pop(subscription.user_id, None)
