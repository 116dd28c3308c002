"""Bridges a change feed into a ledger store.

State machine:

    disconnected -> connecting -> subscribed -> disconnected

The adapter never applies events from inside the feed. Events are queued by
the subscription and applied in run_once(), on the same cooperative loop as
user edits, so all ledger mutations are serialized.
"""

import time
from typing import Callable, Optional
from pydantic import ValidationError as PayloadError
from errors import SyncError
from ledger.store import LedgerStore
from sync.feed import ChangeEvent, ChangeFeed, Subscription, INSERT, UPDATE, DELETE
from sync.payloads import DeletedRecord, EntryRecord
from logger import get_logger

logger = get_logger("sync")

DISCONNECTED = "disconnected"
CONNECTING = "connecting"
SUBSCRIBED = "subscribed"

MAX_BACKOFF_EXPONENT = 32


class SyncAdapter:
    """Applies change feed events to a LedgerStore and notifies a listener.

    Args:
        feed: ChangeFeed to subscribe to.
        store: LedgerStore receiving the changes; its user_id scopes the subscription.
        listener: Optional callback listener(event) invoked after each applied change.
        retry_delay: Initial reconnect delay in seconds.
        max_retry_delay: Upper bound for the reconnect delay.
        poll_interval: Sleep between cycles in run().
        clock: Monotonic time source (injectable for tests).
        sleep: Sleep function used by run() (injectable for tests).
    """

    def __init__(
        self,
        feed: ChangeFeed,
        store: LedgerStore,
        listener: Optional[Callable[[ChangeEvent], None]] = None,
        retry_delay: float = 1.0,
        max_retry_delay: float = 30.0,
        poll_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.feed = feed
        self.store = store
        self.listener = listener
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep

        self.state = DISCONNECTED
        self.failures = 0
        self.next_retry_at: Optional[float] = None
        self.applied_count = 0
        self.ignored_count = 0
        self._subscription: Optional[Subscription] = None
        self._stopped = True

    @property
    def user_id(self) -> str:
        return self.store.user_id

    @property
    def connected(self) -> bool:
        return self.state == SUBSCRIBED

    def start(self) -> bool:
        """Connect and subscribe for the store's user.

        Returns:
            True if subscribed, False if the connection failed (a retry is scheduled).
        """
        self._stopped = False
        return self._connect(resync=False)

    def stop(self) -> None:
        """Tear down the subscription and return to disconnected."""
        self._stopped = True
        self._drop_subscription()
        self.next_retry_at = None
        self._set_state(DISCONNECTED)

    def run_once(self) -> int:
        """Run one cycle of the event loop.

        Reconnects when the retry delay has elapsed, otherwise drains and
        applies queued events.

        Returns:
            Number of events applied to the store in this cycle.
        """
        if self._stopped:
            return 0

        if self.state != SUBSCRIBED:
            if self.next_retry_at is not None and self.clock() < self.next_retry_at:
                return 0
            if not self._connect(resync=True):
                return 0

        try:
            events = self._subscription.poll()
        except SyncError as e:
            logger.warning(f"Change feed lost for user {self.user_id}: {e}")
            self._drop_subscription()
            self._schedule_retry()
            return 0

        applied = 0
        for event in events:
            if self.handle(event):
                applied += 1
        return applied

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Run the event loop until stop() is called or max_cycles is reached."""
        cycles = 0
        while not self._stopped:
            self.run_once()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            self.sleep(self.poll_interval)

    def handle(self, event: ChangeEvent) -> bool:
        """Apply a single change event to the store.

        Events for other users, malformed payloads, and updates/deletes for
        ids the store does not hold are logged and ignored.

        Returns:
            True if the store changed.
        """
        if event.user_id != self.user_id:
            logger.debug(f"Ignoring {event.event_type} event for another user")
            self.ignored_count += 1
            return False

        try:
            if event.event_type == INSERT:
                applied = self.store.apply_insert(
                    EntryRecord.model_validate(event.new or {}).to_entry()
                )
            elif event.event_type == UPDATE:
                applied = self.store.apply_update(
                    EntryRecord.model_validate(event.new or {}).to_entry()
                )
            elif event.event_type == DELETE:
                applied = self.store.apply_delete(
                    DeletedRecord.model_validate(event.old or {}).id
                )
            else:
                logger.warning(f"Ignoring unknown change event type {event.event_type!r}")
                self.ignored_count += 1
                return False
        except PayloadError as e:
            logger.warning(f"Ignoring malformed {event.event_type} event: {e}")
            self.ignored_count += 1
            return False

        if not applied:
            logger.info(
                f"Ignoring {event.event_type} for entry {event.entry_id} not in ledger"
            )
            self.ignored_count += 1
            return False

        self.applied_count += 1
        if self.listener is not None:
            try:
                self.listener(event)
            except Exception:
                logger.exception("Sync listener failed")
        return True

    def _connect(self, resync: bool) -> bool:
        self._set_state(CONNECTING)
        try:
            self._subscription = self.feed.subscribe(self.user_id)
            if resync:
                # Changes made while disconnected never reached the queue
                self.store.load()
        except SyncError as e:
            logger.warning(f"Could not subscribe to changes for user {self.user_id}: {e}")
            self._drop_subscription()
            self._schedule_retry()
            return False

        self.failures = 0
        self.next_retry_at = None
        self._set_state(SUBSCRIBED)
        return True

    def _schedule_retry(self) -> None:
        # Exponent is capped so a long outage cannot overflow the float delay
        backoff = 2 ** min(self.failures, MAX_BACKOFF_EXPONENT)
        delay = min(self.max_retry_delay, self.retry_delay * backoff)
        self.failures += 1
        self.next_retry_at = self.clock() + delay
        self._set_state(DISCONNECTED)
        logger.info(f"Reconnecting in {delay:.1f}s (attempt {self.failures})")

    def _drop_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _set_state(self, state: str) -> None:
        if state != self.state:
            logger.debug(f"Sync adapter {self.state} -> {state}")
            self.state = state
