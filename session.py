"""Per-user budget session.

A BudgetSession binds one authenticated identity to its own LedgerStore and
SyncAdapter. Nothing here is module-level state: each session is created and
torn down explicitly, so several users can have sessions side by side.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional
from errors import SyncError
from ledger.store import LedgerStore
from models.analysis import BudgetAnalysis
from models.category_map import CategoryMap
from services.base import Services
from sync.adapter import SyncAdapter
from sync.feed import ChangeEvent
from taxonomy.loader import get_category_map
from tools.budget import analyze
from tools.currency import format_currency
from logger import get_logger

logger = get_logger()


@dataclass(frozen=True)
class Identity:
    """The authenticated user, as supplied by the auth collaborator."""

    user_id: str
    email: str = ""


class BudgetSession:
    """Owns the ledger and sync adapter for the signed-in user.

    Args:
        services: Services container (persistence, profiles, change feed).
        identity: The signed-in user.
        category_map: Bucket mapping for analyze(); defaults to the configured taxonomy.
        on_change: Optional callback invoked with each change event applied by sync.
        clock: Optional monotonic clock passed to the sync adapter.
        sleep: Optional sleep function passed to the sync adapter.
    """

    def __init__(
        self,
        services: Services,
        identity: Identity,
        category_map: Optional[CategoryMap] = None,
        on_change: Optional[Callable[[ChangeEvent], None]] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.services = services
        self.category_map = category_map or get_category_map(
            services.config.taxonomy_file
        )
        self.on_change = on_change
        self._clock = clock
        self._sleep = sleep
        self.identity: Optional[Identity] = None
        self.store: Optional[LedgerStore] = None
        self.adapter: Optional[SyncAdapter] = None
        self._bind(identity)

    @property
    def signed_in(self) -> bool:
        return self.identity is not None

    def start(self) -> bool:
        """Load the ledger and subscribe to changes.

        A failed load or subscription leaves the session usable: the ledger is
        stale until the adapter reconnects.

        Returns:
            True if the sync adapter is subscribed.
        """
        store, adapter = self._require()
        try:
            store.load()
        except SyncError as e:
            logger.warning(f"Initial ledger load failed, continuing with empty ledger: {e}")
        return adapter.start()

    def sync(self) -> int:
        """Run one sync cycle. Returns the number of changes applied."""
        _, adapter = self._require()
        return adapter.run_once()

    def analyze(self) -> BudgetAnalysis:
        """Analyze the current ledger snapshot."""
        store, _ = self._require()
        return analyze(store.all(), self.category_map)

    @property
    def currency(self) -> str:
        self._require()
        return self.services.profiles.get_currency(self.identity.user_id)

    def format(self, amount: Decimal) -> str:
        """Format an amount in the user's preferred currency."""
        return format_currency(amount, self.currency)

    def sign_out(self) -> None:
        """Stop syncing and drop every entry held for the current identity."""
        if self.identity is None:
            return
        logger.info(f"Signing out user {self.identity.user_id}")
        self.adapter.stop()
        self.store.clear()
        self.adapter = None
        self.store = None
        self.identity = None

    def switch_identity(self, identity: Identity) -> None:
        """Tear down the current user's state and bind a new identity (not started)."""
        self.sign_out()
        self._bind(identity)

    def _bind(self, identity: Identity) -> None:
        config = self.services.config
        self.identity = identity
        self.store = LedgerStore(identity.user_id, persistence=self.services.entries)

        options = {}
        if self._clock is not None:
            options["clock"] = self._clock
        if self._sleep is not None:
            options["sleep"] = self._sleep

        self.adapter = SyncAdapter(
            self.services.feed,
            self.store,
            listener=self.on_change,
            retry_delay=config.sync_retry_delay,
            max_retry_delay=config.sync_max_retry_delay,
            poll_interval=config.sync_poll_interval,
            **options,
        )

    def _require(self):
        if self.identity is None:
            raise RuntimeError("No user is signed in")
        return self.store, self.adapter
