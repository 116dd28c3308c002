"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager
from sync.feed import LocalChangeFeed


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to inject mock services for testing.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, config is ignored.
        feed: Optional change feed. If None, an in-process LocalChangeFeed is created.
    """

    def __init__(self, config: Config, db_manager=None, feed=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)
        self.feed = feed if feed is not None else LocalChangeFeed()

        # Lazy import to avoid circular dependencies
        from services.entries import EntryService
        from services.profiles import ProfileService

        self.entries = EntryService(self.db_manager, feed=self.feed)
        self.profiles = ProfileService(
            self.db_manager, default_currency=config.currency
        )
