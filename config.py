"""Configuration management for Tally.

Reads configuration from ~/.config/tally.toml and creates default config if needed.
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Optional
import tomllib
import tomli_w


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    user_id: str
    user_email: str
    currency: str
    taxonomy_file: Optional[Path] = None
    sync_retry_delay: float = 1.0
    sync_max_retry_delay: float = 30.0
    sync_poll_interval: float = 0.5

    @property
    def db_path(self) -> Path:
        """Get the full database path (data_dir/filename)."""
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "tally"
        return cls(
            base_dir=base_dir,
            db_data_dir=base_dir / "db",
            db_filename="tally.db",
            log_level="INFO",
            log_dir=base_dir / "logs",
            user_id="local",
            user_email="",
            currency="USD",
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "tally.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "migrations"


def load_config() -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Returns:
        Config object with loaded or default values.
    """
    config_path = get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config)
        return config

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return parse_config(data)


def parse_config(data: dict) -> Config:
    """Build a Config from parsed TOML data, filling in defaults.

    Args:
        data: Dictionary as returned by tomllib.

    Returns:
        Config object.
    """
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "tally"))

    db_config = data.get("database", {})
    db_data_dir = Path(db_config.get("data_dir", base_dir / "db"))
    db_filename = db_config.get("filename", "tally.db")

    log_config = data.get("logging", {})
    log_level = log_config.get("level", "INFO")
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    user_config = data.get("user", {})
    user_id = user_config.get("id", "local")
    user_email = user_config.get("email", "")
    currency = user_config.get("currency", "USD")

    budget_config = data.get("budget", {})
    taxonomy_file = budget_config.get("taxonomy_file")

    sync_config = data.get("sync", {})

    return Config(
        base_dir=base_dir,
        db_data_dir=db_data_dir,
        db_filename=db_filename,
        log_level=log_level,
        log_dir=log_dir,
        user_id=user_id,
        user_email=user_email,
        currency=currency,
        taxonomy_file=Path(taxonomy_file) if taxonomy_file else None,
        sync_retry_delay=float(sync_config.get("retry_delay", 1.0)),
        sync_max_retry_delay=float(sync_config.get("max_retry_delay", 30.0)),
        sync_poll_interval=float(sync_config.get("poll_interval", 0.5)),
    )


def _write_config(config: Config) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
    """
    config_path = get_config_path()

    # Ensure config directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Convert config to TOML structure
    data = {
        "base_dir": str(config.base_dir),
        "database": {
            "data_dir": str(config.db_data_dir),
            "filename": config.db_filename,
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "user": {
            "id": config.user_id,
            "email": config.user_email,
            "currency": config.currency,
        },
        "sync": {
            "retry_delay": config.sync_retry_delay,
            "max_retry_delay": config.sync_max_retry_delay,
            "poll_interval": config.sync_poll_interval,
        },
    }
    # TOML has no null, so an unset taxonomy file is simply omitted
    if config.taxonomy_file is not None:
        data["budget"] = {"taxonomy_file": str(config.taxonomy_file)}

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
