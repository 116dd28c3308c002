from pathlib import Path

import tomllib

import config as config_module
from config import Config, load_config, parse_config


class TestConfig:
    """Tests for configuration loading."""

    def test_parse_defaults(self):
        config = parse_config({})

        assert config.db_filename == "tally.db"
        assert config.log_level == "INFO"
        assert config.user_id == "local"
        assert config.currency == "USD"
        assert config.taxonomy_file is None
        assert config.sync_retry_delay == 1.0
        assert config.sync_max_retry_delay == 30.0

    def test_parse_values(self, tmp_path):
        config = parse_config(
            {
                "base_dir": str(tmp_path),
                "database": {"filename": "budget.db"},
                "logging": {"level": "DEBUG"},
                "user": {"id": "u-9", "email": "u9@example.com", "currency": "EUR"},
                "budget": {"taxonomy_file": str(tmp_path / "t.yaml")},
                "sync": {"retry_delay": 2, "max_retry_delay": 60, "poll_interval": 1},
            }
        )

        assert config.db_path == tmp_path / "db" / "budget.db"
        assert config.log_dir == tmp_path / "logs"
        assert config.user_id == "u-9"
        assert config.currency == "EUR"
        assert config.taxonomy_file == tmp_path / "t.yaml"
        assert config.sync_retry_delay == 2.0
        assert config.sync_max_retry_delay == 60.0

    def test_load_creates_default_file(self, tmp_path, monkeypatch):
        config_path = tmp_path / ".config" / "tally.toml"
        monkeypatch.setattr(config_module, "get_config_path", lambda: config_path)

        config = load_config()

        assert config_path.exists()
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        assert data["user"]["currency"] == "USD"
        assert "budget" not in data
        assert config == load_config()

    def test_default(self):
        config = Config.default()

        assert config.base_dir == Path.home() / "data" / "tally"
        assert config.db_path.name == "tally.db"
