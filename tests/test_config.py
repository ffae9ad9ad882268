"""Tests for settings loading."""

import pytest

from trip_settle.config import Settings, load_settings
from trip_settle.exceptions import ConfigurationError


class TestSettings:
    """Environment-driven configuration."""

    def test_defaults(self):
        settings = Settings()

        assert settings.currency_exponents == {}
        assert settings.log_level == "WARNING"

    def test_exponent_overrides_from_env(self, monkeypatch):
        monkeypatch.setenv("TRIP_SETTLE_CURRENCY_EXPONENTS", '{"huf": 0, "CLF": 4}')

        settings = Settings()

        assert settings.currency_exponents == {"HUF": 0, "CLF": 4}

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("TRIP_SETTLE_LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_reads_dotenv(self, tmp_path):
        (tmp_path / ".env").write_text("TRIP_SETTLE_LOG_LEVEL=info\n", encoding="utf-8")

        assert Settings().log_level == "INFO"


class TestLoadSettings:
    """Error wrapping."""

    def test_bad_exponent(self, monkeypatch):
        monkeypatch.setenv("TRIP_SETTLE_CURRENCY_EXPONENTS", '{"USD": 9}')

        with pytest.raises(ConfigurationError, match="Failed to load settings"):
            load_settings()

    def test_bad_log_level(self, monkeypatch):
        monkeypatch.setenv("TRIP_SETTLE_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            load_settings()
