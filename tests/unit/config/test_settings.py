"""
Module: test_settings.py
Description: Unit tests for pydantic-settings configuration.
"""

import pytest
from pydantic import ValidationError

from actionlog.config.settings import Settings


class TestSettings:
    """Test cases for Settings validation."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.max_retries == 3
        assert settings.retry_delay == 1.0
        assert settings.drain_pacing == 0.1
        assert settings.queue_key == "cyb_log_queue"
        assert settings.fallback_endpoint is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LOG_ENDPOINT", "https://collector.test/api/log-action")
        monkeypatch.setenv("FALLBACK_ENDPOINT", "https://sheets.test/exec")
        monkeypatch.setenv("MAX_RETRIES", "5")

        settings = Settings(_env_file=None)

        assert settings.log_endpoint == "https://collector.test/api/log-action"
        assert settings.fallback_endpoint == "https://sheets.test/exec"
        assert settings.max_retries == 5

    def test_blank_fallback_is_unset(self):
        assert Settings(_env_file=None, fallback_endpoint="  ").fallback_endpoint is None

    def test_invalid_urls_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_endpoint="collector.test/api")
        with pytest.raises(ValidationError):
            Settings(_env_file=None, fallback_endpoint="ftp://sheets.test")

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="verbose")

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_retries=-1)
