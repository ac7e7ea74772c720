"""
Unit tests for configuration constants.
"""

from importlib import reload

import practice_analytics.core.config as config


class TestConfigConstants:
    """Test cases for configuration constants."""

    def test_types_and_values(self):
        """Test that constants have correct types and sensible values."""
        assert isinstance(config.ANALYTICS_TIMEZONE, str)
        assert isinstance(config.ANALYTICS_DEFAULT_TOP_PATIENTS, int)
        assert config.ANALYTICS_DEFAULT_TOP_PATIENTS >= 0
        assert config.LOG_LEVEL == config.LOG_LEVEL.upper()

    def test_dotenv_is_skipped_under_pytest(self):
        assert config.is_testing is True

    def test_environment_override(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("ANALYTICS_TIMEZONE", "America/Argentina/Buenos_Aires")
        monkeypatch.setenv("ANALYTICS_DEFAULT_TOP_PATIENTS", "10")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        try:
            reload(config)

            assert config.ANALYTICS_TIMEZONE == "America/Argentina/Buenos_Aires"
            assert config.ANALYTICS_DEFAULT_TOP_PATIENTS == 10
            assert config.LOG_LEVEL == "DEBUG"
        finally:
            monkeypatch.undo()
            reload(config)

    def test_defaults(self, monkeypatch):
        """Test default values when nothing is configured."""
        for name in ("ANALYTICS_TIMEZONE", "ANALYTICS_DEFAULT_TOP_PATIENTS", "LOG_LEVEL", "FRONTEND_URL"):
            monkeypatch.delenv(name, raising=False)

        try:
            reload(config)

            assert config.ANALYTICS_TIMEZONE == "UTC"
            assert config.ANALYTICS_DEFAULT_TOP_PATIENTS == 5
            assert config.LOG_LEVEL == "INFO"
            assert config.FRONTEND_URL == "http://localhost:5173"
        finally:
            monkeypatch.undo()
            reload(config)
