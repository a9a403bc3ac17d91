"""Tests for settings loading."""

import pytest

from src.config import DEFAULT_PLATFORM_BASE_URL, Settings, is_mock_mode


ENV_VARS = [
    "PLATFORM_PARTNER_ID",
    "PLATFORM_PARTNER_SECRET",
    "PLATFORM_BASE_URL",
    "PLATFORM_PROXY_URL",
    "PLATFORM_TIMEOUT_SECONDS",
    "REFRESH_LOOKAHEAD_MINUTES",
    "REFRESH_MAX_STALENESS_HOURS",
    "REFRESH_BATCH_SIZE",
    "SYNC_BATCH_SIZE",
    "PACING_SECONDS",
    "LEASE_TTL_SECONDS",
    "JOBS_BASE_URL",
    "JOBS_SERVICE_KEY",
    "JOB_PROMOTION_SCHEDULER",
    "JOB_BUDGET_SCHEDULER",
    "JOB_DATA_SYNC",
    "CRON_SECRET",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self, clean_env):
        settings = Settings.from_env()

        assert settings.default_partner_id is None
        assert settings.default_partner_secret is None
        assert settings.platform_base_url == DEFAULT_PLATFORM_BASE_URL
        assert settings.platform_proxy_url is None
        assert settings.lookahead_minutes == 30
        assert settings.max_staleness_hours == 24
        assert settings.refresh_batch_size == 20
        assert settings.sync_batch_size == 10
        assert settings.pacing_seconds == 1.0
        assert settings.jobs_base_url is None
        assert settings.promotion_scheduler_job == "shopee-scheduler"
        assert settings.budget_scheduler_job == "shopee-ads-scheduler"
        assert settings.data_sync_job == "shopee-sync-worker"
        assert settings.cron_secret is None

    def test_window_in_milliseconds(self):
        settings = Settings()

        assert settings.lookahead_ms == 30 * 60 * 1000
        assert settings.max_staleness_ms == 24 * 60 * 60 * 1000

    def test_from_env(self, clean_env):
        clean_env.setenv("PLATFORM_PARTNER_ID", "2001234")
        clean_env.setenv("PLATFORM_PARTNER_SECRET", "partner-secret")
        clean_env.setenv("PLATFORM_BASE_URL", "https://partner.test-stable.example.com/")
        clean_env.setenv("PLATFORM_PROXY_URL", "https://proxy.example.com/forward")
        clean_env.setenv("REFRESH_BATCH_SIZE", "50")
        clean_env.setenv("PACING_SECONDS", "0.5")
        clean_env.setenv("JOBS_BASE_URL", "https://jobs.example.com/functions/v1/")
        clean_env.setenv("CRON_SECRET", "s3cret")

        settings = Settings.from_env()

        assert settings.default_partner_id == 2001234
        assert settings.default_partner_secret == "partner-secret"
        assert settings.platform_base_url == "https://partner.test-stable.example.com"
        assert settings.platform_proxy_url == "https://proxy.example.com/forward"
        assert settings.refresh_batch_size == 50
        assert settings.pacing_seconds == 0.5
        assert settings.jobs_base_url == "https://jobs.example.com/functions/v1"
        assert settings.cron_secret == "s3cret"

    def test_blank_values_use_defaults(self, clean_env):
        clean_env.setenv("REFRESH_BATCH_SIZE", "  ")
        clean_env.setenv("PLATFORM_PROXY_URL", "")

        settings = Settings.from_env()

        assert settings.refresh_batch_size == 20
        assert settings.platform_proxy_url is None

    def test_invalid_integer(self, clean_env):
        clean_env.setenv("REFRESH_BATCH_SIZE", "many")

        with pytest.raises(ValueError, match="REFRESH_BATCH_SIZE"):
            Settings.from_env()

    def test_non_positive_lookahead(self, clean_env):
        clean_env.setenv("REFRESH_LOOKAHEAD_MINUTES", "0")

        with pytest.raises(ValueError, match="REFRESH_LOOKAHEAD_MINUTES"):
            Settings.from_env()

    def test_negative_pacing(self, clean_env):
        clean_env.setenv("PACING_SECONDS", "-1")

        with pytest.raises(ValueError, match="PACING_SECONDS"):
            Settings.from_env()


class TestMockMode:
    """Tests for is_mock_mode."""

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes"])
    def test_enabled(self, monkeypatch, value):
        monkeypatch.setenv("MOCK_MODE", value)
        assert is_mock_mode() is True

    @pytest.mark.parametrize("value", ["0", "", "no"])
    def test_disabled(self, monkeypatch, value):
        monkeypatch.setenv("MOCK_MODE", value)
        assert is_mock_mode() is False
