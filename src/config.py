"""Runtime settings loaded from the environment."""

import os
from dataclasses import dataclass

DEFAULT_PLATFORM_BASE_URL = "https://partner.shopeemobile.com"


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def is_mock_mode() -> bool:
    """Check if running without a real platform connection."""
    return os.getenv("MOCK_MODE", "").lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """Deployment-wide settings for a cron run."""

    # Fallback partner credentials for shops without their own
    default_partner_id: int | None = None
    default_partner_secret: str | None = None

    platform_base_url: str = DEFAULT_PLATFORM_BASE_URL
    platform_proxy_url: str | None = None
    platform_timeout_seconds: float = 30.0

    lookahead_minutes: int = 30
    max_staleness_hours: int = 24
    refresh_batch_size: int = 20
    sync_batch_size: int = 10
    pacing_seconds: float = 1.0
    lease_ttl_seconds: int = 120

    jobs_base_url: str | None = None
    jobs_service_key: str | None = None
    promotion_scheduler_job: str = "shopee-scheduler"
    budget_scheduler_job: str = "shopee-ads-scheduler"
    data_sync_job: str = "shopee-sync-worker"

    cron_secret: str | None = None

    @property
    def lookahead_ms(self) -> int:
        return self.lookahead_minutes * 60 * 1000

    @property
    def max_staleness_ms(self) -> int:
        return self.max_staleness_hours * 60 * 60 * 1000

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        partner_id = os.getenv("PLATFORM_PARTNER_ID")
        proxy_url = os.getenv("PLATFORM_PROXY_URL", "").strip()
        jobs_base_url = os.getenv("JOBS_BASE_URL", "").strip()

        settings = cls(
            default_partner_id=int(partner_id) if partner_id else None,
            default_partner_secret=os.getenv("PLATFORM_PARTNER_SECRET") or None,
            platform_base_url=os.getenv(
                "PLATFORM_BASE_URL", DEFAULT_PLATFORM_BASE_URL
            ).rstrip("/"),
            platform_proxy_url=proxy_url or None,
            platform_timeout_seconds=_float_env("PLATFORM_TIMEOUT_SECONDS", 30.0),
            lookahead_minutes=_int_env("REFRESH_LOOKAHEAD_MINUTES", 30),
            max_staleness_hours=_int_env("REFRESH_MAX_STALENESS_HOURS", 24),
            refresh_batch_size=_int_env("REFRESH_BATCH_SIZE", 20),
            sync_batch_size=_int_env("SYNC_BATCH_SIZE", 10),
            pacing_seconds=_float_env("PACING_SECONDS", 1.0),
            lease_ttl_seconds=_int_env("LEASE_TTL_SECONDS", 120),
            jobs_base_url=jobs_base_url.rstrip("/") or None,
            jobs_service_key=os.getenv("JOBS_SERVICE_KEY") or None,
            promotion_scheduler_job=os.getenv("JOB_PROMOTION_SCHEDULER", "shopee-scheduler"),
            budget_scheduler_job=os.getenv("JOB_BUDGET_SCHEDULER", "shopee-ads-scheduler"),
            data_sync_job=os.getenv("JOB_DATA_SYNC", "shopee-sync-worker"),
            cron_secret=os.getenv("CRON_SECRET") or None,
        )

        if settings.lookahead_minutes <= 0:
            raise ValueError("REFRESH_LOOKAHEAD_MINUTES must be positive")
        if settings.max_staleness_hours <= 0:
            raise ValueError("REFRESH_MAX_STALENESS_HOURS must be positive")
        if settings.pacing_seconds < 0:
            raise ValueError("PACING_SECONDS cannot be negative")

        return settings
