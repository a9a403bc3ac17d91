"""Shared dependencies for API endpoints."""

import hmac
from typing import Annotated

from fastapi import Depends, Header

from src.api.errors import create_error_response, ErrorCode
from src.config import Settings, is_mock_mode
from src.db.database import SessionLocal
from src.refresh.pacing import Pacer


def get_db():
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_settings() -> Settings:
    """Load settings for this request."""
    try:
        return Settings.from_env()
    except ValueError as e:
        raise create_error_response(
            status_code=500,
            error="Invalid cron configuration",
            code=ErrorCode.CONFIG_ERROR,
            detail=str(e),
            endpoint="settings",
        )


def get_platform_client(settings: Settings = Depends(get_settings)):
    """Get platform client (mock or real based on environment)."""
    if is_mock_mode():
        from src.mock import MockPlatformClient

        return MockPlatformClient()

    from src.partner.client import PlatformClient

    return PlatformClient.from_settings(settings)


def get_job_invoker(settings: Settings = Depends(get_settings)):
    """Get remote job invoker (mock or real based on environment)."""
    if is_mock_mode():
        from src.mock import MockJobInvoker

        return MockJobInvoker()

    from src.jobs.remote import RemoteJobInvoker

    return RemoteJobInvoker.from_settings(settings)


def get_pacer(settings: Settings = Depends(get_settings)) -> Pacer:
    """Get the inter-call pacer for a run."""
    if is_mock_mode():
        return Pacer(0)
    return Pacer(settings.pacing_seconds)


def verify_cron_secret(
    authorization: Annotated[str | None, Header()] = None,
    settings: Settings = Depends(get_settings),
) -> None:
    """Require `Authorization: Bearer <CRON_SECRET>` when a secret is configured."""
    if not settings.cron_secret:
        return

    if not authorization or not authorization.startswith("Bearer "):
        raise create_error_response(
            status_code=401,
            error="Authentication required",
            code=ErrorCode.AUTH_REQUIRED,
            endpoint="cron",
        )

    token = authorization[7:]  # Remove "Bearer " prefix
    if not hmac.compare_digest(token, settings.cron_secret):
        raise create_error_response(
            status_code=401,
            error="Invalid cron secret",
            code=ErrorCode.INVALID_TOKEN,
            endpoint="cron",
        )
