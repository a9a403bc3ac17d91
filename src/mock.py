"""Mock implementations for running without platform or job credentials."""

import logging
import secrets
from typing import Any

from src.errors import JobInvocationError
from src.partner.client import RefreshResult

logger = logging.getLogger(__name__)


# Four hours, the platform's access token lifetime
MOCK_EXPIRE_IN = 4 * 60 * 60


class MockPlatformClient:
    """Mock platform client that issues fresh random tokens."""

    def __init__(self, failing_shops: dict[int, str] | None = None, expire_in: int = MOCK_EXPIRE_IN):
        # shop_id -> error message to return instead of tokens
        self.failing_shops = dict(failing_shops or {})
        self.expire_in = expire_in
        self.calls: list[dict[str, Any]] = []

    async def refresh(
        self,
        partner_id: int,
        secret: str,
        refresh_token: str,
        shop_id: int,
    ) -> RefreshResult:
        """Mock token exchange."""
        self.calls.append({
            "partner_id": partner_id,
            "refresh_token": refresh_token,
            "shop_id": shop_id,
        })

        if shop_id in self.failing_shops:
            return RefreshResult.platform_error(self.failing_shops[shop_id])

        return RefreshResult(
            success=True,
            access_token=f"mock-access-{secrets.token_hex(8)}",
            refresh_token=f"mock-refresh-{secrets.token_hex(8)}",
            expire_in=self.expire_in,
        )


class MockJobInvoker:
    """Mock remote job invoker that records calls and reports success."""

    def __init__(self, failing_jobs: set[str] | None = None):
        self.failing_jobs = set(failing_jobs or ())
        self.calls: list[tuple[str, dict]] = []

    async def invoke(self, job_name: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        self.calls.append((job_name, body or {}))
        if job_name in self.failing_jobs:
            raise JobInvocationError(job_name, f"{job_name} reported an error: mock failure")

        logger.info("Mock job %s invoked", job_name)
        return {"processed": 0, "mock": True}
