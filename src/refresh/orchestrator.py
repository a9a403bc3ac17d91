"""Token refresh orchestration across shops."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from src.config import Settings
from src.db.repository import CredentialRecord, CredentialRepository, LeaseRepository
from src.errors import CredentialStoreError, ErrorCategory
from src.refresh.pacing import Pacer

logger = logging.getLogger(__name__)


SUCCESS = "success"
FAILED = "failed"


def _now_ms() -> int:
    return int(time.time() * 1000)


def ms_to_iso(value: int | None) -> str | None:
    """Render epoch milliseconds as an ISO-8601 UTC string."""
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()


@dataclass
class RefreshOutcome:
    """Result of one shop's renewal attempt within a run."""

    shop_id: int
    status: str  # success | failed
    detail: str
    shop_name: str | None = None
    error_category: str | None = None
    old_expires_at: int | None = None
    new_expires_at: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS

    def to_dict(self) -> dict:
        data = asdict(self)
        data["old_expires_at_iso"] = ms_to_iso(self.old_expires_at)
        data["new_expires_at_iso"] = ms_to_iso(self.new_expires_at)
        return data


@dataclass
class RefreshReport:
    """Per-shop ledger for the refresh phase of a run."""

    results: list[RefreshOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def refreshed(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)

    def to_dict(self) -> dict:
        return {
            "status": "completed",
            "total": self.total,
            "refreshed": self.refreshed,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
        }


def resolve_partner_credentials(
    record: CredentialRecord,
    settings: Settings,
) -> tuple[int, str] | None:
    """Pick the signing credentials for a shop.

    The shop's own pair wins when complete; otherwise the deployment
    default pair is used. Pairs are never mixed.
    """
    if record.partner_id and record.partner_secret:
        return record.partner_id, record.partner_secret
    if settings.default_partner_id and settings.default_partner_secret:
        return settings.default_partner_id, settings.default_partner_secret
    return None


class RefreshOrchestrator:
    """Renews tokens for shops nearing expiry, one shop at a time."""

    def __init__(
        self,
        credentials: CredentialRepository,
        client,
        settings: Settings,
        leases: LeaseRepository | None = None,
        pacer: Pacer | None = None,
        clock: Callable[[], int] | None = None,
        run_id: str | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            credentials: Credential store for the run
            client: Platform client exposing async refresh()
            settings: Window thresholds, batch size, default partner pair
            leases: Per-shop lease store; None disables leasing
            pacer: Pacing between shops; defaults to settings.pacing_seconds
            clock: Returns current time in ms since epoch
            run_id: Identifies this run as a lease holder
        """
        self.credentials = credentials
        self.client = client
        self.settings = settings
        self.leases = leases
        self.pacer = pacer or Pacer(settings.pacing_seconds)
        self.clock = clock or _now_ms
        self.run_id = run_id or uuid.uuid4().hex

    async def run(self) -> RefreshReport:
        """Renew every eligible shop and return the ledger.

        Raises:
            CredentialStoreError: If the candidate query fails
        """
        now_ms = self.clock()
        candidates = self.credentials.list_expiring_soon(
            now_ms,
            self.settings.lookahead_ms,
            self.settings.max_staleness_ms,
            limit=self.settings.refresh_batch_size,
        )

        logger.info("Found %s shops needing token refresh (run=%s)", len(candidates), self.run_id)

        report = RefreshReport()
        for candidate in candidates:
            await self.pacer.wait()
            try:
                outcome = await self.refresh_shop(candidate, now_ms)
            except Exception as e:
                logger.exception("Unexpected error refreshing shop %s", candidate.shop_id)
                # Leave the session usable for the next shop
                self.credentials.db.rollback()
                outcome = RefreshOutcome(
                    shop_id=candidate.shop_id,
                    shop_name=candidate.shop_name,
                    status=FAILED,
                    detail=f"Unexpected error: {e}",
                    error_category=ErrorCategory.UNEXPECTED_ERROR,
                    old_expires_at=candidate.expires_at,
                )
            report.results.append(outcome)

        logger.info(
            "Token refresh completed: %s success, %s failed",
            report.refreshed,
            report.failed,
        )
        return report

    async def refresh_shop(self, candidate: CredentialRecord, now_ms: int) -> RefreshOutcome:
        """Renew a single shop's token pair."""
        shop_id = candidate.shop_id

        def failed(detail: str, category: str) -> RefreshOutcome:
            logger.warning("Shop %s refresh failed (%s): %s", shop_id, category, detail)
            return RefreshOutcome(
                shop_id=shop_id,
                shop_name=candidate.shop_name,
                status=FAILED,
                detail=detail,
                error_category=category,
                old_expires_at=candidate.expires_at,
            )

        partner = resolve_partner_credentials(candidate, self.settings)
        if partner is None:
            return failed("Missing partner credentials", ErrorCategory.MISSING_CREDENTIALS)
        partner_id, secret = partner

        if self.leases is not None:
            acquired = self.leases.try_acquire(shop_id, self.run_id, self.settings.lease_ttl_seconds)
            if not acquired:
                return failed("Renewal already in progress in another run", ErrorCategory.LEASE_UNAVAILABLE)

        try:
            # Re-read so the refresh token is the one stored right now
            current = self.credentials.get_record(shop_id)
            if current is None:
                return failed("Shop credentials no longer exist", ErrorCategory.MISSING_CREDENTIALS)

            if current.expires_at is not None and current.expires_at >= now_ms + self.settings.lookahead_ms:
                logger.info("Shop %s was already renewed, skipping", shop_id)
                return RefreshOutcome(
                    shop_id=shop_id,
                    shop_name=candidate.shop_name,
                    status=SUCCESS,
                    detail="Token already renewed",
                    old_expires_at=candidate.expires_at,
                    new_expires_at=current.expires_at,
                )

            if not current.refresh_token:
                return failed("Refresh token missing or unreadable", ErrorCategory.MISSING_CREDENTIALS)

            logger.info("Refreshing token for shop %s (%s)", shop_id, candidate.shop_name)
            result = await self.client.refresh(partner_id, secret, current.refresh_token, shop_id)

            if not result.success:
                category = (
                    ErrorCategory.TRANSPORT_ERROR
                    if result.error_kind == "transport"
                    else ErrorCategory.PLATFORM_ERROR
                )
                return failed(result.error or "Unknown error", category)

            new_expires_at = self.clock() + result.expire_in * 1000
            if current.expires_at is not None and new_expires_at <= current.expires_at:
                logger.warning(
                    "Shop %s renewed with expiry %s not after previous %s",
                    shop_id,
                    new_expires_at,
                    current.expires_at,
                )

            try:
                self.credentials.apply_renewal(
                    shop_id,
                    result.access_token,
                    result.refresh_token,
                    new_expires_at,
                    expire_in=result.expire_in,
                )
            except CredentialStoreError as e:
                # The platform has already rotated the token; the old one is dead
                logger.error(
                    "Shop %s token renewed on platform but not stored: %s",
                    shop_id,
                    e.message,
                )
                return RefreshOutcome(
                    shop_id=shop_id,
                    shop_name=candidate.shop_name,
                    status=FAILED,
                    detail=f"Token renewed on platform but not stored: {e.message}",
                    error_category=ErrorCategory.PERSIST_ERROR,
                    old_expires_at=candidate.expires_at,
                )

            logger.info("Shop %s token refreshed, new expiry %s", shop_id, ms_to_iso(new_expires_at))
            return RefreshOutcome(
                shop_id=shop_id,
                shop_name=candidate.shop_name,
                status=SUCCESS,
                detail="Token refreshed successfully",
                old_expires_at=candidate.expires_at,
                new_expires_at=new_expires_at,
            )
        finally:
            if self.leases is not None:
                self._release_lease(shop_id)

    def _release_lease(self, shop_id: int) -> None:
        try:
            self.leases.release(shop_id, self.run_id)
        except SQLAlchemyError as e:
            # The lease expires on its own after lease_ttl_seconds
            logger.warning("Failed to release renewal lease for shop %s: %s", shop_id, e)
            self.leases.db.rollback()
