"""Pydantic schemas for API responses."""

from pydantic import BaseModel, ConfigDict, Field


class RefreshOutcomeModel(BaseModel):
    """One shop's refresh result."""

    shop_id: int
    shop_name: str | None = None
    status: str = Field(..., pattern=r"^(success|failed)$")
    detail: str
    error_category: str | None = None
    old_expires_at: int | None = None
    new_expires_at: int | None = None
    old_expires_at_iso: str | None = None
    new_expires_at_iso: str | None = None


class TokenRefreshSection(BaseModel):
    """Refresh phase ledger."""

    status: str
    total: int = Field(..., ge=0)
    refreshed: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    results: list[RefreshOutcomeModel]


class ShopJobResult(BaseModel):
    """One shop's result within a per-shop job."""

    shop_id: int | None
    status: str = Field(..., pattern=r"^(completed|error)$")
    detail: str


class JobSection(BaseModel):
    """Outcome of a downstream job; remote payload fields pass through."""

    model_config = ConfigDict(extra="allow")

    status: str
    error: str | None = None


class DataSyncSection(BaseModel):
    """Outcome of the per-shop data sync job."""

    status: str
    processed: int = Field(..., ge=0)
    results: list[ShopJobResult]
    error: str | None = None


class CronRunResponse(BaseModel):
    """Summary of a cron run."""

    model_config = ConfigDict(extra="allow")

    success: bool
    timestamp: str
    refreshed: int | None = None
    failed: int | None = None
    results: list[RefreshOutcomeModel] | None = None
    token_refresh: TokenRefreshSection | None = None
    promotion_scheduler: JobSection | None = None
    budget_scheduler: JobSection | None = None
    data_sync: DataSyncSection | None = None
    message: str | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Service health."""

    status: str
    mock_mode: bool
    db_revision: str | None = None
