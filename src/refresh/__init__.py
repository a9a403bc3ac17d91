"""Token refresh orchestration."""

from .orchestrator import (
    RefreshOrchestrator,
    RefreshOutcome,
    RefreshReport,
    resolve_partner_credentials,
)
from .pacing import Pacer, NoPacing

__all__ = [
    "RefreshOrchestrator",
    "RefreshOutcome",
    "RefreshReport",
    "resolve_partner_credentials",
    "Pacer",
    "NoPacing",
]
