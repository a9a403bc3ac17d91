"""Merge phase ledgers into the run summary returned to the trigger."""

from datetime import datetime, timezone

from src.jobs.dispatcher import DispatchReport
from src.refresh.orchestrator import RefreshReport


def _timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def build_summary(
    refresh: RefreshReport,
    dispatch: DispatchReport | None = None,
    now: datetime | None = None,
) -> dict:
    """Build the JSON summary for a run that got past candidate selection.

    Partial failures (shops or jobs) are reported inside the summary;
    they never make the run itself unsuccessful.
    """
    refresh_section = refresh.to_dict()
    summary = {
        "success": True,
        "timestamp": _timestamp(now),
        "refreshed": refresh.refreshed,
        "failed": refresh.failed,
        "results": refresh_section["results"],
        "token_refresh": refresh_section,
    }

    if refresh.total == 0:
        summary["message"] = "No shops need token refresh"

    if dispatch is not None:
        for job_name, section in dispatch.sections.items():
            summary[job_name] = section

    return summary


def build_failure(error: str, now: datetime | None = None) -> dict:
    """Build the summary for a run aborted before dispatch."""
    return {
        "success": False,
        "error": error,
        "timestamp": _timestamp(now),
    }
