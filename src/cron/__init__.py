"""Cron run wiring and summaries."""

from .runner import CronRunner, RunResult
from .summary import build_failure, build_summary

__all__ = [
    "CronRunner",
    "RunResult",
    "build_failure",
    "build_summary",
]
