"""One cron run: token refresh, then downstream job dispatch."""

import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.orm import Session

from src.config import Settings
from src.cron.summary import build_failure, build_summary
from src.db.repository import CredentialRepository, LeaseRepository, SyncStatusRepository
from src.errors import CredentialStoreError
from src.jobs.dispatcher import JobDispatcher, default_jobs
from src.refresh.orchestrator import RefreshOrchestrator
from src.refresh.pacing import Pacer

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """HTTP-level outcome of a run."""

    status_code: int
    body: dict

    @property
    def success(self) -> bool:
        return self.status_code < 400


class CronRunner:
    """Wires the stores, platform client and job invoker for a single run."""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        client,
        invoker=None,
        pacer: Pacer | None = None,
        jobs: list | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self.db = db
        self.settings = settings
        self.client = client
        self.invoker = invoker
        self.pacer = pacer or Pacer(settings.pacing_seconds)
        self.jobs = jobs
        self.clock = clock

    def build_orchestrator(self) -> RefreshOrchestrator:
        return RefreshOrchestrator(
            credentials=CredentialRepository(self.db),
            client=self.client,
            settings=self.settings,
            leases=LeaseRepository(self.db),
            pacer=self.pacer,
            clock=self.clock,
        )

    def build_dispatcher(self) -> JobDispatcher:
        jobs = self.jobs
        if jobs is None:
            jobs = default_jobs(self.settings, self.invoker, SyncStatusRepository(self.db))
        return JobDispatcher(jobs, pacer=self.pacer)

    async def run(self, dispatch: bool = True) -> RunResult:
        """Execute the run.

        Args:
            dispatch: Also run downstream jobs after the refresh phase

        Returns:
            RunResult with status 500 only if candidate selection failed
        """
        logger.info("Cron run started (dispatch=%s)", dispatch)

        try:
            refresh_report = await self.build_orchestrator().run()
        except CredentialStoreError as e:
            logger.error("Cron run aborted, candidate selection failed: %s", e.message)
            return RunResult(status_code=500, body=build_failure(e.message))

        dispatch_report = None
        if dispatch:
            dispatch_report = await self.build_dispatcher().dispatch()

        summary = build_summary(refresh_report, dispatch_report)
        logger.info(
            "Cron run finished: refreshed=%s failed=%s",
            summary["refreshed"],
            summary["failed"],
        )
        return RunResult(status_code=200, body=summary)
