"""Ordered dispatch of downstream jobs with per-job failure isolation."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from src.refresh.pacing import Pacer

if TYPE_CHECKING:
    from src.config import Settings
    from src.db.repository import SyncStatusRepository
    from src.jobs.remote import RemoteJobInvoker

logger = logging.getLogger(__name__)


COMPLETED = "completed"
ERROR = "error"


@dataclass
class JobDispatchOutcome:
    """Result of one job invocation (or one shop of a per-shop job)."""

    job_name: str
    status: str  # completed | error
    detail: str
    shop_id: int | None = None
    data: dict | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class JobDescriptor:
    """A job invoked once per run."""

    name: str
    invoke: Callable[[], Awaitable[dict]]


@dataclass
class PerShopJobDescriptor:
    """A job invoked once for each shop returned by list_shops."""

    name: str
    list_shops: Callable[[], list]
    invoke_for_shop: Callable[[Any], Awaitable[dict]]
    on_success: Callable[[Any], None] | None = None


@dataclass
class DispatchReport:
    """Outcomes for all jobs of a run, keyed by job name in dispatch order."""

    sections: dict[str, dict] = field(default_factory=dict)
    outcomes: list[JobDispatchOutcome] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ERROR)


class JobDispatcher:
    """Runs an ordered list of jobs; one job's failure never stops the rest."""

    def __init__(self, jobs: list[JobDescriptor | PerShopJobDescriptor], pacer: Pacer | None = None):
        self.jobs = list(jobs)
        self.pacer = pacer or Pacer(0)

    async def dispatch(self) -> DispatchReport:
        """Invoke every job in order and collect outcomes."""
        report = DispatchReport()

        for job in self.jobs:
            logger.info("Dispatching job %s", job.name)
            if isinstance(job, PerShopJobDescriptor):
                report.sections[job.name] = await self._dispatch_per_shop(job, report)
            else:
                report.sections[job.name] = await self._dispatch_single(job, report)

        logger.info("Dispatched %s jobs, %s errors", len(self.jobs), report.errors)
        return report

    async def _dispatch_single(self, job: JobDescriptor, report: DispatchReport) -> dict:
        try:
            data = await job.invoke()
        except Exception as e:
            logger.error("Job %s failed: %s", job.name, e)
            report.outcomes.append(JobDispatchOutcome(job_name=job.name, status=ERROR, detail=str(e)))
            return {"status": ERROR, "error": str(e)}

        data = data or {}
        logger.info("Job %s completed", job.name)
        report.outcomes.append(JobDispatchOutcome(
            job_name=job.name,
            status=COMPLETED,
            detail="Job completed",
            data=data,
        ))
        return {**data, "status": COMPLETED}

    async def _dispatch_per_shop(self, job: PerShopJobDescriptor, report: DispatchReport) -> dict:
        try:
            shops = job.list_shops()
        except Exception as e:
            logger.error("Job %s could not list shops: %s", job.name, e)
            report.outcomes.append(JobDispatchOutcome(
                job_name=job.name,
                status=ERROR,
                detail=f"Failed to list shops: {e}",
            ))
            return {"status": ERROR, "error": str(e), "processed": 0, "results": []}

        logger.info("Job %s: %s shops to process", job.name, len(shops))

        results = []
        self.pacer.reset()
        for shop in shops:
            await self.pacer.wait()
            shop_id = getattr(shop, "shop_id", None)
            try:
                await job.invoke_for_shop(shop)
                if job.on_success is not None:
                    job.on_success(shop)
            except Exception as e:
                logger.error("Job %s failed for shop %s: %s", job.name, shop_id, e)
                outcome = JobDispatchOutcome(
                    job_name=job.name,
                    shop_id=shop_id,
                    status=ERROR,
                    detail=str(e),
                )
            else:
                logger.info("Job %s completed for shop %s", job.name, shop_id)
                outcome = JobDispatchOutcome(
                    job_name=job.name,
                    shop_id=shop_id,
                    status=COMPLETED,
                    detail="Job completed",
                )
            report.outcomes.append(outcome)
            results.append({"shop_id": shop_id, "status": outcome.status, "detail": outcome.detail})

        return {"status": COMPLETED, "processed": len(results), "results": results}


def default_jobs(
    settings: Settings,
    invoker: RemoteJobInvoker,
    sync_repo: SyncStatusRepository,
) -> list[JobDescriptor | PerShopJobDescriptor]:
    """Build the standard job sequence: promotions, ad budgets, data sync."""

    async def run_promotion_scheduler() -> dict:
        return await invoker.invoke(settings.promotion_scheduler_job, {"action": "process"})

    async def run_budget_scheduler() -> dict:
        return await invoker.invoke(settings.budget_scheduler_job, {"action": "process"})

    def list_sync_shops() -> list:
        return sync_repo.list_auto_sync(limit=settings.sync_batch_size)

    async def sync_shop(shop) -> dict:
        return await invoker.invoke(settings.data_sync_job, {
            "action": "sync-flash-sale-data",
            "shop_id": shop.shop_id,
            "user_id": shop.user_id,
        })

    def mark_synced(shop) -> None:
        sync_repo.mark_synced(shop.shop_id)

    return [
        JobDescriptor(name="promotion_scheduler", invoke=run_promotion_scheduler),
        JobDescriptor(name="budget_scheduler", invoke=run_budget_scheduler),
        PerShopJobDescriptor(
            name="data_sync",
            list_shops=list_sync_shops,
            invoke_for_shop=sync_shop,
            on_success=mark_synced,
        ),
    ]
