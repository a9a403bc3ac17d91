"""Cron trigger endpoints."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.api.deps import (
    get_db,
    get_job_invoker,
    get_pacer,
    get_platform_client,
    get_settings,
    verify_cron_secret,
)
from src.api.schemas import CronRunResponse
from src.config import Settings
from src.cron.runner import CronRunner
from src.refresh.pacing import Pacer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["cron"], dependencies=[Depends(verify_cron_secret)])


@router.post("/cron/run", response_model=CronRunResponse)
async def run_cron(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    client=Depends(get_platform_client),
    invoker=Depends(get_job_invoker),
    pacer: Pacer = Depends(get_pacer),
) -> JSONResponse:
    """Refresh expiring tokens, then run the downstream jobs."""
    runner = CronRunner(db, settings, client, invoker=invoker, pacer=pacer)
    result = await runner.run(dispatch=True)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("/tokens/refresh", response_model=CronRunResponse)
async def refresh_tokens(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    client=Depends(get_platform_client),
    pacer: Pacer = Depends(get_pacer),
) -> JSONResponse:
    """Refresh expiring tokens only, without dispatching jobs."""
    runner = CronRunner(db, settings, client, pacer=pacer)
    result = await runner.run(dispatch=False)
    return JSONResponse(status_code=result.status_code, content=result.body)
