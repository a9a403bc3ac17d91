"""FastAPI server for the shop token cron."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api import cron, health
from src.config import is_mock_mode

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


# ============================================================================
# Lifespan & App Setup
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup/shutdown."""
    from src.db.migrations import run_migrations
    from src.db.seed import seed_demo_shops, has_demo_data
    from src.db.database import get_db_session

    # Run migrations on startup
    logger.info("Running database migrations...")
    try:
        run_migrations()
        logger.info("Migrations complete")
    except Exception as e:
        logger.error("Migration failed: %s", e)
        # Continue anyway - tables might already exist

    # Seed demo shops in mock mode if database is empty
    if is_mock_mode():
        with get_db_session() as db:
            if not has_demo_data(db):
                logger.info("Seeding demo shops...")
                seed_demo_shops(db)
                logger.info("Demo shops seeded")

    mode = "MOCK" if is_mock_mode() else "LIVE"
    logger.info("Shop token cron server started (%s MODE)", mode)

    yield


app = FastAPI(
    title="Shop Token Cron",
    description="Keeps delegated marketplace tokens fresh and triggers scheduled shop jobs",
    version="0.1.0",
    lifespan=lifespan,
)

# Browser-based triggers send a preflight; answer it for any origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

app.include_router(cron.router)
app.include_router(health.router)


# ============================================================================
# Entry Point
# ============================================================================

def main():
    """Run the server."""
    import uvicorn
    uvicorn.run(
        "src.server:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "").lower() == "true",
    )


if __name__ == "__main__":
    main()
