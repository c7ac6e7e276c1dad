"""
ASGI entry point for the ledger API.

Run with:
    uvicorn matchledger.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from matchledger import __version__
from matchledger.api.routes import capabilities, health, profiles
from matchledger.config.settings import get_log_level
from matchledger.database.session import reset_engine
from matchledger.platform.errors import register_error_handlers
from matchledger.platform.health import get_health_checker

logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_health_checker().log_config_status()
    logger.info("Ledger API starting", extra={"version": __version__})
    yield
    reset_engine()
    logger.info("Ledger API stopped")


def create_app() -> FastAPI:
    app = FastAPI(title="Match Ledger API", version=__version__, lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(profiles.router)
    app.include_router(capabilities.router)
    return app


app = create_app()
