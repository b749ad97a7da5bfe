"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.endpoints.auth import router as auth_router
from src.api.endpoints.dashboard import router as dashboard_router
from src.api.endpoints.documents import router as documents_router
from src.api.endpoints.guide_check import router as guide_check_router
from src.api.endpoints.intake_webhook import router as intake_router
from src.integrations.insurance.client import YasInsuranceClient
from src.integrations.sheets.guide_registry import GuideRegistryClient
from src.utils.config_loader import known_branches_from_env, load_insurance_config, validate_branches

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================


def build_db():
    """Use real Postgres when DATABASE_URL is set, else the in-memory stub."""
    if os.getenv("DATABASE_URL"):
        from src.database.postgres_real import PostgresDB

        return PostgresDB(connection_string=os.environ["DATABASE_URL"])

    from src.database.postgres import PostgresDB

    logger.warning("DATABASE_URL not set; using in-memory store")
    return PostgresDB()


def build_insurance_client() -> Optional[YasInsuranceClient]:
    # Unconfigured branches fail startup.
    config = load_insurance_config()
    validate_branches(config, known_branches_from_env())

    if not os.getenv("YAS_BASE_URL"):
        logger.warning("YAS_BASE_URL not set; insurance policies will not be requested")
        return None
    return YasInsuranceClient(config=config)


def create_app(
    db: Any = None,
    insurance_client: Any = None,
    guide_registry: Any = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.db.create_tables()
        logger.info("Database tables ready")
        yield

    app = FastAPI(
        title="Park Indemnity Operations API",
        description="Indemnity form intake, activity insurance, and staff dashboards",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware
    allowed_origins = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db = db if db is not None else build_db()
    app.state.insurance_client = insurance_client if insurance_client is not None else build_insurance_client()
    app.state.guide_registry = guide_registry if guide_registry is not None else GuideRegistryClient()

    app.include_router(intake_router, prefix="/api")
    app.include_router(auth_router, prefix="/api")
    app.include_router(documents_router, prefix="/api")
    app.include_router(guide_check_router, prefix="/api")
    app.include_router(dashboard_router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
