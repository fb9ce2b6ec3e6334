"""FastAPI application entry point."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from disclosure.core.config import configure_logging, get_settings
from disclosure.core.registry import get_question_graph, get_rule_table, get_scenario_library

from disclosure.core.api.routes_scenarios import router as scenarios_router
from disclosure.rules.router import decide_router, rules_router
from disclosure.verification.router import router as verification_router
from disclosure.walkthrough.router import router as walkthrough_router

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting %s...", settings.app_name)
    logger.info("Data directory: %s", settings.data_dir)

    # Fail fast on malformed regulation data
    get_rule_table()
    get_question_graph()
    get_scenario_library()

    yield

    # Shutdown
    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="FERPA, FAFSA and FTI disclosure decisions with cross-verified evaluators",
        version=VERSION,
        lifespan=lifespan,
    )

    # CORS middleware - configurable via CORS_ORIGINS env var
    cors_origins_str = os.getenv("CORS_ORIGINS", "*")
    cors_origins = cors_origins_str.split(",") if cors_origins_str != "*" else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(decide_router)        # /decide
    app.include_router(rules_router)         # /rules
    app.include_router(walkthrough_router)   # /walkthrough
    app.include_router(scenarios_router)     # /scenarios
    app.include_router(verification_router)  # /verification

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": VERSION,
            "endpoints": {
                "decide": "/decide - Disclosure decision from attributes",
                "rules": "/rules - Rule table inspection",
                "walkthrough": "/walkthrough/* - Question graph, stepping and compact strings",
                "scenarios": "/scenarios - Named scenario library",
                "verification": "/verification - Cross-verification report",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
