"""FastAPI application for dependency and impact analysis."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from opsgraph.adapters.sinks import AuditSink
from opsgraph.config import AnalysisConfig
from opsgraph.errors import EntityNotFound, UpstreamUnavailable, ValidationError
from opsgraph.gate.explanation import ExplanationService
from opsgraph.service import OpsGraphService
from server.audit_db import get_audit_sink
from server.audit_routes import router as audit_router
from server.catalog_db import CATALOG_DB_PATH, get_store
from server.catalog_routes import router as catalog_router
from server.cross_domain_routes import router as cross_domain_router
from server.db import init_all
from server.dependency_routes import router as dependency_router

from dotenv import load_dotenv
load_dotenv()  # load environment variables from .env file

# CORS origins - configurable via environment variable
# Use comma-separated values for multiple origins, or "*" for all (development only)
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logger = logging.getLogger(__name__)


def _default_service() -> tuple[OpsGraphService, AuditSink]:
    config = AnalysisConfig.from_env()
    sink = get_audit_sink()
    service = OpsGraphService(
        get_store(),
        config=config,
        audit_sink=sink,
        explainer=ExplanationService.from_env(config),
    )
    return service, sink


def create_app(
    service: OpsGraphService | None = None, audit_sink: AuditSink | None = None
) -> FastAPI:
    """Build the app. Without a service, the sqlite catalog is used."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize database tables and the service on startup."""
        if app.state.service is None:
            init_all()
            app.state.service, app.state.audit_sink = _default_service()
            logger.info("catalog db: %s", CATALOG_DB_PATH)
        yield

    app = FastAPI(
        title="OpsGraph API",
        description="Dependency gate and cross-domain impact analysis for the operations catalog",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.audit_sink = audit_sink if audit_sink is not None else (
        service.audit_sink if service is not None else None
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EntityNotFound)
    async def not_found_handler(request: Request, exc: EntityNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(UpstreamUnavailable)
    async def upstream_handler(request: Request, exc: UpstreamUnavailable):
        logger.error("upstream unavailable: %s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    # include routes
    app.include_router(dependency_router, prefix="/api")
    app.include_router(cross_domain_router, prefix="/api")
    app.include_router(catalog_router, prefix="/api")
    app.include_router(audit_router, prefix="/api")

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {
            "status": "ok",
            "version": "0.1.0",
            "catalog_db": str(CATALOG_DB_PATH),
            "endpoints": {
                "dependencies": "/api/dependencies",
                "cross_domain": "/api/cross-domain",
                "catalog": "/api/catalog",
                "audit": "/api/audit",
            },
        }

    return app


logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
