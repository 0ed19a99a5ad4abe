"""
FastAPI application entry point for the band site backend.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.config import get_settings
from backend.dependencies import Services, build_services
from backend.errors import ConfigurationError, DocumentNotFound, IndexRequired, ValidationError
from backend.routes import pages_router, router

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(DocumentNotFound)
    async def handle_not_found(request: Request, exc: DocumentNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(IndexRequired)
    async def handle_index_required(request: Request, exc: IndexRequired):
        logger.error("Missing index for %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app(services: Optional[Services] = None) -> FastAPI:
    settings = services.settings if services else get_settings()
    app = FastAPI(title="Band Site Backend (FastAPI)", version="0.1.0")
    app.state.services = services or build_services(settings)
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(pages_router)
    _register_error_handlers(app)
    return app
