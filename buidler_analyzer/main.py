"""
Buidler Analyzer FastAPI server.

Usage:
    uvicorn buidler_analyzer.main:app --reload --port 8000
    buidler-analyzer
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

import requests
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from buidler_analyzer import __version__
from buidler_analyzer.api.http_router import SERVICE_NAME, router as api_router
from buidler_analyzer.common.config import Settings, load_settings
from buidler_analyzer.common.errors import BaseError, ErrorKind
from buidler_analyzer.common.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def base_error_handler(request: Request, exc: BaseError):
    """Render any BaseError with its own status code."""
    exc.log(level="warning" if exc.http_status < 500 else "error")

    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method}
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "kind": ErrorKind.INTERNAL_ERROR.value,
        },
    )


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Callable[[], requests.Session] = requests.Session,
) -> FastAPI:
    """Build the application around an explicit Settings object."""
    settings = settings or load_settings()

    app = FastAPI(
        title="Buidler Analyzer API",
        description="GitHub repository, user and organization health scoring",
        version=__version__,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory

    app.add_exception_handler(BaseError, base_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/")
    def root():
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "docs": "/docs",
            "endpoints": {
                "analyze_repo": "GET /analyze_repo?owner=&repo=",
                "analyze_user": "GET /analyze_user?username=",
                "analyze_org": "GET /analyze_org?org=",
                "analyze_github": "GET /analyze_github?url=",
                "health": "GET /health",
            },
        }

    if not settings.has_token:
        logger.warning("GITHUB_TOKEN is not set; analysis endpoints will return 500")

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    setup_logging()
    settings = app.state.settings
    logger.info("CORS-enabled web server listening on port %d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
