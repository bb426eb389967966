"""FastAPI app factory.

Routes are thin: business logic lives in `github_manager.manager.*`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from github_manager import __version__
from github_manager.manager.github.client import GitHubClient
from github_manager.server.auth import AuthError, GitHubClientFactory
from github_manager.server.auth import router as auth_router
from github_manager.server.config import ServerSettings
from github_manager.server.github_router import router as github_router
from github_manager.server.issues_router import router as issues_router

logger = logging.getLogger(__name__)


def _default_client_factory(settings: ServerSettings) -> GitHubClientFactory:
    def factory(token: str) -> GitHubClient:
        return GitHubClient(token=token, base_url=settings.github_base_url)

    return factory


def create_app(
    settings: ServerSettings | None = None,
    *,
    github_client_factory: GitHubClientFactory | None = None,
) -> FastAPI:
    settings = settings or ServerSettings()

    app = FastAPI(
        title="GitHub Manager",
        version=__version__,
        description="REST API for GitHub repository browsing and issue/branch/PR automation.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.state.settings = settings
    app.state.github_client_factory = github_client_factory or _default_client_factory(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AuthError)
    def handle_auth_error(_request: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"error": exc.message})

    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(github_router, prefix="/api/github")
    app.include_router(issues_router, prefix="/api/issues")

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "OK", "message": "GitHub Manager API is running"}

    logger.debug("App created", extra={"cors_origins": settings.parsed_cors_origins()})
    return app
