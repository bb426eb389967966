"""Issue creation endpoint (mounted at `/api/issues`).

Every failure of `POST /create` answers 500 with `{"error", "details"}`, including a
request body that does not validate; the dashboard shows any of them as one alert.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from github_manager.errors import IssueCreationError
from github_manager.manager.github.issue_workflow import (
    CreationResult,
    IssueCreationRequest,
    IssueWorkflow,
)
from github_manager.manager.logging import log_context
from github_manager.server.auth import GitHubSession, github_session
from github_manager.server.config import ServerSettings

logger = logging.getLogger(__name__)

FAILED_TO_CREATE = "Failed to create issue"


def _failure(details: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": FAILED_TO_CREATE, "details": details})


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        # Drop the leading "body" segment FastAPI adds to body field locations.
        loc = [str(p) for p in error.get("loc", ()) if p != "body"]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


class IssueRoute(APIRoute):
    """Route class reporting invalid request bodies in the endpoint's error shape."""

    def get_route_handler(self) -> Callable[[Request], Awaitable[Response]]:
        handler = super().get_route_handler()

        async def route_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except RequestValidationError as exc:
                details = _describe_validation_errors(exc)
                logger.info("Rejected issue request", extra={"details": details})
                return _failure(f"{FAILED_TO_CREATE}: {details}")

        return route_handler


router = APIRouter(route_class=IssueRoute)


def _settings(request: Request) -> ServerSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, ServerSettings):
        raise HTTPException(status_code=500, detail="Server settings not configured")
    return settings


@router.post("/create", responses={200: {"model": CreationResult}})
def create_issue(
    payload: IssueCreationRequest,
    request: Request,
    session: GitHubSession = Depends(github_session),
) -> JSONResponse:
    settings = _settings(request)
    workflow = IssueWorkflow(
        github=session.github,
        max_branch_attempts=settings.max_branch_attempts,
        web_url=settings.github_web_url,
    )
    with log_context(user=session.user.login):
        try:
            result = workflow.create_issue_with_branch(payload)
        except IssueCreationError as e:
            logger.error("Error creating issue", extra={"error": str(e)})
            return _failure(str(e))
        except Exception as e:
            logger.exception("Unexpected error creating issue")
            return _failure(str(e) or type(e).__name__)
    return JSONResponse(content=result.model_dump(mode="json", by_alias=True))
