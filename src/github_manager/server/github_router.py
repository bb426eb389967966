"""Read-only repository endpoints (mounted at `/api/github`).

These pass GitHub's JSON straight through to the dashboard.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from github_manager.manager.github.issue_workflow import DEFAULT_BASE_BRANCH
from github_manager.server.auth import GitHubSession, github_session
from github_manager.server.models import CreateBranchRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _proxy(what: str, call: Callable[[], Any], *, verb: str = "fetch") -> JSONResponse:
    try:
        data = call()
    except Exception:
        logger.exception("GitHub proxy call failed", extra={"resource": what, "action": verb})
        return JSONResponse(status_code=500, content={"error": f"Failed to {verb} {what}"})
    return JSONResponse(content=data)


@router.get("/repositories")
def list_repositories(session: GitHubSession = Depends(github_session)) -> JSONResponse:
    return _proxy("repositories", session.github.list_repositories)


@router.get("/repositories/{owner}/{repo}")
def get_repository(
    owner: str, repo: str, session: GitHubSession = Depends(github_session)
) -> JSONResponse:
    return _proxy("repository", lambda: session.github.get_repository(repository=f"{owner}/{repo}"))


@router.get("/repositories/{owner}/{repo}/branches")
def list_branches(
    owner: str, repo: str, session: GitHubSession = Depends(github_session)
) -> JSONResponse:
    return _proxy("branches", lambda: session.github.list_branches(repository=f"{owner}/{repo}"))


@router.get("/repositories/{owner}/{repo}/contributors")
def list_contributors(
    owner: str, repo: str, session: GitHubSession = Depends(github_session)
) -> JSONResponse:
    return _proxy(
        "contributors", lambda: session.github.list_contributors(repository=f"{owner}/{repo}")
    )


@router.get("/repositories/{owner}/{repo}/commits")
def list_commits(
    owner: str,
    repo: str,
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=10, ge=1, le=100),
    session: GitHubSession = Depends(github_session),
) -> JSONResponse:
    return _proxy(
        "commits",
        lambda: session.github.list_commits(
            repository=f"{owner}/{repo}", page=page, per_page=per_page
        ),
    )


@router.get("/repositories/{owner}/{repo}/issues")
def list_issues(
    owner: str, repo: str, session: GitHubSession = Depends(github_session)
) -> JSONResponse:
    return _proxy("issues", lambda: session.github.list_issues(repository=f"{owner}/{repo}"))


@router.get("/repositories/{owner}/{repo}/pulls")
def list_pull_requests(
    owner: str, repo: str, session: GitHubSession = Depends(github_session)
) -> JSONResponse:
    return _proxy(
        "pull requests",
        lambda: session.github.list_pull_requests(repository=f"{owner}/{repo}"),
    )


@router.post("/repositories/{owner}/{repo}/branches")
def create_branch(
    owner: str,
    repo: str,
    payload: CreateBranchRequest,
    session: GitHubSession = Depends(github_session),
) -> JSONResponse:
    return _proxy(
        "branch",
        lambda: session.github.create_branch_from(
            repository=f"{owner}/{repo}",
            branch=payload.branch_name,
            base_branch=payload.base_branch or DEFAULT_BASE_BRANCH,
        ),
        verb="create",
    )
