"""Bearer-token authentication for API routes.

Every protected request is verified by asking GitHub who owns the token. The verified
identity and a client bound to that token are handed to the route, and the client is
closed when the request finishes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import asdict, dataclass

from fastapi import APIRouter, Depends, Request

from github_manager.manager.github.client import AuthenticatedUser, GitHubClient

logger = logging.getLogger(__name__)

GitHubClientFactory = Callable[[str], GitHubClient]

router = APIRouter()


class AuthError(Exception):
    """Raised when a request has no usable bearer token."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class GitHubSession:
    """The caller's verified identity plus a client acting with their token."""

    user: AuthenticatedUser
    github: GitHubClient


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def github_session(request: Request) -> Iterator[GitHubSession]:
    token = bearer_token(request)
    if token is None:
        raise AuthError("No token provided")

    factory: GitHubClientFactory = request.app.state.github_client_factory
    github = factory(token)
    try:
        try:
            user = github.get_authenticated_user()
        except Exception as e:
            logger.info("Token verification failed", extra={"error": str(e)})
            raise AuthError("Invalid token") from e
        yield GitHubSession(user=user, github=github)
    finally:
        github.close()


@router.get("/verify")
def verify(session: GitHubSession = Depends(github_session)) -> dict[str, str]:
    return asdict(session.user)
