"""FastAPI server adapter for github-manager.

Design intent:
- Keep business logic in `github_manager.manager.*`
- Keep server-specific concerns (routing, CORS, token verification) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from github_manager.server.app import create_app
