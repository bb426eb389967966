"""Pure helpers for branch names, issue keys and project identifiers."""

from __future__ import annotations

import re

from github_manager.errors import InvalidProjectIdError

BRANCH_PREFIXES: dict[str, str] = {
    "FEATURE": "feature",
    "BUG": "hotfix",
    "TASK": "task",
    "EPIC": "epic",
}
DEFAULT_BRANCH_PREFIX = "task"
EMPTY_SLUG = "new_issue"
MAX_SLUG_LENGTH = 30

_DISALLOWED = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def branch_prefix(issue_type: str) -> str:
    return BRANCH_PREFIXES.get(issue_type.strip().upper(), DEFAULT_BRANCH_PREFIX)


def slugify_title(title: str) -> str:
    """Return the branch slug for an issue title.

    The slug only contains ``[a-z0-9_]`` and is at most 30 characters long.
    """

    stripped = _DISALLOWED.sub("", title.lower())
    slug = _WHITESPACE.sub("_", stripped)[:MAX_SLUG_LENGTH]
    return slug or EMPTY_SLUG


def generate_branch_name(issue_type: str, title: str, suffix: int | None = None) -> str:
    """Build ``<prefix>/<slug>`` (plus ``_<suffix>`` when given)."""

    name = f"{branch_prefix(issue_type)}/{slugify_title(title)}"
    if suffix is not None:
        name = f"{name}_{suffix}"
    return name


def generate_issue_key(project_id: str, issue_number: int) -> str:
    """Return the human-readable issue key, e.g. ``ACME-42``."""

    if issue_number <= 0:
        raise ValueError("issue_number must be a positive integer")
    return f"{project_id.upper()[:4]}-{issue_number}"


def split_project_id(project_id: str) -> tuple[str, str]:
    parts = project_id.strip().split("/")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise InvalidProjectIdError(
            f"Project id must be in the form 'owner/repo', got {project_id!r}"
        )
    return parts[0].strip(), parts[1].strip()
