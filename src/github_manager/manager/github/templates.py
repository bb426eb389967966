"""Markdown and commit-message templates used by the issue workflow."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from github_manager.manager.github.issue_workflow import IssueCreationRequest

NOT_SPECIFIED = "Not specified"
SIGNATURE = "*This issue was created through GitHub Manager*"


def _or_default(value: object, default: str = NOT_SPECIFIED) -> str:
    if value is None:
        return default
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    return text or default


def tracking_file_path(issue_key: str) -> str:
    return f"ISSUE_{issue_key}.md"


def render_issue_body(request: IssueCreationRequest, *, branch_name: str) -> str:
    """Render the GitHub issue body for a creation request."""

    if request.wbs_structure is not None:
        wbs = json.dumps(request.wbs_structure, indent=2, ensure_ascii=False, default=str)
    else:
        wbs = NOT_SPECIFIED

    lines = [
        "**Description:**",
        _or_default(request.description, "No description provided"),
        "",
        "**Issue Details:**",
        f"- **Type:** {request.type}",
        f"- **Priority:** {request.priority}",
        f"- **Estimated Hours:** {_or_default(request.estimated_hours)}",
        f"- **Actual Hours:** {_or_default(request.actual_hours)}",
        f"- **Due Date:** {_or_default(request.due_date)}",
        f"- **Epic ID:** {_or_default(request.epic_id, 'None')}",
        f"- **Parent Issue:** {_or_default(request.parent_id, 'None')}",
        f"- **Reporter:** {request.reporter_id}",
        "",
        "**Work Breakdown Structure:**",
        wbs,
        "",
        f"**Branch:** `{branch_name}`",
        "",
        "---",
        SIGNATURE,
    ]
    return "\n".join(lines)


def render_tracking_file(
    *, issue_key: str, title: str, branch_name: str, created_at: datetime
) -> str:
    return (
        f"# {issue_key}: {title}\n"
        "\n"
        f"This branch was created for issue: {title}\n"
        "\n"
        "## Issue Details\n"
        f"- Issue Key: {issue_key}\n"
        f"- Branch: {branch_name}\n"
        f"- Created: {created_at.isoformat()}\n"
        "\n"
        "## TODO\n"
        "- [ ] Implement the changes for this issue\n"
        "- [ ] Add tests\n"
        "- [ ] Update documentation\n"
        "- [ ] Ready for review\n"
        "\n"
        "---\n"
        "*This file was auto-generated by GitHub Manager*\n"
    )


def render_commit_message(*, issue_key: str, title: str) -> str:
    return (
        f"feat: Initialize branch for {issue_key}\n"
        "\n"
        f"Created initial commit for issue: {title}\n"
        "\n"
        "- Added issue tracking file\n"
        "- Ready for development\n"
        "\n"
        f"Issue: {issue_key}"
    )


def render_pull_request_body(*, issue_number: int, issue_body: str) -> str:
    return f"Closes #{issue_number}\n\n{issue_body}"


def keyed_title(issue_key: str, title: str) -> str:
    return f"[{issue_key}] {title}"
