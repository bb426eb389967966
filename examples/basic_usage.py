#!/usr/bin/env python3
"""Programmatic issue creation example.

This drives the workflow directly instead of going through the CLI or REST API:

* load settings from `.env`
* create the issue, its branch, a tracking commit and a draft pull request
* print the outcome and any step that was skipped

Repository selection is passed as an argument (not read from `.env`).
"""

from __future__ import annotations

import argparse
from typing import Sequence

from github_manager.errors import IssueCreationError
from github_manager.manager.config import ManagerSettings
from github_manager.manager.github.client import GitHubClient
from github_manager.manager.github.issue_workflow import (
    CreationOutcome,
    IssueCreationRequest,
    IssueWorkflow,
)
from github_manager.manager.logging import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an issue with branch and draft PR.")
    parser.add_argument("--repo", required=True, help='Target repository in the form "owner/repo"')
    parser.add_argument("--title", required=True, help="Issue title")
    parser.add_argument("--description", default=None, help="Issue description")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ManagerSettings()
    configure_logging(settings.log_level)

    github = GitHubClient(token=settings.github_token, base_url=settings.github_base_url)
    try:
        request = IssueCreationRequest(
            project_id=args.repo,
            title=args.title,
            description=args.description,
            type="TASK",
            priority="MEDIUM",
            reporter_id=github.get_authenticated_user().login,
        )
        result = IssueWorkflow(github=github, web_url=settings.github_web_url).create_issue_with_branch(
            request
        )
    except IssueCreationError as exc:
        print(str(exc))
        return 1
    finally:
        github.close()

    print(f"Created issue #{result.issue.number}: {result.issue.title}")
    print(f"Branch: {result.branch.url}")
    if result.pull_request is not None:
        print(f"Draft PR: {result.pull_request.url}")
    if result.outcome is not CreationOutcome.FULL:
        print(result.notes)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
