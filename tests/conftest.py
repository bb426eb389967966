"""Test configuration and fixtures."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from unittest.mock import Mock

import pytest

from github_manager.manager.github.client import (
    AuthenticatedUser,
    CreatedIssue,
    GitCommit,
    GitHubClient,
    PullRequestCreated,
)
from github_manager.manager.github.issue_workflow import IssueCreationRequest, IssueWorkflow

FIXED_NOW = datetime(2025, 1, 1, tzinfo=UTC)
FIXED_MS = 1735689600000


@pytest.fixture
def branches() -> dict[str, str]:
    """Branch name -> head sha of the fake repository."""
    return {"main": "base-sha"}


@pytest.fixture
def github(branches: dict[str, str]) -> Mock:
    """A GitHubClient double backed by the `branches` dict."""

    mock = Mock(spec=GitHubClient)
    mock.get_authenticated_user.return_value = AuthenticatedUser(
        id="1", login="alice", avatar_url="", name="Alice", email="alice@example.com"
    )

    def get_branch_ref(*, repository: str, branch: str) -> str | None:
        return branches.get(branch)

    def create_branch_ref(*, repository: str, branch: str, sha: str) -> dict[str, Any]:
        branches[branch] = sha
        return {"ref": f"refs/heads/{branch}", "object": {"sha": sha}}

    def update_issue_title(*, repository: str, issue_number: int, title: str) -> CreatedIssue:
        return CreatedIssue(
            repository=repository,
            number=issue_number,
            title=title,
            url=f"https://github.com/{repository}/issues/{issue_number}",
            state="open",
            labels=["feature", "high"],
            assignees=["alice"],
        )

    def create_pull_request(**kwargs: Any) -> PullRequestCreated:
        return PullRequestCreated(
            number=43,
            url=f"https://github.com/{kwargs['repository']}/pull/43",
            title=kwargs["title"],
            draft=kwargs["draft"],
        )

    mock.get_branch_ref.side_effect = get_branch_ref
    mock.create_branch_ref.side_effect = create_branch_ref
    mock.create_issue.return_value = CreatedIssue(
        repository="acme/widgets",
        number=42,
        title="Add login page",
        url="https://github.com/acme/widgets/issues/42",
        state="open",
        labels=["feature", "high"],
        assignees=["alice"],
    )
    mock.update_issue_title.side_effect = update_issue_title
    mock.get_commit.return_value = GitCommit(sha="base-sha", tree_sha="base-tree")
    mock.create_blob.return_value = "blob-sha"
    mock.create_tree.return_value = "tree-sha"
    mock.create_commit.return_value = "commit-sha"
    mock.update_branch_ref.return_value = None
    mock.create_pull_request.side_effect = create_pull_request
    return mock


@pytest.fixture
def workflow(github: Mock) -> IssueWorkflow:
    return IssueWorkflow(github=github, clock=lambda: FIXED_NOW)


@pytest.fixture
def login_request() -> IssueCreationRequest:
    return IssueCreationRequest.model_validate(
        {
            "projectId": "acme/widgets",
            "title": "Add login page",
            "type": "FEATURE",
            "priority": "HIGH",
            "reporterId": "alice",
        }
    )
