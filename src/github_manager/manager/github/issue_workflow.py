"""Issue creation workflow.

Creates, in order and against a single repository:

1. a uniquely named branch off ``main`` (or ``master``)
2. a GitHub issue describing the work, retitled with a tracking key
3. an initial commit on the branch adding a tracking file
4. a draft pull request that closes the issue

Steps up to the issue rename are fatal and surface as :class:`IssueCreationError`.
The tracking commit and the pull request are best-effort: their failure is logged and
reported through :class:`CreationOutcome` on the result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from github_manager.errors import (
    BranchAlreadyExistsError,
    BranchNameExhaustedError,
    IssueCreationError,
    MissingDefaultBranchError,
)
from github_manager.manager.github.client import GitHubClient, PullRequestCreated, TreeEntry
from github_manager.manager.github.naming import (
    generate_branch_name,
    generate_issue_key,
    split_project_id,
)
from github_manager.manager.github.templates import (
    keyed_title,
    render_commit_message,
    render_issue_body,
    render_pull_request_body,
    render_tracking_file,
    tracking_file_path,
)
from github_manager.manager.logging import log_context

logger = logging.getLogger(__name__)

DEFAULT_BASE_BRANCH = "main"
FALLBACK_BASE_BRANCH = "master"
DEFAULT_MAX_BRANCH_ATTEMPTS = 5

IssueType = Literal["TASK", "FEATURE", "BUG", "EPIC"]
Priority = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IssueCreationRequest(_ApiModel):
    """Payload of ``POST /api/issues/create``."""

    project_id: str
    title: str
    description: str | None = None
    type: IssueType
    priority: Priority
    reporter_id: str
    assignee_ids: list[str] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    estimated_hours: float | None = Field(default=None, ge=0)
    actual_hours: float | None = Field(default=None, ge=0)
    due_date: date | None = None
    epic_id: str | None = None
    parent_id: str | None = None
    wbs_structure: Any | None = None

    @field_validator("project_id")
    @classmethod
    def _strip_project_id(cls, value: str) -> str:
        # The owner/repo shape is enforced by IssueWorkflow.create_issue_with_branch.
        return value.strip()

    @field_validator("title", "reporter_id")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("type", "priority", mode="before")
    @classmethod
    def _upper(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("due_date", mode="before")
    @classmethod
    def _date_only(cls, value: object) -> object:
        # Browsers send full ISO timestamps for date pickers.
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @field_validator("assignee_ids", "labels")
    @classmethod
    def _drop_blank(cls, values: list[str]) -> list[str]:
        return [v.strip() for v in values if v.strip()]


class CreationOutcome(str, Enum):
    FULL = "full"
    PARTIAL_NO_PR = "partial_no_pr"
    PARTIAL_NO_COMMIT = "partial_no_commit"


NOTES: dict[CreationOutcome, str] = {
    CreationOutcome.FULL: "Issue, branch, and pull request created successfully!",
    CreationOutcome.PARTIAL_NO_PR: (
        "Issue and branch created successfully. Pull request creation failed."
    ),
    CreationOutcome.PARTIAL_NO_COMMIT: (
        "Issue and branch created successfully. Pull request creation was skipped."
    ),
}


class IssueSummary(_ApiModel):
    number: int
    title: str
    url: str | None = None
    state: str = "open"
    labels: list[str] = Field(default_factory=list)
    assignees: list[str] = Field(default_factory=list)
    key: str
    branch: str


class BranchSummary(_ApiModel):
    name: str
    url: str
    base: str


class PullRequestSummary(_ApiModel):
    number: int
    url: str | None = None
    title: str
    draft: bool = True


class CreationResult(_ApiModel):
    success: bool = True
    issue: IssueSummary
    branch: BranchSummary
    pull_request: PullRequestSummary | None = None
    has_initial_commit: bool
    notes: str
    outcome: CreationOutcome


@dataclass(frozen=True, slots=True)
class ReservedBranch:
    """A branch created for an issue, plus the base it was cut from."""

    name: str
    base: str
    base_sha: str


def issue_labels(request: IssueCreationRequest) -> list[str]:
    labels: list[str] = []
    for label in [*request.labels, request.type.lower(), request.priority.lower()]:
        if label not in labels:
            labels.append(label)
    return labels


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class IssueWorkflow:
    """Orchestrates branch, issue, tracking commit and draft PR creation."""

    def __init__(
        self,
        *,
        github: GitHubClient,
        clock: Callable[[], datetime] = _utc_now,
        max_branch_attempts: int = DEFAULT_MAX_BRANCH_ATTEMPTS,
        web_url: str = "https://github.com",
    ) -> None:
        if max_branch_attempts < 1:
            raise ValueError("max_branch_attempts must be at least 1")
        self._github = github
        self._clock = clock
        self._max_branch_attempts = max_branch_attempts
        self._web_url = web_url.rstrip("/")

    def _timestamp_ms(self) -> int:
        return int(self._clock().timestamp() * 1000)

    def resolve_base_branch(
        self, *, repository: str, preferred: str = DEFAULT_BASE_BRANCH
    ) -> tuple[str, str]:
        """Return (branch, head sha) for the base branch, falling back to ``master``."""

        for candidate in dict.fromkeys([preferred, FALLBACK_BASE_BRANCH]):
            sha = self._github.get_branch_ref(repository=repository, branch=candidate)
            if sha is not None:
                if candidate != preferred:
                    logger.info(
                        "Base branch not found; using fallback",
                        extra={"repo": repository, "preferred": preferred, "base": candidate},
                    )
                return candidate, sha
        raise MissingDefaultBranchError(repository)

    def reserve_branch(self, *, repository: str, issue_type: str, title: str) -> ReservedBranch:
        """Create a branch whose name is not yet taken in the repository.

        On collision the name is regenerated with a millisecond timestamp suffix, at most
        ``max_branch_attempts`` times.
        """

        base, base_sha = self.resolve_base_branch(repository=repository)
        base_name = generate_branch_name(issue_type, title)
        name = base_name

        for attempt in range(self._max_branch_attempts):
            if self._github.get_branch_ref(repository=repository, branch=name) is None:
                try:
                    self._github.create_branch_ref(repository=repository, branch=name, sha=base_sha)
                except BranchAlreadyExistsError:
                    logger.info(
                        "Branch was created concurrently; retrying",
                        extra={"repo": repository, "branch": name, "attempt": attempt},
                    )
                else:
                    return ReservedBranch(name=name, base=base, base_sha=base_sha)
            else:
                logger.info(
                    "Branch name taken; retrying with suffix",
                    extra={"repo": repository, "branch": name, "attempt": attempt},
                )
            name = generate_branch_name(issue_type, title, suffix=self._timestamp_ms() + attempt)

        raise BranchNameExhaustedError(base_name, self._max_branch_attempts)

    def write_tracking_commit(
        self, *, repository: str, branch: str, issue_key: str, title: str
    ) -> str | None:
        """Commit ``ISSUE_<key>.md`` onto ``branch``.

        Returns:
            The new commit sha, or None if any step failed.
        """

        try:
            head_sha = self._github.get_branch_ref(repository=repository, branch=branch)
            if head_sha is None:
                raise ValueError(f"Branch disappeared before commit: {branch}")
            head = self._github.get_commit(repository=repository, sha=head_sha)

            content = render_tracking_file(
                issue_key=issue_key, title=title, branch_name=branch, created_at=self._clock()
            )
            blob_sha = self._github.create_blob(repository=repository, content=content)
            tree_sha = self._github.create_tree(
                repository=repository,
                base_tree=head.tree_sha,
                entries=[TreeEntry(path=tracking_file_path(issue_key), sha=blob_sha)],
            )
            commit_sha = self._github.create_commit(
                repository=repository,
                message=render_commit_message(issue_key=issue_key, title=title),
                tree=tree_sha,
                parents=[head.sha],
            )
            self._github.update_branch_ref(repository=repository, branch=branch, sha=commit_sha)
        except Exception:
            logger.exception(
                "Failed to create tracking commit (continuing)",
                extra={"repo": repository, "branch": branch, "issue_key": issue_key},
            )
            return None

        logger.info(
            "Tracking commit created",
            extra={"repo": repository, "branch": branch, "commit": commit_sha},
        )
        return commit_sha

    def _open_pull_request(
        self, *, repository: str, title: str, body: str, head: str, base: str
    ) -> PullRequestCreated | None:
        try:
            pr = self._github.create_pull_request(
                repository=repository, title=title, body=body, head=head, base=base, draft=True
            )
        except Exception:
            logger.exception(
                "Failed to create pull request (continuing)",
                extra={"repo": repository, "head": head, "base": base},
            )
            return None
        logger.info(
            "Draft pull request created",
            extra={"repo": repository, "pull_number": pr.number, "head": head},
        )
        return pr

    def create_issue_with_branch(self, request: IssueCreationRequest) -> CreationResult:
        """Run the whole workflow for one request.

        Raises:
            IssueCreationError: a step up to and including the issue rename failed,
                including a malformed ``project_id``.
        """

        with log_context(project_id=request.project_id):
            return self._create_issue_with_branch(request)

    def _create_issue_with_branch(self, request: IssueCreationRequest) -> CreationResult:
        try:
            owner, repo = split_project_id(request.project_id)
            repository = f"{owner}/{repo}"

            reserved = self.reserve_branch(
                repository=repository, issue_type=request.type, title=request.title
            )

            body = render_issue_body(request, branch_name=reserved.name)
            issue = self._github.create_issue(
                repository=repository,
                title=request.title,
                body=body,
                labels=issue_labels(request),
                assignees=request.assignee_ids or [request.reporter_id],
            )

            issue_key = generate_issue_key(request.project_id, issue.number)
            title = keyed_title(issue_key, request.title)
            issue = self._github.update_issue_title(
                repository=repository, issue_number=issue.number, title=title
            )
        except Exception as e:
            logger.error(
                "Issue creation aborted",
                extra={"project_id": request.project_id, "error": str(e)},
            )
            raise IssueCreationError(e) from e

        pr: PullRequestCreated | None = None
        with log_context(issue_key=issue_key, branch=reserved.name):
            commit_sha = self.write_tracking_commit(
                repository=repository,
                branch=reserved.name,
                issue_key=issue_key,
                title=request.title,
            )
            if commit_sha is not None:
                pr = self._open_pull_request(
                    repository=repository,
                    title=title,
                    body=render_pull_request_body(issue_number=issue.number, issue_body=body),
                    head=reserved.name,
                    base=reserved.base,
                )

        if commit_sha is None:
            outcome = CreationOutcome.PARTIAL_NO_COMMIT
        elif pr is None:
            outcome = CreationOutcome.PARTIAL_NO_PR
        else:
            outcome = CreationOutcome.FULL

        logger.info(
            "Issue workflow finished",
            extra={
                "repo": repository,
                "issue_number": issue.number,
                "issue_key": issue_key,
                "branch": reserved.name,
                "outcome": outcome.value,
            },
        )

        return CreationResult(
            success=True,
            issue=IssueSummary(
                number=issue.number,
                title=issue.title or title,
                url=issue.url,
                state=issue.state or "open",
                labels=issue.labels,
                assignees=issue.assignees,
                key=issue_key,
                branch=reserved.name,
            ),
            branch=BranchSummary(
                name=reserved.name,
                url=f"{self._web_url}/{repository}/tree/{reserved.name}",
                base=reserved.base,
            ),
            pull_request=(
                None
                if pr is None
                else PullRequestSummary(number=pr.number, url=pr.url, title=pr.title, draft=pr.draft)
            ),
            has_initial_commit=commit_sha is not None,
            notes=NOTES[outcome],
            outcome=outcome,
        )
