"""GitHub API client wrapper.

Wraps PyGithub (issues, authenticated user) and a plain ``requests`` session (git data,
pull requests, read-only listings) so that GitHub calls stay out of the workflow and
HTTP code, and tests can substitute a ``Mock(spec=GitHubClient)``.

A client is request-scoped: it is built from the caller's own token and closed once the
request is done.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import requests
from github import Auth, Github

from github_manager.errors import BranchAlreadyExistsError

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 30


@dataclass(frozen=True, slots=True)
class AuthenticatedUser:
    """Profile of the user owning the access token."""

    id: str
    login: str
    avatar_url: str
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class CreatedIssue:
    """Minimal issue metadata returned from GitHub."""

    repository: str
    number: int
    title: str
    url: str | None
    state: str
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class GitCommit:
    sha: str
    tree_sha: str


@dataclass(frozen=True, slots=True)
class TreeEntry:
    path: str
    sha: str
    mode: str = "100644"
    type: str = "blob"


@dataclass(frozen=True, slots=True)
class PullRequestCreated:
    number: int
    url: str | None
    title: str = ""
    draft: bool = False


class GitHubClient:
    """Small wrapper around PyGithub and the GitHub REST API."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "github-manager",
            }
        )
        self._github = github_api or Github(auth=Auth.Token(token), base_url=self._rest_base_url)

    def _repo_url(self, *, repository: str, path: str) -> str:
        repo = repository.strip().strip("/")
        path = path.lstrip("/")
        if not path:
            return f"{self._rest_base_url}/repos/{repo}"
        return f"{self._rest_base_url}/repos/{repo}/{path}"

    def _api_url(self, path: str) -> str:
        return f"{self._rest_base_url}/{path.lstrip('/')}"

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        resp = self._session.get(url, params=params, timeout=_TIMEOUT_SECONDS)
        resp.raise_for_status()
        return resp.json()

    def _get_paginated_json_list(self, url: str, params: dict[str, Any] | None = None) -> list[Any]:
        """Fetch a REST endpoint that returns a JSON list, following basic pagination.

        Notes:
            Pagination is kept simple: up to 10 pages of 100 items each.
        """

        items: list[Any] = []
        per_page = 100
        for page in range(1, 11):
            query = dict(params or {})
            query.update({"per_page": per_page, "page": page})
            payload = self._get_json(url, params=query)
            if not isinstance(payload, list):
                break
            items.extend(payload)
            if len(payload) < per_page:
                break
        return items

    @staticmethod
    def _require_sha(data: Any, what: str) -> str:
        sha = data.get("sha") if isinstance(data, dict) else None
        if not isinstance(sha, str) or not sha.strip():
            raise ValueError(f"Unexpected {what} response: missing sha")
        return sha

    @staticmethod
    def _parse_issue_json(repository: str, data: dict[str, Any]) -> CreatedIssue:
        number = data.get("number")
        if not isinstance(number, int) or number <= 0:
            raise ValueError("Invalid issue response: missing number")

        title = data.get("title")
        if not isinstance(title, str):
            title = ""

        state = data.get("state")
        if not isinstance(state, str):
            state = ""

        url = data.get("html_url")
        if not isinstance(url, str) or not url.strip():
            url = None

        labels: list[str] = []
        for label in data.get("labels") or []:
            if isinstance(label, dict) and isinstance(label.get("name"), str):
                labels.append(label["name"])
            elif isinstance(label, str):
                labels.append(label)

        assignees: list[str] = []
        for assignee in data.get("assignees") or []:
            if isinstance(assignee, dict) and isinstance(assignee.get("login"), str):
                assignees.append(assignee["login"])

        return CreatedIssue(
            repository=repository,
            number=number,
            title=title,
            url=url,
            state=state,
            labels=labels,
            assignees=assignees,
        )

    # -- Identity -------------------------------------------------------------------

    def get_authenticated_user(self) -> AuthenticatedUser:
        user = self._github.get_user()
        login = user.login
        return AuthenticatedUser(
            id=str(user.id),
            login=login,
            avatar_url=user.avatar_url or "",
            name=user.name or login,
            email=user.email or "",
        )

    # -- Git data -------------------------------------------------------------------

    def get_branch_ref(self, *, repository: str, branch: str) -> str | None:
        """Return the head sha of a branch, or None if the branch does not exist."""

        if not branch.strip():
            raise ValueError("branch is required")
        url = self._repo_url(repository=repository, path=f"git/ref/heads/{branch}")
        resp = self._session.get(url, timeout=_TIMEOUT_SECONDS)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()
        obj = data.get("object")
        if not isinstance(obj, dict):
            raise ValueError("Unexpected ref response: missing object")
        return self._require_sha(obj, "ref")

    def create_branch_ref(self, *, repository: str, branch: str, sha: str) -> dict[str, Any]:
        if not branch.strip():
            raise ValueError("branch is required")
        if not sha.strip():
            raise ValueError("sha is required")

        url = self._repo_url(repository=repository, path="git/refs")
        payload = {"ref": f"refs/heads/{branch}", "sha": sha}
        resp = self._session.post(url, json=payload, timeout=_TIMEOUT_SECONDS)
        if resp.status_code == 422:
            raise BranchAlreadyExistsError(branch)
        resp.raise_for_status()
        logger.info("Branch created", extra={"repo": repository, "branch": branch, "sha": sha})
        data: dict[str, Any] = resp.json()
        return data

    def create_branch_from(
        self, *, repository: str, branch: str, base_branch: str = "main"
    ) -> dict[str, Any]:
        """Create ``branch`` pointing at the current head of ``base_branch``."""

        base_sha = self.get_branch_ref(repository=repository, branch=base_branch)
        if base_sha is None:
            raise ValueError(f"Base branch not found: {base_branch}")
        return self.create_branch_ref(repository=repository, branch=branch, sha=base_sha)

    def update_branch_ref(self, *, repository: str, branch: str, sha: str) -> None:
        url = self._repo_url(repository=repository, path=f"git/refs/heads/{branch}")
        resp = self._session.patch(
            url, json={"sha": sha, "force": False}, timeout=_TIMEOUT_SECONDS
        )
        resp.raise_for_status()

    def get_commit(self, *, repository: str, sha: str) -> GitCommit:
        data = self._get_json(self._repo_url(repository=repository, path=f"git/commits/{sha}"))
        tree = data.get("tree") if isinstance(data, dict) else None
        return GitCommit(
            sha=self._require_sha(data, "commit"),
            tree_sha=self._require_sha(tree, "commit tree"),
        )

    def create_blob(self, *, repository: str, content: str) -> str:
        url = self._repo_url(repository=repository, path="git/blobs")
        payload = {
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "encoding": "base64",
        }
        resp = self._session.post(url, json=payload, timeout=_TIMEOUT_SECONDS)
        resp.raise_for_status()
        return self._require_sha(resp.json(), "blob")

    def create_tree(self, *, repository: str, base_tree: str, entries: list[TreeEntry]) -> str:
        url = self._repo_url(repository=repository, path="git/trees")
        payload = {
            "base_tree": base_tree,
            "tree": [
                {"path": e.path, "mode": e.mode, "type": e.type, "sha": e.sha} for e in entries
            ],
        }
        resp = self._session.post(url, json=payload, timeout=_TIMEOUT_SECONDS)
        resp.raise_for_status()
        return self._require_sha(resp.json(), "tree")

    def create_commit(
        self, *, repository: str, message: str, tree: str, parents: list[str]
    ) -> str:
        url = self._repo_url(repository=repository, path="git/commits")
        payload = {"message": message, "tree": tree, "parents": parents}
        resp = self._session.post(url, json=payload, timeout=_TIMEOUT_SECONDS)
        resp.raise_for_status()
        return self._require_sha(resp.json(), "commit")

    # -- Issues & pull requests -----------------------------------------------------

    def create_issue(
        self,
        *,
        repository: str,
        title: str,
        body: str | None,
        labels: list[str] | None,
        assignees: list[str] | None,
    ) -> CreatedIssue:
        if not title.strip():
            raise ValueError("Issue title is required")

        repo = self._github.get_repo(repository)
        issue = repo.create_issue(
            title=title,
            body=body or "",
            labels=labels or [],
            assignees=assignees or [],
        )
        created = CreatedIssue(
            repository=repository,
            number=issue.number,
            title=issue.title,
            url=getattr(issue, "html_url", None),
            state=getattr(issue, "state", "open"),
            labels=[label.name for label in getattr(issue, "labels", None) or []],
            assignees=[user.login for user in getattr(issue, "assignees", None) or []],
            created_at=getattr(issue, "created_at", None),
        )
        logger.info(
            "Issue created",
            extra={"repo": repository, "issue_number": created.number, "labels": created.labels},
        )
        return created

    def update_issue_title(self, *, repository: str, issue_number: int, title: str) -> CreatedIssue:
        if issue_number <= 0:
            raise ValueError("issue_number must be a positive integer")
        url = self._repo_url(repository=repository, path=f"issues/{issue_number}")
        resp = self._session.patch(url, json={"title": title}, timeout=_TIMEOUT_SECONDS)
        resp.raise_for_status()
        return self._parse_issue_json(repository, resp.json())

    def create_pull_request(
        self,
        *,
        repository: str,
        title: str,
        body: str,
        head: str,
        base: str,
        draft: bool = True,
    ) -> PullRequestCreated:
        url = self._repo_url(repository=repository, path="pulls")
        payload = {"title": title, "body": body, "head": head, "base": base, "draft": draft}
        resp = self._session.post(url, json=payload, timeout=_TIMEOUT_SECONDS)
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()
        number = data.get("number")
        if not isinstance(number, int) or number <= 0:
            raise ValueError("Unexpected create PR response: missing number")
        html_url = data.get("html_url")
        if not isinstance(html_url, str) or not html_url.strip():
            html_url = None
        pr_title = data.get("title")
        return PullRequestCreated(
            number=number,
            url=html_url,
            title=pr_title if isinstance(pr_title, str) else title,
            draft=bool(data.get("draft", draft)),
        )

    # -- Read-only listings (raw GitHub JSON) ---------------------------------------

    def list_repositories(self) -> list[Any]:
        payload = self._get_json(
            self._api_url("user/repos"), params={"sort": "updated", "per_page": 100}
        )
        return payload if isinstance(payload, list) else []

    def get_repository(self, *, repository: str) -> dict[str, Any]:
        data: dict[str, Any] = self._get_json(self._repo_url(repository=repository, path=""))
        return data

    def list_branches(self, *, repository: str) -> list[Any]:
        return self._get_paginated_json_list(self._repo_url(repository=repository, path="branches"))

    def list_contributors(self, *, repository: str) -> list[Any]:
        return self._get_paginated_json_list(
            self._repo_url(repository=repository, path="contributors")
        )

    def list_commits(self, *, repository: str, page: int = 1, per_page: int = 10) -> list[Any]:
        payload = self._get_json(
            self._repo_url(repository=repository, path="commits"),
            params={"page": page, "per_page": per_page},
        )
        return payload if isinstance(payload, list) else []

    def list_issues(self, *, repository: str) -> list[Any]:
        return self._get_paginated_json_list(
            self._repo_url(repository=repository, path="issues"), params={"state": "all"}
        )

    def list_pull_requests(self, *, repository: str) -> list[Any]:
        return self._get_paginated_json_list(
            self._repo_url(repository=repository, path="pulls"), params={"state": "all"}
        )

    def close(self) -> None:
        self._session.close()
        self._github.close()
