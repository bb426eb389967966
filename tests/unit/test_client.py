"""Unit tests for the GitHub client wrapper (no network)."""

from __future__ import annotations

import base64
from types import SimpleNamespace
from typing import Any
from unittest.mock import Mock

import pytest
import requests

from github_manager.errors import BranchAlreadyExistsError
from github_manager.manager.github.client import GitHubClient, GitCommit, TreeEntry


def _response(status_code: int = 200, payload: Any = None) -> Mock:
    resp = Mock(spec=requests.Response)
    resp.status_code = status_code
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    else:
        resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def session() -> requests.Session:
    s = requests.Session()
    s.get = Mock()  # type: ignore[method-assign]
    s.post = Mock()  # type: ignore[method-assign]
    s.patch = Mock()  # type: ignore[method-assign]
    s.close = Mock()  # type: ignore[method-assign]
    return s


@pytest.fixture
def github_api() -> Mock:
    return Mock()


@pytest.fixture
def client(session: requests.Session, github_api: Mock) -> GitHubClient:
    return GitHubClient(
        token="test-token",
        base_url="https://api.github.com/",
        github_api=github_api,
        session=session,
    )


def test_token_is_required() -> None:
    with pytest.raises(ValueError):
        GitHubClient(token="", github_api=Mock(), session=requests.Session())


def test_session_carries_bearer_token(client: GitHubClient, session: requests.Session) -> None:
    assert session.headers["Authorization"] == "Bearer test-token"
    assert session.headers["Accept"] == "application/vnd.github+json"


def test_repo_url_has_no_trailing_slash(client: GitHubClient) -> None:
    assert (
        client._repo_url(repository="acme/widgets/", path="")
        == "https://api.github.com/repos/acme/widgets"
    )
    assert (
        client._repo_url(repository="acme/widgets", path="/issues")
        == "https://api.github.com/repos/acme/widgets/issues"
    )


def test_get_branch_ref_returns_sha(client: GitHubClient, session: Mock) -> None:
    session.get.return_value = _response(payload={"object": {"sha": "abc123"}})

    assert client.get_branch_ref(repository="acme/widgets", branch="main") == "abc123"
    assert session.get.call_args.args[0] == (
        "https://api.github.com/repos/acme/widgets/git/ref/heads/main"
    )


def test_get_branch_ref_missing_branch_is_none(client: GitHubClient, session: Mock) -> None:
    session.get.return_value = _response(status_code=404)

    assert client.get_branch_ref(repository="acme/widgets", branch="nope") is None


def test_get_branch_ref_propagates_other_errors(client: GitHubClient, session: Mock) -> None:
    session.get.return_value = _response(status_code=500)

    with pytest.raises(requests.HTTPError):
        client.get_branch_ref(repository="acme/widgets", branch="main")


def test_create_branch_ref_posts_full_ref(client: GitHubClient, session: Mock) -> None:
    session.post.return_value = _response(
        status_code=201, payload={"ref": "refs/heads/task/x", "object": {"sha": "abc"}}
    )

    data = client.create_branch_ref(repository="acme/widgets", branch="task/x", sha="abc")

    assert data["ref"] == "refs/heads/task/x"
    assert session.post.call_args.kwargs["json"] == {"ref": "refs/heads/task/x", "sha": "abc"}


def test_create_branch_ref_conflict_raises(client: GitHubClient, session: Mock) -> None:
    session.post.return_value = _response(status_code=422, payload={"message": "exists"})

    with pytest.raises(BranchAlreadyExistsError) as excinfo:
        client.create_branch_ref(repository="acme/widgets", branch="task/x", sha="abc")

    assert excinfo.value.branch == "task/x"


def test_create_branch_from_uses_base_head(client: GitHubClient, session: Mock) -> None:
    session.get.return_value = _response(payload={"object": {"sha": "dev-sha"}})
    session.post.return_value = _response(status_code=201, payload={"ref": "refs/heads/x"})

    client.create_branch_from(repository="acme/widgets", branch="x", base_branch="develop")

    assert session.get.call_args.args[0].endswith("/git/ref/heads/develop")
    assert session.post.call_args.kwargs["json"] == {"ref": "refs/heads/x", "sha": "dev-sha"}


def test_create_branch_from_missing_base(client: GitHubClient, session: Mock) -> None:
    session.get.return_value = _response(status_code=404)

    with pytest.raises(ValueError, match="Base branch not found"):
        client.create_branch_from(repository="acme/widgets", branch="x")

    session.post.assert_not_called()


def test_git_data_calls(client: GitHubClient, session: Mock) -> None:
    session.get.return_value = _response(payload={"sha": "c1", "tree": {"sha": "t1"}})
    assert client.get_commit(repository="acme/widgets", sha="c1") == GitCommit("c1", "t1")

    session.post.return_value = _response(status_code=201, payload={"sha": "b1"})
    assert client.create_blob(repository="acme/widgets", content="héllo") == "b1"
    blob_payload = session.post.call_args.kwargs["json"]
    assert blob_payload["encoding"] == "base64"
    assert base64.b64decode(blob_payload["content"]).decode("utf-8") == "héllo"

    session.post.return_value = _response(status_code=201, payload={"sha": "t2"})
    sha = client.create_tree(
        repository="acme/widgets", base_tree="t1", entries=[TreeEntry(path="A.md", sha="b1")]
    )
    assert sha == "t2"
    assert session.post.call_args.kwargs["json"] == {
        "base_tree": "t1",
        "tree": [{"path": "A.md", "mode": "100644", "type": "blob", "sha": "b1"}],
    }

    session.post.return_value = _response(status_code=201, payload={"sha": "c2"})
    assert (
        client.create_commit(repository="acme/widgets", message="m", tree="t2", parents=["c1"])
        == "c2"
    )

    session.patch.return_value = _response()
    client.update_branch_ref(repository="acme/widgets", branch="task/x", sha="c2")
    assert session.patch.call_args.args[0].endswith("/git/refs/heads/task/x")
    assert session.patch.call_args.kwargs["json"] == {"sha": "c2", "force": False}


def test_missing_sha_in_response_is_an_error(client: GitHubClient, session: Mock) -> None:
    session.post.return_value = _response(status_code=201, payload={})

    with pytest.raises(ValueError, match="missing sha"):
        client.create_blob(repository="acme/widgets", content="x")


def test_create_issue_uses_pygithub(client: GitHubClient, github_api: Mock) -> None:
    repo = Mock()
    repo.create_issue.return_value = SimpleNamespace(
        number=7,
        title="Hello",
        html_url="https://github.com/acme/widgets/issues/7",
        state="open",
        labels=[SimpleNamespace(name="task"), SimpleNamespace(name="low")],
        assignees=[SimpleNamespace(login="alice")],
        created_at=None,
    )
    github_api.get_repo.return_value = repo

    issue = client.create_issue(
        repository="acme/widgets",
        title="Hello",
        body=None,
        labels=["task", "low"],
        assignees=["alice"],
    )

    github_api.get_repo.assert_called_once_with("acme/widgets")
    repo.create_issue.assert_called_once_with(
        title="Hello", body="", labels=["task", "low"], assignees=["alice"]
    )
    assert issue.number == 7
    assert issue.labels == ["task", "low"]
    assert issue.assignees == ["alice"]


def test_create_issue_requires_title(client: GitHubClient, github_api: Mock) -> None:
    with pytest.raises(ValueError):
        client.create_issue(
            repository="acme/widgets", title="  ", body="", labels=None, assignees=None
        )
    github_api.get_repo.assert_not_called()


def test_update_issue_title_parses_response(client: GitHubClient, session: Mock) -> None:
    session.patch.return_value = _response(
        payload={
            "number": 7,
            "title": "[ACME-7] Hello",
            "state": "open",
            "html_url": "https://github.com/acme/widgets/issues/7",
            "labels": [{"name": "task"}],
            "assignees": [{"login": "alice"}],
        }
    )

    issue = client.update_issue_title(repository="acme/widgets", issue_number=7, title="[ACME-7] Hello")

    assert session.patch.call_args.kwargs["json"] == {"title": "[ACME-7] Hello"}
    assert issue.title == "[ACME-7] Hello"
    assert issue.labels == ["task"]
    assert issue.assignees == ["alice"]


def test_create_pull_request_as_draft(client: GitHubClient, session: Mock) -> None:
    session.post.return_value = _response(
        status_code=201,
        payload={
            "number": 8,
            "html_url": "https://github.com/acme/widgets/pull/8",
            "title": "[ACME-7] Hello",
            "draft": True,
        },
    )

    pr = client.create_pull_request(
        repository="acme/widgets", title="[ACME-7] Hello", body="Closes #7", head="task/hello", base="main"
    )

    assert session.post.call_args.kwargs["json"] == {
        "title": "[ACME-7] Hello",
        "body": "Closes #7",
        "head": "task/hello",
        "base": "main",
        "draft": True,
    }
    assert pr.number == 8
    assert pr.draft is True


def test_get_authenticated_user_defaults(client: GitHubClient, github_api: Mock) -> None:
    github_api.get_user.return_value = SimpleNamespace(
        id=99, login="alice", avatar_url=None, name=None, email=None
    )

    user = client.get_authenticated_user()

    assert user.id == "99"
    assert user.name == "alice"
    assert user.email == ""
    assert user.avatar_url == ""


def test_paginated_listing_follows_pages(client: GitHubClient, session: Mock) -> None:
    session.get.side_effect = [
        _response(payload=[{"name": f"b{i}"} for i in range(100)]),
        _response(payload=[{"name": "last"}]),
    ]

    branches = client.list_branches(repository="acme/widgets")

    assert len(branches) == 101
    assert [c.kwargs["params"]["page"] for c in session.get.call_args_list] == [1, 2]


def test_list_issues_requests_all_states(client: GitHubClient, session: Mock) -> None:
    session.get.return_value = _response(payload=[])

    assert client.list_issues(repository="acme/widgets") == []
    assert session.get.call_args.kwargs["params"]["state"] == "all"


def test_list_commits_passes_paging(client: GitHubClient, session: Mock) -> None:
    session.get.return_value = _response(payload=[{"sha": "c1"}])

    assert client.list_commits(repository="acme/widgets", page=2, per_page=5) == [{"sha": "c1"}]
    assert session.get.call_args.kwargs["params"] == {"page": 2, "per_page": 5}


def test_close_releases_both_transports(
    client: GitHubClient, session: Mock, github_api: Mock
) -> None:
    client.close()

    session.close.assert_called_once()
    github_api.close.assert_called_once()
