"""Exception hierarchy for github-manager.

All errors raised by the issue workflow inherit from :class:`GitHubManagerError`.
Remote failures are not wrapped by the client; they surface as
``requests.HTTPError`` or ``github.GithubException``.
"""

from __future__ import annotations


class GitHubManagerError(Exception):
    """Base exception for all github-manager errors."""


class InvalidProjectIdError(GitHubManagerError, ValueError):
    """Raised when a project identifier is not of the form 'owner/repo'."""


class MissingDefaultBranchError(GitHubManagerError):
    """Raised when a repository has neither a 'main' nor a 'master' branch."""

    def __init__(self, repository: str) -> None:
        self.repository = repository
        super().__init__(
            "Repository has no main branch. Please ensure the repository has at least "
            "one commit and a default branch (main or master)."
        )


class BranchNameExhaustedError(GitHubManagerError):
    """Raised when no free branch name was found within the attempt bound."""

    def __init__(self, base_name: str, attempts: int) -> None:
        self.base_name = base_name
        self.attempts = attempts
        super().__init__("Unable to generate unique branch name after multiple attempts")


class BranchAlreadyExistsError(GitHubManagerError):
    """Raised when creating a ref that already exists."""

    def __init__(self, branch: str) -> None:
        self.branch = branch
        super().__init__(f"Branch already exists: {branch}")


class IssueCreationError(GitHubManagerError):
    """Raised when the issue workflow aborts before the issue is fully created.

    Attributes:
        cause: The underlying exception.
    """

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        message = str(cause).strip() or type(cause).__name__
        super().__init__(f"Failed to create issue: {message}")
