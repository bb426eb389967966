"""GitHub Manager.

Creates GitHub issues together with a dedicated branch, a tracking commit and a draft
pull request, and proxies read-only repository listings for the web dashboard.
"""

__version__ = "1.0.0"

from github_manager.manager.github.issue_workflow import (
    CreationOutcome,
    CreationResult,
    IssueCreationRequest,
    IssueWorkflow,
)

__all__ = [
    "__version__",
    "CreationOutcome",
    "CreationResult",
    "IssueCreationRequest",
    "IssueWorkflow",
]
