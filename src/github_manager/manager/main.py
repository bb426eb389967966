"""CLI entrypoint.

- `create-issue`: run the issue workflow with the token from `.env`
- `serve`: run the REST API with uvicorn
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from github_manager import __version__
from github_manager.errors import IssueCreationError
from github_manager.manager.config import ManagerSettings
from github_manager.manager.github.client import GitHubClient
from github_manager.manager.github.issue_workflow import IssueCreationRequest, IssueWorkflow
from github_manager.manager.logging import configure_logging

logger = logging.getLogger(__name__)


def _parse_csv(value: str | None) -> list[str]:
    if value is None:
        return []
    return [p.strip() for p in value.split(",") if p.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-manager",
        description="Create GitHub issues with a branch, tracking commit and draft PR",
    )
    parser.add_argument("--version", action="version", version=f"github-manager {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    create_issue = subparsers.add_parser(
        "create-issue", help="Create an issue, its branch and a draft pull request"
    )
    create_issue.add_argument(
        "--repo",
        "--project",
        dest="project_id",
        required=True,
        help="Target repository in the form 'owner/repo'",
    )
    create_issue.add_argument("--title", required=True, help="Issue title")
    create_issue.add_argument("--description", default=None, help="Issue description")
    create_issue.add_argument(
        "--type",
        dest="issue_type",
        default="TASK",
        type=str.upper,
        choices=["TASK", "FEATURE", "BUG", "EPIC"],
    )
    create_issue.add_argument(
        "--priority",
        default="MEDIUM",
        type=str.upper,
        choices=["LOW", "MEDIUM", "HIGH", "CRITICAL"],
    )
    create_issue.add_argument(
        "--reporter",
        default=None,
        help="Reporter login (defaults to the token's user)",
    )
    create_issue.add_argument(
        "--assignees", default=None, help="Comma-separated assignee logins (default: reporter)"
    )
    create_issue.add_argument("--labels", default=None, help="Comma-separated extra labels")
    create_issue.add_argument("--estimated-hours", type=float, default=None)
    create_issue.add_argument("--due-date", default=None, help="Due date (YYYY-MM-DD)")

    serve = subparsers.add_parser("serve", help="Run the REST API server")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT or 5000)")

    return parser


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from github_manager.server.app import create_app
    from github_manager.server.config import ServerSettings

    settings = ServerSettings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )
    return 0


def _create_issue(args: argparse.Namespace, settings: ManagerSettings) -> int:
    github = GitHubClient(token=settings.github_token, base_url=settings.github_base_url)
    try:
        reporter = args.reporter
        if reporter is None:
            try:
                reporter = github.get_authenticated_user().login
            except Exception as e:
                logger.error("Token verification failed", extra={"error": str(e)})
                print("Invalid token (check GITHUB_MANAGER_TOKEN):", file=sys.stderr)
                print(str(e) or type(e).__name__, file=sys.stderr)
                return 2
        try:
            request = IssueCreationRequest(
                project_id=args.project_id,
                title=args.title,
                description=args.description,
                type=args.issue_type,
                priority=args.priority,
                reporter_id=reporter,
                assignee_ids=_parse_csv(args.assignees),
                labels=_parse_csv(args.labels),
                estimated_hours=args.estimated_hours,
                due_date=args.due_date,
            )
        except ValidationError as e:
            print("Invalid issue request:", file=sys.stderr)
            print(e, file=sys.stderr)
            return 2

        workflow = IssueWorkflow(
            github=github,
            max_branch_attempts=settings.max_branch_attempts,
            web_url=settings.github_web_url,
        )
        try:
            result = workflow.create_issue_with_branch(request)
        except IssueCreationError as e:
            logger.error("Issue workflow failed", extra={"project_id": request.project_id})
            print(str(e), file=sys.stderr)
            return 1
    finally:
        github.close()

    print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        return _serve(args)

    try:
        settings = ManagerSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if args.command == "create-issue":
        return _create_issue(args, settings)

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
