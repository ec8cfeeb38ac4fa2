"""Issue tracker CLI entry point"""

import argparse
import logging
import sys
from typing import List, Optional

from .domain import TrackerError
from .service import IssueTrackerService
from .storage import RepositoryConfig, create_repository

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def init_store(config: RepositoryConfig) -> int:
    """Create (or open) the issue store and report where it lives"""
    with create_repository(config) as repository:
        issues = repository.list_issues()
    location = config.database_location() if config.backend != "dict" else "memory"
    print(f"Issue store ready at {location} ({len(issues)} issues)")
    return 0


def list_issues(
    config: RepositoryConfig,
    status: Optional[str] = None,
    user: Optional[str] = None,
    unassigned: bool = False,
) -> int:
    """Print issues, optionally filtered by status, author or missing assignee"""
    with create_repository(config) as repository:
        service = IssueTrackerService(repository)
        if unassigned:
            issues = service.list_unassigned()
        elif user:
            issues = service.find_by_user(user)
        else:
            issues = service.list_all()
        if status:
            wanted = {issue.id for issue in service.find_by_status(status)}
            issues = [issue for issue in issues if issue.id in wanted]

    if not issues:
        print("No issues found")
        return 0
    for issue in issues:
        assignee = issue.assigned_to or "-"
        tags = ",".join(issue.tag_names)
        print(f"#{issue.id}\t[{issue.status}]\t{issue.title}\t@{assignee}\t{tags}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(description="Issue tracker")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Init command
    subparsers.add_parser("init", help="Create the issue store if missing")

    # List command
    list_parser = subparsers.add_parser("list", help="List issues")
    list_parser.add_argument("--status", help="Only issues with this status")
    list_parser.add_argument("--user", help="Only issues authored by this user")
    list_parser.add_argument("--unassigned", action="store_true", help="Only unassigned issues")

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 1

    config = RepositoryConfig.from_env()
    try:
        if args.command == "init":
            return init_store(config)
        return list_issues(config, args.status, args.user, args.unassigned)
    except TrackerError as e:
        logger.error("Command %s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
