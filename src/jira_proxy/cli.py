"""Jira proxy CLI interface."""

import argparse
import asyncio
import sys
from dataclasses import replace

from dotenv import load_dotenv

from .jira import JiraClient, JiraClientError, Transition
from .logging import setup_logging
from .models import ConfigError, ProxyConfig


def load_config() -> ProxyConfig:
    """Read settings from .env and the environment."""
    load_dotenv()
    return ProxyConfig.from_env()


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the HTTP proxy."""
    from .web import run

    config = args.config
    if not config.jira.is_configured():
        print(
            f"Jira not configured, missing: {', '.join(config.jira.missing())}",
            file=sys.stderr,
        )
        return 1

    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if overrides:
        config = replace(config, **overrides)

    run(config, reload=args.reload)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Check the Jira credentials."""

    async def test_connection():
        async with JiraClient(args.config.jira) as client:
            return await client.test_connection()

    success, message = asyncio.run(test_connection())
    print(message)
    return 0 if success else 1


def cmd_tasks(args: argparse.Namespace) -> int:
    """List the issues of a project."""

    async def fetch_tasks():
        async with JiraClient(args.config.jira) as client:
            return await client.fetch_tasks(args.project, args.status)

    issues = asyncio.run(fetch_tasks())
    if not issues:
        print(f"No tasks found in {args.project}.")
        return 0

    for issue in issues:
        fields = issue.get("fields", {})
        status = (fields.get("status") or {}).get("name", "?")
        print(f"{issue.get('key')}  [{status}]  {fields.get('summary', '')}")
    return 0


def cmd_transitions(args: argparse.Namespace) -> int:
    """List the transitions available on an issue."""

    async def get_transitions():
        async with JiraClient(args.config.jira) as client:
            return await client.get_transitions(args.issue)

    transitions = [Transition.from_api_response(t) for t in asyncio.run(get_transitions())]
    if not transitions:
        print(f"No transitions available for {args.issue}.")
        return 0

    for t in transitions:
        print(f"{t.id}  {t.name} -> {t.to.name}")
    return 0


def cmd_projects(args: argparse.Namespace) -> int:
    """List the projects visible to the configured account."""

    async def get_projects():
        async with JiraClient(args.config.jira) as client:
            return await client.get_projects()

    for project in asyncio.run(get_projects()):
        print(f"{project.get('key')}  {project.get('name', '')}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="jira-proxy",
        description="Simplified REST proxy in front of the Jira API",
    )
    parser.add_argument(
        "--log-level", help="Log level (overrides JIRA_PROXY_LOG_LEVEL)"
    )
    subparsers = parser.add_subparsers(dest="command")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the HTTP proxy")
    serve_parser.add_argument("--host", help="Bind address (default: HOST or 127.0.0.1)")
    serve_parser.add_argument("--port", "-p", type=int, help="Port (default: PORT or 3001)")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes"
    )

    # check
    subparsers.add_parser("check", help="Verify the Jira credentials")

    # tasks
    tasks_parser = subparsers.add_parser("tasks", help="List the issues of a project")
    tasks_parser.add_argument("project", help="Project key (e.g., PROJ)")
    tasks_parser.add_argument("--status", "-s", default="Open", help="Status (default: Open)")

    # transitions
    transitions_parser = subparsers.add_parser(
        "transitions", help="List the transitions of an issue"
    )
    transitions_parser.add_argument("issue", help="Issue key (e.g., PROJ-123)")

    # projects
    subparsers.add_parser("projects", help="List visible projects")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        args.config = load_config()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(args.log_level or args.config.log_level, args.config.log_dir)

    # Dispatch to command handlers
    handlers = {
        "serve": cmd_serve,
        "check": cmd_check,
        "tasks": cmd_tasks,
        "transitions": cmd_transitions,
        "projects": cmd_projects,
    }

    handler = handlers.get(args.command)
    if not handler:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except (ConfigError, JiraClientError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
