"""Command-line interface for Mail Search.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import sys

import structlog

from mail_search import __version__
from mail_search.config import Settings, get_settings
from mail_search.exceptions import MailSearchError
from mail_search.models import Folder
from mail_search.search import build_filter
from mail_search.service import MailSearchService, StaticSessionResolver
from mail_search.store import ThreadRepository, build_engine
from mail_search.utils import configure_logging

logger = structlog.get_logger()


def _add_owner_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--session-token",
        default=None,
        help="Session token identifying the mailbox owner (default: settings cli_session_token)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mail-search", description="Mail Search")
    subparsers = parser.add_subparsers(dest="command", required=True)

    db_parser = subparsers.add_parser("db", help="Manage the mail database")
    db_sub = db_parser.add_subparsers(dest="db_command", required=True)
    db_sub.add_parser("init", help="Create the mail schema if missing")

    search_parser = subparsers.add_parser("search", help="Ranked search over your mail")
    search_parser.add_argument("query", help="Free-text query")
    search_parser.add_argument("--folder", choices=[f.value for f in Folder], default=None)
    search_parser.add_argument("--sender", default=None, help="Sender name/address substring")
    search_parser.add_argument(
        "--has-attachments",
        choices=["true", "false"],
        default=None,
        help="Require threads with (true) or without (false) attachments",
    )
    search_parser.add_argument("--sensitivity", default=None, help="Required sensitivity")
    search_parser.add_argument("--start-date", default=None, help="ISO-8601 lower bound")
    search_parser.add_argument("--end-date", default=None, help="ISO-8601 upper bound")
    _add_owner_argument(search_parser)

    suggest_parser = subparsers.add_parser("suggest", help="Autocomplete a partial query")
    suggest_parser.add_argument("partial", help="Partial query (at least 2 characters)")
    _add_owner_argument(suggest_parser)

    stats_parser = subparsers.add_parser("stats", help="Show mailbox analytics")
    _add_owner_argument(stats_parser)

    threads_parser = subparsers.add_parser("threads", help="List or show threads")
    threads_sub = threads_parser.add_subparsers(dest="threads_command", required=True)
    list_parser = threads_sub.add_parser("list", help="List threads in a folder")
    list_parser.add_argument("--folder", choices=[f.value for f in Folder], default="inbox")
    _add_owner_argument(list_parser)
    show_parser = threads_sub.add_parser("show", help="Show one thread, oldest email first")
    show_parser.add_argument("thread_id", help="Thread ID")
    _add_owner_argument(show_parser)

    return parser


def _resolve_owner(args: argparse.Namespace, settings: Settings) -> str | None:
    token = args.session_token or settings.cli_session_token
    return StaticSessionResolver.from_settings(settings).resolve(token)


def _cmd_search(service: MailSearchService, owner: str | None, args: argparse.Namespace) -> int:
    filters = build_filter(
        folder=args.folder,
        sender=args.sender,
        has_attachments=args.has_attachments,
        sensitivity=args.sensitivity,
        start_date=args.start_date,
        end_date=args.end_date,
    )
    results = service.search(owner, args.query, filters)
    for r in results:
        date_part = r.thread.last_message_date.date().isoformat()
        print(f"{r.relevance:6.1f}\t{date_part}\t{r.thread.subject}")
        for highlight in r.highlights:
            print(f"\t\t{highlight}")

    if not results:
        print("No matching threads.")
    return 0


def _cmd_suggest(service: MailSearchService, owner: str | None, args: argparse.Namespace) -> int:
    for suggestion in service.suggest(owner, args.partial):
        print(suggestion)
    return 0


def _cmd_stats(service: MailSearchService, owner: str | None) -> int:
    summary = service.analytics(owner)
    print(f"Total emails: {summary.total_emails}")
    print(f"Total threads: {summary.total_threads}")
    print(f"Active in the last week: {summary.recent_activity}")

    print("\nTop senders:")
    for s in summary.top_senders:
        print(f"- {s.sender}: {s.count} emails")

    print("\nCommon topics:")
    for t in summary.common_topics:
        print(f"- {t.topic}: {t.count} threads")
    return 0


def _cmd_threads_list(service: MailSearchService, owner: str | None, folder: str) -> int:
    for thread in service.list_threads(owner, Folder(folder)):
        date_part = thread.last_message_date.date().isoformat()
        print(f"{thread.id}\t{date_part}\t{len(thread.emails)}\t{thread.subject}")
    return 0


def _cmd_threads_show(service: MailSearchService, owner: str | None, thread_id: str) -> int:
    thread = service.get_thread(owner, thread_id)
    print(f"Subject: {thread.subject}")
    for email in thread.emails:
        print(f"\n[{email.sent_at.isoformat()}] {email.sender.display}")
        print(email.body_snippet or email.body or "(no content)")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Mail Search CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()
    configure_logging(settings)

    logger.info("mail_search_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    try:
        repository = ThreadRepository(build_engine(settings))
        service = MailSearchService.from_settings(repository, settings)

        if parsed.command == "db":
            repository.initialize()
            print(f"Mail schema ready at {settings.database_url}")
            return 0

        owner = _resolve_owner(parsed, settings)
        if parsed.command == "search":
            return _cmd_search(service, owner, parsed)
        if parsed.command == "suggest":
            return _cmd_suggest(service, owner, parsed)
        if parsed.command == "stats":
            return _cmd_stats(service, owner)
        if parsed.command == "threads":
            if parsed.threads_command == "list":
                return _cmd_threads_list(service, owner, parsed.folder)
            if parsed.threads_command == "show":
                return _cmd_threads_show(service, owner, parsed.thread_id)
    except MailSearchError as e:
        logger.error("command_failed", command=parsed.command, error_type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.error("unknown_command", command=parsed.command)
    return 2


if __name__ == "__main__":
    sys.exit(main())
