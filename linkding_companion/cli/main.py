"""Command-line entry point.

Usage:
    python -m linkding_companion run
    python -m linkding_companion sync [--limit N]
    python -m linkding_companion list [--limit N] [--offset N] [-q QUERY]
    python -m linkding_companion enrich {autotag,readability,summarize,search} BOOKMARK_ID
    python -m linkding_companion events BOOKMARK_ID
    python -m linkding_companion status
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from linkding_companion.adapters.content import build_extractor
from linkding_companion.adapters.linkding import LinkdingClient, LinkdingError, UnconfiguredError
from linkding_companion.adapters.llm import OpenAIChatClient
from linkding_companion.adapters.search import BraveSearchClient
from linkding_companion.config import load_config
from linkding_companion.core.logging_utils import generate_correlation_id, setup_json_logging
from linkding_companion.db.session import DatabaseSessionManager
from linkding_companion.infrastructure.persistence.sqlite.repositories import (
    SqliteEventLogRepository,
)
from linkding_companion.pipeline.context import TaskContext
from linkding_companion.pipeline.graph import BOOKMARK_TASKS
from linkding_companion.pipeline.sync_sweep import run_sync_sweep
from linkding_companion.services.dispatcher import AsyncioTaskDispatcher
from linkding_companion.services.scheduler import SchedulerService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from linkding_companion.config import AppConfig

logger = logging.getLogger("linkding_companion.cli")


@dataclass
class Runtime:
    cfg: AppConfig
    db: DatabaseSessionManager
    events: SqliteEventLogRepository
    dispatcher: AsyncioTaskDispatcher
    context: TaskContext


def open_event_log(cfg: AppConfig) -> tuple[DatabaseSessionManager, SqliteEventLogRepository]:
    db = DatabaseSessionManager(
        cfg.runtime.db_path, operation_timeout=cfg.runtime.db_operation_timeout_sec
    )
    db.migrate()
    return db, SqliteEventLogRepository(db)


@asynccontextmanager
async def open_runtime(cfg: AppConfig) -> AsyncIterator[Runtime]:
    """Wire every collaborator once and tear them down on exit.

    Raises:
        UnconfiguredError: If linkding host or API key is missing.
        RuntimeError: If no chat-completion API key is configured.
    """
    if not cfg.openai.api_key:
        msg = "OPENAI_API_KEY is required to run enrichment tasks"
        raise RuntimeError(msg)

    db, events = open_event_log(cfg)
    dispatcher = AsyncioTaskDispatcher(cfg.dispatcher, cfg.pipeline)
    chat = OpenAIChatClient.from_config(cfg.openai)
    try:
        async with LinkdingClient.from_config(cfg.linkding) as linkding:
            context = TaskContext(
                linkding=linkding,
                events=events,
                dispatcher=dispatcher,
                chat=chat,
                extractor=build_extractor(cfg.content),
                search=BraveSearchClient.from_config(cfg.search),
                pipeline=cfg.pipeline,
                content=cfg.content,
            )
            dispatcher.bind(context)
            yield Runtime(cfg, db, events, dispatcher, context)
    finally:
        await chat.aclose()
        db.close()


def _print_dispatcher_stats(dispatcher: AsyncioTaskDispatcher) -> None:
    stats = dispatcher.stats()
    outcomes = ", ".join(f"{k}={v}" for k, v in sorted(stats["outcomes"].items())) or "none"
    failed = ", ".join(f"{k}={v}" for k, v in sorted(stats["failed"].items())) or "none"
    print(f"Jobs: {outcomes}")
    print(f"Failed: {failed}")


async def cmd_run(cfg: AppConfig, args: argparse.Namespace) -> int:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    async with open_runtime(cfg) as runtime:
        scheduler = SchedulerService(cfg.pipeline, runtime.dispatcher)
        await scheduler.start()
        logger.info(
            "worker_started",
            extra={"next_sync": str(scheduler.get_next_run_time())},
        )
        try:
            await stop.wait()
        finally:
            await scheduler.stop()
            logger.info("worker_draining", extra={"pending": runtime.dispatcher.pending})
            await runtime.dispatcher.drain()
    logger.info("worker_stopped")
    return 0


async def cmd_sync(cfg: AppConfig, args: argparse.Namespace) -> int:
    correlation_id = generate_correlation_id()
    async with open_runtime(cfg) as runtime:
        result = await run_sync_sweep(
            runtime.context, limit=args.limit, correlation_id=correlation_id
        )
        await runtime.dispatcher.drain()

    print("\n=== Linkding Sync Summary ===")
    print(f"Scanned: {result.scanned} of {result.total_count} bookmarks")
    print(f"New: {result.submitted}")
    print(f"Already seen: {result.skipped_seen}")
    print(f"Archived: {result.skipped_archived}")
    print(f"Duration: {result.duration_seconds:.1f}s")
    _print_dispatcher_stats(runtime.dispatcher)
    return 1 if runtime.dispatcher.failed else 0


async def cmd_list(cfg: AppConfig, args: argparse.Namespace) -> int:
    params: dict[str, Any] = {"limit": args.limit, "offset": args.offset}
    if args.query:
        params["q"] = args.query

    async with LinkdingClient.from_config(cfg.linkding) as client:
        collection = client.list_bookmarks(params)
        bookmarks = await collection.first_page()

    for bookmark in bookmarks:
        flags = " [archived]" if bookmark.is_archived else ""
        tags = " ".join(f"#{tag}" for tag in bookmark.tag_names)
        print(f"{bookmark.id:>6}  {bookmark.title or '(no title)'}{flags}")
        print(f"        {bookmark.url}")
        if tags:
            print(f"        {tags}")
    shown_to = args.offset + len(bookmarks)
    print(f"\nShowing {args.offset + 1 if bookmarks else 0}-{shown_to} of {collection.total_count}")
    return 0


async def cmd_enrich(cfg: AppConfig, args: argparse.Namespace) -> int:
    async with open_runtime(cfg) as runtime:
        await runtime.dispatcher.submit(args.task, args.bookmark_id)
        await runtime.dispatcher.drain()
    _print_dispatcher_stats(runtime.dispatcher)
    return 1 if runtime.dispatcher.failed else 0


async def cmd_events(cfg: AppConfig, args: argparse.Namespace) -> int:
    db, events = open_event_log(cfg)
    try:
        history = await events.list_for_bookmark(args.bookmark_id)
    finally:
        db.close()

    if not history:
        print(f"No events for bookmark {args.bookmark_id}")
        return 0
    for event in history:
        extra = event.extra.model_dump(mode="json")
        extra.pop("snapshot", None)
        print(
            f"{event.created_at.isoformat() if event.created_at else '-'}  "
            f"{event.action.value:<22} occurred_at={event.occurred_at.isoformat()}  "
            f"{json.dumps(extra, ensure_ascii=False)}"
        )
    return 0


async def cmd_status(cfg: AppConfig, args: argparse.Namespace) -> int:
    db, events = open_event_log(cfg)
    try:
        stats = await events.stats()
    finally:
        db.close()
    print(json.dumps(stats, indent=2, default=str))
    return 0


COMMANDS = {
    "run": cmd_run,
    "sync": cmd_sync,
    "list": cmd_list,
    "enrich": cmd_enrich,
    "events": cmd_events,
    "status": cmd_status,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkding-companion",
        description="Enrich linkding bookmarks with tags, readable content and summaries",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("run", help="Run the worker: periodic sync plus enrichment jobs")

    sync = sub.add_parser("sync", help="Run one sync sweep and wait for all resulting jobs")
    sync.add_argument("--limit", type=int, default=None, help="Maximum new bookmarks to process")

    listing = sub.add_parser("list", help="Print one page of bookmarks")
    listing.add_argument("--limit", type=int, default=20)
    listing.add_argument("--offset", type=int, default=0)
    listing.add_argument("-q", "--query", default=None, help="linkding search query")

    enrich = sub.add_parser("enrich", help="Run one task (and its follow-ups) for a bookmark")
    enrich.add_argument("task", choices=[task.value for task in BOOKMARK_TASKS])
    enrich.add_argument("bookmark_id", type=int)

    events = sub.add_parser("events", help="Print a bookmark's event history")
    events.add_argument("bookmark_id", type=int)

    sub.add_parser("status", help="Print event log statistics")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config()
    except RuntimeError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    setup_json_logging(
        level=cfg.runtime.log_level,
        log_format=cfg.runtime.log_format,
        log_file=cfg.runtime.log_file,
    )

    try:
        return asyncio.run(COMMANDS[args.command](cfg, args))
    except UnconfiguredError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except (LinkdingError, RuntimeError) as e:
        logger.exception("command_failed", extra={"command": args.command})
        print(f"\nERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
