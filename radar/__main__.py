"""CLI entrypoint: python -m radar {init-db|run|job <name>|stories|stats}."""

from __future__ import annotations

import asyncio
import logging
import logging.handlers
import os
import sys
from pathlib import Path

from radar.config import get_db_path, load_config
from radar.db import get_connection, get_latest_summaries, get_recent_runs, init_db
from radar.text import format_capability, truncate_text


def setup_logging(config: dict) -> None:
    """Configure logging with console + rotating file output."""
    root = logging.getLogger()
    root.setLevel(logging.INFO)

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    # File handler (rotate at 5MB, keep 3 backups)
    log_dir = Path(get_db_path(config)).parent
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        str(log_dir / "radar.log"), maxBytes=5 * 1024 * 1024, backupCount=3,
    )
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("trafilatura").setLevel(logging.WARNING)
    logging.getLogger("feedparser").setLevel(logging.WARNING)


def cmd_init_db(config: dict, args: list[str]) -> None:
    """Initialize the SQLite database."""
    db_path = get_db_path(config)
    init_db(db_path)
    print(f"Database initialized at {db_path}")


async def cmd_run(config: dict, args: list[str]) -> None:
    """Run the full pipeline."""
    from radar.pipeline import run_job

    init_db(get_db_path(config))
    run = await run_job(config, "full_pipeline")
    print(f"Pipeline run #{run.id}: {run.items_processed} items")


async def cmd_job(config: dict, args: list[str]) -> None:
    """Run a single job by name."""
    from radar.pipeline import JOBS, run_job

    if not args or args[0] not in JOBS:
        print(f"Usage: python -m radar job {{{', '.join(JOBS)}}}")
        sys.exit(1)

    init_db(get_db_path(config))
    run = await run_job(config, args[0])
    print(f"Job '{run.job_name}' run #{run.id}: {run.items_processed} items")


def cmd_stories(config: dict, args: list[str]) -> None:
    """List the latest story summaries, most urgent first."""
    limit = int(args[0]) if args else 20
    conn = get_connection(get_db_path(config))
    summaries = get_latest_summaries(conn, limit=limit)
    conn.close()

    if not summaries:
        print("No stories yet.")
        return

    for s in summaries:
        caps = ", ".join(format_capability(c) for c in s.ai_capabilities) or "none"
        print(
            f"[{s.priority}] {s.competitor or 'Unknown'} "
            f"({s.verification_status}, confidence {s.confidence_score}/5)"
        )
        print(f"    {truncate_text(s.summary, 160)}")
        print(f"    capabilities: {caps}")
        for citation in s.citations[:3]:
            print(f"    - {citation.url}")
        print()


def cmd_stats(config: dict, args: list[str]) -> None:
    """Show recent job run stats."""
    conn = get_connection(get_db_path(config))
    runs = get_recent_runs(conn, limit=10)
    conn.close()

    if not runs:
        print("No job runs yet.")
        return

    header = f"{'Run':>4} {'Job':<22} {'Status':<10} {'Items':>6}  {'Started'}"
    print(header)
    print("-" * 70)
    for r in runs:
        print(
            f"{r['id']:>4} {r['job_name']:<22} {r['status']:<10} "
            f"{r['items_processed']:>6}  {r['started_at']}"
        )
        if r["error_message"]:
            print(f"     error: {truncate_text(r['error_message'], 100)}")


COMMANDS = {
    "init-db": cmd_init_db,
    "run": cmd_run,
    "job": cmd_job,
    "stories": cmd_stories,
    "stats": cmd_stats,
}


def main() -> None:
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        available = ", ".join(COMMANDS)
        print(f"Usage: python -m radar {{{available}}}")
        sys.exit(1)

    command = sys.argv[1]
    config = load_config(os.environ.get("CONFIG_PATH", "config.yaml"))
    setup_logging(config)
    handler = COMMANDS[command]

    if asyncio.iscoroutinefunction(handler):
        asyncio.run(handler(config, sys.argv[2:]))
    else:
        handler(config, sys.argv[2:])


if __name__ == "__main__":
    main()
