# ruff: noqa: I001
"""Developer CLI for the ``notification_capture`` package.

Commands replay bank messages through the pipeline outside the device:

- ``parse``: run the parsing stages on one message and print the candidate.
- ``ingest``: replay a JSONL event log into a database or an in-memory store.
- ``init-db``: create the ``nc_transactions`` schema on a scratch database.

Environment variables (``DATABASE_URL`` and the ``NC_*`` overrides) are
loaded from a local ``.env`` with ``python-dotenv`` before any command runs.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer.models import OptionInfo

from .config import CaptureConfig, load_config
from .logging_setup import configure_logging, get_logger
from .models import CandidateTransaction, EventRecord, NotificationEvent, SourceKind

logger = get_logger("notification_capture.cli")


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Extract and deduplicate transactions from bank notifications and SMS.",
)

# Module-level option objects (ruff B008: no calls in parameter defaults).
CONFIG_OPTION: OptionInfo = typer.Option(
    "--config",
    help="JSON config file (falls back to NC_CONFIG_PATH, then defaults).",
    dir_okay=False,
)
EVENTS_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--events-path",
    help="JSONL event log: one {package,title,text,posted_at_ms} object per line.",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports a readable error
)


def _load_config_or_exit(config_path: Path | None) -> CaptureConfig:
    try:
        return load_config(config_path)
    except (OSError, ValueError) as e:  # ValidationError is a ValueError
        typer.echo(f"Error: invalid configuration: {e}", err=True)
        raise typer.Exit(2) from e


def candidate_to_dict(candidate: CandidateTransaction) -> dict[str, Any]:
    """JSON-ready view of a candidate (decimals as strings)."""

    return {
        "amount": str(candidate.amount),
        "currency": str(candidate.currency),
        "original_amount": (
            str(candidate.original_amount) if candidate.original_amount is not None else None
        ),
        "original_currency": (
            str(candidate.original_currency) if candidate.original_currency else None
        ),
        "type": str(candidate.type),
        "category": str(candidate.category),
        "category_name": candidate.category.display_name,
        "merchant": candidate.merchant,
        "description": candidate.description,
        "timestamp": candidate.timestamp,
        "source_kind": str(candidate.source_kind),
        "credits_earned": candidate.credits_earned,
    }


def _read_events(path: Path, config: CaptureConfig) -> tuple[list[NotificationEvent], int]:
    events: list[NotificationEvent] = []
    invalid = 0
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                record = EventRecord.model_validate_json(line)
            except ValidationError as e:
                invalid += 1
                logger.warning("%s:%d: skipping invalid event: %s", path, lineno, e)
                continue
            events.append(record.to_event(config))
    return events, invalid


@app.command("parse")
def parse_cmd(
    text: Annotated[str, typer.Argument(help="Message body as shown in the notification.")],
    *,
    title: str = typer.Option("", help="Notification title (SMS sender for SMS)."),
    source_kind: SourceKind = typer.Option(SourceKind.NOTIFICATION, case_sensitive=False),
    posted_at_ms: int = typer.Option(0, help="Event timestamp in epoch milliseconds."),
    config_path: Annotated[Path | None, CONFIG_OPTION] = None,
) -> None:
    """Print the candidate transaction parsed from one message as JSON."""

    from .pipeline import NotificationCapture
    from .storage import InMemoryTransactionStore

    config = _load_config_or_exit(config_path)
    capture = NotificationCapture(InMemoryTransactionStore(), config)
    event = NotificationEvent(
        source_package="cli",
        title=title,
        text=text,
        posted_at_ms=posted_at_ms,
        source_kind=source_kind,
    )
    candidate = capture.build_candidate(event)
    if candidate is None:
        typer.echo("No transaction found in message.", err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(candidate_to_dict(candidate), ensure_ascii=False, indent=2))


@app.command("ingest")
def ingest_cmd(
    events_path: Annotated[Path, EVENTS_PATH_OPTION],
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
    in_memory: bool = typer.Option(
        False, "--in-memory", help="Use a throwaway in-memory store instead of a database."
    ),
    create_schema: bool = typer.Option(
        False, help="Create missing tables first (SQLite/scratch databases)."
    ),
    concurrency: int | None = typer.Option(
        None, min=1, help="Events processed at once (defaults to config max_workers)."
    ),
    config_path: Annotated[Path | None, CONFIG_OPTION] = None,
) -> None:
    """Replay an event log through the full pipeline and print outcome counts."""

    from .pipeline import NotificationCapture
    from .service import CaptureService, summarize
    from .storage import InMemoryTransactionStore, SqlTransactionStore, TransactionStore

    config = _load_config_or_exit(config_path)

    if not events_path.is_file():
        typer.echo(f"Error: events file not found: {events_path}", err=True)
        raise typer.Exit(2)
    events, invalid = _read_events(events_path, config)

    url = database_url or os.getenv("DATABASE_URL")
    store: TransactionStore
    if in_memory or not url:
        store = InMemoryTransactionStore()
    else:
        sql_store = SqlTransactionStore(url)
        if create_schema:
            sql_store.create_schema()
        store = sql_store

    capture = NotificationCapture(store, config)
    with CaptureService(capture) as service:
        results = service.process_all(events, concurrency=concurrency)

    counts = summarize(results)
    counts["invalid"] = invalid
    for outcome, count in counts.items():
        typer.echo(f"{outcome}: {count}")


@app.command("init-db")
def init_db_cmd(
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Create the ``nc_transactions`` table (use Alembic for managed databases)."""

    from .storage import SqlTransactionStore

    url = database_url or os.getenv("DATABASE_URL")
    if not url:
        typer.echo("Error: DATABASE_URL is not set and --database-url was not given.", err=True)
        raise typer.Exit(2)
    SqlTransactionStore(url).create_schema()
    typer.echo("Schema ready.")


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m notification_capture.cli`
    app()
