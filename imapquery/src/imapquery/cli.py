"""imapquery command-line interface.

What:
  Provide a Typer application with three commands: ``count`` prints how many
  messages match a set of criteria, ``search`` prints one page of matches,
  and ``watch`` polls the mailbox and prints every newly arrived message.

Why:
  Operators debugging a mailbox (or a charset problem on a particular server)
  want to exercise the query pipeline without writing Python. Going through
  the same :class:`~imapquery.query.Query` facade keeps the CLI and library
  behaviour identical.

How:
  Every command loads the runtime configuration, opens an
  :class:`~imapquery.imap.ImapClient` from its ``imap`` block, builds a
  :class:`Query` from the criteria options, and runs it. Failures are logged
  through the ``imapquery.cli`` stdlib logger and mapped to exit code ``1``.

Interfaces:
  ``app`` (Typer application), ``count``, ``search``, ``watch``, ``main``.

Invariants & Safety:
  - Exit codes follow shell expectations (``0`` success, ``1`` failure).
  - Messages are always fetched in peek mode; the CLI never marks mail read.
"""
from __future__ import annotations

import logging
from typing import Optional

import typer

from .config import ConfigLoadError, FetchOrder, RuntimeConfig, load_runtime_config
from .errors import ImapQueryError
from .events import EventChannel, MessageNewEvent
from .imap.client import ImapClient, ImapConfig
from .query import Query

app = typer.Typer(help="Query and watch an IMAP mailbox")

LOGGER = logging.getLogger("imapquery.cli")


def _load(config_path: Optional[str]) -> RuntimeConfig:
    try:
        return load_runtime_config(config_path)
    except ConfigLoadError as exc:
        LOGGER.error("runtime_load_failed: %s", exc)
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _build_query(
    client: ImapClient,
    runtime: RuntimeConfig,
    *,
    unseen: bool,
    subject: Optional[str],
    sender: Optional[str],
    text: Optional[str],
    since: Optional[str],
    before: Optional[str],
    charset: Optional[str],
) -> Query:
    """Translate CLI criteria options into a :class:`Query`.

    No criteria at all selects every message.
    """

    query = Query(client, charset or "UTF-8", options=runtime.options)
    query.leave_unread()
    if unseen:
        query.unseen()
    if subject:
        query.subject(subject)
    if sender:
        query.from_(sender)
    if text:
        query.text(text)
    if since:
        query.since(since)
    if before:
        query.before(before)
    if not query.statements:
        query.all()
    return query


_CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to config.yaml")
_UNSEEN_OPTION = typer.Option(False, "--unseen", help="Only unread messages")
_SUBJECT_OPTION = typer.Option(None, "--subject", help="Subject contains")
_FROM_OPTION = typer.Option(None, "--from", help="Sender contains")
_TEXT_OPTION = typer.Option(None, "--text", help="Headers or body contain")
_SINCE_OPTION = typer.Option(None, "--since", help="Internal date on or after (e.g. 2024-01-31)")
_BEFORE_OPTION = typer.Option(None, "--before", help="Internal date before (e.g. 2024-01-31)")
_CHARSET_OPTION = typer.Option(None, "--charset", help="SEARCH charset (default UTF-8)")


@app.command("count")
def count(
    config_path: Optional[str] = _CONFIG_OPTION,
    unseen: bool = _UNSEEN_OPTION,
    subject: Optional[str] = _SUBJECT_OPTION,
    sender: Optional[str] = _FROM_OPTION,
    text: Optional[str] = _TEXT_OPTION,
    since: Optional[str] = _SINCE_OPTION,
    before: Optional[str] = _BEFORE_OPTION,
    charset: Optional[str] = _CHARSET_OPTION,
) -> None:
    """Print the number of messages matching the criteria."""

    runtime = _load(config_path)
    try:
        with ImapClient(ImapConfig.from_settings(runtime.imap)) as client:
            query = _build_query(
                client,
                runtime,
                unseen=unseen,
                subject=subject,
                sender=sender,
                text=text,
                since=since,
                before=before,
                charset=charset,
            )
            total = query.count()
    except ImapQueryError as exc:
        LOGGER.error("count_failed: %s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(str(total))


@app.command("search")
def search(
    config_path: Optional[str] = _CONFIG_OPTION,
    page: int = typer.Option(1, "--page", min=1, help="Page number (1-based)"),
    limit: int = typer.Option(10, "--limit", min=1, help="Messages per page"),
    desc: bool = typer.Option(False, "--desc", help="Newest first"),
    unseen: bool = _UNSEEN_OPTION,
    subject: Optional[str] = _SUBJECT_OPTION,
    sender: Optional[str] = _FROM_OPTION,
    text: Optional[str] = _TEXT_OPTION,
    since: Optional[str] = _SINCE_OPTION,
    before: Optional[str] = _BEFORE_OPTION,
    charset: Optional[str] = _CHARSET_OPTION,
) -> None:
    """Print one page of matching messages as ``key<TAB>subject`` lines."""

    runtime = _load(config_path)
    try:
        with ImapClient(ImapConfig.from_settings(runtime.imap)) as client:
            query = _build_query(
                client,
                runtime,
                unseen=unseen,
                subject=subject,
                sender=sender,
                text=text,
                since=since,
                before=before,
                charset=charset,
            )
            query.set_fetch_body(False).set_fetch_attachments(False)
            if desc:
                query.set_fetch_order(FetchOrder.DESC)
            result = query.paginate(per_page=limit, page=page)
    except ImapQueryError as exc:
        LOGGER.error("search_failed: %s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    for key, message in result.items.items():
        typer.echo(f"{key}\t{message.subject}")
    typer.echo(f"page {result.current_page}/{result.last_page} ({result.total} total)")


@app.command("watch")
def watch(
    config_path: Optional[str] = _CONFIG_OPTION,
    interval: Optional[float] = typer.Option(None, "--interval", help="Override polling interval in seconds"),
    iterations: Optional[int] = typer.Option(None, "--iterations", min=1, help="Stop after this many polls"),
) -> None:
    """Poll the mailbox and print each message that arrives."""

    runtime = _load(config_path)
    interval_s = interval if interval is not None else runtime.idle.interval_s
    events = EventChannel()

    def _announce(event: MessageNewEvent) -> None:
        message = event.message
        typer.echo(f"new\t{message.uid}\t{message.subject}")

    events.subscribe(MessageNewEvent, _announce)
    LOGGER.info("watch_started interval=%s mailbox=%s", interval_s, runtime.imap.mailbox)
    try:
        with ImapClient(ImapConfig.from_settings(runtime.imap)) as client:
            query = Query(client, options=runtime.options, events=events)
            query.leave_unread().set_fetch_body(False).set_fetch_attachments(False)
            watcher = query.idle(interval=interval_s, max_iterations=iterations)
    except ImapQueryError as exc:
        LOGGER.error("watch_failed: %s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except KeyboardInterrupt:
        LOGGER.info("watch_interrupted")
        return
    LOGGER.info("watch_finished known=%s", len(watcher.known_uids))


def main() -> None:
    """Execute the Typer application entry point."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
