"""Relayboard CLI — run the server and poke at it from a terminal.

Usage:
    relayboard serve --port 3000                 # Run the API + dashboard
    relayboard messages 12345 --size 10          # Page through stored events
    relayboard send-event event.json             # POST an event to the webhook
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

from relayboard.services.webhook_service import SIGNATURE_HEADER, WebhookService

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:3000"


def _api_url() -> str:
    return os.environ.get("RELAYBOARD_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client that authenticates with the API key."""
    headers = {}
    api_key = os.environ.get("RELAYBOARD_API_KEY")
    if api_key:
        headers["X-API-Key"] = api_key
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. Click's CliRunner inside an async test)
    by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="relayboard")
def main():
    """Relayboard — live webhook event feed with an operator dashboard."""


# ---------------------------------------------------------------------------
# relayboard serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: RELAYBOARD_HOST or 0.0.0.0)")
@click.option("--port", "-p", type=int, default=None, help="Port (default: RELAYBOARD_PORT or 3000)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP + WebSocket server with uvicorn."""
    import uvicorn

    from relayboard.config import settings

    bind_host = host or settings.host
    bind_port = port or settings.port
    click.secho(f"Relayboard listening on http://{bind_host}:{bind_port}", fg="cyan")
    click.echo(f"Live events at ws://{bind_host}:{bind_port}/ws/live-events")
    uvicorn.run(
        "relayboard.main:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level="info",
    )


# ---------------------------------------------------------------------------
# relayboard messages
# ---------------------------------------------------------------------------


@main.command()
@click.argument("user_id")
@click.option("--size", "-s", default=25, help="Page size (1-25)")
@click.option("--cursor", "-c", default=0, help="Number of newer events to skip")
@click.option("--json", "as_json", is_flag=True, help="Print the raw JSON response")
def messages(user_id: str, size: int, cursor: int, as_json: bool):
    """List stored events for USER_ID, newest first."""
    _run(_messages_impl(user_id, size, cursor, as_json))


async def _messages_impl(user_id: str, size: int, cursor: int, as_json: bool):
    async with _client() as c:
        r = await c.get("/api/messages", params={
            "user_id": user_id,
            "size": size,
            "cursor": cursor,
        })
        if r.status_code == 401:
            _fail("unauthorized — set RELAYBOARD_API_KEY")
        if r.status_code == 400:
            _fail(r.json().get("detail", "bad request"))
        r.raise_for_status()
        page = r.json()

    if as_json:
        click.echo(_pretty_json(page))
        return

    if not page["messages"]:
        click.echo("No messages found.")
        return

    click.secho(f"Messages for {user_id} ({page['count']}):", bold=True)
    for i, msg in enumerate(page["messages"], start=cursor + 1):
        kinds = ", ".join(k for k in msg if k != "for_user_id") or "—"
        click.echo(f"  #{i:<5d} {kinds[:70]}")
    if page.get("next_cursor") is not None:
        click.echo(f"\nMore: relayboard messages {user_id} --cursor {page['next_cursor']}")


# ---------------------------------------------------------------------------
# relayboard send-event
# ---------------------------------------------------------------------------


@main.command("send-event")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def send_event(path: Path):
    """POST the JSON event in PATH to the webhook callback.

    Signed with RELAYBOARD_TWITTER_CONSUMER_SECRET when it is set, as the
    server rejects unsigned events once it has a secret.
    """
    try:
        event = json.loads(path.read_text())
    except ValueError as e:
        _fail(f"{path} is not valid JSON: {e}")
    _run(_send_event_impl(event))


async def _send_event_impl(event: dict):
    body = json.dumps(event).encode()
    headers = {"Content-Type": "application/json"}
    secret = os.environ.get("RELAYBOARD_TWITTER_CONSUMER_SECRET")
    if secret:
        headers[SIGNATURE_HEADER] = WebhookService(secret).sign(body)

    async with _client() as c:
        r = await c.post("/webhooks/twitter", content=body, headers=headers)
        if r.status_code >= 400:
            _fail(f"webhook rejected event ({r.status_code}): {r.text}")
    click.secho("Event accepted", fg="green")
