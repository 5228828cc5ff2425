"""Huddle CLI — log in, browse workspaces and channels, watch live events.

Usage:
    huddle login you@example.com                 # Print an access token
    huddle workspaces                            # Workspaces you belong to
    huddle channels 3                            # Channels in workspace 3
    huddle create-channel 3 design --topic "UI"  # Create a channel
    huddle watch 3                               # Stream channel/message events

Set HUDDLE_API_URL (default http://localhost:8000) and HUDDLE_TOKEN
(from `huddle login`) in the environment.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Any, Optional

import click
import httpx

from huddle import __version__
from huddle.client.store import ChannelStore
from huddle.client.watcher import WatcherRejected, WorkspaceWatcher

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("HUDDLE_API_URL", DEFAULT_API_URL).rstrip("/")


def _token() -> Optional[str]:
    return os.environ.get("HUDDLE_TOKEN")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Huddle backend."""
    headers = {}
    token = _token()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Inside an already-running loop (e.g. CliRunner under an async test)
    the coroutine runs on a worker thread with its own loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(message: str):
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _check(r: httpx.Response) -> Any:
    """Return the JSON body, or exit with the API's error message."""
    if r.is_success:
        return r.json() if r.content else None
    try:
        detail = r.json().get("detail")
    except ValueError:
        detail = r.text
    if isinstance(detail, dict):
        detail = f"{detail.get('message')} ({detail.get('code')})"
    _fail(f"{r.status_code} {detail}")


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) if row.get(k) is not None else "-")[:w].ljust(w)
                         for _, k, w in columns)
        click.echo(line)


_EVENT_COLORS = {
    "CHANNEL_CREATED": "green",
    "CHANNEL_UPDATED": "cyan",
    "CHANNEL_ARCHIVED": "yellow",
    "MESSAGE_CREATED": "white",
}


def _format_event(event: dict) -> str:
    data = event.get("data") or {}
    kind = click.style(str(event.get("type")), fg=_EVENT_COLORS.get(event.get("type"), "white"))
    if "messageId" in data:
        return f"{kind}  #{data.get('channelId')}  user {data.get('userId')}: {data.get('content')}"
    return f"{kind}  #{data.get('name')} (id {data.get('channelId')})"


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="huddle")
def main():
    """Huddle — team messaging from the terminal."""


# ---------------------------------------------------------------------------
# huddle login
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
def login(email: str, password: str):
    """Log in and print an access token for HUDDLE_TOKEN."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/v1/auth/login", json={"email": email, "password": password})
        body = _check(r)
    user = body["user"]
    click.secho(f"Logged in as {user['display_name']} <{user['email']}>", fg="green", err=True)
    click.echo(body["access_token"])


# ---------------------------------------------------------------------------
# huddle workspaces
# ---------------------------------------------------------------------------


@main.command()
@click.option("--json-output", "as_json", is_flag=True, help="Print raw JSON")
def workspaces(as_json: bool):
    """List workspaces you are a member of."""
    _run(_workspaces_impl(as_json))


async def _workspaces_impl(as_json: bool):
    async with _client() as c:
        rows = _check(await c.get("/api/v1/workspaces"))
    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return
    if not rows:
        click.echo("No workspaces.")
        return
    _print_table(rows, [("ID", "id", 6), ("NAME", "name", 30), ("DESCRIPTION", "description", 40)])


# ---------------------------------------------------------------------------
# huddle channels
# ---------------------------------------------------------------------------


@main.command()
@click.argument("workspace_id", type=int)
@click.option("--archived", is_flag=True, help="Include archived channels")
def channels(workspace_id: int, archived: bool):
    """List channels in a workspace."""
    _run(_channels_impl(workspace_id, archived))


async def _channels_impl(workspace_id: int, archived: bool):
    async with _client() as c:
        rows = _check(await c.get(
            f"/api/v1/workspaces/{workspace_id}/channels",
            params={"include_archived": str(archived).lower()},
        ))
    if not rows:
        click.echo("No channels.")
        return
    _print_table(rows, [
        ("ID", "id", 6),
        ("NAME", "name", 24),
        ("TYPE", "channel_type", 8),
        ("ARCHIVED", "archived", 8),
        ("TOPIC", "topic", 40),
    ])


# ---------------------------------------------------------------------------
# huddle create-channel
# ---------------------------------------------------------------------------


@main.command("create-channel")
@click.argument("workspace_id", type=int)
@click.argument("name")
@click.option("--private", is_flag=True, help="Create a PRIVATE channel")
@click.option("--description", "-d", default=None)
@click.option("--topic", "-t", default=None)
def create_channel(workspace_id: int, name: str, private: bool,
                   description: Optional[str], topic: Optional[str]):
    """Create a channel; connected clients receive CHANNEL_CREATED."""
    _run(_create_channel_impl(workspace_id, name, private, description, topic))


async def _create_channel_impl(workspace_id: int, name: str, private: bool,
                               description: Optional[str], topic: Optional[str]):
    async with _client() as c:
        channel = _check(await c.post("/api/v1/channels", json={
            "workspace_id": workspace_id,
            "name": name,
            "channel_type": "PRIVATE" if private else "PUBLIC",
            "description": description,
            "topic": topic,
        }))
    click.secho(f"Created #{channel['name']} (id {channel['id']})", fg="green")


# ---------------------------------------------------------------------------
# huddle watch
# ---------------------------------------------------------------------------


@main.command()
@click.argument("workspace_id", type=int)
@click.option("--max-retries", type=int, default=None, help="Give up after N reconnects")
def watch(workspace_id: int, max_retries: Optional[int]):
    """Stream live channel and message events for a workspace."""
    if workspace_id <= 0:
        _fail("WORKSPACE_ID must be a positive integer")
    try:
        _run(_watch_impl(workspace_id, max_retries))
    except KeyboardInterrupt:
        click.echo()


async def _watch_impl(workspace_id: int, max_retries: Optional[int]):
    store = ChannelStore(workspace_id)
    async with _client() as c:
        store.load(_check(await c.get(f"/api/v1/workspaces/{workspace_id}/channels")))
    click.secho(
        f"Watching workspace {workspace_id} ({len(store.visible())} channels). Ctrl-C to stop.",
        bold=True,
    )

    def on_event(event: dict):
        store.apply(event)
        click.echo(_format_event(event))

    watcher = WorkspaceWatcher(
        _api_url(),
        workspace_id,
        token=_token(),
        on_channel_event=on_event,
        on_message_event=on_event,
        max_retries=max_retries,
    )
    try:
        await watcher.run()
    except WatcherRejected as e:
        _fail(f"subscription rejected (close code {e.close_code})")


if __name__ == "__main__":
    main()
