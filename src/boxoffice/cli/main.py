"""BoxOffice CLI — run the servers and poke at a running inventory API.

Usage:
    boxoffice serve-api                  # Inventory API on :8000
    boxoffice serve-hub                  # Broadcast hub on :3000
    boxoffice events                     # List events
    boxoffice tickets 7                  # List ticket tiers for event 7
    boxoffice purchase 12 3              # Buy 3 of ticket 12
    boxoffice delete-event 7             # Delete event 7 (and its tickets)
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys

import click
import httpx

from boxoffice import __version__
from boxoffice.config import settings

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("BOXOFFICE_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the inventory API."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Offloads to a thread when a loop is already running (CliRunner inside
    an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table. columns: (header, dict_key, width)."""
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _fail_on_error(resp: httpx.Response) -> dict | list:
    """Return the JSON body, or print the API's error and exit 1."""
    body = resp.json()
    if resp.is_error:
        message = body.get("error") if isinstance(body, dict) else None
        click.secho(f"Error: {message or resp.text}", fg="red", err=True)
        sys.exit(1)
    return body


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="boxoffice")
def cli():
    """BoxOffice — live event and ticket inventory."""


# ---------------------------------------------------------------------------
# Servers
# ---------------------------------------------------------------------------


@cli.command("serve-api")
@click.option("--host", default=settings.host, show_default=True)
@click.option("--port", default=settings.port, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve_api(host: str, port: int, reload: bool):
    """Run the inventory API."""
    import uvicorn

    uvicorn.run("boxoffice.main:app", host=host, port=port, reload=reload)


@cli.command("serve-hub")
@click.option("--host", default=settings.host, show_default=True)
@click.option("--port", default=settings.hub_port, show_default=True, type=int)
def serve_hub(host: str, port: int):
    """Run the broadcast hub (webhook ingress + /ws)."""
    import uvicorn

    uvicorn.run("boxoffice.realtime.app:app", host=host, port=port)


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--active-only", is_flag=True, help="Hide inactive events")
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def events(active_only: bool, as_json: bool):
    """List events."""
    _run(_events_impl(active_only, as_json))


async def _events_impl(active_only: bool, as_json: bool):
    async with _client() as c:
        r = await c.get("/api/v1/events", params={"active_only": active_only})
        rows = _fail_on_error(r)

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return
    if not rows:
        click.echo("No events.")
        return
    _print_table(rows, [
        ("ID", "id", 6),
        ("TITLE", "title", 30),
        ("DATE", "date", 20),
        ("LOCATION", "location", 20),
        ("ACTIVE", "is_active", 6),
    ])


@cli.command()
@click.argument("event_id", type=int)
def tickets(event_id: int):
    """List ticket tiers for EVENT_ID."""
    _run(_tickets_impl(event_id))


async def _tickets_impl(event_id: int):
    async with _client() as c:
        r = await c.get(f"/api/v1/events/{event_id}/tickets")
        rows = _fail_on_error(r)

    if not rows:
        click.echo(f"Event {event_id} has no tickets.")
        return
    _print_table(rows, [
        ("ID", "id", 6),
        ("TITLE", "title", 24),
        ("TYPE", "type", 12),
        ("LEFT", "available_quantity", 6),
        ("ACTIVE", "is_active", 6),
    ])


@cli.command()
@click.argument("ticket_id", type=int)
@click.argument("quantity", type=int)
def purchase(ticket_id: int, quantity: int):
    """Buy QUANTITY of TICKET_ID."""
    _run(_purchase_impl(ticket_id, quantity))


async def _purchase_impl(ticket_id: int, quantity: int):
    async with _client() as c:
        r = await c.post(
            "/api/v1/tickets/purchase",
            json={"ticket_id": ticket_id, "quantity": quantity},
        )
        body = _fail_on_error(r)

    click.secho(
        f"Purchased {quantity} of ticket #{ticket_id} — "
        f"{body['available_quantity']} left",
        fg="green",
    )


@cli.command("delete-event")
@click.argument("event_id", type=int)
@click.confirmation_option(prompt="Delete this event and all its tickets?")
def delete_event(event_id: int):
    """Delete EVENT_ID and its tickets."""
    _run(_delete_event_impl(event_id))


async def _delete_event_impl(event_id: int):
    async with _client() as c:
        r = await c.post("/api/v1/events/delete", json={"event_id": event_id})
        body = _fail_on_error(r)

    click.secho(f"Deleted event #{body['deleted_event_id']}", fg="green")


if __name__ == "__main__":
    cli()
