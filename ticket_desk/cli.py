"""Ticket Desk CLI - main entry point."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ticket_desk import __version__
from ticket_desk.env import load_environment
from ticket_desk.errors import TicketDeskError
from ticket_desk.models import Ticket, TicketPriority, TicketStatus

# Load environment variables from .env file at startup
load_environment()

app = typer.Typer(
    name="td",
    help="Ticket Desk - local support ticket tracking",
    no_args_is_help=True,
)

console = Console()

STATUS_STYLES = {
    TicketStatus.OPEN: "dark_orange",
    TicketStatus.IN_PROGRESS: "blue",
    TicketStatus.RESOLVED: "green",
    TicketStatus.CLOSED: "grey50",
    TicketStatus.UNKNOWN: "default",
}

PRIORITY_STYLES = {
    TicketPriority.HIGH: "red",
    TicketPriority.MEDIUM: "dark_orange",
    TicketPriority.LOW: "green",
    TicketPriority.UNKNOWN: "grey50",
}


def _run_async(coro):
    """Run an async coroutine from sync CLI context."""
    return asyncio.run(coro)


def _styled_status(ticket: Ticket) -> str:
    style = STATUS_STYLES[ticket.status_kind]
    return f"[{style}]{escape(ticket.status)}[/{style}]"


def _styled_priority(ticket: Ticket) -> str:
    style = PRIORITY_STYLES[ticket.priority_kind]
    return f"[{style}]{escape(ticket.priority)}[/{style}]"


def _require_text(value: str, field: str) -> str:
    if not value.strip():
        console.print(f"[red]{field} must not be empty.[/]")
        raise typer.Exit(1)
    return value


def _check_choice(value: str, choices: list[str], field: str) -> str:
    if value not in choices:
        console.print(f"[red]Invalid {field} '{value}'. Choose from: {', '.join(choices)}[/]")
        raise typer.Exit(1)
    return value


async def _with_store(base_dir: str, action):
    """Open the configured store, run action(store), always close it."""
    from ticket_desk.config import build_store, load_config

    base = Path(base_dir).resolve()
    load_environment(base)
    try:
        config = load_config(base)
    except (ValidationError, ValueError) as e:
        console.print(f"[bold red]Invalid configuration:[/] {e}")
        raise typer.Exit(1)

    store = build_store(config, base)
    try:
        await store.initialize()
        return await action(store)
    except TicketDeskError as e:
        console.print(f"[bold red]Error:[/] {e}")
        raise typer.Exit(1)
    finally:
        await store.close()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show store log output"),
):
    """Ticket Desk - local support ticket tracking."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


# ── Commands ──────────────────────────────────────────────────────────


@app.command()
def init(
    path: str = typer.Argument(".", help="Directory to initialize ticket-desk in"),
):
    """Initialize a new ticket-desk workspace."""
    from ticket_desk.config import write_default_config

    base = Path(path).resolve()
    base.mkdir(parents=True, exist_ok=True)
    config_path = write_default_config(base)

    console.print(Panel(
        f"[bold green]Workspace initialized at:[/] {base}\n\n"
        f"  [dim]{config_path.name}[/]  - Storage configuration\n\n"
        f"Next steps:\n"
        f"  1. Run [bold cyan]td add \"<issue>\" \"<description>\"[/]\n"
        f"  2. Run [bold cyan]td list[/]",
        title="[bold cyan]Ticket Desk[/]",
        border_style="cyan",
    ))


@app.command("list")
def list_tickets(
    base_dir: str = typer.Option(".", "--base-dir", "-d", help="Ticket-desk workspace directory"),
):
    """List all tickets in insertion order."""
    async def _list(store):
        return await store.load_all()

    tickets = _run_async(_with_store(base_dir, _list))

    if not tickets:
        console.print("[yellow]No tickets yet.[/]")
        return

    table = Table(title=f"Tickets ({len(tickets)})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Issue", style="bold")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Created", style="dim")

    for index, ticket in enumerate(tickets):
        table.add_row(
            str(index),
            escape(ticket.issue),
            _styled_status(ticket),
            _styled_priority(ticket),
            ticket.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def show(
    index: int = typer.Argument(..., help="Ticket position as shown by 'td list'"),
    base_dir: str = typer.Option(".", "--base-dir", "-d", help="Ticket-desk workspace directory"),
):
    """Show a single ticket."""
    async def _show(store):
        return await store.get_at(index)

    ticket = _run_async(_with_store(base_dir, _show))

    console.print(Panel(
        f"[bold]Status:[/] {_styled_status(ticket)}\n"
        f"[bold]Priority:[/] {_styled_priority(ticket)}\n"
        f"[bold]Created:[/] {ticket.created_at.isoformat()}\n"
        f"[bold]ID:[/] {ticket.id or '-'}\n\n"
        f"{escape(ticket.description)}",
        title=f"[bold cyan]#{index} {escape(ticket.issue)}[/]",
        border_style="cyan",
    ))


@app.command()
def add(
    issue: str = typer.Argument(..., help="Short summary of the issue"),
    description: str = typer.Argument(..., help="Full description"),
    status: str = typer.Option(TicketStatus.OPEN.value, "--status", "-s", help="Ticket status"),
    priority: str = typer.Option(TicketPriority.LOW.value, "--priority", "-p", help="Ticket priority"),
    base_dir: str = typer.Option(".", "--base-dir", "-d", help="Ticket-desk workspace directory"),
):
    """Create a new ticket."""
    ticket = Ticket.create(
        issue=_require_text(issue, "Issue"),
        description=_require_text(description, "Description"),
        status=_check_choice(status, TicketStatus.choices(), "status"),
        priority=_check_choice(priority, TicketPriority.choices(), "priority"),
    )

    async def _add(store):
        await store.add(ticket)
        return await store.count()

    total = _run_async(_with_store(base_dir, _add))
    console.print(f"[green]✓[/] Ticket created successfully! [dim](#{total - 1})[/]")


@app.command()
def edit(
    index: int = typer.Argument(..., help="Ticket position as shown by 'td list'"),
    issue: str = typer.Option(None, "--issue", "-i", help="New issue summary"),
    description: str = typer.Option(None, "--description", "-m", help="New description"),
    status: str = typer.Option(None, "--status", "-s", help="New status"),
    priority: str = typer.Option(None, "--priority", "-p", help="New priority"),
    base_dir: str = typer.Option(".", "--base-dir", "-d", help="Ticket-desk workspace directory"),
):
    """Replace a ticket's fields, keeping its creation time."""
    changes = {}
    if issue is not None:
        changes["issue"] = _require_text(issue, "Issue")
    if description is not None:
        changes["description"] = _require_text(description, "Description")
    if status is not None:
        changes["status"] = _check_choice(status, TicketStatus.choices(), "status")
    if priority is not None:
        changes["priority"] = _check_choice(priority, TicketPriority.choices(), "priority")

    if not changes:
        console.print("[yellow]Nothing to change.[/]")
        return

    async def _edit(store):
        current = await store.get_at(index)
        return await store.update_at(index, dataclasses.replace(current, **changes))

    _run_async(_with_store(base_dir, _edit))
    console.print("[green]✓[/] Ticket updated successfully!")


@app.command()
def delete(
    index: int = typer.Argument(..., help="Ticket position as shown by 'td list'"),
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    base_dir: str = typer.Option(".", "--base-dir", "-d", help="Ticket-desk workspace directory"),
):
    """Delete a ticket."""
    if not confirm:
        response = typer.confirm("Are you sure you want to delete this ticket?")
        if not response:
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

    async def _delete(store):
        return await store.delete_at(index)

    removed = _run_async(_with_store(base_dir, _delete))
    console.print(f"[green]✓[/] Deleted: {escape(removed.issue)}")
    console.print("[dim]Positions of later tickets have shifted; run 'td list' again.[/]")


@app.command()
def version():
    """Show Ticket Desk version."""
    console.print(f"[bold cyan]Ticket Desk[/] v{__version__}")


if __name__ == "__main__":
    app()
