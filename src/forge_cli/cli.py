"""Main CLI for Forge."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from .api_client import ApiClient
from .auth import SessionManager, is_authenticated
from .config import Settings, get_settings
from .errors import ApiError, AuthFlowError, ForgeError, SessionExpiredError, SessionStoreError
from .log import setup_logging
from .mcp.install import try_register_mcp_server, write_mcp_json
from .mcp.server import ForgeMCPServer
from .models.session import Session
from .models.ticket import TicketDetail, TicketStatus, status_value
from .services import tickets as svc
from .services.claude import spawn_claude
from .session_store import SessionStore
from .ui.formatters import status_icon, tickets_table, ticket_view

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="forge",
    help="Forge CLI - authenticate, browse tickets, and run AI-assisted implementations via MCP",
    no_args_is_help=True,
)
mcp_app = typer.Typer(help="Forge MCP server: run it for Claude Code, or install it into a project")
app.add_typer(mcp_app, name="mcp")

console = Console()
err_console = Console(stderr=True)

DIVIDER = "─" * 72

REVIEW_STATUSES = {TicketStatus.READY, TicketStatus.VALIDATED, TicketStatus.CREATED, TicketStatus.DRIFTED}
EXECUTE_STATUSES = {TicketStatus.READY, TicketStatus.VALIDATED}
# READY is the legacy name for FORGED
DEVELOP_STATUSES = {TicketStatus.FORGED, TicketStatus.READY}


@dataclass
class CliContext:
    settings: Settings
    store: SessionStore
    auth: SessionManager
    api: ApiClient


def build_context(settings: Optional[Settings] = None) -> CliContext:
    settings = settings or get_settings()
    store = SessionStore(settings.config_path)
    auth = SessionManager(settings)
    return CliContext(settings=settings, store=store, auth=auth, api=ApiClient(settings, store, auth))


def _print_error(err: ForgeError) -> None:
    err_console.print(f"[red]Error:[/red] {escape(err.message)}")
    for suggestion in err.suggestions:
        err_console.print(f"  [dim]{escape(suggestion)}[/dim]")


@contextmanager
def command_errors(ticket_id: Optional[str] = None):
    """Translate Forge errors into output plus an exit code.

    1 is an expected user-facing failure, 2 anything else.
    """
    try:
        yield
    except typer.Exit:
        raise
    except ApiError as e:
        if e.status_code == 404 and ticket_id:
            err_console.print(f"[red]Ticket not found: {escape(ticket_id)}[/red]")
            raise typer.Exit(1)
        _print_error(e)
        raise typer.Exit(2)
    except (SessionExpiredError, AuthFlowError, SessionStoreError) as e:
        _print_error(e)
        raise typer.Exit(1)
    except ForgeError as e:
        _print_error(e)
        raise typer.Exit(2)
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)


def require_session(ctx: CliContext) -> Session:
    """Load the session or exit 1 with a login hint."""
    session = ctx.store.load()
    if not is_authenticated(session):
        err_console.print("[red]Not logged in. Run `forge login` first.[/red]")
        raise typer.Exit(1)
    return session


def _check_status(ticket: TicketDetail, valid: set, action: str) -> None:
    if ticket.status in valid:
        return
    names = ", ".join(sorted(s.value for s in valid))
    err_console.print(
        f"[yellow]Ticket {escape(ticket.id)} has status {status_value(ticket.status)} "
        f"which is not ready for {action}.[/yellow]"
    )
    err_console.print(f"[dim]Valid statuses for {action}: {names}[/dim]")
    raise typer.Exit(1)


async def _self_assign(ctx: CliContext, session: Session, ticket_id: str) -> None:
    try:
        await svc.assign_ticket(ctx.api, session, ticket_id)
    except ForgeError as e:
        logger.debug("Auto-assign failed: %s", e.message)
        err_console.print("[dim]  Warning: Could not auto-assign ticket.[/dim]")


def _print_prompt_instructions(ticket: TicketDetail, verb: str, prompt_name: str) -> None:
    # stdout stays free for scripting
    err_console.print()
    err_console.print(f"[dim]{DIVIDER}[/dim]")
    err_console.print(f" Ticket: [{ticket.id}] {ticket.title}", markup=False)
    err_console.print(f" Status: {status_icon(ticket.status)} {status_value(ticket.status)}")
    err_console.print()
    err_console.print(f" Ready to {verb}. In Claude Code, invoke:")
    err_console.print()
    err_console.print(f"   [cyan]{prompt_name}[/cyan] prompt  →  ticketId: {escape(ticket.id)}")
    err_console.print()
    err_console.print(" (Forge MCP server is running in the background via .mcp.json)")
    err_console.print(" If not set up yet, run: [cyan]forge mcp install[/cyan]")
    err_console.print(f"[dim]{DIVIDER}[/dim]")
    err_console.print()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and retries to stderr"),
):
    """Forge CLI."""
    setup_logging(verbose)


# === Auth ===


async def _login(ctx: CliContext) -> Session:
    grant = await ctx.auth.start_device_authorization()

    console.print()
    console.print("[bold]Open this URL in your browser:[/bold]")
    console.print(f"  [cyan]{escape(grant.verification_uri)}[/cyan]")
    console.print()
    console.print("[bold]Enter this code:[/bold]")
    console.print(f"  [bold green]{escape(grant.user_code)}[/bold green]")
    console.print()

    with console.status("Waiting for authorization…"):
        return await ctx.auth.poll_for_token(grant.device_code, grant.interval)


@app.command()
def login():
    """Authenticate with your Forge account."""
    ctx = build_context()
    with command_errors():
        try:
            existing = ctx.store.load()
        except SessionStoreError:
            # A broken session file should not block signing in again
            existing = None
        if is_authenticated(existing):
            console.print(
                f"[yellow]You are already logged in as {escape(existing.user.email)}. "
                "Run `forge logout` first.[/yellow]"
            )
            raise typer.Exit(0)

        try:
            session = asyncio.run(_login(ctx))
        except KeyboardInterrupt:
            console.print("\nCancelled.")
            raise typer.Exit(0)

        ctx.store.save(session)
        console.print(
            f"[green]Logged in as[/green] [bold]{escape(session.user.email)}[/bold] "
            f"| Team: [bold]{escape(session.team_id)}[/bold]"
        )


@app.command()
def logout():
    """Sign out of your Forge account."""
    ctx = build_context()
    with command_errors():
        try:
            session = ctx.store.load()
        except SessionStoreError:
            ctx.store.clear()
            console.print("[green]Removed an unreadable session file.[/green]")
            return

        if not is_authenticated(session):
            console.print("[yellow]You are not logged in.[/yellow]")
            return

        ctx.store.clear()
        console.print("[green]Logged out successfully.[/green]")


@app.command()
def whoami():
    """Show the currently authenticated user."""
    ctx = build_context()
    with command_errors():
        session = ctx.store.load()
        if not is_authenticated(session):
            console.print("[dim]Not logged in. Run `forge login` to authenticate.[/dim]")
            raise typer.Exit(1)

        token_state = "[red]expired[/red]" if session.is_expired() else "[green]valid[/green]"
        console.print(f"[bold]{escape(session.user.display_name)}[/bold] ({escape(session.user.email)})")
        console.print(f"[dim]Team:[/dim]    {escape(session.team_id)}")
        console.print(f"[dim]Token:[/dim]   {token_state}")


# === Tickets ===


async def _list(ctx: CliContext, session: Session, show_all: bool):
    rows = await svc.list_tickets(ctx.api, session, filter="all" if show_all else "mine")
    try:
        names = await svc.member_names(ctx.api, session)
    except ForgeError as e:
        logger.debug("Could not load team members: %s", e.message)
        names = {}
    return rows, names


@app.command("list")
def list_cmd(
    show_all: bool = typer.Option(False, "--all", help="Show all team tickets, not just assigned to me"),
):
    """List tickets assigned to you.

    Examples:
        forge list
        forge list --all
    """
    ctx = build_context()
    with command_errors():
        session = require_session(ctx)
        rows, names = asyncio.run(_list(ctx, session, show_all))

        if not rows:
            hint = "" if show_all else " Try `forge list --all` to see all team tickets."
            console.print(f"No tickets assigned to you.{hint}")
            return

        if not console.is_terminal:
            # Plain rows for piping
            for t in rows:
                assignee = names.get(t.assigned_to, t.assigned_to) if t.assigned_to else ""
                print(f"{t.id}\t{status_value(t.status)}\t{t.title}\t{assignee}")
            return

        title = "All Team Tickets" if show_all else "My Tickets"
        console.print(tickets_table(rows, names, title=f"{title} ({len(rows)})"))


@app.command()
def show(ticket_id: str = typer.Argument(..., help="The ticket ID to display")):
    """Show full details of a ticket."""
    ctx = build_context()
    with command_errors(ticket_id):
        session = require_session(ctx)
        ticket = asyncio.run(svc.get_ticket_detail(ctx.api, session, ticket_id))
        console.print(ticket_view(ticket))


@app.command()
def review(ticket_id: str = typer.Argument(..., help="The ticket ID to review")):
    """Start an AI-assisted review session for a ticket."""
    ctx = build_context()
    with command_errors(ticket_id):
        session = require_session(ctx)
        ticket = asyncio.run(svc.get_ticket_detail(ctx.api, session, ticket_id))
        _check_status(ticket, REVIEW_STATUSES, "review")
        _print_prompt_instructions(ticket, "review", "forge-review")


async def _execute(ctx: CliContext, session: Session, ticket_id: str) -> TicketDetail:
    ticket = await svc.get_ticket_detail(ctx.api, session, ticket_id)
    _check_status(ticket, EXECUTE_STATUSES, "execute")
    await _self_assign(ctx, session, ticket_id)
    return ticket


@app.command()
def execute(ticket_id: str = typer.Argument(..., help="The ticket ID to execute")):
    """Start an AI-assisted execution session for a ticket.

    The ticket is assigned to you when possible.
    """
    ctx = build_context()
    with command_errors(ticket_id):
        session = require_session(ctx)
        try:
            ticket = asyncio.run(_execute(ctx, session, ticket_id))
        except typer.Exit as e:
            if e.exit_code == 1:
                err_console.print(f"[dim]Run `forge review {escape(ticket_id)}` first to prepare the ticket.[/dim]")
            raise
        _print_prompt_instructions(ticket, "execute", "forge-execute")


async def _develop(ctx: CliContext, session: Session, ticket_id: str) -> TicketDetail:
    ticket = await svc.get_ticket_detail(ctx.api, session, ticket_id)
    _check_status(ticket, DEVELOP_STATUSES, "develop")
    await _self_assign(ctx, session, ticket_id)
    return ticket


@app.command()
def develop(ticket_id: str = typer.Argument(..., help="The ticket ID to develop")):
    """Start an AI-assisted implementation preparation session.

    Assigns the ticket to you and launches Claude Code with the forge-develop prompt.
    """
    ctx = build_context()
    with command_errors(ticket_id):
        session = require_session(ctx)
        ticket = asyncio.run(_develop(ctx, session, ticket_id))
        err_console.print(
            f"\n{status_icon(ticket.status)} Developing [{ticket.id}] "
            f"{ticket.title}, launching Claude...\n",
            markup=False,
        )
        code = spawn_claude("develop", ticket.id)
        raise typer.Exit(code)


# === MCP ===


async def _serve(server: ForgeMCPServer) -> None:
    await server.start()
    try:
        await server.wait_closed()
    finally:
        await server.stop()


@mcp_app.callback(invoke_without_command=True)
def mcp_serve(typer_ctx: typer.Context):
    """Run the Forge MCP server on stdio (spawned by Claude Code)."""
    if typer_ctx.invoked_subcommand is not None:
        return

    ctx = build_context()
    # stdout carries protocol frames, so everything here goes to stderr
    try:
        session = require_session(ctx)
    except SessionStoreError as e:
        _print_error(e)
        raise typer.Exit(1)
    logger.debug("Serving MCP for %s", session.user.email)

    server = ForgeMCPServer(ctx.store, ctx.api)
    try:
        asyncio.run(_serve(server))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.debug("MCP server crashed", exc_info=True)
        err_console.print(f"[red][forge:mcp] Fatal error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@mcp_app.command("install")
def mcp_install():
    """Write .mcp.json and register forge as a project-scoped MCP server."""
    console.print()
    console.print(f"[dim]{DIVIDER}[/dim]")
    console.print(" Forge MCP Server: Project Setup")
    console.print(f"[dim]{DIVIDER}[/dim]")
    console.print()

    try:
        path = write_mcp_json()
    except OSError as e:
        err_console.print(f"[red] ✗  Failed to write .mcp.json: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    console.print(
        f" [green]✓[/green]  Written [bold]{escape(path.name)}[/bold] "
        "[dim](project scope, commit this file for your team)[/dim]"
    )

    if try_register_mcp_server("project") == "registered":
        console.print(" [green]✓[/green]  Registered via: [dim]claude mcp add --scope project ...[/dim]")
    else:
        console.print(" [dim]ℹ[/dim]   claude CLI not found. .mcp.json is ready but not auto-registered")

    console.print()
    console.print(" Restart Claude Code to apply. Per-ticket usage:")
    console.print("[dim]   forge execute T-001   → invoke forge-exec prompt in Claude Code[/dim]")
    console.print("[dim]   forge review T-001    → invoke forge-review prompt in Claude Code[/dim]")
    console.print()
    console.print(f"[dim]{DIVIDER}[/dim]")
    console.print()


def main():
    app()


if __name__ == "__main__":
    main()
