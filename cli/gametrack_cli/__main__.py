"""GameTrack CLI - Entry Point."""

import asyncio
import sys

import click
import httpx
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gametrack_cli.api import ApiClient, GameStatus, Platform
from gametrack_cli.components import format_platforms
from gametrack_cli.config import get_settings
from gametrack_cli.logging_setup import configure_logging

console = Console()


def _api() -> ApiClient:
    settings = get_settings()
    return ApiClient(settings.api_base_url, timeout=settings.request_timeout)


async def _require_online(api: ApiClient) -> None:
    if not await api.health_check():
        console.print(f"[red]Error:[/] Server is offline ({api.base_url})")
        sys.exit(1)


def _open_form(entry_id: str | None = None) -> None:
    from gametrack_cli.app import run_app

    saved = run_app(entry_id)
    if saved is not None:
        console.print(f"[green]✓[/] Saved [bold]{saved.title}[/] ({saved.id})")


@click.group(invoke_without_command=True)
@click.pass_context
def main(ctx):
    """GameTrack - Track upcoming and released games from the terminal.

    Run without arguments to open the add-game form.
    """
    if ctx.invoked_subcommand is None:
        _open_form()
    else:
        configure_logging(get_settings())


@main.command()
def add():
    """Add a game with catalog-assisted entry."""
    _open_form()


@main.command()
@click.argument("entry_id")
def edit(entry_id: str):
    """Edit an existing game.

    Example: gametrack edit 3f1c9a...
    """
    try:
        _open_form(entry_id)
    except httpx.HTTPStatusError as e:
        console.print(f"[red]Error:[/] Could not load game {entry_id} ({e.response.status_code})")
        sys.exit(1)
    except httpx.HTTPError:
        console.print(f"[red]Error:[/] Server is offline ({get_settings().api_base_url})")
        sys.exit(1)


@main.command()
@click.argument("query")
def lookup(query: str):
    """Search the game catalog.

    Example: gametrack lookup "elden ring"
    """
    async def _lookup():
        async with _api() as api:
            await _require_online(api)
            results = await api.lookup_search(query)

            if not results:
                console.print(f"[yellow]No catalog matches for:[/] {query}")
                return

            table = Table(title=f"Catalog matches for \"{query}\"")
            table.add_column("#", style="dim", justify="right")
            table.add_column("Catalog ID", style="cyan")
            table.add_column("Title", style="bold")
            table.add_column("Release")
            table.add_column("Platforms")

            for i, result in enumerate(results, 1):
                release = result.release_date.isoformat() if result.release_date else "TBA"
                table.add_row(
                    str(i),
                    str(result.catalog_id),
                    result.title,
                    release,
                    format_platforms(result.platforms) or "-",
                )

            console.print(table)

    asyncio.run(_lookup())


@main.command()
@click.argument("catalog_id")
def detail(catalog_id: str):
    """Show the catalog record for one catalog id."""
    async def _detail():
        async with _api() as api:
            await _require_online(api)
            try:
                record = await api.lookup_detail(catalog_id)
            except httpx.HTTPStatusError as e:
                console.print(f"[red]Error:[/] Catalog lookup failed ({e.response.status_code})")
                sys.exit(1)

            lines = [
                f"[bold]Release:[/] {record.release_date.isoformat() if record.release_date else 'TBA'}",
                f"[bold]Platforms:[/] {format_platforms(record.platforms) or '-'}",
                f"[bold]Developer:[/] {record.developer or '-'}",
                f"[bold]Publisher:[/] {record.publisher or '-'}",
            ]
            if record.image_url:
                lines.append(f"[bold]Image:[/] {record.image_url}")
            if record.description:
                lines.append("")
                lines.append(record.description)

            console.print(Panel("\n".join(lines), title=record.title or str(catalog_id)))

    asyncio.run(_detail())


STATUS_STYLES = {
    GameStatus.UPCOMING: "yellow",
    GameStatus.RELEASED: "green",
    GameStatus.CANCELLED: "red",
}


def _status_text(status: GameStatus) -> str:
    return f"[{STATUS_STYLES[status]}]{status.value}[/]"


@main.command(name="list")
@click.option(
    "--status", "status_filter",
    type=click.Choice([s.value for s in GameStatus], case_sensitive=False),
    help="Only entries with this status",
)
@click.option(
    "--platform",
    type=click.Choice([p.value for p in Platform], case_sensitive=False),
    help="Only entries released on this platform",
)
@click.option("--page", default=1, show_default=True, help="Page number")
def list_games(status_filter: str | None, platform: str | None, page: int):
    """List tracked games by release date."""
    async def _list():
        async with _api() as api:
            await _require_online(api)
            result = await api.list_games(
                status=GameStatus(status_filter.upper()) if status_filter else None,
                platform=Platform(platform.upper()) if platform else None,
                page=max(page, 1) - 1,
            )

            if not result.entries:
                console.print("[yellow]No games found[/]")
                return

            table = Table(title=f"Games (page {result.page + 1}/{max(result.pages, 1)}, {result.total} total)")
            table.add_column("ID", style="dim")
            table.add_column("Title", style="bold")
            table.add_column("Release")
            table.add_column("Platforms")
            table.add_column("Status")

            for entry in result.entries:
                if entry.tba:
                    release = f"TBA {entry.release_date.year}" if entry.release_date else "TBA"
                else:
                    release = entry.release_date.isoformat() if entry.release_date else "-"
                table.add_row(
                    entry.id,
                    entry.title,
                    release,
                    format_platforms(entry.platforms) or "-",
                    _status_text(entry.status),
                )

            console.print(table)

    asyncio.run(_list())


@main.command(name="set-status")
@click.argument("entry_id")
@click.argument(
    "new_status",
    type=click.Choice([s.value for s in GameStatus], case_sensitive=False),
)
def set_status(entry_id: str, new_status: str):
    """Mark a game as released or cancelled.

    Only upcoming games can change status.
    """
    target = GameStatus(new_status.upper())

    async def _set_status():
        async with _api() as api:
            await _require_online(api)
            try:
                entry = await api.get_game(entry_id)
                if not entry.status.can_transition_to(target):
                    console.print(
                        f"[red]Error:[/] {entry.title} is {entry.status.value} "
                        f"and cannot become {target.value}"
                    )
                    sys.exit(1)
                updated = await api.update_status(entry_id, target)
            except httpx.HTTPStatusError as e:
                console.print(f"[red]Error:[/] Status change failed ({e.response.status_code})")
                sys.exit(1)

            console.print(f"[green]✓[/] {updated.title} is now {_status_text(updated.status)}")

    asyncio.run(_set_status())


@main.command()
@click.argument("entry_id")
@click.confirmation_option(prompt="Delete this game?")
def delete(entry_id: str):
    """Delete a tracked game."""
    async def _delete():
        async with _api() as api:
            await _require_online(api)
            try:
                await api.delete_game(entry_id)
            except httpx.HTTPStatusError as e:
                console.print(f"[red]Error:[/] Could not delete game {entry_id} ({e.response.status_code})")
                sys.exit(1)
            console.print(f"[green]✓[/] Deleted {entry_id}")

    asyncio.run(_delete())


@main.command()
@click.argument("entry_id")
@click.argument("email")
def subscribe(entry_id: str, email: str):
    """Get an email when a game is released or cancelled."""
    async def _subscribe():
        async with _api() as api:
            await _require_online(api)
            try:
                await api.subscribe(entry_id, email)
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 409:
                    console.print(f"[yellow]{email} is already subscribed[/]")
                    return
                console.print(f"[red]Error:[/] Subscription failed ({e.response.status_code})")
                sys.exit(1)
            console.print(f"[green]✓[/] {email} will be notified")

    asyncio.run(_subscribe())


@main.command()
def status():
    """Show backend reachability."""
    async def _status():
        async with _api() as api:
            if await api.health_check():
                console.print(f"[green]● Server Online[/] {api.base_url}")
            else:
                console.print(Panel(
                    f"[red]● Server Offline[/]\n\n{api.base_url}",
                    title="GameTrack",
                ))
                sys.exit(1)

    asyncio.run(_status())


if __name__ == "__main__":
    main()
