"""
Command-line interface for the inspection sync engine.
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from inspection_sync.config import Settings
from inspection_sync.errors import InspectionSyncError, ValidationFailed
from inspection_sync.schema.models import SectionKind

app = typer.Typer(
    name="inspection-sync",
    help="Inspection Sync - draft cache and list sync for vehicle inspections",
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def slots(
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Ignore the cache and refetch"),
    inspector: str = typer.Option(None, "--inspector", "-i", help="Inspector full name"),
    admin: bool = typer.Option(False, "--admin", help="Show every inspector's slots"),
):
    """Show calendar slots, from cache while fresh."""

    async def _slots():
        from inspection_sync.sync.engine import SyncEngine

        engine = await SyncEngine.create(Settings.from_env())
        try:
            result = await engine.load_slots(inspector_name=inspector, is_admin=admin, refresh=refresh)
        finally:
            await engine.close()

        if result is None:
            return

        if result.error:
            console.print(f"[red]Failed to load inspections:[/red] {result.error}")

        source = "cache" if result.from_cache else "server"
        console.print(f"\n[bold]Calendar slots[/bold] ({len(result.items)} from {source})\n")

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Date")
        table.add_column("Time")
        table.add_column("Vehicle")
        table.add_column("Inspector")
        table.add_column("Status")
        table.add_column("Rating")

        for item in result.items:
            rating = item.get("rating")
            table.add_row(
                item.get("date", ""),
                item.get("time", ""),
                item.get("title", ""),
                item.get("inspector_name") or "-",
                item.get("status", ""),
                f"{rating:.1f}" if rating is not None else "-",
            )

        console.print(table)

    asyncio.run(_slots())


@app.command("invalidate-slots")
def invalidate_slots():
    """Force the next `slots` call to refetch."""

    async def _invalidate():
        from inspection_sync.sync.engine import SyncEngine

        engine = await SyncEngine.create(Settings.from_env())
        try:
            await engine.invalidate_slots()
        finally:
            await engine.close()
        console.print("[green]Slot cache invalidated[/green]")

    asyncio.run(_invalidate())


@app.command()
def draft(
    entity_id: str = typer.Argument(..., help="Vehicle (sellCarId) identifier"),
    section: SectionKind = typer.Argument(..., help="Inspection section"),
):
    """Print the stored draft for a section."""

    async def _draft():
        from inspection_sync.sync.engine import SyncEngine

        engine = await SyncEngine.create(Settings.from_env())
        try:
            stored = await engine.drafts.get(entity_id, section)
        finally:
            await engine.close()

        if stored is None:
            console.print(f"[yellow]No {section.value} draft for {entity_id}[/yellow]")
            raise typer.Exit(1)

        console.print(f"\n[bold]{section.value}[/bold] draft for {entity_id}")
        console.print(f"Status: {stored.status.value}  Remote id: {stored.remote_id or '-'}")
        if stored.last_sync_error:
            console.print(f"[red]Last error:[/red] {stored.last_sync_error}")

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Field")
        table.add_column("Value")
        for name, value in stored.values.items():
            table.add_row(name, "" if value is None else str(value))
        for i, entry in enumerate(stored.entries, 1):
            for name, value in entry.values.items():
                table.add_row(f"#{i} {name}", "" if value is None else str(value))
        console.print(table)

        if stored.deleted_files:
            console.print("\n[bold]Pending deletions[/bold]")
            for url in stored.deleted_files:
                console.print(f"  {url}")

    asyncio.run(_draft())


@app.command("reset-draft")
def reset_draft(
    entity_id: str = typer.Argument(..., help="Vehicle (sellCarId) identifier"),
    section: SectionKind = typer.Argument(..., help="Inspection section"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Erase the stored draft for a section."""
    if not yes:
        typer.confirm(f"Erase the {section.value} draft for {entity_id}?", abort=True)

    async def _reset():
        from inspection_sync.sync.engine import SyncEngine

        engine = await SyncEngine.create(Settings.from_env())
        try:
            removed = await engine.drafts.clear(entity_id, section)
        finally:
            await engine.close()

        if removed:
            console.print(f"[green]Cleared {section.value} draft for {entity_id}[/green]")
        else:
            console.print(f"[yellow]No {section.value} draft for {entity_id}[/yellow]")

    asyncio.run(_reset())


@app.command()
def submit(
    entity_id: str = typer.Argument(..., help="Vehicle (sellCarId) identifier"),
    section: SectionKind = typer.Argument(..., help="Inspection section"),
):
    """Open a section and save it to the server."""

    async def _submit():
        from inspection_sync.sync.engine import SyncEngine

        engine = await SyncEngine.create(Settings.from_env())
        try:
            session = await engine.open_section(entity_id, section)
            if session.error:
                console.print(f"[yellow]Could not refresh from server:[/yellow] {session.error}")
            remote_id = await session.save()
        except ValidationFailed as e:
            console.print(f"[yellow]{e}[/yellow]")
            raise typer.Exit(1)
        except InspectionSyncError as e:
            console.print(f"[red]Failed to save {section.value}:[/red] {e}")
            raise typer.Exit(1)
        finally:
            await engine.close()

        if remote_id is None:
            console.print("[yellow]A save is already in progress[/yellow]")
        else:
            console.print(f"[green]Saved {section.value} for {entity_id} (id {remote_id})[/green]")

    asyncio.run(_submit())


if __name__ == "__main__":
    app()
