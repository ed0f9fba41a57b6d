"""CLI commands for database management."""

import asyncio

import typer
from rich.console import Console
from watch_core.database import close_db, init_db

app = typer.Typer()
console = Console()


@app.command("init")
def init():
    """
    Create all tables directly from the models.

    For local development and tests; deployed databases use the Alembic
    migrations (alembic upgrade head).
    """
    asyncio.run(_init())


async def _init():
    try:
        await init_db()
        console.print("[bold green]✓ Database tables created[/bold green]")
    except Exception as e:
        console.print(f"[bold red]✗ Database initialization failed: {e}[/bold red]")
        raise typer.Exit(1) from e
    finally:
        await close_db()
