"""Main CLI entry point using Typer."""

import typer
from watch_core.logging_setup import configure_logging

from watch_cli.commands import db, games, ingest, scheduler

app = typer.Typer(
    name="watch",
    help="Watchability Pipeline - spoiler-free game discovery from odds and scores",
    add_completion=False,
)

# Add command groups
app.add_typer(ingest.app, name="ingest", help="Run odds and scores ingestion")
app.add_typer(games.app, name="games", help="Browse games by derived priority")
app.add_typer(db.app, name="db", help="Database management")
app.add_typer(scheduler.app, name="scheduler", help="Local ingestion scheduler")


@app.callback()
def callback():
    """
    Watchability Pipeline

    Ingests odds and live scores and rates how worth watching each game is,
    without revealing the score.
    """
    configure_logging()


if __name__ == "__main__":
    app()
