"""CLI commands for running ingestion cycles."""

import asyncio

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from watch_lambda.jobs import ingest_odds

app = typer.Typer()
console = Console()


@app.command("run")
def run(
    sport: list[str] | None = typer.Option(
        None, "--sport", "-s", help="Sport key to ingest (repeatable; defaults to settings)"
    ),
    force: bool = typer.Option(False, "--force", help="Bypass the activity gate"),
    no_scores: bool = typer.Option(False, "--no-scores", help="Skip the scores fetch"),
):
    """Run one ingestion cycle and print the per-sport results."""
    asyncio.run(_run(sport or None, force, no_scores))


async def _run(sports: list[str] | None, force: bool, no_scores: bool):
    """Async implementation of ingest run."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(description="Ingesting...", total=None)
        try:
            body = await ingest_odds.main(force=force, sports=sports, include_scores=not no_scores)
        except Exception as e:
            progress.update(task, description="Failed!", completed=True)
            console.print(f"\n[bold red]✗ Ingestion failed: {e}[/bold red]")
            raise typer.Exit(1) from e
        progress.update(task, description="Complete!", completed=True)

    if body.get("skipped"):
        console.print(f"[yellow]Skipped: {body['reason']}[/yellow]")
        console.print("[dim]Use --force to ingest anyway[/dim]")
        return

    table = Table(title="Ingestion Results")
    table.add_column("Sport", style="cyan")
    table.add_column("Events", justify="right")
    table.add_column("Written", justify="right")
    table.add_column("Games", justify="right")
    table.add_column("Teams", justify="right")
    table.add_column("Snapshots", justify="right")
    table.add_column("Errors", justify="right", style="red")

    for result in body["results"]:
        table.add_row(
            result["sportKey"],
            str(result["eventsProcessed"]),
            str(result["expectationsWritten"]),
            str(result["gamesCreated"]),
            str(result["teamsCreated"]),
            str(result["scoresUpdated"]),
            str(len(result["errors"])),
        )

    console.print(table)

    for result in body["results"]:
        for error in result["errors"]:
            console.print(f"[yellow]  {result['sportKey']}: {error}[/yellow]")

    summary = body["summary"]
    console.print(
        f"\n[bold green]✓ Done[/bold green] in {summary['durationMs']}ms "
        f"({summary['totalErrors']} errors)"
    )
