"""Local scheduler CLI commands."""

import asyncio

import structlog
import typer
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from rich.console import Console
from watch_core.config import get_settings
from watch_lambda.scheduling.jobs import get_job_function, list_available_jobs

app = typer.Typer()
console = Console()
logger = structlog.get_logger()


async def _run_job(job_name: str) -> None:
    """Run a job, logging failures so the scheduler keeps running."""
    try:
        body = await get_job_function(job_name)()
        logger.info("scheduled_job_completed", job=job_name, skipped=body.get("skipped", False))
    except Exception as e:
        logger.error("scheduled_job_failed", job=job_name, error=str(e), exc_info=True)


def create_scheduler(interval_minutes: int) -> AsyncIOScheduler:
    """Create an APScheduler instance that triggers ingestion every interval."""
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        _run_job,
        trigger=IntervalTrigger(minutes=interval_minutes),
        args=["ingest-odds"],
        id="ingest_odds",
        name="Ingest odds and scores",
        replace_existing=True,
        max_instances=1,  # Prevent overlapping runs
    )
    logger.info("scheduled_ingest_odds", interval_minutes=interval_minutes)
    return scheduler


@app.command("start")
def start_local():
    """
    Start the local scheduler.

    Mirrors the deployed cron trigger: the ingestion job runs every
    SCHEDULER_INTERVAL_MINUTES and the fetch scheduler decides what each cycle
    actually fetches.

    Press Ctrl+C to stop the scheduler.
    """
    interval = get_settings().scheduler.interval_minutes
    console.print("[bold blue]Starting local scheduler...[/bold blue]")
    console.print(f"[dim]Interval: every {interval} minutes[/dim]\n")

    async def run_scheduler():
        console.print("[green]Running initial cycle...[/green]")
        await _run_job("ingest-odds")

        scheduler = create_scheduler(interval)
        scheduler.start()
        console.print("[bold green]Scheduler started![/bold green]")
        console.print("[dim]Press Ctrl+C to stop[/dim]\n")

        try:
            await asyncio.Event().wait()  # Wait forever until interrupted
        except asyncio.CancelledError:
            pass
        finally:
            scheduler.shutdown(wait=False)

    try:
        asyncio.run(run_scheduler())
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down scheduler...[/yellow]")
        console.print("[green]✓ Scheduler stopped[/green]")


@app.command("run-once")
def run_once(
    job: str = typer.Argument("ingest-odds", help="Job name"),
):
    """Execute a single job once and exit."""
    if job not in list_available_jobs():
        console.print(f"[bold red]Unknown job '{job}'[/bold red]")
        console.print(f"Available: {', '.join(list_available_jobs())}")
        raise typer.Exit(1)

    console.print(f"[bold blue]Executing {job}...[/bold blue]")
    body = asyncio.run(get_job_function(job)())
    if body.get("skipped"):
        console.print(f"[yellow]Skipped: {body['reason']}[/yellow]")
    else:
        console.print(f"[green]✓ {job} completed[/green] {body['summary']}")
