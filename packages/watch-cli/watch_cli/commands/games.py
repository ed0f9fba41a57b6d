"""CLI commands for browsing games by derived priority."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from watch_core.database import get_session
from watch_core.models import GameStatus
from watch_core.priority import Priority
from watch_core.time import ensure_utc
from watch_lambda.storage.readers import GameView, WatchReader

app = typer.Typer()
console = Console()

_PRIORITY_STYLES = {
    Priority.HIGH: "bold green",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "dim",
}


@app.command("list")
def list_games(
    status: GameStatus | None = typer.Option(None, "--status", help="Filter by game status"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum games to show"),
    show_scores: bool = typer.Option(
        False, "--show-scores", help="Reveal scores and tension (spoilers)"
    ),
):
    """List games with their watchability priority; scores stay hidden by default."""
    asyncio.run(_list_games(status, limit, show_scores))


async def _list_games(status: GameStatus | None, limit: int, show_scores: bool):
    async with get_session() as session:
        views = await WatchReader(session).list_games_with_priority(status=status, limit=limit)

    if not views:
        console.print("[yellow]No games found[/yellow]")
        return

    table = Table(title="Games")
    table.add_column("Game", style="cyan")
    table.add_column("Scheduled (UTC)")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Spread", justify="right")
    if show_scores:
        table.add_column("Score", justify="right")
        table.add_column("Tension", justify="right")
        table.add_column("Stage")

    for view in views:
        table.add_row(*_row(view, show_scores))

    console.print(table)


def _row(view: GameView, show_scores: bool) -> list[str]:
    game = view.game
    scheduled = (
        ensure_utc(game.scheduled_time).strftime("%Y-%m-%d %H:%M") if game.scheduled_time else "-"
    )
    style = _PRIORITY_STYLES[view.priority]
    spread = "-"
    if view.expectation is not None and view.expectation.spread_home is not None:
        spread = f"{view.expectation.spread_home:+g}"

    row = [
        f"{view.away_team} @ {view.home_team}",
        scheduled,
        GameStatus(game.status).value,
        f"[{style}]{view.priority.value}[/{style}]",
        spread,
    ]

    if show_scores:
        snapshot = view.snapshot
        if snapshot is None:
            row.extend(["-", "-", "-"])
        else:
            row.extend(
                [
                    f"{snapshot.away_score}-{snapshot.home_score}",
                    str(snapshot.tension_score),
                    snapshot.stage or "-",
                ]
            )

    return row
