from __future__ import annotations

from rich.console import Console
from rich.table import Table

from .bonus import format_bonus
from .live import LiveBonusReport, LiveTeamReport
from .models import FixtureBonusResult


def _fixture_title(result: FixtureBonusResult, teams: dict) -> str:
    home = teams.get(result.team_h_id)
    away = teams.get(result.team_a_id)
    h = home.short_name if home else "?"
    a = away.short_name if away else "?"
    return f"{h} v {a}"


def _bonus_table(result: FixtureBonusResult, teams: dict, limit: int = 6) -> Table:
    table = Table(title=_fixture_title(result, teams), show_lines=False)
    table.add_column("Rank", justify="right", width=4)
    table.add_column("Player", style="bold white", min_width=14)
    table.add_column("BPS", justify="right", width=5)
    table.add_column("Bonus", justify="right", style="bold green", width=5)

    for b in result.bonuses[:limit]:
        table.add_row(
            str(b.rank),
            b.web_name or f"ID {b.player_id}",
            str(b.bps),
            format_bonus(b.predicted_bonus),
        )
    return table


def print_bonus_report(report: LiveBonusReport) -> None:
    console = Console()

    console.print()
    console.rule(f"[bold blue]Live Bonus - Gameweek {report.gameweek}[/bold blue]")
    console.print()

    if not report.results:
        console.print("[dim]No fixtures in play.[/dim]")
        console.print()
        return

    for result in report.results:
        console.print(_bonus_table(result, report.teams))
        console.print()


def print_team_report(report: LiveTeamReport) -> None:
    console = Console()

    console.print()
    console.rule(
        f"[bold blue]Entry {report.user_id} - Gameweek {report.gameweek}[/bold blue]"
    )
    console.print()

    subbed_in = {s.in_id for s in report.result.subs_applied}
    table = Table(title="Effective XI", show_lines=False)
    table.add_column("Pos", style="bold cyan", width=4)
    table.add_column("Player", style="bold white", min_width=14)
    table.add_column("Mins", justify="right", width=5)
    table.add_column("Pts", justify="right", width=5)
    table.add_column("x", justify="right", width=2)
    table.add_column("", width=4)

    for p in report.result.applied_team:
        table.add_row(
            p.position,
            p.web_name or f"ID {p.id}",
            str(p.minutes),
            str(p.points),
            str(p.multiplier),
            "[green]IN[/green]" if p.id in subbed_in else "",
        )
    console.print(table)
    console.print()

    for line in report.result.explanations:
        console.print(f"  {line}")
    if report.result.explanations:
        console.print()

    console.print(f"[bold]Live points:[/bold] {report.result.total_points}")
    console.print(f"[bold]Predicted bonus:[/bold] {format_bonus(report.predicted_bonus)}")
    if report.bonus_added:
        console.print("[dim]Official bonus has been added for this gameweek.[/dim]")
    console.print()
