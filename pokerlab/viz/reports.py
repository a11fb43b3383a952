"""Terminal reports for equity and ICM results."""

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from pokerlab.game.equity import EquityResult
from pokerlab.tournament.icm import ICMResult


def equity_table(result: EquityResult, title: str = "Equity") -> Table:
    """Win/tie/loss breakdown of a simulation."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Equity", f"{result.equity:.2%}")
    table.add_row("Win", f"{result.win_rate:.2%}")
    table.add_row("Tie", f"{result.tie_rate:.2%}")
    table.add_row("Loss", f"{result.loss_rate:.2%}")
    table.add_row("Samples", f"{result.samples:,}")
    if result.hand_strength is not None:
        table.add_row("Made hand", str(result.hand_strength))

    return table


def icm_table(result: ICMResult, title: str = "ICM") -> Table:
    """Per-player chip share, ICM equity and differential."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Player", style="bold")
    table.add_column("Chips", justify="right")
    table.add_column("Chip %", justify="right")
    table.add_column("ICM $", justify="right")
    table.add_column("ICM %", justify="right")
    table.add_column("Diff", justify="right")
    table.add_column("P(1st)", justify="right")

    for player in result.players:
        diff = player.differential
        color = "green" if diff > 0 else "red" if diff < 0 else "white"
        table.add_row(
            player.player_id,
            f"{player.chips:,.0f}",
            f"{player.chip_percentage:.2f}",
            f"{player.icm_equity:,.2f}",
            f"{player.icm_percentage:.2f}",
            f"[{color}]{diff:+.2f}[/]",
            f"{player.finish_probabilities[0]:.1%}",
        )

    return table


def display_equity(result: EquityResult, console: Optional[Console] = None, title: str = "Equity") -> None:
    console = console or Console()
    if result.samples == 0:
        console.print("[yellow]No opponent hands left after blockers; equity defaults to 50%[/]")
    console.print(equity_table(result, title=title))


def display_icm(result: ICMResult, console: Optional[Console] = None, title: str = "ICM") -> None:
    console = console or Console()
    console.print(icm_table(result, title=title))
    console.print(f"[dim]Prize pool: {result.total_prize_pool:,.2f}[/]")
