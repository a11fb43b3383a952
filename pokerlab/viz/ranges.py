"""Range display utilities."""

from typing import Optional

from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from pokerlab.game.ranges import HAND_MATRIX, RangeGrid, expand_class_to_combos, filter_blocked
from pokerlab.game.cards import Card, RANKS


def _frequency_style(frequency: float) -> Style:
    """Cell colour by frequency."""
    if frequency > 0.8:
        return Style(bgcolor="green", color="white")
    elif frequency > 0.5:
        return Style(bgcolor="yellow", color="black")
    elif frequency > 0.2:
        return Style(bgcolor="orange3", color="black")
    elif frequency > 0:
        return Style(bgcolor="red", color="white")
    return Style(bgcolor="grey30", color="grey50")


class RangeDisplay:
    """Display a RangeGrid as a 13x13 matrix in the terminal."""

    def __init__(self, grid: Optional[RangeGrid] = None, console: Optional[Console] = None):
        self.grid = grid if grid is not None else RangeGrid()
        self.console = console or Console()

    def set_frequency(self, hand: str, frequency: float) -> None:
        """Set frequency for a hand."""
        self.grid.set(hand, frequency)

    def load_from_range_string(self, range_str: str) -> None:
        """
        Load range from string notation.

        Examples:
            "AA,KK,QQ" - specific hands at 100%
            "AKs:0.5,AQs:0.75" - hands with frequencies
            "TT+" - pair range
        """
        for label, frequency in RangeGrid.from_range_string(range_str).items():
            self.grid.set(label, frequency)

    def build_table(self, title: str = "Range", show_labels: bool = False) -> Table:
        table = Table(title=title, show_header=True, header_style="bold")

        # Add column headers
        table.add_column("", style="bold")
        for rank in RANKS:
            table.add_column(rank, justify="center")

        # Add rows
        for i, rank in enumerate(RANKS):
            row = [rank]
            for j in range(13):
                frequency = float(self.grid.values[i, j])
                style = _frequency_style(frequency)

                if show_labels:
                    cell = HAND_MATRIX[i][j]
                else:
                    cell = f"{frequency*100:.0f}" if frequency > 0 else ""

                row.append(Text(cell.center(3), style=style))

            table.add_row(*row)

        return table

    def display_terminal(self, title: str = "Range", show_labels: bool = False) -> None:
        """Display range in terminal using rich."""
        self.console.print(self.build_table(title=title, show_labels=show_labels))
        self.console.print(
            f"[bold]Combos:[/] {self.grid.count_combos():.1f} "
            f"([bold]{self.grid.percentage():.1f}%[/] of all hands)"
        )

    def display_combos(self, hand: str, blockers: Optional[list[Card]] = None) -> None:
        """List the concrete combos of one class, marking blocked ones."""
        combos = expand_class_to_combos(hand)
        live = set(filter_blocked(combos, blockers or []))

        text = Text()
        for combo in combos:
            if combo in live:
                text.append(f"{combo.card1.pretty}{combo.card2.pretty} ", style="bold")
            else:
                text.append(f"{combo.card1.pretty}{combo.card2.pretty} ", style="strike dim")

        self.console.print(f"[bold]{hand}[/]: {len(live)}/{len(combos)} combos live")
        self.console.print(text)


def display_range(
    hands: list[str],
    frequencies: Optional[list[float]] = None,
    title: str = "Range",
    console: Optional[Console] = None,
) -> None:
    """
    Convenience function to display a range.

    Args:
        hands: List of hands in range
        frequencies: Optional frequencies (default 1.0)
        title: Display title
        console: Console to print to
    """
    display = RangeDisplay(console=console)

    if frequencies is None:
        frequencies = [1.0] * len(hands)

    for hand, freq in zip(hands, frequencies):
        display.set_frequency(hand, freq)

    display.display_terminal(title=title)
