#!/usr/bin/env python3
"""Show a range on the 13x13 grid with its combo counts."""

import argparse
import sys
from pathlib import Path

from rich.console import Console

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pokerlab.errors import PokerLabError
from pokerlab.game.cards import parse_cards
from pokerlab.game.ranges import RangeGrid
from pokerlab.viz import RangeDisplay


def main():
    parser = argparse.ArgumentParser(
        description="Display a range and count its combos"
    )
    parser.add_argument(
        "range",
        help="Range notation (e.g., 'TT+,ATs+,KQo:0.5')",
    )
    parser.add_argument(
        "--combos",
        nargs="+",
        metavar="CLASS",
        help="List the concrete combos of these classes",
    )
    parser.add_argument(
        "--blockers",
        default="",
        help="Known cards that block combos (e.g., 'AhKd')",
    )
    parser.add_argument(
        "--labels",
        action="store_true",
        help="Show hand labels instead of frequencies",
    )

    args = parser.parse_args()
    console = Console()

    try:
        grid = RangeGrid.from_range_string(args.range)
        blockers = parse_cards(args.blockers)
    except PokerLabError as e:
        console.print(f"[red]{e}[/]")
        return 1

    display = RangeDisplay(grid, console=console)
    display.display_terminal(title=args.range, show_labels=args.labels)

    for hand in args.combos or []:
        console.print()
        try:
            display.display_combos(hand, blockers)
        except PokerLabError as e:
            console.print(f"[red]{e}[/]")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
