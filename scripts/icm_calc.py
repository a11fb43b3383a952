#!/usr/bin/env python3
"""Convert tournament stacks into ICM prize equity."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pokerlab.errors import PokerLabError
from pokerlab.tournament import COMMON_PAYOUTS, ICMPlayer, PayoutStructure, calculate_icm
from pokerlab.viz import display_icm


def main():
    parser = argparse.ArgumentParser(
        description="ICM equity for a table of chip stacks"
    )
    parser.add_argument(
        "stacks",
        nargs="+",
        type=float,
        help="Chip stacks, one per player",
    )
    payout_group = parser.add_mutually_exclusive_group(required=True)
    payout_group.add_argument(
        "-p", "--payouts",
        nargs="+",
        type=float,
        help="Prize amounts per paid place (or percentages with --prize-pool)",
    )
    payout_group.add_argument(
        "--preset",
        choices=sorted(COMMON_PAYOUTS),
        help="Named payout structure (percentages; needs --prize-pool)",
    )
    parser.add_argument(
        "--prize-pool",
        type=float,
        help="Total prize pool for percentage payouts",
    )
    parser.add_argument(
        "--names",
        nargs="+",
        help="Player names, in stack order",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()
    console = Console()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console)],
        )

    names = args.names or [f"P{i + 1}" for i in range(len(args.stacks))]
    if len(names) != len(args.stacks):
        console.print("[red]Need one name per stack[/]")
        return 1

    try:
        if args.preset:
            if args.prize_pool is None:
                console.print("[red]--preset needs --prize-pool[/]")
                return 1
            payouts = PayoutStructure.preset(args.preset, args.prize_pool)
        elif args.prize_pool is not None:
            payouts = PayoutStructure(args.payouts, is_percentage=True, total_prize_pool=args.prize_pool)
        else:
            payouts = PayoutStructure(args.payouts)

        players = [ICMPlayer(id=name, chips=chips) for name, chips in zip(names, args.stacks)]
        result = calculate_icm(players, payouts)
    except PokerLabError as e:
        console.print(f"[red]{e}[/]")
        return 1

    display_icm(result, console=console)
    return 0


if __name__ == "__main__":
    sys.exit(main())
