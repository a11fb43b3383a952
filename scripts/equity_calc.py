#!/usr/bin/env python3
"""Estimate hand equity against a random hand or a range."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pokerlab.errors import PokerLabError
from pokerlab.game.cards import Board, Hand
from pokerlab.game.equity import EquityCalculator, EquityConfig, calculate_outs
from pokerlab.game.evaluator import NativeEvaluator, TreysEvaluator
from pokerlab.game.ranges import OpponentRange
from pokerlab.viz import display_equity


def main():
    parser = argparse.ArgumentParser(
        description="Monte Carlo equity of a hand vs a random hand or a range"
    )
    parser.add_argument(
        "hero",
        help="Hero's hole cards (e.g., 'AhAd')",
    )
    parser.add_argument(
        "-b", "--board",
        default="",
        help="Board cards (e.g., 'AsKhTd' or 'As Kh Td')",
    )
    parser.add_argument(
        "-r", "--range",
        help="Opponent range (e.g., 'QQ+,AKs,AKo:0.5'); random hand if omitted",
    )
    parser.add_argument(
        "-n", "--trials",
        type=int,
        default=10000,
        help="Trials vs a random hand (default: 10000)",
    )
    parser.add_argument(
        "-t", "--trials-per-combo",
        type=int,
        default=1000,
        help="Trial budget per range class (default: 1000)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible runs",
    )
    parser.add_argument(
        "--lookup",
        action="store_true",
        help="Use the treys lookup-table evaluator",
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

    try:
        hero = Hand.from_string(args.hero)
        board = Board.from_string(args.board)
        opponent_range = OpponentRange.from_string(args.range) if args.range else None
    except PokerLabError as e:
        console.print(f"[red]{e}[/]")
        return 1

    console.print(f"[bold]Hero:[/] {hero.card1.pretty} {hero.card2.pretty}")
    if len(board):
        console.print(f"[bold]Board:[/] {' '.join(c.pretty for c in board)} ({board.street})")

    config = EquityConfig(
        trials=args.trials,
        trials_per_combo=args.trials_per_combo,
        progress_interval=max(1, args.trials // 20),
        seed=args.seed,
    )
    evaluator = TreysEvaluator() if args.lookup else NativeEvaluator()
    calculator = EquityCalculator(config, evaluator=evaluator)

    try:
        if opponent_range is None:
            console.print("[bold]Opponent:[/] random hand")
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task(f"Simulating ({args.trials} trials)...")

                def callback(done, partial):
                    progress.update(task, description=f"{done} trials, equity={partial.equity:.4f}")

                result = calculator.vs_random(hero, board, callback=callback)
        else:
            console.print(
                f"[bold]Opponent range:[/] {len(opponent_range.hands)} classes, "
                f"{opponent_range.num_combos(list(hero) + list(board))} live combos"
            )
            with console.status("Simulating vs range..."):
                result = calculator.vs_range(hero, board, opponent_range)
    except PokerLabError as e:
        console.print(f"[red]{e}[/]")
        return 1

    console.print()
    display_equity(result, console=console)

    if len(board) in (3, 4):
        outs = calculate_outs(hero, board)
        if outs:
            console.print(f"[bold]Outs ({len(outs)}):[/] {' '.join(c.pretty for c in outs)}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
