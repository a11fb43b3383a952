"""Cards, hand evaluation, ranges and equity."""

from .cards import Card, Hand, Board, Deck, Rank, Suit
from .evaluator import (
    HandCategory, HandEvaluation, NativeEvaluator, TreysEvaluator,
    evaluate5, evaluate_best, compare,
)
from .ranges import (
    RangeGrid, OpponentRange, class_to_coord, coord_to_class,
    expand_class_to_combos, filter_blocked, count_weighted_combos,
    percentage_of_all_hands,
)
from .equity import (
    EquityCalculator, EquityConfig, EquityResult,
    simulate_vs_random, simulate_vs_range,
)

__all__ = [
    "Card",
    "Hand",
    "Board",
    "Deck",
    "Rank",
    "Suit",
    "HandCategory",
    "HandEvaluation",
    "NativeEvaluator",
    "TreysEvaluator",
    "evaluate5",
    "evaluate_best",
    "compare",
    "RangeGrid",
    "OpponentRange",
    "class_to_coord",
    "coord_to_class",
    "expand_class_to_combos",
    "filter_blocked",
    "count_weighted_combos",
    "percentage_of_all_hands",
    "EquityCalculator",
    "EquityConfig",
    "EquityResult",
    "simulate_vs_random",
    "simulate_vs_range",
]
