"""
Hand evaluation.

`evaluate5` ranks exactly five cards; `evaluate_best` finds the best five
out of hole cards plus board by trying every 5-card subset (at most 21).
Hands are totally ordered by category first and then by a tiebreak
vector of rank values, compared left to right with missing entries
treated as 0.

Two interchangeable strength backends are provided for the simulator:
`NativeEvaluator` (the exhaustive search here) and `TreysEvaluator`
(the perfect-hash lookup tables of the treys library).
"""

from dataclasses import dataclass
from enum import IntEnum
from itertools import combinations
from typing import Iterable, Sequence

from treys import Evaluator

from pokerlab.errors import InsufficientCards, InvalidArity
from .cards import Card, FULL_DECK, Rank, ensure_distinct


class HandCategory(IntEnum):
    """Hand categories, weakest first."""
    HIGH_CARD = 1
    PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10


HAND_CATEGORY_NAMES = {
    HandCategory.HIGH_CARD: "High Card",
    HandCategory.PAIR: "Pair",
    HandCategory.TWO_PAIR: "Two Pair",
    HandCategory.THREE_OF_A_KIND: "Three of a Kind",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.FLUSH: "Flush",
    HandCategory.FULL_HOUSE: "Full House",
    HandCategory.FOUR_OF_A_KIND: "Four of a Kind",
    HandCategory.STRAIGHT_FLUSH: "Straight Flush",
    HandCategory.ROYAL_FLUSH: "Royal Flush",
}

# Longest tiebreak vector (flush / high card)
VECTOR_LENGTH = 5

WHEEL = (Rank.ACE, Rank.FIVE, Rank.FOUR, Rank.THREE, Rank.TWO)


@dataclass(frozen=True)
class HandEvaluation:
    """Category, tiebreak vector and the five cards that make the hand."""
    category: HandCategory
    tiebreak: tuple[int, ...]
    cards: tuple[Card, ...]

    @property
    def name(self) -> str:
        return HAND_CATEGORY_NAMES[self.category]

    @property
    def key(self) -> tuple[int, ...]:
        """Comparison key: category then the tiebreak vector padded with 0."""
        return _pad(self.category, self.tiebreak)

    def __str__(self) -> str:
        return f"{self.name} ({' '.join(str(c) for c in self.cards)})"


def _pad(category: int, tiebreak: tuple[int, ...]) -> tuple[int, ...]:
    return (int(category), *tiebreak) + (0,) * (VECTOR_LENGTH - len(tiebreak))


def _straight_high(ranks: list[int]) -> int:
    """High card of a straight given 5 distinct ranks sorted descending, else 0."""
    if ranks[0] - ranks[4] == 4:
        return ranks[0]
    if tuple(ranks) == WHEEL:
        return 5
    return 0


def _score(cards: Sequence[Card]) -> tuple[HandCategory, tuple[int, ...]]:
    """Category and tiebreak vector of five cards."""
    ranks = sorted((c.rank for c in cards), reverse=True)

    counts: dict[int, int] = {}
    for rank in ranks:
        counts[rank] = counts.get(rank, 0) + 1
    # Ranks ordered by (count desc, rank desc)
    groups = sorted(counts, key=lambda r: (counts[r], r), reverse=True)
    shape = [counts[r] for r in groups]

    is_flush = len({c.suit for c in cards}) == 1
    straight_high = _straight_high(ranks) if len(groups) == 5 else 0

    if is_flush and straight_high:
        if straight_high == Rank.ACE:
            return HandCategory.ROYAL_FLUSH, ()
        return HandCategory.STRAIGHT_FLUSH, (straight_high,)

    if shape[0] == 4:
        return HandCategory.FOUR_OF_A_KIND, tuple(groups)

    if shape[0] == 3 and shape[1] == 2:
        return HandCategory.FULL_HOUSE, tuple(groups)

    if is_flush:
        return HandCategory.FLUSH, tuple(ranks)

    if straight_high:
        return HandCategory.STRAIGHT, (straight_high,)

    if shape[0] == 3:
        return HandCategory.THREE_OF_A_KIND, tuple(groups)

    if shape[0] == 2 and shape[1] == 2:
        return HandCategory.TWO_PAIR, tuple(groups)

    if shape[0] == 2:
        return HandCategory.PAIR, tuple(groups)

    return HandCategory.HIGH_CARD, tuple(ranks)


def _order_cards(
    cards: Sequence[Card],
    category: HandCategory,
    tiebreak: tuple[int, ...],
) -> tuple[Card, ...]:
    """Order the five cards the way the hand reads (groups first, wheel ace last)."""
    counts: dict[int, int] = {}
    for card in cards:
        counts[card.rank] = counts.get(card.rank, 0) + 1

    def sort_key(card: Card) -> tuple[int, int, int]:
        rank = card.rank
        if tiebreak == (5,) and rank == Rank.ACE and category in (
            HandCategory.STRAIGHT, HandCategory.STRAIGHT_FLUSH
        ):
            rank = 1
        return (counts[card.rank], rank, card.suit)

    return tuple(sorted(cards, key=sort_key, reverse=True))


def evaluate5(cards: Iterable[Card]) -> HandEvaluation:
    """
    Evaluate exactly five cards.

    Raises:
        InvalidArity: unless given exactly 5 distinct cards
    """
    cards = list(cards)
    if len(cards) != 5 or len(set(cards)) != 5:
        raise InvalidArity(f"Must provide exactly 5 distinct cards, got {cards}")

    category, tiebreak = _score(cards)
    return HandEvaluation(category, tiebreak, _order_cards(cards, category, tiebreak))


def _best_of(cards: Sequence[Card]) -> tuple[tuple[int, ...], tuple[Card, ...]]:
    """Best comparison key over all 5-card subsets, with the subset."""
    best_key: tuple[int, ...] = ()
    best_combo: tuple[Card, ...] = ()
    for combo in combinations(cards, 5):
        key = _pad(*_score(combo))
        if key > best_key:
            best_key = key
            best_combo = combo
    return best_key, best_combo


def _collect(hole: Iterable[Card], board: Iterable[Card]) -> list[Card]:
    hole = list(hole)
    if len(hole) != 2:
        raise InvalidArity(f"Hole cards must be exactly 2 cards, got {len(hole)}")
    cards = hole + list(board)
    if len(cards) < 5:
        raise InsufficientCards(
            f"Need at least 5 cards to evaluate hand, got {len(cards)}"
        )
    if len(cards) > 7:
        raise InvalidArity(f"At most 7 cards can be evaluated, got {len(cards)}")
    return ensure_distinct(cards)


def evaluate_best(hole: Iterable[Card], board: Iterable[Card]) -> HandEvaluation:
    """
    Best 5-card hand from hole cards plus board.

    Every 5-card subset of the combined 5-7 cards is evaluated; the
    maximum under `compare` wins. Equal keys are real ties, so which of
    the tied subsets is reported does not matter.

    Raises:
        InsufficientCards: if hole + board has fewer than 5 cards
        InvalidArity: if hole is not 2 cards or there are more than 7 cards
        DuplicateCards: if a card appears twice
    """
    cards = _collect(hole, board)
    _, combo = _best_of(cards)
    return evaluate5(combo)


def compare(a: HandEvaluation, b: HandEvaluation) -> int:
    """
    Compare two evaluations.

    Returns:
        1 if a is stronger, -1 if b is stronger, 0 for a tie
    """
    if a.category != b.category:
        return 1 if a.category > b.category else -1

    for i in range(max(len(a.tiebreak), len(b.tiebreak))):
        x = a.tiebreak[i] if i < len(a.tiebreak) else 0
        y = b.tiebreak[i] if i < len(b.tiebreak) else 0
        if x != y:
            return 1 if x > y else -1

    return 0


class NativeEvaluator:
    """Exhaustive best-5-of-7 search."""

    name = "native"

    def strength(self, cards: Sequence[Card]) -> tuple[int, ...]:
        """Comparable strength of 5-7 cards (hole cards first); larger is better."""
        key, _ = _best_of(cards)
        return key

    def evaluate(self, hole: Iterable[Card], board: Iterable[Card]) -> HandEvaluation:
        return evaluate_best(hole, board)


class TreysEvaluator:
    """
    Lookup-table backend using treys.

    treys ranks hands 1 (royal flush) to 7462 (7-5-4-3-2 offsuit), lower
    being better, so strength is the negated rank.
    """

    name = "treys"

    def __init__(self):
        self.evaluator = Evaluator()
        self._treys_ints = {card: card.to_treys() for card in FULL_DECK}

    def rank(self, cards: Sequence[Card]) -> int:
        """Raw treys rank of 5-7 cards (1 is best)."""
        if not 5 <= len(cards) <= 7:
            raise InvalidArity(f"treys evaluates 5-7 cards, got {len(cards)}")
        ints = [self._treys_ints[c] for c in cards]
        return self.evaluator.evaluate(ints[:2], ints[2:])

    def strength(self, cards: Sequence[Card]) -> int:
        return -self.rank(cards)

    def category(self, cards: Sequence[Card]) -> HandCategory:
        """Hand category as reported by treys."""
        rank = self.rank(cards)
        if rank == 1:
            return HandCategory.ROYAL_FLUSH
        # treys rank classes run 1 (straight flush) .. 9 (high card)
        return HandCategory(10 - self.evaluator.get_rank_class(rank))
