"""Monte Carlo equity simulation."""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence, Union

import numpy as np

from pokerlab.errors import InvalidArity
from .cards import Board, Card, Hand, RandomSource, draw_cards, ensure_distinct, remaining_deck
from .evaluator import HandEvaluation, NativeEvaluator, evaluate_best
from .ranges import OpponentRange, RangeGrid


logger = logging.getLogger(__name__)

# Called with (trials done, partial result); returning False stops the run
ProgressCallback = Callable[[int, "EquityResult"], Optional[bool]]


@dataclass
class EquityConfig:
    """Configuration for equity simulations."""
    trials: int = 10000            # Trials vs a random hand
    trials_per_combo: int = 1000   # Trial budget per class in range simulations
    progress_interval: int = 1000  # Trials between progress callbacks
    seed: Optional[int] = None     # Seed for the calculator's generator


@dataclass
class EquityResult:
    """
    Aggregated showdown outcomes.

    Outcomes are stored as weighted totals so batches run separately can
    be summed. With no samples the equity is 0.5 and every rate is 0;
    check `samples` before trusting the number.
    """
    wins: float = 0.0
    ties: float = 0.0
    losses: float = 0.0
    samples: int = 0
    hand_strength: Optional[HandEvaluation] = None  # Current made hand (3+ board cards)

    @property
    def total_weight(self) -> float:
        return self.wins + self.ties + self.losses

    @property
    def win_rate(self) -> float:
        total = self.total_weight
        return self.wins / total if total else 0.0

    @property
    def tie_rate(self) -> float:
        total = self.total_weight
        return self.ties / total if total else 0.0

    @property
    def loss_rate(self) -> float:
        total = self.total_weight
        return self.losses / total if total else 0.0

    @property
    def equity(self) -> float:
        """Win rate plus half the tie rate."""
        if not self.total_weight:
            return 0.5
        return self.win_rate + self.tie_rate / 2

    def record(self, outcome: int, weight: float = 1.0, samples: int = 1) -> None:
        """Add `samples` trials that all ended in `outcome` (1 win, 0 tie, -1 loss)."""
        if outcome > 0:
            self.wins += weight
        elif outcome < 0:
            self.losses += weight
        else:
            self.ties += weight
        self.samples += samples

    def merge(self, other: "EquityResult") -> "EquityResult":
        """Combine two independent batches."""
        return EquityResult(
            wins=self.wins + other.wins,
            ties=self.ties + other.ties,
            losses=self.losses + other.losses,
            samples=self.samples + other.samples,
            hand_strength=self.hand_strength or other.hand_strength,
        )

    def __add__(self, other: "EquityResult") -> "EquityResult":
        return self.merge(other)


@dataclass(frozen=True)
class PotOdds:
    """Pot odds compared to equity."""
    pot_odds: float
    is_call: bool
    ev_diff: float


def _as_hand(hero: Union[Hand, Sequence[Card]]) -> Hand:
    return hero if isinstance(hero, Hand) else Hand.from_cards(list(hero))


def _prepare(
    hero: Union[Hand, Sequence[Card]],
    board: Union[Board, Iterable[Card]],
) -> tuple[list[Card], list[Card]]:
    """Validate hero + board, returning both as card lists."""
    hero_cards = list(_as_hand(hero))
    board_cards = list(board)
    if len(board_cards) > Board.MAX_CARDS:
        raise InvalidArity(f"Board cannot hold more than 5 cards, got {len(board_cards)}")
    ensure_distinct(hero_cards + board_cards)
    return hero_cards, board_cards


def _current_strength(hero_cards: list[Card], board_cards: list[Card]) -> Optional[HandEvaluation]:
    if len(board_cards) < 3:
        return None
    return evaluate_best(hero_cards, board_cards)


def _showdown(evaluator, hero_cards: list[Card], opp_cards: list[Card], board: list[Card]) -> int:
    """1 if hero wins, -1 if the opponent wins, 0 for a split."""
    hero = evaluator.strength(hero_cards + board)
    opp = evaluator.strength(opp_cards + board)
    return (hero > opp) - (hero < opp)


def _run_fixed(
    result: EquityResult,
    hero_cards: list[Card],
    opp_cards: list[Card],
    board_cards: list[Card],
    trials: int,
    rng: np.random.Generator,
    evaluator,
    weight: float = 1.0,
) -> None:
    """Run trials against a known opponent hand, drawing only the runout."""
    needed = Board.MAX_CARDS - len(board_cards)

    if needed == 0:
        # Complete board: every trial has the same outcome
        outcome = _showdown(evaluator, hero_cards, opp_cards, board_cards)
        result.record(outcome, weight * trials, samples=trials)
        return

    deck = remaining_deck(hero_cards + opp_cards + board_cards)
    for _ in range(trials):
        runout = draw_cards(deck, needed, rng)
        outcome = _showdown(evaluator, hero_cards, opp_cards, board_cards + runout)
        result.record(outcome, weight)


def simulate_vs_random(
    hero: Union[Hand, Sequence[Card]],
    board: Union[Board, Iterable[Card]],
    trials: int,
    rng: RandomSource = None,
    evaluator=None,
    callback: Optional[ProgressCallback] = None,
    progress_interval: int = 1000,
) -> EquityResult:
    """
    Estimate hero's equity against one random hand.

    Each trial deals the opponent 2 cards and completes the board from
    the deck minus hero and board cards, then compares both hands.

    Args:
        hero: Hero's hole cards
        board: Board cards (0-5)
        trials: Number of trials (>= 1)
        rng: numpy Generator, seed, or None for a fresh generator
        evaluator: Strength backend (default NativeEvaluator)
        callback: Optional callback(trials_done, partial_result); return
            False to stop early and keep the partial result
        progress_interval: Trials between callback calls

    Returns:
        EquityResult over the trials actually run
    """
    if trials < 1:
        raise ValueError(f"trials must be at least 1, got {trials}")
    if progress_interval < 1:
        raise ValueError(f"progress_interval must be at least 1, got {progress_interval}")

    rng = np.random.default_rng(rng)
    evaluator = evaluator or NativeEvaluator()
    hero_cards, board_cards = _prepare(hero, board)

    deck = remaining_deck(hero_cards + board_cards)
    needed = Board.MAX_CARDS - len(board_cards)
    result = EquityResult(hand_strength=_current_strength(hero_cards, board_cards))

    for i in range(1, trials + 1):
        drawn = draw_cards(deck, 2 + needed, rng)
        outcome = _showdown(evaluator, hero_cards, drawn[:2], board_cards + drawn[2:])
        result.record(outcome)

        if callback is not None and i % progress_interval == 0:
            if callback(i, result) is False:
                logger.debug("Stopped after %d of %d trials", i, trials)
                break

    logger.debug(
        "%s vs random on [%s]: %d samples, equity %.4f",
        "".join(str(c) for c in hero_cards),
        "".join(str(c) for c in board_cards),
        result.samples,
        result.equity,
    )
    return result


def _as_range(opponent_range: Union[OpponentRange, RangeGrid, str]) -> OpponentRange:
    if isinstance(opponent_range, OpponentRange):
        return opponent_range
    if isinstance(opponent_range, RangeGrid):
        return OpponentRange.from_grid(opponent_range)
    return OpponentRange.from_string(opponent_range)


def simulate_vs_range(
    hero: Union[Hand, Sequence[Card]],
    board: Union[Board, Iterable[Card]],
    opponent_range: Union[OpponentRange, RangeGrid, str],
    trials_per_combo: int,
    rng: RandomSource = None,
    evaluator=None,
) -> EquityResult:
    """
    Estimate hero's equity against a weighted range.

    Every class is expanded to its combos and combos blocked by hero or
    board cards are removed. Each surviving combo gets
    ceil(trials_per_combo * weight / surviving combos of its class)
    trials with the opponent's cards fixed; outcomes count with the
    class weight.

    If no combo survives, the result has samples=0 and equity=0.5.
    """
    if trials_per_combo < 1:
        raise ValueError(f"trials_per_combo must be at least 1, got {trials_per_combo}")

    rng = np.random.default_rng(rng)
    evaluator = evaluator or NativeEvaluator()
    hero_cards, board_cards = _prepare(hero, board)
    opponent_range = _as_range(opponent_range)

    result = EquityResult(hand_strength=_current_strength(hero_cards, board_cards))

    for label, weight, combos in opponent_range.combos(hero_cards + board_cards):
        if not combos or weight <= 0:
            continue

        trials = math.ceil(trials_per_combo * weight / len(combos))
        for opp in combos:
            _run_fixed(result, hero_cards, list(opp), board_cards, trials, rng, evaluator, weight)

    if result.samples == 0:
        logger.debug("No unblocked opponent combos in %s", opponent_range.hands)
    else:
        logger.debug(
            "Range simulation: %d classes, %d samples, equity %.4f",
            len(opponent_range.hands),
            result.samples,
            result.equity,
        )
    return result


def hand_vs_hand(
    hero: Union[Hand, Sequence[Card]],
    villain: Union[Hand, Sequence[Card]],
    board: Union[Board, Iterable[Card]],
    trials: int = 10000,
    rng: RandomSource = None,
    evaluator=None,
) -> EquityResult:
    """
    Equity of one hand against another known hand.

    A complete board is settled with a single exact comparison.
    """
    if trials < 1:
        raise ValueError(f"trials must be at least 1, got {trials}")

    rng = np.random.default_rng(rng)
    evaluator = evaluator or NativeEvaluator()
    hero_cards, board_cards = _prepare(hero, board)
    villain_cards = list(_as_hand(villain))
    ensure_distinct(hero_cards + villain_cards + board_cards)

    result = EquityResult(hand_strength=_current_strength(hero_cards, board_cards))
    if len(board_cards) == Board.MAX_CARDS:
        trials = 1
    _run_fixed(result, hero_cards, villain_cards, board_cards, trials, rng, evaluator)
    return result


class EquityCalculator:
    """
    Equity simulations sharing one config, generator and backend.

    Seeding the config makes every run reproducible.
    """

    def __init__(
        self,
        config: Optional[EquityConfig] = None,
        evaluator=None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or EquityConfig()
        self.evaluator = evaluator or NativeEvaluator()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

    def vs_random(
        self,
        hero: Union[Hand, Sequence[Card]],
        board: Union[Board, Iterable[Card]] = (),
        trials: Optional[int] = None,
        callback: Optional[ProgressCallback] = None,
    ) -> EquityResult:
        return simulate_vs_random(
            hero,
            board,
            self.config.trials if trials is None else trials,
            rng=self.rng,
            evaluator=self.evaluator,
            callback=callback,
            progress_interval=self.config.progress_interval,
        )

    def vs_range(
        self,
        hero: Union[Hand, Sequence[Card]],
        board: Union[Board, Iterable[Card]],
        opponent_range: Union[OpponentRange, RangeGrid, str],
        trials_per_combo: Optional[int] = None,
    ) -> EquityResult:
        return simulate_vs_range(
            hero,
            board,
            opponent_range,
            self.config.trials_per_combo if trials_per_combo is None else trials_per_combo,
            rng=self.rng,
            evaluator=self.evaluator,
        )

    def hand_vs_hand(
        self,
        hero: Union[Hand, Sequence[Card]],
        villain: Union[Hand, Sequence[Card]],
        board: Union[Board, Iterable[Card]] = (),
        trials: Optional[int] = None,
    ) -> EquityResult:
        return hand_vs_hand(
            hero,
            villain,
            board,
            self.config.trials if trials is None else trials,
            rng=self.rng,
            evaluator=self.evaluator,
        )


def calculate_outs(hand: Union[Hand, Sequence[Card]], board: Union[Board, Iterable[Card]]) -> list[Card]:
    """
    Cards that move the hand into a better category on the next street.

    Only the category counts: a card that merely improves a kicker or
    the rank within the same category is not an out. Only meaningful on
    the flop or turn; returns [] otherwise.
    """
    hero_cards, board_cards = _prepare(hand, board)
    if len(board_cards) not in (3, 4):
        return []

    current = evaluate_best(hero_cards, board_cards)
    outs = []
    for card in remaining_deck(hero_cards + board_cards):
        improved = evaluate_best(hero_cards, board_cards + [card])
        if improved.category > current.category:
            outs.append(card)
    return outs


def calculate_pot_odds(pot_size: float, bet_size: float, equity: float) -> PotOdds:
    """
    Pot odds of calling `bet_size` into `pot_size`, compared to `equity`.

    Args:
        pot_size: Pot before the call (including the bet)
        bet_size: Amount to call
        equity: Estimated equity (0-1)
    """
    if bet_size <= 0 or pot_size < 0:
        raise ValueError("Bet must be positive and pot non-negative")
    pot_odds = bet_size / (pot_size + bet_size)
    return PotOdds(pot_odds=pot_odds, is_call=equity > pot_odds, ev_diff=equity - pot_odds)


def approx_preflop_equity(hand: Union[Hand, Sequence[Card]]) -> float:
    """
    Rough preflop equity against a random hand, without simulation.

    Pairs run linearly from ~0.50 (22) to ~0.85 (AA); other hands get a
    high-card base plus kicker, suitedness and connectivity bonuses,
    clamped to [0.30, 0.70].
    """
    hand = _as_hand(hand)
    high, low = hand.card1.rank, hand.card2.rank

    if hand.is_pair:
        return 0.50 + (high - 2) * 0.029

    gap = high - low
    equity = 0.30 + (high - 2) * 0.02
    equity += (low - 2) * 0.008
    if hand.is_suited:
        equity += 0.03
    if gap <= 4:
        equity += (5 - gap) * 0.01

    return min(0.70, max(0.30, equity))
