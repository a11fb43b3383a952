"""
Independent Chip Model (ICM).

Converts tournament chip stacks into expected prize money using the
Malmuth-Harville model: a remaining player takes the best open place
with probability equal to their share of the remaining chips.

Summing over every finishing order is exponential. Finishing orders
that leave the same set of players behind are merged, so the work is
one probability per subset of players (an integer bitmask), or
O(2^n * n) in total.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from pokerlab.errors import InvalidChips, InvalidPayouts
from .payouts import PayoutStructure


logger = logging.getLogger(__name__)

# Subset tables hold 2^n entries
MAX_PLAYERS = 20


@dataclass(frozen=True)
class ICMPlayer:
    """A player's chip stack."""
    id: str
    chips: float
    name: Optional[str] = None


@dataclass
class ICMPlayerResult:
    """ICM outcome for one player."""
    player_id: str
    chips: float
    chip_percentage: float
    icm_equity: float                 # Prize money
    icm_percentage: float             # Share of the prize pool
    finish_probabilities: list[float]  # P(1st), P(2nd), ...

    @property
    def differential(self) -> float:
        """
        ICM share minus chip share, in percentage points.

        Positive for short stacks near the money, negative for chip leaders.
        """
        return self.icm_percentage - self.chip_percentage


@dataclass
class ICMResult:
    """ICM outcome for a whole table."""
    players: list[ICMPlayerResult]
    total_prize_pool: float
    payouts: list[float]  # Prize per finishing place, one per player

    def get(self, player_id: str) -> ICMPlayerResult:
        for player in self.players:
            if player.player_id == player_id:
                return player
        raise ValueError(f"Unknown player: {player_id}")


@dataclass(frozen=True)
class ICMDecision:
    """Chip EV versus ICM EV of an all-in decision, both in prize money."""
    chip_ev: float
    icm_ev: float
    icm_diff: float  # icm_ev minus current ICM equity


def _validate_stacks(stacks: Sequence[float]) -> list[float]:
    stacks = [float(s) for s in stacks]
    if not stacks:
        raise InvalidChips("No players")
    if any(not math.isfinite(s) or s < 0 for s in stacks):
        raise InvalidChips(f"Chip counts must be non-negative: {stacks}")
    if sum(stacks) <= 0:
        raise InvalidChips("Total chips must be positive")
    if len(stacks) > MAX_PLAYERS:
        raise ValueError(f"ICM supports at most {MAX_PLAYERS} players, got {len(stacks)}")
    return stacks


def finish_probabilities(stacks: Sequence[float]) -> np.ndarray:
    """
    Probability of each player finishing in each place.

    Returns:
        n x n array; [i, k] is the chance player i finishes in place k
        (0 = first). Rows and columns each sum to 1.

    Players without chips take the bottom places in random order.
    """
    stacks = _validate_stacks(stacks)
    n = len(stacks)
    full = (1 << n) - 1

    # Chips held by each subset of players
    totals = [0.0] * (1 << n)
    for mask in range(1, full + 1):
        low = mask & -mask
        totals[mask] = totals[mask ^ low] + stacks[low.bit_length() - 1]

    # Chance that exactly this subset is still playing for the next place
    reach = [0.0] * (1 << n)
    reach[full] = 1.0
    finish = [[0.0] * n for _ in range(n)]

    # Removing a player always gives a smaller mask
    for mask in range(full, 0, -1):
        prob = reach[mask]
        if prob == 0.0:
            continue

        members = [i for i in range(n) if mask >> i & 1]
        place = n - len(members)
        total = totals[mask]

        for i in members:
            share = stacks[i] / total if total > 0 else 1.0 / len(members)
            p = prob * share
            if p == 0.0:
                continue
            finish[i][place] += p
            reach[mask ^ (1 << i)] += p

    return np.array(finish)


def calculate_icm(
    players: Sequence[ICMPlayer],
    payouts: PayoutStructure,
) -> ICMResult:
    """
    Calculate ICM equity for all players.

    Raises:
        InvalidChips: if a stack is negative or all stacks are zero
        InvalidPayouts: if there are more paid places than players
    """
    players = list(players)
    ids = [p.id for p in players]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Duplicate player ids: {ids}")

    stacks = _validate_stacks([p.chips for p in players])
    n = len(stacks)

    if payouts.num_paid > n:
        raise InvalidPayouts(
            f"{payouts.num_paid} paid places for only {n} players"
        )

    payout_amounts = payouts.amounts() + [0.0] * (n - payouts.num_paid)
    total_prize_pool = payouts.prize_pool
    total_chips = sum(stacks)

    finish = finish_probabilities(stacks)
    equities = finish @ np.array(payout_amounts)

    logger.debug(
        "ICM for %d players: %d subsets, prize pool %.2f",
        n, 1 << n, total_prize_pool,
    )

    results = [
        ICMPlayerResult(
            player_id=player.id,
            chips=player.chips,
            chip_percentage=chips / total_chips * 100,
            icm_equity=float(equity),
            icm_percentage=float(equity) / total_prize_pool * 100,
            finish_probabilities=finish[i].tolist(),
        )
        for i, (player, chips, equity) in enumerate(zip(players, stacks, equities))
    ]

    return ICMResult(
        players=results,
        total_prize_pool=total_prize_pool,
        payouts=payout_amounts,
    )


def heads_up_icm(stacks: Sequence[float], payouts: Sequence[float]) -> list[float]:
    """Closed-form ICM for two players."""
    first_stack, second_stack = _validate_stacks(stacks)
    total = first_stack + second_stack
    p1 = first_stack / total
    p2 = second_stack / total

    first = payouts[0] if len(payouts) > 0 else 0.0
    second = payouts[1] if len(payouts) > 1 else 0.0

    return [
        p1 * first + p2 * second,
        p2 * first + p1 * second,
    ]


def quick_icm(stacks: Sequence[float], payouts: Sequence[float]) -> list[float]:
    """
    ICM equities from bare stacks and absolute prize amounts.

    Heads-up spots skip the subset table.
    """
    structure = PayoutStructure(list(payouts))
    if structure.num_paid > len(stacks):
        raise InvalidPayouts(f"{structure.num_paid} paid places for only {len(stacks)} players")

    if len(stacks) == 2:
        return heads_up_icm(stacks, structure.places)

    players = [ICMPlayer(id=f"p{i}", chips=chips) for i, chips in enumerate(stacks)]
    result = calculate_icm(players, structure)
    return [p.icm_equity for p in result.players]


def icm_pressure(
    player_id: str,
    players: Sequence[ICMPlayer],
    payouts: PayoutStructure,
) -> float:
    """ICM-vs-chip differential for one player, in percentage points."""
    return calculate_icm(players, payouts).get(player_id).differential


def icm_decision_ev(
    before: Sequence[ICMPlayer],
    after_win: Sequence[ICMPlayer],
    after_lose: Sequence[ICMPlayer],
    hero_id: str,
    win_probability: float,
    payouts: PayoutStructure,
) -> ICMDecision:
    """
    Compare the chip EV and ICM EV of an all-in.

    Each snapshot lists every player; a busted player stays in with 0
    chips and so collects the lowest remaining place.

    Args:
        before: Stacks before the decision
        after_win: Stacks if hero wins
        after_lose: Stacks if hero loses
        hero_id: Hero's player id
        win_probability: Hero's chance of winning (0-1)
        payouts: Payout structure
    """
    if not 0.0 <= win_probability <= 1.0:
        raise ValueError(f"win_probability must be in [0, 1], got {win_probability}")

    before_icm = calculate_icm(before, payouts)
    win_icm = calculate_icm(after_win, payouts)
    lose_icm = calculate_icm(after_lose, payouts)

    hero_before = before_icm.get(hero_id)
    icm_ev = (
        win_probability * win_icm.get(hero_id).icm_equity
        + (1 - win_probability) * lose_icm.get(hero_id).icm_equity
    )

    def chips_of(snapshot: Sequence[ICMPlayer]) -> float:
        for player in snapshot:
            if player.id == hero_id:
                return player.chips
        raise ValueError(f"Unknown player: {hero_id}")

    expected_chips = (
        win_probability * chips_of(after_win)
        + (1 - win_probability) * chips_of(after_lose)
    )
    # Linear chip value at the current table
    chip_value = before_icm.total_prize_pool / sum(p.chips for p in before)

    return ICMDecision(
        chip_ev=expected_chips * chip_value,
        icm_ev=icm_ev,
        icm_diff=icm_ev - hero_before.icm_equity,
    )


POSITIONS = ("sb", "bb", "btn")


@dataclass(frozen=True)
class PushFoldDecision:
    """ICM value of shoving versus folding, in prize money."""
    ev_push: float
    ev_fold: float
    ev_uncalled: float  # Push, villain folds
    ev_called: float    # Push, villain calls and the hand is run out

    @property
    def should_push(self) -> bool:
        return self.ev_push > self.ev_fold


def icm_push_fold(
    hero_chips: float,
    villain_chips: float,
    other_stacks: Sequence[float],
    payouts: PayoutStructure,
    small_blind: float,
    big_blind: float,
    ante: float = 0.0,
    equity_when_called: float = 0.5,
    call_frequency: float = 0.5,
    position: str = "sb",
) -> PushFoldDecision:
    """
    ICM EV of going all-in versus folding against a single villain.

    Every player posts the ante. In the small blind hero posts the small
    blind and villain the big blind; in the big blind the roles swap. On
    the button hero posts no blind, villain is the big blind and the
    first of `other_stacks` posts the small blind.

    When called, each side risks the effective (shorter) stack and the
    winner also collects the dead money. A busted player stays in with 0
    chips.

    Args:
        hero_chips: Hero's stack before forced bets
        villain_chips: Villain's stack before forced bets
        other_stacks: Stacks of the players who already folded
        payouts: Payout structure
        small_blind: Small blind
        big_blind: Big blind
        ante: Ante paid by every player
        equity_when_called: Hero's equity against villain's calling range
        call_frequency: How often villain calls (0-1)
        position: "sb", "bb" or "btn"
    """
    if position not in POSITIONS:
        raise ValueError(f"position must be one of {', '.join(POSITIONS)}, got {position!r}")
    for name, value in (("equity_when_called", equity_when_called), ("call_frequency", call_frequency)):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{name} must be in [0, 1], got {value}")
    if min(small_blind, big_blind, ante) < 0:
        raise ValueError("Blinds and ante must be non-negative")
    if hero_chips <= 0 or villain_chips <= 0:
        raise InvalidChips("Hero and villain need chips to play a hand")

    others = [float(s) for s in other_stacks]
    if any(not math.isfinite(s) or s < 0 for s in others):
        raise InvalidChips(f"Chip counts must be non-negative: {others}")
    if position == "btn" and not others:
        raise ValueError("A button push needs a small blind among the other players")

    hero_blind, villain_blind = {
        "sb": (small_blind, big_blind),
        "bb": (big_blind, small_blind),
        "btn": (0.0, big_blind),
    }[position]

    # Forced bets, capped at each stack
    hero_post = min(hero_chips, hero_blind + ante)
    villain_post = min(villain_chips, villain_blind + ante)
    other_posts = [min(chips, ante) for chips in others]
    if position == "btn":
        other_posts[0] = min(others[0], ante + small_blind)
    dead = sum(other_posts)
    remaining = [chips - post for chips, post in zip(others, other_posts)]

    def hero_equity(hero: float, villain: float) -> float:
        players = [ICMPlayer("hero", hero), ICMPlayer("villain", villain)]
        players += [ICMPlayer(f"other{i}", chips) for i, chips in enumerate(remaining)]
        return calculate_icm(players, payouts).get("hero").icm_equity

    ev_fold = hero_equity(hero_chips - hero_post, villain_chips + hero_post + dead)
    ev_uncalled = hero_equity(hero_chips + villain_post + dead, villain_chips - villain_post)

    effective = min(hero_chips, villain_chips)
    ev_win = hero_equity(hero_chips + effective + dead, villain_chips - effective)
    ev_lose = hero_equity(hero_chips - effective, villain_chips + effective + dead)
    ev_called = equity_when_called * ev_win + (1 - equity_when_called) * ev_lose

    ev_push = (1 - call_frequency) * ev_uncalled + call_frequency * ev_called
    logger.debug(
        "Push/fold from %s: push %.4f, fold %.4f", position, ev_push, ev_fold,
    )
    return PushFoldDecision(
        ev_push=ev_push,
        ev_fold=ev_fold,
        ev_uncalled=ev_uncalled,
        ev_called=ev_called,
    )
