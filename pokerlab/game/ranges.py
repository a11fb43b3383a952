"""
Starting-hand ranges on the 13x13 grid.

Rows and columns run by descending rank (index 0 = Ace, 12 = Two).
Pairs sit on the diagonal, suited classes above it (row < col) and
offsuit classes below it (row > col):

        A     K     Q   ...
    A   AA    AKs   AQs
    K   AKo   KK    KQs
    Q   AQo   KQo   QQ
"""

import math
from dataclasses import dataclass, field
from itertools import combinations
from typing import Iterable, Optional, Union

import numpy as np

from pokerlab.errors import InvalidClass
from .cards import Card, Hand, RANKS, STR_RANK, Suit


GRID_SIZE = 13

PAIR_COMBOS = 6      # C(4, 2)
SUITED_COMBOS = 4
OFFSUIT_COMBOS = 12  # 4 * 4 - 4
TOTAL_COMBOS = 1326  # C(52, 2)

# Combos per cell: 6 on the diagonal, 4 above, 12 below
COMBO_COUNTS = np.where(
    np.eye(GRID_SIZE, dtype=bool),
    PAIR_COMBOS,
    np.where(np.triu(np.ones((GRID_SIZE, GRID_SIZE), dtype=bool)), SUITED_COMBOS, OFFSUIT_COMBOS),
).astype(float)


def class_to_coord(label: str) -> tuple[int, int]:
    """
    Grid coordinate of a hand class label.

    Examples:
        "AA" -> (0, 0), "AKs" -> (0, 1), "KAs" -> (0, 1), "AKo" -> (1, 0)

    Raises:
        InvalidClass: on unknown ranks or suited/offsuit marker misuse
    """
    if not isinstance(label, str):
        raise InvalidClass(f"Invalid hand class: {label!r}")
    s = label.strip().replace("10", "T")
    if len(s) not in (2, 3):
        raise InvalidClass(f"Invalid hand class: {label!r}")

    r1, r2 = s[0].upper(), s[1].upper()
    if r1 not in RANKS or r2 not in RANKS:
        raise InvalidClass(f"Unknown rank in hand class: {label!r}")
    i, j = RANKS.index(r1), RANKS.index(r2)

    if len(s) == 2:
        if i != j:
            raise InvalidClass(f"Non-pair class needs an 's' or 'o' marker: {label!r}")
        return (i, i)

    marker = s[2].lower()
    if i == j:
        raise InvalidClass(f"Pairs take no suited/offsuit marker: {label!r}")
    if marker not in ("s", "o"):
        raise InvalidClass(f"Unknown suited/offsuit marker: {label!r}")

    high, low = min(i, j), max(i, j)
    return (high, low) if marker == "s" else (low, high)


def coord_to_class(row: int, col: int) -> str:
    """
    Hand class label at a grid coordinate.

    Raises:
        InvalidClass: if the coordinate is outside the 13x13 grid
    """
    for index in (row, col):
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise InvalidClass(f"Grid coordinates must be integers: {(row, col)!r}")
        if not 0 <= index < GRID_SIZE:
            raise InvalidClass(f"Grid coordinate out of range: {(row, col)!r}")

    if row == col:
        return f"{RANKS[row]}{RANKS[col]}"  # Pair
    elif row < col:
        return f"{RANKS[row]}{RANKS[col]}s"  # Suited (upper triangle)
    else:
        return f"{RANKS[col]}{RANKS[row]}o"  # Offsuit (lower triangle)


def normalize_class(label: str) -> str:
    """Canonical spelling of a class label ('kas' -> 'AKs', '1010' -> 'TT')."""
    return coord_to_class(*class_to_coord(label))


# Pre-computed hand matrix labels
HAND_MATRIX = [
    [coord_to_class(row, col) for col in range(GRID_SIZE)]
    for row in range(GRID_SIZE)
]


def combos_for_cell(row: int, col: int) -> int:
    """Number of concrete combos in a grid cell."""
    coord_to_class(row, col)
    if row == col:
        return PAIR_COMBOS
    return SUITED_COMBOS if row < col else OFFSUIT_COMBOS


def expand_class_to_combos(label: str) -> list[Hand]:
    """
    All concrete hands of a class.

    Pairs give 6 combos, suited classes 4 and offsuit classes 12.
    """
    row, col = class_to_coord(label)
    suits = list(Suit)

    if row == col:
        rank = STR_RANK[RANKS[row]]
        return [Hand(Card(rank, a), Card(rank, b)) for a, b in combinations(suits, 2)]

    high = STR_RANK[RANKS[min(row, col)]]
    low = STR_RANK[RANKS[max(row, col)]]

    if row < col:
        return [Hand(Card(high, s), Card(low, s)) for s in suits]
    return [
        Hand(Card(high, a), Card(low, b))
        for a in suits
        for b in suits
        if a != b
    ]


def filter_blocked(combos: Iterable[Hand], blocked: Iterable[Card]) -> list[Hand]:
    """Drop every combo that shares a card with `blocked`. May return []."""
    blocked = set(blocked)
    return [
        hand for hand in combos
        if hand.card1 not in blocked and hand.card2 not in blocked
    ]


def get_all_hands() -> list[str]:
    """Generate all 169 unique starting hands in canonical form."""
    hands = []

    # Pairs
    for r in RANKS:
        hands.append(f"{r}{r}")

    # Non-pairs
    for i, r1 in enumerate(RANKS):
        for r2 in RANKS[i+1:]:
            hands.append(f"{r1}{r2}s")  # Suited
            hands.append(f"{r1}{r2}o")  # Offsuit

    return hands


def expand_notation(notation: str) -> list[str]:
    """
    Expand one range token into hand classes.

    Examples:
        "AA" -> ["AA"]
        "AKs" -> ["AKs"]
        "TT+" -> ["TT", "JJ", "QQ", "KK", "AA"]
        "ATs+" -> ["ATs", "AJs", "AQs", "AKs"]
        "22-55" -> ["22", "33", "44", "55"]
    """
    token = notation.strip().replace("10", "T")
    upper = token.upper()

    # Pair plus: "TT+"
    if len(token) == 3 and token[2] == "+" and upper[0] == upper[1]:
        row, _ = class_to_coord(token[:2])
        return [f"{RANKS[i]}{RANKS[i]}" for i in range(row, -1, -1)]

    # Pair range: "22-55"
    if len(token) == 5 and token[2] == "-":
        first, _ = class_to_coord(token[:2])
        second, _ = class_to_coord(token[3:])
        low, high = max(first, second), min(first, second)
        return [f"{RANKS[i]}{RANKS[i]}" for i in range(low, high - 1, -1)]

    # Suited/offsuit plus: "ATs+"
    if len(token) == 4 and token[3] == "+":
        row, col = class_to_coord(token[:3])
        suited = row < col
        high, low = min(row, col), max(row, col)
        suffix = "s" if suited else "o"
        return [
            f"{RANKS[high]}{RANKS[i]}{suffix}"
            for i in range(low, high, -1)
        ]

    # Single hand
    return [normalize_class(token)]


def parse_range(range_str: str) -> dict[str, float]:
    """
    Parse comma-separated range notation into class -> weight.

    Examples:
        "AA,KK,QQ" - specific hands at weight 1
        "AKs:0.5,AQs:0.75" - hands with weights
        "TT+,ATs+" - range shorthand
    """
    weights: dict[str, float] = {}
    for part in range_str.split(","):
        part = part.strip()
        if not part:
            continue

        # Check for frequency
        if ":" in part:
            notation, freq = part.split(":", 1)
            try:
                weight = float(freq)
            except ValueError:
                raise InvalidClass(f"Invalid weight in range token: {part!r}") from None
            if not math.isfinite(weight) or weight < 0:
                raise InvalidClass(f"Range weights must be finite and non-negative: {part!r}")
        else:
            notation = part
            weight = 1.0

        for hand in expand_notation(notation):
            weights[hand] = weight
    return weights


class RangeGrid:
    """
    Frequencies (0-1) for the 169 hand classes on the 13x13 grid.

    The grid shape is fixed; every write is clamped to [0, 1]. `values`
    is a read-only view; write through `set` or `set_cell`.
    """

    def __init__(self, values: Optional[Union[np.ndarray, list]] = None):
        self._values = np.zeros((GRID_SIZE, GRID_SIZE))
        if values is not None:
            array = np.asarray(values, dtype=float)
            if array.shape != (GRID_SIZE, GRID_SIZE):
                raise ValueError(f"Range grid must be 13x13, got {array.shape}")
            self._values[:] = np.clip(array, 0.0, 1.0)

    @property
    def values(self) -> np.ndarray:
        view = self._values.view()
        view.flags.writeable = False
        return view

    def set(self, label: str, frequency: float) -> None:
        row, col = class_to_coord(label)
        self.set_cell(row, col, frequency)

    def get(self, label: str) -> float:
        row, col = class_to_coord(label)
        return float(self.values[row, col])

    def set_cell(self, row: int, col: int, frequency: float) -> None:
        coord_to_class(row, col)
        self._values[row, col] = min(1.0, max(0.0, float(frequency)))

    def get_cell(self, row: int, col: int) -> float:
        coord_to_class(row, col)
        return float(self.values[row, col])

    def __getitem__(self, label: str) -> float:
        return self.get(label)

    def __setitem__(self, label: str, frequency: float) -> None:
        self.set(label, frequency)

    def items(self) -> list[tuple[str, float]]:
        """(label, frequency) for every class with a non-zero frequency."""
        return [
            (HAND_MATRIX[row][col], float(self.values[row, col]))
            for row, col in zip(*np.nonzero(self.values))
        ]

    def labels(self) -> list[str]:
        return [label for label, _ in self.items()]

    def count_combos(self) -> float:
        return count_weighted_combos(self)

    def percentage(self) -> float:
        return percentage_of_all_hands(self)

    def copy(self) -> "RangeGrid":
        return RangeGrid(self.values.copy())

    @classmethod
    def from_labels(cls, labels: Iterable[str], frequency: float = 1.0) -> "RangeGrid":
        grid = cls()
        for label in labels:
            grid.set(label, frequency)
        return grid

    @classmethod
    def from_weights(cls, weights: dict[str, float]) -> "RangeGrid":
        grid = cls()
        for label, frequency in weights.items():
            grid.set(label, frequency)
        return grid

    @classmethod
    def from_range_string(cls, range_str: str) -> "RangeGrid":
        return cls.from_weights(parse_range(range_str))


def count_weighted_combos(grid: Union[RangeGrid, np.ndarray]) -> float:
    """Sum of combos-per-cell times frequency over all 169 cells."""
    values = grid.values if isinstance(grid, RangeGrid) else np.asarray(grid, dtype=float)
    return float((COMBO_COUNTS * values).sum())


def percentage_of_all_hands(grid: Union[RangeGrid, np.ndarray]) -> float:
    """Share of all 1326 two-card combos covered by the range, in percent."""
    return count_weighted_combos(grid) / TOTAL_COMBOS * 100


@dataclass
class OpponentRange:
    """
    Hand classes an opponent may hold, with optional per-class weights.

    Weights default to 1. Labels are normalised on construction.
    """
    hands: list[str]
    weights: Optional[list[float]] = field(default=None)

    def __post_init__(self):
        self.hands = [normalize_class(h) for h in self.hands]
        if self.weights is not None:
            if len(self.weights) != len(self.hands):
                raise ValueError(
                    f"Got {len(self.weights)} weights for {len(self.hands)} hands"
                )
            if any(not math.isfinite(w) or w < 0 for w in self.weights):
                raise ValueError(f"Range weights must be finite and non-negative: {self.weights}")

    def weighted(self) -> list[tuple[str, float]]:
        """(label, weight) pairs."""
        if self.weights is None:
            return [(hand, 1.0) for hand in self.hands]
        return list(zip(self.hands, (float(w) for w in self.weights)))

    def combos(self, blocked: Iterable[Card] = ()) -> list[tuple[str, float, list[Hand]]]:
        """(label, weight, unblocked combos) for every class in the range."""
        blocked = set(blocked)
        return [
            (label, weight, filter_blocked(expand_class_to_combos(label), blocked))
            for label, weight in self.weighted()
        ]

    def num_combos(self, blocked: Iterable[Card] = ()) -> int:
        """Concrete combos left after removing blocked cards."""
        return sum(len(hands) for _, _, hands in self.combos(blocked))

    @classmethod
    def from_grid(cls, grid: RangeGrid) -> "OpponentRange":
        """Classes with non-zero frequency, weighted by that frequency."""
        items = grid.items()
        return cls([label for label, _ in items], [freq for _, freq in items])

    @classmethod
    def from_string(cls, range_str: str) -> "OpponentRange":
        weights = parse_range(range_str)
        return cls(list(weights), list(weights.values()))
