"""Card, hand, board and deck primitives."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Iterator, Optional, Sequence, Union

import numpy as np
from treys import Card as TreysCard

from pokerlab.errors import DuplicateCards, InvalidArity, InvalidCard, InvalidClass


class Rank(IntEnum):
    """Card ranks (2-14 where 14 is Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


class Suit(IntEnum):
    """Card suits. The numeric order carries no ranking meaning."""
    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3


# Mapping for string conversion
RANK_STR = {
    2: "2", 3: "3", 4: "4", 5: "5", 6: "6", 7: "7", 8: "8", 9: "9",
    10: "T", 11: "J", 12: "Q", 13: "K", 14: "A"
}
STR_RANK = {v: k for k, v in RANK_STR.items()}

SUIT_STR = {0: "c", 1: "d", 2: "h", 3: "s"}
STR_SUIT = {v: k for k, v in SUIT_STR.items()}

SUIT_SYMBOLS = {0: "♣", 1: "♦", 2: "♥", 3: "♠"}

# Rank letters by descending strength, the row/column order of a range grid
RANKS = "AKQJT98765432"

# Generator argument accepted wherever randomness is injected
RandomSource = Union[np.random.Generator, int, None]


@dataclass(frozen=True)
class Card:
    """A playing card."""
    rank: int  # 2-14
    suit: int  # 0-3

    def __str__(self) -> str:
        return f"{RANK_STR[self.rank]}{SUIT_STR[self.suit]}"

    def __repr__(self) -> str:
        return str(self)

    @property
    def pretty(self) -> str:
        """Rank letter plus suit symbol, e.g. 'A♠'."""
        return f"{RANK_STR[self.rank]}{SUIT_SYMBOLS[self.suit]}"

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse card from string like 'As', 'Th', '2c'."""
        if not isinstance(s, str) or len(s) != 2:
            raise InvalidCard(f"Invalid card string: {s!r}")
        rank_char = s[0].upper()
        suit_char = s[1].lower()

        if rank_char not in STR_RANK:
            raise InvalidCard(f"Invalid rank: {rank_char}")
        if suit_char not in STR_SUIT:
            raise InvalidCard(f"Invalid suit: {suit_char}")

        return cls(rank=STR_RANK[rank_char], suit=STR_SUIT[suit_char])

    def to_treys(self) -> int:
        """Convert to treys library card format."""
        return TreysCard.new(str(self))


# All 52 cards, ordered by rank then suit
FULL_DECK: tuple[Card, ...] = tuple(
    Card(rank, suit)
    for rank in range(2, 15)
    for suit in range(4)
)


def parse_cards(s: str) -> list[Card]:
    """
    Parse a run of cards like 'AsKhTd' or 'As Kh Td'.

    Raises:
        InvalidCard: if the text does not split into 2-character cards
    """
    text = s.replace(" ", "").replace(",", "")
    if len(text) % 2:
        raise InvalidCard(f"Invalid card list: {s!r}")
    return [Card.from_string(text[i:i + 2]) for i in range(0, len(text), 2)]


def ensure_distinct(cards: Iterable[Card]) -> list[Card]:
    """Return cards as a list, raising DuplicateCards on any repeat."""
    cards = list(cards)
    seen = set()
    for card in cards:
        if card in seen:
            raise DuplicateCards(f"Duplicate card: {card}")
        seen.add(card)
    return cards


@dataclass(frozen=True)
class Hand:
    """A two-card starting hand, stored high rank first."""
    card1: Card
    card2: Card

    def __post_init__(self):
        if self.card1 == self.card2:
            raise DuplicateCards(f"Duplicate card: {self.card1}")
        # Ensure card1 has higher or equal rank
        if self.card1.rank < self.card2.rank:
            first, second = self.card2, self.card1
            object.__setattr__(self, "card1", first)
            object.__setattr__(self, "card2", second)

    @property
    def cards(self) -> tuple[Card, Card]:
        return (self.card1, self.card2)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __len__(self) -> int:
        return 2

    @property
    def is_pair(self) -> bool:
        """Check if hand is a pocket pair."""
        return self.card1.rank == self.card2.rank

    @property
    def is_suited(self) -> bool:
        """Check if hand is suited."""
        return self.card1.suit == self.card2.suit

    @property
    def canonical(self) -> str:
        """
        Get canonical hand notation (e.g., 'AKs', 'QQ', '72o').

        This groups equivalent hands regardless of specific suits.
        """
        r1 = RANK_STR[self.card1.rank]
        r2 = RANK_STR[self.card2.rank]

        if self.is_pair:
            return f"{r1}{r2}"
        elif self.is_suited:
            return f"{r1}{r2}s"
        else:
            return f"{r1}{r2}o"

    def __str__(self) -> str:
        return f"{self.card1}{self.card2}"

    def __repr__(self) -> str:
        return f"Hand({self.card1}, {self.card2})"

    @classmethod
    def from_cards(cls, cards: Sequence[Card]) -> "Hand":
        """Build a hand from exactly two cards."""
        if len(cards) != 2:
            raise InvalidArity(f"A hand needs exactly 2 cards, got {len(cards)}")
        return cls(cards[0], cards[1])

    @classmethod
    def from_string(cls, s: str) -> "Hand":
        """
        Parse hand from string like 'AsKh', or a class label like 'AKs'.

        Class labels produce one representative combo of the class.
        """
        s = s.strip().replace("10", "T")
        if len(s) == 4:
            # Specific cards: 'AsKh'
            card1 = Card.from_string(s[:2])
            card2 = Card.from_string(s[2:])
            return cls(card1, card2)

        if len(s) not in (2, 3):
            raise InvalidCard(f"Invalid hand string: {s}")

        r1_char, r2_char = s[0].upper(), s[1].upper()
        if r1_char not in STR_RANK or r2_char not in STR_RANK:
            raise InvalidClass(f"Invalid hand class: {s}")
        r1, r2 = STR_RANK[r1_char], STR_RANK[r2_char]

        if len(s) == 2:
            # Pair: 'AA'
            if r1 != r2:
                raise InvalidClass(f"Non-pair class needs a suited/offsuit marker: {s}")
            return cls(Card(r1, Suit.SPADES), Card(r2, Suit.HEARTS))

        # Suited or offsuit: 'AKs' or 'AKo'
        marker = s[2].lower()
        if r1 == r2 or marker not in ("s", "o"):
            raise InvalidClass(f"Invalid hand class: {s}")
        if marker == "s":
            return cls(Card(r1, Suit.SPADES), Card(r2, Suit.SPADES))
        return cls(Card(r1, Suit.SPADES), Card(r2, Suit.HEARTS))

    def to_treys(self) -> list[int]:
        """Convert to treys library format."""
        return [self.card1.to_treys(), self.card2.to_treys()]


class Board:
    """
    Community cards, dealt street by street.

    Holds 0-5 distinct cards. Cards can only be appended.
    """

    MAX_CARDS = 5

    def __init__(self, cards: Iterable[Card] = ()):
        self._cards: list[Card] = []
        self.deal(cards)

    def deal(self, cards: Iterable[Card]) -> None:
        """Append cards for the next street."""
        new_cards = list(cards)
        if len(self._cards) + len(new_cards) > self.MAX_CARDS:
            raise InvalidArity(
                f"Board cannot hold more than {self.MAX_CARDS} cards"
            )
        self._cards = ensure_distinct(self._cards + new_cards)

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    @property
    def remaining(self) -> int:
        """Community cards still to come."""
        return self.MAX_CARDS - len(self._cards)

    @property
    def street(self) -> str:
        n = len(self._cards)
        if n < 3:
            return "preflop"
        return {3: "flop", 4: "turn"}.get(n, "river")

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __getitem__(self, index):
        return self._cards[index]

    def __str__(self) -> str:
        return "".join(str(c) for c in self._cards)

    def __repr__(self) -> str:
        return f"Board({' '.join(str(c) for c in self._cards)})"

    @classmethod
    def from_string(cls, s: str) -> "Board":
        return cls(parse_cards(s))


class Deck:
    """A standard 52-card deck, optionally with known cards removed."""

    def __init__(
        self,
        exclude: Iterable[Card] = (),
        rng: RandomSource = None,
    ):
        self.rng = np.random.default_rng(rng)
        self._excluded = frozenset(exclude)
        self.cards: list[Card] = []
        self.reset()

    def reset(self) -> None:
        """Reset deck to all 52 cards minus the excluded ones."""
        self.cards = [c for c in FULL_DECK if c not in self._excluded]

    def shuffle(self) -> None:
        """Shuffle the deck."""
        self.rng.shuffle(self.cards)

    def deal(self, n: int = 1) -> list[Card]:
        """Deal n cards from the deck."""
        if n > len(self.cards):
            raise ValueError(f"Cannot deal {n} cards, only {len(self.cards)} remaining")
        dealt = self.cards[:n]
        self.cards = self.cards[n:]
        return dealt

    def draw(self, n: int) -> list[Card]:
        """Deal n uniformly random cards without shuffling the whole deck."""
        if n > len(self.cards):
            raise ValueError(f"Cannot deal {n} cards, only {len(self.cards)} remaining")
        dealt = draw_cards(self.cards, n, self.rng)
        taken = set(dealt)
        self.cards = [c for c in self.cards if c not in taken]
        return dealt

    def remove(self, cards: Iterable[Card]) -> None:
        """Remove specific cards from the deck."""
        for card in cards:
            if card in self.cards:
                self.cards.remove(card)

    def __contains__(self, card: Card) -> bool:
        return card in self.cards

    def __len__(self) -> int:
        return len(self.cards)


def remaining_deck(used: Iterable[Card]) -> list[Card]:
    """Cards of a fresh deck that are not in `used`."""
    used = set(used)
    return [c for c in FULL_DECK if c not in used]


def draw_cards(
    cards: Sequence[Card],
    k: int,
    rng: np.random.Generator,
) -> list[Card]:
    """
    Draw k cards uniformly without replacement.

    Runs only the first k steps of a Fisher-Yates shuffle on a copy of
    `cards`; the shuffled prefix is the draw.
    """
    pool = list(cards)
    n = len(pool)
    if k > n:
        raise ValueError(f"Cannot draw {k} cards from {n}")
    for i in range(k):
        j = int(rng.integers(i, n))
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:k]
