"""Error types raised at the pokerlab API boundary.

All errors subclass ValueError so callers that already guard with
``except ValueError`` keep working.
"""


class PokerLabError(ValueError):
    """Base class for input validation failures."""


class InvalidCard(PokerLabError):
    """Card text is not a 2-character rank + suit string."""


class InvalidClass(PokerLabError):
    """Starting-hand class label or grid coordinate is malformed."""


class InvalidArity(PokerLabError):
    """Wrong number of cards handed to the evaluator."""


class InsufficientCards(PokerLabError):
    """Fewer than 5 hole + board cards to build a hand from."""


class DuplicateCards(PokerLabError):
    """The same card appears more than once."""


class InvalidPayouts(PokerLabError):
    """Payout structure violates its structural invariants."""


class InvalidChips(PokerLabError):
    """Chip counts are negative or sum to zero."""
