"""Tournament payout structures."""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from pokerlab.errors import InvalidPayouts


# Percentage of the prize pool per finishing place
COMMON_PAYOUTS: dict[str, tuple[float, ...]] = {
    # Sit & go
    "sng_3_handed": (100,),
    "sng_6_max": (65, 35),
    "sng_9_max": (50, 30, 20),
    "sng_10_max": (50, 30, 20),
    "sng_18_max": (40, 30, 20, 10),
    "sng_27_max": (40, 30, 20, 10),
    "sng_45_max": (35, 25, 18, 12, 10),

    # MTT final tables
    "mtt_final_table_9": (30, 20, 14, 10.5, 8, 6.5, 5, 3.5, 2.5),
    "mtt_final_table_6": (35, 25, 18, 12, 7, 3),

    # Heads up
    "heads_up": (100,),
    "heads_up_split": (60, 40),

    # Spin & go / hyper
    "spin_3_handed": (80, 20),
}


@dataclass
class PayoutStructure:
    """
    Prizes for the paid finishing places, best place first.

    Either percentages of `total_prize_pool` (summing to 100) or, with
    `is_percentage=False`, absolute amounts whose sum is the prize pool.
    """
    places: list[float]
    is_percentage: bool = False
    total_prize_pool: Optional[float] = None

    def __post_init__(self):
        self.places = [float(p) for p in self.places]

        if not self.places:
            raise InvalidPayouts("Payout structure needs at least one paid place")
        if any(not math.isfinite(p) or p < 0 for p in self.places):
            raise InvalidPayouts(f"Payouts must be non-negative: {self.places}")

        if self.is_percentage:
            if self.total_prize_pool is None or not self.total_prize_pool > 0:
                raise InvalidPayouts("Percentage payouts need a positive total prize pool")
            if not math.isclose(sum(self.places), 100.0, abs_tol=1e-6):
                raise InvalidPayouts(
                    f"Payout percentages must sum to 100, got {sum(self.places):g}"
                )
        elif not sum(self.places) > 0:
            raise InvalidPayouts("Total prize pool must be positive")

    @property
    def num_paid(self) -> int:
        return len(self.places)

    @property
    def prize_pool(self) -> float:
        if self.is_percentage:
            return float(self.total_prize_pool)
        return sum(self.places)

    def amounts(self) -> list[float]:
        """Prize money per paid place."""
        if self.is_percentage:
            return [p / 100 * self.total_prize_pool for p in self.places]
        return list(self.places)

    @classmethod
    def preset(cls, name: str, prize_pool: float) -> "PayoutStructure":
        """Build one of COMMON_PAYOUTS for a prize pool."""
        key = name.lower().replace("-", "_").replace(" ", "_")
        if key not in COMMON_PAYOUTS:
            raise InvalidPayouts(
                f"Unknown payout preset: {name} (choose from {', '.join(COMMON_PAYOUTS)})"
            )
        return cls(list(COMMON_PAYOUTS[key]), is_percentage=True, total_prize_pool=prize_pool)

    @classmethod
    def from_fractions(cls, fractions: Sequence[float], prize_pool: float) -> "PayoutStructure":
        """Build from prize fractions summing to 1."""
        return cls([f * 100 for f in fractions], is_percentage=True, total_prize_pool=prize_pool)
