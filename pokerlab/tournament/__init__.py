"""Tournament equity (ICM) module."""

from .payouts import PayoutStructure, COMMON_PAYOUTS
from .icm import (
    ICMPlayer, ICMResult, ICMPlayerResult, calculate_icm,
    finish_probabilities, quick_icm, icm_pressure, icm_decision_ev,
    PushFoldDecision, icm_push_fold,
)

__all__ = [
    "PayoutStructure",
    "COMMON_PAYOUTS",
    "ICMPlayer",
    "ICMResult",
    "ICMPlayerResult",
    "calculate_icm",
    "finish_probabilities",
    "quick_icm",
    "icm_pressure",
    "icm_decision_ev",
    "PushFoldDecision",
    "icm_push_fold",
]
