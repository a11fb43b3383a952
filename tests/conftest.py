"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from pokerlab.game.cards import Card, parse_cards


@pytest.fixture
def rng():
    """Seeded generator so Monte Carlo tests are reproducible."""
    return np.random.default_rng(20240611)


@pytest.fixture
def cards():
    """Parse a card run like 'AhKhQh'."""
    def _cards(s: str) -> list[Card]:
        return parse_cards(s)

    return _cards
