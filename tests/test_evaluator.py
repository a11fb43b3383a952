"""Tests for hand evaluation."""

from itertools import permutations

import numpy as np
import pytest

from pokerlab.errors import DuplicateCards, InsufficientCards, InvalidArity
from pokerlab.game.cards import Hand, draw_cards, remaining_deck
from pokerlab.game.evaluator import (
    HandCategory, HandEvaluation, NativeEvaluator, TreysEvaluator,
    compare, evaluate5, evaluate_best,
)


class TestEvaluate5:
    def test_royal_flush(self, cards):
        result = evaluate5(cards("AhKhQhJhTh"))
        assert result.category == HandCategory.ROYAL_FLUSH
        assert result.name == "Royal Flush"

    def test_straight_flush(self, cards):
        result = evaluate5(cards("9hThJhQhKh"))
        assert result.category == HandCategory.STRAIGHT_FLUSH
        assert result.tiebreak == (13,)

    def test_wheel(self, cards):
        result = evaluate5(cards("Ah2d3c4s5h"))
        assert result.category == HandCategory.STRAIGHT
        assert result.tiebreak == (5,)
        # Ace plays low
        assert str(result.cards[-1]) == "Ah"

    def test_steel_wheel_is_not_royal(self, cards):
        result = evaluate5(cards("Ah2h3h4h5h"))
        assert result.category == HandCategory.STRAIGHT_FLUSH
        assert result.tiebreak == (5,)

    def test_two_pair(self, cards):
        result = evaluate5(cards("AhAdKcKs9h"))
        assert result.category == HandCategory.TWO_PAIR
        assert result.tiebreak == (14, 13, 9)

    def test_four_of_a_kind(self, cards):
        result = evaluate5(cards("7h7d7c7s2h"))
        assert result.category == HandCategory.FOUR_OF_A_KIND
        assert result.tiebreak == (7, 2)

    def test_full_house(self, cards):
        result = evaluate5(cards("3h3d3cKsKh"))
        assert result.category == HandCategory.FULL_HOUSE
        assert result.tiebreak == (3, 13)

    def test_flush(self, cards):
        result = evaluate5(cards("Ah9h7h4h2h"))
        assert result.category == HandCategory.FLUSH
        assert result.tiebreak == (14, 9, 7, 4, 2)

    def test_straight(self, cards):
        result = evaluate5(cards("6s7h8d9cTs"))
        assert result.category == HandCategory.STRAIGHT
        assert result.tiebreak == (10,)

    def test_three_of_a_kind(self, cards):
        result = evaluate5(cards("QhQdQc4s9h"))
        assert result.category == HandCategory.THREE_OF_A_KIND
        assert result.tiebreak == (12, 9, 4)

    def test_pair(self, cards):
        result = evaluate5(cards("AhAdKcQs9h"))
        assert result.category == HandCategory.PAIR
        assert result.tiebreak == (14, 13, 12, 9)

    def test_high_card(self, cards):
        result = evaluate5(cards("AhKdQcJs9h"))
        assert result.category == HandCategory.HIGH_CARD
        assert result.tiebreak == (14, 13, 12, 11, 9)

    def test_near_straight_is_not_straight(self, cards):
        result = evaluate5(cards("AhKdQcJs2h"))
        assert result.category == HandCategory.HIGH_CARD

    @pytest.mark.parametrize("hand", [
        "AhKhQhJhTh", "Ah2d3c4s5h", "AhAdKcKs9h", "3h3d3cKsKh", "QhQdQc4s9h",
    ])
    def test_order_independent(self, cards, hand):
        expected = evaluate5(cards(hand))
        for perm in permutations(cards(hand)):
            result = evaluate5(perm)
            assert result.category == expected.category
            assert result.tiebreak == expected.tiebreak

    def test_wrong_arity(self, cards):
        with pytest.raises(InvalidArity):
            evaluate5(cards("AhKhQhJh"))
        with pytest.raises(InvalidArity):
            evaluate5(cards("AhKhQhJhTh9h"))

    def test_duplicate_cards(self, cards):
        with pytest.raises(InvalidArity):
            evaluate5(cards("AhAhQhJhTh"))


class TestEvaluateBest:
    def test_royal_from_seven(self, cards):
        result = evaluate_best(Hand.from_string("AhKh"), cards("QhJhTh2d3c"))
        assert result.category == HandCategory.ROYAL_FLUSH

    def test_picks_best_two_pair(self, cards):
        result = evaluate_best(Hand.from_string("AhAd"), cards("KcKs9h9d2c"))
        assert result.category == HandCategory.TWO_PAIR
        assert result.tiebreak == (14, 13, 9)

    def test_flush_beats_straight(self, cards):
        result = evaluate_best(Hand.from_string("9h8h"), cards("7h6d5h2h Kc"))
        assert result.category == HandCategory.FLUSH

    def test_six_cards(self, cards):
        result = evaluate_best(Hand.from_string("AsKs"), cards("AhKd2c7s"))
        assert result.category == HandCategory.TWO_PAIR
        assert result.tiebreak == (14, 13, 7)

    def test_board_plays(self, cards):
        result = evaluate_best(Hand.from_string("2c3d"), cards("AhKhQhJhTh"))
        assert result.category == HandCategory.ROYAL_FLUSH

    def test_insufficient_cards(self, cards):
        with pytest.raises(InsufficientCards):
            evaluate_best(Hand.from_string("AhKh"), cards("QhJh"))

    def test_too_many_cards(self, cards):
        with pytest.raises(InvalidArity):
            evaluate_best(cards("AhKh"), cards("QhJhTh2d3c4c"))

    def test_duplicates(self, cards):
        with pytest.raises(DuplicateCards):
            evaluate_best(Hand.from_string("AhKh"), cards("AhJhTh"))


class TestCompare:
    def test_category_dominates(self, cards):
        flush = evaluate5(cards("2h4h6h8hTh"))
        straight = evaluate5(cards("AhKdQcJsTh"))
        assert compare(flush, straight) == 1
        assert compare(straight, flush) == -1

    def test_kicker(self, cards):
        a = evaluate5(cards("AhAdKcQs9h"))
        b = evaluate5(cards("AcAsKdQh8h"))
        assert compare(a, b) == 1

    def test_wheel_loses_to_six_high(self, cards):
        wheel = evaluate5(cards("Ah2d3c4s5h"))
        six = evaluate5(cards("2h3d4c5s6h"))
        assert compare(six, wheel) == 1

    def test_tie(self, cards):
        board = cards("Ks7d2c9h3s")
        a = evaluate_best(cards("AcKh"), board)
        b = evaluate_best(cards("AdKc"), board)
        assert compare(a, b) == 0
        assert compare(a, a) == 0

    def test_missing_entries_count_as_zero(self):
        a = HandEvaluation(HandCategory.PAIR, (10, 5), ())
        b = HandEvaluation(HandCategory.PAIR, (10, 5, 0), ())
        c = HandEvaluation(HandCategory.PAIR, (10, 5, 2), ())
        assert compare(a, b) == 0
        assert compare(c, a) == 1

    def test_strict_weak_ordering(self, cards, rng):
        deck = remaining_deck([])
        evaluations = [evaluate5(draw_cards(deck, 5, rng)) for _ in range(40)]

        for a in evaluations:
            assert compare(a, a) == 0
            for b in evaluations:
                assert compare(a, b) == -compare(b, a)
                for c in evaluations[:10]:
                    if compare(a, b) >= 0 and compare(b, c) >= 0:
                        assert compare(a, c) >= 0

    def test_key_agrees_with_compare(self, rng):
        deck = remaining_deck([])
        for _ in range(100):
            a = evaluate5(draw_cards(deck, 5, rng))
            b = evaluate5(draw_cards(deck, 5, rng))
            expected = (a.key > b.key) - (a.key < b.key)
            assert compare(a, b) == expected


class TestBackends:
    def test_native_strength_matches_evaluate_best(self, cards):
        hole = cards("AhKh")
        board = cards("QhJhTh2d3c")
        assert NativeEvaluator().strength(hole + board) == evaluate_best(hole, board).key

    def test_treys_category(self, cards):
        evaluator = TreysEvaluator()
        assert evaluator.category(cards("AhKhQhJhTh")) == HandCategory.ROYAL_FLUSH
        assert evaluator.category(cards("9hThJhQhKh")) == HandCategory.STRAIGHT_FLUSH
        assert evaluator.category(cards("AhAdKcKs9h")) == HandCategory.TWO_PAIR
        assert evaluator.category(cards("AhKdQcJs9h")) == HandCategory.HIGH_CARD

    def test_treys_arity(self, cards):
        with pytest.raises(InvalidArity):
            TreysEvaluator().rank(cards("AhKh"))

    def test_backends_agree(self):
        rng = np.random.default_rng(99)
        native = NativeEvaluator()
        lookup = TreysEvaluator()
        deck = remaining_deck([])

        for _ in range(300):
            dealt = draw_cards(deck, 9, rng)
            board = dealt[4:]
            a = dealt[:2] + board
            b = dealt[2:4] + board

            n = (native.strength(a) > native.strength(b)) - (native.strength(a) < native.strength(b))
            t = (lookup.strength(a) > lookup.strength(b)) - (lookup.strength(a) < lookup.strength(b))
            assert n == t
            assert lookup.category(a) == evaluate_best(a[:2], board).category
