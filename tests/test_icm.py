"""Tests for ICM calculations and payout structures."""

import numpy as np
import pytest

from pokerlab.errors import InvalidChips, InvalidPayouts
from pokerlab.tournament import (
    COMMON_PAYOUTS, ICMPlayer, PayoutStructure, calculate_icm,
    finish_probabilities, icm_decision_ev, icm_pressure, icm_push_fold, quick_icm,
)
from pokerlab.tournament.icm import MAX_PLAYERS, heads_up_icm


def make_players(*stacks):
    return [ICMPlayer(id=chr(ord("A") + i), chips=chips) for i, chips in enumerate(stacks)]


@pytest.fixture
def sng_payouts():
    return PayoutStructure([50, 30, 20], is_percentage=True, total_prize_pool=100)


class TestPayoutStructure:
    def test_absolute(self):
        payouts = PayoutStructure([500, 300, 200])
        assert payouts.num_paid == 3
        assert payouts.prize_pool == 1000
        assert payouts.amounts() == [500, 300, 200]

    def test_percentage(self):
        payouts = PayoutStructure([65, 35], is_percentage=True, total_prize_pool=200)
        assert payouts.prize_pool == 200
        assert payouts.amounts() == pytest.approx([130, 70])

    def test_percentages_must_sum_to_100(self):
        with pytest.raises(InvalidPayouts):
            PayoutStructure([50, 30], is_percentage=True, total_prize_pool=100)

    def test_percentage_needs_pool(self):
        with pytest.raises(InvalidPayouts):
            PayoutStructure([100], is_percentage=True)
        with pytest.raises(InvalidPayouts):
            PayoutStructure([100], is_percentage=True, total_prize_pool=0)

    @pytest.mark.parametrize("places", [[], [-10, 20], [0, 0], [float("nan")]])
    def test_invalid_places(self, places):
        with pytest.raises(InvalidPayouts):
            PayoutStructure(places)

    def test_preset(self):
        payouts = PayoutStructure.preset("sng_9_max", 1000)
        assert payouts.amounts() == pytest.approx([500, 300, 200])
        assert PayoutStructure.preset("SNG-6-max", 100).num_paid == 2

    def test_unknown_preset(self):
        with pytest.raises(InvalidPayouts):
            PayoutStructure.preset("no_such_game", 100)

    def test_presets_are_valid(self):
        for name, places in COMMON_PAYOUTS.items():
            assert sum(places) == pytest.approx(100), name
            PayoutStructure.preset(name, 100)

    def test_from_fractions(self):
        payouts = PayoutStructure.from_fractions([0.6, 0.4], 50)
        assert payouts.amounts() == pytest.approx([30, 20])


class TestFinishProbabilities:
    def test_rows_and_columns_sum_to_one(self):
        finish = finish_probabilities([5000, 3000, 2000, 1000])
        assert finish.shape == (4, 4)
        assert np.allclose(finish.sum(axis=0), 1.0)
        assert np.allclose(finish.sum(axis=1), 1.0)

    def test_first_place_is_chip_share(self):
        finish = finish_probabilities([50, 30, 20])
        assert finish[:, 0] == pytest.approx([0.5, 0.3, 0.2])

    def test_three_players_exact(self):
        finish = finish_probabilities([50, 30, 20])
        # C is second after A wins (20 of the 50 left) or after B wins (20 of 70)
        expected = 0.5 * 20 / 50 + 0.3 * 20 / 70
        assert finish[2, 1] == pytest.approx(expected)
        assert finish[2, 2] == pytest.approx(1 - 0.2 - expected)

    def test_zero_chip_player_finishes_last(self):
        finish = finish_probabilities([60, 40, 0])
        assert finish[2].tolist() == pytest.approx([0.0, 0.0, 1.0])

    def test_all_zero_but_one(self):
        finish = finish_probabilities([100, 0, 0])
        assert finish[0, 0] == 1.0
        assert finish[1, 1:] == pytest.approx([0.5, 0.5])

    @pytest.mark.parametrize("stacks", [[], [-1, 10], [0, 0]])
    def test_invalid_stacks(self, stacks):
        with pytest.raises(InvalidChips):
            finish_probabilities(stacks)

    def test_too_many_players(self):
        with pytest.raises(ValueError):
            finish_probabilities([100] * (MAX_PLAYERS + 1))


class TestCalculateICM:
    @pytest.mark.parametrize("stack", [1, 1000, 1e6, 1e15])
    def test_equal_stacks_winner_take_all(self, stack):
        result = calculate_icm(make_players(stack, stack), PayoutStructure([100]))
        assert [p.icm_equity for p in result.players] == pytest.approx([50.0, 50.0])

    def test_conserves_prize_pool(self, sng_payouts):
        result = calculate_icm(make_players(4000, 2500, 2000, 1000, 500), sng_payouts)
        assert sum(p.icm_equity for p in result.players) == pytest.approx(100.0)
        assert sum(p.icm_percentage for p in result.players) == pytest.approx(100.0)
        # Unpaid places padded with zero
        assert result.payouts == pytest.approx([50, 30, 20, 0, 0])

    def test_differential_signs(self, sng_payouts):
        result = calculate_icm(make_players(5000, 3000, 2000), sng_payouts)
        assert result.get("A").chip_percentage == pytest.approx(50.0)
        assert result.get("A").differential < 0
        assert result.get("C").differential > 0

    def test_bigger_stack_bigger_equity(self, sng_payouts):
        result = calculate_icm(make_players(5000, 3000, 2000), sng_payouts)
        equities = [p.icm_equity for p in result.players]
        assert equities == sorted(equities, reverse=True)

    def test_exact_three_player_equity(self, sng_payouts):
        result = calculate_icm(make_players(50, 30, 20), sng_payouts)
        c = result.get("C")
        p2 = 0.5 * 20 / 50 + 0.3 * 20 / 70
        p3 = 1 - 0.2 - p2
        assert c.icm_equity == pytest.approx(0.2 * 50 + p2 * 30 + p3 * 20)
        assert c.finish_probabilities == pytest.approx([0.2, p2, p3])

    def test_busted_player_gets_last_prize(self, sng_payouts):
        result = calculate_icm(make_players(70, 30, 0), sng_payouts)
        assert result.get("C").icm_equity == pytest.approx(20.0)

    def test_more_places_than_players(self):
        payouts = PayoutStructure([50, 30, 20])
        with pytest.raises(InvalidPayouts):
            calculate_icm(make_players(100, 100), payouts)

    def test_duplicate_ids(self, sng_payouts):
        players = [ICMPlayer("A", 10), ICMPlayer("A", 20), ICMPlayer("B", 30)]
        with pytest.raises(ValueError):
            calculate_icm(players, sng_payouts)

    def test_unknown_player(self, sng_payouts):
        result = calculate_icm(make_players(50, 30, 20), sng_payouts)
        with pytest.raises(ValueError):
            result.get("Z")

    def test_negative_chips(self, sng_payouts):
        with pytest.raises(InvalidChips):
            calculate_icm(make_players(50, -30, 20), sng_payouts)


class TestQuickICM:
    def test_heads_up_closed_form(self):
        assert heads_up_icm([75, 25], [70, 30]) == pytest.approx([60.0, 40.0])

    def test_heads_up_matches_full(self):
        quick = quick_icm([6000, 4000], [65, 35])
        full = calculate_icm(make_players(6000, 4000), PayoutStructure([65, 35]))
        assert quick == pytest.approx([p.icm_equity for p in full.players])

    def test_multiway(self):
        equities = quick_icm([5000, 3000, 2000], [500, 300, 200])
        assert sum(equities) == pytest.approx(1000)
        assert equities[0] > equities[1] > equities[2]

    def test_too_many_places(self):
        with pytest.raises(InvalidPayouts):
            quick_icm([100, 100], [50, 30, 20])


class TestICMDecisions:
    def test_pressure(self, sng_payouts):
        players = make_players(5000, 3000, 2000)
        assert icm_pressure("A", players, sng_payouts) < 0
        assert icm_pressure("C", players, sng_payouts) > 0

    def test_decision_ev(self):
        payouts = PayoutStructure([50, 30, 20])
        before = make_players(50, 30, 20)
        after_win = make_players(30, 30, 40)
        after_lose = make_players(70, 30, 0)

        decision = icm_decision_ev(before, after_win, after_lose, "C", 0.5, payouts)

        win_equity = calculate_icm(after_win, payouts).get("C").icm_equity
        before_equity = calculate_icm(before, payouts).get("C").icm_equity
        assert decision.chip_ev == pytest.approx(20.0)
        assert decision.icm_ev == pytest.approx(0.5 * win_equity + 0.5 * 20.0)
        assert decision.icm_diff == pytest.approx(decision.icm_ev - before_equity)

    def test_certain_win(self):
        payouts = PayoutStructure([50, 30, 20])
        decision = icm_decision_ev(
            make_players(50, 30, 20), make_players(30, 30, 40), make_players(70, 30, 0),
            "C", 1.0, payouts,
        )
        assert decision.chip_ev == pytest.approx(40.0)

    def test_probability_range(self):
        payouts = PayoutStructure([50, 30, 20])
        players = make_players(50, 30, 20)
        with pytest.raises(ValueError):
            icm_decision_ev(players, players, players, "C", 1.5, payouts)


def hero_equity(hero, villain, *others, payouts):
    players = [ICMPlayer("hero", hero), ICMPlayer("villain", villain)]
    players += [ICMPlayer(f"other{i}", chips) for i, chips in enumerate(others)]
    return calculate_icm(players, payouts).get("hero").icm_equity


class TestPushFold:
    def test_heads_up_exact(self):
        payouts = PayoutStructure([65, 35])
        decision = icm_push_fold(10, 10, [], payouts, small_blind=1, big_blind=2)

        # Fold: 9 vs 11. Uncalled: 12 vs 8. Called: 65 or 35 at even equity
        assert decision.ev_fold == pytest.approx(9 / 20 * 65 + 11 / 20 * 35)
        assert decision.ev_uncalled == pytest.approx(12 / 20 * 65 + 8 / 20 * 35)
        assert decision.ev_called == pytest.approx(50.0)
        assert decision.ev_push == pytest.approx(0.5 * 53.0 + 0.5 * 50.0)
        assert decision.should_push

    def test_three_handed_uncalled(self):
        payouts = PayoutStructure([50, 30, 20])
        decision = icm_push_fold(20, 50, [30], payouts, small_blind=1, big_blind=2, call_frequency=0.0)
        assert decision.ev_push == pytest.approx(hero_equity(22, 48, 30, payouts=payouts))
        assert decision.ev_fold == pytest.approx(hero_equity(19, 51, 30, payouts=payouts))
        assert decision.should_push

    def test_three_handed_bust(self):
        payouts = PayoutStructure([50, 30, 20])
        decision = icm_push_fold(
            20, 50, [30], payouts, small_blind=1, big_blind=2,
            equity_when_called=0.0, call_frequency=1.0,
        )
        # Busted hero keeps the last paid place
        assert decision.ev_push == pytest.approx(20.0)
        assert not decision.should_push

    def test_antes(self):
        payouts = PayoutStructure([50, 30, 20])
        decision = icm_push_fold(20, 50, [30], payouts, small_blind=1, big_blind=2, ante=1)
        assert decision.ev_fold == pytest.approx(hero_equity(18, 53, 29, payouts=payouts))
        assert decision.ev_uncalled == pytest.approx(hero_equity(24, 47, 29, payouts=payouts))

    def test_button(self):
        payouts = PayoutStructure([50, 30, 20])
        decision = icm_push_fold(
            20, 50, [30], payouts, small_blind=1, big_blind=2, call_frequency=0.0, position="btn"
        )
        # Folding on the button costs nothing
        assert decision.ev_fold == pytest.approx(hero_equity(20, 51, 29, payouts=payouts))
        assert decision.ev_push == pytest.approx(hero_equity(23, 48, 29, payouts=payouts))

    def test_button_needs_small_blind(self):
        with pytest.raises(ValueError):
            icm_push_fold(10, 10, [], PayoutStructure([100]), 1, 2, position="btn")

    @pytest.mark.parametrize("kwargs", [
        {"position": "utg"},
        {"call_frequency": 1.5},
        {"equity_when_called": -0.1},
        {"ante": -1},
    ])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            icm_push_fold(20, 50, [30], PayoutStructure([50, 30, 20]), 1, 2, **kwargs)

    def test_needs_chips(self):
        with pytest.raises(InvalidChips):
            icm_push_fold(0, 50, [30], PayoutStructure([50, 30, 20]), 1, 2)
