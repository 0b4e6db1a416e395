import pytest

from guandan.cards import CardPoint
from guandan.levels import LevelStatus, card_point_to_level, level_to_card_point
from guandan.team import Team


@pytest.fixture
def setup():
    status = LevelStatus()
    t0, t1 = Team(0), Team(1)
    status.initialize(t0, t1)
    return status, t0, t1


@pytest.mark.parametrize("point", [p for p in CardPoint if p <= CardPoint.ACE])
def test_level_round_trip(point):
    assert level_to_card_point(card_point_to_level(point)) == point


def test_level_bounds():
    assert card_point_to_level(CardPoint.TWO) == 1
    assert card_point_to_level(CardPoint.ACE) == 13


def test_invalid_conversions_fall_back():
    assert card_point_to_level(CardPoint.BIG_JOKER) == 2
    assert level_to_card_point(0) == CardPoint.TWO
    assert level_to_card_point(14) == CardPoint.TWO


def test_initialize(setup):
    status, t0, t1 = setup
    assert t0.current_level_rank == CardPoint.TWO
    assert t1.current_level_rank == CardPoint.TWO
    assert status.is_game_over is False
    assert status.winner_team_id == -1


def test_partner_second_raises_three(setup):
    status, t0, t1 = setup
    status.update_after_round(0, 1, t0, t1)
    assert status.playing_level(0) == CardPoint.FIVE
    assert t0.current_level_rank == CardPoint.FIVE
    assert t1.current_level_rank == CardPoint.TWO


def test_increments_decrease_with_partner_rank():
    results = []
    for rank in (1, 2, 3):
        status = LevelStatus()
        t0, t1 = Team(0), Team(1)
        status.initialize(t0, t1)
        status.update_after_round(1, rank, t0, t1)
        results.append(card_point_to_level(status.playing_level(1)))
    assert results[0] - results[1] == 1
    assert results[1] - results[2] == 1
    assert results[2] > card_point_to_level(CardPoint.TWO)


@pytest.mark.parametrize("rank", [0, 4, -1])
def test_other_partner_ranks_do_not_raise(setup, rank):
    status, t0, t1 = setup
    status.update_after_round(0, rank, t0, t1)
    assert status.playing_level(0) == CardPoint.TWO
    assert status.is_game_over is False


def test_winning_at_ace_ends_game(setup):
    status, t0, t1 = setup
    status.playing_levels[1] = CardPoint.ACE
    status.update_after_round(1, 1, t0, t1)
    assert status.is_game_over is True
    assert status.winner_team_id == 1
    assert status.playing_level(1) == CardPoint.ACE


def test_passing_ace_ends_game(setup):
    status, t0, t1 = setup
    status.playing_levels[0] = CardPoint.KING
    status.update_after_round(0, 1, t0, t1)
    assert status.is_game_over is True
    assert status.winner_team_id == 0
    assert t0.current_level_rank == CardPoint.KING


def test_no_updates_after_game_over(setup):
    status, t0, t1 = setup
    status.playing_levels[0] = CardPoint.ACE
    status.update_after_round(0, 1, t0, t1)
    status.update_after_round(1, 1, t0, t1)
    assert status.winner_team_id == 0
    assert status.playing_level(1) == CardPoint.TWO


def test_three_failures_at_ace_drop_to_two(setup):
    status, t0, t1 = setup
    status.playing_levels[1] = CardPoint.ACE
    status.update_after_round(0, 3, t0, t1)
    status.update_after_round(0, 3, t0, t1)
    assert status.playing_level(1) == CardPoint.ACE
    assert status.failures_at_ace[1] == 2
    status.update_after_round(0, 3, t0, t1)
    assert status.playing_level(1) == CardPoint.TWO
    assert status.failures_at_ace[1] == 0
    assert t1.current_level_rank == CardPoint.TWO


def test_invalid_team_id_gives_two(setup):
    status, _, _ = setup
    status.playing_levels[0] = CardPoint.NINE
    assert status.playing_level(5) == CardPoint.TWO