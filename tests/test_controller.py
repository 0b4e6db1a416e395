import random
from collections import Counter

import pytest

from guandan.cards import Card, CardPoint, CardSuit
from guandan.combos import ComboType
from guandan.controller import GameController, GameError, GameEvent, GamePhase
from guandan.deck import CardDeck
from guandan.player import Player
from guandan.team import Team
from guandan.tributes import is_valid_tribute_card


def make_table():
    players = [Player(f"玩家{i + 1}", i) for i in range(4)]
    teams = [Team(0), Team(1)]
    for player in (players[0], players[2]):
        teams[0].add_player(player)
        player.team = teams[0]
    for player in (players[1], players[3]):
        teams[1].add_player(player)
        player.team = teams[1]
    return players, teams


def new_game(seed=7):
    players, teams = make_table()
    controller = GameController(rng=random.Random(seed))
    events = []
    controller.subscribe(events.append)
    controller.setup_new_game(players, teams)
    controller.start_game()
    return controller, players, teams, events


@pytest.fixture
def game():
    return new_game()


def give(player, *specs):
    player.hand = sorted(Card(point, suit, player) for point, suit in specs)


def take_lead(controller, player_id):
    controller.current_player_id = player_id
    controller.circle_leader_id = player_id


def names(events):
    return [event.name for event in events]


def play_first_round(controller, players):
    give(players[0], (CardPoint.THREE, CardSuit.SPADE))
    give(players[1], (CardPoint.FOUR, CardSuit.SPADE), (CardPoint.NINE, CardSuit.CLUB))
    give(players[2], (CardPoint.FIVE, CardSuit.SPADE))
    give(players[3], (CardPoint.SIX, CardSuit.SPADE), (CardPoint.EIGHT, CardSuit.CLUB))
    take_lead(controller, 0)
    controller.play(0, [Card(CardPoint.THREE, CardSuit.SPADE)])
    controller.play(1, [Card(CardPoint.FOUR, CardSuit.SPADE)])
    controller.play(2, [Card(CardPoint.FIVE, CardSuit.SPADE)])
    controller.play(3, [Card(CardPoint.SIX, CardSuit.SPADE)])
    controller.pass_turn(1)
    controller.play(3, [Card(CardPoint.EIGHT, CardSuit.CLUB)])


def test_setup_requires_four_players():
    players, teams = make_table()
    with pytest.raises(GameError):
        GameController().setup_new_game(players[:3], teams)


def test_setup_requires_team_for_each_player():
    players, teams = make_table()
    players[1].team = None
    with pytest.raises(GameError):
        GameController().setup_new_game(players, teams)


def test_setup_requires_two_players_per_team():
    players, teams = make_table()
    teams[1].players.pop()
    with pytest.raises(GameError):
        GameController().setup_new_game(players, teams)


def test_start_without_setup_raises():
    with pytest.raises(GameError):
        GameController().start_game()


def test_start_deals_whole_deck(game):
    controller, players, _, events = game
    assert all(len(player.hand) == 27 for player in players)
    dealt = Counter(card for player in players for card in player.hand)
    assert dealt == Counter(CardDeck().cards)
    assert controller.phase is GamePhase.PLAYING
    assert controller.round_number == 1
    assert names(events).count("cards_dealt") == 4
    assert controller.current_player_id in range(4)


def test_start_announces_game(game):
    _, _, _, events = game
    assert names(events)[0] == "game_started"
    messages = [e.data["message"] for e in events if e.name == "broadcast"]
    assert "掼蛋游戏开始！" in messages


def test_active_player_ids_at_start(game):
    controller, _, _, _ = game
    assert controller.active_player_ids() == [0, 1, 2, 3]
    assert controller.player_by_id(2).name == "玩家3"
    assert controller.player_by_id(9) is None


def test_play_out_of_turn_raises(game):
    controller, _, _, events = game
    other = (controller.current_player_id + 1) % 4
    with pytest.raises(GameError) as info:
        controller.play(other, [Card(CardPoint.THREE, CardSuit.SPADE)])
    assert info.value.player_id == other
    last = events[-1]
    assert last == GameEvent(
        "player_message", {"player_id": other, "message": "还没轮到您出牌", "is_error": True}
    )


def test_pass_on_empty_table_raises(game):
    controller, _, _, _ = game
    with pytest.raises(GameError):
        controller.pass_turn(controller.current_player_id)


def test_pass_before_game_raises():
    with pytest.raises(GameError):
        GameController().pass_turn(0)


def test_play_unowned_card_raises(game):
    controller, players, _, _ = game
    take_lead(controller, 0)
    give(players[0], (CardPoint.THREE, CardSuit.SPADE))
    with pytest.raises(GameError):
        controller.play(0, [Card(CardPoint.FOUR, CardSuit.SPADE)])
    assert players[0].hand == [Card(CardPoint.THREE, CardSuit.SPADE)]


def test_play_invalid_combo_raises(game):
    controller, players, _, _ = game
    take_lead(controller, 0)
    give(players[0], (CardPoint.THREE, CardSuit.SPADE), (CardPoint.SEVEN, CardSuit.CLUB))
    with pytest.raises(GameError):
        controller.play(0, list(players[0].hand))
    assert len(players[0].hand) == 2


def test_play_single_removes_one_copy(game):
    controller, players, _, _ = game
    take_lead(controller, 0)
    give(
        players[0],
        (CardPoint.FIVE, CardSuit.SPADE),
        (CardPoint.FIVE, CardSuit.SPADE),
        (CardPoint.SEVEN, CardSuit.CLUB),
    )
    combo = controller.play(0, [Card(CardPoint.FIVE, CardSuit.SPADE)])
    assert combo.type == ComboType.SINGLE
    assert players[0].hand == [
        Card(CardPoint.FIVE, CardSuit.SPADE),
        Card(CardPoint.SEVEN, CardSuit.CLUB),
    ]
    assert controller.table_combo.type == ComboType.SINGLE
    assert controller.current_player_id == 1


def test_everyone_passing_returns_lead(game):
    controller, players, _, events = game
    take_lead(controller, 0)
    give(players[0], (CardPoint.THREE, CardSuit.SPADE), (CardPoint.FOUR, CardSuit.SPADE))
    controller.play(0, [Card(CardPoint.THREE, CardSuit.SPADE)])
    for pid in (1, 2, 3):
        assert controller.current_player_id == pid
        controller.pass_turn(pid)
    assert not controller.table_combo.is_valid()
    assert controller.current_player_id == 0
    assert "table_cleared" in names(events)
    assert controller.passed_in_circle == set()


def test_hint_suggests_a_play(game):
    controller, players, _, _ = game
    take_lead(controller, 0)
    give(players[0], (CardPoint.SEVEN, CardSuit.SPADE))
    hint = controller.request_hint(0)
    assert hint.type == ComboType.SINGLE
    assert hint.description().startswith("单张")
    assert controller.request_hint(1) is None


def test_round_summary_lists_team_levels(game):
    controller, _, _, _ = game
    summary = controller.round_summary()
    assert summary.startswith("第1局结束！\n最终排名：\n")
    assert "队伍1当前级牌：2" in summary


def test_first_round_finishes_and_levels_rise(game):
    controller, players, teams, events = game
    play_first_round(controller, players)
    rounds = [e for e in events if e.name == "round_over"]
    assert len(rounds) == 1
    assert rounds[0].data["ranks"] == [0, 2, 3, 1]
    assert rounds[0].data["summary"].startswith("第1局结束！")
    assert teams[0].current_level_rank == CardPoint.FIVE
    assert teams[1].current_level_rank == CardPoint.TWO
    assert controller.round_number == 2
    assert sum(len(p.hand) for p in players) == 108
    assert controller.phase in (GamePhase.PLAYING, GamePhase.TRIBUTE_INPUT)


def test_select_tribute_outside_tribute_phase_raises(game):
    controller, players, _, _ = game
    with pytest.raises(GameError):
        controller.select_tribute_card(0, players[0].hand[0])


def test_double_down_tribute_flow():
    for seed in range(40):
        controller, players, _, events = new_game(seed)
        play_first_round(controller, players)
        if controller.phase is GamePhase.TRIBUTE_INPUT:
            break
    assert controller.phase is GamePhase.TRIBUTE_INPUT

    asks = [e for e in events if e.name == "ask_for_tribute"]
    assert asks[-1].data["from_player_id"] == 3
    assert asks[-1].data["to_player_id"] == 0

    giver = players[3]
    level = controller.level_status.playing_level(giver.team.id)
    weakest = giver.hand[0]
    with pytest.raises(GameError):
        controller.select_tribute_card(3, weakest)
    with pytest.raises(GameError):
        controller.select_tribute_card(1, giver.hand[-1])

    for _ in range(2):
        pid = [e for e in events if e.name == "ask_for_tribute"][-1].data["from_player_id"]
        hand = controller.player_by_id(pid).hand
        level = controller.level_status.playing_level(controller.player_by_id(pid).team.id)
        card = next(c for c in hand if is_valid_tribute_card(hand, c, level))
        controller.select_tribute_card(pid, card)

    assert controller.phase is GamePhase.PLAYING
    assert "tribute_phase_ended" in names(events)
    assert all(len(p.hand) == 27 for p in players)
    assert controller.current_player_id in (1, 3)
    assert all(t.card is not None for t in controller.pending_tributes)