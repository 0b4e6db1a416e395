"""Flow of a four-player GuanDan game: rounds, turns, circles and tributes."""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .cards import Card
from .combos import ComboInfo
from .deck import CardDeck
from .levels import LevelStatus
from .player import Player
from .plays import all_possible_valid_plays
from .team import Team
from .tributes import (
    Tribute,
    can_resist_tribute,
    choose_return_card,
    is_valid_tribute_card,
    plan_tributes,
)

logger = logging.getLogger(__name__)

_CARDS_PER_PLAYER = 27
_PLAYER_COUNT = 4
_TEAM_COUNT = 2


class GamePhase(Enum):
    """Stages a game moves through."""

    NOT_STARTED = "not_started"
    DEALING = "dealing"
    PLAYING = "playing"
    TRIBUTE_INPUT = "tribute_input"
    TRIBUTE_PROCESS = "tribute_process"
    ROUND_OVER = "round_over"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class GameEvent:
    """A notification sent to subscribers, named with its data."""

    name: str
    data: dict[str, Any] = field(default_factory=dict)


class GameError(Exception):
    """An action that the rules or the current game state do not allow."""

    def __init__(self, message: str, player_id: int | None = None) -> None:
        super().__init__(message)
        self.player_id = player_id


class GameController:
    """Runs a game between four players in two teams and reports events."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._listeners: list[Callable[[GameEvent], None]] = []
        self._team_pair: tuple[Team, Team] | None = None
        self.players: dict[int, Player] = {}
        self.teams: dict[int, Team] = {}
        self.level_status = LevelStatus()
        self.current_player_id = -1
        self.table_combo = ComboInfo()
        self.circle_leader_id = -1
        self.passed_in_circle: set[int] = set()
        self.finish_order: list[int] = []
        self.round_number = 0
        self.phase = GamePhase.NOT_STARTED
        self.pending_tributes: list[Tribute] = []
        self.tribute_index = 0

    # ----- events -------------------------------------------------------

    def subscribe(self, listener: Callable[[GameEvent], None]) -> None:
        """Call ``listener`` with every event the game produces."""
        self._listeners.append(listener)

    def _emit(self, name: str, **data: Any) -> None:
        event = GameEvent(name, data)
        for listener in list(self._listeners):
            listener(event)

    def _broadcast(self, message: str) -> None:
        self._emit("broadcast", message=message)

    def _reject(self, player_id: int, message: str) -> GameError:
        self._emit("player_message", player_id=player_id, message=message, is_error=True)
        return GameError(message, player_id)

    # ----- setup --------------------------------------------------------

    def setup_new_game(self, players: Sequence[Player], teams: Sequence[Team]) -> None:
        """Register four players and two teams of two, and reset the levels."""
        self.players.clear()
        self.teams.clear()
        self._team_pair = None
        self.passed_in_circle.clear()
        self.finish_order.clear()
        self.pending_tributes.clear()

        if len(players) != _PLAYER_COUNT or len(teams) != _TEAM_COUNT:
            raise GameError("掼蛋需要4个玩家和2个队伍")
        for player in players:
            if player is None:
                continue
            if player.team is None:
                raise GameError(f"玩家{player.name}没有所属队伍")
            self.players[player.id] = player
        for team in teams:
            if team is None:
                continue
            if len(team.players) != 2:
                raise GameError("每个队伍必须有2个玩家")
            self.teams[team.id] = team

        self._team_pair = (teams[0], teams[1])
        self.level_status.initialize(teams[0], teams[1])
        logger.debug("Game set up with %d players and %d teams.", len(self.players), len(self.teams))

    def start_game(self) -> None:
        """Start the first round."""
        if len(self.players) != _PLAYER_COUNT or len(self.teams) != _TEAM_COUNT:
            raise GameError("需要4个玩家和2个队伍才能开始游戏")
        self.phase = GamePhase.DEALING
        self.round_number = 1
        self._emit("game_started")
        self._broadcast("掼蛋游戏开始！")
        self._start_new_round()

    # ----- player actions -----------------------------------------------

    def play(self, player_id: int, cards: Iterable[Card]) -> ComboInfo:
        """Play ``cards`` for ``player_id`` and return the combo they form."""
        cards = list(cards)
        if self.phase is not GamePhase.PLAYING:
            raise self._reject(player_id, "当前不是出牌阶段")
        if player_id != self.current_player_id:
            raise self._reject(player_id, "还没轮到您出牌")
        player = self.player_by_id(player_id)
        combo = self._playable_combo(player, cards)
        if player is None or combo is None:
            raise self._reject(player_id, "出牌不符合规则")

        self._take_cards(player, cards)
        self.table_combo = combo
        self.circle_leader_id = player_id
        self.passed_in_circle.clear()

        self._emit("player_hand_updated", player_id=player_id, hand=list(player.hand))
        self._emit("table_updated", combo=combo, player_name=player.name)
        self._broadcast(f"{player.name} 出牌：{combo.description()}")

        if not player.hand:
            self.finish_order.append(player_id)
            self._broadcast(f"{player.name} 出完了所有牌！")
            if len(self.finish_order) == 1:
                self._clear_table()

        if len(self.active_player_ids()) <= 1:
            self._finish_round()
        elif self._all_others_passed(self.circle_leader_id):
            self._close_circle()
        else:
            self._next_player_turn()
        return combo

    def pass_turn(self, player_id: int) -> None:
        """Decline to beat the combo on the table."""
        if self.phase is not GamePhase.PLAYING:
            raise self._reject(player_id, "当前不是出牌阶段")
        if player_id != self.current_player_id:
            raise self._reject(player_id, "还没轮到您操作")
        if not self.table_combo.is_valid():
            raise self._reject(player_id, "您是第一个出牌，不能过牌")
        player = self.player_by_id(player_id)
        if player is None:
            return

        self.passed_in_circle.add(player_id)
        self._broadcast(f"{player.name} 选择不出")
        if self._all_others_passed(self.circle_leader_id):
            self._close_circle()
        else:
            self._next_player_turn()

    def request_hint(self, player_id: int) -> ComboInfo | None:
        """Suggest a random legal play from the player's hand, if any."""
        if self.phase is not GamePhase.PLAYING or player_id != self.current_player_id:
            return None
        player = self.player_by_id(player_id)
        if player is None:
            return None
        plays = all_possible_valid_plays(
            player.hand, player, self.table_combo.type, self.table_combo.level
        )
        if not plays:
            self._emit(
                "player_message",
                player_id=player_id,
                message="没有找到可以出的牌，建议过牌",
                is_error=False,
            )
            return None
        suggestion = self._rng.choice(plays)
        self._emit(
            "player_message",
            player_id=player_id,
            message=f"建议出牌：{suggestion.description()}",
            is_error=False,
        )
        return suggestion

    def select_tribute_card(self, player_id: int, card: Card) -> None:
        """Hand over ``card`` as the tribute now owed by ``player_id``."""
        if self.phase is not GamePhase.TRIBUTE_INPUT:
            raise self._reject(player_id, "当前不是进贡阶段")
        if self.tribute_index >= len(self.pending_tributes):
            return
        tribute = self.pending_tributes[self.tribute_index]
        if tribute.from_player_id != player_id:
            raise self._reject(player_id, "现在不是您进贡的时候")
        player = self.player_by_id(player_id)
        if player is None or card not in player.hand:
            raise self._reject(player_id, "您没有这张牌")
        level = self.level_status.playing_level(player.team.id)
        if not is_valid_tribute_card(player.hand, card, level):
            raise self._reject(player_id, "必须进贡您手中最大的牌（红桃级牌除外）")

        tribute.card = next(held for held in player.hand if held == card)
        self._complete_tribute(tribute)
        self.tribute_index += 1
        self._process_next_tribute()

    # ----- queries ------------------------------------------------------

    def player_by_id(self, player_id: int) -> Player | None:
        return self.players.get(player_id)

    def active_player_ids(self) -> list[int]:
        """Ids of players still holding cards this round, in seat order."""
        return [pid for pid in sorted(self.players) if pid not in self.finish_order]

    def round_summary(self) -> str:
        """Describe the finishing order and the teams' current level cards."""
        lines = [f"第{self.round_number}局结束！", "最终排名："]
        for rank, pid in enumerate(self.finish_order, 1):
            player = self.player_by_id(pid)
            if player is not None:
                lines.append(f"第{rank}名：{player.name}")
        for team_id in sorted(self.teams):
            team = self.teams[team_id]
            level_name = Card(team.current_level_rank).point_name()
            lines.append(f"队伍{team_id + 1}当前级牌：{level_name}")
        return "\n".join(lines) + "\n"

    # ----- round flow ---------------------------------------------------

    def _start_new_round(self) -> None:
        previous_order = list(self.finish_order)
        self.phase = GamePhase.DEALING
        self.finish_order.clear()
        self.passed_in_circle.clear()
        self.table_combo = ComboInfo()
        self.circle_leader_id = -1

        self._emit("new_round_started", round_number=self.round_number)
        level_name = Card(self.level_status.playing_level(0)).point_name()
        self._broadcast(f"第{self.round_number}局开始！当前级牌：{level_name}")

        self._deal_cards()
        if self.round_number > 1:
            self._start_tribute_phase(previous_order)
        else:
            self.phase = GamePhase.PLAYING
            self._choose_random_first_player()

    def _deal_cards(self) -> None:
        deck = CardDeck(self._rng)
        for seat, player_id in enumerate(sorted(self.players)):
            player = self.players[player_id]
            dealt = deck.cards[seat * _CARDS_PER_PLAYER:(seat + 1) * _CARDS_PER_PLAYER]
            player.hand.clear()
            player.add_cards(Card(card.point, card.suit, player) for card in dealt)
            self._emit("cards_dealt", player_id=player_id, hand=list(player.hand))

    def _choose_random_first_player(self) -> None:
        first = self._rng.choice(self.active_player_ids())
        self.circle_leader_id = first
        self._set_turn(first)
        player = self.players[first]
        self._broadcast(f"第{self.round_number}局开始，随机选择{player.name}先出牌！")

    def _set_turn(self, player_id: int) -> None:
        self.current_player_id = player_id
        player = self.player_by_id(player_id)
        if player is None:
            logger.warning("Player %s does not exist.", player_id)
            return
        self._emit("current_turn", player_id=player_id, player_name=player.name)
        self._emit("controls_enabled", player_id=player_id, can_play=True, can_pass=False)

    def _next_active_after(self, player_id: int) -> int | None:
        seats = sorted(self.players)
        if not seats:
            return None
        start = seats.index(player_id) if player_id in seats else -1
        for offset in range(1, len(seats) + 1):
            candidate = seats[(start + offset) % len(seats)]
            if candidate not in self.finish_order:
                return candidate
        return None

    def _next_player_turn(self) -> None:
        next_id = self._next_active_after(self.current_player_id)
        if next_id is None:
            logger.debug("Every player has finished; no next turn.")
            return
        self._set_turn(next_id)

    def _all_others_passed(self, leader_id: int) -> bool:
        return all(
            pid == leader_id or pid in self.passed_in_circle
            for pid in self.active_player_ids()
        )

    def _clear_table(self) -> None:
        self.table_combo = ComboInfo()
        self._emit("table_cleared")

    def _close_circle(self) -> None:
        self.passed_in_circle.clear()
        self._clear_table()
        leader = self.circle_leader_id
        if leader in self.finish_order:
            leader = self._next_active_after(leader)
        if leader is None:
            return
        self.circle_leader_id = leader
        self._set_turn(leader)
        player = self.players[leader]
        self._broadcast(f"所有玩家都过牌，轮到 {player.name} 出牌")

    def _playable_combo(self, player: Player | None, cards: list[Card]) -> ComboInfo | None:
        if player is None:
            return None
        held = Counter(player.hand)
        if any(held[card] < count for card, count in Counter(cards).items()):
            return None
        plays = all_possible_valid_plays(
            cards, player, self.table_combo.type, self.table_combo.level
        )
        return plays[0] if plays else None

    @staticmethod
    def _take_cards(player: Player, cards: Iterable[Card]) -> None:
        """Remove exactly one held copy for each card given."""
        needed = Counter(cards)
        kept: list[Card] = []
        for card, count in needed.items():
            copies = [held for held in player.hand if held == card]
            kept.extend(copies[count:])
        player.remove_cards(list(needed))
        if kept:
            player.add_cards(kept)

    def _finish_round(self) -> None:
        for pid in sorted(self.players):
            if pid not in self.finish_order:
                self.finish_order.append(pid)
        self._process_round_results()

    def _process_round_results(self) -> None:
        if len(self.finish_order) != _PLAYER_COUNT or self._team_pair is None:
            return
        winner = self.player_by_id(self.finish_order[0])
        if winner is None or winner.team is None:
            return
        winning_team = winner.team
        partner_rank = next(
            (
                rank
                for rank, pid in enumerate(self.finish_order[1:], 1)
                if self.players[pid].team is winning_team
            ),
            None,
        )
        if partner_rank is None:
            return

        team0, team1 = self._team_pair
        self.level_status.update_after_round(winning_team.id, partner_rank, team0, team1)

        self.phase = GamePhase.ROUND_OVER
        self._emit("round_over", summary=self.round_summary(), ranks=list(self.finish_order))

        if self.level_status.is_game_over:
            winner_id = self.level_status.winner_team_id
            self.phase = GamePhase.GAME_OVER
            self._emit(
                "game_over",
                team_id=winner_id,
                team_name=f"队伍{winner_id + 1}",
                message=f"恭喜{winner_id + 1}队获得最终胜利！",
            )
        else:
            self.round_number += 1
            self._start_new_round()

    # ----- tributes -----------------------------------------------------

    def _team_of(self, player_id: int) -> Team | None:
        player = self.player_by_id(player_id)
        return player.team if player is not None else None

    def _start_tribute_phase(self, previous_order: list[int]) -> None:
        self.phase = GamePhase.TRIBUTE_PROCESS
        self.pending_tributes = []
        self.tribute_index = 0

        if len(previous_order) < _PLAYER_COUNT:
            self.phase = GamePhase.PLAYING
            if previous_order:
                self.circle_leader_id = previous_order[-1]
                self._set_turn(previous_order[-1])
            else:
                self._choose_random_first_player()
            return

        first, _, third, fourth = previous_order[:4]
        double_down = self._team_of(third) is self._team_of(fourth)
        if can_resist_tribute(
            self.players[third].hand, self.players[fourth].hand, double_down
        ):
            self._broadcast("抗贡成功！")
            self.phase = GamePhase.PLAYING
            self.circle_leader_id = first
            self._set_turn(first)
            return

        self.pending_tributes = plan_tributes(previous_order, self._team_of)
        self._broadcast("双下！需要进贡" if double_down else "单下！需要进贡")
        self._process_next_tribute()

    def _process_next_tribute(self) -> None:
        while self.tribute_index < len(self.pending_tributes):
            tribute = self.pending_tributes[self.tribute_index]
            giver = self.player_by_id(tribute.from_player_id)
            receiver = self.player_by_id(tribute.to_player_id)
            if not tribute.is_return:
                self.phase = GamePhase.TRIBUTE_INPUT
                if giver is not None and receiver is not None:
                    self._emit(
                        "ask_for_tribute",
                        from_player_id=tribute.from_player_id,
                        from_player_name=giver.name,
                        to_player_id=tribute.to_player_id,
                        to_player_name=receiver.name,
                        is_return=False,
                    )
                return
            if giver is not None and receiver is not None:
                same_team = self._team_of(tribute.from_player_id) is self._team_of(
                    tribute.to_player_id
                )
                card = choose_return_card(giver.hand, same_team)
                if card is None:
                    card = choose_return_card(giver.hand, False)
                if card is not None:
                    tribute.card = card
                    self._complete_tribute(tribute)
            self.tribute_index += 1

        self._emit("tribute_phase_ended")
        paid = [t for t in self.pending_tributes if not t.is_return]
        if len(paid) >= 2:
            leader = (
                paid[0].from_player_id
                if paid[0].card > paid[1].card
                else paid[1].from_player_id
            )
        else:
            leader = paid[0].from_player_id
        self.phase = GamePhase.PLAYING
        self.circle_leader_id = leader
        self._set_turn(leader)

    def _complete_tribute(self, tribute: Tribute) -> None:
        giver = self.player_by_id(tribute.from_player_id)
        receiver = self.player_by_id(tribute.to_player_id)
        card = tribute.card
        if giver is None or receiver is None or card is None:
            return
        self._take_cards(giver, [card])
        receiver.add_cards([Card(card.point, card.suit, receiver)])

        self._emit("player_hand_updated", player_id=tribute.from_player_id, hand=list(giver.hand))
        self._emit("player_hand_updated", player_id=tribute.to_player_id, hand=list(receiver.hand))
        action = "还贡" if tribute.is_return else "进贡"
        self._broadcast(
            f"{giver.name} 向 {receiver.name} {action}：{card.suit_name()}{card.point_name()}"
        )