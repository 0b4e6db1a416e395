"""Level progression of the two teams across rounds."""

from __future__ import annotations

import logging
from typing import Any

from .cards import CardPoint

logger = logging.getLogger(__name__)

_LEVEL_POINTS = tuple(p for p in CardPoint if CardPoint.TWO <= p <= CardPoint.ACE)
_ACE_LEVEL = 13
_INCREMENT_BY_PARTNER_RANK = {1: 3, 2: 2, 3: 1}
_ACE_FAILURE_LIMIT = 3


def card_point_to_level(point: CardPoint) -> int:
    """Map 2..A to levels 1..13; other points give 2 with a warning."""
    if point in _LEVEL_POINTS:
        return _LEVEL_POINTS.index(point) + 1
    logger.warning("Invalid card point for a level: %s", int(point))
    return 2


def level_to_card_point(level: int) -> CardPoint:
    """Map levels 1..13 to 2..A; other levels give 2 with a warning."""
    if 1 <= level <= len(_LEVEL_POINTS):
        return _LEVEL_POINTS[level - 1]
    logger.warning("Invalid level: %s", level)
    return CardPoint.TWO


class LevelStatus:
    """Tracks each team's playing level, failures at ace and the game winner."""

    def __init__(self) -> None:
        self.playing_levels: list[CardPoint] = [CardPoint.TWO, CardPoint.TWO]
        self.failures_at_ace: list[int] = [0, 0]
        self.is_game_over = False
        self.winner_team_id = -1

    def initialize(self, team0: Any, team1: Any) -> None:
        """Reset both teams to level 2 for a new game."""
        self.playing_levels = [CardPoint.TWO, CardPoint.TWO]
        self.failures_at_ace = [0, 0]
        self.is_game_over = False
        self.winner_team_id = -1
        self._sync(team0, team1)

    def _sync(self, team0: Any, team1: Any) -> None:
        team0.current_level_rank = self.playing_levels[0]
        team1.current_level_rank = self.playing_levels[1]

    def update_after_round(
        self, winning_team_id: int, partner_rank: int, team0: Any, team1: Any
    ) -> None:
        """Apply a round result.

        ``partner_rank`` is the finishing place (0-based) of the first
        finisher's partner: 1, 2 or 3 raise the winners by 3, 2 or 1 levels.
        """
        if self.is_game_over:
            logger.debug("Game already won by team %s; levels unchanged.", self.winner_team_id)
            return

        losing_team_id = 1 - winning_team_id
        increment = _INCREMENT_BY_PARTNER_RANK.get(partner_rank, 0)

        if increment > 0:
            current = self.playing_levels[winning_team_id]
            new_level = card_point_to_level(current) + increment
            if (current == CardPoint.ACE and increment > 1) or new_level > _ACE_LEVEL:
                self.is_game_over = True
                self.winner_team_id = winning_team_id
                self._sync(team0, team1)
                return
            self.playing_levels[winning_team_id] = level_to_card_point(new_level)

        if self.playing_levels[losing_team_id] == CardPoint.ACE:
            self.failures_at_ace[losing_team_id] += 1
            if self.failures_at_ace[losing_team_id] >= _ACE_FAILURE_LIMIT:
                self.playing_levels[losing_team_id] = CardPoint.TWO
                self.failures_at_ace[losing_team_id] = 0

        self._sync(team0, team1)

    def playing_level(self, team_id: int) -> CardPoint:
        """Return a team's level; an unknown id gives 2 with a warning."""
        if team_id in (0, 1):
            return self.playing_levels[team_id]
        logger.warning("Invalid team id: %s", team_id)
        return CardPoint.TWO