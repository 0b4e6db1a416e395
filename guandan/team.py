"""Teams of two players sharing a level rank."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .cards import CardPoint


@dataclass
class Team:
    """A team identified by an id, with its players and current level rank."""

    id: int
    players: list[Any] = field(default_factory=list)
    current_level_rank: CardPoint = CardPoint.TWO

    def add_player(self, player: Any) -> None:
        """Add a player once; None and repeats are ignored."""
        if player is None or any(p is player for p in self.players):
            return
        self.players.append(player)