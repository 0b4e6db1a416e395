"""Players holding a hand of cards."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .cards import Card
from .combos import ComboInfo
from .plays import all_possible_valid_plays


class PlayerType(Enum):
    """Who controls a player."""

    HUMAN = "human"
    AI = "ai"
    UNKNOWN = "unknown"


@dataclass(eq=False)
class Player:
    """A seat at the table: name, id, team and the cards in hand.

    Listeners in ``on_cards_updated`` are called whenever the hand changes.
    """

    name: str
    id: int
    team: Any = None
    type: PlayerType = PlayerType.UNKNOWN
    hand: list[Card] = field(default_factory=list)
    ready: bool = False
    on_cards_updated: list[Callable[[], None]] = field(default_factory=list, repr=False)

    def _notify(self) -> None:
        for listener in self.on_cards_updated:
            listener()

    def add_cards(self, cards: Iterable[Card]) -> None:
        """Add cards to the hand and keep it sorted from weakest to strongest."""
        self.hand.extend(cards)
        self.hand.sort()
        self._notify()

    def remove_cards(self, cards: Iterable[Card]) -> None:
        """Remove from the hand every card equal to any of ``cards``."""
        for card in cards:
            self.hand = [held for held in self.hand if held != card]
        self._notify()

    def can_play_cards(self, cards: Iterable[Card], table_combo: ComboInfo) -> bool:
        """Return True if the cards form at least one play that beats the table."""
        plays = all_possible_valid_plays(
            cards, self, table_combo.type, table_combo.level
        )
        return bool(plays)