"""Playing cards for a two-deck GuanDan game."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from functools import total_ordering
from typing import Any

logger = logging.getLogger(__name__)


class CardSuit(IntEnum):
    """Card suits; jokers carry their own suit."""

    DIAMOND = 0
    CLUB = 1
    HEART = 2
    SPADE = 3
    JOKER = 4


class CardPoint(IntEnum):
    """Card points, from 2 up to the big joker."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14
    LITTLE_JOKER = 15
    BIG_JOKER = 16


_SUIT_NAMES = {
    CardSuit.HEART: "Hearts",
    CardSuit.SPADE: "Spades",
    CardSuit.DIAMOND: "Diamonds",
    CardSuit.CLUB: "Clubs",
    CardSuit.JOKER: "Joker",
}

_POINT_NAMES = {
    CardPoint.TWO: "2",
    CardPoint.THREE: "3",
    CardPoint.FOUR: "4",
    CardPoint.FIVE: "5",
    CardPoint.SIX: "6",
    CardPoint.SEVEN: "7",
    CardPoint.EIGHT: "8",
    CardPoint.NINE: "9",
    CardPoint.TEN: "10",
    CardPoint.JACK: "J",
    CardPoint.QUEEN: "Q",
    CardPoint.KING: "K",
    CardPoint.ACE: "ACE",
    CardPoint.LITTLE_JOKER: "2",
    CardPoint.BIG_JOKER: "1",
}


@total_ordering
@dataclass(eq=False)
class Card:
    """A card with a point, a suit and an optional owning player.

    Two cards are equal when point and suit match; the owner is ignored.
    Ordering follows the comparison value under the owner's level, then suit.
    """

    point: CardPoint = CardPoint.TWO
    suit: CardSuit = CardSuit.DIAMOND
    owner: Any = field(default=None, repr=False)

    def _team(self) -> Any:
        if self.owner is None:
            return None
        return getattr(self.owner, "team", None)

    def level_rank(self) -> CardPoint:
        """Return the level rank of the owner's team, or 2 when unknown."""
        team = self._team()
        if team is not None:
            return team.current_level_rank
        logger.warning(
            "Card has no owner or owner has no team; using 2 as the level."
        )
        return CardPoint.TWO

    def comparison_value(self) -> int:
        """Return the absolute strength of the card under the current level."""
        if self.point == CardPoint.BIG_JOKER:
            return 16
        if self.point == CardPoint.LITTLE_JOKER:
            return 15
        if self.point == self.level_rank():
            return 14
        if CardPoint.TWO <= self.point <= CardPoint.ACE:
            return int(self.point) - 1
        return -1

    def is_wild(self) -> bool:
        """Return True for the heart of the owner's level rank."""
        team = self._team()
        if team is None:
            return False
        return self.point == team.current_level_rank and self.suit == CardSuit.HEART

    def suit_name(self) -> str:
        return _SUIT_NAMES[self.suit]

    def point_name(self) -> str:
        return _POINT_NAMES[self.point]

    def image_filename(self) -> str:
        """Return the base name of the image that shows this card."""
        return f"{self.suit_name()}_{self.point_name()}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.point == other.point and self.suit == other.suit

    def __hash__(self) -> int:
        return hash((self.point, self.suit))

    def __lt__(self, other: Card) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        mine, theirs = self.comparison_value(), other.comparison_value()
        if mine != theirs:
            return mine < theirs
        return self.suit < other.suit

    def __gt__(self, other: Card) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        mine, theirs = self.comparison_value(), other.comparison_value()
        if mine != theirs:
            return mine > theirs
        return self.suit > other.suit