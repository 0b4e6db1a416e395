"""The 108-card double deck."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator

from .cards import Card, CardPoint, CardSuit

logger = logging.getLogger(__name__)

_STANDARD_SUITS = (CardSuit.DIAMOND, CardSuit.CLUB, CardSuit.HEART, CardSuit.SPADE)
_STANDARD_POINTS = tuple(p for p in CardPoint if CardPoint.TWO <= p <= CardPoint.ACE)


def _fresh_cards() -> list[Card]:
    cards: list[Card] = []
    for _ in range(2):
        cards.extend(Card(point, suit) for suit in _STANDARD_SUITS for point in _STANDARD_POINTS)
        cards.append(Card(CardPoint.LITTLE_JOKER, CardSuit.JOKER))
        cards.append(Card(CardPoint.BIG_JOKER, CardSuit.JOKER))
    return cards


class CardDeck:
    """Two full decks with jokers, shuffled on creation."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.cards: list[Card] = _fresh_cards()
        self.shuffle()

    def shuffle(self) -> None:
        """Shuffle the cards, rebuilding the deck first if it is empty."""
        if not self.cards:
            logger.warning("Deck is empty; rebuilding before shuffling.")
            self.cards = _fresh_cards()
        self._rng.shuffle(self.cards)

    def reset(self) -> None:
        """Restore all 108 cards and shuffle them."""
        self.cards = _fresh_cards()
        self.shuffle()

    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)