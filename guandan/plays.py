"""Enumeration of legal plays, with heart-level wild cards substituted."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import product
from typing import Any

from .cards import Card, CardPoint, CardSuit
from .combos import ComboInfo, ComboType, combo_fingerprint, evaluate_concrete_combo

_SUBSTITUTE_POINTS = tuple(p for p in CardPoint if CardPoint.TWO <= p <= CardPoint.ACE)
_SUBSTITUTE_SUITS = (CardSuit.DIAMOND, CardSuit.CLUB, CardSuit.HEART, CardSuit.SPADE)
_SUBSTITUTES = tuple(
    (point, suit) for point in _SUBSTITUTE_POINTS for suit in _SUBSTITUTE_SUITS
)


def can_beat(combo: ComboInfo, table_type: int, table_level: int) -> bool:
    """Return True if ``combo`` may be played over the combo on the table.

    Any valid combo beats an empty table; a bomb beats any non-bomb and a
    weaker bomb; otherwise the type must match and the level be higher.
    """
    if not combo.is_valid():
        return False
    if table_type == ComboType.INVALID:
        return True
    if combo.type == ComboType.BOMB:
        if table_type == ComboType.BOMB:
            return combo.level > table_level
        return True
    return combo.type == table_type and combo.level > table_level


def _sort_key(combo: ComboInfo) -> tuple[bool, int, int]:
    return (combo.type != ComboType.BOMB, -combo.level, combo.wild_cards_used)


def all_possible_valid_plays(
    selected: Iterable[Card], player: Any, table_type: int, table_level: int
) -> list[ComboInfo]:
    """Return every distinct legal play the selected cards can form.

    Each wild card is tried as every ordinary card from 2 to A in all four
    suits. Plays that cannot beat the table are dropped. The result lists
    bombs first, then higher levels, then plays using fewer wild cards.
    """
    if player is None:
        return []
    cards = [
        Card(card.point, card.suit, card.owner if card.owner is not None else player)
        for card in selected
    ]
    if not cards:
        return []

    concrete = [card for card in cards if not card.is_wild()]
    wild_count = len(cards) - len(concrete)

    plays: list[ComboInfo] = []
    if wild_count == 0:
        combo = evaluate_concrete_combo(concrete, player)
        if combo.is_valid() and can_beat(combo, table_type, table_level):
            plays.append(combo)
    else:
        seen: set[str] = set()
        for substitution in product(_SUBSTITUTES, repeat=wild_count):
            candidate = concrete + [
                Card(point, suit, player) for point, suit in substitution
            ]
            combo = evaluate_concrete_combo(candidate, player)
            if not combo.is_valid():
                continue
            fingerprint = combo_fingerprint(combo.cards)
            if fingerprint in seen:
                continue
            seen.add(fingerprint)
            if can_beat(combo, table_type, table_level):
                combo.wild_cards_used = wild_count
                plays.append(combo)

    plays.sort(key=_sort_key)
    return plays