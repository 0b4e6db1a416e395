"""Tribute and return-tribute rules applied between two rounds."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .cards import Card, CardPoint, CardSuit


@dataclass
class Tribute:
    """One card handed from one player to another.

    ``is_return`` marks a return tribute; ``card`` is filled in once chosen.
    """

    from_player_id: int
    to_player_id: int
    is_return: bool = False
    card: Card | None = None


def _big_jokers(hand: Iterable[Card]) -> int:
    return sum(1 for card in hand if card.point == CardPoint.BIG_JOKER)


def can_resist_tribute(
    third_hand: Iterable[Card], fourth_hand: Iterable[Card], double_down: bool
) -> bool:
    """Return True if the losers hold enough big jokers to refuse tribute.

    After a double down the two losers need one big joker each, or one of
    them both; otherwise the last finisher needs both big jokers.
    """
    fourth = _big_jokers(fourth_hand)
    if not double_down:
        return fourth >= 2
    third = _big_jokers(third_hand)
    return (third >= 1 and fourth >= 1) or third >= 2 or fourth >= 2


def plan_tributes(
    finish_order: Sequence[int], team_of: Callable[[int], Any]
) -> list[Tribute]:
    """Return the tributes and return tributes owed after a round.

    ``finish_order`` lists player ids from first to last finisher and
    ``team_of`` gives the team of a player id. When the third and fourth
    finishers share a team (a double down) both pay: third to first and
    fourth to second, and each is paid back. Otherwise the last finisher
    pays the first, who pays back. Tributes come before their returns.
    """
    if len(finish_order) < 4:
        raise ValueError("a full finishing order of four players is required")
    first, second, third, fourth = finish_order[:4]

    if team_of(third) == team_of(fourth):
        return [
            Tribute(third, first),
            Tribute(fourth, second),
            Tribute(first, third, is_return=True),
            Tribute(second, fourth, is_return=True),
        ]
    return [
        Tribute(fourth, first),
        Tribute(first, fourth, is_return=True),
    ]


def is_valid_tribute_card(hand: Sequence[Card], card: Card, level: CardPoint) -> bool:
    """Return True if ``card`` is in ``hand`` and is its strongest card.

    The heart of the current ``level`` is left out of the comparison.
    """
    if card not in hand:
        return False
    strongest = card
    for held in hand:
        if held.suit == CardSuit.HEART and held.point == level:
            continue
        if held > strongest:
            strongest = held
    return card == strongest


def choose_return_card(hand: Sequence[Card], same_team: bool) -> Card | None:
    """Pick the card to give back in a return tribute.

    To a partner the first card of ten or lower is returned; to an opponent
    the weakest card. None is returned when no card qualifies.
    """
    if same_team:
        return next((card for card in hand if card.point <= CardPoint.TEN), None)
    weakest: Card | None = None
    for card in hand:
        if weakest is None or card < weakest:
            weakest = card
    return weakest