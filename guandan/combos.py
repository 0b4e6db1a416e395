"""Recognition of GuanDan card combinations from concrete cards."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from .cards import Card, CardPoint, CardSuit


class ComboType(IntEnum):
    """Kinds of plays; INVALID marks a set of cards that forms no play."""

    INVALID = -1
    SINGLE = 1
    PAIR = 2
    TRIPLE = 3
    TRIPLE_WITH_PAIR = 4
    STRAIGHT = 5
    DOUBLE_SEQUENCE = 6
    TRIPLE_SEQUENCE = 7
    BOMB = 8


_TYPE_NAMES = {
    ComboType.SINGLE: "单张",
    ComboType.PAIR: "对子",
    ComboType.TRIPLE: "三条",
    ComboType.TRIPLE_WITH_PAIR: "三带二",
    ComboType.STRAIGHT: "顺子",
    ComboType.DOUBLE_SEQUENCE: "三连对",
    ComboType.TRIPLE_SEQUENCE: "钢板",
}

_SUIT_CHARS = {
    CardSuit.HEART: "H",
    CardSuit.SPADE: "S",
    CardSuit.DIAMOND: "D",
    CardSuit.CLUB: "C",
    CardSuit.JOKER: "",
}

_NORMAL_BOMB_PRIORITY = 100_000
_FLUSH_BOMB_PRIORITY = 200_000
_KING_BOMB_PRIORITY = 300_000
_BOMB_COUNT_FACTOR = 1_000

_JOKERS = (CardPoint.LITTLE_JOKER, CardPoint.BIG_JOKER)


@dataclass
class ComboInfo:
    """A recognised play: its type, strength level and the cards in it."""

    type: ComboType = ComboType.INVALID
    level: int = -1
    cards: list[Card] = field(default_factory=list)
    wild_cards_used: int = 0
    is_flush_straight_bomb: bool = False

    def is_valid(self) -> bool:
        return self.type != ComboType.INVALID

    def description(self) -> str:
        """Return a readable summary such as '顺子 (等级: 6): 3H 4S 5D 6C 7H'."""
        if not self.is_valid():
            return "无效牌型"
        if self.type == ComboType.BOMB:
            desc = "同花顺" if self.is_flush_straight_bomb else "炸弹"
        else:
            desc = _TYPE_NAMES.get(self.type, f"未知牌型 ({int(self.type)})")
        desc += f" (等级: {self.level}"
        if self.wild_cards_used > 0:
            desc += f", {self.wild_cards_used}癞子"
        desc += "): "
        desc += "".join(
            f"{card.point_name()}{_SUIT_CHARS.get(card.suit, '?')} "
            for card in sorted(self.cards)
        )
        return desc.strip()


def combo_fingerprint(cards: Iterable[Card]) -> str:
    """Return a string identifying a multiset of cards regardless of order."""
    return "".join(f"{int(card.point)}-{int(card.suit)};" for card in sorted(cards))


def sequential_order(point: CardPoint, ace_high: bool) -> int:
    """Return a point's position in a run; the ace is 14 or 1, jokers 0."""
    if point == CardPoint.ACE:
        return 14 if ace_high else 1
    if CardPoint.TWO <= point <= CardPoint.KING:
        return int(point)
    return 0


def _is_run(points: Sequence[CardPoint], ace_high: bool) -> bool:
    orders = [sequential_order(p, ace_high) for p in points]
    return all(b - a == 1 for a, b in zip(orders, orders[1:]))


def check_consecutive(points: Iterable[CardPoint]) -> CardPoint | None:
    """Return the top point if the distinct points form a run, else None.

    The ace may sit below the 2 or above the king; jokers never fit a run.
    """
    points = list(points)
    if not points or any(p in _JOKERS for p in points):
        return None
    low = sorted(points, key=lambda p: sequential_order(p, False))
    if _is_run(low, False):
        return low[-1]
    if CardPoint.ACE in low:
        high = sorted(points, key=lambda p: sequential_order(p, True))
        if _is_run(high, True):
            return CardPoint.ACE
    return None


def _point_value(point: CardPoint, player: Any, suit: CardSuit = CardSuit.SPADE) -> int:
    return Card(point, suit, player).comparison_value()


def _bomb_level(
    player: Any,
    count: int,
    point: CardPoint,
    suit: CardSuit,
    *,
    flush: bool = False,
    king: bool = False,
) -> int:
    if king:
        priority = _KING_BOMB_PRIORITY
    elif flush:
        priority = _FLUSH_BOMB_PRIORITY
    else:
        priority = _NORMAL_BOMB_PRIORITY
    base = max(_point_value(point, player, suit), 0)
    return priority + count * _BOMB_COUNT_FACTOR + base


def _special_bomb(cards: list[Card], counts: Counter, player: Any) -> ComboInfo:
    if (
        len(cards) == 4
        and len(counts) == 2
        and counts.get(CardPoint.LITTLE_JOKER) == 2
        and counts.get(CardPoint.BIG_JOKER) == 2
    ):
        level = _bomb_level(player, 4, CardPoint.BIG_JOKER, CardSuit.JOKER, king=True)
        return ComboInfo(ComboType.BOMB, level, cards)
    return ComboInfo(cards=cards)


def _same_point(cards: list[Card], counts: Counter, player: Any) -> ComboInfo:
    if len(counts) != 1:
        return ComboInfo()
    point, suit, size = cards[0].point, cards[0].suit, len(cards)
    simple = {1: ComboType.SINGLE, 2: ComboType.PAIR, 3: ComboType.TRIPLE}
    if size in simple:
        return ComboInfo(simple[size], _point_value(point, player, suit), cards)
    return ComboInfo(ComboType.BOMB, _bomb_level(player, size, point, suit), cards)


def _sequence(
    cards: list[Card], counts: Counter, distinct: list[CardPoint], player: Any
) -> ComboInfo:
    invalid = ComboInfo(cards=cards)
    if any(card.suit == CardSuit.JOKER for card in cards):
        return invalid
    leading = check_consecutive(distinct)
    if leading is None:
        return invalid

    first_suit = cards[0].suit
    level = _point_value(leading, player, first_suit)
    size = len(cards)

    if size == 5 and len(distinct) == 5:
        if all(card.suit == first_suit for card in cards):
            bomb = _bomb_level(player, 5, leading, first_suit, flush=True)
            return ComboInfo(ComboType.BOMB, bomb, cards, is_flush_straight_bomb=True)
        return ComboInfo(ComboType.STRAIGHT, level, cards)
    if size == 6 and len(distinct) == 3 and all(n == 2 for n in counts.values()):
        return ComboInfo(ComboType.DOUBLE_SEQUENCE, level, cards)
    if size == 6 and len(distinct) == 2 and all(n == 3 for n in counts.values()):
        return ComboInfo(ComboType.TRIPLE_SEQUENCE, level, cards)
    return invalid


def _with_kicker(cards: list[Card], counts: Counter, player: Any) -> ComboInfo:
    if len(cards) != 5 or len(counts) != 2:
        return ComboInfo(cards=cards)
    triple_point = next((p for p, n in sorted(counts.items()) if n == 3), None)
    has_pair = any(n == 2 for n in counts.values())
    if triple_point is None or not has_pair:
        return ComboInfo(cards=cards)
    triple_suit = next(card.suit for card in cards if counts[card.point] == 3)
    level = _point_value(triple_point, player, triple_suit)
    return ComboInfo(ComboType.TRIPLE_WITH_PAIR, level, cards)


def evaluate_concrete_combo(cards: Iterable[Card], player: Any) -> ComboInfo:
    """Classify cards without wilds as played by ``player``.

    The returned combo holds copies of the cards owned by ``player``; an
    unrecognised set, an empty set or a missing player gives an invalid combo.
    """
    if player is None:
        return ComboInfo()
    owned = [Card(card.point, card.suit, player) for card in cards]
    if not owned:
        return ComboInfo()

    counts = Counter(card.point for card in owned)
    distinct = sorted(counts)

    for result in (
        _special_bomb(owned, counts, player),
        _same_point(owned, counts, player),
        _sequence(owned, counts, distinct, player),
        _with_kicker(owned, counts, player),
    ):
        if result.is_valid():
            return result
    return ComboInfo()