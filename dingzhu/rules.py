"""
主牌判定与牌力比较

所有函数都是纯函数，无状态。

主牌 (从大到小):
    ♦5 > 五反 > 三反 > 大王 > 小王 > ♠Q > 主花色 J > 其他 J > 主花色 2 > 其他 2 > 其他主花色牌
副牌只在同一有效花色内按点数比较: A > K > Q > 10 > ... > 3
"""
from enum import IntEnum
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .cards import Card, Rank, Suit, SUITS
from .config import GameConfig


class TrumpKind(IntEnum):
    """牌的类别，取值越大越强"""
    PLAIN = 0          # 副牌
    TRUMP_SUIT = 1     # 主花色普通牌
    OTHER_TWO = 2      # 副花色 2
    TRUMP_TWO = 3      # 主花色 2
    OTHER_JACK = 4     # 副花色 J
    TRUMP_JACK = 5     # 主花色 J
    SPADE_QUEEN = 6    # ♠Q
    SMALL_JOKER = 7
    BIG_JOKER = 8
    THREE_FAN = 9      # 三反
    FIVE_FAN = 10      # 五反
    DIAMOND_FIVE = 11  # ♦5


# 副花色 J / 2 的花色次序: ♠ > ♥ > ♣ > ♦
SUIT_PRIORITY = {
    Suit.SPADE: 3,
    Suit.HEART: 2,
    Suit.CLUB: 1,
    Suit.DIAMOND: 0,
}


class Strength(NamedTuple):
    """
    牌力，按元组字典序比较

    Attributes:
        kind: 类别
        value: 副牌/主花色牌为点数; 副花色 J/2 为花色次序; 其他为 0
        order: 出牌先后 (-出牌序号)，先出者在完全相同时胜出; 未提供时为 0
    """
    kind: TrumpKind
    value: int = 0
    order: int = 0

    @property
    def is_trump(self) -> bool:
        return self.kind != TrumpKind.PLAIN


def is_fixed_trump(card: Card) -> bool:
    """常主: ♦5、大王、小王、♠Q"""
    if card.is_joker:
        return True
    if card.suit == Suit.DIAMOND and card.rank == Rank.FIVE:
        return True
    return card.suit == Suit.SPADE and card.rank == Rank.QUEEN


def is_fan_trump(card: Card, config: GameConfig) -> bool:
    """三反 / 五反 (♦5 属于常主，不计入五反)"""
    if config.has_five_fan and card.rank == Rank.FIVE and card.suit != Suit.DIAMOND:
        return True
    return config.has_three_fan and card.rank == Rank.THREE


def is_jack_trump(card: Card) -> bool:
    return card.rank == Rank.JACK


def is_two_trump(card: Card) -> bool:
    return card.rank == Rank.TWO


def trump_kind(card: Card, trump_suit: Suit, config: GameConfig) -> TrumpKind:
    """
    判定牌的类别

    Args:
        card: 牌
        trump_suit: 主花色
        config: 牌局配置

    Returns:
        TrumpKind，副牌为 PLAIN
    """
    if card.suit == Suit.DIAMOND and card.rank == Rank.FIVE:
        return TrumpKind.DIAMOND_FIVE
    if is_fan_trump(card, config):
        return TrumpKind.FIVE_FAN if card.rank == Rank.FIVE else TrumpKind.THREE_FAN
    if is_fixed_trump(card):
        if card.rank == Rank.BIG_JOKER:
            return TrumpKind.BIG_JOKER
        if card.rank == Rank.SMALL_JOKER:
            return TrumpKind.SMALL_JOKER
        return TrumpKind.SPADE_QUEEN
    if is_jack_trump(card):
        return TrumpKind.TRUMP_JACK if card.suit == trump_suit else TrumpKind.OTHER_JACK
    if is_two_trump(card):
        return TrumpKind.TRUMP_TWO if card.suit == trump_suit else TrumpKind.OTHER_TWO
    if card.suit == trump_suit:
        return TrumpKind.TRUMP_SUIT
    return TrumpKind.PLAIN


def is_trump(card: Card, trump_suit: Suit, config: GameConfig) -> bool:
    """是否主牌"""
    return trump_kind(card, trump_suit, config) != TrumpKind.PLAIN


def card_strength(
    card: Card,
    trump_suit: Suit,
    config: GameConfig,
    play_order: Optional[int] = None,
) -> Strength:
    """
    计算牌力

    Args:
        card: 牌
        trump_suit: 主花色
        config: 牌局配置
        play_order: 在本墩中的出牌序号，用于打破平局 (先出者大)

    Returns:
        可直接比较大小的 Strength
    """
    kind = trump_kind(card, trump_suit, config)
    if kind in (TrumpKind.PLAIN, TrumpKind.TRUMP_SUIT):
        value = int(card.rank)
    elif kind in (TrumpKind.OTHER_JACK, TrumpKind.OTHER_TWO):
        value = SUIT_PRIORITY[card.suit]
    else:
        value = 0
    order = -play_order if play_order is not None else 0
    return Strength(kind, value, order)


def get_effective_suit(card: Card, trump_suit: Suit, config: GameConfig) -> Optional[Suit]:
    """
    跟牌时使用的有效花色

    王和所有主牌 (常主、反牌、J、2、主花色牌) 没有自然花色，返回 None。
    """
    if is_trump(card, trump_suit, config):
        return None
    return card.suit


def get_leading_suit(trick: Sequence, trump_suit: Suit, config: GameConfig) -> Optional[Suit]:
    """
    本墩首张牌的有效花色

    Args:
        trick: 已出的牌 (PlayedCard 序列)

    Returns:
        首牌为主或本墩为空时返回 None
    """
    if not trick:
        return None
    return get_effective_suit(trick[0].card, trump_suit, config)


def can_follow_suit(hand: Iterable[Card], suit: Suit, trump_suit: Suit, config: GameConfig) -> bool:
    """手中是否有该花色的副牌"""
    return any(
        card.suit == suit and not is_trump(card, trump_suit, config)
        for card in hand
    )


def has_trump(hand: Iterable[Card], trump_suit: Suit, config: GameConfig) -> bool:
    """手中是否有主牌"""
    return any(is_trump(card, trump_suit, config) for card in hand)


def fan_eligibility(hand: Iterable[Card]) -> Tuple[bool, bool]:
    """
    检查能否反牌

    Returns:
        (能三反: 至少三张 3, 能五反: 至少三张非方片 5)
    """
    hand = list(hand)
    threes = sum(1 for card in hand if card.rank == Rank.THREE)
    fives = sum(1 for card in hand if card.rank == Rank.FIVE and card.suit != Suit.DIAMOND)
    return threes >= 3, fives >= 3


def sort_hand(hand: Iterable[Card], trump_suit: Suit, config: GameConfig) -> List[Card]:
    """
    整理手牌: 主牌按牌力从大到小在前，副牌按 ♠ ♥ ♣ ♦ 分组、组内点数从大到小
    """
    trumps = []
    plains = []
    for card in hand:
        if is_trump(card, trump_suit, config):
            trumps.append(card)
        else:
            plains.append(card)
    trumps.sort(key=lambda c: card_strength(c, trump_suit, config), reverse=True)
    plains.sort(key=lambda c: (SUITS.index(c.suit), -int(c.rank)))
    return trumps + plains
