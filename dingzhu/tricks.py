"""
一墩牌的结算

单张墩: 有主牌时最大的主牌赢; 否则首牌花色中最大的牌赢。
甩牌墩: 首家一次出 k 张同花色副牌，跟牌者只有完整跟花色或全部用主牌毙时才可能赢。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .cards import Card, Suit
from .config import GameConfig, NUM_SEATS
from .errors import GameError, InvariantError, INVALID_TRICK
from .rules import Strength, card_strength, get_effective_suit, get_leading_suit, is_trump


@dataclass(frozen=True)
class PlayedCard:
    """
    本墩中某个座位打出的一张牌

    Attributes:
        card: 牌
        seat_id: 座位 ID
        seat_index: 座位号 (0-3)
    """
    card: Card
    seat_id: str
    seat_index: int


@dataclass(frozen=True)
class TrickResult:
    """
    已结束的一墩

    Attributes:
        cards: 按出牌顺序的全部牌
        winner_index: 赢家座位号
        winner_id: 赢家 ID
        points: 本墩分数
    """
    cards: Tuple[PlayedCard, ...]
    winner_index: int
    winner_id: str
    points: int


class RuiPaiInfo(NamedTuple):
    """甩牌墩信息"""
    leader_index: int
    leader_cards: Tuple[Card, ...]
    suit: Optional[Suit]
    count: int


class FollowKind(Enum):
    """甩牌墩中跟牌者的出牌类别"""
    FULL_SUIT = "full_suit"  # k 张全是首家花色
    PARTIAL = "partial"      # 部分首家花色 + 垫牌，不能赢
    ALL_TRUMP = "all_trump"  # 无首家花色，k 张全是主牌
    DISCARD = "discard"      # 无首家花色，垫牌


def trick_points(cards: Iterable[PlayedCard]) -> int:
    """本墩分数 (5/10/K)"""
    return sum(pc.card.points for pc in cards)


def cards_by_seat(trick: Sequence[PlayedCard]) -> Dict[int, List[Card]]:
    """按座位分组，保持出牌顺序"""
    grouped: Dict[int, List[Card]] = {}
    for pc in trick:
        grouped.setdefault(pc.seat_index, []).append(pc.card)
    return grouped


def _strongest(cards: Iterable[Card], trump_suit: Suit, config: GameConfig) -> Strength:
    return max(card_strength(card, trump_suit, config) for card in cards)


def get_trick_winner(
    trick: Sequence[PlayedCard],
    trump_suit: Suit,
    config: GameConfig,
    leader_index: int,
) -> int:
    """
    单张墩的赢家

    1. 收集所有主牌，若有则最大的主牌赢 (牌力相同先出者赢)
    2. 否则在首牌花色的副牌中取最大
    3. 首牌为主但无人出主等异常情况回退到首家

    Args:
        trick: 4 张已出的牌
        trump_suit: 主花色
        config: 牌局配置
        leader_index: 首家座位号

    Returns:
        赢家座位号
    """
    if len(trick) == 0:
        raise GameError(INVALID_TRICK, "Cannot determine winner of empty trick")
    if len(trick) != NUM_SEATS:
        raise GameError(INVALID_TRICK, "Trick must have exactly 4 cards")

    trumps = [
        (card_strength(pc.card, trump_suit, config, i), pc)
        for i, pc in enumerate(trick)
        if is_trump(pc.card, trump_suit, config)
    ]
    if trumps:
        return max(trumps, key=lambda item: item[0])[1].seat_index

    leading_suit = get_leading_suit(trick, trump_suit, config)
    if leading_suit is None:
        return leader_index

    following = [
        (card_strength(pc.card, trump_suit, config, i), pc)
        for i, pc in enumerate(trick)
        if get_effective_suit(pc.card, trump_suit, config) == leading_suit
    ]
    if not following:
        return leader_index
    return max(following, key=lambda item: item[0])[1].seat_index


def detect_rui_pai(
    trick: Sequence[PlayedCard],
    trump_suit: Suit,
    config: GameConfig,
) -> Optional[RuiPaiInfo]:
    """
    检测本墩是否为甩牌墩 (首家出了多张)

    Returns:
        RuiPaiInfo，单张墩或空墩返回 None
    """
    if not trick:
        return None
    leader_index = trick[0].seat_index
    leader_cards = []
    for pc in trick:
        if pc.seat_index != leader_index:
            break
        leader_cards.append(pc.card)
    if len(leader_cards) < 2:
        return None
    return RuiPaiInfo(
        leader_index=leader_index,
        leader_cards=tuple(leader_cards),
        suit=get_effective_suit(leader_cards[0], trump_suit, config),
        count=len(leader_cards),
    )


def classify_follow(
    cards: Sequence[Card],
    suit: Optional[Suit],
    count: int,
    trump_suit: Suit,
    config: GameConfig,
) -> FollowKind:
    """
    判断跟牌者的出牌类别

    Args:
        cards: 跟牌者打出的牌
        suit: 首家甩牌的花色
        count: 首家甩牌张数 k
    """
    suit_count = sum(1 for card in cards if get_effective_suit(card, trump_suit, config) == suit)
    if suit_count == count and len(cards) == count:
        return FollowKind.FULL_SUIT
    if suit_count > 0:
        return FollowKind.PARTIAL
    if len(cards) == count and all(is_trump(card, trump_suit, config) for card in cards):
        return FollowKind.ALL_TRUMP
    return FollowKind.DISCARD


def get_rui_pai_winner(
    trick: Sequence[PlayedCard],
    trump_suit: Suit,
    config: GameConfig,
    leader_index: int,
) -> int:
    """
    甩牌墩的赢家

    以首家 k 张中最大的一张为基准。跟牌者只有 FULL_SUIT 或 ALL_TRUMP 时才参与比较，
    比较各自最大的一张; 牌力相同时按出牌顺序先到者保持领先。

    Returns:
        赢家座位号
    """
    grouped = cards_by_seat(trick)
    leader_cards = grouped.get(leader_index, [])
    if not leader_cards:
        return leader_index

    suit = get_effective_suit(leader_cards[0], trump_suit, config)
    count = len(leader_cards)

    winner_index = leader_index
    best = _strongest(leader_cards, trump_suit, config)

    for offset in range(1, NUM_SEATS):
        seat = (leader_index + offset) % NUM_SEATS
        cards = grouped.get(seat, [])
        if not cards:
            continue
        kind = classify_follow(cards, suit, count, trump_suit, config)
        if kind not in (FollowKind.FULL_SUIT, FollowKind.ALL_TRUMP):
            continue
        strength = _strongest(cards, trump_suit, config)
        if strength > best:
            best = strength
            winner_index = seat

    return winner_index


def determine_trick_winner(
    trick: Sequence[PlayedCard],
    trump_suit: Suit,
    config: GameConfig,
    leader_index: int,
) -> int:
    """
    结算任意一墩 (单张或甩牌)

    单张墩不足 4 张时回退到首家; 超过 4 张或甩牌墩某家多出牌视为内部错误。
    """
    info = detect_rui_pai(trick, trump_suit, config)
    if info is None:
        if len(trick) > NUM_SEATS:
            raise InvariantError(f"Single-card trick has {len(trick)} cards")
        if len(trick) < NUM_SEATS:
            return leader_index
        return get_trick_winner(trick, trump_suit, config, leader_index)

    grouped = cards_by_seat(trick)
    if any(len(cards) > info.count for cards in grouped.values()):
        raise InvariantError(f"A seat played more than {info.count} cards in a multi-card trick")
    return get_rui_pai_winner(trick, trump_suit, config, leader_index)


def select_rui_pai_follow(
    hand: Sequence[Card],
    suit: Suit,
    count: int,
    trump_suit: Suit,
    config: GameConfig,
) -> List[Card]:
    """
    跟甩牌时的固定出牌策略 (保证结果确定)

    - 该花色 >= k 张: 出最小的 k 张
    - 该花色 1..k-1 张: 全部出，再用最小的其他牌补足 (优先副牌)
    - 该花色 0 张: 主牌够 k 张则出最大的 k 张主牌争胜，否则出最小的 k 张牌

    Args:
        hand: 跟牌者手牌
        suit: 首家甩牌花色
        count: 甩牌张数 k
    """
    def weakest_first(card: Card):
        return card_strength(card, trump_suit, config)

    if len(hand) <= count:
        return list(hand)

    suit_cards = sorted(
        (c for c in hand if get_effective_suit(c, trump_suit, config) == suit),
        key=lambda c: int(c.rank),
    )
    if len(suit_cards) >= count:
        return suit_cards[:count]

    if suit_cards:
        others = sorted(
            (c for c in hand if c not in suit_cards),
            key=lambda c: (is_trump(c, trump_suit, config), weakest_first(c)),
        )
        return suit_cards + others[:count - len(suit_cards)]

    trumps = sorted(
        (c for c in hand if is_trump(c, trump_suit, config)),
        key=weakest_first,
        reverse=True,
    )
    if len(trumps) >= count:
        return trumps[:count]
    return sorted(hand, key=lambda c: (is_trump(c, trump_suit, config), weakest_first(c)))[:count]
