"""
甩牌合法性校验

规则: 一次甩出多张同花色副牌时，比所甩最小牌大的同花色副牌，只要还在任何一家手里，
就必须已被选中或已在之前的墩中打出。否则甩牌失败。

每个 (花色, 点数) 只有一张实体牌，所以按点数记账即可。
"""
from dataclasses import dataclass
import logging
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple

from .cards import Card, Rank, Suit
from .config import GameConfig
from .errors import ValidationResult
from .rules import is_trump

logger = logging.getLogger(__name__)


# 可以作为副牌出现的点数 (J 和 2 永远是主)
CANDIDATE_RANKS: Tuple[Rank, ...] = (
    Rank.ACE, Rank.KING, Rank.QUEEN, Rank.TEN, Rank.NINE, Rank.EIGHT,
    Rank.SEVEN, Rank.SIX, Rank.FIVE, Rank.FOUR, Rank.THREE,
)

MSG_TOO_FEW = "至少选择两张牌才能甩牌"
MSG_TRUMP = "不能甩主牌，请改为单张出牌。"
MSG_JOKER = "甩牌不能包含王牌"
MSG_MIXED_SUITS = "甩牌的所有牌必须是同一花色"
MSG_INVALID_GROUP = "甩牌失败：无效的牌组。"
MSG_STRONGER_OUTSTANDING = "甩牌失败：还有更大的同花色牌未出。"


@dataclass(frozen=True)
class RankLedger:
    """
    某花色副牌的点数账本

    Attributes:
        suit: 甩牌花色
        selected: 本次选中的点数
        already_played: 之前各墩中以副牌身份打出的点数
        still_held: 仍可能在某家手中的点数
    """
    suit: Suit
    selected: FrozenSet[int]
    already_played: FrozenSet[int]
    still_held: FrozenSet[int]

    def blockers(self, min_rank: int) -> Tuple[int, ...]:
        """比 min_rank 大、仍在手中、既未选中也未打出的点数"""
        return tuple(
            rank for rank in CANDIDATE_RANKS
            if rank > min_rank
            and rank in self.still_held
            and rank not in self.selected
            and rank not in self.already_played
        )

    def is_complete(self, min_rank: int) -> bool:
        return not self.blockers(min_rank)


def _plain_ranks(cards: Iterable[Card], suit: Suit, trump_suit: Suit, config: GameConfig) -> FrozenSet[int]:
    return frozenset(
        int(card.rank) for card in cards
        if card is not None and card.suit == suit and not is_trump(card, trump_suit, config)
    )


def _played_cards(completed_tricks: Iterable) -> Iterable[Card]:
    for trick in completed_tricks or ():
        for played in getattr(trick, "cards", None) or ():
            card = getattr(played, "card", None)
            if card is not None:
                yield card


def build_rank_ledger(
    cards: Sequence[Card],
    acting_hand: Sequence[Card],
    trump_suit: Suit,
    config: GameConfig,
    completed_tricks: Iterable = (),
    all_hands: Optional[Sequence[Sequence[Card]]] = None,
) -> RankLedger:
    """
    为一次甩牌建立点数账本

    提供 all_hands 时统计四家手牌; 否则只知道出牌者自己的手牌，
    此时所选最小与最大点数之间既未选中也未打出的点数下落不明，视为仍在手中。

    Args:
        cards: 选中的牌 (同一花色)
        acting_hand: 出牌者手牌
        trump_suit: 主花色
        config: 牌局配置
        completed_tricks: 已完成的墩
        all_hands: 四家手牌

    Returns:
        RankLedger
    """
    suit = cards[0].suit
    selected = _plain_ranks(cards, suit, trump_suit, config)
    played = _plain_ranks(_played_cards(completed_tricks), suit, trump_suit, config)

    if all_hands is not None:
        held = set(_plain_ranks(acting_hand or (), suit, trump_suit, config))
        for hand in all_hands:
            held |= _plain_ranks(hand or (), suit, trump_suit, config)
    else:
        held = set(_plain_ranks(acting_hand or (), suit, trump_suit, config))
        if selected:
            low, high = min(selected), max(selected)
            held |= {
                rank for rank in CANDIDATE_RANKS
                if low < rank < high and rank not in selected and rank not in played
            }

    return RankLedger(
        suit=suit,
        selected=selected,
        already_played=played,
        still_held=frozenset(held),
    )


def validate_rui_pai_selection(
    cards: Sequence[Card],
    acting_hand: Sequence[Card],
    trump_suit: Suit,
    config: GameConfig,
    completed_tricks: Iterable = (),
    all_hands: Optional[Sequence[Sequence[Card]]] = None,
) -> ValidationResult:
    """
    校验一次甩牌

    Args:
        cards: 选中的牌
        acting_hand: 出牌者手牌
        trump_suit: 主花色
        config: 牌局配置
        completed_tricks: 已完成的墩 (TrickResult 序列)
        all_hands: 四家当前手牌; 生产路径必须提供

    Returns:
        ValidationResult，失败时 message 为给玩家看的提示
    """
    cards = list(cards)
    if len(cards) < 2:
        return ValidationResult.reject(MSG_TOO_FEW)

    suit = cards[0].suit
    if suit == trump_suit:
        return ValidationResult.reject(MSG_TRUMP)
    if suit == Suit.JOKER:
        return ValidationResult.reject(MSG_JOKER)

    for card in cards:
        if card.suit != suit:
            return ValidationResult.reject(MSG_MIXED_SUITS)
        if is_trump(card, trump_suit, config):
            return ValidationResult.reject(MSG_TRUMP)

    if len(set(cards)) != len(cards):
        return ValidationResult.reject(MSG_INVALID_GROUP)

    if all_hands is None:
        logger.warning("Rui-pai validated without all hands; falling back to single-hand check")

    ledger = build_rank_ledger(cards, acting_hand, trump_suit, config, completed_tricks, all_hands)
    min_rank = min(ledger.selected)
    blockers = ledger.blockers(min_rank)
    if blockers:
        logger.debug(f"Rui-pai blocked in {suit.name} by ranks {blockers}")
        return ValidationResult.reject(MSG_STRONGER_OUTSTANDING)
    return ValidationResult.ok()
