"""
牌的定义与编码

小二定主使用一副 54 张牌：
- ♠ ♥ ♣ ♦ 各 13 张 (2-10, J, Q, K, A)
- 小王、大王各 1 张

每个 (花色, 点数) 只有一张实体牌，因此牌本身即可作为唯一标识。
"""
from enum import Enum, IntEnum
from dataclasses import dataclass
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple
import random

import numpy as np


class Suit(Enum):
    """花色"""
    SPADE = "♠"
    HEART = "♥"
    CLUB = "♣"
    DIAMOND = "♦"
    JOKER = "JOKER"


class Rank(IntEnum):
    """点数 (2 最小, A=14; 王使用独立取值)"""
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
    SMALL_JOKER = 20
    BIG_JOKER = 30


# 四门普通花色 (发牌顺序)
SUITS: Tuple[Suit, ...] = (Suit.SPADE, Suit.HEART, Suit.CLUB, Suit.DIAMOND)

# 普通点数 2..A
PLAIN_RANKS: Tuple[Rank, ...] = tuple(Rank(r) for r in range(2, 15))

JOKER_RANKS: Tuple[Rank, ...] = (Rank.SMALL_JOKER, Rank.BIG_JOKER)

# 花色中文名 (用于出牌提示)
SUIT_NAMES: Dict[Suit, str] = {
    Suit.SPADE: "黑桃",
    Suit.HEART: "红桃",
    Suit.CLUB: "梅花",
    Suit.DIAMOND: "方片",
    Suit.JOKER: "王牌",
}

# 字母到花色的映射 (文本输入用)
LETTER_TO_SUIT: Dict[str, Suit] = {
    "S": Suit.SPADE, "H": Suit.HEART, "C": Suit.CLUB, "D": Suit.DIAMOND,
}

RANK_TO_STR: Dict[Rank, str] = {
    Rank.TWO: "2", Rank.THREE: "3", Rank.FOUR: "4", Rank.FIVE: "5",
    Rank.SIX: "6", Rank.SEVEN: "7", Rank.EIGHT: "8", Rank.NINE: "9",
    Rank.TEN: "10", Rank.JACK: "J", Rank.QUEEN: "Q", Rank.KING: "K",
    Rank.ACE: "A", Rank.SMALL_JOKER: "小王", Rank.BIG_JOKER: "大王",
}

STR_TO_RANK: Dict[str, Rank] = {v: k for k, v in RANK_TO_STR.items()}

# 分牌: 5 = 5 分, 10 = 10 分, K = 10 分
CARD_POINTS: Dict[Rank, int] = {
    Rank.FIVE: 5,
    Rank.TEN: 10,
    Rank.KING: 10,
}


@dataclass(frozen=True, slots=True)
class Card:
    """
    不可变的单张牌

    Attributes:
        suit: 花色 (王的花色为 JOKER)
        rank: 点数，可直接传入 int，会被转换为 Rank
    """
    suit: Suit
    rank: Rank

    def __post_init__(self):
        if not isinstance(self.rank, Rank):
            object.__setattr__(self, "rank", Rank(self.rank))
        if (self.suit == Suit.JOKER) != (self.rank in JOKER_RANKS):
            raise ValueError(f"Invalid card: suit {self.suit.name} with rank {self.rank.name}")

    @property
    def is_joker(self) -> bool:
        return self.suit == Suit.JOKER

    @property
    def points(self) -> int:
        return CARD_POINTS.get(self.rank, 0)

    def __str__(self) -> str:
        if self.is_joker:
            return RANK_TO_STR[self.rank]
        return f"{self.suit.value}{RANK_TO_STR[self.rank]}"

    def __repr__(self) -> str:
        return f"Card({self})"


SMALL_JOKER = Card(Suit.JOKER, Rank.SMALL_JOKER)
BIG_JOKER = Card(Suit.JOKER, Rank.BIG_JOKER)

# 完整牌组 (54 张)
FULL_DECK: Tuple[Card, ...] = tuple(
    Card(suit, rank) for suit in SUITS for rank in PLAIN_RANKS
) + (SMALL_JOKER, BIG_JOKER)

# 牌到数组下标的映射 (用于计数向量编码)
CARD_TO_INDEX: Dict[Card, int] = {card: i for i, card in enumerate(FULL_DECK)}


class DealResult(NamedTuple):
    """
    发牌结果

    Attributes:
        hands: 各座位手牌
        bottom_cards: 底牌
        first_two_candidate: 第一张发出的 2 (座位号, 花色)，获得定主资格
    """
    hands: List[List[Card]]
    bottom_cards: List[Card]
    first_two_candidate: Optional[Tuple[int, Suit]]


def is_point_card(card: Card) -> bool:
    """是否分牌 (5/10/K)"""
    return card.points > 0


def create_deck() -> List[Card]:
    """创建一副完整的 54 张牌"""
    return list(FULL_DECK)


def shuffle_deck(deck: Sequence[Card], seed: Optional[int] = None) -> List[Card]:
    """
    洗牌，返回新列表，不修改原牌组

    Args:
        deck: 牌组
        seed: 随机种子，提供时结果可复现

    Returns:
        洗好的牌组
    """
    shuffled = list(deck)
    random.Random(seed).shuffle(shuffled)
    return shuffled


def deal_cards(
    deck: Sequence[Card],
    num_players: int,
    hand_size: int,
) -> Tuple[List[List[Card]], List[Card]]:
    """
    轮流发牌

    Args:
        deck: 已洗好的牌组
        num_players: 玩家数
        hand_size: 每人手牌数

    Returns:
        (各玩家手牌, 剩余牌)
    """
    hands: List[List[Card]] = [[] for _ in range(num_players)]
    dealt = min(num_players * hand_size, len(deck))
    for i in range(dealt):
        hands[i % num_players].append(deck[i])
    return hands, list(deck[dealt:])


def deal_with_twos(
    deck: Sequence[Card],
    num_players: int,
    hand_size: int,
    num_bottom: int,
    starting_player_index: int = 0,
) -> DealResult:
    """
    发牌并记录第一张发出的 2 (定主候选)

    只记录候选人，不决定庄家和主花色。

    Args:
        deck: 已洗好的牌组
        num_players: 玩家数
        hand_size: 每人手牌数
        num_bottom: 底牌数
        starting_player_index: 第一张牌发给的座位

    Returns:
        DealResult
    """
    hands: List[List[Card]] = [[] for _ in range(num_players)]
    candidate: Optional[Tuple[int, Suit]] = None

    total = num_players * hand_size
    for i in range(total):
        card = deck[i]
        seat = (starting_player_index + i) % num_players
        hands[seat].append(card)
        if candidate is None and card.rank == Rank.TWO:
            candidate = (seat, card.suit)

    bottom_cards = list(deck[total:total + num_bottom])
    return DealResult(hands=hands, bottom_cards=bottom_cards, first_two_candidate=candidate)


def cards_to_array(cards: Iterable[Card]) -> np.ndarray:
    """
    将牌列表转换为 54 维计数向量

    每个下标对应一张实体牌 (顺序同 FULL_DECK)，同一张牌出现两次时该位为 2，
    便于检查重复与缺失。

    Args:
        cards: 牌列表

    Returns:
        54 维 float32 数组
    """
    array = np.zeros(len(FULL_DECK), dtype=np.float32)
    indices = [CARD_TO_INDEX[card] for card in cards]
    if indices:
        np.add.at(array, indices, 1)
    return array


def array_to_cards(array: np.ndarray) -> List[Card]:
    """
    将 54 维向量转换回牌列表 (按 FULL_DECK 顺序)

    Args:
        array: 54 维数组

    Returns:
        牌列表
    """
    cards = []
    for index in np.flatnonzero(array):
        cards.extend([FULL_DECK[index]] * int(array[index]))
    return cards


def str_to_card(s: str) -> Card:
    """
    将字符串解析为牌

    支持 "♥K"、"HK"、"♠10"、"S10"、"小王"、"大王"。
    """
    s = s.strip()
    if s in ("小王", "大王"):
        return Card(Suit.JOKER, STR_TO_RANK[s])
    head, tail = s[:1], s[1:]
    suit = LETTER_TO_SUIT.get(head.upper())
    if suit is None:
        suit = Suit(head)
    if tail not in STR_TO_RANK:
        raise ValueError(f"Unknown rank in card string: {s!r}")
    return Card(suit, STR_TO_RANK[tail])


def cards_to_str(cards: Iterable[Card]) -> str:
    """
    将牌列表转换为可读字符串

    Returns:
        如 "♥K ♥Q 大王"
    """
    return " ".join(str(card) for card in cards)


def str_to_cards(s: str) -> List[Card]:
    """将空格或逗号分隔的字符串解析为牌列表"""
    return [str_to_card(token) for token in s.replace(",", " ").split()]
