"""
牌局配置

定主后一手牌内不变的配置 (主花色、三反/五反) 以及桌面参数
"""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Union

from .cards import Suit, LETTER_TO_SUIT, FULL_DECK
from .errors import ConfigError


# 固定四人
NUM_SEATS = 4

# 每人 12 张, 底牌 6 张
HAND_SIZE = 12
BOTTOM_SIZE = 6

# 闲家得分超过该值时庄家下台
STEP_DOWN_THRESHOLD = 40


class FanType(Enum):
    """反牌类型"""
    NONE = "none"
    THREE = "three"  # 三反
    FIVE = "five"    # 五反


def parse_suit(value: Union[Suit, str]) -> Suit:
    """接受 Suit、花色符号 (♥) 或字母 (H)"""
    if isinstance(value, Suit):
        return value
    if not isinstance(value, str):
        raise ConfigError(f"Unknown suit: {value!r}")
    letter = LETTER_TO_SUIT.get(value.upper())
    if letter is not None:
        return letter
    try:
        return Suit(value)
    except ValueError:
        raise ConfigError(f"Unknown suit: {value!r}") from None


@dataclass(frozen=True)
class GameConfig:
    """
    一手牌的规则配置

    Attributes:
        trump_suit: 主花色 (不能是王)
        has_three_fan: 三反生效 (所有 3 为主)
        has_five_fan: 五反生效 (除♦5 外所有 5 为主)
    """
    trump_suit: Suit
    has_three_fan: bool = False
    has_five_fan: bool = False

    def __post_init__(self):
        object.__setattr__(self, "trump_suit", parse_suit(self.trump_suit))
        if self.trump_suit == Suit.JOKER:
            raise ConfigError("Trump suit cannot be JOKER")
        if self.has_three_fan and self.has_five_fan:
            raise ConfigError("Only one of three-fan and five-fan may be active")

    @property
    def fan(self) -> FanType:
        if self.has_three_fan:
            return FanType.THREE
        if self.has_five_fan:
            return FanType.FIVE
        return FanType.NONE

    def with_fan(self, fan: FanType) -> 'GameConfig':
        return GameConfig(
            trump_suit=self.trump_suit,
            has_three_fan=fan == FanType.THREE,
            has_five_fan=fan == FanType.FIVE,
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["trump_suit"] = self.trump_suit.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> 'GameConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)


@dataclass(frozen=True)
class TableConfig:
    """
    桌面参数

    Attributes:
        hand_size: 每人发牌数
        bottom_size: 底牌数 (庄家扣底的张数)
        step_down_threshold: 闲家得分超过该值时庄家下台
    """
    hand_size: int = HAND_SIZE
    bottom_size: int = BOTTOM_SIZE
    step_down_threshold: int = STEP_DOWN_THRESHOLD

    def __post_init__(self):
        if self.hand_size <= 0 or self.bottom_size < 0:
            raise ConfigError("Hand size must be positive and bottom size non-negative")
        if NUM_SEATS * self.hand_size + self.bottom_size != len(FULL_DECK):
            raise ConfigError(
                f"{NUM_SEATS} x {self.hand_size} + {self.bottom_size} does not use the full deck"
            )

    @classmethod
    def from_dict(cls, d: dict) -> 'TableConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)
