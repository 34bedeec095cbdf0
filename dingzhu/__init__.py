"""
小二定主规则引擎 - 纯游戏逻辑

Modules:
    cards: 牌定义与编码
    config: 牌局配置
    errors: 错误与软校验结果
    rules: 主牌判定与牌力
    follow: 跟牌合法性
    tricks: 一墩的结算
    scoring: 计分
    ruipai: 甩牌合法性
    state: 游戏状态
"""
from .cards import (
    Card,
    Suit,
    Rank,
    FULL_DECK,
    SMALL_JOKER,
    BIG_JOKER,
    create_deck,
    shuffle_deck,
    deal_cards,
    deal_with_twos,
    cards_to_array,
    array_to_cards,
    str_to_card,
    cards_to_str,
    str_to_cards,
)

from .config import (
    FanType,
    GameConfig,
    TableConfig,
    NUM_SEATS,
    HAND_SIZE,
    BOTTOM_SIZE,
)

from .errors import (
    GameError,
    ConfigError,
    PhaseError,
    InvalidPlayError,
    InvariantError,
    ValidationResult,
)

from .rules import (
    TrumpKind,
    Strength,
    is_trump,
    card_strength,
    get_effective_suit,
    get_leading_suit,
    fan_eligibility,
    sort_hand,
)

from .follow import validate_card_play, validate_card_group, legal_cards

from .tricks import (
    PlayedCard,
    TrickResult,
    FollowKind,
    get_trick_winner,
    get_rui_pai_winner,
    determine_trick_winner,
    select_rui_pai_follow,
)

from .scoring import (
    Team,
    ScoreBreakdown,
    HandScores,
    calculate_scores,
    next_dealer_index,
)

from .ruipai import RankLedger, build_rank_ledger, validate_rui_pai_selection

from .state import (
    Phase,
    HistoryEventType,
    HistoryEvent,
    PlayerState,
    Scores,
    GameState,
    create_new_game,
    start_trump_choice,
    declare_trump,
    confirm_landlord,
    apply_landlord_discard,
    play_card,
    play_cards,
)

__all__ = [
    # cards
    "Card",
    "Suit",
    "Rank",
    "FULL_DECK",
    "SMALL_JOKER",
    "BIG_JOKER",
    "create_deck",
    "shuffle_deck",
    "deal_cards",
    "deal_with_twos",
    "cards_to_array",
    "array_to_cards",
    "str_to_card",
    "cards_to_str",
    "str_to_cards",
    # config
    "FanType",
    "GameConfig",
    "TableConfig",
    "NUM_SEATS",
    "HAND_SIZE",
    "BOTTOM_SIZE",
    # errors
    "GameError",
    "ConfigError",
    "PhaseError",
    "InvalidPlayError",
    "InvariantError",
    "ValidationResult",
    # rules
    "TrumpKind",
    "Strength",
    "is_trump",
    "card_strength",
    "get_effective_suit",
    "get_leading_suit",
    "fan_eligibility",
    "sort_hand",
    # follow
    "validate_card_play",
    "validate_card_group",
    "legal_cards",
    # tricks
    "PlayedCard",
    "TrickResult",
    "FollowKind",
    "get_trick_winner",
    "get_rui_pai_winner",
    "determine_trick_winner",
    "select_rui_pai_follow",
    # scoring
    "Team",
    "ScoreBreakdown",
    "HandScores",
    "calculate_scores",
    "next_dealer_index",
    # ruipai
    "RankLedger",
    "build_rank_ledger",
    "validate_rui_pai_selection",
    # state
    "Phase",
    "HistoryEventType",
    "HistoryEvent",
    "PlayerState",
    "Scores",
    "GameState",
    "create_new_game",
    "start_trump_choice",
    "declare_trump",
    "confirm_landlord",
    "apply_landlord_discard",
    "play_card",
    "play_cards",
]
