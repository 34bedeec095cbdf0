"""
跟牌合法性

validate_card_play 是单张出牌的局部检查，只看出牌者自己的手牌。
validate_card_group 处理多张: 首家甩牌交给甩牌校验 (需要四家手牌)，跟甩牌按花色张数约束。

都是软校验，返回 ValidationResult，从不抛出。
"""
import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from .cards import Card, SUIT_NAMES
from .errors import ValidationResult
from .rules import can_follow_suit, get_effective_suit, get_leading_suit, has_trump, is_trump
from .ruipai import validate_rui_pai_selection
from .tricks import detect_rui_pai

if TYPE_CHECKING:
    from .state import GameState

logger = logging.getLogger(__name__)


MSG_WRONG_PHASE = "Not in trick play phase"
MSG_PLAYER_NOT_FOUND = "Player not found"
MSG_NOT_YOUR_TURN = "Not your turn"
MSG_CARD_NOT_IN_HAND = "Card not in hand"
MSG_MUST_PLAY_TRUMP = "Must play trump when leading card is trump"
MSG_DUPLICATE_CARDS = "Duplicate cards selected"


def must_follow_message(suit) -> str:
    """有红桃必须先出红桃"""
    name = SUIT_NAMES[suit]
    return f"有{name}必须先出{name}"


def card_count_message(count: int) -> str:
    return f"需要出{count}张牌"


def _check_seat(state: 'GameState', seat_id: str) -> Tuple[Optional[int], Optional[ValidationResult]]:
    """阶段、座位、回合检查; 通过时返回 (座位号, None)"""
    if not state.in_trick_play:
        return None, ValidationResult.reject(MSG_WRONG_PHASE)
    seat_index = state.seat_index_of(seat_id)
    if seat_index is None:
        return None, ValidationResult.reject(MSG_PLAYER_NOT_FOUND)
    if seat_index != state.current_seat_index:
        return None, ValidationResult.reject(MSG_NOT_YOUR_TURN)
    return seat_index, None


def validate_card_play(state: 'GameState', seat_id: str, card: Card) -> ValidationResult:
    """
    检查单张出牌是否合法

    1. 必须轮到该座位，且牌在手中
    2. 本墩为空时任意牌都合法
    3. 首牌为主: 手中还有别的主牌时必须出主
    4. 首牌为副: 手中有该花色副牌时必须跟该花色，不能出主或其他花色
    5. 其他情况任意牌都合法

    Args:
        state: 当前状态
        seat_id: 座位 ID
        card: 要出的牌

    Returns:
        ValidationResult，reason 为给玩家看的原因
    """
    seat_index, rejection = _check_seat(state, seat_id)
    if rejection is not None:
        return rejection

    hand = state.players[seat_index].hand
    if card not in hand:
        return ValidationResult.reject(MSG_CARD_NOT_IN_HAND)

    trick = state.current_trick
    if not trick:
        return ValidationResult.ok()

    trump_suit, config = state.trump_suit, state.config

    info = detect_rui_pai(trick, trump_suit, config)
    if info is not None:
        return ValidationResult.reject(card_count_message(info.count))

    if is_trump(trick[0].card, trump_suit, config):
        if not is_trump(card, trump_suit, config):
            others = [c for c in hand if c != card]
            if has_trump(others, trump_suit, config):
                return ValidationResult.reject(MSG_MUST_PLAY_TRUMP)
        return ValidationResult.ok()

    leading_suit = get_leading_suit(trick, trump_suit, config)
    if leading_suit is None:
        return ValidationResult.ok()

    if can_follow_suit(hand, leading_suit, trump_suit, config):
        if get_effective_suit(card, trump_suit, config) != leading_suit:
            return ValidationResult.reject(must_follow_message(leading_suit))
    return ValidationResult.ok()


def validate_card_group(state: 'GameState', seat_id: str, cards: Sequence[Card]) -> ValidationResult:
    """
    检查一次出多张牌是否合法

    - 一张牌: 同 validate_card_play
    - 首家出多张: 甩牌校验，使用四家手牌和已完成的墩
    - 跟甩牌: 必须正好 k 张; 该花色 >= k 张时 k 张都必须是该花色，
      1..k-1 张时必须全部出; 没有该花色时随意

    Args:
        state: 当前状态
        seat_id: 座位 ID
        cards: 要出的牌

    Returns:
        ValidationResult
    """
    cards = list(cards)
    if len(cards) == 1:
        return validate_card_play(state, seat_id, cards[0])

    seat_index, rejection = _check_seat(state, seat_id)
    if rejection is not None:
        return rejection

    if len(set(cards)) != len(cards):
        return ValidationResult.reject(MSG_DUPLICATE_CARDS)

    hand = state.players[seat_index].hand
    if any(card not in hand for card in cards):
        return ValidationResult.reject(MSG_CARD_NOT_IN_HAND)

    trump_suit, config = state.trump_suit, state.config
    trick = state.current_trick

    if not trick:
        return validate_rui_pai_selection(
            cards,
            hand,
            trump_suit,
            config,
            completed_tricks=state.tricks,
            all_hands=state.all_hands(),
        )

    info = detect_rui_pai(trick, trump_suit, config)
    count = info.count if info is not None else 1
    if len(cards) != count:
        return ValidationResult.reject(card_count_message(count))

    held = sum(1 for c in hand if get_effective_suit(c, trump_suit, config) == info.suit)
    selected = sum(1 for c in cards if get_effective_suit(c, trump_suit, config) == info.suit)
    required = min(held, count)
    if selected < required:
        logger.debug(f"Seat {seat_id} must play {required} {info.suit.name} cards, selected {selected}")
        return ValidationResult.reject(must_follow_message(info.suit))
    return ValidationResult.ok()


def legal_cards(state: 'GameState', seat_id: str) -> List[Card]:
    """
    该座位当前可以单张打出的牌

    甩牌墩进行中时返回空列表，跟牌者需要用 validate_card_group 出 k 张。
    """
    seat_index = state.seat_index_of(seat_id)
    if seat_index is None:
        return []
    hand = state.players[seat_index].hand
    return [card for card in hand if validate_card_play(state, seat_id, card).valid]
