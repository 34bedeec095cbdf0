"""
游戏状态定义

使用不可变数据结构:
- 每次转移返回新状态，旧状态可直接保留用于回放和悔牌
- 引擎内没有模块级可变状态

阶段: DEAL -> CHOOSE_TRUMP -> CONFIRM_LANDLORD -> DISCARD_BOTTOM -> PLAY_TRICK (重复) -> ROUND_END
"""
from dataclasses import dataclass, field, replace
from enum import Enum
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .cards import (
    Card,
    FULL_DECK,
    Suit,
    cards_to_array,
    array_to_cards,
    cards_to_str,
    create_deck,
    deal_with_twos,
    is_point_card,
    shuffle_deck,
)
from .config import FanType, GameConfig, NUM_SEATS, TableConfig, parse_suit
from .errors import (
    ConfigError,
    GameError,
    InvalidPlayError,
    InvariantError,
    PhaseError,
    INVALID_DEALER,
    INVALID_DISCARD,
    INVALID_SEATS,
    UNKNOWN_SEAT,
)
from .follow import validate_card_group, validate_card_play
from .rules import fan_eligibility
from .scoring import HandScores, Team, calculate_scores, team_of
from .tricks import PlayedCard, TrickResult, detect_rui_pai, determine_trick_winner, trick_points

logger = logging.getLogger(__name__)


class Phase(Enum):
    """游戏阶段"""
    DEAL = "DEAL"                          # 已发牌
    CHOOSE_TRUMP = "CHOOSE_TRUMP"          # 定主
    CONFIRM_LANDLORD = "CONFIRM_LANDLORD"  # 确认庄家
    DISCARD_BOTTOM = "DISCARD_BOTTOM"      # 庄家扣底
    PLAY_TRICK = "PLAY_TRICK"              # 出牌
    ROUND_END = "ROUND_END"                # 一手结束


class HistoryEventType(Enum):
    """历史事件类型"""
    TRUMP_DECLARED = "TRUMP_DECLARED"
    BOTTOM_TAKEN = "BOTTOM_TAKEN"
    LANDLORD_DISCARD = "LANDLORD_DISCARD"
    BOTTOM_SET = "BOTTOM_SET"
    CARD_PLAYED = "CARD_PLAYED"
    TRICK_COMPLETE = "TRICK_COMPLETE"


@dataclass(frozen=True)
class HistoryEvent:
    """
    历史事件 (只追加)

    Attributes:
        type: 事件类型
        sequence: 序号，从 0 开始
        seat_id: 相关座位 ID
        seat_index: 相关座位号
        cards: 相关的牌
        trick_index: TRICK_COMPLETE 对应的墩序号
    """
    type: HistoryEventType
    sequence: int
    seat_id: Optional[str] = None
    seat_index: Optional[int] = None
    cards: Tuple[Card, ...] = ()
    trick_index: Optional[int] = None


@dataclass(frozen=True)
class PlayerState:
    """
    一个座位

    Attributes:
        id: 座位 ID
        hand: 手牌
        team: 所属队伍 (换庄后以 dealer_index 为准)
    """
    id: str
    hand: Tuple[Card, ...]
    team: Team

    def without(self, cards: Iterable[Card]) -> 'PlayerState':
        removed = set(cards)
        return replace(self, hand=tuple(c for c in self.hand if c not in removed))


@dataclass(frozen=True)
class Scores:
    """两队当前得分，一手内只增不减"""
    dealer_team: int = 0
    non_dealer_team: int = 0

    def award(self, team: Team, points: int) -> 'Scores':
        if team == Team.DEALER:
            return replace(self, dealer_team=self.dealer_team + points)
        return replace(self, non_dealer_team=self.non_dealer_team + points)


def _assign_teams(players: Sequence[PlayerState], dealer_index: int) -> Tuple[PlayerState, ...]:
    return tuple(
        replace(player, team=team_of(i, dealer_index))
        for i, player in enumerate(players)
    )


@dataclass(frozen=True)
class GameState:
    """
    不可变游戏状态

    Attributes:
        players: 四个座位，按座位号排列
        current_seat_index: 当前行动座位
        dealer_index: 庄家座位
        config: 规则配置 (主花色、反牌)
        phase: 游戏阶段
        current_trick: 本墩已出的牌
        tricks: 已完成的墩
        scores: 两队得分
        bottom_cards: 底牌 (发牌后为未摸的底牌，扣底后为庄家扣下的牌)
        history: 历史事件
        first_two_candidate: 第一张发出的 2 (座位号, 花色)
        table: 桌面参数
    """
    players: Tuple[PlayerState, ...]
    current_seat_index: int
    dealer_index: int
    config: GameConfig
    phase: Phase
    current_trick: Tuple[PlayedCard, ...] = ()
    tricks: Tuple[TrickResult, ...] = ()
    scores: Scores = field(default_factory=Scores)
    bottom_cards: Tuple[Card, ...] = ()
    history: Tuple[HistoryEvent, ...] = ()
    first_two_candidate: Optional[Tuple[int, Suit]] = None
    table: TableConfig = field(default_factory=TableConfig)

    @property
    def trump_suit(self) -> Suit:
        return self.config.trump_suit

    @property
    def in_trick_play(self) -> bool:
        return self.phase == Phase.PLAY_TRICK

    @property
    def is_finished(self) -> bool:
        return self.phase == Phase.ROUND_END

    @property
    def dealer(self) -> PlayerState:
        return self.players[self.dealer_index]

    def seat_index_of(self, seat_id: str) -> Optional[int]:
        """座位 ID 对应的座位号，不存在返回 None"""
        for i, player in enumerate(self.players):
            if player.id == seat_id:
                return i
        return None

    def get_player(self, seat_id: str) -> PlayerState:
        seat_index = self.seat_index_of(seat_id)
        if seat_index is None:
            raise GameError(UNKNOWN_SEAT, f"Unknown seat: {seat_id}")
        return self.players[seat_index]

    def all_hands(self) -> Tuple[Tuple[Card, ...], ...]:
        """四家手牌，按座位号排列"""
        return tuple(player.hand for player in self.players)

    @classmethod
    def initial(
        cls,
        seat_ids: Sequence[str],
        config: GameConfig,
        dealer_index: int = 0,
        seed: Optional[int] = None,
        table: Optional[TableConfig] = None,
    ) -> 'GameState':
        """
        创建新的一手牌

        Args:
            seat_ids: 四个座位 ID
            config: 规则配置
            dealer_index: 庄家座位号 (0-3)
            seed: 随机种子

        Returns:
            DEAL 阶段的状态
        """
        seat_ids = list(seat_ids)
        if len(seat_ids) != NUM_SEATS:
            raise GameError(INVALID_SEATS, f"Expected {NUM_SEATS} seats, got {len(seat_ids)}")
        if len(set(seat_ids)) != NUM_SEATS:
            raise GameError(INVALID_SEATS, "Seat ids must be unique")
        if not isinstance(dealer_index, int) or not 0 <= dealer_index < NUM_SEATS:
            raise GameError(INVALID_DEALER, f"Dealer index out of range: {dealer_index}")
        table = table or TableConfig()

        deck = shuffle_deck(create_deck(), seed)
        dealt = deal_with_twos(
            deck,
            NUM_SEATS,
            table.hand_size,
            table.bottom_size,
            starting_player_index=dealer_index,
        )

        players = tuple(
            PlayerState(id=seat_id, hand=tuple(hand), team=team_of(i, dealer_index))
            for i, (seat_id, hand) in enumerate(zip(seat_ids, dealt.hands))
        )
        state = cls(
            players=players,
            current_seat_index=dealer_index,
            dealer_index=dealer_index,
            config=config,
            phase=Phase.DEAL,
            bottom_cards=tuple(dealt.bottom_cards),
            first_two_candidate=dealt.first_two_candidate,
            table=table,
        )
        state.check_invariants()
        logger.debug(f"New hand dealt, dealer={seat_ids[dealer_index]}, first two={dealt.first_two_candidate}")
        return state

    def _require_phase(self, phase: Phase, action: str):
        if self.phase != phase:
            raise PhaseError(f"Cannot {action} in phase {self.phase.value}")

    def _event(self, history: Tuple[HistoryEvent, ...], event_type: HistoryEventType, **kwargs) -> Tuple[HistoryEvent, ...]:
        return history + (HistoryEvent(type=event_type, sequence=len(history), **kwargs),)

    def with_trump_choice(self) -> 'GameState':
        self._require_phase(Phase.DEAL, "start trump choice")
        return replace(self, phase=Phase.CHOOSE_TRUMP)

    def with_trump(
        self,
        trump_suit,
        fan: FanType = FanType.NONE,
        fan_seat_id: Optional[str] = None,
    ) -> 'GameState':
        """
        定主 (可同时反牌)

        Args:
            trump_suit: 主花色
            fan: 反牌类型
            fan_seat_id: 反牌的座位，手中须有至少三张 3 (三反) 或三张非方片 5 (五反)

        Returns:
            CONFIRM_LANDLORD 阶段的新状态
        """
        self._require_phase(Phase.CHOOSE_TRUMP, "declare trump")
        trump_suit = parse_suit(trump_suit)

        if fan != FanType.NONE:
            if fan_seat_id is None:
                raise ConfigError("A fan declaration needs the declaring seat")
            can_three, can_five = fan_eligibility(self.get_player(fan_seat_id).hand)
            if (fan == FanType.THREE and not can_three) or (fan == FanType.FIVE and not can_five):
                raise ConfigError(f"Seat {fan_seat_id} is not eligible for {fan.value} fan")

        config = GameConfig(trump_suit=trump_suit).with_fan(fan)
        history = self._event(
            self.history,
            HistoryEventType.TRUMP_DECLARED,
            seat_id=fan_seat_id,
            seat_index=self.seat_index_of(fan_seat_id) if fan_seat_id else None,
        )
        logger.debug(f"Trump declared: {trump_suit.value}, fan={fan.value}")
        return replace(self, config=config, phase=Phase.CONFIRM_LANDLORD, history=history)

    def with_bottom_taken(self, dealer_seat_id: Optional[str] = None) -> 'GameState':
        """
        确认庄家，庄家摸底牌

        Args:
            dealer_seat_id: 改为该座位坐庄，默认保持当前庄家

        Returns:
            DISCARD_BOTTOM 阶段的新状态
        """
        self._require_phase(Phase.CONFIRM_LANDLORD, "confirm landlord")
        dealer_index = self.dealer_index
        if dealer_seat_id is not None:
            dealer_index = self.seat_index_of(dealer_seat_id)
            if dealer_index is None:
                raise GameError(UNKNOWN_SEAT, f"Unknown seat: {dealer_seat_id}")

        players = list(_assign_teams(self.players, dealer_index))
        dealer = players[dealer_index]
        players[dealer_index] = replace(dealer, hand=dealer.hand + self.bottom_cards)

        history = self._event(
            self.history,
            HistoryEventType.BOTTOM_TAKEN,
            seat_id=dealer.id,
            seat_index=dealer_index,
            cards=self.bottom_cards,
        )
        state = replace(
            self,
            players=tuple(players),
            dealer_index=dealer_index,
            current_seat_index=dealer_index,
            bottom_cards=(),
            phase=Phase.DISCARD_BOTTOM,
            history=history,
        )
        state.check_invariants()
        return state

    def with_discard(self, dealer_seat_id: str, cards: Sequence[Card]) -> 'GameState':
        """
        庄家扣底

        必须正好扣 bottom_size 张手中的牌，且不能有分牌 (5/10/K)。

        Args:
            dealer_seat_id: 庄家座位 ID
            cards: 扣下的牌

        Returns:
            PLAY_TRICK 阶段的新状态，由庄家首出
        """
        self._require_phase(Phase.DISCARD_BOTTOM, "discard bottom")
        cards = tuple(cards)
        dealer = self.get_player(dealer_seat_id)
        if self.seat_index_of(dealer_seat_id) != self.dealer_index:
            raise GameError(INVALID_DISCARD, f"Only the dealer may discard, not {dealer_seat_id}")
        if len(cards) != self.table.bottom_size:
            raise GameError(INVALID_DISCARD, f"Must discard exactly {self.table.bottom_size} cards")
        if len(set(cards)) != len(cards):
            raise GameError(INVALID_DISCARD, "Duplicate cards in discard")
        missing = [c for c in cards if c not in dealer.hand]
        if missing:
            raise GameError(INVALID_DISCARD, f"Cards not in hand: {cards_to_str(missing)}")
        points = [c for c in cards if is_point_card(c)]
        if points:
            raise GameError(INVALID_DISCARD, f"Bottom cards cannot contain 5, 10 or K: {cards_to_str(points)}")

        players = list(self.players)
        players[self.dealer_index] = dealer.without(cards)

        history = self._event(
            self.history,
            HistoryEventType.LANDLORD_DISCARD,
            seat_id=dealer.id,
            seat_index=self.dealer_index,
            cards=cards,
        )
        history = self._event(
            history,
            HistoryEventType.BOTTOM_SET,
            seat_id=dealer.id,
            seat_index=self.dealer_index,
            cards=cards,
        )
        logger.debug(f"Dealer {dealer.id} discarded {cards_to_str(cards)}")
        state = replace(
            self,
            players=tuple(players),
            bottom_cards=cards,
            current_seat_index=self.dealer_index,
            phase=Phase.PLAY_TRICK,
            history=history,
        )
        state.check_invariants()
        return state

    def with_card(self, seat_id: str, card: Card) -> 'GameState':
        """
        出一张牌

        Args:
            seat_id: 座位 ID
            card: 牌

        Returns:
            新状态 (满 4 张时已结算本墩)

        Raises:
            InvalidPlayError: 出牌不合法
        """
        self._require_phase(Phase.PLAY_TRICK, "play a card")
        result = validate_card_play(self, seat_id, card)
        if not result.valid:
            raise InvalidPlayError(result.reason)
        return self._apply_play(seat_id, (card,))

    def with_cards(self, seat_id: str, cards: Sequence[Card]) -> 'GameState':
        """
        一次出多张牌 (甩牌或跟甩牌)

        Raises:
            InvalidPlayError: 出牌不合法，reason 为甩牌提示或跟牌提示
        """
        cards = tuple(cards)
        if len(cards) == 1:
            return self.with_card(seat_id, cards[0])
        self._require_phase(Phase.PLAY_TRICK, "play cards")
        result = validate_card_group(self, seat_id, cards)
        if not result.valid:
            raise InvalidPlayError(result.reason)
        return self._apply_play(seat_id, cards)

    def _apply_play(self, seat_id: str, cards: Tuple[Card, ...]) -> 'GameState':
        seat_index = self.seat_index_of(seat_id)
        players = list(self.players)
        players[seat_index] = players[seat_index].without(cards)

        trick = self.current_trick + tuple(PlayedCard(c, seat_id, seat_index) for c in cards)
        history = self._event(
            self.history,
            HistoryEventType.CARD_PLAYED,
            seat_id=seat_id,
            seat_index=seat_index,
            cards=cards,
        )
        logger.debug(f"Seat {seat_id} played {cards_to_str(cards)}")

        info = detect_rui_pai(trick, self.trump_suit, self.config)
        per_seat = info.count if info is not None else 1
        if len(trick) == per_seat * NUM_SEATS:
            return self._close_trick(tuple(players), trick, history)

        state = replace(
            self,
            players=tuple(players),
            current_trick=trick,
            current_seat_index=(seat_index + 1) % NUM_SEATS,
            history=history,
        )
        state.check_invariants()
        return state

    def _close_trick(
        self,
        players: Tuple[PlayerState, ...],
        trick: Tuple[PlayedCard, ...],
        history: Tuple[HistoryEvent, ...],
    ) -> 'GameState':
        leader_index = trick[0].seat_index
        winner_index = determine_trick_winner(trick, self.trump_suit, self.config, leader_index)
        points = trick_points(trick)
        result = TrickResult(
            cards=trick,
            winner_index=winner_index,
            winner_id=players[winner_index].id,
            points=points,
        )

        # 按当前庄家计算队伍，不用座位上的 team
        scores = self.scores.award(team_of(winner_index, self.dealer_index), points)
        tricks = self.tricks + (result,)
        history = self._event(
            history,
            HistoryEventType.TRICK_COMPLETE,
            seat_id=result.winner_id,
            seat_index=winner_index,
            trick_index=len(tricks) - 1,
        )
        finished = all(not player.hand for player in players)
        logger.debug(f"Trick {len(tricks) - 1} won by {result.winner_id} for {points} points")

        state = replace(
            self,
            players=players,
            current_trick=(),
            tricks=tricks,
            scores=scores,
            current_seat_index=winner_index,
            phase=Phase.ROUND_END if finished else Phase.PLAY_TRICK,
            history=history,
        )
        state.check_invariants()
        if finished:
            logger.debug(f"Hand finished: dealer team {scores.dealer_team}, non-dealer team {scores.non_dealer_team}")
        return state

    def all_cards(self) -> List[Card]:
        """手牌、已完成墩、本墩、底牌中的全部牌"""
        cards: List[Card] = []
        for player in self.players:
            cards.extend(player.hand)
        for trick in self.tricks:
            cards.extend(pc.card for pc in trick.cards)
        cards.extend(pc.card for pc in self.current_trick)
        cards.extend(self.bottom_cards)
        return cards

    def check_invariants(self):
        """
        检查整副牌守恒: 所有位置的牌合起来正好是一副 54 张，不重复不缺失

        Raises:
            InvariantError
        """
        counts = cards_to_array(self.all_cards())
        if np.array_equal(counts, np.ones(len(FULL_DECK), dtype=np.float32)):
            return
        duplicated = array_to_cards(np.where(counts > 1, counts - 1, 0))
        missing = array_to_cards(np.where(counts == 0, 1, 0))
        raise InvariantError(
            f"Deck invariant violated: duplicated [{cards_to_str(duplicated)}], missing [{cards_to_str(missing)}]"
        )

    def final_scores(self) -> HandScores:
        return calculate_scores(self)


def create_new_game(
    seat_ids: Sequence[str],
    config: GameConfig,
    dealer_index: int = 0,
    seed: Optional[int] = None,
    table: Optional[TableConfig] = None,
) -> GameState:
    """创建新的一手牌，见 GameState.initial"""
    return GameState.initial(seat_ids, config, dealer_index=dealer_index, seed=seed, table=table)


def start_trump_choice(state: GameState) -> GameState:
    return state.with_trump_choice()


def declare_trump(
    state: GameState,
    trump_suit,
    fan: FanType = FanType.NONE,
    fan_seat_id: Optional[str] = None,
) -> GameState:
    return state.with_trump(trump_suit, fan=fan, fan_seat_id=fan_seat_id)


def confirm_landlord(state: GameState, dealer_seat_id: Optional[str] = None) -> GameState:
    return state.with_bottom_taken(dealer_seat_id)


def apply_landlord_discard(state: GameState, dealer_seat_id: str, cards: Sequence[Card]) -> GameState:
    return state.with_discard(dealer_seat_id, cards)


def play_card(state: GameState, seat_id: str, card: Card) -> GameState:
    """
    出一张牌

    Raises:
        InvalidPlayError: 消息为 "Invalid card play: <原因>"
    """
    return state.with_card(seat_id, card)


def play_cards(state: GameState, seat_id: str, cards: Sequence[Card]) -> GameState:
    return state.with_cards(seat_id, cards)
