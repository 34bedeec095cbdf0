"""
计分

5 = 5 分, 10 = 10 分, K = 10 分。每墩的分归赢家所在的队。
庄家队 = 庄家座位及其对家 (dealer_index + 2) % 4。
"""
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Tuple

from .cards import Card
from .config import NUM_SEATS, STEP_DOWN_THRESHOLD

logger = logging.getLogger(__name__)


class Team(Enum):
    """队伍"""
    DEALER = "dealer"
    NON_DEALER = "non_dealer"


def dealer_team_seats(dealer_index: int) -> Tuple[int, int]:
    """庄家队的两个座位"""
    return dealer_index, (dealer_index + 2) % NUM_SEATS


def team_of(seat_index: int, dealer_index: int) -> Team:
    """根据当前庄家计算座位所属队伍"""
    if seat_index in dealer_team_seats(dealer_index):
        return Team.DEALER
    return Team.NON_DEALER


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    一队的得分明细

    Attributes:
        total_points: 总分
        scoring_cards: 得分牌 (5/10/K)，按得到的顺序
    """
    total_points: int = 0
    scoring_cards: Tuple[Card, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class HandScores:
    """一手牌两队的得分"""
    dealer_team: ScoreBreakdown = field(default_factory=ScoreBreakdown)
    non_dealer_team: ScoreBreakdown = field(default_factory=ScoreBreakdown)


def calculate_scores(state) -> HandScores:
    """
    根据已完成的墩计算两队得分

    纯函数; 没有墩、墩数据残缺 (None、缺牌、缺赢家) 时跳过该墩而不是报错。

    Args:
        state: GameState (只读取 tricks 与 dealer_index)

    Returns:
        HandScores
    """
    tricks = getattr(state, "tricks", None) or ()
    dealer_index = getattr(state, "dealer_index", 0)

    dealer_cards = []
    non_dealer_cards = []

    for i, trick in enumerate(tricks):
        cards = getattr(trick, "cards", None)
        winner_index = getattr(trick, "winner_index", None)
        if not cards or winner_index is None:
            logger.debug(f"Skipping malformed trick {i}")
            continue

        bucket = dealer_cards if team_of(winner_index, dealer_index) == Team.DEALER else non_dealer_cards
        for played in cards:
            card = getattr(played, "card", None)
            if card is not None and card.points > 0:
                bucket.append(card)

    return HandScores(
        dealer_team=ScoreBreakdown(
            total_points=sum(card.points for card in dealer_cards),
            scoring_cards=tuple(dealer_cards),
        ),
        non_dealer_team=ScoreBreakdown(
            total_points=sum(card.points for card in non_dealer_cards),
            scoring_cards=tuple(non_dealer_cards),
        ),
    )


def next_dealer_index(
    dealer_index: int,
    scores: HandScores,
    threshold: int = STEP_DOWN_THRESHOLD,
) -> int:
    """
    下一手的庄家

    闲家得分超过阈值则庄家下台，由下家坐庄; 否则连庄。
    """
    if scores.non_dealer_team.total_points > threshold:
        return (dealer_index + 1) % NUM_SEATS
    return dealer_index
