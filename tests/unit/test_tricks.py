"""墩结算测试"""
import pytest

from dingzhu.cards import Suit, str_to_card, str_to_cards
from dingzhu.config import GameConfig
from dingzhu.errors import GameError, InvariantError, INVALID_TRICK
from dingzhu.tricks import (
    PlayedCard,
    FollowKind,
    trick_points,
    cards_by_seat,
    get_trick_winner,
    detect_rui_pai,
    classify_follow,
    get_rui_pai_winner,
    determine_trick_winner,
    select_rui_pai_follow,
)


HEART = GameConfig(Suit.HEART)


def single_trick(texts, leader=0):
    """按出牌顺序构造单张墩，首家为 leader"""
    return [
        PlayedCard(str_to_card(text), f"p{(leader + i) % 4}", (leader + i) % 4)
        for i, text in enumerate(texts)
    ]


def multi_trick(groups, leader=0):
    """groups: 按出牌顺序每家打出的牌"""
    trick = []
    for i, text in enumerate(groups):
        seat = (leader + i) % 4
        trick.extend(PlayedCard(card, f"p{seat}", seat) for card in str_to_cards(text))
    return trick


class TestGetTrickWinner:
    """单张墩测试"""

    def test_big_joker_beats_spade_queen(self):
        trick = single_trick(["♠A", "大王", "♠K", "♠Q"])
        assert get_trick_winner(trick, Suit.HEART, HEART, 0) == 1

    def test_diamond_five_beats_big_joker(self):
        trick = single_trick(["♠10", "♦5", "♠K", "大王"])
        assert get_trick_winner(trick, Suit.HEART, HEART, 0) == 1

    def test_highest_of_leading_suit(self):
        config = GameConfig(Suit.CLUB)
        trick = single_trick(["♠10", "♠A", "♥K", "♠3"])
        assert get_trick_winner(trick, Suit.CLUB, config, 0) == 1

    def test_off_suit_never_wins(self):
        config = GameConfig(Suit.CLUB)
        trick = single_trick(["♠3", "♥A", "♦A", "♥K"], leader=2)
        assert get_trick_winner(trick, Suit.CLUB, config, 2) == 2

    def test_spade_queen_beats_trump_suit(self):
        trick = single_trick(["♠A", "♥3", "♠K", "♠Q"], leader=1)
        # ♠Q 最后出，座位 0
        assert get_trick_winner(trick, Suit.HEART, HEART, 1) == 0

    def test_equal_fans_first_played_wins(self):
        config = GameConfig(Suit.HEART, has_five_fan=True)
        trick = single_trick(["♠4", "♣5", "♠5", "♠3"], leader=3)
        assert get_trick_winner(trick, Suit.HEART, config, 3) == 0

    def test_wrong_size(self):
        with pytest.raises(GameError) as exc_info:
            get_trick_winner(single_trick(["♠A", "♠K", "♠Q"]), Suit.HEART, HEART, 0)
        assert exc_info.value.code == INVALID_TRICK
        with pytest.raises(GameError):
            get_trick_winner([], Suit.HEART, HEART, 0)


class TestTrickHelpers:
    """辅助函数测试"""

    def test_trick_points(self):
        assert trick_points(single_trick(["♠5", "♥10", "♣K", "♦3"])) == 25
        assert trick_points([]) == 0

    def test_cards_by_seat(self):
        grouped = cards_by_seat(multi_trick(["♠A ♠K", "♠3 ♠4"], leader=3))
        assert grouped == {3: str_to_cards("♠A ♠K"), 0: str_to_cards("♠3 ♠4")}


class TestDetectRuiPai:
    """甩牌墩检测测试"""

    def test_multi_card_lead(self):
        info = detect_rui_pai(multi_trick(["♠A ♠K", "♠3"]), Suit.HEART, HEART)
        assert info.leader_index == 0
        assert info.count == 2
        assert info.suit is Suit.SPADE
        assert info.leader_cards == tuple(str_to_cards("♠A ♠K"))

    def test_single_card_lead(self):
        assert detect_rui_pai(single_trick(["♠A", "♠K"]), Suit.HEART, HEART) is None
        assert detect_rui_pai([], Suit.HEART, HEART) is None


class TestClassifyFollow:
    """跟甩牌类别测试"""

    def test_full_suit(self):
        kind = classify_follow(str_to_cards("♠3 ♠4"), Suit.SPADE, 2, Suit.HEART, HEART)
        assert kind == FollowKind.FULL_SUIT

    def test_partial(self):
        kind = classify_follow(str_to_cards("♠3 大王"), Suit.SPADE, 2, Suit.HEART, HEART)
        assert kind == FollowKind.PARTIAL

    def test_all_trump(self):
        kind = classify_follow(str_to_cards("♥3 ♠J"), Suit.SPADE, 2, Suit.HEART, HEART)
        assert kind == FollowKind.ALL_TRUMP

    def test_discard(self):
        kind = classify_follow(str_to_cards("♥3 ♣4"), Suit.SPADE, 2, Suit.HEART, HEART)
        assert kind == FollowKind.DISCARD


class TestRuiPaiWinner:
    """甩牌墩赢家测试"""

    def test_full_suit_follower_can_win(self):
        trick = multi_trick(["♠K ♠10", "♠A ♠3", "♣4 ♣5", "♠4 ♣6"])
        assert get_rui_pai_winner(trick, Suit.HEART, HEART, 0) == 1

    def test_partial_follow_never_wins(self):
        trick = multi_trick(["♠K ♠10", "♠3 大王", "♥3 ♥4", "♣3 ♣4"])
        assert get_rui_pai_winner(trick, Suit.HEART, HEART, 0) == 2

    def test_strongest_all_trump_wins(self):
        trick = multi_trick(["♠K ♠10", "♠3 ♠4", "♥3 ♥4", "♠J ♥6"])
        assert get_rui_pai_winner(trick, Suit.HEART, HEART, 0) == 3

    def test_mixed_trump_and_plain_is_discard(self):
        trick = multi_trick(["♠K ♠10", "♠3 ♠4", "♥3 ♦6", "♣3 ♣4"])
        assert get_rui_pai_winner(trick, Suit.HEART, HEART, 0) == 0

    def test_leader_keeps_trick(self):
        trick = multi_trick(["♠K ♠10", "♠3 ♠4", "♣3 ♣4", "♦3 ♦4"], leader=2)
        assert get_rui_pai_winner(trick, Suit.HEART, HEART, 2) == 2


class TestDetermineTrickWinner:
    """结算分派测试"""

    def test_single(self):
        trick = single_trick(["♠A", "大王", "♠K", "♠Q"])
        assert determine_trick_winner(trick, Suit.HEART, HEART, 0) == 1

    def test_incomplete_single_falls_back_to_leader(self):
        trick = single_trick(["♠A", "大王"], leader=3)
        assert determine_trick_winner(trick, Suit.HEART, HEART, 3) == 3

    def test_too_many_cards(self):
        trick = single_trick(["♠A", "大王", "♠K", "♠Q", "♠3"])
        with pytest.raises(InvariantError):
            determine_trick_winner(trick, Suit.HEART, HEART, 0)

    def test_multi(self):
        trick = multi_trick(["♠K ♠10", "♠A ♠3", "♣4 ♣5", "♠4 ♣6"])
        assert determine_trick_winner(trick, Suit.HEART, HEART, 0) == 1

    def test_seat_played_too_many(self):
        trick = multi_trick(["♠K ♠10", "♠A ♠3 ♠4"])
        with pytest.raises(InvariantError):
            determine_trick_winner(trick, Suit.HEART, HEART, 0)


class TestSelectRuiPaiFollow:
    """跟甩牌策略测试"""

    def test_lowest_of_suit(self):
        hand = str_to_cards("♠9 ♠3 ♠5 ♣A")
        assert select_rui_pai_follow(hand, Suit.SPADE, 2, Suit.HEART, HEART) == str_to_cards("♠3 ♠5")

    def test_partial_with_weakest_filler(self):
        hand = str_to_cards("♠9 ♣4 ♥3 ♣A")
        assert select_rui_pai_follow(hand, Suit.SPADE, 2, Suit.HEART, HEART) == str_to_cards("♠9 ♣4")

    def test_strongest_trumps_when_void(self):
        hand = str_to_cards("♥3 大王 ♣4 ♣A")
        assert select_rui_pai_follow(hand, Suit.SPADE, 2, Suit.HEART, HEART) == str_to_cards("大王 ♥3")

    def test_weakest_cards_without_enough_trumps(self):
        hand = str_to_cards("♥3 ♣4 ♣A ♦6")
        assert select_rui_pai_follow(hand, Suit.SPADE, 2, Suit.HEART, HEART) == str_to_cards("♣4 ♦6")

    def test_small_hand(self):
        hand = str_to_cards("♥3 ♣4")
        assert select_rui_pai_follow(hand, Suit.SPADE, 2, Suit.HEART, HEART) == hand
