"""跟牌合法性测试"""
from dataclasses import replace

from dingzhu.cards import Suit, FULL_DECK, str_to_card, str_to_cards
from dingzhu.config import GameConfig
from dingzhu.follow import (
    validate_card_play,
    validate_card_group,
    legal_cards,
    MSG_WRONG_PHASE,
    MSG_PLAYER_NOT_FOUND,
    MSG_NOT_YOUR_TURN,
    MSG_CARD_NOT_IN_HAND,
    MSG_MUST_PLAY_TRUMP,
    MSG_DUPLICATE_CARDS,
)
from dingzhu.ruipai import MSG_STRONGER_OUTSTANDING
from dingzhu.scoring import team_of
from dingzhu.state import GameState, Phase, PlayerState
from dingzhu.tricks import PlayedCard


SEATS = ("p0", "p1", "p2", "p3")


def played(seat, text):
    return tuple(PlayedCard(card, SEATS[seat], seat) for card in str_to_cards(text))


def make_state(hands, trump=Suit.HEART, current=0, trick=(), config=None):
    """构造出牌阶段状态，未分配的牌放进底牌以保持整副牌守恒"""
    hand_cards = [tuple(str_to_cards(text)) for text in hands]
    used = {c for hand in hand_cards for c in hand} | {pc.card for pc in trick}
    players = tuple(
        PlayerState(id=SEATS[i], hand=hand, team=team_of(i, 0))
        for i, hand in enumerate(hand_cards)
    )
    return GameState(
        players=players,
        current_seat_index=current,
        dealer_index=0,
        config=config or GameConfig(trump),
        phase=Phase.PLAY_TRICK,
        current_trick=tuple(trick),
        bottom_cards=tuple(c for c in FULL_DECK if c not in used),
    )


class TestSeatChecks:
    """座位与回合检查"""

    def test_leading_any_card(self):
        state = make_state(["♠3 ♥4 大王", "♠4", "♠5", "♠6"])
        for card in str_to_cards("♠3 ♥4 大王"):
            assert validate_card_play(state, "p0", card).valid

    def test_not_your_turn(self):
        state = make_state(["♠3", "♠4", "♠5", "♠6"])
        result = validate_card_play(state, "p1", str_to_card("♠4"))
        assert not result.valid
        assert result.reason == MSG_NOT_YOUR_TURN

    def test_unknown_player(self):
        state = make_state(["♠3", "♠4", "♠5", "♠6"])
        assert validate_card_play(state, "nobody", str_to_card("♠3")).reason == MSG_PLAYER_NOT_FOUND

    def test_card_not_in_hand(self):
        state = make_state(["♠3", "♠4", "♠5", "♠6"])
        assert validate_card_play(state, "p0", str_to_card("♠4")).reason == MSG_CARD_NOT_IN_HAND

    def test_wrong_phase(self):
        state = replace(make_state(["♠3", "♠4", "♠5", "♠6"]), phase=Phase.DISCARD_BOTTOM)
        assert validate_card_play(state, "p0", str_to_card("♠3")).reason == MSG_WRONG_PHASE
        assert legal_cards(state, "p0") == []


class TestFollowTrump:
    """首牌为主"""

    def test_must_play_trump(self):
        state = make_state(["", "♠3 ♥4", "♠5", "♠6"], current=1, trick=played(0, "大王"))
        result = validate_card_play(state, "p1", str_to_card("♠3"))
        assert not result.valid
        assert result.reason == MSG_MUST_PLAY_TRUMP
        assert validate_card_play(state, "p1", str_to_card("♥4")).valid

    def test_rank_trump_counts(self):
        # ♠J 是主，首牌为主时必须跟
        state = make_state(["", "♠3 ♠J", "♠5", "♠6"], current=1, trick=played(0, "♥9"))
        assert not validate_card_play(state, "p1", str_to_card("♠3")).valid
        assert validate_card_play(state, "p1", str_to_card("♠J")).valid

    def test_no_trump_any_card(self):
        state = make_state(["", "♠3 ♣4", "♠5", "♠6"], current=1, trick=played(0, "大王"))
        assert validate_card_play(state, "p1", str_to_card("♠3")).valid
        assert validate_card_play(state, "p1", str_to_card("♣4")).valid


class TestFollowSuit:
    """首牌为副"""

    def test_must_follow_suit(self):
        state = make_state(["", "♠3 ♥4 ♣5", "♠5", "♠6"], current=1, trick=played(0, "♠9"))
        assert validate_card_play(state, "p1", str_to_card("♠3")).valid
        result = validate_card_play(state, "p1", str_to_card("♥4"))
        assert not result.valid
        assert result.reason == "有黑桃必须先出黑桃"
        assert not validate_card_play(state, "p1", str_to_card("♣5")).valid

    def test_trump_of_led_suit_is_not_following(self):
        # ♠J 是主，不算黑桃
        state = make_state(["", "♠J ♠3", "♠5", "♠6"], current=1, trick=played(0, "♠9"))
        assert not validate_card_play(state, "p1", str_to_card("♠J")).valid

    def test_void_any_card(self):
        state = make_state(["", "♠J ♥4 ♣5", "♠5", "♠6"], current=1, trick=played(0, "♠9"))
        for card in str_to_cards("♠J ♥4 ♣5"):
            assert validate_card_play(state, "p1", card).valid

    def test_legal_cards(self):
        state = make_state(["", "♠3 ♥4 ♣5 ♠7", "♠5", "♠6"], current=1, trick=played(0, "♠9"))
        assert legal_cards(state, "p1") == str_to_cards("♠3 ♠7")
        assert legal_cards(state, "nobody") == []

    def test_diamond_name(self):
        state = make_state(["", "♦3 ♣5", "♠5", "♠6"], current=1, trick=played(0, "♦9"))
        assert validate_card_play(state, "p1", str_to_card("♣5")).reason == "有方片必须先出方片"

    def test_multi_card_trick_needs_group(self):
        state = make_state(["♣3", "♠3 ♠4", "♠5", "♠6"], current=1, trick=played(0, "♠A ♠K"))
        assert validate_card_play(state, "p1", str_to_card("♠3")).reason == "需要出2张牌"
        assert legal_cards(state, "p1") == []


class TestCardGroup:
    """多张出牌测试"""

    def test_single_delegates(self):
        state = make_state(["♠3", "♠4", "♠5", "♠6"])
        assert validate_card_group(state, "p0", str_to_cards("♠3")).valid

    def test_lead_checks_all_hands(self):
        state = make_state(["♥A ♥Q ♠3", "♥K", "♠5", "♠6"], trump=Suit.CLUB)
        result = validate_card_group(state, "p0", str_to_cards("♥A ♥Q"))
        assert result.message == MSG_STRONGER_OUTSTANDING

    def test_lead_with_missing_card_in_bottom(self):
        state = make_state(["♥A ♥Q ♠3", "♠4", "♠5", "♠6"], trump=Suit.CLUB)
        assert validate_card_group(state, "p0", str_to_cards("♥A ♥Q")).valid

    def test_lead_requires_cards_in_hand(self):
        state = make_state(["♥A ♠3", "♠4", "♠5", "♠6"], trump=Suit.CLUB)
        assert validate_card_group(state, "p0", str_to_cards("♥A ♥K")).reason == MSG_CARD_NOT_IN_HAND

    def test_duplicates(self):
        state = make_state(["♥A ♠3", "♠4", "♠5", "♠6"], trump=Suit.CLUB)
        assert validate_card_group(state, "p0", str_to_cards("♥A ♥A")).reason == MSG_DUPLICATE_CARDS

    def test_not_your_turn(self):
        state = make_state(["♥A ♠3", "♥K ♥Q", "♠5", "♠6"], trump=Suit.CLUB)
        assert validate_card_group(state, "p1", str_to_cards("♥K ♥Q")).reason == MSG_NOT_YOUR_TURN

    def test_follow_with_enough_suit(self):
        state = make_state(["♣3", "♠3 ♠4 ♣5 ♣6", "♠5", "♠6"], current=1, trick=played(0, "♠A ♠K"))
        assert validate_card_group(state, "p1", str_to_cards("♠3 ♠4")).valid
        assert validate_card_group(state, "p1", str_to_cards("♠3 ♣5")).reason == "有黑桃必须先出黑桃"

    def test_follow_with_some_suit(self):
        state = make_state(["♣3", "♠3 ♣5 ♣6", "♠5", "♠6"], current=1, trick=played(0, "♠A ♠K"))
        assert validate_card_group(state, "p1", str_to_cards("♠3 ♣5")).valid
        assert not validate_card_group(state, "p1", str_to_cards("♣5 ♣6")).valid

    def test_follow_void(self):
        state = make_state(["♣3", "♥3 ♣5 ♣6", "♠5", "♠6"], current=1, trick=played(0, "♠A ♠K"))
        assert validate_card_group(state, "p1", str_to_cards("♣5 ♣6")).valid
        assert validate_card_group(state, "p1", str_to_cards("♥3 ♣6")).valid

    def test_follow_wrong_count(self):
        state = make_state(["♣3", "♠3 ♠4 ♣5", "♠5", "♠6"], current=1, trick=played(0, "♠A ♠K"))
        assert validate_card_group(state, "p1", str_to_cards("♠3 ♠4 ♣5")).reason == "需要出2张牌"

    def test_group_on_single_trick(self):
        state = make_state(["", "♠3 ♠4", "♠5", "♠6"], current=1, trick=played(0, "♠9"))
        assert validate_card_group(state, "p1", str_to_cards("♠3 ♠4")).reason == "需要出1张牌"
