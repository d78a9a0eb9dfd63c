"""Tests for the Hearts card module."""

import pytest

from heartsai.games.hearts.cards import (
    ALL_RANKS,
    ALL_SUITS,
    CARD_INDEX,
    INDEX_TO_CARD,
    QUEEN_OF_SPADES,
    TOTAL_POINTS,
    TWO_OF_CLUBS,
    Card,
    Rank,
    Suit,
    make_deck,
    parse_card,
    parse_cards,
    sort_cards,
)


def test_deck_has_52_unique_cards():
    deck = make_deck()
    assert len(deck) == 52
    assert len(set(deck)) == 52


def test_deck_has_4_suits_13_ranks():
    deck = make_deck()
    assert {c.suit for c in deck} == set(ALL_SUITS)
    assert {c.rank for c in deck} == set(ALL_RANKS)
    assert min(ALL_RANKS) == 2
    assert max(ALL_RANKS) == 14


def test_card_points():
    assert QUEEN_OF_SPADES.points() == 13
    for r in ALL_RANKS:
        assert Card(Suit.HEARTS, r).points() == 1
        assert Card(Suit.CLUBS, r).points() == 0
        assert Card(Suit.DIAMONDS, r).points() == 0
        if r != Rank.QUEEN:
            assert Card(Suit.SPADES, r).points() == 0


def test_total_points_is_26():
    assert sum(c.points() for c in make_deck()) == TOTAL_POINTS == 26


def test_special_cards():
    assert TWO_OF_CLUBS.is_two_of_clubs
    assert not TWO_OF_CLUBS.is_queen_of_spades
    assert QUEEN_OF_SPADES.is_queen_of_spades
    assert not Card(Suit.HEARTS, Rank.QUEEN).is_queen_of_spades


def test_card_index_follows_deck_order():
    assert CARD_INDEX[TWO_OF_CLUBS] == 0
    assert CARD_INDEX[Card(Suit.HEARTS, Rank.ACE)] == 51
    for i, c in enumerate(INDEX_TO_CARD):
        assert CARD_INDEX[c] == i


def test_sort_cards_is_suit_then_rank():
    cards = [Card(Suit.HEARTS, Rank.TWO), Card(Suit.CLUBS, Rank.ACE), Card(Suit.CLUBS, Rank.THREE)]
    assert sort_cards(cards) == (
        Card(Suit.CLUBS, Rank.THREE),
        Card(Suit.CLUBS, Rank.ACE),
        Card(Suit.HEARTS, Rank.TWO),
    )


class TestParse:
    def test_short_labels_round_trip(self):
        for c in make_deck():
            assert parse_card(c.short()) == c

    def test_case_insensitive(self):
        assert parse_card("sq") == QUEEN_OF_SPADES
        assert parse_card(" h10 ") == Card(Suit.HEARTS, Rank.TEN)

    @pytest.mark.parametrize("label", ["", "S", "X5", "S1", "H11", "QS"])
    def test_invalid_labels(self, label):
        with pytest.raises(ValueError):
            parse_card(label)

    def test_parse_list(self):
        assert parse_cards("C2, SQ HA") == [TWO_OF_CLUBS, QUEEN_OF_SPADES, Card(Suit.HEARTS, Rank.ACE)]
        assert parse_cards("") == []
