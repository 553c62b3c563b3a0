"""
Tests for the Klondike rules engine.

Tests cover:
- Deck construction, shuffling and the opening deal
- Tableau and foundation placement rules
- Moves, auto-flipping and rejected moves leaving the board untouched
- Stock drawing and recycling
- Win detection, one-shot auto-play and face-value scoring
"""

import random

import pytest

from coronata.types import Rank, Suit
from coronata.models import Card, GameHistory, ScoreState, SolitaireLayout, empty_layout
from coronata.events import CardFlippedEvent, MoveRejectedEvent, StockRecycledEvent
from coronata.solitaire import (
    auto_move_to_foundation,
    can_move_tableau_card,
    can_move_to_foundation,
    check_win,
    create_deck,
    deal_solitaire,
    draw_from_stock,
    get_card_face_value,
    move_tableau_to_foundation,
    move_tableau_to_tableau,
    move_waste_to_foundation,
    move_waste_to_tableau,
    reset_stock_from_waste,
    shuffle,
    update_history,
    update_score_for_foundation,
    update_score_for_play,
)


def up(suit: Suit, rank: Rank) -> Card:
    """Helper to create a face-up card."""
    return Card(suit=suit, rank=rank, face_up=True)


def down(suit: Suit, rank: Rank) -> Card:
    """Helper to create a face-down card."""
    return Card(suit=suit, rank=rank, face_up=False)


def layout_with(
    columns: dict[int, tuple[Card, ...]] | None = None,
    waste: tuple[Card, ...] = (),
    stock: tuple[Card, ...] = (),
) -> SolitaireLayout:
    """Helper to build a board from a few piles."""
    layout = empty_layout()
    for index, pile in (columns or {}).items():
        layout = layout.with_tableau_column(index, pile)
    return layout.with_waste(waste).with_stock(stock)


# =============================================================================
# Deck Tests
# =============================================================================


class TestDeck:
    """Tests for deck construction and shuffling."""

    def test_deck_has_52_distinct_cards(self) -> None:
        deck = create_deck()

        assert len(deck) == 52
        assert len({card.key for card in deck}) == 52

    def test_deck_is_suit_major_and_face_down(self) -> None:
        deck = create_deck()

        assert deck[0] == down(Suit.SPADES, Rank.ACE)
        assert deck[12] == down(Suit.SPADES, Rank.KING)
        assert deck[13] == down(Suit.HEARTS, Rank.ACE)
        assert not any(card.face_up for card in deck)

    def test_shuffle_is_a_permutation(self) -> None:
        deck = create_deck()
        shuffled = shuffle(deck, random.Random(42))

        assert len(shuffled) == len(deck)
        assert sorted(c.key for c in shuffled) == sorted(c.key for c in deck)

    def test_shuffle_is_deterministic_for_a_seed(self) -> None:
        deck = create_deck()

        assert shuffle(deck, random.Random(7)) == shuffle(deck, random.Random(7))

    def test_shuffle_returns_a_copy(self) -> None:
        deck = create_deck()
        shuffle(deck, random.Random(1))

        assert deck == create_deck()

    def test_shuffle_accepts_any_items(self) -> None:
        shuffled = shuffle(("trade", "wander", "wander", "feast"), random.Random(5))

        assert isinstance(shuffled, tuple)
        assert sorted(shuffled) == ["feast", "trade", "wander", "wander"]


# =============================================================================
# Deal Tests
# =============================================================================


class TestDeal:
    """Tests for the opening Klondike layout."""

    def test_column_sizes_and_stock(self) -> None:
        layout = deal_solitaire(shuffle(create_deck(), random.Random(3)))

        assert [len(col) for col in layout.tableau] == [1, 2, 3, 4, 5, 6, 7]
        assert len(layout.stock) == 24
        assert layout.waste == ()
        assert layout.foundations == ((), (), (), ())

    def test_only_last_card_of_each_column_is_face_up(self) -> None:
        layout = deal_solitaire(create_deck())

        for column in layout.tableau:
            assert column[-1].face_up
            assert not any(card.face_up for card in column[:-1])
        assert not any(card.face_up for card in layout.stock)

    def test_deal_order_follows_the_deck(self) -> None:
        deck = create_deck()
        layout = deal_solitaire(deck)

        assert layout.tableau[0][0].key == deck[0].key
        assert layout.tableau[1][0].key == deck[1].key
        assert layout.stock[0].key == deck[28].key

    def test_no_card_is_lost(self) -> None:
        deck = shuffle(create_deck(), random.Random(11))
        layout = deal_solitaire(deck)

        assert sorted(c.key for c in layout.all_cards()) == sorted(c.key for c in deck)

    def test_short_deck_is_refused(self) -> None:
        with pytest.raises(ValueError):
            deal_solitaire(create_deck()[:27])


# =============================================================================
# Placement Rule Tests
# =============================================================================


class TestPlacementRules:
    """Tests for tableau and foundation legality checks."""

    def test_ace_starts_a_foundation(self) -> None:
        assert can_move_to_foundation(up(Suit.SPADES, Rank.ACE), ())

    def test_next_rank_same_suit_builds_foundation(self) -> None:
        assert can_move_to_foundation(up(Suit.SPADES, Rank.TWO), (up(Suit.SPADES, Rank.ACE),))

    def test_skipping_a_rank_is_illegal(self) -> None:
        assert not can_move_to_foundation(up(Suit.SPADES, Rank.THREE), (up(Suit.SPADES, Rank.ACE),))

    def test_other_suit_is_illegal_on_foundation(self) -> None:
        assert not can_move_to_foundation(up(Suit.HEARTS, Rank.TWO), (up(Suit.SPADES, Rank.ACE),))

    def test_only_ace_on_empty_foundation(self) -> None:
        assert not can_move_to_foundation(up(Suit.SPADES, Rank.TWO), ())

    def test_king_on_empty_column(self) -> None:
        assert can_move_tableau_card(up(Suit.CLUBS, Rank.KING), ())

    def test_only_king_on_empty_column(self) -> None:
        assert not can_move_tableau_card(up(Suit.CLUBS, Rank.QUEEN), ())

    def test_alternating_colour_descending_rank(self) -> None:
        assert can_move_tableau_card(up(Suit.DIAMONDS, Rank.TEN), (up(Suit.CLUBS, Rank.JACK),))

    def test_same_colour_is_illegal(self) -> None:
        assert not can_move_tableau_card(up(Suit.DIAMONDS, Rank.TEN), (up(Suit.HEARTS, Rank.JACK),))

    def test_wrong_rank_is_illegal(self) -> None:
        assert not can_move_tableau_card(up(Suit.DIAMONDS, Rank.NINE), (up(Suit.CLUBS, Rank.JACK),))


# =============================================================================
# Move Tests
# =============================================================================


class TestTableauMoves:
    """Tests for moves that start on the tableau."""

    def test_move_flips_newly_exposed_card(self) -> None:
        layout = layout_with({
            0: (down(Suit.CLUBS, Rank.FIVE), up(Suit.HEARTS, Rank.TEN)),
            1: (up(Suit.CLUBS, Rank.JACK),),
        })

        result = move_tableau_to_tableau(layout, 0, 1, 1)

        assert result.moved
        assert result.layout.tableau[1] == (up(Suit.CLUBS, Rank.JACK), up(Suit.HEARTS, Rank.TEN))
        assert result.layout.tableau[0] == (up(Suit.CLUBS, Rank.FIVE),)
        assert any(isinstance(e, CardFlippedEvent) for e in result.events)

    def test_run_moves_together_onto_empty_column(self) -> None:
        layout = layout_with({
            0: (down(Suit.DIAMONDS, Rank.TWO), up(Suit.SPADES, Rank.KING), up(Suit.HEARTS, Rank.QUEEN)),
        })

        result = move_tableau_to_tableau(layout, 0, 1, 3)

        assert result.moved
        assert result.layout.tableau[3] == (up(Suit.SPADES, Rank.KING), up(Suit.HEARTS, Rank.QUEEN))
        assert result.layout.tableau[0] == (up(Suit.DIAMONDS, Rank.TWO),)

    def test_illegal_move_leaves_layout_untouched(self) -> None:
        layout = layout_with({
            0: (up(Suit.DIAMONDS, Rank.TEN),),
            1: (up(Suit.HEARTS, Rank.JACK),),
        })

        result = move_tableau_to_tableau(layout, 0, 0, 1)

        assert not result.moved
        assert result.layout is layout
        assert isinstance(result.events[0], MoveRejectedEvent)

    def test_face_down_card_cannot_move(self) -> None:
        layout = layout_with({
            0: (down(Suit.HEARTS, Rank.TEN), up(Suit.SPADES, Rank.FOUR)),
            1: (up(Suit.CLUBS, Rank.JACK),),
        })

        assert not move_tableau_to_tableau(layout, 0, 0, 1).moved

    def test_out_of_range_columns_are_rejected(self) -> None:
        layout = layout_with({0: (up(Suit.SPADES, Rank.KING),)})

        assert not move_tableau_to_tableau(layout, 0, 0, 9).moved
        assert not move_tableau_to_tableau(layout, 0, 5, 1).moved
        assert not move_tableau_to_foundation(layout, 8).moved

    def test_tableau_to_foundation(self) -> None:
        layout = layout_with({0: (down(Suit.CLUBS, Rank.NINE), up(Suit.SPADES, Rank.ACE))})

        result = move_tableau_to_foundation(layout, 0)

        assert result.moved
        assert result.layout.foundations[0] == (up(Suit.SPADES, Rank.ACE),)
        assert result.layout.tableau[0] == (up(Suit.CLUBS, Rank.NINE),)

    def test_tableau_to_foundation_uses_matching_pile(self) -> None:
        layout = layout_with({0: (up(Suit.HEARTS, Rank.TWO),)})
        layout = layout.with_foundation(0, (up(Suit.SPADES, Rank.ACE),))
        layout = layout.with_foundation(2, (up(Suit.HEARTS, Rank.ACE),))

        result = move_tableau_to_foundation(layout, 0)

        assert result.layout.foundations[2] == (up(Suit.HEARTS, Rank.ACE), up(Suit.HEARTS, Rank.TWO))
        assert result.layout.foundations[0] == (up(Suit.SPADES, Rank.ACE),)


class TestWasteMoves:
    """Tests for moves from the waste."""

    def test_waste_to_tableau(self) -> None:
        layout = layout_with({2: (up(Suit.SPADES, Rank.KING),)}, waste=(up(Suit.HEARTS, Rank.QUEEN),))

        result = move_waste_to_tableau(layout, 2)

        assert result.moved
        assert result.layout.waste == ()
        assert result.layout.tableau[2][-1] == up(Suit.HEARTS, Rank.QUEEN)

    def test_waste_to_foundation(self) -> None:
        layout = layout_with(waste=(up(Suit.CLUBS, Rank.FIVE), up(Suit.DIAMONDS, Rank.ACE)))

        result = move_waste_to_foundation(layout)

        assert result.moved
        assert result.layout.waste == (up(Suit.CLUBS, Rank.FIVE),)
        assert result.layout.foundations[0] == (up(Suit.DIAMONDS, Rank.ACE),)

    def test_empty_waste_is_rejected(self) -> None:
        layout = empty_layout()

        assert not move_waste_to_foundation(layout).moved
        assert not move_waste_to_tableau(layout, 0).moved


# =============================================================================
# Stock Tests
# =============================================================================


class TestStock:
    """Tests for drawing and recycling."""

    def test_draw_turns_top_card_face_up(self) -> None:
        layout = layout_with(stock=(down(Suit.SPADES, Rank.ACE), down(Suit.SPADES, Rank.TWO)))

        result = draw_from_stock(layout)

        assert result.moved
        assert result.layout.waste == (up(Suit.SPADES, Rank.TWO),)
        assert result.layout.stock == (down(Suit.SPADES, Rank.ACE),)

    def test_draw_from_empty_stock_fails(self) -> None:
        layout = empty_layout()
        result = draw_from_stock(layout)

        assert not result.moved
        assert result.layout is layout

    def test_recycle_preserves_draw_order(self) -> None:
        layout = layout_with(stock=(down(Suit.SPADES, Rank.ACE), down(Suit.SPADES, Rank.TWO)))
        first_pass: list[Card] = []
        while layout.stock:
            layout = draw_from_stock(layout).layout
            first_pass.append(layout.waste[-1])

        result = reset_stock_from_waste(layout)
        layout = result.layout
        assert result.moved
        assert isinstance(result.events[0], StockRecycledEvent)
        assert layout.waste == ()
        assert not any(card.face_up for card in layout.stock)

        second_pass: list[Card] = []
        while layout.stock:
            layout = draw_from_stock(layout).layout
            second_pass.append(layout.waste[-1])

        assert second_pass == first_pass

    def test_recycle_needs_empty_stock(self) -> None:
        layout = layout_with(stock=(down(Suit.SPADES, Rank.ACE),), waste=(up(Suit.CLUBS, Rank.TWO),))

        assert not reset_stock_from_waste(layout).moved


# =============================================================================
# Win and Auto-Play Tests
# =============================================================================


def full_foundations() -> tuple[tuple[Card, ...], ...]:
    return tuple(tuple(up(suit, rank) for rank in Rank) for suit in Suit)


class TestWinAndAutoPlay:
    """Tests for win detection and the one-shot auto-move pass."""

    def test_complete_foundations_win(self) -> None:
        assert check_win(full_foundations())

    def test_incomplete_foundation_does_not_win(self) -> None:
        foundations = full_foundations()
        foundations = (foundations[0][:-1], *foundations[1:])

        assert not check_win(foundations)

    def test_empty_foundations_do_not_win(self) -> None:
        assert not check_win(((), (), (), ()))

    def test_auto_move_is_a_single_pass(self) -> None:
        """The 2 sits left of the Ace, so one pass only moves the Ace."""
        layout = layout_with({
            0: (up(Suit.SPADES, Rank.TWO),),
            1: (up(Suit.SPADES, Rank.ACE),),
        })

        first = auto_move_to_foundation(layout)
        assert first.moved
        assert first.layout.tableau[0] == (up(Suit.SPADES, Rank.TWO),)

        second = auto_move_to_foundation(first.layout)
        assert second.moved
        assert second.layout.foundations[0] == (up(Suit.SPADES, Rank.ACE), up(Suit.SPADES, Rank.TWO))

        assert not auto_move_to_foundation(second.layout).moved

    def test_auto_move_includes_waste(self) -> None:
        layout = layout_with(waste=(up(Suit.HEARTS, Rank.ACE),))

        result = auto_move_to_foundation(layout)

        assert result.moved
        assert result.layout.waste == ()


# =============================================================================
# Scoring Tests
# =============================================================================


class TestScoring:
    """Tests for face-value scoring."""

    def test_face_values(self) -> None:
        assert get_card_face_value(up(Suit.SPADES, Rank.ACE)) == 1
        assert get_card_face_value(up(Suit.SPADES, Rank.TEN)) == 10
        assert get_card_face_value(up(Suit.SPADES, Rank.KING)) == 13

    def test_play_scores_once_per_card(self) -> None:
        card = up(Suit.HEARTS, Rank.SEVEN)

        score, events = update_score_for_play(card, ScoreState())
        assert score.score == 7
        assert len(events) == 1

        score, events = update_score_for_play(card, score)
        assert score.score == 7
        assert events == []

    def test_foundation_scores_double_once(self) -> None:
        card = up(Suit.CLUBS, Rank.QUEEN)

        score, _ = update_score_for_foundation(card, ScoreState())
        score, _ = update_score_for_foundation(card, score)

        assert score.score == 24

    def test_card_scores_at_most_twice(self) -> None:
        card = up(Suit.DIAMONDS, Rank.FIVE)
        score = ScoreState()
        for _ in range(3):
            score, _ = update_score_for_play(card, score)
            score, _ = update_score_for_foundation(card, score)

        assert score.score == 5 + 10
        assert score.played_tableau == {card.key}
        assert score.played_foundation == {card.key}

    def test_face_up_state_does_not_change_identity(self) -> None:
        score, _ = update_score_for_play(up(Suit.SPADES, Rank.NINE), ScoreState())
        score, _ = update_score_for_play(down(Suit.SPADES, Rank.NINE), score)

        assert score.score == 9


class TestHistory:
    """Tests for the session win/loss tally."""

    def test_win_updates_best_score(self) -> None:
        history = update_history(GameHistory(), won=True, score=120)
        history = update_history(history, won=True, score=80)

        assert history.wins == 2
        assert history.best_score == 120

    def test_loss_does_not_touch_best_score(self) -> None:
        history = update_history(GameHistory(), won=False, score=999)

        assert history.losses == 1
        assert history.best_score == 0
