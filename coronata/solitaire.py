"""
Klondike rules: deck handling, move validation, pile mutation and scoring.

This module implements:
- Deck construction, shuffling and the opening deal
- Legality checks for tableau and foundation placements
- Moves between piles (returning new layouts, never mutating)
- Stock/waste cycling and the win condition
- Face-value scoring of first plays and first foundation placements
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence, TypeVar

from coronata.types import (
    PileKind,
    RandomSource,
    Rank,
    Score,
    Suit,
    CARDS_PER_SUIT,
    DEALT_CARD_COUNT,
    FOUNDATION_COUNT,
    TABLEAU_COLUMNS,
)
from coronata.models import (
    Card,
    GameHistory,
    Pile,
    ScoreState,
    SolitaireLayout,
)
from coronata.events import (
    GameEvent,
    CardFlippedEvent,
    CardMovedEvent,
    CardScoredEvent,
    MoveRejectedEvent,
    StockDrawnEvent,
    StockRecycledEvent,
)

T = TypeVar("T")


# =============================================================================
# Deck
# =============================================================================


def create_deck() -> tuple[Card, ...]:
    """52 face-down cards in suit-major order (♠A..♠K, ♥A..♥K, ...)."""
    return tuple(Card(suit=suit, rank=rank) for suit in Suit for rank in Rank)


def shuffle(items: Sequence[T], rng: RandomSource) -> tuple[T, ...]:
    """
    Return a Fisher-Yates permutation of ``items``.

    Shuffles the deck and the run's post-encounter events.
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return tuple(shuffled)


def deal_solitaire(deck: Sequence[Card]) -> SolitaireLayout:
    """
    Deal the opening Klondike layout.

    Column i receives i + 1 cards and only the last card dealt to each
    column is face-up. The remaining cards become the face-down stock.

    Raises:
        ValueError: If the deck holds fewer than 28 cards
    """
    if len(deck) < DEALT_CARD_COUNT:
        raise ValueError(f"Cannot deal from {len(deck)} cards: at least {DEALT_CARD_COUNT} are required")

    columns: list[list[Card]] = [[] for _ in range(TABLEAU_COLUMNS)]
    deck_index = 0
    for col in range(TABLEAU_COLUMNS):
        for row in range(col + 1):
            columns[col].append(deck[deck_index].with_face_up(row == col))
            deck_index += 1

    return SolitaireLayout(
        tableau=tuple(tuple(column) for column in columns),
        stock=tuple(card.with_face_up(False) for card in deck[deck_index:]),
        waste=(),
        foundations=tuple(() for _ in range(FOUNDATION_COUNT)),
    )


# =============================================================================
# Move Validation
# =============================================================================


def can_move_tableau_card(card: Card, dest_pile: Pile) -> bool:
    """Kings go on empty columns; otherwise alternate colour, one rank lower."""
    if not dest_pile:
        return card.rank == Rank.KING
    top = dest_pile[-1]
    return card.is_red != top.is_red and card.rank_index == top.rank_index - 1


def can_move_to_foundation(card: Card, foundation: Pile) -> bool:
    """Aces start a foundation; otherwise same suit, one rank higher."""
    if not foundation:
        return card.rank == Rank.ACE
    top = foundation[-1]
    return card.suit == top.suit and card.rank_index == top.rank_index + 1


def _find_foundation(card: Card, foundations: tuple[Pile, ...]) -> int | None:
    """Index of the first foundation that accepts ``card``."""
    for index, foundation in enumerate(foundations):
        if can_move_to_foundation(card, foundation):
            return index
    return None


# =============================================================================
# Moves
# =============================================================================


@dataclass(frozen=True, slots=True)
class MoveResult:
    """Result of attempting a move."""

    layout: SolitaireLayout
    """The new layout (the original layout when the move was rejected)."""

    moved: bool
    """Whether anything changed."""

    events: tuple[GameEvent, ...] = ()
    """Events describing what happened."""


def _rejected(layout: SolitaireLayout, reason: str) -> MoveResult:
    return MoveResult(layout=layout, moved=False, events=(MoveRejectedEvent(reason=reason),))


def _flip_exposed(layout: SolitaireLayout, col: int) -> tuple[SolitaireLayout, list[GameEvent]]:
    """Turn the new top card of a tableau column face-up if it is face-down."""
    column = layout.tableau[col]
    if not column or column[-1].face_up:
        return layout, []
    flipped = column[-1].with_face_up(True)
    layout = layout.with_tableau_column(col, (*column[:-1], flipped))
    return layout, [CardFlippedEvent(card=flipped, column=col)]


def move_tableau_to_tableau(
    layout: SolitaireLayout,
    from_col: int,
    card_index: int,
    to_col: int,
) -> MoveResult:
    """
    Move the run starting at ``card_index`` of one column onto another column.

    The first moving card must be face-up and legal on the destination.
    """
    if not (0 <= from_col < TABLEAU_COLUMNS and 0 <= to_col < TABLEAU_COLUMNS) or from_col == to_col:
        return _rejected(layout, f"Invalid columns: {from_col} -> {to_col}")

    source = layout.tableau[from_col]
    if not 0 <= card_index < len(source):
        return _rejected(layout, f"No card at index {card_index} of column {from_col}")

    moving = source[card_index:]
    if not moving[0].face_up:
        return _rejected(layout, "Cannot move a face-down card")
    if not can_move_tableau_card(moving[0], layout.tableau[to_col]):
        return _rejected(layout, f"{moving[0].key} cannot go on column {to_col}")

    layout = layout.with_tableau_column(to_col, (*layout.tableau[to_col], *moving))
    layout = layout.with_tableau_column(from_col, source[:card_index])

    events: list[GameEvent] = [
        CardMovedEvent(
            card=card,
            source=PileKind.TABLEAU,
            source_index=from_col,
            destination=PileKind.TABLEAU,
            destination_index=to_col,
        )
        for card in moving
    ]
    layout, flip_events = _flip_exposed(layout, from_col)
    events.extend(flip_events)

    return MoveResult(layout=layout, moved=True, events=tuple(events))


def move_tableau_to_foundation(layout: SolitaireLayout, col: int) -> MoveResult:
    """Move the top card of a column to the first foundation that accepts it."""
    if not 0 <= col < TABLEAU_COLUMNS or not layout.tableau[col]:
        return _rejected(layout, f"Column {col} has no card to move")

    column = layout.tableau[col]
    card = column[-1]
    foundation_index = _find_foundation(card, layout.foundations)
    if foundation_index is None:
        return _rejected(layout, f"{card.key} cannot go on any foundation")

    layout = layout.with_foundation(foundation_index, (*layout.foundations[foundation_index], card))
    layout = layout.with_tableau_column(col, column[:-1])

    events: list[GameEvent] = [
        CardMovedEvent(
            card=card,
            source=PileKind.TABLEAU,
            source_index=col,
            destination=PileKind.FOUNDATION,
            destination_index=foundation_index,
        )
    ]
    layout, flip_events = _flip_exposed(layout, col)
    events.extend(flip_events)

    return MoveResult(layout=layout, moved=True, events=tuple(events))


def move_waste_to_tableau(layout: SolitaireLayout, to_col: int) -> MoveResult:
    """Move the top waste card onto a tableau column."""
    if not layout.waste:
        return _rejected(layout, "Waste is empty")
    if not 0 <= to_col < TABLEAU_COLUMNS:
        return _rejected(layout, f"Invalid column: {to_col}")

    card = layout.waste[-1]
    if not can_move_tableau_card(card, layout.tableau[to_col]):
        return _rejected(layout, f"{card.key} cannot go on column {to_col}")

    layout = layout.with_tableau_column(to_col, (*layout.tableau[to_col], card))
    layout = layout.with_waste(layout.waste[:-1])

    event = CardMovedEvent(
        card=card,
        source=PileKind.WASTE,
        source_index=0,
        destination=PileKind.TABLEAU,
        destination_index=to_col,
    )
    return MoveResult(layout=layout, moved=True, events=(event,))


def move_waste_to_foundation(layout: SolitaireLayout) -> MoveResult:
    """Move the top waste card to the first foundation that accepts it."""
    if not layout.waste:
        return _rejected(layout, "Waste is empty")

    card = layout.waste[-1]
    foundation_index = _find_foundation(card, layout.foundations)
    if foundation_index is None:
        return _rejected(layout, f"{card.key} cannot go on any foundation")

    layout = layout.with_foundation(foundation_index, (*layout.foundations[foundation_index], card))
    layout = layout.with_waste(layout.waste[:-1])

    event = CardMovedEvent(
        card=card,
        source=PileKind.WASTE,
        source_index=0,
        destination=PileKind.FOUNDATION,
        destination_index=foundation_index,
    )
    return MoveResult(layout=layout, moved=True, events=(event,))


# =============================================================================
# Stock and Waste
# =============================================================================


def draw_from_stock(layout: SolitaireLayout) -> MoveResult:
    """Turn the top stock card face-up onto the waste. Fails on an empty stock."""
    if not layout.stock:
        return _rejected(layout, "Stock is empty")

    card = layout.stock[-1].with_face_up(True)
    layout = replace(layout, stock=layout.stock[:-1], waste=(*layout.waste, card))
    return MoveResult(layout=layout, moved=True, events=(StockDrawnEvent(card=card),))


def reset_stock_from_waste(layout: SolitaireLayout) -> MoveResult:
    """
    Turn the waste back over into an empty stock.

    The waste is reversed and turned face-down, so the next pass draws the
    cards in the same order as the previous one.
    """
    if layout.stock:
        return _rejected(layout, "Stock is not empty")
    if not layout.waste:
        return _rejected(layout, "Waste is empty")

    stock = tuple(card.with_face_up(False) for card in reversed(layout.waste))
    layout = replace(layout, stock=stock, waste=())
    return MoveResult(layout=layout, moved=True, events=(StockRecycledEvent(card_count=len(stock)),))


# =============================================================================
# Win Condition and Auto-Play
# =============================================================================


def check_win(foundations: Sequence[Pile]) -> bool:
    """True iff every foundation holds a full suit."""
    return len(foundations) == FOUNDATION_COUNT and all(len(f) == CARDS_PER_SUIT for f in foundations)


def auto_move_to_foundation(layout: SolitaireLayout) -> MoveResult:
    """
    One left-to-right pass moving eligible cards to the foundations.

    Each tableau column is tried once, then the waste. This is a single
    pass, not a fixpoint: cards exposed by its own moves are not revisited.
    Call it repeatedly until ``moved`` is false for exhaustive auto-play.
    """
    moved = False
    events: list[GameEvent] = []

    for col in range(TABLEAU_COLUMNS):
        column = layout.tableau[col]
        if column and _find_foundation(column[-1], layout.foundations) is not None:
            result = move_tableau_to_foundation(layout, col)
            layout = result.layout
            events.extend(result.events)
            moved = True

    if layout.waste and _find_foundation(layout.waste[-1], layout.foundations) is not None:
        result = move_waste_to_foundation(layout)
        layout = result.layout
        events.extend(result.events)
        moved = True

    return MoveResult(layout=layout, moved=moved, events=tuple(events))


# =============================================================================
# Scoring
# =============================================================================


def get_card_face_value(card: Card) -> int:
    """A=1, 2=2, ..., J=11, Q=12, K=13."""
    return card.rank_index + 1


def update_score_for_play(card: Card, score: ScoreState) -> tuple[ScoreState, list[GameEvent]]:
    """Add the card's face value the first time it is played to the tableau."""
    if card.key in score.played_tableau:
        return score, []

    points = get_card_face_value(card)
    score = replace(
        score,
        score=Score(score.score + points),
        played_tableau=score.played_tableau | {card.key},
    )
    return score, [CardScoredEvent(card=card, points=points, reason="play", total=score.score)]


def update_score_for_foundation(card: Card, score: ScoreState) -> tuple[ScoreState, list[GameEvent]]:
    """Add twice the card's face value the first time it reaches a foundation."""
    if card.key in score.played_foundation:
        return score, []

    points = get_card_face_value(card) * 2
    score = replace(
        score,
        score=Score(score.score + points),
        played_foundation=score.played_foundation | {card.key},
    )
    return score, [CardScoredEvent(card=card, points=points, reason="foundation", total=score.score)]


def update_history(history: GameHistory, won: bool, score: int) -> GameHistory:
    """Tally a finished session; best score only tracks wins."""
    if won:
        return GameHistory(
            wins=history.wins + 1,
            losses=history.losses,
            best_score=Score(max(history.best_score, score)),
        )
    return replace(history, losses=history.losses + 1)
