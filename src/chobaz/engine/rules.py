"""Follow-suit legality and trick resolution."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .types import SEATS, Card, InvariantError, Seat, Suit, Trick


def legal_plays(hand: Sequence[Card], lead_suit: Suit | None, trump: Suit | None) -> list[Card]:
    """Cards from `hand` that may be played right now, in hand order.

    - No lead suit yet: anything.
    - Holding the lead suit: must follow.
    - Void in the lead suit but holding trump: must trump.
    - Otherwise: free discard.
    """
    if lead_suit is None:
        return list(hand)

    follow = [c for c in hand if c.suit == lead_suit]
    if follow:
        return follow

    if trump is not None:
        trumps = [c for c in hand if c.suit == trump]
        if trumps:
            return trumps

    return list(hand)


def beats(card: Card, best: Card, lead_suit: Suit | None, trump: Suit | None) -> bool:
    """True if `card` takes the trick away from the current `best`."""
    if trump is not None:
        if card.suit == trump and best.suit != trump:
            return True
        if best.suit == trump and card.suit != trump:
            return False
    if card.suit == best.suit:
        return card.rank > best.rank
    if card.suit == lead_suit:
        return best.suit != trump
    return False


def _fold_best(
    cards: Mapping[Seat, Card | None], lead_suit: Suit | None, trump: Suit | None
) -> tuple[Seat, Card] | None:
    best: tuple[Seat, Card] | None = None
    for seat in SEATS:
        card = cards.get(seat)
        if card is None:
            continue
        if best is None or beats(card, best[1], lead_suit, trump):
            best = (seat, card)
    return best


def resolve_trick_winner(
    cards: Mapping[Seat, Card | None], lead_suit: Suit, trump: Suit | None
) -> Seat:
    """Winner of a complete trick. Raises InvariantError if any slot is empty."""
    if any(cards.get(seat) is None for seat in SEATS):
        raise InvariantError("Cannot resolve a trick with fewer than four cards")
    best = _fold_best(cards, lead_suit, trump)
    assert best is not None
    return best[0]


def current_winner(trick: Trick, trump: Suit | None) -> tuple[Seat, Card] | None:
    """Seat and card currently holding a (possibly partial) trick."""
    return _fold_best(trick.cards, trick.lead_suit, trump)
