from __future__ import annotations

import random
from collections.abc import Iterable, Sequence

from .types import RANKS, SUITS, Card, Suit


def create_deck() -> tuple[Card, ...]:
    """All 52 cards in canonical order (suit-major, rank ascending)."""
    return tuple(Card.of(suit, rank) for suit in SUITS for rank in RANKS)


def shuffle(deck: Sequence[Card], rng: random.Random | None = None) -> tuple[Card, ...]:
    """Fisher-Yates shuffle returning a new tuple.

    Pass a seeded `random.Random` for a reproducible permutation.
    """
    r = rng if rng is not None else random.Random()
    cards = list(deck)
    for i in range(len(cards) - 1, 0, -1):
        j = r.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return tuple(cards)


def _sort_key(card: Card, trump: Suit | None) -> tuple[int, int, int]:
    is_trump = 1 if trump is not None and card.suit == trump else 0
    return (is_trump, SUITS.index(card.suit), -card.rank)


def sort_hand(hand: Iterable[Card], trump: Suit | None) -> tuple[Card, ...]:
    """Group by suit in canonical order with trump last, highest rank first within a suit."""
    return tuple(sorted(hand, key=lambda c: _sort_key(c, trump)))


def count_by_suit(hand: Iterable[Card]) -> dict[Suit, int]:
    counts: dict[Suit, int] = {s: 0 for s in SUITS}
    for c in hand:
        counts[c.suit] += 1
    return counts


def find_card(hand: Iterable[Card], card_id: str) -> Card | None:
    for c in hand:
        if c.id == card_id:
            return c
    return None
