from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .actions import Action, BidAction, PlayCardAction, SelectTrumpAction
from .cards import count_by_suit
from .match import GameState, StepResult, step
from .rules import current_winner, legal_plays
from .types import ACE, JACK, KING, QUEEN, SUITS, Card, Seat, Suit, partner_of, team_of

HIGH_CARD_POINTS: dict[int, int] = {ACE: 4, KING: 3, QUEEN: 2, JACK: 1}
SINGLETON_BONUS = 2
VOID_BONUS = 3
LONG_SUIT_START = 5


@dataclass(frozen=True)
class BotSpec:
    """Bot tuning parameters.

    bid_thresholds: (minimum hand strength, bid) pairs, strongest first.
    void_bonus: count +3 for every suit missing from the hand. Off by default,
      which reproduces the classic table where voids never scored.
    """

    bid_thresholds: tuple[tuple[int, int], ...] = (
        (75, 13),
        (65, 12),
        (55, 11),
        (45, 10),
        (35, 9),
        (25, 8),
    )
    void_bonus: bool = False


def hand_strength(hand: Sequence[Card], void_bonus: bool = False) -> int:
    counts = count_by_suit(hand)
    strength = 0
    for card in hand:
        strength += HIGH_CARD_POINTS.get(card.rank, 0)
        if counts[card.suit] == 1:
            strength += SINGLETON_BONUS

    for n in counts.values():
        if n >= LONG_SUIT_START:
            strength += n - 3
        elif n == 0 and void_bonus:
            strength += VOID_BONUS
    return strength


def bid_for_strength(strength: int, spec: BotSpec | None = None) -> int | None:
    spec = spec or BotSpec()
    for minimum, bid in spec.bid_thresholds:
        if strength >= minimum:
            return bid
    return None


def choose_bid(state: GameState, seat: Seat, spec: BotSpec | None = None) -> BidAction:
    spec = spec or BotSpec()
    value = bid_for_strength(hand_strength(state.hands[seat], spec.void_bonus), spec)
    if value is not None and state.current_bid is not None and value <= state.current_bid:
        value = None
    if value is not None and not state.config.min_bid <= value <= state.config.max_bid:
        value = None
    return BidAction(seat=seat, value=value)


def choose_trump(hand: Sequence[Card]) -> Suit:
    """Longest suit; ties go to the suit with more court cards, then canonical order."""
    counts = count_by_suit(hand)
    high = {s: 0 for s in SUITS}
    for c in hand:
        if c.rank >= JACK:
            high[c.suit] += 1

    best: Suit = SUITS[0]
    best_count = 0
    best_high = 0
    for suit in SUITS:
        if counts[suit] > best_count or (counts[suit] == best_count and high[suit] > best_high):
            best = suit
            best_count = counts[suit]
            best_high = high[suit]
    return best


def _lowness(card: Card, trump: Suit | None) -> tuple[int, int, int]:
    is_trump = 1 if trump is not None and card.suit == trump else 0
    return (is_trump, card.rank, SUITS.index(card.suit))


def _can_beat(card: Card, best: Card, trump: Suit | None) -> bool:
    if trump is not None and card.suit == trump and best.suit != trump:
        return True
    return card.suit == best.suit and card.rank > best.rank


def _highest_of_longest_suit(hand: Sequence[Card]) -> Card:
    counts: dict[Suit, int] = {}
    for c in hand:
        counts[c.suit] = counts.get(c.suit, 0) + 1
    longest: Suit | None = None
    longest_count = 0
    for suit, n in counts.items():
        if n > longest_count:
            longest = suit
            longest_count = n
    return max((c for c in hand if c.suit == longest), key=lambda c: c.rank)


def choose_card(state: GameState, seat: Seat) -> Card | None:
    """Pick a card using only `seat`'s own hand and the table."""
    hand = state.hands[seat]
    trick = state.current_trick
    trump = state.trump
    playable = legal_plays(hand, trick.lead_suit, trump)
    if not playable:
        return None
    if len(playable) == 1:
        return playable[0]

    ordered = sorted(playable, key=lambda c: _lowness(c, trump))
    lowest = ordered[0]
    played = trick.played()

    if not played:
        if state.bidder is not None and team_of(state.bidder) == team_of(seat):
            return _highest_of_longest_suit(hand)
        return lowest

    winning = current_winner(trick, trump)
    assert winning is not None
    best_seat, best_card = winning
    partner_winning = best_seat == partner_of(seat)

    if len(played) == 3:
        if partner_winning:
            return lowest
        for c in ordered:
            if trump is not None and c.suit == trump and best_card.suit != trump:
                return c
        for c in ordered:
            if c.suit == best_card.suit and c.rank > best_card.rank:
                return c
        return lowest

    if partner_winning:
        return lowest

    lead = trick.lead_suit
    if all(c.suit == lead for c in playable) and best_card.suit == lead:
        if all(c.rank < best_card.rank for c in playable):
            return lowest

    for c in ordered:
        if _can_beat(c, best_card, trump):
            return c
    return lowest


def choose_action(state: GameState, seat: Seat, spec: BotSpec | None = None) -> Action | None:
    """The intent a bot at `seat` would submit now, or None if it has no decision to make."""
    if state.phase == "bidding" and state.current_turn == seat:
        return choose_bid(state, seat, spec)
    if state.phase == "trump_selection" and state.bidder == seat:
        return SelectTrumpAction(suit=choose_trump(state.hands[seat]), seat=seat)
    if state.phase == "playing" and state.current_turn == seat and not state.current_trick.is_complete:
        card = choose_card(state, seat)
        if card is not None:
            return PlayCardAction(seat=seat, card_id=card.id)
    return None


def ai_take_turn(state: GameState, seat: Seat, spec: BotSpec | None = None) -> StepResult:
    """Advance the game by one bot decision for `seat`."""
    action = choose_action(state, seat, spec)
    if action is None:
        return StepResult(ok=False, state=state, events=[], error="No decision for this seat.")
    return step(state, action)
