from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Iterable

from .actions import (
    Action,
    BidAction,
    DealAction,
    EndGameAction,
    PlayCardAction,
    ResetRoundAction,
    RevealPartnerAction,
    SealTrickAction,
    SelectTrumpAction,
    StartGameAction,
)
from .bidding import BIDDING_OPENER, bid_error, bidding_complete, has_bid, winning_bid
from .cards import create_deck, find_card, shuffle, sort_hand
from .rules import legal_plays, resolve_trick_winner
from .scoring import SALAM_THRESHOLD, RoundResult, score_round, tricks_by_team
from .types import (
    SEATS,
    SUITS,
    TEAMS,
    TRICKS_PER_ROUND,
    Bid,
    Card,
    InvariantError,
    Phase,
    Seat,
    Suit,
    Team,
    Trick,
    next_seat,
    partner_of,
    team_of,
)

logger = logging.getLogger(__name__)

Event = dict[str, object]

# South leads the first trick of every round, whoever won the auction.
FIRST_LEADER: Seat = "south"


@dataclass(frozen=True)
class GameConfig:
    min_bid: int = 8
    max_bid: int = 13
    salam_threshold: int = SALAM_THRESHOLD
    first_dealer: Seat = "west"
    salams_to_win: int | None = None  # None plays an open-ended session


def _empty_hands() -> dict[Seat, tuple[Card, ...]]:
    return {seat: () for seat in SEATS}


def _zero_scores() -> dict[Team, int]:
    return {t: 0 for t in TEAMS}


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of a game. Only `step` produces new ones."""

    config: GameConfig
    seed: int
    phase: Phase = "welcome"
    deck: tuple[Card, ...] = ()
    hands: dict[Seat, tuple[Card, ...]] = field(default_factory=_empty_hands)
    dealer: Seat = "west"
    current_turn: Seat = BIDDING_OPENER
    trump: Suit | None = None
    bidder: Seat | None = None
    current_bid: int | None = None
    bids: tuple[Bid, ...] = ()
    tricks: tuple[Trick, ...] = ()
    current_trick: Trick = field(default_factory=Trick.empty)
    qarz: dict[Team, int] = field(default_factory=_zero_scores)
    salams: dict[Team, int] = field(default_factory=_zero_scores)
    revealed_hand: bool = False
    round_number: int = 0
    shuffle_count: int = 0
    last_round: RoundResult | None = None

    @property
    def revealed_seat(self) -> Seat | None:
        """Seat whose hand is face up, if any."""
        if not self.revealed_hand or self.bidder is None:
            return None
        return partner_of(self.bidder)

    @property
    def sealed_count(self) -> int:
        return len(self.tricks)

    def tricks_won(self) -> dict[Team, int]:
        return tricks_by_team(self.tricks)

    def legal_cards(self, seat: Seat) -> list[Card]:
        """Cards `seat` could play now; empty when it is not that seat's move."""
        if self.phase != "playing" or self.current_turn != seat or self.current_trick.is_complete:
            return []
        return legal_plays(self.hands[seat], self.current_trick.lead_suit, self.trump)

    def all_cards(self) -> list[Card]:
        cards = list(self.deck)
        for seat in SEATS:
            cards.extend(self.hands[seat])
        for t in (*self.tricks, self.current_trick):
            cards.extend(c for _, c in t.played())
        return cards


@dataclass
class StepResult:
    ok: bool
    state: GameState
    events: list[Event]
    error: str | None = None


def _reject(state: GameState, action: Action, msg: str) -> StepResult:
    logger.debug("Rejected %s in phase %s: %s", type(action).__name__, state.phase, msg)
    return StepResult(ok=False, state=state, events=[], error=msg)


def _shuffled_deck(seed: int, shuffle_count: int) -> tuple[Card, ...]:
    rng = random.Random(f"{seed}:{shuffle_count}")
    return shuffle(create_deck(), rng)


def _next_round(state: GameState) -> GameState:
    """Fresh round with the dealer rotated; qarz and salams carry over."""
    count = state.shuffle_count + 1
    return replace(
        state,
        phase="dealing",
        deck=_shuffled_deck(state.seed, count),
        hands=_empty_hands(),
        dealer=next_seat(state.dealer),
        current_turn=BIDDING_OPENER,
        trump=None,
        bidder=None,
        current_bid=None,
        bids=(),
        tricks=(),
        current_trick=Trick.empty(),
        revealed_hand=False,
        round_number=state.round_number + 1,
        shuffle_count=count,
    )


def _start_game(state: GameState, action: StartGameAction) -> StepResult:
    if state.phase not in ("welcome", "game_end"):
        return _reject(state, action, "Game already in progress.")
    count = state.shuffle_count + 1
    new_state = replace(
        new_game(seed=state.seed, config=state.config),
        phase="dealing",
        deck=_shuffled_deck(state.seed, count),
        round_number=1,
        shuffle_count=count,
    )
    return StepResult(ok=True, state=new_state, events=[{"type": "GAME_STARTED", "dealer": new_state.dealer}])


def _deal(state: GameState, action: DealAction) -> StepResult:
    if state.phase != "dealing":
        return _reject(state, action, "Not time to deal.")
    if len(state.deck) != len(SEATS) * TRICKS_PER_ROUND:
        raise InvariantError(f"Dealing from a {len(state.deck)}-card deck")

    dealt: dict[Seat, list[Card]] = {seat: [] for seat in SEATS}
    seat = state.dealer
    for card in state.deck:
        seat = next_seat(seat)
        dealt[seat].append(card)

    new_state = replace(
        state,
        phase="bidding",
        deck=(),
        hands={s: sort_hand(cards, None) for s, cards in dealt.items()},
        current_turn=BIDDING_OPENER,
    )
    return StepResult(
        ok=True,
        state=new_state,
        events=[{"type": "CARDS_DEALT", "dealer": state.dealer, "round": state.round_number}],
    )


def _place_bid(state: GameState, action: BidAction) -> StepResult:
    if state.phase != "bidding":
        return _reject(state, action, "Not in bidding.")
    if action.seat != state.current_turn:
        return _reject(state, action, "Not your turn.")
    if has_bid(state.bids, action.seat):
        return _reject(state, action, "Already bid this round.")
    err = bid_error(
        action.value,
        state.current_bid,
        min_bid=state.config.min_bid,
        max_bid=state.config.max_bid,
    )
    if err is not None:
        return _reject(state, action, err)

    bids = (*state.bids, Bid(seat=action.seat, value=action.value))
    best = winning_bid(bids)
    bidder = best.seat if best is not None else None
    current_bid = best.value if best is not None else None

    events: list[Event] = [{"type": "BID_PLACED", "seat": action.seat, "value": action.value}]
    new_state = replace(
        state,
        bids=bids,
        current_bid=current_bid,
        bidder=bidder,
        current_turn=next_seat(action.seat),
    )

    if not bidding_complete(bids):
        return StepResult(ok=True, state=new_state, events=events)

    if bidder is None or current_bid is None:
        redealt = _next_round(new_state)
        logger.info("All seats passed in round %d; redealing", state.round_number)
        events.append({"type": "ROUND_REDEALT", "dealer": redealt.dealer})
        return StepResult(ok=True, state=redealt, events=events)

    events.append({"type": "BIDDING_ENDED", "bidder": bidder, "bid": current_bid})
    return StepResult(
        ok=True,
        state=replace(new_state, phase="trump_selection", current_turn=bidder),
        events=events,
    )


def _select_trump(state: GameState, action: SelectTrumpAction) -> StepResult:
    if state.phase != "trump_selection" or state.bidder is None:
        return _reject(state, action, "Not in trump selection.")
    if action.seat is not None and action.seat != state.bidder:
        return _reject(state, action, "Only the bidder chooses trump.")
    if state.current_turn != state.bidder:
        return _reject(state, action, "Not the bidder's turn.")
    if action.suit not in SUITS:
        return _reject(state, action, f"Unknown suit: {action.suit}")

    new_state = replace(
        state,
        trump=action.suit,
        phase="partner_reveal",
        hands={seat: sort_hand(hand, action.suit) for seat, hand in state.hands.items()},
    )
    return StepResult(
        ok=True,
        state=new_state,
        events=[{"type": "TRUMP_SELECTED", "seat": state.bidder, "suit": action.suit}],
    )


def _reveal_partner(state: GameState, action: RevealPartnerAction) -> StepResult:
    if state.phase != "partner_reveal" or state.bidder is None:
        return _reject(state, action, "Nothing to reveal.")
    new_state = replace(state, revealed_hand=True, phase="playing", current_turn=FIRST_LEADER)
    return StepResult(
        ok=True,
        state=new_state,
        events=[{"type": "PARTNER_REVEALED", "seat": partner_of(state.bidder)}],
    )


def _play_card(state: GameState, action: PlayCardAction) -> StepResult:
    if state.phase != "playing":
        return _reject(state, action, "Not in play.")
    if action.seat != state.current_turn:
        return _reject(state, action, "Not your turn.")
    trick = state.current_trick
    if trick.is_complete:
        return _reject(state, action, "Trick is waiting to be sealed.")
    hand = state.hands[action.seat]
    card = find_card(hand, action.card_id)
    if card is None:
        return _reject(state, action, "Card not in hand.")
    if card not in legal_plays(hand, trick.lead_suit, state.trump):
        return _reject(state, action, "Must follow suit or trump.")

    cards = dict(trick.cards)
    cards[action.seat] = card
    lead_suit = trick.lead_suit if trick.lead_suit is not None else card.suit
    hands = dict(state.hands)
    hands[action.seat] = tuple(c for c in hand if c.id != card.id)

    events: list[Event] = [{"type": "CARD_PLAYED", "seat": action.seat, "card_id": card.id}]
    if all(c is not None for c in cards.values()):
        winner = resolve_trick_winner(cards, lead_suit, state.trump)
        new_trick = Trick(cards=cards, lead_suit=lead_suit, winner=winner)
        next_turn = winner
        events.append({"type": "TRICK_WON", "seat": winner, "trick": len(state.tricks) + 1})
    else:
        new_trick = Trick(cards=cards, lead_suit=lead_suit)
        next_turn = next_seat(action.seat)

    new_state = replace(state, hands=hands, current_trick=new_trick, current_turn=next_turn)
    return StepResult(ok=True, state=new_state, events=events)


def _seal_trick(state: GameState, action: SealTrickAction) -> StepResult:
    if state.phase != "playing" or not state.current_trick.is_complete:
        return _reject(state, action, "No finished trick to seal.")
    if len(state.tricks) >= TRICKS_PER_ROUND:
        raise InvariantError("Sealing more than thirteen tricks")

    tricks = (*state.tricks, state.current_trick)
    if len(tricks) < TRICKS_PER_ROUND:
        new_state = replace(state, tricks=tricks, current_trick=Trick.empty())
        return StepResult(
            ok=True,
            state=new_state,
            events=[{"type": "TRICK_SEALED", "count": len(tricks)}],
        )

    if state.bidder is None or state.current_bid is None:
        raise InvariantError("Round finished without a bidder")
    qarz, salams, result = score_round(
        state.qarz,
        state.salams,
        state.bidder,
        state.current_bid,
        tricks_by_team(tricks),
        threshold=state.config.salam_threshold,
    )
    logger.info(
        "Round %d: %s bid %d, took %d (%s); qarz=%s salams=%s",
        state.round_number,
        result.bidder,
        result.bid,
        result.tricks[team_of(result.bidder)],
        "made" if result.made else "failed",
        qarz,
        salams,
    )

    target = state.config.salams_to_win
    game_over = target is not None and any(salams[t] >= target for t in TEAMS)
    new_state = replace(
        state,
        tricks=tricks,
        current_trick=Trick.empty(),
        qarz=qarz,
        salams=salams,
        last_round=result,
        phase="game_end" if game_over else "round_end",
    )
    events: list[Event] = [
        {"type": "TRICK_SEALED", "count": len(tricks)},
        {
            "type": "ROUND_SCORED",
            "bidder": result.bidder,
            "bid": result.bid,
            "tricks": dict(result.tricks),
            "made": result.made,
            "mubri": result.mubri,
            "qarz": dict(qarz),
            "salams": dict(salams),
        },
    ]
    if game_over:
        events.append({"type": "GAME_ENDED", "salams": dict(salams)})
    return StepResult(ok=True, state=new_state, events=events)


def _reset_round(state: GameState, action: ResetRoundAction) -> StepResult:
    if state.phase != "round_end":
        return _reject(state, action, "Round is not over.")
    new_state = _next_round(state)
    return StepResult(ok=True, state=new_state, events=[{"type": "ROUND_RESET", "dealer": new_state.dealer}])


def _end_game(state: GameState, action: EndGameAction) -> StepResult:
    if state.phase != "round_end":
        return _reject(state, action, "Game can only end between rounds.")
    new_state = replace(state, phase="game_end")
    return StepResult(ok=True, state=new_state, events=[{"type": "GAME_ENDED", "salams": dict(state.salams)}])


def step(state: GameState, action: Action) -> StepResult:
    """Apply a single intent.

    Never mutates `state`. A rejected intent returns the very same state
    object with ok=False.
    """
    if isinstance(action, StartGameAction):
        return _start_game(state, action)
    if isinstance(action, DealAction):
        return _deal(state, action)
    if isinstance(action, BidAction):
        return _place_bid(state, action)
    if isinstance(action, SelectTrumpAction):
        return _select_trump(state, action)
    if isinstance(action, RevealPartnerAction):
        return _reveal_partner(state, action)
    if isinstance(action, PlayCardAction):
        return _play_card(state, action)
    if isinstance(action, SealTrickAction):
        return _seal_trick(state, action)
    if isinstance(action, ResetRoundAction):
        return _reset_round(state, action)
    if isinstance(action, EndGameAction):
        return _end_game(state, action)
    return StepResult(ok=False, state=state, events=[], error="Unknown action.")


def new_game(seed: int | None = None, config: GameConfig | None = None) -> GameState:
    """A game sitting at the welcome screen; send StartGameAction to shuffle."""
    cfg = config or GameConfig()
    if seed is None:
        seed = random.randrange(2**32)
    return GameState(config=cfg, seed=seed, dealer=cfg.first_dealer)


def replay(seed: int, actions: Iterable[Action], config: GameConfig | None = None) -> GameState:
    state = new_game(seed=seed, config=config)
    for a in actions:
        state = step(state, a).state
    return state
