from __future__ import annotations

from chobaz.engine.actions import (
    BidAction,
    DealAction,
    RevealPartnerAction,
    SelectTrumpAction,
    StartGameAction,
)
from chobaz.engine.bidding import bidding_complete, pass_count, winning_bid
from chobaz.engine.cards import sort_hand
from chobaz.engine.match import GameState, new_game, step
from chobaz.engine.types import SEATS, Bid


def _dealt(seed: int = 1) -> GameState:
    state = step(new_game(seed=seed), StartGameAction()).state
    return step(state, DealAction()).state


def _bids(state: GameState, *bids: tuple[str, int | None]) -> GameState:
    for seat, value in bids:
        res = step(state, BidAction(seat=seat, value=value))  # type: ignore[arg-type]
        assert res.ok, res.error
        state = res.state
    return state


def test_start_game_shuffles_and_waits_to_deal() -> None:
    state = new_game(seed=5)
    assert state.phase == "welcome"
    started = step(state, StartGameAction()).state
    assert started.phase == "dealing"
    assert len(started.deck) == 52
    assert started.dealer == "west"
    assert started.qarz == {"north-south": 0, "east-west": 0}


def test_deal_gives_thirteen_unique_cards_each() -> None:
    started = step(new_game(seed=3), StartGameAction()).state
    state = step(started, DealAction()).state
    assert state.phase == "bidding"
    assert state.current_turn == "south"
    assert state.deck == ()
    for seat in SEATS:
        assert len(state.hands[seat]) == 13
        assert sort_hand(state.hands[seat], None) == state.hands[seat]
    ids = [c.id for c in state.all_cards()]
    assert len(ids) == 52 and len(set(ids)) == 52
    # dealing starts left of the dealer (west deals, north receives first)
    assert started.deck[0] in state.hands["north"]
    assert started.deck[3] in state.hands["west"]


def test_same_seed_deals_same_hands() -> None:
    assert _dealt(11).hands == _dealt(11).hands
    assert _dealt(11).hands != _dealt(12).hands


def test_bidding_sequence_picks_highest_bidder() -> None:
    state = _bids(_dealt(), ("south", 9), ("west", None), ("north", 10), ("east", None))
    assert state.bidder == "north"
    assert state.current_bid == 10
    assert state.phase == "trump_selection"
    assert state.current_turn == "north"
    assert [b.value for b in state.bids] == [9, None, 10, None]


def test_three_passes_redeal_with_dealer_rotated() -> None:
    before = _dealt()
    state = _bids(before, ("south", None), ("west", None), ("north", None))
    assert state.phase == "dealing"
    assert state.dealer == "north"
    assert state.bids == ()
    assert state.bidder is None
    assert len(state.deck) == 52
    assert all(len(h) == 0 for h in state.hands.values())
    assert state.qarz == before.qarz
    assert state.salams == before.salams

    # the fourth pass never lands
    res = step(state, BidAction(seat="east", value=None))
    assert not res.ok
    assert res.state is state

    redealt = step(state, DealAction()).state
    assert redealt.hands != before.hands


def test_bidding_closes_after_three_passes_with_a_bid_on_table() -> None:
    state = _bids(_dealt(), ("south", 8), ("west", None), ("north", None), ("east", None))
    assert state.phase == "trump_selection"
    assert state.bidder == "south"


def test_bidding_closes_after_all_four_speak() -> None:
    state = _bids(_dealt(), ("south", 8), ("west", 9), ("north", 11), ("east", 12))
    assert state.phase == "trump_selection"
    assert state.bidder == "east"
    assert state.current_bid == 12


def test_invalid_bids_are_no_ops() -> None:
    state = _dealt()
    for action in (
        BidAction(seat="west", value=None),  # out of turn
        BidAction(seat="south", value=7),
        BidAction(seat="south", value=14),
    ):
        res = step(state, action)
        assert not res.ok
        assert res.error
        assert res.state is state

    state = _bids(state, ("south", 10))
    for value in (9, 10):
        res = step(state, BidAction(seat="west", value=value))
        assert not res.ok
        assert res.state is state


def test_trump_selection_only_from_bidder() -> None:
    state = _bids(_dealt(), ("south", 9), ("west", None), ("north", 10), ("east", None))
    res = step(state, SelectTrumpAction(suit="hearts", seat="east"))
    assert not res.ok and res.state is state

    res = step(state, SelectTrumpAction(suit="hearts"))
    assert res.ok
    chosen = res.state
    assert chosen.trump == "hearts"
    assert chosen.phase == "partner_reveal"
    for seat in SEATS:
        assert chosen.hands[seat] == sort_hand(state.hands[seat], "hearts")

    # trump is set once per round
    again = step(chosen, SelectTrumpAction(suit="spades", seat="north"))
    assert not again.ok


def test_partner_reveal_hands_first_lead_to_south() -> None:
    state = _bids(_dealt(), ("south", None), ("west", 9), ("north", None), ("east", None))
    assert step(state, RevealPartnerAction()).ok is False
    state = step(state, SelectTrumpAction(suit="clubs", seat="west")).state
    res = step(state, RevealPartnerAction())
    assert res.ok
    playing = res.state
    assert playing.phase == "playing"
    assert playing.revealed_hand
    assert playing.revealed_seat == "east"
    assert playing.current_turn == "south"
    assert res.events == [{"type": "PARTNER_REVEALED", "seat": "east"}]


def test_bid_history_helpers() -> None:
    state = _bids(_dealt(), ("south", 8), ("west", None), ("north", 10))
    assert pass_count(state.bids) == 1
    assert winning_bid(state.bids) == Bid(seat="north", value=10)
    assert not bidding_complete(state.bids)
    assert winning_bid(()) is None

    res = step(state, BidAction.pass_("east"))
    assert res.ok
    assert res.events[-1] == {"type": "BIDDING_ENDED", "bidder": "north", "bid": 10}
