from __future__ import annotations

from collections.abc import Mapping

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
from .cards import create_deck
from .match import GameConfig, GameState
from .rules import resolve_trick_winner
from .scoring import RoundResult
from .types import SEATS, TEAMS, Bid, Card, Seat, Suit, Trick

SNAPSHOT_VERSION = 1

_CARDS_BY_ID: dict[str, Card] = {c.id: c for c in create_deck()}


class SnapshotError(ValueError):
    pass


def _trick_to_dict(t: Trick) -> dict[str, object]:
    return {
        "cards": {seat: (c.id if c is not None else None) for seat, c in t.cards.items()},
        "lead_suit": t.lead_suit,
        "winner": t.winner,
    }


def _round_to_dict(r: RoundResult | None) -> dict[str, object] | None:
    if r is None:
        return None
    return {
        "bidder": r.bidder,
        "bid": r.bid,
        "tricks": dict(r.tricks),
        "made": r.made,
        "mubri": r.mubri,
        "penalty": r.penalty,
        "salams_awarded": dict(r.salams_awarded),
    }


def _config_to_dict(c: GameConfig) -> dict[str, object]:
    return {
        "min_bid": c.min_bid,
        "max_bid": c.max_bid,
        "salam_threshold": c.salam_threshold,
        "first_dealer": c.first_dealer,
        "salams_to_win": c.salams_to_win,
    }


def snapshot(state: GameState) -> dict[str, object]:
    """JSON-serializable canonical snapshot of the full game state, hidden hands included."""
    return {
        "version": SNAPSHOT_VERSION,
        "seed": state.seed,
        "config": _config_to_dict(state.config),
        "phase": state.phase,
        "deck": [c.id for c in state.deck],
        "hands": {seat: [c.id for c in state.hands[seat]] for seat in SEATS},
        "dealer": state.dealer,
        "current_turn": state.current_turn,
        "trump": state.trump,
        "bidder": state.bidder,
        "current_bid": state.current_bid,
        "bids": [{"seat": b.seat, "value": b.value} for b in state.bids],
        "tricks": [_trick_to_dict(t) for t in state.tricks],
        "current_trick": _trick_to_dict(state.current_trick),
        "qarz": {t: state.qarz[t] for t in TEAMS},
        "salams": {t: state.salams[t] for t in TEAMS},
        "revealed_hand": state.revealed_hand,
        "round_number": state.round_number,
        "shuffle_count": state.shuffle_count,
        "last_round": _round_to_dict(state.last_round),
    }


def visible_view(state: GameState, viewer: Seat) -> dict[str, object]:
    """Snapshot as seen from `viewer`: concealed hands only expose their size."""
    data = snapshot(state)
    shown = {viewer, state.revealed_seat}
    data["hands"] = {
        seat: {
            "visible": seat in shown,
            "count": len(state.hands[seat]),
            "cards": [c.id for c in state.hands[seat]] if seat in shown else [],
        }
        for seat in SEATS
    }
    data["deck"] = len(state.deck)
    data["sealed_count"] = state.sealed_count
    del data["seed"]
    del data["shuffle_count"]
    return data


def _card(card_id: object) -> Card:
    if not isinstance(card_id, str) or card_id not in _CARDS_BY_ID:
        raise SnapshotError(f"Unknown card id: {card_id!r}")
    return _CARDS_BY_ID[card_id]


def _trick_from_dict(d: Mapping[str, object]) -> Trick:
    raw_cards = d["cards"]
    assert isinstance(raw_cards, dict)
    cards: dict[Seat, Card | None] = {}
    for seat in SEATS:
        cid = raw_cards.get(seat)
        cards[seat] = _card(cid) if cid is not None else None
    return Trick(cards=cards, lead_suit=d.get("lead_suit"), winner=d.get("winner"))  # type: ignore[arg-type]


def _round_from_dict(d: Mapping[str, object] | None) -> RoundResult | None:
    if d is None:
        return None
    return RoundResult(
        bidder=d["bidder"],  # type: ignore[arg-type]
        bid=int(d["bid"]),  # type: ignore[arg-type]
        tricks=dict(d["tricks"]),  # type: ignore[arg-type]
        made=bool(d["made"]),
        mubri=bool(d["mubri"]),
        penalty=int(d["penalty"]),  # type: ignore[arg-type]
        salams_awarded=dict(d["salams_awarded"]),  # type: ignore[arg-type]
    )


def _check_trick(t: Trick, trump: Suit | None, *, sealed: bool, where: str) -> None:
    played = t.played()
    if (t.lead_suit is None) != (not played):
        raise SnapshotError(f"{where}: lead suit must be set exactly when a card has been played")
    if t.lead_suit is not None and all(c.suit != t.lead_suit for _, c in played):
        raise SnapshotError(f"{where}: no card follows the lead suit {t.lead_suit}")
    if sealed and not t.is_complete:
        raise SnapshotError(f"{where}: sealed trick is missing cards")
    if t.is_complete != (t.winner is not None):
        raise SnapshotError(f"{where}: winner must be set exactly when all four cards are in")
    if t.winner is not None and t.lead_suit is not None:
        expected = resolve_trick_winner(t.cards, t.lead_suit, trump)
        if t.winner != expected:
            raise SnapshotError(f"{where}: winner is {t.winner}, cards say {expected}")


def restore(data: Mapping[str, object]) -> GameState:
    """Rebuild a GameState from `snapshot` output.

    Expects data of the snapshot's shape; untrusted input goes through
    `ContentService.restore_snapshot`, which checks the JSON schema first.
    Raises SnapshotError when the cards or tricks are inconsistent.
    """
    raw_config = data["config"]
    assert isinstance(raw_config, dict)
    hands_raw = data["hands"]
    assert isinstance(hands_raw, dict)

    state = GameState(
        config=GameConfig(**raw_config),
        seed=int(data["seed"]),  # type: ignore[arg-type]
        phase=data["phase"],  # type: ignore[arg-type]
        deck=tuple(_card(cid) for cid in data["deck"]),  # type: ignore[union-attr]
        hands={seat: tuple(_card(cid) for cid in hands_raw[seat]) for seat in SEATS},
        dealer=data["dealer"],  # type: ignore[arg-type]
        current_turn=data["current_turn"],  # type: ignore[arg-type]
        trump=data["trump"],  # type: ignore[arg-type]
        bidder=data["bidder"],  # type: ignore[arg-type]
        current_bid=data["current_bid"],  # type: ignore[arg-type]
        bids=tuple(Bid(seat=b["seat"], value=b["value"]) for b in data["bids"]),  # type: ignore[index,union-attr]
        tricks=tuple(_trick_from_dict(t) for t in data["tricks"]),  # type: ignore[union-attr]
        current_trick=_trick_from_dict(data["current_trick"]),  # type: ignore[arg-type]
        qarz={t: int(data["qarz"][t]) for t in TEAMS},  # type: ignore[index]
        salams={t: int(data["salams"][t]) for t in TEAMS},  # type: ignore[index]
        revealed_hand=bool(data["revealed_hand"]),
        round_number=int(data["round_number"]),  # type: ignore[arg-type]
        shuffle_count=int(data["shuffle_count"]),  # type: ignore[arg-type]
        last_round=_round_from_dict(data["last_round"]),  # type: ignore[arg-type]
    )

    for i, t in enumerate(state.tricks, start=1):
        _check_trick(t, state.trump, sealed=True, where=f"trick {i}")
    _check_trick(state.current_trick, state.trump, sealed=False, where="current trick")

    if state.phase != "welcome":
        ids = [c.id for c in state.all_cards()]
        if len(ids) != len(_CARDS_BY_ID) or len(set(ids)) != len(ids):
            raise SnapshotError(f"Snapshot holds {len(set(ids))} distinct of {len(ids)} cards, expected 52")
    return state


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, StartGameAction):
        return {"type": "start_game"}
    if isinstance(a, DealAction):
        return {"type": "deal"}
    if isinstance(a, BidAction):
        return {"type": "bid", "seat": a.seat, "value": a.value}
    if isinstance(a, SelectTrumpAction):
        return {"type": "select_trump", "suit": a.suit, "seat": a.seat}
    if isinstance(a, RevealPartnerAction):
        return {"type": "reveal_partner"}
    if isinstance(a, PlayCardAction):
        return {"type": "play", "seat": a.seat, "card_id": a.card_id}
    if isinstance(a, SealTrickAction):
        return {"type": "seal_trick"}
    if isinstance(a, ResetRoundAction):
        return {"type": "reset_round"}
    if isinstance(a, EndGameAction):
        return {"type": "end_game"}
    # should be unreachable
    return {"type": "unknown"}


def action_from_dict(d: Mapping[str, object]) -> Action:
    t = d.get("type")
    if t == "start_game":
        return StartGameAction()
    if t == "deal":
        return DealAction()
    if t == "bid":
        return BidAction(seat=d["seat"], value=d.get("value"))  # type: ignore[arg-type]
    if t == "select_trump":
        return SelectTrumpAction(suit=d["suit"], seat=d.get("seat"))  # type: ignore[arg-type]
    if t == "reveal_partner":
        return RevealPartnerAction()
    if t == "play":
        return PlayCardAction(seat=d["seat"], card_id=str(d["card_id"]))  # type: ignore[arg-type]
    if t == "seal_trick":
        return SealTrickAction()
    if t == "reset_round":
        return ResetRoundAction()
    if t == "end_game":
        return EndGameAction()
    raise SnapshotError(f"Unknown action type: {t!r}")
