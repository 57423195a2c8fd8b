from __future__ import annotations

from dataclasses import dataclass

from .types import Seat, Suit


@dataclass(frozen=True)
class StartGameAction:
    pass


@dataclass(frozen=True)
class DealAction:
    pass


@dataclass(frozen=True)
class BidAction:
    seat: Seat
    value: int | None  # None passes

    @staticmethod
    def pass_(seat: Seat) -> "BidAction":
        return BidAction(seat=seat, value=None)


@dataclass(frozen=True)
class SelectTrumpAction:
    suit: Suit
    seat: Seat | None = None  # when given, must be the bidder-of-record


@dataclass(frozen=True)
class RevealPartnerAction:
    pass


@dataclass(frozen=True)
class PlayCardAction:
    seat: Seat
    card_id: str


@dataclass(frozen=True)
class SealTrickAction:
    pass


@dataclass(frozen=True)
class ResetRoundAction:
    pass


@dataclass(frozen=True)
class EndGameAction:
    pass


Action = (
    StartGameAction
    | DealAction
    | BidAction
    | SelectTrumpAction
    | RevealPartnerAction
    | PlayCardAction
    | SealTrickAction
    | ResetRoundAction
    | EndGameAction
)
