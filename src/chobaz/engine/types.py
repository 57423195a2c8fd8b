from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Suit = Literal["spades", "hearts", "diamonds", "clubs"]
Seat = Literal["north", "east", "south", "west"]
Team = Literal["north-south", "east-west"]
Phase = Literal[
    "welcome",
    "dealing",
    "bidding",
    "trump_selection",
    "partner_reveal",
    "playing",
    "round_end",
    "game_end",
]

# Canonical suit order, also used to group non-trump suits when sorting a hand.
SUITS: tuple[Suit, ...] = ("spades", "hearts", "diamonds", "clubs")
# Ring order of play.
SEATS: tuple[Seat, ...] = ("north", "east", "south", "west")
TEAMS: tuple[Team, ...] = ("north-south", "east-west")

RANKS: tuple[int, ...] = tuple(range(2, 15))
JACK = 11
QUEEN = 12
KING = 13
ACE = 14

RANK_SYMBOLS: dict[int, str] = {ACE: "A", KING: "K", QUEEN: "Q", JACK: "J"}
SUIT_SYMBOLS: dict[Suit, str] = {"spades": "♠", "hearts": "♥", "diamonds": "♦", "clubs": "♣"}

TRICKS_PER_ROUND = 13


class InvariantError(AssertionError):
    """Raised when the engine reaches a state a correct orchestrator never produces."""


def next_seat(seat: Seat) -> Seat:
    return SEATS[(SEATS.index(seat) + 1) % len(SEATS)]


def partner_of(seat: Seat) -> Seat:
    return SEATS[(SEATS.index(seat) + 2) % len(SEATS)]


def team_of(seat: Seat) -> Team:
    return "north-south" if seat in ("north", "south") else "east-west"


def other_team(team: Team) -> Team:
    return "east-west" if team == "north-south" else "north-south"


@dataclass(frozen=True)
class Card:
    suit: Suit
    rank: int
    id: str

    @staticmethod
    def of(suit: Suit, rank: int) -> "Card":
        return Card(suit=suit, rank=rank, id=f"{suit}-{rank}")

    def __str__(self) -> str:
        return f"{RANK_SYMBOLS.get(self.rank, str(self.rank))}{SUIT_SYMBOLS[self.suit]}"


@dataclass(frozen=True)
class Bid:
    seat: Seat
    value: int | None  # None is a pass

    @property
    def is_pass(self) -> bool:
        return self.value is None


@dataclass(frozen=True)
class Trick:
    """One trick in progress or sealed.

    `cards` always holds all four seats; an empty slot is None.
    """

    cards: dict[Seat, Card | None]
    lead_suit: Suit | None = None
    winner: Seat | None = None

    @staticmethod
    def empty() -> "Trick":
        return Trick(cards={seat: None for seat in SEATS})

    def played(self) -> list[tuple[Seat, Card]]:
        out: list[tuple[Seat, Card]] = []
        for seat in SEATS:
            c = self.cards[seat]
            if c is not None:
                out.append((seat, c))
        return out

    @property
    def is_empty(self) -> bool:
        return all(c is None for c in self.cards.values())

    @property
    def is_complete(self) -> bool:
        return all(c is not None for c in self.cards.values())
