"""Bidding protocol helpers.

Bidding always opens at south and moves around the ring. Each seat speaks at
most once; a numeric bid must beat the current one. The auction closes when
all four seats have spoken or three passes are on the table.
"""

from __future__ import annotations

from collections.abc import Sequence

from .types import SEATS, Bid, Seat

BIDDING_OPENER: Seat = "south"


def bid_error(
    value: int | None,
    current_bid: int | None,
    *,
    min_bid: int,
    max_bid: int,
) -> str | None:
    """Reason a bid value is unacceptable, or None when it may be recorded."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        return "Bid must be a whole number."
    if value < min_bid or value > max_bid:
        return f"Bid must be between {min_bid} and {max_bid}."
    if current_bid is not None and value <= current_bid:
        return f"Bid must exceed the current bid of {current_bid}."
    return None


def has_bid(bids: Sequence[Bid], seat: Seat) -> bool:
    return any(b.seat == seat for b in bids)


def pass_count(bids: Sequence[Bid]) -> int:
    return sum(1 for b in bids if b.is_pass)


def bidding_complete(bids: Sequence[Bid]) -> bool:
    return len(bids) >= len(SEATS) or pass_count(bids) >= len(SEATS) - 1


def winning_bid(bids: Sequence[Bid]) -> Bid | None:
    """Highest numeric bid; bids strictly increase so this is also the latest one."""
    best: Bid | None = None
    for b in bids:
        if b.value is None:
            continue
        if best is None or best.value is None or b.value > best.value:
            best = b
    return best
