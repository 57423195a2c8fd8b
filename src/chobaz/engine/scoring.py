"""Qarz / salam ledger.

Qarz is a debt counter per team. A team whose qarz reaches the salam
threshold has it wiped and the other side earns a salam. Winning all thirteen
tricks (Mubri) wipes both debts and earns the bidder's side a salam outright.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .types import TEAMS, TRICKS_PER_ROUND, InvariantError, Seat, Team, Trick, other_team, team_of

SALAM_THRESHOLD = 52


@dataclass(frozen=True)
class RoundResult:
    bidder: Seat
    bid: int
    tricks: dict[Team, int]
    made: bool
    mubri: bool
    penalty: int
    salams_awarded: dict[Team, int]


def tricks_by_team(tricks: Iterable[Trick]) -> dict[Team, int]:
    counts: dict[Team, int] = {t: 0 for t in TEAMS}
    for trick in tricks:
        if trick.winner is None:
            raise InvariantError("Sealed trick has no winner")
        counts[team_of(trick.winner)] += 1
    return counts


def score_round(
    qarz: Mapping[Team, int],
    salams: Mapping[Team, int],
    bidder: Seat,
    bid: int,
    tricks: Mapping[Team, int],
    *,
    threshold: int = SALAM_THRESHOLD,
) -> tuple[dict[Team, int], dict[Team, int], RoundResult]:
    """Apply one finished round to the ledger.

    Returns new (qarz, salams, result); the inputs are not modified.
    """
    if sum(tricks.values()) != TRICKS_PER_ROUND:
        raise InvariantError(f"Round has {sum(tricks.values())} tricks, expected {TRICKS_PER_ROUND}")

    new_qarz = dict(qarz)
    new_salams = dict(salams)
    bidder_team = team_of(bidder)
    opponents = other_team(bidder_team)
    taken = tricks[bidder_team]
    made = taken >= bid
    mubri = taken == TRICKS_PER_ROUND
    penalty = 0

    if made:
        if new_qarz[bidder_team] > 0:
            new_qarz[bidder_team] = max(0, new_qarz[bidder_team] - taken)
        else:
            new_qarz[opponents] += taken

        if mubri:
            new_qarz = {t: 0 for t in TEAMS}
            new_salams[bidder_team] += 1

        if new_qarz[opponents] >= threshold:
            new_qarz[opponents] = 0
            new_salams[bidder_team] += 1
    else:
        penalty = bid * (bid - taken + 1)
        if new_qarz[opponents] > 0:
            new_qarz[opponents] = max(0, new_qarz[opponents] - penalty)
        else:
            new_qarz[bidder_team] += penalty

        if new_qarz[bidder_team] >= threshold:
            new_qarz[bidder_team] = 0
            new_salams[opponents] += 1

    result = RoundResult(
        bidder=bidder,
        bid=bid,
        tricks=dict(tricks),
        made=made,
        mubri=mubri,
        penalty=penalty,
        salams_awarded={t: new_salams[t] - salams[t] for t in TEAMS},
    )
    return new_qarz, new_salams, result
