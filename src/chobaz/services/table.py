"""Session driver: owns the current GameState and decides who acts next.

The engine itself knows nothing about humans. The table applies the seating
policy: the human seat is always human, and while the human is the bidder
they also play their revealed partner's cards. Every other decision point,
plus the purely mechanical ones (dealing, revealing, sealing a finished
trick), is filled in by `advance`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from chobaz.engine.actions import Action, DealAction, RevealPartnerAction, SealTrickAction
from chobaz.engine.ai import BotSpec, choose_action
from chobaz.engine.match import GameState, StepResult, new_game, step
from chobaz.engine.serialize import visible_view
from chobaz.engine.types import InvariantError, Seat, partner_of
from chobaz.paths import get_paths
from chobaz.services.content import ContentService
from chobaz.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)


class Table:
    def __init__(
        self,
        state: GameState | None = None,
        *,
        human_seat: Seat | None = "south",
        bot_spec: BotSpec | None = None,
        telemetry: TelemetryService | None = None,
    ) -> None:
        self.state = state if state is not None else new_game()
        self.human_seat = human_seat
        self.bot_spec = bot_spec or BotSpec()
        self.telemetry = telemetry

    def is_human_controlled(self, seat: Seat) -> bool:
        human = self.human_seat
        if human is None:
            return False
        if seat == human:
            return True
        return self.state.revealed_hand and self.state.bidder == human and seat == partner_of(human)

    def acting_seat(self) -> Seat | None:
        s = self.state
        if s.phase == "trump_selection":
            return s.bidder
        if s.phase == "bidding" or (s.phase == "playing" and not s.current_trick.is_complete):
            return s.current_turn
        return None

    def awaiting_human(self) -> bool:
        seat = self.acting_seat()
        return seat is not None and self.is_human_controlled(seat)

    def dispatch(self, action: Action) -> StepResult:
        res = step(self.state, action)
        if not res.ok:
            logger.debug("Table rejected %s: %s", action, res.error)
            return res
        self.state = res.state
        if self.telemetry is not None:
            self.telemetry.log_events(res.events)
        return res

    def next_automatic_action(self) -> Action | None:
        """Intent the table would submit on its own now, or None if it must wait."""
        s = self.state
        if s.phase == "dealing":
            return DealAction()
        if s.phase == "partner_reveal":
            return RevealPartnerAction()
        if s.phase == "playing" and s.current_trick.is_complete:
            return SealTrickAction()
        seat = self.acting_seat()
        if seat is None or self.is_human_controlled(seat):
            return None
        return choose_action(s, seat, self.bot_spec)

    def advance(self) -> StepResult | None:
        action = self.next_automatic_action()
        if action is None:
            return None
        res = self.dispatch(action)
        if not res.ok:
            raise InvariantError(f"Automatic {type(action).__name__} rejected: {res.error}")
        return res

    def run_until_human(self, max_steps: int = 10_000) -> list[StepResult]:
        """Advance until a human decision or a round/game boundary is reached."""
        results: list[StepResult] = []
        for _ in range(max_steps):
            res = self.advance()
            if res is None:
                return results
            results.append(res)
        raise InvariantError(f"Table did not settle within {max_steps} steps")

    def view(self) -> dict[str, object]:
        viewer = self.human_seat or "south"
        return visible_view(self.state, viewer)


def open_table(
    seed: int | None = None,
    *,
    human_seat: Seat | None = "south",
    telemetry_path: Path | None = None,
) -> Table:
    """Table wired to the shipped rules file and the user's telemetry log."""
    paths = get_paths()
    rules = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir).load_rules()
    telemetry = TelemetryService(telemetry_path or paths.userdata_dir / "telemetry.jsonl")
    return Table(
        new_game(seed=seed, config=rules.game),
        human_seat=human_seat,
        bot_spec=rules.bot,
        telemetry=telemetry,
    )
