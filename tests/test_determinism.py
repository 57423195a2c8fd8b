from __future__ import annotations

import json
from dataclasses import replace
from typing import Any

import pytest

from chobaz.engine.actions import Action, StartGameAction
from chobaz.engine.ai import BotSpec
from chobaz.engine.match import GameState, new_game, replay, step
from chobaz.engine.serialize import (
    SnapshotError,
    action_from_dict,
    action_to_dict,
    restore,
    snapshot,
    visible_view,
)
from chobaz.paths import get_paths
from chobaz.services.content import ContentService
from chobaz.services.table import Table

# Generous bidders so a round is never thrown in.
EAGER = BotSpec(bid_thresholds=((18, 10), (12, 9), (0, 8)))


def _content() -> ContentService:
    paths = get_paths()
    return ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)


def _saved(state: GameState) -> dict[str, Any]:
    return json.loads(json.dumps(snapshot(state)))


def _autoplay(seed: int) -> tuple[list[Action], list[GameState]]:
    table = Table(new_game(seed=seed), human_seat=None, bot_spec=EAGER)
    actions: list[Action] = [StartGameAction()]
    table.dispatch(actions[0])
    states = [table.state]
    while True:
        action = table.next_automatic_action()
        if action is None:
            break
        assert table.dispatch(action).ok
        actions.append(action)
        states.append(table.state)
    return actions, states


def test_replay_reproduces_a_full_round() -> None:
    actions, states = _autoplay(21)
    final = states[-1]
    assert final.phase == "round_end"
    assert replay(21, actions) == final
    assert _autoplay(21)[1][-1] == final


def test_different_seeds_play_differently() -> None:
    assert _autoplay(1)[1][1].hands != _autoplay(2)[1][1].hands


def test_snapshot_round_trips_through_json() -> None:
    content = _content()
    actions, states = _autoplay(8)
    for state in states:
        again = content.restore_snapshot(_saved(state))
        assert again == state
        assert restore(_saved(state)) == state
        for seat in ("north", "east", "south", "west"):
            assert again.legal_cards(seat) == state.legal_cards(seat)

    # a restored game continues exactly like the live one
    middle = len(states) // 2
    resumed = content.restore_snapshot(_saved(states[middle]))
    for action in actions[middle + 1 :]:
        resumed = step(resumed, action).state
    assert resumed == states[-1]


def test_actions_round_trip_through_dicts() -> None:
    actions, _ = _autoplay(5)
    decoded = [action_from_dict(json.loads(json.dumps(action_to_dict(a)))) for a in actions]
    assert decoded == actions
    with pytest.raises(SnapshotError):
        action_from_dict({"type": "shuffle_harder"})


def test_restore_rejects_bad_snapshots() -> None:
    content = _content()
    _, states = _autoplay(3)
    dealt = next(s for s in states if s.phase == "bidding")

    data = _saved(dealt)
    data["phase"] = "nap"
    with pytest.raises(SnapshotError):
        content.restore_snapshot(data)

    data = _saved(dealt)
    data["config"]["min_bid"] = 5
    with pytest.raises(SnapshotError):
        content.restore_snapshot(data)

    short = replace(dealt, hands={**dealt.hands, "west": dealt.hands["west"][1:]})
    with pytest.raises(SnapshotError):
        restore(snapshot(short))

    doubled = replace(dealt, hands={**dealt.hands, "west": (dealt.hands["north"][0], *dealt.hands["west"][1:])})
    with pytest.raises(SnapshotError):
        restore(snapshot(doubled))


def test_restore_rejects_inconsistent_tricks() -> None:
    _, states = _autoplay(8)
    ready = next(s for s in states if s.current_trick.is_complete)
    partial = next(
        s for s in states if s.phase == "playing" and not s.current_trick.is_empty and not s.current_trick.is_complete
    )
    later = next(s for s in states if s.sealed_count >= 2 and s.phase == "playing")

    data = _saved(ready)
    data["current_trick"]["winner"] = None
    with pytest.raises(SnapshotError):
        restore(data)

    data = _saved(ready)
    winner = data["current_trick"]["winner"]
    data["current_trick"]["winner"] = next(s for s in ("north", "east", "south", "west") if s != winner)
    with pytest.raises(SnapshotError):
        restore(data)

    data = _saved(partial)
    data["current_trick"]["winner"] = "north"
    with pytest.raises(SnapshotError):
        restore(data)

    data = _saved(partial)
    data["current_trick"]["lead_suit"] = None
    with pytest.raises(SnapshotError):
        restore(data)

    data = _saved(later)
    data["tricks"][1]["winner"] = None
    with pytest.raises(SnapshotError):
        _content().restore_snapshot(data)


def test_visible_view_hides_concealed_hands() -> None:
    _, states = _autoplay(13)
    bidding = next(s for s in states if s.phase == "bidding")
    view = visible_view(bidding, "south")
    hands = view["hands"]
    assert isinstance(hands, dict)
    assert hands["south"]["visible"] and len(hands["south"]["cards"]) == 13
    for seat in ("north", "east", "west"):
        assert hands[seat] == {"visible": False, "count": 13, "cards": []}
    assert "seed" not in view
    assert view["deck"] == 0

    playing = next(s for s in states if s.phase == "playing")
    shown = playing.revealed_seat
    assert shown is not None
    hands = visible_view(playing, "south")["hands"]
    assert isinstance(hands, dict)
    assert hands[shown]["visible"]
    assert hands[shown]["cards"] == [c.id for c in playing.hands[shown]]
    hidden = [s for s in ("north", "east", "west") if s != shown]
    assert all(not hands[s]["visible"] for s in hidden)
