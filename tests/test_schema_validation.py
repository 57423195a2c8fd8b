from __future__ import annotations

import json
from pathlib import Path

import pytest

from chobaz.engine.ai import BotSpec
from chobaz.engine.match import GameConfig
from chobaz.paths import get_paths
from chobaz.services.content import ContentError, ContentService


def _service(data_dir: Path | None = None) -> ContentService:
    paths = get_paths()
    return ContentService(data_dir or paths.data_dir, paths.schema_dir)


def _write_rules(tmp_path: Path, rules: object) -> Path:
    (tmp_path / "rules.json").write_text(json.dumps(rules), encoding="utf-8")
    return tmp_path


def test_shipped_rules_validate() -> None:
    _service().validate_all()


def test_shipped_rules_match_defaults() -> None:
    rules = _service().load_rules()
    assert rules.game == GameConfig()
    assert rules.bot == BotSpec()


def test_thresholds_are_ordered_strongest_first(tmp_path: Path) -> None:
    data_dir = _write_rules(
        tmp_path,
        {
            "game": {"salams_to_win": 3},
            "bot": {
                "bid_thresholds": [{"min_strength": 10, "bid": 8}, {"min_strength": 30, "bid": 11}],
                "void_bonus": True,
            },
        },
    )
    rules = _service(data_dir).load_rules()
    assert rules.game == GameConfig(salams_to_win=3)
    assert rules.bot == BotSpec(bid_thresholds=((30, 11), (10, 8)), void_bonus=True)


@pytest.mark.parametrize(
    "rules",
    [
        {"game": {"min_bid": "eight"}, "bot": {}},
        {"game": {}, "bot": {}, "extra": 1},
        {"game": {"first_dealer": "middle"}, "bot": {}},
        {"game": {}},
        {"game": {"min_bid": 12, "max_bid": 9}, "bot": {}},
        {"game": {"min_bid": 7}, "bot": {}},
        {"game": {"max_bid": 5}, "bot": {}},
    ],
)
def test_bad_rules_raise_content_error(tmp_path: Path, rules: object) -> None:
    with pytest.raises(ContentError):
        _service(_write_rules(tmp_path, rules)).load_rules()


def test_missing_or_broken_file(tmp_path: Path) -> None:
    with pytest.raises(ContentError):
        _service(tmp_path).load_rules()
    (tmp_path / "rules.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ContentError):
        _service(tmp_path).load_rules()
