from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from chobaz.engine.ai import BotSpec
from chobaz.engine.match import GameConfig, GameState
from chobaz.engine.serialize import SnapshotError, restore


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(
    instance: object,
    schema: object,
    *,
    context: str,
    error: type[Exception] = ContentError,
) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise error("\n".join(lines))


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContentError(f"Expected int for {key}")
    return v


def _parse_game(raw: Mapping[str, object]) -> GameConfig:
    defaults = GameConfig()
    cfg = GameConfig(
        min_bid=_require_int(raw, "min_bid") if "min_bid" in raw else defaults.min_bid,
        max_bid=_require_int(raw, "max_bid") if "max_bid" in raw else defaults.max_bid,
        salam_threshold=(
            _require_int(raw, "salam_threshold") if "salam_threshold" in raw else defaults.salam_threshold
        ),
        first_dealer=raw.get("first_dealer", defaults.first_dealer),  # type: ignore[arg-type]
        salams_to_win=raw.get("salams_to_win", defaults.salams_to_win),  # type: ignore[arg-type]
    )
    if cfg.min_bid > cfg.max_bid:
        raise ContentError(f"min_bid {cfg.min_bid} exceeds max_bid {cfg.max_bid}")
    return cfg


def _parse_bot(raw: Mapping[str, object]) -> BotSpec:
    defaults = BotSpec()
    thresholds = defaults.bid_thresholds
    raw_thresholds = raw.get("bid_thresholds")
    if isinstance(raw_thresholds, list):
        pairs = [(_require_int(t, "min_strength"), _require_int(t, "bid")) for t in raw_thresholds if isinstance(t, dict)]
        # strongest first, whatever order the file lists them in
        thresholds = tuple(sorted(pairs, key=lambda p: p[0], reverse=True))
    return BotSpec(
        bid_thresholds=thresholds,
        void_bonus=bool(raw.get("void_bonus", defaults.void_bonus)),
    )


@dataclass(frozen=True)
class Rules:
    game: GameConfig
    bot: BotSpec


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_rules(self, filename: str = "rules.json") -> Rules:
        path = self._data_dir / filename
        raw = _load_json(path)
        schema = _load_json(self._schema_dir / "rules.schema.json")
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError(f"{filename} must be an object")

        raw_game = raw.get("game", {})
        raw_bot = raw.get("bot", {})
        if not isinstance(raw_game, dict) or not isinstance(raw_bot, dict):
            raise ContentError(f"{filename}: game and bot must be objects")
        return Rules(game=_parse_game(raw_game), bot=_parse_bot(raw_bot))

    def restore_snapshot(self, data: Mapping[str, object]) -> GameState:
        """Schema-check a saved snapshot, then rebuild the game from it.

        Raises SnapshotError for anything that is not a consistent game.
        """
        schema = _load_json(self._schema_dir / "game_state.schema.json")
        validate_json(data, schema, context="snapshot", error=SnapshotError)
        return restore(data)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_rules()
        _ = _load_json(self._schema_dir / "game_state.schema.json")
