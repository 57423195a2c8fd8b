from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping


@dataclass
class TelemetryService:
    """Append-only JSONL log of game events for one table session."""

    path: Path
    session: str = field(default_factory=lambda: datetime.now(tz=timezone.utc).strftime("%Y%m%dT%H%M%S"))

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "session": self.session,
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def log_events(self, events: Iterable[Mapping[str, object]]) -> None:
        for ev in events:
            payload = {k: v for k, v in ev.items() if k != "type"}
            self.log(str(ev.get("type", "UNKNOWN")), payload)

    def read(self) -> list[dict[str, object]]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
