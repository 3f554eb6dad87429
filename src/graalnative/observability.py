"""Structured log records for native-image runs."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

Level = Literal["debug", "info", "warn", "error"]


@dataclass(frozen=True, slots=True)
class LogRecord:
    operation: str
    phase: str
    message: str
    level: Level = "info"
    task: str | None = None
    extra: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "level": self.level,
            "operation": self.operation,
            "task": self.task,
            "phase": self.phase,
            "message": self.message,
        }
        if self.extra is not None:
            payload["extra"] = dict(self.extra)
        return payload


@dataclass(slots=True)
class StructuredLogger:
    """Collects records in memory; callers export them when a run ends."""

    records: list[LogRecord] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        task: str | None,
        phase: str,
        message: str,
        level: Level = "info",
        extra: Mapping[str, Any] | None = None,
    ) -> LogRecord:
        record = LogRecord(
            operation=operation,
            phase=phase,
            message=message,
            level=level,
            task=task,
            extra=extra,
        )
        self.records.append(record)
        return record

    def records_for(self, *, task: str | None = None, phase: str | None = None) -> list[LogRecord]:
        return [
            record
            for record in self.records
            if (task is None or record.task == task) and (phase is None or record.phase == phase)
        ]

    def failures(self) -> list[LogRecord]:
        return [record for record in self.records if record.level == "error"]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record.to_dict(), sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path


__all__ = ["Level", "LogRecord", "StructuredLogger"]
