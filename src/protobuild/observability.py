"""Structured logging helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

Level = Literal["info", "warning", "error"]


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        stage: str,
        message: str,
        level: Level = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "stage": stage,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)

    def info(self, *, operation: str, stage: str, message: str, **extra: Any) -> None:
        self.log(operation=operation, stage=stage, message=message, extra=extra or None)

    def warning(self, *, operation: str, stage: str, message: str, **extra: Any) -> None:
        self.log(
            operation=operation,
            stage=stage,
            message=message,
            level="warning",
            extra=extra or None,
        )

    def records_at(self, level: Level) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("level") == level]

    def records_for_stage(self, stage: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("stage") == stage]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True, default=str) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path
