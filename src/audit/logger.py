"""Dispatch audit log — append-only JSON Lines with size-based rotation."""

from __future__ import annotations

import json
from pathlib import Path

from src.config import Settings
from src.models import DispatchEvent


def read_events(log_path: Path) -> list[DispatchEvent]:
    """Load every event from an audit log file, oldest first."""
    if not log_path.exists():
        return []
    return [
        DispatchEvent.model_validate(json.loads(line))
        for line in log_path.read_text().splitlines()
        if line.strip()
    ]


class AuditLogger:
    """Records one line per dispatch outcome for operators."""

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    @classmethod
    def from_settings(cls, settings: Settings) -> AuditLogger | None:
        if not settings.audit_log_path:
            return None
        return cls(
            log_path=settings.audit_log_path,
            max_bytes=settings.audit_log_max_bytes,
            backup_count=settings.audit_log_backup_count,
        )

    def backup_path(self, index: int) -> Path:
        """Path of the ``index``-th rotated file; 1 is the most recent."""
        return self.log_path.with_name(f"{self.log_path.name}.{index}")

    def _rotate_if_full(self) -> None:
        if not self.log_path.exists() or self.log_path.stat().st_size < self._max_bytes:
            return
        if self._backup_count < 1:
            self.log_path.unlink()
            return
        # Path.replace overwrites, so the oldest backup falls off the end.
        for index in range(self._backup_count, 1, -1):
            newer = self.backup_path(index - 1)
            if newer.exists():
                newer.replace(self.backup_path(index))
        self.log_path.replace(self.backup_path(1))

    def log(self, event: DispatchEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._rotate_if_full()
        line = event.model_dump_json(exclude_none=True)
        with open(self.log_path, "a") as f:
            f.write(line + "\n")
