"""JSONL event log for sync operations.

One line per event: session start/end, every remote round trip and every
mutation turned away by the busy guard.
"""

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

LOG_FILENAME = "events.jsonl"


@dataclass
class LogEntry:
    """A single event line."""

    timestamp: str
    event: str
    session_id: str | None = None
    identifier: str | None = None
    status_code: int | None = None
    records: int | None = None
    duration_ms: float | None = None
    success: bool | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


class JSONLLogger:
    """Appends LogEntry lines to ``<log_dir>/events.jsonl``, rotating by size."""

    def __init__(self, log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".padron" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self.session_id: str | None = None

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / LOG_FILENAME

    def set_session_id(self, session_id: str | None) -> None:
        """Stamp session_id on every entry written from now on."""
        self.session_id = session_id

    def _rotate_if_needed(self) -> None:
        path = self.log_path
        if path.exists() and path.stat().st_size >= self.max_size_bytes:
            stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            path.rename(self.log_dir / f"{path.stem}_{stamp}.jsonl")

    def log(self, event: str, **fields: Any) -> None:
        """Write one event. fields are LogEntry attributes."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            session_id=self.session_id,
            **fields,
        )
        self._rotate_if_needed()
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def log_operation(
        self,
        operation: str,
        success: bool,
        *,
        duration_ms: float | None = None,
        identifier: str | None = None,
        status_code: int | None = None,
        records: int | None = None,
        error: str | None = None,
    ) -> None:
        """Log the outcome of one remote round trip. error is kept only on failure."""
        self.log(
            operation,
            success=success,
            duration_ms=round(duration_ms, 1) if duration_ms is not None else None,
            identifier=identifier,
            status_code=status_code,
            records=records,
            error=None if success else error,
        )


# Global logger instance
_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> JSONLLogger:
    """Configure and return the global logger."""
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb)
    return _logger
