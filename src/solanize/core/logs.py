"""Logging setup and the in-memory activity buffer for Solanize."""

from __future__ import annotations

import json
import logging
import re
from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Deque, Iterable, Literal

LogCategory = Literal["wallet", "transfer", "swap", "token", "system"]
LogSeverity = Literal["info", "warning", "error"]

VALID_CATEGORIES: set[str] = {"wallet", "transfer", "swap", "token", "system"}
VALID_SEVERITIES: set[str] = {"info", "warning", "error"}

PRETTY_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
COMPACT_FORMAT = "%(levelname)s %(message)s"

_BASE58_PATTERN = re.compile(r"\b[1-9A-HJ-NP-Za-km-z]{32,44}\b")


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JsonFormatter()
    if fmt == "compact":
        return logging.Formatter(COMPACT_FORMAT)
    return logging.Formatter(PRETTY_FORMAT)


def configure_logging(
    level: str = "info",
    fmt: str = "pretty",
    *,
    log_file: Path | None = None,
    verbose: bool = False,
) -> None:
    """Configure root logging from the `[logging]` config section."""
    resolved_level = logging.DEBUG if verbose else logging.getLevelName(level.upper())
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_build_formatter(fmt))
        root_logger.addHandler(handler)
    root_logger.setLevel(resolved_level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(resolved_level, logging.WARNING))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(resolved_level)
        file_handler.setFormatter(_build_formatter(fmt))
        root_logger.addHandler(file_handler)


def _mask_base58(token: str) -> str:
    if len(token) <= 8:
        return "••••"
    return f"{token[:4]}…{token[-4:]}"


def _redact(text: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        return _mask_base58(match.group(0))

    return _BASE58_PATTERN.sub(_replace, text)


@dataclass(slots=True)
class LogEntry:
    """A single activity entry."""

    timestamp: datetime
    category: LogCategory
    severity: LogSeverity
    message: str


class LogBuffer:
    """Fixed-size FIFO buffer of command activity with address redaction."""

    def __init__(
        self,
        *,
        max_entries: int = 200,
        redaction_enabled: bool = True,
    ) -> None:
        self.max_entries = max(max_entries, 1)
        self._redaction_enabled = redaction_enabled
        self._entries: Deque[LogEntry] = deque(maxlen=self.max_entries)

    def record(self, category: str, message: str, *, severity: str = "info") -> LogEntry:
        normalized_category = category.lower()
        if normalized_category not in VALID_CATEGORIES:
            normalized_category = "system"
        normalized_severity = severity.lower()
        if normalized_severity not in VALID_SEVERITIES:
            normalized_severity = "info"
        sanitized = _redact(message) if self._redaction_enabled else message
        entry = LogEntry(
            timestamp=datetime.now(UTC),
            category=normalized_category,  # type: ignore[arg-type]
            severity=normalized_severity,  # type: ignore[arg-type]
            message=sanitized,
        )
        self._entries.append(entry)
        return entry

    def recent(self, *, category: str | None = None, limit: int = 50) -> list[LogEntry]:
        if category is None:
            return list(self._slice_latest(limit))
        normalized_category = category.lower()
        if normalized_category not in VALID_CATEGORIES:
            normalized_category = "system"
        filtered = [entry for entry in self._entries if entry.category == normalized_category]
        return filtered[-limit:] if limit > 0 else []

    def latest(self) -> LogEntry | None:
        if not self._entries:
            return None
        return self._entries[-1]

    def _slice_latest(self, limit: int) -> Iterable[LogEntry]:
        if limit <= 0:
            return []
        return list(self._entries)[-limit:]


__all__ = [
    "JsonFormatter",
    "LogBuffer",
    "LogEntry",
    "LogCategory",
    "LogSeverity",
    "VALID_CATEGORIES",
    "VALID_SEVERITIES",
    "configure_logging",
]
