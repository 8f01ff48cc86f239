"""
Structured call logging for the Soroban Domains client.

Every entry carries a UTC timestamp, a level, the emitting component, a
message and a data dict. Entries are written as JSON lines, as text lines,
or both. Values stored under secret-looking keys (seeds, signatures, auth
entries) are replaced before anything is written.
"""

import json
import sys
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

from .config import LoggingConfig
from .enums import LogLevel


OUTPUT_FORMATS = ("json", "text", "both")

_SEVERITY = {level: rank for rank, level in enumerate(LogLevel)}


@dataclass
class LogEntry:
    """One written log record."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "component": self.component,
            "message": self.message,
            "data": self.data,
        }


class AuditLogger:
    """
    Writes LogEntry records to a stream.

    Entries below the configured level are dropped. The most recent
    history_size written entries are also held in memory and exposed through
    `entries`; older ones are discarded.
    """

    # Substrings that mark a key as secret
    SENSITIVE_KEYS = frozenset({
        "secret", "seed", "private_key", "password", "token",
        "auth", "authorization", "credential", "signature",
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        level: LogLevel = LogLevel.INFO,
        history_size: int = 100,
    ):
        """
        Args:
            output_format: 'json', 'text' or 'both'
            output_stream: Where entries are written (defaults to sys.stderr)
            level: Lowest level that is written
            history_size: How many written entries `entries` keeps

        Raises:
            ValueError: If output_format is unknown
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._stream = output_stream or sys.stderr
        self._level = level
        self._entries: deque[LogEntry] = deque(maxlen=history_size)

    @classmethod
    def from_config(
        cls,
        config: LoggingConfig,
        output_stream: Optional[TextIO] = None,
    ) -> "AuditLogger":
        """Build a logger from the logging section of SDKConfig."""
        return cls(
            output_format=config.output_format,
            output_stream=output_stream,
            level=LogLevel(config.level),
        )

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def entries(self) -> list[LogEntry]:
        """Copy of the most recent entries, oldest first."""
        return list(self._entries)

    def clear_entries(self) -> None:
        self._entries.clear()

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Write one entry.

        Returns:
            The written LogEntry, or None when level is below the threshold
        """
        if _SEVERITY[level] < _SEVERITY[self._level]:
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )
        self._entries.append(entry)
        self._write(entry)
        return entry

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Write an ERROR entry describing a failed call.

        The exception's message, class name and, for SorobanDomainsError,
        its code are added to the data.
        """
        data = dict(additional_data or {})
        if error is not None:
            data.update(
                error_message=str(error),
                error_type=type(error).__name__,
            )
            code = getattr(error, "code", None)
            if code is not None:
                data["error_code"] = code

        return self.log(LogLevel.ERROR, component, message, data)

    def mask_sensitive_data(self, data: dict) -> dict:
        """Return a copy of data with secret values replaced by MASK_VALUE."""
        if not isinstance(data, dict):
            return data
        return {
            key: self.MASK_VALUE if self._is_sensitive(key) else self._mask_value(value)
            for key, value in data.items()
        }

    def _is_sensitive(self, key: Any) -> bool:
        name = str(key).lower()
        return any(marker in name for marker in self.SENSITIVE_KEYS)

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self.mask_sensitive_data(value)
        if isinstance(value, (list, tuple)):
            return [self._mask_value(item) for item in value]
        return value

    def format_json(self, entry: LogEntry) -> str:
        return json.dumps(entry.to_dict(), ensure_ascii=False, default=str)

    def format_text(self, entry: LogEntry) -> str:
        """Render '[timestamp] LEVEL [component] message {data}'."""
        line = f"[{entry.timestamp}] {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + json.dumps(entry.data, ensure_ascii=False, default=str)
        return line

    def _write(self, entry: LogEntry) -> None:
        lines = []
        if self._output_format != "text":
            lines.append(self.format_json(entry))
        if self._output_format != "json":
            lines.append(self.format_text(entry))
        for line in lines:
            self._stream.write(line + "\n")
        self._stream.flush()
