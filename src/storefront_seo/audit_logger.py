"""
Event log shared by the walker, sitemap reader, orchestrator and CLI.

Entries are kept in memory for the final report and written as JSON lines,
plain text lines, or both. Response headers end up in log data, so cookie,
session and credential values are masked before anything is stored.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

from storefront_seo.enums import LogLevel


_SEVERITY = {level: rank for rank, level in enumerate(LogLevel)}
_FORMATS = ("json", "text", "both")


@dataclass
class LogEntry:
    """One logged event."""

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

    def as_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def as_text(self) -> str:
        line = f"[{self.timestamp}] {self.level.value.upper()} [{self.component}] {self.message}"
        if self.data:
            line += " " + json.dumps(self.data, ensure_ascii=False, default=str)
        return line


class AuditLogger:
    """
    Structured logger for audit runs.

    Args:
        output_format: 'json', 'text' or 'both'
        output_stream: Where lines are written (stderr by default)
        min_level: Events below this level are dropped entirely
    """

    # Substrings of keys whose values never reach the log
    SENSITIVE_KEYS = frozenset({
        'cookie', 'set-cookie', 'session', 'authorization', 'auth',
        'token', 'access_token', 'refresh_token', 'api_key',
        'secret', 'password', 'credential', 'private_key',
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "both",
        output_stream: Optional[TextIO] = None,
        min_level: LogLevel = LogLevel.DEBUG,
    ):
        if output_format not in _FORMATS:
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._stream = output_stream
        self._min_level = min_level
        self._entries: list[LogEntry] = []

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def entries(self) -> list[LogEntry]:
        """Snapshot of the events kept so far."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Record an event.

        Returns:
            The stored entry, or None when the level is below min_level
        """
        if _SEVERITY[level] < _SEVERITY[self._min_level]:
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

    def debug(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, component, message, data)

    def info(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, component, message, data)

    def warn(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, component, message, data)

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[BaseException] = None,
        request_url: Optional[str] = None,
        response_status_code: Optional[int] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Record a failure together with the URL and status it happened on.

        Only the context that is actually known ends up in the entry data.
        """
        data = dict(additional_data or {})
        if error is not None:
            data.update(error_type=type(error).__name__, error_message=str(error))
        context = {"request_url": request_url, "response_status_code": response_status_code}
        data.update({key: value for key, value in context.items() if value is not None})
        return self.log(LogLevel.ERROR, component, message, data)

    def mask_sensitive_data(self, data: dict) -> dict:
        """Return a copy of data with sensitive values replaced, at any depth."""
        if not isinstance(data, dict):
            return data
        return self._mask(data)

    def clear_entries(self) -> None:
        self._entries.clear()

    def _is_sensitive(self, key: Any) -> bool:
        name = str(key).lower()
        return any(fragment in name for fragment in self.SENSITIVE_KEYS)

    def _mask(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                key: self.MASK_VALUE if self._is_sensitive(key) else self._mask(item)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self._mask(item) for item in value]
        return value

    def _write(self, entry: LogEntry) -> None:
        lines = []
        if self._output_format != "text":
            lines.append(entry.as_json())
        if self._output_format != "json":
            lines.append(entry.as_text())
        # sys.stderr can be replaced after construction
        stream = self._stream or sys.stderr
        stream.write("\n".join(lines) + "\n")
        stream.flush()
