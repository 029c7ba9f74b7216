"""Per-session diagnostics capture.

A SessionLog collects everything worth looking at after a transcription run:
the settings snapshot, raw model responses, the line-by-line parsing log,
metrics and errors. Every entry is also forwarded to the standard `logging`
logger so nothing is lost when no export happens.

Export is gated by a logging level:
    off      nothing is written
    basic    settings, raw responses, metrics
    verbose  everything, including the parsing log and errors
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


LOGGING_LEVELS = ("off", "basic", "verbose")

# (filename, attribute renderer key, levels that include it)
_EXPORT_FILES = (
    ("01-settings.json", "settings", ("basic", "verbose")),
    ("02-ai-response.txt", "responses", ("basic", "verbose")),
    ("03-parsing-log.txt", "parsing", ("verbose",)),
    ("04-session-log.txt", "entries", ("verbose",)),
    ("05-metrics.json", "metrics", ("basic", "verbose")),
    ("06-errors.json", "errors", ("verbose",)),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _session_stamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d-%H%M%S")


class SessionLog:
    """Diagnostics collector scoped to one transcript session."""

    def __init__(self, session_id: str, logger_name: str = "transcript"):
        self.session_id = session_id
        self.started_at = datetime.now()
        self.entries: list[str] = []
        self.parsing: list[str] = []
        self.responses: list[str] = []
        self.settings: dict[str, Any] = {}
        self.metrics: dict[str, Any] = {}
        self.errors: list[dict[str, Any]] = []
        self._logger = logging.getLogger(logger_name)
        self.log("SESSION", f"Session started: {session_id}")

    def log(self, category: str, message: str, data: Optional[Any] = None) -> None:
        self.entries.append(f"[{_now_iso()}] [{category}] {message}")
        if data is not None:
            self.entries.append(json.dumps(data, indent=2, default=str))
        self._logger.info(f"[{category}] {message}")

    def save_parsing_log(self, message: str) -> None:
        self.parsing.append(f"[{_now_iso()}] {message}")
        self._logger.debug(message)

    def save_raw_response(self, text: str) -> None:
        self.responses.append(text)
        self.log("AI_RESPONSE", f"AI response saved ({len(text)} chars)")

    def save_settings(self, settings: dict[str, Any]) -> None:
        self.settings = dict(settings)
        self.log("SETTINGS", "Settings snapshot saved")

    def save_metrics(self, metrics: dict[str, Any]) -> None:
        self.metrics.update(metrics)
        self.log("METRICS", "Metrics updated", self.metrics)

    def save_error(
        self, kind: str, error: BaseException, request_id: Optional[str] = None
    ) -> None:
        self.errors.append(
            {
                "time": _now_iso(),
                "type": kind,
                "message": str(error),
                "exception": type(error).__name__,
                "stack": "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
                "requestId": request_id or "N/A",
            }
        )
        self.entries.append(f"[{_now_iso()}] [ERROR] {kind}: {error}")
        self._logger.error(f"{kind}: {error}")

    def _render(self, key: str) -> str:
        if key == "settings":
            return json.dumps(self.settings, indent=2) if self.settings else ""
        if key == "responses":
            return "\n\n".join(self.responses)
        if key == "parsing":
            return "\n".join(self.parsing)
        if key == "entries":
            return "\n".join(self.entries)
        if key == "metrics":
            return json.dumps(self.metrics, indent=2, default=str) if self.metrics else ""
        if key == "errors":
            return json.dumps(self.errors, indent=2) if self.errors else ""
        raise KeyError(key)

    def export(self, directory: Path, level: str) -> Optional[Path]:
        """
        Write the collected diagnostics to `<directory>/logs-<stamp>/`.

        Args:
            directory: Parent directory for the export folder
            level: One of "off", "basic", "verbose"

        Returns:
            Path to the export folder, or None when level is "off"

        Raises:
            ValueError: If level is not a known logging level
            OSError: If the files cannot be written
        """
        if level not in LOGGING_LEVELS:
            raise ValueError(f"Unknown logging level: {level!r}")
        if level == "off":
            self.log("EXPORT", "Logging is off. No files exported.")
            return None

        folder = Path(directory) / f"logs-{_session_stamp(self.started_at)}"
        try:
            folder.mkdir(parents=True, exist_ok=True)
            for filename, key, levels in _EXPORT_FILES:
                if level not in levels:
                    continue
                content = self._render(key)
                if content:
                    (folder / filename).write_text(content, encoding="utf-8")
        except OSError as e:
            self.save_error("EXPORT_FAILURE", e)
            raise

        self.log("EXPORT", f"Log files exported to {folder}")
        return folder
