"""
Configuration settings for transcription and transcript post-processing.

This module defines the EngineConfig dataclass and loading of speaker seed
records from a JSON settings file.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv

from voicenotes.logger import LOGGING_LEVELS, log_function
from voicenotes.transcript import DISPLAY_FORMATS, SpeakerSeed

# Load environment variables at module import time
load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash"


def _env_api_key() -> Optional[str]:
    for name in ("GEMINI_API_KEY", "API_KEY"):
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return None


@dataclass
class EngineConfig:
    """Configuration for a transcription session"""

    # Post-processing
    repair_timestamps: bool = True
    display_format: str = "speakers_only"

    # Diagnostics
    logging_level: str = "basic"  # "off", "basic", "verbose"
    auto_export: bool = False
    log_dir: str = "logs"

    # Gemini
    model: str = DEFAULT_MODEL
    gemini_api_key: Optional[str] = field(default_factory=_env_api_key)

    # Seed speaker metadata (display name, hints, color)
    speakers: List[SpeakerSeed] = None

    def __post_init__(self):
        if self.speakers is None:
            self.speakers = []

    def validate(self) -> List[str]:
        """
        Validate configuration and return any error messages.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if self.display_format not in DISPLAY_FORMATS:
            errors.append(
                f"display_format must be one of {', '.join(DISPLAY_FORMATS)}"
            )
        if self.logging_level not in LOGGING_LEVELS:
            errors.append(
                f"logging_level must be one of {', '.join(LOGGING_LEVELS)}"
            )
        if not self.gemini_api_key:
            errors.append(
                "Missing Gemini API key. Set GEMINI_API_KEY (or API_KEY) in your .env file."
            )

        names = [seed.display_name for seed in self.speakers]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            errors.append(f"Duplicate seed speaker names: {duplicates}")

        return errors

    def snapshot(self) -> dict[str, Any]:
        """Settings as a JSON-ready dict, without secrets."""
        return {
            "repairTimestamps": self.repair_timestamps,
            "displayFormat": self.display_format,
            "loggingLevel": self.logging_level,
            "autoExport": self.auto_export,
            "model": self.model,
            "speakers": [
                {"displayName": s.display_name, "hints": s.hints, "color": s.color}
                for s in self.speakers
            ],
        }


@log_function(logger_name="config", log_args=True)
def load_speaker_seeds(path: Path) -> List[SpeakerSeed]:
    """
    Load seed speaker records from a JSON file.

    The file holds a list of objects with "display_name" (or "displayName"),
    and optional "hints" and "color".

    Args:
        path: Path to the JSON file

    Returns:
        List of SpeakerSeed in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the JSON is invalid or has unexpected structure
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in speaker file {path}: {e}") from e

    if not isinstance(data, list):
        raise ValueError("Speaker file must contain a JSON list")

    seeds = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ValueError(f"Speaker entry {index} is not an object")
        name = str(entry.get("display_name", entry.get("displayName", ""))).strip()
        if not name:
            raise ValueError(f"Speaker entry {index} has no display name")
        seeds.append(
            SpeakerSeed(
                display_name=name,
                hints=str(entry.get("hints") or ""),
                color=entry.get("color") or None,
            )
        )
    return seeds
