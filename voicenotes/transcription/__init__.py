# Transcription module - Gemini transcriber used by the batch pipeline

from voicenotes.transcription.gemini_transcript import (
    GEMINI_SYSTEM_INSTRUCTION,
    GeminiTranscriber,
    get_gemini_client,
)

__all__ = [
    "GeminiTranscriber",
    "get_gemini_client",
    "GEMINI_SYSTEM_INSTRUCTION",
]
