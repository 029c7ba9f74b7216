"""
voicenotes: speaker-attributed transcripts from Gemini audio transcription.

Packages:
    transcript     line parsing, timestamps, speaker registry, assembly, rendering
    pipeline       sequential batch processing of numbered audio parts
    transcription  Gemini transcriber and the command line interface
    logger         logging setup and per-session diagnostics
"""

__version__ = "0.1.0"
