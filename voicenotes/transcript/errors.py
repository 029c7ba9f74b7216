"""Exceptions raised by the transcript engine."""


class TranscriptEngineError(Exception):
    """Base class for transcript engine errors."""


class SpeakerNameCollisionError(TranscriptEngineError):
    """A rename would give two registered speakers the same display name."""

    def __init__(self, new_name: str, holder_id: str):
        super().__init__(
            f"Display name {new_name!r} is already used by speaker {holder_id}"
        )
        self.new_name = new_name
        self.holder_id = holder_id


class TranscriptionError(TranscriptEngineError):
    """The upstream transcription call for one unit failed or returned nothing."""
