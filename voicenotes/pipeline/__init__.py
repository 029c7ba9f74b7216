"""
Batch transcription pipeline.

Runs an ordered list of audio parts through a transcriber and assembles them
into one transcript session:
    1. Plan units (numbered parts sorted, else single file)
    2. Transcribe each unit (voicenotes.transcription)
    3. Assemble segments (voicenotes.transcript)

Usage:
    from voicenotes.pipeline import BatchSessionController, plan_units
    result = asyncio.run(controller.run(session, plan_units(paths)))
"""

from .batch import (
    BatchResult,
    BatchSessionController,
    UnitFailure,
    is_batch,
    plan_units,
)

__all__ = [
    "BatchSessionController",
    "BatchResult",
    "UnitFailure",
    "is_batch",
    "plan_units",
]
