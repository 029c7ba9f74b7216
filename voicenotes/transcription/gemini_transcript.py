"""Gemini-based audio transcription with speaker identification.

This module provides the default transcriber for the batch pipeline. Gemini
handles speech-to-text and speaker labelling in one call and returns plain
`[mm:ss] [Speaker Name] text` lines, which the transcript engine parses.
"""

import asyncio
import logging
import mimetypes
import time
from pathlib import Path
from typing import Optional

from google import genai
from google.genai import types

from voicenotes.config import EngineConfig
from voicenotes.logger import SessionLog, log_function
from voicenotes.transcript import TranscriptionError


FILE_UPLOAD_THRESHOLD = 20 * 1024 * 1024  # 20 MB
UPLOAD_POLL_SECONDS = 5.0

GEMINI_SYSTEM_INSTRUCTION = """You are an expert audio transcriber. Transcribe the audio in its original language.

## Instructions
- **Direct Output Only:** Output transcript lines only. No introduction, no closing remarks.
- Every transcribed segment MUST be on a **new line**.
- Every line MUST strictly follow this format: `[mm:ss] [Speaker Name] The transcribed text...`
- Example: `[00:09] [Speaker 1] This is the first sentence of the transcription.`
- Label speakers `Speaker 1`, `Speaker 2`, ... and reuse each label consistently for the same voice.
- For unknown speakers, use labels like `Unknown 1`, `Unknown 2`, and reuse them consistently.
"""


def get_gemini_client(api_key: Optional[str]) -> genai.Client:
    """Get configured Gemini client.

    Raises:
        ValueError: If no API key is configured
    """
    if not api_key:
        raise ValueError(
            "Missing Gemini API key. Set GEMINI_API_KEY (or API_KEY) in your .env file."
        )
    return genai.Client(api_key=api_key)


def guess_audio_mime_type(file_path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(str(file_path))
    if not mime_type or not mime_type.startswith("audio/"):
        raise TranscriptionError(
            f"Invalid file {file_path.name}. Please upload an audio file."
        )
    return mime_type


class GeminiTranscriber:
    """Async transcriber: `await transcriber(path)` returns raw transcript text."""

    def __init__(
        self,
        config: EngineConfig,
        session_log: Optional[SessionLog] = None,
        client: Optional[genai.Client] = None,
    ):
        self.config = config
        self.session_log = session_log
        self.client = client or get_gemini_client(config.gemini_api_key)

    async def _upload(self, file_path: Path, mime_type: str) -> types.File:
        logger = logging.getLogger("transcription")
        logger.info(f"Uploading large file {file_path.name} to Gemini...")
        uploaded = await self.client.aio.files.upload(
            file=str(file_path), config=types.UploadFileConfig(mime_type=mime_type)
        )

        status = uploaded
        while status.state == types.FileState.PROCESSING:
            logger.info("Server is processing the audio... waiting")
            await asyncio.sleep(UPLOAD_POLL_SECONDS)
            status = await self.client.aio.files.get(name=uploaded.name)

        if status.state != types.FileState.ACTIVE:
            raise TranscriptionError(
                f"File processing failed. Final state: {status.state}"
            )
        return status

    async def _delete(self, name: str) -> None:
        try:
            await self.client.aio.files.delete(name=name)
        except Exception as e:
            logging.getLogger("transcription").warning(
                f"Failed to delete uploaded file {name}: {e}"
            )
            if self.session_log is not None:
                self.session_log.save_error("FILE_DELETION_ERROR", e, request_id=name)

    @log_function(logger_name="transcription", log_args=True, log_execution_time=True)
    async def __call__(self, file_path: Path) -> str:
        """Transcribe one audio file.

        Args:
            file_path: Path to audio file

        Returns:
            Raw model output, one transcript line per row

        Raises:
            FileNotFoundError: If audio file not found
            TranscriptionError: If the file is not audio, the upload fails or
                the model returns no text
        """
        logger = logging.getLogger("transcription")
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Audio file not found: {file_path}")

        mime_type = guess_audio_mime_type(file_path)
        start_time = time.time()
        uploaded_name = None

        try:
            if file_path.stat().st_size > FILE_UPLOAD_THRESHOLD:
                uploaded = await self._upload(file_path, mime_type)
                uploaded_name = uploaded.name
                audio_part = types.Part.from_uri(
                    file_uri=uploaded.uri, mime_type=mime_type
                )
            else:
                audio_part = types.Part.from_bytes(
                    data=file_path.read_bytes(), mime_type=mime_type
                )

            logger.info(f"Requesting transcription with model {self.config.model}...")
            response = await self.client.aio.models.generate_content(
                model=self.config.model,
                contents=[audio_part],
                config=types.GenerateContentConfig(
                    system_instruction=GEMINI_SYSTEM_INSTRUCTION,
                    temperature=0.0,
                    top_p=1.0,
                ),
            )

            text = response.text or ""
            latency_ms = int((time.time() - start_time) * 1000)
            if self.session_log is not None:
                self.session_log.save_metrics(
                    {
                        "model": self.config.model,
                        "temperature": 0.0,
                        "topP": 1.0,
                        "latency_ms": latency_ms,
                    }
                )

            if not text.strip():
                raise TranscriptionError(
                    f"Transcription returned empty for {file_path.name}."
                )

            logger.info(f"Gemini transcription of {file_path.name} took {latency_ms} ms")
            return text
        finally:
            if uploaded_name:
                await self._delete(uploaded_name)
