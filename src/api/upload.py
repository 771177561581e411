"""
src/api/upload.py
==================
Speech-to-Text Upload Client — Shadowing Audio

Responsibility:
    - POST an encoded recording to the speech backend (multipart/form-data,
      field ``audio`` = ``recording.wav`` / ``audio/wav``, optional
      ``language`` field)
    - Verify the WAV before sending it
    - Retry transient HTTP failures (sync client only)
    - Parse the backend JSON ``{"ok", "text", "error", "details"}``

This module does NOT:
    - Encode or condition audio (see src/pipeline.py)
    - Cache transcripts
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp
import requests

from src import config
from src.http_retry import call_with_retry
from src.wav_validator import WavVerificationError, verify_wav_bytes

logger = logging.getLogger("shadowing.api.upload")

UPLOAD_FIELD = "audio"
UPLOAD_FILENAME = "recording.wav"
UPLOAD_CONTENT_TYPE = "audio/wav"


# ---------------------------------------------------------------------------
# Exceptions / results
# ---------------------------------------------------------------------------


class UploadError(Exception):
    """Raised when a recording cannot be transcribed by the backend."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class TranscriptResult:
    text: str
    raw: dict[str, Any]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def upload_recording(
    wav_bytes: bytes,
    language: str | None = None,
    url: str | None = None,
    timeout: float | None = None,
) -> TranscriptResult:
    """
    Upload a WAV recording for transcription.

    Args:
        wav_bytes: Output of ``encode_wav`` / ``prepare_recording``.
        language:  Optional language hint (defaults to config.STT_LANGUAGE).
        url:       Endpoint (defaults to config.STT_URL).
        timeout:   Request timeout in seconds.

    Returns:
        TranscriptResult with the recognized text.

    Raises:
        UploadError: On an empty/invalid recording, HTTP failure, or a
                     backend response with ``ok: false``.
    """
    _check_recording(wav_bytes)

    url = url or config.STT_URL
    language = language or config.STT_LANGUAGE
    timeout = timeout or config.STT_TIMEOUT_SECONDS

    logger.info("POST %s (%d bytes)", url, len(wav_bytes))

    files = {UPLOAD_FIELD: (UPLOAD_FILENAME, wav_bytes, UPLOAD_CONTENT_TYPE)}
    data = {"language": language} if language else None

    try:
        resp = call_with_retry(requests.post, url, files=files, data=data, timeout=timeout)
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else None
        detail = _error_detail(exc.response) if exc.response is not None else str(exc)
        raise UploadError(f"STT request failed: {detail}", status_code=status) from exc
    except requests.RequestException as exc:
        raise UploadError(f"STT request failed: {exc}") from exc

    try:
        body = resp.json()
    except ValueError as exc:
        raise UploadError(f"Failed to parse STT response: {exc}", resp.status_code) from exc

    return _parse_response(body)


async def upload_recording_async(
    wav_bytes: bytes,
    language: str | None = None,
    url: str | None = None,
    timeout: float | None = None,
) -> TranscriptResult:
    """``upload_recording`` over aiohttp (single attempt, no retry)."""
    _check_recording(wav_bytes)

    url = url or config.STT_URL
    language = language or config.STT_LANGUAGE
    timeout = timeout or config.STT_TIMEOUT_SECONDS

    form = aiohttp.FormData()
    form.add_field(
        UPLOAD_FIELD, wav_bytes, filename=UPLOAD_FILENAME, content_type=UPLOAD_CONTENT_TYPE,
    )
    if language:
        form.add_field("language", language)

    logger.info("POST %s (%d bytes, async)", url, len(wav_bytes))

    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url, data=form, timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    body = None
                if resp.status >= 400:
                    detail = _format_error(body) if isinstance(body, dict) else resp.reason
                    raise UploadError(f"STT request failed: {detail}", status_code=resp.status)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise UploadError(f"STT request failed: {exc}") from exc

    return _parse_response(body)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_recording(wav_bytes: bytes) -> None:
    if not wav_bytes:
        raise UploadError("Recording too short — nothing to upload.")
    if len(wav_bytes) > config.MAX_UPLOAD_BYTES:
        raise UploadError(
            f"Recording is {len(wav_bytes)} bytes, limit is {config.MAX_UPLOAD_BYTES}."
        )
    try:
        verify_wav_bytes(wav_bytes)
    except WavVerificationError as exc:
        raise UploadError(f"Refusing to upload malformed WAV: {exc}") from exc


def _parse_response(body: Any) -> TranscriptResult:
    if not isinstance(body, dict):
        raise UploadError("Failed to parse STT response: not a JSON object")
    if not body.get("ok"):
        raise UploadError(_format_error(body))

    text = body.get("text") or ""
    logger.info("STT result: %r", text[:100])
    return TranscriptResult(text=text, raw=body)


def _format_error(body: dict[str, Any]) -> str:
    message = body.get("error") or "STT failed"
    if body.get("details"):
        message += f": {body['details']}"
    return message


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return _format_error(body)
    return f"HTTP {resp.status_code}"
