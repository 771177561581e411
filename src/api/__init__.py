# src/api/__init__.py
# =====================
# Transport Layer — Shadowing Audio
#
# Hands encoded recordings to the speech backend:
#   upload_recording(wav_bytes)        → TranscriptResult  (requests, retried)
#   upload_recording_async(wav_bytes)  → TranscriptResult  (aiohttp)

from src.api.upload import (  # noqa: F401
    TranscriptResult,
    UploadError,
    upload_recording,
    upload_recording_async,
)

__all__ = [
    "TranscriptResult",
    "UploadError",
    "upload_recording",
    "upload_recording_async",
]
