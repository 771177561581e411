"""
src/config.py
==============
Runtime configuration — Shadowing Audio

Values come from the environment (optionally a ``.env`` file). They only
configure the upload client and the recorder defaults; the conditioning and
encoding stages in src/audio/ take all parameters as plain arguments.
"""

import os

from dotenv import load_dotenv

load_dotenv()


# ---------------------------------------------------------------------------
# Speech backend
# ---------------------------------------------------------------------------

BACKEND_BASE_URL: str = os.getenv("BACKEND_BASE_URL", "http://localhost:3000").rstrip("/")
STT_URL: str = os.getenv("STT_URL", f"{BACKEND_BASE_URL}/api/stt")
STT_LANGUAGE: str | None = os.getenv("STT_LANGUAGE") or None
STT_TIMEOUT_SECONDS: float = float(os.getenv("STT_TIMEOUT_SECONDS", "60"))

# Backend rejects uploads above 25 MB
MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(25 * 1024 * 1024)))


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------

SAMPLE_RATE: int = int(os.getenv("MIC_SAMPLE_RATE", "16000"))
MAX_RECORDING_SECONDS: float = float(os.getenv("MAX_RECORDING_SECONDS", "10"))
