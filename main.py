"""
main.py
========
Smoke entry point for the Shadowing audio pipeline.

Run with:
    python main.py

Synthesizes a short tone padded with silence, prepares it for upload and
logs the status record. If STT_UPLOAD=1 is set, the WAV is also sent to
the configured speech backend.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()  # Load .env before any module reads env vars

# Configure logging for the entire application
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Keep HTTP client internals out of the pipeline output
for _http_logger_name in ("urllib3", "urllib3.connectionpool", "aiohttp"):
    logging.getLogger(_http_logger_name).setLevel(logging.WARNING)

import numpy as np  # noqa: E402

from src import config  # noqa: E402
from src.pipeline import prepare_recording, synthesize_tone  # noqa: E402

logger = logging.getLogger("shadowing.main")


def main() -> int:
    rate = config.SAMPLE_RATE
    silence = np.zeros(rate // 2, dtype=np.float32)
    tone = synthesize_tone(seconds=1.0, sample_rate=rate, amplitude=0.2)
    capture = np.concatenate([silence, tone, silence])

    prepared = prepare_recording(capture, rate)
    logger.info("Status: %s", prepared.as_dict())
    if not prepared.ok:
        return 1

    if os.getenv("STT_UPLOAD") == "1":
        from src.api.upload import UploadError, upload_recording

        try:
            result = upload_recording(prepared.wav_bytes)
        except UploadError as exc:
            logger.error("Upload failed: %s", exc)
            return 1
        logger.info("Transcript: %s", result.text)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
