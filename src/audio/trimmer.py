"""
src/audio/trimmer.py
=====================
Silence Trimmer — Shadowing Audio

Responsibility:
    - Remove leading and trailing near-silence from a mono recording
    - Keep a guard band of padding samples on either side of the speech

A sample counts as sound when ``abs(sample) >= threshold``. When nothing in
the buffer reaches the threshold the recording is returned unmodified (as a
copy) instead of being cut down to an empty slice.

This module does NOT:
    - Remove pauses inside the recording
    - Change sample values
"""

import logging

import numpy as np

from src.audio.samples import SampleInput, as_float_samples

logger = logging.getLogger("shadowing.audio.trimmer")


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_SILENCE_THRESHOLD: float = 0.01   # ~ -40 dBFS
DEFAULT_PADDING_SECONDS: float = 0.1      # 1600 samples at 16 kHz
DEFAULT_SAMPLE_RATE: int = 16000


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def default_padding(sample_rate: int) -> int:
    """Return the ~100 ms guard band in samples for *sample_rate*."""
    if sample_rate <= 0:
        return 0
    return int(DEFAULT_PADDING_SECONDS * sample_rate)


def trim_silence(
    samples: SampleInput,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    threshold: float = DEFAULT_SILENCE_THRESHOLD,
    padding_samples: int | None = None,
) -> np.ndarray:
    """
    Trim leading/trailing samples quieter than *threshold*.

    Args:
        samples:         Mono float samples.
        sample_rate:     Rate of the buffer; only used to derive the default
                         padding.
        threshold:       Absolute amplitude below which a sample is silence.
        padding_samples: Samples kept on each side of the detected sound.
                         Defaults to ~100 ms at *sample_rate*.

    Returns:
        New float32 array holding the inclusive slice ``[start, end]``.

    Raises:
        ValueError: If *threshold* or *padding_samples* is negative.
    """
    if threshold < 0:
        raise ValueError(f"threshold must be >= 0, got {threshold}")
    if padding_samples is None:
        padding_samples = default_padding(sample_rate)
    if padding_samples < 0:
        raise ValueError(f"padding_samples must be >= 0, got {padding_samples}")

    data = as_float_samples(samples)

    loud = np.flatnonzero(np.abs(data) >= threshold)
    if len(loud) == 0:
        logger.debug("No sample reaches threshold %.4f — returning %d samples untrimmed.",
                     threshold, len(data))
        return data

    start = max(0, int(loud[0]) - padding_samples)
    end = min(len(data) - 1, int(loud[-1]) + padding_samples)

    trimmed = data[start:end + 1].copy()
    logger.debug("Trimmed: %d -> %d samples", len(data), len(trimmed))
    return trimmed
