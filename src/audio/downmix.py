"""
src/audio/downmix.py
=====================
Channel Downmixer — Shadowing Audio

Collapses interleaved multi-channel float samples to mono by averaging the
channel values of each frame.
"""

import logging

import numpy as np

from src.audio.samples import InvalidChannelCountError, SampleInput, as_float_samples

logger = logging.getLogger("shadowing.audio.downmix")


def downmix_to_mono(samples: SampleInput, channels: int) -> np.ndarray:
    """
    Average interleaved frames down to a single channel.

    Args:
        samples:  Interleaved float samples, length ``frames * channels``.
        channels: Number of interleaved channels (>= 1).

    Returns:
        New float32 array with one sample per frame.

    Raises:
        InvalidChannelCountError: If *channels* < 1 or the buffer length is
            not a multiple of *channels*.
    """
    if isinstance(channels, bool) or not isinstance(channels, (int, np.integer)) or channels <= 0:
        raise InvalidChannelCountError(f"Channel count must be >= 1, got {channels!r}.")

    data = as_float_samples(samples)

    if len(data) % channels != 0:
        raise InvalidChannelCountError(
            f"Buffer length {len(data)} is not a multiple of {channels} channels."
        )

    if channels == 1:
        return data

    mono = data.reshape(-1, channels).mean(axis=1, dtype=np.float32)
    logger.debug("Downmixed %d channels: %d -> %d samples", channels, len(data), len(mono))
    return mono
