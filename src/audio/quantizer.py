"""
src/audio/quantizer.py
=======================
PCM Quantizer — Shadowing Audio

Converts float samples to signed 16-bit PCM.

Each sample is clamped to [-1.0, 1.0], multiplied by 32767 in single
precision and TRUNCATED toward zero. Truncation (not round-to-nearest) is
the encoding contract: recordings already uploaded were produced this way
and must stay bit-identical. Full scale is therefore +/-32767; -32768 is
never produced.

Non-finite input never reaches the output: NaN becomes 0 and +/-Inf clamps
to +/-32767.
"""

import numpy as np

from src.audio.samples import EmptyInputError, SampleInput, as_float_samples

PCM16_SCALE = np.float32(32767.0)


def quantize_pcm16(samples: SampleInput) -> np.ndarray:
    """
    Clamp, scale and truncate float samples into an int16 array.

    Raises:
        EmptyInputError: If *samples* is empty.
    """
    data = as_float_samples(samples)
    if len(data) == 0:
        raise EmptyInputError("No samples to quantize.")

    data = np.nan_to_num(data, nan=0.0, posinf=1.0, neginf=-1.0)
    clamped = np.clip(data, -1.0, 1.0).astype(np.float32, copy=False)
    scaled = clamped * PCM16_SCALE

    # toward zero, never round-to-nearest
    return np.trunc(scaled).astype(np.int16)
