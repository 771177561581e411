"""
src/audio/samples.py
=====================
Sample Buffer & Validation Errors — Shadowing Audio

Responsibility:
    - Define the SampleBuffer container (float32 samples + rate + channels)
    - Coerce caller-supplied sample sequences into fresh float32 arrays
    - Define the error kinds raised by the conditioning stages

Every stage in src/audio/ goes through ``as_float_samples`` so that inputs
are never mutated and outputs never alias them.

This module does NOT:
    - Capture audio from a device
    - Transform sample values
"""

from dataclasses import dataclass, field
from typing import Sequence, Union

import numpy as np

from src.audio.duration import samples_to_seconds


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# byte_rate = sample_rate * 2 must fit the uint32 header field
MAX_SAMPLE_RATE = 0xFFFFFFFF // 2

SampleInput = Union[np.ndarray, Sequence[float]]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AudioValidationError(Exception):
    """Base class for sample buffer validation failures."""

    kind = "AudioValidationError"


class EmptyInputError(AudioValidationError):
    """Raised when a stage that needs samples receives none."""

    kind = "EmptyInput"


class InvalidSampleRateError(AudioValidationError):
    """Raised when the sample rate is not a positive integer in range."""

    kind = "InvalidSampleRate"


class InvalidChannelCountError(AudioValidationError):
    """Raised when the channel count is < 1 or does not divide the buffer."""

    kind = "InvalidChannelCount"


# ---------------------------------------------------------------------------
# Buffer
# ---------------------------------------------------------------------------


@dataclass
class SampleBuffer:
    samples: np.ndarray = field(repr=False)  # float32, interleaved if channels > 1
    sample_rate: int
    channels: int = 1

    def __post_init__(self) -> None:
        self.samples = as_float_samples(self.samples)

    @property
    def frame_count(self) -> int:
        if self.channels <= 0:
            return 0
        return len(self.samples) // self.channels

    @property
    def duration(self) -> float:
        return samples_to_seconds(self.frame_count, self.sample_rate)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def as_float_samples(samples: SampleInput) -> np.ndarray:
    """Return a new 1-D float32 copy of *samples*."""
    arr = np.array(samples, dtype=np.float32, copy=True)
    return arr.reshape(-1)


def validate_sample_rate(sample_rate: int) -> int:
    """
    Check that *sample_rate* is a positive integer the WAV header can hold.

    Raises:
        InvalidSampleRateError: If the rate is not an int, is <= 0, or
            would overflow the 32-bit byte-rate field.
    """
    if isinstance(sample_rate, bool) or not isinstance(sample_rate, (int, np.integer)):
        raise InvalidSampleRateError(
            f"Sample rate must be an integer, got {type(sample_rate).__name__}."
        )
    if sample_rate <= 0:
        raise InvalidSampleRateError(f"Sample rate must be positive, got {sample_rate}.")
    if sample_rate > MAX_SAMPLE_RATE:
        raise InvalidSampleRateError(
            f"Sample rate {sample_rate} Hz exceeds the WAV header limit ({MAX_SAMPLE_RATE})."
        )
    return int(sample_rate)
