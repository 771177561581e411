"""
src/audio/level.py
===================
Input Level Meter & Auto-Stop — Shadowing Audio

Responsibility:
    - Report a 0..1 input level for the record button's meter
    - Decide whether a capture in progress should stop on its own
      (trailing silence after speech, or the maximum length reached)

Both functions are pure: the capture collaborator passes in the samples
recorded so far and acts on the result.
"""

import numpy as np

from src.audio.duration import samples_to_seconds
from src.audio.samples import SampleInput

# ---------------------------------------------------------------------------
# Defaults (recorder settings)
# ---------------------------------------------------------------------------

LEVEL_WINDOW: int = 256
LEVEL_SCALE: float = 4.0          # mean |x| is small for speech; scale for display

AUTO_STOP_THRESHOLD: float = 0.01
AUTO_STOP_SILENCE_SECONDS: float = 1.5
MIN_RECORDING_SECONDS: float = 0.5
MAX_RECORDING_SECONDS: float = 10.0


def input_level(samples: SampleInput, window: int = LEVEL_WINDOW) -> float:
    """Mean absolute value of the trailing *window* samples, scaled and clamped to [0, 1]."""
    data = np.asarray(samples, dtype=np.float32).reshape(-1)
    if data.size == 0 or window <= 0:
        return 0.0

    tail = data[-window:]
    level = float(np.sum(np.abs(tail))) / min(window, tail.size) * LEVEL_SCALE
    return min(max(level, 0.0), 1.0)


def level_history(samples: SampleInput, window: int = LEVEL_WINDOW) -> np.ndarray:
    """
    Meter level after every sample: ``input_level(samples[:i + 1], window)`` for each i.

    Non-finite samples count as silence (NaN) or full scale (Inf).
    """
    data = np.asarray(samples, dtype=np.float64).reshape(-1)
    if data.size == 0 or window <= 0:
        return np.zeros(data.size, dtype=np.float64)

    magnitude = np.nan_to_num(np.abs(data), nan=0.0, posinf=1.0)
    running = np.concatenate(([0.0], np.cumsum(magnitude)))

    end = np.arange(1, data.size + 1)
    start = np.maximum(end - window, 0)
    levels = (running[end] - running[start]) / (end - start) * LEVEL_SCALE
    return np.clip(levels, 0.0, 1.0)


def should_auto_stop(
    samples: SampleInput,
    sample_rate: int,
    threshold: float = AUTO_STOP_THRESHOLD,
    silence_duration: float = AUTO_STOP_SILENCE_SECONDS,
    min_duration: float = MIN_RECORDING_SECONDS,
    max_duration: float = MAX_RECORDING_SECONDS,
    window: int = LEVEL_WINDOW,
) -> bool:
    """
    Return True when a capture in progress should be finalized.

    A recording stops when it reaches *max_duration*, or when it is at least
    *min_duration* long, the meter level (see ``input_level``) rose above
    *threshold* at some point, and it has stayed at or below *threshold*
    for the last *silence_duration* seconds. Isolated clicks are averaged
    over *window* samples and do not count as speech.
    """
    data = np.asarray(samples, dtype=np.float32).reshape(-1)
    elapsed = samples_to_seconds(data.size, sample_rate)

    if elapsed >= max_duration:
        return True
    if elapsed < min_duration:
        return False

    loud = np.flatnonzero(level_history(data, window) > threshold)
    if loud.size == 0:
        return False

    silent_tail = samples_to_seconds(data.size - 1 - int(loud[-1]), sample_rate)
    return silent_tail >= silence_duration
