"""
src/audio/duration.py
======================
Duration helpers — Shadowing Audio
"""

from typing import Sized


def samples_to_seconds(sample_count: int, sample_rate: int) -> float:
    """Seconds of audio for *sample_count* samples; 0.0 instead of dividing by zero."""
    if sample_count <= 0 or sample_rate <= 0:
        return 0.0
    return sample_count / sample_rate


def get_duration(samples: Sized | None, sample_rate: int) -> float:
    """Duration in seconds of a mono sample buffer."""
    if samples is None:
        return 0.0
    return samples_to_seconds(len(samples), sample_rate)
