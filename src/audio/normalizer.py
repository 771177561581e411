"""
src/audio/normalizer.py
========================
Peak Normalizer — Shadowing Audio

Responsibility:
    - Rescale a recording so its largest absolute sample hits a target peak
    - Cap the gain so very quiet recordings do not blow up the noise floor
    - Leave effectively silent recordings untouched
    - Keep NaN / Inf samples from poisoning the gain

Post-gain values are NOT clamped here; clamping happens in the quantizer.
"""

import logging

import numpy as np

from src.audio.samples import SampleInput, as_float_samples

logger = logging.getLogger("shadowing.audio.normalizer")


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_TARGET_PEAK: float = 0.9
MAX_GAIN: float = 10.0
SILENCE_PEAK_FLOOR: float = 0.001  # peaks below this are treated as silence


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def peak_level(samples: SampleInput) -> float:
    """Return ``max(abs(sample))`` over finite samples, or 0.0 when there are none."""
    data = np.asarray(samples, dtype=np.float32)
    finite = data[np.isfinite(data)]
    if finite.size == 0:
        return 0.0
    return float(np.max(np.abs(finite)))


def compute_gain(peak: float, target_peak: float = DEFAULT_TARGET_PEAK) -> float:
    """
    Gain that brings *peak* to *target_peak*, capped at MAX_GAIN.

    Returns 1.0 when *peak* is below SILENCE_PEAK_FLOOR.
    """
    if peak < SILENCE_PEAK_FLOOR:
        return 1.0
    return min(target_peak / peak, MAX_GAIN)


def normalize_peak(
    samples: SampleInput,
    target_peak: float = DEFAULT_TARGET_PEAK,
) -> np.ndarray:
    """
    Scale *samples* so the output peak equals ``min(target_peak, peak * 10)``.

    The peak is taken over finite samples only. Before scaling, NaN samples
    become 0.0 and +/-Inf samples become +/-peak, so they land on the
    scaled peak like any other full-scale sample.

    Args:
        samples:     Float samples.
        target_peak: Desired absolute peak after scaling.

    Returns:
        New float32 array with finite values only. Unscaled when the input
        peak is below SILENCE_PEAK_FLOOR.
    """
    data = as_float_samples(samples)
    peak = peak_level(data)

    non_finite = int(np.count_nonzero(~np.isfinite(data)))
    if non_finite:
        logger.warning("Replacing %d non-finite samples before normalization.", non_finite)
        data = np.nan_to_num(data, nan=0.0, posinf=peak, neginf=-peak).astype(np.float32, copy=False)

    if peak < SILENCE_PEAK_FLOOR:
        logger.debug("Peak %.5f below silence floor — skipping normalization.", peak)
        return data

    gain = compute_gain(peak, target_peak)
    normalized = (data * np.float32(gain)).astype(np.float32, copy=False)

    logger.debug("Normalized with gain: %.2f", gain)
    return normalized
