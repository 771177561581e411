"""
src/pipeline.py
================
Recording Preparation Pipeline — Shadowing Audio

Responsibility:
    1. Collapse the captured buffer to mono
    2. Trim leading/trailing silence
    3. Peak-normalize
    4. Quantize to 16-bit PCM and write the WAV container
    5. Report what happened in a plain status record

Stage order:
    Downmix → Trim → Normalize → Quantize + Write

Error policy:
    Stages raise typed AudioValidationError subclasses. This layer catches
    them and returns a PreparedRecording with ``ok=False``, ``wav_bytes=b""``
    and the error kind. A partially written WAV is never returned. Telling
    the user ("recording too short") and re-recording is the caller's job.

This layer does NOT:
    - Touch the microphone or the network
    - Keep any state between calls
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from src.audio.downmix import downmix_to_mono
from src.audio.duration import get_duration
from src.audio.normalizer import DEFAULT_TARGET_PEAK, compute_gain, normalize_peak, peak_level
from src.audio.quantizer import quantize_pcm16
from src.audio.samples import AudioValidationError, SampleInput, validate_sample_rate
from src.audio.trimmer import DEFAULT_SILENCE_THRESHOLD, trim_silence
from src.audio.wav_writer import write_wav

logger = logging.getLogger("shadowing.pipeline")


# =====================================================================
# Status record
# =====================================================================


@dataclass(frozen=True)
class PreparedRecording:
    """Result of ``prepare_recording``: the WAV bytes plus what each stage did."""

    wav_bytes: bytes
    ok: bool
    error: str | None = None
    error_message: str | None = None
    sample_rate: int = 0
    channels: int = 1
    input_frames: int = 0
    output_samples: int = 0
    input_peak: float = 0.0
    gain: float = 1.0
    duration_seconds: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        """Status fields without the audio payload (for logs / debug panels)."""
        status = asdict(self)
        status.pop("wav_bytes")
        status["wav_size"] = len(self.wav_bytes)
        return status


# =====================================================================
# Public API
# =====================================================================


def prepare_recording(
    samples: SampleInput,
    sample_rate: int,
    channels: int = 1,
    *,
    trim: bool = True,
    normalize: bool = True,
    threshold: float = DEFAULT_SILENCE_THRESHOLD,
    padding_samples: int | None = None,
    target_peak: float = DEFAULT_TARGET_PEAK,
) -> PreparedRecording:
    """
    Condition a captured buffer and encode it as an upload-ready WAV.

    Args:
        samples:         Float samples from the capture device (interleaved
                         when *channels* > 1).
        sample_rate:     Capture rate in Hz; written through unchanged.
        channels:        Interleaved channel count of *samples*.
        trim:            Run the silence trimmer.
        normalize:       Run the peak normalizer.
        threshold:       Silence threshold for trimming.
        padding_samples: Guard band kept around the trimmed region
                         (default ~100 ms at *sample_rate*).
        target_peak:     Peak level for normalization.

    Returns:
        PreparedRecording. Never raises for invalid audio input.
    """
    try:
        rate = validate_sample_rate(sample_rate)
        mono = downmix_to_mono(samples, channels)
        input_frames = len(mono)

        if trim:
            mono = trim_silence(mono, rate, threshold=threshold, padding_samples=padding_samples)

        input_peak = peak_level(mono)
        gain = 1.0
        if normalize:
            gain = compute_gain(input_peak, target_peak)
            mono = normalize_peak(mono, target_peak)

        pcm = quantize_pcm16(mono)
        wav_bytes = write_wav(pcm, rate)

    except AudioValidationError as exc:
        logger.error("Recording preparation failed (%s): %s", exc.kind, exc)
        return PreparedRecording(
            wav_bytes=b"",
            ok=False,
            error=exc.kind,
            error_message=str(exc),
            sample_rate=sample_rate if isinstance(sample_rate, int) else 0,
            channels=channels if isinstance(channels, int) else 0,
        )

    result = PreparedRecording(
        wav_bytes=wav_bytes,
        ok=True,
        sample_rate=rate,
        channels=channels,
        input_frames=input_frames,
        output_samples=len(pcm),
        input_peak=round(float(input_peak), 6),
        gain=round(float(gain), 6),
        duration_seconds=get_duration(pcm, rate),
    )

    logger.info(
        "Recording prepared: %d -> %d samples @ %d Hz | %.2fs | gain=%.2f | %d bytes",
        input_frames, len(pcm), rate, result.duration_seconds, gain, len(wav_bytes),
    )
    return result


def synthesize_tone(
    frequency: float = 440.0,
    seconds: float = 1.0,
    sample_rate: int = 16000,
    amplitude: float = 0.5,
) -> np.ndarray:
    """Sine tone as float32 samples (stand-in for a capture in smoke runs and tests)."""
    n = int(seconds * sample_rate)
    t = np.arange(n, dtype=np.float64) / sample_rate
    return (amplitude * np.sin(2.0 * np.pi * frequency * t)).astype(np.float32)
