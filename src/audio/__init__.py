# src/audio/__init__.py
# ======================
# Audio Conditioning Layer — Shadowing Audio
#
# Stages (each a pure function returning a new buffer):
#   1. downmix_to_mono   — interleaved channels → mono
#   2. trim_silence      — drop leading/trailing near-silence (+ padding)
#   3. normalize_peak    — scale to target peak, gain capped at 10x
#   4. quantize_pcm16    — clamp + truncate to int16
#   5. write_wav         — canonical 44-byte RIFF/WAVE container
#
# Public API:
#   encode_wav(samples, sample_rate) → bytes   (b"" on failure)

from src.audio.samples import (  # noqa: F401
    AudioValidationError,
    EmptyInputError,
    InvalidChannelCountError,
    InvalidSampleRateError,
    SampleBuffer,
)
from src.audio.downmix import downmix_to_mono  # noqa: F401
from src.audio.trimmer import trim_silence  # noqa: F401
from src.audio.normalizer import normalize_peak  # noqa: F401
from src.audio.quantizer import quantize_pcm16  # noqa: F401
from src.audio.wav_writer import (  # noqa: F401
    build_wav_header,
    encode_interleaved,
    encode_wav,
    write_wav,
)
from src.audio.duration import get_duration, samples_to_seconds  # noqa: F401

__all__ = [
    "AudioValidationError",
    "EmptyInputError",
    "InvalidChannelCountError",
    "InvalidSampleRateError",
    "SampleBuffer",
    "downmix_to_mono",
    "trim_silence",
    "normalize_peak",
    "quantize_pcm16",
    "build_wav_header",
    "write_wav",
    "encode_wav",
    "encode_interleaved",
    "get_duration",
    "samples_to_seconds",
]
