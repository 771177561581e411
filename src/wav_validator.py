"""
src/wav_validator.py
=====================
WAV Output Validator — Shadowing Audio

Responsibility:
    - Parse the 44-byte header of an encoded recording
    - Verify every header field against the canonical mono 16-bit layout
    - FAIL FAST with the offending field name if anything is inconsistent
    - Read PCM data back as float samples (tests, pre-upload checks)

This module does NOT:
    - Repair malformed buffers
    - Accept compressed, multi-channel or non-16-bit WAV files
"""

import io
import logging
import wave
from dataclasses import dataclass

import numpy as np

from src.audio.wav_writer import (
    BITS_PER_SAMPLE,
    BYTES_PER_SAMPLE,
    FMT_CHUNK_SIZE,
    HEADER_SIZE,
    NUM_CHANNELS,
    PCM_FORMAT_TAG,
    HEADER_STRUCT,
)

logger = logging.getLogger("shadowing.wav_validator")


# =====================================================================
# Custom exception for verification failures
# =====================================================================


class WavVerificationError(Exception):
    """Raised when an encoded WAV buffer fails verification."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"WAV field {field} verification failed: {message}")


@dataclass(frozen=True)
class WavHeader:
    chunk_id: bytes
    chunk_size: int
    format: bytes
    fmt_id: bytes
    fmt_size: int
    audio_format: int
    num_channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_id: bytes
    data_size: int

    @property
    def sample_count(self) -> int:
        return self.data_size // BYTES_PER_SAMPLE


# =====================================================================
# Parsing
# =====================================================================


def read_wav_header(wav_bytes: bytes) -> WavHeader:
    """
    Unpack the canonical 44-byte header.

    Raises:
        WavVerificationError: If the buffer is shorter than the header.
    """
    if len(wav_bytes) < HEADER_SIZE:
        raise WavVerificationError(
            "header", f"Expected at least {HEADER_SIZE} bytes, got {len(wav_bytes)}"
        )
    return WavHeader(*HEADER_STRUCT.unpack_from(wav_bytes, 0))


# =====================================================================
# Verification
# =====================================================================


def verify_wav_bytes(wav_bytes: bytes, expected_sample_rate: int | None = None) -> WavHeader:
    """
    Verify an encoded recording.

    Checks:
        - RIFF / WAVE / fmt / data tags
        - ChunkSize == 36 + data_size and total length == 44 + data_size
        - PCM format, mono, 16 bits, block align 2, byte rate = rate * 2
        - Sample rate positive (and equal to *expected_sample_rate* if given)

    Returns:
        The parsed WavHeader.

    Raises:
        WavVerificationError: If any check fails.
    """
    header = read_wav_header(wav_bytes)

    for name, actual, expected in (
        ("ChunkID", header.chunk_id, b"RIFF"),
        ("Format", header.format, b"WAVE"),
        ("Subchunk1ID", header.fmt_id, b"fmt "),
        ("Subchunk2ID", header.data_id, b"data"),
    ):
        if actual != expected:
            raise WavVerificationError(name, f"Expected {expected!r}, got {actual!r}")

    if header.fmt_size != FMT_CHUNK_SIZE:
        raise WavVerificationError("Subchunk1Size", f"Expected 16, got {header.fmt_size}")
    if header.audio_format != PCM_FORMAT_TAG:
        raise WavVerificationError("AudioFormat", f"Expected PCM (1), got {header.audio_format}")
    if header.num_channels != NUM_CHANNELS:
        raise WavVerificationError("NumChannels", f"Expected mono, got {header.num_channels}")
    if header.bits_per_sample != BITS_PER_SAMPLE:
        raise WavVerificationError(
            "BitsPerSample", f"Expected 16, got {header.bits_per_sample}"
        )
    if header.block_align != NUM_CHANNELS * BYTES_PER_SAMPLE:
        raise WavVerificationError("BlockAlign", f"Expected 2, got {header.block_align}")

    if header.sample_rate <= 0:
        raise WavVerificationError("SampleRate", "Sample rate is zero")
    if expected_sample_rate is not None and header.sample_rate != expected_sample_rate:
        raise WavVerificationError(
            "SampleRate", f"Expected {expected_sample_rate}, got {header.sample_rate}"
        )
    if header.byte_rate != header.sample_rate * header.block_align:
        raise WavVerificationError(
            "ByteRate",
            f"Expected {header.sample_rate * header.block_align}, got {header.byte_rate}",
        )

    if header.data_size % BYTES_PER_SAMPLE != 0:
        raise WavVerificationError("Subchunk2Size", f"Odd data size {header.data_size}")
    if header.chunk_size != 36 + header.data_size:
        raise WavVerificationError(
            "ChunkSize", f"Expected {36 + header.data_size}, got {header.chunk_size}"
        )
    if len(wav_bytes) != HEADER_SIZE + header.data_size:
        raise WavVerificationError(
            "Data",
            f"Buffer is {len(wav_bytes)} bytes, header declares {HEADER_SIZE + header.data_size}",
        )

    logger.debug("WAV verified: %d samples @ %d Hz", header.sample_count, header.sample_rate)
    return header


# =====================================================================
# Read-back
# =====================================================================


def decode_pcm16(wav_bytes: bytes) -> np.ndarray:
    """Read PCM data as float32 in [-1.0, 1.0] (inverse of the quantizer scale)."""
    buf = io.BytesIO(wav_bytes)
    with wave.open(buf, "rb") as wf:
        n_frames = wf.getnframes()
        raw_pcm = wf.readframes(n_frames)

    pcm = np.frombuffer(raw_pcm, dtype="<i2").astype(np.float32)
    return pcm / np.float32(32767.0)
