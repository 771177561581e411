"""
src/audio/wav_writer.py
========================
WAV Container Writer — Shadowing Audio

Responsibility:
    - Serialize 16-bit PCM samples into a canonical RIFF/WAVE byte buffer
      (44-byte header followed by little-endian sample data)
    - Provide the float -> WAV convenience encoders used by the recorder

Layout (all integers little-endian):

    offset  size  field           value
    0       4     ChunkID         "RIFF"
    4       4     ChunkSize       36 + data_size
    8       4     Format          "WAVE"
    12      4     Subchunk1ID     "fmt "
    16      4     Subchunk1Size   16
    20      2     AudioFormat     1 (PCM)
    22      2     NumChannels     1
    24      4     SampleRate      sample_rate
    28      4     ByteRate        sample_rate * 2
    32      2     BlockAlign      2
    34      2     BitsPerSample   16
    36      4     Subchunk2ID     "data"
    40      4     Subchunk2Size   data_size = n_samples * 2
    44      ...   Data            int16 samples

Output length is always ``44 + 2 * n_samples``.

This module does NOT:
    - Write multi-channel or non-16-bit audio
    - Stream or append to an existing buffer
    - Resample
"""

import logging
import struct

import numpy as np

from src.audio.downmix import downmix_to_mono
from src.audio.quantizer import quantize_pcm16
from src.audio.samples import (
    AudioValidationError,
    EmptyInputError,
    SampleInput,
    validate_sample_rate,
)

logger = logging.getLogger("shadowing.audio.wav_writer")


# ---------------------------------------------------------------------------
# Encoding parameters (fixed for this format)
# ---------------------------------------------------------------------------

NUM_CHANNELS = 1
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
PCM_FORMAT_TAG = 1
FMT_CHUNK_SIZE = 16
HEADER_SIZE = 44

HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")

# ChunkSize (36 + data_size) must fit in uint32
MAX_SAMPLES = (0xFFFFFFFF - 36) // BYTES_PER_SAMPLE


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


def build_wav_header(n_samples: int, sample_rate: int) -> bytes:
    """
    Pack the 44-byte RIFF/WAVE header for *n_samples* mono 16-bit samples.

    Raises:
        InvalidSampleRateError: If *sample_rate* is not usable.
        TypeError:              If *pcm* is not int16 (float input must go
                                through quantize_pcm16 first).
        AudioValidationError:   If the data would overflow the size fields.
    """
    sample_rate = validate_sample_rate(sample_rate)
    if n_samples < 0 or n_samples > MAX_SAMPLES:
        raise AudioValidationError(
            f"Sample count {n_samples} does not fit a WAV container (max {MAX_SAMPLES})."
        )

    data_size = n_samples * BYTES_PER_SAMPLE
    block_align = NUM_CHANNELS * BYTES_PER_SAMPLE
    byte_rate = sample_rate * block_align

    return HEADER_STRUCT.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        FMT_CHUNK_SIZE,
        PCM_FORMAT_TAG,
        NUM_CHANNELS,
        sample_rate,
        byte_rate,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


def write_wav(pcm: np.ndarray, sample_rate: int) -> bytes:
    """
    Assemble header + data for already-quantized int16 samples.

    The buffer is built in one pass; on any validation failure nothing is
    returned.

    Raises:
        EmptyInputError:        If *pcm* is empty.
        InvalidSampleRateError: If *sample_rate* is not usable.
        TypeError:              If *pcm* is not int16.
    """
    pcm = np.asarray(pcm)
    if pcm.size == 0:
        raise EmptyInputError("No PCM samples to write.")
    if pcm.dtype != np.int16:
        raise TypeError(f"write_wav expects int16 PCM, got {pcm.dtype}; quantize first.")

    header = build_wav_header(pcm.size, sample_rate)
    data = pcm.reshape(-1).astype("<i2", copy=False).tobytes()
    return header + data


def encode_wav(samples: SampleInput, sample_rate: int) -> bytes:
    """
    Quantize mono float samples and wrap them in a WAV container.

    Follows the recorder's fail-local policy: instead of raising, an
    invalid request is logged and an empty ``bytes`` object is returned,
    so a corrupt or partial WAV is never handed to the uploader.

    Args:
        samples:     Mono float samples (values outside [-1, 1] are clamped).
        sample_rate: Sample rate in Hz, written through unchanged.

    Returns:
        WAV bytes of length ``44 + 2 * len(samples)``, or ``b""`` on failure.
    """
    try:
        validate_sample_rate(sample_rate)
        pcm = quantize_pcm16(samples)
        wav_bytes = write_wav(pcm, sample_rate)
    except AudioValidationError as exc:
        logger.error("No samples encoded (%s): %s", type(exc).__name__, exc)
        return b""

    logger.debug("WAV encoded: %d bytes (%d samples @ %d Hz)",
                 len(wav_bytes), len(pcm), sample_rate)
    return wav_bytes


def encode_interleaved(samples: SampleInput, sample_rate: int, channels: int) -> bytes:
    """
    Downmix interleaved multi-channel samples to mono, then ``encode_wav``.

    Returns ``b""`` on any validation failure, including a bad channel count.
    """
    try:
        mono = downmix_to_mono(samples, channels)
    except AudioValidationError as exc:
        logger.error("No samples encoded (%s): %s", type(exc).__name__, exc)
        return b""
    return encode_wav(mono, sample_rate)
