"""
tests/test_audio_stages.py
===========================
Audio Conditioning Stage Tests — Shadowing Audio

Tests verify:
    1. Channel downmix (mean per frame, channel-count validation)
    2. Silence trimming (threshold scan, padding, pure-silence no-op)
    3. Peak normalization (target peak, gain cap, silence floor, idempotence)
    4. PCM quantization (clamp, truncation toward zero, non-finite input)
    5. Duration helpers
    6. Input level meter and auto-stop decision

All tests are OFFLINE — no microphone, no network.
"""

import os
import sys
import unittest

import numpy as np

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from src.audio.downmix import downmix_to_mono
from src.audio.duration import get_duration, samples_to_seconds
from src.audio.level import input_level, level_history, should_auto_stop
from src.audio.normalizer import MAX_GAIN, compute_gain, normalize_peak, peak_level
from src.audio.quantizer import quantize_pcm16
from src.audio.samples import (
    EmptyInputError,
    InvalidChannelCountError,
    InvalidSampleRateError,
    SampleBuffer,
    validate_sample_rate,
)
from src.audio.trimmer import default_padding, trim_silence


# ===================================================================
# SampleBuffer / validation
# ===================================================================


class TestSampleBuffer(unittest.TestCase):

    def test_copies_input_as_float32(self):
        source = np.array([0.1, 0.2, 0.3, 0.4], dtype=np.float64)
        buf = SampleBuffer(source, sample_rate=16000, channels=2)
        self.assertEqual(buf.samples.dtype, np.float32)
        self.assertFalse(np.shares_memory(buf.samples, source))
        self.assertEqual(buf.frame_count, 2)

    def test_duration(self):
        buf = SampleBuffer(np.zeros(8000), sample_rate=16000)
        self.assertAlmostEqual(buf.duration, 0.5)

    def test_validate_sample_rate(self):
        self.assertEqual(validate_sample_rate(44100), 44100)
        for bad in (0, -16000, 16000.0, True, None):
            with self.assertRaises(InvalidSampleRateError):
                validate_sample_rate(bad)

    def test_sample_rate_overflowing_byte_rate_rejected(self):
        with self.assertRaises(InvalidSampleRateError):
            validate_sample_rate(2**31)


# ===================================================================
# Downmix
# ===================================================================


class TestDownmix(unittest.TestCase):

    def test_stereo_average(self):
        mono = downmix_to_mono([0.2, 0.4, -1.0, 1.0, 0.5, 0.5], channels=2)
        np.testing.assert_allclose(mono, [0.3, 0.0, 0.5], atol=1e-6)
        self.assertEqual(mono.dtype, np.float32)

    def test_three_channels(self):
        mono = downmix_to_mono([0.3, 0.6, 0.9], channels=3)
        np.testing.assert_allclose(mono, [0.6], atol=1e-6)

    def test_mono_returns_fresh_copy(self):
        source = np.array([0.1, -0.1], dtype=np.float32)
        mono = downmix_to_mono(source, channels=1)
        np.testing.assert_array_equal(mono, source)
        self.assertFalse(np.shares_memory(mono, source))

    def test_invalid_channel_count(self):
        for channels in (0, -2):
            with self.assertRaises(InvalidChannelCountError):
                downmix_to_mono([0.1, 0.2], channels=channels)

    def test_length_not_multiple_of_channels(self):
        with self.assertRaises(InvalidChannelCountError) as ctx:
            downmix_to_mono([0.1, 0.2, 0.3, 0.4, 0.5], channels=2)
        self.assertEqual(ctx.exception.kind, "InvalidChannelCount")


# ===================================================================
# Silence trimming
# ===================================================================


class TestTrimSilence(unittest.TestCase):

    def test_trims_to_loud_region_without_padding(self):
        trimmed = trim_silence([0, 0, 0.5, -0.5, 0, 0], threshold=0.01, padding_samples=0)
        np.testing.assert_array_equal(trimmed, np.array([0.5, -0.5], dtype=np.float32))

    def test_padding_is_kept_around_sound(self):
        x = np.zeros(100, dtype=np.float32)
        x[40] = 0.5
        x[60] = -0.3
        trimmed = trim_silence(x, threshold=0.01, padding_samples=5)
        np.testing.assert_array_equal(trimmed, x[35:66])

    def test_padding_clamped_to_bounds(self):
        x = [0.5, 0.0, 0.0, 0.0]
        trimmed = trim_silence(x, threshold=0.01, padding_samples=10)
        self.assertEqual(len(trimmed), 4)

    def test_default_padding_is_100ms(self):
        self.assertEqual(default_padding(16000), 1600)
        self.assertEqual(default_padding(48000), 4800)

        x = np.zeros(5000, dtype=np.float32)
        x[2000] = 0.5
        trimmed = trim_silence(x, sample_rate=16000)
        self.assertEqual(len(trimmed), 3201)

    def test_pure_silence_returned_unmodified(self):
        x = np.full(50, 0.005, dtype=np.float32)
        trimmed = trim_silence(x, threshold=0.01, padding_samples=0)
        np.testing.assert_array_equal(trimmed, x)
        self.assertFalse(np.shares_memory(trimmed, x))

    def test_empty_buffer(self):
        self.assertEqual(len(trim_silence([], padding_samples=0)), 0)

    def test_threshold_is_inclusive(self):
        trimmed = trim_silence([0.0, 0.5, 0.25, 0.0], threshold=0.5, padding_samples=0)
        np.testing.assert_array_equal(trimmed, np.array([0.5], dtype=np.float32))

    def test_trim_bound_property(self):
        rng = np.random.default_rng(7)
        x = np.concatenate([
            rng.uniform(-0.009, 0.009, 300),
            rng.uniform(-0.8, 0.8, 500),
            rng.uniform(-0.009, 0.009, 300),
        ]).astype(np.float32)
        threshold, padding = 0.01, 20

        trimmed = trim_silence(x, threshold=threshold, padding_samples=padding)
        self.assertLessEqual(len(trimmed), len(x))

        loud = np.flatnonzero(np.abs(x) >= threshold)
        start = max(0, loud[0] - padding)
        end = min(len(x) - 1, loud[-1] + padding)
        excluded = np.concatenate([x[:start], x[end + 1:]])
        self.assertTrue(np.all(np.abs(excluded) < threshold))
        np.testing.assert_array_equal(trimmed, x[start:end + 1])

    def test_negative_arguments_rejected(self):
        with self.assertRaises(ValueError):
            trim_silence([0.1], threshold=-0.1)
        with self.assertRaises(ValueError):
            trim_silence([0.1], padding_samples=-1)


# ===================================================================
# Normalization
# ===================================================================


class TestNormalizePeak(unittest.TestCase):

    def test_scales_to_target_peak(self):
        out = normalize_peak([0.1, -0.2, 0.05], target_peak=0.9)
        self.assertAlmostEqual(peak_level(out), 0.9, places=6)
        np.testing.assert_allclose(out, [0.45, -0.9, 0.225], rtol=1e-6)

    def test_gain_capped_at_ten(self):
        out = normalize_peak([0.01, -0.02], target_peak=0.9)
        self.assertAlmostEqual(peak_level(out), 0.2, places=6)
        self.assertEqual(compute_gain(0.02, 0.9), MAX_GAIN)

    def test_silence_left_unchanged(self):
        source = np.array([0.0005, -0.0009, 0.0], dtype=np.float32)
        out = normalize_peak(source)
        np.testing.assert_array_equal(out, source)
        self.assertFalse(np.shares_memory(out, source))
        self.assertEqual(compute_gain(0.0009), 1.0)

    def test_empty_buffer(self):
        self.assertEqual(len(normalize_peak([])), 0)

    def test_does_not_clamp(self):
        out = normalize_peak([0.5, -0.1], target_peak=1.5)
        self.assertAlmostEqual(float(out[0]), 1.5, places=6)

    def test_idempotent(self):
        rng = np.random.default_rng(3)
        x = rng.uniform(-0.3, 0.3, 1000).astype(np.float32)
        once = normalize_peak(x, 0.9)
        twice = normalize_peak(once, 0.9)
        np.testing.assert_allclose(twice, once, atol=1e-6)

    def test_nan_ignored_for_peak(self):
        out = normalize_peak([0.1, np.nan, -0.2], target_peak=0.9)
        self.assertTrue(np.all(np.isfinite(out)))
        np.testing.assert_allclose(out, [0.45, 0.0, -0.9], rtol=1e-6)
        self.assertAlmostEqual(peak_level([0.1, np.nan, -0.2]), 0.2, places=6)

    def test_inf_lands_on_target_peak(self):
        out = normalize_peak([0.1, np.inf, -0.2, -np.inf], target_peak=0.9)
        self.assertTrue(np.all(np.isfinite(out)))
        np.testing.assert_allclose(out, [0.45, 0.9, -0.9, -0.9], rtol=1e-6)

    def test_all_non_finite_is_silence(self):
        self.assertEqual(peak_level([np.nan, np.inf]), 0.0)
        out = normalize_peak([np.nan, np.nan])
        np.testing.assert_array_equal(out, [0.0, 0.0])

    def test_input_not_mutated(self):
        source = [0.1, -0.2, 0.05]
        normalize_peak(source)
        self.assertEqual(source, [0.1, -0.2, 0.05])


# ===================================================================
# Quantization
# ===================================================================


class TestQuantizePcm16(unittest.TestCase):

    def test_full_scale(self):
        pcm = quantize_pcm16([1.0, -1.0, 0.0])
        self.assertEqual(pcm.dtype, np.int16)
        self.assertEqual(pcm.tolist(), [32767, -32767, 0])

    def test_truncates_toward_zero(self):
        # 0.5 * 32767 = 16383.5
        self.assertEqual(quantize_pcm16([0.5, -0.5]).tolist(), [16383, -16383])

    def test_clamps_out_of_range(self):
        self.assertEqual(quantize_pcm16([2.0, -3.0]).tolist(), [32767, -32767])

    def test_non_finite_values(self):
        pcm = quantize_pcm16([np.nan, np.inf, -np.inf])
        self.assertEqual(pcm.tolist(), [0, 32767, -32767])

    def test_empty_input(self):
        with self.assertRaises(EmptyInputError) as ctx:
            quantize_pcm16([])
        self.assertEqual(ctx.exception.kind, "EmptyInput")

    def test_quantization_error_bound(self):
        rng = np.random.default_rng(11)
        x = rng.uniform(-1.5, 1.5, 5000).astype(np.float32)
        clamped = np.clip(x, -1.0, 1.0).astype(np.float64)
        decoded = quantize_pcm16(x).astype(np.float64) / 32767.0
        self.assertLessEqual(float(np.max(np.abs(decoded - clamped))), 1.0 / 32767.0 + 1e-7)


# ===================================================================
# Duration
# ===================================================================


class TestDuration(unittest.TestCase):

    def test_empty_is_zero(self):
        self.assertEqual(get_duration([], 16000), 0)

    def test_one_second(self):
        self.assertEqual(get_duration(np.zeros(16000), 16000), 1.0)

    def test_no_division_by_zero(self):
        self.assertEqual(samples_to_seconds(100, 0), 0.0)
        self.assertEqual(samples_to_seconds(100, -8000), 0.0)
        self.assertEqual(get_duration(None, 16000), 0.0)

    def test_fractional(self):
        self.assertAlmostEqual(samples_to_seconds(8000, 16000), 0.5)


# ===================================================================
# Level meter / auto-stop
# ===================================================================


class TestLevel(unittest.TestCase):

    def test_silence_level_zero(self):
        self.assertEqual(input_level(np.zeros(512)), 0.0)
        self.assertEqual(input_level([]), 0.0)

    def test_level_scaled_and_clamped(self):
        self.assertAlmostEqual(input_level(np.full(256, 0.1)), 0.4, places=5)
        self.assertEqual(input_level(np.full(300, 0.5)), 1.0)

    def test_level_uses_trailing_window(self):
        x = np.concatenate([np.full(1000, 0.9), np.zeros(256)])
        self.assertEqual(input_level(x), 0.0)

    def test_level_history_matches_meter(self):
        rng = np.random.default_rng(5)
        x = rng.uniform(-0.2, 0.2, 700).astype(np.float32)
        history = level_history(x)
        self.assertEqual(history.shape, (700,))
        for i in (0, 10, 255, 256, 699):
            self.assertAlmostEqual(history[i], input_level(x[:i + 1]), places=5)

    def test_single_click_is_not_speech(self):
        x = np.zeros(3000, dtype=np.float32)
        x[1000] = 0.5
        self.assertLess(float(np.max(level_history(x))), 0.01)
        self.assertFalse(should_auto_stop(x, sample_rate=1000))

    def test_non_finite_samples_do_not_poison_meter(self):
        x = np.concatenate([np.full(500, 0.5), [np.nan], np.zeros(2000)])
        self.assertTrue(np.all(np.isfinite(level_history(x))))
        self.assertTrue(should_auto_stop(x, sample_rate=1000))

    def test_too_short_never_stops(self):
        self.assertFalse(should_auto_stop(np.full(300, 0.5), sample_rate=1000))

    def test_stops_after_trailing_silence(self):
        x = np.concatenate([np.full(500, 0.5), np.zeros(2000)])
        self.assertTrue(should_auto_stop(x, sample_rate=1000))

    def test_keeps_recording_during_short_pause(self):
        x = np.concatenate([np.full(500, 0.5), np.zeros(1000)])
        self.assertFalse(should_auto_stop(x, sample_rate=1000))

    def test_silence_without_speech_keeps_recording(self):
        self.assertFalse(should_auto_stop(np.zeros(3000), sample_rate=1000))

    def test_max_duration_stops(self):
        self.assertTrue(should_auto_stop(np.full(1000, 0.5), sample_rate=100))


if __name__ == "__main__":
    unittest.main()
