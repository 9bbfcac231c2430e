#!/usr/bin/env python3
"""
wav_spectrum.py

Sample analysis on top of a parsed WAV: normalise the 16-bit sample stream,
downsample it and pick the strongest FFT magnitude bins, labelled with the
nearest musical note.

Samples are analysed exactly as stored in the data chunk, so multi-channel
files are analysed interleaved.
"""

import librosa
import numpy as np

DEFAULT_DOWNSAMPLE_STEP = 16
DEFAULT_TOP_PEAKS = 5
INT16_SCALE = 32768.0


def normalized_samples(samples):
    """int16 samples -> float32 in [-1.0, 1.0)."""
    return np.asarray(samples, dtype=np.int16).astype(np.float32) / INT16_SCALE


def downsample(samples, step=DEFAULT_DOWNSAMPLE_STEP):
    if step < 1:
        raise ValueError(f"downsample step must be >= 1, got {step}")
    return np.asarray(samples)[::step]


def magnitude_spectrum(samples, sample_rate):
    """
    FFT magnitude spectrum of a real signal.

    The signal is zero-padded to the next power of two and only the first
    half of the bins (up to Nyquist) is kept.

    Returns:
        (frequencies, magnitudes) as numpy arrays of equal length
    """
    samples = np.asarray(samples, dtype=np.float32)
    if samples.size == 0:
        return np.zeros(0), np.zeros(0)

    fft_size = 1 << (samples.size - 1).bit_length()
    spectrum = np.fft.fft(samples, n=fft_size)[: fft_size // 2]
    magnitudes = np.abs(spectrum)
    frequencies = np.arange(magnitudes.size) * (sample_rate / fft_size)
    return frequencies, magnitudes


def top_peaks(frequencies, magnitudes, count=DEFAULT_TOP_PEAKS):
    """
    Strongest bins, loudest first. Bins with zero magnitude are never peaks.

    Returns:
        list of (frequency_hz, magnitude)
    """
    magnitudes = np.asarray(magnitudes)
    order = np.argsort(-magnitudes, kind="stable")[:count]
    return [(float(frequencies[i]), float(magnitudes[i])) for i in order if magnitudes[i] > 0]


def note_name(frequency):
    if frequency is None or frequency <= 0:
        return None
    return librosa.hz_to_note(frequency, unicode=False)


def analyze(fields, step=DEFAULT_DOWNSAMPLE_STEP, count=DEFAULT_TOP_PEAKS):
    """
    Spectrum of the data chunk of a parsed WAV.

    Args:
        fields: ParsedFields from wav_spec.parse_wav
        step: keep every step-th sample before the FFT
        count: number of peaks to report

    Returns:
        dict with the downsampled normalised samples, the effective sample
        rate after downsampling, frequencies, magnitudes and
        peaks [(frequency_hz, magnitude, note)]
    """
    sample_rate = fields.value("fmt.sample_rate")
    if not sample_rate:
        raise ValueError("no fmt chunk with a sample rate")

    samples = downsample(normalized_samples(fields.value("data.samples", ())), step)
    effective_rate = sample_rate / step
    frequencies, magnitudes = magnitude_spectrum(samples, effective_rate)
    peaks = [
        (hz, mag, note_name(hz))
        for hz, mag in top_peaks(frequencies, magnitudes, count)
    ]

    return {
        "samples": samples,
        "sample_rate": effective_rate,
        "frequencies": frequencies,
        "magnitudes": magnitudes,
        "peaks": peaks,
    }
