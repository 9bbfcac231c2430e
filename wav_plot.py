#!/usr/bin/env python3
"""
wav_plot.py

Waveform and magnitude-spectrum images for wav_cat --plot.
"""

import numpy as np

import matplotlib

matplotlib.use("Agg")
from matplotlib import pyplot as plt

WAVEFORM_FIGSIZE = (12.8, 7.2)
SPECTRUM_FIGSIZE = (19.2, 10.8)
PLOT_DPI = 100


def plot_waveform(samples, out_path, title="Audio Waveform"):
    samples = np.asarray(samples)
    fig, ax = plt.subplots(figsize=WAVEFORM_FIGSIZE, dpi=PLOT_DPI)
    ax.plot(np.arange(samples.size), samples, color="#1f77b4", lw=0.6, label="Waveform")
    ax.set_ylim(-1.0, 1.0)
    ax.set_title(title)
    ax.set_xlabel("Sample Index")
    ax.set_ylabel("Amplitude")
    ax.grid(True, ls="--", alpha=0.4)
    ax.legend(loc="upper right")
    fig.tight_layout()
    fig.savefig(out_path)
    plt.close(fig)


def plot_spectrum(frequencies, magnitudes, peaks, out_path, title="FFT Magnitude Spectrum"):
    """
    Magnitude spectrum with a marker and a frequency label for every peak.

    peaks holds (frequency_hz, magnitude, ...) tuples as returned by
    wav_spectrum.analyze or wav_spectrum.top_peaks.
    """
    frequencies = np.asarray(frequencies)
    magnitudes = np.asarray(magnitudes)
    fig, ax = plt.subplots(figsize=SPECTRUM_FIGSIZE, dpi=PLOT_DPI)
    ax.plot(frequencies, magnitudes, color="#d62728", lw=2, label="Magnitude")

    for peak in peaks:
        hz, mag = peak[0], peak[1]
        ax.vlines(hz, 0, mag, colors="#1f3fbf", lw=2, label=f"{hz:.1f} Hz")
        ax.annotate(
            f"{hz:.1f} Hz",
            xy=(hz, 0),
            xytext=(0, -14),
            textcoords="offset points",
            ha="center",
            fontsize=9,
        )

    if frequencies.size and frequencies[-1] > 0:
        ax.set_xlim(0, frequencies[-1])
    ax.set_ylim(bottom=0)
    ax.set_title(title)
    ax.set_xlabel("Frequency (Hz)")
    ax.set_ylabel("Magnitude")
    ax.legend(loc="upper left", framealpha=0.8)
    fig.tight_layout()
    fig.savefig(out_path)
    plt.close(fig)
