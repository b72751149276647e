"""FFT helpers."""

from __future__ import annotations

from typing import Callable, Dict

import numpy as np
from numpy.typing import ArrayLike
from scipy.signal import windows

PowerSpectrumFn = Callable[[np.ndarray], np.ndarray]


def as_signal_block(signal: ArrayLike) -> np.ndarray:
    arr = np.asarray(signal, dtype=float)
    if arr.size == 0:
        raise ValueError("signal must contain at least one sample")
    if arr.ndim != 1:
        raise ValueError(f"signal must be 1-D, got shape {arr.shape}")
    return arr


def hann_window(length: int) -> np.ndarray:
    """
    Symmetric Hann window ``w[n] = 0.5 * (1 - cos(2*pi*n / (N - 1)))``.

    Parameters
    ----------
    length:
        Number of points. Must be >= 2.
    """
    if length < 2:
        raise ValueError(f"length must be >= 2, got {length}")
    return windows.hann(int(length), sym=True)


def dft_power(signal: ArrayLike) -> np.ndarray:
    """
    One-sided power spectrum by direct summation over bins ``k = 0..N//2``.

    ``re(k) = sum x[n] cos(2*pi*k*n/N)``, ``im(k) = -sum x[n] sin(2*pi*k*n/N)``
    and ``power(k) = re(k)**2 + im(k)**2``. The input is used as-is (apply any
    window beforehand). This is the reference definition; :func:`fft_power`
    yields the same values faster.
    """
    x = as_signal_block(signal)
    n_samples = x.size
    k = np.arange(n_samples // 2 + 1, dtype=float)[:, np.newaxis]
    n = np.arange(n_samples, dtype=float)[np.newaxis, :]
    angle = 2.0 * np.pi * k * n / n_samples
    re = np.cos(angle) @ x
    im = -(np.sin(angle) @ x)
    return re * re + im * im


def fft_power(signal: ArrayLike) -> np.ndarray:
    """One-sided power spectrum via ``numpy.fft.rfft`` (same bins as :func:`dft_power`)."""
    x = as_signal_block(signal)
    spectrum = np.fft.rfft(x)
    return spectrum.real * spectrum.real + spectrum.imag * spectrum.imag


def bin_frequencies(n_samples: int, sample_rate_hz: float) -> np.ndarray:
    """Frequency of each one-sided bin: ``f(k) = k * fs / N``."""
    if sample_rate_hz <= 0:
        raise ValueError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")
    if n_samples <= 0:
        raise ValueError(f"n_samples must be > 0, got {n_samples}")
    return np.arange(n_samples // 2 + 1, dtype=float) * float(sample_rate_hz) / n_samples


TRANSFORMS: Dict[str, PowerSpectrumFn] = {
    "dft": dft_power,
    "fft": fft_power,
}


def windowed_power_spectrum(
    signal: ArrayLike,
    sample_rate_hz: float,
    *,
    transform: str = "fft",
) -> tuple[np.ndarray, np.ndarray]:
    """
    Apply a Hann window and return ``(freqs, power)`` for the one-sided spectrum.

    Parameters
    ----------
    signal:
        1-D block of centered samples (length >= 2).
    sample_rate_hz:
        Sampling rate in Hz. Must be > 0.
    transform:
        ``"fft"`` (default) or ``"dft"`` for the direct-summation reference.
    """
    x = as_signal_block(signal)
    try:
        power_fn = TRANSFORMS[transform]
    except KeyError:
        raise ValueError(f"unknown transform {transform!r}") from None
    power = power_fn(x * hann_window(x.size))
    freqs = bin_frequencies(x.size, sample_rate_hz)
    return freqs, power
