"""
Spectral stages of the pipeline: Hann taper, radix-2 FFT magnitudes and
exponential smoothing between frames.
"""

import math

import numpy as np

from glassline.errors import InvalidTransformSize


def is_power_of_two(n):
    return n > 0 and (n & (n - 1)) == 0


def _fft(x):
    """Recursive Cooley-Tukey, decimation in time."""
    n = len(x)
    if n <= 1:
        return x

    even = _fft(x[0::2])
    odd = _fft(x[1::2])

    twiddle = np.exp(-2j * np.pi * np.arange(n // 2) / n) * odd
    return np.concatenate([even + twiddle, even - twiddle])


def transform(samples):
    """
    Returns the first N/2 magnitude bins of a real block of N samples.
    Bin 0 is DC; the upper half mirrors the lower half for real input and is dropped.
    """
    data = np.asarray(samples, dtype=np.float64)
    n = len(data)
    if not is_power_of_two(n):
        raise InvalidTransformSize(n)

    spectrum = _fft(data.astype(np.complex128))
    return np.abs(spectrum[: n // 2])


def apply_hann(window):
    """
    Tapers a copy of the window so the sliding buffer stays untouched.
    """
    data = np.asarray(window, dtype=np.float64)
    n = len(data)
    if n < 2:
        raise InvalidTransformSize(n)

    taper = 0.5 * (1.0 - np.cos(2.0 * np.pi * np.arange(n) / (n - 1)))
    return data * taper


def smooth(previous, incoming, alpha):
    """
    Exponential moving average per bin.
    smoothed = previous * alpha + incoming * (1 - alpha)

    Higher alpha keeps more of the previous frame. A missing or differently
    sized previous frame (first call, block size change) yields `incoming`,
    as does one holding NaN or infinite bins.
    """
    incoming = np.asarray(incoming, dtype=np.float64)
    if previous is None or len(previous) != len(incoming) or not np.all(np.isfinite(previous)):
        return incoming.copy()

    alpha = float(alpha)
    if not math.isfinite(alpha):
        return incoming.copy()
    alpha = min(max(alpha, 0.0), 1.0)
    return np.asarray(previous, dtype=np.float64) * alpha + incoming * (1.0 - alpha)
