"""Energy envelope and onset detection for syllable segmentation.

This module provides energy-based methods for locating syllable nuclei
without requiring forced alignment or neural models.
"""

import numpy as np
from numpy.typing import NDArray


def compute_rms_energy(
    audio: NDArray[np.floating],
    frame_length: int = 320,  # 20ms at 16kHz
    hop_length: int = 160,  # 10ms at 16kHz
) -> NDArray[np.floating]:
    """Compute RMS energy per frame.

    Args:
        audio: Audio samples.
        frame_length: Analysis window length in samples.
        hop_length: Hop between frames in samples.

    Returns:
        RMS energy per frame, empty when the audio is shorter than one frame.
    """
    audio = np.asarray(audio, dtype=np.float64).reshape(-1)
    if len(audio) < frame_length or frame_length <= 0:
        return np.zeros(0)

    n_frames = 1 + (len(audio) - frame_length) // hop_length
    energy = np.zeros(n_frames)
    for i in range(n_frames):
        start = i * hop_length
        frame = audio[start : start + frame_length]
        energy[i] = np.sqrt(np.mean(frame**2))

    return energy


def moving_average(x: NDArray[np.floating], window: int = 7) -> NDArray[np.floating]:
    """Centered moving average; edges average over the frames available."""
    x = np.asarray(x, dtype=np.float64)
    if window <= 1 or len(x) == 0:
        return x.copy()
    half = window // 2
    csum = np.concatenate(([0.0], np.cumsum(x)))
    idx = np.arange(len(x))
    lo = np.maximum(0, idx - half)
    hi = np.minimum(len(x), idx + half + 1)
    return (csum[hi] - csum[lo]) / (hi - lo)


def energy_envelope(
    audio: NDArray[np.floating],
    sr: int = 16000,
    frame_ms: float = 20.0,
    hop_ms: float = 10.0,
    smooth_frames: int = 7,
) -> NDArray[np.floating]:
    """Smoothed RMS envelope normalized to a peak of 1.

    Args:
        audio: Audio samples.
        sr: Sample rate.
        frame_ms: RMS window in milliseconds.
        hop_ms: Hop in milliseconds.
        smooth_frames: Moving average width in frames.

    Returns:
        Envelope in [0, 1]; all zeros for silent input.
    """
    frame_length = max(1, int(sr * frame_ms / 1000))
    hop_length = max(1, int(sr * hop_ms / 1000))
    energy = moving_average(compute_rms_energy(audio, frame_length, hop_length), smooth_frames)
    peak = float(np.max(energy)) if len(energy) else 0.0
    if peak <= 0:
        return np.zeros_like(energy)
    return energy / peak


def detect_onsets(
    envelope: NDArray[np.floating],
    threshold: float = 0.25,
    min_distance_frames: int = 15,
    neighborhood: int = 2,
) -> list[int]:
    """Pick syllable nuclei as peaks of a normalized energy envelope.

    A frame is a peak when it exceeds the amplitude threshold and is strictly
    greater than every frame within ``neighborhood`` on either side. Peaks
    closer than ``min_distance_frames`` to an accepted peak are dropped in
    favour of the earlier one.

    Args:
        envelope: Normalized energy envelope.
        threshold: Minimum envelope value for a peak.
        min_distance_frames: Minimum spacing between accepted peaks.
        neighborhood: Half-width of the local-maximum test.

    Returns:
        Frame indices of accepted peaks, in time order.
    """
    peaks: list[int] = []
    n = len(envelope)
    for i in range(neighborhood, n - neighborhood):
        value = envelope[i]
        if value <= threshold:
            continue
        window = np.concatenate(
            (envelope[i - neighborhood : i], envelope[i + 1 : i + neighborhood + 1])
        )
        if not np.all(value > window):
            continue
        if peaks and i - peaks[-1] < min_distance_frames:
            continue
        peaks.append(i)
    return peaks


def valley_between(envelope: NDArray[np.floating], left: int, right: int) -> int:
    """Index of the envelope minimum strictly between two peaks."""
    if right - left <= 1:
        return (left + right) // 2
    return left + 1 + int(np.argmin(envelope[left + 1 : right]))
