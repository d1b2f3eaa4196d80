"""Pitch extraction and semitone conversion.

This module provides the frame-level F0 analysis the accent pipeline is
built on:
- Extract F0 per window with the YIN cumulative mean normalized difference
- Remove octave jumps with a median filter over voiced frames
- Convert F0 between Hz and semitones (A4 = 440 Hz reference)

Extraction is deterministic: the same buffer and configuration always
produce the same contour.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .types import PitchContour, PitchFrame

logger = logging.getLogger(__name__)

A4_HZ = 440.0


@dataclass
class PitchExtractorConfig:
    """Configuration for the YIN pitch extractor."""

    fmin: float = 75.0
    fmax: float = 800.0
    window_ms: float = 30.0
    hop_ms: float = 10.0
    threshold: float = 0.15  # CMND dip threshold
    energy_floor: float = 0.01  # RMS below this is silence
    confidence_floor: float = 0.1
    median_window: int = 5


def _medfilt(x: NDArray, kernel_size: int = 5) -> NDArray:
    """Simple median filter (pure numpy, edge padded)."""
    if kernel_size % 2 == 0:
        kernel_size += 1
    pad = kernel_size // 2
    padded = np.pad(x, pad, mode="edge")
    result = np.zeros_like(x)
    for i in range(len(x)):
        result[i] = np.median(padded[i : i + kernel_size])
    return result


def _yin_pitch(
    frame: NDArray[np.floating],
    sr: int,
    fmin: float,
    fmax: float,
    threshold: float = 0.15,
) -> tuple[float, float]:
    """Estimate pitch of a single window using the YIN algorithm.

    Args:
        frame: Audio window samples.
        sr: Sample rate.
        fmin: Minimum frequency to search.
        fmax: Maximum frequency to search.
        threshold: Dip threshold on the normalized difference.

    Returns:
        Tuple of (f0_hz, confidence) where f0_hz=0 if no lag was found.
    """
    n = len(frame)
    tau_min = max(1, int(sr / fmax))
    tau_max = int(sr / fmin)

    if tau_max >= n // 2:
        tau_max = n // 2 - 1
    if tau_min >= tau_max:
        return 0.0, 0.0

    # Difference function
    d = np.zeros(tau_max + 1)
    for tau in range(1, tau_max + 1):
        diff = frame[: n - tau] - frame[tau:n]
        d[tau] = np.dot(diff, diff)

    # Cumulative mean normalized difference
    d_prime = np.ones_like(d)
    cumsum = np.cumsum(d[1:])
    taus = np.arange(1, tau_max + 1)
    with np.errstate(divide="ignore", invalid="ignore"):
        d_prime[1:] = np.where(cumsum > 0, d[1:] * taus / cumsum, 1.0)

    # First dip below threshold, walked down to its local minimum
    best_tau = -1
    for tau in range(tau_min, tau_max + 1):
        if d_prime[tau] < threshold:
            while tau + 1 <= tau_max and d_prime[tau + 1] < d_prime[tau]:
                tau += 1
            best_tau = tau
            break

    if best_tau < 0:
        best_tau = tau_min + int(np.argmin(d_prime[tau_min : tau_max + 1]))

    # Parabolic interpolation
    refined = float(best_tau)
    best_val = float(d_prime[best_tau])
    if 0 < best_tau < tau_max:
        alpha = d_prime[best_tau - 1]
        beta = d_prime[best_tau]
        gamma = d_prime[best_tau + 1]
        denom = alpha - 2 * beta + gamma
        if abs(denom) > 1e-10:
            delta = 0.5 * (alpha - gamma) / denom
            if abs(delta) < 1.0:
                refined = best_tau + delta
                best_val = float(beta - 0.25 * (alpha - gamma) * delta)

    if refined <= 0:
        return 0.0, 0.0

    confidence = float(np.clip(1.0 - best_val, 0.0, 1.0))
    return sr / refined, confidence


def median_filter_frequencies(
    frequencies: NDArray[np.floating],
    kernel_size: int = 5,
) -> NDArray[np.floating]:
    """Median filter the voiced entries of an F0 track, leaving zeros in place.

    Args:
        frequencies: F0 per frame, 0 for unvoiced.
        kernel_size: Median window in frames.

    Returns:
        Filtered copy of the track.
    """
    result = np.asarray(frequencies, dtype=np.float64).copy()
    voiced = np.flatnonzero(result > 0)
    if len(voiced) < 2 or kernel_size <= 1:
        return result
    result[voiced] = _medfilt(result[voiced], kernel_size)
    return result


def extract_pitch(
    audio: NDArray[np.floating],
    sr: int = 16000,
    config: PitchExtractorConfig | None = None,
) -> PitchContour:
    """Extract a pitch contour from mono audio.

    Silent windows (RMS under the energy floor), low-confidence estimates and
    estimates outside [fmin, fmax] are reported as unvoiced frames with
    frequency 0 and confidence 0.

    Args:
        audio: Audio samples as float array (mono, normalized to [-1, 1]).
        sr: Sample rate in Hz.
        config: Extractor configuration.

    Returns:
        PitchContour with one frame per hop. Empty input yields an empty
        contour rather than an error.

    Raises:
        ValueError: If the sample rate is not positive.
    """
    if sr <= 0:
        raise ValueError(f"Sample rate must be positive, got {sr}")

    cfg = config or PitchExtractorConfig()
    audio = np.asarray(audio, dtype=np.float64).reshape(-1)
    duration = len(audio) / sr
    hop_length = max(1, int(round(sr * cfg.hop_ms / 1000.0)))
    frame_length = max(2, int(round(sr * cfg.window_ms / 1000.0)))
    hop_seconds = hop_length / sr

    n_frames = 1 + (len(audio) - frame_length) // hop_length if len(audio) >= frame_length else 0
    if n_frames <= 0:
        logger.debug(f"Audio too short for pitch analysis ({len(audio)} samples)")
        return PitchContour(frames=(), sample_rate=sr, duration=duration, hop_seconds=hop_seconds)

    times = np.zeros(n_frames)
    f0 = np.zeros(n_frames)
    confidence = np.zeros(n_frames)

    for i in range(n_frames):
        start = i * hop_length
        frame = audio[start : start + frame_length]
        times[i] = (start + frame_length / 2) / sr

        rms = float(np.sqrt(np.mean(frame**2)))
        if rms < cfg.energy_floor:
            continue

        hz, conf = _yin_pitch(frame, sr, cfg.fmin, cfg.fmax, cfg.threshold)
        if conf < cfg.confidence_floor or hz < cfg.fmin or hz > cfg.fmax:
            continue
        f0[i] = hz
        confidence[i] = conf

    f0 = median_filter_frequencies(f0, cfg.median_window)

    n_voiced = int(np.count_nonzero(f0))
    logger.debug(f"Extracted {n_frames} pitch frames, {n_voiced} voiced")

    frames = tuple(
        PitchFrame(time=float(t), frequency=float(hz), confidence=float(c))
        for t, hz, c in zip(times, f0, confidence)
    )
    return PitchContour(frames=frames, sample_rate=sr, duration=duration, hop_seconds=hop_seconds)


def hz_to_semitones(
    f0_hz: NDArray[np.floating],
    ref_hz: float = A4_HZ,
) -> NDArray[np.floating]:
    """Convert F0 from Hz to semitones relative to a reference frequency.

    Formula: semitones = 12 * log2(f0 / ref)

    Args:
        f0_hz: F0 values in Hz. Zero or negative values are treated as unvoiced.
        ref_hz: Reference frequency in Hz.

    Returns:
        F0 in semitones. Unvoiced frames (f0 <= 0) return 0.
    """
    f0_hz = np.asarray(f0_hz, dtype=np.float64)
    result = np.zeros_like(f0_hz)
    voiced_mask = f0_hz > 0
    result[voiced_mask] = 12.0 * np.log2(f0_hz[voiced_mask] / ref_hz)
    return result


def hz_to_st(hz: float, ref_hz: float = A4_HZ) -> float:
    """Scalar Hz to semitones; 0 for non-positive input."""
    if hz <= 0:
        return 0.0
    return float(12.0 * np.log2(hz / ref_hz))


def semitones_to_hz(st: float, ref_hz: float = A4_HZ) -> float:
    return float(ref_hz * 2.0 ** (st / 12.0))


def contour_semitones(
    contour: PitchContour,
    min_confidence: float = 0.0,
) -> NDArray[np.floating]:
    """Key-independent semitone series for whole-contour comparison.

    Voiced frames are expressed relative to the contour's median pitch so two
    singers in different keys compare equal. Unvoiced gaps are linearly
    interpolated from the neighbouring voiced frames.

    Args:
        contour: Pitch contour.
        min_confidence: Frames at or below this confidence count as unvoiced.

    Returns:
        Semitone offset per frame, all zeros when nothing is voiced.
    """
    f0 = contour.frequencies
    conf = contour.confidences
    if len(f0) == 0:
        return np.zeros(0)

    voiced = (f0 > 0) & (conf > min_confidence)
    if not np.any(voiced):
        return np.zeros(len(f0))

    st = hz_to_semitones(f0)
    st = st - float(np.median(st[voiced]))

    idx = np.arange(len(f0))
    return np.interp(idx, idx[voiced], st[voiced])
