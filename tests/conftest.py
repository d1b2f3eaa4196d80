"""Pytest configuration and fixtures for swara_grader tests."""

import numpy as np
import pytest
from numpy.typing import NDArray

from swara_grader.types import CanonicalSyllable, PitchContour, PitchFrame, Swara, SyllableSpan

SR = 16000
BASE_HZ = 200.0


def semitone_shift(hz: float, st: float) -> float:
    """Frequency ``st`` semitones above ``hz``."""
    return hz * 2.0 ** (st / 12.0)


def make_tone(
    freq_hz: float,
    duration_s: float,
    sr: int = SR,
    amplitude: float = 0.5,
    end_hz: float | None = None,
) -> NDArray[np.floating]:
    """Sine tone, optionally gliding linearly to ``end_hz``."""
    n = int(duration_s * sr)
    freqs = np.linspace(freq_hz, end_hz if end_hz is not None else freq_hz, n)
    phase = 2 * np.pi * np.cumsum(freqs) / sr
    return (amplitude * np.sin(phase)).astype(np.float64)


def make_contour(
    segments: list[tuple[float, float, float]],
    gap_s: float = 0.0,
    confidence: float = 0.95,
    hop: float = 0.01,
) -> tuple[PitchContour, list[SyllableSpan]]:
    """Synthetic contour from (start_hz, end_hz, duration_s) segments.

    Pitch glides linearly in semitones inside each segment. Segments are
    separated by ``gap_s`` of unvoiced frames. Frame times sit at window
    centres, (i + 0.5) * hop.
    """
    frames: list[PitchFrame] = []
    spans: list[SyllableSpan] = []
    t = 0.0
    i = 0
    for index, (start_hz, end_hz, duration) in enumerate(segments):
        n = int(round(duration / hop))
        span_start = t
        st = np.linspace(12 * np.log2(start_hz / 440.0), 12 * np.log2(end_hz / 440.0), n)
        for k in range(n):
            frames.append(PitchFrame((i + 0.5) * hop, float(440.0 * 2 ** (st[k] / 12)), confidence))
            i += 1
        t += n * hop
        for _ in range(int(round(gap_s / hop))):
            frames.append(PitchFrame((i + 0.5) * hop, 0.0, 0.0))
            i += 1
        t = i * hop
        spans.append(SyllableSpan(index=index, start_time=span_start, end_time=t, confidence=1.0))

    contour = PitchContour(frames=tuple(frames), sample_rate=SR, duration=i * hop, hop_seconds=hop)
    return contour, spans


def make_syllables(accents: list[Swara], texts: list[str] | None = None) -> list[CanonicalSyllable]:
    """Canonical syllables for a list of accents."""
    texts = texts or [f"s{i}" for i in range(len(accents))]
    return [CanonicalSyllable(index=i, text=t, expected=a) for i, (t, a) in enumerate(zip(texts, accents))]


@pytest.fixture
def sine_220() -> NDArray[np.floating]:
    """One second of a 220 Hz sine at 16kHz."""
    return make_tone(220.0, 1.0)


@pytest.fixture
def scenario_syllables() -> list[CanonicalSyllable]:
    """Four syllables: neutral, low, rising, neutral."""
    return make_syllables(
        [Swara.UDATTA, Swara.ANUDATTA, Swara.SVARITA, Swara.UDATTA],
        ["अ", "ग्नि", "मी", "ळे"],
    )


@pytest.fixture
def scenario_contour() -> tuple[PitchContour, list[SyllableSpan]]:
    """Baseline, baseline - 3 st, glide up 3 st, baseline; 250 ms each."""
    return make_contour(
        [
            (BASE_HZ, BASE_HZ, 0.25),
            (semitone_shift(BASE_HZ, -3), semitone_shift(BASE_HZ, -3), 0.25),
            (BASE_HZ, semitone_shift(BASE_HZ, 3), 0.25),
            (BASE_HZ, BASE_HZ, 0.25),
        ]
    )
