"""Rolling neutral-pitch baseline.

A chanter's pitch drifts over a long recitation, so the neutral reference is
recomputed per syllable from the most recent canonically neutral syllables
instead of once for the whole recording. Only canonically neutral syllables
contribute, so rises and dips never pull the baseline.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from .pitch import hz_to_semitones, semitones_to_hz
from .types import Baseline, PitchContour, Swara, SyllableMeasurement

logger = logging.getLogger(__name__)

# Acceptable semitone deviation from the baseline per swara
DEFAULT_BANDS: dict[Swara, tuple[float, float]] = {
    Swara.ANUDATTA: (-6.0, -0.5),
    Swara.UDATTA: (-0.5, 0.5),
    Swara.SVARITA: (0.5, 6.0),
    Swara.DIRGHA_SVARITA: (0.5, 6.0),
}


@dataclass
class BaselineConfig:
    """Configuration for baseline calibration."""

    window: int = 5  # previous neutral syllables considered
    min_voiced_ratio: float = 0.5
    global_syllables: int = 10  # leading syllables used for the global value
    min_frame_confidence: float = 0.5
    min_frame_hz: float = 50.0
    max_frame_hz: float = 1000.0
    bands: dict[Swara, tuple[float, float]] = field(default_factory=lambda: dict(DEFAULT_BANDS))


def _is_reference(m: SyllableMeasurement, accent: Swara | None, cfg: BaselineConfig) -> bool:
    return accent == Swara.UDATTA and m.voiced and m.voiced_ratio > cfg.min_voiced_ratio


def global_baseline(
    measurements: list[SyllableMeasurement],
    accents: list[Swara | None],
    contour: PitchContour | None = None,
    config: BaselineConfig | None = None,
) -> Baseline:
    """Recording-wide neutral pitch used before any neutral syllable is seen.

    Fallback chain: median start pitch of the voiced neutral syllables among
    the leading ``global_syllables``; then the median of all confident
    contour frames; then the first voiced syllable's start pitch; then 0.

    Args:
        measurements: Per-syllable measurements.
        accents: Canonical swara per syllable.
        contour: Optional whole-recording contour for the frame fallback.
        config: Baseline configuration.

    Returns:
        Baseline whose ``source`` names the level that produced it.
    """
    cfg = config or BaselineConfig()
    head = range(min(cfg.global_syllables, len(measurements)))
    neutral = [
        measurements[i].f0_start_st for i in head if _is_reference(measurements[i], accents[i], cfg)
    ]
    if neutral:
        return Baseline(float(np.median(neutral)), "global_neutral", len(neutral), cfg.bands)

    if contour is not None and len(contour) > 0:
        f0 = contour.frequencies
        conf = contour.confidences
        mask = (conf > cfg.min_frame_confidence) & (f0 >= cfg.min_frame_hz) & (f0 <= cfg.max_frame_hz)
        if np.any(mask):
            value = float(np.median(hz_to_semitones(f0[mask])))
            return Baseline(value, "global_contour", int(np.count_nonzero(mask)), cfg.bands)

    for m in measurements:
        if m.voiced:
            return Baseline(m.f0_start_st, "first_syllable", 1, cfg.bands)

    return Baseline(0.0, "none", 0, cfg.bands)


def calibrate(
    measurements: list[SyllableMeasurement],
    accents: list[Swara | None],
    contour: PitchContour | None = None,
    config: BaselineConfig | None = None,
) -> list[Baseline]:
    """Compute the neutral baseline at every syllable.

    The baseline at syllable i is the median start pitch of the last
    ``window`` syllables before i whose canonical accent is neutral and whose
    voiced ratio exceeds ``min_voiced_ratio``. With one such syllable its
    pitch is used directly; with none the global baseline applies.

    Args:
        measurements: Per-syllable measurements in recording order.
        accents: Canonical swara per syllable, same length.
        contour: Optional contour for the global fallback.
        config: Baseline configuration.

    Returns:
        One Baseline per syllable.

    Raises:
        ValueError: If measurements and accents differ in length.
    """
    if len(measurements) != len(accents):
        raise ValueError(
            f"Got {len(measurements)} measurements but {len(accents)} canonical accents"
        )

    cfg = config or BaselineConfig()
    fallback = global_baseline(measurements, accents, contour, cfg)
    if fallback.source != "global_neutral":
        logger.info(f"No voiced neutral syllables to calibrate from, baseline source: {fallback.source}")

    baselines: list[Baseline] = []
    recent: list[float] = []
    for i, m in enumerate(measurements):
        window = recent[-cfg.window :]
        if len(window) >= 2:
            baselines.append(Baseline(float(np.median(window)), "rolling", len(window), cfg.bands))
        elif len(window) == 1:
            baselines.append(Baseline(window[0], "single", 1, cfg.bands))
        else:
            baselines.append(fallback)

        if _is_reference(m, accents[i], cfg):
            recent.append(m.f0_start_st)

    return baselines


def average_baseline_hz(baselines: list[Baseline], measurements: list[SyllableMeasurement]) -> float:
    """Mean baseline in Hz over syllables that are mostly voiced."""
    values = [
        semitones_to_hz(b.semitones)
        for b, m in zip(baselines, measurements)
        if m.voiced and m.voiced_ratio > 0.5
    ]
    return float(np.mean(values)) if values else 0.0


def baseline_drift(baselines: list[Baseline], measurements: list[SyllableMeasurement]) -> float:
    """Absolute semitone change between the first and last voiced baseline."""
    values = [b.semitones for b, m in zip(baselines, measurements) if m.voiced and m.voiced_ratio > 0.5]
    if len(values) < 2:
        return 0.0
    return abs(values[-1] - values[0])
