"""Per-syllable acoustic measurement and baseline-relative features.

Measurements are absolute (Hz, semitones re A4, milliseconds). Relative
features describe a syllable against its neutral baseline and against its
neighbours, which is what the accent rules reason about:

- delta_start / delta_end: start and end pitch above the baseline
- cross_jump: this start minus the previous syllable's end, both relative
- cross_slope: internal rise, delta_end - delta_start
- local_high / long_compared: height and length against recent neutrals
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .pitch import hz_to_st
from .types import Baseline, PitchContour, Swara, SyllableFeatures, SyllableMeasurement, SyllableSpan

logger = logging.getLogger(__name__)


@dataclass
class FeatureConfig:
    """Configuration for syllable feature extraction."""

    min_frame_confidence: float = 0.3
    min_voiced_frames: int = 3
    sustain_delta_st: float = 0.8
    sustain_min_ms: float = 100.0
    neighbor_window: int = 3  # previous syllables compared for local height/length


def _segment_rms(audio: NDArray[np.floating] | None, sr: int, start: float, end: float) -> float:
    if audio is None or len(audio) == 0:
        return 0.0
    lo = max(0, int(start * sr))
    hi = min(len(audio), int(end * sr))
    if hi <= lo:
        return 0.0
    segment = np.asarray(audio[lo:hi], dtype=np.float64)
    return float(np.sqrt(np.mean(segment**2)))


def measure_syllable(
    contour: PitchContour,
    span: SyllableSpan,
    audio: NDArray[np.floating] | None = None,
    config: FeatureConfig | None = None,
) -> SyllableMeasurement:
    """Measure the pitch and energy of one syllable span.

    Start and end pitch are the means of the first and last third of the
    voiced frames; duration counts voiced frames only.

    Args:
        contour: Pitch contour of the whole recording.
        span: Time span of the syllable.
        audio: Optional samples for the RMS energy measurement.
        config: Feature configuration.

    Returns:
        SyllableMeasurement; ``voiced`` is False and all pitch values are 0
        when fewer than ``min_voiced_frames`` confident frames exist.
    """
    cfg = config or FeatureConfig()
    frames = contour.between(span.start_time, span.end_time)
    voiced = [f for f in frames if f.frequency > 0 and f.confidence > cfg.min_frame_confidence]
    energy = _segment_rms(audio, contour.sample_rate, span.start_time, span.end_time)

    if len(voiced) < cfg.min_voiced_frames:
        return SyllableMeasurement(
            index=span.index,
            start_time=span.start_time,
            end_time=span.end_time,
            f0_start_hz=0.0,
            f0_end_hz=0.0,
            f0_start_st=0.0,
            f0_end_st=0.0,
            slope_st_per_sec=0.0,
            duration_ms=0.0,
            energy_rms=energy,
            voiced_ratio=0.0,
            voiced=False,
        )

    third = max(1, len(voiced) // 3)
    f0_start_hz = float(np.mean([f.frequency for f in voiced[:third]]))
    f0_end_hz = float(np.mean([f.frequency for f in voiced[-third:]]))
    f0_start_st = hz_to_st(f0_start_hz)
    f0_end_st = hz_to_st(f0_end_hz)

    duration_ms = len(voiced) * contour.hop_seconds * 1000.0
    slope = (f0_end_st - f0_start_st) / duration_ms * 1000.0 if duration_ms > 0 else 0.0

    return SyllableMeasurement(
        index=span.index,
        start_time=span.start_time,
        end_time=span.end_time,
        f0_start_hz=f0_start_hz,
        f0_end_hz=f0_end_hz,
        f0_start_st=f0_start_st,
        f0_end_st=f0_end_st,
        slope_st_per_sec=slope,
        duration_ms=duration_ms,
        energy_rms=energy,
        voiced_ratio=len(voiced) / len(frames),
        voiced=True,
    )


def derive_features(
    measurements: list[SyllableMeasurement],
    baselines: list[Baseline],
    canonical: list[Swara | None],
    texts: list[str] | None = None,
    config: FeatureConfig | None = None,
) -> list[SyllableFeatures]:
    """Attach baseline-relative and neighbour features to measurements.

    Args:
        measurements: Per-syllable measurements in order.
        baselines: Baseline per syllable, same length.
        canonical: Expected swara per syllable (None when unknown).
        texts: Syllable texts for reporting.
        config: Feature configuration.

    Returns:
        One SyllableFeatures per measurement, without classification.
    """
    cfg = config or FeatureConfig()
    texts = texts or [""] * len(measurements)
    features: list[SyllableFeatures] = []

    for i, m in enumerate(measurements):
        baseline_st = baselines[i].semitones
        if not m.voiced:
            features.append(
                SyllableFeatures(
                    measurement=m,
                    text=texts[i],
                    canonical=canonical[i],
                    baseline_st=baseline_st,
                    delta_start=0.0,
                    delta_end=0.0,
                    cross_jump=0.0,
                    cross_slope=0.0,
                    sustain_high=False,
                    local_high=0.0,
                    long_compared=1.0,
                )
            )
            continue

        delta_start = m.f0_start_st - baseline_st
        delta_end = m.f0_end_st - baseline_st

        prev_delta_end = 0.0
        if i > 0 and measurements[i - 1].voiced:
            prev_delta_end = measurements[i - 1].f0_end_st - baselines[i - 1].semitones

        recent_heights = []
        recent_durations = []
        for j in range(max(0, i - cfg.neighbor_window), i):
            if canonical[j] == Swara.UDATTA and measurements[j].voiced:
                recent_heights.append(measurements[j].f0_start_st - baselines[j].semitones)
                recent_durations.append(measurements[j].duration_ms)

        local_high = delta_start - float(np.mean(recent_heights)) if recent_heights else 0.0
        mean_duration = float(np.mean(recent_durations)) if recent_durations else 0.0
        long_compared = m.duration_ms / mean_duration if mean_duration > 0 else 1.0

        features.append(
            SyllableFeatures(
                measurement=m,
                text=texts[i],
                canonical=canonical[i],
                baseline_st=baseline_st,
                delta_start=delta_start,
                delta_end=delta_end,
                cross_jump=delta_start - prev_delta_end,
                cross_slope=delta_end - delta_start,
                sustain_high=delta_start > cfg.sustain_delta_st and m.duration_ms > cfg.sustain_min_ms,
                local_high=local_high,
                long_compared=long_compared,
            )
        )

    logger.debug(f"Derived features for {len(features)} syllables")
    return features
