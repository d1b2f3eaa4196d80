"""Energy-onset aligner with deterministic uniform fallback."""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..types import CanonicalSyllable, SyllableSpan
from ..vad import detect_onsets, energy_envelope, valley_between
from .base import Aligner, AlignmentResult
from .uniform import UniformAligner

logger = logging.getLogger(__name__)


@dataclass
class OnsetConfig:
    """Configuration for energy-onset segmentation."""

    frame_ms: float = 20.0
    hop_ms: float = 10.0
    smooth_frames: int = 7
    threshold: float = 0.25  # fraction of the envelope peak
    min_distance_ms: float = 150.0
    neighborhood: int = 2
    count_tolerance: int = 1  # surplus peaks that may be discarded
    min_span_ms: float = 80.0


class OnsetAligner(Aligner):
    """Aligner placing boundaries at energy valleys between syllable nuclei.

    Each energy peak is taken as one syllable nucleus. Boundaries are the
    envelope minima between consecutive peaks; the first syllable starts at
    0 and the last ends with the recording. Whenever the evidence does not
    fit the canonical syllable count the aligner falls back to uniform
    division rather than guessing.
    """

    def __init__(self, config: OnsetConfig | None = None):
        """Initialize with configuration.

        Args:
            config: Onset detection configuration. Uses defaults if None.
        """
        self.config = config or OnsetConfig()

    @property
    def name(self) -> str:
        return "onset"

    def align(
        self,
        audio: NDArray[np.floating],
        syllables: list[CanonicalSyllable],
        sr: int = 16000,
    ) -> AlignmentResult:
        """Align audio to syllables by energy onsets.

        Args:
            audio: Audio samples.
            syllables: Canonical syllables.
            sr: Sample rate.

        Returns:
            AlignmentResult from onsets, or the uniform fallback.
        """
        if not syllables:
            return AlignmentResult(
                syllable_spans=[],
                overall_confidence=1.0,
                warnings=["no_syllables"],
                method=self.name,
            )

        cfg = self.config
        envelope = energy_envelope(audio, sr, cfg.frame_ms, cfg.hop_ms, cfg.smooth_frames)
        min_distance = max(1, int(round(cfg.min_distance_ms / cfg.hop_ms)))
        peaks = detect_onsets(envelope, cfg.threshold, min_distance, cfg.neighborhood)

        n = len(syllables)
        surplus = len(peaks) - n
        if surplus < 0 or surplus > cfg.count_tolerance:
            logger.info(
                f"Detected {len(peaks)} onsets for {n} syllables, using uniform segmentation"
            )
            return self._align_uniform(audio, syllables, sr, "onset_count_mismatch")

        if surplus > 0:
            # Drop the weakest peaks, keep time order
            strongest = sorted(peaks, key=lambda p: envelope[p], reverse=True)[:n]
            peaks = sorted(strongest)

        hop_s = cfg.hop_ms / 1000.0
        duration = len(audio) / sr
        boundaries = [0.0]
        for left, right in zip(peaks[:-1], peaks[1:]):
            boundaries.append(valley_between(envelope, left, right) * hop_s)
        boundaries.append(duration)

        min_span = cfg.min_span_ms / 1000.0
        if any(b - a < min_span for a, b in zip(boundaries[:-1], boundaries[1:])):
            logger.info("Onset segmentation produced a span shorter than the minimum")
            return self._align_uniform(audio, syllables, sr, "onset_span_too_short")

        peak_strength = float(np.mean([envelope[p] for p in peaks]))
        confidence = float(np.clip(0.5 + 0.5 * peak_strength, 0.5, 1.0))
        spans = [
            SyllableSpan(index=i, start_time=boundaries[i], end_time=boundaries[i + 1], confidence=confidence)
            for i in range(n)
        ]
        warnings = ["onset_surplus_dropped"] if surplus > 0 else []
        logger.debug(f"Onset alignment placed {n} spans, confidence {confidence:.2f}")
        return AlignmentResult(
            syllable_spans=spans,
            overall_confidence=confidence,
            warnings=warnings,
            method=self.name,
        )

    def _align_uniform(
        self,
        audio: NDArray[np.floating],
        syllables: list[CanonicalSyllable],
        sr: int,
        reason: str,
    ) -> AlignmentResult:
        """Fallback to uniform alignment."""
        result = UniformAligner().align(audio, syllables, sr)
        result.warnings.append(reason)
        result.warnings.append("onset_fallback_to_uniform")
        return result
