"""Uniform aligner - deterministic fallback that divides audio evenly."""

import numpy as np
from numpy.typing import NDArray

from ..types import CanonicalSyllable, SyllableSpan
from .base import Aligner, AlignmentResult


def uniform_spans(duration: float, n_syllables: int, confidence: float = 0.5) -> list[SyllableSpan]:
    """Divide ``duration`` seconds into ``n_syllables`` equal spans."""
    if n_syllables <= 0:
        return []
    step = duration / n_syllables
    spans = []
    for i in range(n_syllables):
        end = duration if i == n_syllables - 1 else (i + 1) * step
        spans.append(SyllableSpan(index=i, start_time=i * step, end_time=end, confidence=confidence))
    return spans


class UniformAligner(Aligner):
    """Aligner that divides audio uniformly among syllables.

    Assumes each syllable takes an equal portion of the recording. This is
    the safe default every other aligner falls back to when its own
    evidence is untrustworthy.
    """

    @property
    def name(self) -> str:
        return "uniform"

    def align(
        self,
        audio: NDArray[np.floating],
        syllables: list[CanonicalSyllable],
        sr: int = 16000,
    ) -> AlignmentResult:
        """Align by dividing audio uniformly among syllables.

        Args:
            audio: Audio samples.
            syllables: Canonical syllables.
            sr: Sample rate.

        Returns:
            AlignmentResult with evenly-spaced spans.
        """
        if not syllables:
            return AlignmentResult(
                syllable_spans=[],
                overall_confidence=1.0,
                warnings=["no_syllables"],
                method=self.name,
            )

        duration = len(audio) / sr
        return AlignmentResult(
            syllable_spans=uniform_spans(duration, len(syllables)),
            overall_confidence=0.5,  # Low confidence for uniform assumption
            warnings=["uniform_alignment"],
            method=self.name,
        )
