"""Base classes and protocols for syllable alignment."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from ..types import CanonicalSyllable, SyllableSpan


@dataclass
class AlignmentResult:
    """Result of syllable alignment."""

    syllable_spans: list[SyllableSpan]
    overall_confidence: float
    warnings: list[str] = field(default_factory=list)
    method: str = "uniform"

    def __len__(self) -> int:
        return len(self.syllable_spans)


class Aligner(ABC):
    """Abstract base class for syllable aligners.

    Aligners take audio and canonical syllables and produce one time span
    per syllable. This allows swapping between alignment strategies
    (uniform, energy onsets, reference DTW).
    """

    @abstractmethod
    def align(
        self,
        audio: NDArray[np.floating],
        syllables: list[CanonicalSyllable],
        sr: int = 16000,
    ) -> AlignmentResult:
        """Align audio to canonical syllables.

        Args:
            audio: Audio samples as float array (mono).
            syllables: Canonical syllables to align to.
            sr: Sample rate in Hz.

        Returns:
            AlignmentResult with one span per syllable.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the aligner name for logging."""
        pass
