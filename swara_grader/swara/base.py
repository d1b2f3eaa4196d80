"""Base classes and protocols for swara classification."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..types import Swara, SyllableFeatures


@dataclass
class SwaraClassification:
    """Result of classifying one syllable."""

    swara: Swara
    confidence: float  # 0-1
    tags: list[str] = field(default_factory=list)  # Diagnostic tags naming the rule that fired


class SwaraClassifier(ABC):
    """Abstract base class for swara classifiers.

    Classifiers take baseline-relative syllable features and predict the
    accent class. Implementations must be pure: the same features always
    give the same classification.
    """

    @abstractmethod
    def classify(self, features: SyllableFeatures) -> SwaraClassification:
        """Classify the swara of a syllable.

        Args:
            features: Baseline-relative syllable features.

        Returns:
            SwaraClassification with predicted swara and confidence.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the classifier name for logging."""
        pass
