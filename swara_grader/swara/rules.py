"""Rule-based swara classifier."""

from dataclasses import dataclass

from ..types import Swara, SyllableFeatures
from .base import SwaraClassification, SwaraClassifier


@dataclass
class RuleClassifierConfig:
    """Configuration for rule cascade thresholds."""

    # Dirgha svarita (prolonged rise)
    dirgha_local_high_min: float = 1.0  # st above recent neutrals
    dirgha_long_compared_min: float = 1.4  # duration ratio to recent neutrals
    dirgha_duration_min_ms: float = 200.0
    dirgha_confidence: float = 0.9

    # Svarita by step-up from the previous syllable
    svarita_jump_min: float = 0.8
    svarita_end_min: float = 0.8
    svarita_jump_scale: float = 3.0

    # Svarita by internal glide
    svarita_glide_min: float = 0.8
    svarita_slope_min: float = 1.0  # st/s
    svarita_glide_scale: float = 3.5

    # Anudatta
    anudatta_start_max: float = -1.5
    anudatta_scale: float = 3.0

    udatta_confidence: float = 0.8


class RuleBasedClassifier(SwaraClassifier):
    """Deterministic rule cascade over baseline-relative features.

    Rules are tried in priority order and the first that fires wins:
    - Dirgha svarita: high against recent neutrals, long, and sustained
    - Svarita: a step up into a high end, or a clear internal glide
    - Anudatta: starts clearly below the baseline
    - Udatta: default

    Every returned class is backed by the rule that fired, named in the
    classification tags.
    """

    def __init__(self, config: RuleClassifierConfig | None = None):
        """Initialize with configuration.

        Args:
            config: Threshold configuration. Uses defaults if None.
        """
        self.config = config or RuleClassifierConfig()

    @property
    def name(self) -> str:
        return "rule_based"

    def classify(self, features: SyllableFeatures) -> SwaraClassification:
        """Classify a syllable's swara.

        Args:
            features: Baseline-relative syllable features.

        Returns:
            SwaraClassification with predicted swara and confidence.
        """
        cfg = self.config

        # No pitch to reason about
        if not features.voiced:
            return SwaraClassification(Swara.UDATTA, 0.0, ["unvoiced"])

        if (
            features.local_high > cfg.dirgha_local_high_min
            and features.long_compared > cfg.dirgha_long_compared_min
            and features.sustain_high
            and features.duration_ms > cfg.dirgha_duration_min_ms
        ):
            return SwaraClassification(
                Swara.DIRGHA_SVARITA, cfg.dirgha_confidence, ["sustained_high_long"]
            )

        if features.cross_jump > cfg.svarita_jump_min and features.delta_end > cfg.svarita_end_min:
            confidence = min(1.0, (features.cross_jump + features.delta_end) / cfg.svarita_jump_scale)
            return SwaraClassification(Swara.SVARITA, confidence, ["step_up"])

        if features.cross_slope > cfg.svarita_glide_min and features.slope > cfg.svarita_slope_min:
            confidence = min(1.0, (features.cross_slope + features.slope) / cfg.svarita_glide_scale)
            return SwaraClassification(Swara.SVARITA, confidence, ["rising_glide"])

        if features.delta_start < cfg.anudatta_start_max:
            confidence = min(1.0, abs(features.delta_start) / cfg.anudatta_scale)
            return SwaraClassification(Swara.ANUDATTA, confidence, ["low_start"])

        return SwaraClassification(Swara.UDATTA, cfg.udatta_confidence, ["at_baseline"])
