"""Swara analysis pipeline and chant scoring.

This module provides:
- SwaraAnalyzer: pitch → segmentation → features → baseline → rule
  classification → canonical tolerance → sequence smoothing
- aggregate_scores: 0.6 pronunciation / 0.4 accent fusion that reports
  missing inputs instead of guessing them
- ChantScorer: combines accent analysis with transcript matching

Every call builds its own contour, baselines and results; nothing is kept
between recordings.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Literal

import numpy as np
from numpy.typing import NDArray

from .align import Aligner, DTWAligner, DTWAlignerConfig, OnsetAligner, OnsetConfig, UniformAligner
from .align.dtw import align_contours
from .baseline import BaselineConfig, average_baseline_hz, baseline_drift, calibrate
from .features import FeatureConfig, derive_features, measure_syllable
from .phonetics import round_half_up
from .pitch import PitchExtractorConfig, extract_pitch
from .pronunciation import PronunciationConfig, match_pronunciation, pronunciation_feedback
from .swara import (
    RuleBasedClassifier,
    RuleClassifierConfig,
    SmoothingConfig,
    SwaraClassifier,
    ToleranceConfig,
    is_acceptable,
    is_gradable,
    smooth_sequence,
    snap,
)
from .types import (
    AnalysisResult,
    CanonicalSyllable,
    ChantScore,
    ClassificationResult,
    ContourAlignment,
    PitchContour,
    SyllableFeatures,
    SyllableSpan,
    Transcription,
)

logger = logging.getLogger(__name__)


@dataclass
class ScorerConfig:
    """Configuration for the analysis pipeline and score fusion."""

    aligner_type: Literal["uniform", "onset"] = "onset"
    pronunciation_weight: float = 0.6
    accent_weight: float = 0.4
    pitch: PitchExtractorConfig = field(default_factory=PitchExtractorConfig)
    onset: OnsetConfig = field(default_factory=OnsetConfig)
    dtw: DTWAlignerConfig = field(default_factory=DTWAlignerConfig)
    features: FeatureConfig = field(default_factory=FeatureConfig)
    baseline: BaselineConfig = field(default_factory=BaselineConfig)
    classifier: RuleClassifierConfig = field(default_factory=RuleClassifierConfig)
    tolerance: ToleranceConfig = field(default_factory=ToleranceConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    pronunciation: PronunciationConfig = field(default_factory=PronunciationConfig)


class SwaraAnalyzer:
    """Accent analysis of one recording against a canonical syllable script.

    Components are swappable: pass a custom aligner or classifier to
    override the ones selected by the configuration.
    """

    def __init__(
        self,
        config: ScorerConfig | None = None,
        aligner: Aligner | None = None,
        classifier: SwaraClassifier | None = None,
    ):
        """Initialize analyzer with optional custom components.

        Args:
            config: Pipeline configuration.
            aligner: Custom aligner (overrides config.aligner_type).
            classifier: Custom classifier.
        """
        self.config = config or ScorerConfig()

        if aligner is not None:
            self.aligner = aligner
        elif self.config.aligner_type == "uniform":
            self.aligner = UniformAligner()
        else:
            self.aligner = OnsetAligner(self.config.onset)

        self.classifier = classifier or RuleBasedClassifier(self.config.classifier)

    @property
    def name(self) -> str:
        """Return analyzer name for logging."""
        return f"swara_{self.aligner.name}_{self.classifier.name}"

    def analyze(
        self,
        audio: NDArray[np.floating],
        syllables: list[CanonicalSyllable],
        sr: int = 16000,
        reference_audio: NDArray[np.floating] | None = None,
    ) -> AnalysisResult:
        """Analyze the swaras of a recording.

        Args:
            audio: User audio samples (mono).
            syllables: Canonical syllables with expected swaras.
            sr: Sample rate.
            reference_audio: Optional reference recording; when given,
                syllable spans are projected from it by DTW.

        Returns:
            AnalysisResult with one classified syllable per canonical syllable.
        """
        audio = np.asarray(audio, dtype=np.float64).reshape(-1)
        contour = extract_pitch(audio, sr, self.config.pitch)

        if reference_audio is not None:
            reference = extract_pitch(reference_audio, sr, self.config.pitch)
            aligner = DTWAligner(self.config.dtw, self.config.pitch)
            alignment = aligner.align_contours(contour, reference, syllables)
        else:
            alignment = self.aligner.align(audio, syllables, sr)

        for warning in alignment.warnings:
            logger.debug(f"Alignment warning: {warning}")

        return self.analyze_contour(
            contour,
            syllables,
            alignment.syllable_spans,
            audio=audio,
            alignment_method=alignment.method,
            warnings=alignment.warnings,
        )

    def analyze_contour(
        self,
        contour: PitchContour,
        syllables: list[CanonicalSyllable],
        spans: list[SyllableSpan],
        audio: NDArray[np.floating] | None = None,
        alignment_method: str = "given",
        warnings: list[str] | tuple[str, ...] = (),
    ) -> AnalysisResult:
        """Analyze swaras from a precomputed contour and syllable spans.

        Args:
            contour: Pitch contour of the recording.
            syllables: Canonical syllables.
            spans: One span per syllable.
            audio: Optional samples for energy measurement.
            alignment_method: Name recorded in the result.
            warnings: Warnings carried over from alignment.

        Returns:
            AnalysisResult.

        Raises:
            ValueError: If spans and syllables differ in length.
        """
        if len(spans) != len(syllables):
            raise ValueError(f"Got {len(spans)} spans for {len(syllables)} syllables")

        cfg = self.config
        warnings = list(warnings)
        if not np.any(contour.voiced_mask):
            logger.warning("No voiced pitch found in recording")
            warnings.append("no_signal")

        measurements = [measure_syllable(contour, span, audio, cfg.features) for span in spans]
        accents = [s.expected for s in syllables]
        baselines = calibrate(measurements, accents, contour, cfg.baseline)
        features = derive_features(
            measurements, baselines, list(accents), [s.text for s in syllables], cfg.features
        )

        classified = [self._classify(f) for f in features]
        classified = self._smooth(classified)

        valid = [f for f in classified if f.voiced and f.measurement.voiced_ratio > 0.5]
        overall_quality = (
            float(np.mean([f.classification.confidence for f in valid if f.classification]))
            if valid
            else 0.0
        )

        result = AnalysisResult(
            syllables=tuple(classified),
            overall_quality=overall_quality,
            average_baseline_hz=average_baseline_hz(baselines, measurements),
            drift_st=baseline_drift(baselines, measurements),
            alignment_method=alignment_method,
            warnings=tuple(warnings),
        )
        logger.info(
            f"Analyzed {len(result)} syllables: {result.acceptable_count}/"
            f"{result.gradable_count} gradable acceptable"
        )
        return result

    def _classify(self, features: SyllableFeatures) -> SyllableFeatures:
        cfg = self.config
        decision = self.classifier.classify(features)
        canonical = features.canonical

        if canonical is None:
            corrected = decision.swara
            acceptable = True
        else:
            corrected = snap(canonical, decision.swara, features, cfg.tolerance)
            acceptable = is_acceptable(canonical, corrected, features, cfg.tolerance)

        classification = ClassificationResult(
            raw=decision.swara,
            corrected=corrected,
            confidence=decision.confidence,
            acceptable=acceptable,
            gradable=is_gradable(features.duration_ms, decision.confidence, cfg.tolerance),
            tags=tuple(decision.tags),
        )
        logger.debug(
            f"Syllable {features.index} '{features.text}': raw={decision.swara.value} "
            f"corrected={corrected.value} conf={decision.confidence:.2f}"
        )
        return replace(features, classification=classification)

    def _smooth(self, syllables: list[SyllableFeatures]) -> list[SyllableFeatures]:
        canonical = [s.canonical for s in syllables]
        if any(c is None for c in canonical):
            return syllables

        raw = [s.classification.raw for s in syllables if s.classification]
        confidences = [s.classification.confidence for s in syllables if s.classification]
        smoothed = smooth_sequence(raw, canonical, confidences, self.config.smoothing)  # type: ignore[arg-type]
        if len(smoothed) != len(syllables):
            return syllables

        result = []
        for s, swara in zip(syllables, smoothed):
            c = s.classification
            if c is None or swara == c.raw:
                result.append(s)
                continue
            result.append(
                replace(
                    s,
                    classification=replace(
                        c,
                        corrected=swara,
                        acceptable=True,
                        smoothed=True,
                        tags=c.tags + ("smoothed",),
                    ),
                )
            )
        return result


def aggregate_scores(
    pronunciation: float | None,
    accent: float | None,
    config: ScorerConfig | None = None,
) -> tuple[int | None, list[str]]:
    """Fuse pronunciation and accent accuracy into an overall score.

    Args:
        pronunciation: Pronunciation accuracy 0-100, None if unavailable.
        accent: Accent accuracy 0-100, None if unavailable.
        config: Weights.

    Returns:
        Tuple of (overall, missing) where missing names every input that was
        unavailable. Overall is None when neither input is available.
    """
    cfg = config or ScorerConfig()
    missing = []
    if pronunciation is None:
        missing.append("pronunciation_unavailable")
    if accent is None:
        missing.append("accent_unavailable")

    if pronunciation is not None and accent is not None:
        overall = round_half_up(
            pronunciation * cfg.pronunciation_weight + accent * cfg.accent_weight
        )
    elif pronunciation is not None:
        overall = round_half_up(pronunciation)
    elif accent is not None:
        overall = round_half_up(accent)
    else:
        overall = None
    return overall, missing


def accent_feedback(analysis: AnalysisResult) -> list[str]:
    """Feedback lines describing the accent analysis."""
    if analysis.gradable_count == 0:
        return ["Swaras could not be graded: no syllable was long and clear enough."]

    lines = [
        f"Swara accuracy: {analysis.acceptable_count}/{analysis.gradable_count} "
        f"gradable syllables acceptable."
    ]
    wrong = [
        s.text or str(s.index)
        for s in analysis.syllables
        if s.classification and s.classification.gradable and not s.classification.acceptable
    ]
    if wrong:
        lines.append(f"Check the swara on: {', '.join(wrong)}")
    if analysis.drift_st > 2.0:
        lines.append(f"Your pitch drifted {analysis.drift_st:.1f} semitones; keep the base note steady.")
    return lines


class ChantScorer:
    """Score a recitation for pronunciation and swara accuracy."""

    def __init__(
        self,
        config: ScorerConfig | None = None,
        analyzer: SwaraAnalyzer | None = None,
    ):
        self.config = config or ScorerConfig()
        self.analyzer = analyzer or SwaraAnalyzer(self.config)

    def score(
        self,
        syllables: list[CanonicalSyllable],
        audio: NDArray[np.floating] | None = None,
        sr: int = 16000,
        transcription: Transcription | None = None,
        reference_audio: NDArray[np.floating] | None = None,
    ) -> ChantScore:
        """Score a recitation.

        Accent analysis runs when audio is given; pronunciation matching runs
        when a transcription is given. Each proceeds independently of the
        other's success.

        Args:
            syllables: Canonical syllables.
            audio: User audio samples.
            sr: Sample rate.
            transcription: Speech-to-text result for the recording.
            reference_audio: Optional reference recording for DTW alignment.

        Returns:
            ChantScore with the fused score and feedback.
        """
        analysis = None
        if audio is not None:
            analysis = self.analyzer.analyze(audio, syllables, sr, reference_audio)

        pronunciation = None
        if transcription is not None:
            pronunciation = match_pronunciation(transcription, syllables, self.config.pronunciation)

        p_score = pronunciation.similarity if pronunciation is not None else None
        a_score = analysis.accent_accuracy if analysis is not None else None
        overall, missing = aggregate_scores(p_score, a_score, self.config)
        if pronunciation is not None and pronunciation.failed:
            missing.append("transcription_failed")
        if missing:
            logger.info(f"Score computed with missing inputs: {', '.join(missing)}")

        feedback: list[str] = []
        if pronunciation is not None:
            feedback.extend(pronunciation_feedback(pronunciation, self.config.pronunciation))
        if analysis is not None:
            feedback.extend(accent_feedback(analysis))

        return ChantScore(
            overall=overall,
            pronunciation_accuracy=p_score,
            accent_accuracy=a_score,
            pronunciation=pronunciation,
            analysis=analysis,
            missing=tuple(missing),
            feedback=tuple(feedback),
        )

    def compare(
        self,
        reference_audio: NDArray[np.floating],
        user_audio: NDArray[np.floating],
        sr: int = 16000,
    ) -> ContourAlignment:
        """Compare the pitch contours of two full performances."""
        reference = extract_pitch(reference_audio, sr, self.config.pitch)
        user = extract_pitch(user_audio, sr, self.config.pitch)
        return align_contours(reference, user, self.config.dtw)
