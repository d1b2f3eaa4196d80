"""Tests for the swara analysis pipeline and chant scoring."""

import numpy as np
import pytest

from conftest import BASE_HZ, SR, make_contour, make_syllables, make_tone, semitone_shift
from swara_grader.align import UniformAligner
from swara_grader.phonetics import round_half_up
from swara_grader.scorer import (
    ChantScorer,
    ScorerConfig,
    SwaraAnalyzer,
    accent_feedback,
    aggregate_scores,
)
from swara_grader.types import ChantScore, Swara, Transcription

U, A, S = Swara.UDATTA, Swara.ANUDATTA, Swara.SVARITA


def scenario_audio() -> np.ndarray:
    """Four 250 ms tones in 300 ms slots: base, low, rising, base."""
    tones = [
        make_tone(BASE_HZ, 0.25),
        make_tone(semitone_shift(BASE_HZ, -3), 0.25),
        make_tone(BASE_HZ, 0.25, end_hz=semitone_shift(BASE_HZ, 3)),
        make_tone(BASE_HZ, 0.25),
    ]
    silence = np.zeros(int(0.05 * SR))
    return np.concatenate([part for tone in tones for part in (tone, silence)])


class TestSwaraAnalyzer:
    """Tests for SwaraAnalyzer."""

    def test_scenario_contour(self, scenario_contour, scenario_syllables) -> None:
        """Neutral, low, rising, neutral are each recognized as expected."""
        contour, spans = scenario_contour

        result = SwaraAnalyzer().analyze_contour(contour, scenario_syllables, spans)

        assert len(result) == 4
        for syllable in result.syllables:
            c = syllable.classification
            assert c.raw == syllable.canonical
            assert c.confidence >= 0.8
            assert c.acceptable
            assert c.gradable
        assert result.accent_accuracy == 100.0
        assert result.alignment_method == "given"

    def test_synthetic_audio_end_to_end(self, scenario_syllables) -> None:
        """The same scenario rendered as audio grades through the full pipeline."""
        analyzer = SwaraAnalyzer(aligner=UniformAligner())

        result = analyzer.analyze(scenario_audio(), scenario_syllables, SR)

        assert result.alignment_method == "uniform"
        assert [s.classification.corrected for s in result.syllables] == [U, A, S, U]
        assert result.average_baseline_hz == pytest.approx(BASE_HZ, rel=0.05)
        assert result.drift_st < 1.0

    def test_empty_audio(self, scenario_syllables) -> None:
        """Empty input is reported as ungradable, never raised."""
        result = SwaraAnalyzer().analyze(np.zeros(0), scenario_syllables, SR)

        assert len(result) == 4
        assert "no_signal" in result.warnings
        for syllable in result.syllables:
            assert syllable.classification.confidence == 0.0
            assert not syllable.classification.gradable
        assert result.gradable_count == 0
        assert result.accent_accuracy is None
        assert result.overall_quality == 0.0

    def test_silence(self, scenario_syllables) -> None:
        """Silent audio behaves like empty audio."""
        result = SwaraAnalyzer().analyze(np.zeros(SR), scenario_syllables, SR)

        assert "no_signal" in result.warnings
        assert result.accent_accuracy is None

    def test_span_count_mismatch(self, scenario_contour, scenario_syllables) -> None:
        """Spans must match the syllables one to one."""
        contour, spans = scenario_contour

        with pytest.raises(ValueError):
            SwaraAnalyzer().analyze_contour(contour, scenario_syllables, spans[:2])

    def test_deterministic(self, scenario_syllables) -> None:
        """Same recording gives the same result."""
        audio = scenario_audio()
        analyzer = SwaraAnalyzer(aligner=UniformAligner())

        assert analyzer.analyze(audio, scenario_syllables, SR) == analyzer.analyze(
            audio.copy(), scenario_syllables, SR
        )

    def test_configured_aligner(self) -> None:
        """The aligner follows the configuration unless one is passed."""
        assert SwaraAnalyzer().aligner.name == "onset"
        assert SwaraAnalyzer(ScorerConfig(aligner_type="uniform")).aligner.name == "uniform"
        assert SwaraAnalyzer().name == "swara_onset_rule_based"


def low_tail_contour(drop_st: float):
    """Two syllables at the baseline, then one ``drop_st`` below it."""
    low = semitone_shift(BASE_HZ, -drop_st)
    return make_contour([(BASE_HZ, BASE_HZ, 0.25), (BASE_HZ, BASE_HZ, 0.25), (low, low, 0.25)])


class TestSequenceSmoothing:
    """Smoothing as applied by SwaraAnalyzer."""

    def test_uncertain_mismatch_overridden(self) -> None:
        """A weak low start next to a clean neutral is read as neutral."""
        contour, spans = low_tail_contour(2.2)

        result = SwaraAnalyzer().analyze_contour(contour, make_syllables([U, U, U]), spans)

        c = result.syllables[2].classification
        assert c.raw == A
        assert c.confidence == pytest.approx(2.2 / 3)
        assert c.corrected == U
        assert c.smoothed
        assert c.acceptable
        assert c.gradable
        assert "smoothed" in c.tags
        assert not any(s.classification.smoothed for s in result.syllables[:2])
        assert result.acceptable_count == 3
        assert result.accent_accuracy == 100.0

    def test_confident_mismatch_stands(self) -> None:
        """A clear low start keeps its class and counts against accuracy."""
        contour, spans = low_tail_contour(3.0)

        result = SwaraAnalyzer().analyze_contour(contour, make_syllables([U, U, U]), spans)

        c = result.syllables[2].classification
        assert c.corrected == A
        assert not c.smoothed
        assert not c.acceptable
        assert result.acceptable_count == 2
        assert result.accent_accuracy == pytest.approx(200 / 3)

    def test_skipped_with_unmarked_syllable(self) -> None:
        """Any syllable without an expected accent turns smoothing off."""
        contour, spans = low_tail_contour(2.2)

        result = SwaraAnalyzer().analyze_contour(contour, make_syllables([None, U, U]), spans)

        c = result.syllables[2].classification
        assert c.raw == A
        assert c.corrected == A
        assert not c.smoothed
        assert not c.acceptable
        assert result.syllables[0].classification.acceptable


class TestAggregateScores:
    """Tests for score fusion."""

    def test_weighted(self) -> None:
        """Pronunciation weighs 0.6, accent 0.4."""
        overall, missing = aggregate_scores(80, 100)

        assert overall == 88
        assert missing == []

    def test_accent_missing(self) -> None:
        """Missing accent reports the pronunciation score and names the gap."""
        overall, missing = aggregate_scores(70, None)

        assert overall == 70
        assert missing == ["accent_unavailable"]

    def test_pronunciation_missing(self) -> None:
        overall, missing = aggregate_scores(None, 62.5)

        assert overall == 63
        assert missing == ["pronunciation_unavailable"]

    def test_nothing_available(self) -> None:
        """Neither input gives no score."""
        overall, missing = aggregate_scores(None, None)

        assert overall is None
        assert missing == ["pronunciation_unavailable", "accent_unavailable"]

    def test_custom_weights(self) -> None:
        config = ScorerConfig(pronunciation_weight=0.5, accent_weight=0.5)

        assert aggregate_scores(60, 80, config)[0] == 70


class TestChantScorer:
    """Tests for ChantScorer."""

    @pytest.fixture
    def scorer(self) -> ChantScorer:
        return ChantScorer(ScorerConfig(aligner_type="uniform"))

    def test_full_score(self, scorer, scenario_syllables) -> None:
        """Correct swaras and an exact transcript score perfect."""
        result = scorer.score(
            scenario_syllables,
            audio=scenario_audio(),
            sr=SR,
            transcription=Transcription("अग्निमीळे"),
        )

        assert result.pronunciation_accuracy == 100
        assert result.accent_accuracy is not None
        assert result.overall == round_half_up(0.6 * 100 + 0.4 * result.accent_accuracy)
        assert result.missing == ()
        assert "Excellent pronunciation!" in result.feedback

    def test_failed_transcription_keeps_accent(self, scorer, scenario_syllables) -> None:
        """Accent analysis still runs when transcription fails."""
        result = scorer.score(
            scenario_syllables,
            audio=scenario_audio(),
            sr=SR,
            transcription=Transcription(error="timeout"),
        )

        assert result.pronunciation_accuracy == 0
        assert result.analysis is not None
        assert result.accent_accuracy is not None
        assert "transcription_failed" in result.missing
        assert result.overall == round_half_up(0.4 * result.accent_accuracy)
        assert result.feedback[0] == "Audio transcription failed: timeout. Please try again."

    def test_transcript_only(self, scorer, scenario_syllables) -> None:
        """Without audio only pronunciation is scored."""
        result = scorer.score(scenario_syllables, transcription=Transcription("अग्निमीळे"))

        assert result.analysis is None
        assert result.overall == 100
        assert result.missing == ("accent_unavailable",)

    def test_compare_identical(self, scorer) -> None:
        """A performance compared with itself is fully similar."""
        audio = scenario_audio()

        result = scorer.compare(audio, audio, SR)

        assert result.similarity == 100
        assert result.mean_cost == pytest.approx(0.0)


class TestAccentFeedback:
    """Tests for accent feedback lines."""

    def test_ungradable(self, scenario_syllables) -> None:
        analysis = SwaraAnalyzer().analyze(np.zeros(0), scenario_syllables, SR)

        assert accent_feedback(analysis)[0].startswith("Swaras could not be graded")

    def test_counts(self, scenario_contour, scenario_syllables) -> None:
        contour, spans = scenario_contour
        analysis = SwaraAnalyzer().analyze_contour(contour, scenario_syllables, spans)

        assert accent_feedback(analysis) == ["Swara accuracy: 4/4 gradable syllables acceptable."]


class TestChantScore:
    """Tests for score labels."""

    @pytest.mark.parametrize(
        ("overall", "label"),
        [(95, "perfect"), (90, "perfect"), (80, "good"), (60, "fair"), (59, "poor"), (None, None)],
    )
    def test_accuracy_label(self, overall, label) -> None:
        score = ChantScore(
            overall=overall,
            pronunciation_accuracy=None,
            accent_accuracy=None,
            pronunciation=None,
            analysis=None,
        )

        assert score.accuracy_label() == label
