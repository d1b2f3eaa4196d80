"""Tests for rolling baseline calibration."""

import pytest

from conftest import make_contour
from swara_grader.baseline import average_baseline_hz, baseline_drift, calibrate, global_baseline
from swara_grader.types import Swara, SyllableMeasurement

U, A, S = Swara.UDATTA, Swara.ANUDATTA, Swara.SVARITA


def measurement(index: int, start_st: float, voiced_ratio: float = 1.0, voiced: bool = True) -> SyllableMeasurement:
    """Measurement with a given start pitch in semitones."""
    return SyllableMeasurement(
        index=index,
        start_time=index * 0.3,
        end_time=(index + 1) * 0.3,
        f0_start_hz=0.0,
        f0_end_hz=0.0,
        f0_start_st=start_st,
        f0_end_st=start_st,
        slope_st_per_sec=0.0,
        duration_ms=250.0,
        energy_rms=0.1,
        voiced_ratio=voiced_ratio,
        voiced=voiced,
    )


class TestCalibrate:
    """Tests for per-syllable baselines."""

    def test_identical_pitches(self) -> None:
        """Identical neutral pitches give exactly that pitch everywhere."""
        ms = [measurement(i, -8.0) for i in range(6)]

        baselines = calibrate(ms, [U] * 6)

        assert all(b.semitones == -8.0 for b in baselines)

    def test_robust_to_single_outlier(self) -> None:
        """A single wild neutral pitch does not move the median."""
        pitches = [-8.0, -8.0, 4.0, -8.0, -8.0]
        ms = [measurement(i, p) for i, p in enumerate(pitches)] + [measurement(5, -8.0)]

        baselines = calibrate(ms, [U] * 6)

        assert baselines[5].semitones == -8.0
        assert baselines[5].source == "rolling"

    def test_only_neutral_syllables_count(self) -> None:
        """Low and rising syllables never shift the baseline."""
        ms = [measurement(0, -8.0), measurement(1, -12.0), measurement(2, -3.0), measurement(3, -8.0)]

        baselines = calibrate(ms, [U, A, S, U])

        assert baselines[1].semitones == -8.0
        assert baselines[2].semitones == -8.0
        assert baselines[3].semitones == -8.0
        assert baselines[3].source == "single"

    def test_rolling_window_follows_drift(self) -> None:
        """Baseline tracks a slow upward drift using the last five neutrals."""
        ms = [measurement(i, -10.0 + 0.5 * i) for i in range(12)]

        baselines = calibrate(ms, [U] * 12)

        # Syllables 6..10 have starts -7.0 .. -5.0, median -6.0
        assert baselines[11].semitones == pytest.approx(-6.0)
        assert baselines[11].support == 5

    def test_poorly_voiced_neutrals_ignored(self) -> None:
        """Neutral syllables with voiced ratio at or below 0.5 are skipped."""
        ms = [measurement(0, -8.0), measurement(1, 0.0, voiced_ratio=0.4), measurement(2, -8.0)]

        baselines = calibrate(ms, [U, U, U])

        assert baselines[2].semitones == -8.0
        assert baselines[2].support == 1

    def test_global_fallback_for_first_syllable(self) -> None:
        """Before any neutral is seen, the leading neutrals' median applies."""
        ms = [measurement(0, -14.0), measurement(1, -8.0), measurement(2, -10.0)]

        baselines = calibrate(ms, [A, U, U])

        assert baselines[0].source == "global_neutral"
        assert baselines[0].semitones == pytest.approx(-9.0)

    def test_length_mismatch(self) -> None:
        """Measurements and accents must align."""
        with pytest.raises(ValueError):
            calibrate([measurement(0, 0.0)], [U, U])


class TestGlobalBaseline:
    """Tests for the fallback chain."""

    def test_contour_fallback(self) -> None:
        """Without neutral syllables the confident contour frames are used."""
        contour, _ = make_contour([(220.0, 220.0, 0.2)])
        ms = [measurement(0, 5.0)]

        baseline = global_baseline(ms, [A], contour)

        assert baseline.source == "global_contour"
        assert baseline.semitones == pytest.approx(-12.0)

    def test_first_syllable_fallback(self) -> None:
        """Without neutrals or contour the first voiced syllable is used."""
        ms = [measurement(0, 0.0, voiced=False), measurement(1, -5.0)]

        baseline = global_baseline(ms, [A, S])

        assert baseline.source == "first_syllable"
        assert baseline.semitones == -5.0

    def test_nothing_available(self) -> None:
        """No evidence at all gives a zero baseline marked as such."""
        baseline = global_baseline([], [])

        assert baseline.source == "none"
        assert baseline.semitones == 0.0


class TestSummaries:
    """Tests for baseline summaries."""

    def test_average_and_drift(self) -> None:
        """Average in Hz and drift in semitones over voiced syllables."""
        ms = [measurement(0, 0.0), measurement(1, 12.0), measurement(2, 12.0)]
        baselines = calibrate(ms, [U, U, U])

        # Global median of 0, 12, 12 is 12; then the single 0; then median of 0 and 12
        assert [b.semitones for b in baselines] == pytest.approx([12.0, 0.0, 6.0])
        assert baseline_drift(baselines, ms) == pytest.approx(6.0)
        assert average_baseline_hz(baselines, ms) > 0
