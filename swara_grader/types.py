"""Type definitions and data structures for Vedic swara grading."""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray


class Swara(str, Enum):
    """Pitch-accent class of a recited syllable."""

    UDATTA = "udatta"  # neutral
    ANUDATTA = "anudatta"  # low
    SVARITA = "svarita"  # rising
    DIRGHA_SVARITA = "dirgha_svarita"  # prolonged rise

    @classmethod
    def parse(cls, label: "str | Swara") -> "Swara":
        """Parse a swara label, accepting the common catalog spellings.

        Args:
            label: Canonical value, enum name or transliteration variant.

        Returns:
            Matching Swara.

        Raises:
            ValueError: If the label names no known swara.
        """
        if isinstance(label, Swara):
            return label
        key = label.strip().lower().replace("-", "_").replace(" ", "_")
        swara = _SWARA_ALIASES.get(key)
        if swara is None:
            raise ValueError(f"Unknown swara label: {label!r}")
        return swara

    @property
    def symbol(self) -> str:
        """Short display mark used in tables."""
        return _SWARA_SYMBOLS[self]


_SWARA_ALIASES: dict[str, Swara] = {
    "udatta": Swara.UDATTA,
    "udaatta": Swara.UDATTA,
    "udhaatha": Swara.UDATTA,
    "udātta": Swara.UDATTA,
    "neutral": Swara.UDATTA,
    "anudatta": Swara.ANUDATTA,
    "anudaatta": Swara.ANUDATTA,
    "anudhaatha": Swara.ANUDATTA,
    "anudātta": Swara.ANUDATTA,
    "low": Swara.ANUDATTA,
    "svarita": Swara.SVARITA,
    "swarita": Swara.SVARITA,
    "rising": Swara.SVARITA,
    "dirgha_svarita": Swara.DIRGHA_SVARITA,
    "dirgha": Swara.DIRGHA_SVARITA,
    "dheerga": Swara.DIRGHA_SVARITA,
    "dīrgha": Swara.DIRGHA_SVARITA,
    "prolonged": Swara.DIRGHA_SVARITA,
    "prolonged_rise": Swara.DIRGHA_SVARITA,
}

_SWARA_SYMBOLS: dict[Swara, str] = {
    Swara.UDATTA: "-",
    Swara.ANUDATTA: "_",
    Swara.SVARITA: "/",
    Swara.DIRGHA_SVARITA: "//",
}


@dataclass(frozen=True)
class PitchFrame:
    """Single pitch estimate. Frequency is 0 when the frame is unvoiced."""

    time: float  # seconds, centre of the analysis window
    frequency: float  # Hz
    confidence: float  # 0..1

    @property
    def voiced(self) -> bool:
        return self.frequency > 0


@dataclass(frozen=True)
class PitchContour:
    """Pitch frames at a fixed hop plus the recording they came from."""

    frames: tuple[PitchFrame, ...]
    sample_rate: int
    duration: float  # seconds
    hop_seconds: float = 0.01

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def times(self) -> NDArray[np.floating]:
        return np.array([f.time for f in self.frames], dtype=np.float64)

    @property
    def frequencies(self) -> NDArray[np.floating]:
        return np.array([f.frequency for f in self.frames], dtype=np.float64)

    @property
    def confidences(self) -> NDArray[np.floating]:
        return np.array([f.confidence for f in self.frames], dtype=np.float64)

    @property
    def voiced_mask(self) -> NDArray[np.bool_]:
        return self.frequencies > 0

    def between(self, start: float, end: float) -> tuple[PitchFrame, ...]:
        """Frames whose time falls in [start, end)."""
        return tuple(f for f in self.frames if start <= f.time < end)


@dataclass(frozen=True)
class CanonicalSyllable:
    """A syllable of the reference script with its expected accent."""

    index: int
    text: str
    expected: Swara | None  # None when the script leaves the accent unmarked
    start_time: float | None = None  # seconds, on the reference recording
    end_time: float | None = None

    @property
    def is_timed(self) -> bool:
        return self.start_time is not None and self.end_time is not None


@dataclass(frozen=True)
class SyllableSpan:
    """Time span assigned to one syllable by an aligner."""

    index: int
    start_time: float  # seconds
    end_time: float  # seconds
    confidence: float  # 0..1

    @property
    def duration(self) -> float:
        return max(0.0, self.end_time - self.start_time)


@dataclass(frozen=True)
class SyllableMeasurement:
    """Absolute acoustic measurements for one syllable."""

    index: int
    start_time: float
    end_time: float
    f0_start_hz: float
    f0_end_hz: float
    f0_start_st: float  # semitones re A4
    f0_end_st: float
    slope_st_per_sec: float
    duration_ms: float  # voiced duration
    energy_rms: float
    voiced_ratio: float
    voiced: bool


@dataclass(frozen=True)
class Baseline:
    """Neutral pitch reference valid at one syllable."""

    semitones: float
    source: str  # rolling | single | global_neutral | global_contour | first_syllable | none
    support: int  # number of syllables or frames behind the value
    bands: dict[Swara, tuple[float, float]] = field(default_factory=dict)

    @property
    def hz(self) -> float:
        return float(440.0 * 2.0 ** (self.semitones / 12.0))


@dataclass(frozen=True)
class ClassificationResult:
    """Accent decision for a syllable, before and after canonical tolerance."""

    raw: Swara
    corrected: Swara
    confidence: float  # 0..1
    acceptable: bool
    gradable: bool
    smoothed: bool = False
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class SyllableFeatures:
    """Measurement plus baseline-relative features for one syllable."""

    measurement: SyllableMeasurement
    text: str
    canonical: Swara | None
    baseline_st: float
    delta_start: float
    delta_end: float
    cross_jump: float
    cross_slope: float
    sustain_high: bool
    local_high: float
    long_compared: float
    classification: ClassificationResult | None = None

    @property
    def index(self) -> int:
        return self.measurement.index

    @property
    def duration_ms(self) -> float:
        return self.measurement.duration_ms

    @property
    def slope(self) -> float:
        return self.measurement.slope_st_per_sec

    @property
    def voiced(self) -> bool:
        return self.measurement.voiced


@dataclass(frozen=True)
class AnalysisResult:
    """Accent analysis of one recording."""

    syllables: tuple[SyllableFeatures, ...]
    overall_quality: float  # mean confidence over voiced syllables
    average_baseline_hz: float
    drift_st: float
    alignment_method: str
    warnings: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.syllables)

    @property
    def gradable_count(self) -> int:
        return sum(
            1 for s in self.syllables if s.classification is not None and s.classification.gradable
        )

    @property
    def acceptable_count(self) -> int:
        return sum(
            1
            for s in self.syllables
            if s.classification is not None
            and s.classification.gradable
            and s.classification.acceptable
        )

    @property
    def accent_accuracy(self) -> float | None:
        """Percentage of gradable syllables that are acceptable, None if none are gradable."""
        gradable = self.gradable_count
        if gradable == 0:
            return None
        return 100.0 * self.acceptable_count / gradable


@dataclass(frozen=True)
class Transcription:
    """Outcome of the external speech-to-text step."""

    text: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text.strip())


@dataclass(frozen=True)
class SyllablePronunciation:
    """Pronunciation match for one canonical syllable."""

    index: int
    expected_text: str
    observed_text: str
    score: int  # 0..100
    matched: bool
    reached: bool = True  # False when the syllable lies past the first verse end


@dataclass(frozen=True)
class PronunciationResult:
    """Phonetic comparison of a transcript against the canonical text."""

    syllables: tuple[SyllablePronunciation, ...]
    similarity: int  # 0..100
    transcript: str
    expected_text: str
    failure_reason: str | None = None

    @property
    def failed(self) -> bool:
        return self.failure_reason is not None

    @property
    def matched_count(self) -> int:
        return sum(1 for s in self.syllables if s.matched)


@dataclass(frozen=True)
class ContourAlignment:
    """DTW comparison of two full performances."""

    path: tuple[tuple[int, int], ...]
    cost: float
    mean_cost: float  # semitones per path step
    similarity: int  # 0..100


@dataclass(frozen=True)
class ChantScore:
    """Combined pronunciation and accent score for one recitation."""

    overall: int | None
    pronunciation_accuracy: int | None
    accent_accuracy: float | None
    pronunciation: PronunciationResult | None
    analysis: AnalysisResult | None
    missing: tuple[str, ...] = ()
    feedback: tuple[str, ...] = ()

    def accuracy_label(self) -> str | None:
        """Coarse label for the overall score."""
        if self.overall is None:
            return None
        if self.overall >= 90:
            return "perfect"
        if self.overall >= 75:
            return "good"
        if self.overall >= 60:
            return "fair"
        return "poor"
