"""DTW alignment of pitch contours in semitone space."""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..pitch import PitchExtractorConfig, contour_semitones, extract_pitch
from ..types import CanonicalSyllable, ContourAlignment, PitchContour, SyllableSpan
from .base import Aligner, AlignmentResult

logger = logging.getLogger(__name__)


_DIAG, _UP, _LEFT = 0, 1, 2


def dtw_alignment(
    query: NDArray[np.floating],
    reference: NDArray[np.floating],
    band_fraction: float | None = 0.3,
) -> tuple[float, list[tuple[int, int]]]:
    """Compute DTW alignment between two semitone series.

    Uses a Sakoe-Chiba band around the proportional diagonal. Local cost is
    the absolute semitone difference between aligned frames, computed one
    band row at a time; only the step taken into each band cell is kept for
    the backtrack. The backtrack prefers the diagonal step on ties, so
    equal-cost paths stay as close to a one-to-one match as possible.

    Args:
        query: Query series [T1].
        reference: Reference series [T2].
        band_fraction: Band half-width as a fraction of the longer series,
            widened when needed so the final cell is always reachable.
            None searches the full matrix.

    Returns:
        Tuple of (total_cost, warping_path).
        Warping path is a list of (query_idx, ref_idx) tuples running from
        (0, 0) to (T1 - 1, T2 - 1), monotonic in both indices.
    """
    query = np.asarray(query, dtype=np.float64).reshape(-1)
    reference = np.asarray(reference, dtype=np.float64).reshape(-1)
    T1, T2 = len(query), len(reference)

    if T1 == 0 or T2 == 0:
        return float("inf"), []

    if band_fraction is None:
        band_width = T2
    else:
        # Row 1 must reach column 1 and consecutive rows must overlap
        band_width = max(1, int(max(T1, T2) * band_fraction), -(-T2 // T1))

    prev = np.full(T2 + 1, np.inf)
    prev[0] = 0.0
    steps: list[tuple[int, NDArray[np.int8]]] = []

    for i in range(1, T1 + 1):
        expected_j = int(i * T2 / T1)
        j_min = max(1, expected_j - band_width)
        j_max = min(T2, expected_j + band_width)

        costs = np.abs(query[i - 1] - reference[j_min - 1 : j_max])
        diag = prev[j_min - 1 : j_max]
        up = prev[j_min : j_max + 1]
        best = np.minimum(diag, up)

        # row[j] = costs[j] + min(best[j], row[j - 1]), solved as a prefix scan
        run = np.cumsum(costs)
        band = run + np.minimum.accumulate(best + costs - run)

        left = np.concatenate(([np.inf], band[:-1]))
        step = np.where(diag <= up, _DIAG, _UP).astype(np.int8)
        step[left < best] = _LEFT
        steps.append((j_min, step))

        row = np.full(T2 + 1, np.inf)
        row[j_min : j_max + 1] = band
        prev = row

    total = float(prev[T2])
    if np.isinf(total):
        return float("inf"), []

    path = []
    i, j = T1, T2
    while i > 0 and j > 0:
        path.append((i - 1, j - 1))
        j_min, step = steps[i - 1]
        move = step[j - j_min]
        if move == _DIAG:
            i, j = i - 1, j - 1
        elif move == _UP:
            i -= 1
        else:
            j -= 1

    return total, path[::-1]


def project_boundaries(
    ref_boundaries: list[float],
    warping_path: list[tuple[int, int]],
    hop_seconds: float = 0.01,
    query_duration: float = 0.0,
) -> list[float]:
    """Project reference times onto the query through a warping path.

    Args:
        ref_boundaries: Reference boundary times in seconds.
        warping_path: DTW warping path [(query_idx, ref_idx), ...].
        hop_seconds: Frame hop shared by both contours.
        query_duration: Query duration in seconds, used as upper clamp.

    Returns:
        Query boundary times in seconds.
    """
    if not warping_path:
        return list(ref_boundaries)

    # First query frame reached for each reference frame
    ref_to_query: dict[int, int] = {}
    for q_idx, r_idx in warping_path:
        ref_to_query.setdefault(r_idx, q_idx)

    ref_frames = np.array(sorted(ref_to_query), dtype=np.float64)
    query_frames = np.array([ref_to_query[int(r)] for r in ref_frames], dtype=np.float64)

    projected = []
    for t in ref_boundaries:
        frame = t / hop_seconds
        q = float(np.interp(frame, ref_frames, query_frames))
        q_time = q * hop_seconds
        if query_duration > 0:
            q_time = min(q_time, query_duration)
        projected.append(max(0.0, q_time))
    return projected


@dataclass
class DTWAlignerConfig:
    """Configuration for reference-contour alignment and comparison."""

    band_fraction: float | None = 0.3
    cost_ceiling_st: float = 6.0  # mean cost at which similarity reaches 0
    min_confidence: float = 0.3
    min_frame_confidence: float = 0.3


def align_contours(
    reference: PitchContour,
    user: PitchContour,
    config: DTWAlignerConfig | None = None,
) -> ContourAlignment:
    """Compare two full performances by DTW over key-independent semitones.

    Args:
        reference: Reference performance contour.
        user: User performance contour.
        config: Alignment configuration.

    Returns:
        ContourAlignment; similarity 0 with an empty path when either
        contour has no frames.
    """
    cfg = config or DTWAlignerConfig()
    user_st = contour_semitones(user, cfg.min_frame_confidence)
    ref_st = contour_semitones(reference, cfg.min_frame_confidence)

    cost, path = dtw_alignment(user_st, ref_st, cfg.band_fraction)
    if not path:
        return ContourAlignment(path=(), cost=float("inf"), mean_cost=float("inf"), similarity=0)

    mean_cost = cost / len(path)
    similarity = int(round(100 * max(0.0, 1.0 - mean_cost / cfg.cost_ceiling_st)))
    logger.debug(f"Contour DTW: {len(path)} steps, mean cost {mean_cost:.3f} st")
    return ContourAlignment(
        path=tuple(path),
        cost=cost,
        mean_cost=mean_cost,
        similarity=similarity,
    )


class DTWAligner(Aligner):
    """Aligner using dynamic time warping against a reference recording.

    The reference and user pitch contours are warped onto each other, then
    the reference syllable boundaries are projected onto the user recording.
    Reference boundaries come from the canonical syllable times when every
    syllable is timed, otherwise from a uniform division of the reference.
    """

    def __init__(
        self,
        config: DTWAlignerConfig | None = None,
        pitch_config: PitchExtractorConfig | None = None,
    ):
        """Initialize DTW aligner.

        Args:
            config: Alignment configuration.
            pitch_config: Pitch extractor configuration for both recordings.
        """
        self.config = config or DTWAlignerConfig()
        self.pitch_config = pitch_config or PitchExtractorConfig()

    @property
    def name(self) -> str:
        return "dtw"

    def align(
        self,
        audio: NDArray[np.floating],
        syllables: list[CanonicalSyllable],
        sr: int = 16000,
    ) -> AlignmentResult:
        """Align without a reference, which falls back to uniform.

        For DTW alignment with reference, use align_with_reference().
        """
        return self._align_uniform(len(audio) / sr, syllables, "no_reference")

    def align_with_reference(
        self,
        user_audio: NDArray[np.floating],
        reference_audio: NDArray[np.floating],
        syllables: list[CanonicalSyllable],
        sr: int = 16000,
    ) -> AlignmentResult:
        """Align user audio using a reference recording.

        Args:
            user_audio: User audio samples.
            reference_audio: Reference audio samples.
            syllables: Canonical syllables, optionally timed on the reference.
            sr: Sample rate shared by both recordings.

        Returns:
            AlignmentResult with projected syllable spans.
        """
        user = extract_pitch(user_audio, sr, self.pitch_config)
        reference = extract_pitch(reference_audio, sr, self.pitch_config)
        return self.align_contours(user, reference, syllables)

    def align_contours(
        self,
        user: PitchContour,
        reference: PitchContour,
        syllables: list[CanonicalSyllable],
    ) -> AlignmentResult:
        """Align precomputed user and reference contours.

        Args:
            user: User pitch contour.
            reference: Reference pitch contour.
            syllables: Canonical syllables.

        Returns:
            AlignmentResult with projected syllable spans.
        """
        if not syllables:
            return AlignmentResult(
                syllable_spans=[],
                overall_confidence=1.0,
                warnings=["no_syllables"],
                method=self.name,
            )

        comparison = align_contours(reference, user, self.config)
        if not comparison.path:
            logger.info("DTW found no path between reference and user contours")
            return self._align_uniform(user.duration, syllables, "dtw_failed")

        if all(s.is_timed for s in syllables):
            ref_boundaries = [float(s.start_time) for s in syllables]  # type: ignore[arg-type]
            ref_boundaries.append(float(syllables[-1].end_time))  # type: ignore[arg-type]
        else:
            step = reference.duration / len(syllables)
            ref_boundaries = [i * step for i in range(len(syllables) + 1)]

        # Path pairs are (user_idx, ref_idx)
        user_boundaries = project_boundaries(
            ref_boundaries,
            list(comparison.path),
            hop_seconds=user.hop_seconds,
            query_duration=user.duration,
        )
        if not all(b > a for a, b in zip(user_boundaries[:-1], user_boundaries[1:])):
            logger.info("Projected boundaries collapsed, using uniform segmentation")
            return self._align_uniform(user.duration, syllables, "boundary_projection_incomplete")

        confidence = max(
            self.config.min_confidence,
            1.0 - min(1.0, comparison.mean_cost / self.config.cost_ceiling_st),
        )
        spans = [
            SyllableSpan(
                index=i,
                start_time=user_boundaries[i],
                end_time=user_boundaries[i + 1],
                confidence=confidence,
            )
            for i in range(len(syllables))
        ]
        return AlignmentResult(
            syllable_spans=spans,
            overall_confidence=confidence,
            warnings=[],
            method=self.name,
        )

    def _align_uniform(
        self,
        duration: float,
        syllables: list[CanonicalSyllable],
        reason: str,
    ) -> AlignmentResult:
        """Fallback to uniform alignment."""
        from .uniform import uniform_spans

        return AlignmentResult(
            syllable_spans=uniform_spans(duration, len(syllables)),
            overall_confidence=0.5,
            warnings=["uniform_alignment", reason, "dtw_fallback_to_uniform"],
            method="uniform",
        )
