"""Pronunciation matching of a transcript against canonical syllables.

The transcript comes from an external speech-to-text step and is received
as a value. A failed or empty transcript scores 0 with an explicit reason;
retrying transcription is the caller's concern.
"""

import logging
from dataclasses import dataclass

from .phonetics import edit_operations, similarity_normalized
from .sandhi import VERSE_END, VERSE_MARKS, normalize_text
from .types import CanonicalSyllable, PronunciationResult, SyllablePronunciation, Transcription

logger = logging.getLogger(__name__)

TRANSCRIPTION_FAILED = "transcription failed"


@dataclass
class PronunciationConfig:
    """Configuration for pronunciation matching and feedback."""

    match_threshold: int = 50  # per-syllable score needed to count as matched
    excellent: int = 80
    good: int = 65
    fair: int = 45
    max_focus_syllables: int = 3


def _observed_slices(observed: str, expected_parts: list[str]) -> list[str]:
    """Split the observed string into one slice per expected part.

    Each observed character follows the expected character it was aligned
    with; inserted characters join the syllable of the preceding expected
    character (the first syllable when nothing precedes them).
    """
    owner: list[int] = []
    for k, part in enumerate(expected_parts):
        owner.extend([k] * len(part))

    slices = [""] * len(expected_parts)
    if not expected_parts:
        return slices

    current = 0
    for op in edit_operations(observed, "".join(expected_parts)):
        if op.expected_index is not None:
            current = owner[op.expected_index]
        if op.observed_index is not None:
            slices[current] += observed[op.observed_index]
    return slices


def _first_verse_parts(syllables: list[CanonicalSyllable]) -> list[str | None]:
    """Normalized text per syllable, cut at the first verse end.

    Syllables after the one carrying the first verse-end marker get None.
    Markers before any syllable content are skipped, as ``first_verse`` does
    for the joined text.
    """
    parts: list[str | None] = []
    started = ended = False
    for syllable in syllables:
        if ended:
            parts.append(None)
            continue
        text = syllable.text if started else syllable.text.lstrip(VERSE_MARKS + " ")
        marker = VERSE_END.search(text)
        part = normalize_text(text[: marker.start()] if marker else text)
        parts.append(part)
        started = started or bool(part)
        ended = marker is not None
    return parts


def failed_result(syllables: list[CanonicalSyllable], reason: str, transcript: str = "") -> PronunciationResult:
    """Zero-score result carrying the failure reason."""
    return PronunciationResult(
        syllables=tuple(
            SyllablePronunciation(
                index=s.index,
                expected_text=s.text,
                observed_text="",
                score=0,
                matched=False,
            )
            for s in syllables
        ),
        similarity=0,
        transcript=transcript,
        expected_text="".join(s.text for s in syllables),
        failure_reason=reason,
    )


def match_pronunciation(
    transcription: Transcription,
    syllables: list[CanonicalSyllable],
    config: PronunciationConfig | None = None,
) -> PronunciationResult:
    """Score a transcript against the canonical syllables.

    Args:
        transcription: Result of the speech-to-text step.
        syllables: Canonical syllables in order.
        config: Matching configuration.

    Returns:
        PronunciationResult with overall and per-syllable scores. When the
        transcription failed, similarity is 0 and ``failure_reason`` is set.
    """
    cfg = config or PronunciationConfig()

    if not transcription.ok:
        detail = transcription.error or "empty transcript"
        logger.warning(f"Pronunciation not scored: {detail}")
        return failed_result(syllables, f"{TRANSCRIPTION_FAILED}: {detail}", transcription.text)

    expected_text = "".join(s.text for s in syllables)
    observed = normalize_text(transcription.text)
    overall = similarity_normalized(observed, normalize_text(expected_text))

    parts = _first_verse_parts(syllables)
    reached = [p for p in parts if p is not None]
    slices = iter(_observed_slices(observed, reached))

    results = []
    for syllable, part in zip(syllables, parts):
        if part is None:
            results.append(
                SyllablePronunciation(
                    index=syllable.index,
                    expected_text=syllable.text,
                    observed_text="",
                    score=0,
                    matched=False,
                    reached=False,
                )
            )
            continue
        observed_part = next(slices)
        score = similarity_normalized(observed_part, part)
        results.append(
            SyllablePronunciation(
                index=syllable.index,
                expected_text=syllable.text,
                observed_text=observed_part,
                score=score,
                matched=score >= cfg.match_threshold,
            )
        )

    logger.debug(
        f"Pronunciation similarity {overall} over {len(reached)} of {len(syllables)} syllables"
    )
    return PronunciationResult(
        syllables=tuple(results),
        similarity=overall,
        transcript=transcription.text,
        expected_text=expected_text,
    )


def pronunciation_feedback(
    result: PronunciationResult,
    config: PronunciationConfig | None = None,
) -> list[str]:
    """Human-readable feedback lines for a pronunciation result."""
    cfg = config or PronunciationConfig()
    if result.failed:
        return [f"Audio {result.failure_reason}. Please try again."]

    if result.similarity >= cfg.excellent:
        lines = ["Excellent pronunciation!"]
    elif result.similarity >= cfg.good:
        lines = ["Good pronunciation! Keep practicing."]
    elif result.similarity >= cfg.fair:
        lines = ["Fair pronunciation. Try listening to the reference audio again."]
    else:
        lines = ["Keep practicing! Listen carefully to the reference audio."]

    missed = [s.expected_text for s in result.syllables if s.reached and not s.matched]
    if 0 < len(missed) <= cfg.max_focus_syllables:
        lines.append(f"Focus on: {', '.join(missed)}")
    return lines
