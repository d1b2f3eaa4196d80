"""Phonetic distance and weighted edit distance over Devanagari text."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .sandhi import (
    is_dental_retroflex,
    is_epenthetic_vowel,
    is_sibilant_pair,
    is_visarga_variant,
    is_voicing_or_aspiration,
    normalize_text,
    simplify_geminates,
)

SANDHI_COST = 0.1
DENTAL_RETROFLEX_COST = 0.25
VOICING_ASPIRATION_COST = 0.4
SIBILANT_COST = 0.5
INDEL_COST = 1.0


def phonetic_distance(a: str, b: str) -> float:
    """Substitution cost between two characters.

    Args:
        a: First character (or short cluster).
        b: Second character (or short cluster).

    Returns:
        0 for identical or normalization-equivalent input, 0.1 for sandhi
        variants, 0.25 for dental/retroflex, 0.4 for voicing or aspiration
        within one place of articulation, 0.5 for sibilants, else 1.0.
        Symmetric in its arguments.
    """
    if a == b:
        return 0.0
    if simplify_geminates(a) == simplify_geminates(b):
        return 0.0
    if is_visarga_variant(a, b) or is_epenthetic_vowel(a, b):
        return SANDHI_COST
    if is_dental_retroflex(a, b):
        return DENTAL_RETROFLEX_COST
    if is_voicing_or_aspiration(a, b):
        return VOICING_ASPIRATION_COST
    if is_sibilant_pair(a, b):
        return SIBILANT_COST
    return 1.0


@dataclass(frozen=True)
class EditOp:
    """One step of an edit alignment.

    op in {"match", "sub", "del", "ins"}: ``del`` consumes an expected
    character the observation lacks, ``ins`` an extra observed character.
    """

    op: str
    expected_index: int | None
    observed_index: int | None
    cost: float


def _edit_matrix(observed: str, expected: str) -> list[list[float]]:
    n, m = len(expected), len(observed)
    dp = [[0.0] * (m + 1) for _ in range(n + 1)]
    for i in range(1, n + 1):
        dp[i][0] = i * INDEL_COST
    for j in range(1, m + 1):
        dp[0][j] = j * INDEL_COST

    for i in range(1, n + 1):
        for j in range(1, m + 1):
            sub = phonetic_distance(expected[i - 1], observed[j - 1])
            dp[i][j] = min(
                dp[i - 1][j - 1] + sub,
                dp[i - 1][j] + INDEL_COST,
                dp[i][j - 1] + INDEL_COST,
            )
    return dp


def weighted_edit_distance(observed: str, expected: str) -> float:
    """Levenshtein distance with phonetic substitution costs (full DP)."""
    return _edit_matrix(observed, expected)[len(expected)][len(observed)]


def edit_operations(observed: str, expected: str) -> list[EditOp]:
    """Backtrace of the weighted edit alignment, in string order.

    Ties prefer substitution/match, then deletion, then insertion, so the
    same pair of strings always yields the same alignment.

    Args:
        observed: Observed (transcribed) string.
        expected: Expected string.

    Returns:
        List of EditOp covering every character of both strings.
    """
    dp = _edit_matrix(observed, expected)
    ops: list[EditOp] = []
    i, j = len(expected), len(observed)
    while i > 0 or j > 0:
        if i > 0 and j > 0:
            sub = phonetic_distance(expected[i - 1], observed[j - 1])
            if abs(dp[i][j] - (dp[i - 1][j - 1] + sub)) < 1e-9:
                ops.append(EditOp("match" if sub == 0 else "sub", i - 1, j - 1, sub))
                i -= 1
                j -= 1
                continue
        if i > 0 and abs(dp[i][j] - (dp[i - 1][j] + INDEL_COST)) < 1e-9:
            ops.append(EditOp("del", i - 1, None, INDEL_COST))
            i -= 1
            continue
        ops.append(EditOp("ins", None, j - 1, INDEL_COST))
        j -= 1
    ops.reverse()
    return ops


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def similarity_normalized(observed: str, expected: str) -> int:
    """Similarity percentage of two already-normalized strings."""
    if observed == expected:
        return 100
    if not observed or not expected:
        return 0
    max_len = max(len(observed), len(expected))
    distance = weighted_edit_distance(observed, expected)
    return max(0, round_half_up(100 * (max_len - distance) / max_len))


def similarity(observed: str, expected: str) -> int:
    """Phonetic similarity of two texts as a percentage.

    Both strings are normalized first. The score is
    ``100 * (max_len - distance) / max_len`` rounded half up, 100 for equal
    normalized strings and 0 when either is empty.

    Args:
        observed: Transcribed text.
        expected: Canonical text.

    Returns:
        Integer in [0, 100].
    """
    return similarity_normalized(normalize_text(observed), normalize_text(expected))
