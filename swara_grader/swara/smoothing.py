"""Local sequence smoothing of low-confidence swara decisions."""

import logging
from dataclasses import dataclass

from ..types import Swara

logger = logging.getLogger(__name__)

_NEAR_PAIRS = {frozenset((Swara.SVARITA, Swara.DIRGHA_SVARITA))}
_OPPOSITE_PAIRS = {
    frozenset((Swara.ANUDATTA, Swara.SVARITA)),
    frozenset((Swara.ANUDATTA, Swara.DIRGHA_SVARITA)),
}


@dataclass
class SmoothingConfig:
    """Configuration for the neighbour smoother."""

    keep_confidence: float = 0.85  # above this the raw class always stands
    min_override_cost: float = 0.5  # overrides need a mismatch costlier than this


def swara_cost(detected: Swara, canonical: Swara) -> float:
    """Mismatch cost between two swaras. Symmetric."""
    if detected == canonical:
        return 0.0
    pair = frozenset((detected, canonical))
    if pair in _NEAR_PAIRS:
        return 0.5
    if pair in _OPPOSITE_PAIRS:
        return 2.0
    return 1.0


def smooth_sequence(
    raw: list[Swara],
    canonical: list[Swara],
    confidences: list[float],
    config: SmoothingConfig | None = None,
) -> list[Swara]:
    """Replace isolated low-confidence mismatches with the canonical swara.

    A syllable is overridden when its confidence is at most
    ``keep_confidence``, at least one immediate neighbour's raw class equals
    this syllable's canonical class, and the mismatch cost exceeds
    ``min_override_cost``. Decisions read only the raw sequence, so one
    override never feeds the next.

    Args:
        raw: Raw classifier output per syllable.
        canonical: Expected swara per syllable.
        confidences: Raw confidence per syllable.
        config: Smoothing configuration.

    Returns:
        Smoothed swaras; the raw sequence unchanged when the lengths differ.
    """
    cfg = config or SmoothingConfig()
    n = len(raw)
    if n != len(canonical) or n != len(confidences):
        logger.warning(
            f"Skipping smoothing: {n} detected, {len(canonical)} canonical, "
            f"{len(confidences)} confidences"
        )
        return list(raw)

    smoothed: list[Swara] = []
    for i in range(n):
        detected = raw[i]
        expected = canonical[i]

        if confidences[i] > cfg.keep_confidence:
            smoothed.append(detected)
            continue

        support = 0
        if i > 0 and raw[i - 1] == expected:
            support += 1
        if i < n - 1 and raw[i + 1] == expected:
            support += 1

        if support >= 1 and swara_cost(detected, expected) > cfg.min_override_cost:
            smoothed.append(expected)
        else:
            smoothed.append(detected)

    return smoothed
