"""Canonical tolerance: snapping and acceptability of detected swaras.

Chant instructors accept renditions a strict classifier would reject, such as
a long-held udatta that measures as dirgha, or a svarita delivered as a step
up rather than a glide. ``snap`` maps a raw class to the class an instructor
would record; ``is_acceptable`` re-checks the result against the same
features, since an accepted rendition is not always an exact snap.
"""

from dataclasses import dataclass

from ..types import Swara, SyllableFeatures


@dataclass
class ToleranceConfig:
    """Feature thresholds for canonical tolerance and gradability."""

    # Snapping
    udatta_keep_svarita_slope: float = 2.0
    udatta_keep_svarita_jump: float = 1.0
    anudatta_snap_start: float = -1.0
    svarita_step_jump: float = 0.8
    svarita_step_end: float = 0.8
    dirgha_snap_duration_ms: float = 200.0

    # Acceptability
    udatta_accept_dirgha_ms: float = 300.0
    udatta_accept_svarita_slope: float = 1.5
    udatta_accept_svarita_end: float = 0.5
    anudatta_accept_start: float = -1.0
    dirgha_accept_duration_ms: float = 200.0
    dirgha_accept_start: float = 0.5

    # Gradability
    min_gradable_duration_ms: float = 180.0
    min_gradable_confidence: float = 0.7


def snap(
    canonical: Swara,
    raw: Swara,
    features: SyllableFeatures,
    config: ToleranceConfig | None = None,
) -> Swara:
    """Correct a raw classification toward its canonical expectation.

    Args:
        canonical: Expected swara.
        raw: Classifier output.
        features: Features of the syllable.
        config: Tolerance thresholds.

    Returns:
        Corrected swara, the raw class when no rule applies.
    """
    cfg = config or ToleranceConfig()
    if raw == canonical:
        return raw

    if canonical == Swara.UDATTA:
        if raw == Swara.DIRGHA_SVARITA:
            return Swara.UDATTA
        if raw == Swara.SVARITA:
            # Only a clear rising accent survives
            if features.slope > cfg.udatta_keep_svarita_slope and features.cross_jump > cfg.udatta_keep_svarita_jump:
                return Swara.SVARITA
            return Swara.UDATTA
        return raw

    if canonical == Swara.ANUDATTA:
        # Started low and recovered upward
        if raw == Swara.SVARITA and features.delta_start < cfg.anudatta_snap_start:
            return Swara.ANUDATTA
        return raw

    if canonical == Swara.SVARITA:
        if raw == Swara.UDATTA and (
            features.cross_jump > cfg.svarita_step_jump or features.delta_end > cfg.svarita_step_end
        ):
            return Swara.SVARITA
        if raw == Swara.DIRGHA_SVARITA:
            return Swara.SVARITA
        return raw

    if canonical == Swara.DIRGHA_SVARITA:
        if (
            raw == Swara.SVARITA
            and features.duration_ms > cfg.dirgha_snap_duration_ms
            and features.sustain_high
        ):
            return Swara.DIRGHA_SVARITA
        return raw

    return raw


def is_acceptable(
    canonical: Swara,
    detected: Swara,
    features: SyllableFeatures,
    config: ToleranceConfig | None = None,
) -> bool:
    """Whether a detected swara is an acceptable rendition of the canonical one.

    Args:
        canonical: Expected swara.
        detected: Detected (usually snapped) swara.
        features: Features of the syllable.
        config: Tolerance thresholds.

    Returns:
        True when the rendition is within tolerance.
    """
    cfg = config or ToleranceConfig()
    if detected == canonical:
        return True

    if canonical == Swara.UDATTA:
        if detected == Swara.DIRGHA_SVARITA and features.duration_ms > cfg.udatta_accept_dirgha_ms:
            return True
        if detected == Swara.SVARITA:
            return (
                features.slope > cfg.udatta_accept_svarita_slope
                and features.delta_end > cfg.udatta_accept_svarita_end
            )
        return False

    if canonical == Swara.ANUDATTA:
        # Starting low is what matters
        return features.delta_start < cfg.anudatta_accept_start

    if canonical == Swara.SVARITA:
        if detected == Swara.UDATTA:
            return features.cross_jump > cfg.svarita_step_jump or features.delta_end > cfg.svarita_step_end
        return detected == Swara.DIRGHA_SVARITA

    if canonical == Swara.DIRGHA_SVARITA:
        return (
            detected in (Swara.SVARITA, Swara.UDATTA)
            and features.duration_ms > cfg.dirgha_accept_duration_ms
            and features.delta_start > cfg.dirgha_accept_start
        )

    return False


def is_gradable(
    duration_ms: float,
    confidence: float,
    config: ToleranceConfig | None = None,
) -> bool:
    """Whether a syllable carries enough evidence to count toward accuracy.

    Monotonic in both arguments: raising duration or confidence never turns
    a gradable syllable ungradable.
    """
    cfg = config or ToleranceConfig()
    return duration_ms >= cfg.min_gradable_duration_ms and confidence >= cfg.min_gradable_confidence
