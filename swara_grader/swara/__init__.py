"""Swara classification module."""

from .base import SwaraClassification, SwaraClassifier
from .rules import RuleBasedClassifier, RuleClassifierConfig
from .smoothing import SmoothingConfig, smooth_sequence, swara_cost
from .tolerance import ToleranceConfig, is_acceptable, is_gradable, snap

__all__ = [
    "RuleBasedClassifier",
    "RuleClassifierConfig",
    "SmoothingConfig",
    "SwaraClassification",
    "SwaraClassifier",
    "ToleranceConfig",
    "is_acceptable",
    "is_gradable",
    "smooth_sequence",
    "snap",
    "swara_cost",
]
