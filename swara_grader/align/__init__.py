"""Alignment module for syllable boundary detection."""

from .base import Aligner, AlignmentResult
from .dtw import DTWAligner, DTWAlignerConfig, align_contours
from .onset import OnsetAligner, OnsetConfig
from .uniform import UniformAligner

__all__ = [
    "Aligner",
    "AlignmentResult",
    "DTWAligner",
    "DTWAlignerConfig",
    "OnsetAligner",
    "OnsetConfig",
    "UniformAligner",
    "align_contours",
]
