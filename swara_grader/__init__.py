"""
Swara Grader - Vedic chant pronunciation and pitch-accent grading.

This library analyzes a recitation against a canonical syllable script:
it measures the pitch contour, classifies the swara (udatta, anudatta,
svarita, dirgha svarita) of every syllable against a rolling neutral
baseline, matches the transcript phonetically, and fuses both into a score.

Modules:
    types: Type definitions and data structures
    pitch: YIN pitch extraction and semitone conversion
    align: Syllable segmentation and contour DTW
    baseline: Rolling neutral-pitch baseline
    swara: Rule classifier, canonical tolerance and smoothing
    sandhi: Devanagari normalization and confusion tables
    phonetics: Weighted edit distance and similarity
    scorer: Analysis pipeline and score fusion
"""

from .align import DTWAligner, OnsetAligner, UniformAligner, align_contours
from .baseline import calibrate
from .phonetics import phonetic_distance, similarity
from .pitch import extract_pitch, hz_to_semitones
from .pronunciation import match_pronunciation
from .scorer import ChantScorer, ScorerConfig, SwaraAnalyzer, aggregate_scores
from .swara import RuleBasedClassifier, is_acceptable, is_gradable, smooth_sequence, snap
from .types import (
    AnalysisResult,
    Baseline,
    CanonicalSyllable,
    ChantScore,
    ClassificationResult,
    ContourAlignment,
    PitchContour,
    PitchFrame,
    PronunciationResult,
    Swara,
    SyllableFeatures,
    SyllableSpan,
    Transcription,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "Swara",
    "PitchFrame",
    "PitchContour",
    "CanonicalSyllable",
    "SyllableSpan",
    "SyllableFeatures",
    "Baseline",
    "ClassificationResult",
    "AnalysisResult",
    "Transcription",
    "PronunciationResult",
    "ContourAlignment",
    "ChantScore",
    # Pitch
    "extract_pitch",
    "hz_to_semitones",
    # Alignment
    "DTWAligner",
    "OnsetAligner",
    "UniformAligner",
    "align_contours",
    # Swara
    "calibrate",
    "RuleBasedClassifier",
    "snap",
    "is_acceptable",
    "is_gradable",
    "smooth_sequence",
    # Pronunciation
    "phonetic_distance",
    "similarity",
    "match_pronunciation",
    # Scorer
    "SwaraAnalyzer",
    "ChantScorer",
    "ScorerConfig",
    "aggregate_scores",
]
