"""Devanagari normalization and sandhi-aware confusion tables.

Transcripts of Vedic recitation differ from the printed text in ways a
listener would not count as mispronunciation:
- Accent marks, zero-width joiners and punctuation are orthography only
- A doubled consonant (त्त) is heard as the single consonant
- Visarga (ः) is realized as "h", as "s", or as an echo of the vowel
- A final bare consonant is often transcribed with a short vowel added

This module normalizes text before comparison and groups the consonants
that learners and recognizers commonly confuse.
"""

import re
import unicodedata

VISARGA = "\u0903"
VIRAMA = "\u094d"
ANUSVARA = "\u0902"
CHANDRABINDU = "\u0901"

_GEMINATE = re.compile(r"(.)्\1")
_ZERO_WIDTH = re.compile("[\u200b-\u200d\ufeff]")
_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[.,!?\-_:;'\"()\[\]{}]")
_LATIN_COMBINING = re.compile("[\u0300-\u036f]")
# Udatta/anudatta/grave/acute and the Vedic Extensions blocks
_VEDIC_MARKS = re.compile("[\u0951-\u0954\u1cd0-\u1cff\ua8e0-\ua8f1]")
# Danda, double danda and their typed stand-in
VERSE_MARKS = "।॥|"
VERSE_END = re.compile(r"[।॥|]+")
_VERSE_NUMBER = re.compile(r"[०-९0-9]+")

VOWEL_SIGNS = frozenset("ािीुूृॄेैोौ")

# Substitution pairs with a fixed reduced cost
DENTAL_RETROFLEX = [("त", "ट"), ("थ", "ठ"), ("द", "ड"), ("ध", "ढ"), ("न", "ण")]
VOICING_PAIRS = [
    ("क", "ग"), ("ख", "घ"), ("च", "ज"), ("छ", "झ"), ("त", "द"),
    ("थ", "ध"), ("ट", "ड"), ("ठ", "ढ"), ("प", "ब"), ("फ", "भ"),
]
ASPIRATION_PAIRS = [
    ("क", "ख"), ("ग", "घ"), ("च", "छ"), ("ज", "झ"), ("त", "थ"),
    ("द", "ध"), ("ट", "ठ"), ("ड", "ढ"), ("प", "फ"), ("ब", "भ"),
]
SIBILANTS = frozenset("शषस")

# Sounds a visarga is commonly realized as
VISARGA_REALIZATIONS = frozenset("हस") | VOWEL_SIGNS
# Short vowels a final bare consonant is commonly transcribed with
EPENTHETIC_VOWELS = frozenset("\u0941\u093f")  # u, i


def _pair_set(pairs: list[tuple[str, str]]) -> frozenset[frozenset[str]]:
    return frozenset(frozenset(p) for p in pairs)


DENTAL_RETROFLEX_SET = _pair_set(DENTAL_RETROFLEX)
VOICING_ASPIRATION_SET = _pair_set(VOICING_PAIRS) | _pair_set(ASPIRATION_PAIRS)


def simplify_geminates(text: str) -> str:
    """Collapse consonant + virama + same consonant into the consonant."""
    return _GEMINATE.sub(r"\1", text)


def first_verse(text: str) -> str:
    """Text before the first verse-end marker, ignoring leading markers."""
    stripped = text.strip().lstrip(VERSE_MARKS + " ")
    return VERSE_END.split(stripped, maxsplit=1)[0]


def normalize_text(text: str) -> str:
    """Normalize Devanagari (or romanized) text for phonetic comparison.

    Steps: keep the first verse, lowercase, drop whitespace, punctuation and
    verse numbers, decompose (NFD) and drop Latin combining diacritics and
    Vedic accent marks, drop zero-width characters, fold chandrabindu into
    anusvara, and simplify geminate consonants.

    Args:
        text: Raw transcript or script text.

    Returns:
        Normalized string, possibly empty.
    """
    text = first_verse(text).lower()
    text = _WHITESPACE.sub("", text)
    text = _PUNCTUATION.sub("", text)
    text = _VERSE_NUMBER.sub("", text)
    text = unicodedata.normalize("NFD", text)
    text = _LATIN_COMBINING.sub("", text)
    text = _VEDIC_MARKS.sub("", text)
    text = _ZERO_WIDTH.sub("", text)
    text = text.replace(CHANDRABINDU, ANUSVARA)
    return simplify_geminates(text)


def is_visarga_variant(a: str, b: str) -> bool:
    """Visarga against one of its spoken realizations."""
    return (a == VISARGA and b in VISARGA_REALIZATIONS) or (
        b == VISARGA and a in VISARGA_REALIZATIONS
    )


def is_epenthetic_vowel(a: str, b: str) -> bool:
    """Virama against a short vowel sign inserted after a bare consonant."""
    return (a == VIRAMA and b in EPENTHETIC_VOWELS) or (b == VIRAMA and a in EPENTHETIC_VOWELS)


def is_dental_retroflex(a: str, b: str) -> bool:
    return frozenset((a, b)) in DENTAL_RETROFLEX_SET


def is_voicing_or_aspiration(a: str, b: str) -> bool:
    return frozenset((a, b)) in VOICING_ASPIRATION_SET


def is_sibilant_pair(a: str, b: str) -> bool:
    return a != b and a in SIBILANTS and b in SIBILANTS
