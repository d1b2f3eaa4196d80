"""Tests for Devanagari normalization and phonetic similarity."""

import pytest

from swara_grader.phonetics import (
    edit_operations,
    phonetic_distance,
    round_half_up,
    similarity,
    weighted_edit_distance,
)
from swara_grader.sandhi import (
    ASPIRATION_PAIRS,
    DENTAL_RETROFLEX,
    VOICING_PAIRS,
    first_verse,
    normalize_text,
    simplify_geminates,
)


class TestNormalizeText:
    """Tests for text normalization."""

    def test_strips_vedic_accent_marks(self) -> None:
        """Udatta and anudatta marks are orthography only."""
        assert normalize_text("अ॑ग्नि॒") == "अग्नि"

    def test_strips_whitespace_and_punctuation(self) -> None:
        """Spaces and punctuation do not affect the comparison."""
        assert normalize_text("अग्नि, मी-ळे") == normalize_text("अग्निमीळे")

    def test_keeps_first_verse(self) -> None:
        """Only text before the first verse end counts."""
        assert normalize_text("अग्निमीळे पुरोहितं ॥१॥ यज्ञस्य") == normalize_text("अग्निमीळेपुरोहितं")

    def test_drops_zero_width(self) -> None:
        """Zero-width joiners disappear."""
        assert normalize_text("अ\u200bग\u200d") == "अग"

    def test_folds_chandrabindu(self) -> None:
        """Chandrabindu compares equal to anusvara."""
        assert normalize_text("हँस") == normalize_text("हंस")

    def test_simplifies_geminates(self) -> None:
        """Doubled consonants compare as single."""
        assert normalize_text("उत्तम") == "उतम"

    def test_romanized_diacritics(self) -> None:
        """Latin diacritics and case are dropped."""
        assert normalize_text("Agní Mīḷe") == "agnimile"

    def test_empty(self) -> None:
        """Empty and punctuation-only input normalizes to empty."""
        assert normalize_text("") == ""
        assert normalize_text(" ॥ ") == ""


class TestFirstVerse:
    """Tests for verse splitting."""

    def test_leading_marker_ignored(self) -> None:
        """A leading verse marker does not empty the text."""
        assert first_verse("॥ अग्नि ॥ मीळे").strip() == "अग्नि"

    def test_no_marker(self) -> None:
        """Text without markers is returned whole."""
        assert first_verse("अग्नि") == "अग्नि"

    def test_ascii_bar_ends_verse(self) -> None:
        """Typed | and || stand in for danda and double danda."""
        assert normalize_text("राम | सीता") == "राम"
        assert normalize_text("राम || सीता") == "राम"
        assert normalize_text("|| राम") == "राम"


class TestPhoneticDistance:
    """Tests for the substitution cost table."""

    def test_identical(self) -> None:
        assert phonetic_distance("क", "क") == 0.0

    def test_geminate_equivalent(self) -> None:
        """A geminate cluster matches its single consonant."""
        assert phonetic_distance("त्त", "त") == 0.0
        assert simplify_geminates("त्त") == "त"

    def test_sandhi_variants(self) -> None:
        """Visarga realizations and epenthetic vowels are near-free."""
        assert phonetic_distance("ः", "ह") == 0.1
        assert phonetic_distance("ः", "ा") == 0.1
        assert phonetic_distance("्", "ु") == 0.1

    def test_dental_retroflex(self) -> None:
        assert phonetic_distance("त", "ट") == 0.25

    def test_voicing_and_aspiration(self) -> None:
        assert phonetic_distance("क", "ग") == 0.4
        assert phonetic_distance("प", "फ") == 0.4

    def test_sibilants(self) -> None:
        assert phonetic_distance("श", "ष") == 0.5

    def test_unrelated(self) -> None:
        assert phonetic_distance("क", "म") == 1.0

    def test_symmetric_over_tables(self) -> None:
        """Every listed pair costs the same in both directions."""
        for a, b in DENTAL_RETROFLEX + VOICING_PAIRS + ASPIRATION_PAIRS + [("ः", "स"), ("्", "ि")]:
            assert phonetic_distance(a, b) == phonetic_distance(b, a)
            assert 0.0 < phonetic_distance(a, b) < 1.0


class TestEditDistance:
    """Tests for the weighted edit distance and its backtrace."""

    def test_identical(self) -> None:
        assert weighted_edit_distance("अग्नि", "अग्नि") == 0.0

    def test_insert_and_delete_cost_one(self) -> None:
        assert weighted_edit_distance("कम", "क") == 1.0
        assert weighted_edit_distance("क", "कम") == 1.0

    def test_phonetic_substitution(self) -> None:
        """A voicing slip costs less than an unrelated substitution."""
        assert weighted_edit_distance("गम", "कम") == pytest.approx(0.4)

    def test_operations_cover_both_strings(self) -> None:
        """Backtrace reports a deletion for a missing expected character."""
        ops = edit_operations("क", "कम")

        assert [op.op for op in ops] == ["match", "del"]
        assert ops[1].expected_index == 1
        assert ops[1].observed_index is None

    def test_operations_substitution(self) -> None:
        ops = edit_operations("कग", "कम")

        assert [op.op for op in ops] == ["match", "sub"]
        assert ops[1].cost == 1.0

    def test_operations_insertion(self) -> None:
        ops = edit_operations("कमम", "कम")

        assert [op.op for op in ops].count("ins") == 1
        assert sum(op.cost for op in ops) == 1.0


class TestSimilarity:
    """Tests for the similarity percentage."""

    def test_identical_is_100(self) -> None:
        for text in ["अग्निमीळे", "पुरोहितं", "agni"]:
            assert similarity(text, text) == 100

    def test_equal_after_normalization(self) -> None:
        """Accent marks and spacing do not cost anything."""
        assert similarity("अ॑ग्नि मीळे", "अग्निमीळे") == 100

    def test_empty_is_zero(self) -> None:
        assert similarity("", "अग्नि") == 0
        assert similarity("अग्नि", "") == 0

    def test_visarga_sandhi_scores_high(self) -> None:
        """A visarga heard as a long vowel is nearly perfect."""
        assert similarity("रामा", "रामः") >= 90

    def test_symmetric(self) -> None:
        pairs = [("अग्निमीळे", "अग्निमीले"), ("तत्", "तद्"), ("रामः", "रामह")]
        for a, b in pairs:
            assert similarity(a, b) == similarity(b, a)

    def test_bounded(self) -> None:
        """Unrelated text scores 0, never below."""
        assert similarity("कककककक", "म") == 0

    def test_ordering(self) -> None:
        """A near slip scores above an unrelated substitution."""
        assert similarity("गम", "कम") > similarity("लम", "कम")


class TestRoundHalfUp:
    """Tests for rounding."""

    def test_halves_round_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(97.5) == 98
        assert round_half_up(97.4) == 97
