"""Unit tests for text normalization and bigram similarity."""

import pytest

from label_compliance.utils.text_normalization import (
    bigram_similarity,
    fuzzy_word_find,
    normalize_for_word_matching,
    normalize_whitespace,
    strip_ocr_punctuation,
)


class TestNormalizeWhitespace:
    def test_collapses_runs(self):
        assert normalize_whitespace("brand   name\n\there") == "brand name here"

    def test_trims(self):
        assert normalize_whitespace("  Old Tom  ") == "Old Tom"

    def test_keeps_case(self):
        assert normalize_whitespace("OLD Tom") == "OLD Tom"

    def test_empty_string(self):
        assert normalize_whitespace("") == ""


class TestStripOcrPunctuation:
    def test_strips_dots_commas_apostrophes_hyphens(self):
        assert strip_ocr_punctuation("Jack's Old-No. 7,") == "Jacks OldNo 7"

    def test_keeps_other_punctuation(self):
        assert strip_ocr_punctuation("45% (90 proof)") == "45% (90 proof)"


class TestNormalizeForWordMatching:
    def test_keeps_decimal_points(self):
        assert normalize_for_word_matching("12.5% Alc.") == "12.5% alc"

    def test_slash_becomes_space(self):
        assert normalize_for_word_matching("ALC/VOL") == "alc vol"

    def test_drops_abbreviation_periods(self):
        assert normalize_for_word_matching("Dr. McGillicuddy's") == "dr mcgillicuddy s"

    def test_punctuation_only(self):
        assert normalize_for_word_matching("--") == ""


class TestBigramSimilarity:
    def test_identical(self):
        assert bigram_similarity("Old Tom Reserve", "Old Tom Reserve") == 1.0

    def test_case_insensitive(self):
        assert bigram_similarity("OLD TOM", "old tom") == 1.0

    def test_whitespace_insensitive(self):
        assert bigram_similarity("Old  Tom\n", "Old Tom") == 1.0

    def test_dice_coefficient(self):
        # night: ni ig gh ht / nacht: na ac ch ht -> 2 * 1 / 8
        assert bigram_similarity("night", "nacht") == pytest.approx(0.25)

    def test_symmetric(self):
        assert bigram_similarity("Bulleit", "Bullet") == bigram_similarity("Bullet", "Bulleit")

    def test_single_characters(self):
        assert bigram_similarity("a", "b") == 0.0
        assert bigram_similarity("a", "A") == 1.0

    def test_ocr_typo_scores_high(self):
        assert bigram_similarity("goveriment warning", "government warning") > 0.9

    def test_unrelated_scores_low(self):
        assert bigram_similarity("Bourbon", "Chardonnay") < 0.2


class TestFuzzyWordFind:
    def test_exact_match_case_insensitive(self):
        assert fuzzy_word_find("surgeon", ["THE", "SURGEON"], 2, 0.75) == "SURGEON"

    def test_fuzzy_match(self):
        assert fuzzy_word_find("government", ["goverment", "warning"], 2, 0.75) == "goverment"

    def test_length_difference_limit(self):
        assert fuzzy_word_find("government", ["governmentwarning"], 2, 0.5) is None

    def test_below_similarity(self):
        assert fuzzy_word_find("surgeon", ["surgean"], 2, 0.75) is None

    def test_no_words(self):
        assert fuzzy_word_find("pregnancy", [], 2, 0.75) is None
