"""Text reconciler: find an expected field value in noisy OCR output.

Strategies run in a fixed order and the first that succeeds wins:

  1. Exact case-insensitive substring
  2. Punctuation-normalized substring (OCR dropping dots, commas, hyphens)
  3. Landmark prefix + body phrase verification (statutory warning text)
  4. Word-level sliding window, accepted at high bigram similarity
  5. Scattered significant words (decorative and embossed labels)
  6. Sliding window best candidate at minimum similarity

Whenever a stage concludes the text is on the label and the remaining
difference is OCR noise, the expected value itself is returned so the
comparator sees a clean match. Stage 5 deliberately runs before stage 6: a
full scattered hit ("KNOB ... CREEK") is stronger evidence than a partial
contiguous window ("CREEK" alone).
"""

import logging
import re
from typing import Optional

from label_compliance.config import ComplianceConfig, get_config
from label_compliance.utils.text_normalization import (
    bigram_similarity,
    fuzzy_word_find,
    normalize_whitespace,
    strip_ocr_punctuation,
)

logger = logging.getLogger(__name__)

_LANDMARK_PUNCTUATION_RE = re.compile(r"[.:,]")

# Window sizes tried around the expected word count.
WINDOW_SHRINK = 2
WINDOW_GROW = 3

SIGNIFICANT_WORD_LENGTH = 3
SCATTERED_MAX_LENGTH_DIFF = 3
BODY_PHRASE_MAX_LENGTH_DIFF = 2


def find_in_ocr_text(
    ocr_text: str,
    expected_value: str,
    config: Optional[ComplianceConfig] = None,
) -> Optional[str]:
    """Search OCR text for the expected value.

    Returns:
        The matching OCR slice (stage 1), the expected value (stages 2-5),
        the best window candidate (stage 6), or None when the value is not
        on the label.
    """
    config = config or get_config()

    normalized_ocr = normalize_whitespace(ocr_text or "")
    normalized_expected = normalize_whitespace(expected_value or "")
    if not normalized_ocr or not normalized_expected:
        return None

    lower_ocr = normalized_ocr.lower()
    lower_expected = normalized_expected.lower()

    # 1. Exact substring; return the OCR slice so the audit trail keeps its casing.
    # Matched in place: lower() can change string length (e.g. "\u0130").
    exact = re.search(re.escape(normalized_expected), normalized_ocr, re.IGNORECASE)
    if exact is not None:
        return normalized_ocr[exact.start():exact.end()]

    # 2. Punctuation-normalized substring
    stripped_expected = strip_ocr_punctuation(lower_expected)
    if stripped_expected and stripped_expected in strip_ocr_punctuation(lower_ocr):
        logger.debug("Punctuation-normalized match for %r", normalized_expected[:40])
        return expected_value

    # 3. Standardized legal text recognised by its landmark prefix
    if _landmark_text_present(lower_ocr, lower_expected, config):
        logger.debug("Landmark match for %r", normalized_expected[:40])
        return expected_value

    # 4. Sliding window over OCR words
    best_score, best_match = _best_window(normalized_ocr.split(" "), normalized_expected)
    if best_score >= config.high_confidence:
        return expected_value

    # 5. Every significant word present somewhere, not necessarily together
    if _scattered_words_present(lower_ocr, normalized_expected, config):
        logger.debug("Scattered-word match for %r", normalized_expected[:40])
        return expected_value

    # 6. Medium-confidence window candidate
    if best_score >= config.min_similarity:
        return best_match

    return None


def _landmark_text_present(lower_ocr: str, lower_expected: str, config: ComplianceConfig) -> bool:
    """True if the expected text starts with a landmark prefix that OCR shows, and the body is legible."""
    for prefix in config.landmark_prefixes:
        prefix = prefix.lower()
        if not lower_expected.startswith(prefix):
            continue
        if not _prefix_in_ocr(prefix, lower_ocr, config.high_confidence):
            continue

        phrases_found = _count_body_phrases(lower_ocr, config)
        if phrases_found >= config.landmark_min_body_phrases:
            return True
        logger.debug(
            "Landmark %r found but only %d/%d body phrases legible",
            prefix, phrases_found, len(config.landmark_body_phrases),
        )
    return False


def _prefix_in_ocr(prefix: str, lower_ocr: str, threshold: float) -> bool:
    """Slide a prefix-length window over OCR words and fuzzy-match the prefix.

    Handles OCR typos inside the heading itself ("GOVERIMENT WARNING").
    """
    prefix_words = _LANDMARK_PUNCTUATION_RE.sub("", prefix).split()
    ocr_words = _LANDMARK_PUNCTUATION_RE.sub("", lower_ocr).split()
    if not prefix_words:
        return False

    target = " ".join(prefix_words)
    size = len(prefix_words)
    for i in range(len(ocr_words) - size + 1):
        candidate = " ".join(ocr_words[i:i + size])
        if bigram_similarity(candidate, target) >= threshold:
            return True
    return False


def _count_body_phrases(lower_ocr: str, config: ComplianceConfig) -> int:
    """Count body phrases present exactly, or with every word fuzzy-matched."""
    ocr = _LANDMARK_PUNCTUATION_RE.sub("", lower_ocr)
    ocr_words = ocr.split()

    found = 0
    for phrase in config.landmark_body_phrases:
        phrase = phrase.lower()
        if phrase in ocr:
            found += 1
            continue
        if all(
            fuzzy_word_find(word, ocr_words, BODY_PHRASE_MAX_LENGTH_DIFF, config.high_confidence) is not None
            for word in phrase.split()
        ):
            found += 1
    return found


def _best_window(ocr_words: list[str], normalized_expected: str) -> tuple[float, Optional[str]]:
    """Best bigram score over word windows sized around the expected word count."""
    expected_word_count = len(normalized_expected.split(" "))
    min_words = max(1, expected_word_count - WINDOW_SHRINK)
    max_words = min(len(ocr_words), expected_word_count + WINDOW_GROW)

    best_score = 0.0
    best_match = None
    for size in range(min_words, max_words + 1):
        for i in range(len(ocr_words) - size + 1):
            candidate = " ".join(ocr_words[i:i + size])
            score = bigram_similarity(candidate, normalized_expected)
            if score > best_score:
                best_score = score
                best_match = candidate
    return best_score, best_match


def _scattered_words_present(lower_ocr: str, normalized_expected: str, config: ComplianceConfig) -> bool:
    expected_words = [w for w in normalized_expected.split(" ") if len(w) >= SIGNIFICANT_WORD_LENGTH]
    if len(expected_words) < 2:
        return False

    ocr_words = lower_ocr.split(" ")
    return all(
        fuzzy_word_find(word, ocr_words, SCATTERED_MAX_LENGTH_DIFF, config.high_confidence) is not None
        for word in expected_words
    )
