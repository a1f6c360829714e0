import re
from typing import Iterable, Optional

_WHITESPACE_RE = re.compile(r"\s+")

# Punctuation OCR most often drops or swaps on label text.
_OCR_PUNCTUATION_RE = re.compile(r"[.,'\-]")

# Periods that are not decimal points ("Dr." yes, "12.5" no).
_NON_DECIMAL_PERIOD_RE = re.compile(r"(?<!\d)\.|\.(?!\d)")
_WORD_BREAK_PUNCTUATION_RE = re.compile(r"[,;:!?'\"()\-/]")


def normalize_whitespace(text: str) -> str:
    """Collapse every run of whitespace (spaces, tabs, newlines) to one space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_ocr_punctuation(text: str) -> str:
    """Remove the punctuation OCR garbles most: periods, commas, apostrophes, hyphens."""
    return _OCR_PUNCTUATION_RE.sub("", text)


def normalize_for_word_matching(text: str) -> str:
    """Normalization used to line extracted values up with OCR words.

    Steps:
      1. Lowercase
      2. Drop periods, keeping decimal points so "12.5%" survives
      3. Turn other punctuation and "/" into spaces so "ALC/VOL" becomes "alc vol"
      4. Collapse whitespace
    """
    text = text.lower()
    text = _NON_DECIMAL_PERIOD_RE.sub("", text)
    text = _WORD_BREAK_PUNCTUATION_RE.sub(" ", text)
    return normalize_whitespace(text)


def _bigrams(text: str) -> set[str]:
    return {text[i:i + 2] for i in range(len(text) - 1)}


def bigram_similarity(a: str, b: str) -> float:
    """Dice coefficient over the character bigram sets of two strings.

    Case-insensitive and whitespace-normalized. Identical strings score 1.0.
    Strings shorter than two characters have no bigrams, so they only score
    1.0 on equality and 0.0 otherwise.
    """
    norm_a = normalize_whitespace(a).lower()
    norm_b = normalize_whitespace(b).lower()

    if norm_a == norm_b:
        return 1.0
    if len(norm_a) < 2 or len(norm_b) < 2:
        return 0.0

    bigrams_a = _bigrams(norm_a)
    bigrams_b = _bigrams(norm_b)
    intersection = len(bigrams_a & bigrams_b)
    return (2 * intersection) / (len(bigrams_a) + len(bigrams_b))


def fuzzy_word_find(
    token: str,
    words: Iterable[str],
    max_length_diff: int,
    min_similarity: float,
) -> Optional[str]:
    """Return the first word that equals token or is close enough to it.

    A word is close enough when its length is within max_length_diff of the
    token and its bigram similarity reaches min_similarity. Comparison is
    case-insensitive; the returned word is as it appears in words.
    """
    token_lower = token.lower()
    candidates = list(words)

    for word in candidates:
        if word.lower() == token_lower:
            return word

    for word in candidates:
        if abs(len(word) - len(token_lower)) > max_length_diff:
            continue
        if bigram_similarity(word, token_lower) >= min_similarity:
            return word
    return None
