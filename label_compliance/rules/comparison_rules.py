"""Field comparison strategies.

Each strategy takes the field, the expected value from the application and a
non-empty extracted value, and returns a ComparisonOutcome with:
  - status: match or mismatch
  - confidence: 0-100, how strongly the evidence supports that status
  - reasoning: one sentence suitable for an audit trail

Strategies are OCR-forgiving in their own way: fuzzy text uses bigram
similarity and containment, numeric fields compare parsed values within a
tolerance, and enum fields compare against the catalogue of known phrases.
"""

import math

from label_compliance.extractors.common_extractors import parse_vintage_year
from label_compliance.extractors.extractor_registry import NUMERIC_PARSERS
from label_compliance.models.schemas import ComparisonOutcome, FieldName, ItemStatus
from label_compliance.utils.text_normalization import bigram_similarity, normalize_whitespace

FUZZY_MATCH_THRESHOLD = 0.8
HEALTH_WARNING_NEAR_MATCH = 0.9
CONTAINS_MIN_OVERLAP = 0.5
REASONING_EXCERPT_LENGTH = 100

# Qualifying phrases recognised on labels ("Bottled by", "Distilled by", ...).
# Order matters: the first phrase that matches is the one reported.
QUALIFYING_PHRASES = (
    "bottled by",
    "packed by",
    "distilled by",
    "blended by",
    "produced by",
    "prepared by",
    "manufactured by",
    "made by",
    "brewed by",
    "imported by",
    "cellared and bottled by",
    "vinted and bottled by",
    "estate bottled",
)


def _score(value: float) -> int:
    """Round a 0-100 score half-up and clamp it."""
    return max(0, min(100, math.floor(value + 0.5)))


def _excerpt(text: str) -> str:
    if len(text) <= REASONING_EXCERPT_LENGTH:
        return text
    return text[:REASONING_EXCERPT_LENGTH] + "..."


def _format_number(value: float) -> str:
    return f"{value:g}"


def _match(confidence: float, reasoning: str) -> ComparisonOutcome:
    return ComparisonOutcome(status=ItemStatus.MATCH, confidence=_score(confidence), reasoning=reasoning)


def _mismatch(confidence: float, reasoning: str) -> ComparisonOutcome:
    return ComparisonOutcome(status=ItemStatus.MISMATCH, confidence=_score(confidence), reasoning=reasoning)


def compare_exact(field_name: FieldName, expected: str, extracted: str) -> ComparisonOutcome:
    """EXACT: whitespace-normalized equality, with field-specific relaxations."""
    norm_expected = normalize_whitespace(expected)
    norm_extracted = normalize_whitespace(extracted)
    name = field_name.value

    if norm_expected == norm_extracted:
        return _match(100, f"{name} matches exactly after whitespace normalization.")

    if field_name == FieldName.VINTAGE_YEAR:
        expected_year = parse_vintage_year(norm_expected)
        if expected_year is not None and expected_year == parse_vintage_year(norm_extracted):
            return _match(95, f"{name} year values match: {expected_year}.")

    if field_name == FieldName.HEALTH_WARNING:
        if norm_expected.lower() == norm_extracted.lower():
            return _match(
                95,
                f'{name} matches case-insensitively. Check that "GOVERNMENT WARNING" is in all caps on the label.',
            )
        similarity = bigram_similarity(norm_expected, norm_extracted)
        if similarity >= HEALTH_WARNING_NEAR_MATCH:
            return _match(
                similarity * 80,
                f"{name} is very similar ({_score(similarity * 100)}%). Minor OCR discrepancies detected.",
            )

    return _mismatch(
        90,
        f'{name} does not match. Expected: "{_excerpt(norm_expected)}" Found: "{_excerpt(norm_extracted)}"',
    )


def compare_fuzzy(field_name: FieldName, expected: str, extracted: str) -> ComparisonOutcome:
    """FUZZY: bigram similarity, then containment for partial OCR reads."""
    name = field_name.value
    similarity = bigram_similarity(expected, extracted)
    if similarity >= FUZZY_MATCH_THRESHOLD:
        return _match(similarity * 100, f"{name} matches with {_score(similarity * 100)}% similarity.")

    norm_expected = normalize_whitespace(expected).lower()
    norm_extracted = normalize_whitespace(extracted).lower()
    if norm_expected in norm_extracted or norm_extracted in norm_expected:
        ratio = min(len(norm_expected), len(norm_extracted)) / max(len(norm_expected), len(norm_extracted))
        return _match(
            ratio * 85,
            f"{name} partially matches (containment). Similarity: {_score(ratio * 100)}%.",
        )

    return _mismatch(
        (1 - similarity) * 90,
        f'{name} does not match. Similarity: {_score(similarity * 100)}%. '
        f'Expected: "{expected}" Found: "{extracted}"',
    )


def compare_normalized(field_name: FieldName, expected: str, extracted: str) -> ComparisonOutcome:
    """NORMALIZED: parse both sides to a number and compare within the field's tolerance."""
    parser = NUMERIC_PARSERS.get(field_name)
    if parser is None:
        return compare_fuzzy(field_name, expected, extracted)

    expected_value = parser.parse(expected)
    extracted_value = parser.parse(extracted)
    if expected_value is None or extracted_value is None:
        return compare_fuzzy(field_name, expected, extracted)

    difference = abs(expected_value - extracted_value)
    shown = (
        f"expected {_format_number(expected_value)}{parser.unit}, "
        f"found {_format_number(extracted_value)}{parser.unit}"
    )
    if difference <= parser.allowed_difference(expected_value):
        return _match(100 if difference == 0 else 95, f"{parser.label} matches: {shown}.")
    return _mismatch(95, f"{parser.label} mismatch: {shown}.")


def compare_contains(field_name: FieldName, expected: str, extracted: str) -> ComparisonOutcome:
    """CONTAINS: one value inside the other, or at least half the expected words present."""
    name = field_name.value
    norm_expected = normalize_whitespace(expected).lower()
    norm_extracted = normalize_whitespace(extracted).lower()

    if norm_expected in norm_extracted or norm_extracted in norm_expected:
        return _match(90, f"{name} found within extracted text.")

    expected_words = norm_expected.split(" ")
    matching = [w for w in expected_words if w in norm_extracted]
    overlap = len(matching) / len(expected_words)
    if overlap >= CONTAINS_MIN_OVERLAP:
        return _match(
            overlap * 80,
            f"{name} partially matches ({', '.join(matching)} found in extracted text).",
        )

    return _mismatch(85, f'{name} not found in extracted text. Expected: "{expected}" Found: "{extracted}"')


def _known_phrase(text: str):
    return next((p for p in QUALIFYING_PHRASES if p in text or text in p), None)


def compare_enum(field_name: FieldName, expected: str, extracted: str) -> ComparisonOutcome:
    """ENUM: both sides resolved against the qualifying phrase catalogue, else fuzzy."""
    if field_name == FieldName.QUALIFYING_PHRASE:
        expected_phrase = _known_phrase(normalize_whitespace(expected).lower())
        extracted_phrase = _known_phrase(normalize_whitespace(extracted).lower())

        if expected_phrase and extracted_phrase:
            if expected_phrase == extracted_phrase:
                return _match(95, f'Qualifying phrase matches: "{expected_phrase}".')
            return _mismatch(
                90,
                f'Qualifying phrase mismatch: expected "{expected_phrase}", found "{extracted_phrase}".',
            )

    return compare_fuzzy(field_name, expected, extracted)
