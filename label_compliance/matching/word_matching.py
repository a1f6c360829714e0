"""Map extracted field values back onto OCR words to recover their location.

Pure CPU, no model call. Used for extracted fields that arrive without a
bounding box, so every comparison row can still point at a region of a label
image.
"""

import re
from collections import Counter
from typing import Sequence

from pydantic import BaseModel, ConfigDict

from label_compliance.matching.bounding_box import compute_normalized_bounding_box
from label_compliance.models.schemas import ExtractedField, OcrPage, OcrWord
from label_compliance.utils.text_normalization import normalize_for_word_matching

# Longest run of consecutive words considered for one value.
MAX_RUN_WORDS = 60

# Fraction of the normalized value that a partial run must cover.
MIN_COVERAGE = 0.6

_ENDS_WITH_NUMBER_RE = re.compile(r"\d\.?$")
_STARTS_NUMERIC_RE = re.compile(r"^[\d.%]")


class IndexedWord(BaseModel):
    """An OCR word with its position in the combined multi-image word list."""

    model_config = ConfigDict(frozen=True)

    global_index: int
    image_index: int
    local_index: int
    word: OcrWord

    @property
    def text(self) -> str:
        return self.word.text


def build_combined_word_list(pages: Sequence[OcrPage]) -> list[IndexedWord]:
    """Flatten the words of every image into one list, remembering where each came from."""
    combined = []
    for image_index, page in enumerate(pages):
        for local_index, word in enumerate(page.words):
            combined.append(IndexedWord(
                global_index=len(combined),
                image_index=image_index,
                local_index=local_index,
                word=word,
            ))
    return combined


def find_matching_words(value: str, words: Sequence[IndexedWord]) -> list[IndexedWord]:
    """Find the run of consecutive OCR words that best spells out value.

    Adjacent tokens that split a number ("12." + "5%", "45" + "%") are joined
    without a space before comparing. A run that covers the whole value is
    returned immediately; otherwise the best partial run is returned if it
    covers at least MIN_COVERAGE of the value.
    """
    target = normalize_for_word_matching(value)
    if not target:
        return []

    best_match: list[IndexedWord] = []
    best_score = 0.0

    for start in range(len(words)):
        # Punctuation-only tokens would drag the box toward unrelated text.
        if not normalize_for_word_matching(words[start].text):
            continue

        accumulated = ""
        run: list[IndexedWord] = []
        for j in range(start, min(len(words), start + MAX_RUN_WORDS)):
            current = words[j].text
            if run and not (_ENDS_WITH_NUMBER_RE.search(accumulated) and _STARTS_NUMERIC_RE.search(current)):
                accumulated += " "
            accumulated += current
            run.append(words[j])

            accumulated_norm = normalize_for_word_matching(accumulated)
            if accumulated_norm == target:
                return list(run)

            if accumulated_norm in target:
                score = len(accumulated_norm) / len(target)
                if score > best_score:
                    best_score = score
                    best_match = list(run)
            elif target in accumulated_norm:
                if best_score < 1.0:
                    best_score = 1.0
                    best_match = list(run)
                break

            if len(accumulated_norm) > len(target) * 1.5 + 20:
                break

    return best_match if best_score >= MIN_COVERAGE else []


def _primary_image(words: Sequence[IndexedWord]) -> int:
    """Image holding most of the words; ties go to the lowest index."""
    counts = Counter(w.image_index for w in words)
    return max(sorted(counts), key=lambda index: counts[index])


def match_fields_to_bounding_boxes(
    fields: Sequence[ExtractedField],
    pages: Sequence[OcrPage],
) -> list[ExtractedField]:
    """Fill in bounding_box and image_index for fields that lack a box."""
    combined = build_combined_word_list(pages)
    located = []
    for field in fields:
        if not field.value or field.bounding_box is not None:
            located.append(field)
            continue

        matched = find_matching_words(field.value, combined)
        if not matched:
            located.append(field)
            continue

        image_index = _primary_image(matched)
        page = pages[image_index]
        on_image = [
            w.word for w in matched
            if w.image_index == image_index and normalize_for_word_matching(w.text)
        ]
        box = compute_normalized_bounding_box(on_image, page.image_width, page.image_height)
        located.append(field.model_copy(update={"bounding_box": box, "image_index": image_index}))
    return located
