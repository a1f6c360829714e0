"""Validation pipeline: orchestrates one validation run for a label.

For each run, the pipeline:
  1. Checks the image set and resolves the beverage category
  2. Awaits the extraction collaborator (the only I/O in the core)
  3. Proposes image-type relabels the extractor is confident about
  4. Fills missing bounding boxes from the OCR word geometry, if returned
  5. Compares every expected field against its best extracted candidate
  6. Runs the status rule engine over the per-field statuses
  7. Packages everything into a ValidationPayload for the caller to persist

Nothing here touches storage. Extraction failures are not caught: the caller
decides whether to retry, record a failure, or surface the error.
"""

import logging
import math
from typing import Awaitable, Callable, Mapping, Optional, Sequence

from label_compliance.categories.category_registry import get_category, parse_beverage_type
from label_compliance.config import ComplianceConfig, get_config
from label_compliance.matching.word_matching import match_fields_to_bounding_boxes
from label_compliance.models.schemas import (
    BeverageType,
    ExtractedField,
    ExtractionResult,
    FieldComparisonResult,
    FieldName,
    ImageClassification,
    ImageTypeUpdate,
    ItemStatus,
    ValidationPayload,
)
from label_compliance.services.field_comparator import compare_field
from label_compliance.services.status_engine import determine_overall_status
from label_compliance.utils.file_validation import validate_images

logger = logging.getLogger(__name__)

# (images, beverage_type, expected_field_hints) -> ExtractionResult
Extractor = Callable[[Sequence[bytes], BeverageType, Mapping[FieldName, str]], Awaitable[ExtractionResult]]


def propose_image_type_updates(
    classifications: Sequence[ImageClassification],
    image_count: int,
    threshold: float,
) -> list[ImageTypeUpdate]:
    """Relabels for classifications at or above the threshold that refer to a real image."""
    return [
        ImageTypeUpdate(image_index=c.image_index, image_type=c.image_type, confidence=c.confidence)
        for c in classifications
        if c.confidence >= threshold and 0 <= c.image_index < image_count
    ]


def select_best_candidates(fields: Sequence[ExtractedField]) -> dict[FieldName, ExtractedField]:
    """One candidate per field: a non-empty value wins, then the higher confidence."""
    best: dict[FieldName, ExtractedField] = {}
    for field in fields:
        current = best.get(field.field_name)
        if current is None or _candidate_rank(field) > _candidate_rank(current):
            best[field.field_name] = field
    return best


def _candidate_rank(field: ExtractedField) -> tuple[bool, float]:
    return bool(field.value and field.value.strip()), field.confidence


def _overall_confidence(comparisons: Sequence[FieldComparisonResult]) -> int:
    if not comparisons:
        return 0
    mean = sum(c.confidence for c in comparisons) / len(comparisons)
    return math.floor(mean + 0.5)


async def run_validation_pipeline(
    expected_fields: Mapping[FieldName, str],
    images: Sequence[bytes],
    beverage_type: BeverageType | str,
    extractor: Extractor,
    container_size_ml: Optional[int] = None,
    config: Optional[ComplianceConfig] = None,
) -> ValidationPayload:
    """Run extraction, comparison and the status engine for one label.

    Args:
        expected_fields: Output of build_expected_fields for the application.
        images: Label images as encoded bytes (1 to config.max_images).
        beverage_type: Declared category of the product.
        extractor: Async extraction collaborator. Called exactly once.
        container_size_ml: Declared container size, checked against the
            category's standards of fill.
        config: Thresholds and tables; defaults to the process config.

    Raises:
        InvalidImageError: if the image set is empty, too large or unreadable.
        UnknownBeverageTypeError: if beverage_type is not a known category.
        Anything the extractor raises, unchanged.
    """
    config = config or get_config()
    resolved_type = parse_beverage_type(beverage_type)
    category = get_category(resolved_type, config)
    validate_images(images, config.max_images)

    logger.info("Validating %s label: %d field(s), %d image(s)", category.label, len(expected_fields), len(images))
    extraction = await extractor(images, resolved_type, dict(expected_fields))
    detected = extraction.detected_beverage_type
    if detected is not None and detected != resolved_type:
        logger.warning(
            "Extractor read the label as %s but the application declares %s",
            detected.value, resolved_type.value,
        )

    image_type_updates = propose_image_type_updates(
        extraction.image_classifications, len(images), config.image_type_confidence_threshold
    )

    extracted_fields = extraction.fields
    if extraction.ocr_pages:
        extracted_fields = match_fields_to_bounding_boxes(extracted_fields, extraction.ocr_pages)
    candidates = select_best_candidates(extracted_fields)
    ocr_text = extraction.ocr_text or None

    comparisons: list[FieldComparisonResult] = []
    for field_name, expected in expected_fields.items():
        candidate = candidates.get(field_name)
        extracted_value = candidate.value if candidate is not None else None

        outcome = compare_field(field_name, expected, extracted_value, ocr_text=ocr_text, config=config)

        status = outcome.status
        # A minor field that disagrees is something the applicant is asked to fix.
        if status == ItemStatus.MISMATCH and field_name in config.minor_discrepancy_fields:
            status = ItemStatus.NEEDS_CORRECTION

        comparisons.append(FieldComparisonResult(
            field_name=field_name,
            expected_value=expected,
            extracted_value=(extracted_value or "").strip() or outcome.recovered_value or "",
            status=status,
            confidence=outcome.confidence,
            reasoning=outcome.reasoning,
            bounding_box=candidate.bounding_box if candidate is not None else None,
            image_index=candidate.image_index if candidate is not None else 0,
        ))

    overall = determine_overall_status(comparisons, resolved_type, container_size_ml, config)
    overall_confidence = _overall_confidence(comparisons)

    logger.info(
        "Validation finished: status=%s confidence=%d model=%s time=%dms",
        overall.status.value, overall_confidence, extraction.model_used, extraction.processing_time_ms,
    )

    return ValidationPayload(
        beverage_type=resolved_type,
        field_comparisons=comparisons,
        overall_status=overall.status,
        deadline_days=overall.deadline_days,
        overall_confidence=overall_confidence,
        image_type_updates=image_type_updates,
        extraction=extraction,
    )
