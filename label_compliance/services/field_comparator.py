"""Field comparator: classify one expected/extracted pair.

Textual reconciliation against raw OCR is delegated to the text reconciler;
this module only decides which comparison strategy to run and what to do when
the extractor came back empty-handed.
"""

from typing import Optional

from label_compliance.config import ComplianceConfig, get_config
from label_compliance.matching.text_search import find_in_ocr_text
from label_compliance.models.schemas import ComparisonOutcome, FieldName, ItemStatus
from label_compliance.rules.rule_registry import RULE_REGISTRY, MatchType, strategy_for


def compare_field(
    field_name: FieldName,
    expected: str,
    extracted: Optional[str],
    match_type: Optional[MatchType] = None,
    ocr_text: Optional[str] = None,
    config: Optional[ComplianceConfig] = None,
) -> ComparisonOutcome:
    """Compare an expected application value with the value found on the label.

    Args:
        field_name: Which regulated field is being compared.
        expected: Value declared on the application.
        extracted: Value the extractor attributed to this field, or None.
        match_type: Force a strategy instead of the field's default.
        ocr_text: The OCR text the extractor worked from, if the caller has it.
            Used to recover the value when extracted is empty.
        config: Thresholds for the text reconciler.

    Returns:
        A ComparisonOutcome. The same inputs always produce the same outcome.
    """
    strategy = RULE_REGISTRY[match_type or strategy_for(field_name)]

    if extracted is not None and extracted.strip():
        return strategy(field_name, expected, extracted)

    recovered = None
    if ocr_text:
        recovered = find_in_ocr_text(ocr_text, expected, config or get_config())

    if recovered is None:
        return ComparisonOutcome(
            status=ItemStatus.NOT_FOUND,
            confidence=0,
            reasoning=f'Field "{field_name.value}" was not found on the label.',
        )

    outcome = strategy(field_name, expected, recovered)
    return outcome.model_copy(update={
        "reasoning": f"{outcome.reasoning} Value recovered directly from OCR text.",
        "recovered_value": recovered,
    })
