"""Build the expected field set for one validation attempt.

Application data arrives as the form's keys (camelCase from the web layer,
snake_case from CSV batches). Every key is mapped explicitly onto a FieldName;
keys with no mapping are ignored.
"""

import logging
from typing import Any, Mapping, Optional

from label_compliance.categories.category_registry import get_category
from label_compliance.config import ComplianceConfig, get_config
from label_compliance.models.schemas import BeverageType, FieldName
from label_compliance.utils.health_warning import HEALTH_WARNING_FULL

logger = logging.getLogger(__name__)

SULFITE_DECLARATION_TEXT = "Contains Sulfites"

APPLICATION_FIELD_MAP: dict[str, FieldName] = {
    "brandName": FieldName.BRAND_NAME,
    "fancifulName": FieldName.FANCIFUL_NAME,
    "classType": FieldName.CLASS_TYPE,
    "alcoholContent": FieldName.ALCOHOL_CONTENT,
    "netContents": FieldName.NET_CONTENTS,
    "healthWarning": FieldName.HEALTH_WARNING,
    "nameAndAddress": FieldName.NAME_AND_ADDRESS,
    "qualifyingPhrase": FieldName.QUALIFYING_PHRASE,
    "countryOfOrigin": FieldName.COUNTRY_OF_ORIGIN,
    "grapeVarietal": FieldName.GRAPE_VARIETAL,
    "appellationOfOrigin": FieldName.APPELLATION_OF_ORIGIN,
    "vintageYear": FieldName.VINTAGE_YEAR,
    "ageStatement": FieldName.AGE_STATEMENT,
    "stateOfDistillation": FieldName.STATE_OF_DISTILLATION,
}
APPLICATION_FIELD_MAP.update({field.value: field for field in APPLICATION_FIELD_MAP.values()})

_SULFITE_KEYS = ("sulfiteDeclaration", FieldName.SULFITE_DECLARATION.value)

# Fields whose expected value is fixed by regulation rather than by the applicant.
STATUTORY_VALUES: dict[FieldName, str] = {
    FieldName.HEALTH_WARNING: HEALTH_WARNING_FULL,
}


def build_expected_fields(
    application_data: Mapping[str, Any],
    beverage_type: BeverageType | str,
    config: Optional[ComplianceConfig] = None,
) -> dict[FieldName, str]:
    """Map application data to the fields the comparator will check.

    Blank strings are dropped. A true sulfite flag becomes the "Contains
    Sulfites" declaration. Statutory fields are always present: when the
    applicant did not transcribe the health warning, the regulation text is
    expected instead.
    """
    category = get_category(beverage_type, config or get_config())
    fields: dict[FieldName, str] = {}

    for key, value in application_data.items():
        field_name = APPLICATION_FIELD_MAP.get(key)
        if field_name is None:
            if key not in _SULFITE_KEYS:
                logger.debug("Ignoring application key with no field mapping: %s", key)
            continue
        # JSON forms send vintage years and sizes as numbers.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str) and value.strip():
            fields[field_name] = value.strip()

    if any(application_data.get(key) is True for key in _SULFITE_KEYS):
        fields[FieldName.SULFITE_DECLARATION] = SULFITE_DECLARATION_TEXT

    for field_name, statutory_text in STATUTORY_VALUES.items():
        fields.setdefault(field_name, statutory_text)

    missing = missing_mandatory_fields(fields, beverage_type, config)
    if missing:
        logger.warning(
            "Application for %s has no expected value for mandatory fields: %s",
            category.label, ", ".join(sorted(f.value for f in missing)),
        )
    return fields


def missing_mandatory_fields(
    expected_fields: Mapping[FieldName, str],
    beverage_type: BeverageType | str,
    config: Optional[ComplianceConfig] = None,
) -> list[FieldName]:
    """Mandatory fields of the category that have no expected value."""
    category = get_category(beverage_type, config or get_config())
    return sorted(
        (f for f in category.mandatory_fields if f not in expected_fields),
        key=lambda f: f.value,
    )
