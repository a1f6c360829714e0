"""Rule registry: which comparison strategy applies to which field.

Strategies are registered by match type so a caller can force one explicitly,
and every field identifier maps to its default match type. Fields missing from
FIELD_MATCH_STRATEGY are compared fuzzily.
"""

from enum import Enum
from typing import Callable

from label_compliance.models.schemas import ComparisonOutcome, FieldName
from label_compliance.rules.comparison_rules import (
    compare_contains,
    compare_enum,
    compare_exact,
    compare_fuzzy,
    compare_normalized,
)


class MatchType(str, Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    NORMALIZED = "normalized"
    CONTAINS = "contains"
    ENUM = "enum"


# Each strategy takes (field, expected, extracted) and returns a ComparisonOutcome.
RULE_REGISTRY: dict[MatchType, Callable[[FieldName, str, str], ComparisonOutcome]] = {
    MatchType.EXACT: compare_exact,
    MatchType.FUZZY: compare_fuzzy,
    MatchType.NORMALIZED: compare_normalized,
    MatchType.CONTAINS: compare_contains,
    MatchType.ENUM: compare_enum,
}

FIELD_MATCH_STRATEGY: dict[FieldName, MatchType] = {
    FieldName.HEALTH_WARNING: MatchType.EXACT,
    FieldName.BRAND_NAME: MatchType.FUZZY,
    FieldName.FANCIFUL_NAME: MatchType.FUZZY,
    FieldName.ALCOHOL_CONTENT: MatchType.NORMALIZED,
    FieldName.NET_CONTENTS: MatchType.NORMALIZED,
    FieldName.CLASS_TYPE: MatchType.FUZZY,
    FieldName.NAME_AND_ADDRESS: MatchType.FUZZY,
    FieldName.QUALIFYING_PHRASE: MatchType.ENUM,
    FieldName.COUNTRY_OF_ORIGIN: MatchType.CONTAINS,
    FieldName.GRAPE_VARIETAL: MatchType.FUZZY,
    FieldName.APPELLATION_OF_ORIGIN: MatchType.FUZZY,
    FieldName.VINTAGE_YEAR: MatchType.EXACT,
    FieldName.SULFITE_DECLARATION: MatchType.FUZZY,
    FieldName.AGE_STATEMENT: MatchType.NORMALIZED,
    FieldName.STATE_OF_DISTILLATION: MatchType.FUZZY,
}


def strategy_for(field_name: FieldName) -> MatchType:
    return FIELD_MATCH_STRATEGY.get(field_name, MatchType.FUZZY)
