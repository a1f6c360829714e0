"""Compliance configuration: thresholds, deadline windows and category tables.

The configuration is immutable data. It is built once per process by
get_config() (optionally overlaid from a YAML file named by the
LABEL_COMPLIANCE_CONFIG environment variable) and passed explicitly into the
reconciler, comparator, status engine and orchestrator. Tests build their own
ComplianceConfig instances instead of patching module globals.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from label_compliance.exceptions import ConfigurationError
from label_compliance.models.schemas import BeverageType, FieldName
from label_compliance.utils.health_warning import HEALTH_WARNING_BODY_PHRASES, HEALTH_WARNING_PREFIX

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LABEL_COMPLIANCE_CONFIG"


class CategoryRules(BaseModel):
    """Per-category lookup table row.

    valid_sizes_ml is None when the category has no standards of fill.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    mandatory_fields: frozenset[FieldName]
    optional_fields: frozenset[FieldName] = frozenset()
    valid_sizes_ml: Optional[frozenset[int]] = None


def _default_categories() -> dict[BeverageType, CategoryRules]:
    return {
        BeverageType.DISTILLED_SPIRITS: CategoryRules(
            label="Distilled Spirits",
            mandatory_fields=frozenset({
                FieldName.BRAND_NAME,
                FieldName.CLASS_TYPE,
                FieldName.ALCOHOL_CONTENT,
                FieldName.NET_CONTENTS,
                FieldName.HEALTH_WARNING,
                FieldName.NAME_AND_ADDRESS,
                FieldName.QUALIFYING_PHRASE,
            }),
            optional_fields=frozenset({
                FieldName.FANCIFUL_NAME,
                FieldName.COUNTRY_OF_ORIGIN,
                FieldName.AGE_STATEMENT,
                FieldName.STATE_OF_DISTILLATION,
                FieldName.STANDARDS_OF_FILL,
            }),
            valid_sizes_ml=frozenset({
                50, 100, 187, 200, 250, 331, 350, 355, 375, 475, 500, 570, 700, 710, 720,
                750, 900, 945, 1000, 1500, 1750, 1800, 2000, 3000, 3750,
            }),
        ),
        BeverageType.WINE: CategoryRules(
            label="Wine",
            mandatory_fields=frozenset({
                FieldName.BRAND_NAME,
                FieldName.CLASS_TYPE,
                FieldName.ALCOHOL_CONTENT,
                FieldName.NET_CONTENTS,
                FieldName.HEALTH_WARNING,
                FieldName.NAME_AND_ADDRESS,
                FieldName.QUALIFYING_PHRASE,
                FieldName.GRAPE_VARIETAL,
                FieldName.APPELLATION_OF_ORIGIN,
                FieldName.SULFITE_DECLARATION,
            }),
            optional_fields=frozenset({
                FieldName.FANCIFUL_NAME,
                FieldName.COUNTRY_OF_ORIGIN,
                FieldName.VINTAGE_YEAR,
                FieldName.STANDARDS_OF_FILL,
            }),
            valid_sizes_ml=frozenset({
                180, 187, 200, 250, 300, 330, 360, 375, 473, 500, 550, 568, 600, 620, 700,
                720, 750, 1000, 1500, 1800, 2250, 3000,
            }),
        ),
        BeverageType.MALT_BEVERAGE: CategoryRules(
            label="Malt Beverages",
            mandatory_fields=frozenset({
                FieldName.BRAND_NAME,
                FieldName.CLASS_TYPE,
                FieldName.NET_CONTENTS,
                FieldName.HEALTH_WARNING,
                FieldName.NAME_AND_ADDRESS,
                FieldName.QUALIFYING_PHRASE,
            }),
            optional_fields=frozenset({
                FieldName.FANCIFUL_NAME,
                FieldName.ALCOHOL_CONTENT,
                FieldName.COUNTRY_OF_ORIGIN,
                FieldName.STANDARDS_OF_FILL,
            }),
            valid_sizes_ml=None,
        ),
    }


class ComplianceConfig(BaseModel):
    """All tunable constants of the compliance core.

    Similarity thresholds are Dice bigram scores in [0, 1]. Deadline windows
    are whole days. image_type_confidence_threshold is on the extractor's
    0-100 scale.
    """

    model_config = ConfigDict(frozen=True)

    # Text reconciler
    min_similarity: float = 0.6
    high_confidence: float = 0.75
    landmark_prefixes: tuple[str, ...] = (HEALTH_WARNING_PREFIX,)
    landmark_body_phrases: tuple[str, ...] = HEALTH_WARNING_BODY_PHRASES
    landmark_min_body_phrases: int = 4

    # Status rule engine
    conditional_deadline_days: int = Field(default=7, gt=0)
    correction_deadline_days: int = Field(default=30, gt=0)
    minor_discrepancy_fields: frozenset[FieldName] = frozenset({
        FieldName.BRAND_NAME,
        FieldName.FANCIFUL_NAME,
        FieldName.APPELLATION_OF_ORIGIN,
        FieldName.GRAPE_VARIETAL,
    })
    rejection_fields: frozenset[FieldName] = frozenset({FieldName.HEALTH_WARNING})
    categories: dict[BeverageType, CategoryRules] = Field(default_factory=_default_categories)

    # Orchestrator
    image_type_confidence_threshold: float = 60
    max_images: int = Field(default=10, gt=0)

    # Effective status resolver
    stale_processing_minutes: int = Field(default=5, gt=0)

    @field_validator("categories")
    @classmethod
    def _fill_missing_categories(cls, value: dict[BeverageType, CategoryRules]) -> dict[BeverageType, CategoryRules]:
        # A config file may override one category without restating the others.
        merged = _default_categories()
        merged.update(value)
        return merged


def load_config(path: Optional[str | os.PathLike] = None) -> ComplianceConfig:
    """Build a ComplianceConfig from defaults, overlaid by a YAML file if given.

    Raises:
        ConfigurationError: if the file is missing, is not valid YAML, or holds
            values that fail validation.
    """
    if path is None:
        return ComplianceConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Compliance config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")

    try:
        config = ComplianceConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid compliance config in {config_path}: {e}") from e

    logger.info("Loaded compliance config overrides from %s: %s", config_path, sorted(raw))
    return config


@lru_cache(maxsize=1)
def get_config() -> ComplianceConfig:
    """Process-wide configuration, loaded on first use."""
    return load_config(os.getenv(CONFIG_ENV_VAR) or None)
