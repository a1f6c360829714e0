"""Unit tests for the overall status rule engine."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from label_compliance.config import CategoryRules, ComplianceConfig
from label_compliance.models.schemas import BeverageType, FieldName, FieldStatus, ItemStatus, LabelStatus
from label_compliance.services.status_engine import compute_correction_deadline, determine_overall_status

CONFIG = ComplianceConfig()

SPIRITS = BeverageType.DISTILLED_SPIRITS

SPIRITS_MANDATORY = [
    FieldName.BRAND_NAME,
    FieldName.CLASS_TYPE,
    FieldName.ALCOHOL_CONTENT,
    FieldName.NET_CONTENTS,
    FieldName.HEALTH_WARNING,
    FieldName.NAME_AND_ADDRESS,
    FieldName.QUALIFYING_PHRASE,
]


def _items(**statuses: ItemStatus) -> list[FieldStatus]:
    return [FieldStatus(field_name=FieldName(name), status=status) for name, status in statuses.items()]


def _all_match(fields=SPIRITS_MANDATORY) -> list[FieldStatus]:
    return [FieldStatus(field_name=f, status=ItemStatus.MATCH) for f in fields]


def _status(items, beverage_type=SPIRITS, container_size_ml=None, config=CONFIG):
    return determine_overall_status(items, beverage_type, container_size_ml, config)


class TestApproval:
    def test_all_match(self):
        result = _status(_all_match())
        assert result.status == LabelStatus.APPROVED
        assert result.deadline_days is None

    def test_empty_items(self):
        assert _status([]).status == LabelStatus.APPROVED

    def test_optional_field_not_found_ignored(self):
        items = _all_match() + _items(country_of_origin=ItemStatus.NOT_FOUND)
        assert _status(items).status == LabelStatus.APPROVED


class TestRejection:
    @pytest.mark.parametrize("status", [ItemStatus.MISMATCH, ItemStatus.NOT_FOUND, ItemStatus.NEEDS_CORRECTION])
    def test_health_warning_failure(self, status):
        result = _status(_items(brand_name=ItemStatus.MATCH, health_warning=status))
        assert result.status == LabelStatus.REJECTED
        assert result.deadline_days is None

    def test_rejection_outranks_substantive_mismatch(self):
        items = _items(health_warning=ItemStatus.MISMATCH, alcohol_content=ItemStatus.MISMATCH)
        assert _status(items).status == LabelStatus.REJECTED

    def test_invalid_container_size(self):
        result = _status(_all_match(), container_size_ml=751)
        assert result.status == LabelStatus.REJECTED
        assert result.deadline_days is None

    def test_valid_container_size(self):
        assert _status(_all_match(), container_size_ml=750).status == LabelStatus.APPROVED

    def test_wine_sizes(self):
        assert _status([], BeverageType.WINE, container_size_ml=187).status == LabelStatus.APPROVED
        assert _status([], BeverageType.WINE, container_size_ml=190).status == LabelStatus.REJECTED

    def test_malt_beverages_have_no_size_restriction(self):
        assert _status([], BeverageType.MALT_BEVERAGE, container_size_ml=1234).status == LabelStatus.APPROVED

    def test_malt_unrestricted_even_if_configured(self):
        config = ComplianceConfig(categories={
            BeverageType.MALT_BEVERAGE: CategoryRules(
                label="Malt Beverages",
                mandatory_fields=frozenset({FieldName.BRAND_NAME}),
                valid_sizes_ml=frozenset({355}),
            ),
        })
        assert _status([], BeverageType.MALT_BEVERAGE, 1234, config).status == LabelStatus.APPROVED


class TestNeedsCorrection:
    def test_mandatory_field_mismatch(self):
        result = _status(_items(health_warning=ItemStatus.MATCH, alcohol_content=ItemStatus.MISMATCH))
        assert result.status == LabelStatus.NEEDS_CORRECTION
        assert result.deadline_days == 30

    def test_mandatory_field_not_found(self):
        result = _status(_items(net_contents=ItemStatus.NOT_FOUND))
        assert result.status == LabelStatus.NEEDS_CORRECTION

    def test_minor_field_not_found_is_substantive(self):
        assert _status(_items(brand_name=ItemStatus.NOT_FOUND)).status == LabelStatus.NEEDS_CORRECTION

    def test_outranks_minor_discrepancy(self):
        items = _items(brand_name=ItemStatus.MISMATCH, class_type=ItemStatus.MISMATCH)
        assert _status(items).status == LabelStatus.NEEDS_CORRECTION

    def test_wine_mandatory_field(self):
        items = _items(sulfite_declaration=ItemStatus.NOT_FOUND)
        assert _status(items, BeverageType.WINE).status == LabelStatus.NEEDS_CORRECTION

    def test_alcohol_content_optional_for_malt(self):
        items = _items(alcohol_content=ItemStatus.NOT_FOUND)
        assert _status(items, BeverageType.MALT_BEVERAGE).status == LabelStatus.APPROVED


class TestConditionalApproval:
    def test_optional_field_mismatch(self):
        result = _status(_all_match() + _items(country_of_origin=ItemStatus.MISMATCH))
        assert result.status == LabelStatus.CONDITIONALLY_APPROVED
        assert result.deadline_days == 7

    @pytest.mark.parametrize("status", [ItemStatus.MISMATCH, ItemStatus.NEEDS_CORRECTION])
    def test_minor_discrepancy_field(self, status):
        result = _status(_items(brand_name=status, health_warning=ItemStatus.MATCH))
        assert result.status == LabelStatus.CONDITIONALLY_APPROVED

    def test_wine_appellation(self):
        items = _items(appellation_of_origin=ItemStatus.MISMATCH, grape_varietal=ItemStatus.NEEDS_CORRECTION)
        assert _status(items, BeverageType.WINE).status == LabelStatus.CONDITIONALLY_APPROVED


class TestConfiguredRules:
    def test_custom_deadline_windows(self):
        config = ComplianceConfig(conditional_deadline_days=10, correction_deadline_days=45)
        assert _status(_items(country_of_origin=ItemStatus.MISMATCH), config=config).deadline_days == 10
        assert _status(_items(alcohol_content=ItemStatus.MISMATCH), config=config).deadline_days == 45

    def test_custom_rejection_fields(self):
        config = ComplianceConfig(rejection_fields=frozenset({FieldName.ALCOHOL_CONTENT}))
        assert _status(_items(alcohol_content=ItemStatus.MISMATCH), config=config).status == LabelStatus.REJECTED
        assert _status(_items(health_warning=ItemStatus.MISMATCH), config=config).status == LabelStatus.NEEDS_CORRECTION

    def test_accepts_beverage_type_string(self):
        assert _status(_all_match(), "distilled_spirits").status == LabelStatus.APPROVED


def _expected(health_warning, alcohol_content, brand_name, country_of_origin):
    """Rules restated for the four spirits fields used below.

    health_warning: mandatory rejection field
    alcohol_content: mandatory
    brand_name: mandatory, minor discrepancy field
    country_of_origin: optional
    """
    failing = (ItemStatus.MISMATCH, ItemStatus.NEEDS_CORRECTION)
    if health_warning != ItemStatus.MATCH:
        return LabelStatus.REJECTED, None
    if alcohol_content != ItemStatus.MATCH or brand_name == ItemStatus.NOT_FOUND:
        return LabelStatus.NEEDS_CORRECTION, 30
    if brand_name in failing or country_of_origin in failing:
        return LabelStatus.CONDITIONALLY_APPROVED, 7
    return LabelStatus.APPROVED, None


class TestExhaustive:
    FIELDS = [FieldName.HEALTH_WARNING, FieldName.ALCOHOL_CONTENT, FieldName.BRAND_NAME, FieldName.COUNTRY_OF_ORIGIN]

    @pytest.mark.parametrize("statuses", list(itertools.product(ItemStatus, repeat=4)))
    def test_every_combination(self, statuses):
        items = [FieldStatus(field_name=f, status=s) for f, s in zip(self.FIELDS, statuses)]
        result = _status(items)
        assert (result.status, result.deadline_days) == _expected(*statuses)

    @pytest.mark.parametrize("statuses", list(itertools.product(ItemStatus, repeat=4)))
    def test_order_does_not_matter(self, statuses):
        items = [FieldStatus(field_name=f, status=s) for f, s in zip(self.FIELDS, statuses)]
        assert _status(items) == _status(list(reversed(items)))

    @pytest.mark.parametrize("container_size_ml", [None, 750, 751])
    def test_sizes_with_every_combination(self, container_size_ml):
        for statuses in itertools.product(ItemStatus, repeat=4):
            items = [FieldStatus(field_name=f, status=s) for f, s in zip(self.FIELDS, statuses)]
            result = _status(items, container_size_ml=container_size_ml)
            if container_size_ml == 751:
                assert result.status == LabelStatus.REJECTED
            else:
                assert result.status == _expected(*statuses)[0]


class TestComputeCorrectionDeadline:
    NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_conditional_window(self):
        deadline = compute_correction_deadline(LabelStatus.CONDITIONALLY_APPROVED, self.NOW, CONFIG)
        assert deadline == self.NOW + timedelta(days=7)

    def test_correction_window(self):
        deadline = compute_correction_deadline(LabelStatus.NEEDS_CORRECTION, self.NOW, CONFIG)
        assert deadline == self.NOW + timedelta(days=30)

    @pytest.mark.parametrize("status", [LabelStatus.APPROVED, LabelStatus.REJECTED, LabelStatus.PENDING])
    def test_no_deadline(self, status):
        assert compute_correction_deadline(status, self.NOW, CONFIG) is None
