"""Status rule engine: turn per-field results into one compliance decision.

Rules, first match wins:
  1. A container size outside the category's standards of fill -> rejected
  2. Any failure on a rejection field (the health warning) -> rejected
  3. Any substantive failure on a mandatory field -> needs_correction (30 days)
  4. Any minor discrepancy -> conditionally_approved (7 days)
  5. Otherwise -> approved

The engine is a pure, total function: it never raises for well-typed input and
an empty list of items simply has nothing to object to.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Protocol

from label_compliance.categories.category_registry import get_category
from label_compliance.config import ComplianceConfig, get_config
from label_compliance.models.schemas import BeverageType, FieldName, ItemStatus, LabelStatus, OverallStatus


class HasFieldStatus(Protocol):
    """Anything carrying a field name and its comparison status.

    FieldStatus and FieldComparisonResult both qualify.
    """

    field_name: FieldName
    status: ItemStatus


def determine_overall_status(
    item_statuses: Iterable[HasFieldStatus],
    beverage_type: BeverageType | str,
    container_size_ml: Optional[int] = None,
    config: Optional[ComplianceConfig] = None,
) -> OverallStatus:
    """Compute the overall label status and correction window.

    Args:
        item_statuses: One entry per compared field.
        beverage_type: Category whose mandatory fields and sizes apply.
        container_size_ml: Declared container size; skipped when None
            (e.g. when re-deciding during a specialist review).
        config: Field sets and deadline windows.
    """
    config = config or get_config()
    category = get_category(beverage_type, config)

    if container_size_ml is not None and not category.is_valid_size(container_size_ml):
        return OverallStatus(status=LabelStatus.REJECTED, deadline_days=None)

    has_rejection = False
    has_substantive_mismatch = False
    has_minor_discrepancy = False

    for item in item_statuses:
        field_name = item.field_name
        is_mandatory = category.is_mandatory(field_name)
        is_rejection_field = field_name in config.rejection_fields

        if item.status == ItemStatus.MATCH:
            continue

        if item.status == ItemStatus.NOT_FOUND:
            # Optional fields missing from the label are not a problem.
            if is_mandatory:
                if is_rejection_field:
                    has_rejection = True
                else:
                    has_substantive_mismatch = True
            continue

        # mismatch / needs_correction
        if is_rejection_field:
            has_rejection = True
        elif field_name in config.minor_discrepancy_fields:
            has_minor_discrepancy = True
        elif is_mandatory:
            has_substantive_mismatch = True
        else:
            has_minor_discrepancy = True

    if has_rejection:
        return OverallStatus(status=LabelStatus.REJECTED, deadline_days=None)
    if has_substantive_mismatch:
        return OverallStatus(status=LabelStatus.NEEDS_CORRECTION, deadline_days=config.correction_deadline_days)
    if has_minor_discrepancy:
        return OverallStatus(
            status=LabelStatus.CONDITIONALLY_APPROVED,
            deadline_days=config.conditional_deadline_days,
        )
    return OverallStatus(status=LabelStatus.APPROVED, deadline_days=None)


def compute_correction_deadline(
    status: LabelStatus,
    now: Optional[datetime] = None,
    config: Optional[ComplianceConfig] = None,
) -> Optional[datetime]:
    """Deadline timestamp the caller stores alongside a newly decided status.

    conditionally_approved and needs_correction get their configured windows;
    every other status has no deadline.
    """
    config = config or get_config()
    now = now or datetime.now(timezone.utc)

    if status == LabelStatus.CONDITIONALLY_APPROVED:
        return now + timedelta(days=config.conditional_deadline_days)
    if status == LabelStatus.NEEDS_CORRECTION:
        return now + timedelta(days=config.correction_deadline_days)
    return None
