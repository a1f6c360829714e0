"""Effective status resolver: lazy deadline expiration.

No background job rewrites label statuses when a correction window closes.
Instead, whoever reads a label asks for its effective status, and may write
the result back if it differs from what is stored.

  - needs_correction + deadline passed        -> rejected
  - conditionally_approved + deadline passed  -> needs_correction
  - everything else passes through unchanged

Escalation is one step per call. A conditionally approved label whose window
closes becomes needs_correction, and only a second expired window takes it to
rejected.

A label stuck in processing is a separate question for the caller's workflow
(see is_stale_processing); the resolver never changes it.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from label_compliance.config import ComplianceConfig, get_config
from label_compliance.models.schemas import DeadlineInfo, LabelState, LabelStatus, Urgency

SECONDS_PER_DAY = 24 * 60 * 60
AMBER_DAYS = 7


def _as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC so stored and computed times compare."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _now(now: Optional[datetime]) -> datetime:
    return _as_utc(now) if now is not None else datetime.now(timezone.utc)


def is_deadline_passed(label: LabelState, now: Optional[datetime] = None) -> bool:
    """A deadline counts as passed if flagged expired or at/before now."""
    if label.correction_deadline is None:
        return False
    return label.deadline_expired or _as_utc(label.correction_deadline) <= _now(now)


def get_effective_status(label: LabelState, now: Optional[datetime] = None) -> LabelStatus:
    """Status that should be shown and acted upon right now."""
    if not is_deadline_passed(label, now):
        return label.status

    if label.status == LabelStatus.NEEDS_CORRECTION:
        return LabelStatus.REJECTED
    if label.status == LabelStatus.CONDITIONALLY_APPROVED:
        return LabelStatus.NEEDS_CORRECTION
    return label.status


def is_stale_processing(
    label: LabelState,
    now: Optional[datetime] = None,
    config: Optional[ComplianceConfig] = None,
) -> bool:
    """True when a processing label has not been touched for stale_processing_minutes.

    Such a label is presumed abandoned by its worker, so the caller may re-run
    validation or hand it to a reviewer. Without updated_at it is never stale.
    """
    if label.status != LabelStatus.PROCESSING or label.updated_at is None:
        return False
    config = config or get_config()
    stale_after = timedelta(minutes=config.stale_processing_minutes)
    return _now(now) - _as_utc(label.updated_at) >= stale_after


def get_deadline_info(deadline: Optional[datetime], now: Optional[datetime] = None) -> Optional[DeadlineInfo]:
    """Days left and a colour-coded urgency for a correction deadline.

    - green: more than 7 days remaining
    - amber: 1-7 days remaining
    - red: less than 24 hours remaining
    - expired: deadline reached, reported as 0 days

    Returns None when there is no deadline.
    """
    if deadline is None:
        return None

    remaining = (_as_utc(deadline) - _now(now)).total_seconds()
    if remaining <= 0:
        return DeadlineInfo(days_remaining=0, urgency=Urgency.EXPIRED)

    days_remaining = math.ceil(remaining / SECONDS_PER_DAY)
    if remaining < SECONDS_PER_DAY:
        urgency = Urgency.RED
    elif days_remaining <= AMBER_DAYS:
        urgency = Urgency.AMBER
    else:
        urgency = Urgency.GREEN
    return DeadlineInfo(days_remaining=days_remaining, urgency=urgency)
