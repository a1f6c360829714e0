"""Distilled spirits: alcohol content is mandatory and only the standards of fill
listed in 27 CFR 5.203 may be used.
"""

from label_compliance.categories.base_category import BeverageCategory
from label_compliance.models.schemas import BeverageType


class DistilledSpiritsCategory(BeverageCategory):
    beverage_type = BeverageType.DISTILLED_SPIRITS
