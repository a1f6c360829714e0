"""Malt beverages.

Alcohol content is optional, and malt beverages have no standards of fill:
any container size is valid, whatever the configuration says.
"""

from label_compliance.categories.base_category import BeverageCategory
from label_compliance.models.schemas import BeverageType


class MaltBeverageCategory(BeverageCategory):
    beverage_type = BeverageType.MALT_BEVERAGE

    def is_valid_size(self, size_ml: int) -> bool:
        return True
