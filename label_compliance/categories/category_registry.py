from typing import Optional

from label_compliance.categories.base_category import BeverageCategory
from label_compliance.categories.malt_category import MaltBeverageCategory
from label_compliance.categories.spirits_category import DistilledSpiritsCategory
from label_compliance.categories.wine_category import WineCategory
from label_compliance.config import ComplianceConfig, get_config
from label_compliance.exceptions import UnknownBeverageTypeError
from label_compliance.models.schemas import BeverageType

CATEGORY_REGISTRY: dict[BeverageType, type[BeverageCategory]] = {
    BeverageType.DISTILLED_SPIRITS: DistilledSpiritsCategory,
    BeverageType.WINE: WineCategory,
    BeverageType.MALT_BEVERAGE: MaltBeverageCategory,
}


def parse_beverage_type(value: BeverageType | str) -> BeverageType:
    """Resolve a category string ("wine", "malt_beverage", ...) to its enum member."""
    try:
        return BeverageType(value)
    except ValueError:
        valid = ", ".join(t.value for t in BeverageType)
        raise UnknownBeverageTypeError(f"Unknown beverage type '{value}'. Must be one of: {valid}") from None


def get_category(
    beverage_type: BeverageType | str,
    config: Optional[ComplianceConfig] = None,
) -> BeverageCategory:
    """Build the category object for a beverage type using the configured tables."""
    config = config or get_config()
    resolved = parse_beverage_type(beverage_type)
    return CATEGORY_REGISTRY[resolved](config.categories[resolved])
