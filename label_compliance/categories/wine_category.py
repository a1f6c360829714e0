"""Wine: adds grape varietal, appellation and the sulfite declaration to the
mandatory set, with its own standards of fill (27 CFR 4.72).
"""

from label_compliance.categories.base_category import BeverageCategory
from label_compliance.models.schemas import BeverageType


class WineCategory(BeverageCategory):
    beverage_type = BeverageType.WINE
