"""Base beverage category: the per-category capability the status engine relies on.

Each category answers three questions: which fields are mandatory, whether a
container size is a permitted standard of fill, and how large the statutory
warning type must be. The tables behind the answers come from the compliance
configuration, so tests can swap them without subclassing.
"""

from label_compliance.config import CategoryRules
from label_compliance.models.schemas import BeverageType, FieldName
from label_compliance.utils.health_warning import min_type_size_mm


class BeverageCategory:
    """Base class for beverage categories.

    Subclasses set `beverage_type`; a subclass overrides is_valid_size() only
    when its rules differ from a plain lookup in the configured size set.
    """

    beverage_type: BeverageType

    def __init__(self, rules: CategoryRules):
        self.rules = rules

    @property
    def label(self) -> str:
        return self.rules.label

    @property
    def mandatory_fields(self) -> frozenset[FieldName]:
        return self.rules.mandatory_fields

    @property
    def optional_fields(self) -> frozenset[FieldName]:
        return self.rules.optional_fields

    def is_mandatory(self, field_name: FieldName) -> bool:
        return field_name in self.rules.mandatory_fields

    def is_valid_size(self, size_ml: int) -> bool:
        """True if the container size is a permitted standard of fill.

        A category configured without a size set accepts every size.
        """
        if self.rules.valid_sizes_ml is None:
            return True
        return size_ml in self.rules.valid_sizes_ml

    def health_warning_min_type_size_mm(self, container_size_ml: float) -> int:
        return min_type_size_mm(container_size_ml)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.beverage_type.value})"
