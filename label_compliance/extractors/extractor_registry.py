from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from label_compliance.extractors.common_extractors import (
    parse_age_statement,
    parse_alcohol_content,
    parse_net_contents_ml,
)
from label_compliance.models.schemas import FieldName


class NumericParser(BaseModel):
    """How one numerically comparable field is parsed and compared.

    tolerance is absolute when relative is False, otherwise a fraction of the
    expected value.
    """

    model_config = ConfigDict(frozen=True)

    parse: Callable[[str], Optional[float]]
    label: str
    unit: str
    tolerance: float = 0.0
    relative: bool = False

    def allowed_difference(self, expected: float) -> float:
        return expected * self.tolerance if self.relative else self.tolerance


# Fields compared by value rather than by text. Anything the parser cannot
# read falls back to fuzzy text comparison.
NUMERIC_PARSERS: dict[FieldName, NumericParser] = {
    FieldName.ALCOHOL_CONTENT: NumericParser(
        parse=parse_alcohol_content, label="Alcohol content", unit="%", tolerance=0.5,
    ),
    FieldName.NET_CONTENTS: NumericParser(
        parse=parse_net_contents_ml, label="Net contents", unit="mL", tolerance=0.01, relative=True,
    ),
    FieldName.AGE_STATEMENT: NumericParser(
        parse=parse_age_statement, label="Age statement", unit=" years",
    ),
}
