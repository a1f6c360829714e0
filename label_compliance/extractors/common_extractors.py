import re
from typing import Optional

from label_compliance.utils.text_normalization import normalize_whitespace

ML_PER_FL_OZ = 29.5735

# Unit spellings seen on labels and in application forms, mapped to millilitres.
UNIT_TO_ML: dict[str, float] = {
    "ml": 1,
    "milliliter": 1,
    "milliliters": 1,
    "millilitre": 1,
    "millilitres": 1,
    "cl": 10,
    "centiliter": 10,
    "centiliters": 10,
    "centilitre": 10,
    "centilitres": 10,
    "l": 1000,
    "liter": 1000,
    "liters": 1000,
    "litre": 1000,
    "litres": 1000,
    "oz": ML_PER_FL_OZ,
    "fl oz": ML_PER_FL_OZ,
    "fl. oz": ML_PER_FL_OZ,
    "fl. oz.": ML_PER_FL_OZ,
    "fluid ounce": ML_PER_FL_OZ,
    "fluid ounces": ML_PER_FL_OZ,
    "pt": 473.176,
    "pint": 473.176,
    "pints": 473.176,
    "qt": 946.353,
    "quart": 946.353,
    "quarts": 946.353,
    "gal": 3785.41,
    "gallon": 3785.41,
    "gallons": 3785.41,
}

_UNITS_LONGEST_FIRST = sorted(UNIT_TO_ML, key=len, reverse=True)

_PROOF_RE = re.compile(r"(\d+(?:\.\d+)?)\s*proof", re.IGNORECASE)
_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_QUANTITY_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(.+)")
_AGE_YEARS_RE = re.compile(r"(\d+)\s*(?:years?|yrs?)", re.IGNORECASE)
_AGED_RE = re.compile(r"aged\s+(\d+)", re.IGNORECASE)
_YEAR_RE = re.compile(r"\b(1[89]\d\d|20\d\d)\b")


def parse_alcohol_content(value: str) -> Optional[float]:
    """Extract alcohol by volume as a percentage.

    Handles:
      - "45% Alc./Vol.", "45% ABV", "12.5%"
      - "90 Proof" -> 45.0 (proof is twice the ABV, and wins when present)
    """
    cleaned = normalize_whitespace(value)

    proof_match = _PROOF_RE.search(cleaned)
    if proof_match:
        return float(proof_match.group(1)) / 2

    percent_match = _PERCENT_RE.search(cleaned)
    if percent_match:
        return float(percent_match.group(1))

    return None


def parse_net_contents_ml(value: str) -> Optional[float]:
    """Convert a net contents statement to millilitres, rounded to 0.01 mL.

    Handles:
      - "750 mL", "750ml", "75 cL", "1.5 L", "1 Liter"
      - "25.4 FL OZ", "12 fl. oz.", "1 gallon"
      - Compound units containing a known unit ("25.4 fl oz bottle")
    """
    cleaned = normalize_whitespace(value)
    match = _QUANTITY_RE.search(cleaned)
    if not match:
        return None

    quantity = float(match.group(1))
    unit = match.group(2).lower()
    if unit.endswith("."):
        unit = unit[:-1]
    unit = unit.strip()

    multiplier = UNIT_TO_ML.get(unit)
    if multiplier is None:
        # Longest spelling first so "fl oz bottle" is not read as litres.
        multiplier = next((UNIT_TO_ML[name] for name in _UNITS_LONGEST_FIRST if name in unit), None)
    if multiplier is None:
        return None
    return round(quantity * multiplier, 2)


def parse_age_statement(value: str) -> Optional[float]:
    """Extract an age in years: "12 Years Old", "Aged 4 yrs", "Aged 8"."""
    cleaned = normalize_whitespace(value)
    match = _AGE_YEARS_RE.search(cleaned) or _AGED_RE.search(cleaned)
    if match:
        return float(match.group(1))
    return None


def parse_vintage_year(value: str) -> Optional[str]:
    """Return the four-digit year in a vintage statement, or None."""
    match = _YEAR_RE.search(value)
    return match.group(1) if match else None
