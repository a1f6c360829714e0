# The statutory health warning required on every alcohol beverage label (27 CFR Part 16).
# "GOVERNMENT WARNING:" must appear in all caps; the two numbered sections follow it.
HEALTH_WARNING_PREFIX = "GOVERNMENT WARNING:"

HEALTH_WARNING_SECTION_1 = (
    "(1) According to the Surgeon General, women should not drink alcoholic "
    "beverages during pregnancy because of the risk of birth defects."
)

HEALTH_WARNING_SECTION_2 = (
    "(2) Consumption of alcoholic beverages impairs your ability to drive a car "
    "or operate machinery, and may cause health problems."
)

HEALTH_WARNING_FULL = f"{HEALTH_WARNING_PREFIX} {HEALTH_WARNING_SECTION_1} {HEALTH_WARNING_SECTION_2}"

# Phrases from the warning body that a legible warning must show. Small print
# often survives OCR as a readable bold prefix over an unreadable body, so the
# prefix alone never proves the warning is present.
HEALTH_WARNING_BODY_PHRASES = (
    "surgeon general",
    "pregnancy",
    "birth defects",
    "drive a car",
    "operate machinery",
    "health problems",
)


def _collapse(text: str) -> str:
    return " ".join(text.split())


def check_health_warning(text: str) -> tuple[bool, list[str]]:
    """Check a transcribed warning against the statutory wording.

    Returns:
        (valid, issues) where issues lists every problem found, e.g. a
        lowercase prefix or a missing numbered section.
    """
    trimmed = text.strip()
    if not trimmed:
        return False, ["Health warning statement is empty"]

    issues = []
    if not trimmed.startswith(HEALTH_WARNING_PREFIX):
        if trimmed.lower().startswith(HEALTH_WARNING_PREFIX.lower()):
            issues.append('"GOVERNMENT WARNING:" prefix must be in ALL CAPS')
        else:
            issues.append('Missing "GOVERNMENT WARNING:" prefix')

    normalized = _collapse(trimmed)
    if normalized != _collapse(HEALTH_WARNING_FULL):
        if _collapse(HEALTH_WARNING_SECTION_1) not in normalized:
            issues.append("Missing or incorrect section (1): Surgeon General pregnancy warning")
        if _collapse(HEALTH_WARNING_SECTION_2) not in normalized:
            issues.append("Missing or incorrect section (2): impaired driving/machinery warning")
        if "(1)" not in normalized:
            issues.append('Missing section number "(1)"')
        if "(2)" not in normalized:
            issues.append('Missing section number "(2)"')
        if not issues:
            issues.append("Health warning text does not match the required statement")

    return not issues, issues


def min_type_size_mm(container_size_ml: float) -> int:
    """Minimum type size of the warning for a container volume (27 CFR 16.22)."""
    if container_size_ml <= 237:
        return 1
    if container_size_ml <= 3000:
        return 2
    return 3
