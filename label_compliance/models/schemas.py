from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldName(str, Enum):
    """Regulated label attributes the core knows how to check."""

    BRAND_NAME = "brand_name"
    FANCIFUL_NAME = "fanciful_name"
    CLASS_TYPE = "class_type"
    ALCOHOL_CONTENT = "alcohol_content"
    NET_CONTENTS = "net_contents"
    HEALTH_WARNING = "health_warning"
    NAME_AND_ADDRESS = "name_and_address"
    QUALIFYING_PHRASE = "qualifying_phrase"
    COUNTRY_OF_ORIGIN = "country_of_origin"
    GRAPE_VARIETAL = "grape_varietal"
    APPELLATION_OF_ORIGIN = "appellation_of_origin"
    VINTAGE_YEAR = "vintage_year"
    SULFITE_DECLARATION = "sulfite_declaration"
    AGE_STATEMENT = "age_statement"
    STATE_OF_DISTILLATION = "state_of_distillation"
    STANDARDS_OF_FILL = "standards_of_fill"


class BeverageType(str, Enum):
    DISTILLED_SPIRITS = "distilled_spirits"
    WINE = "wine"
    MALT_BEVERAGE = "malt_beverage"


class ItemStatus(str, Enum):
    """Outcome of comparing one field."""

    MATCH = "match"
    MISMATCH = "mismatch"
    NOT_FOUND = "not_found"
    NEEDS_CORRECTION = "needs_correction"


class LabelStatus(str, Enum):
    """Lifecycle status of a label.

    The status engine only ever produces the last four. The first three belong
    to the caller's workflow and pass through the effective status resolver.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    CONDITIONALLY_APPROVED = "conditionally_approved"
    NEEDS_CORRECTION = "needs_correction"
    REJECTED = "rejected"


class Urgency(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"
    EXPIRED = "expired"


class ImageType(str, Enum):
    FRONT = "front"
    BACK = "back"
    NECK = "neck"
    STRIP = "strip"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Extraction collaborator contract
# ---------------------------------------------------------------------------


class BoundingBox(BaseModel):
    """Region of a label image in unit-square coordinates (0-1 on both axes).

    angle is the dominant reading direction of the text in degrees, snapped to
    0, 90, -90 or 180.
    """

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float
    angle: float = 0.0


class OcrVertex(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class OcrWord(BaseModel):
    """One word from the OCR engine, with its polygon in image pixels."""

    model_config = ConfigDict(frozen=True)

    text: str
    vertices: list[OcrVertex] = []
    confidence: float = 0.0


class OcrPage(BaseModel):
    """Word-level OCR output for a single label image."""

    model_config = ConfigDict(frozen=True)

    words: list[OcrWord] = []
    full_text: str = ""
    image_width: int = 0
    image_height: int = 0


class ExtractedField(BaseModel):
    """A candidate value the extraction stage attributes to one field.

    value is None when the classifier could not find the field on any image.
    """

    model_config = ConfigDict(frozen=True)

    field_name: FieldName
    value: Optional[str] = None
    confidence: float = 0.0
    reasoning: Optional[str] = None
    bounding_box: Optional[BoundingBox] = None
    image_index: int = 0


class ImageClassification(BaseModel):
    """The extractor's guess at which panel of the container an image shows."""

    model_config = ConfigDict(frozen=True)

    image_index: int
    image_type: ImageType
    confidence: float


class TokenMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class ExtractionResult(BaseModel):
    """Everything one call to the extraction collaborator returns.

    raw_response is opaque to the core and only carried through for the audit
    trail. ocr_pages is optional; when present it gives the reconciler the same
    text the classifier saw and lets missing bounding boxes be recovered.
    """

    model_config = ConfigDict(frozen=True)

    fields: list[ExtractedField] = []
    image_classifications: list[ImageClassification] = []
    detected_beverage_type: Optional[BeverageType] = None
    processing_time_ms: int = 0
    model_used: str = ""
    raw_response: Any = None
    metrics: TokenMetrics = Field(default_factory=TokenMetrics)
    ocr_pages: list[OcrPage] = []

    @property
    def ocr_text(self) -> str:
        """Full OCR text across all images, one image per line block."""
        return "\n".join(page.full_text for page in self.ocr_pages if page.full_text)


# ---------------------------------------------------------------------------
# Comparison and status outputs
# ---------------------------------------------------------------------------


class ComparisonOutcome(BaseModel):
    """Classification of a single field by the comparator.

    recovered_value is set when the extractor supplied nothing and the value
    was reconciled directly from the OCR text.
    """

    model_config = ConfigDict(frozen=True)

    status: ItemStatus
    confidence: int = Field(ge=0, le=100)
    reasoning: str
    recovered_value: Optional[str] = None


class FieldStatus(BaseModel):
    """Minimal per-field input to the status engine."""

    model_config = ConfigDict(frozen=True)

    field_name: FieldName
    status: ItemStatus


class FieldComparisonResult(BaseModel):
    """One row of a validation run, ready for the caller to persist."""

    model_config = ConfigDict(frozen=True)

    field_name: FieldName
    expected_value: str
    extracted_value: str = ""
    status: ItemStatus
    confidence: int = Field(ge=0, le=100)
    reasoning: str
    bounding_box: Optional[BoundingBox] = None
    image_index: int = 0


class OverallStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: LabelStatus
    deadline_days: Optional[int] = None


class ImageTypeUpdate(BaseModel):
    """A proposed relabelling of a stored image. Applying it is the caller's job."""

    model_config = ConfigDict(frozen=True)

    image_index: int
    image_type: ImageType
    confidence: float


class ValidationPayload(BaseModel):
    """Packaged output of one validation run.

    The caller persists this as the new current result for the label and marks
    any previous result as superseded in the same unit of work.
    """

    model_config = ConfigDict(frozen=True)

    beverage_type: BeverageType
    field_comparisons: list[FieldComparisonResult] = []
    overall_status: LabelStatus
    deadline_days: Optional[int] = None
    overall_confidence: int = 0
    image_type_updates: list[ImageTypeUpdate] = []
    extraction: ExtractionResult

    def is_auto_approvable(self, auto_approval_enabled: bool) -> bool:
        """True when the caller's policy allows auto-approval and the run approved the label."""
        return auto_approval_enabled and self.overall_status == LabelStatus.APPROVED


# ---------------------------------------------------------------------------
# Label state (owned by the caller, read by the effective status resolver)
# ---------------------------------------------------------------------------


class LabelState(BaseModel):
    """The slice of a stored label the effective status resolver needs.

    deadline_expired may be set eagerly by a background task, but the resolver
    does not depend on it: a deadline at or before now counts as expired too.
    """

    model_config = ConfigDict(frozen=True)

    status: LabelStatus
    correction_deadline: Optional[datetime] = None
    deadline_expired: bool = False
    updated_at: Optional[datetime] = None


class DeadlineInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    days_remaining: int
    urgency: Urgency
