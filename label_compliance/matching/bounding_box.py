import math
from typing import Optional, Sequence

from label_compliance.models.schemas import BoundingBox, OcrWord


def compute_text_angle(words: Sequence[OcrWord]) -> float:
    """Dominant reading direction of a group of words, snapped to 0, 90, -90 or 180.

    Uses the baseline of each word (first vertex to second vertex), summed
    across words so that one rotated token cannot flip the result.
    """
    sum_dx = 0.0
    sum_dy = 0.0
    for word in words:
        if len(word.vertices) < 2:
            continue
        sum_dx += word.vertices[1].x - word.vertices[0].x
        sum_dy += word.vertices[1].y - word.vertices[0].y

    if sum_dx == 0 and sum_dy == 0:
        return 0.0

    angle = math.degrees(math.atan2(sum_dy, sum_dx))
    snapped = math.floor(angle / 90 + 0.5) * 90
    if snapped > 180:
        return float(snapped - 360)
    if snapped <= -180:
        return float(snapped + 360)
    return float(snapped)


def compute_normalized_bounding_box(
    words: Sequence[OcrWord],
    image_width: int,
    image_height: int,
) -> Optional[BoundingBox]:
    """Bounding box of the words in unit-square coordinates of their image.

    Returns None when there is nothing to enclose or the image size is unknown.
    """
    if not words or image_width <= 0 or image_height <= 0:
        return None

    xs = [v.x for word in words for v in word.vertices]
    ys = [v.y for word in words for v in word.vertices]
    if not xs or not ys:
        return None

    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    return BoundingBox(
        x=min_x / image_width,
        y=min_y / image_height,
        width=(max_x - min_x) / image_width,
        height=(max_y - min_y) / image_height,
        angle=compute_text_angle(words),
    )
