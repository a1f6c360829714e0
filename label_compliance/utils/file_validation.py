import io
from typing import Sequence

from PIL import Image

from label_compliance.exceptions import InvalidImageError

# Raster formats the extraction collaborator accepts for label photographs.
ALLOWED_IMAGE_FORMATS = {"PNG", "JPEG", "WEBP"}


def validate_image_bytes(data: bytes) -> tuple[str, int, int]:
    """Check that a buffer holds a label image in an allowed format.

    Only the header is read; no pixel data is decoded.

    Returns:
        (format, width, height), e.g. ("JPEG", 1024, 768).

    Raises:
        InvalidImageError: if the bytes are not a readable image, or the
            format is not in ALLOWED_IMAGE_FORMATS.
    """
    if not data:
        raise InvalidImageError("Image is empty")
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
            width, height = image.size
    except OSError as e:
        raise InvalidImageError(f"Image could not be read: {e}") from e

    if image_format not in ALLOWED_IMAGE_FORMATS:
        raise InvalidImageError(
            f"Unsupported image format '{image_format}'. Allowed: {', '.join(sorted(ALLOWED_IMAGE_FORMATS))}"
        )
    return image_format, width, height


def validate_images(images: Sequence[bytes], max_images: int) -> None:
    """Check the image set for one label: 1 to max_images readable images."""
    if not images:
        raise InvalidImageError("At least one image is required")
    if len(images) > max_images:
        raise InvalidImageError(f"At most {max_images} images can be validated at once, got {len(images)}")
    for index, data in enumerate(images):
        try:
            validate_image_bytes(data)
        except InvalidImageError as e:
            raise InvalidImageError(f"Image {index}: {e}") from e
