"""Submission variants accepted by the ingestion pipeline."""

import base64
import binascii
from dataclasses import dataclass

from nutrisnap.errors import ValidationError

IMAGE_DATA_URI_PREFIX = "data:image/"


@dataclass(frozen=True)
class TextSubmission:
    """Free-text meal description."""

    description: str


@dataclass(frozen=True)
class ImageSubmission:
    """Meal photo with its MIME type."""

    data: bytes
    mime_type: str

    @classmethod
    def from_bytes(cls, image_bytes: bytes) -> "ImageSubmission":
        """Build a submission from raw upload bytes."""
        return cls(data=image_bytes, mime_type=detect_mime_type(image_bytes))

    def to_data_url(self) -> str:
        """Return the image as a base64 data URL for model input."""
        encoded = base64.b64encode(self.data).decode("utf-8")
        return f"data:{self.mime_type};base64,{encoded}"


Submission = TextSubmission | ImageSubmission


def parse_image_data_uri(data_uri: str) -> ImageSubmission:
    """Parse a ``data:image/<type>;base64,<payload>`` URI."""
    if not data_uri.startswith(IMAGE_DATA_URI_PREFIX):
        raise ValidationError("Invalid image format. Must be an image data URI.")
    header, _, payload = data_uri.partition(",")
    media = header[len("data:") :].split(";")
    if "base64" not in media[1:]:
        raise ValidationError("Invalid image format. Image data must be base64.")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid image data.") from exc
    if not data:
        raise ValidationError("Image is empty.")
    return ImageSubmission(data=data, mime_type=media[0])


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    return "image/jpeg"
