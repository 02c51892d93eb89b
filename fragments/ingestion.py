"""Checks that a request body genuinely matches its declared Content-Type."""

import io
import json

from PIL import Image, UnidentifiedImageError

from common.constants import TEXT_MEDIA_TYPES
from common.logging_config import get_logger
from common.types import ContentType
from fragments.content_type import parse_content_type
from fragments.exceptions import IngestionMismatchError, UnsupportedTypeError, ValidationError

logger = get_logger(__name__)

DECODABLE_IMAGE_FORMATS = frozenset({"PNG", "JPEG", "WEBP", "GIF"})


def is_bytes_like(data: object) -> bool:
    return isinstance(data, (bytes, bytearray, memoryview))


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _validate_json(data: bytes, declared_type: str) -> None:
    try:
        json.loads(data.decode("utf-8"), parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError) as e:
        raise IngestionMismatchError(declared_type, f"invalid JSON format ({e})") from e


def _validate_image(data: bytes, declared_type: str) -> None:
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
            image.verify()
        # verify() does not decode pixel data, and for GIF it checks nothing
        with Image.open(io.BytesIO(data)) as image:
            image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, EOFError, SyntaxError, ValueError) as e:
        raise IngestionMismatchError(declared_type, f"invalid image format ({e})") from e

    if image_format not in DECODABLE_IMAGE_FORMATS:
        raise IngestionMismatchError(declared_type, f"unsupported image format {image_format}")


def validate_content(data: object, content_type_header: object) -> ContentType:
    """
    Validate a body against its declared Content-Type header.

    Args:
        data: Raw request body
        content_type_header: Raw Content-Type header value

    Returns:
        The parsed ContentType

    Raises:
        MalformedContentTypeError: If the header cannot be parsed
        ValidationError: If data is not bytes-like
        UnsupportedTypeError: If the declared type is not accepted for ingestion
        IngestionMismatchError: If the body does not match the declared type
    """
    content_type = parse_content_type(content_type_header)
    declared = content_type.type

    if not is_bytes_like(data):
        raise ValidationError(f"Fragment data must be bytes, got {type(data).__name__}")
    body = bytes(data)

    if declared == "application/json":
        _validate_json(body, declared)
    elif declared.startswith("image/"):
        _validate_image(body, declared)
    elif declared in TEXT_MEDIA_TYPES:
        pass
    else:
        raise UnsupportedTypeError(declared)

    logger.debug(f"Body accepted for ingestion [content_type={declared}, size={len(body)}]")
    return content_type
