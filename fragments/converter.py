"""
Content-type conversion engine.

Conversions are declared once, as an ordered table of rules. The first rule
whose match function accepts (source base type, target extension) performs
the transformation. The type registry derives its legality matrix from this
same table.
"""

import io
import json
import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from markdown_it import MarkdownIt
from PIL import Image, UnidentifiedImageError

from common.constants import EXTENSION_MEDIA_TYPES, IMAGE_FORMATS
from common.logging_config import get_logger
from fragments.exceptions import ConversionError, UnsupportedConversionError
from fragments.utils import normalize_extension

logger = get_logger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")

_markdown = MarkdownIt("commonmark")


@dataclass(frozen=True)
class ConversionRule:
    """
    One row of the conversion table.
    """
    name: str
    matches: Callable[[str, str], bool]
    transform: Callable[[bytes, str, str], bytes]


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def render_markdown(data: bytes) -> str:
    if not data:
        return ""
    return _markdown.render(_decode(data))


def strip_tags(html: str) -> str:
    return _TAG_RE.sub("", html)


def _markdown_to_html(data: bytes, source_type: str, extension: str) -> bytes:
    return render_markdown(data).encode("utf-8")


def _markup_to_text(data: bytes, source_type: str, extension: str) -> bytes:
    if not data:
        return b""
    if source_type == "text/markdown":
        html = render_markdown(data)
    else:
        html = _decode(data)
    return strip_tags(html).encode("utf-8")


def _json_to_text(data: bytes, source_type: str, extension: str) -> bytes:
    try:
        parsed = json.loads(data)
    except (ValueError, TypeError) as e:
        raise ConversionError(source_type, extension, f"invalid JSON: {e}") from e
    return json.dumps(parsed, indent=2, ensure_ascii=False).encode("utf-8")


def _prepare_mode(image: Image.Image, image_format: str) -> Image.Image:
    """Convert pixel modes the target encoder cannot write."""
    if image_format == "JPEG" and image.mode not in ("RGB", "L", "CMYK"):
        return image.convert("RGB")
    if image_format == "WEBP" and image.mode not in ("RGB", "RGBA"):
        has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info
        return image.convert("RGBA" if has_alpha else "RGB")
    if image_format == "PNG" and image.mode == "CMYK":
        return image.convert("RGB")
    if image_format == "GIF" and image.mode not in ("1", "L", "P", "RGB", "RGBA"):
        return image.convert("RGB")
    return image


def _reencode_image(data: bytes, source_type: str, extension: str) -> bytes:
    image_format = IMAGE_FORMATS[extension]
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            output = io.BytesIO()
            _prepare_mode(image, image_format).save(output, format=image_format)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.error(f"Image re-encode failed [source_type={source_type}, extension={extension}]: {e}")
        raise ConversionError(source_type, extension, f"stored image could not be re-encoded: {e}") from e
    return output.getvalue()


def _identity(data: bytes, source_type: str, extension: str) -> bytes:
    return bytes(data)


CONVERSION_RULES = (
    ConversionRule(
        name="markdown-to-html",
        matches=lambda source, ext: source == "text/markdown" and ext == "html",
        transform=_markdown_to_html,
    ),
    ConversionRule(
        name="markup-to-text",
        matches=lambda source, ext: source in ("text/html", "text/markdown") and ext == "txt",
        transform=_markup_to_text,
    ),
    ConversionRule(
        name="json-to-text",
        matches=lambda source, ext: source == "application/json" and ext == "txt",
        transform=_json_to_text,
    ),
    ConversionRule(
        name="image-reencode",
        matches=lambda source, ext: source.startswith("image/") and ext in IMAGE_FORMATS,
        transform=_reencode_image,
    ),
    ConversionRule(
        name="identity",
        matches=lambda source, ext: EXTENSION_MEDIA_TYPES.get(ext) == source,
        transform=_identity,
    ),
)


def _normalize(source_type: Optional[str], extension: Optional[str]) -> Tuple[str, str]:
    source = (source_type or "").split(";", 1)[0].strip().lower()
    return source, normalize_extension(extension)


def find_rule(source_type: Optional[str], extension: Optional[str]) -> Optional[ConversionRule]:
    """
    Return the first rule accepting (source_type, extension), or None.

    The source type may carry parameters; they are ignored. Matching is
    case-insensitive.
    """
    source, ext = _normalize(source_type, extension)
    if not source or not ext:
        return None
    for rule in CONVERSION_RULES:
        if rule.matches(source, ext):
            return rule
    return None


def convert(data: bytes, source_type: str, extension: str) -> bytes:
    """
    Render data of source_type as the representation named by extension.

    Args:
        data: Raw stored bytes (never modified)
        source_type: Fragment type, parameters allowed
        extension: Target extension without the dot (e.g. "html")

    Returns:
        Converted bytes; text output is UTF-8

    Raises:
        UnsupportedConversionError: If no rule accepts the pair
        ConversionError: If the rule accepts the pair but the data cannot be converted
    """
    rule = find_rule(source_type, extension)
    if rule is None:
        raise UnsupportedConversionError(source_type, extension)

    source, ext = _normalize(source_type, extension)
    logger.debug(f"Converting with rule {rule.name} [source_type={source}, extension={ext}]")
    return rule.transform(bytes(data), source, ext)
