"""Supported fragment types and the legal conversion graph."""

from typing import Dict, FrozenSet, Optional

from common.constants import EXTENSION_MEDIA_TYPES
from fragments.content_type import parse_content_type
from fragments.converter import find_rule
from fragments.exceptions import MalformedContentTypeError

SUPPORTED_TYPES: FrozenSet[str] = frozenset({
    "text/plain",
    "text/markdown",
    "text/html",
    "application/json",
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/gif",
})


def _base_type_or_none(value: Optional[str]) -> Optional[str]:
    try:
        return parse_content_type(value).type
    except MalformedContentTypeError:
        return None


def is_supported_type(mime_value: Optional[str]) -> bool:
    """
    Check whether a Content-Type value (parameters allowed) names a supported type.

    Malformed values are unsupported; this never raises.
    """
    return _base_type_or_none(mime_value) in SUPPORTED_TYPES


def is_conversion_possible(source_type: Optional[str], target_extension: Optional[str]) -> bool:
    """
    Check whether a fragment of source_type can be rendered as target_extension.

    Both arguments are case-insensitive. Returns False for empty, None or
    unrecognized input.
    """
    if not isinstance(source_type, str) or not isinstance(target_extension, str):
        return False
    if not source_type or not target_extension:
        return False
    source = _base_type_or_none(source_type)
    if source not in SUPPORTED_TYPES:
        return False
    return find_rule(source, target_extension) is not None


def conversion_matrix() -> Dict[str, FrozenSet[str]]:
    """
    Supported type -> set of legal target extensions, derived from the conversion rules.
    """
    return {
        source: frozenset(ext for ext in EXTENSION_MEDIA_TYPES if find_rule(source, ext) is not None)
        for source in SUPPORTED_TYPES
    }


def available_representations(source_type: Optional[str]) -> FrozenSet[str]:
    """
    MIME types a fragment of source_type can be rendered as, including itself.

    Returns an empty set for unrecognized types.
    """
    source = _base_type_or_none(source_type)
    if source not in SUPPORTED_TYPES:
        return frozenset()
    return frozenset(
        media_type
        for ext, media_type in EXTENSION_MEDIA_TYPES.items()
        if find_rule(source, ext) is not None
    )
