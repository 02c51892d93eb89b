"""Utility helper functions for the fragments core."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from common.constants import EXTENSION_MEDIA_TYPES
from common.types import IdReference


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def normalize_extension(extension: Optional[str]) -> str:
    """
    Lowercase an extension and strip whitespace and a leading dot: " .HTML" -> "html".
    """
    return (extension or "").strip().lower().lstrip(".")


def media_type_for_extension(extension: Optional[str]) -> str:
    """
    Map a file extension to its media type.

    Returns:
        The media type, or "" when the extension is unknown
    """
    return EXTENSION_MEDIA_TYPES.get(normalize_extension(extension), "")


def has_extension(reference: Optional[str]) -> bool:
    """
    Check whether a fragment reference carries an extension.

    Example:
        has_extension("4dcc65b6-9d57-453a-bd3a-63c107a51698.html") -> True
        has_extension("4dcc65b6.") -> False
    """
    if reference is None:
        return False
    last_dot = reference.rfind(".")
    return last_dot != -1 and last_dot < len(reference) - 1


def separate_id_extension(reference: Optional[str]) -> IdReference:
    """
    Split a reference like "abc.html" on its last dot.

    Args:
        reference: Fragment id, optionally followed by ".ext"

    Returns:
        IdReference with the id, the extension ("" if none) and the
        extension's media type ("" if unknown)
    """
    if reference is None:
        return IdReference(id=str(reference), extension="", media_type="")

    last_dot = reference.rfind(".")
    if last_dot == -1:
        return IdReference(id=reference, extension="", media_type="")

    extension = reference[last_dot + 1:]
    return IdReference(
        id=reference[:last_dot],
        extension=extension,
        media_type=media_type_for_extension(extension),
    )
