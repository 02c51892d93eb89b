"""Shared data type definitions (ContentType, IdReference)."""

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class ContentType:
    """
    A parsed Content-Type value.
    """
    type: str
    parameters: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class IdReference:
    """
    A fragment reference split into id, extension and the extension's media type.
    """
    id: str
    extension: str
    media_type: str
