"""Pydantic schemas for fragment metadata records."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class FragmentRecord(BaseModel):
    """Stored metadata record for one fragment (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    owner_id: str = Field(alias="ownerId")
    created: datetime
    updated: datetime
    type: str
    size: int = Field(ge=0)


class FragmentResponse(FragmentRecord):
    """Fragment metadata as exposed to metadata consumers."""
    formats: List[str]

