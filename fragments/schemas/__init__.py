"""Pydantic schemas for fragment metadata."""

from fragments.schemas.fragments import (
    FragmentRecord,
    FragmentResponse
)

__all__ = [
    "FragmentRecord",
    "FragmentResponse"
]
