"""The Fragment entity: one owner-scoped, immutable-type unit of content."""

from datetime import datetime, timedelta
from typing import FrozenSet, List, Optional, Union

from common.logging_config import get_logger
from fragments import type_registry
from fragments.content_type import parse_content_type
from fragments.exceptions import (
    MalformedContentTypeError,
    NotFoundError,
    RepositoryNotBoundError,
    ValidationError,
)
from fragments.ingestion import is_bytes_like
from fragments.repositories.base import FragmentRepository
from fragments.schemas.fragments import FragmentRecord, FragmentResponse
from fragments.utils import generate_uuid, utc_now

logger = get_logger(__name__)


class Fragment:
    """
    Metadata for one fragment, plus access to its data through a repository.

    A Fragment is a transient value: it is built from a repository read or
    before a write. The repository owns the persisted state.
    """

    def __init__(
        self,
        owner_id: str,
        type: str,
        id: Optional[str] = None,
        created: Optional[datetime] = None,
        updated: Optional[datetime] = None,
        size: int = 0,
        repository: Optional[FragmentRepository] = None,
    ):
        if not owner_id or not type:
            raise ValidationError("ownerId and type are required")
        if not isinstance(owner_id, str):
            raise ValidationError("ownerId must be a string")
        if not isinstance(type, str):
            raise ValidationError("type must be a string")
        if isinstance(size, bool) or not isinstance(size, int):
            raise ValidationError("size must be a number")
        if size < 0:
            raise ValidationError("size cannot be negative")

        try:
            mime_type = parse_content_type(type).type
        except MalformedContentTypeError as e:
            raise ValidationError(f"type is not a valid MIME type: {type!r}") from e
        if not type_registry.is_supported_type(mime_type):
            raise ValidationError(f"The requested '{mime_type}' MIME type is not supported yet")

        now = utc_now()
        self.id = id or generate_uuid()
        self.owner_id = owner_id
        self.created = created or now
        self.updated = updated or now
        self.type = type
        self.size = size
        self._repository = repository

    def __repr__(self) -> str:
        return f"Fragment(id={self.id!r}, owner_id={self.owner_id!r}, type={self.type!r}, size={self.size})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fragment):
            return NotImplemented
        return self.to_record() == other.to_record()

    @property
    def repository(self) -> FragmentRepository:
        if self._repository is None:
            raise RepositoryNotBoundError(f"Fragment {self.id} is not bound to a repository")
        return self._repository

    @property
    def mime_type(self) -> str:
        """The type without parameters: "text/html; charset=utf-8" -> "text/html"."""
        return parse_content_type(self.type).type

    @property
    def is_text(self) -> bool:
        return self.mime_type.startswith("text/")

    @property
    def formats(self) -> FrozenSet[str]:
        """MIME types this fragment can be rendered as."""
        return type_registry.available_representations(self.mime_type)

    def to_record(self) -> FragmentRecord:
        return FragmentRecord(
            id=self.id,
            owner_id=self.owner_id,
            created=self.created,
            updated=self.updated,
            type=self.type,
            size=self.size,
        )

    @classmethod
    def from_record(cls, record: FragmentRecord, repository: Optional[FragmentRepository] = None) -> "Fragment":
        return cls(
            owner_id=record.owner_id,
            type=record.type,
            id=record.id,
            created=record.created,
            updated=record.updated,
            size=record.size,
            repository=repository,
        )

    def to_dict(self) -> dict:
        """JSON-ready metadata with camelCase keys and the available formats."""
        response = FragmentResponse(**self.to_record().model_dump(), formats=sorted(self.formats))
        return response.model_dump(by_alias=True, mode="json")

    def _touch(self) -> None:
        now = utc_now()
        if now <= self.updated:
            now = self.updated + timedelta(microseconds=1)
        self.updated = now

    def save(self) -> None:
        """
        Refresh `updated` and persist the metadata record.
        """
        self._touch()
        self.repository.write_metadata(self.owner_id, self.id, self.to_record())
        logger.debug(f"Fragment metadata saved [fragment_id={self.id}]")

    def get_data(self) -> Optional[bytes]:
        """
        Read this fragment's raw data; None when no data is stored.
        """
        return self.repository.read_data(self.owner_id, self.id)

    def set_data(self, data: Union[bytes, bytearray, memoryview]) -> None:
        """
        Replace this fragment's data, updating `size` and `updated`.

        The metadata is written first and the data second, as two separate
        repository calls. A crash or a concurrent reader between the two can
        observe the new size/updated next to the old bytes. This is not
        transactional.

        Raises:
            ValidationError: If data is not bytes-like
        """
        if not is_bytes_like(data):
            raise ValidationError(f"supplied data is not bytes ({type(data).__name__})")
        payload = bytes(data)
        self.size = len(payload)
        self.save()
        self.repository.write_data(self.owner_id, self.id, payload)

    @staticmethod
    def by_user(repository: FragmentRepository, owner_id: str, expand: bool = False) -> Union[List[str], List["Fragment"]]:
        """
        Get all fragments for the given owner.

        Args:
            repository: Where fragments are stored
            owner_id: Owner identifier
            expand: Return hydrated fragments instead of ids

        Returns:
            List of fragment ids, or of Fragment objects when expand is true
        """
        if not expand:
            return repository.list_ids(owner_id)
        return [Fragment.from_record(record, repository) for record in repository.list_metadata(owner_id)]

    @staticmethod
    def by_id(repository: FragmentRepository, owner_id: str, fragment_id: str) -> "Fragment":
        """
        Get a fragment for the owner by id.

        Raises:
            NotFoundError: If no metadata record exists for the pair
        """
        record = repository.read_metadata(owner_id, fragment_id)
        if record is None:
            raise NotFoundError(owner_id, fragment_id)
        return Fragment.from_record(record, repository)

    @staticmethod
    def delete(repository: FragmentRepository, owner_id: str, fragment_id: str) -> None:
        """
        Delete the owner's fragment metadata and data.

        Raises:
            NotFoundError: If the pair does not exist
        """
        repository.delete(owner_id, fragment_id)

    @staticmethod
    def is_supported_type(value: Optional[str]) -> bool:
        """
        True if we support this Content-Type (e.g. 'text/plain; charset=utf-8').
        """
        return type_registry.is_supported_type(value)
