"""Fragment service for business logic."""

from typing import List, Optional, Tuple, Union

from common.logging_config import get_logger
from fragments import config, converter, type_registry
from fragments.content_type import parse_content_type
from fragments.exceptions import (
    FragmentDataMissingError,
    TypeImmutableError,
    UnsupportedConversionError,
    ValidationError,
)
from fragments.fragment import Fragment
from fragments.ingestion import is_bytes_like, validate_content
from fragments.repositories.base import FragmentRepository
from fragments.utils import (
    has_extension,
    media_type_for_extension,
    normalize_extension,
    separate_id_extension,
)

logger = get_logger(__name__)


class FragmentService:
    def __init__(self, repository: FragmentRepository, max_fragment_size: Optional[int] = None):
        self.repository = repository
        self.max_fragment_size = max_fragment_size if max_fragment_size is not None else config.MAX_FRAGMENT_SIZE_BYTES

    def _check_size(self, data: object) -> None:
        if not is_bytes_like(data):
            return
        size = memoryview(data).nbytes
        if size > self.max_fragment_size:
            raise ValidationError(
                f"Fragment data is {size} bytes, larger than the {self.max_fragment_size} byte limit"
            )

    def create(self, owner_id: str, content_type: str, data: bytes) -> Fragment:
        """
        Create a fragment from a request body and its declared Content-Type.

        Raises:
            ValidationError: Malformed header, unsupported type, empty or oversized body
            IngestionMismatchError: If the body does not match the declared type
        """
        self._check_size(data)
        validate_content(data, content_type)
        payload = bytes(data)
        if not payload.strip():
            raise ValidationError("Fragment data is empty")

        fragment = Fragment(owner_id=owner_id, type=content_type, repository=self.repository)
        fragment.save()
        fragment.set_data(payload)

        logger.info(
            f"Fragment created [owner_id={owner_id}, fragment_id={fragment.id}, "
            f"type={fragment.type}, size={fragment.size}]"
        )
        return fragment

    def get_metadata(self, owner_id: str, fragment_id: str) -> Fragment:
        """
        Raises:
            NotFoundError: If the fragment does not exist
        """
        return Fragment.by_id(self.repository, owner_id, fragment_id)

    def read(self, owner_id: str, fragment_id: str, extension: Optional[str] = None) -> Tuple[bytes, str]:
        """
        Read a fragment's data, optionally converted to another representation.

        Args:
            owner_id: Owner identifier
            fragment_id: Fragment identifier (no extension)
            extension: Target representation such as "html"; None returns the stored bytes

        Returns:
            (data, mime type of data)

        Raises:
            NotFoundError: If the fragment does not exist
            FragmentDataMissingError: If metadata exists without data
            UnsupportedConversionError: If the fragment cannot be rendered as extension
            ConversionError: If a legal conversion fails on the stored bytes
        """
        if extension is not None:
            extension = normalize_extension(extension)

        fragment = Fragment.by_id(self.repository, owner_id, fragment_id)

        if extension is not None and not type_registry.is_conversion_possible(fragment.mime_type, extension):
            logger.info(
                f"Conversion rejected [fragment_id={fragment_id}, type={fragment.mime_type}, extension={extension}]"
            )
            raise UnsupportedConversionError(fragment.type, extension, fragment_id)

        data = fragment.get_data()
        if data is None:
            logger.error(f"Fragment metadata exists without data [owner_id={owner_id}, fragment_id={fragment_id}]")
            raise FragmentDataMissingError(owner_id, fragment_id)

        if extension is None:
            return data, fragment.type

        converted = converter.convert(data, fragment.mime_type, extension)
        return converted, media_type_for_extension(extension)

    def read_reference(self, owner_id: str, reference: str) -> Tuple[bytes, str]:
        """
        Read by a reference that may carry an extension, e.g. "<id>.html".

        A reference without an extension, or ending in a bare dot, is
        used as the fragment id unchanged.
        """
        if not has_extension(reference):
            return self.read(owner_id, reference)
        parts = separate_id_extension(reference)
        return self.read(owner_id, parts.id, parts.extension)

    def list_fragments(self, owner_id: str, expand: bool = False) -> Union[List[str], List[Fragment]]:
        return Fragment.by_user(self.repository, owner_id, expand)

    def update(self, owner_id: str, fragment_id: str, content_type: str, data: bytes) -> Fragment:
        """
        Replace a fragment's data. The declared type must equal the stored one.

        Raises:
            MalformedContentTypeError: If the header cannot be parsed
            NotFoundError: If the fragment does not exist
            TypeImmutableError: If the declared type differs from the fragment's type
            IngestionMismatchError: If the body does not match the declared type
            ValidationError: If the body is oversized or not bytes
        """
        declared = parse_content_type(content_type).type
        fragment = Fragment.by_id(self.repository, owner_id, fragment_id)

        if declared != fragment.mime_type:
            logger.warning(
                f"Type change rejected [fragment_id={fragment_id}, stored={fragment.mime_type}, declared={declared}]"
            )
            raise TypeImmutableError(fragment_id, fragment.mime_type, declared)

        self._check_size(data)
        validate_content(data, content_type)
        payload = bytes(data)

        fragment.set_data(payload)
        logger.info(f"Fragment updated [owner_id={owner_id}, fragment_id={fragment_id}, size={fragment.size}]")
        return fragment

    def delete(self, owner_id: str, fragment_id: str) -> None:
        """
        Raises:
            NotFoundError: If the fragment does not exist
        """
        Fragment.delete(self.repository, owner_id, fragment_id)
        logger.info(f"Fragment deleted [owner_id={owner_id}, fragment_id={fragment_id}]")
