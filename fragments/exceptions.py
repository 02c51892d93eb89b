"""Custom exception classes for the fragments core."""

from typing import Optional


class FragmentsException(Exception):
    """
    Base exception class for all fragment-related errors.
    """
    code = "FRAGMENTS_ERROR"


class ValidationError(FragmentsException):
    """
    Raised when construction input or a request body is malformed.
    """
    code = "VALIDATION_ERROR"


class MalformedContentTypeError(ValidationError):
    """
    Raised when a Content-Type value cannot be parsed.
    """

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid Content-Type value: {value!r}")


class UnsupportedTypeError(ValidationError):
    """
    Raised when a declared Content-Type is not one we know how to store.
    """

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"The '{content_type}' MIME type is not supported")


class IngestionMismatchError(FragmentsException):
    """
    Raised when the body does not match its declared Content-Type.
    """
    code = "INGESTION_MISMATCH"

    def __init__(self, declared_type: str, reason: str):
        self.declared_type = declared_type
        self.reason = reason
        super().__init__(f"Body does not match declared type {declared_type}: {reason}")


class NotFoundError(FragmentsException):
    """
    Raised when no metadata record exists for an (owner_id, fragment_id) pair.
    """
    code = "NOT_FOUND"

    def __init__(self, owner_id: str, fragment_id: str):
        self.owner_id = owner_id
        self.fragment_id = fragment_id
        super().__init__(f"Fragment with ID '{fragment_id}' does not exist")


class UnsupportedConversionError(FragmentsException):
    """
    Raised when a fragment cannot be rendered as the requested extension.
    """
    code = "UNSUPPORTED_CONVERSION"

    def __init__(self, source_type: str, extension: str, fragment_id: Optional[str] = None):
        self.source_type = source_type
        self.extension = extension
        self.fragment_id = fragment_id
        super().__init__(
            f"The requested conversion from '{source_type}' to extension '.{extension}' is not possible"
        )


class ConversionError(FragmentsException):
    """
    Raised when a legal conversion fails on the stored bytes.
    """
    code = "CONVERSION_FAILED"

    def __init__(self, source_type: str, extension: str, reason: str):
        self.source_type = source_type
        self.extension = extension
        self.reason = reason
        super().__init__(f"Failed to convert '{source_type}' to '.{extension}': {reason}")


class TypeImmutableError(FragmentsException):
    """
    Raised when an update declares a different type than the stored fragment.
    """
    code = "TYPE_IMMUTABLE"

    def __init__(self, fragment_id: str, stored_type: str, declared_type: str):
        self.fragment_id = fragment_id
        self.stored_type = stored_type
        self.declared_type = declared_type
        super().__init__(
            f"Supplied content type is {declared_type} but fragment {fragment_id} is {stored_type}; "
            f"a fragment's type cannot be changed after it is created"
        )


class FragmentDataMissingError(FragmentsException):
    """
    Raised when metadata exists but the raw data blob does not.
    """
    code = "DATA_MISSING"

    def __init__(self, owner_id: str, fragment_id: str):
        self.owner_id = owner_id
        self.fragment_id = fragment_id
        super().__init__(f"Fragment {fragment_id} has metadata but no data")


class RepositoryNotBoundError(FragmentsException):
    """
    Raised when persisting a fragment that has no repository attached.
    """
    code = "NOT_BOUND"
