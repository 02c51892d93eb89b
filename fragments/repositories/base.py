"""Storage contract shared by every fragment repository."""

from typing import List, Optional, Protocol

from fragments.schemas.fragments import FragmentRecord


class FragmentRepository(Protocol):
    """
    Key-value persistence partitioned by owner, then fragment id.

    Two co-addressed namespaces: structured metadata records and opaque
    data blobs. Absent keys read as None rather than raising.
    """

    def write_metadata(self, owner_id: str, fragment_id: str, record: FragmentRecord) -> None:
        ...

    def read_metadata(self, owner_id: str, fragment_id: str) -> Optional[FragmentRecord]:
        ...

    def write_data(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        ...

    def read_data(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        ...

    def list_ids(self, owner_id: str) -> List[str]:
        """Every fragment id for the owner, each exactly once."""
        ...

    def list_metadata(self, owner_id: str) -> List[FragmentRecord]:
        """The same fragments as list_ids, fully hydrated."""
        ...

    def delete(self, owner_id: str, fragment_id: str) -> None:
        """
        Remove both metadata and data.

        Raises:
            NotFoundError: If neither metadata nor data existed
        """
        ...
