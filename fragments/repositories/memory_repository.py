"""In-memory fragment repository (process lifetime, cleared on restart)."""

import threading
from typing import Dict, List, Optional

from common.logging_config import get_logger
from fragments.exceptions import NotFoundError
from fragments.schemas.fragments import FragmentRecord

logger = get_logger(__name__)


class MemoryFragmentRepository:
    def __init__(self):
        self._metadata: Dict[str, Dict[str, FragmentRecord]] = {}
        self._data: Dict[str, Dict[str, bytes]] = {}
        self._lock = threading.Lock()

    def write_metadata(self, owner_id: str, fragment_id: str, record: FragmentRecord) -> None:
        with self._lock:
            self._metadata.setdefault(owner_id, {})[fragment_id] = record.model_copy()

    def read_metadata(self, owner_id: str, fragment_id: str) -> Optional[FragmentRecord]:
        with self._lock:
            record = self._metadata.get(owner_id, {}).get(fragment_id)
        return record.model_copy() if record is not None else None

    def write_data(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        with self._lock:
            self._data.setdefault(owner_id, {})[fragment_id] = bytes(data)

    def read_data(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(owner_id, {}).get(fragment_id)

    def list_ids(self, owner_id: str) -> List[str]:
        with self._lock:
            return list(self._metadata.get(owner_id, {}).keys())

    def list_metadata(self, owner_id: str) -> List[FragmentRecord]:
        with self._lock:
            return [record.model_copy() for record in self._metadata.get(owner_id, {}).values()]

    def delete(self, owner_id: str, fragment_id: str) -> None:
        with self._lock:
            record = self._metadata.get(owner_id, {}).pop(fragment_id, None)
            data = self._data.get(owner_id, {}).pop(fragment_id, None)

            for namespace in (self._metadata, self._data):
                if owner_id in namespace and not namespace[owner_id]:
                    del namespace[owner_id]

        if record is None and data is None:
            raise NotFoundError(owner_id, fragment_id)
        logger.debug(f"Fragment removed from memory [fragment_id={fragment_id}]")

    def clear(self) -> None:
        """Drop every stored fragment for every owner."""
        with self._lock:
            self._metadata.clear()
            self._data.clear()
