"""Durable fragment repository: SQLite metadata plus on-disk data blobs."""

from typing import List, Optional

from common.logging_config import get_logger
from fragments.blob_storage import BlobStorage
from fragments.database import get_db_connection, init_database
from fragments.exceptions import NotFoundError
from fragments.schemas.fragments import FragmentRecord

logger = get_logger(__name__)


class SqliteFragmentRepository:
    def __init__(self, db_path: str, data_dir: str):
        self._db_path = db_path
        self._blobs = BlobStorage(data_dir)
        init_database(db_path)

    def write_metadata(self, owner_id: str, fragment_id: str, record: FragmentRecord) -> None:
        with get_db_connection(self._db_path) as conn:
            try:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO fragments (owner_id, fragment_id, record)
                    VALUES (?, ?, ?)
                    ON CONFLICT(owner_id, fragment_id) DO UPDATE SET record = excluded.record
                    """,
                    (owner_id, fragment_id, record.model_dump_json(by_alias=True))
                )
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Failed to write metadata [fragment_id={fragment_id}]: {e}", exc_info=True)
                raise

    def read_metadata(self, owner_id: str, fragment_id: str) -> Optional[FragmentRecord]:
        with get_db_connection(self._db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT record FROM fragments WHERE owner_id = ? AND fragment_id = ?",
                (owner_id, fragment_id)
            )
            row = cursor.fetchone()

            if row is None:
                return None

            return FragmentRecord.model_validate_json(row["record"])

    def write_data(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        try:
            self._blobs.write_blob(owner_id, fragment_id, bytes(data))
        except OSError as e:
            logger.error(f"Failed to write data [fragment_id={fragment_id}]: {e}", exc_info=True)
            raise

    def read_data(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        return self._blobs.read_blob(owner_id, fragment_id)

    def list_ids(self, owner_id: str) -> List[str]:
        with get_db_connection(self._db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT fragment_id FROM fragments WHERE owner_id = ? ORDER BY rowid",
                (owner_id,)
            )
            return [row["fragment_id"] for row in cursor.fetchall()]

    def list_metadata(self, owner_id: str) -> List[FragmentRecord]:
        with get_db_connection(self._db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT record FROM fragments WHERE owner_id = ? ORDER BY rowid",
                (owner_id,)
            )
            return [FragmentRecord.model_validate_json(row["record"]) for row in cursor.fetchall()]

    def delete(self, owner_id: str, fragment_id: str) -> None:
        with get_db_connection(self._db_path) as conn:
            try:
                cursor = conn.cursor()
                cursor.execute(
                    "DELETE FROM fragments WHERE owner_id = ? AND fragment_id = ?",
                    (owner_id, fragment_id)
                )
                metadata_deleted = cursor.rowcount > 0
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Failed to delete fragment [fragment_id={fragment_id}]: {e}", exc_info=True)
                raise

        data_deleted = self._blobs.delete_blob(owner_id, fragment_id)
        if not metadata_deleted and not data_deleted:
            raise NotFoundError(owner_id, fragment_id)
        logger.debug(f"Fragment removed from disk [fragment_id={fragment_id}]")
