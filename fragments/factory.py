"""Builds the configured repository and service at process start."""

from typing import Optional

from common.logging_config import get_logger, setup_logging
from fragments import config
from fragments.repositories import MemoryFragmentRepository, SqliteFragmentRepository
from fragments.repositories.base import FragmentRepository
from fragments.services.fragment_service import FragmentService

logger = get_logger(__name__)


def create_repository(
    backend: Optional[str] = None,
    db_path: Optional[str] = None,
    data_dir: Optional[str] = None,
) -> FragmentRepository:
    """
    Create the storage backend named by `backend` or FRAGMENTS_STORAGE_BACKEND.

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = (backend or config.STORAGE_BACKEND).strip().lower()

    if backend == "memory":
        logger.info("Using in-memory fragment repository")
        return MemoryFragmentRepository()
    if backend == "sqlite":
        db_path = db_path or config.DATABASE_PATH
        data_dir = data_dir or config.DATA_DIR
        logger.info(f"Using SQLite fragment repository [db_path={db_path}, data_dir={data_dir}]")
        return SqliteFragmentRepository(db_path, data_dir)

    raise ValueError(f"Unknown fragment storage backend: {backend!r}")


def create_fragment_service(
    repository: Optional[FragmentRepository] = None,
    log_level: Optional[str] = None,
) -> FragmentService:
    """
    Configure logging and wire a FragmentService to a repository.
    """
    setup_logging(config.LOGGER_NAME, log_level)
    if repository is None:
        repository = create_repository()
    return FragmentService(repository, max_fragment_size=config.MAX_FRAGMENT_SIZE_BYTES)
