"""Shared pytest fixtures for all tests."""

import io

import pytest
from PIL import Image

from fragments.repositories import MemoryFragmentRepository, SqliteFragmentRepository
from fragments.services import FragmentService


def make_image_bytes(image_format: str = "PNG", mode: str = "RGB", size=(4, 4), color=(200, 30, 30)) -> bytes:
    """
    Render a small solid image in the given Pillow format.

    Args:
        image_format: Pillow format name (PNG, JPEG, WEBP, GIF)
        mode: Pillow pixel mode
        size: Image dimensions
        color: Fill color

    Returns:
        Encoded image bytes
    """
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def owner_id():
    return "11d4c22e42c8f61feaba154683dea407b101cfd90987dda9e342843263ca420a"


@pytest.fixture
def memory_repository():
    """
    Create a fresh in-memory repository.
    """
    return MemoryFragmentRepository()


@pytest.fixture
def sqlite_repository(tmp_path):
    """
    Create a SQLite repository backed by a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture
    """
    return SqliteFragmentRepository(str(tmp_path / "fragments.db"), str(tmp_path / "blobs"))


@pytest.fixture(params=["memory", "sqlite"])
def repository(request, tmp_path):
    """
    Run a test once against each repository implementation.
    """
    if request.param == "memory":
        return MemoryFragmentRepository()
    return SqliteFragmentRepository(str(tmp_path / "fragments.db"), str(tmp_path / "blobs"))


@pytest.fixture
def service(repository):
    return FragmentService(repository, max_fragment_size=5 * 1024 * 1024)


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def sample_images():
    """
    One valid image per supported MIME type.
    """
    return {
        "image/png": make_image_bytes("PNG"),
        "image/jpeg": make_image_bytes("JPEG"),
        "image/webp": make_image_bytes("WEBP"),
        "image/gif": make_image_bytes("GIF"),
    }


@pytest.fixture
def make_image():
    """
    Expose make_image_bytes to tests that need custom formats or modes.
    """
    return make_image_bytes
