"""Project-wide constants (media types, extensions, size limits)."""

from typing import Dict

EXTENSION_MEDIA_TYPES: Dict[str, str] = {
    "txt": "text/plain",
    "md": "text/markdown",
    "html": "text/html",
    "json": "application/json",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "gif": "image/gif",
}

TEXT_MEDIA_TYPES = frozenset({"text/plain", "text/markdown", "text/html"})

# Pillow format name per raster extension
IMAGE_FORMATS: Dict[str, str] = {
    "png": "PNG",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "webp": "WEBP",
    "gif": "GIF",
}

DEFAULT_MAX_FRAGMENT_SIZE_BYTES: int = 5 * 1024 * 1024  # 5 MiB request body limit
