"""Configuration settings for the fragments core."""

import os
from common.constants import DEFAULT_MAX_FRAGMENT_SIZE_BYTES


STORAGE_BACKEND = os.environ.get("FRAGMENTS_STORAGE_BACKEND", "memory")

DATABASE_PATH = os.environ.get("FRAGMENTS_DATABASE_PATH", "./data/fragments.db")

DATA_DIR = os.environ.get("FRAGMENTS_DATA_DIR", "./data/blobs")

MAX_FRAGMENT_SIZE_BYTES = int(os.environ.get("FRAGMENTS_MAX_SIZE_BYTES", str(DEFAULT_MAX_FRAGMENT_SIZE_BYTES)))

LOGGER_NAME = "fragments"
