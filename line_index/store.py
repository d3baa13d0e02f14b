# store.py

import os
import struct
import logging
from array import array

from line_index import builder
from line_index.config import INDEX_SUFFIX, OFFSET_WIDTH
from line_index.errors import IndexBuildError

server_logger = logging.getLogger('server')

_struct_q = struct.Struct("<Q")


class MemoryOffsets:
    """Offsets held in process memory."""

    mode = builder.MEMORY

    def __init__(self, offsets=None):
        self._offsets = offsets if offsets is not None else array("Q")

    @property
    def line_count(self):
        return len(self._offsets)

    def offset_at(self, i):
        if 0 <= i < len(self._offsets):
            return self._offsets[i]
        return None


class DiskOffsets:
    """
    Offsets in a flat file of little-endian uint64 values.
    The file is reopened for every lookup so concurrent callers share no cursor.
    """

    mode = builder.DISK

    def __init__(self, index_path, line_count):
        self.index_path = index_path
        self._line_count = line_count

    @property
    def line_count(self):
        return self._line_count

    def offset_at(self, i):
        if not 0 <= i < self._line_count:
            return None
        with open(self.index_path, "rb") as f:
            f.seek(i * OFFSET_WIDTH)
            data = f.read(OFFSET_WIDTH)
        if len(data) != OFFSET_WIDTH:
            raise OSError(f"Short read at entry {i} of index '{self.index_path}'")
        return _struct_q.unpack(data)[0]


def index_path_for(source_path):
    return source_path + INDEX_SUFFIX


def index_is_fresh(source_path, index_path, source_size=None):
    """
    A persisted index is reusable when it is strictly newer than the source
    and its length is a whole number of offsets matching an empty/non-empty source.
    """
    try:
        index_stat = os.stat(index_path)
        source_stat = os.stat(source_path)
    except FileNotFoundError:
        return False

    if index_stat.st_mtime_ns <= source_stat.st_mtime_ns:
        return False
    if index_stat.st_size % OFFSET_WIDTH:
        server_logger.warning(f"Index '{index_path}' is not a multiple of {OFFSET_WIDTH} bytes, ignoring it.")
        return False

    if source_size is None:
        source_size = source_stat.st_size
    if (index_stat.st_size == 0) != (source_size == 0):
        return False
    return True


def load_or_build(source_path, index_path, file_size, config):
    """Reuse a fresh persisted index, otherwise build one. Returns MemoryOffsets or DiskOffsets."""
    try:
        fresh = index_is_fresh(source_path, index_path, file_size)
        if fresh:
            line_count = os.path.getsize(index_path) // OFFSET_WIDTH
    except OSError as e:
        raise IndexBuildError(f"Failed to load index '{index_path}': {e}") from e

    if fresh:
        server_logger.info(f"Using existing index with {line_count} lines.")
        return DiskOffsets(index_path, line_count)

    if os.path.exists(index_path):
        server_logger.info(f"Index outdated. Rebuilding index for '{os.path.basename(source_path)}'...")
    else:
        server_logger.info(f"Index not found. Building index for '{os.path.basename(source_path)}'...")

    mode, result = builder.build_index(source_path, index_path, file_size, config)
    if mode == builder.DISK:
        return DiskOffsets(index_path, result)
    return MemoryOffsets(result)
