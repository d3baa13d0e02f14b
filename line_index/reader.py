# reader.py

import mmap
import logging

from line_index.config import MMAP_MIN_FILE_SIZE

server_logger = logging.getLogger('server')


class SeekReader:
    """Plain seek + read on a handle opened for this call only."""

    name = "seek"

    def read(self, path, start, length):
        with open(path, "rb") as f:
            f.seek(start)
            return f.read(length)


class MmapReader:
    """Read-only memory map of the source, mapped and released per call."""

    name = "mmap"

    def read(self, path, start, length):
        with open(path, "rb") as f:
            with mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ) as mm:
                return mm[start:start + length]


def mmap_supported(path):
    """Probe once whether the source file can be memory-mapped read-only."""
    try:
        with open(path, "rb") as f:
            with mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ):
                return True
    except (OSError, ValueError) as e:
        server_logger.info(f"Memory mapping unavailable for '{path}' ({e}); using seek/read.")
        return False


def select_reader(path, file_size, disk_mode):
    """mmap only pays off for large disk-mode files; everything else uses seek/read."""
    if disk_mode and file_size > MMAP_MIN_FILE_SIZE and mmap_supported(path):
        return MmapReader()
    return SeekReader()
