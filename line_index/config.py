# config.py

import os

from line_index.errors import ConfigError

MIB = 1024 ** 2
GIB = 1024 ** 3

DEFAULT_MEMORY_THRESHOLD = 512 * MIB
# above this size the estimator is skipped and the index always goes to disk
VERY_LARGE_FILE = 10 * GIB
# the mmap read path only pays off for big disk-mode files
MMAP_MIN_FILE_SIZE = 100 * MIB

SAMPLE_SIZE = 1 * MIB
MEMORY_CHUNK_SIZE = 1 * MIB
DISK_CHUNK_SIZE = 4 * MIB

INDEX_SUFFIX = ".index"
OFFSET_WIDTH = 8

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class IndexConfig:
    """Options recognized by LineIndex."""

    def __init__(self, memory_threshold_bytes=DEFAULT_MEMORY_THRESHOLD, force_disk_index=False):
        if memory_threshold_bytes <= 0:
            raise ConfigError(f"memory_threshold_bytes must be positive, got {memory_threshold_bytes}")
        self.memory_threshold_bytes = memory_threshold_bytes
        self.force_disk_index = bool(force_disk_index)

    @classmethod
    def from_env(cls, environ=None):
        """Read MEMORY_THRESHOLD_BYTES and FORCE_DISK_INDEX."""
        environ = os.environ if environ is None else environ

        raw_threshold = environ.get("MEMORY_THRESHOLD_BYTES")
        threshold = DEFAULT_MEMORY_THRESHOLD
        if raw_threshold:
            try:
                threshold = int(raw_threshold)
            except ValueError:
                raise ConfigError(f"MEMORY_THRESHOLD_BYTES must be an integer, got '{raw_threshold}'") from None

        raw_force = environ.get("FORCE_DISK_INDEX", "").strip().lower()
        if raw_force in _TRUE:
            force = True
        elif raw_force in _FALSE:
            force = False
        else:
            raise ConfigError(f"FORCE_DISK_INDEX must be a boolean, got '{raw_force}'")

        return cls(memory_threshold_bytes=threshold, force_disk_index=force)

    def __repr__(self):
        return (f"IndexConfig(memory_threshold_bytes={self.memory_threshold_bytes}, "
                f"force_disk_index={self.force_disk_index})")
