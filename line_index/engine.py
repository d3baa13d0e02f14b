# engine.py

import os
import logging

from line_index.builder import DISK
from line_index.config import IndexConfig
from line_index.errors import SourceFileError
from line_index.reader import select_reader
from line_index.store import index_path_for, load_or_build
from line_index.utils import format_bytes

server_logger = logging.getLogger('server')


class LineIndex:
    """
    Byte-offset index over an immutable text file, giving O(1) access to any
    line by its 1-based number.

    Everything is built in __init__ and never mutated afterwards, so get_line
    may be called from any number of threads at once.
    """

    def __init__(self, file_path, config=None):
        self.config = config or IndexConfig()
        self.file_path = os.path.abspath(file_path)
        self.index_path = index_path_for(self.file_path)

        if not os.path.exists(self.file_path):
            raise SourceFileError(f"File does not exist: {self.file_path}")
        if not os.path.isfile(self.file_path):
            raise SourceFileError(f"Not a regular file: {self.file_path}")
        if not os.access(self.file_path, os.R_OK):
            raise SourceFileError(f"File is not readable: {self.file_path}")

        self.file_size = os.path.getsize(self.file_path)
        self._offsets = load_or_build(self.file_path, self.index_path, self.file_size, self.config)
        self._reader = select_reader(self.file_path, self.file_size, self.mode == DISK)

        server_logger.info(
            f"Indexed {self.line_count} lines in {self.file_path} ({format_bytes(self.file_size)}), "
            f"{self.mode} index, {self._reader.name} reads."
        )

    @property
    def line_count(self):
        return self._offsets.line_count

    @property
    def mode(self):
        return self._offsets.mode

    def offset_at(self, line_index):
        """Start offset of the 0-based line, or None outside [0, line_count)."""
        return self._offsets.offset_at(line_index)

    def get_line(self, line_number):
        """
        Return the bytes of the 1-based line without its terminator, or None
        when the line does not exist or cannot be read.
        """
        if not isinstance(line_number, int) or isinstance(line_number, bool):
            return None
        if line_number < 1 or line_number > self.line_count:
            return None

        try:
            start = self.offset_at(line_number - 1)
            end = self.offset_at(line_number)
            is_last = end is None
            if is_last:
                end = self.file_size

            length = end - start
            if not is_last:
                length -= 1  # newline terminator
            if length <= 0:
                return b""

            data = self._reader.read(self.file_path, start, length)
            if len(data) != length:
                server_logger.warning(
                    f"Short read for line {line_number}: expected {length} bytes, got {len(data)}"
                )
                return None
        except (OSError, ValueError) as e:
            server_logger.warning(f"Error reading line {line_number}: {e}")
            return None

        if data.endswith(b"\n"):
            data = data[:-1]
        return data

    def describe(self):
        return {
            "file": self.file_path,
            "lines": self.line_count,
            "size": self.file_size,
            "mode": self.mode,
            "reader": self._reader.name,
        }

    def __repr__(self):
        return f"LineIndex({self.file_path!r}, lines={self.line_count}, mode={self.mode!r})"
