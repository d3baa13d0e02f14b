# builder.py

import os
import sys
import time
import logging
from array import array

from line_index.config import (DISK_CHUNK_SIZE, MEMORY_CHUNK_SIZE, OFFSET_WIDTH,
                               VERY_LARGE_FILE, GIB)
from line_index.errors import IndexBuildError
from line_index.estimator import estimate_line_count
from line_index.utils import format_bytes

MEMORY = "memory"
DISK = "disk"

PROGRESS_EVERY = 1 * GIB

server_logger = logging.getLogger('server')


def choose_mode(path, file_size, config):
    """Decide where the offsets will live, before any scanning happens."""
    if config.force_disk_index:
        server_logger.info("Disk index forced by configuration.")
        return DISK

    if file_size > VERY_LARGE_FILE:
        server_logger.info(f"Very large file ({format_bytes(file_size)}). Skipping estimation, using disk index.")
        return DISK

    estimated_lines = estimate_line_count(path, file_size)
    projected = estimated_lines * OFFSET_WIDTH
    server_logger.info(
        f"Estimated {estimated_lines} lines, projected index size {format_bytes(projected)} "
        f"(threshold {format_bytes(config.memory_threshold_bytes)})."
    )
    if projected > config.memory_threshold_bytes:
        return DISK
    return MEMORY


def iter_offset_batches(path, file_size, chunk_size):
    """
    Single pass over the file yielding arrays of line-start offsets, one per chunk.
    A newline that is the last byte of the file does not start a new line.
    """
    if file_size <= 0:
        return

    yield array("Q", [0])

    position = 0
    next_report = PROGRESS_EVERY
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break

            batch = array("Q")
            idx = chunk.find(b"\n")
            while idx != -1:
                line_start = position + idx + 1
                if line_start < file_size:
                    batch.append(line_start)
                idx = chunk.find(b"\n", idx + 1)
            if batch:
                yield batch

            position += len(chunk)
            if position >= next_report:
                pct = 100.0 * position / file_size
                server_logger.info(f"Processed {format_bytes(position)} of {format_bytes(file_size)} ({pct:.1f}%)")
                next_report += PROGRESS_EVERY


def build_memory_index(path, file_size, chunk_size=MEMORY_CHUNK_SIZE):
    """Scan the file and keep every offset in an array of unsigned 64-bit ints."""
    offsets = array("Q")
    try:
        for batch in iter_offset_batches(path, file_size, chunk_size):
            offsets.extend(batch)
    except OSError as e:
        raise IndexBuildError(f"Failed to index '{path}': {e}") from e
    return offsets


def build_disk_index(path, index_path, file_size, chunk_size=DISK_CHUNK_SIZE):
    """
    Scan the file writing each offset as 8 little-endian bytes to the sidecar.
    Uses a temporary file and os.replace for atomic swap. Returns the line count.
    """
    if file_size <= 0:
        return 0

    count = 0
    tmp_index_path = index_path + ".tmp"
    server_logger.info(f"Building index into temporary file: {tmp_index_path}")
    try:
        with open(tmp_index_path, "wb") as f_index:
            for batch in iter_offset_batches(path, file_size, chunk_size):
                if sys.byteorder == "big":
                    batch.byteswap()
                f_index.write(batch)
                count += len(batch)
        os.replace(tmp_index_path, index_path)
        persisted = os.path.getsize(index_path) // OFFSET_WIDTH
    except OSError as e:
        _discard(tmp_index_path)
        raise IndexBuildError(f"Failed to write index '{index_path}': {e}") from e

    if persisted != count:
        raise IndexBuildError(f"Index '{index_path}' holds {persisted} offsets, scanned {count}")
    return count


def build_index(path, index_path, file_size, config):
    """Pick a mode and run the matching builder. Returns (mode, offsets or line count)."""
    start_time = time.monotonic()
    try:
        mode = choose_mode(path, file_size, config)
    except OSError as e:
        raise IndexBuildError(f"Failed to sample '{path}': {e}") from e
    server_logger.info(f"Using {mode}-based indexing for '{os.path.basename(path)}' ({format_bytes(file_size)}).")

    if mode == DISK:
        result = build_disk_index(path, index_path, file_size)
        line_count = result
    else:
        result = build_memory_index(path, file_size)
        line_count = len(result)

    elapsed = time.monotonic() - start_time
    server_logger.info(f"Finished building index: {line_count} lines in {elapsed:.2f}s")
    return mode, result


def _discard(path):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        server_logger.warning(f"Could not remove temporary index '{path}': {e}")
