# estimator.py

from line_index.config import SAMPLE_SIZE


def estimate_line_count(path, file_size, sample_size=SAMPLE_SIZE):
    """
    Estimate the number of lines from a prefix sample.
    Never returns 0 for a non-empty file; I/O errors propagate.
    """
    if file_size <= 0:
        return 0

    with open(path, "rb") as f:
        sample = f.read(min(sample_size, file_size))

    newlines = sample.count(b"\n")
    if not sample or newlines == 0:
        return 1

    avg_line_length = len(sample) / newlines
    estimate = int(file_size // avg_line_length)
    # at least one content byte plus the terminator per line
    estimate = min(estimate, file_size // 2)
    return max(estimate, 1)
