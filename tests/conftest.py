import os

import pytest

SAMPLE = b"Line 1\nLine 2\nLine 3\nLine 4 with more content\n\nLine 6 after empty line\n"


@pytest.fixture
def write_file(tmp_path):
    def _write(content, name="data.txt"):
        path = tmp_path / name
        path.write_bytes(content)
        return str(path)
    return _write


@pytest.fixture
def sample_file(write_file):
    return write_file(SAMPLE)


@pytest.fixture
def set_mtime():
    def _set(path, seconds):
        ns = seconds * 1_000_000_000
        os.utime(path, ns=(ns, ns))
    return _set
