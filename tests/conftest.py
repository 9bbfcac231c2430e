"""
Pytest configuration shared by the wav_cat tests.

The byte-string builders live in riff_builders.py; the fixtures here only
cover writing those bytes to disk for the file-based entry points.
"""

import pytest


@pytest.fixture
def write_wav(tmp_path):
    """Write bytes to tmp_path/<name> and return the path as a string."""

    def _write(name, data):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)

    return _write
