import pytest


@pytest.fixture
def write_file(tmp_path):
    def _write(name: str, data: bytes):
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return _write
