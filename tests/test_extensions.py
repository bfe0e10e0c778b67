import pytest

from src.headercheck.validator.errors import HeaderCheckError
from src.headercheck.validator.extensions import (
    ALLOWED_EXTENSIONS,
    check_extension,
    extract_extension,
    is_allowed_extension,
)
from src.headercheck.validator.models import ErrorCode


@pytest.mark.parametrize("ext", sorted(ALLOWED_EXTENSIONS))
def test_allowed_extensions_pass(ext):
    assert check_extension(f"upload{ext}") == ext


def test_extension_match_is_case_insensitive():
    assert check_extension("REPORT.PDF") == ".pdf"
    assert check_extension("Sheet.XlSx") == ".xlsx"


@pytest.mark.parametrize("name", ["archive.tar.gz", "script.exe", "noext", "trailing.", "image.gif"])
def test_rejected_extensions(name):
    with pytest.raises(HeaderCheckError) as exc:
        check_extension(name)
    assert exc.value.code == ErrorCode.INVALID_EXTENSION
    assert ".csv" in exc.value.message


def test_missing_filename():
    with pytest.raises(HeaderCheckError) as exc:
        check_extension(None)
    assert exc.value.code == ErrorCode.NO_FILENAME


def test_extension_taken_after_last_dot_of_basename():
    assert extract_extension("C:\\uploads.v2\\data.final.csv") == ".csv"
    assert extract_extension("dir.v1/readme") == ""
    assert extract_extension(None) == ""


def test_lone_dot_is_not_an_extension():
    assert not is_allowed_extension(".")
    assert not is_allowed_extension("")
