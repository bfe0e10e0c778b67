from __future__ import annotations

from typing import FrozenSet, Optional

from src.headercheck.validator.errors import (
    DETAIL_NO_FILENAME,
    ERR_FILE_PROCESS,
    ERR_INVALID_EXTENSION,
    HeaderCheckError,
)
from src.headercheck.validator.models import ErrorCode

ALLOWED_EXTENSIONS: FrozenSet[str] = frozenset({
    ".ppt", ".pptx", ".pdf", ".doc", ".docx",
    ".xls", ".xlsx", ".png", ".jpg", ".jpeg",
    ".txt", ".zip", ".csv", ".xml",
})

EXT_XLSX = ".xlsx"
EXT_XLS = ".xls"
EXT_CSV = ".csv"


def extract_extension(original_name: Optional[str]) -> str:
    """Return the lowercased suffix from the last '.' (dot included), or ''."""
    if not original_name:
        return ""
    # Browsers on Windows may send the full client path.
    base = original_name.replace("\\", "/").rsplit("/", 1)[-1]
    index = base.rfind(".")
    return base[index:].lower() if index >= 0 else ""


def is_allowed_extension(extension: str) -> bool:
    if not extension or extension == ".":
        return False
    return extension.lower() in ALLOWED_EXTENSIONS


def allowed_extensions_text() -> str:
    return ", ".join(sorted(ALLOWED_EXTENSIONS))


def check_extension(original_name: Optional[str]) -> str:
    """Validate the filename against the allow-list and return its extension."""
    if original_name is None:
        raise HeaderCheckError(ErrorCode.NO_FILENAME, ERR_FILE_PROCESS + DETAIL_NO_FILENAME)
    extension = extract_extension(original_name)
    if not is_allowed_extension(extension):
        raise HeaderCheckError(ErrorCode.INVALID_EXTENSION, ERR_INVALID_EXTENSION + allowed_extensions_text())
    return extension
