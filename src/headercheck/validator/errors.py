from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from src.headercheck.validator.models import ErrorCode

if TYPE_CHECKING:
    from src.headercheck.validator.models import ValidationResult


# --- Messages -------------------------------------------------------------------

MSG_SUCCESS = "Validation succeeded."
MSG_SUCCESS_CSV = "Validation succeeded (CSV, UTF-8)."
MSG_SUCCESS_EXCEL = "Validation succeeded (Excel)."

ERR_EMPTY_FILE = "Empty file."
ERR_INVALID_EXTENSION = "File extension is not allowed. Allowed extensions: "
ERR_UNSUPPORTED_TYPE = "Unsupported file type. (detected MIME: {mime})"
ERR_FILE_PROCESS = "File processing error: "
ERR_CSV_ENCODING_UNKNOWN = "Cannot determine the CSV encoding."
ERR_CSV_ENCODING_INVALID = "CSV must be UTF-8. (detected: {detected})"
ERR_CSV_EMPTY = "CSV content is empty."
ERR_XLSX_INVALID = "XLSX format error: "
ERR_XLSX_NO_SHEET = "XLSX worksheet not found."
ERR_XLS_INVALID = "XLS format error: "
ERR_EXCEL_INVALID = "Excel format error: "

DETAIL_NO_FILENAME = "no filename was given."
DETAIL_FILE_TOO_SMALL = "file is too small."
DETAIL_INVALID_XLSX = "not a valid XLSX file."
DETAIL_INVALID_XLS = "not a valid XLS file."
DETAIL_INVALID_EXCEL = "not a valid Excel file."
DETAIL_FILE_READ = "file could not be read."


# --- Exceptions -----------------------------------------------------------------

class HeaderCheckError(Exception):
    """Raised by a validation step; converted into a failed result by the pipeline."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class HeaderReadError(OSError):
    """Raised when the leading bytes of a source cannot be read."""


class ContainerRefineError(Exception):
    """Raised when a container cannot be opened or holds no usable part."""


class CleanupError(RuntimeError):
    """Raised when a file could not be deleted after validation.

    The validation outcome computed before the failed delete is kept on
    ``result`` (``None`` when validation itself raised).
    """

    def __init__(self, path: str, cause: BaseException, result: Optional["ValidationResult"] = None) -> None:
        super().__init__(f"Failed to delete file after validation: {path} ({cause})")
        self.path = path
        self.result = result
