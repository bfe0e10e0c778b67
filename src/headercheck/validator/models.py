from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class FileCategory(str, Enum):
    CSV = "CSV"
    EXCEL = "EXCEL"
    DOCUMENT = "DOCUMENT"
    PRESENTATION = "PRESENTATION"
    PDF = "PDF"
    IMAGE = "IMAGE"
    TEXT = "TEXT"
    ARCHIVE = "ARCHIVE"
    XML = "XML"
    OTHER = "OTHER"


class ErrorCode(str, Enum):
    EMPTY_FILE = "EMPTY_FILE"
    NO_FILENAME = "NO_FILENAME"
    INVALID_EXTENSION = "INVALID_EXTENSION"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    FILE_PROCESS_ERROR = "FILE_PROCESS_ERROR"

    # CSV encoding
    CSV_ENCODING_UNKNOWN = "CSV_ENCODING_UNKNOWN"
    CSV_ENCODING_INVALID = "CSV_ENCODING_INVALID"
    CSV_EMPTY = "CSV_EMPTY"

    # Excel containers
    XLSX_INVALID = "XLSX_INVALID"
    XLSX_NO_SHEET = "XLSX_NO_SHEET"
    XLS_INVALID = "XLS_INVALID"
    EXCEL_INVALID = "EXCEL_INVALID"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single header validation.

    A successful result always carries ``detected_type`` and ``category``;
    a failed one carries only ``message`` and ``code``.
    """
    ok: bool
    message: str
    detected_type: Optional[str] = None
    category: Optional[FileCategory] = None
    encoding: Optional[str] = None
    code: Optional[ErrorCode] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "message": self.message,
            "detected_type": self.detected_type,
            "category": self.category.value if self.category else None,
            "encoding": self.encoding,
            "code": self.code.value if self.code else None,
        }


def ok(message: str, detected_type: str, category: FileCategory, encoding: Optional[str] = None) -> ValidationResult:
    return ValidationResult(ok=True, message=message, detected_type=detected_type, category=category, encoding=encoding)


def fail(code: ErrorCode, message: str) -> ValidationResult:
    return ValidationResult(ok=False, message=message, code=code)
