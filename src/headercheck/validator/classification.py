from __future__ import annotations

from typing import Optional

from src.headercheck.validator.charset_probe import strip_bom
from src.headercheck.validator.container import latin1
from src.headercheck.validator.header import CSV_SNIFF_BYTES
from src.headercheck.validator.models import FileCategory

_DELIMITERS = (",", ";", "\t")
_LINE_BREAKS = ("\n", "\r")


def looks_like_csv(header: bytes) -> bool:
    """Delimiter + line-break heuristic over the first CSV_SNIFF_BYTES of the header."""
    sample = latin1(strip_bom(header[:CSV_SNIFF_BYTES]))
    has_delimiter = any(d in sample for d in _DELIMITERS)
    has_line_break = any(n in sample for n in _LINE_BREAKS)
    return has_delimiter and has_line_break


def _is_textual(mime_lower: str) -> bool:
    base = mime_lower.split(";", 1)[0].strip()
    return base.startswith("text/") or base.endswith("xml")


def determine_category(mime: Optional[str], extension: str, header: bytes = b"") -> Optional[FileCategory]:
    """Map a detected type plus the declared extension to one category.

    Rules are ordered and the first match wins. Returns None when no type was
    detected at all.
    """
    if mime is None:
        return None

    mime_lower = mime.lower()
    ext = (extension or "").lower()

    # Excel
    if "spreadsheet" in mime_lower or "ms-excel" in mime_lower or ext in (".xls", ".xlsx"):
        return FileCategory.EXCEL

    # CSV; the content heuristic only runs for textual detections
    if "csv" in mime_lower or ext == ".csv":
        return FileCategory.CSV
    if _is_textual(mime_lower) and looks_like_csv(header):
        return FileCategory.CSV

    # Word documents
    if "wordprocessingml" in mime_lower or "msword" in mime_lower or ext in (".doc", ".docx"):
        return FileCategory.DOCUMENT

    # PowerPoint
    if "presentationml" in mime_lower or "ms-powerpoint" in mime_lower or ext in (".ppt", ".pptx"):
        return FileCategory.PRESENTATION

    if "pdf" in mime_lower or ext == ".pdf":
        return FileCategory.PDF

    if "image/png" in mime_lower or ext == ".png":
        return FileCategory.IMAGE
    if "image/jpeg" in mime_lower or ext in (".jpg", ".jpeg"):
        return FileCategory.IMAGE

    if "text/plain" in mime_lower or ext == ".txt":
        return FileCategory.TEXT

    if "zip" in mime_lower or ext == ".zip":
        return FileCategory.ARCHIVE

    if "xml" in mime_lower or ext == ".xml":
        return FileCategory.XML

    return FileCategory.OTHER
