from __future__ import annotations

from typing import Optional

from src.headercheck.log import get_logger
from src.headercheck.validator.container import (
    OOXML_CONTENT_TYPES_XML,
    OOXML_SPREADSHEET_MAIN,
    ContainerReader,
    has_worksheet,
    latin1,
)
from src.headercheck.validator.errors import (
    DETAIL_FILE_TOO_SMALL,
    DETAIL_INVALID_EXCEL,
    DETAIL_INVALID_XLS,
    DETAIL_INVALID_XLSX,
    ERR_EXCEL_INVALID,
    ERR_XLS_INVALID,
    ERR_XLSX_INVALID,
    ERR_XLSX_NO_SHEET,
    ContainerRefineError,
    HeaderCheckError,
)
from src.headercheck.validator.extensions import EXT_XLS, EXT_XLSX
from src.headercheck.validator.header import (
    LEGACY_SIGNATURE_BYTES,
    OFFICE_MARKER_BYTES,
    ZIP_SIGNATURE_BYTES,
    ByteSource,
    read_head,
)
from src.headercheck.validator.models import ErrorCode

logger = get_logger(__name__)

ZIP_LOCAL_FILE_HEADER = b"\x50\x4B\x03\x04"
COMPOUND_DOCUMENT_MAGIC = b"\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1"


def validate_xlsx_header(source: ByteSource, reader: Optional[ContainerReader] = None) -> None:
    header = read_head(source, ZIP_SIGNATURE_BYTES)
    if len(header) < ZIP_SIGNATURE_BYTES:
        raise HeaderCheckError(ErrorCode.XLSX_INVALID, ERR_XLSX_INVALID + DETAIL_FILE_TOO_SMALL)
    if header != ZIP_LOCAL_FILE_HEADER:
        raise HeaderCheckError(ErrorCode.XLSX_INVALID, ERR_XLSX_INVALID + DETAIL_INVALID_XLSX)

    text = latin1(read_head(source, OFFICE_MARKER_BYTES))
    if OOXML_CONTENT_TYPES_XML in text or OOXML_SPREADSHEET_MAIN in text:
        return

    # Markers lie beyond the window: list the package parts instead.
    logger.debug(f"No OOXML marker in first {OFFICE_MARKER_BYTES} bytes of {source.name}, listing parts")
    try:
        found = has_worksheet(source, reader)
    except ContainerRefineError as e:
        raise HeaderCheckError(ErrorCode.XLSX_INVALID, ERR_XLSX_INVALID + str(e)) from e
    if not found:
        raise HeaderCheckError(ErrorCode.XLSX_NO_SHEET, ERR_XLSX_INVALID + ERR_XLSX_NO_SHEET)


def validate_xls_header(source: ByteSource) -> None:
    header = read_head(source, LEGACY_SIGNATURE_BYTES)
    if len(header) < LEGACY_SIGNATURE_BYTES:
        raise HeaderCheckError(ErrorCode.XLS_INVALID, ERR_XLS_INVALID + DETAIL_FILE_TOO_SMALL)
    if header[:4] != COMPOUND_DOCUMENT_MAGIC[:4]:
        raise HeaderCheckError(ErrorCode.XLS_INVALID, ERR_XLS_INVALID + DETAIL_INVALID_XLS)


def validate_excel_header(source: ByteSource) -> None:
    """Extension-agnostic check: accept either a ZIP or a compound-document prefix."""
    header = read_head(source, LEGACY_SIGNATURE_BYTES)
    if len(header) < LEGACY_SIGNATURE_BYTES:
        raise HeaderCheckError(ErrorCode.EXCEL_INVALID, ERR_EXCEL_INVALID + DETAIL_FILE_TOO_SMALL)
    is_zip = header[:2] == ZIP_LOCAL_FILE_HEADER[:2]
    is_ole2 = header[:2] == COMPOUND_DOCUMENT_MAGIC[:2]
    if not is_zip and not is_ole2:
        raise HeaderCheckError(ErrorCode.EXCEL_INVALID, ERR_EXCEL_INVALID + DETAIL_INVALID_EXCEL)


def validate_excel(source: ByteSource, extension: str, reader: Optional[ContainerReader] = None) -> None:
    """Dispatch to the signature check matching the declared extension."""
    if extension == EXT_XLSX:
        validate_xlsx_header(source, reader)
    elif extension == EXT_XLS:
        validate_xls_header(source)
    else:
        validate_excel_header(source)
