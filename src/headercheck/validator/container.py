from __future__ import annotations

import zipfile
from typing import Iterator, List, Optional, Protocol

from src.headercheck.log import get_logger
from src.headercheck.validator.errors import ContainerRefineError
from src.headercheck.validator.header import ByteSource

logger = get_logger(__name__)

# --- OOXML constants ------------------------------------------------------------

MIME_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MIME_WORD = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MIME_PRESENTATION = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

OOXML_CONTENT_TYPES_XML = "[Content_Types].xml"
OOXML_SPREADSHEET_MAIN = "spreadsheetml.sheet.main+xml"
OOXML_WORD_MAIN = "wordprocessingml.document.main+xml"
OOXML_PRESENTATION_MAIN = "presentationml.presentation.main+xml"

# First match wins.
_HEADER_MARKERS = (
    (OOXML_SPREADSHEET_MAIN, MIME_XLSX),
    (OOXML_WORD_MAIN, MIME_WORD),
    (OOXML_PRESENTATION_MAIN, MIME_PRESENTATION),
)

# Package folders holding each sub-format's main part.
_PART_PREFIXES = (
    ("xl/", MIME_XLSX),
    ("word/", MIME_WORD),
    ("ppt/", MIME_PRESENTATION),
)

WORKSHEET_PART_PREFIX = "xl/worksheets/"


def latin1(data: bytes) -> str:
    """View raw bytes one character per byte, without decoding as text."""
    return data.decode("latin-1")


# --- Container reader -----------------------------------------------------------

class ContainerReader(Protocol):
    def open(self, source: ByteSource) -> Iterator[str]:
        """Yield the part names stored in the container."""
        ...


class ZipContainerReader:
    """Lists the parts of a ZIP-based package; part contents are never read."""

    def open(self, source: ByteSource) -> Iterator[str]:
        try:
            with source.open() as f, zipfile.ZipFile(f, "r") as z:
                names: List[str] = z.namelist()
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError, ValueError) as e:
            raise ContainerRefineError(f"Cannot open container {source.name}: {e}") from e
        return iter(names)


# --- Two-tier refinement --------------------------------------------------------

def refine_from_header(header: bytes) -> Optional[str]:
    """Header-only tier: look for a sub-format main-part marker."""
    text = latin1(header)
    for marker, mime in _HEADER_MARKERS:
        if marker in text:
            return mime
    return None


def refine_from_container(source: ByteSource, reader: ContainerReader, fallback_mime: str) -> str:
    """Expensive tier: enumerate the package parts.

    Returns the specific office type when a sub-format folder is present, else
    ``fallback_mime`` as long as the package holds at least one part.
    """
    parts = 0
    for name in reader.open(source):
        parts += 1
        for prefix, mime in _PART_PREFIXES:
            if name.startswith(prefix):
                return mime
    if parts == 0:
        raise ContainerRefineError(f"No parts found in container {source.name}")
    return fallback_mime


def refine_ooxml_mime(
    header: bytes,
    fallback_mime: str,
    source: Optional[ByteSource] = None,
    reader: Optional[ContainerReader] = None,
) -> str:
    """Resolve a generic OOXML package type to spreadsheet/document/presentation.

    The container is opened only when the header window holds no marker. If
    that fails too, ``fallback_mime`` is returned.
    """
    mime = refine_from_header(header)
    if mime is not None:
        logger.debug(f"OOXML type refined from header markers: {mime}")
        return mime
    if source is None:
        return fallback_mime
    try:
        mime = refine_from_container(source, reader or ZipContainerReader(), fallback_mime)
        logger.debug(f"OOXML type refined from container parts: {mime}")
        return mime
    except ContainerRefineError as e:
        logger.warning(f"OOXML refinement inconclusive, keeping {fallback_mime}: {e}")
        return fallback_mime


def has_worksheet(source: ByteSource, reader: Optional[ContainerReader] = None) -> bool:
    """Return True when the package holds at least one worksheet part."""
    return any(name.startswith(WORKSHEET_PART_PREFIX) for name in (reader or ZipContainerReader()).open(source))
