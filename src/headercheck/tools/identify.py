from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from typing import Optional, Protocol

import filetype

from src.headercheck.validator.container import (
  OOXML_CONTENT_TYPES_XML,
  ContainerReader,
  refine_ooxml_mime,
)
from src.headercheck.validator.header import ByteSource

MIME_OOXML_PACKAGE = "application/x-ooxml-package"
MIME_OLE_STORAGE = "application/x-ole-storage"
MIME_ZIP = "application/zip"
MIME_XML = "application/xml"
MIME_TEXT = "text/plain"
MIME_OCTET = "application/octet-stream"

ZIP_MAGIC = b"PK\x03\x04"
OLE2_MAGIC = b"\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1"
UTF8_BOM = b"\xEF\xBB\xBF"


class TypeDetector(Protocol):
  def detect(self, header: bytes, filename_hint: Optional[str]) -> Optional[str]:
    ...


@dataclass
class FileInfo:
  name: str
  mime: Optional[str]
  refined: bool = False


def _looks_textual(header: bytes) -> bool:
  return bool(header) and b"\x00" not in header


class FiletypeDetector:
  """Magic-number detection using filetype, with a small table for what it leaves out.

  filetype knows binary signatures only; plain text formats resolve through
  the filename hint.
  """

  def detect(self, header: bytes, filename_hint: Optional[str]) -> Optional[str]:
    kind = filetype.guess(header)
    if kind is not None:
      mime = kind.mime or MIME_OCTET
      if mime == MIME_ZIP and OOXML_CONTENT_TYPES_XML.encode("ascii") in header:
        return MIME_OOXML_PACKAGE
      return mime
    if header.startswith(ZIP_MAGIC):
      return MIME_OOXML_PACKAGE if OOXML_CONTENT_TYPES_XML.encode("ascii") in header else MIME_ZIP
    if header.startswith(OLE2_MAGIC):
      return MIME_OLE_STORAGE
    if _looks_textual(header):
      body = header[len(UTF8_BOM):] if header.startswith(UTF8_BOM) else header
      if body.lstrip().startswith(b"<?xml"):
        return MIME_XML
      guessed, _enc = mimetypes.guess_type(filename_hint or "", strict=False)
      if guessed and (guessed.startswith("text/") or guessed.endswith("xml")):
        return guessed
      return MIME_TEXT
    return MIME_OCTET


def sniff_header(
  source: ByteSource,
  header: bytes,
  filename_hint: Optional[str],
  detector: Optional[TypeDetector] = None,
  container_reader: Optional[ContainerReader] = None,
) -> FileInfo:
  """Content-based identification of an upload from its header bytes.

  A generic OOXML package answer is refined to the concrete office type
  before returning.
  """
  mime = (detector or FiletypeDetector()).detect(header, filename_hint)
  if mime is not None and mime.lower() == MIME_OOXML_PACKAGE:
    refined = refine_ooxml_mime(header, mime, source=source, reader=container_reader)
    return FileInfo(name=filename_hint or source.name, mime=refined, refined=refined != mime)
  return FileInfo(name=filename_hint or source.name, mime=mime)
