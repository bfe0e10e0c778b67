from __future__ import annotations

import codecs
from typing import Optional

from src.headercheck.log import get_logger
from src.headercheck.tools.charset import ChardetDetector, CharsetDetector
from src.headercheck.validator.errors import (
    ERR_CSV_EMPTY,
    ERR_CSV_ENCODING_INVALID,
    ERR_CSV_ENCODING_UNKNOWN,
    HeaderCheckError,
)
from src.headercheck.validator.header import CHARSET_SAMPLE_BYTES, ByteSource, read_head
from src.headercheck.validator.models import ErrorCode

logger = get_logger(__name__)

ENC_UTF8 = "UTF-8"
ENC_UTF8_SIG = "UTF-8-SIG"
UTF8_BOM = b"\xEF\xBB\xBF"


def has_utf8_bom(data: bytes) -> bool:
    return data[:3] == UTF8_BOM


def strip_bom(data: bytes) -> bytes:
    return data[3:] if has_utf8_bom(data) else data


def _is_utf8_name(name: str) -> bool:
    return name.replace("_", "-").upper() in (ENC_UTF8, ENC_UTF8_SIG)


def decodes_as_utf8(sample: bytes, at_eof: bool = False) -> bool:
    """Strict UTF-8 trial decode of a bounded prefix.

    The decoder is incremental so a multi-byte character cut by the sample
    boundary is not treated as an error. When the sample holds the whole
    source (``at_eof``) a trailing incomplete sequence is an error.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
    try:
        decoder.decode(sample, final=at_eof)
    except UnicodeDecodeError:
        return False
    return True


def resolve_encoding(sample: bytes, detector: CharsetDetector, at_eof: bool = False) -> str:
    """Return the canonical encoding name for a CSV sample or raise HeaderCheckError.

    A sample that strictly decodes as UTF-8 is accepted as UTF-8 even when the
    detector named some other charset.
    """
    if has_utf8_bom(sample):
        return ENC_UTF8_SIG

    match = detector.detect(sample)
    if match is None or match.confidence <= 0:
        raise HeaderCheckError(ErrorCode.CSV_ENCODING_UNKNOWN, ERR_CSV_ENCODING_UNKNOWN)
    logger.debug(f"Charset detector reported {match.name} ({match.confidence}%)")

    if _is_utf8_name(match.name):
        return match.name.replace("_", "-").upper()

    if decodes_as_utf8(sample, at_eof):
        return ENC_UTF8
    raise HeaderCheckError(
        ErrorCode.CSV_ENCODING_INVALID,
        ERR_CSV_ENCODING_INVALID.format(detected=match.name),
    )


def ensure_has_line(sample: bytes) -> None:
    # A bare line break is still a line; a lone BOM is not.
    if not strip_bom(sample).splitlines():
        raise HeaderCheckError(ErrorCode.CSV_EMPTY, ERR_CSV_EMPTY)


def probe_csv(
    source: ByteSource,
    detector: Optional[CharsetDetector] = None,
    sample: Optional[bytes] = None,
) -> str:
    """Verify a CSV upload is UTF-8 and non-empty; return the resolved encoding."""
    if sample is None:
        sample = read_head(source, CHARSET_SAMPLE_BYTES)
    else:
        sample = sample[:CHARSET_SAMPLE_BYTES]
    at_eof = len(sample) < CHARSET_SAMPLE_BYTES
    encoding = resolve_encoding(sample, detector or ChardetDetector(), at_eof)
    ensure_has_line(sample)
    return encoding
