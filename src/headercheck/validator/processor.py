from __future__ import annotations

import os
import shutil
import tempfile
from datetime import datetime
from typing import BinaryIO, Optional, Union

from src.headercheck.config import get as get_config
from src.headercheck.log import get_logger
from src.headercheck.tools.charset import ChardetDetector, CharsetDetector
from src.headercheck.tools.identify import FiletypeDetector, TypeDetector, sniff_header
from src.headercheck.validator.charset_probe import probe_csv
from src.headercheck.validator.classification import determine_category
from src.headercheck.validator.container import ContainerReader, ZipContainerReader
from src.headercheck.validator.errors import (
    DETAIL_FILE_READ,
    ERR_EMPTY_FILE,
    ERR_FILE_PROCESS,
    ERR_UNSUPPORTED_TYPE,
    MSG_SUCCESS,
    MSG_SUCCESS_CSV,
    MSG_SUCCESS_EXCEL,
    CleanupError,
    HeaderCheckError,
)
from src.headercheck.validator.extensions import check_extension, extract_extension
from src.headercheck.validator.header import HEADER_READ_BYTES, ByteSource, read_head
from src.headercheck.validator.models import ErrorCode, FileCategory, ValidationResult, fail, ok
from src.headercheck.validator.signatures import validate_excel

logger = get_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def copy_to_temp(stream: BinaryIO, original_name: Optional[str]) -> str:
    """Stream an upload into a uniquely named temp file and return its path.

    The caller owns the returned file and must delete it.
    """
    prefix = str(get_config("upload.temp_prefix", "upload-")) + datetime.now().strftime("%Y%m%d%H%M%S%f")[:-3] + "-"
    chunk = int(get_config("upload.copy_chunk_bytes", 8192))
    suffix = extract_extension(original_name)
    with tempfile.NamedTemporaryFile(delete=False, prefix=prefix, suffix=suffix) as tmp:
        tmp_path = tmp.name
        try:
            shutil.copyfileobj(stream, tmp, chunk)
        except Exception:
            tmp.close()
            os.remove(tmp_path)
            raise
    return tmp_path


def _is_seekable(stream: BinaryIO) -> bool:
    seekable = getattr(stream, "seekable", None)
    try:
        return bool(seekable()) if callable(seekable) else False
    except (OSError, ValueError):
        return False


class FileHeaderChecker:
    """Validates an upload's real content type and CSV encoding from its leading bytes.

    Only bounded prefixes of the source are read. The type, charset and
    container oracles are pluggable.
    """

    def __init__(
        self,
        type_detector: Optional[TypeDetector] = None,
        charset_detector: Optional[CharsetDetector] = None,
        container_reader: Optional[ContainerReader] = None,
    ) -> None:
        self.type_detector = type_detector or FiletypeDetector()
        self.charset_detector = charset_detector or ChardetDetector()
        self.container_reader = container_reader or ZipContainerReader()

    # --- Public entry points --------------------------------------------------

    def validate(
        self,
        source: Optional[BinaryIO],
        original_name: Optional[str],
        verify_encoding: bool = False,
    ) -> ValidationResult:
        """Validate a binary stream owned by the caller.

        Seekable streams are read in place. Anything else is spooled to a temp
        copy first, which is removed again whatever the outcome.
        """
        if source is None:
            return fail(ErrorCode.EMPTY_FILE, ERR_EMPTY_FILE)
        seekable = _is_seekable(source)
        borrowed = ByteSource.from_stream(source) if seekable else None
        try:
            extension = self._precheck(borrowed, original_name)
        except HeaderCheckError as e:
            return fail(e.code, e.message)
        except OSError as e:
            return fail(ErrorCode.FILE_PROCESS_ERROR, ERR_FILE_PROCESS + str(e))

        if borrowed is None:
            try:
                tmp_path = copy_to_temp(source, original_name)
            except (OSError, ValueError) as e:
                return fail(ErrorCode.FILE_PROCESS_ERROR, ERR_FILE_PROCESS + str(e))
            return self.validate_path(tmp_path, original_name, delete_after=True, verify_encoding=verify_encoding)

        return self._guarded(borrowed, original_name, extension, verify_encoding)

    def validate_path(
        self,
        path: Optional[PathLike],
        original_name: Optional[str],
        delete_after: bool = False,
        verify_encoding: bool = False,
    ) -> ValidationResult:
        """Validate a file on disk; ``original_name`` supplies the declared extension.

        With ``delete_after`` the file is removed on every exit path. A failed
        delete raises CleanupError carrying the computed result.
        """
        if path is None or not os.path.exists(path):
            return fail(ErrorCode.EMPTY_FILE, ERR_EMPTY_FILE)

        result: Optional[ValidationResult] = None
        try:
            source = ByteSource.from_path(path)
            try:
                extension = self._precheck(source, original_name)
            except HeaderCheckError as e:
                result = fail(e.code, e.message)
                return result
            except OSError as e:
                result = fail(ErrorCode.FILE_PROCESS_ERROR, ERR_FILE_PROCESS + str(e))
                return result
            result = self._guarded(source, original_name, extension, verify_encoding)
            return result
        finally:
            if delete_after:
                self._delete(os.fspath(path), result)

    # --- Internals ------------------------------------------------------------

    def _precheck(self, source: Optional[ByteSource], original_name: Optional[str]) -> str:
        """Empty source, then missing filename, then the extension allow-list."""
        if source is not None and source.is_empty():
            raise HeaderCheckError(ErrorCode.EMPTY_FILE, ERR_EMPTY_FILE)
        return check_extension(original_name)

    def _delete(self, path: str, result: Optional[ValidationResult]) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to delete {path} after validation: {e}")
            raise CleanupError(path, e, result) from e

    def _guarded(
        self,
        source: ByteSource,
        original_name: Optional[str],
        extension: str,
        verify_encoding: bool,
    ) -> ValidationResult:
        try:
            result = self._run(source, original_name, extension, verify_encoding)
        except HeaderCheckError as e:
            result = fail(e.code, e.message)
        except OSError as e:
            result = fail(ErrorCode.FILE_PROCESS_ERROR, ERR_FILE_PROCESS + str(e))
        except Exception as e:
            logger.exception(f"Unexpected error while validating {original_name}")
            result = fail(ErrorCode.FILE_PROCESS_ERROR, ERR_FILE_PROCESS + str(e))

        if result.ok:
            logger.info(f"{original_name}: {result.category.value} ({result.detected_type})")
        else:
            logger.warning(f"{original_name}: rejected [{result.code.value}] {result.message}")
        return result

    def _run(
        self,
        source: ByteSource,
        original_name: Optional[str],
        extension: str,
        verify_encoding: bool,
    ) -> ValidationResult:
        header = read_head(source, HEADER_READ_BYTES)
        if not header:
            raise HeaderCheckError(ErrorCode.FILE_PROCESS_ERROR, ERR_FILE_PROCESS + DETAIL_FILE_READ)

        info = sniff_header(source, header, original_name, self.type_detector, self.container_reader)
        category = determine_category(info.mime, extension, header)
        logger.debug(f"{original_name}: detected={info.mime} refined={info.refined} category={category}")
        if category is None:
            return fail(ErrorCode.UNSUPPORTED_TYPE, ERR_UNSUPPORTED_TYPE.format(mime=info.mime))

        if category == FileCategory.CSV and verify_encoding:
            encoding = probe_csv(source, self.charset_detector, sample=header)
            return ok(MSG_SUCCESS_CSV, info.mime, FileCategory.CSV, encoding)

        if category == FileCategory.EXCEL:
            validate_excel(source, extension, self.container_reader)
            return ok(MSG_SUCCESS_EXCEL, info.mime, FileCategory.EXCEL)

        return ok(MSG_SUCCESS, info.mime, category)


_default_checker: Optional[FileHeaderChecker] = None


def default_checker() -> FileHeaderChecker:
    global _default_checker
    if _default_checker is None:
        _default_checker = FileHeaderChecker()
    return _default_checker


def validate(source: Optional[BinaryIO], original_name: Optional[str], verify_encoding: bool = False) -> ValidationResult:
    return default_checker().validate(source, original_name, verify_encoding=verify_encoding)


def validate_path(
    path: Optional[PathLike],
    original_name: Optional[str],
    delete_after: bool = False,
    verify_encoding: bool = False,
) -> ValidationResult:
    return default_checker().validate_path(path, original_name, delete_after=delete_after, verify_encoding=verify_encoding)
