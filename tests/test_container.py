import zipfile

import pytest

from src.headercheck.validator.container import (
    MIME_PRESENTATION,
    MIME_WORD,
    MIME_XLSX,
    OOXML_PRESENTATION_MAIN,
    OOXML_SPREADSHEET_MAIN,
    OOXML_WORD_MAIN,
    ZipContainerReader,
    has_worksheet,
    refine_from_container,
    refine_from_header,
    refine_ooxml_mime,
)
from src.headercheck.validator.errors import ContainerRefineError
from src.headercheck.validator.header import ByteSource
from tests.samples import (
    BrokenContainerReader,
    ListContainerReader,
    make_padded_package,
    make_xlsx,
    make_zip,
)

GENERIC = "application/x-ooxml-package"


@pytest.mark.parametrize(
    "marker, expected",
    [
        (OOXML_SPREADSHEET_MAIN, MIME_XLSX),
        (OOXML_WORD_MAIN, MIME_WORD),
        (OOXML_PRESENTATION_MAIN, MIME_PRESENTATION),
    ],
)
def test_header_marker_selects_sub_format(marker, expected):
    header = b"PK\x03\x04" + b"\x00" * 26 + marker.encode("ascii")
    assert refine_from_header(header) == expected


def test_first_marker_in_rule_order_wins():
    header = (OOXML_WORD_MAIN + " " + OOXML_SPREADSHEET_MAIN).encode("ascii")
    assert refine_from_header(header) == MIME_XLSX


def test_markers_are_matched_on_raw_bytes():
    # Non-UTF-8 bytes around the marker must not break the scan.
    header = b"\xff\xfe\x80" + OOXML_WORD_MAIN.encode("ascii") + b"\x9f"
    assert refine_from_header(header) == MIME_WORD


def test_header_without_marker_gives_nothing():
    assert refine_from_header(b"PK\x03\x04" + b"\x00" * 100) is None


def test_marker_hit_never_opens_container():
    header = OOXML_WORD_MAIN.encode("ascii")
    source = ByteSource.from_path("/nonexistent/never-read.docx")
    assert refine_ooxml_mime(header, GENERIC, source=source, reader=BrokenContainerReader()) == MIME_WORD


def test_falls_back_to_part_listing(write_file):
    source = ByteSource.from_path(write_file("deck.pptx", b"PK"))
    reader = ListContainerReader(["[Content_Types].xml", "ppt/presentation.xml"])
    assert refine_ooxml_mime(b"PK\x03\x04", GENERIC, source=source, reader=reader) == MIME_PRESENTATION


def test_unrecognised_parts_keep_generic_type(write_file):
    source = ByteSource.from_path(write_file("pkg.zip", b"PK"))
    reader = ListContainerReader(["[Content_Types].xml", "custom/item.xml"])
    assert refine_ooxml_mime(b"PK\x03\x04", GENERIC, source=source, reader=reader) == GENERIC


def test_empty_container_raises_refine_error(write_file):
    source = ByteSource.from_path(write_file("pkg.zip", b"PK"))
    with pytest.raises(ContainerRefineError):
        refine_from_container(source, ListContainerReader([]), GENERIC)


def test_refine_error_surfaces_generic_type(write_file):
    source = ByteSource.from_path(write_file("pkg.zip", b"PK"))
    assert refine_ooxml_mime(b"PK\x03\x04", GENERIC, source=source, reader=BrokenContainerReader()) == GENERIC


def test_real_zip_without_markers_but_with_a_part(write_file):
    data = make_zip([("notes/readme.txt", b"hello")], zipfile.ZIP_STORED)
    source = ByteSource.from_path(write_file("bundle.zip", data))
    assert refine_ooxml_mime(data[:8192], GENERIC, source=source) == GENERIC


def test_real_deflated_xlsx_resolved_by_part_listing(write_file):
    data = make_xlsx()
    source = ByteSource.from_path(write_file("book.xlsx", data))
    assert refine_from_container(source, ZipContainerReader(), GENERIC) == MIME_XLSX


def test_zip_reader_rejects_garbage(write_file):
    source = ByteSource.from_path(write_file("fake.xlsx", b"PK\x03\x04" + b"\x01" * 64))
    with pytest.raises(ContainerRefineError):
        list(ZipContainerReader().open(source))


def test_has_worksheet(write_file):
    with_sheet = ByteSource.from_path(write_file("a.xlsx", make_padded_package(["xl/worksheets/sheet1.xml"])))
    without_sheet = ByteSource.from_path(write_file("b.xlsx", make_padded_package(["xl/workbook.xml"])))
    assert has_worksheet(with_sheet)
    assert not has_worksheet(without_sheet)
