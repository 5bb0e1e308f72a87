import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from app.core.exceptions import InvalidConversionRequestError
from app.models.document import ConversionRequest, DocumentFormat
from app.services.conversion_service import (
    ConversionService,
    get_conversion_method,
    is_supported,
    resolve_format,
)
from app.utils.text_builder import TextSectionBuilder


def make_request(mime_type="application/pdf", **overrides):
    fields = dict(
        blob_url="https://storage.example.com/uploads/plan.pdf?sig=abc",
        file_name="plan.pdf",
        mime_type=mime_type,
        client="Acme Builders",
        category="Drawings",
    )
    fields.update(overrides)
    return ConversionRequest(**fields)


def run_convert(service, data, request):
    return asyncio.run(service.convert(data, request))


# ==================== Dispatch table ====================

@pytest.mark.parametrize("mime_type,label", [
    ("application/pdf", "Layout+OCR analysis"),
    ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "Structured document parsing"),
    ("application/msword", "Structured document parsing"),
    ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "Spreadsheet cell/range parsing"),
    ("application/vnd.ms-excel", "Spreadsheet cell/range parsing"),
    ("image/png", "OCR text extraction"),
    ("image/jpeg", "OCR text extraction"),
    ("image/tiff", "OCR text extraction"),
    ("text/plain", "Unknown"),
    ("", "Unknown"),
    (None, "Unknown"),
])
def test_conversion_method_labels(mime_type, label):
    assert get_conversion_method(mime_type) == label


def test_mime_lookup_is_case_insensitive():
    assert resolve_format("Application/PDF") is DocumentFormat.PDF
    assert is_supported("IMAGE/TIFF")
    assert not is_supported("image/gif")


# ==================== Envelope ====================

@pytest.mark.parametrize("mime_type", ["application/pdf", "image/png", "text/plain"])
def test_envelope_wraps_every_conversion(service_factory, fake_client_factory, blueprint_analysis, mime_type):
    service = service_factory(fake_client_factory(result=blueprint_analysis))
    data = b"x" * 2048
    result = run_convert(service, data, make_request(mime_type))

    text = result.converted_text
    assert result.success
    assert text.startswith(
        "=== DOCUMENT ANALYSIS ===\n"
        "File: plan.pdf\n"
        "Client: Acme Builders\n"
        "Category: Drawings\n"
        "Upload Date: 2024-05-17 14:30:05 UTC\n\n"
    )
    assert text.endswith(
        "\n\n=== METADATA ===\n"
        "File Size: 2,048 bytes\n"
        f"MIME Type: {mime_type}\n"
        f"Processing Method: {get_conversion_method(mime_type)}\n"
        "Processed: 2024-05-17 14:30:05 UTC\n"
    )
    assert result.converted_byte_size == len(text.encode("utf-8"))
    assert result.method_label == get_conversion_method(mime_type)


def test_footer_reports_lower_cased_mime(service_factory, blueprint_analysis, fake_client_factory):
    service = service_factory(fake_client_factory(result=blueprint_analysis))
    result = run_convert(service, b"%PDF", make_request("Application/PDF"))

    assert "MIME Type: application/pdf\n" in result.converted_text
    assert result.method_label == "Layout+OCR analysis"


def test_unsupported_type_is_not_an_error(service_factory, section_lines):
    result = run_convert(service_factory(), b"hello", make_request("text/plain"))

    assert result.success
    assert result.method_label == "Unknown"
    assert result.error is None
    assert section_lines(result.converted_text, "UNSUPPORTED FILE TYPE") == [
        "MIME Type: text/plain",
        "This file type is not currently supported for conversion.",
    ]
    assert "CONVERSION ERROR" not in result.converted_text


def test_extraction_failure_becomes_error_section(service_factory, fake_client_factory, section_lines):
    service = service_factory(fake_client_factory(error=ConnectionError("endpoint unreachable")))
    result = run_convert(service, b"%PDF", make_request())

    assert result.success
    assert result.error is None
    assert section_lines(result.converted_text, "CONVERSION ERROR") == [
        "Error occurred during conversion: Error processing PDF: endpoint unreachable",
    ]
    assert "\n=== METADATA ===\n" in result.converted_text


def test_corrupt_spreadsheet_still_gets_footer(service_factory):
    request = make_request(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", file_name="takeoff.xlsx"
    )
    result = run_convert(service_factory(), b"garbage", request)

    assert "=== CONVERSION ERROR ===" in result.converted_text
    assert result.converted_text.rstrip().endswith("Processed: 2024-05-17 14:30:05 UTC")


def test_excel_total_cost_end_to_end(service_factory, xlsx_bytes):
    data = xlsx_bytes({"Estimate": {"A1": "Description", "D7": "Total Cost"}})
    request = make_request(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", file_name="estimate.xlsx"
    )
    result = run_convert(service_factory(), data, request)

    assert "Found construction data at D7: Total Cost\n" in result.converted_text
    assert "Used Range: A1:D7\n" in result.converted_text


def test_pdf_dimension_line_end_to_end(service_factory, fake_client_factory, page_factory):
    from app.models.document import AnalysisResult

    client = fake_client_factory(result=AnalysisResult(pages=[page_factory(1, "Length: 12'6\"")]))
    result = run_convert(service_factory(client), b"%PDF", make_request())

    assert "--- Dimensions Found on Page 1 ---\n- Length: 12'6\"\n" in result.converted_text


def test_word_single_paragraph_end_to_end(service_factory, docx_bytes, section_lines):
    request = make_request(
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document", file_name="scope.docx"
    )
    result = run_convert(service_factory(), docx_bytes(["Hello", " \t "]), request)

    assert section_lines(result.converted_text, "DOCUMENT CONTENT") == ["Hello"]


# ==================== Determinism ====================

def test_identical_input_gives_identical_text(service_factory, fake_client_factory, blueprint_analysis):
    service = service_factory(fake_client_factory(result=blueprint_analysis))
    first = run_convert(service, b"%PDF-1.4", make_request())
    second = run_convert(service, b"%PDF-1.4", make_request())

    assert first.converted_text == second.converted_text


def test_body_identical_with_real_clock(fake_client_factory, blueprint_analysis):
    from app.services.conversion_service import create_conversion_service

    service = create_conversion_service(fake_client_factory(result=blueprint_analysis))

    def without_timestamps(text):
        return [
            line for line in text.splitlines()
            if not line.startswith(("Upload Date:", "Processed:"))
        ]

    first = run_convert(service, b"%PDF", make_request())
    second = run_convert(service, b"%PDF", make_request())
    assert without_timestamps(first.converted_text) == without_timestamps(second.converted_text)


# ==================== Request validation ====================

@pytest.mark.parametrize("overrides", [
    {"file_name": ""},
    {"blob_url": ""},
    {"blob_url": "   ", "file_name": ""},
])
def test_malformed_request_skips_extraction(fixed_clock, overrides):
    extractor = Mock()
    extractor.extract = AsyncMock(return_value=TextSectionBuilder())
    service = ConversionService(extractors={DocumentFormat.PDF: extractor}, clock=fixed_clock)

    result = run_convert(service, b"%PDF", make_request(**overrides))

    assert not result.success
    assert result.error == "BlobUrl and FileName are required"
    assert result.converted_text == ""
    assert extractor.extract.call_count == 0


def test_convert_blob_rejects_before_download(service_factory):
    downloader = Mock()
    downloader.download = AsyncMock(return_value=b"%PDF")

    with pytest.raises(InvalidConversionRequestError):
        asyncio.run(service_factory().convert_blob(make_request(file_name=""), downloader))

    downloader.download.assert_not_awaited()


def test_convert_blob_downloads_then_converts(service_factory, fake_client_factory, blueprint_analysis):
    downloader = Mock()
    downloader.download = AsyncMock(return_value=b"%PDF-1.7")
    request = make_request()

    result = asyncio.run(
        service_factory(fake_client_factory(result=blueprint_analysis)).convert_blob(request, downloader)
    )

    downloader.download.assert_awaited_once_with(request.blob_url)
    assert result.success
    assert "File Size: 8 bytes" in result.converted_text
