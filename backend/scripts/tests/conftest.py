"""
Shared fixtures for the converter tests.

Documents are built in memory with the same libraries the extractors read
them with; the layout/OCR backend is replaced by a fake analysis client.
"""
import io
from datetime import datetime, timezone
from typing import List, Optional

import pytest

from app.models.document import (
    AnalysisResult, AnalyzedPage, ExtractedTable, TableCell, TextLine
)
from app.services.conversion_service import create_conversion_service

FIXED_NOW = datetime(2024, 5, 17, 14, 30, 5, tzinfo=timezone.utc)


class FakeAnalysisClient:
    """Returns a canned AnalysisResult (or raises) and records each call's mode."""

    name = "fake"

    def __init__(self, result: Optional[AnalysisResult] = None, error: Optional[Exception] = None):
        self.result = result or AnalysisResult()
        self.error = error
        self.calls: List[str] = []

    async def analyze(self, data: bytes, mode: str) -> AnalysisResult:
        self.calls.append(mode)
        if self.error:
            raise self.error
        return self.result

    def is_ready(self) -> bool:
        return True


def make_page(page_number: int, *texts: str) -> AnalyzedPage:
    return AnalyzedPage(page_number=page_number, lines=[TextLine(content=t) for t in texts])


def make_table(rows: List[List[str]], page_number: int = 1) -> ExtractedTable:
    return ExtractedTable(
        row_count=len(rows),
        column_count=max(len(r) for r in rows),
        cells=[
            TableCell(row_index=r, column_index=c, content=value)
            for r, row in enumerate(rows)
            for c, value in enumerate(row)
        ],
        page_number=page_number
    )


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def fake_client_factory():
    return FakeAnalysisClient


@pytest.fixture
def page_factory():
    return make_page


@pytest.fixture
def table_factory():
    return make_table


@pytest.fixture
def blueprint_analysis() -> AnalysisResult:
    """Two-page drawing set with one schedule table."""
    return AnalysisResult(
        pages=[
            make_page(2, "SECTION A-A", "Slab thickness 150mm"),
            make_page(1, "FLOOR PLAN", "Length: 12'6\"", "Scale 1:50"),
        ],
        tables=[make_table([["Door", "Width"], ["D1", "36\""]])]
    )


@pytest.fixture
def service_factory(fixed_clock):
    def build(client=None):
        return create_conversion_service(client or FakeAnalysisClient(), clock=fixed_clock)
    return build


@pytest.fixture
def section_lines():
    """Lines under a ``=== TITLE ===`` marker, up to the next marker."""
    def extract(text: str, title: str) -> List[str]:
        lines = text.splitlines()
        start = lines.index(f"=== {title} ===") + 1
        collected = []
        for line in lines[start:]:
            if line.startswith("=== "):
                break
            collected.append(line)
        while collected and not collected[-1]:
            collected.pop()
        return collected
    return extract


@pytest.fixture
def docx_bytes():
    import docx

    def build(paragraphs: List[str], tables: Optional[List[List[List[str]]]] = None) -> bytes:
        document = docx.Document()
        for text in paragraphs:
            document.add_paragraph(text)
        for rows in tables or []:
            table = document.add_table(rows=len(rows), cols=len(rows[0]))
            for r, row in enumerate(rows):
                for c, value in enumerate(row):
                    table.cell(r, c).text = value
        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue()

    return build


@pytest.fixture
def xlsx_bytes():
    import openpyxl

    def build(sheets: dict) -> bytes:
        """``sheets`` maps sheet title -> {"A1": value, ...}."""
        workbook = openpyxl.Workbook()
        workbook.remove(workbook.active)
        for title, cells in sheets.items():
            sheet = workbook.create_sheet(title)
            for address, value in cells.items():
                sheet[address] = value
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return build


@pytest.fixture
def pdf_bytes():
    import fitz

    def build(pages: List[List[str]]) -> bytes:
        document = fitz.open()
        for lines in pages:
            page = document.new_page()
            for index, text in enumerate(lines):
                page.insert_text((72, 72 + index * 20), text, fontsize=11)
        data = document.tobytes()
        document.close()
        return data

    return build
