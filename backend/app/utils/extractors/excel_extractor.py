"""
Excel Extractor - Handles spreadsheet packages (.xlsx).

Single responsibility: Walk each worksheet's used range with openpyxl,
linearize its rows and flag cells carrying quantity/cost vocabulary.
"""
import asyncio
import io
from typing import Any

import openpyxl
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from app.core.exceptions import ExtractionError
from app.models.document import (
    ExtractedTable, TableCell, WorkbookExtraction, WorksheetExtraction
)
from app.utils.heuristics import has_construction_keyword
from app.utils.logger import get_logger
from app.utils.text_builder import TextSectionBuilder

logger = get_logger(__name__)


def cell_text(value: Any) -> str:
    """String form of a cell value; integral floats drop their decimal part."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ExcelExtractor:
    """Extracts worksheet data from Excel workbooks."""

    async def extract(self, data: bytes) -> TextSectionBuilder:
        logger.info(f"Extracting Excel workbook ({len(data):,} bytes)")

        try:
            extraction = await asyncio.to_thread(self.parse, data)
        except Exception as e:
            logger.error(f"Excel extraction failed: {e}", exc_info=True)
            raise ExtractionError(f"Error processing Excel document: {e}") from e

        logger.info(f"Successfully processed Excel workbook with {len(extraction.worksheets)} worksheets")
        return self.render(extraction)

    def parse(self, data: bytes) -> WorkbookExtraction:
        # data_only: cached formula results instead of formula strings
        workbook = openpyxl.load_workbook(io.BytesIO(data), data_only=True)
        try:
            worksheets = [self._parse_worksheet(sheet) for sheet in workbook.worksheets]
        finally:
            workbook.close()

        return WorkbookExtraction(worksheets=worksheets)

    def _parse_worksheet(self, sheet: Worksheet) -> WorksheetExtraction:
        """
        Read the used range: the smallest rectangle covering every non-empty cell.
        """
        filled = [
            cell
            for row in sheet.iter_rows()
            for cell in row
            if cell.value is not None and cell.value != ""
        ]
        if not filled:
            return WorksheetExtraction(name=sheet.title)

        min_row = min(cell.row for cell in filled)
        max_row = max(cell.row for cell in filled)
        min_col = min(cell.column for cell in filled)
        max_col = max(cell.column for cell in filled)

        used_range = f"{get_column_letter(min_col)}{min_row}:{get_column_letter(max_col)}{max_row}"

        cells = []
        for row in range(min_row, max_row + 1):
            for col in range(min_col, max_col + 1):
                cell = sheet.cell(row=row, column=col)
                cells.append(TableCell(
                    row_index=row - min_row,
                    column_index=col - min_col,
                    content=cell_text(cell.value),
                    address=cell.coordinate
                ))

        logger.debug(f"Worksheet '{sheet.title}': used range {used_range}")

        return WorksheetExtraction(
            name=sheet.title,
            used_range=used_range,
            table=ExtractedTable(
                row_count=max_row - min_row + 1,
                column_count=max_col - min_col + 1,
                cells=cells
            )
        )

    def render(self, extraction: WorkbookExtraction) -> TextSectionBuilder:
        builder = TextSectionBuilder()
        builder.section("EXCEL SPREADSHEET ANALYSIS")

        builder.blank().section("WORKBOOK STRUCTURE")
        builder.field("Worksheets", len(extraction.worksheets))

        for worksheet in extraction.worksheets:
            builder.subsection(f"Worksheet: {worksheet.name}")
            builder.field("Used Range", worksheet.used_range or "Empty")

            if worksheet.is_empty:
                continue

            builder.blank().section("DATA CONTENT")
            for row in worksheet.table.rows():
                values = [cell.content.strip() for cell in row]
                if any(values):
                    builder.line(" | ".join(values))

            # Construction-specific data
            builder.blank().section("CONSTRUCTION DATA ANALYSIS")
            for cell in worksheet.table.cells:
                if has_construction_keyword(cell.content):
                    builder.line(f"Found construction data at {cell.address}: {cell.content}")

        return builder
