"""
Table Extractor - Handles table extraction from PDFs.

Single responsibility: Turn pdfplumber tables into row/column addressed cells.
"""
import logging
from typing import List

import pdfplumber.page as pdf_page

from app.models.document import ExtractedTable, TableCell
from app.utils.logger import get_logger

logger = get_logger(__name__)

logging.getLogger("pdfminer").setLevel(logging.ERROR)


class TableExtractor:
    """Extracts tables from PDF pages."""

    def extract_tables(
            self,
            page: pdf_page.Page,
            page_number: int
    ) -> List[ExtractedTable]:
        """
        Extract tables from a PDF page.

        Args:
            page: pdfplumber page object
            page_number: Page number (1-indexed)

        Returns:
            List of ExtractedTable objects, in detection order
        """
        tables = []
        raw_tables = page.extract_tables()

        for table_idx, raw_table in enumerate(raw_tables or []):
            if not raw_table:
                continue

            column_count = max(len(row) for row in raw_table)
            cells = [
                TableCell(
                    row_index=row_idx,
                    column_index=col_idx,
                    content=str(value or "").strip()
                )
                for row_idx, row in enumerate(raw_table)
                for col_idx, value in enumerate(row)
            ]

            table = ExtractedTable(
                row_count=len(raw_table),
                column_count=column_count,
                cells=cells,
                page_number=page_number
            )
            tables.append(table)

            logger.debug(
                f"Extracted table {table_idx + 1} from page {page_number}: "
                f"{table.row_count}x{table.column_count}"
            )

        return tables
