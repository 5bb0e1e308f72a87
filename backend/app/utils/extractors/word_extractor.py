"""
Word Extractor - Handles Open XML word-processing documents (.docx).

Single responsibility: Extract body paragraphs and tables with python-docx.
No construction heuristics are applied to Word output.
"""
import asyncio
import io

import docx
from docx.oxml.ns import qn

from app.core.exceptions import ExtractionError
from app.models.document import ExtractedTable, TableCell, TextLine, WordExtraction
from app.utils.logger import get_logger
from app.utils.text_builder import TextSectionBuilder

logger = get_logger(__name__)


def inner_text(element) -> str:
    """Concatenated w:t text under an element; breaks and tabs add nothing."""
    return "".join(t.text or "" for t in element.iter(qn("w:t")))


class WordExtractor:
    """Extracts paragraphs and tables from Word documents."""

    async def extract(self, data: bytes) -> TextSectionBuilder:
        logger.info(f"Extracting Word document ({len(data):,} bytes)")

        try:
            extraction = await asyncio.to_thread(self.parse, data)
        except Exception as e:
            logger.error(f"Word extraction failed: {e}", exc_info=True)
            raise ExtractionError(f"Error processing Word document: {e}") from e

        logger.info(
            f"Successfully processed Word document: "
            f"{len(extraction.paragraphs)} paragraphs, {len(extraction.tables)} tables"
        )
        return self.render(extraction)

    def parse(self, data: bytes) -> WordExtraction:
        """
        Read top-level body paragraphs and tables in document order.

        Whitespace-only paragraphs are dropped.
        """
        document = docx.Document(io.BytesIO(data))

        paragraphs = []
        for paragraph in document.paragraphs:
            text = inner_text(paragraph._p)
            if text.strip():
                paragraphs.append(TextLine(content=text))

        tables = []
        for table in document.tables:
            # One entry per physical w:tc, so a merged cell appears once
            physical_rows = [row._tr.tc_lst for row in table.rows]
            cells = [
                TableCell(row_index=row_idx, column_index=col_idx, content=inner_text(tc).strip())
                for row_idx, tcs in enumerate(physical_rows)
                for col_idx, tc in enumerate(tcs)
            ]
            tables.append(ExtractedTable(
                row_count=len(physical_rows),
                column_count=max((len(tcs) for tcs in physical_rows), default=0),
                cells=cells
            ))

        return WordExtraction(paragraphs=paragraphs, tables=tables)

    def render(self, extraction: WordExtraction) -> TextSectionBuilder:
        builder = TextSectionBuilder()
        builder.section("WORD DOCUMENT ANALYSIS")

        builder.blank().section("DOCUMENT CONTENT")
        builder.lines(paragraph.content for paragraph in extraction.paragraphs)

        if extraction.tables:
            builder.blank().section("TABLES")

            for index, table in enumerate(extraction.tables, start=1):
                builder.subsection(f"Table {index}")
                for row in table.rows():
                    builder.line(" | ".join(cell.content for cell in row))

        return builder
