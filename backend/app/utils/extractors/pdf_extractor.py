"""
PDF Extractor - Handles PDF document extraction.

Responsibilities:
1. Run layout analysis (text lines + tables) through the analysis client
2. Render pages, tables and cells in document order
3. Flag lines that look like construction dimensions, per page

Delegates to:
- services/analysis_client.py for layout/OCR analysis
- utils/heuristics.py for dimension detection
"""
from app.core.exceptions import ExtractionError
from app.models.document import AnalysisResult
from app.services.analysis_client import AnalysisClient
from app.utils.heuristics import find_dimension_lines
from app.utils.logger import get_logger
from app.utils.text_builder import TextSectionBuilder

logger = get_logger(__name__)


class PDFExtractor:
    """
    Handles PDF document extraction.

    Tables are listed after all page text, each cell on its own line with
    1-based row/column numbers.
    """

    def __init__(self, analysis_client: AnalysisClient):
        self.analysis_client = analysis_client

    async def extract(self, data: bytes) -> TextSectionBuilder:
        """
        Extract content from PDF bytes.

        Raises:
            ExtractionError: if the analysis backend fails
        """
        logger.info(f"Extracting PDF ({len(data):,} bytes) via {self.analysis_client.name} analysis")

        try:
            analysis = await self.analysis_client.analyze(data, mode="layout")
        except Exception as e:
            logger.error(f"PDF analysis failed: {e}", exc_info=True)
            raise ExtractionError(f"Error processing PDF: {e}") from e

        builder = self.render(analysis)
        logger.info(f"Successfully processed PDF with {analysis.page_count} pages")
        return builder

    def render(self, analysis: AnalysisResult) -> TextSectionBuilder:
        builder = TextSectionBuilder()
        pages = sorted(analysis.pages, key=lambda p: p.page_number)

        builder.section("PDF DOCUMENT ANALYSIS")

        builder.blank().section("DOCUMENT STRUCTURE")
        builder.field("Pages", analysis.page_count)

        builder.blank().section("EXTRACTED TEXT CONTENT")
        for page in pages:
            builder.subsection(f"Page {page.page_number}")
            builder.lines(page.texts)

        if analysis.tables:
            builder.blank().section("TABLES AND STRUCTURED DATA")

            for index, table in enumerate(analysis.tables, start=1):
                shape = table.shape
                builder.subsection(
                    f"Table {index} ({shape.row_count} rows x {shape.column_count} columns)"
                )
                for cell in table.cells:
                    builder.line(f"Row {cell.row_index + 1}, Col {cell.column_index + 1}: {cell.content}")

        # Construction-specific analysis
        builder.blank().section("CONSTRUCTION DOCUMENT ANALYSIS")
        for page in pages:
            dimension_lines = find_dimension_lines(page.texts)
            if dimension_lines:
                builder.subsection(f"Dimensions Found on Page {page.page_number}")
                builder.lines(f"- {line}" for line in dimension_lines)

        return builder
