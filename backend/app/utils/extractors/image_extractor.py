"""
Image Extractor - Handles raster images (PNG, JPEG, TIFF).

Single responsibility: OCR the image and list recognized lines.
Drawing analysis (lines, symbols, dimensions, scale) is NOT implemented.
"""
from app.core.exceptions import ExtractionError
from app.models.document import AnalysisResult
from app.services.analysis_client import AnalysisClient
from app.utils.logger import get_logger
from app.utils.text_builder import TextSectionBuilder

logger = get_logger(__name__)

UNIMPLEMENTED_DRAWING_ANALYSIS = (
    "Not implemented: line detection, symbol recognition, "
    "dimension extraction and scale determination."
)


class ImageExtractor:
    """Extracts text from raster images through the analysis client's read mode."""

    def __init__(self, analysis_client: AnalysisClient):
        self.analysis_client = analysis_client

    async def extract(self, data: bytes) -> TextSectionBuilder:
        logger.info(f"Extracting image ({len(data):,} bytes) via {self.analysis_client.name} OCR")

        try:
            analysis = await self.analysis_client.analyze(data, mode="read")
        except Exception as e:
            logger.error(f"Image OCR failed: {e}", exc_info=True)
            raise ExtractionError(f"Error processing image: {e}") from e

        builder = self.render(analysis)
        logger.info("Successfully processed image with OCR")
        return builder

    def render(self, analysis: AnalysisResult) -> TextSectionBuilder:
        builder = TextSectionBuilder()
        builder.section("IMAGE ANALYSIS")

        builder.blank().section("OCR TEXT EXTRACTION")
        for page in sorted(analysis.pages, key=lambda p: p.page_number):
            builder.lines(page.texts)

        builder.blank().section("CONSTRUCTION DRAWING ANALYSIS")
        builder.line(UNIMPLEMENTED_DRAWING_ANALYSIS)

        return builder
