"""
Conversion Service - MIME type dispatch and the text envelope.

Flow:
1. Validate the request (blob location and file name are required)
2. Pick the extractor for the MIME type
3. Wrap the extractor body in the fixed header and metadata footer

Extraction failures never escape ``convert``: they become an inline
CONVERSION ERROR section and the result still reports success.
"""
from datetime import datetime
from functools import lru_cache
from typing import Callable, Dict, Optional, Protocol, Tuple

from app.core.exceptions import InvalidConversionRequestError
from app.models.document import ConversionRequest, ConversionResult, DocumentFormat, utc_now
from app.services.analysis_client import AnalysisClient, get_analysis_client
from app.services.blob_service import BlobDownloader
from app.utils.extractors.excel_extractor import ExcelExtractor
from app.utils.extractors.image_extractor import ImageExtractor
from app.utils.extractors.pdf_extractor import PDFExtractor
from app.utils.extractors.word_extractor import WordExtractor
from app.utils.logger import get_logger
from app.utils.text_builder import TextSectionBuilder, build_footer, build_header

logger = get_logger(__name__)

REQUIRED_FIELDS_MESSAGE = "BlobUrl and FileName are required"
UNKNOWN_METHOD = "Unknown"

# MIME type (lower-cased) -> (extractor, method label)
DISPATCH_TABLE: Dict[str, Tuple[DocumentFormat, str]] = {
    "application/pdf": (DocumentFormat.PDF, "Layout+OCR analysis"),
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        DocumentFormat.WORD, "Structured document parsing"
    ),
    "application/msword": (DocumentFormat.WORD, "Structured document parsing"),
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (
        DocumentFormat.EXCEL, "Spreadsheet cell/range parsing"
    ),
    "application/vnd.ms-excel": (DocumentFormat.EXCEL, "Spreadsheet cell/range parsing"),
    "image/png": (DocumentFormat.IMAGE, "OCR text extraction"),
    "image/jpeg": (DocumentFormat.IMAGE, "OCR text extraction"),
    "image/tiff": (DocumentFormat.IMAGE, "OCR text extraction"),
}


class Extractor(Protocol):
    async def extract(self, data: bytes) -> TextSectionBuilder:
        ...


def resolve_format(mime_type: Optional[str]) -> Optional[DocumentFormat]:
    entry = DISPATCH_TABLE.get((mime_type or "").lower())
    return entry[0] if entry else None


def get_conversion_method(mime_type: Optional[str]) -> str:
    """Method label reported for a MIME type ("Unknown" when unsupported)."""
    entry = DISPATCH_TABLE.get((mime_type or "").lower())
    return entry[1] if entry else UNKNOWN_METHOD


def is_supported(mime_type: Optional[str]) -> bool:
    return resolve_format(mime_type) is not None


class ConversionService:
    """Converts raw document bytes into the section-delimited text document."""

    def __init__(
            self,
            extractors: Dict[DocumentFormat, Extractor],
            clock: Callable[[], datetime] = utc_now
    ):
        self.extractors = extractors
        self.clock = clock

    @staticmethod
    def validate_request(request: ConversionRequest) -> None:
        """
        Raises:
            InvalidConversionRequestError: if blob location or file name is empty
        """
        if request.missing_fields:
            raise InvalidConversionRequestError(REQUIRED_FIELDS_MESSAGE)

    async def convert(self, data: bytes, request: ConversionRequest) -> ConversionResult:
        """
        Convert ``data`` according to ``request.mime_type``.

        A malformed request returns ``success=False`` with no text and no
        extractor is called. Anything else returns ``success=True``.
        """
        mime_type = request.mime_type.lower()
        method_label = get_conversion_method(mime_type)

        try:
            self.validate_request(request)
        except InvalidConversionRequestError as e:
            logger.warning(f"Rejected conversion request: missing {', '.join(request.missing_fields)}")
            return ConversionResult(
                success=False,
                file_name=request.file_name,
                client=request.client,
                category=request.category,
                method_label=method_label,
                converted_at=self.clock(),
                error=str(e)
            )

        logger.info(f"Processing file: {request.file_name} ({mime_type or 'no MIME type'})")

        builder = TextSectionBuilder()
        build_header(
            builder,
            file_name=request.file_name,
            client=request.client,
            category=request.category,
            uploaded_at=self.clock()
        )
        builder.extend(await self._convert_body(data, mime_type))
        build_footer(
            builder,
            byte_size=len(data),
            mime_type=mime_type,
            method_label=method_label,
            processed_at=self.clock()
        )

        converted_text = builder.build()
        logger.info(f"Converted {request.file_name} to {len(converted_text):,} characters")

        return ConversionResult(
            success=True,
            file_name=request.file_name,
            client=request.client,
            category=request.category,
            converted_text=converted_text,
            method_label=method_label,
            converted_at=self.clock(),
            converted_byte_size=len(converted_text.encode("utf-8"))
        )

    async def convert_blob(self, request: ConversionRequest, downloader: BlobDownloader) -> ConversionResult:
        """
        Validate, download and convert.

        Raises:
            InvalidConversionRequestError: before any download
            BlobDownloadError: if the blob cannot be fetched
        """
        self.validate_request(request)
        data = await downloader.download(request.blob_url)
        return await self.convert(data, request)

    async def _convert_body(self, data: bytes, mime_type: str) -> TextSectionBuilder:
        document_format = resolve_format(mime_type)

        if document_format is None:
            return (
                TextSectionBuilder()
                .section("UNSUPPORTED FILE TYPE")
                .field("MIME Type", mime_type)
                .line("This file type is not currently supported for conversion.")
            )

        try:
            return await self.extractors[document_format].extract(data)
        except Exception as e:
            logger.error(f"Error converting {mime_type} document: {e}", exc_info=True)
            return (
                TextSectionBuilder()
                .section("CONVERSION ERROR")
                .line(f"Error occurred during conversion: {e}")
            )


def create_conversion_service(
        analysis_client: AnalysisClient,
        clock: Callable[[], datetime] = utc_now
) -> ConversionService:
    """Wire the four extractors around one analysis client."""
    return ConversionService(
        extractors={
            DocumentFormat.PDF: PDFExtractor(analysis_client),
            DocumentFormat.WORD: WordExtractor(),
            DocumentFormat.EXCEL: ExcelExtractor(),
            DocumentFormat.IMAGE: ImageExtractor(analysis_client),
        },
        clock=clock
    )


@lru_cache()
def get_conversion_service() -> ConversionService:
    return create_conversion_service(get_analysis_client())
