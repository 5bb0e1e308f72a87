"""
Layout/OCR analysis clients.

Both clients expose the same coroutine::

    result = await client.analyze(data, mode="layout")   # or "read"

- LocalAnalysisClient: PyMuPDF for text lines, pdfplumber for tables,
  Tesseract for images and scanned pages. Runs in a worker thread.
- AzureDocumentIntelligenceClient: Azure Document Intelligence REST API
  (prebuilt-layout / prebuilt-read), polled until the operation completes.
"""
import asyncio
import io
from functools import lru_cache
from typing import Any, Dict, List, Optional, Protocol

import fitz  # PyMuPDF
import httpx
import pdfplumber
from PIL import Image, ImageSequence

from app.core.config import Settings, settings
from app.core.exceptions import AnalysisServiceError
from app.models.document import (
    AnalysisMode, AnalysisResult, AnalyzedPage, ExtractedTable, TableCell, TextLine
)
from app.utils.extractors.ocr_extractor import OCRExtractor
from app.utils.extractors.table_extractor import TableExtractor
from app.utils.logger import get_logger

logger = get_logger(__name__)


class AnalysisClient(Protocol):
    name: str

    async def analyze(self, data: bytes, mode: AnalysisMode) -> AnalysisResult:
        ...

    def is_ready(self) -> bool:
        ...


def _to_lines(texts: List[str]) -> List[TextLine]:
    return [TextLine(content=text) for text in texts]


# ==================== Local (in-process) ====================
class LocalAnalysisClient:
    """
    In-process layout/OCR analysis.

    Text-layer PDFs never touch Tesseract; pages without a text layer are
    rasterized and OCR'd when OCR is enabled.
    """

    name = "local"

    def __init__(self, ocr_enabled: bool = True, ocr_language: str = "eng", dpi: int = 300):
        self.dpi = dpi
        self.table_extractor = TableExtractor()

        self.ocr_extractor: Optional[OCRExtractor] = None
        if ocr_enabled:
            self.ocr_extractor = OCRExtractor(lang=ocr_language, dpi=dpi)

        logger.info(
            f"LocalAnalysisClient initialized: "
            f"ocr={self.ocr_available}, dpi={dpi}"
        )

    @property
    def ocr_available(self) -> bool:
        return bool(self.ocr_extractor and self.ocr_extractor.available)

    def is_ready(self) -> bool:
        return True

    async def analyze(self, data: bytes, mode: AnalysisMode) -> AnalysisResult:
        return await asyncio.to_thread(self._analyze, data, mode)

    def _analyze(self, data: bytes, mode: AnalysisMode) -> AnalysisResult:
        if b"%PDF" in data[:1024]:
            return self._analyze_pdf(data, mode)
        return self._analyze_image(data)

    def _analyze_pdf(self, data: bytes, mode: AnalysisMode) -> AnalysisResult:
        pages = []

        with fitz.open(stream=data, filetype="pdf") as doc:
            logger.debug(f"Analyzing {doc.page_count} PDF pages")

            for index, page in enumerate(doc):
                texts = [line.strip() for line in page.get_text("text").splitlines() if line.strip()]

                if not texts and self.ocr_available:
                    logger.debug(f"Page {index + 1} has no text layer, applying OCR")
                    texts = self.ocr_extractor.extract_lines(self._render_page(page))

                pages.append(AnalyzedPage(page_number=index + 1, lines=_to_lines(texts)))

        tables: List[ExtractedTable] = []
        if mode == "layout":
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                for page_number, page in enumerate(pdf.pages, start=1):
                    tables.extend(self.table_extractor.extract_tables(page, page_number))

        return AnalysisResult(pages=pages, tables=tables)

    def _render_page(self, page: fitz.Page) -> Image.Image:
        pix = page.get_pixmap(dpi=self.dpi)
        return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)

    def _analyze_image(self, data: bytes) -> AnalysisResult:
        if not self.ocr_available:
            raise AnalysisServiceError("Tesseract OCR is not available")

        pages = []
        with Image.open(io.BytesIO(data)) as image:
            # Multi-page TIFFs yield one frame per page
            for index, frame in enumerate(ImageSequence.Iterator(image)):
                texts = self.ocr_extractor.extract_lines(frame.convert("RGB"))
                pages.append(AnalyzedPage(page_number=index + 1, lines=_to_lines(texts)))

        return AnalysisResult(pages=pages)


# ==================== Azure Document Intelligence ====================
class AzureDocumentIntelligenceClient:
    """Azure Document Intelligence over its REST API."""

    name = "azure"

    MODEL_IDS = {
        "layout": "prebuilt-layout",
        "read": "prebuilt-read",
    }

    def __init__(
            self,
            endpoint: str,
            api_key: str,
            api_version: str = "2023-07-31",
            poll_interval: float = 1.0,
            timeout: float = 300.0,
            transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.api_version = api_version
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.transport = transport

    def is_ready(self) -> bool:
        return bool(self.endpoint and self.api_key)

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Ocp-Apim-Subscription-Key": self.api_key}

    async def analyze(self, data: bytes, mode: AnalysisMode) -> AnalysisResult:
        model_id = self.MODEL_IDS[mode]
        url = f"{self.endpoint}/formrecognizer/documentModels/{model_id}:analyze"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                url,
                params={"api-version": self.api_version},
                headers={**self._headers, "Content-Type": "application/octet-stream"},
                content=data
            )
            if response.status_code != 202:
                raise AnalysisServiceError(
                    f"Analyze request failed: {response.status_code} {response.text}",
                    status_code=response.status_code
                )

            operation_url = response.headers.get("Operation-Location")
            if not operation_url:
                raise AnalysisServiceError("Analyze response has no Operation-Location header")

            logger.debug(f"Polling {model_id} operation")
            payload = await self._wait_for_completion(client, operation_url)

        return self._parse_result(payload.get("analyzeResult") or {})

    async def _wait_for_completion(self, client: httpx.AsyncClient, operation_url: str) -> Dict[str, Any]:
        while True:
            response = await client.get(operation_url, headers=self._headers)
            if response.status_code != 200:
                raise AnalysisServiceError(
                    f"Operation poll failed: {response.status_code}",
                    status_code=response.status_code
                )

            payload = response.json()
            status = str(payload.get("status", "")).lower()

            if status == "succeeded":
                return payload
            if status == "failed":
                error = payload.get("error") or {}
                raise AnalysisServiceError(f"Analysis failed: {error.get('message', 'unknown error')}")

            await asyncio.sleep(self.poll_interval)

    @staticmethod
    def _parse_result(result: Dict[str, Any]) -> AnalysisResult:
        pages = [
            AnalyzedPage(
                page_number=page["pageNumber"],
                lines=_to_lines([line.get("content", "") for line in page.get("lines") or []])
            )
            for page in result.get("pages") or []
        ]
        pages.sort(key=lambda p: p.page_number)

        tables = []
        for table in result.get("tables") or []:
            regions = table.get("boundingRegions") or [{}]
            tables.append(ExtractedTable(
                row_count=table.get("rowCount", 0),
                column_count=table.get("columnCount", 0),
                cells=[
                    TableCell(
                        row_index=cell["rowIndex"],
                        column_index=cell["columnIndex"],
                        content=cell.get("content", "")
                    )
                    for cell in table.get("cells") or []
                ],
                page_number=regions[0].get("pageNumber")
            ))

        return AnalysisResult(pages=pages, tables=tables)


# ==================== Factory ====================
def create_analysis_client(config: Settings) -> AnalysisClient:
    """Build the analysis client selected by ANALYSIS_BACKEND."""
    if config.ANALYSIS_BACKEND == "azure":
        return AzureDocumentIntelligenceClient(
            endpoint=config.DOCUMENT_INTELLIGENCE_ENDPOINT or "",
            api_key=config.DOCUMENT_INTELLIGENCE_KEY or "",
            api_version=config.DOCUMENT_INTELLIGENCE_API_VERSION,
            poll_interval=config.ANALYSIS_POLL_INTERVAL,
            timeout=config.ANALYSIS_TIMEOUT
        )

    return LocalAnalysisClient(
        ocr_enabled=config.OCR_ENABLED,
        ocr_language=config.OCR_LANGUAGE,
        dpi=config.OCR_DPI
    )


@lru_cache()
def get_analysis_client() -> AnalysisClient:
    return create_analysis_client(settings)
