"""
OCR Extractor - Handles OCR processing for images and scanned pages.

Single responsibility: Extract text lines from images using Tesseract.
"""
from typing import Any, Dict, List, Optional

import pytesseract
from PIL import Image

from app.utils.logger import get_logger

logger = get_logger(__name__)


class OCRExtractor:
    """Extracts text from raster images using OCR."""

    def __init__(self, lang: str = "eng", dpi: int = 300):
        """
        Initialize OCR extractor.

        Args:
            lang: OCR language (default: English)
            dpi: Resolution used when rasterizing PDF pages for OCR
        """
        self.lang = lang
        self.dpi = dpi
        self.available = False

        try:
            version = pytesseract.get_tesseract_version()
            self.available = True
            logger.info(f"OCR extractor initialized (tesseract {version})")

        except (pytesseract.TesseractNotFoundError, OSError):
            logger.warning(
                "tesseract binary not found. "
                "OCR will not be available."
            )

    def extract_text(self, image: Image.Image) -> Optional[Dict[str, Any]]:
        """
        Run OCR on a single image.

        Args:
            image: PIL image (one page or one frame)

        Returns:
            Dict with 'text' and 'confidence' keys, or None if OCR is unavailable
        """
        if not self.available:
            return None

        ocr_text = pytesseract.image_to_string(image, lang=self.lang)

        ocr_data = pytesseract.image_to_data(
            image,
            lang=self.lang,
            output_type=pytesseract.Output.DICT
        )
        confidences = [
            float(c) for c in ocr_data.get("conf", []) if float(c) >= 0
        ]
        avg_confidence = (
            sum(confidences) / len(confidences) / 100.0
            if confidences else 0.0
        )

        logger.debug(
            f"OCR: confidence={avg_confidence:.2f}, "
            f"text_length={len(ocr_text.strip())}"
        )

        return {
            "text": ocr_text.strip(),
            "confidence": avg_confidence
        }

    def extract_lines(self, image: Image.Image) -> List[str]:
        """Recognized non-blank lines, top to bottom."""
        result = self.extract_text(image)
        if not result:
            return []
        return [line.strip() for line in result["text"].splitlines() if line.strip()]
