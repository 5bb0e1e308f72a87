"""
Extractors package - Specialized content extractors.

Per-type extractors (selected by MIME type in services/conversion_service.py):
- PDFExtractor: layout analysis, tables, dimension lines
- WordExtractor: paragraphs and tables (python-docx)
- ExcelExtractor: worksheet used ranges and construction data (openpyxl)
- ImageExtractor: OCR text lines

Building blocks used by the local analysis client:
- TableExtractor: pdfplumber tables
- OCRExtractor: Tesseract OCR
"""
