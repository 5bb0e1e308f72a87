"""
Pydantic schemas for document conversion - defines the data structures passed
between the dispatcher, the extractors and the API layer.
"""
from collections import defaultdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

AnalysisMode = Literal["layout", "read"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentFormat(str, Enum):
    """Document families the converter knows how to extract."""
    PDF = "pdf"
    WORD = "word"
    EXCEL = "excel"
    IMAGE = "image"


# ==================== Extracted Fragments ====================
class TextLine(BaseModel):
    """A single line of text, in document order."""
    content: str


class TableShape(BaseModel):
    """Dimensions of a detected table."""
    row_count: int
    column_count: int


class TableCell(BaseModel):
    """
    One table cell addressed by 0-based row/column indices.

    Spreadsheet cells also carry their native A1-style address.
    """
    row_index: int = Field(..., ge=0)
    column_index: int = Field(..., ge=0)
    content: str = ""
    address: Optional[str] = None


class ExtractedTable(BaseModel):
    """
    A table as a flat list of cells, in detection order.
    """
    row_count: int = Field(0, ge=0)
    column_count: int = Field(0, ge=0)
    cells: List[TableCell] = Field(default_factory=list)
    page_number: Optional[int] = Field(None, description="Page where the table was found (PDF only)")

    @property
    def shape(self) -> TableShape:
        return TableShape(row_count=self.row_count, column_count=self.column_count)

    def rows(self) -> List[List[TableCell]]:
        """Group cells by row index, each row ordered by column index."""
        grouped: Dict[int, List[TableCell]] = defaultdict(list)
        for cell in self.cells:
            grouped[cell.row_index].append(cell)

        return [
            sorted(grouped[row_index], key=lambda c: c.column_index)
            for row_index in sorted(grouped)
        ]


# ==================== Layout / OCR Analysis ====================
class AnalyzedPage(BaseModel):
    """Text lines recognized on one page (1-indexed)."""
    page_number: int = Field(..., ge=1)
    lines: List[TextLine] = Field(default_factory=list)

    @property
    def texts(self) -> List[str]:
        return [line.content for line in self.lines]


class AnalysisResult(BaseModel):
    """
    Output of a layout/OCR analysis call.

    Tables are kept at document level, in detection order.
    """
    pages: List[AnalyzedPage] = Field(default_factory=list)
    tables: List[ExtractedTable] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)


# ==================== Per-type Extractions ====================
class WordExtraction(BaseModel):
    """Paragraphs and tables from an Open XML word-processing package."""
    paragraphs: List[TextLine] = Field(default_factory=list)
    tables: List[ExtractedTable] = Field(default_factory=list)


class WorksheetExtraction(BaseModel):
    """Used range of a single worksheet."""
    name: str
    used_range: Optional[str] = Field(None, description="A1-style address, None when the sheet is empty")
    table: Optional[ExtractedTable] = None

    @property
    def is_empty(self) -> bool:
        return self.used_range is None


class WorkbookExtraction(BaseModel):
    worksheets: List[WorksheetExtraction] = Field(default_factory=list)


# ==================== API Request/Response Models ====================
class ConversionRequest(BaseModel):
    """
    Conversion request sent by the workflow engine.

    Keys are matched case-insensitively, so ``BlobUrl``, ``blobUrl`` and
    ``blob_url`` all bind to the same field.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    blob_url: str = Field("", alias="blobUrl")
    file_name: str = Field("", alias="fileName")
    mime_type: str = Field("", alias="mimeType")
    client: str = ""
    category: str = ""

    @model_validator(mode="before")
    @classmethod
    def match_keys_case_insensitively(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        lookup = {"bloblocation": "blob_url"}
        for name, field in cls.model_fields.items():
            lookup[name.lower()] = name
            lookup[name.replace("_", "")] = name
            if field.alias:
                lookup[field.alias.lower()] = name

        normalized = {}
        for key, value in data.items():
            field_name = lookup.get(str(key).lower(), key)
            normalized[field_name] = "" if value is None else value
        return normalized

    @property
    def missing_fields(self) -> List[str]:
        """Required fields that are empty."""
        missing = []
        if not self.blob_url.strip():
            missing.append("BlobUrl")
        if not self.file_name.strip():
            missing.append("FileName")
        return missing


class ConversionResult(BaseModel):
    """
    Result of one conversion.

    Serialized with the camelCase keys the workflow engine expects.
    """
    success: bool
    file_name: str = Field("", serialization_alias="fileName")
    client: str = ""
    category: str = ""
    converted_text: str = Field("", serialization_alias="convertedContent")
    method_label: str = Field("Unknown", serialization_alias="conversionMethod")
    converted_at: datetime = Field(default_factory=utc_now, serialization_alias="convertedAt")
    converted_byte_size: int = Field(0, serialization_alias="convertedSize")
    error: Optional[str] = None

    @field_serializer("converted_at")
    def format_converted_at(self, value: datetime) -> str:
        return value.strftime(TIMESTAMP_FORMAT)

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ConversionErrorResponse(BaseModel):
    """
    Error response when the request is rejected or the download fails.
    """
    success: bool = False
    error: str
    timestamp: Optional[str] = None
