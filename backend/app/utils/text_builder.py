"""
Text Section Builder - assembles the section-delimited output document.

Every section starts with a ``=== TITLE ===`` marker; sub-sections inside a
body use ``--- Title ---`` separators preceded by a blank line.
"""
from datetime import datetime
from typing import Iterable, List

from app.models.document import TIMESTAMP_FORMAT


def format_timestamp(moment: datetime) -> str:
    """Render a UTC timestamp as ``YYYY-MM-DD HH:MM:SS UTC``."""
    return f"{moment.strftime(TIMESTAMP_FORMAT)} UTC"


class TextSectionBuilder:
    """Growing line buffer with the section conventions of the converter."""

    def __init__(self):
        self._lines: List[str] = []

    def section(self, title: str) -> "TextSectionBuilder":
        self._lines.append(f"=== {title} ===")
        return self

    def subsection(self, title: str) -> "TextSectionBuilder":
        self._lines.append("")
        self._lines.append(f"--- {title} ---")
        return self

    def line(self, text: str = "") -> "TextSectionBuilder":
        self._lines.append(text)
        return self

    def lines(self, texts: Iterable[str]) -> "TextSectionBuilder":
        self._lines.extend(texts)
        return self

    def blank(self) -> "TextSectionBuilder":
        return self.line("")

    def field(self, label: str, value) -> "TextSectionBuilder":
        return self.line(f"{label}: {value}")

    def extend(self, other: "TextSectionBuilder") -> "TextSectionBuilder":
        self._lines.extend(other._lines)
        return self

    def __len__(self) -> int:
        return len(self._lines)

    def build(self) -> str:
        """Join all lines, each terminated by a newline."""
        return "".join(f"{line}\n" for line in self._lines)


# ==================== Envelope ====================
def build_header(
        builder: TextSectionBuilder,
        file_name: str,
        client: str,
        category: str,
        uploaded_at: datetime
) -> TextSectionBuilder:
    """Fixed header block that opens every converted document."""
    return (
        builder
        .section("DOCUMENT ANALYSIS")
        .field("File", file_name)
        .field("Client", client)
        .field("Category", category)
        .field("Upload Date", format_timestamp(uploaded_at))
        .blank()
    )


def build_footer(
        builder: TextSectionBuilder,
        byte_size: int,
        mime_type: str,
        method_label: str,
        processed_at: datetime
) -> TextSectionBuilder:
    """Fixed metadata footer that closes every converted document."""
    return (
        builder
        .blank()
        .section("METADATA")
        .field("File Size", f"{byte_size:,} bytes")
        .field("MIME Type", mime_type)
        .field("Processing Method", method_label)
        .field("Processed", format_timestamp(processed_at))
    )
