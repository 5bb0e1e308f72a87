"""
Convert a local file with the same pipeline the API uses.

Usage (from backend/):
    python -m scripts.convert_file path/to/drawing.pdf --client acme --category plans
    python -m scripts.convert_file takeoff.xlsx --output takeoff.txt
"""
import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from app.core.config import settings
from app.models.document import ConversionRequest
from app.services.analysis_client import create_analysis_client
from app.services.conversion_service import create_conversion_service
from app.utils.logger import get_logger

logger = get_logger(__name__)

EXTENSION_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xls": "application/vnd.ms-excel",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}


def guess_mime_type(path: Path) -> str:
    mime_type = EXTENSION_MIME_TYPES.get(path.suffix.lower())
    if mime_type:
        return mime_type
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Convert a document to annotated plain text")
    parser.add_argument("path", type=Path, help="File to convert")
    parser.add_argument("--mime-type", help="Override the MIME type guessed from the extension")
    parser.add_argument("--client", default="", help="Client name for the header")
    parser.add_argument("--category", default="", help="Document category for the header")
    parser.add_argument("--output", type=Path, help="Write the text here instead of stdout")
    return parser.parse_args(argv)


async def convert_file(args: argparse.Namespace) -> str:
    data = args.path.read_bytes()
    request = ConversionRequest(
        blob_url=args.path.resolve().as_uri(),
        file_name=args.path.name,
        mime_type=args.mime_type or guess_mime_type(args.path),
        client=args.client,
        category=args.category,
    )

    service = create_conversion_service(create_analysis_client(settings))
    result = await service.convert(data, request)
    if not result.success:
        raise ValueError(result.error)
    return result.converted_text


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    if not args.path.is_file():
        print(f"❌ File not found: {args.path}", file=sys.stderr)
        return 1

    text = asyncio.run(convert_file(args))

    if args.output:
        args.output.write_text(text, encoding="utf-8")
        logger.info(f"Wrote {len(text):,} characters to {args.output}")
    else:
        print(text, end="")

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\n⚠️ Interrupted. Goodbye!\n")
        sys.exit(130)
