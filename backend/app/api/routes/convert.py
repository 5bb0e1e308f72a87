"""
Document Conversion Routes.

POST /convert takes a JSON ConversionRequest, downloads the blob and returns
the converted text wrapped in the response DTO.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import get_blob_downloader_dep, get_conversion_service_dep
from app.core.exceptions import BlobDownloadError, InvalidConversionRequestError
from app.models.document import ConversionErrorResponse, ConversionRequest, TIMESTAMP_FORMAT
from app.services.blob_service import BlobDownloader
from app.services.conversion_service import ConversionService
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _error_response(status_code: int, error: str, with_timestamp: bool = False) -> JSONResponse:
    body = ConversionErrorResponse(
        error=error,
        timestamp=datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT) if with_timestamp else None
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post("/convert")
async def convert_document(
        request: Request,
        service: ConversionService = Depends(get_conversion_service_dep),
        downloader: BlobDownloader = Depends(get_blob_downloader_dep)
):
    """
    Convert a document stored in blob storage.

    Raises:
        400: Body is not a JSON object, or BlobUrl/FileName missing
        500: Blob download failed
    """
    logger.info("Document conversion request received")

    # Parsed by hand so that key matching stays case-insensitive
    try:
        payload = await request.json()
        conversion_request = ConversionRequest.model_validate(payload if isinstance(payload, dict) else {})
    except ValueError as e:
        logger.warning(f"Invalid request body: {e}")
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    try:
        result = await service.convert_blob(conversion_request, downloader)

    except InvalidConversionRequestError as e:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(e))

    except BlobDownloadError as e:
        logger.error(f"Error converting document: {e}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e), with_timestamp=True)

    return JSONResponse(content=result.to_response())
