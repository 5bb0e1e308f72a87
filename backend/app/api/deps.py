"""
API Dependencies - Shared dependencies for FastAPI routes.

Routes receive services through Depends(), so tests can swap them with
``app.dependency_overrides``.
"""
from app.core.config import get_settings
from app.services.analysis_client import AnalysisClient, get_analysis_client
from app.services.blob_service import BlobDownloader, get_blob_downloader
from app.services.conversion_service import ConversionService, get_conversion_service

__all__ = [
    "get_settings",
    "get_conversion_service_dep",
    "get_blob_downloader_dep",
    "get_analysis_client_dep",
]


# ==================== Services ====================

def get_conversion_service_dep() -> ConversionService:
    """
    Get the conversion service singleton.

    Usage:
        @router.post("/convert")
        async def convert(
            service: ConversionService = Depends(get_conversion_service_dep)
        ):
            ...
    """
    return get_conversion_service()


def get_blob_downloader_dep() -> BlobDownloader:
    return get_blob_downloader()


def get_analysis_client_dep() -> AnalysisClient:
    return get_analysis_client()
