from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_analysis_client_dep, get_settings
from app.core.config import Settings
from app.services.analysis_client import AnalysisClient
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health")
async def health_check(
        client: AnalysisClient = Depends(get_analysis_client_dep),
        config: Settings = Depends(get_settings)
):
    """Health check endpoint."""
    logger.info("Checking system health...")

    errors = config.validate_required_settings()
    analysis_ready = client.is_ready() and not errors

    health_status = {
        "status": "healthy" if analysis_ready else "degraded",
        "services": {
            "analysis": {
                "backend": client.name,
                "status": "healthy" if analysis_ready else "unhealthy",
            }
        },
        "errors": errors,
    }

    if not analysis_ready:
        logger.warning(f"Analysis backend '{client.name}' not ready: {errors}")

    status_code = 200 if analysis_ready else 503
    logger.info(f"Health check endpoint received: {status_code}")
    return JSONResponse(content=health_status, status_code=status_code)
