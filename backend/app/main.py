"""
Document Converter API.

Run from backend/:
    uvicorn app.main:app --reload
"""
from contextlib import asynccontextmanager

import dotenv
from fastapi import FastAPI

from app.api.middleware.cors import setup_cors
from app.api.middleware.error_handler import ErrorMiddleware
from app.api.routes import api_router
from app.core.config import settings
from app.services.conversion_service import DISPATCH_TABLE
from app.utils.logger import get_logger

dotenv.load_dotenv()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({'debug' if settings.DEBUG else 'production'})")

    errors = settings.validate_required_settings()
    for error in errors:
        logger.warning(f"Configuration: {error}")

    # Resolve the analysis backend up front so a bad setup shows in the startup log
    from app.services.analysis_client import get_analysis_client
    try:
        client = get_analysis_client()
        if client.is_ready() and not errors:
            logger.info(f"Analysis backend ready: {client.name}")
        else:
            logger.warning(f"Analysis backend '{client.name}' is not configured; PDF and image conversions will fail")
    except Exception as e:
        logger.error(f"Analysis backend error: {e}")

    logger.info(f"Listening on http://{settings.HOST}:{settings.PORT}{settings.API_V1_PREFIX}")

    yield

    logger.info("Shutting down")


app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="Converts PDF, Word, Excel and image documents into annotated plain text",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
)

app.add_middleware(ErrorMiddleware)
setup_cors(app)
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root():
    """Service name, version and the MIME types it converts."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "convert": f"{settings.API_V1_PREFIX}/convert",
        "supportedMimeTypes": sorted(DISPATCH_TABLE),
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    try:
        uvicorn.run(
            "app.main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.DEBUG,
            log_level=settings.LOG_LEVEL.lower()
        )
    except KeyboardInterrupt:
        logger.info("Server stopped")
