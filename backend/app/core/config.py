"""
Core configuration for the Document Converter service.

This module centralizes all application settings using Pydantic for type safety
and validation. Settings are loaded from environment variables (and .env).
"""
from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    # ==================== Pydantic Settings ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    APP_NAME: str = "Construction Document Converter"
    APP_VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    # ==================== Development Defaults ====================
    DEBUG: bool = True
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # CORS - Development default
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5678",  # n8n
        "http://127.0.0.1:3000",
    ]

    # ==================== Blob Download ====================
    BLOB_DOWNLOAD_TIMEOUT: float = 120.0  # seconds
    MAX_DOWNLOAD_SIZE: int = 104857600  # 100MB in bytes

    # ==================== Layout / OCR Analysis ====================
    # "local" runs pdfplumber + PyMuPDF + Tesseract in-process,
    # "azure" calls the Azure Document Intelligence REST API.
    ANALYSIS_BACKEND: Literal["local", "azure"] = "local"

    DOCUMENT_INTELLIGENCE_ENDPOINT: Optional[str] = None
    DOCUMENT_INTELLIGENCE_KEY: Optional[str] = None
    DOCUMENT_INTELLIGENCE_API_VERSION: str = "2023-07-31"
    ANALYSIS_POLL_INTERVAL: float = 1.0
    ANALYSIS_TIMEOUT: float = 300.0

    # Local OCR
    OCR_ENABLED: bool = True
    OCR_LANGUAGE: str = "eng"
    OCR_DPI: int = 300

    # ==================== Logging ====================
    LOG_FORMAT: str = "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"

    def validate_required_settings(self) -> list[str]:
        """
        Validate that all required external dependencies are configured.

        Returns:
            List of validation errors (empty if all valid)
        """
        errors = []

        if self.ANALYSIS_BACKEND == "azure":
            if not self.DOCUMENT_INTELLIGENCE_ENDPOINT:
                errors.append("DOCUMENT_INTELLIGENCE_ENDPOINT is required")
            if not self.DOCUMENT_INTELLIGENCE_KEY:
                errors.append("DOCUMENT_INTELLIGENCE_KEY is required")

        if self.BLOB_DOWNLOAD_TIMEOUT <= 0:
            errors.append("BLOB_DOWNLOAD_TIMEOUT must be positive")

        return errors


# ==================== Global Settings Instance ====================
settings = Settings()


# ==================== Helper Functions ====================
@lru_cache()
def get_settings() -> Settings:
    """
    Dependency function for FastAPI routes.

    Usage:
        @app.get("/config")
        def get_config(settings: Settings = Depends(get_settings)):
            return {"backend": settings.ANALYSIS_BACKEND}
    """
    return settings
