"""
Configuration tests: defaults, environment overrides and the required
settings for each analysis backend.
"""
from app.core.config import Settings, get_settings, settings


def test_defaults():
    config = Settings(_env_file=None)

    assert config.API_V1_PREFIX == "/api/v1"
    assert config.ANALYSIS_BACKEND == "local"
    assert config.BLOB_DOWNLOAD_TIMEOUT == 120.0
    assert config.DOCUMENT_INTELLIGENCE_API_VERSION == "2023-07-31"
    assert config.validate_required_settings() == []


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ANALYSIS_BACKEND", "azure")
    monkeypatch.setenv("DOCUMENT_INTELLIGENCE_ENDPOINT", "https://di.example.com")
    monkeypatch.setenv("DOCUMENT_INTELLIGENCE_KEY", "secret")
    monkeypatch.setenv("OCR_DPI", "150")

    config = Settings(_env_file=None)

    assert config.ANALYSIS_BACKEND == "azure"
    assert config.OCR_DPI == 150
    assert config.validate_required_settings() == []


def test_azure_backend_requires_endpoint_and_key():
    errors = Settings(_env_file=None, ANALYSIS_BACKEND="azure").validate_required_settings()

    assert errors == [
        "DOCUMENT_INTELLIGENCE_ENDPOINT is required",
        "DOCUMENT_INTELLIGENCE_KEY is required",
    ]


def test_non_positive_download_timeout_is_reported():
    errors = Settings(_env_file=None, BLOB_DOWNLOAD_TIMEOUT=0).validate_required_settings()
    assert errors == ["BLOB_DOWNLOAD_TIMEOUT must be positive"]


def test_get_settings_returns_global_instance():
    assert get_settings() is settings


def test_routes_depend_on_the_same_settings_provider():
    from app.api import deps
    from app.core import config

    assert deps.get_settings is config.get_settings
