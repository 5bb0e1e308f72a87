"""
Exception types raised across the conversion pipeline.

Only InvalidConversionRequestError and BlobDownloadError reach the caller;
everything raised while extracting is rendered inline by the dispatcher.
"""


class ConversionError(Exception):
    """Base class for all conversion failures."""


class InvalidConversionRequestError(ConversionError):
    """The request is missing a blob location or file name."""


class ExtractionError(ConversionError):
    """A parsing/OCR library failed while reading the document."""


class AnalysisServiceError(ExtractionError):
    """The layout/OCR analysis backend failed or returned a failed operation."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BlobDownloadError(ConversionError):
    """The document bytes could not be fetched from blob storage."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
