from __future__ import annotations


class OcrServiceError(Exception):
    """Base class for errors surfaced by the OCR service."""


class ConfigurationError(OcrServiceError):
    """Tesseract binary or language data could not be located at startup."""


class ImageDecodeError(OcrServiceError):
    """Uploaded bytes are not a readable image."""


class SemanticServiceError(OcrServiceError):
    """The language-model collaborator failed (auth, network, timeout, bad payload)."""
