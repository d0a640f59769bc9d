"""OCR text extraction service: positioned text from images, optional store/food narrowing."""

__version__ = "1.0.0"
