from typing import Optional

from ...config import Settings
from .itxt import ITxtEngine
from .tess import TesseractEngine


def make_engine(settings: Settings, name: Optional[str] = None) -> ITxtEngine:
    """
    Factory. Supported names:
      - 'tesseract' (default)
    """
    n = (name or "tesseract").strip().lower()
    if n not in ("tesseract", "tess"):
        raise ValueError(f"unsupported OCR engine: {name}")
    return TesseractEngine(
        settings.tesseract_path,
        settings.tessdata_dir,
        timeout_seconds=settings.timeout_seconds,
    )


__all__ = [
    "ITxtEngine",
    "TesseractEngine",
    "make_engine",
]
