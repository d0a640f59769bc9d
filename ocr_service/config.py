from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from .errors import ConfigurationError

logger = logging.getLogger("ocr_service")


TESSERACT_CANDIDATES: Tuple[str, ...] = (
    "/usr/bin/tesseract",
    "/usr/local/bin/tesseract",
    "/opt/homebrew/bin/tesseract",
)

TESSDATA_CANDIDATES: Tuple[str, ...] = (
    "/usr/share/tesseract-ocr/5/tessdata",
    "/usr/share/tesseract-ocr/4.00/tessdata",
    "/usr/share/tessdata",
    "/usr/local/share/tessdata",
    "/opt/homebrew/share/tessdata",
)


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_csv(name: str, default_csv: str = "") -> List[str]:
    # Order matters here (primary language first, ladder order), so keep a list.
    raw = os.getenv(name, default_csv)
    return [p.strip() for p in raw.split(",") if p.strip()]


def _get_int_csv(name: str, default_csv: str) -> Tuple[int, ...]:
    out: List[int] = []
    for p in _get_csv(name, default_csv):
        try:
            out.append(int(p))
        except ValueError:
            continue
    if not out:
        out = [int(p) for p in default_csv.split(",")]
    return tuple(out)


@dataclass(frozen=True)
class DetectorConfig:
    strategies: Tuple[str, ...] = ("edges", "threshold")
    min_area: float = 100.0
    max_area: float = 50000.0
    min_width: int = 15
    min_height: int = 8
    max_height: int = 100
    padding: int = 5
    iou_threshold: float = 0.3
    # (width, height) of the closing element: bridges letter gaps, not line gaps.
    close_kernel: Tuple[int, int] = (10, 2)
    canny_low: int = 50
    canny_high: int = 150


@dataclass(frozen=True)
class FilterConfig:
    short_line_max: int = 10
    max_text_length: int = 200


@dataclass(frozen=True)
class ReconcileConfig:
    match_threshold: float = 0.3
    word_similarity: float = 0.8


@dataclass(frozen=True)
class Settings:
    # Tesseract
    tesseract_path: str
    tessdata_dir: str
    languages: Tuple[str, ...]
    timeout_seconds: float
    full_psm_ladder: Tuple[int, ...]
    region_psm_ladder: Tuple[int, ...]

    # Consolidation heuristics
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    reconcile: ReconcileConfig = field(default_factory=ReconcileConfig)

    # Language model (only needed by the semantic endpoints)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 30.0

    # General
    selftest_on_startup: bool = True
    port: int = 8000
    environment: str = "stage"

    @staticmethod
    def from_env() -> "Settings":
        detector = DetectorConfig(
            strategies=tuple(_get_csv("OCR_REGION_STRATEGIES", "edges,threshold")) or ("edges",),
            min_area=_get_float("OCR_MIN_AREA", 100.0),
            max_area=_get_float("OCR_MAX_AREA", 50000.0),
            min_width=_get_int("OCR_MIN_WIDTH", 15),
            min_height=_get_int("OCR_MIN_HEIGHT", 8),
            max_height=_get_int("OCR_MAX_HEIGHT", 100),
            padding=_get_int("OCR_PADDING", 5),
            iou_threshold=_get_float("OCR_IOU_THRESHOLD", 0.3),
        )
        filters = FilterConfig(
            short_line_max=_get_int("OCR_SHORT_LINE_MAX", 10),
            max_text_length=_get_int("OCR_MAX_TEXT_LENGTH", 200),
        )
        reconcile = ReconcileConfig(
            match_threshold=_get_float("OCR_MATCH_THRESHOLD", 0.3),
            word_similarity=_get_float("OCR_WORD_SIMILARITY", 0.8),
        )

        return Settings(
            tesseract_path=(os.getenv("TESSERACT_PATH") or "").strip(),
            tessdata_dir=(os.getenv("TESSDATA_PREFIX") or "").strip(),
            languages=tuple(_get_csv("OCR_LANGUAGES", "kor,eng")) or ("kor", "eng"),
            timeout_seconds=_get_float("OCR_TIMEOUT_SECONDS", 15.0),
            full_psm_ladder=_get_int_csv("OCR_FULL_PSM_LADDER", "3,6"),
            region_psm_ladder=_get_int_csv("OCR_REGION_PSM_LADDER", "8,7"),
            detector=detector,
            filters=filters,
            reconcile=reconcile,
            openai_api_key=(os.getenv("OPENAI_API_KEY") or "").strip(),
            openai_base_url=(os.getenv("OPENAI_BASE_URL") or "https://api.openai.com/v1").strip().rstrip("/"),
            openai_model=(os.getenv("OPENAI_MODEL") or "gpt-4o-mini").strip(),
            openai_timeout_seconds=_get_float("OPENAI_TIMEOUT_SECONDS", 30.0),
            selftest_on_startup=_get_bool("OCR_SELFTEST_ON_STARTUP", True),
            port=_get_int("PORT", 8000),
            environment=(os.getenv("ENVIRONMENT") or os.getenv("ENV") or "stage").strip() or "stage",
        )


def _first_existing(candidates: Sequence[str], *, want_dir: bool) -> Optional[str]:
    for c in candidates:
        if not c:
            continue
        if want_dir and os.path.isdir(c):
            return c
        if not want_dir and os.path.isfile(c):
            return c
    return None


def resolve_engine_paths(
    settings: Settings,
    *,
    binary_candidates: Sequence[str] = TESSERACT_CANDIDATES,
    tessdata_candidates: Sequence[str] = TESSDATA_CANDIDATES,
) -> Settings:
    """Return settings with the Tesseract binary and tessdata directory pinned.

    Explicit env values are tried first, then the fixed candidate lists; the
    first existing path wins. Raises ConfigurationError when either is missing.
    """
    binaries = [settings.tesseract_path, *binary_candidates]
    binary = _first_existing(binaries, want_dir=False) or shutil.which("tesseract")
    if not binary:
        raise ConfigurationError(f"tesseract binary not found (tried: {', '.join(b for b in binaries if b)})")

    datas = [settings.tessdata_dir, *tessdata_candidates]
    tessdata = _first_existing(datas, want_dir=True)
    if not tessdata:
        raise ConfigurationError(f"tessdata directory not found (tried: {', '.join(d for d in datas if d)})")

    logger.info("Tesseract resolved: binary=%s tessdata=%s", binary, tessdata)
    return replace(settings, tesseract_path=binary, tessdata_dir=tessdata)
