import logging
import time
from typing import FrozenSet, Optional

import pytesseract
from pytesseract import TesseractError, TesseractNotFoundError

from ..schema import EngineResult, HintStep, RecognitionStatus
from .itxt import ITxtEngine

logger = logging.getLogger("ocr_service")


def _cfg(psm: int, tessdata_dir: str) -> str:
    cfg = f"--oem 3 --psm {psm}"
    if tessdata_dir:
        cfg += f' --tessdata-dir "{tessdata_dir}"'
    return cfg


class TesseractEngine(ITxtEngine):
    """
    Tesseract through pytesseract (one subprocess per call).

    The binary path is pinned once at construction; language data is passed
    per call via --tessdata-dir so nothing in the process environment changes.
    Every call is bounded by `timeout_seconds`; timeouts and non-zero exits
    are reported as statuses, never raised.
    """

    def __init__(self, tesseract_path: str, tessdata_dir: str, *, timeout_seconds: float = 15.0) -> None:
        self.tesseract_path = tesseract_path
        self.tessdata_dir = tessdata_dir
        self.timeout_seconds = float(timeout_seconds)
        if tesseract_path:
            pytesseract.pytesseract.tesseract_cmd = tesseract_path
        self._languages = self._probe_languages()

    def _probe_languages(self) -> Optional[FrozenSet[str]]:
        try:
            cfg = f'--tessdata-dir "{self.tessdata_dir}"' if self.tessdata_dir else ""
            langs = pytesseract.get_languages(config=cfg)
        except (TesseractError, TesseractNotFoundError, OSError, RuntimeError) as e:
            logger.warning("Could not list Tesseract languages: %s", e)
            return None
        found = frozenset(str(x).strip() for x in langs if str(x).strip())
        logger.info("Tesseract languages available: %s", ", ".join(sorted(found)) or "-")
        return found or None

    def available_languages(self) -> Optional[FrozenSet[str]]:
        return self._languages

    def is_available(self) -> bool:
        return bool(self.tesseract_path)

    def run(self, image_path: str, step: HintStep) -> EngineResult:
        t0 = time.monotonic()
        try:
            raw = pytesseract.image_to_string(
                image_path,
                lang=step.lang,
                config=_cfg(step.psm, self.tessdata_dir),
                timeout=self.timeout_seconds,
            )
        except (TesseractError, TesseractNotFoundError, OSError) as e:
            logger.warning("Tesseract failed (psm=%s lang=%s): %s", step.psm, step.lang, e)
            return EngineResult(RecognitionStatus.ENGINE_ERROR, "", str(e))
        except RuntimeError as e:
            # pytesseract signals a killed (timed out) process with a bare RuntimeError.
            logger.warning("Tesseract timed out after %.1fs (psm=%s lang=%s)", time.monotonic() - t0, step.psm, step.lang)
            return EngineResult(RecognitionStatus.TIMEOUT, "", str(e))

        text = (raw or "").strip()
        logger.debug("Tesseract psm=%s lang=%s -> %d chars in %.2fs", step.psm, step.lang, len(text), time.monotonic() - t0)
        if not text:
            return EngineResult(RecognitionStatus.EMPTY)
        return EngineResult(RecognitionStatus.SUCCESS, text)
