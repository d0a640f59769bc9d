from __future__ import annotations

import logging
import os
import tempfile
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple

import cv2 as cv
import numpy as np

from .engines.itxt import ITxtEngine
from .preprocess import prepare_region
from .schema import EngineResult, HintStep, RecognitionStatus, Region

logger = logging.getLogger("ocr_service")


def build_ladder(psms: Iterable[int], languages: Sequence[str]) -> Tuple[HintStep, ...]:
    langs = tuple(languages)
    return tuple(HintStep(int(p), langs) for p in psms)


def resolve_languages(requested: Sequence[str], available: Optional[FrozenSet[str]]) -> Tuple[str, ...]:
    """
    Drop language packs that are not installed.

    The primary (first) language is always kept: when nothing else survives the
    call degrades to the primary language alone instead of failing outright.
    """
    requested = tuple(requested)
    if not requested or available is None:
        return requested
    kept = tuple(lang for lang in requested if lang in available)
    return kept or requested[:1]


class RecognitionAdapter:
    """Runs an engine over a fixed hint ladder; first non-blank success wins."""

    def __init__(self, engine: ITxtEngine) -> None:
        self.engine = engine

    def _effective(self, step: HintStep) -> HintStep:
        langs = resolve_languages(step.languages, self.engine.available_languages())
        if langs != step.languages:
            logger.debug("Languages %s unavailable; using %s", step.lang, "+".join(langs))
            return HintStep(step.psm, langs)
        return step

    def recognize(self, image_file: str, ladder: Sequence[HintStep]) -> str:
        for i, step in enumerate(ladder, start=1):
            eff = self._effective(step)
            res = self._attempt(image_file, eff)
            if res.status is RecognitionStatus.ENGINE_ERROR and len(eff.languages) > 1:
                # usually a missing secondary language pack the startup probe could not see
                eff = HintStep(eff.psm, eff.languages[:1])
                logger.debug("Retrying psm=%s with primary language %s", eff.psm, eff.lang)
                res = self._attempt(image_file, eff)
            if res.usable:
                logger.debug("Attempt %d/%d (psm=%s) succeeded", i, len(ladder), eff.psm)
                return res.text.strip()
            logger.debug("Attempt %d/%d (psm=%s) -> %s", i, len(ladder), eff.psm, res.status.value)
        return ""

    def _attempt(self, image_file: str, step: HintStep) -> EngineResult:
        try:
            return self.engine.run(image_file, step)
        except Exception as e:  # engine contract is no-raise; a failed rung never aborts the ladder
            logger.warning("Engine raised on psm=%s: %s", step.psm, e)
            return EngineResult(RecognitionStatus.ENGINE_ERROR, "", str(e))

    def recognize_array(self, arr: np.ndarray, ladder: Sequence[HintStep], *, name: str = "image.png") -> str:
        """Write `arr` to a private temp dir, recognize it, and always remove the file."""
        with tempfile.TemporaryDirectory(prefix="ocr_") as tmp:
            path = os.path.join(tmp, name)
            if not cv.imwrite(path, arr):
                logger.warning("Failed to write %s for recognition", name)
                return ""
            return self.recognize(path, ladder)

    def recognize_image(self, image: np.ndarray, ladder: Sequence[HintStep]) -> str:
        return self.recognize_array(image, ladder, name="image.png")

    def recognize_region(self, image: np.ndarray, region: Region, ladder: Sequence[HintStep]) -> str:
        roi = image[region.y0:region.y1, region.x0:region.x1]
        if roi.size == 0:
            return ""
        return self.recognize_array(prepare_region(roi), ladder, name="region.png")
