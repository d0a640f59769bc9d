from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..config import DetectorConfig, FilterConfig, Settings
from .engines import make_engine
from .engines.itxt import ITxtEngine
from .preprocess import decode_image
from .recognize import RecognitionAdapter, build_ladder
from .regions import RegionDetector
from .repair import dedupe, keep, normalize
from .schema import HintStep, TextElement

logger = logging.getLogger("ocr_service")


@dataclass(frozen=True)
class PipelineOptions:
    full_ladder: Tuple[HintStep, ...]
    region_ladder: Tuple[HintStep, ...]
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)

    @staticmethod
    def from_settings(settings: Settings) -> "PipelineOptions":
        return PipelineOptions(
            full_ladder=build_ladder(settings.full_psm_ladder, settings.languages),
            region_ladder=build_ladder(settings.region_psm_ladder, settings.languages),
            detector=settings.detector,
            filters=settings.filters,
        )


class ConsolidationPipeline:
    """
    image -> regions -> recognition (whole image first, then each region)
          -> normalize -> noise filter -> dedupe

    Holds only immutable configuration and the engine; safe to share across
    request threads.
    """

    def __init__(self, engine: ITxtEngine, options: PipelineOptions) -> None:
        self.options = options
        self.adapter = RecognitionAdapter(engine)
        self.detector = RegionDetector(options.detector)

    @property
    def engine(self) -> ITxtEngine:
        return self.adapter.engine

    def extract_text(self, image_bytes: bytes) -> List[TextElement]:
        """Decode an upload and run the full pipeline. Raises ImageDecodeError."""
        return self.extract_from_image(decode_image(image_bytes))

    def extract_from_image(self, image: np.ndarray) -> List[TextElement]:
        t0 = time.monotonic()
        img_h, img_w = image.shape[:2]
        short_max = self.options.filters.short_line_max

        candidates: List[TextElement] = []

        full_raw = self.adapter.recognize_image(image, self.options.full_ladder)
        full_text = normalize(full_raw, short_line_max=short_max)
        if full_text:
            candidates.append(TextElement(full_text, img_w // 2, img_h // 2))
        logger.debug("Whole-image OCR: %d raw chars -> %r", len(full_raw), full_text)

        regions = self.detector.detect(image)
        for i, region in enumerate(regions, start=1):
            raw = self.adapter.recognize_region(image, region, self.options.region_ladder)
            text = normalize(raw, short_line_max=short_max)
            if not text:
                continue
            cx, cy = region.center()
            candidates.append(TextElement(text, cx, cy))
            logger.debug("Region %d %s -> %r", i, region.bbox, text)

        results = dedupe(keep(candidates, self.options.filters))
        logger.info(
            "OCR extraction on %dx%d: %d regions, %d candidates, %d results in %.2fs",
            img_w, img_h, len(regions), len(candidates), len(results), time.monotonic() - t0,
        )
        return results


def make_pipeline(settings: Settings, engine: Optional[ITxtEngine] = None) -> ConsolidationPipeline:
    if engine is None:
        engine = make_engine(settings)
    return ConsolidationPipeline(engine, PipelineOptions.from_settings(settings))
