from __future__ import annotations

import logging
from typing import Callable, Dict, List, NamedTuple, Optional

import cv2 as cv
import numpy as np

from ..config import DetectorConfig
from .preprocess import to_gray
from .schema import Region

logger = logging.getLogger("ocr_service")


def _edge_map(gray: np.ndarray, cfg: DetectorConfig) -> np.ndarray:
    return cv.Canny(gray, cfg.canny_low, cfg.canny_high)


def _threshold_map(gray: np.ndarray, cfg: DetectorConfig) -> np.ndarray:
    # Ink becomes foreground (255) so contours follow the glyphs, not the background.
    return cv.adaptiveThreshold(
        gray, 255, cv.ADAPTIVE_THRESH_GAUSSIAN_C, cv.THRESH_BINARY_INV, 11, 2
    )


STRATEGIES: Dict[str, Callable[[np.ndarray, DetectorConfig], np.ndarray]] = {
    "edges": _edge_map,
    "threshold": _threshold_map,
}


class _Candidate(NamedTuple):
    region: Region  # padded, clamped
    area: float  # contour area
    width: int  # raw bounding-rect size
    height: int


def _suppress_overlaps(cands: List[_Candidate], threshold: float) -> List[_Candidate]:
    """First-seen-wins IoU suppression, vectorized against the boxes kept so far."""
    boxes = np.zeros((len(cands), 4), dtype=np.int64)
    areas = np.zeros(len(cands), dtype=np.int64)
    n = 0
    out: List[_Candidate] = []
    for c in cands:
        r = c.region
        if n:
            kb = boxes[:n]
            iw = np.clip(np.minimum(kb[:, 2], r.x1) - np.maximum(kb[:, 0], r.x0), 0, None)
            ih = np.clip(np.minimum(kb[:, 3], r.y1) - np.maximum(kb[:, 1], r.y0), 0, None)
            inter = iw * ih
            iou = inter / np.maximum(1, areas[:n] + r.area - inter)
            if (iou > threshold).any():
                continue
        boxes[n] = r.bbox
        areas[n] = r.area
        n += 1
        out.append(c)
    return out


class RegionDetector:
    """
    Finds boxes likely to hold a line/word of text.

    Each strategy yields a binary map which is closed with a wide, short
    rectangle so neighbouring glyphs fuse into one blob per text line.
    External contours from all strategies are padded and merged by IoU
    (first seen wins); the survivors are then kept by area and box-shape bands.
    """

    def __init__(self, cfg: Optional[DetectorConfig] = None) -> None:
        self.cfg = cfg or DetectorConfig()
        unknown = [s for s in self.cfg.strategies if s not in STRATEGIES]
        if unknown:
            raise ValueError(f"unknown region strategies: {unknown}")
        self._kernel = cv.getStructuringElement(cv.MORPH_RECT, tuple(self.cfg.close_kernel))

    def detect(self, image: np.ndarray) -> List[Region]:
        gray = to_gray(image)
        img_h, img_w = gray.shape[:2]

        candidates: List[_Candidate] = []
        for name in self.cfg.strategies:
            binary = STRATEGIES[name](gray, self.cfg)
            candidates.extend(self._candidates(binary, img_w, img_h, name))

        # Overlaps are settled before the bands apply, so a narrower band only
        # ever selects a subset of the same boxes.
        unique = _suppress_overlaps(candidates, self.cfg.iou_threshold)
        kept = [c.region for c in unique if self._in_bands(c)]

        logger.debug(
            "Region detection on %dx%d: %d candidates, %d after overlap merge, %d kept",
            img_w, img_h, len(candidates), len(unique), len(kept),
        )
        return kept

    def _in_bands(self, c: _Candidate) -> bool:
        cfg = self.cfg
        if not (cfg.min_area < c.area < cfg.max_area):
            return False
        return c.width > cfg.min_width and cfg.min_height < c.height < cfg.max_height

    def _candidates(self, binary: np.ndarray, img_w: int, img_h: int, name: str) -> List[_Candidate]:
        closed = cv.morphologyEx(binary, cv.MORPH_CLOSE, self._kernel)
        contours, _ = cv.findContours(closed, cv.RETR_EXTERNAL, cv.CHAIN_APPROX_SIMPLE)

        out: List[_Candidate] = []
        for contour in contours:
            x, y, w, h = cv.boundingRect(contour)
            region = Region.from_cv_rect(x, y, w, h).padded(self.cfg.padding, img_w, img_h)
            if region.width == 0 or region.height == 0:
                continue
            out.append(_Candidate(region, float(cv.contourArea(contour)), int(w), int(h)))

        logger.debug("Strategy %s: %d contours", name, len(out))
        return out
