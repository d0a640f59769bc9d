from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

BBox = Tuple[int, int, int, int]  # x0,y0,x1,y1


@dataclass(frozen=True)
class TextElement:
    text: str
    x: int
    y: int

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "x": int(self.x), "y": int(self.y)}


@dataclass(frozen=True)
class Region:
    """Axis-aligned candidate text box; x1/y1 are exclusive."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return max(0, self.x1 - self.x0)

    @property
    def height(self) -> int:
        return max(0, self.y1 - self.y0)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def bbox(self) -> BBox:
        return (self.x0, self.y0, self.x1, self.y1)

    def center(self) -> Tuple[int, int]:
        return (self.x0 + self.width // 2, self.y0 + self.height // 2)

    def padded(self, margin: int, img_w: int, img_h: int) -> "Region":
        return Region(
            max(0, self.x0 - margin),
            max(0, self.y0 - margin),
            min(img_w, self.x1 + margin),
            min(img_h, self.y1 + margin),
        )

    def iou(self, other: "Region") -> float:
        ix0, iy0 = max(self.x0, other.x0), max(self.y0, other.y0)
        ix1, iy1 = min(self.x1, other.x1), min(self.y1, other.y1)
        inter = max(0, ix1 - ix0) * max(0, iy1 - iy0)
        if inter <= 0:
            return 0.0
        union = self.area + other.area - inter
        return inter / max(1, union)

    @staticmethod
    def from_cv_rect(x: int, y: int, w: int, h: int) -> "Region":
        return Region(int(x), int(y), int(x + w), int(y + h))


class RecognitionStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    TIMEOUT = "timeout"
    ENGINE_ERROR = "engine_error"


@dataclass(frozen=True)
class HintStep:
    """One rung of the recognition ladder: Tesseract page-segmentation mode + languages."""

    psm: int
    languages: Tuple[str, ...]

    @property
    def lang(self) -> str:
        return "+".join(self.languages)


@dataclass(frozen=True)
class EngineResult:
    status: RecognitionStatus
    text: str = ""
    detail: str = ""

    @property
    def usable(self) -> bool:
        return self.status is RecognitionStatus.SUCCESS and bool(self.text.strip())
