from __future__ import annotations

from io import BytesIO

import cv2 as cv
import numpy as np
from PIL import Image, ImageFile, UnidentifiedImageError

from ..errors import ImageDecodeError

ImageFile.LOAD_TRUNCATED_IMAGES = True


def decode_image(image_bytes: bytes) -> np.ndarray:
    """Decode uploaded bytes into a BGR uint8 array (OpenCV channel order)."""
    if not image_bytes:
        raise ImageDecodeError("empty image payload")
    try:
        pil = Image.open(BytesIO(image_bytes)).convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"failed to load image: {e}") from e
    np_rgb = np.asarray(pil, dtype=np.uint8)
    if np_rgb.size == 0:
        raise ImageDecodeError("image has no pixels")
    return cv.cvtColor(np_rgb, cv.COLOR_RGB2BGR)


def to_gray(img: np.ndarray) -> np.ndarray:
    if img.ndim == 2:
        return img
    return cv.cvtColor(img, cv.COLOR_BGR2GRAY)


def prepare_region(roi: np.ndarray, *, scale: int = 2) -> np.ndarray:
    """Grayscale, upscale (cubic) and binarize a cropped region for single-word/line OCR."""
    gray = to_gray(roi)
    h, w = gray.shape[:2]
    enlarged = cv.resize(gray, (w * scale, h * scale), interpolation=cv.INTER_CUBIC)
    return cv.adaptiveThreshold(
        enlarged, 255, cv.ADAPTIVE_THRESH_GAUSSIAN_C, cv.THRESH_BINARY, 11, 2
    )
