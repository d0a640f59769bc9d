from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..config import ReconcileConfig
from ..ocr.schema import TextElement
from .models import IMAGE_FILTER_CATEGORIES, TEXT_EXTRACT_CATEGORIES, Category
from .prompts import extract_prompt, filter_prompt
from .reconcile import reconcile

logger = logging.getLogger("ocr_service")


def _category(kind, allowed) -> Category:
    cat = kind if isinstance(kind, Category) else Category(str(kind).strip().lower())
    if cat not in allowed:
        raise ValueError(f"unsupported category: {cat.value}")
    return cat


async def extract_from_text(client, kind, text: str) -> str:
    """
    Ask the language model for the single store name, number or food item
    buried in a (stuttered) transcript. Returns the raw answer, which may be
    the NONE sentinel. Raises SemanticServiceError on model failure.
    """
    cat = _category(kind, TEXT_EXTRACT_CATEGORIES)
    answer = await client.complete(extract_prompt(cat, text))
    logger.info("Text extraction (%s): %d chars -> %r", cat.value, len(text), answer)
    return answer


async def filter_elements(
    client,
    kind,
    elements: Sequence[TextElement],
    cfg: Optional[ReconcileConfig] = None,
) -> List[TextElement]:
    cat = _category(kind, IMAGE_FILTER_CATEGORIES)
    if not elements:
        return []
    answer = await client.complete(filter_prompt(cat, [e.text for e in elements]))
    matched = reconcile(elements, answer, cfg)
    logger.info(
        "Category filter (%s): %d elements, answer %r -> %d matched",
        cat.value, len(elements), answer, len(matched),
    )
    return matched
