from __future__ import annotations

from enum import Enum
from typing import List, Set

NONE_SENTINEL = "NONE"


class Category(str, Enum):
    STORE = "store"
    NUMBER = "number"
    FOOD = "food"


# /image/extract can narrow recognized text to these; /text/extract accepts all.
IMAGE_FILTER_CATEGORIES = (Category.STORE, Category.FOOD)
TEXT_EXTRACT_CATEGORIES = (Category.STORE, Category.NUMBER, Category.FOOD)


def split_category_answer(answer: str) -> List[str]:
    """
    Split a comma-separated model answer into distinct candidate values.

    Surrounding whitespace and quotes are stripped; empty entries and the
    NONE sentinel are skipped, as are case-insensitive repeats.
    """
    if not answer or answer.strip() == NONE_SENTINEL:
        return []
    out: List[str] = []
    seen: Set[str] = set()
    for part in answer.split(","):
        cand = part.strip().strip("\"'").strip()
        if not cand or cand == NONE_SENTINEL:
            continue
        key = cand.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(cand)
    return out
