from typing import Iterable, List, Set

from ..schema import TextElement


def dedupe_key(text: str) -> str:
    return (text or "").strip().lower()


def dedupe(elements: Iterable[TextElement]) -> List[TextElement]:
    """Case-insensitive collapse; the first occurrence and its coordinates win."""
    seen: Set[str] = set()
    out: List[TextElement] = []
    for el in elements:
        key = dedupe_key(el.text)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(el)
    return out
