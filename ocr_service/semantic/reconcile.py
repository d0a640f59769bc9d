from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import regex as re

from ..config import ReconcileConfig
from ..ocr.schema import TextElement
from .models import split_category_answer

logger = logging.getLogger("ocr_service")

RX_WORD_SPLIT = re.compile(r"[ |\-,.]+")

SCORE_EXACT = 1.0
SCORE_CONTAINS = 0.9
SCORE_WORD = 0.85


def levenshtein(a: str, b: str) -> int:
    m, n = len(a), len(b)
    if m == 0:
        return n
    if n == 0:
        return m
    prev = list(range(n + 1))
    for i in range(1, m + 1):
        cur = [i] + [0] * n
        ca = a[i - 1]
        for j in range(1, n + 1):
            cost = 0 if ca == b[j - 1] else 1
            cur[j] = min(prev[j] + 1, cur[j - 1] + 1, prev[j - 1] + cost)
        prev = cur
    return prev[n]


def similarity(a: str, b: str) -> float:
    """1 - levenshtein / max(len); 1.0 for equal strings, 0.0 if either is empty."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein(a, b) / max(len(a), len(b))


def is_word_boundary_match(target: str, source: str, *, word_similarity: float = 0.8) -> bool:
    t = target.lower()
    for word in RX_WORD_SPLIT.split(source):
        w = word.strip().lower()
        if not w:
            continue
        if w == t or similarity(w, t) > word_similarity:
            return True
    return False


def match_score(target: str, source: str, *, word_similarity: float = 0.8) -> float:
    """Score how well a (corrected) category value matches an OCR string. Both lower-cased by caller."""
    if not target or not source:
        return 0.0
    if target == source:
        return SCORE_EXACT
    if target in source or source in target:
        return SCORE_CONTAINS
    if is_word_boundary_match(target, source, word_similarity=word_similarity):
        return SCORE_WORD
    # Down-weight near-misses between strings of very different length.
    length_ratio = min(len(target), len(source)) / max(len(target), len(source))
    return similarity(target, source) * length_ratio


def find_best_match(
    target: str,
    items: Sequence[TextElement],
    cfg: Optional[ReconcileConfig] = None,
) -> Optional[TextElement]:
    cfg = cfg or ReconcileConfig()
    t = target.lower()
    best: Optional[TextElement] = None
    best_score = 0.0
    for item in items:
        score = match_score(t, item.text.strip().lower(), word_similarity=cfg.word_similarity)
        if score > best_score and score > cfg.match_threshold:
            best, best_score = item, score
    if best is not None:
        logger.debug("Matched %r -> %r (score %.2f)", target, best.text, best_score)
    return best


def reconcile(
    originals: Sequence[TextElement],
    answer: str,
    cfg: Optional[ReconcileConfig] = None,
) -> List[TextElement]:
    """
    Map a category answer back onto recognized elements.

    Each candidate value keeps its own (possibly corrected) text and borrows
    the coordinates of the closest original element. Candidates with no
    sufficiently close original are dropped; coordinates are never invented.
    """
    out: List[TextElement] = []
    for cand in split_category_answer(answer):
        match = find_best_match(cand, originals, cfg)
        if match is None:
            logger.debug("No match for category value %r", cand)
            continue
        out.append(TextElement(cand, match.x, match.y))
    return out
