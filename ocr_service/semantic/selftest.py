from __future__ import annotations

import logging
from typing import List, Tuple

from ..ocr.repair import dedupe, is_valid, keep, normalize
from ..ocr.schema import TextElement
from .reconcile import reconcile

logger = logging.getLogger("ocr_service")


DEFAULT_NORMALIZE_CASES: List[Tuple[str, str]] = [
    ("Warning: Invalid resolution 300 dpi. Using 70 instead.\nHELLO", "HELLO"),
    ("a\nb\nLongLineHere", "a b | LongLineHere"),
    ("Estimating resolution as 300\n맥도날드\n", "맥도날드"),
]

DEFAULT_NOISE_SAMPLES: List[str] = ["맥", "A", "7", "~~~", "ababab", "빅맥세트", "5,500원", "IN", "빅맥세트 "]


def run_consolidation_selftest() -> None:
    """Smoke-test the text consolidation rules at startup.

    Raises AssertionError if a rule regressed; imports, constants and regexes
    are exercised along the way.
    """
    for raw, want in DEFAULT_NORMALIZE_CASES:
        got = normalize(raw)
        if got != want:
            raise AssertionError(f"normalize({raw!r}) = {got!r}, expected {want!r}")

    elems = [TextElement(s, i, i) for i, s in enumerate(DEFAULT_NOISE_SAMPLES)]
    kept = keep(elems)
    if any(not is_valid(e.text) for e in kept) or keep(kept) != kept:
        raise AssertionError("noise filter is not idempotent")

    keys = [e.text.strip().lower() for e in dedupe(kept)]
    if len(keys) != len(set(keys)):
        raise AssertionError("dedupe left duplicates")

    matched = reconcile([TextElement("맥도냘드", 10, 20)], "맥도날드")
    if matched != [TextElement("맥도날드", 10, 20)]:
        raise AssertionError(f"reconcile regressed: {matched!r}")
    if reconcile([TextElement("맥도냘드", 10, 20)], "NONE"):
        raise AssertionError("reconcile did not honour the NONE sentinel")

    logger.info(
        "Consolidation self-test passed (%d normalize cases, %d noise samples).",
        len(DEFAULT_NORMALIZE_CASES), len(DEFAULT_NOISE_SAMPLES),
    )
