import logging
from typing import List

import regex as re

logger = logging.getLogger("ocr_service")

# Diagnostics Tesseract mixes into its output. Order matters: the specific
# resolution warning goes before the catch-all Warning/Error lines.
DIAGNOSTIC_PATTERNS = (
    re.compile(r"Warning: Invalid resolution \d+ dpi\. Using \d+ instead\."),
    re.compile(r"Estimating resolution as \d+"),
    re.compile(r"Warning:.*"),
    re.compile(r"Error:.*"),
)

GROUP_SEPARATOR = " | "
SHORT_LINE_MAX = 10


def strip_diagnostics(raw: str) -> str:
    out = raw
    for rx in DIAGNOSTIC_PATTERNS:
        out = rx.sub("", out)
    return out


def _group_short_lines(lines: List[str], short_line_max: int) -> List[str]:
    units: List[str] = []
    group: List[str] = []
    for ln in lines:
        if len(ln) <= short_line_max:
            group.append(ln)
            continue
        if group:
            units.append(" ".join(group))
            group = []
        units.append(ln)
    if group:
        units.append(" ".join(group))
    return units


def normalize(raw: str, *, short_line_max: int = SHORT_LINE_MAX) -> str:
    """
    Clean raw engine output into one text unit.

    Engine diagnostics are removed, blank lines dropped, and runs of short
    lines (isolated symbols/numbers the engine fragmented) are joined with
    spaces. Units are joined with " | " so callers can split multi-fragment
    results back apart.
    """
    if not raw:
        return ""
    cleaned = strip_diagnostics(raw)
    lines = [ln.strip() for ln in cleaned.split("\n")]
    lines = [ln for ln in lines if ln]
    if not lines:
        return ""
    if len(lines) == 1:
        return lines[0]
    result = GROUP_SEPARATOR.join(_group_short_lines(lines, short_line_max))
    logger.debug("Normalized %d lines into %r", len(lines), result)
    return result
