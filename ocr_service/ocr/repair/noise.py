import logging
from typing import Iterable, List, Optional

import regex as re

from ...config import FilterConfig
from ..schema import TextElement

logger = logging.getLogger("ocr_service")

RX_DIGITS = re.compile(r"^\d+$")
RX_WORD_CHAR = re.compile(r"[\p{L}\p{Nd}]")

# Short tokens that carry meaning on signs and menus despite their length.
SIGNIFICANT_SHORT = frozenset(
    {
        # Korean particles / common one-syllable words
        "안", "좋", "나", "다", "를", "을", "의", "에", "로", "과", "와",
        # two-letter English
        "OK", "NO", "ON", "UP", "GO", "IN", "TO", "AT", "BY",
        # symbols
        "@", "#", "$", "%", "&", "*", "+", "-", "=", "?", "!",
    }
)


def is_significant_short(text: str) -> bool:
    return bool(RX_DIGITS.match(text)) or text in SIGNIFICANT_SHORT


def has_word_char(text: str) -> bool:
    return RX_WORD_CHAR.search(text) is not None


def is_repeating_pattern(text: str) -> bool:
    n = len(text)
    if n < 3:
        return False
    if all(ch == text[0] for ch in text):
        return True
    for k in range(1, n // 3 + 1):
        if text[:k] * (n // k) == text:
            return True
    return False


def rejection_reason(text: str, cfg: Optional[FilterConfig] = None) -> Optional[str]:
    cfg = cfg or FilterConfig()
    t = (text or "").strip()
    if not t:
        return "empty"
    if len(t) <= 2 and not is_significant_short(t):
        return "short"
    if not has_word_char(t):
        return "symbols-only"
    if is_repeating_pattern(t):
        return "repeating"
    if len(t) > cfg.max_text_length:
        return "overlong"
    return None


def is_valid(text: str, cfg: Optional[FilterConfig] = None) -> bool:
    return rejection_reason(text, cfg) is None


def keep(elements: Iterable[TextElement], cfg: Optional[FilterConfig] = None) -> List[TextElement]:
    out: List[TextElement] = []
    for el in elements:
        reason = rejection_reason(el.text, cfg)
        if reason:
            logger.debug("Rejected %r at (%d, %d): %s", el.text, el.x, el.y, reason)
            continue
        out.append(el)
    return out
