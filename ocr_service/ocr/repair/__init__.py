from .dedupe import dedupe
from .noise import is_valid, keep, SIGNIFICANT_SHORT
from .normalize import normalize, GROUP_SEPARATOR

__all__ = [
    "normalize",
    "is_valid",
    "keep",
    "dedupe",
    "SIGNIFICANT_SHORT",
    "GROUP_SEPARATOR",
]
