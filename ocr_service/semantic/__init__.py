from .classify import extract_from_text, filter_elements
from .models import Category
from .reconcile import levenshtein, reconcile

__all__ = [
    "Category",
    "extract_from_text",
    "filter_elements",
    "levenshtein",
    "reconcile",
]
