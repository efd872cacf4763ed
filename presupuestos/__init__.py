"""Budget (presupuesto) to PDF payload pipeline."""

from .payload import build_pdf_payload
from .tree import prune, renumber, check_tree
from .normalize import normalize_numbers
from .summary import extract_chapters
from .totals import calculate_totals

__all__ = [
    "build_pdf_payload",
    "prune",
    "renumber",
    "check_tree",
    "normalize_numbers",
    "extract_chapters",
    "calculate_totals",
]
