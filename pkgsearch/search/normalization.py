"""
Text normalization applied before similarity scoring.

Every similarity algorithm receives text that went through ``normalize_text``
so that case and Unicode presentation never influence a score.
"""

import re
import unicodedata
from typing import List, Optional


_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_SEPARATOR_RE = re.compile(r"[\s\-_]+")


def normalize_text(text: Optional[str]) -> str:
    """
    Normalize text for comparison.

    Applies NFKC normalization, case folding, trims surrounding whitespace and
    collapses internal whitespace runs to a single space.

    Args:
        text: Text to normalize. None is treated as an empty string.

    Returns:
        Normalized text.
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text).casefold()
    return _WHITESPACE_RE.sub(" ", text).strip()


def split_words(text: str) -> List[str]:
    """Split text into words on whitespace, hyphens and underscores."""
    return [token for token in _TOKEN_SEPARATOR_RE.split(text) if token]
