"""
Fuzzy string matching utilities for column headers.

Wraps rapidfuzz's Levenshtein distance to provide the two primitives used by
column_detector: a header normalizer and a 0-1 similarity score.
"""

import re
from typing import Any

from rapidfuzz.distance import Levenshtein

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_header(header: Any) -> str:
    """
    Canonicalize a header or alias for comparison.

    Lowercases, then strips everything that is not an ASCII letter or digit,
    so spaces, underscores, hyphens and punctuation all disappear.

    Examples:
        >>> normalize_header("Product Name")
        'productname'
        >>> normalize_header("e-mail")
        'email'

    Args:
        header: Header text. Non-strings (e.g. numeric spreadsheet headers)
                are converted with str(); None becomes "".

    Returns:
        The normalized key (possibly empty).
    """
    if header is None:
        return ""
    return _NON_ALNUM.sub("", str(header).lower())


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between the normalized forms of *a* and *b*."""
    return Levenshtein.distance(normalize_header(a), normalize_header(b))


def similarity_score(a: str, b: str) -> float:
    """
    Similarity between two headers on a 0.0-1.0 scale.

    Computed as ``1 - distance / max(len(a), len(b))`` over the normalized
    forms, where insertions, deletions and substitutions all cost 1. Two
    empty strings are considered identical.

    Examples:
        >>> round(similarity_score("Prodcut", "product"), 2)
        0.71

    Args:
        a: First header or alias.
        b: Second header or alias.

    Returns:
        Similarity score, 1.0 for identical normalized strings.
    """
    norm_a = normalize_header(a)
    norm_b = normalize_header(b)

    max_length = max(len(norm_a), len(norm_b))
    if max_length == 0:
        return 1.0

    distance = Levenshtein.distance(norm_a, norm_b)
    return 1 - distance / max_length
