"""Edit-distance similarity between short phrases."""
from __future__ import annotations

import math


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character insertions, deletions or substitutions."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        curr = [i]
        for j, cb in enumerate(b, 1):
            if ca == cb:
                curr.append(prev[j - 1])
            else:
                curr.append(1 + min(
                    prev[j],      # deletion
                    curr[j - 1],  # insertion
                    prev[j - 1],  # substitution
                ))
        prev = curr
    return prev[-1]


def similarity(a: str, b: str) -> float:
    """Similarity in [0, 1]: 1 - distance / longer length.

    Comparison is case-insensitive on trimmed input. Two empty strings are
    identical (1.0).
    """
    s1 = a.lower().strip()
    s2 = b.lower().strip()
    if s1 == s2:
        return 1.0

    max_len = max(len(s1), len(s2))
    return 1 - levenshtein_distance(s1, s2) / max_len


def to_percent(ratio: float) -> int:
    """Round a [0, 1] ratio to a whole percentage, halves rounding up."""
    return int(math.floor(ratio * 100 + 0.5))
