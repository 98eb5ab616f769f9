# src/auditor/utils/text.py
from typing import Iterable, List, Tuple

from rapidfuzz.distance import Levenshtein


def closest_matches(target: str, candidates: Iterable[str], max_distance: int = 2) -> List[Tuple[str, int]]:
    """Candidates within max_distance edits of target, nearest first, ties broken alphabetically."""
    scored = [(c, Levenshtein.distance(target, c, score_cutoff=max_distance)) for c in set(candidates)]
    return sorted(((c, d) for c, d in scored if d <= max_distance), key=lambda item: (item[1], item[0]))
