"""String similarity for fuzzy pantry search, based on Levenshtein distance."""

from collections.abc import Iterable


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character inserts, deletes or substitutions turning a into b.

    Dynamic programming over the (len(a)+1) x (len(b)+1) table, keeping two rows.
    """
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(
                previous[j] + 1,  # deletion
                current[j - 1] + 1,  # insertion
                previous[j - 1] + cost,  # substitution
            )
        previous = current

    return previous[len(b)]


def calculate_similarity(a: str, b: str) -> float:
    """Similarity in [0, 1]: 1 - distance / longest length, compared case-insensitively."""
    s1 = a.lower()
    s2 = b.lower()

    if s1 == s2:
        return 1.0

    max_length = max(len(s1), len(s2))
    return 1 - levenshtein_distance(s1, s2) / max_length


def is_similar(term: str, candidate: str, threshold: float = 0.6) -> float | None:
    """Score how well candidate matches term, or None when it does not match.

    Either string containing the other scores 1.0 without computing the edit distance.
    """
    search = term.lower()
    target = candidate.lower()

    if search in target or target in search:
        return 1.0

    similarity = calculate_similarity(search, target)
    return similarity if similarity >= threshold else None


def find_best_match(
    term: str, candidates: Iterable[str], threshold: float = 0.6
) -> tuple[str, float] | None:
    """Return the (candidate, score) scoring highest against term, or None if nothing matches."""
    best: tuple[str, float] | None = None
    for candidate in candidates:
        score = is_similar(term, candidate, threshold)
        if score is not None and (best is None or score > best[1]):
            best = (candidate, score)
    return best
