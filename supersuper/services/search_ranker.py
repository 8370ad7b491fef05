"""Scoring and ranking of pantry items against a tokenized search query."""

from collections.abc import Mapping, Sequence

from supersuper.services.similarity import is_similar

DEFAULT_SIMILARITY_THRESHOLD = 0.3


def match_word(
    search_word: str,
    word_index: Mapping[str, Sequence[str]],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> dict[str, float]:
    """Score every product reachable from an indexed token matching search_word.

    A product reachable through several tokens keeps its best score.
    """
    scores: dict[str, float] = {}
    for indexed_word, product_ids in word_index.items():
        if search_word in indexed_word:
            score = 1.0
        else:
            score = is_similar(search_word, indexed_word, threshold)
            if score is None:
                continue

        for product_id in product_ids:
            if score > scores.get(product_id, -1.0):
                scores[product_id] = score

    return scores


def combine_word_matches(
    combined: dict[str, float] | None, word_scores: dict[str, float]
) -> dict[str, float]:
    """Intersect the running scores with the next word's scores.

    Surviving products take the average of their running score and the new one,
    so earlier words weigh less with every word that follows.
    """
    if combined is None:
        return dict(word_scores)

    return {
        product_id: (score + word_scores[product_id]) / 2
        for product_id, score in combined.items()
        if product_id in word_scores
    }


def rank_products(
    search_words: Sequence[str],
    word_index: Mapping[str, Sequence[str]],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> list[tuple[str, float]]:
    """Return (product_id, score) pairs matching every search word, best first.

    Products with equal scores keep the order in which they were first matched.
    """
    combined: dict[str, float] | None = None

    for search_word in search_words:
        combined = combine_word_matches(combined, match_word(search_word, word_index, threshold))
        if not combined:
            return []

    if combined is None:
        return []

    return sorted(combined.items(), key=lambda pair: pair[1], reverse=True)
