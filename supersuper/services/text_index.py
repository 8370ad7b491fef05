"""Tokenizer and inverted index maintenance for pantry names.

Two indexes live inside the pantry aggregate:

- name index: full normalized name -> product ids sharing that exact name
- word index: single token -> product ids whose name contains that token

Buckets are ordered, duplicate-free lists. A bucket that becomes empty is
deleted, so a search only ever scans tokens that still resolve to an item.
"""

import re

from supersuper.schemas.pantry import PantryAggregate, PantryItem

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def normalize_name(name: str) -> str:
    """Normalized form used as the name index key."""
    return name.lower()


def tokenize(name: str) -> list[str]:
    """Split a name into lowercase ASCII alphanumeric tokens, in order of appearance."""
    return [word for word in _NON_ALPHANUMERIC.split(name.lower()) if word]


def _add_to_bucket(index: dict[str, list[str]], key: str, product_id: str) -> None:
    bucket = index.setdefault(key, [])
    if product_id not in bucket:
        bucket.append(product_id)


def _remove_from_bucket(index: dict[str, list[str]], key: str, product_id: str) -> None:
    bucket = index.get(key)
    if bucket is None:
        return
    remaining = [pid for pid in bucket if pid != product_id]
    if remaining:
        index[key] = remaining
    else:
        del index[key]


def add_to_name_index(aggregate: PantryAggregate, normalized_name: str, product_id: str) -> None:
    _add_to_bucket(aggregate.name_index, normalized_name, product_id)


def remove_from_name_index(
    aggregate: PantryAggregate, normalized_name: str, product_id: str
) -> None:
    _remove_from_bucket(aggregate.name_index, normalized_name, product_id)


def add_to_word_index(aggregate: PantryAggregate, name: str, product_id: str) -> None:
    for word in dict.fromkeys(tokenize(name)):
        _add_to_bucket(aggregate.word_index, word, product_id)


def remove_from_word_index(aggregate: PantryAggregate, name: str, product_id: str) -> None:
    for word in dict.fromkeys(tokenize(name)):
        _remove_from_bucket(aggregate.word_index, word, product_id)


def index_item(aggregate: PantryAggregate, item: PantryItem) -> None:
    """Add an item's name to both indexes."""
    add_to_name_index(aggregate, item.normalized_name, item.product_id)
    add_to_word_index(aggregate, item.normalized_name, item.product_id)


def unindex_item(aggregate: PantryAggregate, item: PantryItem) -> None:
    """Remove every index entry for an item, using its currently stored name."""
    remove_from_name_index(aggregate, item.normalized_name, item.product_id)
    remove_from_word_index(aggregate, item.normalized_name, item.product_id)


def rename_item(aggregate: PantryAggregate, item: PantryItem, display_name: str) -> bool:
    """Rename an item in place, re-indexing it if its normalized name changes.

    Old entries are removed with the old name before the new name is indexed, so
    tokens shared by both names end up pointing at the item exactly once.

    Returns True when the normalized name changed.
    """
    new_normalized = normalize_name(display_name)
    if new_normalized == item.normalized_name:
        item.display_name = display_name
        return False

    unindex_item(aggregate, item)
    item.display_name = display_name
    item.normalized_name = new_normalized
    index_item(aggregate, item)
    return True


def rebuild_indexes(aggregate: PantryAggregate) -> None:
    """Recompute both indexes from the item table."""
    aggregate.name_index = {}
    aggregate.word_index = {}
    for item in aggregate.items.values():
        index_item(aggregate, item)
