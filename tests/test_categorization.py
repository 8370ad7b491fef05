"""Tests for pantry item categorization."""

from unittest.mock import MagicMock

import pytest

from supersuper.services.categorization import (
    DEFAULT_CATEGORY,
    CategoryClassifier,
    classify_pantry_items,
)
from supersuper.services.kv_store import SqlKeyValueStore
from supersuper.services.pantry_storage import PantryStore


@pytest.mark.parametrize(
    ("name", "category"),
    [
        ("Whole Milk", "Dairy & eggs"),
        ("Large Eggs", "Dairy & eggs"),
        ("Sourdough Bread", "Bakery & bread"),
        ("Chicken Thighs", "Meat & seafood"),
        ("Basmati Rice", "Pantry"),
    ],
)
def test_classify_known_products(name, category):
    """Test keyword classification of common products."""
    result = CategoryClassifier().classify(name)
    assert result["category"] == category
    assert result["confidence"] == 1.0


def test_classify_tolerates_typos():
    """Test that a misspelled keyword still classifies."""
    result = CategoryClassifier().classify("Chedar Cheeze")
    assert result["category"] == "Dairy & eggs"


def test_classify_unknown_product():
    """Test the default category when nothing matches."""
    result = CategoryClassifier().classify("Xylophone")
    assert result["category"] == DEFAULT_CATEGORY
    assert result["keyword"] is None


def test_classify_custom_categories():
    """Test classification against a custom category table."""
    classifier = CategoryClassifier({"Pets": ["dog food", "cat litter"]})
    assert classifier.classify("Premium Dog Food")["category"] == "Pets"


def test_classify_pantry_items(store):
    """Test storing categories for pantry items."""
    store.add_items_from_trip(
        [
            {"product_id": "A", "display_name": "Whole Milk"},
            {"product_id": "B", "display_name": "Sourdough Bread"},
        ]
    )

    result = classify_pantry_items(store, ["A", "B", "gone"])

    assert result == {"categorized": 2, "skipped": 1}
    assert store.get_item_by_id("A").category == "Dairy & eggs"
    assert store.get_item_by_id("B").category == "Bakery & bread"


def test_classify_pantry_items_uses_given_classifier(store):
    """Test injecting a classifier."""
    store.add_items_from_trip([{"product_id": "A", "display_name": "Whole Milk"}])
    classifier = MagicMock()
    classifier.classify.return_value = {"category": "Beverages", "confidence": 1.0, "keyword": None}

    classify_pantry_items(store, ["A"], classifier=classifier)

    classifier.classify.assert_called_once_with("Whole Milk")
    assert store.get_item_by_id("A").category == "Beverages"


def test_classification_task(db, session_factory, monkeypatch):
    """Test the Celery task against the database-backed store."""
    from supersuper.config import get_settings
    from supersuper.tasks import categorization as tasks

    monkeypatch.setattr(tasks, "SessionLocal", session_factory)
    storage_key = get_settings().pantry_storage_key

    PantryStore(SqlKeyValueStore(db), storage_key=storage_key).add_items_from_trip(
        [{"product_id": "A", "display_name": "Greek Yogurt"}]
    )

    result = tasks.classify_pantry_items(["A"])

    assert result["success"] is True
    assert result["categorized"] == 1
    db.expire_all()
    item = PantryStore(SqlKeyValueStore(db), storage_key=storage_key).get_item_by_id("A")
    assert item.category == "Dairy & eggs"


def test_celery_app_configuration():
    """Test the Celery app registers the task with JSON messages and a time limit."""
    from supersuper.celery_app import app as celery_app
    from supersuper.tasks import categorization as tasks

    assert tasks.classify_pantry_items.name in celery_app.tasks
    assert celery_app.conf.task_serializer == "json"
    assert celery_app.conf.accept_content == ["json"]
    assert celery_app.conf.task_time_limit == 60
