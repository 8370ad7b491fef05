"""Keyword-based product categorization for pantry items."""

import logging
from typing import Any

from supersuper.services.pantry_storage import PantryStore
from supersuper.services.similarity import find_best_match
from supersuper.services.text_index import tokenize

logger = logging.getLogger(__name__)

# Category -> subcategory keywords
CATEGORY_DEFINITIONS: dict[str, list[str]] = {
    "Fruits & vegetables": [
        "fruit",
        "vegetables",
        "apple",
        "banana",
        "berries",
        "lettuce",
        "tomato",
        "potato",
        "onion",
    ],
    "Meat & seafood": ["meat", "seafood", "tofu", "chicken", "beef", "pork", "fish", "salmon"],
    "Bakery & bread": [
        "bread",
        "breading",
        "crumbs",
        "cookies",
        "dessert",
        "pastries",
        "tortillas",
        "cakes",
        "bagels",
    ],
    "Dairy & eggs": [
        "butter",
        "margarine",
        "cheese",
        "cream",
        "eggs",
        "milk",
        "pudding",
        "gelatine",
        "yogurt",
    ],
    "Deli & prepared food": ["dip", "deli", "hummus", "salami", "ready meals", "snacks"],
    "Pantry": ["baking", "flour", "sugar", "broth", "bouillon", "pasta", "rice", "beans", "oil"],
}

DEFAULT_CATEGORY = "Other"

# Minimum similarity between a name word and a category keyword
CLASSIFICATION_THRESHOLD = 0.8


class CategoryClassifier:
    """Assign a product name to the category whose keywords it matches best."""

    def __init__(self, categories: dict[str, list[str]] | None = None):
        self.categories = categories or CATEGORY_DEFINITIONS
        self._keywords: dict[str, list[str]] = {
            category: [token for keyword in keywords for token in tokenize(keyword)]
            for category, keywords in self.categories.items()
        }

    def classify(self, product_name: str) -> dict[str, Any]:
        """Classify a product name.

        Returns:
            {
                "category": str,
                "confidence": float,
                "keyword": str | None  # best matching keyword
            }
        """
        best_category = DEFAULT_CATEGORY
        best_keyword = None
        best_score = 0.0

        for word in tokenize(product_name):
            # Short fragments would substring-match almost any keyword
            if len(word) < 3:
                continue
            for category, keywords in self._keywords.items():
                match = find_best_match(word, keywords, CLASSIFICATION_THRESHOLD)
                if match is not None and match[1] > best_score:
                    best_keyword, best_score = match
                    best_category = category

        if best_keyword is None:
            logger.info(f"'{product_name}' -> '{DEFAULT_CATEGORY}' (no keyword match)")
            return {"category": DEFAULT_CATEGORY, "confidence": best_score, "keyword": None}

        logger.info(
            f"'{product_name}' -> '{best_category}' "
            f"(matched '{best_keyword}', score {best_score:.2f})"
        )
        return {"category": best_category, "confidence": best_score, "keyword": best_keyword}


def classify_pantry_items(
    store: PantryStore,
    product_ids: list[str],
    classifier: CategoryClassifier | None = None,
) -> dict[str, int]:
    """Classify pantry items and store their categories.

    Items removed since they were scheduled are skipped.
    """
    classifier = classifier or CategoryClassifier()
    categorized = 0
    skipped = 0

    for product_id in product_ids:
        item = store.get_item_by_id(product_id)
        if item is None:
            logger.warning(f"Pantry item {product_id} not found, skipping")
            skipped += 1
            continue

        result = classifier.classify(item.display_name)
        store.update_item(product_id, {"category": result["category"]})
        categorized += 1

    return {"categorized": categorized, "skipped": skipped}
