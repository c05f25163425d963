"""Category normalization.

Maps the aggregator's open-ended category vocabulary onto a small, stable
set of display categories. The table is configuration: new source codes are
added here without touching call sites.
"""

import re
from typing import Optional

FALLBACK_CATEGORY = "other"

DISPLAY_CATEGORIES = (
    "dining",
    "groceries",
    "transportation",
    "travel",
    "entertainment",
    "clothing",
    "personal",
    "health",
    "subscriptions",
    "utilities",
    "housing",
    "fees",
    "transfer",
    "income",
    "other",
)

# Keys are canonical codes: upper case, words joined by underscores.
CATEGORY_MAP = {
    "FOOD_AND_DRINK": "dining",
    "RESTAURANTS": "dining",
    "FAST_FOOD": "dining",
    "GROCERIES": "groceries",
    "TRANSPORTATION": "transportation",
    "PUBLIC_TRANSPORTATION": "transportation",
    "TAXI": "transportation",
    "GAS": "transportation",
    "TRAVEL": "travel",
    "LODGING": "travel",
    "ENTERTAINMENT": "entertainment",
    "RECREATION": "entertainment",
    "SHOPPING": "clothing",
    "GENERAL_MERCHANDISE": "clothing",
    "CLOTHING": "clothing",
    "PERSONAL_CARE": "personal",
    "HEALTH_AND_MEDICAL": "health",
    "MEDICAL": "health",
    "PHARMACY": "health",
    "SUBSCRIPTION": "subscriptions",
    "SOFTWARE": "subscriptions",
    "UTILITIES": "utilities",
    "RENT": "housing",
    "MORTGAGE": "housing",
    "HOME_IMPROVEMENT": "housing",
    "BANK_FEES": "fees",
    "ATM_FEE": "fees",
    "TRANSFER": "transfer",
    "DEPOSIT": "income",
    "PAYROLL": "income",
    "INTEREST_EARNED": "income",
    "PAYMENT": "other",
}

_SEPARATORS = re.compile(r"[\s\-&/]+")


def canonical_code(raw_category: str) -> str:
    """Fold code and human-readable spellings into one lookup key.

    "Food and Drink", "food-and-drink" and "FOOD_AND_DRINK" all become
    "FOOD_AND_DRINK".
    """
    return _SEPARATORS.sub("_", raw_category.strip()).strip("_").upper()


def normalize_category(raw_category: Optional[str]) -> str:
    """Map a source category to a display category.

    Unknown codes fall back to a lower-cased, underscore-free rendering of
    the input. Never raises and never returns an empty string.

    Args:
        raw_category: Category as supplied by the source, or None

    Returns:
        Display category label
    """
    if raw_category is None or not raw_category.strip():
        return FALLBACK_CATEGORY

    mapped = CATEGORY_MAP.get(canonical_code(raw_category))
    if mapped is not None:
        return mapped

    fallback = raw_category.strip().lower().replace("_", " ").strip()
    return fallback or FALLBACK_CATEGORY
