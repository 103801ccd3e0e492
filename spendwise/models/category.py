"""
Category Registry

The fixed, ordered set of spending categories.

DESIGN DECISION: Categories are static reference data defined here
and nowhere else. Expenses only refer to a category by its value;
labels, icons and chart colors are looked up from this registry.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ExpenseCategory(str, Enum):
    """Stable category keys, as stored with each expense."""
    FOOD = "food"
    TRANSPORT = "transport"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    SHOPPING = "shopping"
    OTHER = "other"


class Category(BaseModel):
    """
    A registry entry.

    The icon is a presentation hint only (an emoji for the UI);
    nothing in the core depends on it.
    """
    model_config = ConfigDict(frozen=True)

    value: ExpenseCategory
    label: str
    icon: str
    color: str


CATEGORIES: tuple[Category, ...] = (
    Category(value=ExpenseCategory.FOOD, label="Food", icon="🍴", color="#e76e50"),
    Category(value=ExpenseCategory.TRANSPORT, label="Transport", icon="🚗", color="#2a9d90"),
    Category(value=ExpenseCategory.UTILITIES, label="Utilities", icon="💡", color="#274754"),
    Category(value=ExpenseCategory.ENTERTAINMENT, label="Entertainment", icon="🎭", color="#e8c468"),
    Category(value=ExpenseCategory.HEALTH, label="Health", icon="❤️", color="#f4a462"),
    Category(value=ExpenseCategory.SHOPPING, label="Shopping", icon="🛍️", color="#6bb0ec"),
    Category(value=ExpenseCategory.OTHER, label="Other", icon="⋯", color="#f9e64f"),
)

_BY_VALUE = {category.value.value: category for category in CATEGORIES}
_BY_LABEL = {category.label.lower(): category for category in CATEGORIES}


def get_category(value) -> Optional[Category]:
    """Look up a category by value (string or enum). None if unknown."""
    if isinstance(value, ExpenseCategory):
        value = value.value
    if not isinstance(value, str):
        return None
    return _BY_VALUE.get(value)


def category_label(value, fallback: str = "N/A") -> str:
    """Display label for a category value, or the fallback when unknown."""
    category = get_category(value)
    return category.label if category else fallback


def match_label(label: Optional[str]) -> Optional[Category]:
    """
    Map a display label back to its registry entry.

    Matching is case-insensitive and ignores surrounding whitespace.
    Returns None when nothing matches.
    """
    if not label:
        return None
    return _BY_LABEL.get(label.strip().lower())


def category_values() -> list[str]:
    return [category.value.value for category in CATEGORIES]


def category_labels() -> list[str]:
    return [category.label for category in CATEGORIES]
