"""
Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and stateless.
Totals are recomputed from the repository snapshot on every read and
never stored.

Sums use Decimal, so adding many small amounts gives the same result
in any order.
"""

from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel, Field

from spendwise.models.category import CATEGORIES, get_category
from spendwise.models.expense import Expense


_REGISTRY_ORDER = {category.value.value: index for index, category in enumerate(CATEGORIES)}


class ChartSlice(BaseModel):
    """One slice of the category breakdown chart."""

    category: str
    label: str
    total: Decimal
    color: str


class SpendingSummary(BaseModel):
    """Headline numbers for the overview card."""

    total: Decimal = Decimal("0")
    transaction_count: int = Field(default=0, ge=0)
    by_category: dict[str, Decimal] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.transaction_count == 0


def aggregate(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """
    Sum amounts per category value.

    Categories without expenses are omitted. Keys follow registry
    order, so equal inputs always give equal (and equally ordered)
    results.
    """
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        key = expense.category.value
        totals[key] = totals.get(key, Decimal("0")) + expense.amount

    return dict(sorted(
        totals.items(),
        key=lambda item: _REGISTRY_ORDER.get(item[0], len(_REGISTRY_ORDER)),
    ))


def grand_total(expenses: Iterable[Expense]) -> Decimal:
    """Sum of all amounts; 0 for no expenses."""
    return sum((expense.amount for expense in expenses), Decimal("0"))


def summarize(expenses: Iterable[Expense]) -> SpendingSummary:
    expenses = list(expenses)
    return SpendingSummary(
        total=grand_total(expenses),
        transaction_count=len(expenses),
        by_category=aggregate(expenses),
    )


def build_chart_slices(totals: dict[str, Decimal]) -> list[ChartSlice]:
    """
    Turn per-category totals into chart slices.

    Each slice takes its category's registry color, so a category keeps
    the same color whichever other categories are present.
    """
    slices = []
    for value, total in totals.items():
        category = get_category(value)
        slices.append(ChartSlice(
            category=value,
            label=category.label if category else "N/A",
            total=total,
            color=category.color if category else "#999999",
        ))
    return slices
