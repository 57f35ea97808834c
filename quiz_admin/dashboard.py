"""
Dashboard statistics for the storefront admin.
"""
from dataclasses import dataclass
from typing import List

from .localized_text import localize_with_fallback
from .models import ContactMessage, Product


@dataclass(frozen=True)
class DashboardStats:
    total_products: int
    available_products: int
    categories: int
    new_messages: int


def compute_dashboard_stats(products: List[Product], messages: List[ContactMessage]) -> DashboardStats:
    return DashboardStats(
        total_products=len(products),
        available_products=sum(1 for p in products if p.availability),
        categories=len({p.category for p in products}),
        new_messages=sum(1 for m in messages if m.status == "new"),
    )


def most_viewed(products: List[Product], count: int = 3) -> List[Product]:
    # No view tracking exists yet; catalogue order stands in for popularity.
    return products[:count]


def product_display_name(product: Product, locale: str) -> str:
    return localize_with_fallback(product.name, locale)


def recent_messages(messages: List[ContactMessage], count: int = 2) -> List[ContactMessage]:
    """The store keeps contact messages newest first."""
    return messages[:count]
