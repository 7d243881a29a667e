# eversol/services/product_filtering.py
"""
Search, filter, sort and paginate an in-memory product list.

All functions are pure: inputs are never mutated and a new list is
returned. `apply_filters` chains them in a fixed order:

    search -> category -> availability -> price range -> sort
"""
import math
from typing import Sequence

from eversol.schemas.product import Filters, PaginatedProducts, Product, SortCriteria

INITIAL_FILTERS = Filters(sort_by="relevance")


def count_active_filters(filters: Filters) -> int:
    """
    Number of explicit filters set (for badge counts).

    Search text and sort order are not counted.
    """
    count = 0
    if filters.categories:
        count += 1
    if filters.price_range is not None:
        count += 1
    if filters.availability:
        count += 1
    return count


def search(products: Sequence[Product], query: str | None) -> list[Product]:
    """
    Case-insensitive substring match on name or category.
    A blank query matches everything.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(products)
    return [
        p
        for p in products
        if needle in p.name.lower() or needle in p.category.lower()
    ]


def filter_by_category(
    products: Sequence[Product], categories: list[str] | None
) -> list[Product]:
    if not categories:
        return list(products)
    wanted = {c.lower() for c in categories}
    return [p for p in products if p.category.lower() in wanted]


def filter_by_price(
    products: Sequence[Product], price_range: tuple[float, float] | None
) -> list[Product]:
    """Inclusive on both bounds."""
    if price_range is None:
        return list(products)
    low, high = price_range
    return [p for p in products if low <= p.price <= high]


def filter_by_availability(products: Sequence[Product]) -> list[Product]:
    return [p for p in products if p.in_stock]


def sort_products(
    products: Sequence[Product], criteria: SortCriteria = "relevance"
) -> list[Product]:
    """
    Return a sorted copy. "relevance" keeps the incoming order.
    """
    if criteria == "price-low-to-high":
        return sorted(products, key=lambda p: p.price)
    if criteria == "price-high-to-low":
        return sorted(products, key=lambda p: p.price, reverse=True)
    if criteria == "newest":
        return sorted(products, key=lambda p: p.created_at, reverse=True)
    if criteria == "popular":
        return sorted(products, key=lambda p: p.popularity, reverse=True)
    return list(products)


def apply_filters(products: Sequence[Product], filters: Filters) -> list[Product]:
    """
    Run the full pipeline; absent/empty filters are skipped, sort always runs.
    """
    result = list(products)

    if filters.search_query:
        result = search(result, filters.search_query)
    if filters.categories:
        result = filter_by_category(result, filters.categories)
    if filters.availability:
        result = filter_by_availability(result)
    if filters.price_range is not None:
        result = filter_by_price(result, filters.price_range)

    return sort_products(result, filters.sort_by or "relevance")


def paginate(
    products: Sequence[Product], page: int, page_size: int
) -> PaginatedProducts:
    """
    Slice one page (1-indexed). `page` is clamped into [1, total_pages],
    or to 1 when the list is empty.

    Raises:
        ValueError: if page_size < 1.
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    total = len(products)
    total_pages = math.ceil(total / page_size)
    current = min(max(1, page), total_pages or 1)
    start = (current - 1) * page_size

    return PaginatedProducts(
        products=list(products[start : start + page_size]),
        total_products=total,
        total_pages=total_pages,
        current_page=current,
    )
