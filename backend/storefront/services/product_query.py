from dataclasses import dataclass
from typing import Optional

from storefront.db import MAX_ROW_ID
from storefront.errors import ValidationError
from storefront.models.product import Product

# public sort key -> model column
SORTABLE_FIELDS = {
    "id": Product.id,
    "name": Product.name,
    "description": Product.description,
    "price": Product.price,
    "category": Product.category,
    "stock": Product.stock,
    "imageUrl": Product.image_url,
    "createdAt": Product.created_at,
}

SORT_ORDERS = {"asc": 1, "desc": -1}


def _to_int(raw) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def normalize_page(raw, limit: int = 1) -> int:
    """Page number >= 1, small enough that (page - 1) * limit fits a 64-bit row offset."""
    page = _to_int(raw)
    if page is None or page < 1:
        return 1
    return min(page, MAX_ROW_ID // limit + 1)


def normalize_limit(raw, default: int, maximum: int) -> int:
    limit = _to_int(raw)
    if limit is None:
        return default
    return max(1, min(limit, maximum))


@dataclass(frozen=True)
class ProductQuery:
    page: int = 1
    limit: int = 10
    category: Optional[str] = None
    sort_by: Optional[str] = None
    # +1 ascending, -1 descending
    sort_direction: int = 1

    @classmethod
    def from_params(
        cls,
        page=None,
        limit=None,
        category: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        default_limit: int = 10,
        max_limit: int = 100,
    ) -> "ProductQuery":
        if sort_by is not None and sort_by not in SORTABLE_FIELDS:
            allowed = ", ".join(sorted(SORTABLE_FIELDS))
            raise ValidationError(f"sortBy: must be one of {allowed}")
        order = (sort_order or "asc").lower()
        if order not in SORT_ORDERS:
            raise ValidationError("sortOrder: must be 'asc' or 'desc'")
        size = normalize_limit(limit, default_limit, max_limit)
        return cls(
            page=normalize_page(page, size),
            limit=size,
            category=category or None,
            sort_by=sort_by,
            sort_direction=SORT_ORDERS[order],
        )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def filters(self) -> dict:
        if self.category is None:
            return {}
        return {"category": self.category}

    def order_by(self) -> list:
        """Order clauses; insertion order when no sort field was requested."""
        if self.sort_by is None:
            return [Product.id.asc()]
        column = SORTABLE_FIELDS[self.sort_by]
        primary = column.asc() if self.sort_direction > 0 else column.desc()
        if self.sort_by == "id":
            return [primary]
        # id breaks ties so consecutive pages never overlap
        return [primary, Product.id.asc()]
