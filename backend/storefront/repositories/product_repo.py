from typing import List, Optional, Set, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.models.product import Product


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def list(
        self,
        filters: dict = None,
        order_by: list = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Product], int]:
        """
        Return (page of products, total matching products).

        ``filters`` maps column names to exact-match values; ``order_by`` is a
        list of SQLAlchemy order clauses applied before skip/limit.
        """
        query = self.db.query(Product)
        for column, value in (filters or {}).items():
            query = query.filter(getattr(Product, column) == value)
        total = query.with_entities(func.count(Product.id)).scalar() or 0
        if order_by:
            query = query.order_by(*order_by)
        items = query.offset(skip).limit(limit).all()
        return items, total

    def create(self, **fields) -> Product:
        p = Product(**fields)
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product: Product, fields: dict) -> Product:
        # merge-update: columns not present in ``fields`` keep their value
        for column, value in fields.items():
            setattr(product, column, value)
        self.db.flush()
        return product

    def delete(self, product: Product):
        self.db.delete(product)
        self.db.flush()

    def image_urls(self) -> Set[str]:
        rows = self.db.query(Product.image_url).filter(Product.image_url.isnot(None)).all()
        return {r[0] for r in rows}
