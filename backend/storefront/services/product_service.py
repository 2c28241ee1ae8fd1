import logging
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session

from storefront.config import Settings
from storefront.errors import NotFound
from storefront.models.product import Product
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product_schema import (
    ProductCreate,
    ProductUpdate,
    product_fields,
    product_to_dict,
)
from storefront.services.product_query import ProductQuery
from storefront.services.upload_service import ImageStorage
from storefront.validation import validate_payload

log = logging.getLogger("storefront.products")


class ProductService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.repo = ProductRepository(db)
        self.images = ImageStorage(settings)

    def query(self, query: ProductQuery):
        return self.repo.list(
            filters=query.filters(),
            order_by=query.order_by(),
            skip=query.skip,
            limit=query.limit,
        )

    def get(self, product_id: int) -> Product:
        p = self.repo.get(product_id)
        if not p:
            raise NotFound("Product not found")
        return p

    def create(self, form: dict, images: Optional[List[UploadFile]]) -> Product:
        staged = self.images.stage(self.images.single(images), required=True)
        payload = validate_payload(ProductCreate, form)
        fields = product_fields(payload)
        fields["image_url"] = self.images.store(staged)
        p = self.repo.create(**fields)
        self.db.commit()
        log.info("Created product id=%s", p.id)
        return p

    def update(self, product_id: int, form: dict, images: Optional[List[UploadFile]]) -> Product:
        p = self.get(product_id)
        staged = self.images.stage(self.images.single(images), required=False)
        payload = validate_payload(ProductUpdate, form)
        fields = product_fields(payload)
        if staged is not None:
            # the previous file is left for the orphan sweeper
            fields["image_url"] = self.images.store(staged)
        self.repo.update(p, fields)
        self.db.commit()
        return p

    def delete(self, product_id: int) -> dict:
        """Delete the product and return what it looked like."""
        p = self.get(product_id)
        snapshot = product_to_dict(p)
        self.repo.delete(p)
        self.db.commit()
        log.info("Deleted product id=%s", product_id)
        return snapshot
