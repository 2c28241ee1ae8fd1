from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from storefront.api.deps import RowId, get_app_settings, optional_identity, require_permission
from storefront.config import Settings
from storefront.db import get_db
from storefront.rbac import Permission
from storefront.schemas.product_schema import product_to_dict
from storefront.services.product_query import ProductQuery
from storefront.services.product_service import ProductService

router = APIRouter(tags=["catalogue"])

can_write_products = require_permission(Permission.PRODUCTS_WRITE)


def _form_fields(**fields) -> dict:
    # multipart parts that were not sent stay out of the payload
    return {k: v for k, v in fields.items() if v is not None}


@router.get("", summary="List products", dependencies=[Depends(optional_identity)])
def list_products(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    query = ProductQuery.from_params(
        page=page,
        limit=limit,
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
        default_limit=settings.DEFAULT_PAGE_SIZE,
        max_limit=settings.MAX_PAGE_SIZE,
    )
    items, total = ProductService(db, settings).query(query)
    return {"total": total, "products": [product_to_dict(p) for p in items]}


@router.post(
    "",
    summary="Create product",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(can_write_products)],
)
def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    image: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    form = _form_fields(
        name=name,
        description=description,
        price=price,
        category=category,
        stock=stock,
        imageUrl=image_url,
    )
    p = ProductService(db, settings).create(form, image)
    return product_to_dict(p)


@router.get("/{product_id}", summary="Get product", dependencies=[Depends(optional_identity)])
def get_product(
    product_id: RowId,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return product_to_dict(ProductService(db, settings).get(product_id))


@router.put(
    "/{product_id}",
    summary="Update product",
    dependencies=[Depends(can_write_products)],
)
def update_product(
    product_id: RowId,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    image: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    form = _form_fields(
        name=name,
        description=description,
        price=price,
        category=category,
        stock=stock,
        imageUrl=image_url,
    )
    p = ProductService(db, settings).update(product_id, form, image)
    return product_to_dict(p)


@router.delete(
    "/{product_id}",
    summary="Delete product",
    dependencies=[Depends(can_write_products)],
)
def delete_product(
    product_id: RowId,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    snapshot = ProductService(db, settings).delete(product_id)
    return {"message": "Product deleted", "product": snapshot}
