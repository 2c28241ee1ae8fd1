"""
Catalogue seeding helpers used by scripts/seed_products.py.

The loader is tolerant of a few catalogue shapes: a plain list of entries,
an object with an ``items`` list, or an object whose values are the entries.
Entries that do not validate as products are skipped and logged.
"""
import json
import logging
import os
from typing import List, Optional

from storefront.db import Database
from storefront.errors import ValidationError
from storefront.rbac import Role
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.product_schema import ProductCreate, product_fields
from storefront.services.auth_service import hash_password
from storefront.validation import validate_payload

log = logging.getLogger("storefront.seed")


def normalize_entry(entry: dict) -> dict:
    """Map common catalogue spellings onto product payload keys."""
    price = entry.get("price", entry.get("amount"))
    if price is None and entry.get("price_cents") is not None:
        try:
            price = int(entry["price_cents"]) / 100
        except (TypeError, ValueError):
            price = None

    image = entry.get("imageUrl") or entry.get("image")
    if not image:
        imgs = entry.get("images") or entry.get("image_urls") or []
        image = imgs[0] if isinstance(imgs, (list, tuple)) and imgs else None

    out = {
        "name": entry.get("name") or entry.get("title"),
        "description": entry.get("description") or entry.get("name") or entry.get("title"),
        "price": price,
        "category": entry.get("category") or "uncategorized",
        "stock": entry.get("stock", entry.get("quantity")),
        "imageUrl": image,
    }
    return {k: v for k, v in out.items() if v is not None}


def load_catalogue(path: str) -> List[dict]:
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        if isinstance(data.get("items"), list):
            return data["items"]
        return list(data.values())
    if isinstance(data, list):
        return data
    return []


def seed_products(database: Database, entries: List[dict]) -> int:
    db = database.SessionLocal()
    repo = ProductRepository(db)
    created = 0
    try:
        for entry in entries:
            try:
                payload = validate_payload(ProductCreate, normalize_entry(entry))
            except ValidationError as e:
                log.warning("Skipping catalogue entry %r: %s", entry.get("name"), e.message)
                continue
            repo.create(**product_fields(payload))
            created += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    log.info("Seeded %d products", created)
    return created


def ensure_admin(database: Database, email: str, password: str, name: Optional[str] = None) -> bool:
    """Create an admin account unless the email is already registered. Returns True if created."""
    db = database.SessionLocal()
    try:
        users = UserRepository(db)
        if users.get_by_email(email):
            return False
        users.create(
            name=name or "Administrator",
            email=email,
            password_hash=hash_password(password),
            role=Role.ADMIN.value,
        )
        db.commit()
        return True
    finally:
        db.close()
