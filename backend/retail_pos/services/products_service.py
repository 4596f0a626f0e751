# backend/retail_pos/services/products_service.py
"""
Catalog Manager

Owns product records. Two rules matter more than the rest:

- Image first, row second: when an upload accompanies a create or update, the
  storage backend must succeed before the product row is committed. A failed
  upload leaves the catalog untouched.
- Stock only moves through reduce_stock, which is a single conditional UPDATE
  (see concurrency.execute_conditional_update). There is no read-then-write.

Replaced images are not deleted from storage; stale files are accepted drift.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import update

from ..extensions import db
from ..errors import InsufficientStock, NotFound
from ..models import Product
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_product, parse_quantity
from .concurrency import execute_conditional_update
from .storage_service import StorageBackend

PRODUCT_MUTABLE_FIELDS = {"name", "price", "stock", "description", "unit"}

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=PRODUCT_MUTABLE_FIELDS,
    required_on_create={"name", "price", "stock"},
)


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded file, detached from the request object."""
    data: bytes
    filename: str


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


class CatalogManager:
    def __init__(self, storage: StorageBackend):
        self.storage = storage

    def _store_image(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None:
            return None
        return self.storage.store(image.data, image.filename)

    def list_products(self) -> list[Product]:
        """Newest first. Read-only."""
        return (
            db.session.query(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )

    def get_product(self, product_id: int) -> Product:
        p = db.session.get(Product, product_id)
        if p is None:
            raise NotFound("Product not found")
        return p

    def create_product(self, payload: dict, image: Optional[ImageUpload] = None) -> Product:
        """
        Create a product from a raw payload (JSON body or form fields).

        Raises:
            ValidationError: missing/blank name, price <= 0, stock < 0
            StorageWriteFailed: image upload failed; no row is written
        """
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)

        reference = self._store_image(image)

        p = Product(image=reference or "")
        apply_product_patch(p, patch)

        db.session.add(p)
        db.session.commit()
        return p

    def update_product(self, product_id: int, payload: dict, image: Optional[ImageUpload] = None) -> Product:
        """
        Partial update. Only supplied fields are validated and written.

        Raises:
            NotFound: no such product
            ValidationError: a supplied field is out of range
            StorageWriteFailed: image upload failed; the row is left unchanged
        """
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)

        p = db.session.get(Product, product_id)
        if p is None:
            raise NotFound("Product not found")

        reference = self._store_image(image)

        apply_product_patch(p, patch)
        if reference is not None:
            p.image = reference

        db.session.commit()
        return p

    def delete_product(self, product_id: int) -> bool:
        """
        Hard delete. Deleting an id that does not exist is a no-op.

        Returns True if a row was removed. Past transactions keep their
        product_name snapshot and are unaffected.
        """
        deleted = (
            db.session.query(Product)
            .filter(Product.id == product_id)
            .delete(synchronize_session=False)
        )
        db.session.commit()
        return bool(deleted)

    def reduce_stock(self, product_id: int, quantity) -> int:
        """
        Atomically subtract quantity from stock and return the new level.

        Raises:
            ValidationError: quantity is not a positive integer
            NotFound: no such product
            InsufficientStock: stock < quantity; stock is left unchanged
            PersistenceError: the database could not apply the update
        """
        quantity = parse_quantity(quantity)

        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
        )
        affected = execute_conditional_update(stmt)

        if affected == 0:
            db.session.rollback()
            exists = db.session.query(Product.id).filter(Product.id == product_id).first()
            if exists is None:
                raise NotFound("Product not found")
            raise InsufficientStock("Insufficient stock")

        # Still inside the writing transaction: this is our own result
        new_stock = db.session.query(Product.stock).filter(Product.id == product_id).scalar()
        db.session.commit()
        return new_stock
