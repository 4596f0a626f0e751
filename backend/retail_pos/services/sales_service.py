# Overview: Service-layer operations for the sales ledger; append-only.

from __future__ import annotations

from ..extensions import db
from ..models import Transaction
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_sale

"""
Transaction Ledger Invariants (authoritative)

- Append-only: entries are created once and never updated or deleted here.
- product_name is a snapshot; no foreign key to products.
- occurred_at is assigned by the server at write time.
- Recording a sale does not touch stock. Callers invoke
  CatalogManager.reduce_stock separately; the two writes do not share a
  database transaction, so a crash between them can leave one without the
  other.
"""

SALE_POLICY = ModelValidationPolicy(
    writable_fields={"product_name", "quantity", "total_price"},
    required_on_create={"product_name", "quantity", "total_price"},
    aliases={"productName": "product_name", "totalPrice": "total_price"},
)


class TransactionLedger:
    def record_sale(self, payload: dict) -> Transaction:
        """
        Append a sale.

        Accepts product_name/productName, quantity, total_price/totalPrice.
        Raises ValidationError on missing fields, quantity <= 0 or total <= 0.
        """
        patch = validate_payload(model=Transaction, payload=payload, policy=SALE_POLICY, partial=False)
        enforce_rules_sale(patch)

        trx = Transaction(
            product_name=patch["product_name"],
            quantity=patch["quantity"],
            total_price=patch["total_price"],
            occurred_at=utcnow(),
        )
        db.session.add(trx)
        db.session.commit()
        return trx

    def list_sales(self) -> list[Transaction]:
        """Most recent first."""
        return (
            db.session.query(Transaction)
            .order_by(Transaction.occurred_at.desc(), Transaction.id.desc())
            .all()
        )
