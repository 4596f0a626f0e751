from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Transaction(db.Model):
    """
    Completed sale, append-only.

    product_name is a snapshot taken at sale time, not a foreign key: renaming
    or deleting the product later must not alter history.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_transactions_quantity_positive"),
        db.CheckConstraint("total_price > 0", name="ck_transactions_total_positive"),
        db.Index("ix_transactions_occurred_at", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    total_price = db.Column(db.Numeric(14, 2), nullable=False)

    # Server-assigned; clients cannot backdate a sale
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "total_price": float(self.total_price) if self.total_price is not None else None,
            "timestamp": to_utc_z(self.occurred_at),
        }
