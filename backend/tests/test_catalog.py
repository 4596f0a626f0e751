"""
Catalog and ledger service tests.

Verifies:
- Field validation on create and update
- Stock reduction is exact and never overdraws
- Image storage happens before the row is written; failures leave no row
- Idempotent delete
- Ledger entries keep their product name after the product changes
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from retail_pos.errors import (
    InsufficientStock,
    NotFound,
    StorageWriteFailed,
    ValidationError,
)
from retail_pos.extensions import db
from retail_pos.models import Product, Transaction
from retail_pos.services.products_service import CatalogManager, ImageUpload


def _apple(services, **overrides):
    payload = {"name": "Apple", "price": 10000, "stock": 50}
    payload.update(overrides)
    return services.catalog.create_product(payload)


class TestCreateProduct:
    def test_stock_matches_input(self, services):
        p = _apple(services, stock=7)
        assert p.stock == 7
        assert p.price == Decimal("10000")
        assert p.image == ""
        assert p.unit == "kg"

    def test_accepts_form_strings(self, services):
        p = services.catalog.create_product({"name": " Mangga ", "price": "12500.50", "stock": "3"})
        assert p.name == "Mangga"
        assert p.price == Decimal("12500.50")
        assert p.stock == 3

    @pytest.mark.parametrize("payload", [
        {"name": "", "price": 1, "stock": 1},
        {"name": "   ", "price": 1, "stock": 1},
        {"name": "X", "price": 0, "stock": 1},
        {"name": "X", "price": -5, "stock": 1},
        {"name": "X", "price": "abc", "stock": 1},
        {"name": "X", "price": "NaN", "stock": 1},
        {"name": "X", "price": "0.001", "stock": 1},
        {"name": "X", "price": "0.004", "stock": 1},
        {"name": "X", "price": 1, "stock": -1},
        {"name": "X", "price": 1, "stock": 1.5},
        {"name": "X", "price": 1},
        {"price": 1, "stock": 1},
        {"name": "X", "price": 1, "stock": 1, "id": 99},
    ])
    def test_invalid_payloads_rejected(self, services, payload):
        with pytest.raises(ValidationError):
            services.catalog.create_product(payload)
        assert db.session.query(Product).count() == 0

    def test_image_stored_before_row(self, services):
        storage = Mock()
        storage.store.return_value = "https://cdn.example.com/p/1.png"
        catalog = CatalogManager(storage)

        p = catalog.create_product(
            {"name": "Apple", "price": 1, "stock": 1},
            ImageUpload(data=b"img", filename="a.png"),
        )

        storage.store.assert_called_once_with(b"img", "a.png")
        assert p.image == "https://cdn.example.com/p/1.png"

    def test_storage_failure_leaves_no_product(self, services):
        storage = Mock()
        storage.store.side_effect = StorageWriteFailed("disk full")
        catalog = CatalogManager(storage)

        with pytest.raises(StorageWriteFailed):
            catalog.create_product(
                {"name": "Apple", "price": 1, "stock": 1},
                ImageUpload(data=b"img", filename="a.png"),
            )

        assert db.session.query(Product).count() == 0

    def test_price_rounded_to_cents(self, services):
        p = services.catalog.create_product({"name": "Pin", "price": "0.005", "stock": 1})

        assert p.price == Decimal("0.01")
        assert services.catalog.get_product(p.id).to_dict()["price"] == 0.01

    def test_invalid_payload_never_stores_image(self, services):
        storage = Mock()
        catalog = CatalogManager(storage)

        with pytest.raises(ValidationError):
            catalog.create_product({"name": "", "price": 1, "stock": 1}, ImageUpload(b"img", "a.png"))

        storage.store.assert_not_called()


class TestListAndGet:
    def test_newest_first(self, services):
        first = _apple(services, name="First")
        second = _apple(services, name="Second")

        assert [p.id for p in services.catalog.list_products()] == [second.id, first.id]

    def test_list_is_repeatable(self, services):
        _apple(services)
        assert [p.to_dict() for p in services.catalog.list_products()] == \
            [p.to_dict() for p in services.catalog.list_products()]

    def test_get_missing(self, services):
        with pytest.raises(NotFound):
            services.catalog.get_product(12345)


class TestUpdateProduct:
    def test_partial_update(self, services):
        p = _apple(services)

        updated = services.catalog.update_product(p.id, {"price": "15000"})

        assert updated.price == Decimal("15000")
        assert updated.name == "Apple"
        assert updated.stock == 50

    def test_not_found(self, services):
        with pytest.raises(NotFound):
            services.catalog.update_product(999, {"name": "Ghost"})

    def test_revalidates_supplied_fields(self, services):
        p = _apple(services)

        with pytest.raises(ValidationError):
            services.catalog.update_product(p.id, {"stock": -3})

        db.session.expire_all()
        assert db.session.get(Product, p.id).stock == 50

    def test_new_image_replaces_reference(self, services):
        storage = Mock()
        storage.store.side_effect = ["old.png", "new.png"]
        catalog = CatalogManager(storage)
        p = catalog.create_product({"name": "A", "price": 1, "stock": 1}, ImageUpload(b"1", "x.png"))

        updated = catalog.update_product(p.id, {}, ImageUpload(b"2", "y.png"))

        assert updated.image == "new.png"

    def test_storage_failure_leaves_row_unchanged(self, services):
        storage = Mock()
        catalog = CatalogManager(storage)
        storage.store.return_value = "old.png"
        p = catalog.create_product({"name": "A", "price": 1, "stock": 1}, ImageUpload(b"1", "x.png"))
        storage.store.side_effect = StorageWriteFailed("network down")

        with pytest.raises(StorageWriteFailed):
            catalog.update_product(p.id, {"name": "B"}, ImageUpload(b"2", "y.png"))

        db.session.rollback()
        db.session.expire_all()
        row = db.session.get(Product, p.id)
        assert row.name == "A"
        assert row.image == "old.png"


class TestDeleteProduct:
    def test_delete_then_delete_again(self, services):
        product_id = _apple(services).id

        assert services.catalog.delete_product(product_id) is True
        assert services.catalog.delete_product(product_id) is False

    def test_delete_unknown_is_noop(self, services):
        _apple(services)
        assert services.catalog.delete_product(424242) is False
        assert db.session.query(Product).count() == 1


class TestReduceStock:
    def test_apple_example(self, services):
        p = _apple(services)

        assert services.catalog.reduce_stock(p.id, 20) == 30

        with pytest.raises(InsufficientStock):
            services.catalog.reduce_stock(p.id, 40)

        db.session.expire_all()
        assert db.session.get(Product, p.id).stock == 30

    def test_reduce_to_zero(self, services):
        p = _apple(services, stock=5)
        assert services.catalog.reduce_stock(p.id, 5) == 0

    def test_not_found(self, services):
        with pytest.raises(NotFound):
            services.catalog.reduce_stock(777, 1)

    @pytest.mark.parametrize("quantity", [0, -1, "abc", None, 1.5, True])
    def test_invalid_quantity(self, services, quantity):
        p = _apple(services)

        with pytest.raises(ValidationError):
            services.catalog.reduce_stock(p.id, quantity)

    def test_string_quantity_accepted(self, services):
        p = _apple(services)
        assert services.catalog.reduce_stock(p.id, "10") == 40


class TestLedger:
    def test_record_sale(self, services):
        trx = services.ledger.record_sale({"productName": "Apple", "quantity": 2, "totalPrice": 20000})

        assert trx.product_name == "Apple"
        assert trx.quantity == 2
        assert trx.total_price == Decimal("20000")
        assert trx.occurred_at is not None

    def test_snake_case_fields_accepted(self, services):
        trx = services.ledger.record_sale({"product_name": "Pear", "quantity": "1", "total_price": "5000"})
        assert trx.quantity == 1

    @pytest.mark.parametrize("payload", [
        {"productName": "Apple", "quantity": 0, "totalPrice": 1},
        {"productName": "Apple", "quantity": 1, "totalPrice": 0},
        {"productName": "Apple", "quantity": 1, "totalPrice": "0.004"},
        {"productName": "Apple", "quantity": -2, "totalPrice": 10},
        {"productName": "", "quantity": 1, "totalPrice": 10},
        {"quantity": 1, "totalPrice": 10},
        {"productName": "Apple", "quantity": 1, "totalPrice": 10, "timestamp": "2020-01-01"},
    ])
    def test_invalid_sales_rejected(self, services, payload):
        with pytest.raises(ValidationError):
            services.ledger.record_sale(payload)
        assert db.session.query(Transaction).count() == 0

    def test_total_rounded_to_cents(self, services):
        trx = services.ledger.record_sale({"productName": "Pin", "quantity": 1, "totalPrice": "1.234"})
        assert trx.total_price == Decimal("1.23")

    def test_most_recent_first(self, services):
        first = services.ledger.record_sale({"productName": "A", "quantity": 1, "totalPrice": 1})
        second = services.ledger.record_sale({"productName": "B", "quantity": 1, "totalPrice": 1})

        assert [t.id for t in services.ledger.list_sales()] == [second.id, first.id]

    def test_history_survives_product_rename_and_delete(self, services):
        p = _apple(services)
        services.catalog.reduce_stock(p.id, 3)
        trx = services.ledger.record_sale({"productName": p.name, "quantity": 3, "totalPrice": 30000})

        services.catalog.update_product(p.id, {"name": "Green Apple"})
        services.catalog.delete_product(p.id)

        db.session.expire_all()
        assert db.session.get(Transaction, trx.id).product_name == "Apple"

    def test_recording_a_sale_does_not_touch_stock(self, services):
        p = _apple(services)

        services.ledger.record_sale({"productName": "Apple", "quantity": 5, "totalPrice": 50000})

        db.session.expire_all()
        assert db.session.get(Product, p.id).stock == 50
