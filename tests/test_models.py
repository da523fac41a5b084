"""
Tests for record decoding: malformed rows fail closed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from lunestock.domains.inventory.errors import RecordDecodeError
from lunestock.domains.inventory.models import (
    Color,
    ProductVariant,
    Sale,
    User,
    parse_inventory_rows,
    parse_row,
    parse_rows,
)


def _sale_row(**overrides: object) -> dict:
    row = {
        "id": 7,
        "product_name": "Polo Básico",
        "size": "M",
        "color": "Negro",
        "quantity": 2,
        "price": 39.9,
        "total": 79.8,
        "date": "2024-05-10T15:30:00",
        "unused_column": "x",
    }
    row.update(overrides)
    return row


def test_parse_sale_row() -> None:
    """Integer ids become strings, floats become exact decimals, naive dates become UTC."""
    sale = parse_row(Sale, "sales", _sale_row())
    assert sale.id == "7"
    assert sale.price == Decimal("39.9")
    assert sale.total == Decimal("79.8")
    assert sale.date == datetime(2024, 5, 10, 15, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "overrides",
    [
        {"quantity": "2"},
        {"quantity": 0},
        {"price": -1},
        {"date": "not a date"},
        {"product_name": None},
    ],
)
def test_malformed_sale_rejected(overrides: dict) -> None:
    """Wrong types or out-of-range values raise RecordDecodeError naming the table and row."""
    with pytest.raises(RecordDecodeError) as exc:
        parse_row(Sale, "sales", _sale_row(**overrides))
    assert exc.value.table == "sales"
    assert "sales" in str(exc.value)


def test_missing_field_rejected() -> None:
    """A row without stock is not silently read as zero."""
    with pytest.raises(RecordDecodeError):
        parse_row(ProductVariant, "product_variants", {"id": "v1", "product_id": "p1", "size": "S", "color": "Negro"})


def test_stock_must_be_int() -> None:
    """Stock is a strict, non-negative integer."""
    base = {"id": "v1", "product_id": "p1", "size": "S", "color": "Negro"}
    assert parse_row(ProductVariant, "product_variants", {**base, "stock": 3}).stock == 3
    for bad in ("3", 2.5, -1):
        with pytest.raises(RecordDecodeError):
            parse_row(ProductVariant, "product_variants", {**base, "stock": bad})


def test_non_object_row() -> None:
    """Anything other than a JSON object is rejected."""
    with pytest.raises(RecordDecodeError):
        parse_row(Color, "colors", ["id", "name"])


def test_parse_rows_fails_whole_batch() -> None:
    """One bad row fails the batch."""
    rows = [{"id": "c1", "name": "Negro", "hex": "#000000"}, {"id": "c2", "name": "Rojo", "hex": "red"}]
    with pytest.raises(RecordDecodeError) as exc:
        parse_rows(Color, "colors", rows)
    assert exc.value.row_id == "c2"


def test_records_are_frozen() -> None:
    """Decoded records cannot be mutated in place."""
    color = Color(id="c1", name="Negro", hex="#000000")
    with pytest.raises(Exception):
        color.name = "Blanco"  # type: ignore[misc]


def test_user_username_default() -> None:
    """A missing username reads as empty."""
    assert User(id="u1", email="a@b.c", username=None).username == ""


def test_parse_inventory_rows() -> None:
    """Variant rows need their embedded product name."""
    good = {"id": "v1", "product_id": "p1", "size": "S", "color": "Negro", "stock": 4, "products": {"name": "Polo"}}
    rows = parse_inventory_rows([good])
    assert rows[0].product_name == "Polo" and rows[0].stock == 4
    with pytest.raises(RecordDecodeError):
        parse_inventory_rows([{**good, "products": None}])


def test_sale_to_row() -> None:
    """Rows sent to the store carry ISO dates and numeric money."""
    row = parse_row(Sale, "sales", _sale_row()).to_row()
    assert row["price"] == 39.9
    assert row["total"] == 79.8
    assert row["date"] == "2024-05-10T15:30:00+00:00"
    assert "id" not in row
