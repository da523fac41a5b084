"""
Typed records for the inventory domain.

Rows coming back from the data store are decoded here and nowhere else. A row
that does not match its model is rejected with RecordDecodeError rather than
being passed along half-filled.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from lunestock.domains.inventory.errors import RecordDecodeError

TABLE_PRODUCTS = "products"
TABLE_VARIANTS = "product_variants"
TABLE_SALES = "sales"
TABLE_SIZES = "sizes"
TABLE_COLORS = "colors"

HEX_PATTERN = r"^#([0-9A-Fa-f]{6}|[0-9A-Fa-f]{3})$"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _money(value: Any) -> Any:
    # float -> Decimal through str, so 39.9 stays 39.9
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class Record(BaseModel):
    """Base for decoded store rows: immutable, extra columns ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("id", "product_id", "variant_id", mode="before", check_fields=False)
    @classmethod
    def _id_to_str(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class Product(Record):
    id: str
    name: str = Field(min_length=1)
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_row(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description}


class ProductVariant(Record):
    id: str
    product_id: str
    size: str
    color: str
    stock: int = Field(ge=0, strict=True)
    updated_at: Optional[datetime] = None

    def to_row(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "size": self.size,
            "color": self.color,
            "stock": self.stock,
        }


class Sale(Record):
    """
    A recorded sale. Product name, size and color are a snapshot taken when
    the sale was made; later edits to the variant do not change them.
    """

    id: Optional[str] = None
    product_name: str
    size: str
    color: str
    quantity: int = Field(gt=0, strict=True)
    price: Decimal = Field(ge=0)
    total: Decimal
    date: datetime
    product_id: Optional[str] = None
    variant_id: Optional[str] = None

    @field_validator("price", "total", mode="before")
    @classmethod
    def _decimal(cls, v: Any) -> Any:
        return _money(v)

    @field_validator("date")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    def to_row(self) -> dict[str, Any]:
        return {
            "product_name": self.product_name,
            "size": self.size,
            "color": self.color,
            "quantity": self.quantity,
            "price": float(self.price),
            "total": float(self.total),
            "date": self.date.isoformat(),
            "product_id": self.product_id,
            "variant_id": self.variant_id,
        }


class Size(Record):
    id: str
    name: str = Field(min_length=1)


class Color(Record):
    id: str
    name: str = Field(min_length=1)
    hex: str = Field(pattern=HEX_PATTERN)


class User(Record):
    id: str
    email: str
    username: str = ""

    @field_validator("username", mode="before")
    @classmethod
    def _default_username(cls, v: Any) -> Any:
        return v or ""


# --- Derived views (never persisted) ---

@dataclass(frozen=True)
class ProductWithVariants:
    product: Product
    variants: list[ProductVariant] = field(default_factory=list)

    @property
    def total_stock(self) -> int:
        return sum(v.stock for v in self.variants)


@dataclass(frozen=True)
class InventoryRow:
    """A variant joined with the name of its product."""

    variant: ProductVariant
    product_name: str

    @property
    def id(self) -> str:
        return self.variant.id

    @property
    def size(self) -> str:
        return self.variant.size

    @property
    def color(self) -> str:
        return self.variant.color

    @property
    def stock(self) -> int:
        return self.variant.stock


@dataclass(frozen=True)
class DashboardStats:
    total_revenue: Decimal
    total_stock: int
    recent_sales: int
    low_stock_items: int
    total_products: int = 0


@dataclass(frozen=True)
class SalesPoint:
    label: str
    day: date
    value: int = 0


@dataclass(frozen=True)
class StockPoint:
    name: str
    stock: int


# --- Decoding ---

R = TypeVar("R", bound=Record)


def _describe(err: PydanticValidationError) -> str:
    parts = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e.get("loc", ())) or "<row>"
        parts.append(f"{loc}: {e.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_row(model: Type[R], table: str, row: Any) -> R:
    """Decode one store row into `model`. Raises RecordDecodeError on mismatch."""
    if not isinstance(row, dict):
        raise RecordDecodeError(table, None, f"expected an object, got {type(row).__name__}")
    try:
        return model.model_validate(row)
    except PydanticValidationError as e:
        raise RecordDecodeError(table, row.get("id"), _describe(e)) from e


def parse_rows(model: Type[R], table: str, rows: Iterable[Any]) -> list[R]:
    """Decode every row; the first malformed row fails the whole batch."""
    return [parse_row(model, table, r) for r in rows]


def parse_inventory_rows(rows: Iterable[Any]) -> list[InventoryRow]:
    """
    Decode variant rows that embed their product, e.g.
    ``{"id": ..., "size": "M", ..., "products": {"name": "Polo"}}``.
    """
    out: list[InventoryRow] = []
    for row in rows:
        variant = parse_row(ProductVariant, TABLE_VARIANTS, row)
        embedded = row.get("products")
        if not isinstance(embedded, dict) or not isinstance(embedded.get("name"), str):
            raise RecordDecodeError(TABLE_VARIANTS, variant.id, "products.name: missing product name")
        out.append(InventoryRow(variant=variant, product_name=embedded["name"]))
    return out
