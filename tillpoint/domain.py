"""
Domain — catalog, cart and sale records.

Money is Decimal; stock is a plain int and may be read back negative
after racing sales on other registers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from tillpoint._types import ProductId, SaleId, StoreName
from tillpoint.money import compute_total, line_total, to_decimal

DEFAULT_LOW_STOCK = 5


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    id: ProductId
    name: str
    price: Decimal
    stock: int
    store: StoreName
    image_url: str | None = None

    def __post_init__(self) -> None:
        price = to_decimal(self.price)
        if price < 0:
            raise ValueError(f"Product {self.id}: negative price {price}")
        object.__setattr__(self, "price", price)

    @property
    def sold_out(self) -> bool:
        return self.stock <= 0

    def low_stock(self, threshold: int = DEFAULT_LOW_STOCK) -> bool:
        return 0 < self.stock <= threshold


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One product in the pending sale.

    Name, price and stock are captured when the product is first added;
    later catalog refreshes do not change a line already in the cart.
    """

    product_id: ProductId
    name: str
    unit_price: Decimal
    stock: int
    quantity: int

    @classmethod
    def first(cls, product: Product) -> CartLine:
        return cls(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            stock=product.stock,
            quantity=1,
        )

    def with_quantity(self, quantity: int) -> CartLine:
        return CartLine(
            product_id=self.product_id,
            name=self.name,
            unit_price=self.unit_price,
            stock=self.stock,
            quantity=quantity,
        )

    @property
    def total(self) -> Decimal:
        return line_total(self)


# ═══════════════════════════════════════════════════════════════════════════════
# Sales
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Operator:
    """The staff member at the register."""

    display_name: str
    store: StoreName


@dataclass(frozen=True, slots=True)
class NewSale:
    """Sale as sent to the backend, before an id is assigned."""

    store: StoreName
    operator: str
    total: Decimal
    created_at: datetime


@dataclass(frozen=True, slots=True)
class Sale:
    id: SaleId
    store: StoreName
    operator: str
    total: Decimal
    created_at: datetime


@dataclass(frozen=True, slots=True)
class SaleLine:
    sale_id: SaleId
    product_id: ProductId
    quantity: int
    unit_price: Decimal

    @classmethod
    def from_cart(cls, sale_id: SaleId, line: CartLine) -> SaleLine:
        return cls(
            sale_id=sale_id,
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
        )


@dataclass(frozen=True, slots=True)
class Receipt:
    """What the operator sees right after a sale; never persisted."""

    sale: Sale
    lines: tuple[CartLine, ...]

    @property
    def reference(self) -> str:
        return str(self.sale.id)

    @property
    def total(self) -> Decimal:
        return self.sale.total

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def recomputed_total(self) -> Decimal:
        return compute_total(self.lines)


__all__ = (
    "DEFAULT_LOW_STOCK",
    "Product",
    "CartLine",
    "Operator",
    "NewSale",
    "Sale",
    "SaleLine",
    "Receipt",
)
