"""
SQLAlchemy backend — products, sales and sales_items tables.

Money is stored as integer cents; timestamps as naive UTC.

    session_factory, engine = await create_database("sqlite+aiosqlite:///pos.db")
    backend = SQLAlchemyBackend(session_factory)
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime, UTC

from sqlalchemy import DateTime, ForeignKey, Integer, String, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from tillpoint._types import ProductId, SaleId, StoreName
from tillpoint.domain import NewSale, Product, Sale, SaleLine
from tillpoint.errors import BackendError
from tillpoint.money import from_cents, to_cents


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class ProductTable(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    store_name: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)


class SaleTable(Base):
    __tablename__ = "sales"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    store_name: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    cashier_name: Mapped[str] = mapped_column(String(120), nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    sale_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)


class SaleItemTable(Base):
    __tablename__ = "sales_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sale_id: Mapped[str] = mapped_column(ForeignKey("sales.id"), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create tables and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


def _to_utc_naive(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(UTC).replace(tzinfo=None)


def _from_utc_naive(moment: datetime) -> datetime:
    return moment.replace(tzinfo=UTC)


# ═══════════════════════════════════════════════════════════════════════════════
# Backend
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyBackend:
    """
    Backend over an async SQLAlchemy session factory.

    Each protocol call uses its own session and commits on its own, which
    mirrors the hosted service: no transaction spans two calls.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session = session_factory

    async def add_products(self, products: Iterable[Product]) -> None:
        """Insert or replace catalog rows. Inventory management, not checkout."""
        async with self._session() as session:
            for p in products:
                await session.merge(
                    ProductTable(
                        id=p.id,
                        store_name=p.store,
                        name=p.name,
                        price_cents=to_cents(p.price),
                        stock=p.stock,
                        image_url=p.image_url,
                    )
                )
            await session.commit()

    async def create_sale(self, new_sale: NewSale) -> Sale:
        sale_id = f"sale_{uuid.uuid4().hex[:12]}"
        row = SaleTable(
            id=sale_id,
            store_name=new_sale.store,
            cashier_name=new_sale.operator,
            total_cents=to_cents(new_sale.total),
            sale_date=_to_utc_naive(new_sale.created_at),
        )
        try:
            async with self._session() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as exc:
            raise BackendError(f"Sale insert failed: {exc}") from exc

        return Sale(
            id=sale_id,
            store=new_sale.store,
            operator=new_sale.operator,
            total=from_cents(row.total_cents),
            created_at=new_sale.created_at,
        )

    async def insert_sale_lines(self, sale_id: SaleId, lines: Sequence[SaleLine]) -> None:
        try:
            async with self._session() as session:
                exists = await session.get(SaleTable, sale_id)
                if exists is None:
                    raise BackendError(f"Sale {sale_id} does not exist")
                session.add_all(
                    SaleItemTable(
                        sale_id=sale_id,
                        product_id=line.product_id,
                        quantity=line.quantity,
                        unit_price_cents=to_cents(line.unit_price),
                    )
                    for line in lines
                )
                await session.commit()
        except SQLAlchemyError as exc:
            raise BackendError(f"Sale item insert failed: {exc}") from exc

    async def update_stock(self, product_id: ProductId, new_stock: int) -> None:
        try:
            async with self._session() as session:
                result = await session.execute(
                    update(ProductTable)
                    .where(ProductTable.id == product_id)
                    .values(stock=new_stock)
                )
                await session.commit()
        except SQLAlchemyError as exc:
            raise BackendError(f"Stock update failed for {product_id}: {exc}") from exc

        if result.rowcount == 0:
            raise BackendError(f"Product {product_id} does not exist")

    async def fetch_products(self, store: StoreName) -> list[Product]:
        try:
            async with self._session() as session:
                rows = (
                    await session.execute(
                        select(ProductTable)
                        .where(ProductTable.store_name == store)
                        .order_by(ProductTable.name)
                    )
                ).scalars().all()
        except SQLAlchemyError as exc:
            raise BackendError(f"Product query failed: {exc}") from exc

        return [
            Product(
                id=row.id,
                name=row.name,
                price=from_cents(row.price_cents),
                stock=row.stock,
                store=row.store_name,
                image_url=row.image_url,
            )
            for row in rows
        ]

    async def fetch_sales_since(self, store: StoreName, since: datetime) -> list[Sale]:
        try:
            async with self._session() as session:
                rows = (
                    await session.execute(
                        select(SaleTable)
                        .where(SaleTable.store_name == store)
                        .where(SaleTable.sale_date >= _to_utc_naive(since))
                        .order_by(SaleTable.sale_date)
                    )
                ).scalars().all()
        except SQLAlchemyError as exc:
            raise BackendError(f"Sales query failed: {exc}") from exc

        return [
            Sale(
                id=row.id,
                store=row.store_name,
                operator=row.cashier_name,
                total=from_cents(row.total_cents),
                created_at=_from_utc_naive(row.sale_date),
            )
            for row in rows
        ]

    async def lines_for(self, sale_id: SaleId) -> list[SaleLine]:
        async with self._session() as session:
            rows = (
                await session.execute(
                    select(SaleItemTable)
                    .where(SaleItemTable.sale_id == sale_id)
                    .order_by(SaleItemTable.id)
                )
            ).scalars().all()
        return [
            SaleLine(
                sale_id=row.sale_id,
                product_id=row.product_id,
                quantity=row.quantity,
                unit_price=from_cents(row.unit_price_cents),
            )
            for row in rows
        ]


__all__ = (
    "Base",
    "ProductTable",
    "SaleTable",
    "SaleItemTable",
    "create_database",
    "SQLAlchemyBackend",
)
