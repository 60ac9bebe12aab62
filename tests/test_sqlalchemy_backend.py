"""
Tests for the SQLAlchemy backend on in-memory SQLite.
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest

from tillpoint.backend import SQLAlchemyBackend, create_database, demo_products
from tillpoint.cart import Cart
from tillpoint.checkout import CheckoutOrchestrator
from tillpoint.domain import NewSale, Operator, SaleLine
from tillpoint.errors import BackendError
from tillpoint.shift import ShiftCounters

from conftest import STORE


def with_backend(test, url="sqlite+aiosqlite:///:memory:"):
    """Run `test(backend)` against a fresh seeded database."""

    async def run():
        session_factory, engine = await create_database(url)
        try:
            backend = SQLAlchemyBackend(session_factory)
            await backend.add_products(demo_products(STORE))
            return await test(backend)
        finally:
            await engine.dispose()

    return asyncio.run(run())


def test_products_round_trip():
    async def test(backend):
        return await backend.fetch_products(STORE)

    products = with_backend(test)

    assert [p.name for p in products] == sorted(p.name for p in demo_products(STORE))
    muffin = next(p for p in products if p.id == "MUFFIN")
    assert muffin.price == Decimal("75.50")
    assert muffin.stock == 4


def test_other_store_is_empty():
    async def test(backend):
        return await backend.fetch_products("Uptown")

    assert with_backend(test) == []


def test_sale_and_lines(clock):
    async def test(backend):
        sale = await backend.create_sale(NewSale(STORE, "Ana", Decimal("180.00"), clock()))
        await backend.insert_sale_lines(
            sale.id,
            [SaleLine(sale.id, "ESPRESSO", 2, Decimal("90.00"))],
        )
        return sale, await backend.lines_for(sale.id)

    sale, lines = with_backend(test)

    assert sale.id.startswith("sale_")
    assert sale.total == Decimal("180.00")
    assert lines == [SaleLine(sale.id, "ESPRESSO", 2, Decimal("90.00"))]


def test_lines_for_unknown_sale_fail():
    async def test(backend):
        await backend.insert_sale_lines("sale_missing", [SaleLine("sale_missing", "ESPRESSO", 1, Decimal("1"))])

    with pytest.raises(BackendError):
        with_backend(test)


def test_update_stock_overwrites_value():
    async def test(backend):
        await backend.update_stock("LATTE", -3)
        products = await backend.fetch_products(STORE)
        return next(p for p in products if p.id == "LATTE")

    assert with_backend(test).stock == -3


def test_update_unknown_product_fails():
    async def test(backend):
        await backend.update_stock("NOPE", 1)

    with pytest.raises(BackendError):
        with_backend(test)


def test_sales_since_filters_by_time_and_store(clock):
    async def test(backend):
        earlier = clock() - timedelta(days=1)
        await backend.create_sale(NewSale(STORE, "Ana", Decimal("1.00"), earlier))
        await backend.create_sale(NewSale(STORE, "Ana", Decimal("2.00"), clock()))
        await backend.create_sale(NewSale("Uptown", "Bo", Decimal("4.00"), clock()))
        return await backend.fetch_sales_since(STORE, clock() - timedelta(hours=1))

    sales = with_backend(test)

    assert [s.total for s in sales] == [Decimal("2.00")]
    assert sales[0].created_at == clock()


def test_checkout_against_database(clock, tmp_path):
    # A file database gives each concurrent stock update its own connection.
    async def test(backend):
        products = {p.id: p for p in await backend.fetch_products(STORE)}
        cart = Cart()
        cart.add(products["ESPRESSO"])
        cart.add(products["ESPRESSO"])
        cart.add(products["WATER"])
        orchestrator = CheckoutOrchestrator(backend, cart, ShiftCounters(clock), clock)

        result = await orchestrator.checkout(Operator("Ana", STORE))
        after = {p.id: p for p in await backend.fetch_products(STORE)}
        lines = await backend.lines_for(result.unwrap().sale.id)
        return result.unwrap(), after, lines

    result, after, lines = with_backend(test, f"sqlite+aiosqlite:///{tmp_path / 'pos.db'}")

    assert result.sale.total == Decimal("215.00")
    assert len(lines) == 2
    assert after["ESPRESSO"].stock == 38
    assert after["WATER"].stock == 59
