"""
Tests for the register facade.
"""

import asyncio
from decimal import Decimal

import pytest
from kungfu import Ok, Error

from tillpoint.backend import MemoryBackend, demo_products
from tillpoint.checkout import PartialCommitCart
from tillpoint.config import Settings
from tillpoint.errors import (
    CatalogError,
    CheckoutInProgress,
    NotPermitted,
    NothingToRepair,
    PartialCommit,
    SalesQueryError,
)
from tillpoint.register import Register, resolve_operator
from tillpoint.roles import Role

from conftest import STORE


def loaded(register):
    result = asyncio.run(register.refresh())
    assert isinstance(result, Ok), result
    return register


def test_operator_fallbacks():
    settings = Settings()

    assert resolve_operator(settings).display_name == "Merchant"
    assert resolve_operator(settings).store == "MY STORE"
    assert resolve_operator(settings, "  ", "").store == "MY STORE"
    assert resolve_operator(settings, "Ana", "Downtown").display_name == "Ana"


def test_owner_cannot_open_a_register(make_register):
    with pytest.raises(NotPermitted):
        make_register(role=Role.OWNER)


def test_manager_can_sell(make_register):
    assert make_register(role=Role.MANAGER).operator.display_name == "Ana"


def test_refresh_loads_catalog_and_counters(make_register, backend):
    register = make_register()
    assert register.catalog is None
    assert register.product("LATTE") is None

    loaded(register)

    assert len(register.catalog) == len(demo_products(STORE))
    assert register.product("LATTE").price == Decimal("140.00")
    assert [p.id for p in register.low_stock()] == ["MUFFIN"]
    assert register.shift_stats.orders == 0


def test_refresh_counts_sales_made_today_elsewhere(make_register, backend, clock):
    first = loaded(make_register())
    second = loaded(make_register(first_name="Bo"))

    first.add_to_cart(first.product("LATTE"))
    asyncio.run(first.checkout())
    clock.advance(minutes=5)
    asyncio.run(second.refresh())

    assert second.shift_stats.orders == 1
    assert second.shift_stats.revenue == Decimal("140.00")


def test_refresh_reports_catalog_failure(make_register, backend):
    backend.fail("fetch_products")

    result = asyncio.run(make_register().refresh())

    match result:
        case Error(CatalogError()):
            pass
        case _:
            raise AssertionError(result)


def test_refresh_reports_sales_query_failure(make_register, backend):
    backend.fail("fetch_sales_since")

    result = asyncio.run(make_register().refresh())

    match result:
        case Error(SalesQueryError(store=store)):
            assert store == STORE
        case _:
            raise AssertionError(result)


def test_cart_view(make_register):
    register = loaded(make_register())
    register.add_to_cart(register.product("ESPRESSO"))
    register.add_to_cart(register.product("ESPRESSO"))
    register.add_to_cart(register.product("WATER"))
    register.change_quantity("WATER", +1)
    register.remove_from_cart("NOPE")

    view = register.cart

    assert view.item_count == 4
    assert view.total == Decimal("250.00")
    assert [line.product_id for line in view.lines] == ["ESPRESSO", "WATER"]


def test_cancel_clears_cart(make_register):
    register = loaded(make_register())
    register.add_to_cart(register.product("ESPRESSO"))

    assert register.cancel() == Ok(None)
    assert register.cart.is_empty


def test_checkout_updates_stats_and_reloads_catalog(make_register, backend):
    register = loaded(make_register())
    register.add_to_cart(register.product("MUFFIN"))
    register.add_to_cart(register.product("MUFFIN"))

    result = asyncio.run(register.checkout())

    assert isinstance(result, Ok)
    assert register.cart.is_empty
    assert register.shift_stats.revenue == Decimal("151.00")
    assert register.shift_stats.orders == 1
    assert register.product("MUFFIN").stock == 2
    assert backend.count("fetch_products") == 2


def test_mutations_rejected_while_checkout_in_flight(clock, settings):
    backend = MemoryBackend(latency=0.01)
    backend.seed(demo_products(STORE))
    register = Register(backend, settings, first_name="Ana", clock=clock)
    loaded(register)
    latte = register.product("LATTE")
    register.add_to_cart(latte)

    async def run():
        checkout = asyncio.create_task(register.checkout())
        await asyncio.sleep(0)
        during = (
            register.checkout_in_progress,
            register.add_to_cart(latte),
            register.change_quantity("LATTE", +1),
            register.remove_from_cart("LATTE"),
            register.cancel(),
            await register.checkout(),
        )
        return during, await checkout

    during, result = asyncio.run(run())

    in_progress, *rejected = during
    assert in_progress is True
    assert all(r == Error(CheckoutInProgress()) for r in rejected)
    assert isinstance(result, Ok)
    assert result.unwrap().receipt.item_count == 1
    assert len(backend.sales) == 1


def test_repair_defaults_to_latest_partial(make_register, backend):
    register = loaded(make_register())
    register.add_to_cart(register.product("LATTE"))
    backend.fail("insert_sale_lines")

    async def run():
        partial = await register.checkout()
        backend.recover()
        return partial, await register.repair()

    partial, repaired = asyncio.run(run())

    match partial:
        case Error(PartialCommit()):
            pass
        case _:
            raise AssertionError(partial)
    assert isinstance(repaired, Ok)
    assert register.pending_repairs == ()
    assert len(backend.sale_lines) == 1
    assert register.cart.is_empty


def test_repair_without_partial(make_register):
    register = make_register()

    assert asyncio.run(register.repair()) == Error(NothingToRepair(None))


def test_partial_commit_clear_cart_setting(make_register, backend, settings):
    register = loaded(make_register(settings=settings.with_partial_commit_cart(PartialCommitCart.CLEAR_CART)))
    register.add_to_cart(register.product("LATTE"))
    backend.fail("insert_sale_lines")

    asyncio.run(register.checkout())

    assert register.cart.is_empty
    assert len(register.pending_repairs) == 1
