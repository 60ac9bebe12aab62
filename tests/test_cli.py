"""
Tests for the terminal register commands.
"""

import asyncio
import builtins

from tillpoint.backend import MemoryBackend, SQLAlchemyBackend
from tillpoint import cli
from tillpoint.cli import dispatch, open_backend
from tillpoint.config import Settings

from conftest import STORE, product


def run(register, *lines):
    async def go():
        return [await dispatch(register, line) for line in lines]

    return asyncio.run(go())


def test_sale_from_the_terminal(make_register, backend, capsys):
    register = make_register()

    results = run(register, "refresh", "add latte", "inc latte", "cart", "checkout", "stats")
    out = capsys.readouterr().out

    assert all(results)
    assert "Cafe Latte × 2" in out
    assert "TOTAL 280.00" in out
    assert "Revenue today: 280.00" in out
    assert len(backend.sales) == 1


def test_rejections_are_printed(make_register, capsys):
    register = make_register()

    run(register, "refresh", "add croissant", "add nothing", "add", "frobnicate", "checkout")
    out = capsys.readouterr().out

    assert "Butter Croissant is out of stock" in out
    assert "Unknown product: nothing" in out
    assert "Usage: add <product_id>" in out
    assert "Unknown command: frobnicate" in out
    assert "Cart is empty" in out


def test_partial_commit_then_repair(make_register, backend, capsys):
    register = make_register()
    run(register, "refresh", "add water")
    backend.fail("insert_sale_lines")
    run(register, "checkout")
    backend.recover()
    run(register, "repair")
    out = capsys.readouterr().out

    assert "Run 'repair'" in out
    assert "TOTAL 35.00" in out
    assert len(backend.sales) == 1
    assert len(backend.sale_lines) == 1


def test_quit_stops_the_loop(make_register):
    assert run(make_register(), "quit") == [False]


def test_memory_backend_is_seeded_for_default_store():
    backend, engine = asyncio.run(open_backend(Settings(default_store=STORE)))

    assert isinstance(backend, MemoryBackend)
    assert engine is None
    assert backend.stock_of("ESPRESSO") == 40


def test_ids_are_not_rewritten(make_register, backend, capsys):
    backend.seed([product("oat-milk", "12.00", stock=5)])
    register = make_register()

    run(register, "refresh", "add oat-milk", "inc OAT-MILK", "cart")
    out = capsys.readouterr().out
    lines = register.cart.lines

    assert "Oat-Milk × 2" in out
    assert [(line.product_id, line.quantity) for line in lines] == [("oat-milk", 2)]

    run(register, "remove Oat-Milk")

    assert "oat-milk removed" in capsys.readouterr().out
    assert register.cart.is_empty


def test_database_backend_comes_with_its_engine():
    settings = Settings(default_store=STORE, database_url="sqlite+aiosqlite:///:memory:")

    async def go():
        backend, engine = await open_backend(settings)
        products = await backend.fetch_products(STORE)
        await engine.dispose()
        return backend, engine, products

    backend, engine, products = asyncio.run(go())

    assert isinstance(backend, SQLAlchemyBackend)
    assert engine is not None
    assert {p.id for p in products} >= {"ESPRESSO", "LATTE"}


class RecordingEngine:
    def __init__(self):
        self.disposed = False

    async def dispose(self):
        self.disposed = True


def test_run_cli_disposes_engine_on_exit(backend, monkeypatch, capsys):
    engine = RecordingEngine()

    async def fake_open_backend(settings):
        return backend, engine

    def no_more_input(prompt=""):
        raise EOFError

    monkeypatch.setattr(cli, "open_backend", fake_open_backend)
    monkeypatch.setattr(builtins, "input", no_more_input)

    asyncio.run(cli.run_cli(Settings(default_store=STORE)))

    assert engine.disposed
    assert "Bye!" in capsys.readouterr().out
