"""
Shared fixtures: a seeded in-memory backend, a controllable clock and a
register factory.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tillpoint.backend import MemoryBackend, demo_products
from tillpoint.config import Settings
from tillpoint.domain import Product
from tillpoint.register import Register
from tillpoint.roles import Role

STORE = "Downtown"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def product(
    id: str,
    price: str = "10.00",
    stock: int = 10,
    name: str | None = None,
    store: str = STORE,
) -> Product:
    return Product(id=id, name=name or id.title(), price=Decimal(price), stock=stock, store=store)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 17, 14, 30, tzinfo=timezone(timedelta(hours=2))))


@pytest.fixture
def backend() -> MemoryBackend:
    backend = MemoryBackend()
    backend.seed(demo_products(STORE))
    return backend


@pytest.fixture
def settings() -> Settings:
    return Settings(default_store=STORE)


@pytest.fixture
def make_register(backend: MemoryBackend, settings: Settings, clock: FakeClock):
    def make(
        settings: Settings = settings,
        role: Role = Role.MERCHANT,
        first_name: str | None = "Ana",
    ) -> Register:
        return Register(backend, settings, role=role, first_name=first_name, clock=clock)

    return make
