"""
Interactive terminal register.

Run: tillpoint   (or python -m tillpoint)

Without TILLPOINT_DATABASE_URL the register runs against an in-memory
backend seeded with a small café menu.
"""

from __future__ import annotations

import asyncio
import logging

from kungfu import Ok, Error
from sqlalchemy.ext.asyncio import AsyncEngine

from tillpoint.backend import Backend, MemoryBackend, SQLAlchemyBackend, create_database, demo_products
from tillpoint.checkout import CheckoutResult
from tillpoint.config import Settings
from tillpoint.errors import PartialCommit
from tillpoint.log import configure_logging
from tillpoint.register import Register

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Help
# ═══════════════════════════════════════════════════════════════════════════════

HELP_TEXT = """
┌─────────────────────────────────────────────────────────────────────────────┐
│                              COMMANDS                                       │
├─────────────────────────────────────────────────────────────────────────────┤
│  products                   List the store's products                       │
│  add <id>                   Add one unit to the cart                        │
│  inc <id> / dec <id>        Change a line's quantity by one                 │
│  remove <id>                Remove a line                                   │
│  cart                       Show the cart and its total                     │
│  checkout                   Record the sale                                 │
│  repair                     Finish a sale recorded without its items        │
│  stats                      Today's revenue and orders                      │
│  refresh                    Reload products and today's sales               │
│  clear                      Empty the cart                                  │
├─────────────────────────────────────────────────────────────────────────────┤
│  help                       Show this help                                  │
│  quit                       Exit                                            │
└─────────────────────────────────────────────────────────────────────────────┘
"""


def print_help() -> None:
    print(HELP_TEXT)


# ═══════════════════════════════════════════════════════════════════════════════
# Display
# ═══════════════════════════════════════════════════════════════════════════════


def print_products(register: Register) -> None:
    catalog = register.catalog
    if catalog is None or len(catalog) == 0:
        print("  No products loaded. Try 'refresh'.")
        return

    threshold = register.settings.low_stock_threshold
    print(f"\n  {catalog.store} — {len(catalog)} product(s)")
    for p in catalog.products:
        if p.sold_out:
            badge = "  SOLD OUT"
        elif p.low_stock(threshold):
            badge = "  low"
        else:
            badge = ""
        print(f"  [{p.id:10}] {p.name:22} {p.price:>9}  stock {p.stock:>4}{badge}")


def print_cart(register: Register) -> None:
    view = register.cart
    if view.is_empty:
        print("  Cart is empty.")
        return

    for line in view.lines:
        print(f"  {line.quantity:>3} × {line.name:22} {line.unit_price:>9} = {line.total:>10}")
    print(f"  {view.item_count} item(s), total {view.total}")


def print_receipt(result: CheckoutResult) -> None:
    receipt = result.receipt
    print(f"\n  Receipt {receipt.reference}  {receipt.sale.store}")
    print(f"  {receipt.sale.created_at:%Y-%m-%d %H:%M}  served by {receipt.sale.operator}")
    for line in receipt.lines:
        print(f"  {line.quantity:>3} × {line.name:22} {line.total:>10}")
    print(f"  TOTAL {receipt.total}")
    if result.stock_sync is not None:
        print(f"  ! {result.stock_sync}")


def print_stats(register: Register) -> None:
    stats = register.shift_stats
    print(f"  Revenue today: {stats.revenue}")
    print(f"  Orders today:  {stats.orders}  (average {stats.average})")
    if stats.pending:
        print(f"  {stats.pending} sale(s) not yet confirmed by the server")


# ═══════════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════════


def resolve_id(register: Register, typed: str) -> str:
    """Catalog spelling of a typed id; unknown ids pass through unchanged."""
    product = register.product(typed)
    return product.id if product is not None else typed


def cmd_add(register: Register, product_id: str) -> None:
    product = register.product(product_id)
    if product is None:
        print(f"  ✗ Unknown product: {product_id}")
        return

    match register.add_to_cart(product):
        case Ok(line):
            print(f"  ✓ {line.name} × {line.quantity}")
        case Error(e):
            print(f"  ✗ {e}")


def cmd_change(register: Register, product_id: str, delta: int) -> None:
    match register.change_quantity(product_id, delta):
        case Ok(None):
            print(f"  {product_id} not in cart")
        case Ok(line):
            print(f"  {line.name} × {line.quantity}")
        case Error(e):
            print(f"  ✗ {e}")


async def cmd_checkout(register: Register) -> None:
    match await register.checkout():
        case Ok(result):
            print_receipt(result)
        case Error(PartialCommit() as partial):
            print(f"  ! {partial}")
            print("  Do NOT check out again. Run 'repair' to finish this sale.")
        case Error(e):
            print(f"  ✗ {e}")


async def cmd_repair(register: Register) -> None:
    match await register.repair():
        case Ok(result):
            print_receipt(result)
        case Error(e):
            print(f"  ✗ {e}")


async def cmd_refresh(register: Register) -> None:
    match await register.refresh():
        case Ok(catalog):
            print(f"  ✓ {len(catalog)} product(s) loaded")
            print_stats(register)
        case Error(e):
            print(f"  ✗ {e}")


async def dispatch(register: Register, line: str) -> bool:
    """Run one command line. Returns False when the loop should stop."""
    parts = line.split()
    if not parts:
        return True
    cmd = parts[0].lower()
    arg = parts[1] if len(parts) > 1 else None

    match cmd:
        case "quit" | "exit" | "q":
            print("Bye!")
            return False

        case "help" | "h" | "?":
            print_help()

        case "products" | "p":
            print_products(register)

        case "add" | "inc" | "dec" | "remove" if arg is None:
            print(f"  Usage: {cmd} <product_id>")

        case "add":
            cmd_add(register, arg)

        case "inc":
            cmd_change(register, resolve_id(register, arg), +1)

        case "dec":
            cmd_change(register, resolve_id(register, arg), -1)

        case "remove":
            product_id = resolve_id(register, arg)
            match register.remove_from_cart(product_id):
                case Ok(_):
                    print(f"  ✓ {product_id} removed")
                case Error(e):
                    print(f"  ✗ {e}")

        case "cart" | "c":
            print_cart(register)

        case "checkout":
            await cmd_checkout(register)

        case "repair":
            await cmd_repair(register)

        case "stats":
            print_stats(register)

        case "refresh":
            await cmd_refresh(register)

        case "clear":
            match register.cancel():
                case Ok(_):
                    print("  ✓ Cart cleared")
                case Error(e):
                    print(f"  ✗ {e}")

        case _:
            print(f"  ✗ Unknown command: {cmd}")
            print("  Type 'help' for available commands.")

    return True


# ═══════════════════════════════════════════════════════════════════════════════
# Main Loop
# ═══════════════════════════════════════════════════════════════════════════════


async def open_backend(settings: Settings) -> tuple[Backend, AsyncEngine | None]:
    """Backend for the configured database, with its engine when there is one."""
    if settings.database_url is None:
        backend = MemoryBackend()
        backend.seed(demo_products(settings.default_store))
        return backend, None

    session_factory, engine = await create_database(settings.database_url)
    backend = SQLAlchemyBackend(session_factory)
    if not await backend.fetch_products(settings.default_store):
        logger.info("Empty database, seeding demo products for %s", settings.default_store)
        await backend.add_products(demo_products(settings.default_store))
    return backend, engine


async def run_cli(settings: Settings) -> None:
    backend, engine = await open_backend(settings)
    try:
        register = Register(backend, settings)

        print(f"\n  tillpoint — {register.store}, operator {register.operator.display_name}")
        print_help()
        await cmd_refresh(register)

        while True:
            try:
                line = input("\n> ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                break

            if not await dispatch(register, line):
                break
    finally:
        if engine is not None:
            await engine.dispose()


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    asyncio.run(run_cli(settings))


__all__ = ("dispatch", "open_backend", "run_cli", "main")
