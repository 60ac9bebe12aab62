"""
Roles — which screens a signed-in account may use.

Owners run the admin side only; merchants and managers both sell, and
managers also handle inventory and sales reports.
"""

from __future__ import annotations

from enum import StrEnum

from tillpoint.errors import NotPermitted


class Role(StrEnum):
    MERCHANT = "merchant"
    MANAGER = "manager"
    OWNER = "owner"

    @classmethod
    def parse(cls, value: str) -> Role:
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None


class Capability(StrEnum):
    SELL = "sell"
    MANAGE_INVENTORY = "manage inventory"
    VIEW_SALES = "view sales"
    ONBOARD_STAFF = "onboard staff"
    MODERATE_ACCOUNTS = "moderate accounts"
    CHANGE_SETTINGS = "change settings"


CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.MERCHANT: frozenset({
        Capability.SELL,
        Capability.CHANGE_SETTINGS,
    }),
    Role.MANAGER: frozenset({
        Capability.SELL,
        Capability.MANAGE_INVENTORY,
        Capability.VIEW_SALES,
        Capability.ONBOARD_STAFF,
        Capability.CHANGE_SETTINGS,
    }),
    Role.OWNER: frozenset({
        Capability.MODERATE_ACCOUNTS,
        Capability.CHANGE_SETTINGS,
    }),
}


def can(role: Role, capability: Capability) -> bool:
    return capability in CAPABILITIES[role]


def require(role: Role, capability: Capability) -> None:
    """Raise NotPermitted unless the role has the capability."""
    if not can(role, capability):
        raise NotPermitted(role.value, capability.value)


__all__ = ("Role", "Capability", "CAPABILITIES", "can", "require")
