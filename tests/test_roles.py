"""
Tests for the role capability table.
"""

import pytest

from tillpoint.errors import NotPermitted
from tillpoint.roles import Capability, Role, can, require


@pytest.mark.parametrize(
    ("role", "sells"),
    [(Role.MERCHANT, True), (Role.MANAGER, True), (Role.OWNER, False)],
)
def test_who_sells(role, sells):
    assert can(role, Capability.SELL) is sells


def test_only_managers_handle_inventory():
    assert [r for r in Role if can(r, Capability.MANAGE_INVENTORY)] == [Role.MANAGER]


def test_require_raises():
    with pytest.raises(NotPermitted) as info:
        require(Role.OWNER, Capability.SELL)

    assert str(info.value) == "Role owner may not sell"


def test_parse():
    assert Role.parse(" Manager ") is Role.MANAGER
    with pytest.raises(ValueError, match="Unknown role"):
        Role.parse("admin")
