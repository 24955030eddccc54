"""Pytest fixtures для тестов token sale."""

import pytest

from curve_sale.core.domain.units import ether
from curve_sale.sale import TokenSale, ValueTransport

OWNER = "0x" + "11" * 20
FIRST_ACCOUNT = "0x" + "aa" * 20
SECOND_ACCOUNT = "0x" + "bb" * 20

INITIAL_FUNDS = ether("1000")


@pytest.fixture
def transport() -> ValueTransport:
    """Transport с пополненными аккаунтами."""
    t = ValueTransport()
    for account in (OWNER, FIRST_ACCOUNT, SECOND_ACCOUNT):
        t.fund(account, INITIAL_FUNDS)
    return t


@pytest.fixture
def deploy_sale(transport):
    """Фабрика sale: deploy_sale("1", "0") — slope и constant в десятичном виде."""

    def _deploy(slope: str, constant: str) -> TokenSale:
        return TokenSale.deploy(ether(slope), ether(constant), transport)

    return _deploy
