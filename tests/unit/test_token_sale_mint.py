"""
Тесты mint path TokenSale

Проверяет:
1. Deploy и отклонение кривой (0, 0)
2. receive: mint по кривой, учёт held value и native балансов
3. Котировки до и после mint
4. Отклонение нулевых/недостаточных депозитов без частичного эффекта
"""

import pytest

from curve_sale.core.domain.units import ether, tokens
from curve_sale.core.errors import (
    InsufficientFundsError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidCurveError,
)
from curve_sale.sale import ZERO_ADDRESS, SaleConfig, TokenSale
from tests.conftest import FIRST_ACCOUNT, INITIAL_FUNDS, SECOND_ACCOUNT


class TestDeploy:
    """Создание sale"""

    def test_zero_curve_rejected(self, transport) -> None:
        with pytest.raises(InvalidCurveError, match="Invalid curve"):
            TokenSale.deploy(0, 0, transport)

    @pytest.mark.parametrize("slope,constant", [("1", "0"), ("0", "1"), ("0.5", "1")])
    def test_valid_curves_accepted(self, deploy_sale, slope, constant) -> None:
        sale = deploy_sale(slope, constant)
        assert sale.curve.slope == ether(slope)
        assert sale.curve.constant == ether(constant)
        assert sale.total_supply() == 0
        assert sale.held_value() == 0

    def test_default_metadata(self, deploy_sale) -> None:
        sale = deploy_sale("1", "0")
        assert sale.name == "Curve Sale Token"
        assert sale.symbol == "CST"
        assert sale.decimals == 18

    def test_custom_config(self, transport) -> None:
        config = SaleConfig(name="Bonded", symbol="BND", roundtrip_tolerance=0)
        sale = TokenSale.deploy(ether("1"), 0, transport, config=config)
        assert sale.name == "Bonded"
        assert sale.symbol == "BND"

    def test_zero_sale_address_rejected(self, transport) -> None:
        with pytest.raises(InvalidAddressError):
            TokenSale.deploy(ether("1"), 0, transport, address=ZERO_ADDRESS)


class TestReceive:
    """receive(sender, value) → mint"""

    def test_first_deposit_on_unit_slope(self, deploy_sale, transport) -> None:
        """slope=1, constant=0: депозит 3 → 2 токена"""
        sale = deploy_sale("1", "0")

        minted = sale.receive(FIRST_ACCOUNT, ether("3"))

        assert minted == tokens("2")
        assert sale.balance_of(FIRST_ACCOUNT) == tokens("2")
        assert sale.total_supply() == tokens("2")
        assert sale.held_value() == ether("3")
        assert transport.balance_of(sale.address) == ether("3")
        assert transport.balance_of(FIRST_ACCOUNT) == INITIAL_FUNDS - ether("3")

    def test_quotes_follow_supply(self, deploy_sale) -> None:
        sale = deploy_sale("1", "0")
        assert sale.calculate_price_for_buy(tokens("3")) == ether("6")

        sale.receive(FIRST_ACCOUNT, ether("3"))

        assert sale.calculate_price_for_buy(tokens("3")) == ether("12")
        assert sale.calculate_tokens_from_price(ether("12")) == tokens("3")
        assert sale.calculate_price_for_sell(tokens("1")) == ether("2")
        assert sale.spot_price() == ether("3")

    def test_second_buyer_pays_more(self, deploy_sale) -> None:
        sale = deploy_sale("1", "0")
        sale.receive(FIRST_ACCOUNT, ether("3"))

        minted = sale.receive(SECOND_ACCOUNT, ether("7"))

        assert minted == tokens("2")
        assert sale.total_supply() == tokens("4")
        assert sale.held_value() == ether("10")

    def test_slope_2_constant_1(self, deploy_sale) -> None:
        sale = deploy_sale("2", "1")
        assert sale.calculate_price_for_buy(tokens("3")) == ether("15")
        assert sale.calculate_tokens_from_price(ether("15")) == tokens("3")

        assert sale.receive(FIRST_ACCOUNT, ether("8")) == tokens("2")
        assert sale.receive(SECOND_ACCOUNT, ether("16")) == tokens("2")
        assert sale.held_value() == ether("24")

    def test_slope_half_constant_1(self, deploy_sale) -> None:
        sale = deploy_sale("0.5", "1")
        assert sale.calculate_price_for_buy(tokens("3")) == ether("6")

        assert sale.receive(FIRST_ACCOUNT, ether("3.5")) == tokens("2")
        assert sale.calculate_price_for_buy(tokens("3")) == ether("9")
        assert sale.calculate_tokens_from_price(ether("9")) == tokens("3")
        assert sale.receive(SECOND_ACCOUNT, ether("5.5")) == tokens("2")

    def test_flat_curve_mints_one_to_one(self, deploy_sale) -> None:
        sale = deploy_sale("0", "1")
        assert sale.receive(FIRST_ACCOUNT, ether("5")) == tokens("5")
        assert sale.receive(FIRST_ACCOUNT, 7) == 7
        assert sale.balance_of(FIRST_ACCOUNT) == tokens("5") + 7

    def test_unconverted_remainder_is_kept(self, deploy_sale) -> None:
        """Излишек депозита остаётся в held value и не превращается в токены"""
        sale = deploy_sale("1", "0")
        sale.receive(FIRST_ACCOUNT, ether("7"))

        result = sale.check_invariants()
        assert result.ok
        assert result.solvency_gap >= 0
        assert sale.held_value() == ether("7")


class TestReceiveRejections:
    """Отклонённые депозиты не оставляют частичного эффекта"""

    def test_zero_value_rejected(self, deploy_sale, transport) -> None:
        sale = deploy_sale("1", "0")
        with pytest.raises(InvalidAmountError, match="value must be positive"):
            sale.receive(FIRST_ACCOUNT, 0)
        assert transport.balance_of(FIRST_ACCOUNT) == INITIAL_FUNDS

    def test_value_below_one_base_unit_rejected(self, deploy_sale, transport) -> None:
        """constant=2: один base unit стоит 2 wei, 1 wei ничего не покупает"""
        sale = deploy_sale("0", "2")
        with pytest.raises(InvalidAmountError, match="buys no tokens"):
            sale.receive(FIRST_ACCOUNT, 1)

        assert sale.total_supply() == 0
        assert sale.held_value() == 0
        assert transport.balance_of(FIRST_ACCOUNT) == INITIAL_FUNDS

    def test_insufficient_funds_rejected(self, deploy_sale, transport) -> None:
        sale = deploy_sale("1", "0")
        with pytest.raises(InsufficientFundsError):
            sale.receive(FIRST_ACCOUNT, INITIAL_FUNDS + 1)

        assert sale.total_supply() == 0
        assert sale.balance_of(FIRST_ACCOUNT) == 0
        assert transport.balance_of(FIRST_ACCOUNT) == INITIAL_FUNDS
        assert transport.balance_of(sale.address) == 0

    def test_sale_cannot_fund_itself(self, deploy_sale) -> None:
        sale = deploy_sale("1", "0")
        with pytest.raises(InvalidAddressError):
            sale.receive(sale.address, ether("1"))

    def test_zero_address_sender_rejected(self, deploy_sale) -> None:
        sale = deploy_sale("1", "0")
        with pytest.raises(InvalidAddressError):
            sale.receive(ZERO_ADDRESS, ether("1"))
