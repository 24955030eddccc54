"""Token Sale Ledger — mint/burn state machine поверх bonding curve.

Переходы состояния:
- receive(value)                     → mint: tokens_for_value по текущему supply
- transfer/transfer_from/
  transfer_and_call(to=sale.address) → redemption: burn + выплата value_for_sell
- transfer*(to=другой адрес)         → обычное перемещение баланса (ERC-20)

Инварианты:
- sum(balances) == supply
- held_value >= reserve_at_supply(supply), разница в пределах толерантности
- Любая ошибка откатывает операцию целиком (atomic section с journal)
- Токены списываются строго до выплаты (re-entrancy не даёт double-redeem)
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Final, Iterator, Optional, Tuple

from curve_sale.core.domain.curve import CurveParameters
from curve_sale.core.domain.sale_snapshot import AllowanceEntry, SaleSnapshot
from curve_sale.core.errors import (
    InsolventReserveError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidAddressError,
    InvalidAmountError,
    TransferRejectedError,
)
from curve_sale.core.math.fixed_point import (
    DECIMALS,
    ROUNDTRIP_TOLERANCE_WEI,
    UINT256_MAX,
    checked_add,
    checked_sub,
    validate_uint,
)
from curve_sale.sale.value_transport import ValueTransport

logger = logging.getLogger(__name__)

ZERO_ADDRESS: Final[str] = "0x" + "0" * 40

DEFAULT_SALE_ADDRESS: Final[str] = "0x" + "5a1e" * 10


@dataclass(frozen=True)
class SaleConfig:
    """Конфигурация sale.

    roundtrip_tolerance — допустимое расхождение (base units) между held value
    и reserve кривой, вызванное floor-округлениями engine.
    """
    name: str = "Curve Sale Token"
    symbol: str = "CST"
    decimals: int = DECIMALS
    roundtrip_tolerance: int = ROUNDTRIP_TOLERANCE_WEI


@dataclass
class LedgerState:
    """Изменяемое состояние ledger'а, принадлежащее одному TokenSale."""

    supply: int = 0
    held_value: int = 0
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[Tuple[str, str], int] = field(default_factory=dict)

    def copy(self) -> "LedgerState":
        return LedgerState(
            supply=self.supply,
            held_value=self.held_value,
            balances=dict(self.balances),
            allowances=dict(self.allowances),
        )

    def restore(self, backup: "LedgerState") -> None:
        # In place: вложенные секции держат ссылку на тот же объект
        self.supply = backup.supply
        self.held_value = backup.held_value
        self.balances = dict(backup.balances)
        self.allowances = dict(backup.allowances)


@dataclass(frozen=True)
class InvariantCheckResult:
    """Результат проверки инвариантов ledger'а."""

    balance_sum: int
    supply: int
    held_value: int
    transport_balance: int
    curve_reserve: int

    # held_value - curve_reserve (>= 0 при корректном округлении)
    solvency_gap: int

    balances_conserved: bool
    solvent: bool
    held_value_matches_transport: bool

    # solvency_gap <= roundtrip_tolerance (информационно: gap копится с каждым mint)
    within_tolerance: bool

    @property
    def ok(self) -> bool:
        return self.balances_conserved and self.solvent and self.held_value_matches_transport


class TokenSale:
    """Bonding-curve token sale.

    Владеет LedgerState и использует ValueTransport для native value.
    Curve engine вызывается через CurveParameters.

    Перенаправление в redemption — явная проверка `to == self.address`
    в transfer, transfer_from и transfer_and_call.
    """

    def __init__(
        self,
        curve: CurveParameters,
        transport: ValueTransport,
        address: str = DEFAULT_SALE_ADDRESS,
        config: Optional[SaleConfig] = None,
    ):
        """
        Args:
            curve: параметры кривой (валидированы при создании модели)
            transport: native value аккаунты
            address: собственный адрес sale
            config: конфигурация (default SaleConfig())
        """
        self._require_address(address, "sale")
        self.curve = curve
        self.address = address
        self.config = config or SaleConfig()
        self._transport = transport
        self._state = LedgerState()

        logger.info(
            "TokenSale %s deployed: slope=%d constant=%d",
            address, curve.slope, curve.constant,
        )

    @classmethod
    def deploy(
        cls,
        slope: int,
        constant: int,
        transport: ValueTransport,
        address: str = DEFAULT_SALE_ADDRESS,
        config: Optional[SaleConfig] = None,
    ) -> "TokenSale":
        """Создание sale из fixed-point параметров кривой.

        Raises:
            InvalidCurveError: если slope == 0 и constant == 0
        """
        return cls(CurveParameters(slope=slope, constant=constant), transport, address, config)

    # =========================================================================
    # Чтение состояния
    # =========================================================================

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def symbol(self) -> str:
        return self.config.symbol

    @property
    def decimals(self) -> int:
        return self.config.decimals

    def total_supply(self) -> int:
        return self._state.supply

    def balance_of(self, holder: str) -> int:
        return self._state.balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._state.allowances.get((owner, spender), 0)

    def held_value(self) -> int:
        return self._state.held_value

    # =========================================================================
    # Котировки (без изменения состояния)
    # =========================================================================

    def calculate_price_for_buy(self, tokens: int) -> int:
        """Стоимость покупки tokens при текущем supply (wei)."""
        return self.curve.value_for_buy(tokens, self._state.supply)

    def calculate_tokens_from_price(self, value: int) -> int:
        """Количество токенов, покупаемых за value при текущем supply."""
        return self.curve.tokens_for_value(value, self._state.supply)

    def calculate_price_for_sell(self, tokens: int) -> int:
        """Выплата за сжигание tokens при текущем supply (wei)."""
        return self.curve.value_for_sell(tokens, self._state.supply)

    def spot_price(self) -> int:
        """Цена следующего целого токена (wei)."""
        return self.curve.spot_price(self._state.supply)

    # =========================================================================
    # Mint path
    # =========================================================================

    def receive(self, sender: str, value: int) -> int:
        """Приём native value и mint токенов отправителю.

        Положительный депозит, которого не хватает на один base unit при
        текущем supply, отклоняется целиком: value не списывается, состояние
        не меняется. На крутой кривой порог растёт вместе с supply.

        Returns:
            Количество выпущенных токенов (base units)

        Raises:
            InvalidAmountError: value == 0 или value меньше цены одного base unit
            InsufficientFundsError: у sender недостаточно native value
        """
        self._require_address(sender, "sender")
        if sender == self.address:
            raise InvalidAddressError("sender", sender)
        validate_uint(value, "value")
        if value == 0:
            raise InvalidAmountError("receive", value, "value must be positive")

        with self._atomic():
            state = self._state
            minted = self.curve.tokens_for_value(value, state.supply)
            if minted == 0:
                raise InvalidAmountError("receive", value, "value buys no tokens")

            self._transport.collect(sender, self.address, value)
            state.balances[sender] = checked_add(self.balance_of(sender), minted)
            state.supply = checked_add(state.supply, minted)
            state.held_value = checked_add(state.held_value, value)

        logger.info(
            "Minted %d to %s for %d wei (supply=%d)", minted, sender, value, self._state.supply
        )
        return minted

    # =========================================================================
    # ERC-20 операции
    # =========================================================================

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        self._require_address(owner, "owner")
        self._require_address(spender, "spender")
        validate_uint(amount, "amount")

        self._state.allowances[(owner, spender)] = amount
        logger.debug("Approval: %s allows %s to spend %d", owner, spender, amount)
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Перевод токенов; перевод на адрес sale — redemption."""
        self._require_address(sender, "sender")
        self._require_address(to, "recipient")
        validate_uint(amount, "amount")

        with self._atomic():
            if to == self.address:
                self._redeem(sender, amount)
            else:
                self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, from_: str, to: str, amount: int) -> bool:
        """Делегированный перевод по allowance; на адрес sale — redemption from_."""
        self._require_address(spender, "spender")
        self._require_address(from_, "sender")
        self._require_address(to, "recipient")
        validate_uint(amount, "amount")

        with self._atomic():
            self._spend_allowance(from_, spender, amount)
            if to == self.address:
                self._redeem(from_, amount)
            else:
                self._move(from_, to, amount)
        return True

    def transfer_and_call(self, sender: str, to: str, amount: int, data: bytes = b"") -> bool:
        """Перевод с post-transfer callback получателя.

        На адрес sale — redemption (та же логика, что и у transfer).
        Иначе — перевод и вызов token hook получателя, если он зарегистрирован;
        hook, вернувший False или поднявший исключение, откатывает перевод.
        """
        self._require_address(sender, "sender")
        self._require_address(to, "recipient")
        validate_uint(amount, "amount")

        with self._atomic():
            if to == self.address:
                self._redeem(sender, amount)
                return True

            self._move(sender, to, amount)
            hook = self._transport.token_hook(to)
            if hook is not None:
                try:
                    accepted = hook(sender, sender, amount, data)
                except Exception as exc:
                    raise TransferRejectedError(to, amount, str(exc)) from exc
                if accepted is False:
                    raise TransferRejectedError(to, amount, "receiver hook returned False")
        return True

    # =========================================================================
    # Burn path
    # =========================================================================

    def _redeem(self, holder: str, amount: int) -> int:
        state = self._state
        if amount == 0:
            raise InvalidAmountError("redeem", amount, "amount must be positive")

        balance = self.balance_of(holder)
        if balance < amount:
            raise InsufficientBalanceError(holder, balance, amount)

        payout = self.curve.value_for_sell(amount, state.supply)
        if payout > state.held_value:
            raise InsolventReserveError(payout, state.held_value)

        # Burn до выплаты: повторный вход видит уже уменьшенный баланс
        state.balances[holder] = checked_sub(balance, amount)
        state.supply = checked_sub(state.supply, amount)
        state.held_value = checked_sub(state.held_value, payout)

        self._transport.pay(self.address, holder, payout)

        logger.info(
            "Redeemed %d from %s for %d wei (supply=%d)",
            amount, holder, payout, self._state.supply,
        )
        return payout

    # =========================================================================
    # Внутренние операции
    # =========================================================================

    def _move(self, from_: str, to: str, amount: int) -> None:
        balances = self._state.balances
        balance = balances.get(from_, 0)
        if balance < amount:
            raise InsufficientBalanceError(from_, balance, amount)

        balances[from_] = checked_sub(balance, amount)
        balances[to] = checked_add(balances.get(to, 0), amount)
        logger.debug("Transfer %d from %s to %s", amount, from_, to)

    def _spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        current = self.allowance(owner, spender)
        # Бесконечный allowance не уменьшается
        if current == UINT256_MAX:
            return
        if current < amount:
            raise InsufficientAllowanceError(owner, spender, current, amount)
        self._state.allowances[(owner, spender)] = current - amount

    @staticmethod
    def _require_address(address: str, role: str) -> None:
        if not isinstance(address, str) or not address or address == ZERO_ADDRESS:
            raise InvalidAddressError(role, address)

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        """Atomic section: при исключении состояние и transport откатываются."""
        # Полная копия balances, allowances и transport: O(holders) на каждый вызов
        state_backup = self._state.copy()
        transport_backup = self._transport.snapshot()
        try:
            yield
        except Exception:
            self._state.restore(state_backup)
            self._transport.restore(transport_backup)
            raise

    # =========================================================================
    # Snapshot и инварианты
    # =========================================================================

    def snapshot(self) -> SaleSnapshot:
        state = self._state
        return SaleSnapshot(
            address=self.address,
            name=self.name,
            symbol=self.symbol,
            decimals=self.decimals,
            curve=self.curve,
            total_supply=state.supply,
            held_value=state.held_value,
            balances={h: b for h, b in state.balances.items() if b > 0},
            allowances=[
                AllowanceEntry(owner=owner, spender=spender, amount=amount)
                for (owner, spender), amount in sorted(state.allowances.items())
                if amount > 0
            ],
        )

    def check_invariants(self) -> InvariantCheckResult:
        """Проверка balance conservation и solvency."""
        state = self._state
        balance_sum = sum(state.balances.values())
        reserve = self.curve.reserve_at_supply(state.supply)
        transport_balance = self._transport.balance_of(self.address)
        gap = state.held_value - reserve

        return InvariantCheckResult(
            balance_sum=balance_sum,
            supply=state.supply,
            held_value=state.held_value,
            transport_balance=transport_balance,
            curve_reserve=reserve,
            solvency_gap=gap,
            balances_conserved=(balance_sum == state.supply),
            solvent=(gap >= 0),
            held_value_matches_transport=(transport_balance == state.held_value),
            within_tolerance=(0 <= gap <= self.config.roundtrip_tolerance),
        )
