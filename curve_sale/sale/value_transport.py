"""Value Transport — native value аккаунты и доставка выплат.

Внешний коллаборатор sale ledger'а:
- Хранит native балансы (wei) всех адресов, включая адрес sale
- collect(): списание депозита с отправителя в пользу sale
- pay(): выплата из sale держателю с вызовом receive hook получателя
- Token receiver hooks для transfer_and_call

Receive hook может отклонить выплату (raise) или повторно войти в sale
(re-entrancy). Отклонённая выплата откатывает балансы transport'а и
поднимается как PayoutFailedError.
"""

import logging
from typing import Callable, Dict, Optional

from curve_sale.core.errors import InsufficientFundsError, PayoutFailedError
from curve_sale.core.math.fixed_point import checked_add, checked_sub, validate_uint

logger = logging.getLogger(__name__)

# hook(sender, amount): вызывается после зачисления native value
ValueReceiveHook = Callable[[str, int], None]

# hook(operator, from_, amount, data) -> bool: вызывается после transfer_and_call
TokenReceiveHook = Callable[[str, str, int, bytes], bool]


class ValueTransport:
    """Реестр native балансов с hooks получателей.

    Все изменения балансов детерминированы; snapshot()/restore() позволяют
    ledger'у откатить transport вместе со своим состоянием.
    """

    def __init__(self):
        self._balances: Dict[str, int] = {}
        self._value_hooks: Dict[str, ValueReceiveHook] = {}
        self._token_hooks: Dict[str, TokenReceiveHook] = {}

    # -------------------------------------------------------------------------
    # Аккаунты
    # -------------------------------------------------------------------------

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def fund(self, address: str, amount: int) -> None:
        """Зачисление native value извне системы (genesis / faucet)."""
        validate_uint(amount, "amount")
        self._balances[address] = checked_add(self.balance_of(address), amount)

    def register_value_hook(self, address: str, hook: ValueReceiveHook) -> None:
        self._value_hooks[address] = hook

    def register_token_hook(self, address: str, hook: TokenReceiveHook) -> None:
        self._token_hooks[address] = hook

    def token_hook(self, address: str) -> Optional[TokenReceiveHook]:
        return self._token_hooks.get(address)

    # -------------------------------------------------------------------------
    # Переводы
    # -------------------------------------------------------------------------

    def collect(self, sender: str, recipient: str, amount: int) -> None:
        """Списание депозита sender → recipient без вызова hooks.

        Raises:
            InsufficientFundsError: если у sender недостаточно native value
        """
        validate_uint(amount, "amount")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientFundsError(sender, balance, amount)

        self._balances[sender] = checked_sub(balance, amount)
        self._balances[recipient] = checked_add(self.balance_of(recipient), amount)

    def pay(self, sender: str, recipient: str, amount: int) -> None:
        """Выплата sender → recipient с вызовом receive hook получателя.

        Баланс зачисляется до вызова hook. Если hook поднимает исключение,
        все изменения transport'а (включая сделанные внутри hook) откатываются.

        Raises:
            InsufficientFundsError: если у sender недостаточно native value
            PayoutFailedError: если получатель отклонил выплату
        """
        backup = self.snapshot()
        self.collect(sender, recipient, amount)

        hook = self._value_hooks.get(recipient)
        if hook is None:
            return

        try:
            hook(sender, amount)
        except Exception as exc:
            self.restore(backup)
            logger.warning(
                "Payout of %d wei from %s to %s rejected: %s",
                amount, sender, recipient, exc,
            )
            raise PayoutFailedError(recipient, amount, str(exc)) from exc

    # -------------------------------------------------------------------------
    # Journal
    # -------------------------------------------------------------------------

    def snapshot(self) -> Dict[str, int]:
        return dict(self._balances)

    def restore(self, backup: Dict[str, int]) -> None:
        self._balances.clear()
        self._balances.update(backup)
