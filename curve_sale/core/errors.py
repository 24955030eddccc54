"""
Exceptions — иерархия ошибок token sale.

Любая ошибка отменяет всю операцию целиком (нет частичного mint/burn)
и пробрасывается вызывающему как отклонённый вызов.
"""


class TokenSaleError(Exception):
    """Базовое исключение для всех отклонённых операций token sale."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidCurveError(TokenSaleError):
    """Кривая с нулевыми slope и constant (бесплатный mint) отклоняется."""

    def __init__(self, message: str = "Invalid curve: slope and constant are both zero"):
        super().__init__(message)


class InvalidAmountError(TokenSaleError):
    """Некорректная сумма операции (ноль там, где требуется > 0)."""

    def __init__(self, operation: str, amount: int, reason: str):
        super().__init__(
            f"Invalid amount for {operation}: {amount} ({reason})",
            {"operation": operation, "amount": amount, "reason": reason},
        )
        self.operation = operation
        self.amount = amount


class InvalidAddressError(TokenSaleError):
    """Операция с нулевым или пустым адресом."""

    def __init__(self, role: str, address: str):
        super().__init__(
            f"Invalid {role} address: {address!r}",
            {"role": role, "address": address},
        )
        self.role = role
        self.address = address


class InsufficientBalanceError(TokenSaleError):
    """Баланс токенов держателя меньше запрошенной суммы."""

    def __init__(self, holder: str, balance: int, requested: int):
        super().__init__(
            f"Insufficient balance: {holder} has {balance}, requested {requested}",
            {"holder": holder, "balance": balance, "requested": requested},
        )
        self.holder = holder
        self.balance = balance
        self.requested = requested


class InsufficientAllowanceError(TokenSaleError):
    """Allowance spender'а меньше запрошенной суммы."""

    def __init__(self, owner: str, spender: str, allowance: int, requested: int):
        super().__init__(
            f"Insufficient allowance: {spender} may spend {allowance} of {owner}, "
            f"requested {requested}",
            {
                "owner": owner,
                "spender": spender,
                "allowance": allowance,
                "requested": requested,
            },
        )
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.requested = requested


class InsufficientFundsError(TokenSaleError):
    """У отправителя недостаточно native value для депозита."""

    def __init__(self, account: str, balance: int, requested: int):
        super().__init__(
            f"Insufficient funds: {account} holds {balance} wei, requested {requested}",
            {"account": account, "balance": balance, "requested": requested},
        )
        self.account = account
        self.balance = balance
        self.requested = requested


class PayoutFailedError(TokenSaleError):
    """Получатель отклонил выплату native value; redemption откатывается."""

    def __init__(self, recipient: str, amount: int, reason: str):
        super().__init__(
            f"Payout of {amount} wei to {recipient} failed: {reason}",
            {"recipient": recipient, "amount": amount, "reason": reason},
        )
        self.recipient = recipient
        self.amount = amount
        self.reason = reason


class TransferRejectedError(TokenSaleError):
    """Token receiver hook получателя отклонил transfer_and_call."""

    def __init__(self, recipient: str, amount: int, reason: str):
        super().__init__(
            f"Transfer of {amount} to {recipient} rejected: {reason}",
            {"recipient": recipient, "amount": amount, "reason": reason},
        )
        self.recipient = recipient
        self.amount = amount


class InsolventReserveError(TokenSaleError):
    """Выплата превышает held value (нарушение инварианта solvency)."""

    def __init__(self, payout: int, held_value: int):
        super().__init__(
            f"Payout {payout} wei exceeds held value {held_value} wei",
            {"payout": payout, "held_value": held_value},
        )
        self.payout = payout
        self.held_value = held_value
