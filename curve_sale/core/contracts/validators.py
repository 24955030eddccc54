"""
Sale Snapshot Contract — JSON Schema + инварианты ledger'а

Снапшот sale (SaleSnapshot.model_dump(mode="json")) проверяется в два слоя:
1. Форма документа — JSON Schema core/contracts/schema/sale_snapshot.json
   (Draft 2020-12, additionalProperties=false, кривая (0, 0) запрещена)
2. Свойства, которые JSON Schema не выражает:
   - sum(balances) == total_supply
   - все суммы в пределах uint256
   - пара (owner, spender) встречается в allowances не более одного раза

Второй слой выполняется только для документа, прошедшего схему. Его ошибки —
обычные jsonschema.ValidationError, поэтому оба слоя видны через один API.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

from curve_sale.core.domain.sale_snapshot import SaleSnapshot
from curve_sale.core.math.fixed_point import UINT256_MAX

SNAPSHOT_SCHEMA = "sale_snapshot"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов с кэшем.

    По умолчанию читает схемы, поставляемые внутри пакета (package data).
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной Draft 2020-12 схемой
        """
        if schema_name not in self._schemas:
            schema_path = self._schema_dir / f"{schema_name}.json"
            if not schema_path.is_file():
                raise FileNotFoundError(f"Schema not found: {schema_path}")

            schema = json.loads(schema_path.read_text(encoding="utf-8"))
            try:
                Draft202012Validator.check_schema(schema)
            except jsonschema.SchemaError as e:
                raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e.message}") from e
            self._schemas[schema_name] = schema

        return self._schemas[schema_name]


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Проверка документа против одной схемы."""

    def __init__(self, schema_name: str, loader: SchemaLoader | None = None):
        self.schema_name = schema_name
        self.schema = (loader or _SCHEMA_LOADER).load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self.validator.iter_errors(data)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Первое найденное нарушение
        """
        for error in self.iter_errors(data):
            raise error

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return next(iter(self.iter_errors(data)), None) is None

    def describe_errors(self, data: Dict[str, Any]) -> List[str]:
        """Все нарушения в виде '$.path: message' (пустой список — документ валиден)."""
        return [f"{error.json_path}: {error.message}" for error in self.iter_errors(data)]


class SaleSnapshotValidator(ContractValidator):
    """Валидатор снапшота sale: схема, затем инварианты ledger'а."""

    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__(SNAPSHOT_SCHEMA, loader)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        schema_errors = list(self.validator.iter_errors(data))
        if schema_errors:
            yield from schema_errors
            return
        yield from _ledger_errors(data)


def _ledger_errors(data: Dict[str, Any]) -> Iterator[ValidationError]:
    balances = data["balances"]
    total = sum(balances.values())
    if total != data["total_supply"]:
        yield ValidationError(
            f"sum of balances {total} does not match total_supply {data['total_supply']}",
            validator="balance_conservation",
            path=("balances",),
            instance=balances,
        )

    amounts = [
        (("total_supply",), data["total_supply"]),
        (("held_value",), data["held_value"]),
        (("curve", "slope"), data["curve"]["slope"]),
        (("curve", "constant"), data["curve"]["constant"]),
    ]
    amounts += [(("balances", holder), amount) for holder, amount in balances.items()]
    amounts += [
        (("allowances", i, "amount"), entry["amount"])
        for i, entry in enumerate(data["allowances"])
    ]
    for path, amount in amounts:
        if amount > UINT256_MAX:
            yield ValidationError(
                f"{amount} exceeds uint256 bound",
                validator="uint256",
                path=path,
                instance=amount,
            )

    seen = set()
    for i, entry in enumerate(data["allowances"]):
        pair = (entry["owner"], entry["spender"])
        if pair in seen:
            yield ValidationError(
                f"duplicate allowance for owner {pair[0]!r} and spender {pair[1]!r}",
                validator="unique_allowance",
                path=("allowances", i),
                instance=entry,
            )
        seen.add(pair)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_sale_snapshot(snapshot: SaleSnapshot | Dict[str, Any]) -> None:
    """
    Валидация снапшота sale (модель или её JSON представление).

    Raises:
        ValidationError: Если снапшот нарушает схему или инварианты ledger'а
    """
    if isinstance(snapshot, SaleSnapshot):
        snapshot = snapshot.model_dump(mode="json")
    SaleSnapshotValidator().validate(snapshot)
