import json
import logging
from decimal import Decimal
from typing import Callable, Iterable, List, TextIO, TypeVar

from pydantic import BaseModel, ValidationError as RecordError

from errors import SerializationError
from models.budget import Budget
from models.records import BudgetRecord, TransactionRecord
from models.transaction import Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _load_array(text: str) -> list:
    try:
        data = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise SerializationError("Invalid data format: expected a JSON array")
    return data


def _parse_records(
    data: list, record_type: type, build: Callable[[BaseModel], T]
) -> List[T]:
    results = []
    for index, item in enumerate(data):
        try:
            record = record_type.model_validate(item)
        except RecordError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            logger.warning(f"Skipping invalid record {index}: {errors}")
            continue
        results.append(build(record))
    return results


def parse_transactions(text: str) -> List[Transaction]:
    """Parse a JSON array of transaction objects.

    Records with missing or invalid fields are skipped with a warning; records
    without an id get a fresh one.

    Raises:
        SerializationError: If text is not JSON or not an array.
    """
    data = _load_array(text)
    return _parse_records(data, TransactionRecord, lambda r: r.to_transaction())


def parse_budgets(text: str) -> List[Budget]:
    """Parse a JSON array of budget objects. Invalid records are skipped.

    Raises:
        SerializationError: If text is not JSON or not an array.
    """
    data = _load_array(text)
    return _parse_records(data, BudgetRecord, lambda r: r.to_budget())


def dump_transactions(transactions: Iterable[Transaction], indent=2) -> str:
    """Serialize transactions to a JSON array."""
    return json.dumps([t.to_dict() for t in transactions], indent=indent, ensure_ascii=False)


def dump_budgets(budgets: Iterable[Budget], indent=2) -> str:
    """Serialize budgets to a JSON array."""
    return json.dumps([b.to_dict() for b in budgets], indent=indent, ensure_ascii=False)


def ingest(source: TextIO) -> List[Transaction]:
    """
    Ingest transactions exported as JSON.

    Expected format: an array of objects with type, date, description,
    category, amount and optionally id, paymentMethod, createdAt.
    """
    transactions = parse_transactions(source.read())
    logger.info(f"Successfully ingested {len(transactions)} transactions")
    return transactions


def export(transactions: Iterable[Transaction], destination: TextIO) -> None:
    """Write transactions to destination as pretty-printed JSON."""
    destination.write(dump_transactions(transactions))
