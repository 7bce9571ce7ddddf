import csv
import logging
from typing import Iterable, List, Optional, TextIO

from pydantic import ValidationError as RecordError

from errors import SerializationError
from models.records import TransactionRecord
from models.transaction import Transaction

logger = logging.getLogger(__name__)

HEADER = ["Date", "Type", "Description", "Category", "Amount", "PaymentMethod"]

# Files exported by older versions spell the last column "Payment Method"
_ACCEPTED_LAST_COLUMNS = {"paymentmethod", "payment method"}


def _is_header(row: List[str]) -> bool:
    if len(row) < 5:
        return False
    names = [cell.strip().lower() for cell in row]
    expected = [h.lower() for h in HEADER[:5]]
    if names[:5] != expected:
        return False
    return len(names) == 5 or names[5] in _ACCEPTED_LAST_COLUMNS


def row_to_transaction(row: List[str]) -> Optional[Transaction]:
    """Convert one CSV row to a Transaction, or None if the row is invalid."""
    record = {
        "date": row[0].strip(),
        "type": row[1].strip(),
        "description": row[2].strip().strip('"'),
        "category": row[3].strip().strip('"'),
        "amount": row[4].strip().replace(",", ""),
        "paymentMethod": row[5].strip() if len(row) > 5 else "",
    }
    try:
        return TransactionRecord.model_validate(record).to_transaction()
    except RecordError as e:
        logger.warning(f"Invalid transaction row {row}: {e.error_count()} error(s)")
        return None


def ingest(source: TextIO) -> List[Transaction]:
    """
    Ingest transactions exported as CSV.

    Expected format:
    - Header row (line 1): Date,Type,Description,Category,Amount,PaymentMethod
    - Transaction rows (line 2+): text fields may be quoted

    Raises:
        SerializationError: If the file is empty or the header is wrong.
    """
    transactions = []
    reader = csv.reader(source)

    # Read and validate header
    try:
        header = next(reader)
    except StopIteration:
        raise SerializationError("Empty CSV file")
    except csv.Error as e:
        raise SerializationError(f"Unreadable CSV: {e}") from e

    if not _is_header(header):
        raise SerializationError(f"Invalid header format: {header}")
    logger.info("Found transaction CSV header")

    line_num = 1
    try:
        for row in reader:
            line_num += 1

            if not row or not any(cell.strip() for cell in row):
                continue

            if len(row) < 5:
                logger.warning(f"Skipping malformed line {line_num}: {row}")
                continue

            transaction = row_to_transaction(row)
            if transaction is None:
                logger.warning(f"Skipping invalid line {line_num}")
                continue

            transactions.append(transaction)
    except csv.Error as e:
        raise SerializationError(f"Unreadable CSV at line {line_num}: {e}") from e

    logger.info(f"Successfully ingested {len(transactions)} transactions")
    return transactions


def export(transactions: Iterable[Transaction], destination: TextIO) -> None:
    """Write transactions as CSV with the import header.

    Text fields are quoted, amounts are written as plain numbers.
    """
    destination.write(",".join(HEADER) + "\n")
    writer = csv.writer(destination, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for t in transactions:
        writer.writerow(
            [
                t.date.isoformat(),
                t.type,
                t.description,
                t.category,
                t.amount,
                t.payment_method or "cash",
            ]
        )
