import csv
from typing import Dict, Iterator, Optional, TextIO, Union

from amounts import parse_amount
from models import MalformedRecord, Transaction, TransactionType

Record = Union[Transaction, MalformedRecord]

REQUIRED_COLUMNS = ("type", "client", "tx")


class RecordSourceError(ValueError):
    """Input could not be interpreted as transaction records."""


def read_records(stream: TextIO) -> Iterator[Record]:
    """
    Read CSV rows from an open text stream and yield them one at a time, in order.
    Rows that cannot be interpreted are yielded as MalformedRecord skip signals.
    A header without the required columns makes the whole input unusable.
    """
    reader = csv.reader(stream, skipinitialspace=True)
    header = next(reader, None)
    if header is None:
        return

    columns = [name.strip().lower() for name in header]
    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise RecordSourceError(f"CSV header is missing required columns: {', '.join(missing)}")

    for row in reader:
        if not any(field.strip() for field in row):
            continue
        try:
            yield parse_row(dict(zip(columns, row)))
        except ValueError as e:
            yield MalformedRecord(line_number=reader.line_num, row=row, error=str(e))


def read_records_from_file(filepath: str) -> Iterator[Record]:
    """Open a CSV file and stream its records. Failing to open the file raises OSError."""
    with open(filepath, "r", newline="") as f:
        yield from read_records(f)


def parse_row(row: Dict[str, Optional[str]]) -> Transaction:
    """Parse one CSV row (column name -> raw value) into a Transaction."""
    normalized = {k: (v or "").strip() for k, v in row.items()}

    missing = [name for name in REQUIRED_COLUMNS if not normalized.get(name)]
    if missing:
        raise RecordSourceError(f"missing value for {', '.join(missing)}")

    transaction_type_str = normalized["type"].lower()
    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError:
        raise RecordSourceError(f"unknown transaction type {transaction_type_str!r}") from None

    client_id = _parse_id(normalized["client"], "client")
    transaction_id = _parse_id(normalized["tx"], "tx")

    # Presence rules for the amount belong to the processor
    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        amount = parse_amount(amount_str)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(raw: str, column: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise RecordSourceError(f"{column} must be an integer, got {raw!r}") from None
    if value < 0:
        raise RecordSourceError(f"{column} must be non-negative, got {value}")
    return value
