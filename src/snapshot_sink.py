import csv
from typing import Iterable, TextIO

from amounts import DEFAULT_PRECISION, format_amount
from models import AccountSnapshot

OUTPUT_HEADER = ("client", "available", "held", "total", "locked")


def format_snapshot_row(snapshot: AccountSnapshot, precision: int = DEFAULT_PRECISION) -> list:
    return [
        snapshot.client_id,
        format_amount(snapshot.available, precision),
        format_amount(snapshot.held, precision),
        format_amount(snapshot.total, precision),
        str(snapshot.locked).lower(),
    ]


def write_snapshot(snapshots: Iterable[AccountSnapshot], stream: TextIO, precision: int = DEFAULT_PRECISION) -> None:
    """Write account states as CSV, one row per client, in the order given."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for snapshot in snapshots:
        writer.writerow(format_snapshot_row(snapshot, precision))
