import argparse
import csv
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from config import LOG_FORMAT, EngineConfig
from models import TransactionType
from payments_engine import PaymentsEngine
from record_source import RecordSourceError
from snapshot_sink import write_snapshot

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-engine",
        description="Replay a CSV of transactions and print the resulting client accounts.",
    )
    parser.add_argument("input", help="path to the transactions CSV file")
    parser.add_argument(
        "--log-level",
        help="logging level for stderr output (default: $PAYMENTS_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--deposit-disputes-only",
        action="store_true",
        help="reject disputes that reference withdrawals",
    )
    return parser


def load_config(args: argparse.Namespace) -> EngineConfig:
    config = EngineConfig.from_env()
    if args.log_level:
        config = replace(config, log_level=args.log_level.upper())
    if args.deposit_disputes_only:
        config = replace(config, disputable_types=frozenset({TransactionType.DEPOSIT}))
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    engine = PaymentsEngine(config)
    try:
        engine.process_file(args.input)
    except (OSError, UnicodeDecodeError, csv.Error, RecordSourceError) as e:
        logger.error(f"Failed to read {args.input}: {e}")
        return 1

    write_snapshot(engine.snapshot(), sys.stdout, precision=config.output_precision)
    return 0


if __name__ == "__main__":
    sys.exit(main())
