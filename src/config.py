import logging
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional

from amounts import DEFAULT_PRECISION
from models import AMOUNT_TRANSACTION_TYPES, TransactionType


LOG_LEVEL_ENV_VAR: str = "PAYMENTS_LOG_LEVEL"
DISPUTABLE_TYPES_ENV_VAR: str = "PAYMENTS_DISPUTABLE_TYPES"

LOG_FORMAT: str = "%(levelname)s: %(message)s"
DEFAULT_LOG_LEVEL: str = "WARNING"


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for a single replay run."""

    # Only deposits and withdrawals are recorded, so only they can be disputed
    disputable_types: FrozenSet[TransactionType] = field(
        default_factory=lambda: AMOUNT_TRANSACTION_TYPES
    )

    # Decimal places used when rendering amounts (accumulation is exact)
    output_precision: int = DEFAULT_PRECISION

    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        unsupported = set(self.disputable_types) - AMOUNT_TRANSACTION_TYPES
        if unsupported:
            names = ", ".join(sorted(t.value for t in unsupported))
            raise ValueError(f"Only deposits and withdrawals can be disputable, got: {names}")
        if self.output_precision < 0:
            raise ValueError(f"output_precision must be non-negative, got {self.output_precision}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build a config from PAYMENTS_* environment variables, falling back to defaults."""
        if environ is None:
            environ = os.environ

        kwargs = {}
        log_level = environ.get(LOG_LEVEL_ENV_VAR, "").strip()
        if log_level:
            kwargs["log_level"] = log_level.upper()

        disputable = environ.get(DISPUTABLE_TYPES_ENV_VAR, "").strip()
        if disputable:
            kwargs["disputable_types"] = parse_transaction_types(disputable)

        return cls(**kwargs)


def parse_transaction_types(value: str) -> FrozenSet[TransactionType]:
    """Parse a comma-separated list such as "deposit, withdrawal"."""
    types = set()
    for name in value.split(","):
        name = name.strip().lower()
        if not name:
            continue
        try:
            types.add(TransactionType(name))
        except ValueError:
            raise ValueError(f"Unknown transaction type: {name}") from None
    return frozenset(types)
