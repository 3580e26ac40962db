import logging
from typing import Dict, Iterable, List, Optional

from config import EngineConfig
from models import AccountSnapshot, ClientAccount, MalformedRecord, ProcessingResult, ProcessingStats
from record_source import Record, read_records_from_file
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays an ordered stream of transaction records against client accounts.
    Records are pulled one at a time and fully applied (or rejected) before the next.
    Each engine owns the state of one run.
    """

    def __init__(self, config: Optional[EngineConfig] = None, state: Optional[StateManager] = None):
        self._config = config or EngineConfig()
        self._state = state if state is not None else StateManager()
        self._processor = TransactionProcessor(self._state, disputable_types=self._config.disputable_types)
        self._stats = ProcessingStats()
        self._rejections: List[ProcessingResult] = []
        self._malformed_records: List[MalformedRecord] = []

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def state(self) -> StateManager:
        return self._state

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    @property
    def rejections(self) -> List[ProcessingResult]:
        return list(self._rejections)

    @property
    def malformed_records(self) -> List[MalformedRecord]:
        return list(self._malformed_records)

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")
        return self.process_records(read_records_from_file(filepath))

    def process_records(self, records: Iterable[Record]) -> Dict[int, ClientAccount]:
        """Consume records in order, exactly once, and return final account states."""
        for record in records:
            self.process_record(record)

        logger.info(f"Processing complete: {self._stats}")
        return self._state.get_all_accounts()

    def process_record(self, record: Record) -> Optional[ProcessingResult]:
        """Apply a single record. Malformed records are logged and skipped."""
        if isinstance(record, MalformedRecord):
            logger.warning(f"Skipping malformed row {record.line_number} {record.row}: {record.error}")
            self._malformed_records.append(record)
            self._stats.record_malformed()
            return None

        result = self._processor.process_transaction(record)
        self._stats.record_result(result)
        if not result.applied:
            self._rejections.append(result)
        return result

    def snapshot(self) -> List[AccountSnapshot]:
        """Final account states, sorted by client id."""
        return self._state.snapshot()
