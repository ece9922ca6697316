import logging
from typing import Dict, Iterable, List, Optional

from ledger_replay.exporter import AccountSnapshot, export_snapshot
from ledger_replay.models import ClientAccount, ProcessingResult, ProcessingStats, Transaction
from ledger_replay.processor import TransactionProcessor
from ledger_replay.reader import read_rows_from_file
from ledger_replay.state import StateManager

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a transaction stream into account state.
    Transactions are applied strictly in the order they are received, on a single thread.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self.stats = ProcessingStats()

    def apply(self, transaction: Transaction) -> ProcessingResult:
        result = self._processor.apply(transaction)
        self.stats.record(result)
        if result != ProcessingResult.SUCCESS:
            logger.debug(f"Ignored {transaction}: {result.value}")
        return result

    def process(self, transactions: Iterable[Optional[Transaction]]) -> Dict[int, ClientAccount]:
        """Apply every transaction in order and return final account states. None entries count as skipped rows."""
        for transaction in transactions:
            if transaction is None:
                self.stats.record_skipped_row()
                continue
            self.apply(transaction)

        logger.info(self.stats.summary())
        return self.accounts

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        return self.process(read_rows_from_file(filepath))

    @property
    def accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    def snapshot(self) -> List[AccountSnapshot]:
        return export_snapshot(self._state.get_all_accounts())
