from typing import Dict, Optional

from ledger_replay.models import ClientAccount, TransactionRecord


class StateManager:
    """
    In-memory ledger state for a single replay.
    Stores client accounts and transaction history for dispute lookups.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, TransactionRecord] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def store_transaction(self, record: TransactionRecord) -> None:
        """Store transaction for future dispute lookups."""
        self._transactions[record.tx_id] = record

    def get_transaction(self, tx_id: int) -> Optional[TransactionRecord]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(tx_id)

    def has_transaction(self, tx_id: int) -> bool:
        return tx_id in self._transactions

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
