import logging
from decimal import localcontext
from typing import Optional

from ledger_replay.models import (
    LEDGER_CONTEXT,
    ClientAccount,
    DisputeState,
    ProcessingResult,
    Transaction,
    TransactionRecord,
    TransactionType,
    amount_in_range,
)
from ledger_replay.state import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions against state, one at a time, in arrival order.
    Returns ProcessingResult to indicate success or the reason a transaction was ignored.
    No rejection raises: the caller keeps feeding the stream regardless of the result.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction.

        Deposits and withdrawals move funds on the client's own account and are
        refused once that account is locked. Disputes, resolves and chargebacks
        move funds of a previously stored deposit between available and held,
        and are allowed on locked accounts.
        """
        with localcontext(LEDGER_CONTEXT):
            return self._dispatch(transaction)

    def _dispatch(self, transaction: Transaction) -> ProcessingResult:
        account = self._state.get_or_create_account(transaction.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)

        raise ValueError(f"Unhandled transaction type: {transaction.transaction_type!r}")

    def _check_funding(self, account: ClientAccount, transaction: Transaction) -> Optional[ProcessingResult]:
        """Guards shared by deposits and withdrawals. Returns None when the transaction may proceed."""
        kind = transaction.transaction_type.value.capitalize()

        if account.locked:
            logger.info(f"{kind} tx {transaction.tx_id}: account {account.client_id} is locked")
            return ProcessingResult.LOCKED_ACCOUNT

        if transaction.amount is None or not amount_in_range(transaction.amount) or transaction.amount <= 0:
            logger.warning(f"{kind} tx {transaction.tx_id}: invalid amount {transaction.amount}")
            return ProcessingResult.INVALID_AMOUNT

        if self._state.has_transaction(transaction.tx_id):
            logger.warning(f"{kind} tx {transaction.tx_id}: transaction id already used, skipping")
            return ProcessingResult.DUPLICATE_TRANSACTION

        return None

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        rejection = self._check_funding(account, transaction)
        if rejection is not None:
            return rejection

        account.credit(transaction.amount)
        self._state.store_transaction(TransactionRecord.from_transaction(transaction))
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        rejection = self._check_funding(account, transaction)
        if rejection is not None:
            return rejection

        if account.available < transaction.amount:
            logger.info(
                f"Withdrawal tx {transaction.tx_id}: insufficient funds "
                f"(available {account.available}, requested {transaction.amount})"
            )
            return ProcessingResult.INSUFFICIENT_FUNDS

        account.debit(transaction.amount)
        self._state.store_transaction(TransactionRecord.from_transaction(transaction))
        return ProcessingResult.SUCCESS

    def _lookup_referenced(self, transaction: Transaction) -> tuple[Optional[TransactionRecord], Optional[ProcessingResult]]:
        kind = transaction.transaction_type.value.capitalize()
        original = self._state.get_transaction(transaction.tx_id)

        if original is None:
            logger.info(f"{kind} for tx {transaction.tx_id}: transaction not found")
            return None, ProcessingResult.UNKNOWN_TRANSACTION

        if original.client_id != transaction.client_id:
            logger.warning(
                f"{kind} for tx {transaction.tx_id}: client mismatch "
                f"(expected {original.client_id}, got {transaction.client_id})"
            )
            return None, ProcessingResult.CLIENT_MISMATCH

        return original, None

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original, rejection = self._lookup_referenced(transaction)
        if rejection is not None:
            return rejection

        # Withdrawn funds have already left the account, so there is nothing to hold.
        if original.transaction_type != TransactionType.DEPOSIT:
            logger.warning(
                f"Dispute for tx {transaction.tx_id}: only deposits can be disputed "
                f"(got {original.transaction_type.value})"
            )
            return ProcessingResult.NOT_DISPUTABLE

        if original.dispute_state != DisputeState.NORMAL:
            logger.info(f"Dispute for tx {transaction.tx_id}: transaction is {original.dispute_state.value}")
            return ProcessingResult.INVALID_STATE_TRANSITION

        account.hold(original.amount)
        original.dispute_state = DisputeState.DISPUTED
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original, rejection = self._lookup_referenced(transaction)
        if rejection is not None:
            return rejection

        if original.dispute_state != DisputeState.DISPUTED:
            logger.info(f"Resolve for tx {transaction.tx_id}: transaction is {original.dispute_state.value}, not disputed")
            return ProcessingResult.INVALID_STATE_TRANSITION

        account.release_hold(original.amount)
        original.dispute_state = DisputeState.RESOLVED
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original, rejection = self._lookup_referenced(transaction)
        if rejection is not None:
            return rejection

        if original.dispute_state != DisputeState.DISPUTED:
            logger.info(f"Chargeback for tx {transaction.tx_id}: transaction is {original.dispute_state.value}, not disputed")
            return ProcessingResult.INVALID_STATE_TRANSITION

        account.remove_held(original.amount)
        account.lock()
        original.dispute_state = DisputeState.CHARGED_BACK
        return ProcessingResult.SUCCESS
