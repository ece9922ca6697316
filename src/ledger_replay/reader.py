import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, TextIO

from ledger_replay.models import MAX_AMOUNT_EXPONENT, MAX_AMOUNT_SCALE, Transaction, TransactionType, amount_in_range

logger = logging.getLogger(__name__)

FUNDING_TYPES = (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


def parse_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """Parse CSV row into Transaction. Returns None for malformed rows."""
    try:
        # DictReader fills missing trailing columns with None and collects extras under a None key.
        normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

        transaction_type = TransactionType(normalized["type"].lower())
        client_id = int(normalized["client"])
        tx_id = int(normalized["tx"])

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            amount = Decimal(amount_str)
            if not amount_in_range(amount):
                raise ValueError(
                    f"amount {amount_str!r} is not finite, reaches 10**{MAX_AMOUNT_EXPONENT + 1} "
                    f"or has more than {MAX_AMOUNT_SCALE} decimal places"
                )

        if transaction_type in FUNDING_TYPES and amount is None:
            raise ValueError(f"{transaction_type.value} without amount")

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            tx_id=tx_id,
            amount=amount,
        )
    except (KeyError, ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to parse row {row}: {e}")
        return None


def read_rows(stream: TextIO) -> Iterator[Optional[Transaction]]:
    """Yield one parse result per CSV row, None for rows that could not be parsed."""
    reader = csv.DictReader(stream)
    for row in reader:
        yield parse_row(row)


def read_rows_from_file(filepath: str) -> Iterator[Optional[Transaction]]:
    """Yield parse results from a CSV file. Undecodable bytes are replaced so only their row is lost."""
    with open(filepath, "r", newline="", errors="replace") as f:
        yield from read_rows(f)
