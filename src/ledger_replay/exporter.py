import csv
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Context, Decimal
from typing import Dict, Iterable, List, TextIO

from ledger_replay.models import LEDGER_CONTEXT, ClientAccount

PRECISION = Decimal("0.0001")
HEADER = ["client", "available", "held", "total", "locked"]

# Output rounding is intended, so Inexact is not trapped here.
EXPORT_CONTEXT = Context(prec=LEDGER_CONTEXT.prec, rounding=ROUND_HALF_EVEN)


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places, keeping trailing zeros."""
    context = EXPORT_CONTEXT
    if value.is_finite() and value.adjusted() + 5 > context.prec:
        context = context.copy()
        context.prec = value.adjusted() + 5
    return f"{value.quantize(PRECISION, context=context):f}"


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool

    def as_row(self) -> List[str]:
        return [
            str(self.client_id),
            format_decimal(self.available),
            format_decimal(self.held),
            format_decimal(self.total),
            str(self.locked).lower(),
        ]


def snapshot_account(account: ClientAccount) -> AccountSnapshot:
    return AccountSnapshot(
        client_id=account.client_id,
        available=account.available,
        held=account.held,
        total=EXPORT_CONTEXT.add(account.available, account.held),
        locked=account.locked,
    )


def export_snapshot(accounts: Dict[int, ClientAccount]) -> List[AccountSnapshot]:
    """Project final account states into snapshot records, ordered by client id."""
    return [snapshot_account(accounts[client_id]) for client_id in sorted(accounts.keys())]


def write_snapshot(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    for snapshot in snapshots:
        writer.writerow(snapshot.as_row())
