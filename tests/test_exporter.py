import sys
import os
import io
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from ledger_replay.exporter import export_snapshot, format_decimal, write_snapshot
from ledger_replay.models import ClientAccount


class TestFormatDecimal:
    def test_pads_to_four_places(self):
        assert format_decimal(Decimal("1.5")) == "1.5000"
        assert format_decimal(Decimal("0")) == "0.0000"
        assert format_decimal(Decimal("100")) == "100.0000"

    def test_keeps_trailing_zeros(self):
        assert format_decimal(Decimal("2.1000")) == "2.1000"

    def test_negative(self):
        assert format_decimal(Decimal("-30")) == "-30.0000"

    def test_rounds_half_even(self):
        assert format_decimal(Decimal("0.00005")) == "0.0000"
        assert format_decimal(Decimal("0.00015")) == "0.0002"

    def test_wide_values_do_not_raise(self):
        assert format_decimal(Decimal("12345678901234567890123456.5")) == "12345678901234567890123456.5000"
        assert format_decimal(Decimal("1E+70")) == "1" + "0" * 70 + ".0000"

    def test_finest_scale_rounds(self):
        assert format_decimal(Decimal("99999999999999.5000000000000000000000000001")) == "99999999999999.5000"


class TestExportSnapshot:
    def test_sorted_and_total_recomputed(self):
        accounts = {
            5: ClientAccount(client_id=5, available=Decimal("1"), held=Decimal("2"), locked=True),
            2: ClientAccount(client_id=2, available=Decimal("-3"), held=Decimal("4.25")),
        }

        snapshots = export_snapshot(accounts)

        assert [s.client_id for s in snapshots] == [2, 5]
        assert snapshots[0].total == Decimal("1.25")
        assert snapshots[1].total == Decimal("3")
        assert snapshots[1].locked is True

    def test_total_of_wide_balances_is_exact(self):
        accounts = {
            1: ClientAccount(client_id=1, available=Decimal("99999999999999.5"), held=Decimal("1E-28")),
        }

        snapshot = export_snapshot(accounts)[0]

        assert snapshot.total == Decimal("99999999999999.5000000000000000000000000001")
        assert snapshot.as_row() == ["1", "99999999999999.5000", "0.0000", "99999999999999.5000", "false"]

    def test_empty(self):
        assert export_snapshot({}) == []

    def test_as_row(self):
        accounts = {1: ClientAccount(client_id=1, available=Decimal("1.5"), held=Decimal("0"))}

        assert export_snapshot(accounts)[0].as_row() == ["1", "1.5000", "0.0000", "1.5000", "false"]


class TestWriteSnapshot:
    def test_csv_output(self):
        accounts = {
            2: ClientAccount(client_id=2, available=Decimal("2"), held=Decimal("0")),
            1: ClientAccount(client_id=1, available=Decimal("0"), held=Decimal("0"), locked=True),
        }
        stream = io.StringIO()

        write_snapshot(export_snapshot(accounts), stream)

        assert stream.getvalue() == (
            "client,available,held,total,locked\n"
            "1,0.0000,0.0000,0.0000,true\n"
            "2,2.0000,0.0000,2.0000,false\n"
        )

    def test_header_only_when_no_accounts(self):
        stream = io.StringIO()
        write_snapshot([], stream)
        assert stream.getvalue() == "client,available,held,total,locked\n"
