"""
Tests for the ledger and statement loaders.
"""

import time
from datetime import date
from decimal import Decimal

import pytest

from ledger_bank_recon.config import ReconConfig
from ledger_bank_recon.loaders import (
    LedgerLoader,
    StatementLoader,
    load_statement_feeds,
    parse_window,
)
from ledger_bank_recon.models import TransactionKind
from ledger_bank_recon.utils.exceptions import LoadError, LoadErrorKind, ValidationError

from tests.conftest import LEDGER_HEADER, STATEMENT_HEADER, write_csv

START = date(2025, 6, 10)
END = date(2025, 7, 10)


class TestDateWindow:
    """Window parsing and validation."""

    def test_parse_window(self):
        assert parse_window("2025-06-10", "2025-07-10") == (START, END)

    def test_single_day_window(self):
        assert parse_window("2025-07-08", "2025-07-08") == (date(2025, 7, 8), date(2025, 7, 8))

    def test_bad_start_date(self):
        with pytest.raises(ValidationError, match="start date"):
            parse_window("2025-13-01", "2025-07-10")

    def test_bad_end_date(self):
        with pytest.raises(ValidationError, match="end date"):
            parse_window("2025-06-10", "10/07/2025")

    def test_start_after_end(self):
        with pytest.raises(ValidationError, match="after"):
            parse_window("2025-07-11", "2025-07-10")


class TestLedgerLoader:
    """Ledger CSV parsing."""

    def test_loads_and_normalizes(self, sample_files):
        records = LedgerLoader().load_file(sample_files["ledger"])

        assert [r.id for r in records] == ["TXN001", "TXN002", "TXN003", "TXN004"]
        first = records[0]
        assert first.amount == Decimal("1500.50")
        assert first.kind is TransactionKind.DEBIT
        assert first.date == date(2025, 7, 8)

    def test_window_is_inclusive(self, sample_files):
        records = LedgerLoader().load_file(sample_files["ledger"], START, END)

        # TXN002 falls on the last day at 23:59:59
        assert [r.id for r in records] == ["TXN001", "TXN002", "TXN003"]

    def test_kind_is_case_insensitive(self, tmp_path):
        path = write_csv(tmp_path / "l.csv", LEDGER_HEADER, ["T1,5.00,credit,2025-07-01 00:00:00"])
        records = LedgerLoader().load_file(path)
        assert records[0].kind is TransactionKind.CREDIT

    def test_invalid_amount_aborts(self, tmp_path):
        path = write_csv(
            tmp_path / "l.csv",
            LEDGER_HEADER,
            ["T1,5.00,DEBIT,2025-07-01 00:00:00", "T2,abc,DEBIT,2025-07-01 00:00:00"],
        )
        with pytest.raises(LoadError) as exc_info:
            LedgerLoader().load_file(path)

        assert exc_info.value.kind is LoadErrorKind.PARSE_FAILURE
        assert exc_info.value.row == 2
        assert exc_info.value.source == str(path)

    def test_invalid_date_aborts(self, tmp_path):
        path = write_csv(tmp_path / "l.csv", LEDGER_HEADER, ["T1,5.00,DEBIT,not-a-date"])
        with pytest.raises(LoadError, match="Invalid date"):
            LedgerLoader().load_file(path)

    def test_invalid_kind_aborts(self, tmp_path):
        path = write_csv(tmp_path / "l.csv", LEDGER_HEADER, ["T1,5.00,REFUND,2025-07-01 00:00:00"])
        with pytest.raises(LoadError, match="REFUND"):
            LedgerLoader().load_file(path)

    def test_duplicate_id_aborts(self, tmp_path):
        path = write_csv(
            tmp_path / "l.csv",
            LEDGER_HEADER,
            ["T1,5.00,DEBIT,2025-07-01 00:00:00", "T1,7.00,CREDIT,2025-07-02 00:00:00"],
        )
        with pytest.raises(LoadError, match="Duplicate transaction id 'T1'") as exc_info:
            LedgerLoader().load_file(path)

        assert exc_info.value.kind is LoadErrorKind.PARSE_FAILURE
        assert exc_info.value.row == 2

    def test_missing_column(self, tmp_path):
        path = write_csv(tmp_path / "l.csv", "trxID,amount,type", ["T1,5.00,DEBIT"])
        with pytest.raises(LoadError) as exc_info:
            LedgerLoader().load_file(path)
        assert exc_info.value.kind is LoadErrorKind.MISSING_COLUMN

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError) as exc_info:
            LedgerLoader().load_file(tmp_path / "absent.csv")
        assert exc_info.value.kind is LoadErrorKind.FILE_UNREADABLE

    def test_custom_column_mappings(self, tmp_path):
        config = ReconConfig()
        config.input.ledger["column_mappings"] = {
            "id": "ref",
            "amount": "value",
            "kind": "direction",
            "date": "posted",
        }
        config.input.ledger["date_format"] = "%d/%m/%Y"
        path = write_csv(tmp_path / "l.csv", "ref,value,direction,posted", ["R1,12.34,DEBIT,08/07/2025"])

        records = LedgerLoader(config).load_file(path)

        assert records[0].id == "R1"
        assert records[0].date == date(2025, 7, 8)


class TestStatementLoader:
    """Statement CSV parsing."""

    def test_origin_is_file_path(self, sample_files):
        records = StatementLoader().load_file(sample_files["bank_a"])

        assert [r.id for r in records] == ["BS001", "BS003"]
        assert {r.origin for r in records} == {str(sample_files["bank_a"])}
        assert records[0].amount == Decimal("1500.20")

    def test_window(self, sample_files):
        records = StatementLoader().load_file(sample_files["bank_b"], START, END)
        assert [r.id for r in records] == ["BB001", "BB002"]

    def test_thousands_separator_and_currency(self, tmp_path):
        path = write_csv(tmp_path / "s.csv", STATEMENT_HEADER, ['S1,"$1,500.20",2025-07-08'])
        records = StatementLoader().load_file(path)
        assert records[0].amount == Decimal("1500.20")

    def test_blank_amount_aborts(self, tmp_path):
        path = write_csv(tmp_path / "s.csv", STATEMENT_HEADER, ["S1,,2025-07-08"])
        with pytest.raises(LoadError, match="Missing amount"):
            StatementLoader().load_file(path)

    def test_extra_field_aborts(self, tmp_path):
        path = write_csv(
            tmp_path / "s.csv",
            STATEMENT_HEADER,
            ["S1,1.00,2025-07-07", "S2,2.00,2025-07-08,oops"],
        )
        with pytest.raises(LoadError) as exc_info:
            StatementLoader().load_file(path)

        assert exc_info.value.kind is LoadErrorKind.PARSE_FAILURE
        assert exc_info.value.source == str(path)
        assert exc_info.value.row == 2

    def test_duplicate_identifier_aborts(self, tmp_path):
        path = write_csv(
            tmp_path / "s.csv",
            STATEMENT_HEADER,
            ["S1,1.00,2025-07-07", "S2,2.00,2025-07-08", "S1,3.00,2025-07-09"],
        )
        with pytest.raises(LoadError, match="Duplicate statement identifier") as exc_info:
            StatementLoader().load_file(path)

        assert exc_info.value.row == 3

    def test_same_identifier_in_different_feeds(self, tmp_path):
        first = write_csv(tmp_path / "a.csv", STATEMENT_HEADER, ["S1,1.00,2025-07-07"])
        second = write_csv(tmp_path / "b.csv", STATEMENT_HEADER, ["S1,1.00,2025-07-07"])

        records = load_statement_feeds([first, second])

        assert [r.origin for r in records] == [str(first), str(second)]

    def test_header_only_file(self, tmp_path):
        path = write_csv(tmp_path / "s.csv", STATEMENT_HEADER, [])
        assert StatementLoader().load_file(path) == []


class TestParallelFeeds:
    """Fan-out loading and ordered fan-in."""

    def test_merge_keeps_feed_order(self, sample_files):
        records = load_statement_feeds(
            [sample_files["bank_a"], sample_files["bank_b"]], start=START, end=END
        )
        assert [r.id for r in records] == ["BS001", "BS003", "BB001", "BB002"]

    def test_merge_order_independent_of_completion(self, sample_files, monkeypatch):
        original = StatementLoader.load_file

        def slow_first_feed(self, file_path, start=None, end=None):
            if file_path == sample_files["bank_a"]:
                time.sleep(0.2)
            return original(self, file_path, start, end)

        monkeypatch.setattr(StatementLoader, "load_file", slow_first_feed)

        records = load_statement_feeds([sample_files["bank_a"], sample_files["bank_b"]])
        assert [r.id for r in records][:2] == ["BS001", "BS003"]

    def test_any_failing_feed_aborts(self, sample_files, tmp_path):
        with pytest.raises(LoadError):
            load_statement_feeds([sample_files["bank_a"], tmp_path / "missing.csv"])

    def test_no_feeds(self):
        assert load_statement_feeds([]) == []

    def test_single_worker(self, sample_files):
        config = ReconConfig()
        config.loading.max_workers = 1
        records = load_statement_feeds(
            [sample_files["bank_b"], sample_files["bank_a"]], config
        )
        assert [r.id for r in records] == ["BB001", "BB002", "BB003", "BS001", "BS003"]
