"""Tests for ParserFactory routing and decoding."""

from decimal import Decimal

import pytest

from txnflow.core.exceptions import DecodingError
from txnflow.parsers import ParserFactory, get_parser_factory, parse_csv
from txnflow.parsers.factory import decode_text
from txnflow.parsers.generic import GenericCSVParser
from txnflow.parsers.refinements import CheckingAccountParser, CreditCardParser

CHECKING_CSV = (
    "Details,Posting Date,Description,Amount,Type,Balance,Check or Slip #\n"
    "DEBIT,01/15/2024,\"STARBUCKS STORE #123, SEATTLE\",-5.75,DEBIT_CARD,994.25,\n"
    "CREDIT,01/16/2024,PAYROLL ACME,2000.00,ACH_CREDIT,2994.25,\n"
)

CREDIT_CSV = (
    "Transaction Date,Post Date,Description,Category,Type,Amount,Memo\n"
    "01/10/2024,01/11/2024,AUTOPAY THANK YOU,,Payment,-50.00,\n"
    "01/12/2024,01/13/2024,NETFLIX.COM,Entertainment,Sale,15.49,\n"
)


class TestDecodeText:
    """Test byte decoding."""

    def test_utf8_with_bom(self):
        assert decode_text("\ufeffDate,Amount".encode("utf-8")) == "Date,Amount"

    def test_latin1_fallback(self):
        assert decode_text("CAF\xc9".encode("latin-1")) == "CAF\xc9"

    def test_binary_rejected(self):
        with pytest.raises(DecodingError) as exc_info:
            decode_text(b"PK\x03\x04\x00\x00")
        assert exc_info.value.error_code == "IMPORT_001"

    @pytest.mark.parametrize("encoding", ["utf-16", "utf-16-le", "utf-16-be"])
    def test_utf16_with_bom(self, encoding):
        data = ("\ufeff" if encoding != "utf-16" else "") + "Date,Amount\n01/15/2024,-1.00"
        assert decode_text(data.encode(encoding)) == "Date,Amount\n01/15/2024,-1.00"

    def test_truncated_utf16_rejected(self):
        with pytest.raises(DecodingError):
            decode_text(b"\xff\xfeD\x00a")


class TestParserFactory:
    """Test suite for ParserFactory."""

    def test_singleton_registers_refinements(self):
        factory = get_parser_factory()
        assert factory is get_parser_factory()
        assert set(factory.get_registered_formats()) == {"checking", "credit"}

    def test_parse_checking(self):
        parsed = get_parser_factory().parse_file(CHECKING_CSV)

        assert parsed.format_code == "checking"
        assert [r.description for r in parsed.rows] == [
            "STARBUCKS STORE #123, SEATTLE",
            "PAYROLL ACME",
        ]
        assert parsed.rows[0].raw_amount == Decimal("-5.75")

    def test_parse_credit_payment_sign(self):
        rows = get_parser_factory().parse(CREDIT_CSV)

        assert rows[0].raw_amount == Decimal("50.00")
        assert rows[1].raw_amount == Decimal("-15.49")

    def test_parse_bytes(self):
        rows = parse_csv(CHECKING_CSV.encode("utf-8"))
        assert len(rows) == 2

    def test_parse_tab_separated_with_bom(self):
        text = "\ufeffDate\tDescription\tAmount\r\n2025-03-04\tCOFFEE\t-3.50\r\n"
        parsed = get_parser_factory().parse_file(text)

        assert parsed.format_code == "generic"
        assert parsed.rows[0].display_date == "03/04/2025"

    def test_blank_lines_ignored(self):
        text = "Date,Description,Amount\n\n01/15/2024,A,-1.00\n ,, \n"
        parsed = get_parser_factory().parse_file(text)

        assert len(parsed.rows) == 1
        assert parsed.skipped_rows == 0

    def test_unrecognized_header_returns_empty(self):
        parsed = get_parser_factory().parse_file("foo,bar\n1,2\n")

        assert parsed.format_code is None
        assert parsed.rows == []
        assert parsed.headers == ["foo", "bar"]

    def test_empty_input(self):
        parsed = get_parser_factory().parse_file("")
        assert parsed.rows == []
        assert parsed.format_code is None

    def test_utf16_export(self):
        rows = parse_csv(CHECKING_CSV.encode("utf-16"))

        assert len(rows) == 2
        assert rows[0].description == "STARBUCKS STORE #123, SEATTLE"

    def test_binary_input_returns_empty(self):
        parsed = get_parser_factory().parse_file(b"PK\x03\x04\x00\x00binary")

        assert parsed.rows == []
        assert parsed.format_code is None
        assert parse_csv(b"\x00\x01\x02") == []

    def test_parse_is_idempotent(self):
        factory = get_parser_factory()
        assert factory.parse(CHECKING_CSV) == factory.parse(CHECKING_CSV)

    def test_unregistered_format_falls_back_to_generic(self):
        factory = ParserFactory()
        parsed = factory.parse_file(CHECKING_CSV)

        # Generic parser takes amounts as-is
        assert parsed.format_code == "checking"
        assert parsed.rows[1].raw_amount == Decimal("2000.00")

    def test_register_refinement_requires_subclass(self):
        factory = ParserFactory()
        with pytest.raises(ValueError):
            factory.register_refinement("checking", object)

    def test_register_and_unregister(self):
        factory = ParserFactory()
        factory.register_refinement("credit", CreditCardParser)
        assert factory._get_parser_class("credit") is CreditCardParser

        factory.unregister_refinement("credit")
        assert factory._get_parser_class("credit") is GenericCSVParser

    def test_parser_failure_returns_empty_result(self, monkeypatch):
        def boom(self, headers, data_rows):
            raise RuntimeError("boom")

        factory = ParserFactory()
        factory.register_refinement("checking", CheckingAccountParser)
        monkeypatch.setattr(CheckingAccountParser, "parse", boom)

        parsed = factory.parse_file(CHECKING_CSV)

        assert parsed.format_code == "checking"
        assert parsed.rows == []
