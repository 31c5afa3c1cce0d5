"""Tests for schema inference and value conversion."""

from datetime import date

import pytest

from tosql.ingestion.schema import BOOLEAN, INTEGER, REAL, TEXT, convert, infer_schema, value_kind


class TestValueKind:
    @pytest.mark.parametrize(
        "value, kind",
        [
            (1, INTEGER),
            ("42", INTEGER),
            (" -7 ", INTEGER),
            (str(2**63 - 1), INTEGER),
            (str(2**63), TEXT),
            (str(-(2**63) - 1), TEXT),
            (2**70, TEXT),
            (1.5, REAL),
            ("3.14", REAL),
            ("1e5", REAL),
            (True, BOOLEAN),
            ("FALSE", BOOLEAN),
            ("x", TEXT),
            ("", TEXT),
            (None, TEXT),
            ("nan", TEXT),
            (date(2021, 10, 1), TEXT),
        ],
    )
    def test_kinds(self, value, kind):
        assert value_kind(value) == kind


class TestInferSchema:
    def test_header_fidelity(self):
        schema = infer_schema(["a", "b", "c"], [{"a": "1", "b": "2", "c": "3"}])
        assert schema == {"a": INTEGER, "b": INTEGER, "c": INTEGER}

    def test_widening_to_text(self):
        rows = [{"v": 1}, {"v": 2}, {"v": "x"}]
        assert infer_schema(["v"], rows) == {"v": TEXT}

    def test_out_of_range_integer_widens_to_text(self):
        rows = [{"id": "1"}, {"id": "123456789012345678901234567890"}]
        assert infer_schema(["id"], rows) == {"id": TEXT}

    def test_widening_order(self):
        assert infer_schema([], [{"v": 1}, {"v": 2.5}]) == {"v": REAL}
        assert infer_schema([], [{"v": 1}, {"v": True}]) == {"v": BOOLEAN}
        assert infer_schema([], [{"v": True}, {"v": 1}]) == {"v": BOOLEAN}

    def test_null_widens_to_text(self):
        assert infer_schema(["v"], [{"v": 1}, {"v": None}]) == {"v": TEXT}

    def test_unobserved_column_is_text(self):
        assert infer_schema(["a", "b"], [{"a": 1}]) == {"a": INTEGER, "b": TEXT}

    def test_label_union_keeps_first_seen_order(self):
        rows = [{"b": 1, "a": 1}, {"c": 1, "a": 2}]
        assert list(infer_schema([], rows)) == ["b", "a", "c"]

    def test_no_rows_no_header(self):
        assert infer_schema([], []) == {}


class TestConvert:
    def test_integer(self):
        assert convert(" 12 ", INTEGER) == 12
        assert convert(12, INTEGER) == 12

    def test_integer_out_of_range_kept_as_text(self):
        assert convert(str(2**70), INTEGER) == str(2**70)

    def test_real(self):
        assert convert("2.5", REAL) == 2.5
        assert convert(2, REAL) == 2.0

    def test_boolean(self):
        assert convert("True", BOOLEAN) is True
        assert convert(False, BOOLEAN) is False
        assert convert(0, BOOLEAN) is False
        assert convert("1", BOOLEAN) is True

    def test_text(self):
        assert convert(True, TEXT) == "true"
        assert convert(3, TEXT) == "3"
        assert convert(date(2021, 10, 1), TEXT) == "2021-10-01"

    def test_null_stays_null(self):
        assert convert(None, INTEGER) is None
        assert convert(None, TEXT) is None

    def test_unconvertible_falls_back_to_text(self):
        assert convert("abc", REAL) == "abc"
