from __future__ import annotations

import pytest

from src.hrms.hrms.common.validators import RequestValidator


@pytest.mark.parametrize("raw", ["NaN", "nan", "Infinity", "-inf", float("nan"), float("inf")])
def test_number_rejects_non_finite_values(raw):
    v = RequestValidator({"amount": raw})

    assert v.number("amount", "Amount must be a number") is None
    assert v.errors == [{"field": "amount", "message": "Amount must be a number"}]


def test_number_accepts_numeric_strings_and_rejects_booleans():
    v = RequestValidator({"a": "12.5", "b": 3, "c": True})

    assert v.number("a", "bad") == 12.5
    assert v.number("b", "bad") == 3.0
    assert v.number("c", "bad") is None
    assert [e["field"] for e in v.errors] == ["c"]
