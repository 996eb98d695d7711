"""Unit tests for aggregate computation."""

from __future__ import annotations

import pytest

from minidb.domain.exceptions import UnknownAggregateFunctionError
from minidb.domain.services import (
    AggregateFunction,
    AggregateResult,
    compute_aggregate,
    is_absent,
    parse_numeric,
)


@pytest.mark.unit
class TestParseNumeric:
    """Tests for the shared numeric coercion."""

    def test_numbers(self) -> None:
        """Integers, decimals and signs parse."""
        assert parse_numeric("5") == 5.0
        assert parse_numeric("-2.5") == -2.5
        assert parse_numeric(" 7 ") == 7.0

    def test_absent_cells(self) -> None:
        """NULL and empty cells are absent, not numbers."""
        assert parse_numeric("NULL") is None
        assert parse_numeric("") is None
        assert is_absent("NULL")
        assert is_absent("")
        assert not is_absent("null")

    def test_non_numeric(self) -> None:
        """Text that is not a number yields None."""
        assert parse_numeric("abc") is None
        assert parse_numeric("12abc") is None

    @pytest.mark.parametrize("cell", ["nan", "NaN", "inf", "-Infinity", "1_000", "1e999", "0x10"])
    def test_special_float_forms(self, cell: str) -> None:
        """Only plain, finite decimal text counts as a number."""
        assert parse_numeric(cell) is None

    def test_exponent(self) -> None:
        """Decimal exponents are accepted."""
        assert parse_numeric("1e3") == 1000.0
        assert parse_numeric(".5") == 0.5


@pytest.mark.unit
class TestAggregateFunction:
    """Tests for function token resolution."""

    def test_exact_tokens(self) -> None:
        """The five uppercase tokens resolve."""
        for token in ("COUNT", "SUM", "AVG", "MIN", "MAX"):
            assert AggregateFunction.from_token(token).value == token

    def test_lowercase_rejected(self) -> None:
        """Token matching is case-sensitive."""
        with pytest.raises(UnknownAggregateFunctionError):
            AggregateFunction.from_token("sum")

    def test_unknown_function(self) -> None:
        """Unknown tokens carry the offending name."""
        with pytest.raises(UnknownAggregateFunctionError) as exc_info:
            AggregateFunction.from_token("MEDIAN")
        assert exc_info.value.function == "MEDIAN"


@pytest.mark.unit
class TestComputeAggregate:
    """Tests for compute_aggregate."""

    CELLS = ["5", "NULL", "7"]
    BAD_CELLS = ["abc", "NULL", ""]

    @pytest.mark.parametrize(
        "function,expected",
        [
            (AggregateFunction.COUNT, 2),
            (AggregateFunction.SUM, 12),
            (AggregateFunction.AVG, 6),
            (AggregateFunction.MIN, 5),
            (AggregateFunction.MAX, 7),
        ],
    )
    def test_numeric_column(self, function: AggregateFunction, expected: float) -> None:
        """Absent cells are ignored by every function."""
        result = compute_aggregate(function, self.CELLS, "age")

        assert result.value == expected
        assert result.skipped == 0

    def test_non_numeric_column(self) -> None:
        """Non-numeric cells are skipped; AVG/MIN/MAX become NULL."""
        assert compute_aggregate(AggregateFunction.SUM, self.BAD_CELLS).value == 0
        assert compute_aggregate(AggregateFunction.AVG, self.BAD_CELLS).value is None
        assert compute_aggregate(AggregateFunction.MIN, self.BAD_CELLS).value is None
        assert compute_aggregate(AggregateFunction.MAX, self.BAD_CELLS).value is None
        assert compute_aggregate(AggregateFunction.COUNT, self.BAD_CELLS).value == 1

    def test_skipped_count(self) -> None:
        """Skipped cells are reported, absent cells are not."""
        result = compute_aggregate(AggregateFunction.SUM, ["1", "x", "NULL", "y", "2"])

        assert result.value == 3
        assert result.skipped == 2

    def test_empty_column(self) -> None:
        """Aggregates over no rows."""
        assert compute_aggregate(AggregateFunction.COUNT, []).value == 0
        assert compute_aggregate(AggregateFunction.SUM, []).value == 0
        assert compute_aggregate(AggregateFunction.AVG, []).is_null

    def test_min_max_ignore_cell_order_with_nan(self) -> None:
        """NaN and infinity are skipped, so cell order does not matter."""
        forward = ["nan", "3", "1", "inf"]
        backward = list(reversed(forward))

        for cells in (forward, backward):
            assert compute_aggregate(AggregateFunction.MIN, cells).value == 1.0
            assert compute_aggregate(AggregateFunction.MAX, cells).value == 3.0
            assert compute_aggregate(AggregateFunction.SUM, cells).skipped == 2

    def test_underscore_digits_skipped(self) -> None:
        """Digit separators are not part of a number."""
        result = compute_aggregate(AggregateFunction.SUM, ["1_000", "2"])

        assert result.value == 2
        assert result.skipped == 1


@pytest.mark.unit
class TestAggregateResult:
    """Tests for AggregateResult formatting."""

    def test_integral_value(self) -> None:
        """Whole numbers print without a fraction."""
        result = AggregateResult(AggregateFunction.SUM, "age", 12.0)
        assert result.format_value() == "12"
        assert str(result) == "SUM(age) = 12"

    def test_fractional_value(self) -> None:
        """Fractions keep their digits."""
        result = AggregateResult(AggregateFunction.AVG, "age", 6.5)
        assert str(result) == "AVG(age) = 6.5"

    def test_null_value(self) -> None:
        """A missing value prints as NULL."""
        result = AggregateResult(AggregateFunction.MAX, "age", None)
        assert result.is_null
        assert str(result) == "MAX(age) = NULL"
