"""Tests for the override formula evaluator."""

import pytest

from services.scoring import InvalidFormulaError, evaluate_expression, evaluate_formula
from services.scoring.formula import format_number, substitute_placeholders, tokenize


class TestEvaluateExpression:
    """Arithmetic with + - * / and parentheses."""

    @pytest.mark.parametrize("expression, expected", [
        ("1 + 2 * 3", 7),
        ("(1 + 2) * 3", 9),
        ("10 / 4", 2.5),
        ("-3 + 5", 2),
        ("2 * -3", -6),
        ("--4", 4),
        (".5 + 1.5", 2),
        ("100 - 10 - 5", 85),
        ("2 * (3 + (4 - 1)) / 3", 4),
    ])
    def test_valid(self, expression, expected):
        assert evaluate_expression(expression) == pytest.approx(expected)

    @pytest.mark.parametrize("expression", [
        "1; 2",
        "abc",
        "__import__('os').system('ls')",
        "2 ** 3",
        "1 +",
        "(1 + 2",
        "1 + 2)",
        "()",
        "1 2",
        "1.2.3",
        "",
        "   ",
    ])
    def test_rejected(self, expression):
        """Malformed or disallowed expressions should never evaluate."""
        with pytest.raises(InvalidFormulaError):
            evaluate_expression(expression)

    def test_division_by_zero_is_zero(self):
        """A zero divisor should zero that term and keep evaluating."""
        log = []
        assert evaluate_expression("3 + 5 / (2 - 2)", log) == 3
        assert log == ["[특수공식] 0으로 나누는 항 → 0 처리"]

    def test_division_by_zero_from_placeholder(self):
        assert evaluate_formula("{a} * 2 / {b} + 1", {"a": 4}) == 1

    def test_error_keeps_formula(self):
        with pytest.raises(InvalidFormulaError) as exc_info:
            evaluate_expression("1 + x")
        assert exc_info.value.formula == "1 + x"


class TestPlaceholders:
    """Named placeholder substitution."""

    def test_substitution_logged(self):
        log = []
        replaced = substitute_placeholders("{a} + {b}", {"a": 1.5, "b": -2}, log)

        assert replaced == "1.5 + -2"
        assert log == ["[특수공식 변수] a = 1.5", "[특수공식 변수] b = -2"]

    def test_unknown_is_zero(self):
        assert evaluate_formula("{missing} + 5", {}) == 5

    def test_non_numeric_value_is_zero(self):
        assert evaluate_formula("{a} + 1", {"a": "oops"}) == 1

    def test_bad_placeholder_name_rejected(self):
        """Names outside [A-Za-z0-9_] are left in place and rejected."""
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("{a-b} + 1", {"a-b": 1})

    def test_small_values_without_exponent(self):
        assert format_number(0.00001) == "0.00001"
        assert evaluate_formula("{x} * 100000", {"x": 0.00001}) == pytest.approx(1)


def test_tokenize():
    assert tokenize("12.5*(3)") == [("num", 12.5), ("op", "*"), ("op", "("), ("num", 3.0), ("op", ")")]
