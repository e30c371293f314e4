"""
특수공식 계산기

대학별 특수공식 문자열의 {자리표시자}를 계산 컨텍스트 값으로 치환한 뒤,
숫자 / 사칙연산(+ - * /) / 괄호 / 소수점 / 공백만 남은 식을 재귀 하강 파서로 계산한다.
그 외 문자가 하나라도 남으면 계산하지 않고 InvalidFormulaError.
"""
import math
import re
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from config.logging_config import setup_logger
from .exceptions import InvalidFormulaError

logger = setup_logger("scoring.formula")

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z0-9_]+)\}")
ALLOWED_PATTERN = re.compile(r"^[0-9+\-*/().\s]+$")
NUMBER_PATTERN = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")

OPERATORS = "+-*/()"

Token = Tuple[str, object]


def format_number(value: float) -> str:
    """지수 표기 없이 숫자 문자열로 변환 (1e-05 → 0.00001)"""
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def substitute_placeholders(
    formula: str,
    context: Dict[str, float],
    log: Optional[List[str]] = None,
) -> str:
    """{name}을 컨텍스트 값으로 치환 (없는 이름/숫자가 아닌 값은 0)"""

    def replace(match: re.Match) -> str:
        name = match.group(1)
        value = context.get(name, 0)
        try:
            value = float(value)
        except (TypeError, ValueError):
            value = 0.0
        if not math.isfinite(value):
            value = 0.0
        text = format_number(value)
        if log is not None:
            log.append(f"[특수공식 변수] {name} = {text}")
        return text

    return PLACEHOLDER_PATTERN.sub(replace, str(formula or ""))


def tokenize(expression: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    while pos < len(expression):
        ch = expression[pos]
        if ch.isspace():
            pos += 1
        elif ch in OPERATORS:
            tokens.append(("op", ch))
            pos += 1
        else:
            match = NUMBER_PATTERN.match(expression, pos)
            if not match:
                raise InvalidFormulaError(expression)
            tokens.append(("num", float(match.group())))
            pos = match.end()
    return tokens


class _Parser:
    """
    expr    := term (('+' | '-') term)*
    term    := unary (('*' | '/') unary)*
    unary   := ('+' | '-') unary | primary
    primary := NUMBER | '(' expr ')'
    """

    def __init__(self, tokens: List[Token], source: str, log: Optional[List[str]] = None):
        self.tokens = tokens
        self.source = source
        self.log = log
        self.pos = 0

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take_op(self, ops: str) -> Optional[str]:
        token = self._peek()
        if token and token[0] == "op" and token[1] in ops:
            self.pos += 1
            return token[1]
        return None

    def _fail(self, message: str) -> InvalidFormulaError:
        return InvalidFormulaError(self.source, message)

    def parse(self) -> float:
        if not self.tokens:
            raise self._fail("특수공식이 비어 있습니다.")
        value = self._expr()
        if self._peek() is not None:
            raise self._fail("특수공식 구문이 올바르지 않습니다.")
        return value

    def _expr(self) -> float:
        value = self._term()
        while True:
            op = self._take_op("+-")
            if op is None:
                return value
            rhs = self._term()
            value = value + rhs if op == "+" else value - rhs

    def _term(self) -> float:
        value = self._unary()
        while True:
            op = self._take_op("*/")
            if op is None:
                return value
            rhs = self._unary()
            if op == "*":
                value *= rhs
            else:
                if rhs == 0:
                    # 0으로 나누는 항은 0
                    logger.warning(f"특수공식 0 나누기 → 0 처리: {self.source!r}")
                    if self.log is not None:
                        self.log.append("[특수공식] 0으로 나누는 항 → 0 처리")
                    value = 0.0
                else:
                    value /= rhs

    def _unary(self) -> float:
        op = self._take_op("+-")
        if op == "-":
            return -self._unary()
        if op == "+":
            return self._unary()
        return self._primary()

    def _primary(self) -> float:
        token = self._peek()
        if token is None:
            raise self._fail("특수공식이 연산자로 끝났습니다.")
        if token[0] == "num":
            self.pos += 1
            return token[1]
        if self._take_op("("):
            value = self._expr()
            if not self._take_op(")"):
                raise self._fail("특수공식의 괄호가 닫히지 않았습니다.")
            return value
        raise self._fail("특수공식 구문이 올바르지 않습니다.")


def evaluate_expression(expression: str, log: Optional[List[str]] = None) -> float:
    """자리표시자가 모두 치환된 산술식 계산 (0으로 나누는 항은 0)"""
    if not ALLOWED_PATTERN.match(expression or ""):
        logger.warning(f"특수공식 거부: {expression!r}")
        raise InvalidFormulaError(expression)
    return _Parser(tokenize(expression), expression, log).parse()


def evaluate_formula(
    formula: str,
    context: Dict[str, float],
    log: Optional[List[str]] = None,
) -> float:
    """특수공식 평가 (변수 치환 후 계산)"""
    replaced = substitute_placeholders(formula, context, log)
    return evaluate_expression(replaced, log)
