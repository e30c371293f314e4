"""
점수 계산 예외 정의
"""
from typing import Optional


class ScoringError(Exception):
    """점수 계산 관련 예외의 기본 클래스"""


class InvalidFormulaError(ScoringError):
    """특수공식에 허용되지 않은 토큰이 있거나 구문이 올바르지 않은 경우.

    해당 대학의 계산은 중단되며 부분 총점은 반환하지 않는다.
    """

    def __init__(self, formula: str, message: str = "특수공식에 허용되지 않은 토큰이 포함되어 있습니다.") -> None:
        self.formula = formula
        super().__init__(f"{message} (formula: {formula!r})")


class MissingConfigurationError(ScoringError):
    """대학/학년도의 반영비율 설정이 없는 경우 (호출 측에서 발생)"""

    def __init__(self, university_id: Optional[int] = None, year: Optional[int] = None) -> None:
        self.university_id = university_id
        self.year = year
        target = f"U_ID={university_id}" if university_id is not None else "요청"
        if year is not None:
            target += f", 학년도={year}"
        super().__init__(f"반영비율 정보를 찾을 수 없습니다. ({target})")
