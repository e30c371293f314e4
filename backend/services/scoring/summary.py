"""
수능 + 실기 합산 및 지원자 점수 통계
"""
from typing import Iterable, Optional, Union

from .models import CalculationResult, CombinedScore, PracticalCalculationResult, ScoreStatistics


def combine_scores(
    academic: Union[CalculationResult, float, None],
    practical: Union[PracticalCalculationResult, float, None] = None,
) -> CombinedScore:
    """수능 환산점수 + 실기 환산점수 = 상담 계산총점"""
    academic_total = academic.total if isinstance(academic, CalculationResult) else float(academic or 0)
    practical_total = practical.total if isinstance(practical, PracticalCalculationResult) else float(practical or 0)

    return CombinedScore(
        academic=round(academic_total, 2),
        practical=round(practical_total, 2),
        total=round(academic_total + practical_total, 2),
    )


def summarize_totals(totals: Iterable[Optional[float]]) -> ScoreStatistics:
    """지원자 총점 통계 (평균/최고/최저), 비어 있으면 모두 0"""
    scores = [float(s) for s in totals if s is not None]
    if not scores:
        return ScoreStatistics(total_count=0, avg_score=0, max_score=0, min_score=0)

    return ScoreStatistics(
        total_count=len(scores),
        avg_score=round(sum(scores) / len(scores), 2),
        max_score=round(max(scores), 2),
        min_score=round(min(scores), 2),
    )
