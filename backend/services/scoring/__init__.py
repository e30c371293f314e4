"""
점수 계산 엔진
수능 환산(suneung_calculator)과 실기 환산(silgi_calculator)
"""

from .exceptions import InvalidFormulaError, MissingConfigurationError, ScoringError
from .formula import evaluate_expression, evaluate_formula
from .models import (
    CalculationResult,
    CombinedScore,
    EventMethod,
    EventScoreRow,
    EventScoreTable,
    Gender,
    HighestStandardScoreMap,
    InquiryScore,
    InquiryTrack,
    MaxScoreMethod,
    OutOfRangePolicy,
    PracticalCalculationResult,
    PracticalEventRecord,
    PracticalEventScore,
    ScoreStatistics,
    ScoringBasis,
    StudentAcademicScore,
    SubjectConversionTable,
    UniversityScoreConfig,
    highest_map_from_rows,
)
from .rules import get_event_method, guess_inquiry_track
from .silgi_calculator import compute_practical_score, lookup_score
from .suneung_calculator import compute_academic_score, resolve_practical_total, resolve_total
from .summary import combine_scores, summarize_totals

__all__ = [
    'ScoringError',
    'InvalidFormulaError',
    'MissingConfigurationError',
    'evaluate_expression',
    'evaluate_formula',
    'CalculationResult',
    'CombinedScore',
    'EventMethod',
    'EventScoreRow',
    'EventScoreTable',
    'Gender',
    'HighestStandardScoreMap',
    'InquiryScore',
    'InquiryTrack',
    'MaxScoreMethod',
    'OutOfRangePolicy',
    'PracticalCalculationResult',
    'PracticalEventRecord',
    'PracticalEventScore',
    'ScoreStatistics',
    'ScoringBasis',
    'StudentAcademicScore',
    'SubjectConversionTable',
    'UniversityScoreConfig',
    'highest_map_from_rows',
    'get_event_method',
    'guess_inquiry_track',
    'compute_practical_score',
    'lookup_score',
    'compute_academic_score',
    'resolve_practical_total',
    'resolve_total',
    'combine_scores',
    'summarize_totals',
]
