from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Union

from config.logging_config import setup_logger
from services.scoring import (
    EventScoreRow,
    MissingConfigurationError,
    OutOfRangePolicy,
    PracticalEventRecord,
    StudentAcademicScore,
    SubjectConversionTable,
    UniversityScoreConfig,
    combine_scores,
    compute_academic_score,
    compute_practical_score,
    resolve_practical_total,
    summarize_totals,
)

logger = setup_logger('calculator')

calculator_bp = APIRouter()


class SuneungRequest(BaseModel):
    uid: Optional[int] = None
    year: Optional[int] = None
    config: Optional[UniversityScoreConfig] = None
    student_score: StudentAcademicScore = Field(default_factory=StudentAcademicScore, alias='studentScore')
    highest_scores: Optional[Dict[str, float]] = Field(None, alias='highestScores')
    conversion_table: Optional[SubjectConversionTable] = Field(None, alias='conversionTable')

    model_config = {'populate_by_name': True}


class SilgiRequest(BaseModel):
    uid: Optional[int] = None
    score_table: List[EventScoreRow] = Field(default_factory=list, alias='scoreTable')
    records: List[PracticalEventRecord] = Field(default_factory=list, alias='studentRecords')
    gender: Optional[str] = None
    practical_total: Optional[float] = Field(None, alias='practicalTotal')
    config: Optional[UniversityScoreConfig] = None
    out_of_range: OutOfRangePolicy = Field(OutOfRangePolicy.ZERO, alias='outOfRange')

    model_config = {'populate_by_name': True}


class TotalRequest(BaseModel):
    academic_total: float = 0
    practical_total: float = 0


class StatsRequest(BaseModel):
    totals: List[Optional[float]] = Field(default_factory=list)


@calculator_bp.post('/suneung')
async def calculate_suneung(req: SuneungRequest):
    """수능 환산점수 계산 API"""
    if req.config is None:
        raise MissingConfigurationError(req.uid, req.year)

    # 변환표는 변환표준점수 방식에서만 의미가 있음
    conversion_table = req.conversion_table
    if conversion_table is not None and conversion_table.is_empty():
        conversion_table = None

    result = compute_academic_score(req.config, req.student_score, req.highest_scores, conversion_table)
    logger.info(f"수능 계산 완료 (U_ID={req.uid}): {result.total}")

    return {
        'success': True,
        'result': result.model_dump(by_alias=True),
    }


@calculator_bp.post('/silgi')
async def calculate_silgi(req: SilgiRequest):
    """실기 환산점수 계산 API"""
    # 실기 총점 (요청값 → 반영비율 → 기본값)
    target_total = req.practical_total
    if not target_total and req.config is not None:
        target_total = resolve_practical_total(req.config)

    result = compute_practical_score(
        req.records,
        req.score_table,
        gender=req.gender,
        target_total=target_total,
        out_of_range=req.out_of_range,
    )
    logger.info(f"실기 계산 완료 (U_ID={req.uid}): {result.total}/{result.target_total}")

    response = {
        'success': result.success,
        'result': result.model_dump(by_alias=True),
        'has_score_table': result.has_score_table,
    }
    if not result.has_score_table:
        response['message'] = result.calculation_log[0]
    return response


@calculator_bp.post('/total')
async def calculate_total(req: TotalRequest):
    """수능 + 실기 합산"""
    combined = combine_scores(req.academic_total, req.practical_total)
    return {'success': True, 'result': combined.model_dump(by_alias=True)}


@calculator_bp.post('/stats')
async def calculate_stats(req: StatsRequest):
    """지원자 총점 통계"""
    stats = summarize_totals(req.totals)
    return {'success': True, 'stats': stats.model_dump()}
