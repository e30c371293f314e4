"""
정시 수능 환산 점수 계산기
- 대학별 반영비율(UniversityScoreConfig) + 학생 수능 성적 → 과목별 점수와 총점
- 국/수/영/탐: (반영값 / 만점) × 총점 × 수능비율 × 과목비율
- 한국사: 등급 환산점수 × 비율 (만점으로 나누지 않음)
- 특수공식이 있으면 총점은 특수공식 결과로 대체

입력은 변경하지 않으며 같은 입력이면 계산로그까지 동일하다.
"""
from typing import Dict, List, NamedTuple, Optional, Tuple

from config import settings
from config.constants import DEFAULT_PERCENTILE_MAX, DEFAULT_STANDARD_MAX
from config.logging_config import setup_logger
from .formula import evaluate_formula, format_number
from .models import (
    CalculationResult,
    HighestStandardScoreMap,
    InquiryScore,
    MaxScoreMethod,
    ScoringBasis,
    StudentAcademicScore,
    SubjectConversionTable,
    UniversityScoreConfig,
)
from .rules import guess_inquiry_track

logger = setup_logger("scoring.suneung")


class MaxScores(NamedTuple):
    korean: float
    math: float
    english: float
    inquiry: float


def resolve_total(config: UniversityScoreConfig) -> float:
    """총점 (미설정/0 이하이면 기본 1000)"""
    total = config.total_score
    if total is not None and total > 0:
        return float(total)
    return float(settings.DEFAULT_TOTAL_SCORE)


def resolve_suneung_ratio(config: UniversityScoreConfig) -> float:
    """수능 반영비율 (%, 미설정이면 100)"""
    if config.suneung_ratio is None:
        return 100.0
    return float(config.suneung_ratio)


def resolve_practical_total(config: UniversityScoreConfig) -> float:
    """실기 환산 총점: 총점 × 실기비율, 실기비율이 없으면 기본값"""
    if config.practical_ratio and config.practical_ratio > 0:
        return resolve_total(config) * config.practical_ratio / 100
    return float(settings.DEFAULT_PRACTICAL_TOTAL)


def get_grade_points(grade: int, table: Dict[int, float]) -> float:
    """등급 → 환산점수 (표에 없으면 0)"""
    if not table:
        return 0.0
    return float(table.get(grade, 0))


def _ratio(value: float, max_value: float) -> float:
    if max_value <= 0:
        return 0.0
    return value / max_value


def resolve_max_scores(
    config: UniversityScoreConfig,
    student: StudentAcademicScore,
    highest_map: Optional[HighestStandardScoreMap] = None,
    log: Optional[List[str]] = None,
) -> MaxScores:
    """국/수/영/탐 만점 결정"""
    rule = config.rules.korean_math
    method = rule.max_score_method

    if method == MaxScoreMethod.FIXED_100:
        default_max = DEFAULT_PERCENTILE_MAX
    elif rule.basis == ScoringBasis.STANDARD or method == MaxScoreMethod.FIXED_200:
        default_max = DEFAULT_STANDARD_MAX
    else:
        default_max = DEFAULT_PERCENTILE_MAX

    kor_max = math_max = default_max

    # 당해 최고표점: 학생 선택과목명(없으면 국어/수학)으로 조회
    if method == MaxScoreMethod.HIGHEST_OF_YEAR:
        highest_map = highest_map or {}
        kor_key = student.korean.subject or "국어"
        math_key = student.math.subject or "수학"

        if highest_map.get(kor_key) is not None:
            kor_max = float(highest_map[kor_key])
        elif log is not None:
            log.append(f"[최대점수] 국어 최고표점 없음({kor_key}) → 기본값 {format_number(default_max)}")

        if highest_map.get(math_key) is not None:
            math_max = float(highest_map[math_key])
        elif log is not None:
            log.append(f"[최대점수] 수학 최고표점 없음({math_key}) → 기본값 {format_number(default_max)}")

    # 영어: 고정 만점 → 환산표 최고값 → 100
    eng_max = config.rules.english.fixed_max
    if eng_max is None:
        eng_max = max(config.english_scores.values()) if config.english_scores else DEFAULT_PERCENTILE_MAX

    return MaxScores(kor_max, math_max, float(eng_max), DEFAULT_PERCENTILE_MAX)


def inquiry_values(
    inquiry: List[InquiryScore],
    basis: ScoringBasis,
    conversion_table: Optional[SubjectConversionTable] = None,
) -> List[Tuple[str, float]]:
    """탐구 과목별 반영값 [(과목명, 값)]

    변환표준점수: 변환표(계열, 백분위) → 학생 변환표점 → 표준점수 순으로 사용
    """
    values = []
    for row in inquiry:
        subject = row.subject or "탐구"

        if basis == ScoringBasis.PERCENTILE:
            value = row.percentile or 0
        elif basis == ScoringBasis.STANDARD:
            value = row.std or 0
        else:
            value = None
            if conversion_table is not None:
                track = row.track or guess_inquiry_track(row.subject)
                value = conversion_table.lookup(track, row.percentile or 0)
            if value is None:
                logger.debug(f"변환표 값 없음: {subject} → 표준점수 사용")
                value = row.converted_std if row.converted_std is not None else (row.std or 0)

        values.append((subject, float(value)))
    return values


def calc_inquiry_representative(
    values: List[Tuple[str, float]],
    count: int,
) -> Tuple[float, List[Tuple[str, float]]]:
    """탐구 대표값: 상위 N개 평균 (N 최소 1, 동점은 입력 순서 유지)"""
    if not values:
        return 0.0, []

    n = max(1, count)
    ranked = sorted(values, key=lambda item: item[1], reverse=True)
    picked = ranked[:n]
    rep = sum(value for _, value in picked) / len(picked)
    return rep, picked


def compute_academic_score(
    config: UniversityScoreConfig,
    student: StudentAcademicScore,
    highest_map: Optional[HighestStandardScoreMap] = None,
    conversion_table: Optional[SubjectConversionTable] = None,
) -> CalculationResult:
    """
    수능 환산 점수 계산

    Args:
        config: 대학 반영비율 설정
        student: 학생 수능 성적
        highest_map: 과목명 → 당해 최고 표준점수 (highest_of_year 방식에서만 사용)
        conversion_table: 탐구 변환표준점수표 (변환표준점수 방식에서만 사용)

    Returns:
        CalculationResult (모든 점수 소수 둘째 자리 반올림, round 기준)

    Raises:
        InvalidFormulaError: 특수공식에 허용되지 않은 토큰이 있는 경우
    """
    log: List[str] = []
    total = resolve_total(config)
    suneung_pct = resolve_suneung_ratio(config)
    scale = total * suneung_pct / 100

    log.append(f"[기본정보] 총점: {format_number(total)}, 수능비율: {format_number(suneung_pct)}%")

    maxes = resolve_max_scores(config, student, highest_map, log)
    log.append(
        f"[최대점수] 국어: {format_number(maxes.korean)}, 수학: {format_number(maxes.math)}, "
        f"영어: {format_number(maxes.english)}, 탐구: {format_number(maxes.inquiry)}"
    )

    km_basis = config.rules.korean_math.basis
    km_label = ScoringBasis.STANDARD.value if km_basis == ScoringBasis.STANDARD else ScoringBasis.PERCENTILE.value
    inq_basis = config.rules.inquiry.basis
    inq_count = config.rules.inquiry.count or settings.DEFAULT_INQUIRY_COUNT

    # 1. 국어
    if km_basis == ScoringBasis.STANDARD:
        kor_raw = student.korean.std or 0
    else:
        kor_raw = student.korean.percentile or 0
    korean_score = _ratio(kor_raw, maxes.korean) * scale * config.korean_weight / 100
    log.append(
        f"[국어] {km_label}: {format_number(kor_raw)}, 비율: {format_number(config.korean_weight)}%, "
        f"점수: {korean_score:.2f}"
    )

    # 2. 수학
    if km_basis == ScoringBasis.STANDARD:
        math_raw = student.math.std or 0
    else:
        math_raw = student.math.percentile or 0
    math_score = _ratio(math_raw, maxes.math) * scale * config.math_weight / 100
    log.append(
        f"[수학] {km_label}: {format_number(math_raw)}, 비율: {format_number(config.math_weight)}%, "
        f"점수: {math_score:.2f}"
    )

    # 3. 영어 (등급 → 환산점수 → 비율)
    eng_grade = student.english.grade
    eng_raw = get_grade_points(eng_grade, config.english_scores)
    english_score = _ratio(eng_raw, maxes.english) * scale * config.english_weight / 100
    log.append(
        f"[영어] 등급: {eng_grade}, 환산: {format_number(eng_raw)}, "
        f"비율: {format_number(config.english_weight)}%, 점수: {english_score:.2f}"
    )

    # 4. 탐구 (상위 N개 평균)
    values = inquiry_values(student.inquiry, inq_basis, conversion_table)
    inq_raw, picked = calc_inquiry_representative(values, inq_count)
    inquiry_score = _ratio(inq_raw, maxes.inquiry) * scale * config.inquiry_weight / 100
    if picked:
        picked_text = ", ".join(f"{subject} {value:.2f}" for subject, value in picked)
    else:
        picked_text = "응시 과목 없음"
    log.append(
        f"[탐구] {inq_basis.value}: {inq_raw:.2f} (상위 {max(1, inq_count)}과목: {picked_text}), "
        f"비율: {format_number(config.inquiry_weight)}%, 점수: {inquiry_score:.2f}"
    )

    # 5. 한국사 (만점 나눗셈 없이 가산)
    hist_grade = student.history.grade
    hist_raw = get_grade_points(hist_grade, config.history_scores)
    history_score = hist_raw * config.history_weight / 100
    log.append(
        f"[한국사] 등급: {hist_grade}, 환산: {format_number(hist_raw)}, "
        f"비율: {format_number(config.history_weight)}%, 점수: {history_score:.2f}"
    )

    suneung_score = korean_score + math_score + english_score + inquiry_score + history_score
    formula_applied = False

    if config.override_formula:
        context = build_formula_context(
            config, student, maxes, total, suneung_pct,
            raws=(kor_raw, math_raw, eng_raw, inq_raw, hist_raw),
            scores=(korean_score, math_score, english_score, inquiry_score, history_score),
            values=values,
        )
        suneung_score = evaluate_formula(config.override_formula, context, log)
        formula_applied = True
        log.append(f"[특수공식] {config.override_formula} = {suneung_score:.2f}")

    log.append(f"[최종] 수능점수: {suneung_score:.2f}, 총점: {suneung_score:.2f}")

    return CalculationResult(
        total=round(suneung_score, 2),
        suneung_score=round(suneung_score, 2),
        korean_score=round(korean_score, 2),
        math_score=round(math_score, 2),
        english_score=round(english_score, 2),
        inquiry_score=round(inquiry_score, 2),
        history_score=round(history_score, 2),
        calculation_log=log,
        formula_applied=formula_applied,
    )


def build_formula_context(
    config: UniversityScoreConfig,
    student: StudentAcademicScore,
    maxes: MaxScores,
    total: float,
    suneung_pct: float,
    raws: Tuple[float, float, float, float, float],
    scores: Tuple[float, float, float, float, float],
    values: List[Tuple[str, float]],
) -> Dict[str, float]:
    """
    특수공식 자리표시자 값

    total, suneung, {kor,math,eng,inq,hist}_{raw,weight,score},
    {kor,math,eng,inq}_max, kor_std, kor_pct, math_std, math_pct,
    eng_grade, hist_grade, inq_count, inq1~inqN (과목별 반영값, 입력 순서)
    """
    prefixes = ("kor", "math", "eng", "inq", "hist")
    weights = (
        config.korean_weight, config.math_weight, config.english_weight,
        config.inquiry_weight, config.history_weight,
    )

    context: Dict[str, float] = {
        "total": total,
        "suneung": suneung_pct,
        "kor_max": maxes.korean,
        "math_max": maxes.math,
        "eng_max": maxes.english,
        "inq_max": maxes.inquiry,
        "kor_std": student.korean.std or 0,
        "kor_pct": student.korean.percentile or 0,
        "math_std": student.math.std or 0,
        "math_pct": student.math.percentile or 0,
        "eng_grade": student.english.grade,
        "hist_grade": student.history.grade,
        "inq_count": len(values),
    }
    for prefix, raw, weight, score in zip(prefixes, raws, weights, scores):
        context[f"{prefix}_raw"] = raw
        context[f"{prefix}_weight"] = weight
        context[f"{prefix}_score"] = score
    for index, (_, value) in enumerate(values, start=1):
        context[f"inq{index}"] = value

    return context
