"""
정시 실기 환산 점수 계산기
- 학생 종목별 기록을 대학 실기 배점표와 매칭해 종목별 배점을 구하고
- (획득 배점 합 / 만점 합) × 실기 총점으로 환산

배점표 매칭 우선순위:
1. 문자 기록(F/미응시 등 → 최하점, P 등 → 그대로 일치)
2. 범위 기록 ("200 이상", "≤ 9.5")
3. 숫자 기록 (기준 내림차순 첫 충족 행)
4. 매칭 실패 → 0점 또는 최하점 (OutOfRangePolicy)
"""
import re
from typing import List, Optional, Sequence, Tuple, Union

from config import settings
from config.constants import (
    FORCE_MIN_SCORE_LABELS,
    MIN_SCORE_IGNORED_LABELS,
    RANGE_QUALIFIERS,
)
from config.logging_config import setup_logger
from .formula import format_number
from .models import (
    EventMethod,
    EventScoreRow,
    EventScoreTable,
    Gender,
    OutOfRangePolicy,
    PracticalCalculationResult,
    PracticalEventRecord,
    PracticalEventScore,
)
from .rules import get_event_method

logger = setup_logger("scoring.silgi")

# "200 이상" / "9.5초 미만"
SUFFIX_RANGE_PATTERN = re.compile(r"([0-9]*\.?[0-9]+)\s*[^0-9\s]*\s*(이상|이하|초과|미만)")
# "≥ 200" / ">= 200" / "< 9.5"
PREFIX_RANGE_PATTERN = re.compile(r"^(≥|≤|>=|<=|>|<)\s*([0-9]*\.?[0-9]+)")

SYMBOL_OPERATORS = {"≥": ">=", "≤": "<=", ">=": ">=", "<=": "<=", ">": ">", "<": "<"}

NO_SCORE_TABLE_MESSAGE = "실기 배점표가 없습니다."


def _to_number(value: Union[float, str, None]) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_range(text: str) -> Optional[Tuple[str, float]]:
    """범위 기록 → (비교 연산, 기준값), 범위 기록이 아니면 None"""
    text = text.strip()
    match = PREFIX_RANGE_PATTERN.match(text)
    if match:
        return SYMBOL_OPERATORS[match.group(1)], float(match.group(2))
    match = SUFFIX_RANGE_PATTERN.search(text)
    if match:
        return RANGE_QUALIFIERS[match.group(2)], float(match.group(1))
    return None


def _compare(value: float, op: str, limit: float) -> bool:
    if op == ">=":
        return value >= limit
    if op == "<=":
        return value <= limit
    if op == ">":
        return value > limit
    return value < limit


def find_max_score(rows: Sequence[EventScoreRow]) -> float:
    """종목 최고 배점 (만점), 행이 없으면 0"""
    return max((row.points for row in rows), default=0.0)


def find_min_score(rows: Sequence[EventScoreRow]) -> float:
    """F/P 등 문자 라벨을 제외한 최하 배점, 없으면 0"""
    scores = [
        row.points for row in rows
        if row.record_text.upper() not in MIN_SCORE_IGNORED_LABELS
    ]
    return min(scores, default=0.0)


def lookup_score(
    student_record: Union[float, str, None],
    method: EventMethod,
    rows: Sequence[EventScoreRow],
    out_of_range: OutOfRangePolicy = OutOfRangePolicy.ZERO,
) -> Tuple[float, str]:
    """
    학생 기록으로 배점 찾기

    Returns:
        (배점, 매칭 방식 설명)
    """
    if not rows:
        return 0.0, "배점표 없음"

    record_text = "" if student_record is None else str(student_record).strip().upper()
    if isinstance(student_record, float) and student_record.is_integer():
        record_text = str(int(student_record))

    if record_text in FORCE_MIN_SCORE_LABELS:
        return find_min_score(rows), "최하점 처리"

    student_value = _to_number(student_record)

    numeric_rows: List[Tuple[float, float]] = []
    range_rows: List[Tuple[str, float, float]] = []
    label_rows = {}

    for row in rows:
        threshold = _to_number(row.record)
        if threshold is not None:
            numeric_rows.append((threshold, row.points))
            continue
        parsed = parse_range(row.record_text)
        if parsed is not None:
            range_rows.append((parsed[0], parsed[1], row.points))
        else:
            label_rows.setdefault(row.record_text.upper(), row.points)

    # 1순위: 문자 일치
    if record_text in label_rows:
        return label_rows[record_text], "문자 일치"

    if student_value is not None:
        # 2순위: 범위 (표 순서대로 첫 일치)
        for op, limit, points in range_rows:
            if _compare(student_value, op, limit):
                return points, "범위 일치"

        # 3순위: 숫자 기준
        if numeric_rows:
            # 기준값 내림차순으로 첫 충족 행
            ordered = sorted(numeric_rows, key=lambda r: r[0], reverse=True)
            for threshold, points in ordered:
                if method == EventMethod.LOWER_IS_BETTER:
                    if student_value <= threshold:
                        return points, "기준 충족"
                elif student_value >= threshold:
                    return points, "기준 충족"
            return min(points for _, points in numeric_rows), "범위 밖 최하점"

    if out_of_range == OutOfRangePolicy.MINIMUM:
        return find_min_score(rows), "매칭 실패 최하점"
    return 0.0, "매칭 실패"


def build_practical_score_list(
    records: Sequence[PracticalEventRecord],
    table: EventScoreTable,
    gender: Optional[Gender] = None,
    out_of_range: OutOfRangePolicy = OutOfRangePolicy.ZERO,
    log: Optional[List[str]] = None,
) -> List[PracticalEventScore]:
    """학생 실기기록을 배점표와 매칭해 종목별 점수 목록으로 변환"""
    out = []
    for rec in records:
        if not rec.event:
            continue

        rows = table.rows_for(rec.event, gender)
        raw_record = "" if rec.record is None else rec.record

        if not rows:
            logger.debug(f"배점표에 없는 종목: {rec.event}")
            out.append(PracticalEventScore(event=rec.event, record=raw_record, score=0, max_score=0))
            if log is not None:
                log.append(f"[{rec.event}] 기록: {_record_text(raw_record)}, 배점표에 없는 종목 → 0/0")
            continue

        method = get_event_method(rec.event)
        score, matched = lookup_score(rec.record, method, rows, out_of_range)
        max_score = find_max_score(rows)

        out.append(PracticalEventScore(event=rec.event, record=raw_record, score=score, max_score=max_score))
        if log is not None:
            log.append(
                f"[{rec.event}] 기록: {_record_text(raw_record)}, "
                f"배점: {format_number(score)}/{format_number(max_score)} ({matched})"
            )
    return out


def _record_text(record: Union[float, str]) -> str:
    if isinstance(record, float):
        return format_number(record)
    return str(record)


def compute_practical_score(
    records: Sequence[Union[PracticalEventRecord, dict]],
    table: Union[EventScoreTable, Sequence[Union[EventScoreRow, dict]], None],
    gender: Union[Gender, str, None] = None,
    target_total: Optional[float] = None,
    out_of_range: OutOfRangePolicy = OutOfRangePolicy.ZERO,
) -> PracticalCalculationResult:
    """
    실기 총점 계산

    Args:
        records: 학생 종목별 기록
        table: 대학 실기 배점표 (EventScoreTable 또는 행 목록)
        gender: 학생 성별 (M/F, 없으면 성별 필터 없음)
        target_total: 실기 환산 총점 (없으면 기본 100)
        out_of_range: 매칭 실패 시 처리

    배점표가 비어 있어도 예외 없이 총점 0과 안내 로그를 반환한다.
    """
    if not isinstance(table, EventScoreTable):
        table = EventScoreTable.model_validate(table)
    records = [
        rec if isinstance(rec, PracticalEventRecord) else PracticalEventRecord.model_validate(rec)
        for rec in records or []
    ]
    if not isinstance(gender, Gender):
        try:
            gender = Gender(gender) if gender else None
        except ValueError:
            gender = None
    if not target_total or target_total <= 0:
        target_total = float(settings.DEFAULT_PRACTICAL_TOTAL)

    if table.is_empty():
        return PracticalCalculationResult(
            total=0,
            events=[],
            calculation_log=[NO_SCORE_TABLE_MESSAGE],
            target_total=target_total,
            success=True,
            has_score_table=False,
        )

    log: List[str] = []
    scores = build_practical_score_list(records, table, gender, out_of_range, log)

    awarded = sum(item.score for item in scores)
    max_possible = sum(item.max_score for item in scores)

    # 실기 반영 총점으로 환산
    total = (awarded / max_possible) * target_total if max_possible > 0 else 0.0

    log.append(
        f"[실기 총점] {format_number(awarded)}/{format_number(max_possible)} "
        f"→ 환산: {total:.2f}/{format_number(target_total)}"
    )

    return PracticalCalculationResult(
        total=round(total, 2),
        events=scores,
        calculation_log=log,
        target_total=target_total,
        success=True,
        has_score_table=True,
    )
