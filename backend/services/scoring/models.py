"""
점수 계산 입출력 모델

DB 행(한글 컬럼명)과 API JSON 양쪽을 그대로 받을 수 있도록 한글 alias를 두고,
문자열로 저장된 JSON 설정(score_config, english_scores, history_scores)은
여기서 한 번만 파싱/정규화한다. 계산기는 정규화된 값만 다룬다.
"""
import json
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from config.constants import BEST_GRADE, WORST_GRADE, TRACK_SOCIAL, TRACK_SCIENCE


# ============================================================
# 열거형
# ============================================================
class ScoringBasis(str, Enum):
    """반영 점수 유형"""
    PERCENTILE = "백분위"
    STANDARD = "표준점수"
    CONVERTED = "변환표준점수"

    @classmethod
    def _missing_(cls, value):
        aliases = {
            "percentile": cls.PERCENTILE,
            "standard": cls.STANDARD,
            "standardized": cls.STANDARD,
            "std": cls.STANDARD,
            "converted": cls.CONVERTED,
            "converted_std": cls.CONVERTED,
        }
        if isinstance(value, str):
            return aliases.get(value.strip().lower())
        return None


class MaxScoreMethod(str, Enum):
    """국어/수학 만점 결정 방식"""
    FIXED_100 = "fixed_100"
    FIXED_200 = "fixed_200"
    HIGHEST_OF_YEAR = "highest_of_year"


class InquiryTrack(str, Enum):
    """탐구 계열"""
    SOCIAL = TRACK_SOCIAL
    SCIENCE = TRACK_SCIENCE

    @classmethod
    def _missing_(cls, value):
        aliases = {"social": cls.SOCIAL, "science": cls.SCIENCE}
        if isinstance(value, str):
            return aliases.get(value.strip().lower())
        return None


class Gender(str, Enum):
    MALE = "M"
    FEMALE = "F"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().upper():
                    return member
        return None


class EventMethod(str, Enum):
    """실기 종목 기록 방식"""
    LOWER_IS_BETTER = "lower_is_better"
    HIGHER_IS_BETTER = "higher_is_better"


class OutOfRangePolicy(str, Enum):
    """배점표 매칭 실패 시 처리"""
    ZERO = "0점"
    MINIMUM = "최하점"


# ============================================================
# 정규화 헬퍼
# ============================================================
def _decode_json(value: Any, fallback: Any) -> Any:
    """문자열 JSON은 파싱, 실패/None은 fallback"""
    if value is None:
        return fallback
    if isinstance(value, str):
        if not value.strip():
            return fallback
        try:
            return json.loads(value)
        except ValueError:
            return fallback
    return value


def _grade_table(value: Any) -> Dict[int, float]:
    """{"1": 100, "2": 95, ...} → {1: 100.0, 2: 95.0, ...} (1~9등급만 유지)"""
    raw = _decode_json(value, {})
    if not isinstance(raw, dict):
        return {}

    table = {}
    for key, points in raw.items():
        try:
            grade = int(str(key).strip())
            points = float(points)
        except (TypeError, ValueError):
            continue
        if BEST_GRADE <= grade <= WORST_GRADE:
            table[grade] = points
    return dict(sorted(table.items()))


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _coerce_enum(enum_cls, value: Any) -> Any:
    """빈 값/알 수 없는 값은 None"""
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


# ============================================================
# 대학 반영비율 설정
# ============================================================
class KoreanMathRule(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    basis: ScoringBasis = Field(ScoringBasis.PERCENTILE, alias="type")
    max_score_method: Optional[MaxScoreMethod] = None

    @field_validator("basis", mode="before")
    @classmethod
    def _default_basis(cls, v):
        return _coerce_enum(ScoringBasis, v) or ScoringBasis.PERCENTILE

    @field_validator("max_score_method", mode="before")
    @classmethod
    def _known_method(cls, v):
        return _coerce_enum(MaxScoreMethod, v)


class InquiryRule(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    basis: ScoringBasis = Field(ScoringBasis.PERCENTILE, alias="type")
    count: Optional[int] = None

    @field_validator("basis", mode="before")
    @classmethod
    def _default_basis(cls, v):
        return _coerce_enum(ScoringBasis, v) or ScoringBasis.PERCENTILE

    @field_validator("count", mode="before")
    @classmethod
    def _count(cls, v):
        v = _blank_to_none(v)
        return v or None


class EnglishRule(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: Optional[str] = None
    max_score: Optional[float] = None

    @property
    def fixed_max(self) -> Optional[float]:
        """type이 fixed_max_score이고 만점이 양수일 때만 고정 만점"""
        if self.type == "fixed_max_score" and self.max_score:
            return float(self.max_score)
        return None


class ScoreRules(BaseModel):
    """score_config 컬럼 (과목군별 반영 방식)"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    korean_math: KoreanMathRule = Field(default_factory=KoreanMathRule)
    inquiry: InquiryRule = Field(default_factory=InquiryRule)
    english: EnglishRule = Field(default_factory=EnglishRule)

    @field_validator("korean_math", "inquiry", "english", mode="before")
    @classmethod
    def _empty_section(cls, v):
        return {} if v is None else v


class UniversityScoreConfig(BaseModel):
    """대학/학년도별 정시 반영비율 (정시반영비율 행 1개)

    과목 비율은 서로 독립적인 값이며 합이 100일 필요가 없다.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    university_id: Optional[int] = Field(None, alias="U_ID")
    year: Optional[int] = Field(None, alias="학년도")

    total_score: Optional[float] = Field(None, alias="총점")
    suneung_ratio: Optional[float] = Field(None, alias="수능")
    school_record_ratio: Optional[float] = Field(None, alias="내신")
    practical_ratio: Optional[float] = Field(None, alias="실기")

    korean_weight: float = Field(0, ge=0, le=100, alias="국어")
    math_weight: float = Field(0, ge=0, le=100, alias="수학")
    english_weight: float = Field(0, ge=0, le=100, alias="영어")
    inquiry_weight: float = Field(0, ge=0, le=100, alias="탐구")
    history_weight: float = Field(0, ge=0, le=100, alias="한국사")

    rules: ScoreRules = Field(default_factory=ScoreRules, alias="score_config")
    english_scores: Dict[int, float] = Field(default_factory=dict)
    history_scores: Dict[int, float] = Field(default_factory=dict)
    override_formula: Optional[str] = Field(None, alias="특수공식")

    @field_validator(
        "korean_weight", "math_weight", "english_weight", "inquiry_weight", "history_weight",
        mode="before",
    )
    @classmethod
    def _weight(cls, v):
        v = _blank_to_none(v)
        return 0 if v is None else v

    @field_validator("total_score", "suneung_ratio", "school_record_ratio", "practical_ratio", mode="before")
    @classmethod
    def _optional_number(cls, v):
        return _blank_to_none(v)

    @field_validator("rules", mode="before")
    @classmethod
    def _rules(cls, v):
        decoded = _decode_json(v, {})
        return decoded if isinstance(decoded, (dict, ScoreRules)) else {}

    @field_validator("english_scores", "history_scores", mode="before")
    @classmethod
    def _grade_tables(cls, v):
        return _grade_table(v)

    @field_validator("override_formula", mode="before")
    @classmethod
    def _formula(cls, v):
        v = _blank_to_none(v)
        return v.strip() if isinstance(v, str) else v


class SubjectConversionTable(BaseModel):
    """탐구 변환표준점수표: (계열, 백분위) → 변환표준점수"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    social: Dict[int, float] = Field(default_factory=dict, alias=TRACK_SOCIAL)
    science: Dict[int, float] = Field(default_factory=dict, alias=TRACK_SCIENCE)

    @classmethod
    def from_rows(cls, rows: Iterable[Dict[str, Any]]) -> "SubjectConversionTable":
        """정시탐구변환표준 행 목록({계열, 백분위, 변환표준점수})으로 생성"""
        tables = {TRACK_SOCIAL: {}, TRACK_SCIENCE: {}}
        for row in rows:
            track = _coerce_enum(InquiryTrack, row.get("계열"))
            if track is None:
                continue
            tables[track.value][int(row["백분위"])] = float(row["변환표준점수"])
        return cls.model_validate(tables)

    def lookup(self, track: InquiryTrack, percentile: float) -> Optional[float]:
        table = self.social if track == InquiryTrack.SOCIAL else self.science
        return table.get(int(round(percentile)))

    def is_empty(self) -> bool:
        return not self.social and not self.science


# 학년도 과목명 → 당해 최고 표준점수
HighestStandardScoreMap = Dict[str, float]


def highest_map_from_rows(rows: Iterable[Dict[str, Any]]) -> HighestStandardScoreMap:
    """정시최고표점 행 목록({과목, 최고표점})으로 생성"""
    return {row["과목"]: float(row["최고표점"]) for row in rows if row.get("과목")}


# ============================================================
# 학생 수능 성적
# ============================================================
class SubjectScore(BaseModel):
    """국어/수학: 표준점수, 백분위, 선택과목명"""
    model_config = ConfigDict(frozen=True)

    std: Optional[float] = None
    percentile: Optional[float] = None
    subject: Optional[str] = None

    @field_validator("std", "percentile", "subject", mode="before")
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)


class GradeScore(BaseModel):
    """영어/한국사: 등급 (1~9, 없거나 범위 밖이면 9)"""
    model_config = ConfigDict(frozen=True)

    grade: int = WORST_GRADE

    @field_validator("grade", mode="before")
    @classmethod
    def _grade(cls, v):
        try:
            grade = int(float(v))
        except (TypeError, ValueError):
            return WORST_GRADE
        if BEST_GRADE <= grade <= WORST_GRADE:
            return grade
        return WORST_GRADE


class InquiryScore(BaseModel):
    """탐구 선택과목 1개"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    subject: Optional[str] = None
    std: Optional[float] = None
    percentile: Optional[float] = None
    converted_std: Optional[float] = None
    track: Optional[InquiryTrack] = Field(None, alias="group")

    @field_validator("subject", "std", "percentile", "converted_std", mode="before")
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)

    @field_validator("track", mode="before")
    @classmethod
    def _track(cls, v):
        return _coerce_enum(InquiryTrack, v)


class StudentAcademicScore(BaseModel):
    """학생 1회 응시 수능 성적 (계산기는 변경하지 않음)"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    korean: SubjectScore = Field(default_factory=SubjectScore, alias="국어")
    math: SubjectScore = Field(default_factory=SubjectScore, alias="수학")
    english: GradeScore = Field(default_factory=GradeScore, alias="영어")
    inquiry: List[InquiryScore] = Field(default_factory=list, alias="탐구")
    history: GradeScore = Field(default_factory=GradeScore, alias="한국사")

    @field_validator("korean", "math", "english", "history", mode="before")
    @classmethod
    def _missing_subject(cls, v):
        return {} if v is None else v

    @field_validator("inquiry", mode="before")
    @classmethod
    def _missing_inquiry(cls, v):
        if v is None:
            return []
        return [row for row in v if row is not None]


class CalculationResult(BaseModel):
    """수능 환산 결과 (항상 새로 생성, 엔진은 저장하지 않음)"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total: float = Field(alias="총점")
    suneung_score: float = Field(alias="수능점수")
    korean_score: float = Field(alias="국어점수")
    math_score: float = Field(alias="수학점수")
    english_score: float = Field(alias="영어점수")
    inquiry_score: float = Field(alias="탐구점수")
    history_score: float = Field(alias="한국사점수")
    calculation_log: List[str] = Field(alias="계산로그")
    formula_applied: bool = Field(False, alias="특수공식적용")

    def subject_scores(self) -> Dict[str, float]:
        return {
            "국어": self.korean_score,
            "수학": self.math_score,
            "영어": self.english_score,
            "탐구": self.inquiry_score,
            "한국사": self.history_score,
        }


# ============================================================
# 실기
# ============================================================
class PracticalEventRecord(BaseModel):
    """학생 실기 기록 1건 (숫자 또는 P/F 같은 문자)"""
    model_config = ConfigDict(frozen=True)

    event: Optional[str] = Field(None, validation_alias=AliasChoices("event", "종목명"))
    record: Union[float, str, None] = Field(None, validation_alias=AliasChoices("record", "value", "기록"))


class EventScoreRow(BaseModel):
    """실기 배점표 행 1개 (정시실기배점)"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    event: str = Field(alias="종목명")
    gender: Optional[Gender] = Field(None, alias="성별")
    record: Union[float, str] = Field(alias="기록")
    points: float = Field(0, alias="배점")

    @field_validator("gender", mode="before")
    @classmethod
    def _gender(cls, v):
        return _coerce_enum(Gender, v)

    @field_validator("points", mode="before")
    @classmethod
    def _points(cls, v):
        v = _blank_to_none(v)
        return 0 if v is None else v

    @property
    def record_text(self) -> str:
        if isinstance(self.record, float) and self.record.is_integer():
            return str(int(self.record))
        return str(self.record).strip()


class EventScoreTable(BaseModel):
    """대학 실기 배점표 (행 순서 유지)"""
    model_config = ConfigDict(frozen=True)

    rows: List[EventScoreRow] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _wrap_rows(cls, data):
        if data is None:
            return {"rows": []}
        if isinstance(data, (list, tuple)):
            return {"rows": list(data)}
        return data

    def is_empty(self) -> bool:
        return not self.rows

    def events(self) -> List[str]:
        """종목명 목록 (첫 등장 순)"""
        return list(dict.fromkeys(row.event for row in self.rows))

    def rows_for(self, event: str, gender: Optional[Gender] = None) -> List[EventScoreRow]:
        """종목 + 성별 필터 (성별 미지정 행은 모두 포함)"""
        return [
            row for row in self.rows
            if row.event == event
            and not (gender and row.gender and row.gender != gender)
        ]


class PracticalEventScore(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    event: str
    record: Union[float, str]
    score: float
    max_score: float = Field(alias="maxScore")


class PracticalCalculationResult(BaseModel):
    """실기 환산 결과"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total: float = Field(alias="총점")
    events: List[PracticalEventScore] = Field(default_factory=list, alias="종목별점수")
    calculation_log: List[str] = Field(alias="계산로그")
    target_total: float = Field(alias="실기총점")
    success: bool = True
    has_score_table: bool = True


# ============================================================
# 합산/통계
# ============================================================
class CombinedScore(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    academic: float = Field(alias="수능점수")
    practical: float = Field(alias="실기점수")
    total: float = Field(alias="총점")


class ScoreStatistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_count: int
    avg_score: float
    max_score: float
    min_score: float
