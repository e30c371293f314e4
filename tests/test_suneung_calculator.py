"""Tests for the academic (수능) score calculator."""

import pytest

from services.scoring import (
    InvalidFormulaError,
    StudentAcademicScore,
    SubjectConversionTable,
    UniversityScoreConfig,
    compute_academic_score,
)
from services.scoring.suneung_calculator import (
    calc_inquiry_representative,
    inquiry_values,
    resolve_max_scores,
    resolve_practical_total,
    resolve_total,
)
from services.scoring.models import ScoringBasis


def _config(**overrides) -> UniversityScoreConfig:
    data = {"총점": 1000, "국어": 0, "수학": 0, "영어": 0, "탐구": 0, "한국사": 0}
    data.update(overrides)
    return UniversityScoreConfig.model_validate(data)


class TestComputeAcademicScore:
    """End-to-end breakdown for a percentile-based config."""

    def test_breakdown(self, basic_config, basic_student):
        """Should weight each subject by (value / max) * total * ratio."""
        result = compute_academic_score(basic_config, basic_student)

        assert result.korean_score == 270.0
        assert result.math_score == 240.0
        assert result.english_score == 190.0
        assert result.inquiry_score == 185.0
        assert result.history_score == 10.0
        assert result.total == 895.0
        assert result.suneung_score == 895.0
        assert result.formula_applied is False

    def test_log_has_one_line_per_subject(self, basic_config, basic_student):
        """Should emit header lines, one line per subject and a summary."""
        result = compute_academic_score(basic_config, basic_student)
        tags = [line.split("]")[0] + "]" for line in result.calculation_log]

        assert tags == ["[기본정보]", "[최대점수]", "[국어]", "[수학]", "[영어]", "[탐구]", "[한국사]", "[최종]"]
        assert result.calculation_log[2] == "[국어] 백분위: 90, 비율: 30%, 점수: 270.00"
        assert result.calculation_log[-1] == "[최종] 수능점수: 895.00, 총점: 895.00"

    def test_deterministic(self, basic_config, basic_student):
        """Same inputs should give identical results including the log."""
        first = compute_academic_score(basic_config, basic_student)
        second = compute_academic_score(basic_config, basic_student)

        assert first == second
        assert first.calculation_log == second.calculation_log

    def test_inputs_not_mutated(self, basic_config, basic_student):
        """Calculator should not modify config or student score."""
        before = (basic_config.model_dump(), basic_student.model_dump())
        compute_academic_score(basic_config, basic_student)
        assert (basic_config.model_dump(), basic_student.model_dump()) == before

    def test_all_weights_zero(self, basic_student):
        """Zero weights everywhere should always give a zero total."""
        config = _config(english_scores={"2": 95}, history_scores={"1": 10})
        result = compute_academic_score(config, basic_student)

        assert result.total == 0
        assert all(score == 0 for score in result.subject_scores().values())

    def test_contributions_non_negative(self, basic_config):
        """Empty student should degrade to defaults, never negative or raising."""
        result = compute_academic_score(basic_config, StudentAcademicScore())

        assert all(score >= 0 for score in result.subject_scores().values())
        assert result.korean_score == 0
        assert "[영어] 등급: 9, 환산: 0" in result.calculation_log[4]
        assert "응시 과목 없음" in result.calculation_log[5]

    def test_serializes_with_korean_keys(self, basic_config, basic_student):
        """Result should serialize with the Korean JSON field names."""
        data = compute_academic_score(basic_config, basic_student).model_dump(by_alias=True)

        assert data["총점"] == 895.0
        assert data["국어점수"] == 270.0
        assert isinstance(data["계산로그"], list)

    def test_suneung_ratio_scales_normalized_subjects(self, basic_student):
        """수능 비율 should scale ratio subjects but not history."""
        config = _config(수능=50, 국어=100, 한국사=100, history_scores={"1": 10})
        result = compute_academic_score(config, basic_student)

        assert result.korean_score == 450.0
        assert result.history_score == 10.0


class TestHistory:
    """History is added as points * weight without max normalization."""

    def test_not_divided_by_max(self, basic_student):
        """Should be independent of the total score scaling."""
        small = _config(총점=500, 한국사=50, history_scores={"1": 20, "2": 18})
        large = _config(총점=1000, 한국사=50, history_scores={"1": 20, "2": 18})

        assert compute_academic_score(small, basic_student).history_score == 10.0
        assert compute_academic_score(large, basic_student).history_score == 10.0

    def test_missing_grade_defaults_to_worst(self):
        """Missing grade should be treated as 9."""
        config = _config(한국사=100, history_scores={"1": 10, "9": 2})
        result = compute_academic_score(config, StudentAcademicScore())
        assert result.history_score == 2.0


class TestMaxScores:
    """Max score resolution for each subject."""

    def test_standard_basis_defaults_to_200(self):
        """Standard-score basis without a method should use 200."""
        config = _config(국어=50, score_config={"korean_math": {"type": "표준점수"}})
        student = StudentAcademicScore.model_validate({"국어": {"std": 140}})

        result = compute_academic_score(config, student)
        assert result.korean_score == 350.0

    def test_fixed_100(self):
        """fixed_100 should divide standard scores by 100."""
        config = _config(score_config={"korean_math": {"type": "표준점수", "max_score_method": "fixed_100"}})
        maxes = resolve_max_scores(config, StudentAcademicScore())
        assert (maxes.korean, maxes.math) == (100, 100)

    def test_fixed_200_with_percentile(self):
        """fixed_200 should apply even with percentile basis."""
        config = _config(score_config={"korean_math": {"max_score_method": "fixed_200"}})
        maxes = resolve_max_scores(config, StudentAcademicScore())
        assert maxes.korean == 200

    def test_highest_of_year(self):
        """Should look up the student's subject name and fall back when absent."""
        config = _config(
            국어=50,
            수학=50,
            score_config={"korean_math": {"type": "표준점수", "max_score_method": "highest_of_year"}},
        )
        student = StudentAcademicScore.model_validate({
            "국어": {"std": 140, "subject": "화법과작문"},
            "수학": {"std": 150, "subject": "미적분"},
        })

        result = compute_academic_score(config, student, highest_map={"화법과작문": 140, "수학": 145})

        assert result.korean_score == 500.0
        assert result.math_score == 375.0
        assert any("수학 최고표점 없음(미적분)" in line for line in result.calculation_log)

    def test_highest_of_year_default_keys(self):
        """Without a subject name the plain subject key should be used."""
        config = _config(score_config={"korean_math": {"type": "표준점수", "max_score_method": "highest_of_year"}})
        maxes = resolve_max_scores(config, StudentAcademicScore(), {"국어": 139, "수학": 147})
        assert (maxes.korean, maxes.math) == (139, 147)

    def test_english_fixed_max(self):
        """fixed_max_score should override the table maximum."""
        config = _config(
            영어=10,
            english_scores={"1": 100, "2": 90},
            score_config={"english": {"type": "fixed_max_score", "max_score": 200}},
        )
        student = StudentAcademicScore.model_validate({"영어": {"grade": 1}})

        assert compute_academic_score(config, student).english_score == 50.0

    def test_english_max_from_table(self):
        """Without a fixed max the largest table value should be used."""
        config = _config(english_scores={"1": 80, "2": 75})
        assert resolve_max_scores(config, StudentAcademicScore()).english == 80

    def test_inquiry_max_is_100(self, basic_config):
        assert resolve_max_scores(basic_config, StudentAcademicScore()).inquiry == 100


class TestInquirySelection:
    """Top-N selection of inquiry electives."""

    def test_top_two_average(self):
        """Percentiles [90, 95, 80] with N=2 should average 95 and 90."""
        rep, picked = calc_inquiry_representative([("a", 90), ("b", 95), ("c", 80)], 2)

        assert rep == 92.5
        assert [subject for subject, _ in picked] == ["b", "a"]

    def test_minimum_one(self):
        """N below 1 should still pick one subject."""
        rep, picked = calc_inquiry_representative([("a", 90), ("b", 95)], 0)
        assert rep == 95
        assert len(picked) == 1

    def test_fewer_than_n(self):
        """Should average what is available."""
        rep, _ = calc_inquiry_representative([("a", 70)], 2)
        assert rep == 70

    def test_empty(self):
        assert calc_inquiry_representative([], 2) == (0.0, [])

    def test_count_from_config(self, basic_student):
        """inquiry.count=1 should use only the best elective."""
        config = _config(탐구=100, score_config={"inquiry": {"count": 1}})
        assert compute_academic_score(config, basic_student).inquiry_score == 950.0

    def test_standard_basis(self, basic_student):
        """Standard-score basis should rank by std."""
        values = inquiry_values(basic_student.inquiry, ScoringBasis.STANDARD)
        assert [v for _, v in values] == [65, 67, 60]


class TestConvertedInquiry:
    """Converted standard scores via the university conversion table."""

    @pytest.fixture
    def table(self) -> SubjectConversionTable:
        return SubjectConversionTable.model_validate({
            "사탐": {"95": 66.3, "90": 65.05},
            "과탐": {"98": 68.7},
        })

    def test_lookup_with_inferred_track(self, table):
        """Should infer the track and fall back to std when the table has no row."""
        config = _config(탐구=100, score_config={"inquiry": {"type": "변환표준점수", "count": 2}})
        student = StudentAcademicScore.model_validate({"탐구": [
            {"subject": "생활과윤리", "std": 60, "percentile": 95},
            {"subject": "물리학1", "std": 65, "percentile": 98},
            {"subject": "경제", "std": 55, "percentile": 50},
        ]})

        values = inquiry_values(student.inquiry, ScoringBasis.CONVERTED, table)
        assert values == [("생활과윤리", 66.3), ("물리학1", 68.7), ("경제", 55.0)]

        result = compute_academic_score(config, student, conversion_table=table)
        assert result.inquiry_score == 675.0

    def test_explicit_track_wins(self, table):
        """A supplied track should be used instead of keyword inference."""
        student = StudentAcademicScore.model_validate({"탐구": [
            {"subject": "경제", "std": 50, "percentile": 98, "group": "science"},
        ]})
        values = inquiry_values(student.inquiry, ScoringBasis.CONVERTED, table)
        assert values == [("경제", 68.7)]

    def test_without_table_uses_std(self):
        """No conversion table should use converted_std, then std."""
        student = StudentAcademicScore.model_validate({"탐구": [
            {"subject": "화학1", "std": 64, "percentile": 90, "converted_std": 66.5},
            {"subject": "지구과학1", "std": 62, "percentile": 85},
        ]})
        values = inquiry_values(student.inquiry, ScoringBasis.CONVERTED)
        assert values == [("화학1", 66.5), ("지구과학1", 62.0)]


class TestOverrideFormula:
    """특수공식 override."""

    def test_formula_replaces_total(self, basic_config, basic_student):
        """Total should come from the formula while subjects keep their breakdown."""
        config = basic_config.model_copy(update={"override_formula": "{kor_score} + {math_score} + 10"})
        result = compute_academic_score(config, basic_student)

        assert result.total == 520.0
        assert result.korean_score == 270.0
        assert result.formula_applied is True
        assert "[특수공식 변수] kor_score = 270" in result.calculation_log

    def test_formula_with_raw_values(self, basic_config, basic_student):
        """Raw values and maxima should be available as placeholders."""
        config = basic_config.model_copy(
            update={"override_formula": "({kor_raw} / {kor_max}) * {total} * 0.5 + {inq1} - {unknown}"}
        )
        result = compute_academic_score(config, basic_student)
        assert result.total == 540.0

    def test_zero_divisor_from_missing_data(self, basic_student):
        """An empty history table should not abort the formula."""
        config = _config(국어=50, 특수공식="{kor_score} + 10 / {hist_raw}")
        result = compute_academic_score(config, basic_student)

        assert result.total == 450.0
        assert result.formula_applied is True
        assert "[특수공식] 0으로 나누는 항 → 0 처리" in result.calculation_log

    @pytest.mark.parametrize("formula", ["{kor_raw}; import os", "kor_raw * 2", "__import__('os')"])
    def test_invalid_formula_raises(self, basic_config, basic_student, formula):
        """Disallowed tokens should abort the calculation."""
        config = basic_config.model_copy(update={"override_formula": formula})
        with pytest.raises(InvalidFormulaError):
            compute_academic_score(config, basic_student)


class TestResolvers:
    """Total and practical-total defaults."""

    @pytest.mark.parametrize("total", [None, 0, -10])
    def test_total_default(self, total):
        assert resolve_total(_config(총점=total)) == 1000

    def test_practical_total_from_ratio(self):
        assert resolve_practical_total(_config(총점=1000, 실기=30)) == 300

    def test_practical_total_default(self):
        assert resolve_practical_total(_config()) == 100
