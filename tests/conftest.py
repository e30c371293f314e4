"""Shared pytest fixtures for the scoring engine tests.

Provides:
- ``basic_config``: 1000점 백분위 반영 설정 (국30/수30/영20/탐20/한국사 가산)
- ``basic_student``: 백분위/등급이 모두 채워진 학생 성적
- ``silgi_table``: 100m(낮을수록) + 제자리멀리뛰기(높을수록) 배점표
"""

import pytest

from services.scoring import EventScoreTable, StudentAcademicScore, UniversityScoreConfig


@pytest.fixture
def basic_config() -> UniversityScoreConfig:
    return UniversityScoreConfig.model_validate({
        "U_ID": 101,
        "학년도": 2026,
        "총점": 1000,
        "국어": 30,
        "수학": 30,
        "영어": 20,
        "탐구": 20,
        "한국사": 100,
        "english_scores": '{"1": 100, "2": 95, "3": 90}',
        "history_scores": {"1": 10, "2": 9, "3": 8},
    })


@pytest.fixture
def basic_student() -> StudentAcademicScore:
    return StudentAcademicScore.model_validate({
        "국어": {"std": 131, "percentile": 90, "subject": "화법과작문"},
        "수학": {"std": 128, "percentile": 80, "subject": "미적분"},
        "영어": {"grade": 2},
        "탐구": [
            {"subject": "생활과윤리", "std": 65, "percentile": 90},
            {"subject": "사회문화", "std": 67, "percentile": 95},
            {"subject": "경제", "std": 60, "percentile": 80},
        ],
        "한국사": {"grade": 1},
    })


@pytest.fixture
def silgi_table() -> EventScoreTable:
    return EventScoreTable.model_validate([
        {"종목명": "100m", "기록": "10.0", "배점": 100},
        {"종목명": "100m", "기록": "11.0", "배점": 90},
        {"종목명": "100m", "기록": "12.0", "배점": 80},
        {"종목명": "제자리멀리뛰기", "기록": 250, "배점": 100},
        {"종목명": "제자리멀리뛰기", "기록": 230, "배점": 70},
        {"종목명": "제자리멀리뛰기", "기록": 210, "배점": 50},
    ])
