"""
상수 정의
"""

# 탐구 계열
TRACK_SOCIAL = "사탐"
TRACK_SCIENCE = "과탐"

# 사탐 과목 키워드 (정식명 + 약칭). 일치하지 않으면 과탐으로 본다.
SOCIAL_INQUIRY_KEYWORDS = [
    "생활과윤리", "윤리와사상", "한국지리", "세계지리",
    "동아시아사", "세계사", "경제", "정치와법", "사회문화",
    "생윤", "윤사", "한지", "세지", "동사", "세사", "사문",
]

# 실기 종목: 기록이 낮을수록 좋은 종목 키워드 (소문자 비교)
LOWER_IS_BETTER_KEYWORDS = ["m", "run", "왕복", "초", "벽", "지그", "z", "달리기"]

# 위 키워드와 겹쳐도 항상 높을수록 좋은 종목
HIGHER_IS_BETTER_OVERRIDES = ["던지기", "멀리뛰기"]

# 학생 기록이 이 값이면 배점표 최하점 처리
FORCE_MIN_SCORE_LABELS = ["F", "G", "미응시", "파울", "실격"]

# 최하점 탐색 시 제외하는 배점표 기록 라벨
MIN_SCORE_IGNORED_LABELS = ["F", "G", "미응시", "파울", "실격", "P", "PASS"]

# 범위형 기록 한정어 → 비교 연산
RANGE_QUALIFIERS = {
    "이상": ">=",
    "이하": "<=",
    "초과": ">",
    "미만": "<",
}

# 등급 범위
BEST_GRADE = 1
WORST_GRADE = 9

# 기본 만점
DEFAULT_PERCENTILE_MAX = 100.0
DEFAULT_STANDARD_MAX = 200.0
