"""
환경 변수 설정
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # 수능 환산
    DEFAULT_TOTAL_SCORE: float = 1000  # 총점 미설정/0 이하일 때
    DEFAULT_INQUIRY_COUNT: int = 2     # 탐구 반영 과목 수 기본값

    # 실기 환산
    DEFAULT_PRACTICAL_TOTAL: float = 100

    # Logging
    LOG_LEVEL: str = "INFO"

    # Server
    BACKEND_PORT: int = 8000
    FRONTEND_URL: str = "http://localhost:3000"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # .env의 미정의 변수 무시


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# 전역 설정 객체
settings = get_settings()
