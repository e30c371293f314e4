"""
키워드 기반 추론 규칙
- 탐구 과목명 → 사탐/과탐
- 실기 종목명 → 기록 방식 (낮을수록/높을수록 좋음)

키워드 목록은 config.constants에 모여 있다.
"""
from typing import Optional

from config.constants import (
    SOCIAL_INQUIRY_KEYWORDS,
    LOWER_IS_BETTER_KEYWORDS,
    HIGHER_IS_BETTER_OVERRIDES,
)
from .models import EventMethod, InquiryTrack


def guess_inquiry_track(subject: Optional[str]) -> InquiryTrack:
    """탐구 과목명으로 사탐/과탐 추측 (일치 키워드 없으면 과탐)"""
    subject = subject or ""
    for keyword in SOCIAL_INQUIRY_KEYWORDS:
        if keyword in subject:
            return InquiryTrack.SOCIAL
    return InquiryTrack.SCIENCE


def get_event_method(event_name: Optional[str]) -> EventMethod:
    """
    종목명으로 기록 방식 판단

    던지기/멀리뛰기는 시간 키워드와 겹쳐도 항상 높을수록 좋음.
    """
    event_name = event_name or ""

    for keyword in HIGHER_IS_BETTER_OVERRIDES:
        if keyword in event_name:
            return EventMethod.HIGHER_IS_BETTER

    lowered = event_name.lower()
    if any(keyword in lowered for keyword in LOWER_IS_BETTER_KEYWORDS):
        return EventMethod.LOWER_IS_BETTER

    return EventMethod.HIGHER_IS_BETTER
