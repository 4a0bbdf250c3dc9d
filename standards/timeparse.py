"""
시간/연령/성별 변환 유틸리티

- "M:SS" / "MM:SS" ↔ 초
- 달리기 분(float) → 초, M:SS
- 기록 입력값(930, 9:30, 9-30) 관대한 파싱
- 연령 그룹 문자열 파싱, 검사일 기준 만 나이
"""
import math
import re
from datetime import date
from typing import Optional, Tuple, Union


MMSS_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")
RUN_INPUT_PATTERN = re.compile(r"^(\d{1,2})[:\- ]?(\d{2})$")
AGE_GROUP_PATTERN = re.compile(r"^(\d{1,2})\s*(?:-\s*(\d{1,2}))?$")


def parse_mmss(value: Optional[str]) -> Optional[int]:
    """'9:45' → 585. 빈 값이나 형식 오류는 None"""
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    m = MMSS_PATTERN.match(s)
    if not m:
        return None
    return int(m.group(1)) * 60 + int(m.group(2))


def round_half_up(value: float) -> int:
    """0.5는 올림 (내장 round()의 은행가 반올림과 다름)"""
    return int(math.floor(value + 0.5))


def is_blank(value) -> bool:
    return value is None or str(value).strip() == ""


def format_mmss(seconds: Optional[Union[int, float]]) -> Optional[str]:
    """585 → '9:45'"""
    if seconds is None:
        return None
    try:
        sec = float(seconds)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(sec) or sec < 0:
        return None
    total = round_half_up(sec)
    return f"{total // 60}:{total % 60:02d}"


def minutes_to_seconds(minutes: Optional[float]) -> Optional[int]:
    """달리기 기록(분, 소수) → 정수 초 (반올림)"""
    if minutes is None:
        return None
    try:
        m = float(minutes)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(m):
        return None
    return round_half_up(m * 60)


def format_run_minutes(minutes: Optional[float]) -> Optional[str]:
    """10.5 → '10:30'"""
    return format_mmss(minutes_to_seconds(minutes))


def parse_run_input(value: Optional[str]) -> Optional[int]:
    """
    현장 입력 기록 파싱

    - "930", "1330" (MSS/MMSS 숫자만)
    - "9:30", "9-30", "9 30"
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    if re.fullmatch(r"[0-9]{3,4}", s):
        return int(s[:-2]) * 60 + int(s[-2:])
    m = RUN_INPUT_PATTERN.match(s)
    if m:
        return int(m.group(1)) * 60 + int(m.group(2))
    return None


def parse_age_group(value: str) -> Optional[Tuple[int, int]]:
    """'12' → (12, 12), '20-24' → (20, 24). 형식 오류 None"""
    if value is None:
        return None
    m = AGE_GROUP_PATTERN.match(str(value).strip())
    if not m:
        return None
    lo = int(m.group(1))
    hi = int(m.group(2)) if m.group(2) else lo
    if hi < lo:
        return None
    return lo, hi


def age_at(birth_date: date, on_date: Optional[date] = None) -> int:
    """검사일 기준 만 나이 (생일 전이면 1살 적게)"""
    when = on_date or date.today()
    age = when.year - birth_date.year
    if (when.month, when.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age
