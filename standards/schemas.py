"""
체력검정 기준표 스키마 정의

- 학교급/성별/종목/등급 Enum
- CSV 원본 행(wide record) Pydantic 모델
- 종목별 밴드(StandardRow, Band) 불변 데이터 클래스
- 검증 결과 모델
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ValidationSeverity(str, Enum):
    """검증 오류 심각도"""
    CRITICAL = "critical"   # 컴파일 불가
    HIGH = "high"           # 컴파일 가능, 결과 신뢰 불가
    MEDIUM = "medium"       # 컴파일 가능, 경고 표시
    LOW = "low"             # 로그만
    INFO = "info"           # 정보성


class ValidationError(BaseModel):
    """검증 오류"""
    error_type: str = Field(..., description="오류 유형")
    severity: ValidationSeverity = Field(..., description="심각도")
    message: str = Field(..., description="오류 메시지")
    field: Optional[str] = Field(None, description="관련 필드")
    value: Optional[Any] = Field(None, description="문제가 된 값")
    row_index: Optional[int] = Field(None, description="원본 행 번호 (0부터)")
    suggestion: Optional[str] = Field(None, description="해결 제안")


class ValidationResult(BaseModel):
    """검증 결과"""
    is_valid: bool = Field(default=True, description="최종 유효성")
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationError] = Field(default_factory=list)
    pass_rate: float = Field(default=1.0, description="통과율 (0-1)")
    validated_at: datetime = Field(default_factory=datetime.now)

    @property
    def has_critical_errors(self) -> bool:
        return any(e.severity in [ValidationSeverity.CRITICAL, ValidationSeverity.HIGH] for e in self.errors)

    @property
    def can_compile(self) -> bool:
        """컴파일 가능 여부"""
        return not any(e.severity == ValidationSeverity.CRITICAL for e in self.errors)


# ==================== 학교급/성별/종목/등급 Enum ====================

class Level(str, Enum):
    """학교급"""
    PRIMARY = "Primary"
    SECONDARY = "Secondary"

    @classmethod
    def from_string(cls, value: str) -> "Level":
        """문자열에서 학교급 추출 (알 수 없으면 ValueError)"""
        v = str(value or "").strip().lower()
        if v in ("primary", "pri", "p"):
            return cls.PRIMARY
        if v in ("secondary", "sec", "s"):
            return cls.SECONDARY
        raise ValueError(f"알 수 없는 학교급: {value!r}")


class Sex(str, Enum):
    """성별"""
    MALE = "Male"
    FEMALE = "Female"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Sex"]:
        """m/male/boy, f/female/girl (대소문자 무시). 그 외 None"""
        if not value:
            return None
        v = str(value).strip().lower()
        if v in ("m", "male", "boy"):
            return cls.MALE
        if v in ("f", "female", "girl"):
            return cls.FEMALE
        return None

    @classmethod
    def from_string(cls, value: str) -> "Sex":
        sex = cls.parse(value)
        if sex is None:
            raise ValueError(f"알 수 없는 성별: {value!r}")
        return sex


class Polarity(str, Enum):
    """기록 방향성"""
    HIGHER_IS_BETTER = "higher"   # 횟수/거리/유연성
    LOWER_IS_BETTER = "lower"     # 시간 기록


class Station(str, Enum):
    """측정 종목"""
    SITUPS = "situps"
    BROAD_JUMP = "broad_jump"
    SIT_AND_REACH = "sit_and_reach"
    PULLUPS = "pullups"
    SHUTTLE_RUN = "shuttle_run"
    RUN = "run"

    @property
    def polarity(self) -> Polarity:
        return STATION_POLARITY[self]

    @property
    def lower_is_better(self) -> bool:
        return STATION_POLARITY[self] == Polarity.LOWER_IS_BETTER

    @property
    def is_discrete(self) -> bool:
        """정수 횟수 종목 (dense 배열로 컴파일)"""
        return self in DISCRETE_STATIONS

    @property
    def is_timed(self) -> bool:
        """M:SS 표기 대상 종목"""
        return self == Station.RUN

    @classmethod
    def from_string(cls, value: str) -> "Station":
        v = str(value or "").strip().lower()
        if v in STATION_ALIASES:
            return STATION_ALIASES[v]
        raise ValueError(f"알 수 없는 종목: {value!r}")


STATION_POLARITY = {
    Station.SITUPS: Polarity.HIGHER_IS_BETTER,
    Station.BROAD_JUMP: Polarity.HIGHER_IS_BETTER,
    Station.SIT_AND_REACH: Polarity.HIGHER_IS_BETTER,
    Station.PULLUPS: Polarity.HIGHER_IS_BETTER,
    Station.SHUTTLE_RUN: Polarity.LOWER_IS_BETTER,
    Station.RUN: Polarity.LOWER_IS_BETTER,
}

DISCRETE_STATIONS = frozenset({Station.SITUPS, Station.PULLUPS})

# 화면 표시 순서 = 평가 순서
ALL_STATIONS = (
    Station.SITUPS,
    Station.BROAD_JUMP,
    Station.SIT_AND_REACH,
    Station.PULLUPS,
    Station.SHUTTLE_RUN,
    Station.RUN,
)

# 달리기 제외 5종목 (잠정 등급용)
NON_RUN_STATIONS = ALL_STATIONS[:5]

STATION_ALIASES = {
    "situps": Station.SITUPS,
    "sit_ups": Station.SITUPS,
    "broad_jump": Station.BROAD_JUMP,
    "broad_jump_cm": Station.BROAD_JUMP,
    "sbj": Station.BROAD_JUMP,
    "sit_and_reach": Station.SIT_AND_REACH,
    "sit_and_reach_cm": Station.SIT_AND_REACH,
    "sitreach": Station.SIT_AND_REACH,
    "pullups": Station.PULLUPS,
    "pull_ups": Station.PULLUPS,
    "shuttle_run": Station.SHUTTLE_RUN,
    "shuttle_s": Station.SHUTTLE_RUN,
    "shuttle": Station.SHUTTLE_RUN,
    "run": Station.RUN,
    "run_2400": Station.RUN,
}


class Grade(str, Enum):
    """등급 (A > B > C > D > E)"""
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"

    @property
    def rank(self) -> int:
        return GRADE_RANKS[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Grade"]:
        if not value:
            return None
        v = str(value).strip().upper()
        try:
            return cls(v)
        except ValueError:
            return None


GRADE_RANKS = {Grade.A: 5, Grade.B: 4, Grade.C: 3, Grade.D: 2, Grade.E: 1}


def grade_rank(grade: Optional[Grade]) -> int:
    """등급 순위 (없으면 0)"""
    if grade is None:
        return 0
    return GRADE_RANKS[grade]


# ==================== 원본 기준표 행 ====================

class StandardRecord(BaseModel):
    """
    기준표 CSV 한 행 (모든 종목이 한 행에 들어있는 wide 형식)

    숫자/시간 칸은 문자열 그대로 보관하고, 종목별 행으로 펼칠 때 변환한다.
    빈 칸은 열린 경계(None)로 취급.
    """
    level: str = Field(..., min_length=1, description="학교급 (Primary/Secondary)")
    sex: str = Field(..., min_length=1, description="성별")
    age_group: str = Field(..., min_length=1, description="연령 그룹 (예: '12', '20-24')")
    performance_band: Optional[str] = Field(None, description="밴드명")
    performance_grade: str = Field(..., min_length=1, description="등급 A-E")
    points: str = Field(..., min_length=1, description="점수")

    situps_min: Optional[str] = None
    situps_max: Optional[str] = None
    sbj_min_cm: Optional[str] = None
    sbj_max_cm: Optional[str] = None
    sitreach_min_cm: Optional[str] = None
    sitreach_max_cm: Optional[str] = None
    pullups_min: Optional[str] = None
    pullups_max: Optional[str] = None
    shuttle_min_s: Optional[str] = None
    shuttle_max_s: Optional[str] = None
    run_km: Optional[str] = None
    run_min: Optional[str] = None
    run_max: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def stringify_cells(cls, v):
        """JSON 등에서 숫자로 들어온 칸도 문자열로 통일"""
        if v is None or isinstance(v, str):
            return v
        return str(v)


# 종목별 (최소, 최대) 컬럼명
RECORD_BOUND_COLUMNS = {
    Station.SITUPS: ("situps_min", "situps_max"),
    Station.BROAD_JUMP: ("sbj_min_cm", "sbj_max_cm"),
    Station.SIT_AND_REACH: ("sitreach_min_cm", "sitreach_max_cm"),
    Station.PULLUPS: ("pullups_min", "pullups_max"),
    Station.SHUTTLE_RUN: ("shuttle_min_s", "shuttle_max_s"),
    Station.RUN: ("run_min", "run_max"),
}


# ==================== 종목별 밴드 ====================

@dataclass(frozen=True)
class StandardRow:
    """하나의 성적 밴드 (level, sex, 연령 범위, 종목 단위)"""
    level: Level
    sex: Sex
    age_min: int
    age_max: int
    station: Station
    grade: Grade
    points: int
    band_min: Optional[float]
    band_max: Optional[float]
    run_km: Optional[float] = None
    band_name: Optional[str] = None


@dataclass(frozen=True)
class Band:
    """컴파일된 테이블 안의 밴드 (그룹 키 없이 값 범위와 점수만)"""
    grade: Grade
    points: int
    min: Optional[float]
    max: Optional[float]
    polarity: Polarity
    run_km: Optional[float] = None
    name: Optional[str] = None

    @classmethod
    def from_row(cls, row: StandardRow) -> "Band":
        return cls(
            grade=row.grade,
            points=row.points,
            min=row.band_min,
            max=row.band_max,
            polarity=row.station.polarity,
            run_km=row.run_km,
            name=row.band_name,
        )

    def reaches(self, value: float) -> bool:
        """값이 이 밴드의 진입 기준에 도달했는지

        높을수록 좋은 종목은 min 이상 (min이 비면 모든 값),
        낮을수록 좋은 종목은 target(더 엄격한 경계) 이하.
        점수 높은 밴드부터 검사하면 인접 밴드 사이의 소수 값도 빈틈없이 판정된다.
        """
        if value is None:
            return False
        if self.min is None and self.max is None:
            return False
        if self.polarity == Polarity.HIGHER_IS_BETTER:
            return self.min is None or value >= self.min
        return value <= self.target

    @property
    def target(self) -> Optional[float]:
        """이 밴드에 처음 진입하는 원시 기록

        낮을수록 좋은 종목은 더 엄격한 경계(max, 없으면 min),
        높을수록 좋은 종목은 min.
        """
        if self.polarity == Polarity.LOWER_IS_BETTER:
            return self.max if self.max is not None else self.min
        return self.min
