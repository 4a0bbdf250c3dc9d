"""
기준표 컴파일 및 조회

- (학교급, 성별, 나이, 종목, 달리기 거리) 단위로 밴드 그룹화
  연령 범위는 정수 나이별로 모두 펼쳐서 조회 시 범위 탐색이 없다.
- 횟수 종목(윗몸일으키기, 턱걸이): 0..reps_domain_max dense 배열
- 오래달리기: 초 단위 dense 배열 (최고 구간보다 빠른 기록은 최고 점수로 채움)
- 그 외 종목: 점수 내림차순 밴드 목록 스캔

컴파일된 테이블은 불변이며, 여러 요청이 잠금 없이 공유할 수 있다.
"""
import math
from types import MappingProxyType
from typing import List, Dict, Optional, Tuple, Iterable, Mapping
from dataclasses import dataclass
from collections import defaultdict
from loguru import logger

from .schemas import (
    StandardRow,
    Band,
    Level,
    Sex,
    Station,
    Grade,
    grade_rank,
)
from .timeparse import round_half_up


DEFAULT_REPS_DOMAIN_MAX = 60

GroupKey = Tuple[Level, Sex, int, Station, Optional[float]]


@dataclass(frozen=True)
class StationResult:
    """종목 판정 결과"""
    grade: Grade
    points: int

    def to_dict(self) -> Dict:
        return {"grade": self.grade.value, "points": self.points}


def _band_order(band: Band) -> Tuple[int, int]:
    # 점수 우선, 동점이면 더 좋은 등급
    return band.points, grade_rank(band.grade)


def _better(candidate: Band, current: Optional[Band]) -> bool:
    return current is None or _band_order(candidate) > _band_order(current)


def _normalize_km(run_km: Optional[float]) -> Optional[float]:
    if run_km is None:
        return None
    return round(float(run_km), 1)


@dataclass(frozen=True)
class StationGroup:
    """한 그룹(학교급/성별/나이/종목/거리)의 밴드 집합"""
    bands: Tuple[Band, ...]
    dense: Optional[Tuple[Optional[Band], ...]] = None

    @property
    def max_points(self) -> int:
        return max((b.points for b in self.bands), default=0)

    def find(self, value: float) -> Optional[Band]:
        """밴드 스캔: 점수 높은 밴드부터 진입 기준에 도달한 첫 밴드"""
        for band in self.bands:
            if band.reaches(value):
                return band
        return None


def build_reps_array(bands: Iterable[Band], domain_max: int) -> Tuple[Optional[Band], ...]:
    """
    횟수 종목 dense 배열

    각 칸 i에는 기준 횟수(min)가 i 이하인 밴드 중 최고 점수 밴드가 들어간다.
    min이 비어있는 밴드는 0회부터 해당.
    """
    bands = list(bands)
    cells: List[Optional[Band]] = []
    for reps in range(domain_max + 1):
        best = None
        for band in bands:
            threshold = band.min if band.min is not None else 0
            if reps >= threshold and _better(band, best):
                best = band
        cells.append(best)
    return tuple(cells)


def _run_interval(band: Band) -> Optional[Tuple[int, int]]:
    """달리기 밴드가 덮는 초 구간 [lo, hi]

    경계 하나만 있는 밴드는 '그 시간 이하' 이므로 0초부터.
    """
    if band.min is None and band.max is None:
        return None
    if band.min is not None and band.max is not None:
        lo, hi = band.min, band.max
    else:
        lo, hi = 0, band.max if band.max is not None else band.min
    return max(0, int(math.ceil(lo))), int(math.floor(hi))


def build_run_array(bands: Iterable[Band]) -> Tuple[Optional[Band], ...]:
    """
    오래달리기 dense 배열 (인덱스 = 초)

    - 배열 길이는 그룹 내 최대 경계 초 + 1
    - 각 초에는 그 초를 포함하는 밴드 중 최고 점수 밴드
    - 가장 빠른 구간의 하한보다 빠른 초는 그룹 최고 점수 밴드로 채운다
      (표에 있는 최고 구간보다 빨리 달려도 최고 점수, '밴드 없음'이 아님)
    """
    intervals = []
    for band in bands:
        span = _run_interval(band)
        if span is not None:
            intervals.append((band, span))
    if not intervals:
        return ()

    max_sec = max(hi for _, (_, hi) in intervals)
    cells: List[Optional[Band]] = [None] * (max_sec + 1)

    for band, (lo, hi) in intervals:
        for sec in range(lo, hi + 1):
            if _better(band, cells[sec]):
                cells[sec] = band

    top = None
    for band, _ in intervals:
        if _better(band, top):
            top = band
    lowest_min = min(lo for _, (lo, _) in intervals)
    for sec in range(0, min(lowest_min, len(cells))):
        if _better(top, cells[sec]):
            cells[sec] = top

    return tuple(cells)


@dataclass(frozen=True, eq=False)
class StandardsTable:
    """컴파일된 기준표 (불변)"""
    groups: Mapping[GroupKey, StationGroup]
    reps_domain_max: int = DEFAULT_REPS_DOMAIN_MAX
    source_rows: int = 0

    # ---------- 그룹 조회 ----------

    def run_distances(self, level: Level, sex: Sex, age: int) -> List[float]:
        """해당 나이에 컴파일된 달리기 거리 목록"""
        return sorted(
            key[4] for key in self.groups
            if key[:4] == (level, sex, age, Station.RUN) and key[4] is not None
        )

    def ages_for(self, level: Level, sex: Sex, station: Station) -> List[int]:
        return sorted({key[2] for key in self.groups if key[0] == level and key[1] == sex and key[3] == station})

    def _key(self, level: Level, sex: Sex, age: int, station: Station, run_km: Optional[float]) -> Optional[GroupKey]:
        if station != Station.RUN:
            return (level, sex, age, station, None)
        km = _normalize_km(run_km)
        if km is None:
            # 거리 미지정: 해당 나이에 거리가 하나뿐일 때만 허용
            distances = self.run_distances(level, sex, age)
            if len(distances) != 1:
                logger.debug(f"달리기 거리 미지정, 후보 {distances}: {level.value}/{sex.value}/{age}")
                return None
            km = distances[0]
        return (level, sex, age, station, km)

    def group(
        self,
        level: Level,
        sex: Sex,
        age: int,
        station: Station,
        run_km: Optional[float] = None,
    ) -> Optional[StationGroup]:
        if age is None:
            return None
        age = int(age)
        key = self._key(level, sex, age, station, run_km)
        grp = self.groups.get(key) if key is not None else None
        if grp is None and station == Station.RUN:
            # 거리 미지정 달리기 행은 모든 거리에 적용
            grp = self.groups.get((level, sex, age, station, None))
        return grp

    def bands_for(
        self,
        level: Level,
        sex: Sex,
        age: int,
        station: Station,
        run_km: Optional[float] = None,
    ) -> Tuple[Band, ...]:
        """점수 내림차순 밴드 목록 (기준 사다리 표시용)"""
        grp = self.group(level, sex, age, station, run_km)
        return grp.bands if grp else ()

    def max_points(
        self,
        level: Level,
        sex: Sex,
        age: int,
        station: Station,
        run_km: Optional[float] = None,
    ) -> int:
        grp = self.group(level, sex, age, station, run_km)
        return grp.max_points if grp else 0

    # ---------- 판정 ----------

    def lookup_band(
        self,
        level: Level,
        sex: Sex,
        age: int,
        station: Station,
        raw_value: Optional[float],
        run_km: Optional[float] = None,
    ) -> Optional[Band]:
        """원시 기록이 속하는 밴드 (없으면 None)"""
        if raw_value is None:
            return None
        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(value):
            return None

        grp = self.group(level, sex, age, station, run_km)
        if grp is None:
            return None

        if grp.dense is not None:
            if not grp.dense or value < 0:
                return None
            if station == Station.RUN:
                idx = round_half_up(value)
            else:
                idx = int(math.floor(value))
            # 표 범위를 넘는 값은 마지막 칸으로 고정 (외삽 없음)
            idx = min(idx, len(grp.dense) - 1)
            return grp.dense[idx]

        return grp.find(value)

    def lookup(
        self,
        level: Level,
        sex: Sex,
        age: int,
        station: Station,
        raw_value: Optional[float],
        run_km: Optional[float] = None,
    ) -> Optional[StationResult]:
        band = self.lookup_band(level, sex, age, station, raw_value, run_km)
        if band is None:
            return None
        return StationResult(grade=band.grade, points=band.points)

    def next_band(
        self,
        level: Level,
        sex: Sex,
        age: int,
        station: Station,
        current_points: int,
        run_km: Optional[float] = None,
    ) -> Optional[Band]:
        """현재 점수보다 높은 점수 중 가장 낮은 점수의 밴드"""
        grp = self.group(level, sex, age, station, run_km)
        if grp is None:
            return None

        candidates = [
            b for b in grp.bands
            if b.points > (current_points or 0) and b.target is not None
        ]
        if not candidates:
            return None

        next_points = min(b.points for b in candidates)
        tied = [b for b in candidates if b.points == next_points]
        if len(tied) > 1:
            logger.warning(
                f"동일 점수 밴드 {len(tied)}개 ({station.value}, {next_points}점): "
                f"{level.value}/{sex.value}/{age} - 기준표 확인 필요"
            )
        return max(tied, key=lambda b: grade_rank(b.grade))


def compile_table(
    rows: Iterable[StandardRow],
    reps_domain_max: int = DEFAULT_REPS_DOMAIN_MAX,
) -> StandardsTable:
    """
    StandardRow 목록 → StandardsTable

    밴드 극성 자체는 재검증하지 않는다 (사전 검증은 StandardsValidator).
    """
    grouped: Dict[GroupKey, List[Band]] = defaultdict(list)
    row_count = 0

    for row in rows:
        row_count += 1
        km = _normalize_km(row.run_km) if row.station == Station.RUN else None
        band = Band.from_row(row)
        for age in range(row.age_min, row.age_max + 1):
            grouped[(row.level, row.sex, age, row.station, km)].append(band)

    groups: Dict[GroupKey, StationGroup] = {}
    dense_cells = 0
    for key, bands in grouped.items():
        station = key[3]
        ordered = tuple(sorted(bands, key=_band_order, reverse=True))
        dense = None
        if station.is_discrete:
            dense = build_reps_array(ordered, reps_domain_max)
        elif station == Station.RUN:
            dense = build_run_array(ordered)
        if dense is not None:
            dense_cells += len(dense)
        groups[key] = StationGroup(bands=ordered, dense=dense)

    logger.info(
        f"기준표 컴파일 완료: 행 {row_count}개, 그룹 {len(groups)}개, dense 칸 {dense_cells}개"
    )
    return StandardsTable(
        groups=MappingProxyType(groups),
        reps_domain_max=reps_domain_max,
        source_rows=row_count,
    )
