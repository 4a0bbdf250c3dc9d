"""
기준표 검증

컴파일 전에 원본 기준표의 결함을 찾는다. 컴파일러는 겹치는 밴드가 있어도
최고 점수 밴드를 고르며 진행하므로, 이 검증은 호출자가 선택적으로 실행한다.

- 밴드 겹침 / 구간 공백
- 등급과 점수 순서 불일치, 동일 점수
- 연령 그룹 겹침
- 최소 > 최대 밴드
"""

from typing import List, Dict, Optional, Tuple, Iterable
from collections import defaultdict
from datetime import datetime
from loguru import logger

from .schemas import (
    StandardRow,
    Station,
    Polarity,
    ValidationResult,
    ValidationError,
    ValidationSeverity,
    grade_rank,
)


BandKey = Tuple[str, str, int, int, str, Optional[float]]
AgeKey = Tuple[str, str, str, Optional[float]]


def _group_key(row: StandardRow) -> BandKey:
    return (row.level.value, row.sex.value, row.age_min, row.age_max, row.station.value, row.run_km)


def _describe(key) -> str:
    return "/".join("-" if part is None else str(part) for part in key)


def _interval(row: StandardRow) -> Tuple[float, float]:
    """비교용 닫힌 구간 (열린 경계는 무한대)"""
    lo = row.band_min
    hi = row.band_max
    if row.station.polarity == Polarity.LOWER_IS_BETTER:
        if hi is None:
            # 'min 이하' 최우수 구간
            return float("-inf"), lo
        if lo is None:
            return float("-inf"), hi
        return lo, hi
    return (lo if lo is not None else float("-inf")), (hi if hi is not None else float("inf"))


class StandardsValidator:
    """
    기준표 구조 검증

    GAP_STEP: 이 값보다 큰 간격을 공백으로 본다. 횟수/cm 종목은 1 단위,
    셔틀런은 0.1초 단위로 기록하므로 종목별로 다르게 준다.
    """

    GAP_STEP = {
        Station.SITUPS: 1.0,
        Station.BROAD_JUMP: 1.0,
        Station.SIT_AND_REACH: 1.0,
        Station.PULLUPS: 1.0,
        Station.SHUTTLE_RUN: 0.1,
        Station.RUN: 1.0,
    }

    def validate(self, rows: Iterable[StandardRow]) -> ValidationResult:
        rows = list(rows)
        errors: List[ValidationError] = []
        warnings: List[ValidationError] = []

        for row in rows:
            if row.band_min is not None and row.band_max is not None and row.band_min > row.band_max:
                errors.append(ValidationError(
                    error_type="INVERTED_BAND",
                    severity=ValidationSeverity.HIGH,
                    message=f"최소값이 최대값보다 큽니다: {row.band_min} > {row.band_max}",
                    field=row.station.value,
                    value=f"{_describe(_group_key(row))} {row.grade.value}",
                    suggestion="경계값 순서를 확인하세요",
                ))

        groups: Dict[BandKey, List[StandardRow]] = defaultdict(list)
        for row in rows:
            groups[_group_key(row)].append(row)

        for key, members in groups.items():
            errors.extend(self._check_overlaps(key, members))
            warnings.extend(self._check_gaps(key, members))
            errors.extend(self._check_grade_points(key, members))
            warnings.extend(self._check_duplicate_points(key, members))

        errors.extend(self._check_age_groups(rows))

        total_groups = len(groups) or 1
        bad_groups = len({e.value for e in errors})
        result = ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            pass_rate=max(0.0, 1 - bad_groups / total_groups),
            validated_at=datetime.now(),
        )
        if errors:
            logger.warning(f"기준표 검증: 오류 {len(errors)}건, 경고 {len(warnings)}건")
        else:
            logger.info(f"기준표 검증 통과 (그룹 {len(groups)}개, 경고 {len(warnings)}건)")
        return result

    # ---------- 그룹 단위 검사 ----------

    def _check_overlaps(self, key: BandKey, members: List[StandardRow]) -> List[ValidationError]:
        errors = []
        spans = sorted(
            ((_interval(r), r) for r in members if r.band_min is not None or r.band_max is not None),
            key=lambda item: item[0],
        )
        for i in range(len(spans)):
            (lo_a, hi_a), row_a = spans[i]
            for j in range(i + 1, len(spans)):
                (lo_b, hi_b), row_b = spans[j]
                if lo_b > hi_a:
                    break
                errors.append(ValidationError(
                    error_type="BAND_OVERLAP",
                    severity=ValidationSeverity.HIGH,
                    message=f"밴드가 겹칩니다: {row_a.grade.value}({lo_a}~{hi_a}) / {row_b.grade.value}({lo_b}~{hi_b})",
                    field=row_a.station.value,
                    value=_describe(key),
                    suggestion="겹치는 값은 점수가 높은 밴드로 판정됩니다",
                ))
        return errors

    def _check_gaps(self, key: BandKey, members: List[StandardRow]) -> List[ValidationError]:
        warnings = []
        station = members[0].station
        step = self.GAP_STEP[station]
        spans = sorted(_interval(r) for r in members if r.band_min is not None or r.band_max is not None)
        for (lo_a, hi_a), (lo_b, hi_b) in zip(spans, spans[1:]):
            if lo_b - hi_a > step + 1e-9:
                warnings.append(ValidationError(
                    error_type="BAND_GAP",
                    severity=ValidationSeverity.MEDIUM,
                    message=f"밴드 사이 공백: {hi_a} ~ {lo_b}",
                    field=station.value,
                    value=_describe(key),
                    suggestion="공백 구간의 기록은 밴드 없음으로 판정됩니다",
                ))
        return warnings

    def _check_grade_points(self, key: BandKey, members: List[StandardRow]) -> List[ValidationError]:
        errors = []
        for a in members:
            for b in members:
                if grade_rank(a.grade) > grade_rank(b.grade) and a.points < b.points:
                    errors.append(ValidationError(
                        error_type="GRADE_POINTS_MISMATCH",
                        severity=ValidationSeverity.HIGH,
                        message=f"등급 {a.grade.value}({a.points}점)이 {b.grade.value}({b.points}점)보다 점수가 낮습니다",
                        field="points",
                        value=_describe(key),
                        suggestion="등급이 높을수록 점수가 같거나 높아야 합니다",
                    ))
        return errors

    def _check_duplicate_points(self, key: BandKey, members: List[StandardRow]) -> List[ValidationError]:
        warnings = []
        seen: Dict[int, StandardRow] = {}
        for row in members:
            if row.points in seen and seen[row.points].grade != row.grade:
                warnings.append(ValidationError(
                    error_type="DUPLICATE_POINTS",
                    severity=ValidationSeverity.MEDIUM,
                    message=f"{seen[row.points].grade.value}, {row.grade.value} 등급이 같은 점수({row.points}점)입니다",
                    field="points",
                    value=_describe(key),
                    suggestion="다음 목표 계산 시 모호할 수 있습니다",
                ))
            seen.setdefault(row.points, row)
        return warnings

    def _check_age_groups(self, rows: List[StandardRow]) -> List[ValidationError]:
        """같은 (학교급, 성별, 종목, 거리)에서 한 나이가 두 연령 그룹에 속하는지"""
        errors = []
        ranges: Dict[AgeKey, set] = defaultdict(set)
        for row in rows:
            ranges[(row.level.value, row.sex.value, row.station.value, row.run_km)].add((row.age_min, row.age_max))

        for key, spans in ranges.items():
            ordered = sorted(spans)
            for (lo_a, hi_a), (lo_b, hi_b) in zip(ordered, ordered[1:]):
                if lo_b <= hi_a:
                    errors.append(ValidationError(
                        error_type="AGE_GROUP_OVERLAP",
                        severity=ValidationSeverity.HIGH,
                        message=f"연령 그룹이 겹칩니다: {lo_a}-{hi_a} / {lo_b}-{hi_b}",
                        field="age_group",
                        value=_describe(key),
                        suggestion="정수 나이는 하나의 연령 그룹에만 속해야 합니다",
                    ))
        return errors


def validate_rows(rows: Iterable[StandardRow]) -> ValidationResult:
    """기준표 검증 단축 함수"""
    return StandardsValidator().validate(rows)
