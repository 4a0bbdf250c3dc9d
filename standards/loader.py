"""
기준표 로더

CSV(wide 형식) → StandardRecord → 종목별 StandardRow

형식이 잘못된 칸(숫자 아님, 시간 형식 오류)은 해당 종목 밴드만 건너뛰고
LoadReport에 기록한다. 빌드를 중단하지 않는다.
"""
import csv
import math
from pathlib import Path
from typing import List, Dict, Any, Iterable, Optional, Tuple, Union
from dataclasses import dataclass, field
from pydantic import ValidationError as PydanticValidationError
from loguru import logger

from .schemas import (
    StandardRecord,
    StandardRow,
    Station,
    Level,
    Sex,
    Grade,
    ValidationError,
    ValidationSeverity,
    RECORD_BOUND_COLUMNS,
    ALL_STATIONS,
)
from .timeparse import parse_mmss, parse_age_group, is_blank


class MalformedCell(Exception):
    """숫자/시간 칸 변환 실패"""


@dataclass
class LoadReport:
    """로드 결과 요약"""
    records_read: int = 0
    rows_built: int = 0
    skipped: List[ValidationError] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def is_clean(self) -> bool:
        return not self.skipped

    def add(self, error: ValidationError):
        self.skipped.append(error)

    def summary(self) -> Dict[str, Any]:
        return {
            "records_read": self.records_read,
            "rows_built": self.rows_built,
            "skipped": self.skipped_count,
        }


def _to_number(value: Optional[str]) -> Optional[float]:
    """빈 칸 None, 숫자 아니면 MalformedCell"""
    if is_blank(value):
        return None
    try:
        n = float(str(value).strip())
    except ValueError:
        raise MalformedCell(value)
    if not math.isfinite(n):
        raise MalformedCell(value)
    return n


def _to_seconds(value: Optional[str]) -> Optional[float]:
    if is_blank(value):
        return None
    seconds = parse_mmss(value)
    if seconds is None:
        raise MalformedCell(value)
    return float(seconds)


def _bounds_for(record: StandardRecord, station: Station) -> Tuple[Optional[float], Optional[float]]:
    min_col, max_col = RECORD_BOUND_COLUMNS[station]
    convert = _to_seconds if station == Station.RUN else _to_number
    return convert(getattr(record, min_col)), convert(getattr(record, max_col))


def explode_record(
    record: StandardRecord,
    row_index: Optional[int] = None,
    report: Optional[LoadReport] = None,
) -> List[StandardRow]:
    """
    wide 레코드 한 줄을 종목별 StandardRow로 펼친다

    두 경계가 모두 빈 종목은 밴드가 없는 것으로 보고 생략한다.
    """
    report = report if report is not None else LoadReport()

    def reject(error_type: str, message: str, field_name: str, value: Any):
        report.add(ValidationError(
            error_type=error_type,
            severity=ValidationSeverity.HIGH,
            message=message,
            field=field_name,
            value=value,
            row_index=row_index,
            suggestion="원본 기준표를 확인하세요",
        ))

    try:
        level = Level.from_string(record.level)
        sex = Sex.from_string(record.sex)
    except ValueError as e:
        reject("INVALID_GROUP_KEY", str(e), "level/sex", f"{record.level}/{record.sex}")
        return []

    ages = parse_age_group(record.age_group)
    if ages is None:
        reject("INVALID_AGE_GROUP", f"연령 그룹 형식 오류: {record.age_group}", "age_group", record.age_group)
        return []

    grade = Grade.parse(record.performance_grade)
    if grade is None:
        reject("INVALID_GRADE", f"등급 형식 오류: {record.performance_grade}", "performance_grade", record.performance_grade)
        return []

    try:
        points = _to_number(record.points)
    except MalformedCell:
        points = None
    if points is None or points < 0 or points != int(points):
        reject("INVALID_POINTS", f"점수 형식 오류: {record.points}", "points", record.points)
        return []

    try:
        run_km = _to_number(record.run_km)
    except MalformedCell:
        reject("INVALID_RUN_KM", f"달리기 거리 형식 오류: {record.run_km}", "run_km", record.run_km)
        run_km = None

    rows = []
    for station in ALL_STATIONS:
        try:
            band_min, band_max = _bounds_for(record, station)
        except MalformedCell as e:
            min_col, max_col = RECORD_BOUND_COLUMNS[station]
            error_type = "INVALID_TIME" if station == Station.RUN else "NON_NUMERIC_BOUND"
            reject(error_type, f"{station.value} 경계값 형식 오류: {e.args[0]!r}", f"{min_col}/{max_col}", e.args[0])
            continue

        if band_min is None and band_max is None:
            continue

        if station == Station.RUN and run_km is None:
            reject("MISSING_RUN_KM", "달리기 밴드에 거리(run_km)가 없습니다", "run_km", record.run_km)
            continue

        rows.append(StandardRow(
            level=level,
            sex=sex,
            age_min=ages[0],
            age_max=ages[1],
            station=station,
            grade=grade,
            points=int(points),
            band_min=band_min,
            band_max=band_max,
            run_km=run_km if station == Station.RUN else None,
            band_name=record.performance_band or None,
        ))
    return rows


def rows_from_records(records: Iterable[Dict[str, Any]]) -> Tuple[List[StandardRow], LoadReport]:
    """dict 레코드 목록 → StandardRow 목록 + 로드 리포트"""
    report = LoadReport()
    rows: List[StandardRow] = []

    for idx, data in enumerate(records):
        report.records_read += 1
        cleaned = {k.strip(): (v.strip() if isinstance(v, str) else v) for k, v in data.items() if k}
        try:
            record = StandardRecord(**cleaned)
        except PydanticValidationError as e:
            for error in e.errors():
                report.add(ValidationError(
                    error_type="SCHEMA_VALIDATION_FAILED",
                    severity=ValidationSeverity.HIGH,
                    message=error["msg"],
                    field=".".join(str(loc) for loc in error["loc"]),
                    value=error.get("input"),
                    row_index=idx,
                    suggestion="데이터 형식을 확인하세요",
                ))
            continue
        rows.extend(explode_record(record, row_index=idx, report=report))

    report.rows_built = len(rows)
    if report.skipped:
        logger.warning(f"기준표 형식 오류 {report.skipped_count}건 건너뜀 (레코드 {report.records_read}개)")
    logger.info(f"기준표 로드: 레코드 {report.records_read}개 → 밴드 {report.rows_built}개")
    return rows, report


def load_standards_csv(path: Union[str, Path]) -> Tuple[List[StandardRow], LoadReport]:
    """CSV 파일에서 기준표 로드"""
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"기준표 CSV 없음: {csv_path}")

    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        records = list(csv.DictReader(f))

    logger.debug(f"CSV 읽기 완료: {csv_path} ({len(records)}행)")
    return rows_from_records(records)
