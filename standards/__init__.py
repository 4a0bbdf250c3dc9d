"""
체력검정 기준표 모듈

원본 기준표(CSV) → 종목별 밴드 → 불변 컴파일 테이블
"""
from .schemas import (
    Level,
    Sex,
    Station,
    Polarity,
    Grade,
    StandardRecord,
    StandardRow,
    Band,
    ValidationResult,
    ValidationError,
    ValidationSeverity,
    ALL_STATIONS,
    NON_RUN_STATIONS,
    grade_rank,
)
from .timeparse import (
    parse_mmss,
    format_mmss,
    minutes_to_seconds,
    format_run_minutes,
    parse_run_input,
    parse_age_group,
    age_at,
)
from .loader import load_standards_csv, rows_from_records, explode_record, LoadReport
from .table import StandardsTable, StationGroup, StationResult, compile_table, DEFAULT_REPS_DOMAIN_MAX
from .validators import StandardsValidator, validate_rows
from .registry import StandardsRegistry

__all__ = [
    # Schemas
    "Level",
    "Sex",
    "Station",
    "Polarity",
    "Grade",
    "StandardRecord",
    "StandardRow",
    "Band",
    "ValidationResult",
    "ValidationError",
    "ValidationSeverity",
    "ALL_STATIONS",
    "NON_RUN_STATIONS",
    "grade_rank",
    # Time / age
    "parse_mmss",
    "format_mmss",
    "minutes_to_seconds",
    "format_run_minutes",
    "parse_run_input",
    "parse_age_group",
    "age_at",
    # Loader
    "load_standards_csv",
    "rows_from_records",
    "explode_record",
    "LoadReport",
    # Table
    "StandardsTable",
    "StationGroup",
    "StationResult",
    "compile_table",
    "DEFAULT_REPS_DOMAIN_MAX",
    # Validation
    "StandardsValidator",
    "validate_rows",
    # Registry
    "StandardsRegistry",
]
