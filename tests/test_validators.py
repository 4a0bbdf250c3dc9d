"""
기준표 검증 테스트
"""
import pytest

from standards import (
    StandardsValidator,
    validate_rows,
    StandardRow,
    Level,
    Sex,
    Station,
    Grade,
    ValidationSeverity,
)


def row(station=Station.SITUPS, grade=Grade.A, points=5, lo=40, hi=None, age=(12, 12), km=None):
    return StandardRow(
        level=Level.PRIMARY,
        sex=Sex.MALE,
        age_min=age[0],
        age_max=age[1],
        station=station,
        grade=grade,
        points=points,
        band_min=lo,
        band_max=hi,
        run_km=km,
    )


def error_types(result):
    return [e.error_type for e in result.errors]


def warning_types(result):
    return [w.error_type for w in result.warnings]


class TestCleanTable:
    """정상 기준표"""

    def test_synthetic_table_is_valid(self, standard_rows):
        result = StandardsValidator().validate(standard_rows)
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []
        assert result.pass_rate == 1.0
        assert result.can_compile

    def test_empty(self):
        assert validate_rows([]).is_valid


class TestDefects:
    """결함 탐지"""

    def test_band_overlap(self):
        result = validate_rows([
            row(grade=Grade.A, points=5, lo=40, hi=None),
            row(grade=Grade.B, points=4, lo=35, hi=40),
        ])
        assert "BAND_OVERLAP" in error_types(result)
        assert not result.is_valid
        assert result.has_critical_errors

    def test_lower_is_better_overlap(self):
        result = validate_rows([
            row(Station.SHUTTLE_RUN, Grade.A, 5, 10.0, None),
            row(Station.SHUTTLE_RUN, Grade.B, 4, 9.8, 10.5),
        ])
        assert "BAND_OVERLAP" in error_types(result)

    def test_band_gap(self):
        result = validate_rows([
            row(grade=Grade.A, points=5, lo=40, hi=None),
            row(grade=Grade.B, points=4, lo=30, hi=35),
        ])
        assert "BAND_GAP" in warning_types(result)
        assert result.is_valid
        assert result.warnings[0].severity == ValidationSeverity.MEDIUM

    def test_adjacent_integer_bands_no_gap(self):
        result = validate_rows([
            row(grade=Grade.A, points=5, lo=40, hi=None),
            row(grade=Grade.B, points=4, lo=35, hi=39),
        ])
        assert result.warnings == []

    def test_grade_points_mismatch(self):
        result = validate_rows([
            row(grade=Grade.A, points=3, lo=40, hi=None),
            row(grade=Grade.B, points=4, lo=35, hi=39),
        ])
        assert "GRADE_POINTS_MISMATCH" in error_types(result)

    def test_duplicate_points(self):
        result = validate_rows([
            row(grade=Grade.A, points=4, lo=40, hi=None),
            row(grade=Grade.B, points=4, lo=35, hi=39),
        ])
        assert "DUPLICATE_POINTS" in warning_types(result)

    def test_inverted_band(self):
        result = validate_rows([row(lo=40, hi=30)])
        assert "INVERTED_BAND" in error_types(result)

    def test_age_group_overlap(self):
        result = validate_rows([
            row(age=(12, 13)),
            row(age=(13, 14)),
        ])
        assert "AGE_GROUP_OVERLAP" in error_types(result)

    def test_run_distances_are_separate_groups(self):
        """같은 나이에 1.6km/2.4km 밴드가 있어도 겹침이 아님"""
        result = validate_rows([
            row(Station.RUN, Grade.A, 5, None, 480, km=1.6),
            row(Station.RUN, Grade.A, 5, None, 660, km=2.4),
        ])
        assert result.is_valid

    def test_pass_rate_drops(self):
        result = validate_rows([
            row(grade=Grade.A, points=5, lo=40, hi=None),
            row(grade=Grade.B, points=4, lo=35, hi=40),
            row(Station.PULLUPS, Grade.A, 5, 10, None),
        ])
        assert 0 < result.pass_rate < 1
