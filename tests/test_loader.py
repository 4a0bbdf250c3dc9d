"""
기준표 로더 테스트
- wide 레코드 → 종목별 StandardRow
- 형식 오류 칸 건너뛰기 및 리포트
"""
import pytest

from standards import (
    rows_from_records,
    load_standards_csv,
    Level,
    Sex,
    Station,
    Grade,
)


def _base(**cells):
    rec = {
        "level": "Primary",
        "sex": "Male",
        "age_group": "12",
        "performance_band": "Band A",
        "performance_grade": "A",
        "points": "5",
    }
    rec.update(cells)
    return rec


class TestExplodeRecords:
    """레코드 펼치기"""

    def test_row_count(self, standard_records):
        """Primary 12세 6종목 x5 + 2.4km x5 + 여 13세 x5 + 남 15-16세 2종목 x5"""
        rows, report = rows_from_records(standard_records)
        assert report.is_clean
        assert report.records_read == len(standard_records)
        assert len(rows) == 30 + 5 + 5 + 10
        assert report.rows_built == len(rows)

    def test_fields_converted(self, standard_rows):
        row = next(r for r in standard_rows if r.station == Station.RUN and r.run_km == 1.6 and r.grade == Grade.B)
        assert row.level == Level.PRIMARY
        assert row.sex == Sex.MALE
        assert (row.age_min, row.age_max) == (12, 12)
        assert row.band_min == 481
        assert row.band_max == 525
        assert row.points == 4

    def test_age_group_range(self, standard_rows):
        row = next(r for r in standard_rows if r.age_min == 15)
        assert row.age_max == 16

    def test_empty_station_skipped(self):
        """두 경계 모두 빈 종목은 밴드 없음"""
        rows, report = rows_from_records([_base(situps_min="40")])
        assert report.is_clean
        assert [r.station for r in rows] == [Station.SITUPS]
        assert rows[0].band_max is None

    def test_non_run_station_has_no_km(self):
        rows, _ = rows_from_records([_base(situps_min="40", run_km="1.6", run_max="8:00")])
        by_station = {r.station: r for r in rows}
        assert by_station[Station.SITUPS].run_km is None
        assert by_station[Station.RUN].run_km == 1.6

    def test_numeric_cells_accepted(self):
        """JSON에서 숫자로 들어온 칸"""
        rows, report = rows_from_records([_base(points=5, situps_min=40)])
        assert report.is_clean
        assert rows[0].band_min == 40


class TestMalformedRows:
    """형식 오류 처리 (빌드 중단 없음)"""

    def test_malformed_time_skips_run_only(self):
        rows, report = rows_from_records([_base(situps_min="40", run_km="1.6", run_min="8.00", run_max="9:00")])
        assert [r.station for r in rows] == [Station.SITUPS]
        assert report.skipped_count == 1
        assert report.skipped[0].error_type == "INVALID_TIME"
        assert report.skipped[0].row_index == 0

    def test_non_numeric_bound(self):
        rows, report = rows_from_records([_base(sbj_min_cm="abc")])
        assert rows == []
        assert report.skipped[0].error_type == "NON_NUMERIC_BOUND"

    def test_invalid_grade(self):
        rows, report = rows_from_records([_base(performance_grade="Z", situps_min="40")])
        assert rows == []
        assert report.skipped[0].error_type == "INVALID_GRADE"

    def test_invalid_age_group(self):
        rows, report = rows_from_records([_base(age_group="twelve", situps_min="40")])
        assert rows == []
        assert report.skipped[0].error_type == "INVALID_AGE_GROUP"

    def test_invalid_points(self):
        rows, report = rows_from_records([_base(points="x", situps_min="40")])
        assert rows == []
        assert report.skipped[0].error_type == "INVALID_POINTS"

    def test_missing_required_field(self):
        rec = _base(situps_min="40")
        del rec["level"]
        rows, report = rows_from_records([rec])
        assert rows == []
        assert report.skipped[0].error_type == "SCHEMA_VALIDATION_FAILED"

    def test_run_without_distance(self):
        rows, report = rows_from_records([_base(run_max="8:00")])
        assert rows == []
        assert report.skipped[0].error_type == "MISSING_RUN_KM"

    def test_good_rows_survive_bad_rows(self, standard_records):
        bad = _base(run_km="1.6", run_min="bad", run_max="bad")
        rows, report = rows_from_records(standard_records + [bad])
        assert len(rows) == 50
        assert report.skipped_count == 1
        assert report.summary()["skipped"] == 1


class TestCsvLoad:
    """CSV 파일 로드"""

    def test_load_csv(self, standards_csv):
        rows, report = load_standards_csv(standards_csv)
        assert report.is_clean
        assert len(rows) == 50

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_standards_csv(tmp_path / "missing.csv")
