"""
Pytest configuration and fixtures for fitness standards scoring tests
"""

import csv
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from standards import rows_from_records, compile_table, StandardsRegistry


RECORD_COLUMNS = [
    "level", "sex", "age_group", "performance_band", "performance_grade", "points",
    "situps_min", "situps_max", "sbj_min_cm", "sbj_max_cm",
    "sitreach_min_cm", "sitreach_max_cm", "pullups_min", "pullups_max",
    "shuttle_min_s", "shuttle_max_s", "run_km", "run_min", "run_max",
]

GRADES = [("A", 5), ("B", 4), ("C", 3), ("D", 2), ("E", 1)]


def _record(level, sex, age_group, grade, points, **cells):
    rec = {col: "" for col in RECORD_COLUMNS}
    rec.update({
        "level": level,
        "sex": sex,
        "age_group": age_group,
        "performance_band": f"Band {grade}",
        "performance_grade": grade,
        "points": str(points),
    })
    rec.update({k: str(v) for k, v in cells.items()})
    return rec


def build_standard_records():
    """
    합성 기준표

    - Primary/Male/12세: 6종목, 달리기 1.6km + 2.4km
    - Secondary/Female/13세: 2.4km 달리기만 (하한이 있는 최고 구간 → 백필 확인용)
    - Secondary/Male/15-16세: 윗몸일으키기 + 2.4km
    """
    records = []

    situps = [(40, ""), (35, 39), (30, 34), (25, 29), (20, 24)]
    broad = [(200, ""), (190, 199), (180, 189), (170, 179), (160, 169)]
    reach = [(40, ""), (36, 39), (32, 35), (28, 31), (24, 27)]
    pullups = [(10, ""), (8, 9), (6, 7), (4, 5), (2, 3)]
    shuttle = [("10.0", ""), ("10.1", "10.5"), ("10.6", "11.0"), ("11.1", "11.5"), ("11.6", "12.0")]
    run_16 = [("", "8:00"), ("8:01", "8:45"), ("8:46", "9:30"), ("9:31", "10:15"), ("10:16", "11:00")]
    run_24 = [("", "11:00"), ("11:01", "11:45"), ("11:46", "12:30"), ("12:31", "13:15"), ("13:16", "14:00")]

    for i, (grade, points) in enumerate(GRADES):
        records.append(_record(
            "Primary", "Male", "12", grade, points,
            situps_min=situps[i][0], situps_max=situps[i][1],
            sbj_min_cm=broad[i][0], sbj_max_cm=broad[i][1],
            sitreach_min_cm=reach[i][0], sitreach_max_cm=reach[i][1],
            pullups_min=pullups[i][0], pullups_max=pullups[i][1],
            shuttle_min_s=shuttle[i][0], shuttle_max_s=shuttle[i][1],
            run_km="1.6", run_min=run_16[i][0], run_max=run_16[i][1],
        ))
    for i, (grade, points) in enumerate(GRADES):
        records.append(_record(
            "Primary", "Male", "12", grade, points,
            run_km="2.4", run_min=run_24[i][0], run_max=run_24[i][1],
        ))

    run_f13 = [("10:30", "11:30"), ("11:31", "12:30"), ("12:31", "13:30"), ("13:31", "14:30"), ("14:31", "15:30")]
    for i, (grade, points) in enumerate(GRADES):
        records.append(_record(
            "Secondary", "Female", "13", grade, points,
            run_km="2.4", run_min=run_f13[i][0], run_max=run_f13[i][1],
        ))

    situps_m15 = [(45, ""), (40, 44), (35, 39), (30, 34), (25, 29)]
    for i, (grade, points) in enumerate(GRADES):
        records.append(_record(
            "Secondary", "Male", "15-16", grade, points,
            situps_min=situps_m15[i][0], situps_max=situps_m15[i][1],
            run_km="2.4", run_min=run_24[i][0], run_max=run_24[i][1],
        ))

    return records


def write_standards_csv(path: Path, records) -> Path:
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=RECORD_COLUMNS)
        writer.writeheader()
        for rec in records:
            writer.writerow({col: rec.get(col, "") for col in RECORD_COLUMNS})
    return path


@pytest.fixture(scope="function")
def standard_records():
    """합성 기준표 레코드 (wide 형식 dict)"""
    return build_standard_records()


@pytest.fixture(scope="function")
def standard_rows(standard_records):
    rows, report = rows_from_records(standard_records)
    assert report.is_clean
    return rows


@pytest.fixture(scope="session")
def table():
    """컴파일된 합성 기준표"""
    rows, _ = rows_from_records(build_standard_records())
    return compile_table(rows)


@pytest.fixture(scope="function")
def standards_csv(tmp_path, standard_records):
    """합성 기준표 CSV 파일"""
    return write_standards_csv(tmp_path / "standards.csv", standard_records)


@pytest.fixture(scope="function")
def registry():
    return StandardsRegistry()
