"""
다음 목표 계산 테스트
"""
import pytest

from standards import Station, Grade
from scoring import ParticipantContext, RawMeasurements, evaluate, next_targets, next_target_for
from scoring.targets import targets_to_dict


@pytest.fixture
def ctx():
    return ParticipantContext.build("Primary", "M", 12)


class TestNextTargets:
    """종목별 다음 목표"""

    def test_targets_for_mixed_result(self, table, ctx):
        m = RawMeasurements(situps=36, broad_jump=181, sit_and_reach=29, pullups=2, shuttle_run=10.3, run_minutes=9.0)
        targets = next_targets(table, ctx, evaluate(table, ctx, m))

        assert targets[Station.SITUPS].target == 40
        assert targets[Station.SITUPS].grade == Grade.A
        assert targets[Station.BROAD_JUMP].target == 190
        assert targets[Station.SIT_AND_REACH].target == 32
        assert targets[Station.PULLUPS].target == 4
        assert targets[Station.SHUTTLE_RUN].target == 10.0
        assert targets[Station.RUN].target == 525
        assert targets[Station.RUN].target_mmss == "8:45"
        assert targets[Station.RUN].points == 4

    def test_target_units(self, table, ctx):
        target = next_target_for(table, ctx, Station.SITUPS, 0)
        assert isinstance(target.target, int)
        assert target.target_mmss is None

    def test_missing_station_targets_lowest_band(self, table, ctx):
        """결과 없는 종목은 0점 기준 → E 밴드 진입 기록"""
        targets = next_targets(table, ctx, evaluate(table, ctx, RawMeasurements()))
        assert targets[Station.PULLUPS].target == 2
        assert targets[Station.PULLUPS].points == 1
        assert targets[Station.RUN].target_mmss == "11:00"

    def test_none_at_maximum(self, table, ctx):
        m = RawMeasurements(situps=50, run_minutes=7.0)
        targets = next_targets(table, ctx, evaluate(table, ctx, m))
        assert targets[Station.SITUPS] is None
        assert targets[Station.RUN] is None

    def test_none_without_data(self, table):
        c = ParticipantContext.build("Primary", "F", 12)
        targets = next_targets(table, c, evaluate(table, c, RawMeasurements(situps=30)))
        assert all(t is None for t in targets.values())

    def test_run_target_uses_own_distance(self, table):
        """1.6km 480초 → A(최고) 이므로 목표 없음. 2.4km 밴드(11:00 등)를 끌어오지 않음"""
        c16 = ParticipantContext.build("Primary", "M", 12)
        result = evaluate(table, c16, RawMeasurements(run_seconds=480))
        assert result.get(Station.RUN).points == 5
        assert next_targets(table, c16, result)[Station.RUN] is None

        slow = evaluate(table, c16, RawMeasurements(run_seconds=640))
        target = next_targets(table, c16, slow)[Station.RUN]
        assert target.target == 615
        assert target.target_mmss == "10:15"

    def test_round_trip(self, table, ctx):
        """목표 기록을 그대로 입력하면 목표 점수"""
        m = RawMeasurements(situps=21, broad_jump=165, sit_and_reach=25, pullups=3, shuttle_run=11.8, run_minutes=10.5)
        targets = next_targets(table, ctx, evaluate(table, ctx, m))
        again = RawMeasurements(
            situps=targets[Station.SITUPS].target,
            broad_jump=targets[Station.BROAD_JUMP].target,
            sit_and_reach=targets[Station.SIT_AND_REACH].target,
            pullups=targets[Station.PULLUPS].target,
            shuttle_run=targets[Station.SHUTTLE_RUN].target,
            run_seconds=targets[Station.RUN].target,
        )
        result = evaluate(table, ctx, again)
        for station, target in targets.items():
            assert result.get(station).points == target.points

    def test_to_dict(self, table, ctx):
        targets = next_targets(table, ctx, evaluate(table, ctx, RawMeasurements(run_seconds=640)))
        data = targets_to_dict(targets)
        assert data["run"] == {"target": 615, "target_mmss": "10:15", "grade": "D", "points": 2}
        assert data["situps"]["target_mmss"] is None
