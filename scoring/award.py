"""
종합 등급(Award) 판정

- 6종목 중 하나라도 결과가 없으면 No Award
- 총점 + 최저 등급으로 Gold / Silver / Bronze 판정 (위에서부터 첫 조건 충족)
- 달리기 미완료 시 5종목 잠정 판정, 다음 등급까지의 안내
"""
from enum import Enum
from typing import Dict, Any, List, Optional, Iterable
from dataclasses import dataclass, asdict

from standards.schemas import Station, Grade, ALL_STATIONS, NON_RUN_STATIONS, grade_rank
from standards.table import StandardsTable
from standards.timeparse import format_mmss
from .evaluator import ParticipantContext, EvaluationResult


class AwardLabel(str, Enum):
    """종합 등급"""
    GOLD = "Gold"
    SILVER = "Silver"
    BRONZE = "Bronze"
    NO_AWARD = "No Award"


@dataclass(frozen=True)
class AwardTier:
    label: AwardLabel
    min_total: int
    min_grade: Grade


# 판정 순서대로
AWARD_TIERS = (
    AwardTier(AwardLabel.GOLD, 21, Grade.C),
    AwardTier(AwardLabel.SILVER, 15, Grade.D),
    AwardTier(AwardLabel.BRONZE, 6, Grade.E),
)

TIER_BY_LABEL = {t.label: t for t in AWARD_TIERS}

# 다음 단계 등급
NEXT_AWARD = {
    AwardLabel.NO_AWARD: AwardLabel.BRONZE,
    AwardLabel.BRONZE: AwardLabel.SILVER,
    AwardLabel.SILVER: AwardLabel.GOLD,
    AwardLabel.GOLD: None,
}

# 달리기 점수 상한 (기준표에 달리기 밴드가 없을 때)
DEFAULT_MAX_RUN_POINTS = 5


@dataclass(frozen=True)
class Award:
    """종합 등급 판정 결과"""
    label: AwardLabel
    reason: str
    provisional: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label.value, "reason": self.reason, "provisional": self.provisional}


def _min_rank(result: EvaluationResult, stations: Iterable[Station]) -> int:
    ranks = [grade_rank(result.stations[s].grade) for s in stations if result.stations.get(s)]
    return min(ranks) if ranks else 0


def _classify(total: int, min_rank: int, basis: str, provisional: bool = False) -> Award:
    for tier in AWARD_TIERS:
        if total >= tier.min_total and min_rank >= grade_rank(tier.min_grade):
            return Award(
                label=tier.label,
                reason=(
                    f"{basis} {total} points (>= {tier.min_total}) "
                    f"and at least grade {tier.min_grade.value} in all stations."
                ),
                provisional=provisional,
            )

    bronze = TIER_BY_LABEL[AwardLabel.BRONZE]
    return Award(
        label=AwardLabel.NO_AWARD,
        reason=(
            f"{basis} {total} points or minimum grade conditions not met "
            f"(Bronze needs >= {bronze.min_total} points and grade {bronze.min_grade.value} or better)."
        ),
        provisional=provisional,
    )


def derive_award(result: EvaluationResult) -> Award:
    """6종목 결과로 종합 등급 판정"""
    if not result.has_six:
        return Award(label=AwardLabel.NO_AWARD, reason="Incomplete results across all stations.")
    return _classify(result.total_points, _min_rank(result, ALL_STATIONS), "Total")


def provisional_award(result: EvaluationResult) -> Optional[Award]:
    """달리기 전 5종목 잠정 판정 (5종목 완료 + 달리기 미완료일 때만)"""
    if result.has_six or not result.has_five:
        return None
    subtotal = result.subtotal(NON_RUN_STATIONS)
    return _classify(subtotal, _min_rank(result, NON_RUN_STATIONS), "Five-station subtotal", provisional=True)


# =====================================================
# 다음 등급 안내
# =====================================================

def grade_for_points(points: int) -> Optional[Grade]:
    """점수 → 등급 (밴드 정보가 없을 때 표시용)"""
    if points >= 5:
        return Grade.A
    return {4: Grade.B, 3: Grade.C, 2: Grade.D, 1: Grade.E}.get(points)


@dataclass(frozen=True)
class RunTarget:
    seconds: Optional[int]
    mmss: Optional[str]
    grade: Optional[Grade]


def run_target_for_points(table: StandardsTable, ctx: ParticipantContext, points: int) -> RunTarget:
    """참가자 거리 기준으로 달리기 점수 `points`를 받는 경계 시간"""
    bands = table.bands_for(ctx.level, ctx.sex, ctx.age, Station.RUN, ctx.run_km)
    for band in bands:
        if band.points != points or band.target is None:
            continue
        seconds = int(band.target)
        return RunTarget(seconds=seconds, mmss=format_mmss(seconds), grade=band.grade)
    return RunTarget(seconds=None, mmss=None, grade=grade_for_points(points))


@dataclass(frozen=True)
class AwardGuidance:
    """다음 종합 등급까지의 안내"""
    next_label: AwardLabel
    points_shortfall: int
    run_only_reachable: bool
    required_run_points: int
    run_grade: Optional[Grade]
    run_mmss: Optional[str]
    floor_note_needed: bool
    required_min_grade: Grade

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["next_label"] = self.next_label.value
        data["run_grade"] = self.run_grade.value if self.run_grade else None
        data["required_min_grade"] = self.required_min_grade.value
        return data


@dataclass(frozen=True)
class AwardInfo:
    has_five: bool
    has_six: bool
    current_award: Optional[Award]
    provisional: Optional[Award]
    guidance: Optional[AwardGuidance]

    @property
    def display(self) -> Award:
        """배너 표시용 판정"""
        if self.current_award:
            return self.current_award
        if self.provisional:
            return self.provisional
        return Award(
            label=AwardLabel.NO_AWARD,
            reason="Complete at least the five non-run stations.",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_five": self.has_five,
            "has_six": self.has_six,
            "current_award": self.current_award.to_dict() if self.current_award else None,
            "provisional": self.provisional.to_dict() if self.provisional else None,
            "guidance": self.guidance.to_dict() if self.guidance else None,
            "display": self.display.to_dict(),
        }


def award_guidance(
    table: StandardsTable,
    ctx: ParticipantContext,
    result: EvaluationResult,
    base_label: Optional[AwardLabel] = None,
) -> Optional[AwardGuidance]:
    """
    다음 등급까지 부족한 점수, 달리기만으로 가능한지, 필요한 달리기 기록

    6종목 완료 시 총점 기준, 아니면 5종목 소계 기준.
    base_label을 주지 않으면 현재(또는 잠정) 등급에서 계산한다.
    """
    if base_label is None:
        base = derive_award(result) if result.has_six else provisional_award(result)
        base_label = base.label if base else None
    next_label = NEXT_AWARD[base_label or AwardLabel.NO_AWARD]
    if next_label is None:
        return None

    tier = TIER_BY_LABEL[next_label]
    has_six = result.has_six
    keys: List[Station] = list(ALL_STATIONS if has_six else NON_RUN_STATIONS)
    total = result.total_points if has_six else result.subtotal(NON_RUN_STATIONS)
    min_rank = _min_rank(result, keys)

    max_run = table.max_points(ctx.level, ctx.sex, ctx.age, Station.RUN, ctx.run_km) or DEFAULT_MAX_RUN_POINTS
    total_without_run = total - result.points_for(Station.RUN) if has_six else total
    needed_from_run = tier.min_total - total_without_run
    required_run_points = max(1, min(max_run, needed_from_run))
    run_target = run_target_for_points(table, ctx, required_run_points)

    return AwardGuidance(
        next_label=next_label,
        points_shortfall=max(0, tier.min_total - total),
        run_only_reachable=needed_from_run <= max_run,
        required_run_points=required_run_points,
        run_grade=run_target.grade,
        run_mmss=run_target.mmss,
        floor_note_needed=min_rank < grade_rank(tier.min_grade),
        required_min_grade=tier.min_grade,
    )


def award_info(table: StandardsTable, ctx: ParticipantContext, result: EvaluationResult) -> AwardInfo:
    """현재/잠정 등급 + 다음 등급 안내"""
    has_six = result.has_six
    has_five = result.has_five
    current = derive_award(result) if has_six else None
    provisional = provisional_award(result)

    base = current or provisional
    guidance = award_guidance(table, ctx, result, base.label if base else AwardLabel.NO_AWARD)

    return AwardInfo(
        has_five=has_five,
        has_six=has_six,
        current_award=current,
        provisional=provisional,
        guidance=guidance,
    )
