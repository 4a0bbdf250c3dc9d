"""
체력검정 채점 CLI

- validate: 기준표 CSV 로드 + 검증 결과 출력
- evaluate: 참가자 한 명 평가 (등급/점수/다음 목표/종합 등급) JSON 출력
- ladder:   참가자 그룹의 종목별 기준 사다리 출력
"""
import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional
from loguru import logger

from scoring.config import ScoringConfig
from scoring import ParticipantContext, RawMeasurements, build_report
from standards import StandardsRegistry, Station, ALL_STATIONS, format_mmss


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(config: ScoringConfig):
    """로깅 설정"""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=config.log_level.upper())
    if config.log_to_file:
        logger.add(
            str(Path(config.log_dir) / "scoring_{time:YYYY-MM-DD}.log"),
            rotation="1 day",
            retention="30 days",
            level="DEBUG",
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="체력검정 기준표 채점기")
    parser.add_argument("--standards", help="기준표 CSV 경로 (기본: PFT_STANDARDS_CSV)")
    parser.add_argument("--no-validate", action="store_true", help="로드 시 기준표 검증 생략")

    sub = parser.add_subparsers(dest="mode", required=True)

    sub.add_parser("validate", help="기준표 검증")

    def add_participant_args(p: argparse.ArgumentParser):
        p.add_argument("--level", required=True, help="Primary / Secondary")
        p.add_argument("--sex", required=True, help="M / F")
        age = p.add_mutually_exclusive_group(required=True)
        age.add_argument("--age", type=int, help="검사일 기준 만 나이")
        age.add_argument("--dob", help="생년월일 (YYYY-MM-DD)")
        p.add_argument("--test-date", help="검사일 (YYYY-MM-DD, 기본: 오늘)")
        p.add_argument("--run-km", type=float, help="달리기 거리 직접 지정 (1.6 / 2.4)")

    evaluate = sub.add_parser("evaluate", help="참가자 평가")
    add_participant_args(evaluate)
    evaluate.add_argument("--situps", type=float)
    evaluate.add_argument("--broad-jump", type=float, help="cm")
    evaluate.add_argument("--sit-and-reach", type=float, help="cm")
    evaluate.add_argument("--pullups", type=float)
    evaluate.add_argument("--shuttle-run", type=float, help="초 (소수 1자리)")
    run = evaluate.add_mutually_exclusive_group()
    run.add_argument("--run-minutes", type=float, help="달리기 기록 (분, 소수)")
    run.add_argument("--run-time", help="달리기 기록 (M:SS 또는 MSS)")

    ladder = sub.add_parser("ladder", help="기준 사다리 출력")
    add_participant_args(ladder)

    return parser


def _context(args) -> ParticipantContext:
    if args.dob:
        test_date = date.fromisoformat(args.test_date) if args.test_date else None
        return ParticipantContext.from_birth_date(
            args.level, args.sex, date.fromisoformat(args.dob), test_date, args.run_km
        )
    return ParticipantContext.build(args.level, args.sex, args.age, args.run_km)


def _print_json(data):
    print(json.dumps(data, ensure_ascii=False, indent=2))


def run_validate(registry: StandardsRegistry) -> int:
    report = registry.last_report
    validation = registry.last_validation
    _print_json({
        "load": report.summary() if report else None,
        "skipped": [e.model_dump(mode="json") for e in report.skipped] if report else [],
        "validation": validation.model_dump(mode="json") if validation else None,
    })
    if validation is not None and not validation.is_valid:
        return 1
    return 0 if report is None or report.is_clean else 1


def run_evaluate(registry: StandardsRegistry, args) -> int:
    ctx = _context(args)
    measurements = RawMeasurements(
        situps=args.situps,
        broad_jump=args.broad_jump,
        sit_and_reach=args.sit_and_reach,
        pullups=args.pullups,
        shuttle_run=args.shuttle_run,
        run_minutes=args.run_minutes,
        run_time=args.run_time,
    )
    report = build_report(registry.get(), ctx, measurements)
    _print_json(report.to_dict())
    return 0


def run_ladder(registry: StandardsRegistry, args) -> int:
    ctx = _context(args)
    table = registry.get()
    ladder = {}
    for station in ALL_STATIONS:
        run_km = ctx.run_km if station == Station.RUN else None
        rows = []
        for band in table.bands_for(ctx.level, ctx.sex, ctx.age, station, run_km):
            target = band.target
            if target is None:
                shown = None
            elif station.is_timed:
                shown = f"<= {format_mmss(target)}"
            elif station.lower_is_better:
                shown = f"<= {target} s"
            else:
                shown = f">= {target:g}"
            rows.append({
                "band": band.name,
                "grade": band.grade.value,
                "points": band.points,
                "target": shown,
            })
        ladder[station.value] = rows
    _print_json({"participant": ctx.to_dict(), "ladder": ladder})
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """메인 함수"""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = ScoringConfig()
    setup_logging(config)

    standards_path = args.standards or config.standards_csv
    if not standards_path:
        logger.error("기준표 CSV 경로가 없습니다 (--standards 또는 PFT_STANDARDS_CSV)")
        return 2

    registry = StandardsRegistry(reps_domain_max=config.reps_domain_max)
    validate = config.validate_on_load and not args.no_validate
    try:
        registry.load(standards_path, validate=validate or args.mode == "validate")
    except FileNotFoundError as e:
        logger.error(f"기준표 로드 실패: {e}")
        return 2

    try:
        if args.mode == "validate":
            return run_validate(registry)
        if args.mode == "evaluate":
            return run_evaluate(registry, args)
        return run_ladder(registry, args)
    except ValueError as e:
        logger.error(f"입력 오류: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
