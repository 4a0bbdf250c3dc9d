"""
기준표 레지스트리

프로세스 전역에서 현재 컴파일된 기준표를 보관한다. 재로드 시 새 테이블을
완전히 만든 뒤 참조만 교체하므로, 진행 중인 평가는 이전 테이블을 그대로 쓴다.
"""
import threading
from pathlib import Path
from typing import Optional, Union, Iterable, Tuple
from loguru import logger

from .schemas import StandardRow, ValidationResult
from .table import StandardsTable, compile_table, DEFAULT_REPS_DOMAIN_MAX
from .loader import load_standards_csv, LoadReport
from .validators import StandardsValidator


class StandardsRegistry:
    """컴파일된 기준표 보관소"""

    def __init__(self, reps_domain_max: int = DEFAULT_REPS_DOMAIN_MAX):
        self.reps_domain_max = reps_domain_max
        self._table: Optional[StandardsTable] = None
        self._lock = threading.Lock()
        self.last_report: Optional[LoadReport] = None
        self.last_validation: Optional[ValidationResult] = None
        self.version = 0

    @property
    def is_loaded(self) -> bool:
        return self._table is not None

    def get(self) -> StandardsTable:
        """현재 테이블 (로드 전이면 RuntimeError)"""
        table = self._table
        if table is None:
            raise RuntimeError("기준표가 아직 로드되지 않았습니다")
        return table

    def replace(self, table: StandardsTable) -> StandardsTable:
        """테이블 참조 교체. 이전 테이블 반환"""
        with self._lock:
            previous = self._table
            self._table = table
            self.version += 1
        logger.info(f"기준표 교체 완료 (버전 {self.version}, 그룹 {len(table.groups)}개)")
        return previous

    def load_rows(self, rows: Iterable[StandardRow], validate: bool = True) -> StandardsTable:
        rows = list(rows)
        if validate:
            self.last_validation = StandardsValidator().validate(rows)
        table = compile_table(rows, reps_domain_max=self.reps_domain_max)
        self.replace(table)
        return table

    def load(self, path: Union[str, Path], validate: bool = True) -> Tuple[StandardsTable, LoadReport]:
        """CSV 로드 → 컴파일 → 교체"""
        rows, report = load_standards_csv(path)
        self.last_report = report
        table = self.load_rows(rows, validate=validate)
        return table, report

