"""
채점 설정
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class ScoringConfig(BaseSettings):
    """채점 엔진 설정"""

    # 기준표
    standards_csv: Optional[str] = Field(default=None, description="기준표 CSV 경로")
    reps_domain_max: int = Field(default=60, ge=1, description="횟수 종목 dense 배열 최대 횟수")
    validate_on_load: bool = Field(default=True, description="로드 시 기준표 검증 실행")

    # 로깅
    log_level: str = Field(default="INFO", description="콘솔 로그 레벨")
    log_to_file: bool = Field(default=False, description="파일 로그 활성화")
    log_dir: str = Field(default="logs", description="로그 디렉토리")

    model_config = SettingsConfigDict(env_prefix="PFT_", case_sensitive=False)

