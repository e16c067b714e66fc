"""
애플리케이션 설정 모듈
.env 파일과 환경 변수에서 설정을 읽어 Settings 객체로 제공합니다.
"""
from functools import lru_cache
import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    database_url: str
    apify_api_base_url: str = "https://api.apify.com"
    apify_api_token: str = ""
    dataset_fetch_timeout: float = 60.0
    identity_policy: str = "name_municipality"
    prune_conditions: bool = True
    condition_retention_hours: float = 24.0


def _default_database_url() -> str:
    # MySQL 연결 설정
    mysql_user = os.environ.get("MYSQL_USER", "root")
    mysql_password = os.environ.get("MYSQL_PASSWORD", "password")
    mysql_host = os.environ.get("MYSQL_HOST", "localhost")
    mysql_port = os.environ.get("MYSQL_PORT", "3306")
    mysql_database = os.environ.get("MYSQL_DATABASE", "beachwatch")
    return f"mysql+pymysql://{mysql_user}:{mysql_password}@{mysql_host}:{mysql_port}/{mysql_database}"


def load_settings() -> Settings:
    """환경 변수에서 설정을 새로 읽어옵니다."""
    return Settings(
        database_url=os.environ.get("DATABASE_URL") or _default_database_url(),
        apify_api_base_url=os.environ.get("APIFY_API_BASE_URL", "https://api.apify.com").rstrip("/"),
        apify_api_token=os.environ.get("APIFY_API_TOKEN", ""),
        dataset_fetch_timeout=float(os.environ.get("DATASET_FETCH_TIMEOUT", "60")),
        identity_policy=os.environ.get("BEACH_IDENTITY_POLICY", "name_municipality"),
        prune_conditions=os.environ.get("PRUNE_CONDITIONS", "true").strip().lower() in TRUE_VALUES,
        condition_retention_hours=float(os.environ.get("CONDITION_RETENTION_HOURS", "24")),
    )


@lru_cache
def get_settings() -> Settings:
    """설정 의존성 (프로세스당 한 번 로드)"""
    return load_settings()
