"""
크롤러가 보내는 해변 레코드 파싱

크롤러 결과는 타입이 일정하지 않아서 ("21.5", "75%", "yes" 등)
필드별로 관대하게 변환하고, 변환할 수 없는 값은 None으로 둡니다.
"""
from datetime import datetime, timezone
from typing import Optional, Union
from urllib.parse import urlparse
import re

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_NUMBER = re.compile(r"-?\d+(?:[.,]\d+)?")
TRUE_STRINGS = {"true", "yes", "y", "si", "sí", "1"}
FALSE_STRINGS = {"false", "no", "n", "0"}


def _clean_str(value) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _to_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER.search(str(value))
    if not match:
        return None
    return float(match.group().replace(",", "."))


def _to_datetime(value) -> Optional[datetime]:
    """ISO 8601 문자열을 UTC naive datetime으로 변환 (DB 컬럼이 naive UTC)"""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def name_from_url(url: str) -> Optional[str]:
    """
    URL 마지막 경로 조각으로 표시용 이름을 만듭니다.

    예: "https://example.com/playas/playa-de-muro" → "Playa De Muro"
    """
    path = urlparse(url).path if "://" in url else url
    segments = [s for s in path.split("/") if s.strip()]
    if not segments:
        return None
    words = re.sub(r"[-_]+", " ", segments[-1]).split()
    if not words:
        return None
    return " ".join(words).title()


class ScrapedBeachRecord(BaseModel):
    """크롤러 레코드 한 건"""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    municipality: Optional[str] = None
    source_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("source_url", "url"))
    flag_status: Optional[str] = Field(default=None, validation_alias=AliasChoices("flag_status", "flag"))
    has_jellyfish: Optional[bool] = Field(default=None, validation_alias=AliasChoices("has_jellyfish", "jellyfish"))
    occupancy: Optional[Union[float, str]] = Field(
        default=None,
        validation_alias=AliasChoices("occupancy_percent", "occupancy")
    )
    air_temperature: Optional[float] = None
    water_temperature: Optional[float] = None
    wind_speed: Optional[float] = None
    wave_height: Optional[float] = None
    scraped_at: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("scraped_at", "recorded_at"))

    @field_validator("name", "municipality", "source_url", mode="before")
    @classmethod
    def _strip_text(cls, value):
        return _clean_str(value)

    @field_validator("flag_status", mode="before")
    @classmethod
    def _normalize_flag(cls, value):
        text = _clean_str(value)
        return text.lower() if text else None

    @field_validator("has_jellyfish", mode="before")
    @classmethod
    def _parse_bool(cls, value):
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        text = str(value).strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
        return None

    @field_validator("occupancy", mode="before")
    @classmethod
    def _keep_occupancy(cls, value):
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        return _clean_str(value)

    @field_validator("air_temperature", "water_temperature", "wind_speed", "wave_height", mode="before")
    @classmethod
    def _parse_float(cls, value):
        return _to_float(value)

    @field_validator("scraped_at", mode="before")
    @classmethod
    def _parse_datetime(cls, value):
        return _to_datetime(value)

    @property
    def occupancy_percent(self) -> Optional[int]:
        # 값이 없으면 0이 아니라 None ("데이터 없음"과 "0%"는 다름)
        number = _to_float(self.occupancy)
        return int(round(number)) if number is not None else None

    @property
    def occupancy_text(self) -> Optional[str]:
        return self.occupancy if isinstance(self.occupancy, str) else None

    def display_name(self) -> Optional[str]:
        """이름이 없으면 source_url에서 이름을 유도합니다."""
        if self.name:
            return self.name
        if self.source_url:
            return name_from_url(self.source_url)
        return None

    def label(self) -> str:
        """로그용 식별 문자열"""
        return self.name or self.source_url or "<unnamed>"
