import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_INVALID = re.compile(r"[^a-z0-9_]")
_REPEATED_UNDERSCORE = re.compile(r"_+")


def slugify(value: str) -> str:
    """
    해변 이름으로 place_id 슬러그를 만듭니다.

    소문자 변환 → 악센트 제거 → 공백을 '_'로 → [a-z0-9_] 외 문자 제거
    → 연속된 '_' 축약 → 앞뒤 '_' 제거

    예: "Playa d'Alcúdia" → "playa_dalcudia"
    """
    text = unicodedata.normalize("NFKD", value.lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _WHITESPACE.sub("_", text)
    text = _INVALID.sub("", text)
    text = _REPEATED_UNDERSCORE.sub("_", text)
    return text.strip("_")
