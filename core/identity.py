"""
해변 식별 정책

레코드를 기존 해변 행과 매칭할 키를 계산합니다.
배포마다 하나의 정책만 사용해야 합니다. 정책을 섞으면 같은 해변이 중복 생성됩니다.

- name: 이름 일치
- name_municipality: 이름 + 지자체 일치
- source_url: 원본 URL 일치
"""
from dataclasses import dataclass
from typing import Callable, Optional

from core.slug import slugify
from models.beach import UNKNOWN_MUNICIPALITY


@dataclass(frozen=True)
class IdentityPolicy:
    name: str
    key_for: Callable[[str, str, Optional[str]], Optional[str]]
    place_id_for: Callable[[str, str], str]
    requires_source_url: bool = False

    def key(self, name: str, municipality: Optional[str], source_url: Optional[str]) -> Optional[str]:
        return self.key_for(name, municipality or UNKNOWN_MUNICIPALITY, source_url)

    def place_id(self, name: str, municipality: Optional[str]) -> str:
        return self.place_id_for(name, municipality or UNKNOWN_MUNICIPALITY)


def _name_key(name, municipality, source_url):
    return name


def _name_municipality_key(name, municipality, source_url):
    return f"{name}|{municipality}"


def _source_url_key(name, municipality, source_url):
    return source_url


def _name_slug(name, municipality):
    return slugify(name)


def _name_municipality_slug(name, municipality):
    return slugify(f"{name} {municipality}")


NAME = IdentityPolicy("name", _name_key, _name_slug)
NAME_MUNICIPALITY = IdentityPolicy("name_municipality", _name_municipality_key, _name_municipality_slug)
SOURCE_URL = IdentityPolicy("source_url", _source_url_key, _name_slug, requires_source_url=True)

POLICIES = {policy.name: policy for policy in (NAME, NAME_MUNICIPALITY, SOURCE_URL)}


def get_policy(name: str) -> IdentityPolicy:
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(
            f"알 수 없는 식별 정책입니다: {name} (사용 가능: {', '.join(sorted(POLICIES))})"
        )
