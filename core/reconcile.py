"""
크롤링 레코드 → beaches / beach_conditions 반영

레코드마다 독립적으로 처리합니다 (레코드 간 트랜잭션 없음):
1. 검증 (이름 또는 URL에서 유도한 이름 필요)
2. 식별 정책으로 키 계산
3. 해변 조회 또는 생성 (비어 있지 않은 값만 갱신)
4. 상태(condition) 행 추가 (항상 새 행)

한 레코드의 실패는 카운트만 하고 다음 레코드로 넘어갑니다.
"""
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Callable, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.identity import IdentityPolicy
from core.records import ScrapedBeachRecord
from models.beach import Beach, UNKNOWN_MUNICIPALITY
from models.beach_condition import BeachCondition, DEFAULT_FLAG_STATUS, DEFAULT_SOURCE


@dataclass
class ReconcileResult:
    total: int = 0
    created: int = 0
    updated: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0

    def summary(self) -> dict:
        return asdict(self)


class Reconciler:
    def __init__(
        self,
        db: Session,
        policy: IdentityPolicy,
        now: Callable[[], datetime] = datetime.utcnow,
        source: str = DEFAULT_SOURCE
    ):
        self.db = db
        self.policy = policy
        self.now = now
        self.source = source

    def run(self, records: Iterable) -> ReconcileResult:
        """레코드 목록을 입력 순서대로 하나씩 반영합니다."""
        result = ReconcileResult()
        for raw in records:
            result.total += 1
            try:
                self.reconcile_one(raw, result)
            except Exception as e:
                # 예상하지 못한 오류도 해당 레코드만 실패로 처리
                label = raw.get("name") if isinstance(raw, dict) else None
                print(f"레코드 처리 실패 ({label or '<unnamed>'}): {type(e).__name__}: {e}")
                self.db.rollback()
                result.errors += 1
        return result

    def reconcile_one(self, raw, result: ReconcileResult) -> None:
        if not isinstance(raw, dict):
            print(f"객체가 아닌 레코드 건너뜀: {raw!r}")
            result.skipped += 1
            return

        record = ScrapedBeachRecord.model_validate(raw)

        if self.policy.requires_source_url and not record.source_url:
            print(f"source_url 없는 레코드 건너뜀: {record.label()}")
            result.skipped += 1
            return

        if not record.name and not record.source_url:
            print("이름과 URL이 모두 없는 레코드 건너뜀")
            result.skipped += 1
            return

        name = record.display_name()
        if not name:
            print(f"URL에서 해변 이름을 만들 수 없음: {record.source_url}")
            result.errors += 1
            return

        beach = self._upsert_beach(record, name, result)
        if beach is None:
            result.errors += 1
            return

        if self._append_condition(beach, record):
            result.processed += 1
        else:
            result.errors += 1

    def _lookup(self, identity_key: str) -> Optional[Beach]:
        return self.db.query(Beach).filter(Beach.identity_key == identity_key).first()

    def _upsert_beach(self, record: ScrapedBeachRecord, name: str, result: ReconcileResult) -> Optional[Beach]:
        """
        식별 키로 해변을 찾고, 없으면 생성합니다.

        생성은 savepoint 안에서 시도하고 유니크 제약 충돌이 나면
        (동시에 들어온 다른 웹훅이 먼저 만든 경우) 기존 행을 다시 조회합니다.
        """
        identity_key = self.policy.key(name, record.municipality, record.source_url)
        now = self.now()

        try:
            beach = self._lookup(identity_key)
            created = False

            if beach is None:
                candidate = Beach(
                    place_id=self.policy.place_id(name, record.municipality),
                    identity_key=identity_key,
                    name=name,
                    municipality=record.municipality or UNKNOWN_MUNICIPALITY,
                    source_url=record.source_url,
                    created_at=now,
                    updated_at=now
                )
                try:
                    with self.db.begin_nested():
                        self.db.add(candidate)
                        self.db.flush()
                    beach = candidate
                    created = True
                except IntegrityError:
                    print(f"동시 생성 충돌, 기존 해변 재조회: {name}")
                    beach = self._lookup(identity_key)
                    if beach is None:
                        raise

            if not created:
                self._merge_fields(beach, record, now)

            self.db.commit()
        except Exception as e:
            print(f"해변 저장 실패 ({name}): {type(e).__name__}: {e}")
            self.db.rollback()
            return None

        if created:
            result.created += 1
            print(f"새 해변 생성: {name} ({beach.place_id})")
        else:
            result.updated += 1
            print(f"기존 해변 갱신: {name}")
        return beach

    @staticmethod
    def _merge_fields(beach: Beach, record: ScrapedBeachRecord, now: datetime) -> None:
        # 들어온 값이 비어 있으면 기존 값을 유지. URL에서 만든 이름은 생성 시에만 사용
        if record.name:
            beach.name = record.name
        if record.municipality:
            beach.municipality = record.municipality
        if record.source_url:
            beach.source_url = record.source_url
        beach.updated_at = now

    def _append_condition(self, beach: Beach, record: ScrapedBeachRecord) -> bool:
        condition = BeachCondition(
            beach_id=beach.id,
            recorded_at=record.scraped_at or self.now(),
            occupancy_percent=record.occupancy_percent,
            occupancy_text=record.occupancy_text,
            flag_status=record.flag_status or DEFAULT_FLAG_STATUS,
            has_jellyfish=record.has_jellyfish,
            air_temperature=record.air_temperature,
            water_temperature=record.water_temperature,
            wind_speed=record.wind_speed,
            wave_height=record.wave_height,
            source=self.source,
            created_at=self.now()
        )
        try:
            self.db.add(condition)
            self.db.commit()
        except Exception as e:
            # 해변 행 변경은 이미 커밋됨 (되돌리지 않음)
            print(f"상태 저장 실패 ({record.label()}): {type(e).__name__}: {e}")
            self.db.rollback()
            return False
        return True
