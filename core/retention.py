from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from models.beach_condition import BeachCondition

DEFAULT_RETENTION = timedelta(hours=24)


def prune_conditions(db: Session, now: datetime, retention: timedelta = DEFAULT_RETENTION) -> Optional[int]:
    """
    보존 기간보다 오래된 상태 행을 삭제합니다.

    recorded_at이 (now - retention)보다 엄격히 이전인 행만 삭제합니다.
    유지보수 단계라서 실패해도 요청을 실패시키지 않고 None을 반환합니다.
    """
    cutoff = now - retention
    try:
        deleted = db.query(BeachCondition).filter(
            BeachCondition.recorded_at < cutoff
        ).delete(synchronize_session=False)
        db.commit()
    except Exception as e:
        print(f"오래된 상태 데이터 삭제 실패: {type(e).__name__}: {e}")
        db.rollback()
        return None

    print(f"{cutoff.isoformat()} 이전 상태 데이터 {deleted}건 삭제")
    return deleted
