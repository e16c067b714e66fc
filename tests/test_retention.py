from datetime import datetime, timedelta
from unittest.mock import MagicMock

from core.retention import prune_conditions
from models.beach import Beach
from models.beach_condition import BeachCondition

NOW = datetime(2026, 7, 2, 12, 0, 0)


def add_condition(db, beach, recorded_at):
    db.add(BeachCondition(beach_id=beach.id, recorded_at=recorded_at, flag_status="green", source="apify"))


def test_prunes_only_rows_older_than_window(db):
    beach = Beach(place_id="es_trenc", identity_key="Es Trenc", name="Es Trenc", municipality="Campos")
    db.add(beach)
    db.commit()

    add_condition(db, beach, NOW - timedelta(hours=25))
    add_condition(db, beach, NOW - timedelta(hours=24))
    add_condition(db, beach, NOW - timedelta(hours=23))
    add_condition(db, beach, NOW)
    db.commit()

    deleted = prune_conditions(db, now=NOW)

    assert deleted == 1
    remaining = sorted(c.recorded_at for c in db.query(BeachCondition))
    assert remaining == [NOW - timedelta(hours=24), NOW - timedelta(hours=23), NOW]
    # 해변 행은 그대로
    assert db.query(Beach).count() == 1


def test_custom_retention_window(db):
    beach = Beach(place_id="es_trenc", identity_key="Es Trenc", name="Es Trenc", municipality="Campos")
    db.add(beach)
    db.commit()
    add_condition(db, beach, NOW - timedelta(hours=3))
    db.commit()

    assert prune_conditions(db, now=NOW, retention=timedelta(hours=2)) == 1
    assert db.query(BeachCondition).count() == 0


def test_prune_failure_is_reported_not_raised():
    db = MagicMock()
    db.query.side_effect = RuntimeError("table locked")

    assert prune_conditions(db, now=NOW) is None
    db.rollback.assert_called_once()
