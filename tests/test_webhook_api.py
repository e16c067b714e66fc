import asyncio
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from core.config import Settings, get_settings
from core.database import get_db
from core.errors import DatasetFetchError
from fetch.dataset import get_dataset_client
from main import app
from models.beach import Beach
from models.beach_condition import BeachCondition

URL = "/api/v1/webhook/apify"
MURO = {"name": "Playa de Muro", "municipality": "Muro", "flag_status": "yellow", "has_jellyfish": True}


class FakeDatasetClient:
    def __init__(self):
        self.datasets = {}
        self.calls = []
        self.error = None

    def fetch_items(self, dataset_id):
        self.calls.append(dataset_id)
        if self.error:
            raise self.error
        return self.datasets[dataset_id]


@pytest.fixture()
def settings():
    return Settings(database_url="sqlite://", identity_policy="name_municipality", prune_conditions=True)


@pytest.fixture()
def dataset_client():
    return FakeDatasetClient()


@pytest.fixture()
def client(session_factory, settings, dataset_client):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_dataset_client] = lambda: dataset_client
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_inline_records_are_reconciled(client, db):
    response = client.post(URL, json={"eventData": {"data": [MURO]}})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Beach data processed successfully"
    assert body["results"]["created"] == 1
    assert body["results"]["processed"] == 1
    assert body["results"]["errors"] == 0
    assert body["results"]["total"] == 1

    beach = db.query(Beach).one()
    assert beach.place_id == "playa_de_muro_muro"
    condition = db.query(BeachCondition).one()
    assert condition.flag_status == "yellow"
    assert condition.has_jellyfish is True


def test_same_delivery_twice_grows_only_fact_table(client, db):
    client.post(URL, json={"data": [MURO]})
    response = client.post(URL, json={"data": [MURO]})

    assert response.json()["results"]["updated"] == 1
    assert db.query(Beach).count() == 1
    assert db.query(BeachCondition).count() == 2


def test_dataset_id_is_fetched(client, dataset_client, db):
    dataset_client.datasets["ds-1"] = [MURO, {"name": "Es Trenc", "municipality": "Campos"}]

    response = client.post(URL, json={"resource": {"defaultDatasetId": "ds-1"}, "eventType": "ACTOR.RUN.SUCCEEDED"})

    assert response.status_code == 200
    assert dataset_client.calls == ["ds-1"]
    assert response.json()["results"]["created"] == 2
    assert db.query(Beach).count() == 2


def test_empty_body_is_400_without_writes(client, db):
    response = client.post(URL, json={})

    assert response.status_code == 400
    assert "error" in response.json()
    assert db.query(Beach).count() == 0
    assert db.query(BeachCondition).count() == 0


def test_non_list_data_is_400(client):
    response = client.post(URL, json={"data": {"name": "Es Trenc"}})
    assert response.status_code == 400


def test_invalid_json_is_400(client):
    response = client.post(URL, content="not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400


def test_dataset_fetch_failure_is_500(client, dataset_client, db):
    dataset_client.error = DatasetFetchError("ds-x", "API 요청 실패: 503")

    response = client.post(URL, json={"resource": {"defaultDatasetId": "ds-x"}})

    assert response.status_code == 500
    assert "ds-x" in response.json()["error"]
    assert db.query(Beach).count() == 0


def test_unexpected_error_is_500(client, dataset_client):
    dataset_client.error = RuntimeError("boom")

    response = client.post(URL, json={"resource": {"defaultDatasetId": "ds-x"}})

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error", "error": "boom"}


def test_all_records_failing_is_still_200(client):
    response = client.post(URL, json={"data": [{"source_url": "https://x.com/"}, {"url": "https://y.com"}]})

    assert response.status_code == 200
    results = response.json()["results"]
    assert results["errors"] == 2
    assert results["processed"] == 0


def test_old_conditions_are_pruned(client, db):
    beach = Beach(place_id="es_trenc_campos", identity_key="Es Trenc|Campos", name="Es Trenc", municipality="Campos")
    db.add(beach)
    db.commit()
    db.add(BeachCondition(beach_id=beach.id, recorded_at=datetime.utcnow() - timedelta(hours=48)))
    db.commit()

    response = client.post(URL, json={"data": [{"name": "Es Trenc", "municipality": "Campos"}]})

    assert response.json()["results"]["pruned"] == 1
    assert db.query(BeachCondition).count() == 1


def test_pruning_can_be_disabled(client, settings, db):
    settings.prune_conditions = False

    response = client.post(URL, json={"data": [MURO]})

    assert response.json()["results"]["pruned"] is None


def test_other_methods_are_405(client):
    for method in ("GET", "PUT", "PATCH", "DELETE", "TRACE"):
        response = client.request(method, URL)
        assert response.status_code == 405
        assert response.json() == {"message": "Method not allowed"}
        assert response.headers["access-control-allow-origin"] == "*"


def test_head_is_405_with_cors_headers(client):
    response = client.head(URL)

    assert response.status_code == 405
    assert response.headers["access-control-allow-origin"] == "*"


def test_options_returns_cors_headers(client):
    response = client.options(URL)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


def test_post_response_has_cors_headers(client):
    response = client.post(URL, json={"data": []})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["content-type"].startswith("application/json")


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_browser_preflight_is_answered_by_route(client):
    response = client.options(URL, headers={
        "Origin": "https://dashboard.example",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "Content-Type",
    })

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {}
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


def test_dataset_fetch_runs_off_the_event_loop(client, dataset_client):
    loop_states = []

    def fetch_items(dataset_id):
        try:
            asyncio.get_running_loop()
            loop_states.append(True)
        except RuntimeError:
            loop_states.append(False)
        return [MURO]

    dataset_client.fetch_items = fetch_items

    response = client.post(URL, json={"resource": {"defaultDatasetId": "ds-1"}})

    assert response.status_code == 200
    assert loop_states == [False]
