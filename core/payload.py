from typing import Callable, List

from core.errors import MalformedPayload, MissingDatasetIdentifier


def extract_records(body, fetch_dataset: Callable[[str], list]) -> List[dict]:
    """
    웹훅 본문에서 크롤링 레코드 목록을 꺼냅니다.

    두 가지 형태를 모두 지원합니다:
    - 간접: resource.defaultDatasetId → fetch_dataset으로 데이터셋 조회
    - 직접: eventData.data 또는 data에 레코드 배열이 포함됨

    Raises:
        MalformedPayload: 본문이 객체가 아니거나 결과가 배열이 아닌 경우
        MissingDatasetIdentifier: 데이터셋 ID도 인라인 데이터도 없는 경우
    """
    if not isinstance(body, dict):
        raise MalformedPayload("Webhook body must be a JSON object")

    resource = body.get("resource")
    dataset_id = resource.get("defaultDatasetId") if isinstance(resource, dict) else None

    if isinstance(dataset_id, str) and dataset_id.strip():
        records = fetch_dataset(dataset_id.strip())
        if not isinstance(records, list):
            raise MalformedPayload(f"Dataset {dataset_id} did not return a list")
        return records

    event_data = body.get("eventData")
    if isinstance(event_data, dict) and "data" in event_data:
        records = event_data["data"]
    elif "data" in body:
        records = body["data"]
    else:
        raise MissingDatasetIdentifier()

    if not isinstance(records, list):
        raise MalformedPayload()
    return records
