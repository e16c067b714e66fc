import requests

from core.config import Settings, get_settings
from core.errors import DatasetFetchError


class DatasetClient:
    """Apify 데이터셋 조회 클라이언트"""

    def __init__(self, base_url: str, token: str = "", timeout: float = 60.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        # 세션을 주입하지 않으면 requests 모듈 함수(requests.get)를 그대로 사용
        self.http = session or requests

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatasetClient":
        return cls(
            base_url=settings.apify_api_base_url,
            token=settings.apify_api_token,
            timeout=settings.dataset_fetch_timeout
        )

    def items_url(self, dataset_id: str) -> str:
        return f"{self.base_url}/v2/datasets/{dataset_id}/items"

    def fetch_items(self, dataset_id: str) -> list:
        """데이터셋의 전체 레코드를 가져옵니다. 실패하면 DatasetFetchError."""
        params = {"clean": "true", "format": "json"}
        if self.token:
            params["token"] = self.token

        try:
            response = self.http.get(self.items_url(dataset_id), params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise DatasetFetchError(dataset_id, f"요청 실패: {e}")

        print(f"데이터셋 조회 {dataset_id}: HTTP {response.status_code}")

        if response.status_code != 200:
            raise DatasetFetchError(dataset_id, f"API 요청 실패: {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            raise DatasetFetchError(dataset_id, f"JSON 파싱 실패: {response.text[:200]}")

        return data


def get_dataset_client() -> DatasetClient:
    """데이터셋 클라이언트 의존성"""
    return DatasetClient.from_settings(get_settings())
