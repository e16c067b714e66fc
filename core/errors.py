"""
웹훅 처리 중 발생하는 예외 정의

- PayloadError 계열: 요청 본문 문제 (400)
- DatasetFetchError: 외부 데이터셋 조회 실패 (500)
"""


class WebhookError(Exception):
    """웹훅 처리 예외의 기본 클래스"""


class PayloadError(WebhookError):
    """요청 본문에서 레코드 목록을 꺼낼 수 없는 경우"""


class MissingDatasetIdentifier(PayloadError):
    def __init__(self, message: str = "No dataset id or inline data found in webhook payload"):
        super().__init__(message)


class MalformedPayload(PayloadError):
    def __init__(self, message: str = "Webhook payload data is not a list"):
        super().__init__(message)


class DatasetFetchError(WebhookError):
    def __init__(self, dataset_id: str, message: str):
        self.dataset_id = dataset_id
        super().__init__(f"Dataset {dataset_id}: {message}")
