from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import Optional

from core.config import Settings, get_settings
from core.database import get_db
from core.errors import DatasetFetchError, MalformedPayload, PayloadError
from core.identity import IdentityPolicy, get_policy
from core.payload import extract_records
from core.reconcile import Reconciler
from core.retention import prune_conditions
from fetch.dataset import DatasetClient, get_dataset_client

router = APIRouter(
    prefix="/v1/webhook",
    tags=["webhook"]
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


class WebhookResults(BaseModel):
    total: int
    created: int  # 새로 만든 해변 수
    updated: int  # 기존 해변 갱신 수
    processed: int  # 추가된 상태 행 수
    skipped: int
    errors: int
    pruned: Optional[int] = None  # 보존 기간이 지나 삭제된 상태 행 수


class WebhookResponse(BaseModel):
    success: bool
    message: str
    results: WebhookResults


def json_response(status_code: int, content: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


def get_identity_policy(settings: Settings = Depends(get_settings)) -> IdentityPolicy:
    """식별 정책 의존성"""
    return get_policy(settings.identity_policy)


def process_delivery(body, db: Session, dataset_client: DatasetClient, policy: IdentityPolicy, settings: Settings):
    """레코드 추출 → 반영 → 오래된 상태 행 정리 (DB와 외부 API를 쓰는 블로킹 구간)"""
    records = extract_records(body, dataset_client.fetch_items)
    print(f"해변 레코드 {len(records)}건 처리 시작 (식별 정책: {policy.name})")

    result = Reconciler(db, policy).run(records)

    pruned = None
    if settings.prune_conditions:
        pruned = prune_conditions(
            db,
            now=datetime.utcnow(),
            retention=timedelta(hours=settings.condition_retention_hours)
        )
    return result, pruned


@router.post("/apify", response_model=WebhookResponse)
async def receive_apify_webhook(
    request: Request,
    db: Session = Depends(get_db),
    dataset_client: DatasetClient = Depends(get_dataset_client),
    policy: IdentityPolicy = Depends(get_identity_policy),
    settings: Settings = Depends(get_settings)
):
    """
    Apify 크롤링 결과 웹훅 수신

    본문 형태:
    - **resource.defaultDatasetId**: 데이터셋 ID (레코드는 Apify API로 조회)
    - **eventData.data** 또는 **data**: 레코드 배열 직접 포함

    레코드 일부가 실패해도 200과 함께 처리 결과 카운트를 반환합니다.
    """
    print("Apify 웹훅 수신")

    try:
        try:
            body = await request.json()
        except ValueError:
            raise MalformedPayload("Request body is not valid JSON")

        # 이벤트 루프를 막지 않도록 스레드풀에서 실행
        result, pruned = await run_in_threadpool(process_delivery, body, db, dataset_client, policy, settings)

        print(
            f"웹훅 처리 완료: 생성 {result.created}, 갱신 {result.updated}, "
            f"상태 {result.processed}, 건너뜀 {result.skipped}, 오류 {result.errors} / 전체 {result.total}"
        )

        response = WebhookResponse(
            success=True,
            message="Beach data processed successfully",
            results=WebhookResults(pruned=pruned, **result.summary())
        )
        return json_response(200, response.model_dump())

    except PayloadError as e:
        print(f"잘못된 웹훅 본문: {e}")
        return json_response(400, {"message": "Invalid webhook payload", "error": str(e)})
    except DatasetFetchError as e:
        print(f"데이터셋 조회 실패: {e}")
        return json_response(500, {"message": "Dataset fetch failed", "error": str(e)})
    except Exception as e:
        print(f"웹훅 처리 실패: {type(e).__name__}: {e}")
        return json_response(500, {"message": "Internal server error", "error": str(e)})


@router.options("/apify")
async def webhook_preflight():
    """CORS 사전 요청"""
    return json_response(200, {})


@router.api_route("/apify", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "TRACE", "CONNECT"], include_in_schema=False)
async def webhook_method_not_allowed():
    return json_response(405, {"message": "Method not allowed"})
