from fastapi import FastAPI
from contextlib import asynccontextmanager
from api.routes import webhook
from core.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 시작/종료 시 실행되는 lifespan 이벤트"""
    # 시작 시 테이블이 없으면 생성
    init_db()
    yield


app = FastAPI(
    title="Beachwatch API",
    description="해변 상태 크롤링 웹훅 수신 API",
    version="1.0.0",
    lifespan=lifespan
)

# 라우터 등록 (CORS 헤더와 OPTIONS 응답은 웹훅 라우터가 직접 처리)
app.include_router(webhook.router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Beachwatch API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
