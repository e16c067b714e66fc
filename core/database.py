from functools import lru_cache

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import get_settings

Base = declarative_base()


def build_engine(database_url: str):
    """데이터베이스 URL로 SQLAlchemy 엔진 생성"""
    if database_url.startswith("sqlite"):
        # 메모리 SQLite는 커넥션 하나를 공유해야 테이블이 유지됨
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False
        )
        _enable_sqlite_savepoints(engine)
        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False  # SQL 쿼리 로깅 (개발 시에는 True로 설정)
    )


def _enable_sqlite_savepoints(engine):
    # pysqlite의 암묵적 트랜잭션 처리를 끄고 BEGIN을 직접 보내야 SAVEPOINT가 동작함
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@lru_cache
def get_engine():
    """설정의 DATABASE_URL로 만든 기본 엔진 (프로세스당 한 번 생성)"""
    return build_engine(get_settings().database_url)


@lru_cache
def get_session_factory():
    return build_session_factory(get_engine())


def get_db():
    """데이터베이스 세션 의존성"""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db(engine=None):
    """데이터베이스 초기화 (테이블 생성)"""
    # 모델을 import 해야 metadata에 테이블이 등록됨
    from models import beach, beach_condition  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())
