"""
데이터베이스 초기화 스크립트

이 스크립트를 실행하면 beaches, beach_conditions 테이블을 생성하고
현재 저장된 해변/상태 건수를 출력합니다.
"""
import sys
from core.database import init_db, get_session_factory
from models.beach import Beach
from models.beach_condition import BeachCondition


def main():
    db = get_session_factory()()

    try:
        # 테이블 생성
        print("데이터베이스 테이블 생성 중...")
        init_db()
        print("테이블 생성 완료!")

        print(f"해변: {db.query(Beach).count()}건")
        print(f"상태 기록: {db.query(BeachCondition).count()}건")
    except Exception as e:
        print(f"오류 발생: {e}")
        print(f"오류 타입: {type(e).__name__}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
