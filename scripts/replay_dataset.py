"""
Apify 데이터셋을 웹훅 수신 서버로 다시 보내는 스크립트

수신 서버는 재시도를 하지 않으므로, 장애 중에 놓친 크롤링 결과는
이 스크립트로 데이터셋 ID를 다시 전달해서 반영합니다.

사용법:
    python scripts/replay_dataset.py abc123 def456
    python scripts/replay_dataset.py --file dataset_ids.txt --url http://localhost:8000
"""
import argparse
import sys
import time

import requests

BASE_URL = "http://localhost:8000"
WEBHOOK_PATH = "/api/v1/webhook/apify"


def read_dataset_ids(path):
    """파일에서 데이터셋 ID 목록 읽기 (빈 줄과 # 주석 무시)"""
    with open(path, encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip() and not line.strip().startswith("#")]


def replay_dataset(base_url, dataset_id, timeout=300):
    """데이터셋 ID 하나를 웹훅으로 전달하고 처리 결과를 반환합니다.

    Args:
        base_url: 수신 서버 주소
        dataset_id: Apify 데이터셋 ID
        timeout: 요청 타임아웃 (초)

    Returns:
        서버가 돌려준 results 딕셔너리

    Raises:
        RuntimeError: 서버가 200 이외의 응답을 준 경우
    """
    response = requests.post(
        f"{base_url.rstrip('/')}{WEBHOOK_PATH}",
        json={"resource": {"defaultDatasetId": dataset_id}},
        timeout=timeout
    )

    if response.status_code != 200:
        raise RuntimeError(f"HTTP {response.status_code}: {response.text}")

    return response.json()["results"]


def replay_all(base_url, dataset_ids, delay=0.5):
    success_count = 0
    fail_count = 0

    for dataset_id in dataset_ids:
        print(f"\n[{dataset_id}] 전송 중...", end=" ")
        try:
            results = replay_dataset(base_url, dataset_id)
            print(
                f"✓ 성공 (전체 {results['total']}, 생성 {results['created']}, "
                f"상태 {results['processed']}, 오류 {results['errors']})"
            )
            success_count += 1
        except requests.exceptions.Timeout:
            print("✗ 타임아웃")
            fail_count += 1
        except Exception as e:
            print(f"✗ 오류: {str(e)}")
            fail_count += 1

        time.sleep(delay)

    print("\n" + "=" * 50)
    print(f"성공: {success_count}개")
    print(f"실패: {fail_count}개")
    print("=" * 50)
    return success_count, fail_count


def main(argv=None):
    parser = argparse.ArgumentParser(description="Apify 데이터셋 재전송 스크립트")
    parser.add_argument("dataset_ids", nargs="*", help="재전송할 데이터셋 ID")
    parser.add_argument("--file", help="데이터셋 ID 목록 파일 (한 줄에 하나)")
    parser.add_argument("--url", default=BASE_URL, help=f"수신 서버 주소 (기본값: {BASE_URL})")
    parser.add_argument("--delay", type=float, default=0.5, help="요청 사이 대기 시간 (초)")
    args = parser.parse_args(argv)

    dataset_ids = list(args.dataset_ids)
    if args.file:
        dataset_ids.extend(read_dataset_ids(args.file))

    if not dataset_ids:
        print("❌ 데이터셋 ID를 하나 이상 입력해야 합니다.")
        parser.print_help()
        return 1

    _, fail_count = replay_all(args.url, dataset_ids, delay=args.delay)
    return 1 if fail_count else 0


if __name__ == "__main__":
    sys.exit(main())
