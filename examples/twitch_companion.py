"""
트위치 방송 컴패니언 실행

- 시작 시 EventSub 웹훅 구독 재조정 (빠진 구독 생성, 죽은 구독 재생성)
- 채널 채팅 수신 → 오버레이(Socket.IO) 로 전달, 방송인의 !winner 로 추첨
- 채널 포인트 리워드 → 스크립트 실행 / Snap 필터 / 추첨 참가 + OBS 장면 전환

.env 에 TWITCH_* 값을 넣고, tokens.json 은 twitch_auth_example.py 로 먼저 발급받으세요.
리워드 설정은 config/rewards.json.

실행: python examples/twitch_companion.py  (프로젝트 루트에서)
"""

import sys
from pathlib import Path

# 프로젝트 루트를 path에 넣어서 'import src' 가능하게 함
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from dotenv import load_dotenv

from src.app import build_context, run
from src.utils import Settings, setup_logging

load_dotenv(Path(__file__).resolve().parent.parent / ".env")
LOG_DIR = setup_logging()


async def main():
    missing = Settings.missing()
    if missing:
        print("❌ .env에 다음 값을 설정해주세요:")
        for name in missing:
            print(f"   - {name}")
        return

    settings = Settings.from_env()
    ctx = build_context(settings)

    print("=" * 60)
    print(f"트위치 컴패니언 시작: #{settings.username}")
    print(f"  웹훅 콜백: {settings.callback_url}")
    print(f"  오버레이: http://{settings.server_host}:{settings.server_port}/")
    print(f"  로그: {LOG_DIR}")
    print("종료: Ctrl+C")
    print("=" * 60)

    await run(ctx)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n종료합니다.")
