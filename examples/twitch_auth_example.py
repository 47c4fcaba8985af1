"""
트위치 유저 토큰(tokens.json) 발급 예제

사용 방법:
1. 프로젝트 루트에 .env 파일 생성 후 TWITCH_CLIENT_ID, TWITCH_CLIENT_SECRET 입력
2. 트위치 개발자 콘솔에서 OAuth 리디렉션 URL 에 http://localhost:17563 추가
3. 이 스크립트 실행 → 브라우저에서 방송인 계정으로 로그인/승인
4. tokens.json 이 저장되면 twitch_companion.py 실행

실행: python examples/twitch_auth_example.py  (프로젝트 루트에서)
"""

import sys
from pathlib import Path

# 프로젝트 루트를 path에 넣어서 'import src' 가능하게 함
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from dotenv import load_dotenv
from twitchAPI.oauth import UserAuthenticator
from twitchAPI.twitch import Twitch

from src.twitch.auth import DEFAULT_USER_SCOPES, TokenProvider, UserTokens
from src.utils import Settings

# 프로젝트 루트의 .env 로드 (examples/에서 실행해도 동작)
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


async def main():
    settings = Settings.from_env()
    if not settings.client_id or not settings.client_secret:
        print("❌ .env 파일에 TWITCH_CLIENT_ID, TWITCH_CLIENT_SECRET을 설정해주세요.")
        return

    provider = TokenProvider(settings.client_id, settings.client_secret, settings.tokens_path)
    scopes = list(DEFAULT_USER_SCOPES)

    print("=" * 60)
    print("요청 스코프:")
    for scope in scopes:
        print(f"  - {scope.value}")
    print("=" * 60)
    print("브라우저가 열리면 방송인 계정으로 로그인 후 승인해주세요.")

    twitch = await Twitch(settings.client_id, settings.client_secret)
    try:
        auth = UserAuthenticator(twitch, scopes, force_verify=False)
        token, refresh_token = await auth.authenticate()
        provider.save_user_tokens(
            UserTokens(token, refresh_token, [s.value for s in scopes])
        )
        print("\n✅ 유저 토큰 발급 성공!")
        print(f"   저장 위치: {settings.tokens_path}")
        print(f"   Access Token: {token[:20]}...")
    except Exception as e:
        print(f"\n❌ 오류 발생: {e}")
    finally:
        await twitch.close()


if __name__ == "__main__":
    asyncio.run(main())
