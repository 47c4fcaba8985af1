"""
오버레이/컨트롤 화면 연동: Socket.IO 싱크와 로컬 HTTP 서버.

- OBS에서 브라우저 소스 URL을 http://127.0.0.1:8765/ 로 설정.
- 서버 앱은 src.overlay.server.create_app 으로 생성.
"""

from .sink import EventSink, SocketIOSink, create_socketio_server

__all__ = ["EventSink", "SocketIOSink", "create_socketio_server"]
