"""
외부 협력 객체: OBS 장면 전환, Snap 필터, 추첨, 스크립트 실행, Spotify 재생 곡
"""

from .giveaways import GiveawayController
from .launcher import launch_script
from .obs_client import OBSController
from .snap import SnapController
from .spotify import SpotifyNowPlaying

__all__ = ["GiveawayController", "launch_script", "OBSController", "SnapController", "SpotifyNowPlaying"]
