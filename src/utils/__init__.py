"""유틸리티 모듈"""
from .config import Settings
from .logging_config import setup_logging

__all__ = ["Settings", "setup_logging"]
