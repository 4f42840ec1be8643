"""
Utils 패키지
공통 유틸리티 함수들을 제공합니다.
"""

from .logger import get_logger
from .config_loader import config
from .database import get_db, health_check, init_db, Base, engine, SessionLocal

__all__ = [
    "get_logger",
    "config",
    "get_db",
    "health_check",
    "init_db",
    "Base",
    "engine",
    "SessionLocal",
]
