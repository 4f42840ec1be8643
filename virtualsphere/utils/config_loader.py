"""
설정 파일 로더 모듈
config.json과 .env 파일을 로드하고 핫리로드 기능을 제공합니다.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional
from datetime import datetime
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "config/config.json"
DEFAULT_SQLITE_URL = "sqlite:///./data/virtualsphere.db"


class AppSettings(BaseSettings):
    """환경 변수 로드 클래스"""
    # VirtualSphere 메인 백엔드 (동기화 API)
    backend_url: str = "http://localhost:5000/api"
    sync_secret_key: str = ""

    # Database (DATABASE_URL 우선, 없으면 POSTGRES_* 조합, 둘 다 없으면 SQLite)
    database_url: Optional[str] = None
    postgres_host: Optional[str] = None
    postgres_port: int = 5432
    postgres_db: Optional[str] = None
    postgres_user: Optional[str] = None
    postgres_password: Optional[str] = None

    config_path: str = DEFAULT_CONFIG_PATH

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding='utf-8', extra='ignore')

    def get_database_url(self) -> str:
        """사용할 데이터베이스 URL을 조립합니다."""
        if self.database_url:
            return self.database_url
        if self.postgres_host and self.postgres_db:
            return (
                f"postgresql://{self.postgres_user}:{self.postgres_password}@"
                f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            )
        return DEFAULT_SQLITE_URL


class ConfigLoader:
    """설정 파일 로더 클래스 (싱글톤 패턴)"""

    _instance = None
    _config: Optional[Dict[str, Any]] = None
    _config_path: Optional[Path] = None
    _last_loaded: Optional[datetime] = None
    _settings: Optional[AppSettings] = None

    def __new__(cls):
        """싱글톤 인스턴스 생성"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """초기화 (싱글톤이므로 한 번만 실행됨)"""
        if self._settings is None:
            self._settings = AppSettings()
            logger.info(f"환경 변수 로드 완료 (Backend URL: {self._settings.backend_url})")

    def load_config(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        설정 파일을 로드합니다.

        Args:
            config_path: config.json 파일 경로 (None이면 AppSettings.config_path)

        Returns:
            설정 딕셔너리

        Raises:
            FileNotFoundError: 설정 파일이 없을 때
            json.JSONDecodeError: JSON 파싱 실패 시
        """
        self._config_path = Path(config_path or self.settings.config_path)

        if not self._config_path.exists():
            logger.error(f"설정 파일을 찾을 수 없습니다: {self._config_path}")
            raise FileNotFoundError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, 'r', encoding='utf-8') as f:
                self._config = json.load(f)

            self._last_loaded = datetime.now()
            logger.info(f"설정 파일 로드 완료: {self._config_path}")

            return self._config

        except json.JSONDecodeError as e:
            logger.error(f"설정 파일 JSON 파싱 실패: {e}")
            raise

    def reload_if_changed(self) -> bool:
        """
        설정 파일이 변경되었으면 다시 로드합니다.

        Returns:
            재로드 여부 (True: 재로드됨, False: 변경 없음)
        """
        if self._config_path is None or self._config is None:
            return False

        try:
            file_mtime = datetime.fromtimestamp(self._config_path.stat().st_mtime)

            if file_mtime > self._last_loaded:
                logger.info("설정 파일이 변경되어 재로드합니다.")
                self.load_config(str(self._config_path))
                return True

            return False

        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"설정 재로드 중 오류 발생, 기존 설정 유지: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        설정 값을 가져옵니다. 점(.)으로 중첩된 키를 지원합니다.

        Args:
            key: 설정 키 (예: "similarity.weights.interest")
            default: 키가 없을 때 반환할 기본값

        Returns:
            설정 값 또는 기본값

        Example:
            config.get("similarity.candidate_pool_size")  # 20
            config.get("propagation.max_new_goals")  # 1
        """
        if self._config is None:
            return default

        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_similarity_weights(self) -> Dict[str, float]:
        """
        유사도 가중치를 반환합니다.

        Returns:
            가중치 딕셔너리 {"interest": 0.6, "goal": 0.4}
        """
        return {
            "interest": float(self.get("similarity.weights.interest", 0.6)),
            "goal": float(self.get("similarity.weights.goal", 0.4)),
        }

    def get_propagation_limits(self) -> Dict[str, int]:
        """가상 휴먼 관심사/목표 전파 상한을 반환합니다."""
        return {
            "interests": int(self.get("propagation.max_new_interests", 2)),
            "goals": int(self.get("propagation.max_new_goals", 1)),
        }

    def reset(self) -> None:
        """로드된 설정을 비웁니다. (테스트 및 재초기화용)"""
        self._config = None
        self._config_path = None
        self._last_loaded = None

    @property
    def config(self) -> Dict[str, Any]:
        """전체 설정 딕셔너리를 반환합니다."""
        return self._config or {}

    @property
    def settings(self) -> AppSettings:
        """환경 변수 설정을 반환합니다."""
        if self._settings is None:
            self._settings = AppSettings()
        return self._settings


# 전역 설정 인스턴스 (싱글톤)
config = ConfigLoader()
