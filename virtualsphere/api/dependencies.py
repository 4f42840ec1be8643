"""
FastAPI 의존성 주입
DB 세션, Config, 추천 엔진, 전파 서비스 등을 제공합니다.
"""

from typing import Generator
from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker
from virtualsphere.utils.database import get_db, SessionLocal
from virtualsphere.utils.config_loader import config, ConfigLoader
from virtualsphere.recommender.similarity import SimilarityRecommender
from virtualsphere.recommender.project_recommender import ProjectRecommender
from virtualsphere.services.interest_propagation_service import InterestPropagationService


def get_database() -> Generator[Session, None, None]:
    """
    데이터베이스 세션 의존성

    Usage:
        @router.get("/endpoint")
        def endpoint(db: Session = Depends(get_database)):
            ...
    """
    yield from get_db()


def get_session_factory() -> sessionmaker:
    """요청 밖에서 독립 세션이 필요한 작업용 (관심사 전파 등)"""
    return SessionLocal


def get_config() -> ConfigLoader:
    """
    Config 의존성

    Returns:
        ConfigLoader: 싱글톤 config 인스턴스
    """
    # 최신 설정 반영 (핫리로드)
    config.reload_if_changed()
    return config


def get_similarity_recommender(
    db: Session = Depends(get_database),
    cfg: ConfigLoader = Depends(get_config)
) -> SimilarityRecommender:
    """유사 사용자 추천 엔진 의존성"""
    return SimilarityRecommender(db, cfg)


def get_project_recommender(
    db: Session = Depends(get_database),
    cfg: ConfigLoader = Depends(get_config)
) -> ProjectRecommender:
    """프로젝트 추천 엔진 의존성"""
    return ProjectRecommender(db, cfg)


def get_propagation_service(
    session_factory: sessionmaker = Depends(get_session_factory),
    cfg: ConfigLoader = Depends(get_config)
) -> InterestPropagationService:
    """가상 휴먼 관심사 전파 서비스 의존성"""
    return InterestPropagationService(session_factory, cfg)
