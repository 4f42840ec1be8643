"""
추천 API 라우터
유사 사용자 추천과 프로젝트 추천 결과를 반환합니다.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from virtualsphere.models.schemas import SimilarUsersResponse, ProjectRecommendationResponse
from virtualsphere.api.dependencies import (
    get_database,
    get_config,
    get_session_factory,
    get_similarity_recommender,
    get_project_recommender,
)
from virtualsphere.recommender.exceptions import SubjectNotFoundError, UpstreamReadError
from virtualsphere.recommender.similarity import SimilarityRecommender
from virtualsphere.recommender.project_recommender import ProjectRecommender
from virtualsphere.utils.config_loader import ConfigLoader
from virtualsphere.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


@router.get("/users/{user_id}", response_model=SimilarUsersResponse)
def recommend_similar_users(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1, description="추천 개수 (기본 5)"),
    recommender: SimilarityRecommender = Depends(get_similarity_recommender)
):
    """
    유사 사용자 추천 API

    관심사 60% + 목표 40% 가중 겹침 점수 순으로 다른 사용자를 반환합니다.

    - 관심사/목표가 없는 사용자: 200 + 빈 목록
    - 존재하지 않는 사용자: 404
    - 저장소 조회 실패: 503 (재시도 가능, 빈 목록으로 대체하지 않음)
    """
    logger.info(f"유사 사용자 추천 요청 수신: user_id={user_id}, limit={limit}")

    try:
        users = recommender.recommend(user_id, limit)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UpstreamReadError as e:
        raise HTTPException(
            status_code=503,
            detail="추천 대상 조회에 실패했습니다. 잠시 후 다시 시도해 주세요.",
            headers={"Retry-After": "1"},
        ) from e
    except Exception as e:
        logger.error(f"유사 사용자 추천 실패: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"추천 생성 중 오류 발생: {str(e)}")

    return SimilarUsersResponse(
        user_id=user_id,
        users=users,
        total_count=len(users),
    )


@router.get("/projects/{user_id}", response_model=ProjectRecommendationResponse)
def recommend_projects(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1, description="추천 개수 (기본 5)"),
    recommender: ProjectRecommender = Depends(get_project_recommender)
):
    """
    추천 프로젝트 API

    관심사/목표와 태그가 겹치는 공개 프로젝트 중 아직 참여하지 않은 것을 반환합니다.
    """
    try:
        projects = recommender.recommend(user_id, limit)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UpstreamReadError as e:
        raise HTTPException(status_code=503, detail="사용자 조회에 실패했습니다.") from e
    except Exception as e:
        logger.error(f"프로젝트 추천 실패: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"추천 생성 중 오류 발생: {str(e)}")

    return ProjectRecommendationResponse(
        user_id=user_id,
        projects=projects,
        total_count=len(projects),
    )


@router.get("/health")
def health_check(
    session_factory=Depends(get_session_factory),
    cfg: ConfigLoader = Depends(get_config)
):
    """
    서버 상태 확인

    Returns:
        dict: 서버 상태 정보
    """
    from virtualsphere.utils.database import health_check as db_health

    db_status = db_health(session_factory)

    return {
        "status": "healthy" if db_status else "unhealthy",
        "database": "connected" if db_status else "disconnected",
        "similarity": {
            "weights": cfg.get_similarity_weights(),
            "candidate_pool_size": cfg.get("similarity.candidate_pool_size", 20),
        },
    }


@router.get("/config")
def get_current_config(cfg: ConfigLoader = Depends(get_config)):
    """
    현재 설정 정보 조회

    Returns:
        dict: 현재 설정 정보
    """
    return {
        "similarity": {
            "weights": cfg.get_similarity_weights(),
            "candidate_pool_size": cfg.get("similarity.candidate_pool_size", 20),
            "default_limit": cfg.get("similarity.default_limit", 5),
        },
        "project_recommendation": cfg.get("project_recommendation"),
        "propagation": cfg.get_propagation_limits(),
        "sync": cfg.get("sync"),
    }


@router.get("/stats")
def get_recommendation_stats(db: Session = Depends(get_database)):
    """
    추천 시스템 통계 정보

    Returns:
        dict: 통계 정보
    """
    from virtualsphere.models.orm_models import (
        UserORM,
        UserTagORM,
        VirtualHumanORM,
        ProjectORM,
        TAG_KIND_INTEREST,
        TAG_KIND_GOAL,
    )

    def _count(query) -> int:
        return db.scalar(query) or 0

    try:
        return {
            "users": {
                "total": _count(select(func.count()).select_from(UserORM)),
            },
            "tags": {
                "interests": _count(
                    select(func.count(func.distinct(UserTagORM.tag))).where(UserTagORM.kind == TAG_KIND_INTEREST)
                ),
                "goals": _count(
                    select(func.count(func.distinct(UserTagORM.tag))).where(UserTagORM.kind == TAG_KIND_GOAL)
                ),
            },
            "virtual_humans": {
                "total": _count(select(func.count()).select_from(VirtualHumanORM)),
            },
            "projects": {
                "total": _count(select(func.count()).select_from(ProjectORM)),
            },
        }

    except SQLAlchemyError as e:
        logger.error(f"통계 조회 실패: {e}")
        raise HTTPException(status_code=500, detail="통계 조회 실패")
