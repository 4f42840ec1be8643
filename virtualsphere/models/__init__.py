"""
Models 패키지
데이터 모델과 스키마를 제공합니다.
"""

from .schemas import (
    # Enums
    Visibility,

    # 유사 사용자 추천
    ScoredCandidate,
    SimilarUsersResponse,

    # 프로젝트 추천
    ProjectCreator,
    ProjectRecommendationItem,
    ProjectRecommendationResponse,

    # 관심사 업데이트 / 전파
    InterestUpdateRequest,
    InterestUpdateResponse,
    PropagationResult,
)

__all__ = [
    # Enums
    "Visibility",

    # 유사 사용자 추천
    "ScoredCandidate",
    "SimilarUsersResponse",

    # 프로젝트 추천
    "ProjectCreator",
    "ProjectRecommendationItem",
    "ProjectRecommendationResponse",

    # 관심사 업데이트 / 전파
    "InterestUpdateRequest",
    "InterestUpdateResponse",
    "PropagationResult",
]
