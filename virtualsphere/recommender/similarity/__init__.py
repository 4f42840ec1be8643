"""
유사도 추천 모듈
관심사/목표 태그 겹침 기반 유사 사용자 추천
"""

from .user_recommender import SimilarityRecommender

from .scoring import (
    calculate_overlap_ratio,
    calculate_similarity
)

__all__ = [
    "SimilarityRecommender",
    "calculate_overlap_ratio",
    "calculate_similarity"
]
