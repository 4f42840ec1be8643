"""
유사 사용자 추천 엔진
관심사/목표 태그 겹침으로 비슷한 사용자를 찾아 점수 순으로 반환합니다.
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from virtualsphere.models.orm_models import (
    UserORM,
    UserTagORM,
    TAG_KIND_INTEREST,
    TAG_KIND_GOAL,
)
from virtualsphere.models.schemas import ScoredCandidate
from virtualsphere.recommender.exceptions import SubjectNotFoundError, UpstreamReadError
from virtualsphere.utils.config_loader import ConfigLoader
from virtualsphere.utils.logger import get_logger

from .scoring import calculate_similarity

logger = get_logger(__name__)

DEFAULT_CANDIDATE_POOL_SIZE = 20
DEFAULT_LIMIT = 5


class SimilarityRecommender:
    """
    유사 사용자 추천 엔진

    특징:
    - 관심사 또는 목표가 하나라도 겹치는 사용자만 후보로 조회 (최대 pool_size명)
    - 관심사 0.6 / 목표 0.4 가중 겹침 점수
    - 점수 내림차순 정렬 (동점은 후보 조회 순서 유지)
    - 조회 실패는 빈 결과가 아니라 UpstreamReadError로 전달
    """

    def __init__(self, db: Session, config: ConfigLoader):
        """
        Args:
            db: SQLAlchemy 세션
            config: 설정 로더
        """
        self.db = db
        self.config = config

        weights = config.get_similarity_weights()
        self.interest_weight = weights["interest"]
        self.goal_weight = weights["goal"]
        self.pool_size = int(config.get("similarity.candidate_pool_size", DEFAULT_CANDIDATE_POOL_SIZE))
        self.default_limit = int(config.get("similarity.default_limit", DEFAULT_LIMIT))

        if self.interest_weight < 0 or self.goal_weight < 0 or self.interest_weight + self.goal_weight > 1.0:
            raise ValueError(
                f"유사도 가중치가 올바르지 않습니다: interest={self.interest_weight}, goal={self.goal_weight}"
            )
        if self.pool_size < 1:
            raise ValueError(f"후보 풀 크기는 1 이상이어야 합니다: {self.pool_size}")

        logger.debug(
            f"SimilarityRecommender 초기화 (interest_weight={self.interest_weight}, "
            f"goal_weight={self.goal_weight}, pool_size={self.pool_size})"
        )

    def load_subject(self, user_id: str) -> UserORM:
        """
        추천을 받을 사용자 조회

        Raises:
            SubjectNotFoundError: 사용자가 없을 때
            UpstreamReadError: DB 조회 실패 시
        """
        try:
            subject = self.db.get(UserORM, user_id)
        except SQLAlchemyError as e:
            logger.error(f"사용자 조회 실패: user_id={user_id}", exc_info=True)
            raise UpstreamReadError("subject", e) from e

        if subject is None:
            raise SubjectNotFoundError(user_id)

        return subject

    def fetch_candidate_pool(
        self,
        user_id: str,
        interests: Sequence[str],
        goals: Sequence[str]
    ) -> List[UserORM]:
        """
        관심사 또는 목표가 겹치는 다른 사용자 조회 (최대 pool_size명)

        Args:
            user_id: 제외할 본인 ID
            interests: 본인 관심사
            goals: 본인 목표

        Returns:
            List[UserORM]: 후보 사용자 목록 (생성 순)

        Raises:
            UpstreamReadError: DB 조회 실패 시
        """
        matching_user_ids = (
            select(UserTagORM.user_id)
            .where(UserTagORM.user_id != user_id)
            .where(
                or_(
                    and_(UserTagORM.kind == TAG_KIND_INTEREST, UserTagORM.tag.in_(list(interests))),
                    and_(UserTagORM.kind == TAG_KIND_GOAL, UserTagORM.tag.in_(list(goals))),
                )
            )
        )

        query = (
            select(UserORM)
            .options(selectinload(UserORM.tags))
            .where(UserORM.user_id.in_(matching_user_ids))
            .order_by(UserORM.created_at, UserORM.user_id)
            .limit(self.pool_size)
        )

        try:
            return list(self.db.scalars(query).all())
        except SQLAlchemyError as e:
            logger.error(f"후보 사용자 조회 실패: user_id={user_id}", exc_info=True)
            raise UpstreamReadError("candidate_pool", e) from e

    def score_candidates(
        self,
        interests: Sequence[str],
        goals: Sequence[str],
        candidates: Sequence[UserORM]
    ) -> List[Tuple[UserORM, float]]:
        """후보별 유사도 계산 후 내림차순 정렬 (stable sort)"""
        scored = [
            (
                candidate,
                calculate_similarity(
                    interests, goals,
                    candidate.interests, candidate.goals,
                    self.interest_weight, self.goal_weight
                )
            )
            for candidate in candidates
        ]
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored

    def recommend(self, user_id: str, limit: Optional[int] = None) -> List[ScoredCandidate]:
        """
        메인 추천 함수

        Args:
            user_id: 추천을 받을 사용자 ID
            limit: 추천 개수 (None이면 기본값 5)

        Returns:
            List[ScoredCandidate]: 유사도 내림차순 추천 목록
            (관심사와 목표가 모두 없으면 빈 목록)

        Raises:
            ValueError: limit이 1 미만일 때
            SubjectNotFoundError: 사용자가 없을 때
            UpstreamReadError: 사용자/후보 조회 실패 시
        """
        if limit is None:
            limit = self.default_limit
        if limit < 1:
            raise ValueError(f"limit은 1 이상이어야 합니다: {limit}")

        logger.info(f"유사 사용자 추천 시작: user_id={user_id}, limit={limit}")

        # 1. 사용자 정보 조회
        subject = self.load_subject(user_id)
        interests = subject.interests
        goals = subject.goals

        if not interests and not goals:
            logger.info(f"관심사/목표가 없어 빈 결과 반환: user_id={user_id}")
            return []

        # 2. 후보 조회
        candidates = self.fetch_candidate_pool(user_id, interests, goals)
        logger.info(f"후보 사용자: {len(candidates)}명")

        # 3. 점수 계산 및 정렬
        scored = self.score_candidates(interests, goals, candidates)

        # 4. 상위 limit명 변환
        recommendations = [
            ScoredCandidate(
                user_id=candidate.user_id,
                username=candidate.username,
                full_name=candidate.full_name,
                profile_image=candidate.profile_image,
                bio=candidate.bio,
                interests=candidate.interests,
                goals=candidate.goals,
                similarity_score=score,
                rank=rank,
            )
            for rank, (candidate, score) in enumerate(scored[:limit], start=1)
        ]

        logger.info(f"유사 사용자 추천 완료: {len(recommendations)}명 반환")
        return recommendations
