"""
프로젝트 추천 엔진

사용자의 관심사/목표와 태그가 겹치는 공개 프로젝트 중
아직 참여하지 않은 프로젝트를 추천합니다.

조회 실패 시에는 빈 목록으로 대체합니다. (추천 보조 경로의 허용된 저하 응답)
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from virtualsphere.models.orm_models import (
    ProjectORM,
    ProjectTagORM,
    ProjectMemberORM,
)
from virtualsphere.models.schemas import ProjectCreator, ProjectRecommendationItem, Visibility
from virtualsphere.recommender.similarity import SimilarityRecommender
from virtualsphere.utils.config_loader import ConfigLoader
from virtualsphere.utils.logger import get_logger

logger = get_logger(__name__)


class ProjectRecommender:
    """
    태그 매칭 프로젝트 추천

    사용자 조회는 SimilarityRecommender와 같은 규칙을 따릅니다. (없으면 404)
    """

    def __init__(self, db: Session, config: ConfigLoader):
        self.db = db
        self.config = config
        self.default_limit = int(config.get("project_recommendation.default_limit", 5))
        self.visibilities = config.get(
            "project_recommendation.visibilities",
            [Visibility.PUBLIC.value, Visibility.UNLISTED.value]
        )

    def recommend(self, user_id: str, limit: Optional[int] = None) -> List[ProjectRecommendationItem]:
        """
        추천 프로젝트 조회

        Args:
            user_id: 사용자 ID
            limit: 추천 개수 (None이면 기본값 5)

        Returns:
            List[ProjectRecommendationItem]: 추천 프로젝트 목록

        Raises:
            SubjectNotFoundError: 사용자가 없을 때
            UpstreamReadError: 사용자 조회 실패 시
        """
        if limit is None:
            limit = self.default_limit

        subject = SimilarityRecommender(self.db, self.config).load_subject(user_id)
        tags = set(subject.interests) | set(subject.goals)

        if not tags:
            return []

        joined_project_ids = select(ProjectMemberORM.project_id).where(ProjectMemberORM.user_id == user_id)
        tagged_project_ids = select(ProjectTagORM.project_id).where(ProjectTagORM.tag.in_(list(tags)))

        query = (
            select(ProjectORM)
            .options(selectinload(ProjectORM.tags), selectinload(ProjectORM.creator))
            .where(ProjectORM.visibility.in_(self.visibilities))
            .where(ProjectORM.project_id.not_in(joined_project_ids))
            .where(ProjectORM.project_id.in_(tagged_project_ids))
            .order_by(ProjectORM.created_at, ProjectORM.project_id)
            .limit(limit)
        )

        try:
            projects = list(self.db.scalars(query).all())
        except SQLAlchemyError:
            logger.error(f"추천 프로젝트 조회 중 오류 발생, 빈 목록으로 대체: user_id={user_id}", exc_info=True)
            return []

        return [
            ProjectRecommendationItem(
                project_id=project.project_id,
                title=project.title,
                description=project.description,
                category=project.category,
                status=project.status,
                progress=project.progress or 0,
                tags=project.tag_names,
                matched_tags=[tag for tag in project.tag_names if tag in tags],
                creator_id=project.creator_id,
                creator=ProjectCreator.model_validate(project.creator) if project.creator else None,
            )
            for project in projects
        ]
