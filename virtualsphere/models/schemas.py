"""
Pydantic 데이터 모델 스키마
API 요청/응답 및 데이터 검증에 사용됩니다.
"""

from datetime import datetime
from typing import Optional, List
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator


# ========== Enum 정의 ==========

class Visibility(str, Enum):
    """프로젝트 공개 범위"""
    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"


# ========== 유사 사용자 추천 ==========

class ScoredCandidate(BaseModel):
    """유사도 점수가 붙은 추천 사용자 (요청 단위로만 존재)"""
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    full_name: Optional[str] = None
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    similarity_score: float = Field(..., ge=0.0, le=1.0, description="가중 태그 겹침 점수")
    rank: int = Field(..., ge=1, description="추천 순위")


class SimilarUsersResponse(BaseModel):
    """유사 사용자 추천 응답"""
    user_id: str
    users: List[ScoredCandidate]
    total_count: int = Field(..., description="추천된 총 개수")
    generated_at: datetime = Field(default_factory=datetime.now, description="생성 시각")


# ========== 프로젝트 추천 ==========

class ProjectCreator(BaseModel):
    """프로젝트 생성자 요약"""
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    full_name: Optional[str] = None
    profile_image: Optional[str] = None


class ProjectRecommendationItem(BaseModel):
    """추천 프로젝트 항목"""
    project_id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    progress: int = 0
    tags: List[str] = Field(default_factory=list)
    matched_tags: List[str] = Field(default_factory=list, description="사용자 관심사/목표와 일치한 태그")
    creator_id: str
    creator: Optional[ProjectCreator] = None


class ProjectRecommendationResponse(BaseModel):
    """프로젝트 추천 응답"""
    user_id: str
    projects: List[ProjectRecommendationItem]
    total_count: int
    generated_at: datetime = Field(default_factory=datetime.now)


# ========== 관심사 업데이트 / 전파 ==========

class InterestUpdateRequest(BaseModel):
    """관심사/목표/기술 업데이트 요청 (주어진 항목만 교체)"""
    interests: Optional[List[str]] = None
    goals: Optional[List[str]] = None
    skills: Optional[List[str]] = None

    @field_validator('interests', 'goals', 'skills')
    @classmethod
    def strip_tags(cls, v):
        """앞뒤 공백 제거 후 빈 태그는 버림"""
        if v is None:
            return v
        return [tag.strip() for tag in v if tag and tag.strip()]

    def is_empty(self) -> bool:
        return self.interests is None and self.goals is None and self.skills is None


class PropagationResult(BaseModel):
    """가상 휴먼 관심사 전파 결과"""
    owner_id: str
    updated: List[str] = Field(default_factory=list, description="태그가 추가된 가상 휴먼 ID")
    unchanged: List[str] = Field(default_factory=list, description="추가할 새 태그가 없던 가상 휴먼 ID")
    failed: List[str] = Field(default_factory=list, description="조회/저장에 실패한 가상 휴먼 ID")

    @property
    def attempted(self) -> int:
        return len(self.updated) + len(self.unchanged) + len(self.failed)


class InterestUpdateResponse(BaseModel):
    """관심사 업데이트 응답"""
    user_id: str
    interests: List[str]
    goals: List[str]
    skills: List[str]
    propagation: Optional[PropagationResult] = None
    updated_at: datetime = Field(default_factory=datetime.now)
