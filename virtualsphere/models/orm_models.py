"""
SQLAlchemy ORM 모델 정의
데이터베이스 테이블과 Python 클래스를 매핑합니다.

메인 백엔드의 사용자/가상 휴먼/프로젝트 문서를 추천용으로 미러링합니다.
"""

from datetime import datetime
from typing import Iterable, List

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Text, JSON, Index
)
from sqlalchemy.orm import relationship

from virtualsphere.utils.database import Base
from .schemas import Visibility


TAG_KIND_INTEREST = "interest"
TAG_KIND_GOAL = "goal"


def dedupe_tags(tags: Iterable[str]) -> List[str]:
    """입력 순서를 유지하면서 중복/빈 태그를 제거합니다."""
    seen = set()
    result = []
    for tag in tags:
        if not tag or tag in seen:
            continue
        seen.add(tag)
        result.append(tag)
    return result


# ========================================
# 1. User 테이블
# ========================================
class UserORM(Base):
    """사용자 (추천 대상 Subject / Candidate)"""
    __tablename__ = 'users'

    user_id = Column(String(64), primary_key=True)
    username = Column(String(30), nullable=False)
    full_name = Column(String(100))
    profile_image = Column(Text)
    bio = Column(Text)
    skills = Column(JSON, default=list)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime)

    # 관계
    tags = relationship(
        "UserTagORM",
        back_populates="user",
        order_by="UserTagORM.position",
        cascade="all, delete-orphan",
    )
    virtual_humans = relationship("VirtualHumanORM", back_populates="owner")

    def _tags_of(self, kind: str) -> List[str]:
        return [t.tag for t in self.tags if t.kind == kind]

    @property
    def interests(self) -> List[str]:
        return self._tags_of(TAG_KIND_INTEREST)

    @property
    def goals(self) -> List[str]:
        return self._tags_of(TAG_KIND_GOAL)

    def set_tags(self, kind: str, tags: Iterable[str]) -> None:
        """
        특정 종류(관심사/목표)의 태그 목록을 통째로 교체합니다.

        Args:
            kind: TAG_KIND_INTEREST 또는 TAG_KIND_GOAL
            tags: 새 태그 목록 (입력 순서 유지, 중복 제거)
        """
        kept = [t for t in self.tags if t.kind != kind]
        new_rows = [
            UserTagORM(kind=kind, tag=tag, position=position)
            for position, tag in enumerate(dedupe_tags(tags))
        ]
        self.tags = kept + new_rows


# ========================================
# 2. UserTag 테이블
# ========================================
class UserTagORM(Base):
    """사용자 관심사/목표 태그"""
    __tablename__ = 'user_tag'
    __table_args__ = (
        Index('ix_user_tag_kind_tag', 'kind', 'tag'),
    )

    tag_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey('users.user_id'), nullable=False, index=True)
    kind = Column(String(10), nullable=False)
    tag = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    user = relationship("UserORM", back_populates="tags")


# ========================================
# 3. VirtualHuman 테이블
# ========================================
class VirtualHumanORM(Base):
    """사용자가 소유한 가상 휴먼 (관심사 전파 대상)"""
    __tablename__ = 'virtual_human'

    virtual_human_id = Column(String(64), primary_key=True)
    owner_id = Column(String(64), ForeignKey('users.user_id'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    personality = Column(String(50))
    description = Column(Text)

    # 순서가 있는 태그 목록 (JSON 배열)
    interests = Column(JSON, nullable=False, default=list)
    goals = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)

    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime)

    owner = relationship("UserORM", back_populates="virtual_humans")


# ========================================
# 4. Project 테이블
# ========================================
class ProjectORM(Base):
    """협업 프로젝트"""
    __tablename__ = 'project'

    project_id = Column(String(64), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    category = Column(String(50))
    status = Column(String(20), default="planning")
    progress = Column(Integer, default=0)
    visibility = Column(String(10), nullable=False, default=Visibility.PUBLIC.value)

    creator_id = Column(String(64), ForeignKey('users.user_id'), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime)

    creator = relationship("UserORM")
    tags = relationship("ProjectTagORM", back_populates="project", cascade="all, delete-orphan")
    members = relationship("ProjectMemberORM", back_populates="project", cascade="all, delete-orphan")

    @property
    def tag_names(self) -> List[str]:
        return [t.tag for t in self.tags]


# ========================================
# 5. ProjectTag 테이블
# ========================================
class ProjectTagORM(Base):
    """프로젝트 태그"""
    __tablename__ = 'project_tag'

    project_tag_id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(64), ForeignKey('project.project_id'), nullable=False, index=True)
    tag = Column(String(100), nullable=False, index=True)

    project = relationship("ProjectORM", back_populates="tags")


# ========================================
# 6. ProjectMember 테이블
# ========================================
class ProjectMemberORM(Base):
    """프로젝트 참여자"""
    __tablename__ = 'project_member'

    project_member_id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(64), ForeignKey('project.project_id'), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey('users.user_id'), nullable=False, index=True)
    role = Column(String(20), default="member")

    project = relationship("ProjectORM", back_populates="members")
