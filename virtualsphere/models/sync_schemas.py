"""
Pydantic schemas for data synchronization with the VirtualSphere backend.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class SyncBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class UserSyncDto(SyncBase):
    user_id: str = Field(alias="_id")
    username: str
    full_name: Optional[str] = Field(None, alias="fullName")
    profile_image: Optional[str] = Field(None, alias="profileImage")
    bio: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class VirtualHumanSyncDto(SyncBase):
    virtual_human_id: str = Field(alias="_id")
    owner_id: str = Field(alias="owner")
    name: str
    personality: Optional[str] = None
    description: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    is_active: bool = Field(True, alias="isActive")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class ProjectSyncDto(SyncBase):
    project_id: str = Field(alias="_id")
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    progress: int = 0
    visibility: str = "public"
    creator_id: str = Field(alias="creator")
    tags: List[str] = Field(default_factory=list)
    member_ids: List[str] = Field(default_factory=list, alias="memberIds")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class SyncData(BaseModel):
    users: List[UserSyncDto] = Field(default_factory=list)
    virtual_humans: List[VirtualHumanSyncDto] = Field(default_factory=list)
    projects: List[ProjectSyncDto] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.users or self.virtual_humans or self.projects)
