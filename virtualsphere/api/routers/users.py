"""
사용자 API 라우터
관심사/목표/기술 업데이트와 가상 휴먼 관심사 전파를 처리합니다.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from virtualsphere.models.orm_models import UserORM, TAG_KIND_INTEREST, TAG_KIND_GOAL, dedupe_tags
from virtualsphere.models.schemas import InterestUpdateRequest, InterestUpdateResponse
from virtualsphere.api.dependencies import get_database, get_propagation_service
from virtualsphere.services.interest_propagation_service import InterestPropagationService
from virtualsphere.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def _apply_interest_update(db: Session, user_id: str, request: InterestUpdateRequest) -> Optional[Dict[str, Any]]:
    """
    사용자 관심사/목표/기술 교체 후 커밋

    Returns:
        dict: 업데이트된 사용자 태그 스냅샷 (사용자가 없으면 None)
    """
    user = db.get(UserORM, user_id)
    if user is None:
        return None

    if request.interests is not None:
        user.set_tags(TAG_KIND_INTEREST, request.interests)
    if request.goals is not None:
        user.set_tags(TAG_KIND_GOAL, request.goals)
    if request.skills is not None:
        user.skills = dedupe_tags(request.skills)

    user.updated_at = datetime.now()
    db.commit()
    db.refresh(user)

    return {
        "user_id": user.user_id,
        "interests": user.interests,
        "goals": user.goals,
        "skills": user.skills or [],
    }


@router.put("/{user_id}/interests", response_model=InterestUpdateResponse)
async def update_interests(
    user_id: str,
    request: InterestUpdateRequest,
    db: Session = Depends(get_database),
    propagation_service: InterestPropagationService = Depends(get_propagation_service)
):
    """
    사용자 관심사 업데이트 API

    주어진 항목(interests/goals/skills)만 교체합니다.
    관심사나 목표가 바뀌면 소유한 가상 휴먼에 새 태그 일부를 전파합니다.
    전파 실패는 응답의 propagation.failed에만 기록되며 업데이트 자체를 실패시키지 않습니다.
    """
    if request.is_empty():
        raise HTTPException(status_code=400, detail="업데이트할 데이터가 없습니다.")

    snapshot = await run_in_threadpool(_apply_interest_update, db, user_id, request)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"사용자를 찾을 수 없습니다: {user_id}")

    logger.info(f"사용자 {user_id}의 관심사/목표/기술이 업데이트되었습니다.")

    propagation = None
    if request.interests is not None or request.goals is not None:
        propagation = await propagation_service.propagate(user_id, request.interests, request.goals)

    return InterestUpdateResponse(**snapshot, propagation=propagation)
