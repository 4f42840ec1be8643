"""
Interest Propagation Service

When a user's interests or goals change, a few of the *new* tags are appended
to each virtual human the user owns. Growth is bounded per update event
(2 interests / 1 goal by default) and existing tags are never removed or
reordered.

Each virtual human is updated in its own session on a worker thread and all
updates are awaited together. A failure on one virtual human is logged and
recorded in the result; it never stops the others and never raises.
"""
import asyncio
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from virtualsphere.models.orm_models import VirtualHumanORM, dedupe_tags
from virtualsphere.models.schemas import PropagationResult
from virtualsphere.utils.config_loader import ConfigLoader
from virtualsphere.utils.logger import get_logger

logger = get_logger(__name__)


def merge_new_tags(existing: Sequence[str], incoming: Sequence[str], max_new: int) -> Tuple[List[str], List[str]]:
    """
    Append at most ``max_new`` tags from ``incoming`` that ``existing`` lacks.

    Tags are taken in input order. ``existing`` keeps its order and content.

    Returns:
        (merged tag list, tags that were added)
    """
    current = set(existing)
    added = [tag for tag in dedupe_tags(incoming) if tag not in current][:max(max_new, 0)]
    return list(existing) + added, added


class DependentNotFoundError(LookupError):
    """Virtual human disappeared between listing and updating."""


class InterestPropagationService:
    def __init__(self, session_factory: sessionmaker, config: ConfigLoader):
        self.session_factory = session_factory
        limits = config.get_propagation_limits()
        self.max_new_interests = limits["interests"]
        self.max_new_goals = limits["goals"]

    def _list_dependent_ids(self, owner_id: str) -> List[str]:
        session: Session = self.session_factory()
        try:
            query = (
                select(VirtualHumanORM.virtual_human_id)
                .where(VirtualHumanORM.owner_id == owner_id)
                .order_by(VirtualHumanORM.created_at, VirtualHumanORM.virtual_human_id)
            )
            return list(session.scalars(query).all())
        finally:
            session.close()

    def _load_dependent(self, session: Session, virtual_human_id: str) -> VirtualHumanORM:
        virtual_human = session.get(VirtualHumanORM, virtual_human_id)
        if virtual_human is None:
            raise DependentNotFoundError(f"가상 휴먼을 찾을 수 없습니다: {virtual_human_id}")
        return virtual_human

    def _update_dependent(
        self,
        virtual_human_id: str,
        interests: Optional[Sequence[str]],
        goals: Optional[Sequence[str]]
    ) -> bool:
        """Apply the bounded merge to one virtual human. Returns True if it changed."""
        session: Session = self.session_factory()
        try:
            virtual_human = self._load_dependent(session, virtual_human_id)
            changed = False

            if interests:
                merged, added = merge_new_tags(virtual_human.interests or [], interests, self.max_new_interests)
                if added:
                    virtual_human.interests = merged
                    changed = True

            if goals:
                merged, added = merge_new_tags(virtual_human.goals or [], goals, self.max_new_goals)
                if added:
                    virtual_human.goals = merged
                    changed = True

            if changed:
                virtual_human.updated_at = datetime.now()
                session.commit()

            return changed
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    async def propagate(
        self,
        owner_id: str,
        interests: Optional[Sequence[str]] = None,
        goals: Optional[Sequence[str]] = None
    ) -> PropagationResult:
        """
        Propagate new interests/goals to every virtual human owned by ``owner_id``.

        Never raises: listing failures yield an empty result, per-dependent
        failures land in ``result.failed``.
        """
        result = PropagationResult(owner_id=owner_id)

        if not interests and not goals:
            return result

        try:
            dependent_ids = await asyncio.to_thread(self._list_dependent_ids, owner_id)
        except Exception as e:
            logger.error(f"가상 휴먼 목록 조회 실패: owner_id={owner_id}, error={e}", exc_info=True)
            return result

        if not dependent_ids:
            return result

        outcomes = await asyncio.gather(
            *(
                asyncio.to_thread(self._update_dependent, vh_id, interests, goals)
                for vh_id in dependent_ids
            ),
            return_exceptions=True,
        )

        for vh_id, outcome in zip(dependent_ids, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    f"가상 휴먼 관심사 업데이트 실패: virtual_human_id={vh_id}, error={outcome}",
                    exc_info=outcome,
                )
                result.failed.append(vh_id)
            elif outcome:
                result.updated.append(vh_id)
            else:
                result.unchanged.append(vh_id)

        logger.info(
            f"사용자 {owner_id}의 가상 휴먼 관심사/목표 전파 완료 "
            f"(updated={len(result.updated)}, unchanged={len(result.unchanged)}, failed={len(result.failed)})"
        )
        return result
