"""
Data Synchronization Service

Fetches changed users, virtual humans and projects from the VirtualSphere
backend and merges them into the local recommendation store.
"""
import json
import os
import asyncio
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from virtualsphere.clients.backend_client import ApiClient
from virtualsphere.models.sync_schemas import SyncData
from virtualsphere.models.orm_models import (
    UserORM,
    VirtualHumanORM,
    ProjectORM,
    ProjectTagORM,
    ProjectMemberORM,
    TAG_KIND_INTEREST,
    TAG_KIND_GOAL,
    dedupe_tags,
)
from virtualsphere.utils.config_loader import config
from virtualsphere.utils.database import SessionLocal
from virtualsphere.utils.logger import get_logger

logger = get_logger(__name__)

SYNC_STATUS_FILE = 'data/sync_status.json'


class DataSyncService:
    def __init__(
        self,
        api_client: ApiClient,
        session_factory: sessionmaker = SessionLocal,
        status_file: Optional[str] = None,
    ):
        self.api_client = api_client
        self.session_factory = session_factory
        self.status_file = status_file or config.get("sync.status_file", SYNC_STATUS_FILE)

    def _get_last_sync_time(self) -> Optional[datetime]:
        """Reads the last successful sync time from the status file."""
        if not os.path.exists(self.status_file):
            return None
        try:
            with open(self.status_file, 'r') as f:
                data = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read sync status file: {e}")
            return None

        value = data.get('lastSyncTime')
        return datetime.fromisoformat(value) if value else None

    def _save_sync_time(self, sync_time: datetime):
        """Saves the successful sync time to the status file."""
        try:
            directory = os.path.dirname(self.status_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.status_file, 'w') as f:
                json.dump({'lastSyncTime': sync_time.isoformat()}, f, indent=2)
            logger.info(f"Successfully saved new sync time: {sync_time.isoformat()}")
        except IOError as e:
            logger.error(f"Failed to save sync status file: {e}", exc_info=True)

    def _merge_data(self, db: Session, data: SyncData):
        """Upserts synchronized records into the local store."""
        for user_data in data.users:
            user = db.get(UserORM, user_data.user_id) or UserORM(user_id=user_data.user_id)
            user.username = user_data.username
            user.full_name = user_data.full_name
            user.profile_image = user_data.profile_image
            user.bio = user_data.bio
            user.skills = dedupe_tags(user_data.skills)
            user.created_at = user_data.created_at
            user.updated_at = user_data.updated_at
            user.set_tags(TAG_KIND_INTEREST, user_data.interests)
            user.set_tags(TAG_KIND_GOAL, user_data.goals)
            db.add(user)

        # owners must exist before their virtual humans / projects are flushed
        db.flush()

        for vh_data in data.virtual_humans:
            db.merge(VirtualHumanORM(
                virtual_human_id=vh_data.virtual_human_id,
                owner_id=vh_data.owner_id,
                name=vh_data.name,
                personality=vh_data.personality,
                description=vh_data.description,
                interests=dedupe_tags(vh_data.interests),
                goals=dedupe_tags(vh_data.goals),
                skills=dedupe_tags(vh_data.skills),
                is_active=vh_data.is_active,
                created_at=vh_data.created_at,
                updated_at=vh_data.updated_at,
            ))

        for project_data in data.projects:
            project = db.get(ProjectORM, project_data.project_id) or ProjectORM(project_id=project_data.project_id)
            project.title = project_data.title
            project.description = project_data.description
            project.category = project_data.category
            project.status = project_data.status
            project.progress = project_data.progress
            project.visibility = project_data.visibility
            project.creator_id = project_data.creator_id
            project.created_at = project_data.created_at
            project.updated_at = project_data.updated_at
            project.tags = [ProjectTagORM(tag=tag) for tag in dedupe_tags(project_data.tags)]
            project.members = [ProjectMemberORM(user_id=uid) for uid in dedupe_tags(project_data.member_ids)]
            db.add(project)

        logger.info(
            f"Merged {len(data.users)} users, {len(data.virtual_humans)} virtual humans, "
            f"{len(data.projects)} projects."
        )

    async def run_sync(self) -> SyncData:
        """
        Runs one synchronization pass and returns what was fetched.
        """
        logger.info("Starting data synchronization pipeline...")
        last_sync_time = self._get_last_sync_time()
        logger.info(f"Last sync time: {last_sync_time or 'Never'}")

        # 1. Fetch data from the backend in parallel
        current_sync_time = datetime.now(timezone.utc)
        users, virtual_humans, projects = await asyncio.gather(
            self.api_client.get_users(last_sync_time),
            self.api_client.get_virtual_humans(last_sync_time),
            self.api_client.get_projects(last_sync_time),
        )
        new_data = SyncData(users=users, virtual_humans=virtual_humans, projects=projects)

        if new_data.is_empty():
            logger.info("No new data to synchronize.")
            self._save_sync_time(current_sync_time)
            return new_data

        # 2. Merge data in a single transaction
        db: Session = self.session_factory()
        try:
            self._merge_data(db, new_data)
            db.commit()
            logger.info("Database transaction committed successfully.")
        except Exception as e:
            logger.error(f"Data synchronization pipeline failed: {e}", exc_info=True)
            db.rollback()
            logger.warning("Database transaction was rolled back.")
            raise
        finally:
            db.close()

        # 3. Save the new sync time
        self._save_sync_time(current_sync_time)
        logger.info("Data synchronization pipeline completed successfully.")
        return new_data
