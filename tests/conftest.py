"""
Pytest configuration and shared fixtures.
"""

import itertools
from datetime import datetime, timedelta
from typing import Sequence

import pytest
from sqlalchemy.orm import sessionmaker

from virtualsphere.models.orm_models import (
    UserORM,
    VirtualHumanORM,
    ProjectORM,
    ProjectTagORM,
    ProjectMemberORM,
    TAG_KIND_INTEREST,
    TAG_KIND_GOAL,
)
from virtualsphere.utils.config_loader import config
from virtualsphere.utils.database import create_db_engine, init_db


BASE_TIME = datetime(2024, 1, 1, 9, 0, 0)


@pytest.fixture(autouse=True)
def reset_config():
    """Each test starts from in-code defaults (no config.json loaded)."""
    config.reset()
    yield config
    config.reset()


@pytest.fixture
def engine(tmp_path):
    """Engine bound to a fresh SQLite file with all tables created."""
    db_engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db_session):
    """Create and commit a user; creation times increase in call order."""
    counter = itertools.count()

    def _make_user(
        user_id: str,
        interests: Sequence[str] = (),
        goals: Sequence[str] = (),
        **fields,
    ) -> UserORM:
        fields.setdefault("username", user_id)
        fields.setdefault("created_at", BASE_TIME + timedelta(minutes=next(counter)))
        user = UserORM(user_id=user_id, **fields)
        user.set_tags(TAG_KIND_INTEREST, interests)
        user.set_tags(TAG_KIND_GOAL, goals)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_virtual_human(db_session):
    counter = itertools.count()

    def _make_virtual_human(
        virtual_human_id: str,
        owner_id: str,
        interests: Sequence[str] = (),
        goals: Sequence[str] = (),
    ) -> VirtualHumanORM:
        virtual_human = VirtualHumanORM(
            virtual_human_id=virtual_human_id,
            owner_id=owner_id,
            name=virtual_human_id,
            interests=list(interests),
            goals=list(goals),
            skills=[],
            created_at=BASE_TIME + timedelta(minutes=next(counter)),
        )
        db_session.add(virtual_human)
        db_session.commit()
        return virtual_human

    return _make_virtual_human


@pytest.fixture
def make_project(db_session):
    counter = itertools.count()

    def _make_project(
        project_id: str,
        creator_id: str,
        tags: Sequence[str] = (),
        member_ids: Sequence[str] = (),
        visibility: str = "public",
    ) -> ProjectORM:
        project = ProjectORM(
            project_id=project_id,
            title=f"Project {project_id}",
            creator_id=creator_id,
            visibility=visibility,
            created_at=BASE_TIME + timedelta(minutes=next(counter)),
            tags=[ProjectTagORM(tag=tag) for tag in tags],
            members=[ProjectMemberORM(user_id=uid) for uid in member_ids],
        )
        db_session.add(project)
        db_session.commit()
        return project

    return _make_project
