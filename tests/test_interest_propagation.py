"""
Tests for services/interest_propagation_service.py - bounded tag fan-out.
"""

import asyncio

import pytest

from virtualsphere.models.orm_models import VirtualHumanORM
from virtualsphere.services.interest_propagation_service import (
    InterestPropagationService,
    merge_new_tags,
)
from virtualsphere.utils.config_loader import config


class TestMergeNewTags:
    """Test the per-record bounded merge."""

    def test_adds_first_new_tags_in_input_order(self):
        merged, added = merge_new_tags(["x", "y"], ["y", "z", "w"], max_new=2)

        assert merged == ["x", "y", "z", "w"]
        assert added == ["z", "w"]

    def test_respects_cap(self):
        merged, added = merge_new_tags(["x"], ["a", "b", "c"], max_new=2)

        assert merged == ["x", "a", "b"]
        assert added == ["a", "b"]

    def test_goal_cap_of_one(self):
        merged, added = merge_new_tags(["g1"], ["g1", "g2", "g3"], max_new=1)

        assert merged == ["g1", "g2"]
        assert added == ["g2"]

    def test_existing_tags_keep_order(self):
        merged, _ = merge_new_tags(["c", "a", "b"], ["a", "d"], max_new=2)

        assert merged[:3] == ["c", "a", "b"]

    def test_nothing_new(self):
        merged, added = merge_new_tags(["x", "y"], ["y", "x"], max_new=2)

        assert merged == ["x", "y"]
        assert added == []

    def test_duplicate_incoming_tags_count_once(self):
        merged, added = merge_new_tags([], ["a", "a", "b"], max_new=2)

        assert added == ["a", "b"]

    def test_does_not_mutate_input(self):
        existing = ["x"]
        merge_new_tags(existing, ["y"], max_new=2)

        assert existing == ["x"]


class FailingLoadService(InterestPropagationService):
    """Fails to load the listed virtual humans."""

    def __init__(self, *args, broken_ids=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.broken_ids = set(broken_ids)

    def _load_dependent(self, session, virtual_human_id):
        if virtual_human_id in self.broken_ids:
            raise RuntimeError(f"cannot load {virtual_human_id}")
        return super()._load_dependent(session, virtual_human_id)


def _reload(session_factory, virtual_human_id):
    session = session_factory()
    try:
        return session.get(VirtualHumanORM, virtual_human_id)
    finally:
        session.close()


class TestPropagationService:
    """Test fan-out to owned virtual humans."""

    @pytest.fixture
    def owner(self, make_user):
        return make_user("owner", interests=["x", "y"], goals=["g1"])

    def test_updates_every_owned_virtual_human(self, owner, make_user, make_virtual_human, session_factory):
        make_user("someone-else")
        make_virtual_human("vh-1", "owner", interests=["x", "y"], goals=["g1"])
        make_virtual_human("vh-2", "owner", interests=[], goals=[])
        make_virtual_human("vh-other", "someone-else", interests=["x"])

        service = InterestPropagationService(session_factory, config)
        result = asyncio.run(service.propagate("owner", ["y", "z", "w"], ["g1", "g2", "g3"]))

        assert sorted(result.updated) == ["vh-1", "vh-2"]
        assert result.failed == []

        vh1 = _reload(session_factory, "vh-1")
        assert vh1.interests == ["x", "y", "z", "w"]
        assert vh1.goals == ["g1", "g2"]

        vh2 = _reload(session_factory, "vh-2")
        assert vh2.interests == ["y", "z"]
        assert vh2.goals == ["g1"]

        assert _reload(session_factory, "vh-other").interests == ["x"]

    def test_dependent_with_nothing_new_is_unchanged(self, owner, make_virtual_human, session_factory):
        make_virtual_human("vh-1", "owner", interests=["a", "b"])

        service = InterestPropagationService(session_factory, config)
        result = asyncio.run(service.propagate("owner", ["b", "a"], None))

        assert result.unchanged == ["vh-1"]
        assert result.updated == []
        assert _reload(session_factory, "vh-1").interests == ["a", "b"]

    def test_one_failure_does_not_block_others(self, owner, make_virtual_human, session_factory):
        make_virtual_human("vh-ok-1", "owner", interests=["x"])
        make_virtual_human("vh-broken", "owner", interests=["x"])
        make_virtual_human("vh-ok-2", "owner", interests=["x"])

        service = FailingLoadService(session_factory, config, broken_ids=["vh-broken"])
        result = asyncio.run(service.propagate("owner", ["new"], None))

        assert result.failed == ["vh-broken"]
        assert sorted(result.updated) == ["vh-ok-1", "vh-ok-2"]
        assert _reload(session_factory, "vh-ok-1").interests == ["x", "new"]
        assert _reload(session_factory, "vh-ok-2").interests == ["x", "new"]
        assert _reload(session_factory, "vh-broken").interests == ["x"]

    def test_owner_without_virtual_humans(self, owner, session_factory):
        service = InterestPropagationService(session_factory, config)
        result = asyncio.run(service.propagate("owner", ["a"], ["g"]))

        assert result.attempted == 0

    def test_nothing_to_propagate(self, owner, make_virtual_human, session_factory):
        make_virtual_human("vh-1", "owner", interests=["x"])

        service = InterestPropagationService(session_factory, config)
        result = asyncio.run(service.propagate("owner", None, None))

        assert result.attempted == 0
        assert _reload(session_factory, "vh-1").interests == ["x"]

    def test_listing_failure_is_swallowed(self, owner, session_factory):
        def broken_factory():
            raise RuntimeError("database unavailable")

        service = InterestPropagationService(broken_factory, config)
        result = asyncio.run(service.propagate("owner", ["a"], None))

        assert result.attempted == 0

    def test_caps_come_from_config(self, owner, make_virtual_human, session_factory, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(
            '{"propagation": {"max_new_interests": 1, "max_new_goals": 0}}', encoding="utf-8"
        )
        config.load_config(str(config_file))
        make_virtual_human("vh-1", "owner", interests=[], goals=[])

        service = InterestPropagationService(session_factory, config)
        asyncio.run(service.propagate("owner", ["a", "b"], ["g"]))

        vh = _reload(session_factory, "vh-1")
        assert vh.interests == ["a"]
        assert vh.goals == []
