"""
Tests for the FastAPI routers.
"""

import json

import pytest
from fastapi.testclient import TestClient

from virtualsphere.api.main import app, scheduler, schedule_data_sync, SYNC_JOB_ID
from virtualsphere.api.dependencies import (
    get_database,
    get_session_factory,
    get_similarity_recommender,
    get_propagation_service,
)
from virtualsphere.models.orm_models import VirtualHumanORM
from virtualsphere.recommender.exceptions import UpstreamReadError
from virtualsphere.services.interest_propagation_service import InterestPropagationService
from virtualsphere.utils.config_loader import config


@pytest.fixture
def client(session_factory):
    def override_database():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_database] = override_database
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestRoot:
    def test_root_lists_endpoints(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "VirtualSphere Recommendation API"


class TestSimilarUsersEndpoint:
    """Test GET /recommendations/users/{user_id}."""

    def test_returns_ranked_users(self, client, make_user):
        make_user("subject", interests=["a", "b", "c"])
        make_user("close", interests=["b", "c", "d"])
        make_user("far", interests=["a", "x", "y", "z"])

        response = client.get("/recommendations/users/subject")

        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == "subject"
        assert body["total_count"] == 2
        assert [u["user_id"] for u in body["users"]] == ["close", "far"]
        assert body["users"][0]["similarity_score"] == pytest.approx(0.4)

    def test_limit_query(self, client, make_user):
        make_user("subject", interests=["a"])
        for i in range(4):
            make_user(f"cand-{i}", interests=["a"])

        response = client.get("/recommendations/users/subject", params={"limit": 2})

        assert response.status_code == 200
        assert response.json()["total_count"] == 2

    def test_invalid_limit_rejected(self, client, make_user):
        make_user("subject", interests=["a"])

        response = client.get("/recommendations/users/subject", params={"limit": 0})

        assert response.status_code == 422

    def test_unknown_user_is_404(self, client):
        response = client.get("/recommendations/users/ghost")

        assert response.status_code == 404

    def test_user_without_tags_gets_empty_list(self, client, make_user):
        make_user("subject")
        make_user("other", interests=["a"])

        response = client.get("/recommendations/users/subject")

        assert response.status_code == 200
        assert response.json()["users"] == []

    def test_upstream_failure_is_503_not_empty(self, client):
        class BrokenRecommender:
            def recommend(self, user_id, limit=None):
                raise UpstreamReadError("candidate_pool", RuntimeError("db down"))

        app.dependency_overrides[get_similarity_recommender] = lambda: BrokenRecommender()

        response = client.get("/recommendations/users/subject")

        assert response.status_code == 503
        assert response.headers["retry-after"] == "1"


class TestProjectsEndpoint:
    """Test GET /recommendations/projects/{user_id}."""

    def test_returns_matching_projects(self, client, make_user, make_project):
        make_user("owner")
        make_user("me", interests=["ai"])
        make_project("p-ai", "owner", tags=["ai"])
        make_project("p-other", "owner", tags=["cooking"])

        response = client.get("/recommendations/projects/me")

        assert response.status_code == 200
        body = response.json()
        assert [p["project_id"] for p in body["projects"]] == ["p-ai"]
        assert body["projects"][0]["matched_tags"] == ["ai"]
        assert body["projects"][0]["creator"]["username"] == "owner"

    def test_unknown_user_is_404(self, client):
        assert client.get("/recommendations/projects/ghost").status_code == 404


class TestInterestUpdateEndpoint:
    """Test PUT /users/{user_id}/interests."""

    def test_updates_user_and_propagates(self, client, make_user, make_virtual_human, session_factory):
        make_user("owner", interests=["x"], goals=["g1"])
        make_virtual_human("vh-1", "owner", interests=["x", "y"], goals=["g1"])

        response = client.put(
            "/users/owner/interests",
            json={"interests": ["y", "z", "w", "v"], "goals": ["g1", "g2", "g3"]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["interests"] == ["y", "z", "w", "v"]
        assert body["goals"] == ["g1", "g2", "g3"]
        assert body["propagation"]["updated"] == ["vh-1"]

        session = session_factory()
        try:
            vh = session.get(VirtualHumanORM, "vh-1")
            assert vh.interests == ["x", "y", "z", "w"]
            assert vh.goals == ["g1", "g2"]
        finally:
            session.close()

    def test_skills_only_update_skips_propagation(self, client, make_user, make_virtual_human):
        make_user("owner", interests=["x"])
        make_virtual_human("vh-1", "owner", interests=["x"])

        response = client.put("/users/owner/interests", json={"skills": ["python", "python", "sql"]})

        assert response.status_code == 200
        body = response.json()
        assert body["skills"] == ["python", "sql"]
        assert body["interests"] == ["x"]
        assert body["propagation"] is None

    def test_failed_dependent_does_not_fail_update(self, client, make_user, make_virtual_human, session_factory):
        class BrokenDependentService(InterestPropagationService):
            def _load_dependent(self, session, virtual_human_id):
                if virtual_human_id == "vh-broken":
                    raise RuntimeError("write failed")
                return super()._load_dependent(session, virtual_human_id)

        make_user("owner", interests=["x"])
        make_virtual_human("vh-ok", "owner", interests=["x"])
        make_virtual_human("vh-broken", "owner", interests=["x"])
        app.dependency_overrides[get_propagation_service] = (
            lambda: BrokenDependentService(session_factory, config)
        )

        response = client.put("/users/owner/interests", json={"interests": ["x", "new"]})

        assert response.status_code == 200
        body = response.json()
        assert body["interests"] == ["x", "new"]
        assert body["propagation"]["updated"] == ["vh-ok"]
        assert body["propagation"]["failed"] == ["vh-broken"]

    def test_empty_body_is_400(self, client, make_user):
        make_user("owner")

        response = client.put("/users/owner/interests", json={})

        assert response.status_code == 400

    def test_unknown_user_is_404(self, client):
        response = client.put("/users/ghost/interests", json={"interests": ["a"]})

        assert response.status_code == 404

    def test_updated_interests_change_recommendations(self, client, make_user):
        make_user("subject", interests=["a"])
        make_user("other", interests=["b"])

        assert client.get("/recommendations/users/subject").json()["users"] == []

        client.put("/users/subject/interests", json={"interests": ["b"]})

        users = client.get("/recommendations/users/subject").json()["users"]
        assert [u["user_id"] for u in users] == ["other"]


class TestOperationalEndpoints:
    def test_health(self, client):
        response = client.get("/recommendations/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"
        assert response.json()["similarity"]["weights"] == {"interest": 0.6, "goal": 0.4}

    def test_config_defaults(self, client):
        body = client.get("/recommendations/config").json()

        assert body["similarity"]["candidate_pool_size"] == 20
        assert body["propagation"] == {"interests": 2, "goals": 1}

    def test_stats(self, client, make_user, make_virtual_human, make_project):
        make_user("u1", interests=["a", "b"], goals=["g"])
        make_user("u2", interests=["a"])
        make_virtual_human("vh-1", "u1")
        make_project("p-1", "u1", tags=["a"])

        body = client.get("/recommendations/stats").json()

        assert body["users"]["total"] == 2
        assert body["tags"] == {"interests": 2, "goals": 1}
        assert body["virtual_humans"]["total"] == 1
        assert body["projects"]["total"] == 1

    def test_scheduler_status_when_disabled(self, client):
        body = client.get("/scheduler/status").json()

        assert body["scheduler_running"] is False
        assert body["jobs"] == []


class TestSyncSchedule:
    """Test the cron job built from the sync settings."""

    def test_job_uses_configured_timezone_and_cron(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps({"sync": {"enabled": True, "timezone": "UTC", "cron": {"hour": 3, "minute": 15}}}),
            encoding="utf-8",
        )
        config.load_config(str(config_file))

        job = schedule_data_sync()
        try:
            fields = {field.name: str(field) for field in job.trigger.fields}
            assert str(job.trigger.timezone) == "UTC"
            assert fields["hour"] == "3"
            assert fields["minute"] == "15"
        finally:
            scheduler.remove_job(SYNC_JOB_ID)

    def test_job_defaults_to_seoul_time(self):
        job = schedule_data_sync()
        try:
            assert str(job.trigger.timezone) == "Asia/Seoul"
        finally:
            scheduler.remove_job(SYNC_JOB_ID)
