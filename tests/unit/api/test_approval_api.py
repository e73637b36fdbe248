"""Tests for the approval HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from approved_revs.api import create_app
from approved_revs.core.types import Actor


def actor_from_headers(request):
    name = request.headers.get("X-Actor", "")
    groups = request.headers.get("X-Groups", "")
    return Actor(name, frozenset(g for g in groups.split(",") if g))


SYSOP = {"X-Actor": "Sally", "X-Groups": "sysop"}
BOB = {"X-Actor": "Bob"}


@pytest.fixture
def make_client(host):
    def _make(engine):
        app = create_app(engine, actor_from_headers, host.items, configure_logging=False)
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client, engine):
    return make_client(engine)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"]["status"] == "healthy"
        assert "version" in data


class TestPageApprovalEndpoints:
    """Test page approval routes."""

    def test_get_state(self, client, main_page):
        response = client.get(f"/api/pages/{main_page.id}/approval", headers=SYSOP)

        assert response.status_code == 200
        assert response.json() == {
            "item_id": 1,
            "title": "Foo",
            "approvable": True,
            "can_approve": True,
            "approved_revision": None,
            "not_approved_banner": False,
            "approve_latest_link": False,
        }

    def test_display_flags(self, make_client, build_engine, host, main_page):
        """Test that enabled display flags reach the page state."""
        client = make_client(build_engine(show_not_approved_banner=True, show_approve_latest_link=True))
        host.latest.revisions[main_page.id] = 9

        data = client.get(f"/api/pages/{main_page.id}/approval", headers=SYSOP).json()
        assert data["not_approved_banner"] is True
        assert data["approve_latest_link"] is True

        data = client.get(f"/api/pages/{main_page.id}/approval", headers=BOB).json()
        assert data["approve_latest_link"] is False

    def test_unknown_item(self, client):
        response = client.get("/api/pages/404/approval", headers=SYSOP)
        assert response.status_code == 404

    def test_approve(self, client, engine, main_page):
        response = client.post(
            f"/api/pages/{main_page.id}/approval",
            json={"revision_id": 7},
            headers=SYSOP,
        )

        assert response.status_code == 200
        assert response.json()["approved_revision"] == 7
        assert engine.repository.get_approved_revision(main_page.id) == 7

    def test_approve_forbidden(self, client, engine, main_page):
        response = client.post(
            f"/api/pages/{main_page.id}/approval",
            json={"revision_id": 7},
            headers=BOB,
        )

        assert response.status_code == 403
        assert engine.repository.get_approved_revision(main_page.id) is None

    def test_anonymous_forbidden(self, client, main_page):
        response = client.post(f"/api/pages/{main_page.id}/approval", json={"revision_id": 7})
        assert response.status_code == 403

    def test_invalid_body(self, client, main_page):
        response = client.post(
            f"/api/pages/{main_page.id}/approval",
            json={"revision_id": 0},
            headers=SYSOP,
        )
        assert response.status_code == 422

    def test_side_effect_failure(self, client, engine, host, main_page):
        """Test 502 with failed steps; the approval itself is kept."""
        host.indexer.fail = True

        response = client.post(
            f"/api/pages/{main_page.id}/approval",
            json={"revision_id": 7},
            headers=SYSOP,
        )

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["action"] == "approve"
        assert detail["failed_steps"] == ["index"]
        assert engine.repository.get_approved_revision(main_page.id) == 7

    def test_unapprove(self, client, engine, main_page):
        client.post(f"/api/pages/{main_page.id}/approval", json={"revision_id": 9, "is_latest": True}, headers=SYSOP)

        response = client.delete(f"/api/pages/{main_page.id}/approval", headers=SYSOP)

        assert response.status_code == 200
        assert response.json()["approved_revision"] is None
        assert engine.repository.get_approved_revision(main_page.id) is None


class TestFileApprovalEndpoints:
    """Test file approval routes."""

    @pytest.fixture
    def file_client(self, make_client, build_engine):
        engine = build_engine({"All Pages": {"group": "sysop"}, "Namespace Permissions": {"File": {}}})
        return make_client(engine)

    def test_approve_and_read_back(self, file_client, file_item):
        body = {"timestamp": "20240101120000", "sha1": "0123456789abcdef"}

        response = file_client.post(f"/api/files/{file_item.id}/approval", json=body, headers=SYSOP)
        assert response.status_code == 200

        response = file_client.get(f"/api/files/{file_item.id}/approval", headers=BOB)
        assert response.json()["approved"] == body
        assert response.json()["can_approve"] is False

    def test_not_approvable_file(self, client, file_item):
        body = {"timestamp": "20240101120000", "sha1": "abc"}
        response = client.post(f"/api/files/{file_item.id}/approval", json=body, headers=SYSOP)

        assert response.status_code == 403

    def test_bad_timestamp(self, file_client, file_item):
        body = {"timestamp": "2024", "sha1": "abc"}
        response = file_client.post(f"/api/files/{file_item.id}/approval", json=body, headers=SYSOP)

        assert response.status_code == 422

    def test_unapprove(self, file_client, file_item):
        body = {"timestamp": "20240101120000", "sha1": "abc"}
        file_client.post(f"/api/files/{file_item.id}/approval", json=body, headers=SYSOP)

        response = file_client.delete(f"/api/files/{file_item.id}/approval", headers=SYSOP)

        assert response.status_code == 200
        assert response.json()["approved"] is None
