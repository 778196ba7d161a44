"""
Integration tests for the HTTP API (FastAPI TestClient + mongomock).
"""

import runpy
from unittest.mock import patch

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

import server
from advisor import config
from advisor.data.data_loader import MongoDataLoader
from advisor.errors import ProfileConflictError
from advisor.interface import api_interface


@pytest.fixture
def client(loader):
    api_interface.configure(loader)
    yield TestClient(server.app)
    api_interface.configure(None)


@pytest.fixture
def user_headers():
    return {"X-User-Id": str(ObjectId())}


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestProfileEndpoints:
    def test_get_profile_creates_default(self, client, user_headers):
        response = client.get("/api/recommendations/profile", headers=user_headers)

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["data"]["user"] == user_headers["X-User-Id"]
        assert body["data"]["preferences"]["budget"] == {"min": 0, "max": 500000}
        assert body["data"]["assessmentResults"]["personalityTraits"]["neuroticism"] == 50

    def test_missing_user_header_is_rejected(self, client):
        response = client.get("/api/recommendations/profile")

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Unable to create user profile"}

    def test_put_profile_returns_profile_and_recommendations(self, client, user_headers, college_doc, loader):
        loader.col_colleges.insert_one(college_doc())

        response = client.put(
            "/api/recommendations/profile",
            headers=user_headers,
            json={
                "academicBackground": {"stream": "Science", "overallPercentage": 91},
                "preferences": {"location": {"preferredStates": ["Karnataka"]}, "budget": {"max": 200000}},
            },
        )

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["profile"]["academicBackground"]["overallPercentage"] == 91
        college = data["recommendations"]["colleges"][0]
        assert college["score"] == 100
        assert len(college["reasons"]) == 5
        assert college["college"]["name"] == "Sample College"
        assert [i["type"] for i in data["recommendations"]["insights"]] == ["academic"]

    def test_put_profile_with_invalid_stream_is_400(self, client, user_headers):
        response = client.put(
            "/api/recommendations/profile",
            headers=user_headers,
            json={"academicBackground": {"stream": "Astrology"}},
        )

        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["error"].startswith("academicBackground.stream")


class TestRecommendationsEndpoint:
    def test_envelope_shape(self, client, user_headers, career_doc, course_doc, loader):
        loader.col_careers.insert_one(career_doc(name="Software Engineer", industries=["Technology"]))
        loader.col_courses.insert_one(course_doc())

        response = client.get("/api/recommendations", headers=user_headers)

        body = response.json()
        assert response.status_code == 200
        assert set(body["data"]) == {"colleges", "careers", "courses", "insights"}
        assert body["data"]["colleges"] == []
        assert body["data"]["careers"][0]["career"]["name"] == "Software Engineer"
        assert body["data"]["courses"][0]["course"] == "B.Com"
        assert body["data"]["courses"][0]["details"]["category"] == "Business"

    def test_unexpected_error_is_500_envelope(self, client, user_headers):
        with patch.object(server, "get_recommendations", side_effect=RuntimeError("boom")):
            response = client.get("/api/recommendations", headers=user_headers)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "boom"}

    def test_conflict_is_409(self, client, user_headers):
        with patch.object(server, "get_recommendations", side_effect=ProfileConflictError("stale")):
            response = client.get("/api/recommendations", headers=user_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "stale"


class TestTrackEndpoint:
    def test_view_college_twice_is_stored_once(self, client, user_headers, loader):
        college_id = str(ObjectId())
        payload = {"action": "view_college", "data": {"collegeId": college_id}}

        for _ in range(2):
            response = client.post("/api/recommendations/track", headers=user_headers, json=payload)
            assert response.json() == {"success": True, "message": "Behavior tracked successfully"}

        stored = loader.find_profile(user_headers["X-User-Id"])
        assert stored.behavior_data.viewed_colleges == [ObjectId(college_id)]

    def test_unknown_action_succeeds(self, client, user_headers):
        response = client.post(
            "/api/recommendations/track",
            headers=user_headers,
            json={"action": "share", "data": {}},
        )

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_missing_action_is_400(self, client, user_headers):
        response = client.post("/api/recommendations/track", headers=user_headers, json={"data": {}})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_search_without_query_is_400(self, client, user_headers):
        response = client.post(
            "/api/recommendations/track",
            headers=user_headers,
            json={"action": "search", "data": {"category": "college"}},
        )

        assert response.status_code == 400
        assert "query" in response.json()["error"]


class TestNonFiniteNumbers:
    # Python's json module reads 1e999 as inf
    def test_infinite_duration_is_400(self, client, user_headers, loader):
        response = client.post(
            "/api/recommendations/track",
            headers={**user_headers, "Content-Type": "application/json"},
            content='{"action": "time_spent", "data": {"section": "colleges", "duration": 1e999}}',
        )

        assert response.status_code == 400
        assert "duration" in response.json()["error"]
        assert loader.find_profile(user_headers["X-User-Id"]).behavior_data.time_spent == []

    def test_infinite_budget_is_400(self, client, user_headers):
        response = client.put(
            "/api/recommendations/profile",
            headers={**user_headers, "Content-Type": "application/json"},
            content='{"preferences": {"budget": {"max": 1e999}}}',
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("preferences.budget.max")


class TestIndexSetup:
    def test_first_request_creates_unique_user_index(self, mongo_client, user_headers):
        fresh = MongoDataLoader(client=mongo_client, db_name="advisor_fresh")
        api_interface.configure(fresh)
        try:
            response = TestClient(server.app).get("/api/recommendations/profile", headers=user_headers)
        finally:
            api_interface.configure(None)

        assert response.status_code == 200
        assert fresh.col_profiles.index_information()["user_1"]["unique"] is True


class TestCollegeEndpoints:
    def test_list_is_paginated(self, client, loader, college_doc):
        loader.col_colleges.insert_many([college_doc(name=f"College {i:02d}") for i in range(12)])

        response = client.get("/api/college", params={"sortBy": "name", "sortOrder": "asc", "page": 2, "limit": 5})

        data = response.json()["data"]
        assert response.status_code == 200
        assert [c["name"] for c in data["colleges"]] == [f"College {i:02d}" for i in range(5, 10)]
        assert data["pagination"]["totalPages"] == 3
        assert data["pagination"]["hasNext"] is True

    @pytest.mark.parametrize("params", [{"limit": 0}, {"page": "x"}, {"sortBy": "popularity"}])
    def test_bad_query_is_400(self, client, params):
        response = client.get("/api/college", params=params)

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_filters(self, client, loader, college_doc):
        loader.col_colleges.insert_one(college_doc())

        response = client.get("/api/college/filters")

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["states"] == ["Karnataka"]
        assert data["ratingRange"]["maxRating"] == 4.5

    def test_details_and_404(self, client, loader, college_doc):
        doc = college_doc()
        loader.col_colleges.insert_one(doc)

        found = client.get(f"/api/college/{doc['_id']}")
        missing = client.get(f"/api/college/{ObjectId()}")

        assert found.json()["data"]["name"] == "Sample College"
        assert missing.status_code == 404
        assert missing.json() == {"success": False, "error": "College not found"}


class TestCareerEndpoints:
    def test_list_and_by_course(self, client, loader, career_doc, course_doc):
        course = course_doc()
        loader.col_courses.insert_one(course)
        loader.col_careers.insert_many([
            career_doc(name="Accountant", courses=[course["_id"]]),
            career_doc(name="Pilot"),
        ])

        everything = client.get("/api/career").json()["data"]
        by_course = client.get(f"/api/career/course/{course['_id']}").json()["data"]

        assert [c["name"] for c in everything] == ["Accountant", "Pilot"]
        assert everything[0]["courses"][0]["name"] == "B.Com"
        assert [c["name"] for c in by_course] == ["Accountant"]

    def test_missing_career_is_404(self, client):
        response = client.get(f"/api/career/{ObjectId()}")

        assert response.status_code == 404
        assert response.json()["error"] == "Career path not found"


class TestEntryPoint:
    def test_running_server_module_starts_uvicorn(self):
        with patch("uvicorn.run") as run:
            runpy.run_module("server", run_name="__main__")

        run.assert_called_once_with("server:app", host=config.SERVER_HOST, port=config.SERVER_PORT)
