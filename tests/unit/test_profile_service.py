"""
Unit tests for profile access and partial updates.
"""

from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import PyMongoError

from advisor.errors import ProfileCreationError, ValidationError
from advisor.models.data_models import UserProfile
from advisor.service.profile_service import deep_merge, get_or_create_profile, update_profile


class TestGetOrCreateProfile:
    def test_creates_profile_with_defaults(self, loader):
        profile = get_or_create_profile(loader, "user-1")

        assert profile.academic_background.current_class == "12th"
        assert profile.academic_background.stream == "Science"
        assert profile.academic_background.overall_percentage == 0
        assert profile.preferences.budget_min == 0
        assert profile.preferences.budget_max == 500000
        assert profile.preferences.college_type == ["Government", "Private"]
        assert dict(profile.assessment_results.aptitude_scores.items()) == {
            "logical": 0, "verbal": 0, "numerical": 0, "spatial": 0, "mechanical": 0,
        }
        assert profile.assessment_results.personality_traits.openness == 50
        assert profile.recommendations.colleges == []

    def test_second_call_returns_existing_profile(self, loader):
        first = get_or_create_profile(loader, "user-1")
        second = get_or_create_profile(loader, "user-1")

        assert first.mongo_id == second.mongo_id
        assert loader.col_profiles.count_documents({}) == 1

    @pytest.mark.parametrize("user_id", [None, ""])
    def test_missing_user_id_raises(self, loader, user_id):
        with pytest.raises(ProfileCreationError):
            get_or_create_profile(loader, user_id)

    def test_concurrent_creation_returns_the_winning_profile(self, loader):
        # another request inserts between our lookup and our insert
        winner = loader.insert_profile(UserProfile(user="user-1"))

        with patch.object(loader, "find_profile", side_effect=[None, loader.find_profile("user-1")]):
            profile = get_or_create_profile(loader, "user-1")

        assert profile.mongo_id == winner.mongo_id
        assert loader.col_profiles.count_documents({"user": "user-1"}) == 1

    def test_store_failure_raises_profile_creation_error(self):
        mock_loader = MagicMock()
        mock_loader.find_profile.return_value = None
        mock_loader.insert_profile.side_effect = PyMongoError("disk full")

        with pytest.raises(ProfileCreationError, match="disk full"):
            get_or_create_profile(mock_loader, "user-1")


class TestUpdateProfile:
    def test_nested_sections_merge_instead_of_replacing(self, loader):
        get_or_create_profile(loader, "user-1")

        updated = update_profile(loader, "user-1", {
            "preferences": {"budget": {"max": 300000}},
            "interests": {"careerFields": ["Medicine"]},
        })

        assert updated.preferences.budget_max == 300000
        assert updated.preferences.budget_min == 0
        assert updated.preferences.college_type == ["Government", "Private"]
        assert updated.interests.career_fields == ["Medicine"]
        assert loader.find_profile("user-1").preferences.budget_max == 300000

    def test_update_creates_missing_profile(self, loader):
        update_profile(loader, "new-user", {"academicBackground": {"stream": "Commerce"}})

        stored = loader.find_profile("new-user")
        assert stored.academic_background.stream == "Commerce"
        assert stored.academic_background.current_class == "12th"

    @pytest.mark.parametrize("changes", [
        {"academicBackground": {"stream": "Astrology"}},
        {"academicBackground": {"overallPercentage": 120}},
        {"preferences": {"collegeType": ["Online"]}},
        {"assessmentResults": {"aptitudeScores": {"logical": -1}}},
        {"preferences": {"budget": {"max": float("inf")}}},
        {"preferences": {"budget": {"min": float("nan")}}},
        {"academicBackground": {"grades": [{"subject": "Maths", "marks": float("inf")}]}},
    ])
    def test_invalid_values_raise_validation_error(self, loader, changes):
        with pytest.raises(ValidationError):
            update_profile(loader, "user-1", changes)

        assert loader.col_profiles.count_documents({}) == 0

    def test_server_managed_sections_are_ignored(self, loader):
        updated = update_profile(loader, "user-1", {
            "recommendations": {"colleges": [{"college": "x", "score": 100}]},
        })

        assert updated.recommendations.colleges == []


def test_deep_merge_replaces_lists():
    base = {"a": {"b": 1, "c": [1, 2]}, "d": 1}

    merged = deep_merge(base, {"a": {"c": [3]}})

    assert merged == {"a": {"b": 1, "c": [3]}, "d": 1}
    assert base["a"]["c"] == [1, 2]
