"""
Unit tests for MongoDataLoader against an in-memory MongoDB.
"""

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from advisor.data.data_loader import MongoDataLoader, as_object_id
from advisor.errors import ProfileConflictError
from advisor.models.data_models import UserProfile


class TestCollegeFilter:
    def test_filter_uses_states_budget_and_types(self, profile):
        profile.preferences.preferred_states = ["Kerala", "Goa"]

        query = MongoDataLoader.build_college_filter(profile)

        assert query == {
            "location.state": {"$in": ["Kerala", "Goa"]},
            "programs.fees.annual": {"$lte": 200000},
            "type": {"$in": ["Government", "Private"]},
        }

    def test_empty_preferences_give_empty_filter(self, profile):
        profile.preferences.budget_max = 0
        profile.preferences.college_type = []

        assert MongoDataLoader.build_college_filter(profile) == {}


class TestCandidatePools:
    def test_colleges_are_filtered_and_capped(self, loader, profile, college_doc):
        profile.preferences.preferred_states = ["Karnataka"]
        loader.col_colleges.insert_many([college_doc(name=f"K{i}") for i in range(25)])
        loader.col_colleges.insert_one(college_doc(name="Elsewhere", location={"state": "Bihar"}))

        colleges = loader.get_candidate_colleges(profile)

        assert len(colleges) == 20
        assert all(c.state == "Karnataka" for c in colleges)

    def test_no_matching_colleges_returns_empty_list(self, loader, profile, college_doc):
        profile.preferences.preferred_states = ["Punjab"]
        loader.col_colleges.insert_one(college_doc())

        assert loader.get_candidate_colleges(profile) == []

    def test_career_course_refs_are_resolved_to_text(self, loader, career_doc, course_doc):
        course = course_doc(name="B.Sc Physics", category="Science")
        missing_ref = ObjectId()
        loader.col_courses.insert_one(course)
        loader.col_careers.insert_one(career_doc(courses=[course["_id"], missing_ref]))

        careers = loader.get_candidate_careers()

        assert careers[0].courses == ["B.Sc Physics Science", str(missing_ref)]

    def test_career_pool_capped_at_20(self, loader, career_doc):
        loader.col_careers.insert_many([career_doc(name=f"Career {i}") for i in range(25)])

        careers = loader.get_candidate_careers()

        assert len(careers) == 20
        assert len({c.mongo_id for c in careers}) == 20

    def test_course_pool_capped_at_15(self, loader, course_doc):
        loader.col_courses.insert_many([course_doc(name=f"C{i}") for i in range(20)])

        assert len(loader.get_candidate_courses()) == 15


class TestProfilePersistence:
    def test_insert_sets_bookkeeping_fields(self, loader):
        profile = loader.insert_profile(UserProfile(user="user-1"))

        assert profile.mongo_id is not None
        assert profile.version == 0
        assert profile.created_at is not None
        assert loader.find_profile("user-1").preferences.budget_max == 500000

    def test_save_increments_version(self, loader):
        profile = loader.insert_profile(UserProfile(user="user-1"))
        profile.interests.subjects = ["Physics"]

        loader.save_profile(profile)

        stored = loader.find_profile("user-1")
        assert stored.version == 1
        assert stored.interests.subjects == ["Physics"]

    def test_stale_save_is_rejected(self, loader):
        loader.insert_profile(UserProfile(user="user-1"))
        first = loader.find_profile("user-1")
        second = loader.find_profile("user-1")
        first.interests.subjects = ["Art"]
        loader.save_profile(first)

        second.interests.subjects = ["Music"]
        with pytest.raises(ProfileConflictError):
            loader.save_profile(second)

        assert second.version == 0
        assert loader.find_profile("user-1").interests.subjects == ["Art"]

    def test_object_id_strings_are_cast(self, loader):
        user_id = ObjectId()
        loader.insert_profile(UserProfile(user=user_id))

        assert loader.find_profile(str(user_id)).user == user_id
        assert as_object_id("not-an-id") == "not-an-id"

    def test_second_insert_for_same_user_is_rejected(self, loader):
        loader.insert_profile(UserProfile(user="user-1"))

        with pytest.raises(DuplicateKeyError):
            loader.insert_profile(UserProfile(user="user-1"))

        assert loader.col_profiles.count_documents({"user": "user-1"}) == 1
