"""
Shared fixtures: an in-memory MongoDB (mongomock) and catalog document factories.
"""

import mongomock
import pytest
from bson import ObjectId

from advisor.data.data_loader import MongoDataLoader
from advisor.models.data_models import UserProfile


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def loader(mongo_client):
    """MongoDataLoader backed by mongomock with indexes in place."""
    data_loader = MongoDataLoader(client=mongo_client, db_name="advisor_test")
    data_loader.ensure_indexes()
    return data_loader


@pytest.fixture
def profile():
    """Default profile for a Science student with a 2 lakh budget."""
    p = UserProfile(user="user-1")
    p.preferences.budget_max = 200000
    return p


@pytest.fixture
def college_doc():
    def _make(**overrides):
        doc = {
            "_id": ObjectId(),
            "name": "Sample College",
            "type": "Government",
            "category": "College",
            "location": {"state": "Karnataka", "city": "Bengaluru"},
            "programs": [
                {"name": "B.Sc", "stream": "Science", "duration": "3 years",
                 "fees": {"annual": 150000, "total": 450000}, "seats": 60},
            ],
            "rating": {"overall": 4.5},
        }
        doc.update(overrides)
        return doc

    return _make


@pytest.fixture
def career_doc():
    def _make(**overrides):
        doc = {
            "_id": ObjectId(),
            "name": "Data Analyst",
            "courses": [],
            "growthRate": 5,
            "demand": "Medium",
            "skills": [],
            "industries": [],
        }
        doc.update(overrides)
        return doc

    return _make


@pytest.fixture
def course_doc():
    def _make(**overrides):
        doc = {
            "_id": ObjectId(),
            "name": "B.Com",
            "category": "Business",
            "subjects": ["Accounting"],
            "fees": {"min": 50000, "max": 300000},
            "careerProspects": ["Accountant"],
        }
        doc.update(overrides)
        return doc

    return _make
