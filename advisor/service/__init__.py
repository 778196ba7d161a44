from .behavior import apply_event, record_event
from .insights import generate_insights
from .pipeline import regenerate
from .catalog import (
    get_career,
    get_careers_by_course,
    get_college,
    get_college_filters,
    list_careers,
    search_colleges,
)
from .profile_service import get_or_create_profile, update_profile

__all__ = [
    "apply_event",
    "record_event",
    "generate_insights",
    "regenerate",
    "get_or_create_profile",
    "update_profile",
    "search_colleges",
    "get_college",
    "get_college_filters",
    "list_careers",
    "get_career",
    "get_careers_by_course",
]
