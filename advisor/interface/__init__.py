from .api_interface import (
    browse_careers,
    browse_colleges,
    configure,
    get_career_details,
    get_college_details,
    get_college_filter_options,
    get_recommendations,
    get_user_profile,
    track_user_behavior,
    update_user_profile,
)

__all__ = [
    "configure",
    "get_recommendations",
    "get_user_profile",
    "track_user_behavior",
    "update_user_profile",
    "browse_colleges",
    "get_college_details",
    "get_college_filter_options",
    "browse_careers",
    "get_career_details",
]
