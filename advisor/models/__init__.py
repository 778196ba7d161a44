from .data_models import (
    College,
    Career,
    Course,
    Insight,
    RecommendationResult,
    UserProfile,
)

__all__ = ["College", "Career", "Course", "Insight", "RecommendationResult", "UserProfile"]
