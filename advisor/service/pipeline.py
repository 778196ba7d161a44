from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from ..data.data_loader import MongoDataLoader
from ..models.data_models import Insight, RecommendationResult, Recommendations, UserProfile
from ..rule_based.rule_based_recommender import RuleBasedRecommender
from .insights import generate_insights

logger = logging.getLogger(__name__)


def regenerate(
    recommender: RuleBasedRecommender,
    profile: UserProfile,
    now: Optional[datetime] = None,
) -> Dict[str, List]:
    """
    1) Score colleges / careers / courses against the profile
    2) Derive insights
    3) Replace profile.recommendations with a fresh snapshot and save

    The snapshot is never merged with the previous one.
    """
    logger.info(f"[Pipeline] Regenerating recommendations for user={profile.user}")

    colleges: List[RecommendationResult] = recommender.recommend_colleges(profile)
    careers: List[RecommendationResult] = recommender.recommend_careers(profile)
    courses: List[RecommendationResult] = recommender.recommend_courses(profile)
    insights: List[Insight] = generate_insights(profile)

    now = now or datetime.utcnow()
    profile.recommendations = Recommendations(
        colleges=[r.to_entry(now) for r in colleges],
        careers=[r.to_entry(now) for r in careers],
        courses=[r.to_entry(now) for r in courses],
    )

    loader: MongoDataLoader = recommender.data_loader
    loader.save_profile(profile)

    logger.info(
        f"[Pipeline] Saved snapshot: colleges={len(colleges)}, careers={len(careers)}, "
        f"courses={len(courses)}, insights={len(insights)}"
    )
    return {
        "colleges": colleges,
        "careers": careers,
        "courses": courses,
        "insights": insights,
    }
