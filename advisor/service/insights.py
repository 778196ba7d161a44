from typing import Dict, List

from ..models.data_models import Insight, UserProfile

ACADEMIC_THRESHOLD = 85
APTITUDE_THRESHOLD = 80


def _academic_insight(profile: UserProfile) -> List[Insight]:
    if profile.academic_background.overall_percentage > ACADEMIC_THRESHOLD:
        return [Insight(
            type="academic",
            title="Excellent Academic Performance",
            message="Your strong academic record opens doors to top-tier colleges and competitive programs.",
            action="Consider applying to premier institutions and scholarship programs.",
        )]
    return []


def _aptitude_insight(profile: UserProfile) -> List[Insight]:
    # max() keeps the first of equal values -> declared dimension order wins ties
    name, value = max(profile.assessment_results.aptitude_scores.items(), key=lambda kv: kv[1])
    if value > APTITUDE_THRESHOLD:
        return [Insight(
            type="aptitude",
            title=f"Strong {name} Skills",
            message=f"Your exceptional {name} abilities suggest great potential in related fields.",
            action=f"Explore careers that leverage {name} thinking.",
        )]
    return []


def _behavior_insight(profile: UserProfile) -> List[Insight]:
    totals: Dict[str, float] = {}
    for entry in profile.behavior_data.time_spent:
        totals[entry.section] = totals.get(entry.section, 0) + entry.duration
    if not totals:
        return []

    # dicts keep insertion order, so the first-seen section wins ties
    section = max(totals, key=totals.get)
    return [Insight(
        type="behavior",
        title=f"High Interest in {section}",
        message=f"You've spent significant time exploring {section}, indicating strong interest.",
        action=f"Consider specializing in {section}-related fields.",
    )]


def generate_insights(profile: UserProfile) -> List[Insight]:
    return _academic_insight(profile) + _aptitude_insight(profile) + _behavior_insight(profile)
