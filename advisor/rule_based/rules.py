"""
Fixed-weight scoring rules per candidate domain.

Each rule is (predicate, points, reason). ``reason`` is a str.format template
receiving ``item`` (the candidate) and ``profile``. Rules are independent:
every matching rule fires, none subtract.
"""
from __future__ import annotations

from typing import Any, Callable, NamedTuple, Tuple

from ..data.preprocess import any_contains_ci, contains_ci, normalize_text
from ..models.data_models import Career, College, Course, UserProfile

BASE_SCORE = 50
MAX_SCORE = 100

HIGH_RATING = 4
STRONG_APTITUDE = 70
GROWTH_THRESHOLD = 10


class Rule(NamedTuple):
    predicate: Callable[[Any, UserProfile], bool]
    points: int
    reason: str

    def explain(self, item: Any, profile: UserProfile) -> str:
        return self.reason.format(item=item, profile=profile)


# ------------------------------------------------------
# College
# ------------------------------------------------------
def _in_preferred_state(c: College, p: UserProfile) -> bool:
    return c.state in p.preferences.preferred_states


def _within_budget(c: College, p: UserProfile) -> bool:
    avg = c.average_annual_fee
    return avg is not None and avg <= p.preferences.budget_max


def _preferred_type(c: College, p: UserProfile) -> bool:
    return c.type in p.preferences.college_type


def _high_rated(c: College, p: UserProfile) -> bool:
    return c.rating_overall >= HIGH_RATING


def _offers_stream(c: College, p: UserProfile) -> bool:
    stream = p.academic_background.stream
    return any(prog.stream == stream or prog.stream == "All" for prog in c.programs)


COLLEGE_RULES: Tuple[Rule, ...] = (
    Rule(_in_preferred_state, 15, "Located in your preferred state: {item.state}"),
    Rule(_within_budget, 10, "Within your budget range"),
    Rule(_preferred_type, 10, "Matches your preference for {item.type} colleges"),
    Rule(_high_rated, 10, "High-rated institution with excellent reviews"),
    Rule(_offers_stream, 15, "Offers programs in {profile.academic_background.stream}"),
)


# ------------------------------------------------------
# Career
# ------------------------------------------------------
def _matches_career_fields(c: Career, p: UserProfile) -> bool:
    return any_contains_ci([c.name, *c.industries], p.interests.career_fields)


def _analytical_fit(c: Career, p: UserProfile) -> bool:
    return (
        any(contains_ci(s, "analytical") for s in c.skills)
        and p.assessment_results.aptitude_scores.logical > STRONG_APTITUDE
    )


def _communication_fit(c: Career, p: UserProfile) -> bool:
    return (
        any(contains_ci(s, "communication") for s in c.skills)
        and p.assessment_results.aptitude_scores.verbal > STRONG_APTITUDE
    )


def _stream_courses(c: Career, p: UserProfile) -> bool:
    stream = normalize_text(p.academic_background.stream)
    return bool(stream) and any(stream in normalize_text(ref) for ref in c.courses)


def _high_demand(c: Career, p: UserProfile) -> bool:
    return c.demand == "High"


def _growing(c: Career, p: UserProfile) -> bool:
    return c.growth_rate > GROWTH_THRESHOLD


CAREER_RULES: Tuple[Rule, ...] = (
    Rule(_matches_career_fields, 20, "Aligns with your career interests"),
    Rule(_analytical_fit, 15, "Matches your strong analytical skills"),
    Rule(_communication_fit, 15, "Utilizes your excellent communication skills"),
    Rule(_stream_courses, 15, "Suitable for {profile.academic_background.stream} background"),
    Rule(_high_demand, 10, "High market demand with good job prospects"),
    Rule(_growing, 10, "Strong growth potential ({item.growth_rate}% annually)"),
)


# ------------------------------------------------------
# Course
# ------------------------------------------------------
def _category_is_stream(c: Course, p: UserProfile) -> bool:
    return normalize_text(c.category) == normalize_text(p.academic_background.stream)


def _interesting_subjects(c: Course, p: UserProfile) -> bool:
    return any_contains_ci(c.subjects, p.interests.subjects)


def _affordable(c: Course, p: UserProfile) -> bool:
    return c.fee_max <= p.preferences.budget_max


def _leads_to_interests(c: Course, p: UserProfile) -> bool:
    return any_contains_ci(c.career_prospects, p.interests.career_fields)


COURSE_RULES: Tuple[Rule, ...] = (
    Rule(_category_is_stream, 20, "Perfect match for {profile.academic_background.stream} stream"),
    Rule(_interesting_subjects, 15, "Includes subjects you're interested in"),
    Rule(_affordable, 10, "Affordable within your budget"),
    Rule(_leads_to_interests, 15, "Leads to careers you're interested in"),
)
