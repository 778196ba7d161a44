from typing import Any, Iterable, List, Sequence, Tuple

from ..models.data_models import RecommendationResult, UserProfile
from .rules import BASE_SCORE, MAX_SCORE, Rule


def compute_total_score(item: Any, profile: UserProfile,
                        rules: Sequence[Rule]) -> Tuple[int, List[str]]:
    """Base score plus every matching rule's points, clamped to MAX_SCORE."""
    score = BASE_SCORE
    reasons: List[str] = []

    for rule in rules:
        if rule.predicate(item, profile):
            score += rule.points
            reasons.append(rule.explain(item, profile))

    return min(score, MAX_SCORE), reasons


def rank(results: Iterable[RecommendationResult], top_k: int) -> List[RecommendationResult]:
    # score desc, then name; sorted() is stable so pool order decides the rest
    ordered = sorted(results, key=lambda r: (-r.score, r.item.name))
    return ordered[:top_k]
