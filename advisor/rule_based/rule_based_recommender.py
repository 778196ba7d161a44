from __future__ import annotations

import logging
from typing import Any, List, Sequence

from ..data.data_loader import MongoDataLoader
from ..models.data_models import RecommendationResult, UserProfile
from .rules import CAREER_RULES, COLLEGE_RULES, COURSE_RULES, Rule
from .scoring import compute_total_score, rank

logger = logging.getLogger(__name__)

COLLEGE_TOP_K = 10
CAREER_TOP_K = 10
COURSE_TOP_K = 8


class RuleBasedRecommender:
    def __init__(self, data_loader: MongoDataLoader):
        self.data_loader = data_loader

    @staticmethod
    def score_candidates(
        candidates: Sequence[Any],
        profile: UserProfile,
        rules: Sequence[Rule],
        top_k: int,
    ) -> List[RecommendationResult]:
        results = []
        for item in candidates:
            score, reasons = compute_total_score(item, profile, rules)
            results.append(RecommendationResult(item, score, reasons))
        return rank(results, top_k)

    def recommend_colleges(self, profile: UserProfile, top_k: int = COLLEGE_TOP_K) -> List[RecommendationResult]:
        candidates = self.data_loader.get_candidate_colleges(profile)
        logger.debug(f"[RuleBased] college pool={len(candidates)} user={profile.user}")
        return self.score_candidates(candidates, profile, COLLEGE_RULES, top_k)

    def recommend_careers(self, profile: UserProfile, top_k: int = CAREER_TOP_K) -> List[RecommendationResult]:
        candidates = self.data_loader.get_candidate_careers()
        logger.debug(f"[RuleBased] career pool={len(candidates)} user={profile.user}")
        return self.score_candidates(candidates, profile, CAREER_RULES, top_k)

    def recommend_courses(self, profile: UserProfile, top_k: int = COURSE_TOP_K) -> List[RecommendationResult]:
        candidates = self.data_loader.get_candidate_courses()
        logger.debug(f"[RuleBased] course pool={len(candidates)} user={profile.user}")
        return self.score_candidates(candidates, profile, COURSE_RULES, top_k)
