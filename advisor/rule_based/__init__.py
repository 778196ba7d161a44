from .scoring import compute_total_score, rank
from .rule_based_recommender import RuleBasedRecommender

__all__ = ["compute_total_score", "rank", "RuleBasedRecommender"]
