from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..data.data_loader import MongoDataLoader
from ..rule_based.rule_based_recommender import RuleBasedRecommender
from ..service import catalog
from ..service.behavior import record_event
from ..service.pipeline import regenerate
from ..service.profile_service import get_or_create_profile, update_profile

logger = logging.getLogger(__name__)

# MongoDataLoader / Recommender singletons
_loader_singleton: Optional[MongoDataLoader] = None
_recommender_singleton: Optional[RuleBasedRecommender] = None
_indexes_ready = False


def _get_loader() -> MongoDataLoader:
    global _loader_singleton, _indexes_ready
    if _loader_singleton is None:
        _loader_singleton = MongoDataLoader()
    # unique user index must exist before the first profile insert
    if not _indexes_ready:
        _loader_singleton.ensure_indexes()
        _indexes_ready = True
    return _loader_singleton


def _get_recommender() -> RuleBasedRecommender:
    global _recommender_singleton
    if _recommender_singleton is None:
        _recommender_singleton = RuleBasedRecommender(_get_loader())
    return _recommender_singleton


def configure(loader: Optional[MongoDataLoader]) -> None:
    """Swap the loader used by the API functions (None resets to lazy default)."""
    global _loader_singleton, _recommender_singleton, _indexes_ready
    _loader_singleton = loader
    _recommender_singleton = None
    _indexes_ready = False


def _to_frontend(bundle: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "colleges": [r.to_frontend_dict() for r in bundle["colleges"]],
        "careers": [r.to_frontend_dict() for r in bundle["careers"]],
        "courses": [r.to_frontend_dict() for r in bundle["courses"]],
        "insights": [i.to_dict() for i in bundle["insights"]],
    }


# ------------------------------------------------------
# GET /api/recommendations
# ------------------------------------------------------
def get_recommendations(user_id: Any) -> Dict[str, Any]:
    profile = get_or_create_profile(_get_loader(), user_id)
    bundle = regenerate(_get_recommender(), profile)
    return _to_frontend(bundle)


# ------------------------------------------------------
# PUT /api/recommendations/profile
# ------------------------------------------------------
def update_user_profile(user_id: Any, changes: Mapping[str, Any]) -> Dict[str, Any]:
    profile = update_profile(_get_loader(), user_id, changes)
    # a profile change invalidates the snapshot
    bundle = regenerate(_get_recommender(), profile)
    return {
        "profile": profile.to_dict(),
        "recommendations": _to_frontend(bundle),
    }


# ------------------------------------------------------
# GET /api/recommendations/profile
# ------------------------------------------------------
def get_user_profile(user_id: Any) -> Dict[str, Any]:
    return get_or_create_profile(_get_loader(), user_id).to_dict()


# ------------------------------------------------------
# POST /api/recommendations/track
# ------------------------------------------------------
def track_user_behavior(user_id: Any, action: str, data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    logger.info(f"[Track] user_id={user_id}, action={action}")
    loader = _get_loader()
    profile = get_or_create_profile(loader, user_id)
    record_event(loader, profile, action, data or {})
    return {"ok": True, "action": action}


# ------------------------------------------------------
# GET /api/college, /api/career (catalog browsing)
# ------------------------------------------------------
def browse_colleges(**filters: Any) -> Dict[str, Any]:
    return catalog.search_colleges(_get_loader(), **filters)


def get_college_details(college_id: str) -> Dict[str, Any]:
    return catalog.get_college(_get_loader(), college_id)


def get_college_filter_options() -> Dict[str, Any]:
    return catalog.get_college_filters(_get_loader())


def browse_careers(course_id: Optional[str] = None) -> List[Dict[str, Any]]:
    if course_id is not None:
        return catalog.get_careers_by_course(_get_loader(), course_id)
    return catalog.list_careers(_get_loader())


def get_career_details(career_id: str) -> Dict[str, Any]:
    return catalog.get_career(_get_loader(), career_id)
