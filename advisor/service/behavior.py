from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from .. import config
from ..data.data_loader import MongoDataLoader, as_object_id
from ..errors import ValidationError
from ..models.data_models import SearchEntry, TimeSpentEntry, UserProfile, as_number

logger = logging.getLogger(__name__)


def _require(payload: Mapping[str, Any], key: str, action: str) -> Any:
    value = payload.get(key)
    if value is None or value == "":
        raise ValidationError(f"'{key}' is required for action '{action}'")
    return value


def _track_search(profile: UserProfile, payload: Mapping[str, Any], now: datetime) -> None:
    history = profile.behavior_data.search_history
    history.append(
        SearchEntry(
            query=str(_require(payload, "query", "search")),
            category=payload.get("category"),
            timestamp=now,
        )
    )
    # keep only the newest entries
    limit = config.SEARCH_HISTORY_LIMIT
    if limit > 0 and len(history) > limit:
        del history[: len(history) - limit]


def _track_view_college(profile: UserProfile, payload: Mapping[str, Any], now: datetime) -> None:
    college_id = as_object_id(_require(payload, "collegeId", "view_college"))
    viewed = profile.behavior_data.viewed_colleges
    if college_id not in viewed:
        viewed.append(college_id)


def _track_view_career(profile: UserProfile, payload: Mapping[str, Any], now: datetime) -> None:
    career_id = as_object_id(_require(payload, "careerId", "view_career"))
    viewed = profile.behavior_data.viewed_careers
    if career_id not in viewed:
        viewed.append(career_id)


def _track_time_spent(profile: UserProfile, payload: Mapping[str, Any], now: datetime) -> None:
    section = str(_require(payload, "section", "time_spent"))
    duration = as_number(_require(payload, "duration", "time_spent"), default=None)
    if duration is None or not math.isfinite(duration) or duration < 0:
        raise ValidationError("'duration' must be a finite non-negative number")
    profile.behavior_data.time_spent.append(TimeSpentEntry(section=section, duration=duration, timestamp=now))


ACTION_HANDLERS: Dict[str, Callable[[UserProfile, Mapping[str, Any], datetime], None]] = {
    "search": _track_search,
    "view_college": _track_view_college,
    "view_career": _track_view_career,
    "time_spent": _track_time_spent,
}


def apply_event(profile: UserProfile, action: str, payload: Mapping[str, Any],
                now: Optional[datetime] = None) -> bool:
    """Mutate the profile's behavior log in memory. Unknown actions are ignored (returns False)."""
    handler = ACTION_HANDLERS.get(action)
    if handler is None:
        logger.debug(f"[Behavior] Ignoring unknown action '{action}'")
        return False
    handler(profile, payload or {}, now or datetime.utcnow())
    return True


def record_event(loader: MongoDataLoader, profile: UserProfile, action: str,
                 payload: Mapping[str, Any]) -> UserProfile:
    """Apply one tracking event, then save the whole profile."""
    apply_event(profile, action, payload)
    loader.save_profile(profile)
    return profile
