from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..data.data_loader import MongoDataLoader, as_object_id
from ..errors import ProfileCreationError, ValidationError
from ..models.data_models import UserProfile
from ..models.schemas import ProfileUpdate

logger = logging.getLogger(__name__)


def get_or_create_profile(loader: MongoDataLoader, user_id: Any) -> UserProfile:
    """
    Load the user's profile, creating it with every default filled in on first access.

    Raises ProfileCreationError when user_id is missing or the insert fails.
    """
    if not user_id:
        raise ProfileCreationError("Unable to create user profile")

    profile = loader.find_profile(user_id)
    if profile is not None:
        return profile

    profile = UserProfile(user=as_object_id(user_id))
    try:
        loader.insert_profile(profile)
    except DuplicateKeyError:
        # another request created it first
        existing = loader.find_profile(user_id)
        if existing is None:
            raise ProfileCreationError("Unable to create user profile")
        return existing
    except PyMongoError as e:
        logger.error(f"[Profile] Insert failed for user={user_id}: {e}")
        raise ProfileCreationError(f"Unable to create user profile: {e}") from e

    logger.info(f"[Profile] Created default profile for user={user_id}")
    return profile


def deep_merge(base: Mapping[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Nested dicts merge key by key; lists and scalars replace."""
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_profile_update(changes: Mapping[str, Any]) -> Dict[str, Any]:
    try:
        update = ProfileUpdate.model_validate(dict(changes))
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"{location}: {first['msg']}") from e
    return update.model_dump(exclude_unset=True, exclude_none=True)


def update_profile(loader: MongoDataLoader, user_id: Any, changes: Mapping[str, Any]) -> UserProfile:
    updates = parse_profile_update(changes)
    profile = get_or_create_profile(loader, user_id)

    merged = deep_merge(profile.to_document(), updates)
    updated = UserProfile.from_document(merged)

    loader.save_profile(updated)
    logger.info(f"[Profile] Updated sections {sorted(updates)} for user={user_id}")
    return updated
