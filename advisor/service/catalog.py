from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Optional

from ..data.data_loader import MongoDataLoader, as_object_id
from ..errors import NotFoundError, ValidationError
from ..models.data_models import to_jsonable

logger = logging.getLogger(__name__)

# sortBy -> stored field
COLLEGE_SORT_FIELDS = {
    "name": "name",
    "rating": "rating.overall",
    "fees": "programs.fees.annual",
    "createdAt": "createdAt",
}

# Used when the catalog is empty
DEFAULT_RATING_RANGE = {"minRating": 0, "maxRating": 5, "avgRating": 3}
DEFAULT_FEES_RANGE = {"minFees": 0, "maxFees": 1000000, "avgFees": 100000}


def build_college_query(
    state: Optional[str] = None,
    city: Optional[str] = None,
    stream: Optional[str] = None,
    college_type: Optional[str] = None,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if state:
        query["location.state"] = state
    if city:
        query["location.city"] = city
    if stream:
        query["programs.stream"] = stream
    if college_type:
        query["type"] = college_type
    if search:
        # literal, case-insensitive match on name / place / program
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [
            {"name": pattern},
            {"location.city": pattern},
            {"location.state": pattern},
            {"programs.name": pattern},
        ]
    return query


def search_colleges(
    loader: MongoDataLoader,
    state: Optional[str] = None,
    city: Optional[str] = None,
    stream: Optional[str] = None,
    college_type: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "rating",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 10,
) -> Dict[str, Any]:
    """
    Filtered, sorted, paginated college listing.

    Returns {"colleges": [...], "pagination": {currentPage, totalPages, totalColleges, hasNext, hasPrev}}.
    """
    if sort_by not in COLLEGE_SORT_FIELDS:
        raise ValidationError(f"sortBy must be one of {', '.join(COLLEGE_SORT_FIELDS)}")
    if sort_order not in ("asc", "desc"):
        raise ValidationError("sortOrder must be 'asc' or 'desc'")
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")

    query = build_college_query(state, city, stream, college_type, search)
    # name as secondary key keeps pages stable under equal sort values
    sort = [(COLLEGE_SORT_FIELDS[sort_by], -1 if sort_order == "desc" else 1)]
    if sort_by != "name":
        sort.append(("name", 1))

    skip = (page - 1) * limit
    docs, total = loader.find_colleges(query, sort, skip=skip, limit=limit)
    logger.debug(f"[Catalog] colleges query={query} page={page} -> {len(docs)}/{total}")

    return {
        "colleges": to_jsonable(docs),
        "pagination": {
            "currentPage": page,
            "totalPages": math.ceil(total / limit),
            "totalColleges": total,
            "hasNext": skip + limit < total,
            "hasPrev": page > 1,
        },
    }


def get_college(loader: MongoDataLoader, college_id: Any) -> Dict[str, Any]:
    doc = loader.find_college(college_id)
    if doc is None:
        raise NotFoundError("College not found")
    return to_jsonable(doc)


def get_college_filters(loader: MongoDataLoader) -> Dict[str, Any]:
    facets = loader.college_facets()
    facets["ratingRange"] = facets["ratingRange"] or dict(DEFAULT_RATING_RANGE)
    facets["feesRange"] = facets["feesRange"] or dict(DEFAULT_FEES_RANGE)
    return facets


def list_careers(loader: MongoDataLoader) -> List[Dict[str, Any]]:
    return to_jsonable(loader.find_careers())


def get_career(loader: MongoDataLoader, career_id: Any) -> Dict[str, Any]:
    doc = loader.find_career(career_id)
    if doc is None:
        raise NotFoundError("Career path not found")
    return to_jsonable(doc)


def get_careers_by_course(loader: MongoDataLoader, course_id: Any) -> List[Dict[str, Any]]:
    return to_jsonable(loader.find_careers({"courses": as_object_id(course_id)}))
