from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo import MongoClient
from sshtunnel import SSHTunnelForwarder

from .. import config
from ..errors import ProfileConflictError
from ..models.data_models import (
    Career,
    College,
    Course,
    Program,
    UserProfile,
    as_number,
    as_str_list,
)

logger = logging.getLogger(__name__)

# Candidate pool caps
COLLEGE_POOL_LIMIT = 20
CAREER_POOL_LIMIT = 20
COURSE_POOL_LIMIT = 15

# Process-wide SSH tunnel (singleton)
_ssh_tunnel: Optional[SSHTunnelForwarder] = None


def get_ssh_tunnel() -> SSHTunnelForwarder:
    """Return the shared SSH tunnel to the MongoDB host, starting it if needed."""
    import paramiko

    global _ssh_tunnel
    if _ssh_tunnel is None or not _ssh_tunnel.is_active:
        pkey = paramiko.RSAKey.from_private_key_file(str(config.SSH_PEM_KEY_PATH))

        _ssh_tunnel = SSHTunnelForwarder(
            (config.SSH_HOST, config.SSH_PORT),
            ssh_username=config.SSH_USERNAME,
            ssh_pkey=pkey,
            # mongod listens on loopback on the remote host
            remote_bind_address=("127.0.0.1", config.MONGODB_PORT),
            local_bind_address=("127.0.0.1", 0),
            allow_agent=False,
            host_pkey_directories=[],
        )
        _ssh_tunnel.start()
        logger.info(f"[Mongo] SSH tunnel up: {config.SSH_HOST} -> 127.0.0.1:{_ssh_tunnel.local_bind_port}")
    return _ssh_tunnel


def build_mongo_uri() -> str:
    if config.MONGO_URI:
        return config.MONGO_URI

    host, port = config.MONGODB_HOST, config.MONGODB_PORT
    if config.SSH_HOST:
        host, port = "127.0.0.1", get_ssh_tunnel().local_bind_port

    credentials = ""
    if config.MONGODB_USERNAME:
        credentials = f"{config.MONGODB_USERNAME}:{config.MONGODB_PASSWORD or ''}@"
    return (
        f"mongodb://{credentials}{host}:{port}/"
        f"?authSource={config.MONGODB_AUTH_SOURCE}&directConnection=true"
    )


def as_object_id(value: Any) -> Any:
    """Cast 24-hex strings to ObjectId; anything else is kept as given."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


class MongoDataLoader:
    """
    MongoDB access for user profiles and the college / career / course catalog.
    """

    def __init__(self, client: Optional[MongoClient] = None, db_name: Optional[str] = None):
        if client is None:
            client = MongoClient(
                build_mongo_uri(),
                serverSelectionTimeoutMS=config.MONGODB_TIMEOUT_MS,
                connectTimeoutMS=config.MONGODB_TIMEOUT_MS,
                socketTimeoutMS=config.MONGODB_TIMEOUT_MS,
            )

        self.client = client
        self.db = self.client[db_name or config.MONGODB_DB_NAME]

        # Collections
        self.col_profiles = self.db["userprofiles"]
        self.col_colleges = self.db["colleges"]
        self.col_careers = self.db["careers"]
        self.col_courses = self.db["courses"]

    def ping(self) -> None:
        self.client.admin.command("ping")

    def ensure_indexes(self) -> None:
        # one profile per user
        self.col_profiles.create_index("user", unique=True)

    # ------------------------------------------------------
    # Document -> dataclass
    # ------------------------------------------------------
    @staticmethod
    def _doc_to_college(doc: Dict[str, Any]) -> College:
        location = doc.get("location") or {}
        programs = []
        for p in doc.get("programs") or []:
            fees = p.get("fees") or {}
            programs.append(
                Program(
                    name=p.get("name") or "",
                    stream=p.get("stream") or "",
                    duration=p.get("duration"),
                    annual_fee=as_number(fees.get("annual")),
                    total_fee=as_number(fees.get("total")),
                    seats=int(as_number(p.get("seats"))),
                    cutoff=p.get("cutoff"),
                )
            )
        return College(
            mongo_id=doc.get("_id"),
            name=doc.get("name") or "",
            type=doc.get("type"),
            category=doc.get("category"),
            state=location.get("state"),
            city=location.get("city"),
            programs=programs,
            rating_overall=as_number((doc.get("rating") or {}).get("overall")),
            raw=doc,
        )

    @staticmethod
    def _doc_to_career(doc: Dict[str, Any], course_text: Dict[Any, str]) -> Career:
        return Career(
            mongo_id=doc.get("_id"),
            name=doc.get("name") or "",
            # referenced course ids become "name category" when the course exists
            courses=[course_text.get(ref, str(ref)) for ref in doc.get("courses") or []],
            growth_rate=as_number(doc.get("growthRate")),
            demand=doc.get("demand"),
            skills=as_str_list(doc.get("skills")),
            industries=as_str_list(doc.get("industries")),
            raw=doc,
        )

    @staticmethod
    def _doc_to_course(doc: Dict[str, Any]) -> Course:
        fees = doc.get("fees") or {}
        return Course(
            mongo_id=doc.get("_id"),
            name=doc.get("name") or "",
            category=doc.get("category") or "",
            subjects=as_str_list(doc.get("subjects")),
            fee_min=as_number(fees.get("min")),
            fee_max=as_number(fees.get("max")),
            career_prospects=as_str_list(doc.get("careerProspects")),
            raw=doc,
        )

    # ------------------------------------------------------
    # Candidate pools
    # ------------------------------------------------------
    @staticmethod
    def build_college_filter(profile: UserProfile) -> Dict[str, Any]:
        prefs = profile.preferences
        query: Dict[str, Any] = {}
        if prefs.preferred_states:
            query["location.state"] = {"$in": list(prefs.preferred_states)}
        if prefs.budget_max > 0:
            query["programs.fees.annual"] = {"$lte": prefs.budget_max}
        if prefs.college_type:
            query["type"] = {"$in": list(prefs.college_type)}
        return query

    def get_candidate_colleges(self, profile: UserProfile, limit: int = COLLEGE_POOL_LIMIT) -> List[College]:
        cursor = self.col_colleges.find(self.build_college_filter(profile)).limit(limit)
        return [self._doc_to_college(d) for d in cursor]

    def _course_lookup(self, career_docs: List[Dict[str, Any]], projection: Dict[str, int]) -> Dict[Any, Dict[str, Any]]:
        """Fetch the courses referenced by the given careers, keyed by _id."""
        course_ids = {ref for d in career_docs for ref in d.get("courses") or []}
        if not course_ids:
            return {}
        return {c["_id"]: c for c in self.col_courses.find({"_id": {"$in": list(course_ids)}}, projection)}

    def get_candidate_careers(self, limit: int = CAREER_POOL_LIMIT) -> List[Career]:
        docs = list(self.col_careers.find().limit(limit))

        course_text = {
            ref: f"{c.get('name') or ''} {c.get('category') or ''}".strip()
            for ref, c in self._course_lookup(docs, {"name": 1, "category": 1}).items()
        }
        return [self._doc_to_career(d, course_text) for d in docs]

    def get_candidate_courses(self, limit: int = COURSE_POOL_LIMIT) -> List[Course]:
        cursor = self.col_courses.find().limit(limit)
        return [self._doc_to_course(d) for d in cursor]

    # ------------------------------------------------------
    # Catalog browsing (read-only)
    # ------------------------------------------------------
    def find_colleges(
        self,
        query: Dict[str, Any],
        sort: List[Tuple[str, int]],
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """One page of colleges plus the total number matching the query."""
        docs = list(self.col_colleges.find(query).sort(sort).skip(skip).limit(limit))
        return docs, self.col_colleges.count_documents(query)

    def find_college(self, college_id: Any) -> Optional[Dict[str, Any]]:
        return self.col_colleges.find_one({"_id": as_object_id(college_id)})

    def college_facets(self) -> Dict[str, Any]:
        """Distinct filter values and rating / annual-fee ranges over the college catalog."""
        rating = list(self.col_colleges.aggregate([
            {"$group": {
                "_id": None,
                "minRating": {"$min": "$rating.overall"},
                "maxRating": {"$max": "$rating.overall"},
                "avgRating": {"$avg": "$rating.overall"},
            }},
        ]))
        fees = list(self.col_colleges.aggregate([
            {"$unwind": "$programs"},
            {"$group": {
                "_id": None,
                "minFees": {"$min": "$programs.fees.annual"},
                "maxFees": {"$max": "$programs.fees.annual"},
                "avgFees": {"$avg": "$programs.fees.annual"},
            }},
        ]))
        return {
            "states": sorted(s for s in self.col_colleges.distinct("location.state") if s),
            "types": sorted(t for t in self.col_colleges.distinct("type") if t),
            "courses": sorted(n for n in self.col_courses.distinct("name") if n),
            "ratingRange": {k: v for k, v in rating[0].items() if k != "_id"} if rating else None,
            "feesRange": {k: v for k, v in fees[0].items() if k != "_id"} if fees else None,
        }

    def _populate_courses(self, career_docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # referenced course ids become {_id, name, description}; dangling refs are dropped
        lookup = self._course_lookup(career_docs, {"name": 1, "description": 1})
        populated = []
        for d in career_docs:
            d = dict(d)
            d["courses"] = [lookup[ref] for ref in d.get("courses") or [] if ref in lookup]
            populated.append(d)
        return populated

    def find_careers(self, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return self._populate_courses(list(self.col_careers.find(query or {})))

    def find_career(self, career_id: Any) -> Optional[Dict[str, Any]]:
        doc = self.col_careers.find_one({"_id": as_object_id(career_id)})
        return self._populate_courses([doc])[0] if doc else None

    # ------------------------------------------------------
    # USER PROFILE
    # ------------------------------------------------------
    def find_profile(self, user_id: Any) -> Optional[UserProfile]:
        doc = self.col_profiles.find_one({"user": as_object_id(user_id)})
        return UserProfile.from_document(doc) if doc else None

    def insert_profile(self, profile: UserProfile) -> UserProfile:
        now = datetime.utcnow()
        profile.created_at = profile.created_at or now
        profile.updated_at = now
        profile.version = 0

        doc = profile.to_document()
        doc.pop("_id", None)
        result = self.col_profiles.insert_one(doc)
        profile.mongo_id = result.inserted_id
        return profile

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """
        Full-document write guarded by the profile's version.
        A concurrent save in between makes the match fail -> ProfileConflictError.
        """
        if profile.mongo_id is None:
            return self.insert_profile(profile)

        expected_version = profile.version
        profile.updated_at = datetime.utcnow()
        profile.version = expected_version + 1

        doc = profile.to_document()
        doc.pop("_id", None)
        result = self.col_profiles.replace_one(
            {"_id": profile.mongo_id, "version": expected_version},
            doc,
        )
        if result.matched_count == 0:
            profile.version = expected_version
            logger.warning(f"[Mongo] Stale profile save rejected: user={profile.user}, version={expected_version}")
            raise ProfileConflictError("Profile was modified by another request, please retry")
        return profile
