from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from bson import ObjectId

STREAMS = ("Science", "Commerce", "Arts", "Vocational")
CLASS_LEVELS = ("10th", "11th", "12th", "Graduate", "Post-Graduate")
PREFERRED_COLLEGE_TYPES = ("Government", "Private", "Deemed")
APTITUDE_DIMENSIONS = ("logical", "verbal", "numerical", "spatial", "mechanical")
PERSONALITY_TRAITS = ("extroversion", "openness", "conscientiousness", "agreeableness", "neuroticism")

DEFAULT_BUDGET_MAX = 500000
DEFAULT_PERSONALITY_SCORE = 50


def as_number(value: Any, default: float = 0) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def as_str_list(value: Any) -> List[str]:
    return [str(v) for v in (value or []) if v is not None]


def to_jsonable(value: Any) -> Any:
    """Convert a document holding ObjectId / datetime values into JSON-safe data."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


# ------------------------------------------------------
# UserProfile sections
# ------------------------------------------------------
@dataclass
class Grade:
    subject: str = ""
    marks: float = 0
    grade: str = ""

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Grade":
        return cls(
            subject=doc.get("subject") or "",
            marks=as_number(doc.get("marks")),
            grade=doc.get("grade") or "",
        )

    def to_document(self) -> Dict[str, Any]:
        return {"subject": self.subject, "marks": self.marks, "grade": self.grade}


@dataclass
class AcademicBackground:
    current_class: str = "12th"
    stream: str = "Science"
    subjects: List[str] = field(default_factory=list)
    grades: List[Grade] = field(default_factory=list)
    overall_percentage: float = 0

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> "AcademicBackground":
        doc = doc or {}
        return cls(
            current_class=doc.get("currentClass") or "12th",
            stream=doc.get("stream") or "Science",
            subjects=as_str_list(doc.get("subjects")),
            grades=[Grade.from_document(g) for g in doc.get("grades") or []],
            overall_percentage=as_number(doc.get("overallPercentage")),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "currentClass": self.current_class,
            "stream": self.stream,
            "subjects": list(self.subjects),
            "grades": [g.to_document() for g in self.grades],
            "overallPercentage": self.overall_percentage,
        }


@dataclass
class Interests:
    subjects: List[str] = field(default_factory=list)
    activities: List[str] = field(default_factory=list)
    career_fields: List[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> "Interests":
        doc = doc or {}
        return cls(
            subjects=as_str_list(doc.get("subjects")),
            activities=as_str_list(doc.get("activities")),
            career_fields=as_str_list(doc.get("careerFields")),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "subjects": list(self.subjects),
            "activities": list(self.activities),
            "careerFields": list(self.career_fields),
        }


@dataclass
class Preferences:
    preferred_states: List[str] = field(default_factory=list)
    preferred_cities: List[str] = field(default_factory=list)
    budget_min: float = 0
    budget_max: float = DEFAULT_BUDGET_MAX
    college_type: List[str] = field(default_factory=lambda: ["Government", "Private"])
    course_type: List[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> "Preferences":
        doc = doc or {}
        location = doc.get("location") or {}
        budget = doc.get("budget") or {}
        college_type = doc.get("collegeType")
        return cls(
            preferred_states=as_str_list(location.get("preferredStates")),
            preferred_cities=as_str_list(location.get("preferredCities")),
            budget_min=as_number(budget.get("min")),
            budget_max=as_number(budget.get("max"), DEFAULT_BUDGET_MAX),
            college_type=as_str_list(college_type) if college_type is not None else ["Government", "Private"],
            course_type=as_str_list(doc.get("courseType")),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "location": {
                "preferredStates": list(self.preferred_states),
                "preferredCities": list(self.preferred_cities),
            },
            "budget": {"min": self.budget_min, "max": self.budget_max},
            "collegeType": list(self.college_type),
            "courseType": list(self.course_type),
        }


@dataclass
class AptitudeScores:
    logical: float = 0
    verbal: float = 0
    numerical: float = 0
    spatial: float = 0
    mechanical: float = 0

    def items(self) -> Iterator[Tuple[str, float]]:
        """(dimension, score) in declared order."""
        for name in APTITUDE_DIMENSIONS:
            yield name, getattr(self, name)


@dataclass
class PersonalityTraits:
    extroversion: float = DEFAULT_PERSONALITY_SCORE
    openness: float = DEFAULT_PERSONALITY_SCORE
    conscientiousness: float = DEFAULT_PERSONALITY_SCORE
    agreeableness: float = DEFAULT_PERSONALITY_SCORE
    neuroticism: float = DEFAULT_PERSONALITY_SCORE


@dataclass
class CareerMatch:
    career: str = ""
    match_percentage: float = 0
    reasons: List[str] = field(default_factory=list)


@dataclass
class AssessmentResults:
    aptitude_scores: AptitudeScores = field(default_factory=AptitudeScores)
    personality_traits: PersonalityTraits = field(default_factory=PersonalityTraits)
    career_matches: List[CareerMatch] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> "AssessmentResults":
        doc = doc or {}
        aptitude = doc.get("aptitudeScores") or {}
        personality = doc.get("personalityTraits") or {}
        return cls(
            aptitude_scores=AptitudeScores(
                **{name: as_number(aptitude.get(name)) for name in APTITUDE_DIMENSIONS}
            ),
            personality_traits=PersonalityTraits(
                **{
                    name: as_number(personality.get(name), DEFAULT_PERSONALITY_SCORE)
                    for name in PERSONALITY_TRAITS
                }
            ),
            career_matches=[
                CareerMatch(
                    career=m.get("career") or "",
                    match_percentage=as_number(m.get("matchPercentage")),
                    reasons=as_str_list(m.get("reasons")),
                )
                for m in doc.get("careerMatches") or []
            ],
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "aptitudeScores": {
                name: getattr(self.aptitude_scores, name) for name in APTITUDE_DIMENSIONS
            },
            "personalityTraits": {
                name: getattr(self.personality_traits, name) for name in PERSONALITY_TRAITS
            },
            "careerMatches": [
                {"career": m.career, "matchPercentage": m.match_percentage, "reasons": list(m.reasons)}
                for m in self.career_matches
            ],
        }


@dataclass
class SearchEntry:
    query: str
    category: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class TimeSpentEntry:
    section: str
    duration: float
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class BehaviorData:
    search_history: List[SearchEntry] = field(default_factory=list)
    viewed_colleges: List[Any] = field(default_factory=list)
    viewed_careers: List[Any] = field(default_factory=list)
    time_spent: List[TimeSpentEntry] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> "BehaviorData":
        doc = doc or {}
        return cls(
            search_history=[
                SearchEntry(
                    query=s.get("query") or "",
                    category=s.get("category"),
                    timestamp=s.get("timestamp") or datetime.utcnow(),
                )
                for s in doc.get("searchHistory") or []
            ],
            viewed_colleges=list(doc.get("viewedColleges") or []),
            viewed_careers=list(doc.get("viewedCareers") or []),
            time_spent=[
                TimeSpentEntry(
                    section=t.get("section") or "",
                    duration=as_number(t.get("duration")),
                    timestamp=t.get("timestamp") or datetime.utcnow(),
                )
                for t in doc.get("timeSpent") or []
            ],
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "searchHistory": [
                {"query": s.query, "category": s.category, "timestamp": s.timestamp}
                for s in self.search_history
            ],
            "viewedColleges": list(self.viewed_colleges),
            "viewedCareers": list(self.viewed_careers),
            "timeSpent": [
                {"section": t.section, "duration": t.duration, "timestamp": t.timestamp}
                for t in self.time_spent
            ],
        }


@dataclass
class RecommendationEntry:
    ref: Any  # college/career ObjectId, course name
    score: float
    reasons: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.utcnow)


# stored key for the referenced item in each recommendations list
_SNAPSHOT_KEYS = {"colleges": "college", "careers": "career", "courses": "course"}


@dataclass
class Recommendations:
    colleges: List[RecommendationEntry] = field(default_factory=list)
    careers: List[RecommendationEntry] = field(default_factory=list)
    courses: List[RecommendationEntry] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> "Recommendations":
        doc = doc or {}
        lists = {}
        for section, key in _SNAPSHOT_KEYS.items():
            lists[section] = [
                RecommendationEntry(
                    ref=e.get(key),
                    score=as_number(e.get("score")),
                    reasons=as_str_list(e.get("reasons")),
                    timestamp=e.get("timestamp") or datetime.utcnow(),
                )
                for e in doc.get(section) or []
            ]
        return cls(**lists)

    def to_document(self) -> Dict[str, Any]:
        doc = {}
        for section, key in _SNAPSHOT_KEYS.items():
            doc[section] = [
                {key: e.ref, "score": e.score, "reasons": list(e.reasons), "timestamp": e.timestamp}
                for e in getattr(self, section)
            ]
        return doc


@dataclass
class UserProfile:
    user: Any
    academic_background: AcademicBackground = field(default_factory=AcademicBackground)
    interests: Interests = field(default_factory=Interests)
    preferences: Preferences = field(default_factory=Preferences)
    assessment_results: AssessmentResults = field(default_factory=AssessmentResults)
    behavior_data: BehaviorData = field(default_factory=BehaviorData)
    recommendations: Recommendations = field(default_factory=Recommendations)
    mongo_id: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserProfile":
        return cls(
            user=doc.get("user"),
            academic_background=AcademicBackground.from_document(doc.get("academicBackground")),
            interests=Interests.from_document(doc.get("interests")),
            preferences=Preferences.from_document(doc.get("preferences")),
            assessment_results=AssessmentResults.from_document(doc.get("assessmentResults")),
            behavior_data=BehaviorData.from_document(doc.get("behaviorData")),
            recommendations=Recommendations.from_document(doc.get("recommendations")),
            mongo_id=doc.get("_id"),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
            version=int(doc.get("version") or 0),
        )

    def to_document(self) -> Dict[str, Any]:
        doc = {
            "user": self.user,
            "academicBackground": self.academic_background.to_document(),
            "interests": self.interests.to_document(),
            "preferences": self.preferences.to_document(),
            "assessmentResults": self.assessment_results.to_document(),
            "behaviorData": self.behavior_data.to_document(),
            "recommendations": self.recommendations.to_document(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "version": self.version,
        }
        if self.mongo_id is not None:
            doc["_id"] = self.mongo_id
        return doc

    def to_dict(self) -> Dict[str, Any]:
        return to_jsonable(self.to_document())


# ------------------------------------------------------
# Catalog candidates
# ------------------------------------------------------
@dataclass
class Program:
    name: str
    stream: str
    duration: Optional[str] = None
    annual_fee: float = 0
    total_fee: float = 0
    seats: int = 0
    cutoff: Optional[float] = None


@dataclass
class College:
    mongo_id: Any
    name: str
    type: Optional[str] = None
    category: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    programs: List[Program] = field(default_factory=list)
    rating_overall: float = 0
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def average_annual_fee(self) -> Optional[float]:
        if not self.programs:
            return None
        return sum(p.annual_fee for p in self.programs) / len(self.programs)


@dataclass
class Career:
    mongo_id: Any
    name: str
    courses: List[str] = field(default_factory=list)  # resolved course text or id string
    growth_rate: float = 0
    demand: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    industries: List[str] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Course:
    mongo_id: Any
    name: str
    category: str = ""
    subjects: List[str] = field(default_factory=list)
    fee_min: float = 0
    fee_max: float = 0
    career_prospects: List[str] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class RecommendationResult:
    item: Any  # College | Career | Course
    score: float
    reasons: List[str]

    @property
    def ref(self) -> Any:
        # courses are snapshotted by name, colleges/careers by document id
        if isinstance(self.item, Course):
            return self.item.name
        return self.item.mongo_id

    def to_entry(self, now: datetime) -> RecommendationEntry:
        return RecommendationEntry(ref=self.ref, score=self.score, reasons=list(self.reasons), timestamp=now)

    def to_frontend_dict(self) -> Dict[str, Any]:
        details = to_jsonable(self.item.raw)
        if isinstance(self.item, Course):
            return {
                "course": self.item.name,
                "score": self.score,
                "reasons": list(self.reasons),
                "details": details,
            }
        key = "college" if isinstance(self.item, College) else "career"
        return {key: details, "score": self.score, "reasons": list(self.reasons)}


@dataclass
class Insight:
    type: str
    title: str
    message: str
    action: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "title": self.title, "message": self.message, "action": self.action}
