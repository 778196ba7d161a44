"""Request / response schemas for the recommendation API.

Field names follow the stored document (camelCase) since that is the JSON the
frontend sends back.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Stream = Literal["Science", "Commerce", "Arts", "Vocational"]
ClassLevel = Literal["10th", "11th", "12th", "Graduate", "Post-Graduate"]
CollegeType = Literal["Government", "Private", "Deemed"]

Percent = Annotated[float, Field(ge=0, le=100, allow_inf_nan=False)]
NonNegative = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class GradeIn(BaseModel):
    subject: str
    marks: NonNegative
    grade: Optional[str] = None


class AcademicBackgroundIn(BaseModel):
    currentClass: Optional[ClassLevel] = None
    stream: Optional[Stream] = None
    subjects: Optional[List[str]] = None
    grades: Optional[List[GradeIn]] = None
    overallPercentage: Optional[Percent] = None


class InterestsIn(BaseModel):
    subjects: Optional[List[str]] = None
    activities: Optional[List[str]] = None
    careerFields: Optional[List[str]] = None


class LocationIn(BaseModel):
    preferredStates: Optional[List[str]] = None
    preferredCities: Optional[List[str]] = None


class BudgetIn(BaseModel):
    min: Optional[NonNegative] = None
    max: Optional[NonNegative] = None


class PreferencesIn(BaseModel):
    location: Optional[LocationIn] = None
    budget: Optional[BudgetIn] = None
    collegeType: Optional[List[CollegeType]] = None
    courseType: Optional[List[str]] = None


class AptitudeScoresIn(BaseModel):
    logical: Optional[Percent] = None
    verbal: Optional[Percent] = None
    numerical: Optional[Percent] = None
    spatial: Optional[Percent] = None
    mechanical: Optional[Percent] = None


class PersonalityTraitsIn(BaseModel):
    extroversion: Optional[Percent] = None
    openness: Optional[Percent] = None
    conscientiousness: Optional[Percent] = None
    agreeableness: Optional[Percent] = None
    neuroticism: Optional[Percent] = None


class CareerMatchIn(BaseModel):
    career: str
    matchPercentage: Percent
    reasons: List[str] = []


class AssessmentResultsIn(BaseModel):
    aptitudeScores: Optional[AptitudeScoresIn] = None
    personalityTraits: Optional[PersonalityTraitsIn] = None
    careerMatches: Optional[List[CareerMatchIn]] = None


class ProfileUpdate(BaseModel):
    """Partial profile update. behaviorData / recommendations are server-managed and ignored."""

    academicBackground: Optional[AcademicBackgroundIn] = None
    interests: Optional[InterestsIn] = None
    preferences: Optional[PreferencesIn] = None
    assessmentResults: Optional[AssessmentResultsIn] = None


class TrackRequest(BaseModel):
    action: str
    data: Dict[str, Any] = {}


class ApiResponse(BaseModel):
    """Envelope shared by every endpoint."""

    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
