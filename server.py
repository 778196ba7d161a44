"""
Career advisor recommendation server - FastAPI entry point.

Serves rule-based college / career / course recommendations, the user
profile they are computed from, and behavior tracking. The upstream auth
layer forwards the authenticated user id in the ``X-User-Id`` header.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Body, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from advisor import config
from advisor.errors import AdvisorError
from advisor.interface import api_interface
from advisor.interface.api_interface import (
    browse_careers,
    browse_colleges,
    get_career_details,
    get_college_details,
    get_college_filter_options,
    get_recommendations,
    get_user_profile,
    track_user_behavior,
    update_user_profile,
)
from advisor.models.schemas import ApiResponse, HealthResponse, TrackRequest

# Logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse(success=False, error=message).model_dump(exclude_none=True),
    )


def _handle(tag: str, e: Exception) -> JSONResponse:
    if isinstance(e, AdvisorError):
        logger.warning(f"[API] {tag} rejected ({e.status_code}): {e.message}")
        return _error(e.status_code, e.message)
    logger.error(f"[API] {tag} error: {e}")
    return _error(500, str(e))


# --- Lifespan ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("[Startup] Recommendation server starting...")

    # lazy connection, but check MongoDB (and create indexes) once at startup
    try:
        loader = api_interface._get_loader()
        loader.ping()
        logger.info("[Startup] MongoDB ready")
    except Exception as e:
        logger.warning(f"[Startup] Warmup failed (will retry on first request): {e}")

    yield

    logger.info("[Shutdown] Recommendation server shutting down...")


app = FastAPI(
    title="Career Advisor Recommendation Server",
    description="Rule-based college / career / course recommendations",
    version=config.SERVICE_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {"loc": (), "msg": "Invalid request"}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    logger.warning(f"[API] Invalid request to {request.url.path}: {message}")
    return _error(400, message)


# --- API Endpoints ---


@app.get("/")
def root():
    return {
        "message": "Career Advisor Recommendation Server",
        "version": config.SERVICE_VERSION,
        "endpoints": [
            "/health",
            "/api/recommendations",
            "/api/recommendations/profile",
            "/api/recommendations/track",
            "/api/college",
            "/api/career",
        ],
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="ok",
        service=config.SERVICE_NAME,
        version=config.SERVICE_VERSION,
    )


@app.get("/api/recommendations", response_model=ApiResponse, response_model_exclude_none=True)
def recommendations(x_user_id: Optional[str] = Header(None)):
    """Recompute and return personalized recommendations plus insights."""
    try:
        logger.info(f"[API] Recommendations: user_id={x_user_id}")
        data = get_recommendations(x_user_id)
        return ApiResponse(success=True, data=data)
    except Exception as e:
        return _handle("Recommendations", e)


@app.put("/api/recommendations/profile", response_model=ApiResponse, response_model_exclude_none=True)
def put_profile(
    body: Dict[str, Any] = Body(...),
    x_user_id: Optional[str] = Header(None),
):
    """Partially update the profile, then regenerate recommendations."""
    try:
        logger.info(f"[API] Profile update: user_id={x_user_id}, sections={sorted(body)}")
        data = update_user_profile(x_user_id, body)
        return ApiResponse(success=True, data=data)
    except Exception as e:
        return _handle("Profile update", e)


@app.get("/api/recommendations/profile", response_model=ApiResponse, response_model_exclude_none=True)
def get_profile(x_user_id: Optional[str] = Header(None)):
    try:
        return ApiResponse(success=True, data=get_user_profile(x_user_id))
    except Exception as e:
        return _handle("Profile", e)


@app.post("/api/recommendations/track", response_model=ApiResponse, response_model_exclude_none=True)
def track(request: TrackRequest, x_user_id: Optional[str] = Header(None)):
    """
    Record a behavior event.

    - search: {query, category}
    - view_college: {collegeId}
    - view_career: {careerId}
    - time_spent: {section, duration}
    Other actions are accepted and ignored.
    """
    try:
        track_user_behavior(x_user_id, request.action, request.data)
        return ApiResponse(success=True, message="Behavior tracked successfully")
    except Exception as e:
        return _handle("Track", e)


@app.get("/api/college", response_model=ApiResponse, response_model_exclude_none=True)
def colleges(
    state: Optional[str] = None,
    city: Optional[str] = None,
    stream: Optional[str] = None,
    type: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = Query("rating", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """College directory with filters, sorting and pagination."""
    try:
        data = browse_colleges(
            state=state,
            city=city,
            stream=stream,
            college_type=type,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        return ApiResponse(success=True, data=data)
    except Exception as e:
        return _handle("Colleges", e)


# registered before /{college_id} so "filters" is not taken as an id
@app.get("/api/college/filters", response_model=ApiResponse, response_model_exclude_none=True)
def college_filters():
    try:
        return ApiResponse(success=True, data=get_college_filter_options())
    except Exception as e:
        return _handle("College filters", e)


@app.get("/api/college/{college_id}", response_model=ApiResponse, response_model_exclude_none=True)
def college(college_id: str):
    try:
        return ApiResponse(success=True, data=get_college_details(college_id))
    except Exception as e:
        return _handle("College", e)


@app.get("/api/career", response_model=ApiResponse, response_model_exclude_none=True)
def careers():
    try:
        return ApiResponse(success=True, data=browse_careers())
    except Exception as e:
        return _handle("Careers", e)


@app.get("/api/career/course/{course_id}", response_model=ApiResponse, response_model_exclude_none=True)
def careers_by_course(course_id: str):
    try:
        return ApiResponse(success=True, data=browse_careers(course_id=course_id))
    except Exception as e:
        return _handle("Careers by course", e)


@app.get("/api/career/{career_id}", response_model=ApiResponse, response_model_exclude_none=True)
def career(career_id: str):
    try:
        return ApiResponse(success=True, data=get_career_details(career_id))
    except Exception as e:
        return _handle("Career", e)


if __name__ == "__main__":
    uvicorn.run("server:app", host=config.SERVER_HOST, port=config.SERVER_PORT)
