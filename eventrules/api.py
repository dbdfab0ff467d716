"""FastAPI application for EventRules."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
from typing import Literal
import tomllib

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .capacity import initial_capacity, toggle_mode
from .join_window import build_timeline
from .presets import CAPACITY_SUGGESTIONS, JOIN_PRESETS, suggest_capacity
from .schemas import (
    CandidatePayload,
    CapacityTogglePayload,
    serialize_capacity_state,
    serialize_outcome,
    serialize_timeline,
)
from .config import settings
from .models import CapacityState, ParticipationMode
from .utils import duration_minutes, utcnow
from .validator import WIZARD_STEPS, can_leave_step, errors_for_step, validate

# Use uvicorn's error logger so messages get the level prefix in the default log
# format (needed for downstream filtering like Loki).
logger = logging.getLogger("uvicorn.error")


def _load_app_version() -> str:
    """Return the current package version, falling back to pyproject for dev runs."""
    try:
        return pkg_version("eventrules")
    except PackageNotFoundError:
        pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            data = tomllib.loads(pyproject_path.read_text())
            project = data.get("project") or {}
            return str(project.get("version") or "dev")
    return "dev"


APP_VERSION = _load_app_version()

@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info(
        "EventRules %s ready (config: %s)", APP_VERSION, settings.config_path
    )
    yield


app = FastAPI(title="EventRules", version=APP_VERSION, lifespan=lifespan)


def get_clock():
    """Clock used for lead-time checks; tests override this dependency."""
    return utcnow


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(
        "Rejected malformed payload on %s %s", request.method, request.url.path
    )
    return JSONResponse({"detail": exc.errors()}, status_code=422)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Gracefully handle unexpected errors."""
    logger.exception(
        "Unhandled error while processing %s %s", request.method, request.url.path
    )
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


@app.get("/health")
def health():
    return {"status": "ok", "version": APP_VERSION}


@app.post("/api/v1/events/validate")
def api_validate_event(
    payload: CandidatePayload,
    intent: Literal["create", "edit"] = Query("create"),
    clock=Depends(get_clock),
):
    outcome = validate(
        payload.to_candidate(), is_creation=intent == "create", clock=clock
    )
    return serialize_outcome(outcome)


@app.post("/api/v1/events/validate/{step}")
def api_validate_step(
    step: str,
    payload: CandidatePayload,
    intent: Literal["create", "edit"] = Query("create"),
    clock=Depends(get_clock),
):
    if step not in WIZARD_STEPS:
        raise HTTPException(status_code=404, detail=f"Unknown step: {step}")
    outcome = validate(
        payload.to_candidate(), is_creation=intent == "create", clock=clock
    )
    return {
        "step": step,
        "field_errors": errors_for_step(outcome, step),
        "can_proceed": can_leave_step(outcome, step),
    }


@app.post("/api/v1/events/timeline")
def api_event_timeline(payload: CandidatePayload):
    timeline = build_timeline(
        payload.join_opens_before_start_min,
        payload.join_cutoff_before_start_min,
        payload.allow_late_join,
        payload.late_join_cutoff_after_start_min,
        duration_minutes(payload.start_at, payload.end_at),
    )
    return {"timeline": serialize_timeline(timeline)}


@app.post("/api/v1/capacity/toggle")
def api_toggle_capacity(payload: CapacityTogglePayload):
    state = CapacityState(mode=payload.mode, min=payload.min, max=payload.max)
    if payload.initial_min is None or payload.initial_max is None:
        initial = initial_capacity(ParticipationMode.GROUP).pair
    else:
        initial = (payload.initial_min, payload.initial_max)
    new_state = toggle_mode(state, payload.target_mode, initial=initial)
    return serialize_capacity_state(new_state)


@app.get("/api/v1/presets/join")
def api_join_presets():
    return {
        "presets": [
            {
                "key": preset.key,
                "label": preset.label,
                "description": preset.description,
                "join_opens_before_start_min": preset.join_opens_before_start_min,
                "join_cutoff_before_start_min": preset.join_cutoff_before_start_min,
                "allow_late_join": preset.allow_late_join,
                "late_join_cutoff_after_start_min": preset.late_join_cutoff_after_start_min,
            }
            for preset in JOIN_PRESETS.values()
        ]
    }


@app.get("/api/v1/presets/capacity")
def api_capacity_presets(category: str | None = Query(None)):
    if category is None:
        suggestions = list(CAPACITY_SUGGESTIONS.values())
    else:
        match = suggest_capacity(category)
        if match is None:
            raise HTTPException(status_code=404, detail="No suggestion for category")
        suggestions = [match]
    return {
        "suggestions": [
            {"category": s.category, "min": s.min, "max": s.max, "label": s.label}
            for s in suggestions
        ]
    }

