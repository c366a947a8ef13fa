"""FastAPI web application for taskcadence.

Stateless: every request carries the stored rows it needs, and nothing is kept
between requests.
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from taskcadence.engine.overlap import find_conflicting_items
from taskcadence.engine.patterns import build_rule, get_occurrences_in_range, matches_pattern
from taskcadence.models.task import EventCandidate
from taskcadence.recurrence.materialize import items_for_day, reminders_in_range, tasks_in_range
from taskcadence.services.task_service import (
    TaskOverlapError,
    TaskValidationError,
    prepare_task_save,
)


VERSION = "0.1.0"

app = FastAPI(
    title="taskcadence API",
    description="Recurrence expansion and conflict checks for repeating tasks and reminders",
    version=VERSION,
)


# Request models
class RuleRequest(BaseModel):
    """Repeat rule fields as stored on a task or reminder."""
    selected_day: Optional[str] = Field(None, alias="selectedDay")
    repeat_option: Optional[str] = Field(None, alias="repeatOption")
    repeat_end_day: Optional[str] = Field(None, alias="repeatEndDay")
    skip_dates: Optional[Union[str, List[str]]] = Field(None, alias="skipDates")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True

    def rule(self):
        return build_rule(self.repeat_option, self.selected_day, self.repeat_end_day)


class OccurrencesRequest(RuleRequest):
    range_start: Optional[str] = Field(None, alias="rangeStart")
    range_end: Optional[str] = Field(None, alias="rangeEnd")


class MatchRequest(RuleRequest):
    day: Optional[str] = None


class ConflictRequest(BaseModel):
    candidate: Dict[str, Any]
    existing: List[Dict[str, Any]] = Field(default_factory=list)


class DayRequest(BaseModel):
    day: str
    items: List[Dict[str, Any]] = Field(default_factory=list)


class WeekRequest(BaseModel):
    start: str
    end: str
    tasks: List[Dict[str, Any]] = Field(default_factory=list)
    reminders: List[Dict[str, Any]] = Field(default_factory=list)


class TaskCheckRequest(BaseModel):
    task: Dict[str, Any]
    existing: List[Dict[str, Any]] = Field(default_factory=list)
    current_day: Optional[str] = Field(None, alias="currentDay")
    ui_day: Optional[str] = Field(None, alias="selectedDayUI")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


# Response models
class OccurrencesResponse(BaseModel):
    occurrences: List[Dict[str, Any]]


class MatchResponse(BaseModel):
    matches: bool


class ConflictResponse(BaseModel):
    conflict: bool
    conflicting_ids: List[Any] = Field(default_factory=list)


class ItemsResponse(BaseModel):
    items: List[Dict[str, Any]]


class WeekResponse(BaseModel):
    tasks: List[Dict[str, Any]]
    reminders: List[Dict[str, Any]]


class TaskCheckResponse(BaseModel):
    task: Dict[str, Any]
    repeatTaskOnCurrentDay: bool
    repeatTaskOnSelectedDay: bool


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


@app.post("/occurrences", response_model=OccurrencesResponse)
async def occurrences(request: OccurrencesRequest):
    """Expand a rule over [rangeStart, rangeEnd]."""
    found = get_occurrences_in_range(request.rule(), request.skip_dates, request.range_start, request.range_end)
    return OccurrencesResponse(occurrences=[occ.to_dict() for occ in found])


@app.post("/matches", response_model=MatchResponse)
async def matches(request: MatchRequest):
    """Does the rule fire on `day`?"""
    return MatchResponse(matches=matches_pattern(request.day, request.rule()))


@app.post("/conflicts", response_model=ConflictResponse)
async def conflicts(request: ConflictRequest):
    """Check a candidate task against existing tasks."""
    found = find_conflicting_items(request.candidate, request.existing)
    ids = [getattr(EventCandidate.from_record(c), "id", None) for c in found]
    return ConflictResponse(conflict=bool(found), conflicting_ids=ids)


@app.post("/day", response_model=ItemsResponse)
async def day_view(request: DayRequest):
    """Items occurring on a single day."""
    return ItemsResponse(items=items_for_day(request.items, request.day))


@app.post("/week", response_model=WeekResponse)
async def week_view(request: WeekRequest):
    """Tasks and reminders expanded over [start, end]."""
    return WeekResponse(
        tasks=tasks_in_range(request.tasks, request.start, request.end),
        reminders=reminders_in_range(request.reminders, request.start, request.end),
    )


@app.post("/tasks/validate", response_model=TaskCheckResponse)
async def validate_task(request: TaskCheckRequest):
    """Run the create/update checks for a task without saving it."""
    try:
        check = prepare_task_save(
            request.task,
            request.existing,
            current_day=request.current_day,
            ui_day=request.ui_day,
        )
    except TaskValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TaskOverlapError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return TaskCheckResponse(
        task=check.record.model_dump(by_alias=True, mode="json"),
        repeatTaskOnCurrentDay=check.repeats_on_current_day,
        repeatTaskOnSelectedDay=check.repeats_on_selected_day,
    )


if __name__ == "__main__":
    import uvicorn

    from taskcadence.config import configure_logging, get_settings

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
