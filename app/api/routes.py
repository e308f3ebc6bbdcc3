"""
API routes for grouping generation and retrieval.
"""

from dataclasses import asdict
from datetime import datetime
from typing import List, Dict, Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from celery.result import AsyncResult

from app.models import Golfer, PreferenceEdge, GuestAttachment, TeeTimePreference
from app.services.grouping_engine import GroupingEngine
from app.services.validator import GroupingValidator
from app.services.grouping_service import GroupingService
from app.core.config import (
    DEFAULT_GROUP_CAPACITY, OPTIMIZER_ITERATION_FACTOR,
    MIN_PREFERENCE_RANK, MAX_PREFERENCE_RANK, TEE_TIME_PREFERENCES
)
from app.core.exceptions import (
    GroupingInputError, GroupingDataError, ScheduleNotFoundError, AutoGroupingDisabledError
)
from app.core.celery_app import celery_app
from app.core.logging_config import get_logger
from app.tasks.grouping_tasks import generate_groupings_task

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["groupings"])


def get_grouping_service() -> GroupingService:
    return GroupingService()


class GolferIn(BaseModel):
    profile_id: str
    tee_time_preference: Optional[str] = "none"


class PreferenceIn(BaseModel):
    profile_id: str
    preferred_partner_id: str
    rank: int


class GuestIn(BaseModel):
    guest_request_id: str
    host_profile_id: str


class PreviewRequest(BaseModel):
    """Request model for computing groupings without touching the database."""
    golfers: List[GolferIn]
    preferences: List[PreferenceIn] = []
    guests: List[GuestIn] = []
    capacity: Optional[int] = None


class GenerateRequest(BaseModel):
    """Request model for schedule grouping generation."""
    capacity: Optional[int] = None
    force: bool = False
    dry_run: bool = False


class GroupResponse(BaseModel):
    group_number: int
    tee_order: int
    members: List[str]
    guests: List[str]
    harmony_score: float
    captured_affinity: int
    earliness: float


class UnplacedGuestResponse(BaseModel):
    guest_request_id: str
    host_profile_id: str
    reason: str


class GroupingResponse(BaseModel):
    """Response model for grouping generation."""
    success: bool
    message: str
    schedule_id: Optional[str] = None
    persisted: bool = False
    capacity: int
    total_affinity: int
    initial_affinity: int
    optimizer_iterations: int
    converged: bool
    groups: List[GroupResponse]
    unplaced_guests: List[UnplacedGuestResponse]
    validation: Dict[str, Any]
    generation_time: float


class StoredMemberInfo(BaseModel):
    profile_id: Optional[str] = None
    guest_request_id: Optional[str] = None
    first_name: str
    last_name: str
    phone: str = ""
    email: str = ""
    ghin_number: str = ""
    is_guest: bool = False
    host_name: Optional[str] = None
    host_profile_id: Optional[str] = None
    tee_time_preference: Optional[str] = None
    preferred_partners_in_group: List[str] = []


class StoredGroupingInfo(BaseModel):
    group_number: int
    tee_order: int
    harmony_score: Optional[float] = None
    members: List[StoredMemberInfo]


def _build_response(result, validation, generation_time: float, schedule_id: str = None,
                    persisted: bool = False) -> GroupingResponse:
    data = result.to_dict()
    return GroupingResponse(
        success=True,
        message=f"Generated {len(result.groups)} groups for {result.golfer_count} golfers",
        schedule_id=schedule_id,
        persisted=persisted,
        capacity=data["capacity"],
        total_affinity=data["total_affinity"],
        initial_affinity=data["initial_affinity"],
        optimizer_iterations=data["optimizer_iterations"],
        converged=data["converged"],
        groups=[GroupResponse(**group) for group in data["groups"]],
        unplaced_guests=[UnplacedGuestResponse(**guest) for guest in data["unplaced_guests"]],
        validation=validation.to_dict(),
        generation_time=generation_time
    )


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@router.get("/settings")
async def get_settings():
    """Engine settings currently in effect."""
    return {
        "default_group_capacity": DEFAULT_GROUP_CAPACITY,
        "optimizer_iteration_factor": OPTIMIZER_ITERATION_FACTOR,
        "preference_ranks": {"min": MIN_PREFERENCE_RANK, "max": MAX_PREFERENCE_RANK},
        "tee_time_preferences": TEE_TIME_PREFERENCES,
    }


@router.post("/groupings/preview", response_model=GroupingResponse)
def preview_groupings(request: PreviewRequest):
    """
    Compute groupings from inputs supplied in the request body.
    Nothing is read from or written to the database.
    """
    start_time = datetime.now()
    try:
        golfers = [
            Golfer(profile_id=g.profile_id, tee_time_preference=TeeTimePreference.parse(g.tee_time_preference))
            for g in request.golfers
        ]
        preferences = [
            PreferenceEdge(from_profile_id=p.profile_id, to_profile_id=p.preferred_partner_id, rank=p.rank)
            for p in request.preferences
        ]
        guests = [
            GuestAttachment(guest_request_id=g.guest_request_id, host_profile_id=g.host_profile_id)
            for g in request.guests
        ]
        result = GroupingEngine(capacity=request.capacity).generate(golfers, preferences, guests)
    except GroupingInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    validation = GroupingValidator().validate_result(result, golfers, guests)
    generation_time = (datetime.now() - start_time).total_seconds()
    return _build_response(result, validation, generation_time)


@router.post("/schedules/{schedule_id}/groupings", response_model=GroupingResponse)
def generate_schedule_groupings(
    schedule_id: str,
    request: Optional[GenerateRequest] = None,
    service: GroupingService = Depends(get_grouping_service)
):
    """
    Generate groupings for a game date and store them.

    This endpoint:
    1. Loads confirmed golfers, preferences and approved guests from Supabase
    2. Generates groups with tee order and harmony scores
    3. Validates the groupings
    4. Replaces any stored groupings for the schedule (unless dry_run)
    """
    request = request or GenerateRequest()
    try:
        run = service.generate_for_schedule(
            schedule_id,
            capacity=request.capacity,
            force=request.force,
            persist=not request.dry_run
        )
    except ScheduleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AutoGroupingDisabledError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except GroupingInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except GroupingDataError as e:
        logger.error("Grouping generation failed for %s: %s", schedule_id, e)
        raise HTTPException(status_code=500, detail=f"Grouping generation failed: {str(e)}")

    return _build_response(
        run.result, run.validation, run.generation_time,
        schedule_id=schedule_id, persisted=run.persisted
    )


@router.post("/schedules/{schedule_id}/groupings/async")
async def generate_schedule_groupings_async(schedule_id: str, request: Optional[GenerateRequest] = None):
    """
    Start async grouping generation task.

    Returns:
        dict: Task ID for polling status
    """
    request = request or GenerateRequest()
    try:
        task = generate_groupings_task.delay(schedule_id, request.capacity, request.force)

        return {
            "task_id": task.id,
            "status": "PENDING",
            "message": "Grouping generation started"
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to start task: {str(e)}")


@router.get("/groupings/status/{task_id}")
async def get_grouping_status(task_id: str):
    """
    Get status of async grouping generation task.
    
    Args:
        task_id: Celery task ID
        
    Returns:
        dict: Task status and result (if complete)
    """
    try:
        task_result = AsyncResult(task_id, app=celery_app)

        if task_result.state == "PENDING":
            response = {
                "task_id": task_id,
                "status": "PENDING",
                "message": "Task is waiting to start..."
            }
        elif task_result.state == "PROGRESS":
            response = {
                "task_id": task_id,
                "status": "PROGRESS",
                "message": task_result.info.get("status", "Processing...")
            }
        elif task_result.state == "SUCCESS":
            response = {
                "task_id": task_id,
                "status": "SUCCESS",
                "result": task_result.result
            }
        elif task_result.state == "FAILURE":
            response = {
                "task_id": task_id,
                "status": "FAILURE",
                "message": str(task_result.info)
            }
        else:
            response = {
                "task_id": task_id,
                "status": task_result.state,
                "message": f"Task state: {task_result.state}"
            }

        return response
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {str(e)}")


@router.get("/schedules/{schedule_id}/groupings", response_model=List[StoredGroupingInfo])
def get_schedule_groupings(schedule_id: str, service: GroupingService = Depends(get_grouping_service)):
    """Stored groupings for a game date, in tee order, with member details."""
    try:
        groupings = service.get_stored_groupings(schedule_id)
    except GroupingDataError as e:
        raise HTTPException(status_code=500, detail=f"Failed to load groupings: {str(e)}")

    return [StoredGroupingInfo(**asdict(grouping)) for grouping in groupings]
