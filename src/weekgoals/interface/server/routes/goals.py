"""Goal and sub-item routes.

Every route is scoped to the authenticated user through get_goal_service;
an id that belongs to someone else answers 404 exactly like a missing one.
"""

from fastapi import APIRouter, Depends, Query

from weekgoals.foundation.errors import ErrorCode, ValidationError
from weekgoals.goals.service import GoalService
from weekgoals.goals.types import SubItemType
from weekgoals.goals.weeks import canonical_week_key
from weekgoals.interface.server.deps import get_goal_service
from weekgoals.interface.server.routes._models import (
    CreateGoalRequest,
    CreateSubItemRequest,
    ExportResponse,
    GoalResponse,
    OkResponse,
    PasteRequest,
    ProgressResponse,
    SubItemResponse,
    UpdateNodeRequest,
)

router = APIRouter(prefix="/api/goals", tags=["goals"])


def _require(value: str | None, field: str) -> str:
    if not value:
        raise ValidationError(ErrorCode.FIELD_REQUIRED, {"field": field})
    return value


# ═══════════════════════════════════════════════════════════════
# WEEK-LEVEL ROUTES
# ═══════════════════════════════════════════════════════════════


@router.get("", response_model=list[GoalResponse])
def list_goals(
    week_key: str | None = Query(default=None, alias="weekKey"),
    service: GoalService = Depends(get_goal_service),
) -> list[GoalResponse]:
    """Goals for a week with their full sub-item trees."""
    goals = service.list_goals(_require(week_key, "weekKey"))
    return [GoalResponse.from_goal(g) for g in goals]


@router.post("", status_code=201, response_model=GoalResponse)
def add_goal(
    request: CreateGoalRequest,
    service: GoalService = Depends(get_goal_service),
) -> GoalResponse:
    goal = service.add_goal(_require(request.week_key, "weekKey"), request.text)
    return GoalResponse.from_goal(goal)


@router.post("/paste", status_code=201, response_model=list[GoalResponse])
def paste_goals(
    request: PasteRequest,
    service: GoalService = Depends(get_goal_service),
) -> list[GoalResponse]:
    """Append goal trees (or clipboard markdown) to a week; returns the whole week."""
    week_key = _require(request.week_key, "weekKey")
    if request.markdown is not None:
        if not service.import_markdown(week_key, request.markdown):
            raise ValidationError(ErrorCode.FIELD_REQUIRED, {"field": "goals"})
        goals = service.list_goals(week_key)
    else:
        goals = service.paste_goals(week_key, [g.to_goal() for g in request.goals or []])
    return [GoalResponse.from_goal(g) for g in goals]


@router.get("/export", response_model=ExportResponse)
def export_goals(
    week_key: str | None = Query(default=None, alias="weekKey"),
    service: GoalService = Depends(get_goal_service),
) -> ExportResponse:
    week_key = canonical_week_key(_require(week_key, "weekKey"))
    return ExportResponse(week_key=week_key, markdown=service.export_markdown(week_key))


@router.get("/progress", response_model=ProgressResponse)
def goal_progress(
    week_key: str | None = Query(default=None, alias="weekKey"),
    service: GoalService = Depends(get_goal_service),
) -> ProgressResponse:
    week_key = canonical_week_key(_require(week_key, "weekKey"))
    progress = service.progress(week_key)
    return ProgressResponse(
        week_key=week_key,
        done=progress.done,
        total=progress.total,
        percent=progress.percent,
    )


# ═══════════════════════════════════════════════════════════════
# SUB-ITEM ROUTES
# ═══════════════════════════════════════════════════════════════


@router.patch("/subs/{sub_id}", response_model=SubItemResponse)
def update_sub_item(
    sub_id: str,
    request: UpdateNodeRequest,
    service: GoalService = Depends(get_goal_service),
) -> SubItemResponse:
    sub = None
    if request.text is not None:
        sub = service.rename_sub_item(sub_id, request.text)
    if request.checked is not None:
        sub = service.set_sub_item_checked(sub_id, request.checked)
    if sub is None:
        sub = service.toggle_sub_item(sub_id)
    return SubItemResponse.from_item(sub)


@router.delete("/subs/{sub_id}", response_model=OkResponse)
def delete_sub_item(
    sub_id: str,
    service: GoalService = Depends(get_goal_service),
) -> OkResponse:
    service.delete_sub_item(sub_id)
    return OkResponse()


@router.post("/{goal_id}/subs", status_code=201, response_model=SubItemResponse)
def add_sub_item(
    goal_id: str,
    request: CreateSubItemRequest,
    service: GoalService = Depends(get_goal_service),
) -> SubItemResponse:
    sub = service.add_sub_item(
        goal_id,
        request.text,
        request.type or SubItemType.CHECKBOX,
        parent_sub_id=request.parent_sub_id,
    )
    return SubItemResponse.from_item(sub)


# ═══════════════════════════════════════════════════════════════
# GOAL ROUTES
# ═══════════════════════════════════════════════════════════════


@router.patch("/{goal_id}", response_model=GoalResponse)
def update_goal(
    goal_id: str,
    request: UpdateNodeRequest,
    service: GoalService = Depends(get_goal_service),
) -> GoalResponse:
    """Rename and/or set checked; an empty body toggles checked."""
    goal = None
    if request.text is not None:
        goal = service.rename_goal(goal_id, request.text)
    if request.checked is not None:
        goal = service.set_goal_checked(goal_id, request.checked)
    if goal is None:
        goal = service.toggle_goal(goal_id)
    return GoalResponse.from_goal(goal)


@router.delete("/{goal_id}", response_model=OkResponse)
def delete_goal(
    goal_id: str,
    service: GoalService = Depends(get_goal_service),
) -> OkResponse:
    service.delete_goal(goal_id)
    return OkResponse()
