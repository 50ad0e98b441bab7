"""Miscellaneous routes: health and week lookup."""

from typing import Any

from fastapi import APIRouter, Query

from weekgoals.goals.markdown import format_header
from weekgoals.goals.weeks import week_range

router = APIRouter(prefix="/api", tags=["misc"])


@router.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok"}


@router.get("/weeks")
def get_week(offset: int = Query(default=0)) -> dict[str, Any]:
    """Week key and display range for an offset from the current week."""
    week = week_range(offset)
    return {
        "offset": offset,
        "weekKey": week.key,
        "start": week.start.isoformat(),
        "end": week.end.isoformat(),
        "year": week.year,
        "weekNumber": week.week_number,
        "title": format_header(week).lstrip("# "),
    }
