"""FastAPI server for the meal rotation scheduler.

Stateless: callers send the pool, ledger and schedule with every request and
persist what comes back.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from src.data_layer.exceptions import (
    ConfigurationError,
    InvalidSlotError,
    MealNotFoundError,
    MealPoolError,
    ScheduleDayNotFoundError,
)
from src.data_layer.ledger_store import ledger_from_json
from src.data_layer.meal_pool_db import parse_macros, parse_meal_pool
from src.data_layer.models import CustomMeal
from src.data_layer.scheduler_config import SchedulerConfigLoader
from src.planning.cycle import is_schedule_current, needs_new_pool, reset_ledger_for_new_pool
from src.planning.meal_logging import log_custom_meal, log_pool_meal
from src.planning.meal_scheduler import MealScheduler, ScheduleResult
from src.output.formatters import format_schedule_json, hydrate_schedule, schedule_from_json


config_path = "config/scheduler.yaml"

app = FastAPI(title="Meal Rotation API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Local development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ScheduleRequest(BaseModel):
    meal_pool: List[Dict[str, Any]] = Field(..., alias="mealPool")
    recently_used: List[Dict[str, Any]] = Field(default_factory=list, alias="recentlyUsedMealIds")
    current_schedule: List[Dict[str, Any]] = Field(default_factory=list, alias="currentSchedule")
    current_schedule_start_date: Optional[date] = Field(default=None, alias="currentScheduleStartDate")
    last_pool_generation_date: Optional[date] = Field(default=None, alias="lastPoolGenerationDate")
    pool_replaced: bool = Field(default=False, alias="poolReplaced")
    refresh: bool = False
    general_notes: List[str] = Field(default_factory=list, alias="generalNotes")
    flexibility_tips: List[str] = Field(default_factory=list, alias="flexibilityTips")
    today: Optional[date] = None
    cycle_length: Optional[int] = None
    recency_window_days: Optional[int] = None
    anchor_weekday: Optional[int] = None
    snack_slots: Optional[int] = None


class CustomMealRequest(BaseModel):
    dish: str = ""
    calories: float = 0.0
    macros: Optional[Dict[str, float]] = None
    ingredients: List[str] = Field(default_factory=list)
    preparation: str = ""


class LogMealRequest(BaseModel):
    meal_pool: List[Dict[str, Any]] = Field(..., alias="mealPool")
    schedule: List[Dict[str, Any]] = Field(..., alias="currentSchedule")
    day: date = Field(..., alias="date")
    meal_type: str = Field(..., alias="mealType")
    meal_id: Optional[str] = Field(default=None, alias="mealId")
    custom_meal: Optional[CustomMealRequest] = Field(default=None, alias="customMealData")


@app.get("/api/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/api/schedule")
def create_schedule(request: ScheduleRequest) -> Dict[str, Any]:
    try:
        meal_pool = parse_meal_pool(request.meal_pool)
        config = SchedulerConfigLoader(config_path).load().with_overrides({
            "cycle_length": request.cycle_length,
            "recency_window_days": request.recency_window_days,
            "anchor_weekday": request.anchor_weekday,
            "snack_slots": request.snack_slots,
        })
        recently_used = ledger_from_json(request.recently_used)
        stored_schedule = schedule_from_json(request.current_schedule)
    except (ConfigurationError, MealPoolError, KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    today = request.today or date.today()

    # A replaced pool invalidates both the old ledger and the old schedule
    if request.pool_replaced:
        recently_used = reset_ledger_for_new_pool()
        stored_schedule = []

    reused = is_schedule_current(
        request.current_schedule_start_date, stored_schedule, today, config.anchor_weekday
    )
    if reused:
        result = ScheduleResult(schedule=stored_schedule, updated_recently_used=recently_used)
    else:
        result = MealScheduler(config).generate(meal_pool, recently_used, today)

    response = format_schedule_json(result, meal_pool)
    response.update({
        "scheduleReused": reused,
        "needsNewPool": needs_new_pool(
            meal_pool,
            request.last_pool_generation_date,
            today,
            refresh=request.refresh,
            min_pool_size=config.min_pool_size,
            max_pool_age_days=config.max_pool_age_days,
        ),
        "generalNotes": request.general_notes,
        "flexibilityTips": request.flexibility_tips,
    })
    return response


@app.put("/api/schedule/log")
def log_meal(request: LogMealRequest) -> Dict[str, Any]:
    if not request.meal_id and request.custom_meal is None:
        raise HTTPException(
            status_code=400,
            detail="Either mealId or customMealData must be provided.",
        )
    try:
        meal_pool = parse_meal_pool(request.meal_pool)
        schedule = schedule_from_json(request.schedule)
    except (MealPoolError, KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid request data: {exc}") from exc

    try:
        logged_at = datetime.now()
        if request.meal_id:
            updated = log_pool_meal(
                schedule, request.day, request.meal_type, request.meal_id, meal_pool, logged_at
            )
        else:
            custom = request.custom_meal
            updated = log_custom_meal(
                schedule,
                request.day,
                request.meal_type,
                CustomMeal(
                    dish=custom.dish,
                    calories=custom.calories,
                    macros=parse_macros(custom.macros),
                    ingredients=tuple(custom.ingredients),
                    preparation=custom.preparation,
                ),
                logged_at,
            )
    except (MealNotFoundError, ScheduleDayNotFoundError) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (InvalidSlotError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "message": "Meal logged successfully.",
        "currentSchedule": hydrate_schedule(updated, meal_pool),
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
