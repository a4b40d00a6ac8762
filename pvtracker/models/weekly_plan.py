# models/weekly_plan.py
from typing import Dict, List

from pydantic import Field

from .common import CamelModel


class RoutineEntry(CamelModel):
    text: str
    done: bool = False
    is_header: bool = False


class DayPlan(CamelModel):
    goals: str = ""
    routine: List[RoutineEntry] = Field(default_factory=list)


# Sunday..Saturday -> DayPlan
WeeklyPlan = Dict[str, DayPlan]
