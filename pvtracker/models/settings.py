# models/settings.py
from typing import Literal

from pydantic import Field, field_validator

from .common import CamelModel

Units = Literal["imperial", "metric"]
Level = Literal["highschool", "college"]

ATHLETE_FIELDS = ("first_name", "last_name", "year", "level")


class Athlete(CamelModel):
    first_name: str = ""
    last_name: str = ""
    year: str = ""
    level: Level = "highschool"

    @field_validator("first_name", "last_name", "year", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        if v is None:
            return ""
        return str(v)

    @field_validator("level", mode="before")
    @classmethod
    def _known_level(cls, v):
        return "college" if v == "college" else "highschool"


class Settings(CamelModel):
    units: Units = "imperial"
    athlete: Athlete = Field(default_factory=Athlete)
    plan_overridden: bool = False
    watermark_uri: str = ""

    @field_validator("units", mode="before")
    @classmethod
    def _unknown_units_to_imperial(cls, v):
        return v if v in ("imperial", "metric") else "imperial"

    @field_validator("watermark_uri", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else str(v)
