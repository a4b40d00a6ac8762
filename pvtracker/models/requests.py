# models/requests.py
"""
Request bodies for the HTTP API.

Form input arrives loosely typed (heights as feet/inches strings or meters);
validators here reject anything the session screens would refuse, so a bad
request never reaches the store.
"""
import math
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from .common import CamelModel
from .pole import Pole
from .session import HeightAttempt, SessionSetup
from pvtracker.services.units import meters_to_inches, to_inches


class UnitsUpdate(CamelModel):
    units: Literal["imperial", "metric"]


class AthleteUpdate(CamelModel):
    """Partial athlete profile; only the fields sent are changed."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    year: Optional[str] = None
    level: Optional[Literal["highschool", "college"]] = None


class WatermarkUpdate(CamelModel):
    uri: str = ""


class HeightInput(CamelModel):
    """
    A bar height as typed into the session form.

    Either `meters` or `feet`/`inches` is given; the height is stored in
    inches. Every height needs a pole.
    """
    feet: Optional[Any] = None
    inches: Optional[Any] = None
    meters: Optional[Any] = None
    pole_idx: Optional[int] = None

    @model_validator(mode="after")
    def _valid_height_and_pole(self):
        if self.height_in <= 0:
            raise ValueError("Select a valid height")
        if self.pole_idx is None:
            raise ValueError("Select a pole for this height")
        return self

    @staticmethod
    def _number(value: Any) -> float:
        if value is None or value == "":
            return 0.0
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError("Select a valid height")
        if not math.isfinite(number):
            raise ValueError("Select a valid height")
        return number

    @property
    def height_in(self) -> float:
        if self.meters is not None and self.meters != "":
            return meters_to_inches(self._number(self.meters))
        return to_inches(self._number(self.feet), self._number(self.inches))

    def to_block(self) -> HeightAttempt:
        return HeightAttempt(height_in=self.height_in, pole_idx=self.pole_idx)


class SessionCreateBase(CamelModel):
    date: Optional[datetime] = None
    goals: str = ""
    notes: str = ""
    poles: List[Pole] = Field(default_factory=list)
    setup: SessionSetup = Field(default_factory=SessionSetup)
    heights: List[HeightInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def _poles_exist(self):
        for h in self.heights:
            if not 0 <= h.pole_idx < len(self.poles):
                raise ValueError("Select a pole for this height")
        return self


class PracticeSessionCreate(SessionCreateBase):
    """
    New practice. `day_name` defaults to today's plan day; `done` lists the
    routine positions checked off.
    """
    day_name: Optional[str] = None
    done: List[int] = Field(default_factory=list)


class MeetSessionCreate(SessionCreateBase):
    meet_name: Optional[str] = None

    @field_validator("meet_name")
    @classmethod
    def _blank_name_is_unset(cls, v):
        if v is None:
            return None
        return v.strip() or None


class AttemptResultUpdate(CamelModel):
    result: Literal["clear", "miss"]


class EmailShareRequest(CamelModel):
    to: EmailStr
    subject: Optional[str] = None


class VideoCreate(CamelModel):
    uri: str = Field(min_length=1)
    title: str = ""


class VideoRename(CamelModel):
    title: str

