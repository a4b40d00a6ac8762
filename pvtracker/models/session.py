# pvtracker/models/session.py

import uuid
from datetime import datetime, timezone
from typing import Annotated, ClassVar, List, Literal, Optional, Union

from pydantic import Field, TypeAdapter, field_validator, model_validator

from .common import CamelModel
from .pole import Pole
from .weekly_plan import RoutineEntry
from pvtracker.core.exceptions import AttemptClosedError
from pvtracker.services.units import parse_optional_number

ATTEMPTS_PER_HEIGHT = 3

AttemptResult = Literal["clear", "miss"]


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Attempt(CamelModel):
    idx: int
    result: AttemptResult = "miss"
    type: Literal["bar", "bungee"] = "bar"

    @field_validator("result", mode="before")
    @classmethod
    def _anything_else_is_a_miss(cls, v):
        return "clear" if v == "clear" else "miss"

    @field_validator("type", mode="before")
    @classmethod
    def _default_bar(cls, v):
        return "bungee" if v == "bungee" else "bar"


def _blank_attempts() -> List[Attempt]:
    return [Attempt(idx=i + 1) for i in range(ATTEMPTS_PER_HEIGHT)]


class HeightAttempt(CamelModel):
    """
    One bar height and its three attempt slots.

    A clear ends the sequence: every slot after the first clear is a miss
    and is never shown.
    """
    id: str = Field(default_factory=new_id)
    height_in: float
    pole_idx: Optional[int] = None
    attempts: List[Attempt] = Field(default_factory=_blank_attempts)

    @field_validator("height_in", mode="before")
    @classmethod
    def _height_number(cls, v):
        return parse_optional_number(v) or 0.0

    @model_validator(mode="after")
    def _three_slots_closed_after_clear(self):
        slots = list(self.attempts[:ATTEMPTS_PER_HEIGHT])
        while len(slots) < ATTEMPTS_PER_HEIGHT:
            slots.append(Attempt(idx=len(slots) + 1))

        cleared = False
        fixed = []
        for i, a in enumerate(slots):
            result = "miss" if cleared else a.result
            cleared = cleared or a.result == "clear"
            fixed.append(Attempt(idx=i + 1, result=result, type=a.type))
        self.attempts = fixed
        return self

    @property
    def first_clear_index(self) -> Optional[int]:
        for i, a in enumerate(self.attempts):
            if a.result == "clear":
                return i
        return None

    @property
    def cleared(self) -> bool:
        return self.first_clear_index is not None

    def shown_attempts(self) -> List[Attempt]:
        """Attempts up to and including the first clear (all of them if none)."""
        idx = self.first_clear_index
        if idx is None:
            return list(self.attempts)
        return list(self.attempts[: idx + 1])

    def marks(self) -> str:
        return " ".join("O" if a.result == "clear" else "X" for a in self.shown_attempts())

    def with_result(self, attempt_number: int, result: AttemptResult) -> "HeightAttempt":
        """
        Return a copy with attempt `attempt_number` (1-based) set to `result`.

        Raises AttemptClosedError when an earlier attempt already cleared the
        bar, and ValueError for a slot outside 1..3.
        """
        if not 1 <= attempt_number <= ATTEMPTS_PER_HEIGHT:
            raise ValueError(f"Attempt number must be between 1 and {ATTEMPTS_PER_HEIGHT}")

        pos = attempt_number - 1
        first_clear = self.first_clear_index
        if first_clear is not None and pos > first_clear:
            raise AttemptClosedError(
                f"Bar already cleared on attempt {first_clear + 1}; "
                f"attempt {attempt_number} was never taken."
            )

        attempts = [a.model_copy() for a in self.attempts]
        attempts[pos] = Attempt(idx=attempt_number, result=result, type=attempts[pos].type)
        if result == "clear":
            for later in range(pos + 1, ATTEMPTS_PER_HEIGHT):
                attempts[later] = Attempt(idx=later + 1, type=attempts[later].type)
        return HeightAttempt(id=self.id, height_in=self.height_in, pole_idx=self.pole_idx, attempts=attempts)


class SessionSetup(CamelModel):
    """Run-up and standards setup; lengths in inches, every field optional."""
    steps: Optional[float] = None
    approach_in: Optional[float] = None
    takeoff_in: Optional[float] = None
    standards_in: Optional[float] = None
    bar_in: Optional[float] = None

    @field_validator("*", mode="before")
    @classmethod
    def _as_number(cls, v):
        return parse_optional_number(v)


class SessionBase(CamelModel):
    # name of the list field holding this session type's height blocks
    BLOCKS_FIELD: ClassVar[str] = ""

    id: str = Field(default_factory=new_id)
    date: datetime = Field(default_factory=utcnow)
    goals: str = ""
    notes: str = ""
    poles: List[Pole] = Field(default_factory=list)
    setup: SessionSetup = Field(default_factory=SessionSetup)

    @field_validator("goals", "notes", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        if v is None:
            return ""
        return str(v)

    @field_validator("date")
    @classmethod
    def _aware_date(cls, v: datetime) -> datetime:
        # older records carry naive local timestamps; treat them as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def height_blocks(self) -> List[HeightAttempt]:
        if not self.BLOCKS_FIELD:
            return []
        return list(getattr(self, self.BLOCKS_FIELD))


class PracticeSession(SessionBase):
    BLOCKS_FIELD: ClassVar[str] = "heights"

    type: Literal["practice"] = "practice"
    day_name: str = ""
    routine: List[RoutineEntry] = Field(default_factory=list)
    heights: List[HeightAttempt] = Field(default_factory=list)


class MeetSession(SessionBase):
    BLOCKS_FIELD: ClassVar[str] = "attempts"

    type: Literal["meet"] = "meet"
    meet_name: Optional[str] = None
    attempts: List[HeightAttempt] = Field(default_factory=list)


Session = Annotated[Union[PracticeSession, MeetSession], Field(discriminator="type")]

session_adapter = TypeAdapter(Session)
session_list_adapter = TypeAdapter(List[Session])

# Fields that identify a session and never change after creation
IMMUTABLE_SESSION_FIELDS = ("id", "type", "date")
