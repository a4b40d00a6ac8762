# models/pole.py
from typing import Optional

from pydantic import field_validator

from .common import CamelModel
from pvtracker.services.units import parse_optional_number, to_inches


class Pole(CamelModel):
    """Equipment profile embedded in a session (never referenced by id)."""
    brand: str = ""
    length: str = ""
    flex: str = ""
    weight: str = ""
    steps: Optional[float] = None
    approach_feet: Optional[float] = None
    approach_inches: Optional[float] = None
    takeoff_in: Optional[float] = None
    standards_in: Optional[float] = None
    hands: str = ""

    @field_validator("brand", "length", "flex", "weight", "hands", mode="before")
    @classmethod
    def _as_text(cls, v):
        if v is None:
            return ""
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        return str(v)

    @field_validator(
        "steps", "approach_feet", "approach_inches", "takeoff_in", "standards_in",
        mode="before",
    )
    @classmethod
    def _as_number(cls, v):
        return parse_optional_number(v)

    @property
    def identity_key(self) -> str:
        return f"{self.brand}|{self.length}|{self.flex}|{self.weight}"

    @property
    def approach_in(self) -> float:
        return to_inches(self.approach_feet or 0, self.approach_inches or 0)

    def label(self) -> str:
        return " ".join(p for p in (self.brand, self.length, self.flex, self.weight) if p)
