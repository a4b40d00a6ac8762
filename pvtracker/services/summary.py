# services/summary.py
"""
Plain-text session summary used for the share sheet and email.

Layout (sections separated by a blank line, empty sections dropped):

    MEET – 4/12/2025
    Athlete: Sam Rivera (Year 11) – High School
    Meet: Spring Opener
    Goals:
    ...
    Attempts:
      1. 12'6"   X O

    PR (today): 12'6"
    Steps: 6
    ...
    Notes:
    ...
    --
    Sent from PoleVault Tracker
"""
from typing import List, Optional

from pvtracker.models.session import MeetSession, PracticeSession, Session
from pvtracker.models.settings import Athlete, Settings
from .aggregation import calc_pr
from .formatting import (
    fmt_bar,
    fmt_feet_in,
    fmt_session_date,
    fmt_standards,
    fmt_steps,
    fmt_takeoff,
    full_name,
    level_label,
)

APP_NAME = "PoleVault Tracker"
FOOTER = f"--\nSent from {APP_NAME}"


def _header(session: Session) -> str:
    kind = "MEET" if session.type == "meet" else "PRACTICE"
    return f"{kind} – {fmt_session_date(session.date)}"


def _athlete_line(athlete: Optional[Athlete]) -> str:
    name = full_name(athlete)
    if not name:
        return ""
    year = f" (Year {athlete.year})" if athlete.year else ""
    return f"Athlete: {name}{year} – {level_label(athlete.level)}"


def _basics(session: Session) -> str:
    lines = []
    if session.type == "meet" and session.meet_name:
        lines.append(f"Meet: {session.meet_name}")
    if session.goals:
        lines.append(f"Goals:\n{session.goals}")
    return "\n".join(lines).strip()


def _meet_block(session: MeetSession, units: str) -> str:
    rows = [
        f"  {i}. {fmt_bar(block.height_in, units)}   {block.marks()}"
        for i, block in enumerate(session.attempts, start=1)
    ]
    attempts = "\n".join(rows) if rows else "(none)"
    return f"Attempts:\n{attempts}\n\nPR (today): {fmt_bar(calc_pr([session]), units)}"


def _practice_block(session: PracticeSession) -> str:
    if not session.routine:
        return ""
    lines = []
    for entry in session.routine:
        if entry.is_header:
            lines.append(f"* {entry.text.rstrip().removesuffix(':')}")
        else:
            lines.append(f"{'[x]' if entry.done else '[ ]'} {entry.text}")
    return "Routine:\n" + "\n".join(lines)


def _setup_block(session: Session, units: str) -> str:
    setup = session.setup
    lines = [
        f"Steps: {fmt_steps(setup.steps)}",
        f"Approach: {fmt_feet_in(setup.approach_in)}",
        f"Takeoff: {fmt_takeoff(setup.takeoff_in, units)}",
        f"Standards: {fmt_standards(setup.standards_in, units)}",
    ]
    if setup.bar_in:
        lines.append(f"Bar: {fmt_bar(setup.bar_in, units)}")
    return "\n".join(lines)


def session_summary_text(
    session: Session,
    settings: Optional[Settings],
    athlete: Optional[Athlete] = None,
) -> str:
    """Render `session` as the share/email text block."""
    units = settings.units if settings else "imperial"
    if athlete is None and settings is not None:
        athlete = settings.athlete

    if session.type == "meet":
        middle = _meet_block(session, units)
    else:
        middle = _practice_block(session)

    sections: List[str] = [
        _header(session),
        _athlete_line(athlete),
        _basics(session),
        middle,
        _setup_block(session, units),
        f"Notes:\n{session.notes}" if session.notes else "",
        FOOTER,
    ]
    return "\n\n".join(s for s in sections if s)


def summary_subject(session: Session, athlete: Optional[Athlete] = None) -> str:
    kind = "Meet" if session.type == "meet" else "Practice"
    name = full_name(athlete)
    who = f"{name} – " if name else ""
    label = f" ({session.meet_name})" if session.type == "meet" and session.meet_name else ""
    return f"{who}Pole Vault {kind}{label} – {fmt_session_date(session.date)}"
