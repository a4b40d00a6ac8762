# tests/test_summary.py
from datetime import datetime, timezone

import pytest

from pvtracker.models.session import MeetSession, PracticeSession
from pvtracker.models.settings import Settings
from pvtracker.services.summary import FOOTER, session_summary_text, summary_subject

APRIL_12 = datetime(2025, 4, 12, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def spring_opener():
    return MeetSession(
        date=APRIL_12,
        meet_name="Spring Opener",
        attempts=[{
            "heightIn": 150,
            "attempts": [
                {"idx": 1, "result": "miss"},
                {"idx": 2, "result": "clear"},
                {"idx": 3, "result": "miss"},
            ],
        }],
    )


@pytest.fixture
def settings():
    return Settings(athlete={"firstName": "Sam", "lastName": "Rivera", "year": "11"})


def test_meet_summary_lists_attempts_and_pr(spring_opener, settings):
    text = session_summary_text(spring_opener, settings)
    lines = text.splitlines()

    assert lines[0] == "MEET – 4/12/2025"
    assert "Athlete: Sam Rivera (Year 11) – High School" in lines
    assert "Meet: Spring Opener" in lines
    assert "  1. 12'6\"   X O" in lines
    assert "PR (today): 12'6\"" in lines
    assert text.endswith(FOOTER)


def test_meet_summary_in_metric(spring_opener):
    text = session_summary_text(spring_opener, Settings(units="metric"))
    assert "  1. 3.81 m   X O" in text
    assert "PR (today): 3.81 m" in text


def test_meet_without_heights(settings):
    text = session_summary_text(MeetSession(date=APRIL_12), settings)
    assert "Attempts:\n(none)\n\nPR (today): —" in text


def test_practice_without_goals_or_notes_has_no_empty_sections():
    session = PracticeSession(date=APRIL_12, goals="", notes="")
    text = session_summary_text(session, Settings())

    assert "Goals" not in text
    assert "Notes" not in text
    assert "\n\n\n" not in text
    # no athlete name set, so no athlete line either
    assert "Athlete:" not in text
    assert text.split("\n\n")[0] == "PRACTICE – 4/12/2025"


def test_practice_routine_checkboxes():
    session = PracticeSession(
        date=APRIL_12,
        routine=[
            {"text": "Drills:", "isHeader": True},
            {"text": "Rope drill", "done": True},
            {"text": "Ring drill"},
        ],
    )
    text = session_summary_text(session, Settings())
    assert "Routine:\n* Drills\n[x] Rope drill\n[ ] Ring drill" in text


def test_setup_block_order_and_bar():
    session = PracticeSession(
        date=APRIL_12,
        setup={"steps": 6, "approachIn": 960, "takeoffIn": 150, "standardsIn": 18, "barIn": 144},
    )
    text = session_summary_text(session, Settings())
    assert "Steps: 6\nApproach: 80'0\"\nTakeoff: 12'6\"\nStandards: 1'6\"\nBar: 12'0\"" in text


def test_setup_without_bar():
    text = session_summary_text(PracticeSession(date=APRIL_12), Settings())
    assert "Standards: —" in text
    assert "Bar:" not in text


def test_notes_come_before_footer(settings):
    session = PracticeSession(date=APRIL_12, goals="Hold the plant", notes="Felt fast")
    sections = session_summary_text(session, settings).split("\n\n")
    assert "Goals:\nHold the plant" in sections
    assert sections[-2] == "Notes:\nFelt fast"
    assert sections[-1] == FOOTER


def test_year_omitted_when_blank():
    settings = Settings(athlete={"firstName": "Sam", "level": "college"})
    text = session_summary_text(PracticeSession(date=APRIL_12), settings)
    assert "Athlete: Sam – College" in text


def test_subject(spring_opener, settings):
    subject = summary_subject(spring_opener, settings.athlete)
    assert subject == "Sam Rivera – Pole Vault Meet (Spring Opener) – 4/12/2025"
