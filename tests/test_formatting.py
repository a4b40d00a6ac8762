# tests/test_formatting.py
from datetime import datetime, timezone

import pytest

from pvtracker.models.settings import Athlete
from pvtracker.services.formatting import (
    UNSET,
    fmt_average_steps,
    fmt_bar,
    fmt_feet_in,
    fmt_session_date,
    fmt_standards,
    fmt_steps,
    fmt_takeoff,
    full_name,
    level_label,
    to_local,
)


def meters_in(m):
    return m / 0.0254


@pytest.mark.parametrize("units", ["imperial", "metric"])
def test_zero_is_unset(units):
    assert fmt_bar(0, units) == UNSET
    assert fmt_standards(0, units) == UNSET
    assert fmt_takeoff(None, units) == UNSET


@pytest.mark.parametrize("units", ["imperial", "metric"])
@pytest.mark.parametrize("bad", [-10, "abc", None, float("nan")])
def test_fmt_bar_never_raises(units, bad):
    assert isinstance(fmt_bar(bad, units), str)


def test_imperial_lengths():
    assert fmt_bar(150, "imperial") == "12'6\""
    assert fmt_standards(18, "imperial") == "1'6\""
    assert fmt_takeoff(143.6, "imperial") == "12'0\""


def test_metric_standards_and_takeoff_in_cm():
    assert fmt_standards(18, "metric") == "46 cm"
    assert fmt_takeoff(150, "metric") == "381 cm"


def test_metric_bar_strips_trailing_zeros():
    assert fmt_bar(meters_in(4.0), "metric") == "4 m"
    assert fmt_bar(meters_in(4.5), "metric") == "4.5 m"
    assert fmt_bar(150, "metric") == "3.81 m"



def test_fmt_feet_in_ignores_units():
    assert fmt_feet_in(1200) == "100'0\""
    assert fmt_feet_in(0) == UNSET


def test_steps():
    assert fmt_steps(6) == "6"
    assert fmt_steps(6.5) == "6.5"
    assert fmt_steps(None) == UNSET
    assert fmt_average_steps(6.4) == "6.4"
    assert fmt_average_steps(0) == UNSET


def test_athlete_labels():
    athlete = Athlete(first_name=" Sam ", last_name="Rivera")
    assert full_name(athlete) == "Sam Rivera"
    assert full_name(Athlete()) == ""
    assert full_name(None) == ""
    assert level_label("college") == "College"
    assert level_label("highschool") == "High School"


def test_session_date_has_no_padding():
    assert fmt_session_date(datetime(2025, 4, 3, 12, tzinfo=timezone.utc)) == "4/3/2025"


def test_session_date_is_the_local_calendar_day():
    # 9pm in Chicago on April 14 is already April 15 in UTC
    assert fmt_session_date(datetime(2025, 4, 15, 2, tzinfo=timezone.utc)) == "4/14/2025"
    assert to_local(datetime(2025, 4, 15, 2)).day == 14
