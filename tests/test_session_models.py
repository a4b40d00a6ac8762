# tests/test_session_models.py
import pytest
from pydantic import ValidationError

from pvtracker.core.exceptions import AttemptClosedError
from pvtracker.models.pole import Pole
from pvtracker.models.session import HeightAttempt, MeetSession, PracticeSession, SessionBase, session_adapter


def results(block):
    return [a.result for a in block.attempts]


def test_new_height_has_three_misses():
    block = HeightAttempt(height_in=150)
    assert results(block) == ["miss", "miss", "miss"]
    assert [a.idx for a in block.attempts] == [1, 2, 3]
    assert not block.cleared


def test_attempts_after_first_clear_are_forced_to_miss():
    block = HeightAttempt(
        height_in=150,
        attempts=[{"idx": 1, "result": "miss"}, {"idx": 2, "result": "clear"}, {"idx": 3, "result": "clear"}],
    )
    assert results(block) == ["miss", "clear", "miss"]
    assert block.marks() == "X O"
    assert len(block.shown_attempts()) == 2


def test_short_and_long_attempt_lists_become_three_slots():
    assert len(HeightAttempt(height_in=1, attempts=[{"idx": 1, "result": "clear"}]).attempts) == 3
    four = [{"idx": i, "result": "miss"} for i in range(1, 5)]
    assert len(HeightAttempt(height_in=1, attempts=four).attempts) == 3


def test_with_result_clear_resets_later_slots():
    block = HeightAttempt(height_in=150).with_result(3, "miss").with_result(1, "clear")
    assert results(block) == ["clear", "miss", "miss"]


def test_with_result_after_clear_is_rejected():
    block = HeightAttempt(height_in=150).with_result(2, "clear")
    with pytest.raises(AttemptClosedError):
        block.with_result(3, "clear")
    # the clearing attempt itself can still be corrected
    assert results(block.with_result(2, "miss")) == ["miss", "miss", "miss"]


@pytest.mark.parametrize("n", [0, 4])
def test_with_result_out_of_range(n):
    with pytest.raises(ValueError):
        HeightAttempt(height_in=150).with_result(n, "clear")


def test_with_result_keeps_block_id():
    block = HeightAttempt(height_in=150, pole_idx=1)
    updated = block.with_result(1, "clear")
    assert updated.id == block.id
    assert updated.pole_idx == 1


def test_session_union_dispatches_on_type():
    s = session_adapter.validate_python({"type": "meet", "meetName": "Spring Opener"})
    assert isinstance(s, MeetSession)
    assert s.meet_name == "Spring Opener"
    with pytest.raises(ValidationError):
        session_adapter.validate_python({"type": "scrimmage"})


def test_session_json_is_camel_case():
    data = MeetSession(meet_name="X", attempts=[{"heightIn": 150}]).to_json_dict()
    assert data["meetName"] == "X"
    assert data["attempts"][0]["heightIn"] == 150
    assert "poleIdx" in data["attempts"][0]


def test_naive_dates_become_utc():
    s = session_adapter.validate_python({"type": "practice", "date": "2025-04-12T10:00:00"})
    assert s.date.tzinfo is not None


def test_pole_identity_and_numbers():
    pole = Pole(brand="Pacer", length="13", flex=17.0, weight=140, approachFeet="80", approachInches="")
    assert pole.identity_key == "Pacer|13|17|140"
    assert pole.approach_in == 960
    assert pole.approach_inches is None
    assert pole.label() == "Pacer 13 17 140"


def test_height_blocks_reads_the_session_types_list():
    meet = MeetSession(attempts=[{"heightIn": 150}])
    practice = PracticeSession(heights=[{"heightIn": 120}, {"heightIn": 126}])

    assert [b.height_in for b in meet.height_blocks()] == [150]
    assert [b.height_in for b in practice.height_blocks()] == [120, 126]
    assert SessionBase().height_blocks() == []

    blocks = practice.height_blocks()
    blocks.clear()
    assert len(practice.heights) == 2
