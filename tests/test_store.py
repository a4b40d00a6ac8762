# tests/test_store.py
import asyncio

import pytest
from pydantic import ValidationError

from pvtracker.core.database import make_session_factory
from pvtracker.core.exceptions import (
    AttemptClosedError,
    DuplicateSessionError,
    HeightNotFoundError,
    SessionNotFoundError,
)
from pvtracker.db.db_access import get_store_version, load_store_blob, save_store_blob
from pvtracker.models.session import HeightAttempt, MeetSession, PracticeSession
from pvtracker.services.migrations import STORE_VERSION
from pvtracker.services.store import PoleVaultStore, attempt_video_key, initialize_store
from pvtracker.services.weekly_plan import WEEKDAYS, default_weekly_plan


@pytest.fixture
def meet():
    return MeetSession(meet_name="Spring Opener", attempts=[HeightAttempt(height_in=150, pole_idx=0)])


# ---------------------------------------------------------------
# Loading & persistence
# ---------------------------------------------------------------

def test_empty_database_is_seeded(session_factory):
    store = PoleVaultStore.load(session_factory)
    assert store.sessions == []
    assert get_store_version(session_factory) == STORE_VERSION
    assert set(load_store_blob(session_factory).data["state"]) == {"settings", "sessions", "weeklyPlan", "attemptVideos"}


def test_changes_survive_a_reload(store, session_factory, meet):
    store.add_session(meet)
    store.set_units("metric")

    reloaded = PoleVaultStore.load(session_factory)
    assert reloaded.settings.units == "metric"
    assert reloaded.get_session(meet.id).meet_name == "Spring Opener"


def test_old_blob_is_migrated_and_rewritten(session_factory):
    legacy = {"sessions": [{"id": "old", "type": "meet", "date": "2023-05-01",
                            "attempts": [{"heightIn": 120, "result": "clear"}]}]}
    assert save_store_blob(legacy, 7, session_factory)

    store = PoleVaultStore.load(session_factory)
    assert store.get_session("old").attempts[0].cleared
    assert get_store_version(session_factory) == STORE_VERSION
    stored = load_store_blob(session_factory).data["state"]
    assert "heightIn" in stored["sessions"][0]["attempts"][0]
    assert "weeklyPlan" in stored


def test_initialize_store_falls_back_to_defaults():
    # no tables: loading fails
    broken = make_session_factory("sqlite://")
    store = asyncio.run(initialize_store(broken))
    assert store.sessions == []
    assert list(store.weekly_plan) == WEEKDAYS


def test_failed_flush_keeps_memory_state(meet):
    store = PoleVaultStore(make_session_factory("sqlite://"))
    assert not store.flush()
    store.add_session(meet)
    assert store.get_session(meet.id) is not None


def test_memory_only_store(meet):
    store = PoleVaultStore()
    assert store.flush()
    store.add_session(meet)
    assert len(store.sessions) == 1


def test_reads_are_copies(store, meet):
    store.add_session(meet)
    store.sessions[0].goals = "changed"
    store.settings.units = "metric"
    assert store.get_session(meet.id).goals == ""
    assert store.settings.units == "imperial"


# ---------------------------------------------------------------
# Settings
# ---------------------------------------------------------------

def test_set_units(store):
    assert store.set_units("metric").units == "metric"
    with pytest.raises(ValueError):
        store.set_units("furlongs")


def test_set_athlete_field_accepts_both_spellings(store):
    store.set_athlete_field("firstName", "Sam")
    athlete = store.set_athlete_field("last_name", "Rivera")
    assert (athlete.first_name, athlete.last_name) == ("Sam", "Rivera")


def test_set_athlete_field_rejects_unknown(store):
    with pytest.raises(ValueError):
        store.set_athlete_field("shoeSize", "10")
    with pytest.raises(ValueError):
        store.set_athlete_field("level", "pro")


def test_watermark(store):
    assert store.set_watermark_uri("file:///logo.png").watermark_uri == "file:///logo.png"
    assert store.set_watermark_uri(None).watermark_uri == ""


# ---------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------

def test_add_session_prepends(store, meet):
    practice = PracticeSession()
    store.add_session(meet)
    store.add_session(practice)
    assert [s.id for s in store.sessions] == [practice.id, meet.id]


def test_add_session_rejects_duplicate_id(store, meet):
    store.add_session(meet)
    with pytest.raises(DuplicateSessionError):
        store.add_session(meet)


def test_update_session_merges_patch(store, meet):
    store.add_session(meet)
    updated = store.update_session(meet.id, {"notes": "Windy", "meet_name": "County"})
    assert updated.notes == "Windy"
    assert updated.meet_name == "County"
    assert updated.attempts[0].height_in == 150


def test_update_session_keeps_identity_fields(store, meet):
    store.add_session(meet)
    updated = store.update_session(meet.id, {"id": "other", "type": "practice", "date": "2001-01-01"})
    assert updated.id == meet.id
    assert updated.type == "meet"
    assert updated.date == meet.date


def test_update_session_invalid_patch_leaves_store_alone(store, meet):
    store.add_session(meet)
    with pytest.raises(ValidationError):
        store.update_session(meet.id, {"attempts": "lots"})
    assert len(store.get_session(meet.id).attempts) == 1


def test_update_session_merges_setup_field_by_field(store):
    practice = PracticeSession(day_name="Monday", setup={"steps": 6, "takeoffIn": 150, "standardsIn": 18})
    store.add_session(practice)

    updated = store.update_session(practice.id, {"setup": {"steps": 7}})
    assert updated.setup.steps == 7
    assert updated.setup.takeoff_in == 150
    assert updated.setup.standards_in == 18


def test_update_session_moves_flat_setup_keys_into_setup(store, meet):
    store.add_session(meet)
    updated = store.update_session(meet.id, {"takeoffIn": 160, "heightIn": 144, "approachFeet": 80, "approachInches": 6})
    assert updated.setup.takeoff_in == 160
    assert updated.setup.bar_in == 144
    assert updated.setup.approach_in == 966
    assert "takeoffIn" not in updated.to_json_dict()


def test_update_session_rejects_non_object_setup(store, meet):
    store.add_session(meet)
    with pytest.raises(ValueError):
        store.update_session(meet.id, {"setup": "long run"})


def test_update_missing_session(store):
    with pytest.raises(SessionNotFoundError):
        store.update_session("nope", {"notes": "x"})


def test_delete_session(store, meet):
    store.add_session(meet)
    assert store.delete_session(meet.id)
    assert not store.delete_session(meet.id)
    assert store.sessions == []


def test_record_attempt(store, meet):
    store.add_session(meet)
    block_id = meet.attempts[0].id

    store.record_attempt(meet.id, block_id, 1, "miss")
    session = store.record_attempt(meet.id, block_id, 2, "clear")
    assert session.attempts[0].marks() == "X O"

    with pytest.raises(AttemptClosedError):
        store.record_attempt(meet.id, block_id, 3, "clear")
    assert store.get_session(meet.id).attempts[0].marks() == "X O"


def test_record_attempt_on_practice_heights(store):
    practice = PracticeSession(heights=[HeightAttempt(height_in=140)])
    store.add_session(practice)
    session = store.record_attempt(practice.id, practice.heights[0].id, 1, "clear")
    assert session.heights[0].cleared


def test_record_attempt_unknown_ids(store, meet):
    store.add_session(meet)
    with pytest.raises(SessionNotFoundError):
        store.record_attempt("nope", meet.attempts[0].id, 1, "clear")
    with pytest.raises(HeightNotFoundError):
        store.record_attempt(meet.id, "nope", 1, "clear")


# ---------------------------------------------------------------
# Weekly plan
# ---------------------------------------------------------------

def test_set_and_reset_weekly_plan(store):
    plan = default_weekly_plan()
    plan["Monday"] = plan["Monday"].model_copy(update={"goals": "Short run"})

    store.set_weekly_plan(plan)
    assert store.weekly_plan["Monday"].goals == "Short run"
    assert store.settings.plan_overridden

    store.reset_weekly_plan()
    assert store.weekly_plan == default_weekly_plan()
    assert not store.settings.plan_overridden


def test_incomplete_plan_is_refused(store):
    plan = default_weekly_plan()
    del plan["Sunday"]
    with pytest.raises(ValueError):
        store.set_weekly_plan(plan)
    assert "Sunday" in store.weekly_plan
    assert not store.settings.plan_overridden


# ---------------------------------------------------------------
# Attempt videos
# ---------------------------------------------------------------

def test_attempt_video_key_matches_stored_format():
    assert attempt_video_key("abc", 150.0, 2) == "abc::h=150::a=2"
    assert attempt_video_key("abc", 150.5, "3") == "abc::h=150.5::a=3"


def test_attempt_videos_lifecycle(store, session_factory):
    first = store.add_attempt_video("s1", 150, 1, "file:///one.mp4")
    second = store.add_attempt_video("s1", 150, 1, "file:///two.mp4", "Second")
    assert first.title.startswith("Clip ")
    assert [v.id for v in store.get_attempt_videos("s1", 150, 1)] == [second.id, first.id]
    assert store.get_attempt_videos("s1", 150, 2) == []

    assert store.rename_attempt_video("s1", 150, 1, first.id, "Good plant")
    assert not store.rename_attempt_video("s1", 150, 1, "missing", "x")
    assert store.delete_attempt_video("s1", 150, 1, second.id)
    assert not store.delete_attempt_video("s1", 150, 1, second.id)

    stored = load_store_blob(session_factory).data["state"]["attemptVideos"]
    assert [v["title"] for v in stored["s1::h=150::a=1"]] == ["Good plant"]


def test_deleting_a_session_keeps_its_videos(store, meet):
    store.add_session(meet)
    store.add_attempt_video(meet.id, 150, 1, "file:///clip.mp4")
    store.delete_session(meet.id)
    assert len(store.get_attempt_videos(meet.id, 150, 1)) == 1


def test_bad_json_entry_is_ignored_on_load(session_factory):
    from pvtracker.core.database import get_db_session
    from pvtracker.db.models import StoreEntry

    PoleVaultStore.load(session_factory)
    with get_db_session(session_factory) as db:
        db.query(StoreEntry).filter(StoreEntry.key == "sessions").first().value = "{broken"
        db.commit()

    store = PoleVaultStore.load(session_factory)
    assert store.sessions == []
    assert "sessions" not in load_store_blob(session_factory).data["state"]

    # the next change rewrites the whole blob
    store.set_units("metric")
    assert load_store_blob(session_factory).data["state"]["sessions"] == []
