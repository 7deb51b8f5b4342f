"""
tests/test_repository.py
Test Group 2: ActivityRepository

Tests: row normalization (incl. legacy data_json rows), date ordering request,
       API/network/parse/out-of-range errors → DataUnavailableError, insert payloads,
       analytics event query, analytics profile create-or-update.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from db.models import ProgressEntry
from db.repository import (
    ActivityRepository, DataUnavailableError, normalize_profile, normalize_progress,
)


def _select_chain(mock_db: MagicMock) -> MagicMock:
    """table().select().eq().order() — the read path."""
    return mock_db.table.return_value.select.return_value.eq.return_value.order.return_value


def _mock_select(rows: list[dict]) -> MagicMock:
    mock_db = MagicMock()
    _select_chain(mock_db).execute.return_value = MagicMock(data=rows)
    return mock_db


def _capture_inserts(mock_db: MagicMock, returned: dict) -> list[dict]:
    captured = []
    def mock_insert(row):
        captured.append(row)
        m = MagicMock()
        m.execute.return_value = MagicMock(data=[{**row, **returned}])
        return m
    mock_db.table.return_value.insert.side_effect = mock_insert
    return captured


# ─── Reads ───────────────────────────────────────────────────────────────────

def test_fetch_progress_normalizes_rows():
    mock_db = _mock_select([
        {"id": 1, "user_id": "u1", "skill": "python", "level": "advanced",
         "score": 82, "date": "2025-03-01T10:00:00+00:00"},
    ])
    entries = ActivityRepository(mock_db).fetch_progress("u1")

    assert entries == [ProgressEntry(
        skill="python", level="advanced", score=82,
        date=datetime(2025, 3, 1, 10, tzinfo=timezone.utc),
    )]
    mock_db.table.assert_called_with("progress_tracking")
    mock_db.table.return_value.select.return_value.eq.assert_called_with("user_id", "u1")
    mock_db.table.return_value.select.return_value.eq.return_value.order.assert_called_with(
        "date", desc=True
    )


def test_fetch_progress_reads_legacy_data_json_rows():
    mock_db = _mock_select([
        {"id": 2, "user_id": "u1", "created_at": "2024-11-05T08:00:00+00:00",
         "data_json": {"skill": "sql", "level": "beginner", "score": 55}},
    ])
    [entry] = ActivityRepository(mock_db).fetch_progress("u1")

    assert entry.skill == "sql"
    assert entry.score == 55
    assert entry.date == datetime(2024, 11, 5, 8, tzinfo=timezone.utc)


def test_naive_legacy_timestamps_are_read_as_utc():
    entry = normalize_progress({"skill": "sql", "score": 40, "date": "2024-06-01T12:00:00"})
    assert entry.date == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)


def test_column_value_wins_over_data_json():
    entry = normalize_progress({
        "skill": "python", "score": 90, "date": "2025-01-01T00:00:00+00:00",
        "data_json": {"skill": "legacy", "score": 10},
    })
    assert entry.skill == "python"
    assert entry.score == 90


def test_fetch_simulations_and_passports():
    sims_db = _mock_select([
        {"simulation_type": "case_study", "score": 71, "created_at": "2025-02-01T00:00:00Z"},
    ])
    passports_db = _mock_select([
        {"id": "p-1", "title": "Data Analyst", "confidence_score": 64,
         "created_at": "2025-02-02T00:00:00Z"},
    ])

    [sim] = ActivityRepository(sims_db).fetch_simulations("u1")
    [passport] = ActivityRepository(passports_db).fetch_passports("u1")

    assert sim.simulation_type == "case_study"
    assert passport.id == "p-1"
    assert passport.confidence_score == 64


def test_fetch_returns_empty_list_for_no_rows():
    mock_db = _mock_select([])
    assert ActivityRepository(mock_db).fetch_passports("u1") == []


def test_fetch_returns_empty_list_when_data_is_none():
    mock_db = MagicMock()
    _select_chain(mock_db).execute.return_value = MagicMock(data=None)
    assert ActivityRepository(mock_db).fetch_simulations("u1") == []


# ─── Errors ──────────────────────────────────────────────────────────────────

def test_api_error_raises_data_unavailable():
    mock_db = MagicMock()
    _select_chain(mock_db).execute.side_effect = APIError(
        {"message": "relation does not exist", "code": "42P01", "hint": None, "details": None}
    )
    with pytest.raises(DataUnavailableError, match="progress_tracking"):
        ActivityRepository(mock_db).fetch_progress("u1")


def test_network_error_raises_data_unavailable():
    mock_db = MagicMock()
    _select_chain(mock_db).execute.side_effect = httpx.ConnectError("connection refused")
    with pytest.raises(DataUnavailableError):
        ActivityRepository(mock_db).fetch_simulations("u1")


def test_unparseable_row_raises_data_unavailable():
    mock_db = _mock_select([{"skill": "python", "score": "not-a-number",
                             "date": "2025-01-01T00:00:00Z"}])
    with pytest.raises(DataUnavailableError):
        ActivityRepository(mock_db).fetch_progress("u1")


@pytest.mark.parametrize("score", [float("nan"), float("inf"), 250, -1])
def test_out_of_range_progress_score_raises_data_unavailable(score):
    mock_db = _mock_select([{"skill": "python", "score": score,
                             "date": "2025-01-01T00:00:00Z"}])
    with pytest.raises(DataUnavailableError, match="progress_tracking"):
        ActivityRepository(mock_db).fetch_progress("u1")


@pytest.mark.parametrize("score", [float("nan"), 250])
def test_out_of_range_simulation_score_raises_data_unavailable(score):
    mock_db = _mock_select([{"simulation_type": "case_study", "score": score,
                             "created_at": "2025-01-01T00:00:00Z"}])
    with pytest.raises(DataUnavailableError, match="simulations"):
        ActivityRepository(mock_db).fetch_simulations("u1")


def test_boundary_scores_are_accepted():
    mock_db = _mock_select([
        {"skill": "python", "score": 0, "date": "2025-01-01T00:00:00Z"},
        {"skill": "python", "score": 100, "date": "2025-01-02T00:00:00Z"},
    ])
    entries = ActivityRepository(mock_db).fetch_progress("u1")
    assert [e.score for e in entries] == [0, 100]


# ─── Counts ──────────────────────────────────────────────────────────────────

def test_fetch_portfolio_count_uses_exact_count():
    mock_db = MagicMock()
    mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value = (
        MagicMock(count=4, data=[])
    )
    assert ActivityRepository(mock_db).fetch_portfolio_count("u1") == 4
    mock_db.table.return_value.select.assert_called_with("id", count="exact")


# ─── Writes ──────────────────────────────────────────────────────────────────

def test_create_skill_passport_inserts_confidence_score():
    mock_db = MagicMock()
    inserts = _capture_inserts(mock_db, {"id": "p-9", "created_at": "2025-04-01T00:00:00Z"})

    passport = ActivityRepository(mock_db).create_skill_passport(
        "u1", "Backend Engineer", {"summary": "..."}, 72
    )

    assert inserts == [{"user_id": "u1", "title": "Backend Engineer",
                        "content": {"summary": "..."}, "confidence_score": 72}]
    assert passport.id == "p-9"
    assert passport.confidence_score == 72


def test_add_progress_entry_insert_payload():
    mock_db = MagicMock()
    inserts = _capture_inserts(mock_db, {"date": "2025-04-01T00:00:00Z"})

    entry = ActivityRepository(mock_db).add_progress_entry("u1", "python", "advanced", 88)

    assert inserts[0] == {"user_id": "u1", "skill": "python", "level": "advanced", "score": 88}
    assert entry.score == 88


def test_insert_without_returned_row_raises():
    mock_db = MagicMock()
    mock_db.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])
    with pytest.raises(DataUnavailableError):
        ActivityRepository(mock_db).log_analytics_event("u1", "page_view", {})


# ─── Analytics ───────────────────────────────────────────────────────────────

def test_fetch_analytics_events_newest_first_with_default_limit():
    mock_db = MagicMock()
    chain = mock_db.table.return_value.select.return_value.eq.return_value
    chain.order.return_value.limit.return_value.execute.return_value = MagicMock(data=[
        {"id": 7, "user_id": "u1", "event_type": "page_view",
         "data": {"page": "/dashboard"}, "created_at": "2025-05-01T09:00:00Z"},
    ])

    [event] = ActivityRepository(mock_db).fetch_analytics_events("u1")

    assert event.id == "7"
    assert event.data == {"page": "/dashboard"}
    mock_db.table.assert_called_with("analytics")
    chain.order.assert_called_with("created_at", desc=True)
    chain.order.return_value.limit.assert_called_with(50)


def test_fetch_analytics_events_filters_by_event_type():
    mock_db = MagicMock()
    chain = mock_db.table.return_value.select.return_value.eq.return_value
    filtered = chain.eq.return_value
    filtered.order.return_value.limit.return_value.execute.return_value = MagicMock(data=[])

    assert ActivityRepository(mock_db).fetch_analytics_events("u1", "signup", 10) == []
    chain.eq.assert_called_with("event_type", "signup")
    filtered.order.return_value.limit.assert_called_with(10)


def test_fetch_analytics_events_api_error_raises_data_unavailable():
    mock_db = MagicMock()
    chain = mock_db.table.return_value.select.return_value.eq.return_value
    chain.order.return_value.limit.return_value.execute.side_effect = httpx.ReadTimeout("slow")
    with pytest.raises(DataUnavailableError, match="analytics"):
        ActivityRepository(mock_db).fetch_analytics_events("u1")


def _profile_lookup(mock_db: MagicMock) -> MagicMock:
    return mock_db.table.return_value.select.return_value.eq.return_value.limit.return_value


def test_get_analytics_profile_returns_none_when_missing():
    mock_db = MagicMock()
    _profile_lookup(mock_db).execute.return_value = MagicMock(data=[])
    assert ActivityRepository(mock_db).get_analytics_profile("u1") is None
    mock_db.table.assert_called_with("user_analytics_profiles")


def test_profile_json_text_columns_are_decoded():
    profile = normalize_profile({
        "id": 3, "user_id": "u1",
        "demographics": '{"age_range": "25-34"}',
        "career_goals": {"target_role": "Data Analyst"},
        "professional_background": None,
        "marketing_consent": True,
    })
    assert profile.id == "3"
    assert profile.demographics == {"age_range": "25-34"}
    assert profile.career_goals == {"target_role": "Data Analyst"}
    assert profile.professional_background == {}
    assert profile.marketing_consent is True


def test_save_analytics_profile_inserts_when_missing():
    mock_db = MagicMock()
    _profile_lookup(mock_db).execute.return_value = MagicMock(data=[])
    inserts = _capture_inserts(mock_db, {"id": "prof-1"})

    profile = ActivityRepository(mock_db).save_analytics_profile("u1", {
        "demographics": {"country": "NG"}, "discovery_source": "friend",
        "marketing_consent": False, "not_a_column": "dropped",
    })

    assert inserts == [{"user_id": "u1", "demographics": {"country": "NG"},
                        "discovery_source": "friend", "marketing_consent": False}]
    assert profile.id == "prof-1"
    mock_db.table.return_value.update.assert_not_called()


def test_save_analytics_profile_updates_existing_row():
    mock_db = MagicMock()
    _profile_lookup(mock_db).execute.return_value = MagicMock(data=[
        {"id": "prof-1", "user_id": "u1", "career_goals": {"target_role": "PM"}},
    ])
    updates = []
    update_chain = MagicMock()
    def mock_update(row):
        updates.append(row)
        update_chain.eq.return_value.execute.return_value = MagicMock(
            data=[{"id": "prof-1", **row}]
        )
        return update_chain
    mock_db.table.return_value.update.side_effect = mock_update

    profile = ActivityRepository(mock_db).save_analytics_profile(
        "u1", {"career_goals": {"target_role": "Data Analyst"}}
    )

    assert updates[0]["career_goals"] == {"target_role": "Data Analyst"}
    assert "updated_at" in updates[0]
    assert "user_id" not in updates[0]
    assert profile.career_goals == {"target_role": "Data Analyst"}
    update_chain.eq.assert_called_once_with("id", "prof-1")
    mock_db.table.return_value.insert.assert_not_called()
