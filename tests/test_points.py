from dataclasses import replace
from datetime import datetime

from sqlalchemy import text

from doypal.config import get_settings
from doypal.main import app
from doypal.models.redemption import Redemption
from doypal.services.points_service import get_point_summary, local_day_fields, period_starts


def test_summary_sums_active_events_only(client, make_event):
    make_event(points=5)
    make_event(points=3)
    make_event(points=100, is_active=False)

    res = client.get("/api/points")

    assert res.status_code == 200
    body = res.json()
    assert body["total_points"] == 8
    assert body["spent_points"] == 0
    assert body["available_points"] == 8


def test_total_ignores_redemptions_but_available_nets_them(client, db, make_event, make_reward):
    make_event(points=20)
    reward = make_reward(point_cost=7)
    db.add(Redemption(reward_id=reward.id, points_spent=7, status="active"))
    db.add(Redemption(reward_id=reward.id, points_spent=5, status="withdrawn"))
    db.commit()

    body = client.get("/api/points").json()

    assert body["total_points"] == 20
    assert body["spent_points"] == 7
    assert body["available_points"] == 13


def test_weekly_and_monthly_windows(db, make_event):
    now = datetime(2024, 3, 13, 12, 0)  # Wednesday
    make_event(points=4, timestamp=datetime(2024, 3, 11, 9, 0))
    make_event(points=3, timestamp=datetime(2024, 3, 5, 9, 0))
    make_event(points=2, timestamp=datetime(2024, 2, 20, 9, 0))
    # Sunday midnight is inside the week
    make_event(points=1, timestamp=datetime(2024, 3, 10, 0, 0))

    summary = get_point_summary(db, now=now)

    assert summary["total_points"] == 10
    assert summary["weekly_points"] == 5
    assert summary["monthly_points"] == 8


def test_windows_follow_configured_timezone(db, make_event):
    # Sunday 03:00 UTC is still Saturday evening in New York
    now = datetime(2024, 3, 10, 3, 0)
    make_event(points=6, timestamp=datetime(2024, 3, 9, 10, 0))

    utc = get_point_summary(db, now=now, tz_name="UTC")
    new_york = get_point_summary(db, now=now, tz_name="America/New_York")

    assert utc["weekly_points"] == 0
    assert new_york["weekly_points"] == 6


def test_period_starts():
    week_start, month_start = period_starts(datetime(2024, 3, 13, 12, 0))

    assert week_start == datetime(2024, 3, 10, 0, 0)
    assert month_start == datetime(2024, 3, 1, 0, 0)


def test_local_day_fields():
    assert local_day_fields(datetime(2024, 3, 10, 12, 0)) == ("Sunday", 10)
    assert local_day_fields(datetime(2024, 3, 10, 3, 0), "America/New_York") == ("Saturday", 9)


def test_summary_scoped_to_profile(client, make_profile, make_event):
    alex = make_profile("Alex")
    sam = make_profile("Sam")
    make_event(points=5, profile_id=alex.id)
    make_event(points=9, profile_id=sam.id)

    scoped = client.get("/api/points", params={"profile_id": str(alex.id)}).json()
    everyone = client.get("/api/points").json()

    assert scoped["total_points"] == 5
    assert scoped["profile_id"] == str(alex.id)
    assert everyone["total_points"] == 14


def test_admin_points_global_row_first(client, make_profile, make_event):
    alex = make_profile("Alex")
    make_event(points=5, profile_id=alex.id, timestamp=datetime(2024, 3, 11, 9, 0))
    make_event(points=2, timestamp=datetime(2024, 3, 13, 9, 0))

    body = client.get("/api/admin/points").json()

    summaries = body["pointSummaries"]
    assert summaries[0]["profile_id"] is None
    assert summaries[0]["total_points"] == 7
    assert summaries[1]["profile_id"] == str(alex.id)
    assert summaries[1]["total_points"] == 5
    assert body["pointsByDay"] == {"Monday": 5, "Wednesday": 2}


def test_summary_reads_point_summaries_view(client, db, settings, make_event):
    make_event(points=5)
    db.execute(
        text(
            "CREATE VIEW point_summaries AS "
            "SELECT profile_id, SUM(points) AS total_points, 42 AS weekly_points, "
            "SUM(points) AS monthly_points FROM events WHERE is_active = 1 GROUP BY profile_id"
        )
    )
    db.commit()
    app.dependency_overrides[get_settings] = lambda: replace(settings, use_points_view=True)

    body = client.get("/api/points").json()

    assert body["total_points"] == 5
    assert body["weekly_points"] == 42


def test_summary_falls_back_when_view_has_no_rows(db, make_event):
    make_event(points=5)
    db.execute(
        text(
            "CREATE VIEW point_summaries AS "
            "SELECT profile_id, points AS total_points, points AS weekly_points, "
            "points AS monthly_points FROM events WHERE 1 = 0"
        )
    )
    db.commit()

    summary = get_point_summary(db, use_view=True, now=datetime(2024, 3, 13, 12, 0))

    assert summary["total_points"] == 5
    assert summary["weekly_points"] == 5
