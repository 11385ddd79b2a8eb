"""Integration tests for adherence analytics."""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.models import Medicine, ReminderLog, ReminderStatus, User
from app.schemas.analytics import AnalyticsPeriod
from app.services.reminder_log_service import ReminderLogService


def iso(moment: datetime) -> str:
    return moment.replace(microsecond=0).isoformat()


@pytest.fixture
def seeded(db):
    """A user in New York with two medicines and a week of logs (UTC timestamps)."""
    user = User(email="ny@example.com", name="NY", hashed_password="x", timezone="America/New_York")
    db.add(user)
    db.flush()

    metformin = Medicine(user_id=user.id, name="Metformin", dosage="500mg", times=["08:00"])
    lisinopril = Medicine(user_id=user.id, name="Lisinopril", dosage="10mg", times=["20:00"])
    db.add_all([metformin, lisinopril])
    db.flush()

    rows = [
        # Monday 2023-06-05 12:00 UTC = 08:00 New York
        (metformin, ReminderStatus.TAKEN, datetime(2023, 6, 5, 12, 0)),
        # Tuesday 12:00 UTC
        (metformin, ReminderStatus.MISSED, datetime(2023, 6, 6, 12, 0)),
        # Wednesday 01:00 UTC = Tuesday 21:00 New York
        (lisinopril, ReminderStatus.TAKEN, datetime(2023, 6, 7, 1, 0)),
        (lisinopril, ReminderStatus.SKIPPED, datetime(2023, 6, 8, 0, 30)),
        (lisinopril, ReminderStatus.PENDING, datetime(2023, 6, 9, 0, 30)),
        # Outside the last 7 days
        (metformin, ReminderStatus.TAKEN, datetime(2023, 5, 20, 12, 0)),
    ]
    for medicine, status, timestamp in rows:
        db.add(ReminderLog(
            user_id=user.id,
            medicine_id=medicine.id,
            time=medicine.times[0],
            status=status,
            timestamp=timestamp,
        ))
    db.commit()
    return user, metformin, lisinopril


class TestAnalyticsService:
    """Tests for ReminderLogService.get_analytics with a fixed clock."""

    NOW = datetime(2023, 6, 11, 4, 0, tzinfo=timezone.utc)  # Sunday 00:00 New York

    def test_seven_days(self, db, seeded) -> None:
        user, metformin, lisinopril = seeded
        analytics = ReminderLogService(db, user).get_analytics(AnalyticsPeriod.LAST_7_DAYS, now=self.NOW)

        assert analytics.period == "7days"
        assert analytics.date_range.start == date(2023, 6, 4)
        assert analytics.date_range.end == date(2023, 6, 11)

        overall = analytics.overall
        assert (overall.total, overall.taken, overall.skipped, overall.missed) == (4, 2, 1, 1)
        assert overall.adherence_rate == 50

    def test_buckets_use_user_timezone(self, db, seeded) -> None:
        user, _, _ = seeded
        analytics = ReminderLogService(db, user).get_analytics(AnalyticsPeriod.LAST_7_DAYS, now=self.NOW)

        days = analytics.by_day_of_week
        assert (days[1].total, days[1].taken) == (1, 1)  # Monday
        assert (days[2].total, days[2].taken) == (2, 1)  # Tuesday, incl. 21:00 local
        assert days[3].total == 1  # Wednesday 20:30 local
        assert days[0].total == 0

        tod = analytics.by_time_of_day
        assert tod.morning.total == 2
        assert tod.evening.total == 1
        assert tod.night.total == 1
        assert tod.afternoon.total == 0

    def test_by_medicine_and_trend(self, db, seeded) -> None:
        user, metformin, lisinopril = seeded
        analytics = ReminderLogService(db, user).get_analytics(AnalyticsPeriod.LAST_7_DAYS, now=self.NOW)

        assert [item.medicine_id for item in analytics.by_medicine] == [metformin.id, lisinopril.id]
        assert analytics.by_medicine[0].name == "Metformin"
        assert analytics.by_medicine[1].dosage == "10mg"
        assert analytics.by_medicine[1].skipped == 1

        assert len(analytics.trend) == 1
        assert analytics.trend[0].total == 4

    def test_thirty_days_includes_older_log(self, db, seeded) -> None:
        user, _, _ = seeded
        analytics = ReminderLogService(db, user).get_analytics(AnalyticsPeriod.LAST_30_DAYS, now=self.NOW)

        assert analytics.overall.total == 5
        assert len(analytics.trend) == 5
        assert sum(week.total for week in analytics.trend) == 5

    def test_empty_window(self, db, seeded) -> None:
        user, _, _ = seeded
        later = self.NOW + timedelta(days=365)
        analytics = ReminderLogService(db, user).get_analytics(AnalyticsPeriod.LAST_90_DAYS, now=later)

        assert analytics.overall.total == 0
        assert analytics.overall.adherence_rate == 0
        assert analytics.by_medicine == ()
        assert len(analytics.trend) == 13


class TestLocalDays:
    """Stats, listings and analytics agree on the user's calendar day."""

    def test_stats_use_user_days(self, db, seeded) -> None:
        user, _, _ = seeded
        service = ReminderLogService(db, user)

        # 2023-06-06 in New York: 08:00 missed and 21:00 taken (01:00 UTC on the 7th)
        tuesday = service.get_stats(date(2023, 6, 6), date(2023, 6, 6)).overall
        assert (tuesday.total, tuesday.taken, tuesday.missed) == (2, 1, 1)

        # 20:30 on the 7th is 00:30 UTC on the 8th
        wednesday = service.get_stats(date(2023, 6, 7), date(2023, 6, 7)).overall
        assert (wednesday.total, wednesday.skipped) == (1, 1)

    def test_stats_match_analytics_weekdays(self, db, seeded) -> None:
        user, _, _ = seeded
        service = ReminderLogService(db, user)

        analytics = service.get_analytics(AnalyticsPeriod.LAST_7_DAYS, now=TestAnalyticsService.NOW)
        stats = service.get_stats(date(2023, 6, 6), date(2023, 6, 6))

        assert analytics.by_day_of_week[2].total == stats.overall.total

    def test_log_date_is_local(self, db, seeded) -> None:
        user, _, _ = seeded
        late = db.query(ReminderLog).filter(ReminderLog.timestamp == datetime(2023, 6, 7, 1, 0)).one()

        assert late.date == "2023-06-06"
        assert late.local_timestamp.hour == 21


class TestAnalyticsEndpoint:
    """Tests for GET /api/reminder-logs/analytics."""

    def test_response_shape(self, client, auth_headers, medicine) -> None:
        now = datetime.utcnow()
        for status, days_ago in [("taken", 1), ("missed", 2), ("pending", 3), ("taken", 40)]:
            response = client.post(
                "/api/reminder-logs/",
                json={
                    "medicine_id": medicine["id"],
                    "time": "08:00",
                    "status": status,
                    "timestamp": iso(now - timedelta(days=days_ago)),
                },
                headers=auth_headers,
            )
            assert response.status_code == 201

        response = client.get("/api/reminder-logs/analytics?period=7days", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()

        assert set(body) == {
            "period", "dateRange", "overall", "dayOfWeek", "timeOfDay", "byMedicine", "trend",
        }
        assert body["period"] == "7days"
        assert body["overall"] == {
            "total": 2, "taken": 1, "skipped": 0, "missed": 1, "adherenceRate": 50.0,
        }
        assert len(body["dayOfWeek"]) == 7
        assert set(body["timeOfDay"]) == {"morning", "afternoon", "evening", "night"}
        assert body["byMedicine"][0]["medicineId"] == medicine["id"]
        assert body["byMedicine"][0]["name"] == "Metformin"
        assert len(body["trend"]) == 1
        assert {"weekStart", "weekEnd", "total", "taken", "adherenceRate"} == set(body["trend"][0])

        wider = client.get("/api/reminder-logs/analytics?period=90days", headers=auth_headers).json()
        assert wider["overall"]["total"] == 3
        assert len(wider["trend"]) == 13

    def test_default_period(self, client, auth_headers) -> None:
        body = client.get("/api/reminder-logs/analytics", headers=auth_headers).json()

        assert body["period"] == "30days"
        assert len(body["trend"]) == 5
        assert body["overall"]["adherenceRate"] == 0

    @pytest.mark.parametrize("period", ["6months", "1year"])
    def test_month_periods(self, client, auth_headers, period) -> None:
        body = client.get(f"/api/reminder-logs/analytics?period={period}", headers=auth_headers).json()

        start = date.fromisoformat(body["dateRange"]["start"])
        end = date.fromisoformat(body["dateRange"]["end"])
        span = (end - start).days
        assert span >= 181
        assert len(body["trend"]) == -(-span // 7)

    def test_unknown_period(self, client, auth_headers) -> None:
        response = client.get("/api/reminder-logs/analytics?period=2weeks", headers=auth_headers)
        assert response.status_code == 422

    def test_unresolved_rows_reaching_aggregation_give_400(
            self, client, auth_headers, medicine, monkeypatch
    ) -> None:
        pending = client.post(
            "/api/reminder-logs/",
            json={"medicine_id": medicine["id"], "time": "08:00"},
            headers=auth_headers,
        ).json()

        def every_log(service, start, end):
            return service.db.query(ReminderLog).filter(ReminderLog.user_id == service.user.id).all()

        monkeypatch.setattr(ReminderLogService, "_resolved_logs", every_log)

        today = datetime.utcnow().date().isoformat()
        for url in (
            "/api/reminder-logs/analytics?period=7days",
            f"/api/reminder-logs/stats?startDate={today}&endDate={today}",
        ):
            response = client.get(url, headers=auth_headers)
            assert response.status_code == 400
            assert str(pending["id"]) in response.json()["detail"]
            assert "pending" in response.json()["detail"]
