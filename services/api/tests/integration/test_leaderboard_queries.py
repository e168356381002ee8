"""Integration tests for leaderboard_service."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from dbai.db.models import UserProfile
from dbai.engagement.leaderboard_service import get_leaderboard
from dbai.engagement.streak_service import record_completion

NOW = datetime(2026, 3, 11, 18, 0, 0, tzinfo=timezone.utc)  # Wednesday, week of Mar 9
LAST_WEEK = NOW - timedelta(days=7)


async def _complete(db: AsyncSession, user_id: str, scores: list[float], when: datetime, outcome: str = "loss") -> None:
    for score in scores:
        await record_completion(db, None, user_id, outcome, score, user_id.title(), now=when)


class TestMinimumSample:

    @pytest.mark.asyncio
    async def test_avg_score_needs_three_debates(self, db_session: AsyncSession):
        await _complete(db_session, "steady", [50, 60, 70], NOW)
        await _complete(db_session, "lucky", [100], NOW)

        by_avg = await get_leaderboard(db_session, "alltime", "avg_score", now=NOW)
        assert [r["user_id"] for r in by_avg] == ["steady"]
        assert by_avg[0]["avg_score"] == 60.0

        by_points = await get_leaderboard(db_session, "alltime", "points", now=NOW)
        assert {r["user_id"] for r in by_points} == {"steady", "lucky"}

    @pytest.mark.asyncio
    async def test_avg_score_rounded_to_one_decimal(self, db_session: AsyncSession):
        await _complete(db_session, "u1", [70, 71, 71], NOW)
        rows = await get_leaderboard(db_session, "alltime", "avg_score", now=NOW)
        assert rows[0]["avg_score"] == 70.7


class TestPeriods:

    @pytest.mark.asyncio
    async def test_weekly_excludes_rolled_over_rows(self, db_session: AsyncSession):
        await _complete(db_session, "old", [80, 80, 80, 80], LAST_WEEK)
        await _complete(db_session, "new", [40], NOW)

        weekly = await get_leaderboard(db_session, "weekly", "debates", now=NOW)
        assert [r["user_id"] for r in weekly] == ["new"]
        assert weekly[0]["debates"] == 1

        alltime = await get_leaderboard(db_session, "alltime", "debates", now=NOW)
        assert [r["user_id"] for r in alltime] == ["old", "new"]
        assert alltime[0]["debates"] == 4

    @pytest.mark.asyncio
    async def test_weekly_counts_only_this_week(self, db_session: AsyncSession):
        await _complete(db_session, "u1", [10, 10], LAST_WEEK, outcome="win")
        await _complete(db_session, "u1", [90, 90, 90], NOW, outcome="win")

        rows = await get_leaderboard(db_session, "weekly", "avg_score", now=NOW)
        assert rows[0]["debates"] == 3
        assert rows[0]["wins"] == 3
        assert rows[0]["avg_score"] == 90.0


class TestOrdering:

    @pytest.mark.asyncio
    async def test_points_desc_with_user_id_tiebreak(self, db_session: AsyncSession):
        await _complete(db_session, "carol", [50], NOW)
        await _complete(db_session, "alice", [50], NOW)
        await _complete(db_session, "bob", [50], NOW, outcome="win")

        rows = await get_leaderboard(db_session, "alltime", "points", now=NOW)
        assert [r["user_id"] for r in rows] == ["bob", "alice", "carol"]
        assert [r["rank"] for r in rows] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_streak_sort_uses_live_streak(self, db_session: AsyncSession):
        # stale: five-day streak that ended four days ago
        for offset in range(9, 4, -1):
            await _complete(db_session, "stale", [50], NOW - timedelta(days=offset))
        for offset in (1, 0):
            await _complete(db_session, "live", [50], NOW - timedelta(days=offset))

        rows = await get_leaderboard(db_session, "alltime", "streak", now=NOW)
        assert [r["user_id"] for r in rows] == ["live", "stale"]
        assert rows[0]["current_streak"] == 2
        assert rows[1]["current_streak"] == 0
        assert rows[1]["longest_streak"] == 5

    @pytest.mark.asyncio
    async def test_username_from_profile(self, db_session: AsyncSession):
        db_session.add(UserProfile(user_id="u1", username="ada", display_name="Ada Lovelace"))
        await db_session.commit()
        await _complete(db_session, "u1", [50], NOW)
        await _complete(db_session, "u2", [50], NOW)

        rows = {r["user_id"]: r for r in await get_leaderboard(db_session, now=NOW)}
        assert rows["u1"]["username"] == "ada"
        assert rows["u1"]["display_name"] == "U1"
        assert rows["u2"]["username"] is None


class TestArguments:

    @pytest.mark.asyncio
    async def test_unknown_period_raises(self, db_session: AsyncSession):
        with pytest.raises(ValueError):
            await get_leaderboard(db_session, "monthly", "points", now=NOW)

    @pytest.mark.asyncio
    async def test_unknown_sort_raises(self, db_session: AsyncSession):
        with pytest.raises(ValueError):
            await get_leaderboard(db_session, "alltime", "elo", now=NOW)

    @pytest.mark.asyncio
    async def test_limit_is_clamped(self, db_session: AsyncSession):
        for name in ("a", "b", "c"):
            await _complete(db_session, name, [50], NOW)

        assert len(await get_leaderboard(db_session, limit=0, now=NOW)) == 1
        assert len(await get_leaderboard(db_session, limit=2, now=NOW)) == 2
        assert len(await get_leaderboard(db_session, limit=1000, now=NOW)) == 3

    @pytest.mark.asyncio
    async def test_empty_board(self, db_session: AsyncSession):
        assert await get_leaderboard(db_session, "weekly", "streak", now=NOW) == []
