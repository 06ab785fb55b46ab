"""Rate limiter, per-user quota, and gate ordering."""

import os
import sys
from datetime import date, timedelta

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock, patch
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ideataken.database import Base
from ideataken.models.user import User
from ideataken.services.governor import evaluate_gates
from ideataken.services.quota import reserve_user_search
from ideataken.services.rate_limiter import RateLimiter

# ---------------------------------------------------------------------------
# Test database setup (file-based SQLite for compatibility)
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite:///./test_governor.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2026, 3, 14)


@pytest.fixture(autouse=True)
def setup_db():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def _add_user(db, user_id="u1", plan="free", searches_today=0, searches_day=TODAY):
    db.add(User(id=user_id, plan=plan, searches_today=searches_today, searches_day=searches_day))
    db.commit()


# ===================================================================== #
#  Rate limiter                                                           #
# ===================================================================== #

class TestRateLimiter:
    def test_eleventh_request_in_window_rejected(self):
        limiter = RateLimiter(limit=10, window_seconds=60)
        decisions = [limiter.check("1.2.3.4", now=100.0 + i) for i in range(10)]
        assert all(d.allowed for d in decisions)
        assert [d.remaining for d in decisions] == list(range(9, -1, -1))

        rejected = limiter.check("1.2.3.4", now=110.0)
        assert rejected.allowed is False
        assert rejected.remaining == 0
        assert rejected.retry_after == 50

    def test_window_expiry_resets_count(self):
        limiter = RateLimiter(limit=10, window_seconds=60)
        for i in range(11):
            limiter.check("1.2.3.4", now=100.0)
        after = limiter.check("1.2.3.4", now=160.0)
        assert after.allowed is True
        assert after.remaining == 9  # count restarted at 1

    def test_identities_are_independent(self):
        limiter = RateLimiter(limit=1, window_seconds=60)
        assert limiter.check("a", now=0.0).allowed
        assert not limiter.check("a", now=1.0).allowed
        assert limiter.check("b", now=1.0).allowed

    def test_retry_after_rounds_up(self):
        limiter = RateLimiter(limit=1, window_seconds=60)
        limiter.check("a", now=0.0)
        assert limiter.check("a", now=59.5).retry_after == 1

    def test_expired_entries_swept(self):
        limiter = RateLimiter(limit=5, window_seconds=10, max_identities=4)
        for i in range(3):
            limiter.check(f"ip-{i}", now=0.0)
        assert len(limiter) == 3
        limiter.check("late", now=20.0)
        assert len(limiter) == 1

    def test_map_stays_bounded(self):
        limiter = RateLimiter(limit=5, window_seconds=1000, max_identities=10)
        for i in range(50):
            limiter.check(f"ip-{i}", now=float(i))
        assert len(limiter) <= 11


# ===================================================================== #
#  Per-user quota                                                         #
# ===================================================================== #

class TestReserveUserSearch:
    def test_anonymous_allowed(self, db):
        assert reserve_user_search(db, None, today=TODAY).allowed is True

    def test_unknown_user_allowed(self, db):
        assert reserve_user_search(db, "ghost", today=TODAY).allowed is True

    def test_free_user_under_limit_counted(self, db):
        _add_user(db, searches_today=1)
        decision = reserve_user_search(db, "u1", today=TODAY)
        assert decision.allowed is True
        assert decision.searches_remaining == 1
        assert decision.plan == "free"

        user = db.get(User, "u1")
        assert user.searches_today == 2
        assert user.total_searches == 1
        assert user.searches_this_month == 1
        assert user.last_search_at is not None

    def test_free_user_at_limit_denied_without_counting(self, db):
        _add_user(db, searches_today=3)
        decision = reserve_user_search(db, "u1", today=TODAY)
        assert decision.allowed is False
        assert decision.searches_remaining == 0
        assert "limit" in decision.reason.lower()

        db.expire_all()
        user = db.get(User, "u1")
        assert user.searches_today == 3
        assert user.total_searches == 0

    def test_counter_from_previous_day_restarts_at_one(self, db):
        _add_user(db, searches_today=3, searches_day=TODAY - timedelta(days=1))
        decision = reserve_user_search(db, "u1", today=TODAY)
        assert decision.allowed is True
        assert decision.searches_remaining == 2

        user = db.get(User, "u1")
        assert user.searches_today == 1
        assert user.searches_day == TODAY

    def test_never_searched_user(self, db):
        _add_user(db, searches_today=0, searches_day=None)
        assert reserve_user_search(db, "u1", today=TODAY).searches_remaining == 2

    def test_pro_user_unlimited(self, db):
        _add_user(db, plan="pro", searches_today=500)
        decision = reserve_user_search(db, "u1", today=TODAY)
        assert decision.allowed is True
        assert decision.searches_remaining is None
        assert db.get(User, "u1").searches_today == 501

    def test_exactly_three_per_day(self, db):
        _add_user(db, searches_today=0, searches_day=None)
        results = [reserve_user_search(db, "u1", today=TODAY).allowed for _ in range(5)]
        assert results == [True, True, True, False, False]

    def test_stale_reads_cannot_overshoot_limit(self):
        # Two sessions read the profile before either writes, as concurrent requests would.
        setup = TestingSessionLocal()
        _add_user(setup, searches_today=2)
        setup.close()

        first, second = TestingSessionLocal(), TestingSessionLocal()
        try:
            first.get(User, "u1")
            second.get(User, "u1")
            outcomes = [
                reserve_user_search(first, "u1", today=TODAY).allowed,
                reserve_user_search(second, "u1", today=TODAY).allowed,
            ]
        finally:
            first.close()
            second.close()

        assert outcomes == [True, False]
        check = TestingSessionLocal()
        try:
            assert check.get(User, "u1").searches_today == 3
        finally:
            check.close()

    def test_database_failure_fails_open(self):
        broken = MagicMock()
        broken.get.side_effect = SQLAlchemyError("database is locked")
        assert reserve_user_search(broken, "u1", today=TODAY).allowed is True
        broken.rollback.assert_called_once()


# ===================================================================== #
#  Gate ordering                                                          #
# ===================================================================== #

class TestEvaluateGates:
    def test_rate_gate_short_circuits_profile_lookup(self, db):
        limiter = RateLimiter(limit=1, window_seconds=60)
        with patch("ideataken.services.governor.reserve_user_search") as quota:
            quota.return_value = MagicMock(allowed=True)
            first = evaluate_gates(limiter, db, "1.2.3.4", "u1")
            second = evaluate_gates(limiter, db, "1.2.3.4", "u1")

        assert first.allowed is True
        assert second.allowed is False
        assert second.quota is None
        assert quota.call_count == 1

    def test_quota_denial_reported(self, db):
        _add_user(db, searches_today=3, searches_day=date.today())
        with patch("ideataken.services.quota._today", return_value=date.today()):
            result = evaluate_gates(RateLimiter(), db, "1.2.3.4", "u1")
        assert result.rate.allowed is True
        assert result.quota.allowed is False
        assert result.allowed is False
