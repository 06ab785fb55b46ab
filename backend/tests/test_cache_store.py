"""Fingerprint cache round-trip, request counting and history listings."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ideataken.database import Base
from ideataken.models.idea_check import IdeaCheck
from ideataken.schemas.source_schema import AggregateSources, GitHubResult, SourceKind
from ideataken.services.cache_store import CacheStore
from ideataken.services.fingerprint import compute_fingerprint
from ideataken.services.heuristics import heuristic_analysis
from ideataken.services.history import get_popular_ideas, get_user_search_history, save_user_search

# ---------------------------------------------------------------------------
# Test database setup (file-based SQLite for compatibility)
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite:///./test_cache_store.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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


def _sources(idea="habit tracker app"):
    repos = [GitHubResult(name="uhabits", url="https://github.com/iSoron/uhabits", stars=8000)]
    return AggregateSources.from_values(idea, {SourceKind.REPO: repos})


def _store(db, idea="habit tracker app", user_id=None):
    sources = _sources(idea)
    analysis = heuristic_analysis(sources)
    return CacheStore(db).store(compute_fingerprint(idea), idea, sources, analysis, user_id=user_id)


# ===================================================================== #
#  Cache store                                                            #
# ===================================================================== #

class TestCacheStore:
    def test_miss_on_empty_cache(self, db):
        assert CacheStore(db).lookup(compute_fingerprint("anything")) is None

    def test_round_trip_returns_identical_payload(self, db):
        stored = _store(db)
        assert stored.cached is False
        assert stored.times_requested == 1

        hit = CacheStore(db).lookup(compute_fingerprint("Habit  Tracker App "))
        assert hit is not None
        assert hit.cached is True
        assert hit.id == stored.id
        assert hit.sources == stored.sources
        assert hit.analysis == stored.analysis

    def test_each_lookup_counts_one_request(self, db):
        _store(db)
        cache = CacheStore(db)
        fp = compute_fingerprint("habit tracker app")
        assert cache.lookup(fp).times_requested == 2
        assert cache.lookup(fp).times_requested == 3

    def test_duplicate_store_keeps_first_row(self, db):
        first = _store(db)
        second = _store(db)
        assert second.id == first.id
        assert second.times_requested == 2
        assert db.query(IdeaCheck).count() == 1

    def test_corrupt_row_reads_as_miss(self, db):
        _store(db)
        row = db.query(IdeaCheck).first()
        row.analysis_json = "{not json"
        db.commit()
        assert CacheStore(db).lookup(compute_fingerprint("habit tracker app")) is None

        db.expire_all()
        assert db.query(IdeaCheck).first().times_requested == 1

    def test_recompute_repairs_corrupt_row(self, db):
        first = _store(db)
        row = db.query(IdeaCheck).first()
        row.analysis_json = "{not json"
        db.commit()

        fp = compute_fingerprint("habit tracker app")
        assert CacheStore(db).lookup(fp) is None
        repaired = _store(db)
        assert repaired is not None
        assert repaired.id == first.id
        assert repaired.times_requested == 2
        assert repaired.analysis == first.analysis

        hit = CacheStore(db).lookup(fp)
        assert hit is not None
        assert hit.times_requested == 3
        assert db.query(IdeaCheck).count() == 1

    def test_denormalized_columns(self, db):
        _store(db, user_id="u1")
        row = db.query(IdeaCheck).first()
        assert row.overall_score == 90
        assert row.verdict == "Wide Open"
        assert row.user_id == "u1"


# ===================================================================== #
#  History and popular ideas                                              #
# ===================================================================== #

class TestHistory:
    def test_popular_only_lists_repeated_ideas(self, db):
        _store(db, "habit tracker app")
        _store(db, "pet insurance")
        cache = CacheStore(db)
        for _ in range(2):
            cache.lookup(compute_fingerprint("pet insurance"))
        cache.lookup(compute_fingerprint("habit tracker app"))

        popular = get_popular_ideas(db, limit=10)
        assert [p.idea for p in popular] == ["pet insurance", "habit tracker app"]
        assert popular[0].times_requested == 3

    def test_popular_limit(self, db):
        for idea in ("one idea", "two idea", "three idea"):
            _store(db, idea)
            CacheStore(db).lookup(compute_fingerprint(idea))
        assert len(get_popular_ideas(db, limit=2)) == 2

    def test_user_history_newest_first(self, db):
        first = _store(db, "habit tracker app")
        second = _store(db, "pet insurance")
        save_user_search(db, "u1", first.idea, first.analysis, idea_check_id=first.id)
        save_user_search(db, "u1", second.idea, second.analysis, idea_check_id=second.id)
        save_user_search(db, "u2", second.idea, second.analysis)

        history = get_user_search_history(db, "u1")
        assert [h.idea for h in history] == ["pet insurance", "habit tracker app"]
        assert history[0].idea_check_id == second.id
        assert history[0].verdict == "Wide Open"

    def test_anonymous_search_not_saved(self, db):
        stored = _store(db)
        save_user_search(db, None, stored.idea, stored.analysis)
        assert get_user_search_history(db, "None") == []
