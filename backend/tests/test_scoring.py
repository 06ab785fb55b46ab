"""Fingerprint, verdict banding, heuristic fallback and Analysis invariants."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from pydantic import ValidationError

from ideataken.schemas.analysis_schema import Analysis, Verdict, verdict_for_score
from ideataken.schemas.source_schema import (
    AggregateSources,
    AppStoreResult,
    GitHubResult,
    ProductHuntResult,
    SOURCE_FIELDS,
    SourceKind,
    TrademarkResult,
    TrendsData,
)
from ideataken.services.fingerprint import IdeaQuery, canonicalize, compute_fingerprint
from ideataken.services.heuristics import heuristic_analysis


def _apps(n):
    return [AppStoreResult(name=f"App {i}", url=f"https://apps.example/{i}", rating=4.0) for i in range(n)]


def _launches(n):
    return [ProductHuntResult(name=f"Launch {i}", url=f"https://ph.example/{i}", tagline=f"tagline {i}") for i in range(n)]


def _repos(n):
    return [GitHubResult(name=f"repo-{i}", url=f"https://github.com/x/repo-{i}") for i in range(n)]


# ===================================================================== #
#  Fingerprint                                                            #
# ===================================================================== #

class TestFingerprint:
    def test_case_and_surrounding_whitespace_ignored(self):
        assert compute_fingerprint("Pet Insurance ") == compute_fingerprint("pet insurance")

    def test_internal_whitespace_collapsed(self):
        assert canonicalize("  AI\tmeal    planner\n") == "ai meal planner"
        assert compute_fingerprint("AI   meal planner") == compute_fingerprint("ai meal planner")

    def test_different_ideas_differ(self):
        assert compute_fingerprint("pet insurance") != compute_fingerprint("pet insurer")

    def test_fingerprint_is_sha256_hex(self):
        fp = compute_fingerprint("habit tracker app")
        assert len(fp) == 64
        int(fp, 16)

    def test_parse_strips_and_keeps_raw_case(self):
        q = IdeaQuery.parse("  Habit Tracker App  ")
        assert q.raw == "Habit Tracker App"
        assert q.canonical == "habit tracker app"
        assert q.fingerprint == compute_fingerprint("habit tracker app")

    def test_parse_rejects_short_and_long(self):
        with pytest.raises(ValueError):
            IdeaQuery.parse("  ab  ")
        with pytest.raises(ValueError):
            IdeaQuery.parse("x" * 501)

    def test_parse_accepts_bounds(self):
        assert IdeaQuery.parse("abc").raw == "abc"
        assert len(IdeaQuery.parse("y" * 500).raw) == 500


# ===================================================================== #
#  Verdict banding                                                        #
# ===================================================================== #

class TestVerdictBanding:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (0, Verdict.TAKEN),
            (25, Verdict.TAKEN),
            (26, Verdict.CROWDED),
            (60, Verdict.CROWDED),
            (61, Verdict.OPPORTUNITY),
            (85, Verdict.OPPORTUNITY),
            (86, Verdict.WIDE_OPEN),
            (100, Verdict.WIDE_OPEN),
        ],
    )
    def test_band_edges(self, score, expected):
        assert verdict_for_score(score) is expected

    def test_banding_is_total_and_monotonic(self):
        ranks = [verdict_for_score(s).rank for s in range(0, 101)]
        assert ranks == sorted(ranks)
        assert set(ranks) == {0, 1, 2, 3}


# ===================================================================== #
#  Aggregate record shape                                                 #
# ===================================================================== #

class TestAggregateSources:
    def test_empty_has_every_key(self):
        sources = AggregateSources.empty("AI meal planner")
        dumped = sources.model_dump()
        for field in SOURCE_FIELDS.values():
            assert field in dumped
        assert sources.trends == TrendsData(keyword="AI meal planner", interest=50, trend="stable")
        assert sources.trademark == TrademarkResult(found=False, matches=[])

    def test_trend_keyword_truncated(self):
        idea = "z" * 120
        assert AggregateSources.empty(idea).trends.keyword == "z" * 50

    def test_from_values_defaults_missing_kinds(self):
        apps = _apps(2)
        sources = AggregateSources.from_values("x app", {SourceKind.APP: apps})
        assert sources.app_store == apps
        assert sources.github == []
        assert sources.trends.interest == 50

    def test_results_are_immutable(self):
        app = _apps(1)[0]
        with pytest.raises(ValidationError):
            app.name = "changed"


# ===================================================================== #
#  Heuristic fallback                                                     #
# ===================================================================== #

class TestHeuristicAnalysis:
    def test_no_competitors_is_wide_open(self):
        analysis = heuristic_analysis(AggregateSources.empty("AI meal planner"))
        assert analysis.overall_score == 100
        assert analysis.verdict is Verdict.WIDE_OPEN
        assert analysis.top_competitors == []
        assert analysis.recommendation.startswith("Great opportunity! ")
        assert analysis.confidence_score == 70
        assert analysis.analysis_source == "heuristic"

    def test_crowded_market_is_taken(self):
        sources = AggregateSources.from_values(
            "habit tracker app",
            {SourceKind.APP: _apps(6), SourceKind.LAUNCH_POST: _launches(2), SourceKind.REPO: _repos(3)},
        )
        analysis = heuristic_analysis(sources)
        assert analysis.overall_score == 0
        assert analysis.verdict is Verdict.TAKEN
        assert analysis.recommendation.startswith("Market is competitive but not impossible. ")

    def test_top_competitors_prefer_apps_then_launches(self):
        sources = AggregateSources.from_values(
            "habit tracker app",
            {SourceKind.APP: _apps(1), SourceKind.LAUNCH_POST: _launches(1), SourceKind.REPO: _repos(2)},
        )
        competitors = heuristic_analysis(sources).top_competitors
        assert [c.source for c in competitors] == ["App Store", "Product Hunt", "GitHub"]
        assert competitors[1].description == "tagline 0"

    def test_four_competitors_is_crowded(self):
        sources = AggregateSources.from_values("x", {SourceKind.REPO: _repos(4)})
        analysis = heuristic_analysis(sources)
        assert analysis.overall_score == 60
        assert analysis.verdict is Verdict.CROWDED
        assert not analysis.recommendation.startswith("Great")

    @pytest.mark.parametrize("count", range(0, 13))
    def test_heuristic_verdict_always_matches_score(self, count):
        sources = AggregateSources.from_values("x", {SourceKind.APP: _apps(count)})
        analysis = heuristic_analysis(sources)
        assert analysis.verdict is verdict_for_score(analysis.overall_score)


# ===================================================================== #
#  Analysis model                                                         #
# ===================================================================== #

class TestAnalysisModel:
    def _make(self, **overrides):
        data = {
            "overall_score": 70,
            "verdict": Verdict.OPPORTUNITY,
            "confidence_score": 80,
            "recommendation": "Build it.",
        }
        data.update(overrides)
        return Analysis(**data)

    def test_inconsistent_verdict_rejected(self):
        with pytest.raises(ValidationError):
            self._make(overall_score=90, verdict=Verdict.TAKEN)

    def test_score_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            self._make(overall_score=101, verdict=Verdict.WIDE_OPEN)

    @pytest.mark.parametrize(
        "confidence,level",
        [(100, "High"), (75, "High"), (74, "Medium"), (50, "Medium"), (49, "Low"), (0, "Low")],
    )
    def test_confidence_level(self, confidence, level):
        assert self._make(confidence_score=confidence).confidence_level == level

    def test_confidence_level_serialized(self):
        dumped = self._make().model_dump(mode="json")
        assert dumped["confidence_level"] == "High"
        assert dumped["verdict"] == "Opportunity"
