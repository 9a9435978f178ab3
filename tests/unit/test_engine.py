"""Unit tests for the search orchestrator."""

from __future__ import annotations

import logging
from datetime import timedelta

import pytest
import structlog
from structlog.testing import capture_logs

from mail_search.models import SearchFilter, Sensitivity
from mail_search.search import SearchEngine


class TestRank:
    """Test suite for SearchEngine.rank."""

    def test_project_update_scenario(self, engine, make_thread, make_email) -> None:
        thread = make_thread(
            subject="Q4 Project Update",
            emails=[
                make_email(
                    subject="Q4 Project Update",
                    snippet="the deadline moves to next Friday",
                    sensitivity=Sensitivity.CONFIDENTIAL,
                )
            ],
        )

        results = engine.rank([thread], "project", SearchFilter())

        assert len(results) == 1
        result = results[0]
        assert result.relevance >= 10 + 3 + 0.1 + 0.3
        assert "subject" in result.matched_fields
        assert "semantic_project" in result.matched_fields

    def test_weights_and_bonuses(self, engine, make_thread, make_email) -> None:
        # exact 10 + semantic 3 * 0.8 + fuzzy 2 * 0.6 + filter 0.1
        thread = make_thread(subject="project", emails=[make_email()])

        [result] = engine.rank([thread], "project")

        assert result.relevance == pytest.approx(10 + 2.4 + 1.2 + 0.1)

    def test_subject_substring_always_included(self, engine, make_thread) -> None:
        thread = make_thread(subject="Invoice #4411 from Globex")

        [result] = engine.rank([thread], "#4411")

        assert result.relevance >= 10
        assert "subject" in result.matched_fields

    def test_no_match_returns_nothing(self, engine, make_thread, make_email) -> None:
        threads = [
            make_thread(id="a", subject="Quarterly report", emails=[make_email(snippet="urgent")]),
            make_thread(id="b", subject="Lunch", emails=[make_email(has_attachments=True)]),
        ]

        assert engine.rank(threads, "xyznomatch") == []

    def test_failing_filter_excludes_high_relevance(self, engine, make_thread, make_email) -> None:
        strong = make_thread(
            id="strong",
            subject="Budget budget budget",
            emails=[make_email(subject="Budget", sender_address="cfo@corp.example")],
        )
        weak = make_thread(
            id="weak",
            subject="Budget",
            emails=[make_email(sender_address="dana@acme.example")],
        )

        results = engine.rank([strong, weak], "budget", SearchFilter(sender="acme"))

        assert [r.thread.id for r in results] == ["weak"]

    def test_sorted_descending_with_stable_ties(self, engine, make_thread) -> None:
        threads = [
            make_thread(id="tie-1", subject="alpha"),
            make_thread(id="best", subject="alpha", last_message_date=engine.clock()),
            make_thread(id="tie-2", subject="alpha"),
        ]

        first = engine.rank(threads, "alpha")
        second = engine.rank(threads, "alpha")

        assert [r.thread.id for r in first] == ["best", "tie-1", "tie-2"]
        assert [r.thread.id for r in first] == [r.thread.id for r in second]
        relevances = [r.relevance for r in first]
        assert relevances == sorted(relevances, reverse=True)

    def test_result_cap(self, make_thread) -> None:
        engine = SearchEngine(max_results=50)
        threads = [make_thread(id=f"t{i}", subject="weekly status") for i in range(60)]

        assert len(engine.rank(threads, "status")) == 50

    def test_matched_fields_and_highlights_are_deduplicated(
        self, engine, make_thread, make_email
    ) -> None:
        thread = make_thread(
            subject="Offsite",
            emails=[
                make_email(id="a", subject="Offsite", sender_name="Offsite Team"),
                make_email(id="b", subject="Offsite", sender_name="Offsite Team"),
            ],
        )

        [result] = engine.rank([thread], "offsite")

        assert len(result.matched_fields) == len(set(result.matched_fields))
        assert result.highlights == ["Subject: Offsite", "Email: Offsite", "From: Offsite Team"]

    def test_empty_query_depends_only_on_filters(self, engine, make_thread, make_email) -> None:
        threads = [
            make_thread(id="plain", subject="Lunch"),
            make_thread(
                id="secret",
                subject="Merger",
                emails=[make_email(sensitivity=Sensitivity.CONFIDENTIAL)],
            ),
        ]

        everything = engine.rank(threads, "")
        confidential = engine.rank(threads, "", SearchFilter(sensitivity=Sensitivity.CONFIDENTIAL))

        assert [r.thread.id for r in everything] == ["secret", "plain"]
        assert all(r.matched_fields == [] for r in everything)
        assert [r.thread.id for r in confidential] == ["secret"]

    def test_recent_thread_ranks_above_identical_old_one(
        self, engine, make_thread, now
    ) -> None:
        old = make_thread(id="old", subject="roadmap")
        recent = make_thread(id="recent", subject="roadmap", last_message_date=now - timedelta(days=1))

        results = engine.rank([old, recent], "roadmap")

        assert [r.thread.id for r in results] == ["recent", "old"]
        assert results[0].relevance - results[1].relevance == pytest.approx(0.2)


class TestSuggestAndAnalytics:
    """The engine delegates to the suggestion and analytics helpers with its limits."""

    def test_suggest_respects_limit(self, make_thread) -> None:
        engine = SearchEngine(max_suggestions=2)
        threads = [make_thread(id=f"t{i}", subject=f"prefix{i} word") for i in range(5)]

        assert engine.suggest(threads, "prefix") == ["prefix0", "prefix1"]

    def test_analytics_uses_clock(self, engine, make_thread, now) -> None:
        threads = [
            make_thread(id="a", last_message_date=now - timedelta(days=1)),
            make_thread(id="b"),
        ]

        summary = engine.analytics(threads)

        assert summary.total_threads == 2
        assert summary.recent_activity == 1


class TestRankLogging:
    """The ranking debug event names the strategies that ran."""

    @pytest.fixture(autouse=True)
    def debug_logging(self):
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG))
        yield
        structlog.reset_defaults()

    def test_search_ranked_event(self, engine, make_thread) -> None:
        with capture_logs() as logs:
            engine.rank([make_thread(subject="Budget")], "budget")

        [event] = [entry for entry in logs if entry["event"] == "search_ranked"]
        assert event["strategies"] == ["exact", "semantic", "fuzzy"]
        assert event["matched"] == 1
