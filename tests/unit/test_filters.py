"""Unit tests for filter evaluation and parsing."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mail_search.exceptions import InvalidFilterError
from mail_search.models import DateRange, Folder, SearchFilter, Sensitivity
from mail_search.search.filters import build_filter, passes_filters


class TestPassesFilters:
    """Test suite for passes_filters."""

    def test_empty_filter_accepts_everything(self, make_thread) -> None:
        assert passes_filters(make_thread(), SearchFilter()) is True

    def test_sender_matches_name_or_address(self, make_thread, make_email) -> None:
        thread = make_thread(
            emails=[make_email(sender_name="Priya Patel", sender_address="priya@acme.example")]
        )

        assert passes_filters(thread, SearchFilter(sender="PATEL"))
        assert passes_filters(thread, SearchFilter(sender="acme.example"))
        assert not passes_filters(thread, SearchFilter(sender="globex"))

    def test_has_attachments_true(self, make_thread, make_email) -> None:
        with_attachment = make_thread(
            emails=[make_email(id="a"), make_email(id="b", has_attachments=True)]
        )
        without = make_thread(emails=[make_email(id="c")])

        required = SearchFilter(has_attachments=True)
        assert passes_filters(with_attachment, required)
        assert not passes_filters(without, required)

    def test_has_attachments_false_is_a_constraint(self, make_thread, make_email) -> None:
        all_attached = make_thread(
            emails=[make_email(id="a", has_attachments=True), make_email(id="b", has_attachments=True)]
        )
        plain = make_thread(emails=[make_email(id="c")])

        forbidden = SearchFilter(has_attachments=False)
        assert not passes_filters(all_attached, forbidden)
        assert passes_filters(plain, forbidden)
        # None means no constraint at all.
        assert passes_filters(all_attached, SearchFilter(has_attachments=None))

    def test_sensitivity(self, make_thread, make_email) -> None:
        thread = make_thread(
            emails=[
                make_email(id="a"),
                make_email(id="b", sensitivity=Sensitivity.CONFIDENTIAL),
            ]
        )

        assert passes_filters(thread, SearchFilter(sensitivity=Sensitivity.CONFIDENTIAL))
        assert not passes_filters(thread, SearchFilter(sensitivity=Sensitivity.PRIVATE))

    def test_date_range_is_inclusive(self, make_thread, now) -> None:
        thread = make_thread(last_message_date=now)

        assert passes_filters(thread, SearchFilter(date_range=DateRange(start=now, end=now)))
        assert not passes_filters(
            thread,
            SearchFilter(date_range=DateRange(start=now + timedelta(seconds=1), end=now + timedelta(days=1))),
        )

    def test_filters_are_conjunctive(self, make_thread, make_email) -> None:
        thread = make_thread(
            emails=[make_email(sender_address="ops@acme.example", has_attachments=True)]
        )

        assert passes_filters(thread, SearchFilter(sender="acme", has_attachments=True))
        assert not passes_filters(
            thread,
            SearchFilter(sender="acme", has_attachments=True, sensitivity=Sensitivity.PERSONAL),
        )

    def test_folder_is_not_rechecked_per_thread(self, make_thread) -> None:
        sent_thread = make_thread(inbox=False, sent=True)

        assert passes_filters(sent_thread, SearchFilter(folder=Folder.INBOX))


class TestBuildFilter:
    """Test suite for build_filter."""

    def test_empty_strings_are_absent(self) -> None:
        filters = build_filter(folder="", sender="", has_attachments="", sensitivity="")

        assert filters.is_empty()

    def test_parses_all_fields(self) -> None:
        filters = build_filter(
            folder="sent",
            sender="dana",
            has_attachments="false",
            sensitivity="Confidential",
            start_date="2025-01-01T00:00:00Z",
            end_date="2025-02-01T00:00:00+00:00",
        )

        assert filters.folder is Folder.SENT
        assert filters.sender == "dana"
        assert filters.has_attachments is False
        assert filters.sensitivity is Sensitivity.CONFIDENTIAL
        assert filters.date_range is not None
        assert filters.date_range.start == datetime(2025, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"folder": "spam"},
            {"sensitivity": "secret"},
            {"has_attachments": "yes"},
            {"start_date": "not-a-date", "end_date": "2025-01-01"},
            {"start_date": "2025-01-01"},
            {"start_date": "2025-02-01", "end_date": "2025-01-01"},
        ],
    )
    def test_rejects_malformed_input(self, kwargs: dict) -> None:
        with pytest.raises(InvalidFilterError):
            build_filter(**kwargs)
