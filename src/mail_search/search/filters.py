"""Search filter evaluation and parsing.

Filters are conjunctive: every constraint that is set must hold. The folder
constraint is enforced when the corpus is loaded from storage, so
``passes_filters`` does not look at it.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import ValidationError

from mail_search.exceptions import InvalidFilterError
from mail_search.models import DateRange, Folder, SearchFilter, Sensitivity, Thread
from mail_search.search.text import contains

FILTER_PASS_BONUS = 0.1

_BOOL_VALUES = {"true": True, "false": False}


def passes_filters(thread: Thread, filters: SearchFilter) -> bool:
    """Return whether ``thread`` satisfies every non-folder constraint in ``filters``."""

    if filters.sender:
        sender = filters.sender.lower()
        if not any(
            contains(email.sender.name, sender) or contains(email.sender.address, sender)
            for email in thread.emails
        ):
            return False

    if filters.has_attachments is not None:
        if not any(email.has_attachments == filters.has_attachments for email in thread.emails):
            return False

    if filters.sensitivity is not None:
        if not any(email.sensitivity == filters.sensitivity for email in thread.emails):
            return False

    if filters.date_range is not None:
        if not filters.date_range.contains(thread.last_message_date):
            return False

    return True


def _parse_enum(enum_cls, value: str | None, label: str):
    if not value:
        return None
    try:
        return enum_cls(value.lower())
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidFilterError(f"Unknown {label} {value!r}; expected one of: {allowed}") from e


def _parse_datetime(value: str | None, label: str) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidFilterError(f"{label} is not an ISO-8601 timestamp: {value!r}") from e


def build_filter(
    *,
    folder: str | None = None,
    sender: str | None = None,
    has_attachments: str | None = None,
    sensitivity: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> SearchFilter:
    """Build a SearchFilter from raw boundary strings.

    Empty strings count as absent.

    Raises:
        InvalidFilterError: On unknown enum values, unparsable or half-open date
            ranges, or a range whose start is after its end.
    """

    attachments: bool | None = None
    if has_attachments:
        try:
            attachments = _BOOL_VALUES[has_attachments.lower()]
        except KeyError as e:
            raise InvalidFilterError(
                f"hasAttachments must be 'true' or 'false', got {has_attachments!r}"
            ) from e

    start = _parse_datetime(start_date, "startDate")
    end = _parse_datetime(end_date, "endDate")
    date_range: DateRange | None = None
    if start is not None or end is not None:
        if start is None or end is None:
            raise InvalidFilterError("Date range needs both startDate and endDate")
        try:
            date_range = DateRange(start=start, end=end)
        except ValidationError as e:
            raise InvalidFilterError("Date range start is after end") from e

    return SearchFilter(
        folder=_parse_enum(Folder, folder, "folder"),
        sender=sender or None,
        has_attachments=attachments,
        sensitivity=_parse_enum(Sensitivity, sensitivity, "sensitivity"),
        date_range=date_range,
    )
