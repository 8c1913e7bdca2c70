from __future__ import annotations

from datetime import date, datetime

import pytest

from src.campus_leave.campus_leave.common.datetime_utils import inclusive_days, parse_day
from src.campus_leave.campus_leave.common.pagination import PageRequest, Pagination
from src.campus_leave.campus_leave.common.validators import FieldErrors, parse_enum
from src.campus_leave.campus_leave.core.enums import LeaveStatus
from src.campus_leave.campus_leave.core.exceptions import ValidationError


def test_field_errors_keep_first_message_per_field():
    errors = FieldErrors()
    errors.text("", "reason")
    errors.add("reason", "second message")

    with pytest.raises(ValidationError) as exc:
        errors.raise_if_any()
    assert exc.value.fields == {"reason": "reason is required"}
    assert exc.value.to_dict()["details"]["fields"] == {"reason": "reason is required"}


def test_parse_enum_treats_blank_as_no_filter():
    assert parse_enum("", LeaveStatus, "status") is None
    assert parse_enum(" Approved ", LeaveStatus, "status") == LeaveStatus.APPROVED
    with pytest.raises(ValidationError):
        parse_enum("archived", LeaveStatus, "status")


@pytest.mark.parametrize(
    "raw",
    ["2026-03-10", "2026-03-10T15:45:00Z", datetime(2026, 3, 10, 23, 59), date(2026, 3, 10)],
)
def test_parse_day_discards_time_of_day(raw):
    assert parse_day(raw, "date") == date(2026, 3, 10)


def test_parse_day_rejects_garbage():
    with pytest.raises(ValidationError) as exc:
        parse_day("10/03/2026", "start_date")
    assert "start_date" in exc.value.fields


def test_inclusive_days_counts_both_ends():
    assert inclusive_days(date(2026, 3, 10), date(2026, 3, 12)) == 3
    assert inclusive_days(date(2026, 3, 10), date(2026, 3, 10)) == 1


def test_page_request_clamps_bad_values():
    assert PageRequest.from_args({"page": "0", "limit": "500"}) == PageRequest(page=1, limit=10)
    assert PageRequest.from_args({"page": "x"}) == PageRequest()
    assert PageRequest(page=3, limit=5).offset == 10


def test_pagination_metadata():
    meta = Pagination.build(PageRequest(page=2, limit=10), 25).to_dict()
    assert meta == {"page": 2, "limit": 10, "total": 25, "total_pages": 3, "has_next": True, "has_prev": True}


@pytest.mark.parametrize("value", [12345678901, 5, True, ["a"], {"k": "v"}])
@pytest.mark.parametrize("helper", ["text", "optional_text", "email"])
def test_non_string_values_are_field_errors(helper, value):
    errors = FieldErrors()
    kwargs = {"max_len": 20} if helper == "optional_text" else {}

    getattr(errors, helper)(value, "reason", **kwargs)

    with pytest.raises(ValidationError) as exc:
        errors.raise_if_any()
    assert exc.value.fields == {"reason": "reason must be a string"}


def test_missing_optional_text_is_not_an_error():
    errors = FieldErrors()
    assert errors.optional_text(None, "remarks", max_len=200) is None
    assert not errors
