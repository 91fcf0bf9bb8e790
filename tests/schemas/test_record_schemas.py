"""Record Schemas — tests for amount parsing and listing filter bounds."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from ezwallet.schemas.record import RecordCreate, RecordFilterParams, RecordsDelete


def test_amount_accepts_numeric_string():
    body = RecordCreate(username="alice", type="food", amount="12.5")
    assert body.amount == 12.5


@pytest.mark.parametrize("amount", ["", "abc", "nan", float("inf")])
def test_amount_rejects_unparsable_values(amount):
    with pytest.raises(ValidationError):
        RecordCreate(username="alice", type="food", amount=amount)


def test_empty_username_rejected():
    with pytest.raises(ValidationError):
        RecordCreate(username="", type="food", amount=1)


def test_ids_read_from_underscore_alias():
    assert RecordsDelete.model_validate({"_ids": ["a", "b"]}).ids == ["a", "b"]


def test_date_with_range_is_flagged_as_conflicting():
    params = RecordFilterParams(date=date(2023, 5, 1), date_from=date(2023, 4, 1))
    assert params.conflicting_dates


def test_date_alone_or_range_alone_is_not_conflicting():
    assert not RecordFilterParams(date=date(2023, 5, 1)).conflicting_dates
    assert not RecordFilterParams(
        date_from=date(2023, 4, 1), up_to=date(2023, 5, 1),
    ).conflicting_dates


def test_single_date_covers_whole_utc_day():
    start, end = RecordFilterParams(date=date(2023, 5, 1)).date_bounds
    assert start == datetime(2023, 5, 1, 0, 0, tzinfo=timezone.utc)
    assert end.date() == date(2023, 5, 1)
    assert (end.hour, end.minute, end.second) == (23, 59, 59)


def test_open_ended_range():
    start, end = RecordFilterParams(date_from=date(2023, 5, 1)).date_bounds
    assert start == datetime(2023, 5, 1, tzinfo=timezone.utc)
    assert end is None


def test_no_filters_means_no_bounds():
    assert RecordFilterParams().date_bounds == (None, None)
