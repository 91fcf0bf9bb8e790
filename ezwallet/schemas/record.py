"""Record Schemas — transaction bodies and listing filters.

Invariants:
    - amount accepts numbers or numeric strings, never empty or non-finite
    - `date` is exclusive with `from` / `upTo`; the params only report the
      conflict (conflicting_dates) and the service rejects it after the
      session check
    - Date bounds are whole UTC days: from 00:00:00 up to 23:59:59.999999
"""

import datetime as dt
import math

from pydantic import BaseModel, Field, field_validator


class RecordCreate(BaseModel):
    username: str
    type: str
    amount: float

    @field_validator("username", "type")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if v == "":
            raise ValueError("one of the body parameters is an empty string")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        if isinstance(v, str):
            if v.strip() == "":
                raise ValueError("one of the body parameters is an empty string")
            try:
                v = float(v)
            except ValueError:
                raise ValueError("amount not parsable")
        if isinstance(v, (int, float)) and not math.isfinite(v):
            raise ValueError("amount must be a finite number")
        return v


class RecordDelete(BaseModel):
    id: str | None = Field(None, alias="_id")


class RecordsDelete(BaseModel):
    ids: list[str] | None = Field(None, alias="_ids")


def _start_of(day: dt.date) -> dt.datetime:
    return dt.datetime.combine(day, dt.time.min, tzinfo=dt.timezone.utc)


def _end_of(day: dt.date) -> dt.datetime:
    return dt.datetime.combine(day, dt.time.max, tzinfo=dt.timezone.utc)


class RecordFilterParams(BaseModel):
    """Optional listing filters (query string)."""
    date: dt.date | None = None
    date_from: dt.date | None = None
    up_to: dt.date | None = None
    min_amount: float | None = None
    max_amount: float | None = None

    @property
    def conflicting_dates(self) -> bool:
        return self.date is not None and (
            self.date_from is not None or self.up_to is not None
        )

    @property
    def date_bounds(self) -> tuple[dt.datetime | None, dt.datetime | None]:
        if self.date:
            return _start_of(self.date), _end_of(self.date)
        return (
            _start_of(self.date_from) if self.date_from else None,
            _end_of(self.up_to) if self.up_to else None,
        )
