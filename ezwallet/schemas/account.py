"""Account Schemas — account removal body."""

from pydantic import BaseModel


class AccountDelete(BaseModel):
    email: str | None = None
