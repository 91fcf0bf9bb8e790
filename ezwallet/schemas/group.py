"""Group Schemas — membership request bodies.

Email lists are deliberately loose here (optional, any strings): structural
checks belong to core/enforce_membership.check_email_list so the same rules
apply to creation, addition and removal.
"""

from pydantic import BaseModel, ConfigDict, Field


class GroupCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    member_emails: list[str] | None = Field(None, alias="memberEmails")


class MemberEmails(BaseModel):
    emails: list[str] | None = None


class GroupDelete(BaseModel):
    name: str | None = None
