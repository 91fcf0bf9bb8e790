"""Auth Schemas — registration and login bodies.

Invariants:
    - username, email, password are required and never empty strings
    - email must match the account email pattern
"""

from pydantic import BaseModel, field_validator

from ezwallet.core.enforce_membership import is_valid_email


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str

    @field_validator("username", "email", "password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if v == "":
            raise ValueError("parameter cannot be an empty string")
        return v

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("email is not in a valid email format")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", "password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if v == "":
            raise ValueError("parameter cannot be an empty string")
        return v

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("email is not in a valid email format")
        return v
