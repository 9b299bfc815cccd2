"""Account DTOs.

- ``RegisterUserDTO``: self-service sign-up input.
- ``UpdateProfileDTO``: partial update of the caller's own account.
  Only the fields actually sent are applied (``model_fields_set``).
- ``EditUserDTO``: account edit by the owner or an administrator,
  applied the same way.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


class RegisterUserDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    email: EmailStr
    password: str
    first_name: str
    last_name: str

    @field_validator("username", "first_name", "last_name")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field must not be empty.")
        return v.strip()


class UpdateProfileDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: str | None = None
    line_user_id: str | None = None


class EditUserDTO(BaseModel):
    """Account edit by the owner or an administrator."""

    model_config = ConfigDict(frozen=True)

    username: str | None = None
    email: EmailStr | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Username must not be empty.")
        return v.strip() if v else v
