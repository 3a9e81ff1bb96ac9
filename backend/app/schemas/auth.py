"""
Identity schemas: registering a reviewer and the token/profile returned to
the client. Review and catalog payloads live in their own modules.
"""
import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# Mirrors the users.username column (String(32)) and what usernames look like
# next to a review ("carol", "film_buff_92").
USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,32}$")
PASSWORD_MIN_LENGTH = 6


class SignupRequest(BaseModel):
    """
    Payload for POST /api/auth/signup.

    username and email come back lower-cased so the unique constraints on
    users catch "Carol" vs "carol" as the same reviewer.
    """

    username: str
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)

    @field_validator("username")
    @classmethod
    def normalise_username(cls, v: str) -> str:
        v = v.strip()
        if not USERNAME_RE.match(v):
            raise ValueError(
                "Username must be 3-32 characters: letters, digits or underscores"
            )
        return v.lower()

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class TokenResponse(BaseModel):
    """Bearer token used to submit and delete reviews."""

    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """Reviewer profile; never includes the password hash."""

    id: int
    username: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
