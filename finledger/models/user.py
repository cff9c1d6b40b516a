"""User and session models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finledger.models.ledger import LedgerModel, new_id, utc_now


class User(LedgerModel):
    """
    A registered user.

    CRITICAL: Only the salted password hash is kept. The session copy
    stored under `currentUser` omits even that.
    """

    id: str = Field(default_factory=new_id)
    email: str = Field(..., min_length=3, max_length=254)
    password_hash: Optional[str] = Field(
        default=None,
        description="passlib hash; absent on the session copy"
    )
    full_name: str = ""
    age: Optional[int] = Field(default=None, ge=0, le=150)
    hobby: str = ""
    profession: str = ""
    profile_picture: Optional[str] = None
    language: str = "en"
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        if "@" not in v.strip():
            raise ValueError(f"Invalid email address: {v}")
        return v.strip().lower()


class SignupRequest(LedgerModel):
    """Fields a new user submits. id and created_at are assigned on signup."""
    model_config = ConfigDict(str_strip_whitespace=False)

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    full_name: str = ""
    age: Optional[int] = Field(default=None, ge=0, le=150)
    hobby: str = ""
    profession: str = ""
    profile_picture: Optional[str] = None
    language: str = "en"

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        if "@" not in v.strip():
            raise ValueError(f"Invalid email address: {v}")
        return v.strip().lower()


class AuthResult(BaseModel):
    """
    Outcome of a session operation.

    Credential and duplicate-email failures are reported here, not raised.
    """

    success: bool
    message: str
    user: Optional[User] = None
