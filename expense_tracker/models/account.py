"""
Account Models

NOTE: Passwords are stored as entered. Hashing and session tokens are
out of scope for a single-user, on-device tracker.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class UserAccount(BaseModel):
    """A local user account, stored under the key user:<username>."""

    username: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Unique login name"
    )
    email: str = Field(
        default="",
        max_length=254,
        description="Contact email (not verified)"
    )
    password: str = Field(
        ...,
        description="Password as entered at signup"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the account was created"
    )
