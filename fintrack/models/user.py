"""User models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """
    A registered user as seen by callers.

    The password hash is deliberately absent: it stays inside the
    storage layer and never leaves it. Email and name come back exactly
    as they were stored.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        ge=1,
        description="Storage-assigned identifier"
    )
    email: str = Field(
        ...,
        description="Login email, unique and case-sensitive as stored"
    )
    name: Optional[str] = Field(
        default=None,
        description="Display name"
    )

    @property
    def display_name(self) -> str:
        return self.name or self.email
