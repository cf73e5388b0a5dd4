"""Auth domain type definitions for type safety."""

from typing import Optional

from pydantic import BaseModel, Field


class SupabaseJwtPayload(BaseModel):
    """The Supabase access token claims the session resolver relies on."""

    sub: Optional[str] = Field(None, description="Subject (auth user ID)")
    email: Optional[str] = Field(None, description="User email address")
    exp: Optional[int] = Field(None, description="Expiration timestamp")
    role: Optional[str] = Field(None, description="Postgres role of the token")
    session_id: Optional[str] = Field(None, description="Session identifier")

    model_config = {"extra": "allow"}

    @property
    def identity(self) -> Optional[str]:
        """Email the session is keyed by."""
        return self.email.strip() if self.email else None
