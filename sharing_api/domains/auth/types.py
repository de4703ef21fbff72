"""Auth domain type definitions for type safety."""

from typing import Optional

from pydantic import BaseModel, Field


class JwtPayload(BaseModel):
    """Access token payload structure."""

    # Standard JWT claims
    sub: Optional[str] = Field(None, description="Subject (principal ID)")
    iss: Optional[str] = Field(None, description="Token issuer")
    aud: Optional[str | list[str]] = Field(None, description="Token audience")
    exp: Optional[int] = Field(None, description="Expiration timestamp")
    iat: Optional[int] = Field(None, description="Issued at timestamp")
    nbf: Optional[int] = Field(None, description="Not before timestamp")
    jti: Optional[str] = Field(None, description="JWT ID")

    email: Optional[str] = Field(None, description="Principal email address")
    session_id: Optional[str] = Field(None, description="Session identifier")

    model_config = {"extra": "allow"}
