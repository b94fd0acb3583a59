"""
Pydantic models for credential issuance.
"""

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    email: str = Field(..., min_length=3, examples=["jane@example.com"])


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Lifetime of the token in seconds")
