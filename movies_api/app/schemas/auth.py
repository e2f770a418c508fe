"""Schemas for the token endpoint."""

from pydantic import BaseModel, Field


class TokenRead(BaseModel):
    token: str = Field(..., description="Value for the Authorization header", examples=["Bearer eyJhbGciOi..."])
    status: int = Field(200, examples=[200])
