"""
Pydantic models for registration and login.

Registration takes an email, a password and an optional display name;
the profile created alongside the account uses that name, or a
placeholder when it is missing.
"""

from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str = Field(..., examples=["ada@example.com"])
    password: str = Field(..., examples=["correct horse battery"])
    name: Optional[str] = Field(None, examples=["Ada"])


class LoginRequest(BaseModel):
    email: str = Field(..., examples=["ada@example.com"])
    password: str = Field(..., examples=["correct horse battery"])


class Token(BaseModel):
    """Bearer token returned by login and registration."""

    access_token: str
    token_type: str = "bearer"
