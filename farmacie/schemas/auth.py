"""Pydantic schemas for token issuance."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
	email: str = Field(min_length=3, max_length=320)
	password: str = Field(min_length=1, max_length=256)


class RefreshRequest(BaseModel):
	refresh_token: str = Field(min_length=1)


class TokenPair(BaseModel):
	access_token: str
	refresh_token: str
	token_type: str = "bearer"
