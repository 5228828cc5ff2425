"""Pydantic schemas for user profiles."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserRead(BaseModel):
    id: int
    email: str
    display_name: str
    default_workspace_id: Optional[int] = None
    email_verified: bool
    last_known_presence: str
    status_message: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    status_message: Optional[str] = Field(None, max_length=255)
    last_known_presence: Optional[str] = Field(
        None, pattern=r"^(ONLINE|AWAY|OFFLINE)$"
    )
