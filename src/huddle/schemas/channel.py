"""Pydantic schemas for channels."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ChannelCreate(BaseModel):
    workspace_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=50)
    channel_type: str = Field(default="PUBLIC", pattern=r"^(PUBLIC|PRIVATE)$")
    description: Optional[str] = Field(None, max_length=255)
    topic: Optional[str] = Field(None, max_length=255)


class ChannelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    topic: Optional[str] = Field(None, max_length=255)


class ChannelRead(BaseModel):
    id: int
    workspace_id: int
    name: str
    description: Optional[str] = None
    topic: Optional[str] = None
    channel_type: str
    archived: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
