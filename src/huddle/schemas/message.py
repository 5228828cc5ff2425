"""Pydantic schemas for messages, pins and reactions."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ─── Messages ───────────────────────────────────────────

class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=40000)
    parent_message_id: Optional[int] = None


class MessageUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=40000)


class MessageRead(BaseModel):
    id: int
    workspace_id: int
    channel_id: int
    user_id: int
    parent_message_id: Optional[int] = None
    content: str
    deleted: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ─── Pins ───────────────────────────────────────────────

class PinCreate(BaseModel):
    # Length is checked in the service so the error carries INVALID_PIN_REASON.
    reason: str = ""


class PinRead(BaseModel):
    id: int
    workspace_id: int
    message_id: int
    pinned_by: int
    pinned_reason: str
    pinned_at: datetime

    model_config = {"from_attributes": True}


class PinnedMessageRead(BaseModel):
    """A pinned message joined with its pin record."""
    message_id: int
    workspace_id: int
    channel_id: int
    user_id: int
    content: str
    pin_id: int
    pinned_by: int
    pinned_reason: str
    pinned_at: datetime


# ─── Reactions ──────────────────────────────────────────

class ReactionCreate(BaseModel):
    emoji: str = Field(..., min_length=1, max_length=64)


class ReactionRead(BaseModel):
    id: int
    message_id: int
    user_id: int
    emoji: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ReactionSummary(BaseModel):
    emoji: str
    count: int
    user_ids: list[int]
