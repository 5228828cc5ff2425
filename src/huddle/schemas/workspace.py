"""Pydantic schemas for workspaces and their members.

Separate "Create" schemas (input) from "Read" schemas (output).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WorkspaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class WorkspaceUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class WorkspaceRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    archived: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MemberAdd(BaseModel):
    email: str


class MemberRead(BaseModel):
    user_id: int
    email: str
    display_name: str
    last_known_presence: str
    role: str
    joined_at: datetime


class MemberSummary(BaseModel):
    user_id: int
    email: str
    display_name: str


class MemberAdded(BaseModel):
    message: str
    member: MemberSummary
