"""
Session Schema
===============

Chat sessions persisted by the session repository. These models live
outside the retrieval core: the pipeline never reads or writes them.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class SessionMessage(BaseModel):
    sender: Literal["user", "ai"]
    text: str
    at: int = Field(description="Epoch milliseconds")
    raw_text: Optional[str] = Field(default=None, alias="rawText")
    used_generator: Optional[bool] = Field(default=None, alias="usedGenerator")

    model_config = {"populate_by_name": True}


class Session(BaseModel):
    id: str
    title: str
    created_at: int = Field(alias="createdAt")
    updated_at: int = Field(alias="updatedAt")
    messages: list[SessionMessage] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class SessionSummary(BaseModel):
    """Row of the session list, newest first."""
    id: str
    title: str
    updated_at: int = Field(alias="updatedAt")
    last_message: str = Field(default="", alias="lastMessage")

    model_config = {"populate_by_name": True}
