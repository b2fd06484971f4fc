"""Announcement Schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AnnouncementCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    country: str | None = Field(None, max_length=64)
    is_active: bool = True


class AnnouncementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    country: str | None
    is_active: bool
    created_at: datetime
