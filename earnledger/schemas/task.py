"""Task Schemas — admin task creation and user task listing."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class TaskCreate(BaseModel):
    country: str = Field(min_length=2, max_length=64)
    smart_link: str = Field(min_length=1)
    tag_name: str = Field(min_length=1, max_length=200)
    reward_amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    is_active: bool = True


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    country: str
    smart_link: str
    tag_name: str
    reward_amount: Decimal
    is_active: bool
    created_at: datetime


class UserTaskResponse(TaskResponse):
    """Task as seen by a user, with completion state."""
    completed: bool = False
