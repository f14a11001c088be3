from datetime import datetime
from enum import Enum
from pydantic import BaseModel, field_validator


class ActivityType(str, Enum):
    EXPENSE_ADDED = "expense_added"
    SETTLEMENT_ADDED = "settlement_added"
    GROUP_CREATED = "group_created"
    MEMBER_JOINED = "member_joined"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class ActivityOut(BaseModel):
    id: str
    user_id: str
    group_id: str | None = None
    type: ActivityType
    description: str = ""
    related_id: str | None = None
    created_at: datetime | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v):
        return ActivityType(v) if v else ActivityType.UNKNOWN

    class Config:
        from_attributes = True
