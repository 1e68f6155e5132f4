"""
Check-in contracts.
"""
from datetime import date as date_type
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from .base import DateRangeParams, parse_ymd


class UpsertCheckinRequest(BaseModel):
    date: str
    metrics: Dict[str, Any]
    notes: Optional[str] = Field(default=None, max_length=5000)

    @field_validator('date')
    @classmethod
    def check_date(cls, value: str) -> str:
        parse_ymd(value)
        return value

    @property
    def checkin_date(self) -> date_type:
        return parse_ymd(self.date)


class ListCheckinsParams(DateRangeParams):
    limit: int = Field(default=30, ge=1, le=100)
    cursor: Optional[str] = None

    @field_validator('cursor')
    @classmethod
    def check_cursor(cls, value: Optional[str]) -> Optional[str]:
        if value:
            parse_ymd(value)
        return value or None
