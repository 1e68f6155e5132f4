"""
Shared contracts.
"""
from datetime import date
from typing import Any, Dict, Optional
import re

from pydantic import BaseModel, ConfigDict, Field, model_validator

YMD_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def parse_ymd(value: str) -> date:
    """Strict YYYY-MM-DD that must also be a real calendar day (no 2026-02-30)."""
    if not isinstance(value, str) or not YMD_PATTERN.match(value):
        raise ValueError('Invalid date format (YYYY-MM-DD)')
    return date.fromisoformat(value)


class ErrorResponse(BaseModel):
    """Error body returned by every endpoint."""
    error: str
    code: str
    details: Optional[Dict[str, Any]] = None


class DateRangeParams(BaseModel):
    """Inclusive ``from``..``to`` range in YYYY-MM-DD."""

    model_config = ConfigDict(populate_by_name=True)

    range_start: str = Field(alias='from')
    range_end: str = Field(alias='to')

    @model_validator(mode='after')
    def check_range(self):
        start = parse_ymd(self.range_start)
        end = parse_ymd(self.range_end)
        if start > end:
            raise ValueError('`from` must be <= `to`')
        return self
