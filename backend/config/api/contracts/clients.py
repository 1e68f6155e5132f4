"""
Client contracts.
"""
from typing import Optional

from django.utils.dateparse import parse_datetime
from pydantic import BaseModel, Field, field_validator


class CreateClientRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320, pattern=r'^[^@\s]+@[^@\s]+$')


class ListClientsParams(BaseModel):
    limit: Optional[int] = None
    cursor: Optional[str] = None
    include_archived: bool = Field(default=False, alias='includeArchived')

    @field_validator('cursor')
    @classmethod
    def check_cursor(cls, value: Optional[str]) -> Optional[str]:
        # parse_datetime returns None for bad syntax and raises for impossible values
        if value and parse_datetime(value) is None:
            raise ValueError('Invalid cursor (ISO-8601 datetime expected)')
        return value or None
