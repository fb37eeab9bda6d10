"""API request/response models."""
from datetime import date
from typing import List
from pydantic import BaseModel


class PreviewPage(BaseModel):
    page_number: int
    width: int
    height: int
    image: str  # data URL


class PreviewResponse(BaseModel):
    filename: str
    page_count: int
    pages: List[PreviewPage]


class AgeResult(BaseModel):
    birth_date: date
    target_date: date
    years: int
    months: int
    days: int
    total_days: int
    total_hours: int
    total_minutes: int
    birth_weekday: str
    next_birthday: date
    days_until_birthday: int


class DateDiffResult(BaseModel):
    start_date: date
    end_date: date
    years: int
    months: int
    days: int
    total_days: int
    total_hours: int
    total_minutes: int
    start_weekday: str
    end_weekday: str
    d_day: str
