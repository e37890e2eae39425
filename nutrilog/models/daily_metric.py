"""Модель записи веса и процента жира."""
from sqlalchemy import Column, Date, Float, Text

from nutrilog.models.base import BaseModel


class DailyMetric(BaseModel):
    """История веса: одна запись на дату."""

    __tablename__ = "daily_metrics"

    date = Column(Date, nullable=False, unique=True, index=True)
    weight_kg = Column(Float)
    body_fat_percentage = Column(Float)
    note = Column(Text)
