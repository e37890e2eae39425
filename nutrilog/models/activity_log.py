"""Модель записи об активности."""
import enum

from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text

from nutrilog.models.base import BaseModel, enum_type


class Intensity(str, enum.Enum):
    """Интенсивность тренировки."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Feeling(str, enum.Enum):
    """Самочувствие после тренировки."""
    EXHAUSTED = "😫"
    TIRED = "😓"
    NEUTRAL = "😐"
    GOOD = "🙂"
    GREAT = "🤩"
    STRONG = "💪"


class ActivityLog(BaseModel):
    """Запись о тренировке или бытовой активности."""

    __tablename__ = "activity_logs"

    date = Column(Date, nullable=False, index=True)
    logged_at = Column(DateTime, nullable=False)

    category = Column(String(50))
    activity_name = Column(String(100), nullable=False)
    intensity = Column(enum_type(Intensity), default=Intensity.MEDIUM)
    duration_minutes = Column(Integer, default=0)
    calories_burned = Column(Float, default=0.0)

    distance_km = Column(Float)
    steps = Column(Integer)
    floors = Column(Integer)
    feeling = Column(enum_type(Feeling))
    notes = Column(Text)

    def __repr__(self):
        return f"<ActivityLog {self.date} {self.activity_name} {self.calories_burned}kcal>"
