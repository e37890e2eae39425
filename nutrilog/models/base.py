"""Базовые классы для моделей SQLAlchemy."""
import enum
from typing import Type

from sqlalchemy import Column, DateTime, Enum, Integer
from sqlalchemy.sql import func

from nutrilog.database import Base


class TimestampMixin:
    """Миксин для автоматического создания временных меток."""

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class BaseModel(Base, TimestampMixin):
    """Базовая модель для всех таблиц."""

    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True)

    @classmethod
    def column_names(cls) -> set[str]:
        return {column.name for column in cls.__table__.columns}


def enum_type(enum_cls: Type[enum.Enum]) -> Enum:
    """Enum-колонка, которая хранит значения ("male"), а не имена ("MALE")."""
    return Enum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        length=32,
    )
