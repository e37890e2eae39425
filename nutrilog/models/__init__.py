"""Модели базы данных."""
from nutrilog.models.base import BaseModel, TimestampMixin
from nutrilog.models.nutrients import NUTRIENT_FIELDS, Nutrients, parse_number, round_half_up
from nutrilog.models.profile import UserProfile, Gender, Goal, ActivityLevel
from nutrilog.models.food_item import FoodItem
from nutrilog.models.food_log import FoodLog, MealTime, ServingType
from nutrilog.models.activity_log import ActivityLog, Intensity, Feeling
from nutrilog.models.daily_metric import DailyMetric

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "NUTRIENT_FIELDS",
    "Nutrients",
    "parse_number",
    "round_half_up",
    "UserProfile",
    "Gender",
    "Goal",
    "ActivityLevel",
    "FoodItem",
    "FoodLog",
    "MealTime",
    "ServingType",
    "ActivityLog",
    "Intensity",
    "Feeling",
    "DailyMetric",
]
