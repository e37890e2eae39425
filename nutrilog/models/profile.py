"""Модель профиля пользователя (цели и параметры)."""
import enum

from sqlalchemy import Column, Date, Float, Integer, String

from nutrilog.models.base import BaseModel, enum_type


class Gender(str, enum.Enum):
    """Пол пользователя."""
    MALE = "male"
    FEMALE = "female"


class Goal(str, enum.Enum):
    """Цель пользователя."""
    LOSE_WEIGHT = "lose_weight"
    MAINTAIN = "maintain"
    GAIN_WEIGHT = "gain_weight"
    RECOMP = "recomp"            # Рекомпозиция: жир вниз, мышцы вверх
    BLOOD_SUGAR = "blood_sugar"  # Контроль сахара крови


class ActivityLevel(str, enum.Enum):
    """Уровень активности."""
    SEDENTARY = "sedentary"                  # Сидячий образ жизни
    LIGHTLY_ACTIVE = "lightly_active"        # 1-3 тренировки в неделю
    MODERATELY_ACTIVE = "moderately_active"  # 3-5 тренировок
    VERY_ACTIVE = "very_active"              # 6-7 тренировок
    EXTRA_ACTIVE = "extra_active"            # Физическая работа + спорт


class UserProfile(BaseModel):
    """Единственный профиль установки."""

    __tablename__ = "user_profiles"

    name = Column(String(100))

    # Личные данные
    gender = Column(enum_type(Gender))
    birth_date = Column(Date)
    height_cm = Column(Float)
    current_weight_kg = Column(Float)
    current_body_fat = Column(Float)

    # Цели
    target_weight_kg = Column(Float)
    target_body_fat = Column(Float)
    target_date = Column(Date)
    activity_level = Column(enum_type(ActivityLevel), default=ActivityLevel.SEDENTARY)
    goal = Column(enum_type(Goal), default=Goal.MAINTAIN)

    # Рассчитанная дневная норма и распределение БЖУ
    daily_calorie_target = Column(Integer)
    protein_percentage = Column(Integer, default=30)
    carbs_percentage = Column(Integer, default=40)
    fat_percentage = Column(Integer, default=30)
    sodium_target_mg = Column(Integer, default=2300)

    def __repr__(self):
        return f"<UserProfile {self.id} target={self.daily_calorie_target}>"
