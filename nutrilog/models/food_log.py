"""Модель записи о приеме пищи."""
import enum
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text

from nutrilog.models.base import BaseModel, enum_type
from nutrilog.models.nutrients import TOTAL_PREFIX, Nutrients


class MealTime(str, enum.Enum):
    """Категория приёма пищи по времени суток."""
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    AFTERNOON_TEA = "afternoon_tea"
    DINNER = "dinner"
    LATE_NIGHT = "late_night"

    @classmethod
    def for_time(cls, moment: datetime) -> "MealTime":
        """Категория по часу: 5-10 завтрак, 10-14 обед, 14-16 полдник, 16-20 ужин, иначе поздний."""
        hour = moment.hour
        if 5 <= hour < 10:
            return cls.BREAKFAST
        if 10 <= hour < 14:
            return cls.LUNCH
        if 14 <= hour < 16:
            return cls.AFTERNOON_TEA
        if 16 <= hour < 20:
            return cls.DINNER
        return cls.LATE_NIGHT


class ServingType(str, enum.Enum):
    """Способ ввода количества."""
    SERVING = "serving"  # порции × вес порции
    WEIGHT = "weight"    # граммы напрямую


class FoodLog(BaseModel):
    """Запись о съеденной еде.

    food_name денормализован: запись остаётся читаемой, даже если продукт
    потом изменили или удалили.
    """

    __tablename__ = "food_logs"

    date = Column(Date, nullable=False, index=True)
    meal_time_category = Column(enum_type(MealTime), nullable=False)
    logged_at = Column(DateTime, nullable=False)

    food_item_id = Column(Integer, ForeignKey("food_items.id", ondelete="SET NULL"), nullable=True)
    food_name = Column(String(255), nullable=False)

    # Количество
    serving_type = Column(enum_type(ServingType), default=ServingType.WEIGHT)
    serving_amount = Column(Float)
    unit_weight_g = Column(Float)
    total_weight_g = Column(Float)

    # Итоговые нутриенты = база × total_weight_g / base_amount
    total_calories = Column(Float, default=0.0)
    total_protein_g = Column(Float, default=0.0)
    total_fat_g = Column(Float, default=0.0)
    total_saturated_fat_g = Column(Float, default=0.0)
    total_trans_fat_g = Column(Float, default=0.0)
    total_carbs_g = Column(Float, default=0.0)
    total_sugar_g = Column(Float, default=0.0)
    total_fiber_g = Column(Float, default=0.0)
    total_sodium_mg = Column(Float, default=0.0)
    total_cholesterol_mg = Column(Float, default=0.0)
    total_magnesium_mg = Column(Float, default=0.0)
    total_zinc_mg = Column(Float, default=0.0)
    total_iron_mg = Column(Float, default=0.0)

    # Опционально: фото и ответ AI
    image_url = Column(Text)
    ai_analysis_log = Column(Text)
    notes = Column(Text)

    def totals(self) -> Nutrients:
        return Nutrients.from_row(self, prefix=TOTAL_PREFIX)

    def __repr__(self):
        return f"<FoodLog {self.date} {self.food_name} {self.total_calories}kcal>"
