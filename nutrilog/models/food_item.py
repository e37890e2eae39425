"""Модель продукта (переиспользуемая база нутриентов)."""
from sqlalchemy import Boolean, Column, Float, String

from nutrilog.models.base import BaseModel
from nutrilog.models.nutrients import Nutrients


class FoodItem(BaseModel):
    """Продукт с нутриентами на base_amount (обычно 100 г).

    Создаётся при сканировании штрихкода, AI-оценке или ручном вводе.
    """

    __tablename__ = "food_items"

    name = Column(String(255), nullable=False, index=True)
    brand = Column(String(255))
    barcode = Column(String(128), index=True)

    # База пересчёта и стандартная порция
    base_amount = Column(Float, default=100.0)
    base_unit = Column(String(16), default="g")
    serving_weight_g = Column(Float)

    # Нутриенты на base_amount
    calories = Column(Float, nullable=False)
    protein_g = Column(Float, default=0.0)
    fat_g = Column(Float, default=0.0)
    saturated_fat_g = Column(Float, default=0.0)
    trans_fat_g = Column(Float, default=0.0)
    carbs_g = Column(Float, default=0.0)
    sugar_g = Column(Float, default=0.0)
    fiber_g = Column(Float, default=0.0)
    sodium_mg = Column(Float, default=0.0)
    cholesterol_mg = Column(Float, default=0.0)
    magnesium_mg = Column(Float, default=0.0)
    zinc_mg = Column(Float, default=0.0)
    iron_mg = Column(Float, default=0.0)

    # Источник данных: manual, barcode, ai
    is_user_created = Column(Boolean, default=True)
    source = Column(String(32), default="manual")

    def baseline(self) -> Nutrients:
        """Нутриенты на base_amount как значение фиксированной формы."""
        return Nutrients.from_row(self)

    def __repr__(self):
        return f"<FoodItem {self.name} {self.calories}kcal/{self.base_amount}{self.base_unit}>"
