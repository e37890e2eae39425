"""Вектор нутриентов фиксированной формы и числовой ввод."""
import math
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

# Порядок совпадает с колонками food_items; в food_logs те же поля с префиксом total_
NUTRIENT_FIELDS = (
    "calories",
    "protein_g",
    "fat_g",
    "saturated_fat_g",
    "trans_fat_g",
    "carbs_g",
    "sugar_g",
    "fiber_g",
    "sodium_mg",
    "cholesterol_mg",
    "magnesium_mg",
    "zinc_mg",
    "iron_mg",
)

TOTAL_PREFIX = "total_"


def parse_number(value: Any) -> float:
    """Прощающий разбор числа: всё нечисловое превращается в 0.

    Примеры:
    - "12.5" → 12.5
    - "1,5" → 1.5
    - "abc", "", None, NaN → 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def round_half_up(value: float) -> int:
    """Округление до целого, .5 всегда вверх (как Math.round в приложении)."""
    return int(math.floor(parse_number(value) + 0.5))


@dataclass(frozen=True)
class Nutrients:
    """Нутриенты на базовое количество (или итог записи). Отсутствующее = 0."""

    calories: float = 0.0
    protein_g: float = 0.0
    fat_g: float = 0.0
    saturated_fat_g: float = 0.0
    trans_fat_g: float = 0.0
    carbs_g: float = 0.0
    sugar_g: float = 0.0
    fiber_g: float = 0.0
    sodium_mg: float = 0.0
    cholesterol_mg: float = 0.0
    magnesium_mg: float = 0.0
    zinc_mg: float = 0.0
    iron_mg: float = 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], prefix: str = "") -> "Nutrients":
        """Собрать вектор из словаря; отрицательные значения обрезаются до 0."""
        values = {}
        for name in NUTRIENT_FIELDS:
            values[name] = max(0.0, parse_number(data.get(prefix + name)))
        return cls(**values)

    @classmethod
    def from_row(cls, row: Any, prefix: str = "") -> "Nutrients":
        """Собрать вектор из ORM-объекта (FoodItem или FoodLog с prefix="total_")."""
        return cls.from_mapping({name: getattr(row, prefix + name, None) for name in NUTRIENT_FIELDS})

    def as_columns(self, prefix: str = "") -> dict:
        return {prefix + f.name: getattr(self, f.name) for f in fields(self)}

    def scaled(self, factor: float, rounded: bool = True) -> "Nutrients":
        factor = max(0.0, parse_number(factor))
        values = {}
        for name in NUTRIENT_FIELDS:
            amount = getattr(self, name) * factor
            values[name] = float(round_half_up(amount)) if rounded else amount
        return Nutrients(**values)

    def with_values(self, **changes: Any) -> "Nutrients":
        return replace(self, **{k: max(0.0, parse_number(v)) for k, v in changes.items()})

    def __add__(self, other: "Nutrients") -> "Nutrients":
        if not isinstance(other, Nutrients):
            return NotImplemented
        return Nutrients(**{name: getattr(self, name) + getattr(other, name) for name in NUTRIENT_FIELDS})
