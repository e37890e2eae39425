"""Пересчёт порций в граммы и масштабирование нутриентов.

Все функции чистые и не падают на нулевом весе порции: вместо деления
на ноль возвращается 0.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Union

from nutrilog.models.nutrients import Nutrients, parse_number

# Порции и граммы считаются согласованными, если расходятся меньше чем на это значение
SYNC_TOLERANCE = 0.1

DEFAULT_BASE_AMOUNT = 100.0


def to_grams(serving_count: Any, unit_weight_g: Any) -> float:
    """Порции → граммы. Вес порции <= 0 даёт 0."""
    servings = parse_number(serving_count)
    unit = parse_number(unit_weight_g)
    if unit <= 0:
        return 0.0
    return servings * unit


def to_servings(grams: Any, unit_weight_g: Any) -> float:
    """Граммы → порции. Вес порции <= 0 даёт 0."""
    unit = parse_number(unit_weight_g)
    if unit <= 0:
        return 0.0
    return parse_number(grams) / unit


def scale_factor(grams: Any, base_amount: Any = DEFAULT_BASE_AMOUNT) -> float:
    """Коэффициент пересчёта базы на съеденное количество."""
    base = parse_number(base_amount)
    if base <= 0:
        return 0.0
    return max(0.0, parse_number(grams)) / base


def scale_nutrients(
    baseline: Union[Nutrients, Mapping[str, Any]],
    grams: Any,
    base_amount: Any = DEFAULT_BASE_AMOUNT,
) -> Nutrients:
    """Итог = round(база × граммы / base_amount) по каждому нутриенту.

    Args:
        baseline: нутриенты на base_amount (Nutrients или словарь)
        grams: фактически съеденное количество
        base_amount: на какое количество указана база (обычно 100 г)
    """
    if not isinstance(baseline, Nutrients):
        baseline = Nutrients.from_mapping(baseline)
    return baseline.scaled(scale_factor(grams, base_amount))


def representations_agree(servings: Any, unit_weight_g: Any, grams: Any, tolerance: float = SYNC_TOLERANCE) -> bool:
    """Совпадают ли порции и граммы с точностью tolerance."""
    return abs(to_grams(servings, unit_weight_g) - parse_number(grams)) < tolerance


@dataclass
class ServingSync:
    """Состояние двустороннего ввода «порции ↔ граммы».

    Каждый сеттер возвращает True, если пересчитал вторую величину.
    Если представления уже согласованы, запись не происходит, поэтому
    цикл «изменил порции → пересчитал граммы → пересчитал порции» обрывается.
    """

    servings: float = 1.0
    unit_weight_g: float = DEFAULT_BASE_AMOUNT
    total_weight_g: float = DEFAULT_BASE_AMOUNT
    tolerance: float = SYNC_TOLERANCE

    def set_servings(self, value: Any) -> bool:
        self.servings = max(0.0, parse_number(value))
        return self._push_grams()

    def set_unit_weight(self, value: Any) -> bool:
        self.unit_weight_g = max(0.0, parse_number(value))
        return self._push_grams()

    def set_total_weight(self, value: Any) -> bool:
        self.total_weight_g = max(0.0, parse_number(value))
        return self._push_servings()

    def _push_grams(self) -> bool:
        grams = to_grams(self.servings, self.unit_weight_g)
        if abs(grams - self.total_weight_g) < self.tolerance:
            return False
        self.total_weight_g = grams
        return True

    def _push_servings(self) -> bool:
        if self.unit_weight_g <= 0:
            return False
        servings = to_servings(self.total_weight_g, self.unit_weight_g)
        if abs(servings - self.servings) < self.tolerance:
            return False
        self.servings = servings
        return True
