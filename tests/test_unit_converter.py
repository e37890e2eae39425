"""Тесты пересчёта порций и нутриентов."""
import pytest

from nutrilog.models import Nutrients
from nutrilog.services.unit_converter import (
    ServingSync,
    representations_agree,
    scale_factor,
    scale_nutrients,
    to_grams,
    to_servings,
)


@pytest.mark.parametrize("servings,unit", [(1, 100), (2.5, 40), (0.3, 33.3), (7, 1)])
def test_grams_servings_round_trip(servings, unit):
    """Порции → граммы → порции возвращают исходное значение."""
    assert to_servings(to_grams(servings, unit), unit) == pytest.approx(servings)


@pytest.mark.parametrize("unit", [0, -5, None, "abc"])
def test_zero_unit_weight_gives_zero(unit):
    """Вес порции <= 0 или мусор не ломает расчёт."""
    assert to_grams(3, unit) == 0
    assert to_servings(150, unit) == 0


def test_forgiving_numeric_input():
    assert to_grams("2", "1,5") == 3.0
    assert scale_factor("150", 0) == 0
    assert scale_factor(-10) == 0


def test_scale_nutrients_scenario():
    """250 ккал на 100 г, съедено 150 г → 375 ккал."""
    totals = scale_nutrients(Nutrients(calories=250, protein_g=10), 150)

    assert totals.calories == 375
    assert totals.protein_g == 15
    assert totals.fat_g == 0


def test_scale_nutrients_rounds_each_field():
    totals = scale_nutrients({"calories": 333, "sodium_mg": "12.5", "iron_mg": -3}, 50)

    assert totals.calories == 167  # 166.5 → вверх
    assert totals.sodium_mg == 6   # 6.25
    assert totals.iron_mg == 0


def test_scale_nutrients_custom_base_amount():
    """База на порцию 30 г вместо 100 г."""
    totals = scale_nutrients(Nutrients(calories=120), 60, base_amount=30)
    assert totals.calories == 240


def test_representations_agree_tolerance():
    assert representations_agree(2, 50, 100.05)
    assert not representations_agree(2, 50, 100.2)


def test_serving_sync_servings_update_grams():
    sync = ServingSync(servings=1, unit_weight_g=40, total_weight_g=40)

    assert sync.set_servings(2.5) is True
    assert sync.total_weight_g == 100


def test_serving_sync_grams_update_servings():
    sync = ServingSync(servings=1, unit_weight_g=40, total_weight_g=40)

    assert sync.set_total_weight(120) is True
    assert sync.servings == pytest.approx(3)


def test_serving_sync_breaks_update_cycle():
    """Обратный пересчёт после согласования ничего не пишет."""
    sync = ServingSync(servings=1, unit_weight_g=30, total_weight_g=30)
    sync.set_total_weight(100)
    servings = sync.servings

    # Представления уже согласованы: эхо-запись граммов не меняет порции
    assert sync.set_servings(servings) is False
    assert sync.set_total_weight(100.05) is False
    assert sync.servings == servings


def test_serving_sync_zero_unit_weight():
    sync = ServingSync(servings=2, unit_weight_g=50, total_weight_g=100)

    assert sync.set_unit_weight(0) is True
    assert sync.total_weight_g == 0
    assert sync.set_total_weight(80) is False
    assert sync.servings == 2
