"""Общие фикстуры тестов."""
from datetime import date, datetime

import pytest

from nutrilog.models import ActivityLevel, Gender, Goal
from nutrilog.services.ledger_store import LedgerStore

TODAY = date(2024, 6, 15)  # суббота


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    """Хранилище в памяти, уже инициализированное."""
    ledger = LedgerStore("sqlite://")
    ledger.init()
    yield ledger
    ledger.engine.dispose()


@pytest.fixture
def profile(store):
    """Профиль из сценария: 70 кг, 170 см, 30 лет, мужчина."""
    return store.upsert_profile({
        "gender": Gender.MALE,
        "birth_date": date(1994, 1, 1),
        "height_cm": 170,
        "current_weight_kg": 70,
        "activity_level": ActivityLevel.SEDENTARY,
        "goal": Goal.MAINTAIN,
        "daily_calorie_target": 1941,
    })


def food_log_data(day: date, hour: int = 12, calories: float = 500, **extra) -> dict:
    """Минимальная запись дневника питания за день."""
    data = {
        "food_name": extra.pop("food_name", "Rice"),
        "logged_at": datetime.combine(day, datetime.min.time()).replace(hour=hour),
        "total_weight_g": 100,
        "total_calories": calories,
        "total_protein_g": 10,
        "total_carbs_g": 50,
        "total_fat_g": 5,
        "total_sodium_mg": 200,
    }
    data.update(extra)
    return data


def activity_log_data(day: date, calories: float = 300, name: str = "Running") -> dict:
    return {
        "activity_name": name,
        "category": "cardio",
        "logged_at": datetime.combine(day, datetime.min.time()).replace(hour=18),
        "duration_minutes": 30,
        "calories_burned": calories,
    }
