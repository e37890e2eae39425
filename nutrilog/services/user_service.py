"""Сервис для работы с профилем."""
import logging
from datetime import date, datetime
from typing import Any, Optional

from nutrilog.models import ActivityLevel, Gender, Goal, UserProfile, parse_number
from nutrilog.services.ledger_store import LedgerStore
from nutrilog.services.nutrition_calc import age, bmr, calorie_target, daily_macro_targets, tdee

logger = logging.getLogger(__name__)

# Значения для расчёта, если пользователь их не заполнил
DEFAULT_BIRTH_DATE = date(1990, 1, 1)
DEFAULT_HEIGHT_CM = 170.0
DEFAULT_WEIGHT_KG = 60.0

_NUMERIC_FIELDS = (
    "height_cm",
    "current_weight_kg",
    "current_body_fat",
    "target_weight_kg",
    "target_body_fat",
)


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def _optional_number(value: Any) -> Optional[float]:
    """Пустое поле остаётся пустым, остальное разбирается через parse_number."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_number(value)


def has_profile(store: LedgerStore) -> bool:
    """Проверить, заполнен ли профиль."""
    profile = store.get_profile()
    return profile is not None and profile.daily_calorie_target is not None


def compute_calorie_target(data: dict, today: Optional[date] = None) -> int:
    """Норма калорий из настроек: возраст → BMR → TDEE → цель."""
    today = today or date.today()
    birth_date = data.get("birth_date") or DEFAULT_BIRTH_DATE
    weight = data.get("current_weight_kg") or DEFAULT_WEIGHT_KG
    height = data.get("height_cm") or DEFAULT_HEIGHT_CM

    base = bmr(weight, height, age(birth_date, today), data.get("gender"))
    return calorie_target(tdee(base, data.get("activity_level")), data.get("goal"))


def save_profile_settings(store: LedgerStore, data: dict, today: Optional[date] = None) -> UserProfile:
    """Сохранить настройки профиля и пересчитать норму калорий.

    Числа приводятся прощающим разбором, даты принимаются как date или
    "YYYY-MM-DD". Если указан текущий вес, он же пишется в историю веса.

    Args:
        store: хранилище
        data: поля профиля (gender, birth_date, height_cm, current_weight_kg, ...)
        today: дата расчёта возраста (по умолчанию сегодня)

    Returns:
        Обновлённый профиль
    """
    today = today or date.today()
    values = dict(data)

    # Мусор и ноль в числовых полях означают «не указано»
    for key in _NUMERIC_FIELDS:
        if key in values:
            values[key] = _optional_number(values[key]) or None
    for key in ("birth_date", "target_date"):
        if key in values:
            values[key] = _parse_date(values[key])
    if values.get("gender") is not None:
        values["gender"] = Gender(values["gender"])
    if values.get("goal") is not None:
        values["goal"] = Goal(values["goal"])
    if values.get("activity_level") is not None:
        values["activity_level"] = ActivityLevel(values["activity_level"])

    current = store.get_profile()
    merged = {}
    if current is not None:
        merged = {column: getattr(current, column) for column in UserProfile.column_names()}
    merged.update(values)

    values["daily_calorie_target"] = compute_calorie_target(merged, today)
    profile = store.upsert_profile(values)
    logger.info(f"Profile saved, daily target {profile.daily_calorie_target} kcal")

    if values.get("current_weight_kg"):
        store.record_daily_metric(today, values["current_weight_kg"], values.get("current_body_fat"))

    return profile


def profile_macro_targets(profile: UserProfile) -> dict:
    """Дневные нормы БЖУ в граммах по проценту из профиля."""
    return daily_macro_targets(
        profile.daily_calorie_target or 0,
        profile.protein_percentage if profile.protein_percentage is not None else 30,
        profile.carbs_percentage if profile.carbs_percentage is not None else 40,
        profile.fat_percentage if profile.fat_percentage is not None else 30,
    )
