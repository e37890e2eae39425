"""Производные показатели: возраст, BMR, TDEE, норма калорий, расход на тренировках.

Все функции чистые (без I/O). Некорректные числа приводятся к 0, деления
на ноль нет.
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from nutrilog.models import ActivityLevel, Gender, Goal, Intensity, parse_number, round_half_up

# Коэффициенты активности
ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTRA_ACTIVE: 1.9,
}

# Корректировка под цель (ккал к TDEE)
GOAL_ADJUSTMENTS = {
    Goal.LOSE_WEIGHT: -500,  # Дефицит 500 ккал
    Goal.MAINTAIN: 0,
    Goal.GAIN_WEIGHT: 300,   # Профицит 300 ккал
    Goal.RECOMP: 0,
    Goal.BLOOD_SUGAR: 0,
}

INTENSITY_MULTIPLIERS = {
    Intensity.LOW: 0.8,
    Intensity.MEDIUM: 1.0,
    Intensity.HIGH: 1.2,
}

DEFAULT_MET = 4.0

# ккал на км на кг веса и на шаг, когда длительность не указана
KCAL_PER_KM_PER_KG = 0.9
KCAL_PER_STEP = 0.04


@dataclass(frozen=True)
class ActivityType:
    """Вид активности из справочника METs."""

    id: str
    category: str
    name: str
    mets: float


ACTIVITY_TYPES = (
    # Кардио и выносливость
    ActivityType("walk", "cardio", "Walking", 3.0),
    ActivityType("run_slow", "cardio", "Jogging", 6.0),
    ActivityType("run_fast", "cardio", "Running", 10.0),
    ActivityType("cycling", "cardio", "Cycling", 7.5),
    ActivityType("swim", "cardio", "Swimming", 8.0),
    ActivityType("hike", "cardio", "Hiking", 7.0),
    ActivityType("jump_rope", "cardio", "Jump rope", 11.0),
    # Зал
    ActivityType("weight_training", "gym", "Weight training", 5.0),
    ActivityType("powerlifting", "gym", "Powerlifting", 6.0),
    ActivityType("yoga", "gym", "Yoga", 2.5),
    ActivityType("pilates", "gym", "Pilates", 3.0),
    ActivityType("hiit", "gym", "HIIT", 8.0),
    ActivityType("elliptical", "gym", "Elliptical", 5.0),
    # Игровые виды
    ActivityType("basketball", "sport", "Basketball", 8.0),
    ActivityType("badminton", "sport", "Badminton", 5.5),
    ActivityType("tennis", "sport", "Tennis", 7.3),
    ActivityType("soccer", "sport", "Soccer", 9.0),
    ActivityType("baseball", "sport", "Baseball", 5.0),
    # Быт
    ActivityType("housework", "life", "Housework", 3.0),
    ActivityType("gardening", "life", "Gardening", 4.0),
    ActivityType("moving", "life", "Moving heavy objects", 6.0),
)

_ACTIVITY_BY_KEY = {}
for _activity in ACTIVITY_TYPES:
    _ACTIVITY_BY_KEY[_activity.id] = _activity
    _ACTIVITY_BY_KEY[_activity.name.lower()] = _activity


def _coerce_enum(enum_cls, value, default):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default


def find_activity(key: Optional[str]) -> Optional[ActivityType]:
    """Найти вид активности по id или названию (без учёта регистра)."""
    if not key:
        return None
    return _ACTIVITY_BY_KEY.get(key.strip().lower())


def met_for(key: Optional[str]) -> float:
    """METs по id или названию; свои активности считаются как 4.0."""
    activity = find_activity(key)
    return activity.mets if activity else DEFAULT_MET


def age(birth_date: Optional[date], today: Optional[date] = None) -> int:
    """Полных лет на дату today.

    Год вычитается, если в этом году день рождения ещё не наступил.
    Дата рождения в будущем даёт 0.
    """
    if birth_date is None:
        return 0
    today = today or date.today()
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return max(0, years)


def bmr(weight_kg: Any, height_cm: Any, age_years: Any, gender: Any) -> float:
    """Базовый метаболизм по формуле Mifflin-St Jeor."""
    w = parse_number(weight_kg)
    h = parse_number(height_cm)
    a = parse_number(age_years)
    offset = 5 if _coerce_enum(Gender, gender, Gender.FEMALE) == Gender.MALE else -161
    return 10 * w + 6.25 * h - 5 * a + offset


def tdee(bmr_kcal: Any, activity_level: Any) -> float:
    """Суточный расход: BMR × коэффициент активности (неизвестный уровень = 1.2)."""
    level = _coerce_enum(ActivityLevel, activity_level, ActivityLevel.SEDENTARY)
    return parse_number(bmr_kcal) * ACTIVITY_MULTIPLIERS[level]


def calorie_target(tdee_kcal: Any, goal: Any) -> int:
    """Дневная норма калорий с поправкой на цель, округлённая до целого."""
    adjustment = GOAL_ADJUSTMENTS.get(_coerce_enum(Goal, goal, Goal.MAINTAIN), 0)
    return round_half_up(parse_number(tdee_kcal) + adjustment)


def intensity_multiplier(intensity: Any) -> float:
    return INTENSITY_MULTIPLIERS[_coerce_enum(Intensity, intensity, Intensity.MEDIUM)]


def workout_calories(met_value: Any, intensity: Any, weight_kg: Any, duration_minutes: Any) -> int:
    """Расход на тренировке: round(METs × интенсивность × вес × часы)."""
    hours = parse_number(duration_minutes) / 60
    return round_half_up(parse_number(met_value) * intensity_multiplier(intensity) * parse_number(weight_kg) * hours)


def estimate_activity_calories(
    activity: Optional[str],
    intensity: Any,
    weight_kg: Any,
    duration_minutes: Any = 0,
    distance_km: Any = 0,
    steps: Any = 0,
) -> int:
    """Оценка расхода по любым доступным данным.

    Есть длительность: формула METs. Иначе считаются оценки по дистанции
    и по шагам, берётся большая из них.
    """
    minutes = parse_number(duration_minutes)
    if minutes > 0:
        return workout_calories(met_for(activity), intensity, weight_kg, minutes)

    estimate = 0.0
    distance = parse_number(distance_km)
    if distance > 0:
        estimate = distance * parse_number(weight_kg) * KCAL_PER_KM_PER_KG
    step_count = parse_number(steps)
    if step_count > 0:
        estimate = max(estimate, step_count * KCAL_PER_STEP)
    return round_half_up(estimate)


def resolve_calories_burned(estimated: Any, override: Any = None) -> float:
    """Ручное значение пользователя побеждает и сохраняется как есть."""
    if override is not None and str(override).strip() != "":
        return parse_number(override)
    return parse_number(estimated)


def daily_macro_targets(calories: Any, protein_pct: Any = 30, carbs_pct: Any = 40, fat_pct: Any = 30) -> dict:
    """Дневные нормы БЖУ в граммах из процентов калорий (4/4/9 ккал на грамм)."""
    kcal = parse_number(calories)
    return {
        "protein": round_half_up(kcal * parse_number(protein_pct) / 100 / 4),
        "carbs": round_half_up(kcal * parse_number(carbs_pct) / 100 / 4),
        "fat": round_half_up(kcal * parse_number(fat_pct) / 100 / 9),
    }
