"""Границы с внешними источниками данных: штрихкоды и AI.

Реализации адаптеров живут вне ядра. Ядро только описывает их форму и
вызывает через safe_* обёртки: любая ошибка адаптера превращается в
«данных нет» (None), наружу исключение не выходит.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Optional, Protocol, Sequence

from nutrilog.models import FoodItem, Nutrients, UserProfile, parse_number
from nutrilog.services.ledger_store import LedgerStore
from nutrilog.services.nutrition_calc import age

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NutrientBaseline:
    """Кандидат базы нутриентов от внешнего источника (на 100 г)."""

    name: str
    per_100g: Nutrients
    serving_weight_g: float = 100.0
    brand: Optional[str] = None
    barcode: Optional[str] = None
    source: str = "barcode"
    food_item_id: Optional[int] = None  # уже сохранён в food_items

    @classmethod
    def from_food_item(cls, item: FoodItem) -> "NutrientBaseline":
        """База сохранённого продукта, приведённая к 100 г."""
        base = parse_number(item.base_amount) or 100.0
        return cls(
            name=item.name,
            per_100g=item.baseline().scaled(100.0 / base, rounded=False),
            serving_weight_g=parse_number(item.serving_weight_g) or 100.0,
            brand=item.brand,
            barcode=item.barcode,
            source=item.source or "manual",
            food_item_id=item.id,
        )

    def to_food_item_values(self) -> dict:
        """Колонки food_items для сохранения продукта."""
        values = {
            "name": self.name,
            "brand": self.brand,
            "barcode": self.barcode,
            "base_amount": 100.0,
            "base_unit": "g",
            "serving_weight_g": parse_number(self.serving_weight_g) or 100.0,
            "is_user_created": False,
            "source": self.source,
        }
        values.update(self.per_100g.as_columns())
        return values


@dataclass(frozen=True)
class Suggestion:
    """Ответ AI-коуча: рецепт или тренировка."""

    title: str
    calories: float = 0.0
    details: Sequence[str] = field(default_factory=tuple)
    reason: str = ""
    duration_minutes: Optional[int] = None


@dataclass(frozen=True)
class ProfileContext:
    """Снимок профиля только для чтения, его и видит AI."""

    age: int
    gender: Optional[str]
    goal: Optional[str]
    daily_calorie_target: Optional[int] = None
    target_weight_kg: Optional[float] = None
    target_date: Optional[date] = None
    days_to_target: Optional[int] = None


class BarcodeAdapter(Protocol):
    def lookup(self, barcode: str) -> Optional[NutrientBaseline]:
        """Найти продукт по штрихкоду; None, если не найден."""


class NutritionAdapter(Protocol):
    def estimate(self, image_or_text: Any, profile: ProfileContext) -> Optional[NutrientBaseline]:
        """Оценить нутриенты по фото или описанию."""


class CoachingAdapter(Protocol):
    def suggest_recipe(self, remaining_kcal: int, profile: ProfileContext) -> Suggestion:
        """Рецепт под остаток калорий."""

    def suggest_workout(self, profile: ProfileContext, remaining_kcal: int) -> Suggestion:
        """Тренировка под остаток калорий."""

    def chat(self, history: Sequence[dict], message: str, profile: ProfileContext) -> str:
        """Свободный диалог с коучем."""


def _enum_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "value", value)


def build_profile_context(profile: Optional[UserProfile], today: Optional[date] = None) -> ProfileContext:
    """Собрать снимок профиля для AI. Без профиля контекст пустой."""
    today = today or date.today()
    if profile is None:
        return ProfileContext(age=0, gender=None, goal=None)

    days_to_target = None
    if profile.target_date is not None:
        days_to_target = max(0, (profile.target_date - today).days)

    return ProfileContext(
        age=age(profile.birth_date, today),
        gender=_enum_value(profile.gender),
        goal=_enum_value(profile.goal),
        daily_calorie_target=profile.daily_calorie_target,
        target_weight_kg=profile.target_weight_kg,
        target_date=profile.target_date,
        days_to_target=days_to_target,
    )


def _safe_call(name: str, call: Callable[[], Any]) -> Any:
    try:
        return call()
    except Exception as e:
        logger.warning(f"{name} adapter failed: {e}")
        return None


def safe_lookup(adapter: BarcodeAdapter, barcode: str) -> Optional[NutrientBaseline]:
    """Поиск по штрихкоду; ошибка адаптера = не найдено."""
    result = _safe_call("Barcode", lambda: adapter.lookup(barcode))
    if result is None:
        logger.info(f"Barcode {barcode} not found")
    return result


def lookup_barcode(
    store: LedgerStore,
    adapter: Optional[BarcodeAdapter],
    barcode: str,
    cache: bool = True,
) -> Optional[NutrientBaseline]:
    """Найти продукт: локальная база → адаптер.

    Найденное адаптером сохраняется в food_items (cache=True), чтобы
    следующий скан не ходил в сеть.
    """
    barcode = (barcode or "").strip()
    if not barcode:
        return None

    # ШАГ 1: Ищем среди сохранённых продуктов
    item = store.find_food_item_by_barcode(barcode)
    if item is not None:
        logger.info(f"Local hit for barcode {barcode}")
        return NutrientBaseline.from_food_item(item)

    # ШАГ 2: Внешний источник
    if adapter is None:
        return None
    result = safe_lookup(adapter, barcode)
    if result is None:
        return None
    if result.barcode is None:
        result = replace(result, barcode=barcode)
    if cache:
        item = store.create_food_item(result.to_food_item_values())
        result = replace(result, food_item_id=item.id)
        logger.info(f"Barcode {barcode} cached as food item {item.id}")
    return result


def safe_estimate(adapter: NutritionAdapter, image_or_text: Any, profile: ProfileContext) -> Optional[NutrientBaseline]:
    return _safe_call("Nutrition", lambda: adapter.estimate(image_or_text, profile))


def safe_suggest_recipe(adapter: CoachingAdapter, remaining: int, profile: ProfileContext) -> Optional[Suggestion]:
    return _safe_call("Coaching", lambda: adapter.suggest_recipe(remaining, profile))


def safe_suggest_workout(adapter: CoachingAdapter, profile: ProfileContext, remaining: int) -> Optional[Suggestion]:
    return _safe_call("Coaching", lambda: adapter.suggest_workout(profile, remaining))


def safe_chat(
    adapter: CoachingAdapter,
    history: Sequence[dict],
    message: str,
    profile: ProfileContext,
) -> Optional[str]:
    return _safe_call("Coaching", lambda: adapter.chat(history, message, profile))
