"""Сохранение записи о еде: продукт + запись дневника.

Какую ветку выбрать для изменённого продукта («обновить всё» или
«сохранить как новый»), решает вызывающий код; здесь она только выполняется.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from nutrilog.models import FoodItem, MealTime, Nutrients, ServingType, parse_number
from nutrilog.models.nutrients import TOTAL_PREFIX
from nutrilog.services.adapters import NutrientBaseline
from nutrilog.services.ledger_store import LedgerStore
from nutrilog.services.unit_converter import (
    DEFAULT_BASE_AMOUNT,
    ServingSync,
    scale_nutrients,
    to_grams,
    to_servings,
)

logger = logging.getLogger(__name__)


class ItemMode(str, enum.Enum):
    """Что делать с продуктом при сохранении записи."""
    UPDATE_ALL = "update_all"    # обновить продукт на месте (или создать, если его нет)
    SAVE_AS_NEW = "save_as_new"  # всегда новый продукт, старый не трогаем
    LOG_ONLY = "log_only"        # разовая запись без продукта


@dataclass(frozen=True)
class ServingSpec:
    """Количество съеденного; оба режима сводятся к total_weight_g."""

    serving_type: ServingType
    total_weight_g: float
    serving_amount: Optional[float] = None
    unit_weight_g: Optional[float] = None

    @classmethod
    def by_serving(cls, serving_amount: Any, unit_weight_g: Any) -> "ServingSpec":
        amount = max(0.0, parse_number(serving_amount))
        unit = max(0.0, parse_number(unit_weight_g))
        return cls(ServingType.SERVING, to_grams(amount, unit), amount, unit)

    @classmethod
    def by_weight(cls, total_weight_g: Any, unit_weight_g: Any = None) -> "ServingSpec":
        total = max(0.0, parse_number(total_weight_g))
        unit = parse_number(unit_weight_g) if unit_weight_g is not None else None
        servings = to_servings(total, unit) if unit else None
        return cls(ServingType.WEIGHT, total, servings, unit)

    @classmethod
    def from_sync(cls, sync: ServingSync, serving_type: ServingType) -> "ServingSpec":
        if ServingType(serving_type) == ServingType.SERVING:
            return cls.by_serving(sync.servings, sync.unit_weight_g)
        return cls.by_weight(sync.total_weight_g, sync.unit_weight_g)

    def as_columns(self) -> dict:
        return {
            "serving_type": self.serving_type,
            "serving_amount": self.serving_amount,
            "unit_weight_g": self.unit_weight_g,
            "total_weight_g": self.total_weight_g,
        }


@dataclass
class FoodEntryDraft:
    """Данные экрана редактирования еды перед сохранением."""

    food_name: str
    baseline: Nutrients
    serving: ServingSpec
    logged_at: Optional[datetime] = None
    meal_time: Optional[MealTime] = None
    food_item_id: Optional[int] = None
    log_id: Optional[int] = None
    base_amount: float = DEFAULT_BASE_AMOUNT
    serving_weight_g: Optional[float] = None
    brand: Optional[str] = None
    barcode: Optional[str] = None
    source: str = "manual"
    image_url: Optional[str] = None
    ai_analysis_log: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class SavedFoodEntry:
    """Результат сохранения; food_log_id = None, если редактируемая запись не найдена."""

    food_item_id: Optional[int]
    food_log_id: Optional[int]
    created_item: bool
    log_rows: int


def baseline_changed(original: Optional[Nutrients], edited: Nutrients) -> bool:
    """Изменил ли пользователь базу продукта (повод спросить «обновить всё?»)."""
    return original is not None and original != edited


def draft_from_baseline(
    baseline: NutrientBaseline,
    servings: Any = 1,
    logged_at: Optional[datetime] = None,
) -> FoodEntryDraft:
    """Черновик записи из ответа адаптера (штрихкод или AI)."""
    unit = parse_number(baseline.serving_weight_g) or DEFAULT_BASE_AMOUNT
    return FoodEntryDraft(
        food_name=baseline.name,
        baseline=baseline.per_100g,
        serving=ServingSpec.by_serving(servings, unit),
        logged_at=logged_at,
        food_item_id=baseline.food_item_id,
        serving_weight_g=unit,
        brand=baseline.brand,
        barcode=baseline.barcode,
        source=baseline.source,
    )


def draft_from_item(
    item: FoodItem,
    serving: Optional[ServingSpec] = None,
    logged_at: Optional[datetime] = None,
) -> FoodEntryDraft:
    """Черновик повторной записи сохранённого продукта (по умолчанию одна порция)."""
    base_amount = parse_number(item.base_amount) or DEFAULT_BASE_AMOUNT
    unit = parse_number(item.serving_weight_g) or base_amount
    return FoodEntryDraft(
        food_name=item.name,
        baseline=item.baseline(),
        serving=serving or ServingSpec.by_serving(1, unit),
        logged_at=logged_at,
        food_item_id=item.id,
        base_amount=base_amount,
        serving_weight_g=item.serving_weight_g,
        brand=item.brand,
        barcode=item.barcode,
        source=item.source or "manual",
    )


def draft_from_log(store: LedgerStore, log_id: int, clone: bool = False) -> Optional[FoodEntryDraft]:
    """Черновик для редактирования (или копии) записи дневника.

    База берётся из продукта; у записи без продукта она восстанавливается
    из итогов на 100 г. Копия получает новое время и категорию приёма пищи.

    Returns:
        Черновик или None, если записи нет
    """
    log = store.get_food_log(log_id)
    if log is None:
        return None

    serving = ServingSpec(
        serving_type=ServingType(log.serving_type or ServingType.WEIGHT),
        total_weight_g=parse_number(log.total_weight_g),
        serving_amount=log.serving_amount,
        unit_weight_g=log.unit_weight_g,
    )
    logged_at = None if clone else log.logged_at
    item = store.get_food_item(log.food_item_id) if log.food_item_id else None

    if item is not None:
        draft = draft_from_item(item, serving, logged_at)
        draft.food_name = log.food_name
    else:
        weight = serving.total_weight_g
        totals = log.totals()
        draft = FoodEntryDraft(
            food_name=log.food_name,
            baseline=totals.scaled(DEFAULT_BASE_AMOUNT / weight, rounded=False) if weight > 0 else totals,
            serving=serving,
            logged_at=logged_at,
        )

    if not clone:
        draft.log_id = log.id
        draft.meal_time = log.meal_time_category
    draft.image_url = log.image_url
    draft.ai_analysis_log = log.ai_analysis_log
    draft.notes = log.notes
    return draft


def food_item_values(draft: FoodEntryDraft) -> dict:
    """Колонки нового продукта из черновика."""
    values = {
        "name": draft.food_name,
        "brand": draft.brand,
        "barcode": draft.barcode,
        "base_amount": draft.base_amount,
        "serving_weight_g": draft.serving_weight_g,
        "source": draft.source,
        "is_user_created": draft.source == "manual",
    }
    values.update(draft.baseline.as_columns())
    return values


def food_item_update_values(draft: FoodEntryDraft) -> dict:
    """Колонки для «обновить всё»: происхождение продукта и пустые поля черновика не трогаем."""
    values = food_item_values(draft)
    del values["source"], values["is_user_created"]
    return {key: value for key, value in values.items() if value is not None}


def food_log_values(draft: FoodEntryDraft, food_item_id: Optional[int]) -> dict:
    """Колонки food_logs: итоги = база × total_weight_g / base_amount."""
    logged_at = draft.logged_at or datetime.now()
    totals = scale_nutrients(draft.baseline, draft.serving.total_weight_g, draft.base_amount)
    values = {
        "date": logged_at.date(),
        "logged_at": logged_at,
        "meal_time_category": draft.meal_time or MealTime.for_time(logged_at),
        "food_item_id": food_item_id,
        "food_name": draft.food_name,
        "image_url": draft.image_url,
        "ai_analysis_log": draft.ai_analysis_log,
        "notes": draft.notes,
    }
    values.update(draft.serving.as_columns())
    values.update(totals.as_columns(prefix=TOTAL_PREFIX))
    return values


def save_food_entry(
    store: LedgerStore,
    draft: FoodEntryDraft,
    item_mode: ItemMode = ItemMode.UPDATE_ALL,
) -> SavedFoodEntry:
    """Сохранить продукт (по выбранной ветке) и запись дневника.

    Уже сохранённые записи при «обновить всё» не пересчитываются: итоги
    в дневнике отражают то, что было съедено на момент записи.
    """
    if not draft.food_name or not draft.food_name.strip():
        raise ValueError("food_name is required")

    item_mode = ItemMode(item_mode)
    food_item_id = draft.food_item_id
    created_item = False

    if item_mode == ItemMode.LOG_ONLY:
        food_item_id = None
    elif item_mode == ItemMode.SAVE_AS_NEW or food_item_id is None:
        food_item_id = store.create_food_item(food_item_values(draft)).id
        created_item = True
    else:
        item = store.get_food_item(food_item_id)
        if item is None:
            logger.warning(f"Food item {food_item_id} vanished, saving as new")
            food_item_id = store.create_food_item(food_item_values(draft)).id
            created_item = True
        elif baseline_changed(item.baseline(), draft.baseline) or item.name != draft.food_name:
            store.update_food_item(food_item_id, food_item_update_values(draft))

    values = food_log_values(draft, food_item_id)
    if draft.log_id is None:
        log = store.create_food_log(values)
        return SavedFoodEntry(food_item_id, log.id, created_item, 1)

    rows = store.update_food_log(draft.log_id, values)
    if not rows:
        logger.warning(f"Food log {draft.log_id} not found, nothing updated")
    return SavedFoodEntry(food_item_id, draft.log_id if rows else None, created_item, rows)
