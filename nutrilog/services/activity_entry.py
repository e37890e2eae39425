"""Сохранение записи об активности."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from nutrilog.models import Feeling, Intensity, parse_number
from nutrilog.services.ledger_store import LedgerStore
from nutrilog.services.nutrition_calc import estimate_activity_calories, find_activity, resolve_calories_burned

logger = logging.getLogger(__name__)

# Вес для расчёта, если в профиле его нет
DEFAULT_WEIGHT_KG = 70.0


@dataclass
class ActivityDraft:
    """Данные экрана активности перед сохранением."""

    activity: str
    intensity: Intensity = Intensity.MEDIUM
    duration_minutes: Any = 0
    distance_km: Any = None
    steps: Any = None
    floors: Any = None
    feeling: Optional[Feeling] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    logged_at: Optional[datetime] = None
    calories_override: Any = None
    log_id: Optional[int] = None


def _optional_int(value: Any) -> Optional[int]:
    number = int(parse_number(value))
    return number if number > 0 else None


def _optional_float(value: Any) -> Optional[float]:
    number = parse_number(value)
    return number if number > 0 else None


def activity_log_values(draft: ActivityDraft, weight_kg: Any) -> dict:
    """Колонки activity_logs с рассчитанным (или ручным) расходом."""
    name = (draft.activity or "").strip()
    if not name:
        raise ValueError("activity name is required")
    if not any(parse_number(v) > 0 for v in (draft.duration_minutes, draft.distance_km, draft.steps, draft.floors)):
        raise ValueError("duration, distance, steps or floors is required")

    known = find_activity(name)
    estimated = estimate_activity_calories(
        name,
        draft.intensity,
        weight_kg,
        duration_minutes=draft.duration_minutes,
        distance_km=draft.distance_km,
        steps=draft.steps,
    )
    logged_at = draft.logged_at or datetime.now()
    return {
        "date": logged_at.date(),
        "logged_at": logged_at,
        "category": draft.category or (known.category if known else "custom"),
        "activity_name": known.name if known else name,
        "intensity": Intensity(draft.intensity),
        "duration_minutes": int(parse_number(draft.duration_minutes)),
        "calories_burned": resolve_calories_burned(estimated, draft.calories_override),
        "distance_km": _optional_float(draft.distance_km),
        "steps": _optional_int(draft.steps),
        "floors": _optional_int(draft.floors),
        "feeling": draft.feeling,
        "notes": draft.notes,
    }


def save_activity_entry(store: LedgerStore, draft: ActivityDraft, weight_kg: Any = None) -> Optional[int]:
    """Создать или обновить запись активности.

    Вес берётся из профиля, если не передан явно.

    Returns:
        id записи или None, если редактируемая запись не найдена
    """
    if weight_kg is None:
        profile = store.get_profile()
        weight_kg = (profile.current_weight_kg if profile else None) or DEFAULT_WEIGHT_KG

    values = activity_log_values(draft, weight_kg)
    if draft.log_id is None:
        log = store.create_activity_log(values)
        logger.info(f"Activity logged: {log.activity_name} {log.calories_burned} kcal")
        return log.id

    if not store.update_activity_log(draft.log_id, values):
        logger.warning(f"Activity log {draft.log_id} not found, nothing updated")
        return None
    return draft.log_id
