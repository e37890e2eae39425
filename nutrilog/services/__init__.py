"""Сервисы бизнес-логики."""
from nutrilog.services.ledger_store import LedgerStore
from nutrilog.services.user_service import has_profile, profile_macro_targets, save_profile_settings
from nutrilog.services.nutrition_calc import age, bmr, calorie_target, tdee, workout_calories
from nutrilog.services.stats_service import Period, get_daily_summary, get_history, remaining_kcal
from nutrilog.services.food_entry import ItemMode, ServingSpec, FoodEntryDraft, save_food_entry
from nutrilog.services.activity_entry import ActivityDraft, save_activity_entry

__all__ = [
    "LedgerStore",
    "has_profile",
    "profile_macro_targets",
    "save_profile_settings",
    "age",
    "bmr",
    "calorie_target",
    "tdee",
    "workout_calories",
    "Period",
    "get_daily_summary",
    "get_history",
    "remaining_kcal",
    "ItemMode",
    "ServingSpec",
    "FoodEntryDraft",
    "save_food_entry",
    "ActivityDraft",
    "save_activity_entry",
]
