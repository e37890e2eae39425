"""Тесты статистики: сводка дня и корзины истории."""
from datetime import date, timedelta

import pytest

from conftest import activity_log_data, food_log_data
from nutrilog.services.labels import Locale, format_bucket_label
from nutrilog.services.stats_service import (
    BUCKET_COUNTS,
    Period,
    bucket_ranges,
    get_daily_summary,
    get_history,
    period_averages,
    remaining_kcal,
)


@pytest.mark.parametrize("period,count", [
    (Period.WEEK, 7),
    (Period.MONTH_DAY, 30),
    (Period.MONTH_WEEK, 12),
    (Period.YEAR, 12),
])
def test_empty_history_has_fixed_length(store, today, period, count):
    """Длина истории фиксирована даже без записей."""
    buckets = get_history(store, period, today)

    assert len(buckets) == count == BUCKET_COUNTS[period]
    assert all(b.calories_in == 0 and b.calories_out == 0 for b in buckets)
    assert all(not b.has_data for b in buckets)


def test_week_buckets_end_today(today):
    ranges = bucket_ranges(Period.WEEK, today)

    assert ranges[-1] == (today, today)
    assert ranges[0] == (today - timedelta(days=6), today - timedelta(days=6))


def test_month_day_is_trailing_30_days(today):
    ranges = bucket_ranges(Period.MONTH_DAY, today)

    assert ranges[0][0] == today - timedelta(days=29)
    assert ranges[-1][1] == today


def test_month_week_starts_on_monday(today):
    ranges = bucket_ranges(Period.MONTH_WEEK, today)

    assert all(start.weekday() == 0 for start, _ in ranges)
    assert ranges[-1] == (date(2024, 6, 10), date(2024, 6, 16))


def test_year_is_calendar_months(today):
    ranges = bucket_ranges(Period.YEAR, today)

    assert ranges[0] == (date(2024, 1, 1), date(2024, 1, 31))
    assert ranges[1][1] == date(2024, 2, 29)
    assert ranges[-1] == (date(2024, 12, 1), date(2024, 12, 31))


def test_week_sums(store, today):
    store.create_food_log(food_log_data(today, calories=500))
    store.create_food_log(food_log_data(today, hour=19, calories=700))
    store.create_food_log(food_log_data(today - timedelta(days=2), calories=300))
    store.create_food_log(food_log_data(today - timedelta(days=8), calories=9999))
    store.create_activity_log(activity_log_data(today, calories=250))

    buckets = get_history(store, Period.WEEK, today)
    last = buckets[-1]

    assert last.calories_in == 1200
    assert last.calories_out == 250
    assert last.protein == 20
    assert last.carbs == 100
    assert last.fat == 10
    assert last.sodium == 400
    assert buckets[-3].calories_in == 300
    assert sum(b.calories_in for b in buckets) == 1500


def test_year_sums_by_month(store, today):
    store.create_food_log(food_log_data(date(2024, 1, 31), calories=100))
    store.create_food_log(food_log_data(date(2024, 6, 1), calories=200))
    store.create_food_log(food_log_data(date(2024, 6, 15), calories=300))

    buckets = get_history(store, Period.YEAR, today)

    assert buckets[0].calories_in == 100
    assert buckets[5].calories_in == 500
    assert buckets[5].daily_average()["calories_in"] == 17  # 500 / 30 дней


def test_history_weight_average(store, today):
    store.record_daily_metric(today, 70, 20)
    store.record_daily_metric(today - timedelta(days=1), 71)

    buckets = get_history(store, Period.MONTH_WEEK, today)

    assert buckets[-1].weight == 70.5
    assert buckets[-1].body_fat == 20
    assert buckets[0].weight is None


def test_history_labels(store, today):
    week = get_history(store, Period.WEEK, today)
    month = get_history(store, Period.MONTH_DAY, today, locale=Locale.EN)
    year = get_history(store, Period.YEAR, today, locale=Locale.ZH_TW)

    assert week[-1].label == "Sat"
    assert month[-1].label == "06/15"
    assert year[0].label == "1月"


def test_format_bucket_label_locales():
    monday = date(2024, 6, 10)

    assert format_bucket_label("week", monday, Locale.ZH_TW) == "週一"
    assert format_bucket_label("year", monday, "en") == "Jun"
    assert format_bucket_label("month_week", monday, "fr") == "06/10"


def test_empty_daily_summary(store, today):
    """Пустой день: нули и пустые списки."""
    summary = get_daily_summary(store, today)

    assert summary.calories_in == 0
    assert summary.calories_out == 0
    assert summary.protein == 0 and summary.carbs == 0 and summary.fat == 0 and summary.sodium == 0
    assert summary.food_logs == []
    assert summary.activity_logs == []
    assert summary.net_calories == 0


def test_remaining_kcal(store, today):
    store.create_food_log(food_log_data(today, calories=800))
    store.create_activity_log(activity_log_data(today, calories=300))

    summary = get_daily_summary(store, today)

    assert summary.net_calories == 500
    assert remaining_kcal(1941, summary) == 1441
    assert remaining_kcal(None, summary) == -500


def test_period_averages_skip_empty_buckets(store, today):
    store.create_food_log(food_log_data(today, calories=1000))
    store.create_food_log(food_log_data(today - timedelta(days=1), calories=2000))

    averages = period_averages(get_history(store, Period.WEEK, today))

    assert averages["calories_in"] == 1500
    assert averages["buckets"] == 2


def test_period_averages_empty():
    assert period_averages([])["buckets"] == 0


def test_locale_parse_default():
    assert Locale.parse("zh-TW") == Locale.ZH_TW
    assert Locale.parse("fr") == Locale.EN
    assert Locale.parse("fr", Locale.ZH_TW) == Locale.ZH_TW
