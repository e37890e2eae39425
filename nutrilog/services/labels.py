"""Подписи корзин истории для графиков.

Локаль передаётся явно, глобального «текущего языка» нет.
"""
import enum
from datetime import date
from typing import Optional


class Locale(str, enum.Enum):
    """Поддерживаемые локали подписей."""
    EN = "en"
    ZH_TW = "zh-TW"

    @classmethod
    def parse(cls, value, default: Optional["Locale"] = None) -> "Locale":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return default or cls.EN


WEEKDAYS = {
    Locale.EN: ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
    Locale.ZH_TW: ("週一", "週二", "週三", "週四", "週五", "週六", "週日"),
}

MONTHS = {
    Locale.EN: ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
    Locale.ZH_TW: tuple(f"{month}月" for month in range(1, 13)),
}


def format_bucket_label(period: str, start: date, locale: Locale = Locale.EN) -> str:
    """Подпись корзины: день недели, MM/DD или месяц."""
    locale = Locale.parse(locale)
    if period == "week":
        return WEEKDAYS[locale][start.weekday()]
    if period == "year":
        return MONTHS[locale][start.month - 1]
    return start.strftime("%m/%d")
