"""Исключения дневника."""


class NutrilogError(Exception):
    """Базовое исключение пакета."""


class StoreInitError(NutrilogError):
    """Не удалось создать таблицы, хранилищем пользоваться нельзя."""


class StoreNotReadyError(NutrilogError):
    """Операция вызвана до завершения init()."""


class ProfileValidationError(NutrilogError, ValueError):
    """Недопустимые данные профиля (рост/вес <= 0, дата рождения в будущем)."""
