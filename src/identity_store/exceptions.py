"""
═══════════════════════════════════════════════════════════════════════════════
Identity Store — Иерархия ошибок (Custom Exception Hierarchy)
═══════════════════════════════════════════════════════════════════════════════

Базовый класс ``IdentityStoreError``. Ошибки конфигурации фатальны и
не повторяются; ошибки целостности данных возникают при записи или
восстановлении записи с отсутствующим обязательным полем.

Ошибки композиции запроса (пустой список значений и т.п.) исключений
не порождают: компилятор возвращает предикат, не совпадающий ни с чем.
"""


class IdentityStoreError(Exception):
    """
    Базовое исключение для всех ошибок Identity Store.

    Атрибуты
    ────────
        message (str):  Описание ошибки.
        code (str):     Строковый код ошибки.
        details (dict): Дополнительные данные (property, type и т.д.).
    """

    def __init__(
        self,
        message: str,
        code: str = "IDENTITY_STORE_ERROR",
        details: dict | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(IdentityStoreError):
    """Ошибка конфигурации схемы: нет привязки свойства, класс записи не создаётся."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="IDENTITY_STORE_CONFIGURATION", details=details)


class DataIntegrityError(IdentityStoreError):
    """Обязательное общее поле отсутствует (None) в записи или доменном объекте."""

    def __init__(self, property_name: str, message: str | None = None):
        super().__init__(
            message=message or f"Required property is missing: {property_name}",
            code="IDENTITY_STORE_DATA_INTEGRITY",
            details={"property": property_name},
        )


class NotFoundError(IdentityStoreError):
    """Сущность хранилища не найдена."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            message=f"{entity} not found: {entity_id}",
            code="IDENTITY_STORE_NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


__all__ = [
    "IdentityStoreError",
    "ConfigurationError",
    "DataIntegrityError",
    "NotFoundError",
]
