"""
identity_store/models/enums.py — Перечисления параметров запроса.

Содержит enum'ы, по которым компилятор предикатов выбирает правило:
    • IdentityParameter — фильтры по общим полям всех identity-типов
    • VariantParameter — фильтры по полям конкретного варианта (User, Group, …)
"""

from enum import Enum


class IdentityParameter(str, Enum):
    """Параметр запроса по общим полям IdentityType."""
    ENABLED = "enabled"
    CREATED_DATE = "created_date"
    EXPIRY_DATE = "expiry_date"
    CREATED_AFTER = "created_after"
    CREATED_BEFORE = "created_before"
    EXPIRY_AFTER = "expiry_after"
    EXPIRY_BEFORE = "expiry_before"


class VariantParameter(str, Enum):
    """Параметр запроса по полю, которым владеет конкретный вариант."""
    LOGIN_NAME = "login_name"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    EMAIL = "email"
    NAME = "name"
    GROUP_PATH = "group_path"
