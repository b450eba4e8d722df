"""
identity_store/models/common.py — Базовые типы домена.

Общая Pydantic-модель для доменных объектов, параметров запроса
и описаний событий.
"""

from pydantic import BaseModel


class IdentityBase(BaseModel):
    """Базовая Pydantic-модель для доменных схем Identity Store."""

    model_config = {"str_strip_whitespace": True}
