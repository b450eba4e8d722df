"""
identity_store/models/query.py — Абстрактный язык запросов.

Параметр запроса — тегированный вариант:
    • IdentityParameter — фильтр по общему полю
    • VariantParameter — фильтр по полю варианта
    • AttributeParameter(name) — «сущность имеет атрибут name со значениями …»

Значения к параметру передаются позиционно: ``set_parameter(p, v1, v2, …)``.
"""

from __future__ import annotations

from typing import Any, Sequence, Union

from identity_store.models.common import IdentityBase
from identity_store.models.enums import IdentityParameter, VariantParameter
from identity_store.models.identity import IdentityType


class AttributeParameter(IdentityBase):
    """Параметр запроса по именованному атрибуту (hashable)."""

    model_config = {"str_strip_whitespace": True, "frozen": True}

    name: str


QueryParameter = Union[IdentityParameter, VariantParameter, AttributeParameter]


class IdentityQuery:
    """
    Запрос identity-сущностей заданного типа.

    Хранит пары (параметр, значения) в порядке добавления. Повторный
    вызов ``set_parameter`` для того же параметра заменяет значения.
    """

    def __init__(self, identity_type: type[IdentityType]) -> None:
        self.identity_type = identity_type
        self._parameters: dict[QueryParameter, tuple[Any, ...]] = {}

    def set_parameter(self, parameter: QueryParameter, *values: Any) -> "IdentityQuery":
        self._parameters[parameter] = tuple(values)
        return self

    @property
    def parameters(self) -> list[tuple[QueryParameter, Sequence[Any]]]:
        return list(self._parameters.items())

    def __repr__(self) -> str:
        return f"<IdentityQuery({self.identity_type.__name__}, {len(self._parameters)} parameters)>"
