"""
═══════════════════════════════════════════════════════════════════════════════
Identity Store — Компилятор предикатов (Predicate Compiler)
═══════════════════════════════════════════════════════════════════════════════

Переводит абстрактный параметр запроса и его позиционные значения в
SQLAlchemy-предикаты над обобщённой схемой хранилища.

Правила:
    ENABLED / CREATED_DATE / EXPIRY_DATE      →  поле == значение
    CREATED_AFTER / EXPIRY_AFTER              →  поле >  значение (строго)
    CREATED_BEFORE / EXPIRY_BEFORE            →  поле <  значение (строго)
    VariantParameter (если вариант его знает) →  поле == значение
    AttributeParameter(name)                  →  коррелированный IN-подзапрос

Неизвестный параметр не даёт предикатов (отклонять его — задача
вызывающего кода). Пустой список значений даёт предикат ``false()``,
чтобы общая конъюнкция просто вернула пустой результат.
"""

from __future__ import annotations

import logging
import operator
from typing import Any, Callable, Sequence

from sqlalchemy import and_, false, func, select
from sqlalchemy.orm import aliased
from sqlalchemy.sql.elements import ColumnElement

from identity_store.config import StoreSettings, get_settings
from identity_store.models.enums import IdentityParameter, VariantParameter
from identity_store.models.query import AttributeParameter, QueryParameter
from identity_store.store.configuration import (
    PROPERTY_ATTRIBUTE_NAME,
    PROPERTY_ATTRIBUTE_VALUE,
    PROPERTY_IDENTITY_CREATED,
    PROPERTY_IDENTITY_ENABLED,
    PROPERTY_IDENTITY_EXPIRES,
    StoreConfiguration,
)
from identity_store.store.variants import IdentityVariant

logger = logging.getLogger(__name__)

# ── Таблица диспетчеризации общих параметров ─────────────────────────────
COMPARISONS: dict[IdentityParameter, tuple[str, Callable[[Any, Any], Any]]] = {
    IdentityParameter.ENABLED: (PROPERTY_IDENTITY_ENABLED, operator.eq),
    IdentityParameter.CREATED_DATE: (PROPERTY_IDENTITY_CREATED, operator.eq),
    IdentityParameter.EXPIRY_DATE: (PROPERTY_IDENTITY_EXPIRES, operator.eq),
    IdentityParameter.CREATED_AFTER: (PROPERTY_IDENTITY_CREATED, operator.gt),
    IdentityParameter.EXPIRY_AFTER: (PROPERTY_IDENTITY_EXPIRES, operator.gt),
    IdentityParameter.CREATED_BEFORE: (PROPERTY_IDENTITY_CREATED, operator.lt),
    IdentityParameter.EXPIRY_BEFORE: (PROPERTY_IDENTITY_EXPIRES, operator.lt),
}


class PredicateCompiler:
    """Компилятор параметров запроса в SQLAlchemy-предикаты."""

    def __init__(
        self,
        configuration: StoreConfiguration,
        settings: StoreSettings | None = None,
    ) -> None:
        self.configuration = configuration
        self.settings = settings or get_settings()

    def compile(
        self,
        parameter: QueryParameter,
        values: Sequence[Any],
        root: Any = None,
        variant: IdentityVariant | None = None,
    ) -> list[ColumnElement[bool]]:
        """
        Возвращает предикаты для одного параметра (ноль или один).

        Args:
            parameter: Параметр запроса.
            values: Позиционные значения параметра.
            root: ORM-класс identity-записи или его ``aliased()``.
            variant: Вариант, чьи ``query_properties`` учитываются.
        """
        root = root if root is not None else self.configuration.identity_class
        values = list(values)

        if isinstance(parameter, AttributeParameter):
            return [self.attribute_predicate(parameter.name, values, root)]

        if isinstance(parameter, IdentityParameter):
            prop, compare = COMPARISONS[parameter]
            return [self._compare(root, prop, compare, values)]

        if isinstance(parameter, VariantParameter) and variant is not None:
            prop = variant.query_properties.get(parameter)
            if prop is not None:
                return [self._compare(root, prop, operator.eq, values)]

        logger.debug("No predicate rule for query parameter %r, ignoring", parameter)
        return []

    def _compare(
        self,
        root: Any,
        prop: str,
        compare: Callable[[Any, Any], Any],
        values: list[Any],
    ) -> ColumnElement[bool]:
        if not values:
            return false()
        column = getattr(root, self.configuration.get_model_property(prop))
        return compare(column, values[0])

    def attribute_predicate(
        self, name: str, values: Sequence[Any], root: Any = None
    ) -> ColumnElement[bool]:
        """
        Identity-записи, у которых среди атрибутов ``name`` есть все ``values``.

        Подзапрос по записям атрибутов::

            SELECT owner FROM attributes
            WHERE name = :name AND value IN (:values)
            GROUP BY owner
            HAVING count(owner) = N

        N — длина переданного списка, а не число различных значений:
        ``["a", "a"]`` требует двух строк со значением "a". Настройка
        ``distinct_attribute_values`` убирает дубликаты до подсчёта N.
        """
        root = root if root is not None else self.configuration.identity_class
        values = list(values)
        if self.settings.distinct_attribute_values:
            values = list(dict.fromkeys(values))
        if not values:
            return false()

        config = self.configuration
        attribute = aliased(config.attribute_class)
        owner = config.attribute_owner_reference(attribute)
        name_column = getattr(attribute, config.get_model_property(PROPERTY_ATTRIBUTE_NAME))
        value_column = getattr(attribute, config.get_model_property(PROPERTY_ATTRIBUTE_VALUE))

        matching_owners = (
            select(owner)
            .where(and_(name_column == name, value_column.in_(values)))
            .group_by(owner)
            .having(func.count(owner) == len(values))
        )
        return config.identity_reference(root).in_(matching_owners)
