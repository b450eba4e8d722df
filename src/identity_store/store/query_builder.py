"""
identity_store/store/query_builder.py — Сборка SELECT по IdentityQuery.

Конъюнкция:
    discriminator IN (токены типа и подтипов)
    AND partition = сохранённый раздел (если передан)
    AND предикаты всех параметров запроса

Выполнение запроса остаётся за вызывающим кодом (Session.scalars и т.п.).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.sql.elements import ColumnElement

from identity_store.config import StoreSettings
from identity_store.exceptions import ConfigurationError
from identity_store.models.identity import Realm
from identity_store.models.query import IdentityQuery
from identity_store.store.configuration import (
    PROPERTY_IDENTITY_DISCRIMINATOR,
    PROPERTY_IDENTITY_PARTITION,
)
from identity_store.store.predicates import PredicateCompiler
from identity_store.store.registry import MapperRegistry


class IdentityQueryBuilder:
    def __init__(
        self,
        registry: MapperRegistry,
        compiler: PredicateCompiler,
        settings: StoreSettings | None = None,
    ) -> None:
        self.registry = registry
        self.compiler = compiler
        self.settings = settings or compiler.settings

    def predicates(
        self,
        query: IdentityQuery,
        root: Any = None,
        partition: Realm | None = None,
    ) -> list[ColumnElement[bool]]:
        config = self.registry.configuration
        root = root if root is not None else config.identity_class
        mapper = self.registry.for_type(query.identity_type)

        tokens = self.registry.discriminators.tokens_for(
            query.identity_type, include_subtypes=self.settings.include_subtypes
        )
        discriminator = getattr(root, config.get_model_property(PROPERTY_IDENTITY_DISCRIMINATOR))
        predicates: list[ColumnElement[bool]] = [discriminator.in_(tokens)]

        if partition is not None:
            if self.registry.partitions is None:
                raise ConfigurationError(
                    "A partition was supplied but no partition resolver is configured",
                    details={"partition": partition.id},
                )
            column = getattr(root, config.get_model_property(PROPERTY_IDENTITY_PARTITION))
            predicates.append(column == self.registry.partitions.lookup(partition))

        for parameter, values in query.parameters:
            predicates.extend(self.compiler.compile(parameter, values, root, mapper.variant))
        return predicates

    def build(self, query: IdentityQuery, partition: Realm | None = None) -> Select:
        root = self.registry.configuration.identity_class
        return select(root).where(*self.predicates(query, root, partition))
