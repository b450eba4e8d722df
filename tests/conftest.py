from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from identity_store.config import StoreSettings
from identity_store.db.models import Base, IdentityObject, IdentityObjectAttribute, PartitionObject
from identity_store.models import Realm
from identity_store.store import (
    IdentityQueryBuilder,
    PredicateCompiler,
    SessionPartitionResolver,
    StoreConfiguration,
    default_registry,
)

T0 = datetime(2024, 1, 1, 12, 0, 0)


class StaticPartitionResolver:
    """Возвращает заранее подготовленный объект раздела без обращения к БД."""

    def __init__(self) -> None:
        self.looked_up: list[str] = []

    def lookup(self, partition: Realm):
        self.looked_up.append(partition.id)
        return PartitionObject(id=partition.id, name=partition.name)


@pytest.fixture
def settings():
    return StoreSettings(_env_file=None)


@pytest.fixture
def configuration():
    return StoreConfiguration.from_models(IdentityObject, IdentityObjectAttribute)


@pytest.fixture
def registry(configuration):
    return default_registry(configuration, partitions=StaticPartitionResolver())


@pytest.fixture
def compiler(configuration, settings):
    return PredicateCompiler(configuration, settings)


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as s:
        s.add_all([PartitionObject(id="acme", name="Acme"), PartitionObject(id="globex", name="Globex")])
        s.flush()
        yield s
    engine.dispose()


@pytest.fixture
def db_registry(configuration, session):
    return default_registry(configuration, partitions=SessionPartitionResolver(session, PartitionObject))


@pytest.fixture
def builder(db_registry, compiler, settings):
    return IdentityQueryBuilder(db_registry, compiler, settings)


@pytest.fixture
def store(db_registry, session):
    """Сохраняет доменный объект вместе с его атрибутами и возвращает запись."""

    def _store(domain_object, partition: Realm | None = None):
        mapper = db_registry.for_type(type(domain_object))
        record = mapper.create_record(partition, domain_object)
        mapper.create_attribute_records(record, domain_object)
        session.add(record)
        session.flush()
        return record

    return _store
