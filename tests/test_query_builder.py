from __future__ import annotations

from typing import ClassVar

import pytest

from identity_store.config import StoreSettings
from identity_store.exceptions import ConfigurationError, NotFoundError
from identity_store.models import (
    Agent,
    AttributeParameter,
    IdentityParameter,
    IdentityQuery,
    Realm,
    Role,
    User,
    VariantParameter,
)
from identity_store.store import IdentityQueryBuilder, default_registry

ACME = Realm(id="acme")
GLOBEX = Realm(id="globex")


@pytest.fixture
def directory(store):
    admin = User(login_name="admin", first_name="Ada")
    admin.set_attribute("role", "admin", "ops")
    store(admin, ACME)

    guest = User(login_name="guest", enabled=False)
    guest.set_attribute("role", "ops")
    store(guest, ACME)

    store(User(login_name="remote", first_name="Ada"), GLOBEX)
    store(Agent(login_name="backup-bot"), ACME)
    store(Role(name="admin"), ACME)


def _run(session, builder, query, partition=None):
    return sorted(r.key for r in session.scalars(builder.build(query, partition)))


def test_query_filters_by_discriminator(session, builder, directory):
    assert _run(session, builder, IdentityQuery(Role)) == ["ROLE://admin"]


def test_query_includes_subtypes(session, builder, directory):
    keys = _run(session, builder, IdentityQuery(Agent))
    assert keys == ["AGENT://backup-bot", "USER://admin", "USER://guest", "USER://remote"]


def test_query_excludes_subtypes_when_disabled(session, db_registry, compiler, directory):
    builder = IdentityQueryBuilder(db_registry, compiler, StoreSettings(_env_file=None, include_subtypes=False))
    assert _run(session, builder, IdentityQuery(Agent)) == ["AGENT://backup-bot"]


def test_query_combines_parameters(session, builder, directory):
    query = (
        IdentityQuery(User)
        .set_parameter(IdentityParameter.ENABLED, True)
        .set_parameter(AttributeParameter(name="role"), "ops")
    )
    assert _run(session, builder, query) == ["USER://admin"]


def test_query_scoped_to_partition(session, builder, directory):
    query = IdentityQuery(User).set_parameter(VariantParameter.FIRST_NAME, "Ada")
    assert _run(session, builder, query) == ["USER://admin", "USER://remote"]
    assert _run(session, builder, query, GLOBEX) == ["USER://remote"]


def test_empty_attribute_values_empty_the_whole_query(session, builder, directory):
    query = (
        IdentityQuery(User)
        .set_parameter(IdentityParameter.ENABLED, True)
        .set_parameter(AttributeParameter(name="role"))
    )
    assert _run(session, builder, query) == []


def test_later_set_parameter_replaces_values(session, builder, directory):
    query = IdentityQuery(User).set_parameter(IdentityParameter.ENABLED, True)
    query.set_parameter(IdentityParameter.ENABLED, False)
    assert len(query.parameters) == 1
    assert _run(session, builder, query) == ["USER://guest"]


def test_unknown_partition_raises_not_found(session, builder, directory):
    with pytest.raises(NotFoundError):
        builder.build(IdentityQuery(User), Realm(id="initech"))


def test_partition_without_resolver_is_configuration_error(configuration, compiler):
    builder = IdentityQueryBuilder(default_registry(configuration), compiler)
    with pytest.raises(ConfigurationError):
        builder.build(IdentityQuery(User), ACME)


def test_query_for_unregistered_type_is_configuration_error(builder):
    class Device(Agent):
        KEY_PREFIX: ClassVar[str] = "DEVICE"

    with pytest.raises(ConfigurationError):
        builder.build(IdentityQuery(Device))
