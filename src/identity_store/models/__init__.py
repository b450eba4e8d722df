"""
identity_store.models — Модели домена и язык запросов.

Реэкспорт основных классов для удобства:
    from identity_store.models import User, IdentityQuery, AttributeParameter
"""

from identity_store.models.enums import IdentityParameter, VariantParameter  # noqa: F401
from identity_store.models.identity import (  # noqa: F401
    Agent,
    Group,
    IdentityType,
    Realm,
    Role,
    User,
    parse_key,
)
from identity_store.models.query import (  # noqa: F401
    AttributeParameter,
    IdentityQuery,
    QueryParameter,
)
