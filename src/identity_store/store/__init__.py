"""
identity_store.store — Маппинг записей и компиляция предикатов.

    from identity_store.store import StoreConfiguration, default_registry, PredicateCompiler
"""

from identity_store.store.configuration import StoreConfiguration  # noqa: F401
from identity_store.store.discriminators import DiscriminatorResolver  # noqa: F401
from identity_store.store.mapper import RecordMapper  # noqa: F401
from identity_store.store.partitions import PartitionResolver, SessionPartitionResolver  # noqa: F401
from identity_store.store.predicates import PredicateCompiler  # noqa: F401
from identity_store.store.query_builder import IdentityQueryBuilder  # noqa: F401
from identity_store.store.registry import MapperRegistry, default_registry  # noqa: F401
